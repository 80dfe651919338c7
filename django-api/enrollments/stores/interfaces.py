"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Seat and quota
mutations are conditional writes; a ``False`` return means the condition
did not hold and no row changed.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Callable

from enrollments.domain import (
    CourseType,
    Enrollment,
    EnrollmentPayload,
    EnrollmentRequest,
    Occupancy,
    Promotion,
    RequestState,
    Section,
)


class EnrollmentStore(ABC):
    """Interface for enrollment persistence operations."""

    # Transactions

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Return a context manager wrapping one all-or-nothing unit of work."""
        ...

    @abstractmethod
    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` after the current transaction commits, never on rollback."""
        ...

    # Catalog

    @abstractmethod
    def get_course_type(self, course_type_id: int) -> CourseType | None:
        ...

    @abstractmethod
    def get_section(self, section_id: int) -> Section | None:
        ...

    @abstractmethod
    def find_best_section(self, course_type_id: int, schedule: str) -> Section | None:
        """Return the active section with seats, earliest start date then lowest id."""
        ...

    @abstractmethod
    def list_available_sections(self) -> list[Section]:
        """Return active sections with seats, ordered by course type, schedule, start date."""
        ...

    @abstractmethod
    def list_section_ids(self) -> list[int]:
        ...

    @abstractmethod
    def get_promotion(self, promotion_id: int) -> Promotion | None:
        ...

    # Seat inventory

    @abstractmethod
    def try_reserve_seat(self, section_id: int) -> bool:
        """Decrement seats_available only if it is currently positive."""
        ...

    @abstractmethod
    def release_seat(self, section_id: int) -> None:
        """Increment seats_available by one."""
        ...

    @abstractmethod
    def count_occupancy(self, section_id: int) -> Occupancy:
        """Count holds, active enrollments and approvals still awaiting enrollment."""
        ...

    @abstractmethod
    def write_seats_available(self, section_id: int, seats: int) -> None:
        ...

    @abstractmethod
    def try_consume_quota(self, promotion_id: int) -> bool:
        """Increment quota_used only if the promotion is below its limit."""
        ...

    # Requests

    @abstractmethod
    def proof_reference_exists(self, proof_reference: str) -> bool:
        ...

    @abstractmethod
    def insert_request(
        self,
        payload: EnrollmentPayload,
        *,
        code: str,
        section_id: int,
        proof_reference: str | None,
    ) -> EnrollmentRequest:
        """Insert a pending request.

        Raises:
            DuplicateProofReferenceError: If the proof reference is already stored.
        """
        ...

    @abstractmethod
    def get_request(self, request_id: int, *, for_update: bool = False) -> EnrollmentRequest | None:
        ...

    @abstractmethod
    def transition_request(
        self,
        request_id: int,
        *,
        sources: frozenset[RequestState],
        target: RequestState,
        reviewer_id: str | None,
        notes: str | None,
    ) -> bool:
        """Move a request to ``target`` only if its current state is in ``sources``."""
        ...

    @abstractmethod
    def set_request_promotion(self, request_id: int, promotion_id: int | None) -> None:
        ...

    @abstractmethod
    def list_requests(
        self,
        *,
        state: RequestState | None,
        course_type_id: int | None,
        offset: int,
        limit: int,
    ) -> tuple[list[EnrollmentRequest], int]:
        """Return one page of requests, newest first, and the total count."""
        ...

    @abstractmethod
    def count_requests_by_state(self, course_type_id: int | None = None) -> dict[RequestState, int]:
        ...

    # Enrollments

    @abstractmethod
    def has_active_enrollment(self, student_id: str, section_id: int) -> bool:
        ...

    @abstractmethod
    def has_active_enrollment_in_course_type(self, student_id: str, course_type_id: int) -> bool:
        ...

    @abstractmethod
    def create_enrollment(
        self, *, student_id: str, section_id: int, request_id: int
    ) -> Enrollment:
        ...
