"""Domain models representing persisted state and operation inputs.

These are pure domain objects with no API input rules.
Django ORM models are in enrollments/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from enrollments.domain.states import (
    EnrollmentState,
    PaymentMethod,
    PaymentModality,
    RequestState,
    SectionState,
)


@dataclass(frozen=True)
class CourseType:
    """Domain representation of a course type and its pricing."""

    id: int
    name: str
    active: bool
    payment_modality: PaymentModality
    session_count: int = 0
    session_price: Decimal = Decimal("0")
    requires_certificate: bool = False


@dataclass(frozen=True)
class Section:
    """Snapshot of a course section's seat inventory."""

    id: int
    course_type_id: int
    name: str
    capacity: int
    seats_available: int
    schedule: str
    start_date: date
    state: SectionState

    @property
    def is_active(self) -> bool:
        return self.state is SectionState.ACTIVE

    @property
    def has_seats(self) -> bool:
        return self.seats_available > 0


@dataclass(frozen=True)
class Promotion:
    """Domain representation of a promotion linking two sections."""

    id: int
    name: str
    principal_section_id: int
    promotional_section_id: int
    quota_limit: int | None
    quota_used: int
    active: bool
    valid_from: datetime | None = None
    valid_to: datetime | None = None

    @property
    def quota_exhausted(self) -> bool:
        return self.quota_limit is not None and self.quota_used >= self.quota_limit

    def is_open_at(self, moment: datetime) -> bool:
        if self.valid_from is not None and moment < self.valid_from:
            return False
        if self.valid_to is not None and moment > self.valid_to:
            return False
        return True


@dataclass(frozen=True)
class PromotionContext:
    """Result of a successful promotion check, consumed by the reservation engine."""

    promotion_id: int
    promotional_section_id: int
    quota_limit: int | None
    quota_used: int


@dataclass(frozen=True)
class Applicant:
    identification: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    existing_student_id: int | None = None

    @property
    def key(self) -> str:
        """Identity used to match the applicant against enrollments."""
        if self.existing_student_id is not None:
            return str(self.existing_student_id)
        return self.identification


@dataclass(frozen=True)
class Payment:
    amount: Decimal | None
    method: PaymentMethod | None
    proof_reference: str | None = None
    bank: str = ""
    transfer_date: date | None = None
    received_by: str = ""


@dataclass(frozen=True)
class Attachments:
    """References returned by the object-storage collaborator before intake."""

    payment_proof: str = ""
    identity_document: str = ""
    legal_status_document: str = ""
    certificate: str = ""


@dataclass(frozen=True)
class EnrollmentPayload:
    """Everything an applicant submits to open an enrollment request."""

    applicant: Applicant
    payment: Payment
    course_type_id: int | None
    schedule: str = ""
    section_id: int | None = None
    promotion_id: int | None = None
    emergency_contact: str = ""
    attachments: Attachments = field(default_factory=Attachments)


@dataclass(frozen=True)
class EnrollmentRequest:
    """Domain representation of a persisted enrollment request."""

    id: int
    code: str
    applicant: Applicant
    course_type_id: int
    section_id: int
    promotion_id: int | None
    state: RequestState
    amount: Decimal
    payment_method: PaymentMethod
    proof_reference: str | None
    reviewer_id: str | None
    notes: str
    created_at: datetime
    updated_at: datetime
    decided_at: datetime | None = None


@dataclass(frozen=True)
class Enrollment:
    id: int
    student_id: str
    section_id: int
    request_id: int | None
    state: EnrollmentState


@dataclass(frozen=True)
class Occupancy:
    """The counts that together consume a section's capacity.

    ``awaiting_enrollment`` counts approved requests whose principal seat
    is still held while the enrollment has not been recorded yet.
    """

    pending_principal: int
    pending_promotional: int
    active_enrollments: int
    awaiting_enrollment: int = 0

    @property
    def total(self) -> int:
        return (
            self.pending_principal
            + self.pending_promotional
            + self.active_enrollments
            + self.awaiting_enrollment
        )


@dataclass(frozen=True)
class CreatedRequest:
    """Outcome of a successful reservation."""

    request_id: int
    code: str
    section: Section
    promotional_section: Section | None = None


@dataclass(frozen=True)
class PromotionSelection:
    request_id: int
    promotion_id: int
    promotional_section_id: int
    changed: bool = True


@dataclass(frozen=True)
class RequestPage:
    items: tuple[EnrollmentRequest, ...]
    total: int
    page: int
    limit: int
