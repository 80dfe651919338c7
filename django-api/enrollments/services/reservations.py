"""Reservation engine - creates requests and reserves seats atomically.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
import secrets
import string

from django.db import DatabaseError
from django.utils import timezone

from enrollments.conf import app_settings
from enrollments.domain import CreatedRequest, EnrollmentPayload, PromotionContext, Section
from enrollments.domain.errors import (
    PersistenceError,
    RequestValidationError,
    SeatConflictError,
    SectionNotFoundError,
    Violation,
)
from enrollments.services.intake import IntakeValidator
from enrollments.services.ledger import SeatLedger
from enrollments.services.promotions import PromotionLinker
from enrollments.services.side_effects import SideEffects
from enrollments.stores.interfaces import EnrollmentStore

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_request_code() -> str:
    """Human-friendly request code, e.g. ``SOL-20260115-7KQ2M``."""
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(5))
    return f"{app_settings.REQUEST_CODE_PREFIX}-{timezone.localdate():%Y%m%d}-{suffix}"


class ReservationService:
    """Service for opening enrollment requests."""

    def __init__(
        self,
        store: EnrollmentStore,
        *,
        validator: IntakeValidator | None = None,
        linker: PromotionLinker | None = None,
        ledger: SeatLedger | None = None,
        side_effects: SideEffects | None = None,
    ) -> None:
        self._store = store
        self._validator = validator or IntakeValidator(store)
        self._linker = linker or PromotionLinker(store)
        self._ledger = ledger or SeatLedger(store)
        self._side_effects = side_effects or SideEffects(store)

    def resolve_section(self, payload: EnrollmentPayload) -> Section:
        """Pick the principal section for a payload.

        An explicit section id wins; otherwise the active section of the course
        type and schedule with seats and the earliest start date (then lowest id).

        Raises:
            SectionNotFoundError: If no section matches.
            SeatConflictError: If the explicit section has no seats left.
            RequestValidationError: If the explicit section is of another course type.
        """
        if payload.section_id is not None:
            section = self._store.get_section(payload.section_id)
            if section is None or not section.is_active:
                raise SectionNotFoundError(payload.section_id)
            if section.course_type_id != payload.course_type_id:
                raise RequestValidationError(
                    [
                        Violation(
                            "section_id",
                            "course_type_mismatch",
                            "Section does not belong to the requested course type",
                        )
                    ]
                )
            if not section.has_seats:
                raise SeatConflictError(section.id)
            return section

        section = self._store.find_best_section(payload.course_type_id, payload.schedule)
        if section is None:
            raise SectionNotFoundError(
                course_type_id=payload.course_type_id, schedule=payload.schedule
            )
        return section

    def create(self, payload: EnrollmentPayload) -> CreatedRequest:
        """Validate a payload, then persist it and reserve its seats as one unit.

        Raises:
            RequestValidationError: If the payload breaks intake rules.
            DuplicateProofReferenceError: If the proof reference was already used.
            SectionNotFoundError: If no section can host the request.
            PromotionNotFoundError, PromotionValidationError, QuotaExceededError:
                If the selected promotion cannot be linked.
            SeatConflictError: If a seat disappeared before it could be reserved.
            PersistenceError: On unexpected storage failures.
        """
        proof = self._validator.validate(payload)
        section = self.resolve_section(payload)

        promotion: PromotionContext | None = None
        if payload.promotion_id is not None:
            promotion = self._linker.validate(
                payload.promotion_id,
                payload.applicant.key,
                principal_section_id=section.id,
            )

        try:
            with self._store.atomic():
                request = self._store.insert_request(
                    payload,
                    code=generate_request_code(),
                    section_id=section.id,
                    proof_reference=proof.value if proof else None,
                )
                touched = [section.id]
                if not self._store.try_reserve_seat(section.id):
                    raise SeatConflictError(section.id)
                if promotion is not None:
                    if not self._store.try_reserve_seat(promotion.promotional_section_id):
                        raise SeatConflictError(promotion.promotional_section_id)
                    touched.append(promotion.promotional_section_id)

                self._ledger.recompute_many(touched)
                self._side_effects.request_created(request, tuple(touched))
        except DatabaseError as exc:
            logger.exception("Enrollment request rolled back on storage failure")
            raise PersistenceError("Could not reserve seats for enrollment request") from exc

        principal = self._store.get_section(section.id)
        promotional = (
            self._store.get_section(promotion.promotional_section_id) if promotion else None
        )
        logger.info(
            "Request %s created on section %s (%s seats left)%s",
            request.code,
            section.id,
            principal.seats_available,
            f" with promotion {promotion.promotion_id}" if promotion else "",
        )
        return CreatedRequest(
            request_id=request.id,
            code=request.code,
            section=principal,
            promotional_section=promotional,
        )
