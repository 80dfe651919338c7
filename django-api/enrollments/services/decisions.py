"""Decision state machine for enrollment requests.

Every transition runs inside one transaction: the request row is locked,
the state write is conditional on the current state, and each seat or
quota mutation is followed by a ledger recompute of the touched sections.
"""

import logging

from django.db import DatabaseError

from enrollments.domain import (
    Decision,
    Enrollment,
    EnrollmentRequest,
    PromotionSelection,
    RequestState,
)
from enrollments.domain.errors import (
    InvalidStateTransitionError,
    PersistenceError,
    QuotaExceededError,
    RequestNotFoundError,
    SeatConflictError,
)
from enrollments.domain.states import can_transition, sources_for
from enrollments.services.ledger import SeatLedger
from enrollments.services.promotions import PromotionLinker
from enrollments.services.side_effects import SideEffects
from enrollments.stores.interfaces import EnrollmentStore

logger = logging.getLogger(__name__)


class DecisionService:
    """Drives requests through review and keeps their seat holds consistent."""

    def __init__(
        self,
        store: EnrollmentStore,
        *,
        linker: PromotionLinker | None = None,
        ledger: SeatLedger | None = None,
        side_effects: SideEffects | None = None,
    ) -> None:
        self._store = store
        self._linker = linker or PromotionLinker(store)
        self._ledger = ledger or SeatLedger(store)
        self._side_effects = side_effects or SideEffects(store)

    def decide(
        self,
        request_id: int,
        decision: Decision,
        reviewer_id: str | None,
        notes: str | None = None,
    ) -> EnrollmentRequest:
        """Apply a reviewer decision and return the updated request.

        Raises:
            RequestNotFoundError: If the request does not exist.
            InvalidStateTransitionError: If the request already reached a final state.
            QuotaExceededError: If approval finds the promotion quota exhausted.
            PersistenceError: If a promotional hold can no longer be resolved.
        """
        target = decision.target
        try:
            with self._store.atomic():
                current = self._load_for_update(request_id)
                if not can_transition(current.state, target):
                    raise InvalidStateTransitionError(
                        request_id, current.state.value, target.value
                    )

                if target is RequestState.APPROVED:
                    touched = self._approve(current)
                elif target is RequestState.REJECTED:
                    touched = self._release_holds(current)
                else:
                    touched = []

                if not self._store.transition_request(
                    request_id,
                    sources=sources_for(target),
                    target=target,
                    reviewer_id=reviewer_id,
                    notes=notes,
                ):
                    raise InvalidStateTransitionError(
                        request_id, current.state.value, target.value
                    )

                self._ledger.recompute_many(touched)
                updated = self._store.get_request(request_id)
                self._side_effects.request_decided(updated, current, tuple(sorted(set(touched))))
        except DatabaseError as exc:
            logger.exception("Decision on request %s rolled back", request_id)
            raise PersistenceError("Could not store decision", request_id=request_id) from exc

        logger.info(
            "Request %s moved %s -> %s by %s",
            updated.code,
            current.state.value,
            updated.state.value,
            reviewer_id,
        )
        return updated

    def change_promotion(self, request_id: int, promotion_id: int) -> PromotionSelection:
        """Swap the promotional hold of an undecided request in one transaction.

        The old hold is released first so a promotion sharing the same
        section can reuse the freed seat. If the new reservation fails the
        whole transaction rolls back and the old hold stays in place.

        Raises:
            RequestNotFoundError: If the request does not exist.
            InvalidStateTransitionError: If the request is already decided.
            PromotionNotFoundError, PromotionValidationError, QuotaExceededError,
            SeatConflictError: If the new promotion cannot be reserved.
        """
        try:
            with self._store.atomic():
                current = self._load_for_update(request_id)
                if not current.state.holds_seat:
                    raise InvalidStateTransitionError(
                        request_id, current.state.value, "promotion_change"
                    )
                if current.promotion_id == promotion_id:
                    promotion = self._store.get_promotion(promotion_id)
                    return PromotionSelection(
                        request_id=request_id,
                        promotion_id=promotion_id,
                        promotional_section_id=promotion.promotional_section_id,
                        changed=False,
                    )

                touched = []
                if current.promotion_id is not None:
                    touched.append(self._release_promotional_hold(current))

                context = self._linker.validate(
                    promotion_id,
                    current.applicant.key,
                    principal_section_id=current.section_id,
                )
                self._store.set_request_promotion(request_id, promotion_id)
                if not self._store.try_reserve_seat(context.promotional_section_id):
                    raise SeatConflictError(context.promotional_section_id)
                touched.append(context.promotional_section_id)

                self._ledger.recompute_many(touched)
                updated = self._store.get_request(request_id)
                self._side_effects.audit(
                    "update", request_id, current.reviewer_id, current, updated
                )
                self._side_effects.seats_changed(tuple(touched), reason="promotion_changed")
        except DatabaseError as exc:
            logger.exception("Promotion change on request %s rolled back", request_id)
            raise PersistenceError("Could not change promotion", request_id=request_id) from exc

        logger.info(
            "Request %s promotion %s -> %s",
            current.code,
            current.promotion_id,
            promotion_id,
        )
        return PromotionSelection(
            request_id=request_id,
            promotion_id=promotion_id,
            promotional_section_id=context.promotional_section_id,
        )

    def record_principal_enrollment(
        self, request_id: int, student_id: str | None = None
    ) -> Enrollment | None:
        """Record the principal-section enrollment of an approved request.

        Called by the student onboarding collaborator once the learner
        account exists. Returns None when the enrollment was already there.

        Raises:
            RequestNotFoundError: If the request does not exist.
            InvalidStateTransitionError: If the request is not approved.
            PersistenceError: If the enrollment cannot be stored.
        """
        try:
            with self._store.atomic():
                current = self._load_for_update(request_id)
                if current.state is not RequestState.APPROVED:
                    raise InvalidStateTransitionError(
                        request_id, current.state.value, "principal_enrollment"
                    )
                student = student_id or current.applicant.key
                enrollment = None
                if not self._store.has_active_enrollment(student, current.section_id):
                    enrollment = self._store.create_enrollment(
                        student_id=student,
                        section_id=current.section_id,
                        request_id=request_id,
                    )
                self._ledger.recompute(current.section_id)
                self._side_effects.seats_changed(
                    (current.section_id,), reason="principal_enrolled"
                )
        except DatabaseError as exc:
            logger.exception("Principal enrollment for request %s rolled back", request_id)
            raise PersistenceError(
                "Could not record principal enrollment", request_id=request_id
            ) from exc
        return enrollment

    def _load_for_update(self, request_id: int) -> EnrollmentRequest:
        request = self._store.get_request(request_id, for_update=True)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    def _approve(self, request: EnrollmentRequest) -> list[int]:
        """Convert the promotional hold into an enrollment.

        The principal seat was committed at creation and stays untouched.
        """
        if request.promotion_id is None:
            return []
        promotion = self._store.get_promotion(request.promotion_id)
        if promotion is None:
            raise PersistenceError(
                "Selected promotion no longer exists; manual reconciliation required",
                request_id=request.id,
                promotion_id=request.promotion_id,
            )

        section_id = promotion.promotional_section_id
        student = request.applicant.key
        if self._store.has_active_enrollment(student, section_id):
            logger.info(
                "Request %s already has an enrollment in promotional section %s",
                request.code,
                section_id,
            )
        else:
            if not self._store.try_consume_quota(promotion.id):
                raise QuotaExceededError(promotion.id)
            self._store.create_enrollment(
                student_id=student,
                section_id=section_id,
                request_id=request.id,
            )
        return [section_id]

    def _release_holds(self, request: EnrollmentRequest) -> list[int]:
        """Give back the principal seat and, if any, the promotional seat."""
        self._store.release_seat(request.section_id)
        touched = [request.section_id]
        if request.promotion_id is not None:
            touched.append(self._release_promotional_hold(request, require_active=True))
        return touched

    def _release_promotional_hold(
        self, request: EnrollmentRequest, *, require_active: bool = False
    ) -> int:
        promotion = self._store.get_promotion(request.promotion_id)
        if promotion is None or (require_active and not promotion.active):
            raise PersistenceError(
                "Promotional hold can no longer be resolved; manual reconciliation required",
                request_id=request.id,
                promotion_id=request.promotion_id,
            )
        self._store.release_seat(promotion.promotional_section_id)
        return promotion.promotional_section_id
