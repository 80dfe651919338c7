"""Promotion linking: checks whether an applicant may take a promotional seat."""

from datetime import datetime
from typing import Callable

from django.utils import timezone

from enrollments.domain import PromotionContext
from enrollments.domain.errors import (
    ErrorCode,
    PromotionNotFoundError,
    PromotionValidationError,
    QuotaExceededError,
    SeatConflictError,
)
from enrollments.stores.interfaces import EnrollmentStore


class PromotionLinker:
    """Validates a promotion selection without reserving anything."""

    def __init__(
        self,
        store: EnrollmentStore,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._clock = clock

    def validate(
        self,
        promotion_id: int,
        applicant_key: str,
        principal_section_id: int | None = None,
    ) -> PromotionContext:
        """Return the promotion context, or raise for the first failing check.

        Raises:
            PromotionNotFoundError: If the promotion does not exist.
            PromotionValidationError: If inactive, outside its window, not offered
                with the principal section, its section is inactive, or the
                applicant is already enrolled there.
            SeatConflictError: If the promotional section has no seats.
            QuotaExceededError: If the quota limit is reached.
        """
        promotion = self._store.get_promotion(promotion_id)
        if promotion is None:
            raise PromotionNotFoundError(promotion_id)
        if not promotion.active:
            raise PromotionValidationError(
                ErrorCode.PROMOTION_INACTIVE, "Promotion is not active", promotion_id
            )
        if not promotion.is_open_at(self._clock()):
            raise PromotionValidationError(
                ErrorCode.PROMOTION_OUT_OF_WINDOW,
                "Promotion is outside its validity window",
                promotion_id,
            )
        if (
            principal_section_id is not None
            and promotion.principal_section_id != principal_section_id
        ):
            raise PromotionValidationError(
                ErrorCode.PROMOTION_NOT_APPLICABLE,
                "Promotion is not offered with the selected course section",
                promotion_id,
            )

        section = self._store.get_section(promotion.promotional_section_id)
        if section is None or not section.is_active:
            raise PromotionValidationError(
                ErrorCode.PROMOTIONAL_SECTION_INACTIVE,
                "Promotional course section is not available",
                promotion_id,
            )
        if not section.has_seats:
            raise SeatConflictError(section.id)
        if promotion.quota_exhausted:
            raise QuotaExceededError(promotion_id)
        if self._store.has_active_enrollment(applicant_key, section.id):
            raise PromotionValidationError(
                ErrorCode.ALREADY_ENROLLED,
                "Applicant is already enrolled in the promotional course section",
                promotion_id,
            )

        return PromotionContext(
            promotion_id=promotion.id,
            promotional_section_id=section.id,
            quota_limit=promotion.quota_limit,
            quota_used=promotion.quota_used,
        )
