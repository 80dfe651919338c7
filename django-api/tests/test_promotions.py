"""Tests for the promotion linker.

Run with: pytest tests/test_promotions.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from enrollments import models as orm
from enrollments.domain.errors import (
    ErrorCode,
    PromotionNotFoundError,
    PromotionValidationError,
    QuotaExceededError,
    SeatConflictError,
)
from enrollments.services import PromotionLinker

NOW = datetime(2026, 2, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def linker(store) -> PromotionLinker:
    return PromotionLinker(store, clock=lambda: NOW)


@pytest.fixture
def sections(make_section):
    return make_section(capacity=10, name="Guitar I"), make_section(capacity=5, name="Solfege")


@pytest.mark.django_db
class TestPromotionLinker:
    """Tests for PromotionLinker.validate, one check at a time."""

    def test_returns_context(self, linker, sections, make_promotion):
        """A valid promotion yields its context without reserving anything."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional, quota_limit=5, quota_used=2)

        context = linker.validate(promotion.pk, "1712345678", principal_section_id=principal.pk)

        assert context.promotion_id == promotion.pk
        assert context.promotional_section_id == promotional.pk
        assert (context.quota_limit, context.quota_used) == (5, 2)
        promotional.refresh_from_db()
        assert promotional.seats_available == 5

    def test_not_found(self, linker):
        """Unknown promotions raise PromotionNotFoundError."""
        with pytest.raises(PromotionNotFoundError):
            linker.validate(999, "1712345678")

    def test_inactive(self, linker, sections, make_promotion):
        """Inactive promotions are rejected."""
        promotion = make_promotion(*sections, active=False)
        with pytest.raises(PromotionValidationError) as exc_info:
            linker.validate(promotion.pk, "1712345678")
        assert exc_info.value.code is ErrorCode.PROMOTION_INACTIVE

    def test_not_yet_open(self, linker, sections, make_promotion):
        """Promotions whose window has not started are rejected."""
        promotion = make_promotion(*sections, valid_from=NOW + timedelta(days=1))
        with pytest.raises(PromotionValidationError) as exc_info:
            linker.validate(promotion.pk, "1712345678")
        assert exc_info.value.code is ErrorCode.PROMOTION_OUT_OF_WINDOW

    def test_expired(self, linker, sections, make_promotion):
        """Promotions whose window ended are rejected."""
        promotion = make_promotion(*sections, valid_to=NOW - timedelta(seconds=1))
        with pytest.raises(PromotionValidationError) as exc_info:
            linker.validate(promotion.pk, "1712345678")
        assert exc_info.value.code is ErrorCode.PROMOTION_OUT_OF_WINDOW

    def test_not_offered_with_principal(self, linker, sections, make_section, make_promotion):
        """A promotion only applies to its own principal section."""
        promotion = make_promotion(*sections)
        other = make_section(name="Guitar I (evening)")
        with pytest.raises(PromotionValidationError) as exc_info:
            linker.validate(promotion.pk, "1712345678", principal_section_id=other.pk)
        assert exc_info.value.code is ErrorCode.PROMOTION_NOT_APPLICABLE

    def test_promotional_section_inactive(self, linker, sections, make_promotion):
        """An inactive promotional section cannot be offered."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional)
        orm.CourseSection.objects.filter(pk=promotional.pk).update(state="inactive")
        with pytest.raises(PromotionValidationError) as exc_info:
            linker.validate(promotion.pk, "1712345678")
        assert exc_info.value.code is ErrorCode.PROMOTIONAL_SECTION_INACTIVE

    def test_promotional_section_full(self, linker, make_section, make_promotion):
        """A promotional section without seats raises SeatConflictError."""
        principal = make_section()
        promotional = make_section(capacity=5, seats_available=0)
        promotion = make_promotion(principal, promotional)
        with pytest.raises(SeatConflictError) as exc_info:
            linker.validate(promotion.pk, "1712345678")
        assert exc_info.value.details == {"section_id": promotional.pk}

    def test_quota_boundary(self, linker, sections, make_promotion):
        """A promotion at quota_limit 5 with quota_used 5 raises QuotaExceededError."""
        promotion = make_promotion(*sections, quota_limit=5, quota_used=5)
        with pytest.raises(QuotaExceededError):
            linker.validate(promotion.pk, "1712345678")
        promotion.refresh_from_db()
        assert promotion.quota_used == 5

    def test_quota_one_below_limit(self, linker, sections, make_promotion):
        """The last unit of quota can still be selected."""
        promotion = make_promotion(*sections, quota_limit=5, quota_used=4)
        assert linker.validate(promotion.pk, "1712345678").quota_used == 4

    def test_applicant_already_enrolled(self, linker, sections, make_promotion):
        """Applicants already in the promotional section are rejected."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional)
        orm.Enrollment.objects.create(student_id="1712345678", section=promotional)
        with pytest.raises(PromotionValidationError) as exc_info:
            linker.validate(promotion.pk, "1712345678")
        assert exc_info.value.code is ErrorCode.ALREADY_ENROLLED

    def test_first_failing_check_wins(self, linker, make_section, make_promotion):
        """An inactive, exhausted promotion reports inactivity first."""
        principal = make_section()
        promotional = make_section(seats_available=0)
        promotion = make_promotion(
            principal, promotional, active=False, quota_limit=1, quota_used=1
        )
        with pytest.raises(PromotionValidationError) as exc_info:
            linker.validate(promotion.pk, "1712345678")
        assert exc_info.value.code is ErrorCode.PROMOTION_INACTIVE
