"""Tests for the decision state machine and promotion changes.

Run with: pytest tests/test_decisions.py -v
"""

import pytest

from enrollments import models as orm
from enrollments.domain import Decision, RequestState
from enrollments.domain.errors import (
    ErrorCode,
    InvalidStateTransitionError,
    PersistenceError,
    PromotionValidationError,
    QuotaExceededError,
    RequestNotFoundError,
    SeatConflictError,
)


def seats(section) -> int:
    section.refresh_from_db()
    return section.seats_available


@pytest.fixture
def sections(make_section):
    return make_section(capacity=10, name="Guitar I"), make_section(capacity=5, name="Solfege")


@pytest.mark.django_db
class TestReject:
    """Tests for rejecting requests."""

    def test_scenario_b_reject_restores_seat(self, reservations, decisions, make_section, make_payload):
        """Rejecting R1 returns the seat; a second rejection is terminal."""
        section = make_section(capacity=10)
        created = reservations.create(make_payload())
        assert seats(section) == 9

        rejected = decisions.decide(created.request_id, Decision.REJECTED, "rev-1", "Unreadable")

        assert rejected.state is RequestState.REJECTED
        assert rejected.reviewer_id == "rev-1"
        assert rejected.notes == "Unreadable"
        assert rejected.decided_at is not None
        assert seats(section) == 10
        with pytest.raises(InvalidStateTransitionError):
            decisions.decide(created.request_id, Decision.REJECTED, "rev-1")
        assert seats(section) == 10

    def test_reject_releases_promotional_seat(
        self, reservations, decisions, sections, make_promotion, make_payload
    ):
        """Both holds are released and the quota is untouched."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional, quota_limit=3)
        created = reservations.create(make_payload(promotion_id=promotion.pk))

        decisions.decide(created.request_id, Decision.REJECTED, "rev-1")

        assert (seats(principal), seats(promotional)) == (10, 5)
        promotion.refresh_from_db()
        assert promotion.quota_used == 0

    def test_reject_with_deactivated_promotion(
        self, reservations, decisions, sections, make_promotion, make_payload
    ):
        """A hold whose promotion was deactivated needs manual reconciliation."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional)
        created = reservations.create(make_payload(promotion_id=promotion.pk))
        orm.Promotion.objects.filter(pk=promotion.pk).update(active=False)

        with pytest.raises(PersistenceError):
            decisions.decide(created.request_id, Decision.REJECTED, "rev-1")

        assert orm.EnrollmentRequest.objects.get(pk=created.request_id).state == "pending"
        assert (seats(principal), seats(promotional)) == (9, 4)

    def test_round_trip_restores_exact_value(
        self, reservations, decisions, make_section, make_payload
    ):
        """create then reject leaves seats_available exactly as before."""
        section = make_section(capacity=7, name="Piano")
        reservations.create(make_payload())
        before = seats(section)
        created = reservations.create(make_payload())
        decisions.decide(created.request_id, Decision.REJECTED, "rev-1")
        assert seats(section) == before

    def test_round_trip_after_approval_in_same_section(
        self, reservations, decisions, make_section, make_payload
    ):
        """An approval awaiting enrollment keeps its seat across later recomputes."""
        section = make_section(capacity=10)
        first = reservations.create(make_payload())
        decisions.decide(first.request_id, Decision.APPROVED, "rev-1")
        after_approval = seats(section)

        second = reservations.create(make_payload())
        after_create = seats(section)
        decisions.decide(second.request_id, Decision.REJECTED, "rev-1")

        assert (after_approval, after_create, seats(section)) == (9, 8, 9)

    def test_rejection_does_not_free_approved_seat(
        self, reservations, decisions, make_section, make_payload
    ):
        """A full section stays full until the approved applicant is enrolled."""
        section = make_section(capacity=2)
        first = reservations.create(make_payload())
        second = reservations.create(make_payload())
        decisions.decide(first.request_id, Decision.APPROVED, "rev-1")
        decisions.decide(second.request_id, Decision.REJECTED, "rev-1")
        assert seats(section) == 1

        reservations.create(make_payload())
        assert seats(section) == 0
        decisions.record_principal_enrollment(first.request_id)
        assert seats(section) == 0


@pytest.mark.django_db
class TestApprove:
    """Tests for approving requests."""

    def test_scenario_c_promotion_approval(
        self, reservations, decisions, sections, make_promotion, make_payload
    ):
        """A: 9 -> 8, B: 5 -> 4; approval enrolls in B, uses quota, leaves A at 8."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional, quota_limit=10)
        reservations.create(make_payload())
        assert (seats(principal), seats(promotional)) == (9, 5)

        created = reservations.create(make_payload(promotion_id=promotion.pk))
        assert (seats(principal), seats(promotional)) == (8, 4)
        assert created.promotional_section.seats_available == 4

        approved = decisions.decide(created.request_id, Decision.APPROVED, "rev-1")

        assert approved.state is RequestState.APPROVED
        enrollments = orm.Enrollment.objects.filter(section=promotional)
        assert enrollments.count() == 1
        assert enrollments.get().request_id == created.request_id
        promotion.refresh_from_db()
        assert promotion.quota_used == 1
        assert (seats(principal), seats(promotional)) == (8, 4)

    def test_approve_without_promotion_touches_nothing(
        self, reservations, decisions, make_section, make_payload
    ):
        """Approval without promotion keeps the principal seat consumed."""
        section = make_section(capacity=10)
        created = reservations.create(make_payload())
        decisions.decide(created.request_id, Decision.APPROVED, "rev-1")
        assert seats(section) == 9
        assert not orm.Enrollment.objects.exists()

    def test_approve_with_exhausted_quota_rolls_back(
        self, reservations, decisions, sections, make_promotion, make_payload
    ):
        """Quota used up between selection and approval fails the decision."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional, quota_limit=1)
        created = reservations.create(make_payload(promotion_id=promotion.pk))
        orm.Promotion.objects.filter(pk=promotion.pk).update(quota_used=1)

        with pytest.raises(QuotaExceededError):
            decisions.decide(created.request_id, Decision.APPROVED, "rev-1")

        assert orm.EnrollmentRequest.objects.get(pk=created.request_id).state == "pending"
        assert not orm.Enrollment.objects.exists()
        assert (seats(principal), seats(promotional)) == (9, 4)

    def test_approve_skips_existing_enrollment(
        self, reservations, decisions, sections, make_promotion, make_payload
    ):
        """An applicant already enrolled in B consumes no quota on approval."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional, quota_limit=5)
        payload = make_payload(promotion_id=promotion.pk)
        created = reservations.create(payload)
        orm.Enrollment.objects.create(student_id=payload.applicant.key, section=promotional)

        decisions.decide(created.request_id, Decision.APPROVED, "rev-1")

        assert orm.Enrollment.objects.filter(section=promotional).count() == 1
        promotion.refresh_from_db()
        assert promotion.quota_used == 0
        assert seats(promotional) == 4

    def test_unknown_request(self, decisions):
        """Deciding a missing request raises RequestNotFoundError."""
        with pytest.raises(RequestNotFoundError):
            decisions.decide(999, Decision.APPROVED, "rev-1")

    def test_concurrent_decision_loses_conditional_write(
        self, reservations, decisions, store, make_section, make_payload, monkeypatch
    ):
        """A decision racing with another sees InvalidStateTransitionError."""
        section = make_section(capacity=10)
        created = reservations.create(make_payload())
        stale = store.get_request(created.request_id)
        decisions.decide(created.request_id, Decision.REJECTED, "rev-1")

        monkeypatch.setattr(store, "get_request", lambda request_id, for_update=False: stale)
        with pytest.raises(InvalidStateTransitionError):
            decisions.decide(created.request_id, Decision.REJECTED, "rev-2")

        assert seats(section) == 10
        assert orm.EnrollmentRequest.objects.get(pk=created.request_id).reviewer_id == "rev-1"


@pytest.mark.django_db
class TestObservations:
    """Tests for the observations decision."""

    def test_observations_keep_seats(self, reservations, decisions, make_section, make_payload):
        """Observations record reviewer and notes without touching seats."""
        section = make_section(capacity=10)
        created = reservations.create(make_payload())

        updated = decisions.decide(
            created.request_id, Decision.OBSERVATIONS, "rev-1", "Missing bank stamp"
        )

        assert updated.state is RequestState.OBSERVATIONS
        assert updated.notes == "Missing bank stamp"
        assert updated.decided_at is None
        assert seats(section) == 9

    def test_observations_then_approve(self, reservations, decisions, make_section, make_payload):
        """A request under observations can still be approved."""
        make_section(capacity=10)
        created = reservations.create(make_payload())
        decisions.decide(created.request_id, Decision.OBSERVATIONS, "rev-1", "Check")
        approved = decisions.decide(created.request_id, Decision.APPROVED, "rev-2")
        assert approved.state is RequestState.APPROVED
        assert approved.notes == "Check"


@pytest.mark.django_db
class TestChangePromotion:
    """Tests for swapping the promotional selection of a request."""

    def test_swap_moves_hold(
        self, reservations, decisions, sections, make_section, make_promotion, make_payload
    ):
        """The old promotional seat is released and the new one reserved."""
        principal, old_section = sections
        new_section = make_section(capacity=4, name="Music Theory")
        old = make_promotion(principal, old_section)
        new = make_promotion(principal, new_section)
        created = reservations.create(make_payload(promotion_id=old.pk))

        selection = decisions.change_promotion(created.request_id, new.pk)

        assert selection.changed
        assert selection.promotional_section_id == new_section.pk
        assert (seats(old_section), seats(new_section), seats(principal)) == (5, 3, 9)
        assert orm.EnrollmentRequest.objects.get(pk=created.request_id).promotion_id == new.pk

    def test_first_selection(self, reservations, decisions, sections, make_promotion, make_payload):
        """A request without promotion can select one."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional)
        created = reservations.create(make_payload())
        decisions.change_promotion(created.request_id, promotion.pk)
        assert seats(promotional) == 4

    def test_same_promotion_is_noop(
        self, reservations, decisions, sections, make_promotion, make_payload
    ):
        """Selecting the current promotion again changes nothing."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional)
        created = reservations.create(make_payload(promotion_id=promotion.pk))
        selection = decisions.change_promotion(created.request_id, promotion.pk)
        assert not selection.changed
        assert seats(promotional) == 4

    def test_failed_swap_keeps_old_hold(
        self, reservations, decisions, sections, make_section, make_promotion, make_payload
    ):
        """If the new section is full the old hold stays in place."""
        principal, old_section = sections
        full_section = make_section(capacity=2, seats_available=0, name="Full")
        old = make_promotion(principal, old_section)
        new = make_promotion(principal, full_section)
        created = reservations.create(make_payload(promotion_id=old.pk))

        with pytest.raises(SeatConflictError):
            decisions.change_promotion(created.request_id, new.pk)

        assert seats(old_section) == 4
        assert orm.EnrollmentRequest.objects.get(pk=created.request_id).promotion_id == old.pk

    def test_inapplicable_promotion(
        self, reservations, decisions, sections, make_section, make_promotion, make_payload
    ):
        """Promotions of another principal section are rejected."""
        principal, promotional = sections
        other_principal = make_section(name="Violin I")
        foreign = make_promotion(other_principal, promotional)
        created = reservations.create(make_payload(section_id=principal.pk))
        with pytest.raises(PromotionValidationError) as exc_info:
            decisions.change_promotion(created.request_id, foreign.pk)
        assert exc_info.value.code is ErrorCode.PROMOTION_NOT_APPLICABLE

    def test_decided_request(
        self, reservations, decisions, sections, make_promotion, make_payload
    ):
        """Decided requests cannot change promotion."""
        principal, promotional = sections
        promotion = make_promotion(principal, promotional)
        created = reservations.create(make_payload())
        decisions.decide(created.request_id, Decision.REJECTED, "rev-1")
        with pytest.raises(InvalidStateTransitionError):
            decisions.change_promotion(created.request_id, promotion.pk)


@pytest.mark.django_db
class TestPrincipalEnrollment:
    """Tests for recording the principal-section enrollment."""

    def test_records_enrollment_once(self, reservations, decisions, make_section, make_payload):
        """The first call enrolls the applicant, the second is a no-op."""
        section = make_section(capacity=10)
        payload = make_payload()
        created = reservations.create(payload)
        decisions.decide(created.request_id, Decision.APPROVED, "rev-1")

        enrollment = decisions.record_principal_enrollment(created.request_id)

        assert enrollment.student_id == payload.applicant.key
        assert enrollment.section_id == section.pk
        assert decisions.record_principal_enrollment(created.request_id) is None
        assert seats(section) == 9

    def test_requires_approval(self, reservations, decisions, make_section, make_payload):
        """Pending requests cannot be enrolled."""
        make_section(capacity=10)
        created = reservations.create(make_payload())
        with pytest.raises(InvalidStateTransitionError):
            decisions.record_principal_enrollment(created.request_id)
