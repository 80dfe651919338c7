"""Pytest configuration and shared fixtures."""

import itertools
from datetime import date
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from enrollments import models as orm
from enrollments.domain import Applicant, Attachments, EnrollmentPayload, Payment, PaymentMethod
from enrollments.services import DecisionService, ReservationService, SeatLedger
from enrollments.stores import DjangoEnrollmentStore

_proof_numbers = itertools.count(1)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def store() -> DjangoEnrollmentStore:
    return DjangoEnrollmentStore()


@pytest.fixture
def ledger(store) -> SeatLedger:
    return SeatLedger(store)


@pytest.fixture
def reservations(store) -> ReservationService:
    return ReservationService(store)


@pytest.fixture
def decisions(store) -> DecisionService:
    return DecisionService(store)


@pytest.fixture
def course_type(db) -> orm.CourseType:
    return orm.CourseType.objects.create(name="Classical Guitar", payment_modality="monthly")


@pytest.fixture
def session_course_type(db) -> orm.CourseType:
    return orm.CourseType.objects.create(
        name="Pastry Workshop",
        payment_modality="per_session",
        session_count=4,
        session_price=Decimal("30.00"),
    )


@pytest.fixture
def make_section(db, course_type):
    """Factory for course sections; seats start at capacity unless given."""

    def factory(capacity=10, seats_available=None, **overrides) -> orm.CourseSection:
        fields = {
            "course_type": course_type,
            "name": "Section",
            "capacity": capacity,
            "seats_available": capacity if seats_available is None else seats_available,
            "schedule": "morning",
            "start_date": date(2026, 3, 2),
        }
        fields.update(overrides)
        return orm.CourseSection.objects.create(**fields)

    return factory


@pytest.fixture
def make_promotion(db):
    def factory(principal, promotional, **overrides) -> orm.Promotion:
        fields = {
            "name": "Second course half price",
            "principal_section": principal,
            "promotional_section": promotional,
            "quota_limit": None,
            "quota_used": 0,
            "active": True,
        }
        fields.update(overrides)
        return orm.Promotion.objects.create(**fields)

    return factory


@pytest.fixture
def make_payload(course_type):
    """Factory for a valid monthly, bank-transfer payload for a new applicant."""

    def factory(
        *,
        identification=None,
        applicant=None,
        payment=None,
        attachments=None,
        **overrides,
    ) -> EnrollmentPayload:
        number = next(_proof_numbers)
        fields = {
            "applicant": applicant
            or Applicant(
                identification=identification or f"17{number:08d}",
                first_name="Ana",
                last_name="Paredes",
                email="ana@example.com",
                phone="0999999999",
            ),
            "payment": payment
            or Payment(
                amount=Decimal("90.00"),
                method=PaymentMethod.TRANSFER,
                proof_reference=f"TRX-{number:05d}",
                bank="Banco Pichincha",
                transfer_date=date(2026, 2, 20),
            ),
            "course_type_id": course_type.pk,
            "schedule": "morning",
            "attachments": attachments
            or Attachments(payment_proof="proofs/receipt.pdf", identity_document="ids/front.jpg"),
        }
        fields.update(overrides)
        return EnrollmentPayload(**fields)

    return factory


@pytest.fixture
def derived_seats():
    """Seats derived from raw rows, independent of the ledger."""

    def derive(section: orm.CourseSection) -> int:
        holding = ["pending", "observations"]
        principal = orm.EnrollmentRequest.objects.filter(section=section, state__in=holding).count()
        promotional = orm.EnrollmentRequest.objects.filter(
            promotion__promotional_section=section, state__in=holding
        ).count()
        enrolled = orm.Enrollment.objects.filter(section=section, state="active").count()
        awaiting = sum(
            1
            for request in orm.EnrollmentRequest.objects.filter(section=section, state="approved")
            if not orm.Enrollment.objects.filter(section=section, request=request).exists()
        )
        return max(section.capacity - principal - promotional - enrolled - awaiting, 0)

    return derive
