"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

from django.db import models
from django.db.models import F, Q

from enrollments.domain.states import (
    EnrollmentState,
    PaymentMethod,
    PaymentModality,
    RequestState,
    SectionState,
)


def _choices(enum) -> list[tuple[str, str]]:
    return [(member.value, member.name.replace("_", " ").title()) for member in enum]


class CourseType(models.Model):
    """Persistence model for course types and their pricing."""

    name = models.CharField(max_length=150)
    state = models.CharField(
        max_length=10, choices=_choices(SectionState), default=SectionState.ACTIVE.value
    )
    payment_modality = models.CharField(
        max_length=20, choices=_choices(PaymentModality), default=PaymentModality.MONTHLY.value
    )
    session_count = models.PositiveIntegerField(default=0)
    session_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    requires_certificate = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class CourseSection(models.Model):
    """Persistence model for a scheduled offering with a seat inventory."""

    course_type = models.ForeignKey(
        CourseType, on_delete=models.PROTECT, related_name="sections"
    )
    name = models.CharField(max_length=150)
    capacity = models.PositiveIntegerField()
    seats_available = models.PositiveIntegerField()
    schedule = models.CharField(max_length=50)
    start_date = models.DateField()
    state = models.CharField(
        max_length=10, choices=_choices(SectionState), default=SectionState.ACTIVE.value
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["start_date", "id"]
        indexes = [
            models.Index(
                fields=["course_type", "schedule", "state", "start_date"],
                name="section_match_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(seats_available__lte=F("capacity")),
                name="section_seats_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.schedule}) {self.seats_available}/{self.capacity}"


class Promotion(models.Model):
    """Persistence model for a quota-limited promotional section offer."""

    name = models.CharField(max_length=150)
    principal_section = models.ForeignKey(
        CourseSection, on_delete=models.PROTECT, related_name="promotions_offered"
    )
    promotional_section = models.ForeignKey(
        CourseSection, on_delete=models.PROTECT, related_name="promotions_granted"
    )
    quota_limit = models.PositiveIntegerField(null=True, blank=True)
    quota_used = models.PositiveIntegerField(default=0)
    active = models.BooleanField(default=True)
    valid_from = models.DateTimeField(null=True, blank=True)
    valid_to = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(quota_limit__isnull=True) | Q(quota_used__lte=F("quota_limit")),
                name="promotion_quota_within_limit",
            ),
            models.CheckConstraint(
                condition=~Q(principal_section=F("promotional_section")),
                name="promotion_sections_differ",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class EnrollmentRequest(models.Model):
    """Persistence model for an applicant's request, holding seats while undecided."""

    code = models.CharField(max_length=30, unique=True)

    identification = models.CharField(max_length=30)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    existing_student_id = models.PositiveIntegerField(null=True, blank=True)
    emergency_contact = models.CharField(max_length=200, blank=True)

    course_type = models.ForeignKey(
        CourseType, on_delete=models.PROTECT, related_name="requests"
    )
    schedule = models.CharField(max_length=50, blank=True)
    section = models.ForeignKey(
        CourseSection, on_delete=models.PROTECT, related_name="requests"
    )
    promotion = models.ForeignKey(
        Promotion,
        on_delete=models.PROTECT,
        related_name="requests",
        null=True,
        blank=True,
    )

    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=_choices(PaymentMethod))
    proof_reference = models.CharField(max_length=60, unique=True, null=True, blank=True)
    bank = models.CharField(max_length=100, blank=True)
    transfer_date = models.DateField(null=True, blank=True)
    received_by = models.CharField(max_length=100, blank=True)

    payment_proof_ref = models.CharField(max_length=500, blank=True)
    identity_document_ref = models.CharField(max_length=500, blank=True)
    legal_status_document_ref = models.CharField(max_length=500, blank=True)
    certificate_ref = models.CharField(max_length=500, blank=True)

    state = models.CharField(
        max_length=20, choices=_choices(RequestState), default=RequestState.PENDING.value
    )
    reviewer_id = models.CharField(max_length=64, null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    decided_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["section", "state"], name="request_section_state_idx"),
            models.Index(fields=["promotion", "state"], name="request_promotion_state_idx"),
            models.Index(fields=["state", "-created_at"], name="request_state_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.code} ({self.state})"


class Enrollment(models.Model):
    """Persistence model for a realized occupancy of a section."""

    student_id = models.CharField(max_length=30)
    section = models.ForeignKey(
        CourseSection, on_delete=models.PROTECT, related_name="enrollments"
    )
    request = models.ForeignKey(
        EnrollmentRequest,
        on_delete=models.SET_NULL,
        related_name="enrollments",
        null=True,
        blank=True,
    )
    state = models.CharField(
        max_length=20, choices=_choices(EnrollmentState), default=EnrollmentState.ACTIVE.value
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["section", "state"], name="enrollment_section_state_idx"),
            models.Index(fields=["student_id", "state"], name="enrollment_student_state_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.student_id} @ {self.section_id} ({self.state})"
