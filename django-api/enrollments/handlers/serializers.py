"""Serializers for parsing payloads and transforming domain models to API responses."""

from rest_framework import serializers

from enrollments.domain import (
    Applicant,
    Attachments,
    Decision,
    EnrollmentPayload,
    Payment,
    PaymentMethod,
    RequestState,
)


def _choices(enum) -> list[str]:
    return [member.value for member in enum]


class EnrollmentPayloadSerializer(serializers.Serializer):
    """Input shape for CreateEnrollmentRequest.

    Only types and formats are enforced here; required-field and business
    rules belong to the intake validator so every violation is reported at once.
    """

    identification = serializers.CharField(required=False, allow_blank=True, default="")
    first_name = serializers.CharField(required=False, allow_blank=True, default="")
    last_name = serializers.CharField(required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    existing_student_id = serializers.IntegerField(required=False, allow_null=True, min_value=1, default=None)
    emergency_contact = serializers.CharField(required=False, allow_blank=True, default="")

    course_type_id = serializers.IntegerField(required=False, allow_null=True, min_value=1, default=None)
    schedule = serializers.CharField(required=False, allow_blank=True, default="")
    section_id = serializers.IntegerField(required=False, allow_null=True, min_value=1, default=None)
    promotion_id = serializers.IntegerField(required=False, allow_null=True, min_value=1, default=None)

    amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True, default=None
    )
    payment_method = serializers.ChoiceField(
        choices=_choices(PaymentMethod), required=False, allow_null=True, default=None
    )
    proof_reference = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    bank = serializers.CharField(required=False, allow_blank=True, default="")
    transfer_date = serializers.DateField(required=False, allow_null=True, default=None)
    received_by = serializers.CharField(required=False, allow_blank=True, default="")

    payment_proof = serializers.CharField(required=False, allow_blank=True, default="")
    identity_document = serializers.CharField(required=False, allow_blank=True, default="")
    legal_status_document = serializers.CharField(required=False, allow_blank=True, default="")
    certificate = serializers.CharField(required=False, allow_blank=True, default="")

    def to_payload(self) -> EnrollmentPayload:
        data = self.validated_data
        method = data["payment_method"]
        return EnrollmentPayload(
            applicant=Applicant(
                identification=data["identification"],
                first_name=data["first_name"],
                last_name=data["last_name"],
                email=data["email"],
                phone=data["phone"],
                existing_student_id=data["existing_student_id"],
            ),
            payment=Payment(
                amount=data["amount"],
                method=PaymentMethod(method) if method else None,
                proof_reference=data["proof_reference"],
                bank=data["bank"],
                transfer_date=data["transfer_date"],
                received_by=data["received_by"],
            ),
            course_type_id=data["course_type_id"],
            schedule=data["schedule"],
            section_id=data["section_id"],
            promotion_id=data["promotion_id"],
            emergency_contact=data["emergency_contact"],
            attachments=Attachments(
                payment_proof=data["payment_proof"],
                identity_document=data["identity_document"],
                legal_status_document=data["legal_status_document"],
                certificate=data["certificate"],
            ),
        )


class DecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=_choices(Decision))
    reviewer_id = serializers.CharField(max_length=64)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class PromotionSelectionInputSerializer(serializers.Serializer):
    promotion_id = serializers.IntegerField(min_value=1)


class RequestListQuerySerializer(serializers.Serializer):
    state = serializers.ChoiceField(choices=_choices(RequestState), required=False)
    course_type_id = serializers.IntegerField(required=False, min_value=1)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, default=10)


class SectionSerializer(serializers.Serializer):
    """Serializer for Section domain model."""

    id = serializers.IntegerField()
    course_type_id = serializers.IntegerField()
    name = serializers.CharField()
    schedule = serializers.CharField()
    start_date = serializers.DateField()
    capacity = serializers.IntegerField()
    seats_available = serializers.IntegerField()


class CreatedRequestSerializer(serializers.Serializer):
    request_id = serializers.IntegerField()
    code = serializers.CharField()
    section = SectionSerializer()
    promotional_section = SectionSerializer(allow_null=True)


class EnrollmentRequestSerializer(serializers.Serializer):
    """Serializer for EnrollmentRequest domain model."""

    id = serializers.IntegerField()
    code = serializers.CharField()
    identification = serializers.CharField(source="applicant.identification")
    first_name = serializers.CharField(source="applicant.first_name")
    last_name = serializers.CharField(source="applicant.last_name")
    email = serializers.CharField(source="applicant.email")
    course_type_id = serializers.IntegerField()
    section_id = serializers.IntegerField()
    promotion_id = serializers.IntegerField(allow_null=True)
    state = serializers.CharField(source="state.value")
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    payment_method = serializers.CharField(source="payment_method.value")
    reviewer_id = serializers.CharField(allow_null=True)
    notes = serializers.CharField()
    created_at = serializers.DateTimeField()
    decided_at = serializers.DateTimeField(allow_null=True)


class PromotionSelectionSerializer(serializers.Serializer):
    request_id = serializers.IntegerField()
    promotion_id = serializers.IntegerField()
    promotional_section_id = serializers.IntegerField()
    changed = serializers.BooleanField()
