"""Request intake validation.

Pure checks over an EnrollmentPayload. Every broken rule is collected so
the applicant can fix the whole submission at once. Nothing is written.
"""

from decimal import Decimal

from enrollments.conf import app_settings
from enrollments.domain import (
    CourseType,
    EnrollmentPayload,
    Money,
    PaymentMethod,
    PaymentModality,
    ProofReference,
)
from enrollments.domain.errors import (
    DuplicateProofReferenceError,
    RequestValidationError,
    Violation,
)
from enrollments.stores.interfaces import EnrollmentStore

DUPLICATE_PROOF = "duplicate_proof_reference"


def full_session_price(course_type: CourseType) -> Money:
    """Enrollment fee covers the first session; the rest are charged per session."""
    remaining = max(course_type.session_count - 1, 0)
    return Money(app_settings.SESSION_ENROLLMENT_FEE + remaining * Decimal(course_type.session_price))


class IntakeValidator:
    """Validates enrollment payloads against shape and business rules."""

    def __init__(self, store: EnrollmentStore) -> None:
        self._store = store

    def validate(self, payload: EnrollmentPayload) -> ProofReference | None:
        """Validate a payload and return its normalised proof reference.

        Raises:
            RequestValidationError: Listing every violated rule.
            DuplicateProofReferenceError: If the proof reference is the only problem.
        """
        violations: list[Violation] = []
        violations += self._check_applicant(payload)
        violations += self._check_course(payload)
        violations += self._check_payment_fields(payload)
        violations += self._check_attachments(payload)

        course_type = None
        if payload.course_type_id is not None:
            course_type = self._store.get_course_type(payload.course_type_id)
            if course_type is None:
                violations.append(
                    Violation("course_type_id", "exists", "Course type does not exist")
                )
            elif not course_type.active:
                violations.append(
                    Violation("course_type_id", "active", "Course type is not open for enrollment")
                )

        if course_type is not None:
            violations += self._check_amount(payload, course_type)
            violations += self._check_certificate(payload, course_type)
            violations += self._check_not_enrolled(payload, course_type)

        proof = ProofReference.normalize(payload.payment.proof_reference)
        if proof is not None and self._store.proof_reference_exists(proof.value):
            violations.append(
                Violation(
                    "proof_reference",
                    DUPLICATE_PROOF,
                    "Payment proof reference was already used by another request",
                )
            )

        if violations:
            if [v.rule for v in violations] == [DUPLICATE_PROOF]:
                raise DuplicateProofReferenceError(proof.value)
            raise RequestValidationError(violations)
        return proof

    def _check_applicant(self, payload: EnrollmentPayload) -> list[Violation]:
        applicant = payload.applicant
        found = []
        if not applicant.identification.strip():
            found.append(Violation("identification", "required", "Identification is required"))
        if applicant.existing_student_id is None:
            for name in ("first_name", "last_name", "email"):
                if not getattr(applicant, name).strip():
                    found.append(Violation(name, "required", f"{name} is required"))
        return found

    def _check_course(self, payload: EnrollmentPayload) -> list[Violation]:
        found = []
        if payload.course_type_id is None:
            found.append(Violation("course_type_id", "required", "Course type is required"))
        if payload.section_id is None and not payload.schedule.strip():
            found.append(Violation("schedule", "required", "Preferred schedule is required"))
        return found

    def _check_payment_fields(self, payload: EnrollmentPayload) -> list[Violation]:
        payment = payload.payment
        found = []
        if payment.amount is None:
            found.append(Violation("amount", "required", "Payment amount is required"))
        elif payment.amount <= 0:
            found.append(Violation("amount", "positive", "Payment amount must be positive"))
        if payment.method is None:
            found.append(Violation("payment_method", "required", "Payment method is required"))
            return found

        if not (payment.proof_reference or "").strip():
            found.append(
                Violation("proof_reference", "required", "Proof number is required")
            )
        if payment.method is PaymentMethod.TRANSFER:
            if not payment.bank.strip():
                found.append(Violation("bank", "required", "Bank is required for transfers"))
            if payment.transfer_date is None:
                found.append(
                    Violation("transfer_date", "required", "Transfer date is required")
                )
        elif payment.method is PaymentMethod.CASH:
            if not payment.received_by.strip():
                found.append(
                    Violation("received_by", "required", "Receiver name is required for cash")
                )
        return found

    def _check_attachments(self, payload: EnrollmentPayload) -> list[Violation]:
        attachments = payload.attachments
        found = []
        if payload.payment.method is not None and not attachments.payment_proof:
            found.append(
                Violation("payment_proof", "required", "Payment proof attachment is required")
            )
        if payload.applicant.existing_student_id is None and not attachments.identity_document:
            found.append(
                Violation(
                    "identity_document", "required", "Identity document attachment is required"
                )
            )
        return found

    def _check_certificate(self, payload: EnrollmentPayload, course_type: CourseType) -> list[Violation]:
        if course_type.requires_certificate and not payload.attachments.certificate:
            return [
                Violation(
                    "certificate",
                    "required",
                    f"A prerequisite certificate is required for {course_type.name}",
                )
            ]
        return []

    def _check_amount(self, payload: EnrollmentPayload, course_type: CourseType) -> list[Violation]:
        if payload.payment.amount is None or payload.payment.amount <= 0:
            return []
        amount = Money(payload.payment.amount)

        if course_type.payment_modality is PaymentModality.MONTHLY:
            unit = Money(app_settings.MONTHLY_UNIT_PRICE)
            if amount.amount < unit.amount or not amount.is_multiple_of(unit):
                return [
                    Violation(
                        "amount",
                        "monthly_multiple",
                        f"Monthly courses accept multiples of {unit}",
                    )
                ]
            return []

        fee = Money(app_settings.SESSION_ENROLLMENT_FEE)
        full = full_session_price(course_type)
        tolerance = app_settings.PRICE_TOLERANCE
        if not (amount.close_to(fee, tolerance) or amount.close_to(full, tolerance)):
            return [
                Violation(
                    "amount",
                    "session_price",
                    f"Per-session courses accept {fee} (enrollment) or {full} (full course)",
                )
            ]
        return []

    def _check_not_enrolled(self, payload: EnrollmentPayload, course_type: CourseType) -> list[Violation]:
        applicant = payload.applicant
        if applicant.existing_student_id is None:
            return []
        if self._store.has_active_enrollment_in_course_type(applicant.key, course_type.id):
            return [
                Violation(
                    "existing_student_id",
                    "already_enrolled",
                    f"Student is already enrolled in {course_type.name}",
                )
            ]
        return []
