from enrollments.domain.models import (
    Applicant,
    Attachments,
    CourseType,
    CreatedRequest,
    Enrollment,
    EnrollmentPayload,
    EnrollmentRequest,
    Occupancy,
    Payment,
    Promotion,
    PromotionContext,
    PromotionSelection,
    RequestPage,
    Section,
)
from enrollments.domain.states import (
    Decision,
    EnrollmentState,
    PaymentMethod,
    PaymentModality,
    RequestState,
    SectionState,
)
from enrollments.domain.value_objects import (
    Money,
    ProofReference,
    RequestId,
)

__all__ = [
    "Applicant",
    "Attachments",
    "CourseType",
    "CreatedRequest",
    "Enrollment",
    "EnrollmentPayload",
    "EnrollmentRequest",
    "Occupancy",
    "Payment",
    "Promotion",
    "PromotionContext",
    "PromotionSelection",
    "RequestPage",
    "Section",
    "Decision",
    "EnrollmentState",
    "PaymentMethod",
    "PaymentModality",
    "RequestState",
    "SectionState",
    "Money",
    "ProofReference",
    "RequestId",
]
