from enrollments.handlers.views import (
    AvailableSectionListView,
    EnrollmentRequestCountsView,
    EnrollmentRequestDecisionView,
    EnrollmentRequestListView,
    PrincipalEnrollmentView,
    PromotionSelectionView,
)

__all__ = [
    "AvailableSectionListView",
    "EnrollmentRequestCountsView",
    "EnrollmentRequestDecisionView",
    "EnrollmentRequestListView",
    "PrincipalEnrollmentView",
    "PromotionSelectionView",
]
