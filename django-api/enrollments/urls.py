from django.urls import path

from enrollments.handlers import (
    AvailableSectionListView,
    EnrollmentRequestCountsView,
    EnrollmentRequestDecisionView,
    EnrollmentRequestListView,
    PrincipalEnrollmentView,
    PromotionSelectionView,
)

urlpatterns = [
    path("requests", EnrollmentRequestListView.as_view(), name="request-list"),
    path("requests/counts", EnrollmentRequestCountsView.as_view(), name="request-counts"),
    path(
        "requests/<str:request_id>/decision",
        EnrollmentRequestDecisionView.as_view(),
        name="request-decision",
    ),
    path(
        "requests/<str:request_id>/promotion",
        PromotionSelectionView.as_view(),
        name="request-promotion",
    ),
    path(
        "requests/<str:request_id>/enrollment",
        PrincipalEnrollmentView.as_view(),
        name="request-enrollment",
    ),
    path("sections/available", AvailableSectionListView.as_view(), name="available-sections"),
]
