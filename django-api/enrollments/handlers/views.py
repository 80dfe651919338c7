"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from enrollments.domain import Decision, RequestId, RequestState
from enrollments.domain.errors import (
    DomainError,
    ErrorCategory,
    InvalidIdentifierError,
    Violation,
)
from enrollments.handlers.serializers import (
    CreatedRequestSerializer,
    DecisionSerializer,
    EnrollmentPayloadSerializer,
    EnrollmentRequestSerializer,
    PromotionSelectionInputSerializer,
    PromotionSelectionSerializer,
    RequestListQuerySerializer,
    SectionSerializer,
)
from enrollments.services import DecisionService, RequestQueryService, ReservationService
from enrollments.stores import DjangoEnrollmentStore

logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    ErrorCategory.FIX_AND_RESUBMIT: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.RETRY_OTHER_TARGET: status.HTTP_409_CONFLICT,
    ErrorCategory.TERMINAL: status.HTTP_409_CONFLICT,
    ErrorCategory.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _public_details(error: DomainError) -> dict:
    if error.category is ErrorCategory.INTERNAL:
        return {}
    details = dict(error.details)
    if "violations" in details:
        details["violations"] = [v.as_dict() for v in details["violations"]]
    return details


def error_response(error: DomainError) -> Response:
    if error.category is ErrorCategory.INTERNAL:
        logger.error("Internal error surfaced to client: %s", error)
    body = {
        "error": {
            "code": error.code.value,
            "category": error.category.value,
            "message": error.message,
            "details": _public_details(error),
        }
    }
    return Response(body, status=STATUS_BY_CATEGORY[error.category])


def serializer_error_response(errors: dict) -> Response:
    violations = [
        Violation(field, "format", str(message))
        for field, messages in errors.items()
        for message in messages
    ]
    body = {
        "error": {
            "code": "VALIDATION_FAILED",
            "category": ErrorCategory.FIX_AND_RESUBMIT.value,
            "message": "Malformed input",
            "details": {"violations": [v.as_dict() for v in violations]},
        }
    }
    return Response(body, status=status.HTTP_400_BAD_REQUEST)


def parse_request_id(value: str) -> int:
    try:
        return RequestId.from_string(value).value
    except ValueError as exc:
        raise InvalidIdentifierError("request") from exc


class EnrollmentRequestListView(APIView):
    """Handler for GET/POST /api/requests"""

    def get(self, request: Request) -> Response:
        query = RequestListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return serializer_error_response(query.errors)
        params = query.validated_data
        state = params.get("state")
        page = RequestQueryService(DjangoEnrollmentStore()).list_requests(
            state=RequestState(state) if state else None,
            course_type_id=params.get("course_type_id"),
            page=params["page"],
            limit=params["limit"],
        )
        return Response(
            {
                "results": EnrollmentRequestSerializer(page.items, many=True).data,
                "total": page.total,
                "page": page.page,
                "limit": page.limit,
            },
            headers={"X-Total-Count": str(page.total)},
        )

    def post(self, request: Request) -> Response:
        serializer = EnrollmentPayloadSerializer(data=request.data)
        if not serializer.is_valid():
            return serializer_error_response(serializer.errors)
        try:
            created = ReservationService(DjangoEnrollmentStore()).create(serializer.to_payload())
        except DomainError as error:
            return error_response(error)
        return Response(CreatedRequestSerializer(created).data, status=status.HTTP_201_CREATED)


class EnrollmentRequestCountsView(APIView):
    """Handler for GET /api/requests/counts"""

    def get(self, request: Request) -> Response:
        query = RequestListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return serializer_error_response(query.errors)
        counts = RequestQueryService(DjangoEnrollmentStore()).count_by_state(
            query.validated_data.get("course_type_id")
        )
        return Response({state.value: total for state, total in counts.items()})


class EnrollmentRequestDecisionView(APIView):
    """Handler for POST /api/requests/{request_id}/decision"""

    def post(self, request: Request, request_id: str) -> Response:
        serializer = DecisionSerializer(data=request.data)
        if not serializer.is_valid():
            return serializer_error_response(serializer.errors)
        data = serializer.validated_data
        try:
            updated = DecisionService(DjangoEnrollmentStore()).decide(
                parse_request_id(request_id),
                Decision(data["decision"]),
                data["reviewer_id"],
                data["notes"],
            )
        except DomainError as error:
            return error_response(error)
        return Response(EnrollmentRequestSerializer(updated).data)


class PromotionSelectionView(APIView):
    """Handler for PUT /api/requests/{request_id}/promotion"""

    def put(self, request: Request, request_id: str) -> Response:
        serializer = PromotionSelectionInputSerializer(data=request.data)
        if not serializer.is_valid():
            return serializer_error_response(serializer.errors)
        try:
            selection = DecisionService(DjangoEnrollmentStore()).change_promotion(
                parse_request_id(request_id),
                serializer.validated_data["promotion_id"],
            )
        except DomainError as error:
            return error_response(error)
        return Response(PromotionSelectionSerializer(selection).data)


class PrincipalEnrollmentView(APIView):
    """Handler for POST /api/requests/{request_id}/enrollment"""

    def post(self, request: Request, request_id: str) -> Response:
        try:
            enrollment = DecisionService(DjangoEnrollmentStore()).record_principal_enrollment(
                parse_request_id(request_id)
            )
        except DomainError as error:
            return error_response(error)
        if enrollment is None:
            return Response({"created": False})
        return Response(
            {"created": True, "enrollment_id": enrollment.id, "section_id": enrollment.section_id},
            status=status.HTTP_201_CREATED,
        )


class AvailableSectionListView(APIView):
    """Handler for GET /api/sections/available"""

    def get(self, request: Request) -> Response:
        sections = RequestQueryService(DjangoEnrollmentStore()).available_sections()
        return Response(SectionSerializer(sections, many=True).data)
