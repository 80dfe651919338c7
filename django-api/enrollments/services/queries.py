"""Read-side queries: request listings, state counters and the available sections view."""

from django.core.cache import cache

from enrollments.conf import app_settings
from enrollments.domain import RequestPage, RequestState, Section
from enrollments.stores.interfaces import EnrollmentStore


class RequestQueryService:
    """Service for listing requests and sections without mutating anything."""

    def __init__(self, store: EnrollmentStore) -> None:
        self._store = store

    def list_requests(
        self,
        *,
        state: RequestState | None = None,
        course_type_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> RequestPage:
        page = max(1, page)
        limit = max(1, min(app_settings.MAX_PAGE_SIZE, limit))
        items, total = self._store.list_requests(
            state=state,
            course_type_id=course_type_id,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return RequestPage(items=tuple(items), total=total, page=page, limit=limit)

    def count_by_state(self, course_type_id: int | None = None) -> dict[RequestState, int]:
        return self._store.count_requests_by_state(course_type_id)

    def available_sections(self) -> list[Section]:
        """Active sections with seats, served from cache until seats change."""
        key = app_settings.AVAILABLE_SECTIONS_CACHE_KEY
        sections = cache.get(key)
        if sections is None:
            sections = self._store.list_available_sections()
            cache.set(key, sections, app_settings.AVAILABLE_SECTIONS_CACHE_TTL)
        return sections
