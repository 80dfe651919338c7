"""Fire-and-forget collaborators triggered strictly after commit."""

import logging
from dataclasses import asdict, is_dataclass

from django.dispatch import Signal

from enrollments import signals
from enrollments.domain import EnrollmentRequest
from enrollments.stores.interfaces import EnrollmentStore

logger = logging.getLogger(__name__)


def snapshot(request: EnrollmentRequest | None) -> dict | None:
    """Audit-friendly view of a request row."""
    if request is None or not is_dataclass(request):
        return None
    data = asdict(request)
    data["state"] = request.state.value
    data["payment_method"] = request.payment_method.value
    data["amount"] = str(request.amount)
    return data


class SideEffects:
    """Schedules notifications, audit entries and cache invalidation after commit."""

    def __init__(self, store: EnrollmentStore) -> None:
        self._store = store

    def _after_commit(self, signal: Signal, **kwargs) -> None:
        self._store.on_commit(lambda: self._dispatch(signal, kwargs))

    def _dispatch(self, signal: Signal, kwargs: dict) -> None:
        for receiver, result in signal.send_robust(sender=self.__class__, **kwargs):
            if isinstance(result, Exception):
                logger.error(
                    "Collaborator %r failed; operation already committed",
                    receiver,
                    exc_info=result,
                )

    def request_created(self, request: EnrollmentRequest, section_ids: tuple[int, ...]) -> None:
        self._after_commit(signals.request_created, request=request, section_ids=section_ids)
        self.audit("create", request.id, None, None, request)
        self.seats_changed(section_ids, reason="request_created")

    def request_decided(
        self,
        request: EnrollmentRequest,
        previous: EnrollmentRequest,
        section_ids: tuple[int, ...] = (),
    ) -> None:
        self._after_commit(
            signals.request_decided, request=request, previous_state=previous.state
        )
        self.audit("update", request.id, request.reviewer_id, previous, request)
        if section_ids:
            self.seats_changed(section_ids, reason=f"request_{request.state.value}")

    def audit(
        self,
        operation: str,
        record_id: int,
        actor: str | None,
        before: EnrollmentRequest | None,
        after: EnrollmentRequest | None,
    ) -> None:
        self._after_commit(
            signals.audit_recorded,
            entity="enrollment_request",
            operation=operation,
            record_id=record_id,
            actor=actor,
            before=snapshot(before),
            after=snapshot(after),
        )

    def seats_changed(self, section_ids: tuple[int, ...], reason: str) -> None:
        self._after_commit(signals.seats_changed, section_ids=tuple(section_ids), reason=reason)
