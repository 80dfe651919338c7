"""Closed set of states and the transitions allowed between them."""

from enum import Enum


class RequestState(str, Enum):
    """Lifecycle state of an enrollment request."""

    PENDING = "pending"
    OBSERVATIONS = "observations"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def holds_seat(self) -> bool:
        """Requests in these states keep their seat reservations."""
        return self in SEAT_HOLDING_STATES

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]


class Decision(str, Enum):
    """Reviewer decisions, each naming its target state."""

    OBSERVATIONS = "observations"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def target(self) -> RequestState:
        return RequestState(self.value)


SEAT_HOLDING_STATES = frozenset({RequestState.PENDING, RequestState.OBSERVATIONS})

TRANSITIONS: dict[RequestState, frozenset[RequestState]] = {
    RequestState.PENDING: frozenset(
        {RequestState.OBSERVATIONS, RequestState.APPROVED, RequestState.REJECTED}
    ),
    RequestState.OBSERVATIONS: frozenset(
        {RequestState.OBSERVATIONS, RequestState.APPROVED, RequestState.REJECTED}
    ),
    RequestState.APPROVED: frozenset(),
    RequestState.REJECTED: frozenset(),
}


def can_transition(current: RequestState, target: RequestState) -> bool:
    return target in TRANSITIONS[current]


def sources_for(target: RequestState) -> frozenset[RequestState]:
    """States from which ``target`` may be reached."""
    return frozenset(state for state, targets in TRANSITIONS.items() if target in targets)


class SectionState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class EnrollmentState(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    TRANSFER = "transfer"
    CASH = "cash"


class PaymentModality(str, Enum):
    """How a course type is priced."""

    MONTHLY = "monthly"
    PER_SESSION = "per_session"
