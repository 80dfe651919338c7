"""Domain error codes for the enrollments module."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    DUPLICATE_PROOF_REFERENCE = "DUPLICATE_PROOF_REFERENCE"
    SECTION_NOT_FOUND = "SECTION_NOT_FOUND"
    PROMOTION_NOT_FOUND = "PROMOTION_NOT_FOUND"
    REQUEST_NOT_FOUND = "REQUEST_NOT_FOUND"
    SEAT_CONFLICT = "SEAT_CONFLICT"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    PROMOTION_INACTIVE = "PROMOTION_INACTIVE"
    PROMOTION_OUT_OF_WINDOW = "PROMOTION_OUT_OF_WINDOW"
    PROMOTION_NOT_APPLICABLE = "PROMOTION_NOT_APPLICABLE"
    PROMOTIONAL_SECTION_INACTIVE = "PROMOTIONAL_SECTION_INACTIVE"
    ALREADY_ENROLLED = "ALREADY_ENROLLED"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


class ErrorCategory(Enum):
    """How a caller is expected to react to an error."""

    FIX_AND_RESUBMIT = "FIX_AND_RESUBMIT"
    RETRY_OTHER_TARGET = "RETRY_OTHER_TARGET"
    TERMINAL = "TERMINAL"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class Violation:
    """A single broken intake rule."""

    field: str
    rule: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "rule": self.rule, "message": self.message}


@dataclass(frozen=True, eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    category = ErrorCategory.INTERNAL

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class RequestValidationError(DomainError):
    """Raised when an enrollment payload breaks one or more intake rules."""

    category = ErrorCategory.FIX_AND_RESUBMIT

    def __init__(self, violations: list[Violation] | tuple[Violation, ...]) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_FAILED,
            message="Enrollment request is invalid",
            details={"violations": tuple(violations)},
        )

    @property
    def violations(self) -> tuple[Violation, ...]:
        return self.details["violations"]


class InvalidIdentifierError(DomainError):
    """Raised when an identifier cannot be parsed."""

    category = ErrorCategory.FIX_AND_RESUBMIT

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_IDENTIFIER,
            message=f"Invalid {kind} ID format",
            details={"kind": kind},
        )


class DuplicateProofReferenceError(DomainError):
    """Raised when a payment proof reference was already used by any request."""

    category = ErrorCategory.FIX_AND_RESUBMIT

    def __init__(self, proof_reference: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_PROOF_REFERENCE,
            message="Payment proof reference was already used",
            details={"proof_reference": proof_reference},
        )


class PromotionValidationError(DomainError):
    """Raised when a promotion cannot be linked to a request."""

    category = ErrorCategory.FIX_AND_RESUBMIT

    def __init__(self, code: ErrorCode, message: str, promotion_id: int) -> None:
        super().__init__(
            code=code,
            message=message,
            details={"promotion_id": promotion_id},
        )


class NotFoundError(DomainError):
    """Base for missing sections, promotions and requests."""

    category = ErrorCategory.NOT_FOUND


class SectionNotFoundError(NotFoundError):
    """Raised when no section matches."""

    def __init__(self, section_id: int | None = None, **criteria: Any) -> None:
        super().__init__(
            code=ErrorCode.SECTION_NOT_FOUND,
            message="Course section not found",
            details={"section_id": section_id, **criteria},
        )


class PromotionNotFoundError(NotFoundError):
    """Raised when a promotion does not exist."""

    def __init__(self, promotion_id: int) -> None:
        super().__init__(
            code=ErrorCode.PROMOTION_NOT_FOUND,
            message="Promotion not found",
            details={"promotion_id": promotion_id},
        )


class RequestNotFoundError(NotFoundError):
    """Raised when an enrollment request does not exist."""

    def __init__(self, request_id: int) -> None:
        super().__init__(
            code=ErrorCode.REQUEST_NOT_FOUND,
            message="Enrollment request not found",
            details={"request_id": request_id},
        )


class SeatConflictError(DomainError):
    """Raised when a section has no seat left to reserve."""

    category = ErrorCategory.RETRY_OTHER_TARGET

    def __init__(self, section_id: int) -> None:
        super().__init__(
            code=ErrorCode.SEAT_CONFLICT,
            message="No seats available in course section",
            details={"section_id": section_id},
        )


class QuotaExceededError(DomainError):
    """Raised when a promotion reached its quota limit."""

    category = ErrorCategory.RETRY_OTHER_TARGET

    def __init__(self, promotion_id: int) -> None:
        super().__init__(
            code=ErrorCode.QUOTA_EXCEEDED,
            message="Promotion quota reached",
            details={"promotion_id": promotion_id},
        )


class InvalidStateTransitionError(DomainError):
    """Raised when a decision targets a request that cannot move there."""

    category = ErrorCategory.TERMINAL

    def __init__(self, request_id: int, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_STATE_TRANSITION,
            message=f"Cannot move request from {current} to {target}",
            details={"request_id": request_id, "current": current, "target": target},
        )


class PersistenceError(DomainError):
    """Raised on unexpected storage failures or states needing manual reconciliation."""

    category = ErrorCategory.INTERNAL

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(
            code=ErrorCode.PERSISTENCE_ERROR,
            message=message,
            details=details,
        )
