"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self


@dataclass(frozen=True)
class RequestId:
    """Unique identifier for an EnrollmentRequest."""

    value: int

    def __post_init__(self) -> None:
        if self.value <= 0:
            raise ValueError("RequestId must be positive")

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=int(value))


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def is_multiple_of(self, unit: "Money") -> bool:
        return unit.amount > 0 and self.amount % unit.amount == 0

    def close_to(self, other: "Money", tolerance: Decimal) -> bool:
        return abs(self.amount - other.amount) <= tolerance

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class ProofReference:
    """Payment proof number, normalised so uniqueness checks are case-insensitive."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Proof reference cannot be empty")

    @classmethod
    def normalize(cls, raw: str | None) -> Self | None:
        cleaned = (raw or "").strip().upper()
        return cls(value=cleaned) if cleaned else None

    def __str__(self) -> str:
        return self.value
