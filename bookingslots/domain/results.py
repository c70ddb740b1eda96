"""
Outcome of validating a booking or roster request.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from .exceptions import Rejection

T = TypeVar("T")


class ValidationStatus(Enum):
    """Validation state machine: PENDING -> ACCEPTED | REJECTED."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Either the resolved record or the first rejection."""
    status: ValidationStatus = ValidationStatus.PENDING
    value: Optional[T] = None
    rejection: Optional[Rejection] = None

    @property
    def accepted(self) -> bool:
        return self.status is ValidationStatus.ACCEPTED

    @classmethod
    def accept(cls, value: T) -> "ValidationResult[T]":
        return cls(status=ValidationStatus.ACCEPTED, value=value)

    @classmethod
    def reject(cls, rejection: Rejection) -> "ValidationResult[T]":
        return cls(status=ValidationStatus.REJECTED, rejection=rejection)

    @classmethod
    def run(cls, check: Callable[[], T]) -> "ValidationResult[T]":
        """Run a validator, turning a raised Rejection into a rejected result."""
        try:
            return cls.accept(check())
        except Rejection as rejection:
            return cls.reject(rejection)

    def unwrap(self) -> T:
        """Return the accepted value or raise the rejection."""
        if self.rejection is not None:
            raise self.rejection
        if self.status is not ValidationStatus.ACCEPTED:
            raise ValueError("Validation has not run yet")
        return self.value
