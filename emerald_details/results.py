"""Typed success/failure result returned by user-facing operations."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class OperationResult(Generic[T]):
    """Outcome of a single user-facing operation.

    ``error`` holds the exception class name (e.g. ``"SlotUnavailableError"``)
    so callers can branch on the failure kind without importing exceptions.
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    message: str = ""

    @classmethod
    def ok(cls, value: Optional[T] = None, message: str = "") -> "OperationResult[T]":
        return cls(success=True, value=value, message=message)

    @classmethod
    def fail(cls, exc: Exception) -> "OperationResult[T]":
        return cls(success=False, error=type(exc).__name__, message=str(exc))

    def __bool__(self) -> bool:
        return self.success
