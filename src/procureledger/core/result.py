"""
Explicit success/failure results for registry operations.

Registry operations never raise for a rejected call. They return a
``Result`` whose ``value`` is either the payload or the error code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class RegistryError(Exception):
    """Raised by ``Result.unwrap`` when a caller asks for the payload of a failure."""

    def __init__(self, code: int, operation: str | None = None):
        self.code = code
        self.operation = operation
        name = code.name if isinstance(code, IntEnum) else str(code)
        message = f"{operation} failed: {name} ({int(code)})" if operation else f"{name} ({int(code)})"
        super().__init__(message)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a registry operation.

    On success ``value`` is the payload (new id, flag, count). On failure
    it is the numeric error code of the rejecting check.
    """

    ok: bool
    value: Any

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        """Build a successful result."""
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, code: int) -> "Result[T]":
        """Build a failed result carrying an error code."""
        return cls(ok=False, value=code)

    @property
    def error(self) -> int | None:
        """Error code, or None for a successful result."""
        return None if self.ok else self.value

    def unwrap(self, operation: str | None = None) -> T:
        """Return the payload or raise ``RegistryError`` for a failure.

        Args:
            operation: Operation name included in the exception message

        Returns:
            The success payload

        Raises:
            RegistryError: If the result is a failure
        """
        if not self.ok:
            raise RegistryError(self.value, operation=operation)
        return self.value
