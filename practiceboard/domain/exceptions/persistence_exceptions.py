"""
Exception classes related to persistence operations.

This module defines exceptions raised by assessment store adapters. Adapters
classify transport failures into a ``StoreErrorKind`` so the application layer
never has to inspect backend messages.
"""

from enum import Enum

from practiceboard.domain.exceptions.base_exceptions import BaseApplicationError


class StoreErrorKind(str, Enum):
    """Classification of a failed store call."""

    RECURSION = "recursion"  # row-level access policies reference each other cyclically
    TRANSIENT = "transient"
    NOT_FOUND = "not_found"
    CONSTRAINT = "constraint"


class PersistenceError(BaseApplicationError):
    """Base class for persistence-related exceptions."""

    def __init__(
        self,
        message: str = "Persistence operation failed",
        original_exception: Exception | None = None,
    ):
        super().__init__(message)
        self.original_exception = original_exception


class StoreError(PersistenceError):
    """Raised by store adapters; ``kind`` drives classification upstream."""

    def __init__(
        self,
        message: str = "Store operation failed",
        kind: StoreErrorKind = StoreErrorKind.TRANSIENT,
        operation: str | None = None,
        original_exception: Exception | None = None,
    ):
        if operation:
            message = f"{message} during {operation}"
        super().__init__(message, original_exception=original_exception)
        self.kind = kind
        self.operation = operation

    @property
    def is_recursion(self) -> bool:
        return self.kind is StoreErrorKind.RECURSION
