"""
Failure taxonomy shared by components, adapters and the HTTP layer.

Components report business failures as OperationError values on their
outputs. Storage adapters raise StorageError (or UniqueViolation for unique
constraint hits) which the HTTP layer turns into a 500.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ErrorKind = Literal[
    "validation_error",
    "not_found",
    "unauthorized",
    "forbidden",
    "conflict",
    "rate_limited",
    "storage_failure",
]


@dataclass(frozen=True)
class OperationError:
    """A classified, human-readable failure."""

    kind: ErrorKind
    message: str
    field: str | None = None
    retry_after_seconds: int | None = None


def validation_error(message: str, field: str | None = None) -> OperationError:
    return OperationError(kind="validation_error", message=message, field=field)


def not_found(message: str) -> OperationError:
    return OperationError(kind="not_found", message=message)


class StorageError(Exception):
    """Backend unreachable or a statement failed."""


class UniqueViolation(StorageError):
    """A unique constraint rejected a write."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"Duplicate value for {field}")
        self.field = field
