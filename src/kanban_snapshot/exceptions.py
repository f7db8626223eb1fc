"""
Kanban Snapshot Exceptions.

All exceptions raised by this package derive from KanbanSnapshotError so
callers can catch the whole family with a single clause.

Hierarchy:
    KanbanSnapshotError
    ├── KanbanConfigurationError
    ├── KanbanBackendError
    │   └── KanbanNotFoundError
    ├── DocumentError
    ├── ExportError
    └── ImportAbortedError
"""

from __future__ import annotations

from typing import Any


class KanbanSnapshotError(Exception):
    """Base exception for all kanban snapshot errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class KanbanConfigurationError(KanbanSnapshotError):
    """Raised when settings are missing or invalid."""


class KanbanBackendError(KanbanSnapshotError):
    """
    Raised when a backend call fails.

    Attributes:
        operation: Name of the backend operation that failed
        status_code: HTTP status code, if the failure came from a response
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation
        self.status_code = status_code


class KanbanNotFoundError(KanbanBackendError):
    """Raised when the backend reports that a resource does not exist."""


class DocumentError(KanbanSnapshotError):
    """Raised when a snapshot document cannot be read or is structurally unusable."""


class ExportError(KanbanSnapshotError):
    """Raised when the bulk reads an export depends on fail."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message, {"operation": operation} if operation else None)
        self.operation = operation


class ImportAbortedError(KanbanSnapshotError):
    """Raised inside an import run when it cannot safely continue."""
