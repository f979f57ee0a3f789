"""Store error taxonomy.

Infrastructure raises these; the service layer converts them into
:class:`~tinynotes.services.result.ServiceError` payloads keyed by ``code``.

INVARIANT: ``InvalidPathError`` is always raised before any filesystem
mutation for the operation that triggered it.
"""

from __future__ import annotations

from typing import Any, ClassVar


class StoreError(Exception):
    """Base class for every failure the document store reports."""

    code: ClassVar[str] = "STORE_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


class InvalidPathError(StoreError):
    """Confinement violation or malformed name/path input."""

    code = "INVALID_PATH"


class NotFoundError(StoreError):
    """Referenced subject or note does not exist."""

    code = "NOT_FOUND"


class AlreadyExistsError(StoreError):
    """Naming collision on an operation that does not auto-suffix."""

    code = "ALREADY_EXISTS"


class IOFailureError(StoreError):
    """Underlying filesystem error on an otherwise valid operation."""

    code = "IO_FAILURE"
