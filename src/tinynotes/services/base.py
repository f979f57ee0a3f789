"""BaseService — shared foundation for tinynotes services.

Every service receives a :class:`UserStore` at construction time. The
store raises typed :class:`StoreError` subclasses; services turn those
into failed :class:`ServiceResult` values so callers never see raw
exceptions for expected failures.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tinynotes.domain.errors import StoreError
from tinynotes.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from tinynotes.infrastructure.store import UserStore

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class NoteService(BaseService):
            def get_note(self, path: str) -> ServiceResult:
                try:
                    content = self._store.get_note(path)
                except StoreError as exc:
                    return self._failure("get_note", exc)
                return self._success("get_note", {"path": path, "content": content})
    """

    def __init__(self, store: UserStore) -> None:
        self._store = store

    @staticmethod
    def _success(
        op: str,
        data: dict[str, Any] | None = None,
        *,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        return ServiceResult(ok=True, op=op, data=data or {}, warnings=warnings or [])

    @staticmethod
    def _failure(op: str, exc: StoreError) -> ServiceResult:
        """Convert a store exception into a failed result."""
        logger.debug("%s failed: %s (%s)", op, exc.message, exc.code)
        return ServiceResult(ok=False, op=op, error=ServiceError.from_store_error(exc))
