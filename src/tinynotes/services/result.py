"""ServiceResult and ServiceError — what every store operation hands back.

INVARIANT: Service methods never raise for expected store failures
(bad path, missing note or subject, name clash, disk error). They return a
failed ServiceResult whose ``error.code`` is the store error code, so the
CLI, the ``call`` dispatcher and the JSON output all share one shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from tinynotes.domain.errors import StoreError


class ServiceError(BaseModel):
    """Why an operation failed.

    ``code`` is one of the store codes (``INVALID_PATH``, ``NOT_FOUND``,
    ``ALREADY_EXISTS``, ``IO_FAILURE``) or a dispatcher code
    (``INVALID_PARAMS``, ``UNKNOWN_OP``). ``detail`` names the offending
    path, subject or value.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_store_error(cls, exc: StoreError) -> ServiceError:
        return cls(code=exc.code, message=exc.message, detail=dict(exc.detail))


class ServiceResult(BaseModel):
    """Outcome of one note or subject operation.

    ``data`` holds the payload described in ``services.contracts`` for
    ``op``. ``warnings`` carries partial failures that did not stop the
    operation, such as files left behind by a subject delete. ``meta`` is
    only set in verbose runs and holds the trace tree.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    def with_meta(self, **entries: Any) -> ServiceResult:
        """Copy with *entries* merged into ``meta`` (the model is frozen)."""
        return self.model_copy(update={"meta": {**(self.meta or {}), **entries}})
