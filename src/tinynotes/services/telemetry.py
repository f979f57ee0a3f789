"""Operation tracing for ``--verbose`` runs.

A traced service call opens a root :class:`Span` named after the method
(``NoteService.move_note``). Store work inside the call can open child
spans with :func:`trace_span`. When the call returns, the root span is
tagged with what the result is about (the note path, the subject, how
many entries came back, or the error code) and the finished tree is
attached to ``ServiceResult.meta["telemetry"]``.

Off by default. A disabled trace costs one ContextVar lookup per call.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from tinynotes.services.result import ServiceResult

log = structlog.get_logger("tinynotes.telemetry")

_tracing: ContextVar[bool] = ContextVar("tinynotes_tracing", default=False)
_active: ContextVar[Span | None] = ContextVar("tinynotes_active_span", default=None)

# Scalar result fields copied onto the root span, in display order.
SUMMARY_KEYS = ("user", "subject", "name", "path", "count")


@dataclass
class Span:
    """One timed step of an operation, with key/value tags and sub-steps."""

    name: str
    annotations: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter, repr=False)
    elapsed: float | None = field(default=None, repr=False)

    @property
    def closed(self) -> bool:
        return self.elapsed is not None

    @property
    def duration_ms(self) -> float:
        return 0.0 if self.elapsed is None else self.elapsed * 1000

    def close(self) -> None:
        if self.elapsed is None:
            self.elapsed = time.perf_counter() - self.started

    def annotate(self, **tags: Any) -> None:
        """Tag the span. ``None`` values are skipped."""
        self.annotations.update({k: v for k, v in tags.items() if v is not None})

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.children:
            out["children"] = [child.to_dict() for child in self.children]
        return out


@contextmanager
def _activate(span: Span) -> Generator[Span]:
    token = _active.set(span)
    try:
        yield span
    finally:
        span.close()
        _active.reset(token)


@contextmanager
def trace_span(name: str, **tags: Any) -> Generator[Span | None]:
    """Time a step of the current traced operation.

    Yields ``None`` when tracing is off or no operation is being traced,
    so callers guard annotations with ``if span:``.
    """
    parent = _active.get() if _tracing.get() else None
    if parent is None:
        yield None
        return
    child = Span(name)
    child.annotate(**tags)
    parent.children.append(child)
    with _activate(child):
        yield child


def summarize(span: Span, result: ServiceResult) -> None:
    """Tag *span* with the subject, note, or error *result* refers to."""
    source = result.error.detail if result.error else result.data
    span.annotate(
        **{k: source[k] for k in SUMMARY_KEYS if isinstance(source.get(k), str | int)}
    )
    if result.error:
        span.annotate(error=result.error.code)
    elif result.warnings:
        span.annotate(warnings=len(result.warnings))


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Trace a service method and attach the span tree to its result.

    A traced call made while another is active nests under it instead of
    starting a new tree. Only the outermost call writes ``meta``.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _tracing.get():
            return func(*args, **kwargs)

        outer = _active.get()
        span = Span(func.__qualname__)
        if outer is not None:
            outer.children.append(span)
        try:
            with _activate(span):
                result = func(*args, **kwargs)
        except Exception as exc:
            log.debug("op.traced", op=span.name, ok=False, raised=type(exc).__name__)
            raise

        if not isinstance(result, ServiceResult):
            return result
        summarize(span, result)
        log.debug(
            "op.traced",
            op=span.name,
            ok=result.ok,
            duration_ms=round(span.duration_ms, 2),
            **span.annotations,
        )
        if outer is not None:
            return result
        return result.with_meta(telemetry=span.to_dict())  # type: ignore[return-value]

    return wrapper


def enable_tracing() -> None:
    """Turn tracing on for the current context (``--verbose``)."""
    _tracing.set(True)


def disable_tracing() -> None:
    _tracing.set(False)