"""NoteService — note lifecycle addressed by logical path.

Logical paths are ``file.md`` or ``subject/file.md``. Create and move
resolve name clashes by suffixing; rename refuses to clobber.
"""

from __future__ import annotations

from tinynotes.domain.errors import StoreError
from tinynotes.services.base import BaseService
from tinynotes.services.contracts import (
    NoteContentData,
    NoteListData,
    NotePathData,
    NoteSavedData,
    dump_validated,
)
from tinynotes.services.result import ServiceResult
from tinynotes.services.telemetry import trace_span, traced


class NoteService(BaseService):
    """Read, write, and reorganize a user's notes."""

    @traced
    def list_notes(self, subject: str | None = None) -> ServiceResult:
        """List one subject's notes, or every reachable note when *subject* is None."""
        op = "list_notes"
        try:
            with trace_span("scan", subject=subject or None) as span:
                entries = self._store.list_notes(subject)
                if span:
                    span.annotate(count=len(entries))
        except StoreError as exc:
            return self._failure(op, exc)
        items = [entry.model_dump() for entry in entries]
        data = {"subject": subject or None, "count": len(items), "items": items}
        return self._success(op, dump_validated(NoteListData, data))

    @traced
    def get_note(self, path: str) -> ServiceResult:
        op = "get_note"
        try:
            content = self._store.get_note(path)
        except StoreError as exc:
            return self._failure(op, exc)
        data = dump_validated(NoteContentData, {"path": path, "content": content})
        return self._success(op, data)

    @traced
    def save_note(self, path: str, content: str) -> ServiceResult:
        """Replace the full content of the note at *path* (created if missing)."""
        op = "save_note"
        try:
            saved_at = self._store.save_note(path, content)
        except StoreError as exc:
            return self._failure(op, exc)
        data = dump_validated(NoteSavedData, {"path": path, "saved_at": saved_at})
        return self._success(op, data)

    @traced
    def create_note(
        self,
        *,
        subject: str | None = None,
        title: str | None = None,
        content: str | None = None,
    ) -> ServiceResult:
        op = "create_note"
        try:
            path = self._store.create_note(subject, title, content)
        except StoreError as exc:
            return self._failure(op, exc)
        return self._success(op, dump_validated(NotePathData, {"path": path}))

    @traced
    def delete_note(self, path: str) -> ServiceResult:
        op = "delete_note"
        try:
            self._store.delete_note(path)
        except StoreError as exc:
            return self._failure(op, exc)
        return self._success(op, dump_validated(NotePathData, {"path": path}))

    @traced
    def rename_note(self, old_path: str, new_title: str) -> ServiceResult:
        op = "rename_note"
        try:
            path = self._store.rename_note(old_path, new_title)
        except StoreError as exc:
            return self._failure(op, exc)
        return self._success(op, dump_validated(NotePathData, {"path": path}))

    @traced
    def move_note(self, old_path: str, target_subject: str | None = None) -> ServiceResult:
        op = "move_note"
        try:
            with trace_span("relocate", source=old_path, target=target_subject or "/"):
                path = self._store.move_note(old_path, target_subject)
        except StoreError as exc:
            return self._failure(op, exc)
        return self._success(op, dump_validated(NotePathData, {"path": path}))
