"""SubjectService — subject registry lifecycle.

Subject names are always sanitized on create and rename. Rename and
delete look the existing subject up by its registry key as given.
"""

from __future__ import annotations

from tinynotes.domain.errors import StoreError
from tinynotes.services.base import BaseService
from tinynotes.services.contracts import (
    SubjectDeletedData,
    SubjectListData,
    SubjectNameData,
    dump_validated,
)
from tinynotes.services.result import ServiceResult
from tinynotes.services.telemetry import trace_span, traced


class SubjectService(BaseService):
    """Create, rename, delete, and list a user's subjects."""

    @traced
    def list_subjects(self) -> ServiceResult:
        op = "list_subjects"
        try:
            subjects = self._store.list_subjects()
        except StoreError as exc:
            return self._failure(op, exc)
        items = [{"name": name, **meta.model_dump()} for name, meta in subjects.items()]
        return self._success(
            op, dump_validated(SubjectListData, {"count": len(items), "items": items})
        )

    @traced
    def create_subject(self, name: str) -> ServiceResult:
        op = "create_subject"
        try:
            created = self._store.create_subject(name)
        except StoreError as exc:
            return self._failure(op, exc)
        return self._success(op, dump_validated(SubjectNameData, {"name": created}))

    @traced
    def rename_subject(self, old_name: str, new_name: str) -> ServiceResult:
        op = "rename_subject"
        try:
            renamed = self._store.rename_subject(old_name, new_name)
        except StoreError as exc:
            return self._failure(op, exc)
        return self._success(op, dump_validated(SubjectNameData, {"name": renamed}))

    @traced
    def delete_subject(self, name: str, *, delete_files: bool = False) -> ServiceResult:
        """Unregister a subject. Orphans its notes unless *delete_files* is set."""
        op = "delete_subject"
        try:
            with trace_span("unregister", cascade=delete_files) as span:
                warnings = self._store.delete_subject(name, delete_files=delete_files)
                if span and warnings:
                    span.annotate(cascade_failed=True)
        except StoreError as exc:
            return self._failure(op, exc)
        data = dump_validated(SubjectDeletedData, {"name": name, "deleted_files": delete_files})
        return self._success(op, data, warnings=warnings)
