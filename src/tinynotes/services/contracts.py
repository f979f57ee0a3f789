"""Typed payload contracts for service and adapter boundaries.

These models validate operation payload shapes before they leave the
service layer so key regressions (for example ``items`` vs ``notes``)
fail fast in tests and during development.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class SubjectItem(BaseModel):
    """One subject row."""

    model_config = ConfigDict(extra="allow")

    name: str
    icon: Any | None = None


class SubjectListData(BaseModel):
    """Payload contract for ``SubjectService.list_subjects``."""

    count: int
    items: list[SubjectItem]


class SubjectNameData(BaseModel):
    """Payload contract for subject create/rename."""

    name: str


class SubjectDeletedData(BaseModel):
    """Payload contract for ``SubjectService.delete_subject``."""

    name: str
    deleted_files: bool


class NoteItem(BaseModel):
    """One note listing row."""

    name: str
    subject: str | None
    path: str
    mtime: str


class NoteListData(BaseModel):
    """Payload contract for ``NoteService.list_notes``."""

    subject: str | None
    count: int
    items: list[NoteItem]


class NoteContentData(BaseModel):
    """Payload contract for ``NoteService.get_note``."""

    path: str
    content: str


class NotePathData(BaseModel):
    """Payload contract for note create/rename/move/delete."""

    path: str


class NoteSavedData(BaseModel):
    """Payload contract for ``NoteService.save_note``."""

    path: str
    saved_at: str


class UserInitData(BaseModel):
    """Payload contract for ``UserService.init_user``."""

    user: str
    root: str
