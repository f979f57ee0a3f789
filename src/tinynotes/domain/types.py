"""Value types shared by the store and the service layer."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class SubjectMeta(BaseModel):
    """Registry metadata for one subject. ``icon`` is opaque to the store."""

    model_config = {"frozen": True, "extra": "allow"}

    icon: Any | None = None


class NoteEntry(BaseModel):
    """One row of a note listing."""

    model_config = {"frozen": True}

    name: str
    subject: str | None
    path: str
    mtime: str
