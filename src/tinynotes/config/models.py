"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, tinynotes.toml only contains
overrides. A fresh install needs no config file at all.

Values that end up as filename parts are checked here, so a bad config
file fails at load time instead of writing outside a user's root.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, field_validator

from tinynotes.domain.names import has_md_ext


def _single_segment(value: str, what: str) -> str:
    if not value or value in (".", ".."):
        raise ValueError(f"{what} must be a plain name, got {value!r}")
    if any(ch in value for ch in ("/", "\\", "\x00")):
        raise ValueError(f"{what} must not contain path separators, got {value!r}")
    return value


# --- tinynotes.toml sections ---


class StorageConfig(BaseModel):
    """[storage] section."""

    model_config = {"frozen": True}

    # Relative paths are resolved against the config file's directory.
    data_dir: Path | None = None
    registry_filename: str = "subjects.json"

    @field_validator("registry_filename")
    @classmethod
    def validate_registry_filename(cls, v: str) -> str:
        _single_segment(v, "registry_filename")
        # A .md registry would show up as a note and be writable through the note API.
        if has_md_ext(v):
            raise ValueError(f"registry_filename must not end in .md, got {v!r}")
        return v


class NotesConfig(BaseModel):
    """[notes] section."""

    model_config = {"frozen": True}

    untitled_prefix: str = "note"

    @field_validator("untitled_prefix")
    @classmethod
    def validate_untitled_prefix(cls, v: str) -> str:
        return _single_segment(v, "untitled_prefix")
