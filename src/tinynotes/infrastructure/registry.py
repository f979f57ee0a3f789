"""Subject registry — the per-user ``subjects.json`` file.

The registry maps subject name to metadata (``{"icon": ...}``). It is
loaded, mutated, and persisted on every structural call; there is no
in-memory cache to go stale between operations.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from tinynotes.domain.errors import IOFailureError
from tinynotes.domain.types import SubjectMeta

logger = logging.getLogger(__name__)

REGISTRY_FILENAME = "subjects.json"


class SubjectRegistry:
    """Load/save access to one user's subject registry file."""

    def __init__(self, root: Path, *, filename: str = REGISTRY_FILENAME) -> None:
        self._root = root
        self._path = root / filename

    @property
    def path(self) -> Path:
        """Location of the registry file."""
        return self._path

    def ensure(self) -> None:
        """Create the user root and an empty registry if either is missing."""
        self._root.mkdir(parents=True, exist_ok=True)
        if not self._path.exists():
            self._write({})
            logger.debug("Created empty subject registry at %s", self._path)

    def load(self) -> dict[str, SubjectMeta]:
        """Read the registry, creating it on first access."""
        self.ensure()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            msg = f"Failed to read subject registry: {exc}"
            raise IOFailureError(msg, path=str(self._path)) from exc
        if not isinstance(raw, dict):
            msg = "Subject registry is not a JSON object"
            raise IOFailureError(msg, path=str(self._path))
        try:
            return {
                str(name): SubjectMeta.model_validate(meta or {}) for name, meta in raw.items()
            }
        except ValidationError as exc:
            msg = f"Malformed subject registry entry: {exc.errors()[0]['msg']}"
            raise IOFailureError(msg, path=str(self._path)) from exc

    def save(self, subjects: dict[str, SubjectMeta]) -> None:
        """Persist *subjects*, replacing the file atomically."""
        self._write({name: meta.model_dump() for name, meta in subjects.items()})

    def _write(self, data: dict[str, object]) -> None:
        text = json.dumps(data, indent=2, ensure_ascii=False)
        fd, tmp = tempfile.mkstemp(dir=self._root, prefix=".subjects-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp, self._path)
        except OSError as exc:
            Path(tmp).unlink(missing_ok=True)
            msg = f"Failed to write subject registry: {exc}"
            raise IOFailureError(msg, path=str(self._path)) from exc
