"""UserStore — one user's notes and subject registry on disk.

The store owns ``<storage_root>/<user_id>`` and expresses every operation
in terms of logical paths relative to that root. It is the single
dependency injected into every service.

Ordering rules:

- Lexical validation and confinement run before any mutation.
- ``rename_subject`` renames the directory *before* rewriting the
  registry, so a crash in between leaves a renamed directory with a stale
  registry entry rather than a registry entry pointing nowhere.
- Nothing is rolled back. A filesystem failure after a mutation started
  surfaces as :class:`IOFailureError` and may leave partial state.

There is no locking: concurrent saves to one path race (last write wins)
and concurrent structural operations may see ``NotFoundError``.
"""

from __future__ import annotations

import shutil
import time
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from tinynotes.domain.errors import (
    AlreadyExistsError,
    InvalidPathError,
    IOFailureError,
    NotFoundError,
)
from tinynotes.domain.names import ensure_md_ext, note_filename, sanitize_name, timestamp_filename
from tinynotes.domain.types import NoteEntry, SubjectMeta
from tinynotes.infrastructure.filesystem import (
    confine,
    create_unique,
    file_mtime_iso,
    list_markdown,
    logical_path,
    move_unique,
    read_text,
    relink,
    resolve_note_path,
    resolve_subject_dir,
    validate_segment,
    write_text,
)
from tinynotes.infrastructure.registry import SubjectRegistry

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from tinynotes.config.settings import NotesSettings

log = structlog.get_logger(__name__)


@contextmanager
def _io_guard(action: str, **detail: Any) -> Iterator[None]:
    """Re-raise OS and decoding errors from the block as :class:`IOFailureError`."""
    try:
        yield
    except (OSError, UnicodeError) as exc:
        msg = f"Failed to {action}: {getattr(exc, 'strerror', None) or exc}"
        raise IOFailureError(msg, **detail) from exc


class UserStore:
    """Repository for one authenticated user's storage root.

    Args:
        settings: Resolved settings (storage location, registry filename).
        user_id: Trusted identifier from the caller's auth layer. It must
            still be a single path segment; anything else is rejected.
    """

    def __init__(self, settings: NotesSettings, user_id: str) -> None:
        self._settings = settings
        storage_root = settings.storage_root
        validate_segment(user_id, what="user id")
        self._user_id = user_id
        self._root = confine(storage_root, storage_root / user_id)
        self._registry = SubjectRegistry(
            self._root, filename=settings.storage.registry_filename
        )

    @property
    def root(self) -> Path:
        """The user's storage root."""
        return self._root

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def registry(self) -> SubjectRegistry:
        return self._registry

    def init_user(self) -> Path:
        """Create the user root and an empty registry if missing."""
        with _io_guard("initialize user storage", user=self._user_id):
            self._registry.ensure()
        log.debug("user.initialized", root=str(self._root))
        return self._root

    # ------------------------------------------------------------------
    # Subjects
    # ------------------------------------------------------------------

    def list_subjects(self) -> dict[str, SubjectMeta]:
        """Registry contents, unreconciled against the directory tree."""
        with _io_guard("read subjects"):
            return self._registry.load()

    def create_subject(self, name: str) -> str:
        """Register subject *name* (sanitized) and create its directory."""
        safe = sanitize_name(name)
        directory = resolve_subject_dir(self._root, safe)
        with _io_guard("create subject", subject=safe):
            subjects = self._registry.load()
            if safe in subjects:
                msg = f"Subject already exists: {safe}"
                raise AlreadyExistsError(msg, subject=safe)
            subjects[safe] = SubjectMeta()
            self._registry.save(subjects)
            directory.mkdir(parents=True, exist_ok=True)
        log.debug("subject.created", subject=safe)
        return safe

    def rename_subject(self, old_name: str, new_name: str) -> str:
        """Rename a registered subject; returns the sanitized new name."""
        safe_new = sanitize_name(new_name)
        new_dir = resolve_subject_dir(self._root, safe_new)
        with _io_guard("rename subject", subject=old_name):
            subjects = self._registry.load()
            if old_name not in subjects:
                msg = f"Subject not found: {old_name}"
                raise NotFoundError(msg, subject=old_name)
            if safe_new in subjects:
                msg = f"Target subject already exists: {safe_new}"
                raise AlreadyExistsError(msg, subject=safe_new)
            old_dir = resolve_subject_dir(self._root, old_name)

            if old_dir.is_dir():
                if new_dir.exists():
                    msg = f"A directory named {safe_new!r} already exists"
                    raise AlreadyExistsError(msg, subject=safe_new)
                old_dir.rename(new_dir)
            else:
                # Adopt an unregistered directory of the same name, if any.
                new_dir.mkdir(parents=True, exist_ok=True)

            renamed = {
                (safe_new if key == old_name else key): meta for key, meta in subjects.items()
            }
            self._registry.save(renamed)
        log.debug("subject.renamed", old=old_name, new=safe_new)
        return safe_new

    def delete_subject(self, name: str, *, delete_files: bool = False) -> list[str]:
        """Unregister *name*; with *delete_files*, remove its directory too.

        Returns warnings. Failures while removing files are logged and
        reported as warnings; the registry entry stays deleted regardless.
        Without *delete_files* the directory and its notes are orphaned.
        """
        warnings: list[str] = []
        with _io_guard("delete subject", subject=name):
            subjects = self._registry.load()
            if name not in subjects:
                msg = f"Subject not found: {name}"
                raise NotFoundError(msg, subject=name)
            directory = resolve_subject_dir(self._root, name) if delete_files else None
            del subjects[name]
            self._registry.save(subjects)
        log.debug("subject.deleted", subject=name, delete_files=delete_files)

        if directory is not None and directory.exists():
            try:
                shutil.rmtree(directory)
            except OSError:
                log.warning("subject.cascade_failed", subject=name, exc_info=True)
                warnings.append(f"Some files under {name!r} could not be removed")
        return warnings

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    def list_notes(self, subject: str | None = None) -> list[NoteEntry]:
        """List notes in one subject, or at the root plus every registered subject.

        Unregistered directories are invisible to the aggregate listing;
        registered subjects whose directory vanished contribute nothing.
        """
        if subject:
            directory = resolve_subject_dir(self._root, subject)
            with _io_guard("list notes", subject=subject):
                return [self._entry(p, subject) for p in list_markdown(directory)]

        with _io_guard("list notes"):
            subjects = self._registry.load()
            entries = [self._entry(p, None) for p in list_markdown(self._root)]
            for name in subjects:
                try:
                    directory = resolve_subject_dir(self._root, name)
                except InvalidPathError:
                    log.warning("subject.skipped", subject=name, reason="invalid path")
                    continue
                entries.extend(self._entry(p, name) for p in list_markdown(directory))
        return entries

    def get_note(self, path: str) -> str:
        """Raw text of the note at logical *path*."""
        full = resolve_note_path(self._root, path)
        with _io_guard("read note", path=path):
            if not full.is_file():
                msg = f"Note not found: {path}"
                raise NotFoundError(msg, path=path)
            return read_text(full)

    def save_note(self, path: str, content: str) -> str:
        """Replace the note at *path* with *content*; returns the save time."""
        full = resolve_note_path(self._root, path)
        with _io_guard("save note", path=path):
            write_text(full, content)
        log.debug("note.saved", path=path, size=len(content))
        return datetime.now(UTC).isoformat()

    def create_note(
        self,
        subject: str | None = None,
        title: str | None = None,
        content: str | None = None,
    ) -> str:
        """Create a note and return its logical path.

        The filename comes from the sanitized *title*, or from the current
        time when untitled. Collisions get ``-1``, ``-2``, ... suffixes.
        """
        directory = resolve_subject_dir(self._root, subject)
        filename = note_filename(title) or timestamp_filename(
            time.time_ns() // 1_000_000, prefix=self._settings.notes.untitled_prefix
        )
        with _io_guard("create note", subject=subject):
            full = create_unique(directory, filename, content or "")
        rel = logical_path(self._root, full)
        log.debug("note.created", path=rel)
        return rel

    def delete_note(self, path: str) -> None:
        full = resolve_note_path(self._root, path)
        with _io_guard("delete note", path=path):
            if not full.is_file():
                msg = f"Note not found: {path}"
                raise NotFoundError(msg, path=path)
            full.unlink()
        log.debug("note.deleted", path=path)

    def rename_note(self, old_path: str, new_title: str) -> str:
        """Rename a note within its directory. Never auto-suffixes."""
        source = resolve_note_path(self._root, old_path)
        target = confine(self._root, source.parent / ensure_md_ext(sanitize_name(new_title)))
        with _io_guard("rename note", path=old_path):
            if not source.is_file():
                msg = f"Note not found: {old_path}"
                raise NotFoundError(msg, path=old_path)
            try:
                relink(source, target)
            except FileExistsError:
                msg = f"Target filename already exists: {target.name}"
                raise AlreadyExistsError(msg, path=logical_path(self._root, target)) from None
        rel = logical_path(self._root, target)
        log.debug("note.renamed", old=old_path, new=rel)
        return rel

    def move_note(self, old_path: str, target_subject: str | None = None) -> str:
        """Move a note to *target_subject* (None for the root).

        Name clashes in the destination are resolved by suffixing, so a
        move never overwrites. Moving into the current directory is a no-op.
        """
        source = resolve_note_path(self._root, old_path)
        target_dir = resolve_subject_dir(self._root, target_subject)
        with _io_guard("move note", path=old_path):
            if not source.is_file():
                msg = f"Note not found: {old_path}"
                raise NotFoundError(msg, path=old_path)
            if source.parent == target_dir:
                return logical_path(self._root, source)
            target = move_unique(source, target_dir)
        rel = logical_path(self._root, target)
        log.debug("note.moved", old=old_path, new=rel)
        return rel

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _entry(self, path: Path, subject: str | None) -> NoteEntry:
        return NoteEntry(
            name=path.name,
            subject=subject,
            path=logical_path(self._root, path),
            mtime=file_mtime_iso(path),
        )
