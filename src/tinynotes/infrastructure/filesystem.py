"""Filesystem operations for user storage roots.

INVARIANT: Every path derived from caller input is validated lexically and
then resolved and confined to the user root before it is touched.
Files are truth for notes; the subject registry only names subjects.

Pure naming rules live in :mod:`tinynotes.domain.names` (correct
dependency direction: infrastructure -> domain). This module handles
actual file I/O, path resolution, and note discovery.
"""

from __future__ import annotations

import os
import re
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath

from tinynotes.domain.errors import InvalidPathError
from tinynotes.domain.names import has_md_ext, suffixed_filename

# Drive-letter prefixes such as ``C:`` are absolute on Windows.
_DRIVE = re.compile(r"^[A-Za-z]:")


# ---------------------------------------------------------------------------
# Confinement
# ---------------------------------------------------------------------------


def is_within(root: Path, candidate: Path) -> bool:
    """Whether *candidate* resolves to *root* or to a descendant of it.

    Both sides are resolved (symlinks followed), and the comparison is made
    on path segments, so ``/data/u1xyz`` is not inside ``/data/u1``.
    """
    root_resolved = root.resolve()
    resolved = candidate.resolve()
    return resolved == root_resolved or resolved.is_relative_to(root_resolved)


def confine(root: Path, candidate: Path) -> Path:
    """Return *candidate* unchanged, or raise if it resolves outside *root*."""
    if not is_within(root, candidate):
        msg = f"Path escapes storage root: {candidate}"
        raise InvalidPathError(msg, path=str(candidate))
    return candidate


def validate_segment(segment: str, *, what: str = "name") -> str:
    """Check that *segment* is usable as one path component.

    Raises :class:`InvalidPathError` for empty strings, separators, NUL
    bytes, and the ``.``/``..`` specials.
    """
    if not segment or segment in (".", ".."):
        msg = f"Invalid {what}: {segment!r}"
        raise InvalidPathError(msg, value=segment)
    if "/" in segment or "\\" in segment or "\x00" in segment:
        msg = f"Invalid {what}: {segment!r}"
        raise InvalidPathError(msg, value=segment)
    return segment


def split_logical_path(logical: str) -> tuple[str | None, str]:
    """Split ``file.md`` or ``subject/file.md`` into ``(subject, filename)``.

    Purely lexical; runs before any filesystem call. Backslashes count as
    separators. Absolute paths, ``..`` segments, nesting deeper than one
    subject, and names not ending in ``.md`` are rejected.
    """
    if not logical or not logical.strip():
        raise InvalidPathError("Path is required", path=logical)
    normalized = logical.replace("\\", "/")
    if normalized.startswith("/") or _DRIVE.match(normalized):
        msg = f"Absolute paths are not allowed: {logical!r}"
        raise InvalidPathError(msg, path=logical)

    parts = normalized.split("/")
    if len(parts) > 2:
        msg = f"Notes nest at most one subject deep: {logical!r}"
        raise InvalidPathError(msg, path=logical)
    for part in parts:
        validate_segment(part, what="path segment")

    filename = parts[-1]
    if not has_md_ext(filename):
        msg = f"Note paths must end in .md: {logical!r}"
        raise InvalidPathError(msg, path=logical)

    subject = parts[0] if len(parts) == 2 else None
    return subject, filename


def resolve_subject_dir(root: Path, subject: str | None) -> Path:
    """Directory for *subject* (the root itself when *subject* is empty)."""
    if not subject:
        return confine(root, root)
    validate_segment(subject, what="subject")
    return confine(root, root / subject)


def resolve_note_path(root: Path, logical: str) -> Path:
    """Resolve a logical note path to a confined path under *root*."""
    subject, filename = split_logical_path(logical)
    directory = root / subject if subject else root
    return confine(root, directory / filename)


def logical_path(root: Path, path: Path) -> str:
    """Caller-facing logical path for *path*, always ``/``-separated."""
    rel = path.relative_to(root)
    return PurePosixPath(*rel.parts).as_posix()


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_text(path: Path) -> str:
    """Read a note as UTF-8 text, line endings untouched."""
    with path.open(encoding="utf-8", newline="") as fh:
        return fh.read()


def write_text(path: Path, content: str) -> None:
    """Replace the whole content of *path*.

    Creates parent directories if they don't exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", newline="")


def file_mtime_iso(path: Path) -> str:
    """Last-modified time of *path* as ISO 8601 UTC."""
    return datetime.fromtimestamp(path.stat().st_mtime, UTC).isoformat()


# ---------------------------------------------------------------------------
# Discovery and naming
# ---------------------------------------------------------------------------


def unique_path(directory: Path, filename: str) -> Path:
    """First free path among ``filename``, ``stem-1.md``, ``stem-2.md``, ..."""
    candidate = directory / filename
    n = 1
    while candidate.exists():
        candidate = directory / suffixed_filename(filename, n)
        n += 1
    return candidate


def list_markdown(directory: Path) -> list[Path]:
    """Markdown files directly inside *directory*, sorted by name.

    Returns an empty list when the directory does not exist.
    """
    if not directory.is_dir():
        return []
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and has_md_ext(p.name)),
        key=lambda p: p.name,
    )


def create_unique(directory: Path, filename: str, content: str) -> Path:
    """Write *content* to the first free suffixed name in *directory*.

    The file is opened in exclusive mode, so a name taken between the
    existence probe and the write is skipped rather than overwritten.
    """
    directory.mkdir(parents=True, exist_ok=True)
    while True:
        candidate = unique_path(directory, filename)
        try:
            with candidate.open("x", encoding="utf-8", newline="") as fh:
                fh.write(content)
        except FileExistsError:
            continue
        return candidate


def relink(source: Path, target: Path) -> None:
    """Move *source* to *target*, raising ``FileExistsError`` if it is taken.

    The new name is claimed with a hard link, which fails instead of
    replacing a file that appeared after an existence check. The old name
    is unlinked only once the link is in place.
    """
    os.link(source, target)
    source.unlink()


def move_unique(source: Path, directory: Path) -> Path:
    """Move *source* into *directory* under the first free suffixed name."""
    directory.mkdir(parents=True, exist_ok=True)
    while True:
        candidate = unique_path(directory, source.name)
        try:
            relink(source, candidate)
        except FileExistsError:
            continue
        return candidate
