"""Name coercion for user-supplied subject and note names.

Untrusted strings become filesystem-legal base names. Everything here is
pure: no filesystem access, deterministic for a given input.

INVARIANT: ``sanitize_name`` never fails and never returns an empty string,
a string containing a path separator, or a string starting with a dot.
It is idempotent: ``sanitize_name(sanitize_name(s)) == sanitize_name(s)``.
"""

from __future__ import annotations

import re

MD_EXT = ".md"
DEFAULT_NAME = "untitled"
MAX_NAME_LENGTH = 200

_SEPARATORS = re.compile(r"[/\\]+")
_LEADING_DOTS = re.compile(r"^\.+")
_WHITESPACE = re.compile(r"\s+")
# Hyphen, ASCII word characters, and everything from U+00A0 upward.
_DISALLOWED = re.compile(r"[^-A-Za-z0-9_\u00a0-\U0010ffff]")
_HYPHEN_RUNS = re.compile(r"-+")


def sanitize_name(raw: str | None) -> str:
    """Coerce *raw* into a safe base name.

    Examples:
        >>> sanitize_name("  My Note  ")
        'My-Note'
        >>> sanitize_name("../../etc/passwd")
        '-etc-passwd'
        >>> sanitize_name("")
        'untitled'
    """
    if not raw:
        return DEFAULT_NAME
    text = str(raw).strip()
    text = _SEPARATORS.sub("-", text)
    text = _LEADING_DOTS.sub("", text)
    text = _WHITESPACE.sub("-", text)
    text = _DISALLOWED.sub("", text)
    text = _HYPHEN_RUNS.sub("-", text)
    text = text[:MAX_NAME_LENGTH]
    return text or DEFAULT_NAME


def has_md_ext(name: str) -> bool:
    """Whether *name* ends in ``.md`` (case-insensitive)."""
    return name.lower().endswith(MD_EXT)


def ensure_md_ext(name: str) -> str:
    """Append ``.md`` unless *name* already carries it."""
    if has_md_ext(name):
        return name
    return f"{name}{MD_EXT}"


def strip_md_ext(name: str) -> str:
    """Remove a trailing ``.md`` (any case), if present."""
    if has_md_ext(name):
        return name[: -len(MD_EXT)]
    return name


def note_filename(title: str | None) -> str | None:
    """Filename for a note titled *title*, or None when there is no title."""
    if not title:
        return None
    return ensure_md_ext(sanitize_name(title))


def timestamp_filename(now_ms: int, *, prefix: str = "note") -> str:
    """Synthesize a filename for an untitled note: ``note-<epoch ms>.md``."""
    return f"{prefix}-{now_ms}{MD_EXT}"


def suffixed_filename(filename: str, n: int) -> str:
    """``Derivatives.md`` + 2 -> ``Derivatives-2.md``."""
    return f"{strip_md_ext(filename)}-{n}{MD_EXT}"
