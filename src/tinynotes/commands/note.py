"""Command group: note lifecycle by logical path (``file.md`` or ``subject/file.md``)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tinynotes.commands._base import NotesGroup
from tinynotes.services.notes import NoteService

if TYPE_CHECKING:
    from tinynotes.commands._context import AppContext

_NOTE_EXAMPLES = """\
  tinynotes -u alice note create --subject Math --title Derivatives
  tinynotes -u alice note list --subject Math
  tinynotes -u alice note get Math/Derivatives.md
  echo "# d/dx" | tinynotes -u alice note save Math/Derivatives.md
  tinynotes -u alice note rename Math/Derivatives.md "Chain Rule"
  tinynotes -u alice note move Math/Chain-Rule.md
  tinynotes -u alice note delete Chain-Rule.md"""


@click.group(cls=NotesGroup, examples=_NOTE_EXAMPLES)
@click.pass_obj
def note(app: AppContext) -> None:
    """Create, read, save, and reorganize notes."""


@note.command(
    "list",
    examples="""\
  tinynotes -u alice note list
  tinynotes -u alice note list --subject Math
  tinynotes -u alice -q note list""",
)
@click.option("--subject", "-s", default=None, help="Only notes in this subject.")
@click.pass_obj
def list_cmd(app: AppContext, subject: str | None) -> None:
    """List notes at the root and in every registered subject."""
    app.emit(NoteService(app.store).list_notes(subject))


@note.command(
    examples="""\
  tinynotes -u alice note get Ideas.md
  tinynotes -u alice -q note get Math/Derivatives.md > derivatives.md"""
)
@click.argument("path")
@click.pass_obj
def get(app: AppContext, path: str) -> None:
    """Print a note's content."""
    app.emit(NoteService(app.store).get_note(path))


@note.command(
    examples="""\
  tinynotes -u alice note save Ideas.md --content "first draft"
  cat draft.md | tinynotes -u alice note save Math/Derivatives.md"""
)
@click.argument("path")
@click.option("--content", default=None, help="New content. Read from stdin when omitted.")
@click.pass_obj
def save(app: AppContext, path: str, content: str | None) -> None:
    """Replace a note's full content."""
    if content is None:
        stream = click.get_text_stream("stdin")
        content = "" if stream.isatty() else stream.read()
    app.emit(NoteService(app.store).save_note(path, content))


@note.command(
    examples="""\
  tinynotes -u alice note create
  tinynotes -u alice note create --title "Reading list"
  tinynotes -u alice note create -s Math -t Derivatives --content "# Derivatives\""""
)
@click.option("--subject", "-s", default=None, help="Subject to create the note in.")
@click.option("--title", "-t", default=None, help="Title; sanitized into the filename.")
@click.option("--content", default=None, help="Initial content.")
@click.pass_obj
def create(
    app: AppContext,
    subject: str | None,
    title: str | None,
    content: str | None,
) -> None:
    """Create a note. Existing names get a -1, -2, ... suffix."""
    app.emit(NoteService(app.store).create_note(subject=subject, title=title, content=content))


@note.command(
    examples="""\
  tinynotes -u alice note delete Math/Derivatives.md"""
)
@click.argument("path")
@click.pass_obj
def delete(app: AppContext, path: str) -> None:
    """Delete a note."""
    app.emit(NoteService(app.store).delete_note(path))


@note.command(
    examples="""\
  tinynotes -u alice note rename Math/Derivatives.md "Chain Rule\""""
)
@click.argument("path")
@click.argument("title")
@click.pass_obj
def rename(app: AppContext, path: str, title: str) -> None:
    """Rename a note within its subject. Fails if the name is taken."""
    app.emit(NoteService(app.store).rename_note(path, title))


@note.command(
    examples="""\
  tinynotes -u alice note move Ideas.md --to Math
  tinynotes -u alice note move Math/Derivatives.md"""
)
@click.argument("path")
@click.option("--to", "target", default=None, help="Target subject (omit for the root).")
@click.pass_obj
def move(app: AppContext, path: str, target: str | None) -> None:
    """Move a note to another subject or to the root."""
    app.emit(NoteService(app.store).move_note(path, target))
