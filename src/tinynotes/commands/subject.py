"""Command group: subject registry management."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tinynotes.commands._base import NotesGroup
from tinynotes.services.subjects import SubjectService

if TYPE_CHECKING:
    from tinynotes.commands._context import AppContext

_SUBJECT_EXAMPLES = """\
  tinynotes -u alice subject list
  tinynotes -u alice subject create Math
  tinynotes -u alice subject rename Math "Linear Algebra"
  tinynotes -u alice subject delete Linear-Algebra --delete-files"""


@click.group(cls=NotesGroup, examples=_SUBJECT_EXAMPLES)
@click.pass_obj
def subject(app: AppContext) -> None:
    """Manage subjects (one level of note grouping)."""


@subject.command(
    "list",
    examples="""\
  tinynotes -u alice subject list
  tinynotes -u alice --json subject list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List registered subjects."""
    app.emit(SubjectService(app.store).list_subjects())


@subject.command(
    examples="""\
  tinynotes -u alice subject create Math
  tinynotes -u alice subject create "Organic Chemistry\""""
)
@click.argument("name")
@click.pass_obj
def create(app: AppContext, name: str) -> None:
    """Create a subject. The name is sanitized before use."""
    app.emit(SubjectService(app.store).create_subject(name))


@subject.command(
    examples="""\
  tinynotes -u alice subject rename Math Calculus"""
)
@click.argument("old_name")
@click.argument("new_name")
@click.pass_obj
def rename(app: AppContext, old_name: str, new_name: str) -> None:
    """Rename a subject and its directory."""
    app.emit(SubjectService(app.store).rename_subject(old_name, new_name))


@subject.command(
    examples="""\
  tinynotes -u alice subject delete Math
  tinynotes -u alice subject delete Math --delete-files"""
)
@click.argument("name")
@click.option(
    "--delete-files",
    is_flag=True,
    help="Also remove the subject directory and every note in it.",
)
@click.pass_obj
def delete(app: AppContext, name: str, delete_files: bool) -> None:
    """Delete a subject. Its notes stay on disk unless --delete-files is given."""
    app.emit(SubjectService(app.store).delete_subject(name, delete_files=delete_files))
