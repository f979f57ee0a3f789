"""Command: provision a user's storage root (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tinynotes.commands._base import NotesCommand
from tinynotes.services.users import UserService

if TYPE_CHECKING:
    from tinynotes.commands._context import AppContext


@click.command(
    "init",
    cls=NotesCommand,
    examples="""\
  tinynotes -u alice init
  tinynotes --data-dir /srv/tinynotes -u 3f2a9c init""",
)
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create the user's storage root and empty subject registry."""
    app.emit(UserService(app.store).init_user())
