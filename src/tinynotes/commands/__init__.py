"""Subcommand modules for tinynotes.

Provides register_commands() which uses deferred imports to keep
``tinynotes --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from tinynotes.commands.note import note
    from tinynotes.commands.subject import subject

    cli.add_command(subject)
    cli.add_command(note)

    # --- Standalone commands ---
    from tinynotes.commands.call import call
    from tinynotes.commands.init_cmd import init_cmd

    cli.add_command(init_cmd)
    cli.add_command(call)
