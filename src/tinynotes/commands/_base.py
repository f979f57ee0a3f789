"""Click classes for tinynotes commands.

Every ``note`` and ``subject`` subcommand, plus ``init`` and ``call``,
carries canned invocations that ``--examples`` prints. They stay out of
``--help`` so the option lists remain short.
"""

from __future__ import annotations

from typing import Any

import click


class _ExamplesMixin:
    """Adds an eager ``--examples`` flag when an ``examples`` text is given."""

    params: list[click.Parameter]

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._print_examples,
                    help="Show example invocations and exit.",
                )
            )

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(self.examples)
        ctx.exit(0)


class NotesCommand(_ExamplesMixin, click.Command):
    """A leaf command such as ``note save`` or ``init``."""


class NotesGroup(_ExamplesMixin, click.Group):
    """The ``note`` and ``subject`` groups.

    ``@group.command(...)`` builds :class:`NotesCommand`, so subcommands
    take ``examples=`` without passing ``cls=``.
    """

    command_class = NotesCommand
