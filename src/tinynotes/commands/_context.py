"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy UserStore construction and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tinynotes.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from tinynotes.config.settings import NotesSettings
    from tinynotes.infrastructure.store import UserStore
    from tinynotes.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``. The store is lazily
    created on first use so ``--help`` and ``--version`` never need a user
    or touch the filesystem.
    """

    def __init__(self, settings: NotesSettings) -> None:
        self.settings = settings
        self._store: UserStore | None = None

        from tinynotes.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from tinynotes.services.telemetry import enable_tracing

            enable_tracing()

    @property
    def store(self) -> UserStore:
        """The current user's store (created lazily on first access)."""
        if self._store is None:
            from tinynotes.config.logging import bind_user
            from tinynotes.domain.errors import StoreError
            from tinynotes.infrastructure.store import UserStore

            user = self.settings.user
            if not user:
                msg = "No user given. Pass --user or set TINYNOTES_USER."
                raise click.UsageError(msg)
            try:
                self._store = UserStore(self.settings, user)
            except StoreError as exc:
                raise click.BadParameter(exc.message, param_hint="'--user'") from exc
            bind_user(user)
        return self._store

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # JSON already carries warnings; the default renderer prints them inline.
            if settings.quiet and not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
