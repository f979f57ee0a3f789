"""Root CLI group for tinynotes with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from tinynotes import __version__
from tinynotes.commands import register_commands
from tinynotes.commands._context import AppContext
from tinynotes.config.settings import NotesSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="tinynotes")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-u",
    "--user",
    default=None,
    help="Authenticated user id (default: $TINYNOTES_USER).",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Storage directory holding one folder per user.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    user: str | None,
    data_dir: Path | None,
) -> None:
    """tinynotes — per-user Markdown notes grouped into subjects."""
    ctx.ensure_object(dict)
    settings = NotesSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        user=user,
        data_dir=data_dir,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
