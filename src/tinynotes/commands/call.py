"""Command: run any store operation through the typed dispatcher."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import click

from tinynotes.commands._base import NotesCommand
from tinynotes.services.dispatch import OPERATIONS, dispatch

if TYPE_CHECKING:
    from tinynotes.commands._context import AppContext


def _parse_params(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="'--params'") from exc
    if not isinstance(payload, dict):
        raise click.BadParameter("must be a JSON object", param_hint="'--params'")
    return payload


@click.command(
    cls=NotesCommand,
    examples="""\
  tinynotes -u alice call list_subjects
  tinynotes -u alice call create_subject --params '{"subjectName": "Math"}'
  tinynotes -u alice call move_note --params '{"oldPath": "Math/a.md", "targetSubject": null}'""",
)
@click.argument("op", type=click.Choice(sorted(OPERATIONS)))
@click.option("--params", "raw_params", default=None, help="Operation parameters as JSON.")
@click.pass_obj
def call(app: AppContext, op: str, raw_params: str | None) -> None:
    """Invoke OP with JSON parameters, validated before anything is touched."""
    app.emit(dispatch(app.store, op, _parse_params(raw_params)))
