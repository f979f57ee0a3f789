"""Shared pytest fixtures and test helpers for tinynotes tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from tinynotes.config.settings import NotesSettings
from tinynotes.infrastructure.store import UserStore
from tinynotes.services.telemetry import disable_tracing

USER_ID = "alice"


def _reset_logging() -> None:
    """Undo configure_logging() so CLI runs don't leak handlers between tests."""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    logging.getLogger("tinynotes").setLevel(logging.NOTSET)
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep developer environment variables out of every test."""
    for var in ("TINYNOTES_CONFIG", "TINYNOTES_DATA_DIR", "TINYNOTES_USER"):
        monkeypatch.delenv(var, raising=False)
    yield
    disable_tracing()
    _reset_logging()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Storage directory holding one folder per user."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def settings(tmp_path: Path, data_dir: Path) -> NotesSettings:
    return NotesSettings.from_cli(start=tmp_path, data_dir=data_dir)


@pytest.fixture
def store(settings: NotesSettings) -> UserStore:
    """Store for :data:`USER_ID` with its root and registry in place."""
    s = UserStore(settings, USER_ID)
    s.init_user()
    return s


@pytest.fixture
def user_root(store: UserStore) -> Path:
    return store.root


@pytest.fixture
def _isolated_cli(
    tmp_path: Path, data_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Run CLI commands from a temp directory as :data:`USER_ID`.

    Use via ``@pytest.mark.usefixtures("_isolated_cli")`` on command test
    classes. Storage lands in ``tmp_path / "data"``.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TINYNOTES_USER", USER_ID)


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def create_subject(store: UserStore, name: str) -> str:
    """Create a subject via SubjectService, asserting success."""
    from tinynotes.services.subjects import SubjectService

    result = SubjectService(store).create_subject(name)
    assert result.ok, result.error
    return str(result.data["name"])


def create_note(store: UserStore, **kwargs: Any) -> str:
    """Create a note via NoteService, asserting success. Returns its path."""
    from tinynotes.services.notes import NoteService

    result = NoteService(store).create_note(**kwargs)
    assert result.ok, result.error
    return str(result.data["path"])
