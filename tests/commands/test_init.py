"""Tests for ``tinynotes init``."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from tinynotes.cli import cli


@pytest.mark.usefixtures("_isolated_cli")
class TestInit:
    def test_creates_root_and_registry(self, cli_runner: CliRunner, data_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "init"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["data"]["user"] == "alice"
        assert (data_dir / "alice" / "subjects.json").read_text() == "{}"

    def test_user_flag_overrides_env(self, cli_runner: CliRunner, data_dir: Path) -> None:
        result = cli_runner.invoke(cli, ["-u", "bob", "init"])
        assert result.exit_code == 0
        assert (data_dir / "bob").is_dir()

    def test_unsafe_user_rejected(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["-u", "../evil", "init"])
        assert result.exit_code == 2
        assert "--user" in result.stderr
        assert not (tmp_path / "evil").exists()

    def test_missing_user(
        self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("TINYNOTES_USER")
        result = cli_runner.invoke(cli, ["init"])
        assert result.exit_code == 2
        assert "No user given" in result.stderr

    def test_data_dir_flag(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere"
        result = cli_runner.invoke(cli, ["--data-dir", str(target), "init"])
        assert result.exit_code == 0
        assert (target / "alice" / "subjects.json").exists()
