"""Tests for the init command."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from maelstrom.cli import cli
from maelstrom.config.settings_file import default_file_settings, read_settings_file
from tests.conftest import write_settings


class TestInitCommand:
    def test_writes_default_file(self, cli_runner: CliRunner, settings_path: Path) -> None:
        result = cli_runner.invoke(cli, ["--conf-path", str(settings_path), "init"])
        assert result.exit_code == 0, result.output
        assert "init_settings" in result.stdout
        assert read_settings_file(settings_path) == default_file_settings()

    def test_path_from_environment(
        self, cli_runner: CliRunner, settings_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MAELSTROM_CONF_PATH", str(settings_path))
        result = cli_runner.invoke(cli, ["init"])
        assert result.exit_code == 0, result.output
        assert settings_path.is_file()

    def test_refuses_existing(self, cli_runner: CliRunner, settings_path: Path) -> None:
        write_settings(settings_path, "session_lifetime_seconds: 1\n")
        result = cli_runner.invoke(cli, ["--conf-path", str(settings_path), "init"])
        assert result.exit_code == 73
        assert "--force" in result.stderr

    def test_force(self, cli_runner: CliRunner, settings_path: Path) -> None:
        write_settings(settings_path, "session_lifetime_seconds: 1\n")
        result = cli_runner.invoke(cli, ["--conf-path", str(settings_path), "init", "--force"])
        assert result.exit_code == 0, result.output
        assert read_settings_file(settings_path).session_lifetime_seconds == 3000

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["init", "--examples"])
        assert result.exit_code == 0
        assert "--force" in result.output
