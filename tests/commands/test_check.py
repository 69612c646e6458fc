"""Tests for the check command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from maelstrom.cli import cli
from tests.conftest import write_settings


def _settings_with_key(settings_path: Path, key_file: Path) -> Path:
    return write_settings(
        settings_path,
        "server_address: https://file.example.net/\n"
        "database_address: postgres://db.file.net/maelstrom\n"
        f"signing_key_path: {key_file}\n",
    )


class TestCheckCommand:
    def test_success_summary(
        self, cli_runner: CliRunner, settings_path: Path, key_file: Path
    ) -> None:
        _settings_with_key(settings_path, key_file)
        result = cli_runner.invoke(cli, ["--conf-path", str(settings_path), "check"])
        assert result.exit_code == 0, result.output
        assert "resolve_identity" in result.stdout
        assert "https://file.example.net/" in result.stdout
        assert "60s" in result.stdout

    def test_json_output(self, cli_runner: CliRunner, settings_path: Path, key_file: Path) -> None:
        _settings_with_key(settings_path, key_file)
        result = cli_runner.invoke(
            cli,
            [
                "--json",
                "--conf-path",
                str(settings_path),
                "--server-address",
                "https://cli.example.net/",
                "check",
            ],
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["ok"] is True
        assert payload["data"]["server_address"] == "https://cli.example.net/"
        assert payload["data"]["sources"]["server_address"] == "cli"
        assert payload["data"]["sources"]["database_address"] == "file"
        assert "identity" not in payload

    def test_env_beats_cli(
        self,
        cli_runner: CliRunner,
        settings_path: Path,
        key_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        _settings_with_key(settings_path, key_file)
        monkeypatch.setenv("MAELSTROM_SERVER_ADDRESS", "https://env.example.net/")
        result = cli_runner.invoke(
            cli,
            [
                "--json",
                "--conf-path",
                str(settings_path),
                "--server-address",
                "https://cli.example.net/",
                "check",
            ],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["data"]["server_address"] == "https://env.example.net/"

    def test_verbose_json_has_telemetry(
        self, cli_runner: CliRunner, settings_path: Path, key_file: Path
    ) -> None:
        _settings_with_key(settings_path, key_file)
        result = cli_runner.invoke(cli, ["--json", "-v", "--conf-path", str(settings_path), "check"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert "telemetry" in payload["meta"]

    def test_quiet(self, cli_runner: CliRunner, settings_path: Path, key_file: Path) -> None:
        _settings_with_key(settings_path, key_file)
        result = cli_runner.invoke(cli, ["-q", "--conf-path", str(settings_path), "check"])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "OK: resolve_identity"


class TestCheckFailures:
    def test_no_settings_path_exits_usage(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 64
        assert "SETTINGS_PATH_MISSING" in result.stderr
        assert result.stdout == ""

    def test_first_run_writes_defaults_then_fails(
        self, cli_runner: CliRunner, settings_path: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["--conf-path", str(settings_path), "check"])
        assert result.exit_code == 78
        assert "Option server_address is required" in result.stderr
        assert settings_path.is_file()

    def test_corrupt_settings_exits_dataerr(
        self, cli_runner: CliRunner, settings_path: Path
    ) -> None:
        write_settings(settings_path, "server_address: [broken\n")
        result = cli_runner.invoke(cli, ["--conf-path", str(settings_path), "check"])
        assert result.exit_code == 65
        assert "SETTINGS_FILE_CORRUPT" in result.stderr

    def test_missing_key_exits_noinput(
        self, cli_runner: CliRunner, settings_path: Path, tmp_path: Path
    ) -> None:
        _settings_with_key(settings_path, tmp_path / "nope.pem")
        result = cli_runner.invoke(cli, ["--json", "--conf-path", str(settings_path), "check"])
        assert result.exit_code == 66
        payload = json.loads(result.stderr[result.stderr.index("{\n") :])
        assert payload["error"]["code"] == "KEY_FILE_OPEN_FAILED"
