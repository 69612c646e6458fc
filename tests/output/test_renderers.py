"""Tests for operation-specific Rich renderers."""

from maelstrom.output.renderers import render_quiet, render_result
from maelstrom.services.result import ServiceError, ServiceResult


def _ok(op: str, meta: dict[str, object] | None = None, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data), meta=meta)


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


def _identity(**overrides: object) -> ServiceResult:
    data: dict[str, object] = {
        "server_address": "https://cli.example.net/",
        "database_address": "postgres://db.env.net/maelstrom",
        "signing_key_path": "/keys/authkey.pem",
        "session_lifetime_seconds": 60,
        "settings_file": "/etc/maelstrom/settings.yaml",
        "settings_file_created": False,
        "sources": {
            "server_address": "cli",
            "database_address": "environment",
            "signing_key_path": "file",
            "session_lifetime_seconds": "default",
        },
    }
    data.update(overrides)
    return _ok("resolve_identity", **data)


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(
            _err("resolve_identity", "MISSING_REQUIRED_OPTION", "Option server_address is required")
        )
        assert "ERROR" in output
        assert "resolve_identity" in output
        assert "Option server_address is required" in output
        assert "MISSING_REQUIRED_OPTION" in output

    def test_verbose_shows_detail(self) -> None:
        result = _err("resolve_identity", "KEY_DECODE_FAILED", "Bad key", path="/keys/a.pem")
        output = render_result(result, verbose=True)
        assert "detail" in output
        assert "/keys/a.pem" in output

    def test_no_error_object(self) -> None:
        assert "Unknown error" in render_result(ServiceResult(ok=False, op="test"))


class TestIdentityRenderer:
    def test_values_and_sources(self) -> None:
        output = render_result(_identity())
        assert "OK" in output
        assert "https://cli.example.net/" in output
        assert "postgres://db.env.net/maelstrom" in output
        assert "60s" in output
        assert "environment" in output
        assert "default" in output
        assert "/etc/maelstrom/settings.yaml" in output

    def test_created_notice(self) -> None:
        output = render_result(_identity(settings_file_created=True))
        assert "placeholder" in output

    def test_verbose_timings_tree(self) -> None:
        result = _identity(
            meta={
                "telemetry": {
                    "name": "ConfigurationService.resolve_identity",
                    "duration_ms": 3.2,
                    "stages": [
                        {"name": "merge", "duration_ms": 0.4},
                        {"name": "settings_file", "duration_ms": 1.1, "annotations": {"created": True}},
                    ],
                }
            }
        )
        output = render_result(result, verbose=True)
        assert "ConfigurationService.resolve_identity" in output
        assert "merge" in output
        assert "created=True" in output

    def test_timings_hidden_without_verbose(self) -> None:
        result = _identity(meta={"telemetry": {"name": "root", "duration_ms": 1.0}})
        assert "root" not in render_result(result)

    def test_session_lifetime_row(self) -> None:
        output = render_result(_identity())
        assert "session_lifetime" in output
        assert "session_lifetime_seconds" not in output


class TestInitRenderer:
    def test_init_fields(self) -> None:
        output = render_result(_ok("init_settings", path="conf/settings.yaml", session_lifetime_seconds=3000))
        assert "init_settings" in output
        assert "conf/settings.yaml" in output
        assert "3000" in output


class TestQuiet:
    def test_quiet_ok(self) -> None:
        assert render_quiet(_identity()) == "OK: resolve_identity"

    def test_quiet_error(self) -> None:
        output = render_quiet(_err("resolve_identity", "X", "broken"))
        assert output == "ERROR: resolve_identity: broken"
