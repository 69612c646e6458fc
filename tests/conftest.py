"""Shared pytest fixtures and test helpers for maelstrom tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from maelstrom.config.schema import SETTING_SPECS
from maelstrom.services.telemetry import set_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every MAELSTROM_* variable so the host environment never leaks in."""
    for spec in SETTING_SPECS:
        monkeypatch.delenv(spec.env_var, raising=False)


@pytest.fixture(autouse=True)
def _restore_global_state() -> Generator[None, None, None]:
    """Undo logging and telemetry changes made by CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    mael = logging.getLogger("maelstrom")
    mael_level = mael.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    mael.setLevel(mael_level)
    set_telemetry(False)


# ---------------------------------------------------------------------------
# Key material
# ---------------------------------------------------------------------------


def ec_private_pem(
    curve: ec.EllipticCurve | None = None,
    *,
    fmt: serialization.PrivateFormat = serialization.PrivateFormat.PKCS8,
) -> bytes:
    """Generate an unencrypted PEM private key on *curve* (default P-256)."""
    key = ec.generate_private_key(curve or ec.SECP256R1())
    return key.private_bytes(serialization.Encoding.PEM, fmt, serialization.NoEncryption())


@pytest.fixture
def key_file(tmp_path: Path) -> Path:
    """A valid ES256 PEM key on disk."""
    path = tmp_path / "authkey.pem"
    path.write_bytes(ec_private_pem())
    return path


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    """Location for a settings file (not created)."""
    return tmp_path / "conf" / "settings.yaml"


def write_settings(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
