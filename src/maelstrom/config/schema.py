"""Shared setting schema — one partial-settings shape for every layer.

Each source layer (environment, CLI, settings file) produces a
:class:`RawSettings`.  The per-setting lookup names and parsers live in
:data:`SETTING_SPECS` so the layers cannot drift out of sync.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BaseModel, Field, TypeAdapter

SourceName = Literal["environment", "cli", "file"]

DEFAULT_SESSION_LIFETIME = timedelta(seconds=60)

# Largest whole number of seconds a timedelta can hold.
MAX_SESSION_SECONDS = timedelta.max.days * 86_400 + timedelta.max.seconds

SessionSeconds = Annotated[int, Field(ge=0, le=MAX_SESSION_SECONDS)]

_SECONDS_RE = re.compile(r"\+?[0-9]+")

_URL_ADAPTER: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


# ---------------------------------------------------------------------------
# Value parsers (raise ValueError on malformed input)
# ---------------------------------------------------------------------------


def parse_url(raw: str) -> AnyUrl:
    """Parse an absolute URL. pydantic's ValidationError is a ValueError."""
    return _URL_ADAPTER.validate_python(raw.strip())


def parse_path(raw: str) -> Path:
    if not raw.strip():
        msg = "empty path"
        raise ValueError(msg)
    return Path(raw)


def parse_seconds(raw: str) -> int:
    """Parse a non-negative count of seconds.

    ASCII digits with an optional leading ``+``; surrounding whitespace is
    malformed.  Values a timedelta cannot hold are rejected here so they are
    discarded like any other malformed value.
    """
    if not _SECONDS_RE.fullmatch(raw):
        msg = "expected a non-negative integer"
        raise ValueError(msg)
    value = int(raw)
    if value > MAX_SESSION_SECONDS:
        msg = f"at most {MAX_SESSION_SECONDS} seconds"
        raise ValueError(msg)
    return value


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SettingSpec:
    """How one setting is named and parsed in each source."""

    name: str
    env_var: str
    cli_flag: str
    metavar: str
    help: str
    parse: Callable[[str], Any]
    secret: bool = False


SETTING_SPECS: tuple[SettingSpec, ...] = (
    SettingSpec(
        name="server_address",
        env_var="MAELSTROM_SERVER_ADDRESS",
        cli_flag="--server-address",
        metavar="URL",
        help="The full address to run the server on.",
        parse=parse_url,
        secret=True,
    ),
    SettingSpec(
        name="database_address",
        env_var="MAELSTROM_DATABASE_ADDRESS",
        cli_flag="--database-address",
        metavar="URL",
        help="Database URL (postgres, sqlite, sled).",
        parse=parse_url,
        secret=True,
    ),
    SettingSpec(
        name="signing_key_path",
        env_var="MAELSTROM_AUTHKEY_PATH",
        cli_flag="--authkey-path",
        metavar="PATH",
        help="Path to PEM encoded ES256 key for creating auth tokens.",
        parse=parse_path,
    ),
    SettingSpec(
        name="session_lifetime_seconds",
        env_var="MAELSTROM_SESSION_EXPIRATION",
        cli_flag="--session-expiration",
        metavar="SECONDS",
        help="Duration in seconds that an auth token is valid for.",
        parse=parse_seconds,
    ),
    SettingSpec(
        name="settings_file_path",
        env_var="MAELSTROM_CONF_PATH",
        cli_flag="--conf-path",
        metavar="PATH",
        help="Server settings file location.",
        parse=parse_path,
    ),
)

SPECS_BY_NAME: dict[str, SettingSpec] = {spec.name: spec for spec in SETTING_SPECS}

# Settings that may appear in the settings file (the file never names itself).
FILE_SETTINGS: tuple[str, ...] = tuple(
    spec.name for spec in SETTING_SPECS if spec.name != "settings_file_path"
)


class RawSettings(BaseModel):
    """All-optional settings gathered from a single source.

    Attributes:
        source: Which layer produced these values.
        server_address: The full address to run the server on.
        database_address: Database URL.
        signing_key_path: Path to the PEM encoded ES256 signing key.
        session_lifetime_seconds: Auth token lifetime in seconds.
        settings_file_path: Where the settings file lives (env/CLI only).
    """

    model_config = {"frozen": True, "extra": "ignore"}

    source: SourceName
    server_address: AnyUrl | None = None
    database_address: AnyUrl | None = None
    signing_key_path: Path | None = None
    session_lifetime_seconds: SessionSeconds | None = None
    settings_file_path: Path | None = None

    def present(self) -> dict[str, Any]:
        """Return only the settings this layer actually supplies."""
        return self.model_dump(exclude={"source"}, exclude_none=True)

    def to_document(self) -> dict[str, Any]:
        """Serialize the file-backed settings as a plain YAML-ready mapping."""
        return self.model_dump(mode="json", include=set(FILE_SETTINGS), exclude_none=True)
