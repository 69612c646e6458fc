"""ConfigurationService — assemble the ServerIdentity the server boots with.

Stages run strictly in order: environment and CLI layers, settings file
(located by those two), merge, then signing key.  Any ConfigurationError
stops the chain and comes back as a failed ServiceResult; nothing here
exits the process.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from typing import Any

import structlog
from pydantic import AnyUrl, BaseModel, Field

from maelstrom.config.errors import ConfigurationError, SettingsFileExistsError
from maelstrom.config.schema import RawSettings
from maelstrom.config.settings import ResolvedConfiguration, merge_layers, provenance
from maelstrom.config.settings_file import (
    default_file_settings,
    load_settings_file,
    resolve_settings_path,
    write_settings_file,
)
from maelstrom.config.sources import read_cli_layer, read_environment_layer
from maelstrom.infrastructure.keys import SigningKey, load_signing_key
from maelstrom.services.result import ServiceError, ServiceResult
from maelstrom.services.telemetry import stage, timed

logger = structlog.get_logger(__name__)


class ServerIdentity(BaseModel):
    """Final immutable configuration handed to the server."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    server_address: AnyUrl
    database_address: AnyUrl
    signing_key: SigningKey
    session_lifetime: timedelta


class IdentityResult(ServiceResult):
    """ServiceResult carrying the assembled identity on success.

    The identity holds private key material and is never serialized.
    """

    identity: ServerIdentity | None = Field(default=None, exclude=True)


def _failure(op: str, exc: ConfigurationError, warnings: list[str]) -> IdentityResult:
    return IdentityResult(
        ok=False,
        op=op,
        warnings=warnings,
        error=ServiceError(
            code=exc.code,
            message=str(exc),
            detail=exc.detail,
            exit_code=exc.exit_code,
        ),
    )


def _summary(
    resolved: ResolvedConfiguration,
    layers: tuple[RawSettings, ...],
    settings_path: Path,
    created: bool,
) -> dict[str, Any]:
    return {
        "server_address": str(resolved.server_address),
        "database_address": str(resolved.database_address),
        "signing_key_path": str(resolved.signing_key_path),
        "session_lifetime_seconds": int(resolved.session_lifetime.total_seconds()),
        "settings_file": str(settings_path),
        "settings_file_created": created,
        "sources": provenance(*layers),
    }


class ConfigurationService:
    """Resolve layered configuration into a :class:`ServerIdentity`.

    Args:
        cli_options: Raw CLI option strings keyed by setting name.
        environ: Environment mapping (defaults to ``os.environ``).
    """

    def __init__(
        self,
        *,
        cli_options: Mapping[str, str | None] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._cli_options = cli_options
        self._environ = environ

    def _read_layers(self) -> tuple[RawSettings, RawSettings]:
        # Independent of each other; neither touches the filesystem.
        with stage("environment"):
            env = read_environment_layer(self._environ)
        with stage("cli"):
            cli = read_cli_layer(self._cli_options)
        return env, cli

    @timed
    def resolve_identity(self) -> IdentityResult:
        """Run the full resolution chain."""
        op = "resolve_identity"
        warnings: list[str] = []
        try:
            env, cli = self._read_layers()
            settings_path = resolve_settings_path(env, cli)

            with stage("settings_file") as span:
                loaded = load_settings_file(settings_path)
                if span is not None:
                    span.annotate("created", loaded.created)
            if loaded.created:
                warnings.append(
                    f"Created default settings file at {settings_path}; "
                    "edit it before the next start"
                )

            layers = (env, cli, loaded.layer)
            with stage("merge"):
                resolved = merge_layers(*layers)
            with stage("signing_key"):
                signing_key = load_signing_key(resolved.signing_key_path)
        except ConfigurationError as exc:
            logger.error("configuration.failed", code=exc.code, reason=str(exc))
            return _failure(op, exc, warnings)

        identity = ServerIdentity(
            server_address=resolved.server_address,
            database_address=resolved.database_address,
            signing_key=signing_key,
            session_lifetime=resolved.session_lifetime,
        )
        data = _summary(resolved, layers, settings_path, loaded.created)
        logger.info("configuration.resolved", sources=data["sources"])
        return IdentityResult(ok=True, op=op, data=data, warnings=warnings, identity=identity)

    @timed
    def init_settings_file(self, *, force: bool = False) -> ServiceResult:
        """Write the default settings file at the resolved settings path."""
        op = "init_settings"
        try:
            env, cli = self._read_layers()
            settings_path = resolve_settings_path(env, cli)
            defaults = default_file_settings()
            write_settings_file(defaults, settings_path, overwrite=force)
        except SettingsFileExistsError as exc:
            return _failure(op, exc, [])
        except ConfigurationError as exc:
            logger.error("settings_file.init_failed", code=exc.code, reason=str(exc))
            return _failure(op, exc, [])

        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(settings_path), **defaults.to_document()},
        )
