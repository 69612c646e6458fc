"""Merged server settings — environment, CLI flags, and settings file in one object.

Priority chain (highest to lowest):
  1. Env vars      — ``MAELSTROM_*``
  2. CLI flags     — passed by Click
  3. Settings file — YAML at ``MAELSTROM_CONF_PATH`` / ``--conf-path``
  4. Code defaults — only ``session_lifetime`` has one (60 seconds)

Uses Pydantic Settings v2 with one :class:`LayerSettingsSource` per layer.
Each field is taken whole from the first layer that supplies it.
"""

from __future__ import annotations

import threading
from datetime import timedelta
from pathlib import Path
from typing import Any

import structlog
from pydantic import AnyUrl, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from maelstrom.config.errors import InvalidConfigurationError, MissingRequiredOptionError
from maelstrom.config.schema import DEFAULT_SESSION_LIFETIME, RawSettings

logger = structlog.get_logger(__name__)

# RawSettings field -> ResolvedConfiguration field
_FIELD_MAP: dict[str, str] = {
    "server_address": "server_address",
    "database_address": "database_address",
    "signing_key_path": "signing_key_path",
    "session_lifetime_seconds": "session_lifetime",
}


class LayerSettingsSource(PydanticBaseSettingsSource):
    """Expose one :class:`RawSettings` layer to Pydantic Settings."""

    def __init__(self, settings_cls: type[BaseSettings], layer: RawSettings | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if layer is not None:
            present = layer.present()
            self._data = {
                target: present[name] for name, target in _FIELD_MAP.items() if name in present
            }

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return the layer's present values for Pydantic to merge."""
        return self._data


# Thread-local storage for the layers during construction.
_tls = threading.local()


class ResolvedConfiguration(BaseSettings):
    """Fully populated configuration produced by :func:`merge_layers`.

    Attributes:
        server_address: The full address to run the server on.
        database_address: Database URL.
        signing_key_path: Path to the PEM encoded ES256 signing key.
        session_lifetime: How long an auth token stays valid.
    """

    model_config = {"frozen": True}

    server_address: AnyUrl
    database_address: AnyUrl
    signing_key_path: Path
    session_lifetime: timedelta = Field(default=DEFAULT_SESSION_LIFETIME)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Replace the stock sources with the three layers, highest first."""
        layers: tuple[RawSettings | None, ...] = getattr(_tls, "layers", None) or (None,)
        return tuple(LayerSettingsSource(settings_cls, layer) for layer in layers)


def merge_layers(
    env: RawSettings,
    cli: RawSettings,
    file: RawSettings,
) -> ResolvedConfiguration:
    """Merge the three layers by strict priority (env > CLI > file > default).

    Raises:
        MissingRequiredOptionError: A required field is absent from every
            layer. Names the first such field in declaration order.
        InvalidConfigurationError: A merged value failed validation.
    """
    _tls.layers = (env, cli, file)
    try:
        resolved = ResolvedConfiguration()
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_input=False)
        missing = [str(err["loc"][0]) for err in errors if err["type"] == "missing"]
        if missing:
            raise MissingRequiredOptionError(missing[0], missing) from exc
        raise InvalidConfigurationError(
            "Merged configuration is invalid",
            errors=[f"{err['loc'][0]}: {err['msg']}" for err in errors],
        ) from exc
    finally:
        _tls.layers = None

    logger.debug("configuration.merged", sources=provenance(env, cli, file))
    return resolved


def provenance(*layers: RawSettings) -> dict[str, str]:
    """Report which layer supplied each merged field (``default`` if none)."""
    result: dict[str, str] = {}
    for name in _FIELD_MAP:
        result[name] = next(
            (layer.source for layer in layers if getattr(layer, name) is not None),
            "default",
        )
    return result
