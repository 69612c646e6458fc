"""Environment and CLI layers built on a shared source reader.

INVARIANT: A malformed value never aborts a layer. It is discarded to
absent (so a lower-priority layer may supply it) and a ``setting.discarded``
warning is logged. The raw value is logged only for settings not marked
``secret``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from maelstrom.config.schema import SETTING_SPECS, RawSettings, SettingSpec, SourceName

logger = structlog.get_logger(__name__)


def _reason(exc: ValueError) -> str:
    # Raw input is left out: URLs may embed credentials.
    if isinstance(exc, ValidationError):
        return "; ".join(err["msg"] for err in exc.errors(include_input=False, include_url=False))
    return str(exc)


def read_value(raw: str | None, spec: SettingSpec, source: SourceName) -> Any | None:
    """Parse one raw string for *spec*, returning None if absent or malformed."""
    if raw is None:
        return None
    try:
        return spec.parse(raw)
    except ValueError as exc:
        fields: dict[str, Any] = {"source": source, "setting": spec.name, "reason": _reason(exc)}
        if not spec.secret:
            fields["value"] = raw
        logger.warning("setting.discarded", **fields)
        return None


def read_environment_layer(environ: Mapping[str, str] | None = None) -> RawSettings:
    """Build the environment layer from ``MAELSTROM_*`` variables."""
    env = os.environ if environ is None else environ
    values = {
        spec.name: read_value(env.get(spec.env_var), spec, "environment")
        for spec in SETTING_SPECS
    }
    return RawSettings(source="environment", **values)


def read_cli_layer(options: Mapping[str, str | None] | None = None) -> RawSettings:
    """Build the CLI layer from raw option strings keyed by setting name.

    Click hands the options over unparsed so malformed flags follow the same
    discard rule as environment variables.
    """
    opts = options or {}
    values = {spec.name: read_value(opts.get(spec.name), spec, "cli") for spec in SETTING_SPECS}
    return RawSettings(source="cli", **values)
