"""Settings file location, loading, and first-run defaults.

The settings file path comes from the environment or the CLI, never from
the file itself.  A missing file is created with placeholder values for
the operator to edit; a corrupt or unreadable file is fatal.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from pydantic import AnyUrl, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import MarkedYAMLError, YAMLError

from maelstrom.config.errors import (
    SettingsFileAccessError,
    SettingsFileCorruptError,
    SettingsFileExistsError,
    SettingsFileWriteError,
    SettingsPathMissingError,
)
from maelstrom.config.schema import FILE_SETTINGS, SPECS_BY_NAME, RawSettings

logger = structlog.get_logger(__name__)

_HEADER = """\
# maelstrom server settings.
# Generated with placeholder values: edit before starting the server.
# Environment variables (MAELSTROM_*) and CLI flags override these keys.
"""


def _new_yaml() -> YAML:
    """Create a fresh safe YAML instance (ruamel's YAML object is stateful)."""
    y = YAML(typ="safe", pure=True)
    y.default_flow_style = False
    return y


def _yaml_reason(exc: YAMLError) -> str:
    # str(exc) quotes the offending source line, which may hold credentials.
    if isinstance(exc, MarkedYAMLError) and exc.problem:
        mark = exc.problem_mark
        if mark is None:
            return exc.problem
        return f"{exc.problem} (line {mark.line + 1}, column {mark.column + 1})"
    return type(exc).__name__


def resolve_settings_path(env: RawSettings, cli: RawSettings) -> Path:
    """Pick the settings file location: environment first, then CLI."""
    for layer in (env, cli):
        if layer.settings_file_path is not None:
            return layer.settings_file_path
    spec = SPECS_BY_NAME["settings_file_path"]
    raise SettingsPathMissingError(spec.env_var, spec.cli_flag)


def default_file_settings() -> RawSettings:
    """Placeholder settings written on first run."""
    return RawSettings(
        source="file",
        server_address=AnyUrl("https://example.net/"),
        database_address=AnyUrl("postgres://db.example.net/maelstrom"),
        signing_key_path=Path("/etc/maelstrom/authkey.pem"),
        session_lifetime_seconds=3000,
    )


def read_settings_file(path: Path) -> RawSettings:
    """Parse an existing settings file.

    Raises:
        FileNotFoundError: The file does not exist (callers create defaults).
        SettingsFileAccessError: Any other I/O failure opening or reading it.
        SettingsFileCorruptError: Invalid YAML, a non-mapping root, or an
            invalid value for a known key.
    """
    try:
        with path.open("r", encoding="utf-8") as fh:
            document: Any = _new_yaml().load(fh)
    except FileNotFoundError:
        raise
    except OSError as exc:
        raise SettingsFileAccessError(path, exc) from exc
    except YAMLError as exc:
        raise SettingsFileCorruptError(path, _yaml_reason(exc)) from exc
    except UnicodeError as exc:
        raise SettingsFileCorruptError(path, "not valid UTF-8") from exc

    if document is None:
        document = {}
    if not isinstance(document, dict):
        reason = f"root must be a mapping, got {type(document).__name__}"
        raise SettingsFileCorruptError(path, reason)

    known = {key: value for key, value in document.items() if key in FILE_SETTINGS}
    try:
        settings = RawSettings.model_validate({**known, "source": "file"})
    except ValidationError as exc:
        reason = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors(include_url=False)
        )
        raise SettingsFileCorruptError(path, reason) from exc

    logger.debug("settings_file.loaded", path=str(path), keys=sorted(known))
    return settings


def write_settings_file(settings: RawSettings, path: Path, *, overwrite: bool = False) -> None:
    """Persist *settings* as YAML.

    Without *overwrite* the file is created exclusively and an existing file
    raises :class:`SettingsFileExistsError`.  The handle is always released.
    """
    mode = "w" if overwrite else "x"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open(mode, encoding="utf-8") as fh:
            fh.write(_HEADER)
            _new_yaml().dump(settings.to_document(), fh)
    except FileExistsError as exc:
        if path.exists():
            raise SettingsFileExistsError(path) from exc
        raise SettingsFileWriteError(path, str(exc)) from exc
    except (OSError, YAMLError) as exc:
        raise SettingsFileWriteError(path, str(exc)) from exc


@dataclass(frozen=True)
class SettingsFileLoad:
    """Outcome of loading the settings file layer."""

    path: Path
    settings: RawSettings
    created: bool = False

    @property
    def layer(self) -> RawSettings:
        """Values the merger may use.

        A file created during this pass holds placeholders only and
        contributes nothing until it is read on a later start.
        """
        if self.created:
            return RawSettings(source="file")
        return self.settings


def load_settings_file(path: Path) -> SettingsFileLoad:
    """Load the settings file, creating it with defaults if it does not exist."""
    try:
        return SettingsFileLoad(path=path, settings=read_settings_file(path))
    except FileNotFoundError:
        pass

    defaults = default_file_settings()
    write_settings_file(defaults, path)
    logger.warning(
        "settings_file.created",
        path=str(path),
        hint="No settings file found. Wrote defaults; edit them before continuing",
    )
    return SettingsFileLoad(path=path, settings=defaults, created=True)
