"""Configuration errors raised while resolving the server identity.

Every error carries a stable ``code`` (surfaced in ``ServiceError.code``),
a ``detail`` mapping for verbose/JSON output, and the process ``exit_code``
the top-level CLI terminates with. Exit codes follow BSD ``sysexits.h``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_CANTCREAT = 73
EX_IOERR = 74
EX_CONFIG = 78


class ConfigurationError(Exception):
    """Base class for fatal configuration resolution failures."""

    code = "CONFIGURATION_ERROR"
    exit_code = EX_CONFIG

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.detail: dict[str, Any] = detail


class SettingsPathMissingError(ConfigurationError):
    """Neither the environment nor the CLI named a settings file."""

    code = "SETTINGS_PATH_MISSING"
    exit_code = EX_USAGE

    def __init__(self, env_var: str, cli_flag: str) -> None:
        super().__init__(
            "No settings file location specified. "
            f"Set {env_var} or pass {cli_flag}; this argument is required",
            env_var=env_var,
            cli_flag=cli_flag,
        )


class MissingRequiredOptionError(ConfigurationError):
    """A required setting is absent from every layer."""

    code = "MISSING_REQUIRED_OPTION"

    def __init__(self, field: str, missing: list[str]) -> None:
        super().__init__(f"Option {field} is required", field=field, missing=missing)
        self.field = field


class InvalidConfigurationError(ConfigurationError):
    """Merged values failed validation for a reason other than absence."""

    code = "INVALID_CONFIGURATION"


class SettingsFileCorruptError(ConfigurationError):
    code = "SETTINGS_FILE_CORRUPT"
    exit_code = EX_DATAERR

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(
            f"Unable to read settings file {path}: {reason}",
            path=str(path),
            reason=reason,
        )


class SettingsFileAccessError(ConfigurationError):
    code = "SETTINGS_FILE_UNREADABLE"
    exit_code = EX_IOERR

    def __init__(self, path: Path, exc: OSError) -> None:
        super().__init__(
            f"Unable to open settings file {path}: {exc.strerror or exc}",
            path=str(path),
            errno=exc.errno,
        )


class SettingsFileWriteError(ConfigurationError):
    code = "SETTINGS_FILE_WRITE_FAILED"
    exit_code = EX_CANTCREAT

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(
            f"Unable to write default settings file {path}: {reason}",
            path=str(path),
            reason=reason,
        )


class SettingsFileExistsError(ConfigurationError):
    code = "SETTINGS_FILE_EXISTS"
    exit_code = EX_CANTCREAT

    def __init__(self, path: Path) -> None:
        super().__init__(
            f"Settings file {path} already exists (use --force to overwrite)",
            path=str(path),
        )


# --- Signing key ---


class KeyFileOpenError(ConfigurationError):
    code = "KEY_FILE_OPEN_FAILED"
    exit_code = EX_NOINPUT

    def __init__(self, path: Path, exc: OSError) -> None:
        super().__init__(
            f"Unable to open authkey file {path}: {exc.strerror or exc}",
            path=str(path),
            errno=exc.errno,
        )


class KeyFileReadError(ConfigurationError):
    code = "KEY_FILE_READ_FAILED"
    exit_code = EX_IOERR

    def __init__(self, path: Path, exc: OSError) -> None:
        super().__init__(
            f"Unable to read authkey file {path}: {exc.strerror or exc}",
            path=str(path),
            errno=exc.errno,
        )


class KeyDecodeError(ConfigurationError):
    code = "KEY_DECODE_FAILED"
    exit_code = EX_DATAERR

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(
            f"Unable to parse supplied key {path}: {reason}",
            path=str(path),
            reason=reason,
        )
