"""YAML configuration loader and validation for the legacy-ping tool."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# PyYAML is the only external dependency.
try:
    import yaml
except ImportError:
    print(
        "FATAL: PyYAML is required.  Install it with:  pip install pyyaml",
        file=sys.stderr,
    )
    sys.exit(1)

DEFAULT_PORT = 25565
CONFIG_PATH_ENV = "LEGACY_PING_CONFIG"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class ServerConfig:
    """A server to query."""

    name: str
    host: str
    port: int = DEFAULT_PORT

    @property
    def address(self) -> tuple[str, int]:
        return (self.host, self.port)


@dataclass
class LoggingConfig:
    """Logging destination and rotation settings."""

    level: str = "INFO"
    file: str = ""  # empty = stderr only
    max_bytes: int = 1_048_576  # 1 MB
    backup_count: int = 3


@dataclass
class AppConfig:
    """Top-level application configuration."""

    connect_timeout_seconds: float = 5.0
    servers: dict[str, ServerConfig] = field(default_factory=dict)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when the configuration is invalid or incomplete."""


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def _get(data: dict[str, Any], key: str, expected_type: type, default: Any = None) -> Any:
    """Retrieve *key* from *data*, coerce to *expected_type*, fallback to *default*."""
    value = data.get(key, default)
    if value is None:
        return default
    try:
        return expected_type(value)
    except (ValueError, TypeError) as exc:
        raise ConfigError(
            f"Config key '{key}': cannot convert {value!r} to {expected_type.__name__}"
        ) from exc


def _mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    """Return the section *key* of *raw*, which must be a mapping if present."""
    section = raw.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{key}' must be a YAML mapping.")
    return section


def check_timeout(value: float, key: str) -> float:
    """Reject timeouts that are not finite and positive (including NaN)."""
    if not (math.isfinite(value) and value > 0):
        raise ConfigError(f"{key} must be a finite positive number, got {value}.")
    return value


def _load_server(name: str, raw: dict[str, Any]) -> ServerConfig:
    host = raw.get("host")
    if not host:
        raise ConfigError(f"Server '{name}': 'host' is required.")
    port = raw.get("port", DEFAULT_PORT)
    # bool is an int subclass; floats like 25565.9 would truncate silently.
    if isinstance(port, bool) or (isinstance(port, float) and not port.is_integer()):
        raise ConfigError(f"Server '{name}': port must be an integer, got {port!r}.")
    port = _get(raw, "port", int, DEFAULT_PORT)
    if not 1 <= port <= 65535:
        raise ConfigError(f"Server '{name}': port must be 1-65535, got {port}.")
    return ServerConfig(name=name, host=str(host), port=port)


def _load_logging(raw: dict[str, Any]) -> LoggingConfig:
    return LoggingConfig(
        level=_get(raw, "level", str, LoggingConfig.level),
        file=_get(raw, "file", str, LoggingConfig.file),
        max_bytes=_get(raw, "max_bytes", int, LoggingConfig.max_bytes),
        backup_count=_get(raw, "backup_count", int, LoggingConfig.backup_count),
    )


def load_config(path: str | Path) -> AppConfig:
    """Load and validate configuration from a YAML file.

    Parameters
    ----------
    path:
        Filesystem path to the YAML config file.

    Returns
    -------
    AppConfig
        Fully-validated configuration object.

    Raises
    ------
    ConfigError
        If the file is missing, unparseable, or semantically invalid.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as fh:
            raw: dict[str, Any] = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML config: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a YAML mapping (dict).")

    timeout = check_timeout(
        _get(raw, "connect_timeout_seconds", float, AppConfig.connect_timeout_seconds),
        "connect_timeout_seconds",
    )

    # -- Servers --
    raw_servers = _mapping(raw, "servers")
    servers: dict[str, ServerConfig] = {}
    seen: dict[tuple[str, int], str] = {}
    for name, srv_raw in raw_servers.items():
        if not isinstance(srv_raw, dict):
            raise ConfigError(f"Server '{name}' must be a YAML mapping.")
        srv = _load_server(str(name), srv_raw)
        if srv.address in seen:
            raise ConfigError(
                f"Server '{name}' and '{seen[srv.address]}' both point at {srv.host}:{srv.port}."
            )
        seen[srv.address] = srv.name
        servers[srv.name] = srv

    # -- Logging --
    logging_cfg = _load_logging(_mapping(raw, "logging"))

    return AppConfig(
        connect_timeout_seconds=timeout,
        servers=servers,
        logging=logging_cfg,
    )
