"""Entry point for the legacy-ping tool.

Run with:  python -m legacy_ping [--config /path/to/config.yaml] [HOST[:PORT] ...]
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from . import __version__
from .config import (
    CONFIG_PATH_ENV,
    DEFAULT_PORT,
    AppConfig,
    ConfigError,
    LoggingConfig,
    ServerConfig,
    check_timeout,
    load_config,
)
from .logger import setup_logging
from .metrics import generate_metrics
from .report import format_json, format_text, query_server

log = logging.getLogger("legacy_ping")

EXIT_OK = 0
EXIT_QUERY_FAILED = 1
EXIT_USAGE = 2

_FORMATTERS = {
    "text": format_text,
    "json": format_json,
    "prometheus": generate_metrics,
}


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="legacy-ping",
        description="Query Minecraft servers with the legacy (pre-1.7) Server List Ping.",
    )
    parser.add_argument(
        "targets",
        nargs="*",
        metavar="HOST[:PORT]",
        help=f"Servers to query instead of the configured ones (default port {DEFAULT_PORT})",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=os.environ.get(CONFIG_PATH_ENV),
        help=f"Path to YAML config file (default: ${CONFIG_PATH_ENV})",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        help="Connect timeout in seconds (overrides the config file)",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=sorted(_FORMATTERS),
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def parse_target(target: str) -> ServerConfig:
    """Parse ``host``, ``host:port`` or ``[v6addr]:port`` into a ServerConfig."""
    host, port = target, DEFAULT_PORT
    if target.startswith("["):
        end = target.find("]")
        if end == -1:
            raise ValueError(f"Unterminated IPv6 address in '{target}'")
        host, rest = target[1:end], target[end + 1 :]
        if rest:
            if not rest.startswith(":"):
                raise ValueError(f"Unexpected text after IPv6 address in '{target}'")
            port = _parse_port(rest[1:], target)
    elif target.count(":") == 1:
        host, port_text = target.split(":")
        port = _parse_port(port_text, target)
    if not host:
        raise ValueError(f"Missing host in '{target}'")
    return ServerConfig(name=target, host=host, port=port)


def _parse_port(text: str, target: str) -> int:
    if not text.isdigit() or not 1 <= int(text) <= 65535:
        raise ValueError(f"Invalid port '{text}' in '{target}'")
    return int(text)


def _build_config(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config) if args.config else AppConfig()

    if args.targets:
        try:
            targets = [parse_target(t) for t in args.targets]
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        cfg.servers = {srv.name: srv for srv in targets}
    if not cfg.servers:
        raise ConfigError("No servers to query: pass HOST[:PORT] or a config with 'servers:'.")

    if args.timeout is not None:
        cfg.connect_timeout_seconds = check_timeout(args.timeout, "--timeout")
    if args.verbose:
        cfg.logging.level = "DEBUG"
    return cfg


def main(argv: list[str] | None = None) -> int:
    """Query every target, print the results, and return the exit status."""
    # Default logging before config is loaded so early errors are visible.
    setup_logging(LoggingConfig())
    args = _parse_args(argv)

    try:
        cfg = _build_config(args)
    except ConfigError as exc:
        log.critical("Configuration error: %s", exc)
        return EXIT_USAGE

    setup_logging(cfg.logging)
    log.debug("legacy-ping v%s querying %d server(s)", __version__, len(cfg.servers))

    results = [query_server(srv, cfg.connect_timeout_seconds) for srv in cfg.servers.values()]
    sys.stdout.write(_FORMATTERS[args.format](results))

    if all(r.ok for r in results):
        return EXIT_OK
    return EXIT_QUERY_FAILED


if __name__ == "__main__":
    sys.exit(main())
