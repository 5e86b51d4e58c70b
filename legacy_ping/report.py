"""Run queries for configured servers and render the results."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any

from .config import ServerConfig
from .status import PingError, Status, get_status

log = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Outcome of one query: either *status* or *error* is set."""

    server: ServerConfig
    duration_seconds: float
    status: Status | None = None
    error: PingError | None = None

    @property
    def ok(self) -> bool:
        return self.status is not None


def query_server(server: ServerConfig, connect_timeout: float) -> QueryResult:
    """Query one server, capturing a ``PingError`` instead of raising it."""
    start = time.monotonic()
    try:
        status = get_status(server.address, connect_timeout)
    except PingError as exc:
        elapsed = time.monotonic() - start
        log.error("Server '%s' (%s:%d): %s", server.name, server.host, server.port, exc)
        return QueryResult(server=server, duration_seconds=elapsed, error=exc)

    elapsed = time.monotonic() - start
    log.info(
        "Server '%s' answered in %.0f ms (%d/%d players)",
        server.name,
        elapsed * 1000,
        status.players_online,
        status.players_max,
    )
    return QueryResult(server=server, duration_seconds=elapsed, status=status)


def format_text(results: list[QueryResult]) -> str:
    lines: list[str] = []
    for r in results:
        head = f"{r.server.name} ({r.server.host}:{r.server.port})"
        if r.status is None:
            lines.append(f"{head}: ERROR {r.error}")
            continue
        version = ""
        if r.status.version is not None:
            version = f" [{r.status.version.server}, protocol {r.status.version.protocol}]"
        lines.append(
            f"{head}: {r.status.players_online}/{r.status.players_max} players{version}"
            f" - {r.status.motd}"
        )
    return "\n".join(lines) + "\n"


def _result_dict(r: QueryResult) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": r.server.name,
        "host": r.server.host,
        "port": r.server.port,
        "ok": r.ok,
        "duration_ms": round(r.duration_seconds * 1000, 1),
    }
    if r.status is None:
        data["error"] = {"type": type(r.error).__name__, "message": str(r.error)}
        return data
    data["status"] = {
        "dirty": r.status.dirty,
        "motd": r.status.motd,
        "online": r.status.players_online,
        "max": r.status.players_max,
        "version": (
            {"protocol": r.status.version.protocol, "server": r.status.version.server}
            if r.status.version is not None
            else None
        ),
    }
    return data


def format_json(results: list[QueryResult]) -> str:
    return json.dumps([_result_dict(r) for r in results], ensure_ascii=False, indent=2) + "\n"
