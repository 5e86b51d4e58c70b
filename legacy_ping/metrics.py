"""Prometheus-compatible metrics output.

Renders query results in Prometheus text exposition format (text/plain;
version=0.0.4), suitable for the node_exporter textfile collector. No
external dependencies: everything is built from format strings.
"""

from __future__ import annotations

from .report import QueryResult

# Prefix for all metrics
_NS = "legacy_ping"


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _gauge(name: str, labels: dict[str, str], value: float | int) -> str:
    """Format a single Prometheus gauge sample."""
    label_str = ",".join(f'{k}="{_escape(v)}"' for k, v in labels.items())
    return f"{name}{{{label_str}}} {value}"


def generate_metrics(results: list[QueryResult]) -> str:
    """Return a complete Prometheus text exposition payload."""
    lines: list[str] = []

    def family(metric: str, help_text: str, samples: list[str]) -> None:
        if not samples:
            return
        lines.append(f"# HELP {_NS}_{metric} {help_text}")
        lines.append(f"# TYPE {_NS}_{metric} gauge")
        lines.extend(samples)
        lines.append("")

    family(
        "up",
        "Whether the last legacy ping succeeded (1) or failed (0)",
        [_gauge(f"{_NS}_up", {"server": r.server.name}, int(r.ok)) for r in results],
    )
    family(
        "query_duration_seconds",
        "Wall time of the last query",
        [
            _gauge(
                f"{_NS}_query_duration_seconds",
                {"server": r.server.name},
                f"{r.duration_seconds:.3f}",
            )
            for r in results
        ],
    )

    answered = [r for r in results if r.status is not None]
    family(
        "players_online",
        "Current online player count",
        [_gauge(f"{_NS}_players_online", {"server": r.server.name}, r.status.players_online) for r in answered],
    )
    family(
        "players_max",
        "Max player slots",
        [_gauge(f"{_NS}_players_max", {"server": r.server.name}, r.status.players_max) for r in answered],
    )
    family(
        "protocol_version",
        "Protocol number reported by 1.4+ servers",
        [
            _gauge(
                f"{_NS}_protocol_version",
                {"server": r.server.name, "version": r.status.version.server},
                r.status.version.protocol,
            )
            for r in answered
            if r.status.version is not None
        ],
    )

    return "\n".join(lines) + "\n"
