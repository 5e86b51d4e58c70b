"""Legacy (pre-1.7) Server List Ping client.

The client sends ``FE 01`` and the server answers with a ``0xFF`` kick
packet whose reason string carries the whole status.  Two reply layouts
exist:

- 1.4 to 1.6 servers: ``§1\\0<protocol>\\0<version>\\0<motd>\\0<online>\\0<max>``
- beta 1.8 to 1.3 servers: ``<motd>§<online>§<max>``

Reference: https://minecraft.wiki/w/Java_Edition_protocol/Server_List_Ping
"""

from __future__ import annotations

import enum
import logging
import re
import socket
from dataclasses import dataclass

from .protocol import read_u8, read_utf16

log = logging.getLogger(__name__)

LEGACY_PING_REQUEST = b"\xfe\x01"
KICK_PACKET_ID = 0xFF
READ_TIMEOUT = 0.5  # seconds, applies to every read after connect

_MODERN_MARKER = "§1"
_MODERN_SEPARATOR = "\x00"
_LEGACY_SEPARATOR = "§"

_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_RE = re.compile(r"\+?[0-9]+")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class PingError(Exception):
    """Base class for every failure of a status query."""


class PingIOError(PingError):
    """Connecting, reading or writing failed (refused, timed out, closed early).

    The underlying ``OSError``/``EOFError`` is kept as ``__cause__``.
    """


class PingParseError(PingError):
    """A status field is missing or is not a valid number."""

    def __init__(self, field: str, value: str | None, reason: str):
        self.field = field
        self.value = value
        if value is None:
            super().__init__(f"Field '{field}' {reason}")
        else:
            super().__init__(f"Invalid '{field}' field {value!r}: {reason}")


class UnexpectedPacketIdError(PingError):
    """The server answered with something other than a kick packet."""

    def __init__(self, packet_id: int):
        self.packet_id = packet_id
        super().__init__(f"Unexpected packet id: {packet_id}")


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Version:
    """Protocol number and version name reported by 1.4+ servers."""

    protocol: int
    server: str


@dataclass(frozen=True)
class Status:
    """Result of a legacy status query.

    ``dirty`` is always true: the values come from free-form kick text,
    not from a structured response.
    """

    motd: str
    online: tuple[int, int]  # (current, max)
    version: Version | None = None
    dirty: bool = True

    @property
    def players_online(self) -> int:
        return self.online[0]

    @property
    def players_max(self) -> int:
        return self.online[1]


class ResponseFormat(enum.Enum):
    MODERN_IN_LEGACY = "modern_in_legacy"
    LEGACY = "legacy"

    @classmethod
    def detect(cls, payload: str) -> ResponseFormat:
        if payload.startswith(_MODERN_MARKER):
            return cls.MODERN_IN_LEGACY
        return cls.LEGACY

    @property
    def separator(self) -> str:
        if self is ResponseFormat.MODERN_IN_LEGACY:
            return _MODERN_SEPARATOR
        return _LEGACY_SEPARATOR


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _field(fields: list[str], index: int, name: str) -> str:
    if index >= len(fields):
        raise PingParseError(name, None, f"missing (only {len(fields)} fields in response)")
    return fields[index]


def _parse_int(fields: list[str], index: int, name: str, lo: int, hi: int) -> int:
    text = _field(fields, index, name)
    pattern = _SIGNED_RE if lo < 0 else _UNSIGNED_RE
    if not pattern.fullmatch(text):
        raise PingParseError(name, text, "not a decimal integer")
    value = int(text)
    if not lo <= value <= hi:
        raise PingParseError(name, text, f"out of range {lo}..{hi}")
    return value


def _parse_i16(fields: list[str], index: int, name: str) -> int:
    return _parse_int(fields, index, name, -0x8000, 0x7FFF)


def _parse_u16(fields: list[str], index: int, name: str) -> int:
    return _parse_int(fields, index, name, 0, 0xFFFF)


def _parse_modern(fields: list[str]) -> Status:
    # fields[0] is the "§1" marker.
    version = Version(
        protocol=_parse_i16(fields, 1, "protocol"),
        server=_field(fields, 2, "server"),
    )
    motd = _field(fields, 3, "motd")
    online = (_parse_u16(fields, 4, "online"), _parse_u16(fields, 5, "max"))
    return Status(motd=motd, online=online, version=version)


def _parse_legacy(fields: list[str]) -> Status:
    motd = fields[0]
    online = (_parse_u16(fields, 1, "online"), _parse_u16(fields, 2, "max"))
    return Status(motd=motd, online=online)


_PARSERS = {
    ResponseFormat.MODERN_IN_LEGACY: _parse_modern,
    ResponseFormat.LEGACY: _parse_legacy,
}


def parse_status(payload: str) -> Status:
    """Parse the reason string of a legacy kick packet.

    Raises
    ------
    PingParseError
        If a field is missing or a number does not parse.
    """
    fmt = ResponseFormat.detect(payload)
    return _PARSERS[fmt](payload.split(fmt.separator))


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


def get_status(address: tuple[str, int], connect_timeout: float) -> Status:
    """Query *address* with the legacy ping and return its status.

    Parameters
    ----------
    address:
        ``(host, port)`` of the server.
    connect_timeout:
        Seconds allowed for establishing the TCP connection.  Every read
        after that is bounded by ``READ_TIMEOUT``.

    Raises
    ------
    PingIOError
        Connection or read failure, including timeouts.
    UnexpectedPacketIdError
        The reply did not start with ``0xFF``.
    PingParseError
        The reply text is malformed.
    """
    try:
        with socket.create_connection(address, timeout=connect_timeout) as sock:
            sock.settimeout(READ_TIMEOUT)
            sock.sendall(LEGACY_PING_REQUEST)
            with sock.makefile("rb") as stream:
                packet_id = read_u8(stream)
                if packet_id != KICK_PACKET_ID:
                    raise UnexpectedPacketIdError(packet_id)
                payload = read_utf16(stream)
    except (OSError, EOFError) as exc:
        raise PingIOError(f"Legacy ping to {address[0]}:{address[1]} failed: {exc}") from exc

    log.debug("Legacy ping reply from %s:%d: %r", address[0], address[1], payload)
    return parse_status(payload)
