"""Legacy (pre-1.7) Minecraft Server List Ping client and wire codecs."""

from .protocol import (
    VarIntTooBigError,
    encode_utf16,
    encode_varint,
    encode_varlong,
    read_utf16,
    read_varint,
    read_varlong,
    write_utf16,
    write_varint,
    write_varlong,
)
from .status import (
    PingError,
    PingIOError,
    PingParseError,
    ResponseFormat,
    Status,
    UnexpectedPacketIdError,
    Version,
    get_status,
    parse_status,
)

__version__ = "0.1.0"

__all__ = [
    "PingError",
    "PingIOError",
    "PingParseError",
    "ResponseFormat",
    "Status",
    "UnexpectedPacketIdError",
    "VarIntTooBigError",
    "Version",
    "encode_utf16",
    "encode_varint",
    "encode_varlong",
    "get_status",
    "parse_status",
    "read_utf16",
    "read_varint",
    "read_varlong",
    "write_utf16",
    "write_varint",
    "write_varlong",
]
