"""Wire-level primitives shared by the legacy ping and related protocols.

Implements:
- VarInt / VarLong (7 data bits + continuation bit, little-endian groups).
- Length-prefixed UTF-16 strings (u16 unit count, big-endian code units),
  as used by the pre-1.7 Server List Ping kick packet.
- Fixed-width big-endian helpers.

Every function works on any object with ``read(n)`` / ``write(data)``,
e.g. ``io.BytesIO`` or a file from ``socket.makefile("rb")``.

Reference: https://minecraft.wiki/w/Protocol#Data_types
"""

from __future__ import annotations

import struct
from typing import BinaryIO

VARINT_MAX_BYTES = 5
VARLONG_MAX_BYTES = 10
UTF16_MAX_UNITS = 0xFFFF


class VarIntTooBigError(ValueError):
    """Raised when a VarInt/VarLong keeps its continuation bit past the maximum width."""


# =====================================================================
# Fixed-width helpers
# =====================================================================


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly *size* bytes, or raise ``EOFError``."""
    buf = bytearray()
    while len(buf) < size:
        chunk = stream.read(size - len(buf))
        if not chunk:
            raise EOFError(f"Unexpected end of stream ({len(buf)} of {size} bytes read)")
        buf.extend(chunk)
    return bytes(buf)


def read_u8(stream: BinaryIO) -> int:
    """Read a single unsigned byte."""
    return read_exact(stream, 1)[0]


def read_u16(stream: BinaryIO) -> int:
    """Read a big-endian unsigned short."""
    return struct.unpack(">H", read_exact(stream, 2))[0]


def write_u16(stream: BinaryIO, value: int) -> None:
    """Write a big-endian unsigned short."""
    stream.write(struct.pack(">H", value))


# =====================================================================
# VarInt helpers
# =====================================================================


def _read_var(stream: BinaryIO, bits: int, max_bytes: int, name: str) -> int:
    mask = (1 << bits) - 1
    result = 0
    for i in range(max_bytes):
        b = read_u8(stream)
        # Chunks shifted past the target width are dropped, like a fixed-width shift.
        result = (result | ((b & 0x7F) << (7 * i))) & mask
        if not (b & 0x80):
            break
    else:
        raise VarIntTooBigError(f"{name} too big")
    if result & (1 << (bits - 1)):
        result -= 1 << bits
    return result


def _encode_var(value: int, bits: int, name: str) -> bytes:
    if not -(1 << (bits - 1)) <= value < (1 << (bits - 1)):
        raise ValueError(f"{value} does not fit in a {bits}-bit {name}")
    # Treat as unsigned for encoding.
    value &= (1 << bits) - 1
    out = bytearray()
    while value & ~0x7F:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def read_varint(stream: BinaryIO) -> int:
    """Read a signed 32-bit VarInt (at most 5 bytes)."""
    return _read_var(stream, 32, VARINT_MAX_BYTES, "VarInt")


def read_varlong(stream: BinaryIO) -> int:
    """Read a signed 64-bit VarLong (at most 10 bytes)."""
    return _read_var(stream, 64, VARLONG_MAX_BYTES, "VarLong")


def encode_varint(value: int) -> bytes:
    """Encode a signed 32-bit integer as a VarInt.

    Negative values use their two's-complement bit pattern and always
    take the full 5 bytes.
    """
    return _encode_var(value, 32, "VarInt")


def encode_varlong(value: int) -> bytes:
    """Encode a signed 64-bit integer as a VarLong."""
    return _encode_var(value, 64, "VarLong")


def write_varint(stream: BinaryIO, value: int) -> None:
    """Write a signed 32-bit VarInt in a single ``write`` call."""
    stream.write(encode_varint(value))


def write_varlong(stream: BinaryIO, value: int) -> None:
    """Write a signed 64-bit VarLong in a single ``write`` call."""
    stream.write(encode_varlong(value))


# =====================================================================
# UTF-16 string helpers
# =====================================================================


def read_utf16(stream: BinaryIO) -> str:
    """Read a u16-length-prefixed UTF-16BE string.

    The length counts 16-bit code units, not bytes.  Unpaired surrogates
    and other malformed units decode to U+FFFD instead of failing; only a
    short read is an error.
    """
    length = read_u16(stream)
    data = read_exact(stream, length * 2)
    return data.decode("utf-16-be", errors="replace")


def encode_utf16(value: str) -> bytes:
    """Encode *value* as a u16-length-prefixed UTF-16BE string."""
    # surrogatepass keeps lone surrogates as single code units.
    data = value.encode("utf-16-be", errors="surrogatepass")
    units = len(data) // 2
    if units > UTF16_MAX_UNITS:
        raise ValueError(f"String too long: {units} UTF-16 code units (max {UTF16_MAX_UNITS})")
    return struct.pack(">H", units) + data


def write_utf16(stream: BinaryIO, value: str) -> None:
    """Write *value* as a u16-length-prefixed UTF-16BE string."""
    stream.write(encode_utf16(value))
