"""
Scene2 Codec - Little-endian primitives and byte-pattern search.

Every reader here is total: asking for bytes past the end of the buffer
returns a zero / empty value instead of raising. The decoders rely on that to
degrade gracefully on truncated chunks.
"""

from __future__ import annotations

import struct

from scene2.spec import MAX_OBJECT_NAME_LENGTH

_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")
_F32 = struct.Struct("<f")
_U16 = struct.Struct("<H")

TEXT_ENCODING = "latin-1"


def read_u32(data: bytes, offset: int = 0) -> int:
    """Unsigned 32-bit little-endian integer at offset, 0 if fewer than 4 bytes remain."""
    if offset < 0 or len(data) < offset + 4:
        return 0
    return _U32.unpack_from(data, offset)[0]


def read_f32(data: bytes, offset: int = 0) -> float:
    """32-bit little-endian float at offset, 0.0 if fewer than 4 bytes remain."""
    if offset < 0 or len(data) < offset + 4:
        return 0.0
    return _F32.unpack_from(data, offset)[0]


def read_u16(data: bytes, offset: int = 0) -> int:
    if offset < 0 or len(data) < offset + 2:
        return 0
    return _U16.unpack_from(data, offset)[0]


def read_u8(data: bytes, offset: int) -> int:
    if offset < 0 or offset >= len(data):
        return 0
    return data[offset]


def write_u32(value: int) -> bytes:
    """Encode an integer as 4 little-endian bytes (signed values wrap like int32)."""
    if value < 0:
        return _I32.pack(value)
    return _U32.pack(value & 0xFFFFFFFF)


def write_f32(value: float) -> bytes:
    return _F32.pack(value)


def find_all_occurrences(haystack: bytes, needle: bytes) -> list[int]:
    """Every index where needle starts in haystack, overlapping matches included.

    Empty needles, and needles longer than the haystack, match nowhere.
    The decoders only ever need the first hit and call find_first instead.
    """
    if not needle or len(needle) > len(haystack):
        return []
    indices = []
    pos = haystack.find(needle)
    while pos != -1:
        indices.append(pos)
        pos = haystack.find(needle, pos + 1)
    return indices


def find_first(haystack: bytes, needle: bytes, start: int = 0) -> int:
    """First index of needle at or after start, -1 if absent."""
    if not needle or start < 0 or len(needle) > len(haystack) - start:
        return -1
    return haystack.find(needle, start)


def decode_text(data: bytes) -> str:
    """Single-byte decode: one character per byte, nothing rejected."""
    return bytes(data).decode(TEXT_ENCODING)


def read_cstring(data: bytes, max_length: int = MAX_OBJECT_NAME_LENGTH) -> str:
    """Text up to the first zero byte or max_length bytes, whichever comes first."""
    end = data.find(b"\x00")
    if end == -1 or end > max_length:
        end = min(len(data), max_length)
    return decode_text(data[:end])


def read_string_at(data: bytes, start: int) -> str:
    """Zero-terminated text starting at start.

    With no terminator the rest of the buffer is taken, keeping printable
    ASCII only. Past the end of the buffer the result is empty.
    """
    if start < 0 or start >= len(data):
        return ""
    end = data.find(b"\x00", start)
    if end == -1:
        return "".join(chr(b) for b in data[start:] if 32 <= b < 127)
    return decode_text(data[start:end])
