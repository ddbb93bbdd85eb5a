"""
Byte builders for synthetic scene buffers used across the test suite.

Floats are picked so their encodings never contain a sub-record tag
(3.0, for one, encodes as 00 00 40 40 and would look like a light node).
"""

from __future__ import annotations

import struct


def u32(value: int) -> bytes:
    return struct.pack("<I", value)


def u16(value: int) -> bytes:
    return struct.pack("<H", value)


def f32(value: float) -> bytes:
    return struct.pack("<f", value)


# =============================================================================
# Header
# =============================================================================

HEADER_MAGIC = b"\x4c\x9b"


def build_header(
    title: bytes = b"Mission",
    camera: float = 1.5,
    view: float = 2.5,
    near: float = 0.5,
    far: float = -4.25,
    size: int = 0x1234,
    header_length: int = 7,
) -> bytes:
    """Header bytes up to (not including) the 00 40 terminator.

    The Objects section that follows must start with 00 40.
    """
    prologue = bytearray(HEADER_MAGIC + u32(size) + bytes(10))
    prologue[8] = header_length
    tail = bytearray(68)
    tail[0:1] = b"\x00"                # title terminator
    tail[40:44] = f32(camera)
    tail[50:54] = f32(view)
    tail[60:64] = f32(near)
    tail[64:68] = f32(far)
    return bytes(prologue) + title + bytes(tail)


# =============================================================================
# Chunks
# =============================================================================

def chunk(marker: bytes, body: bytes) -> bytes:
    """marker + whole-chunk length + body."""
    return marker + u32(6 + len(body)) + body


def standard_body(
    name: bytes,
    type_code: int = 0x01,
    pos: tuple[float, float, float] = (1.5, 2.5, -4.25),
    rot: tuple[float, float, float] = (0.5, 1.5, 2.5),
    scale: tuple[float, float, float] = (1.0, 1.0, 1.0),
    extra: bytes = b"",
) -> bytes:
    """Body of an object chunk: type node, name node, transform nodes.

    Relative to the chunk's raw data (length field first), the name starts at
    20 and data_begin is 23 + len(name).
    """
    return (
        b"\x11\x40\x0a\x00\x00\x00" + bytes((type_code,)) + b"\x00\x00\x00"
        + b"\x10\x00" + u32(7 + len(name)) + name + b"\x00"
        + b"\x20\x00" + u32(18) + b"".join(f32(v) for v in pos)
        + b"\x22\x00" + u32(22) + f32(1.0) + b"".join(f32(v) for v in rot)
        + b"\x2d\x00" + u32(18) + b"".join(f32(v) for v in scale)
        + extra
    )


def object_chunk(name: bytes, type_code: int = 0x01, **kwargs) -> bytes:
    return chunk(b"\x10\x40", standard_body(name, type_code, **kwargs))


def raw_payload(chunk_bytes: bytes) -> bytes:
    """What the reader keeps as raw_data: everything after the 2-byte id."""
    return chunk_bytes[2:]


def light_extra(light_type: int = 2, flags: int = 0xFF, power: float = 2.5) -> bytes:
    sub = (
        b"\x41\x40" + u32(10) + u32(light_type)
        + b"\x26\x00" + u32(18) + f32(1.0) + f32(0.5) + f32(0.5)
        + b"\x42\x40" + u32(10) + f32(power)
        + b"\x45\x40" + u32(10) + u32(flags)
    )
    return b"\x40\x40" + u32(6 + len(sub)) + sub


def sound_extra() -> bytes:
    sub = (
        b"\x61\x40" + u32(10) + u32(1)
        + b"\x62\x40" + u32(10) + f32(0.5)
        + b"\x68\x40" + u32(22) + f32(1.0) + f32(2.5) + f32(0.5) + f32(1.5)
        + b"\x66\x40" + u32(6)
    )
    return b"\x60\x40" + u32(6 + len(sub)) + sub


def occluder_extra() -> bytes:
    return (
        b"\x83\x40" + u32(48)
        + u32(2) + f32(1.0) + f32(2.5) + f32(0.5) + f32(-4.25) + f32(1.5) + f32(1.0)
        + u32(1) + u16(0) + u16(1) + u16(2)
    )


def definition_body(name: bytes, selector: int, extra: bytes = b"") -> bytes:
    """Body of a definition chunk: name node at raw offset 10, then the signature."""
    return (
        b"\x10\x00" + u32(7 + len(name)) + name + b"\x00"
        + b"\x22\xae\x0a\x00\x00\x00" + bytes((selector,))
        + extra
    )


def definition_chunk(name: bytes, selector: int, extra: bytes = b"") -> bytes:
    return chunk(b"\x21\xae", definition_body(name, selector, extra))


ENEMY_SELECTOR = 0x1B
SCRIPT_SELECTOR = 0x05
CAR_SELECTOR = 0x04


def enemy_extra(name: bytes, script: bytes = b"enemy_script", voice: int = 3, behavior1: int = 9) -> bytes:
    """24 AE block of enemy attributes followed by the enemy script.

    data_begin lands at 20 + len(name); the script starts at len(name) + 110.
    """
    attrs = bytearray(77)
    attrs[5] = behavior1
    attrs[9] = voice
    attrs[13:17] = f32(1.5)    # strength
    attrs[17:21] = f32(1.0)    # energy
    attrs[21:25] = f32(0.5)    # left hand
    attrs[41:45] = f32(2.5)    # speed
    attrs[69:73] = f32(-4.25)  # mass
    return b"\x24\xae" + bytes(attrs) + bytes(13) + script + b"\x00"


def script_extra(script: bytes) -> bytes:
    """Padding so the script text starts at len(name) + 41."""
    return bytes(23) + script + b"\x00"


def init_script_chunk(name: bytes, script: bytes) -> bytes:
    body = b"\x01" + bytes((len(name),)) + bytes(3) + name + u32(len(script)) + script + b"\x00"
    return chunk(b"\x51\xae", body)


# =============================================================================
# Sections and scenes
# =============================================================================

def section(marker: bytes, *chunks: bytes, extra_length: int = 0) -> bytes:
    body = b"".join(chunks)
    return marker + u32(6 + len(body) + extra_length) + body


def objects_section(*chunks: bytes, **kwargs) -> bytes:
    return section(b"\x00\x40", *chunks, **kwargs)


def definitions_section(*chunks: bytes) -> bytes:
    return section(b"\x20\xae", *chunks)


def init_scripts_section(*chunks: bytes) -> bytes:
    return section(b"\x50\xae", *chunks)


def build_scene(*sections: bytes, header: bytes | None = None) -> bytes:
    """Header followed by the given sections; an empty Objects section if none."""
    if header is None:
        header = build_header()
    if not sections:
        sections = (objects_section(),)
    return header + b"".join(sections)


def full_scene() -> bytes:
    """A scene with one of each decodable kind plus an Unknown section."""
    return build_scene(
        objects_section(
            object_chunk(b"Box01"),
            object_chunk(b"Lamp", 0x02, extra=light_extra()),
            object_chunk(b"Radio", 0x04, extra=sound_extra()),
            object_chunk(b"Wall", 0x0C, extra=occluder_extra()),
        ),
        definitions_section(
            definition_chunk(b"Tommy", CAR_SELECTOR),
            definition_chunk(b"Gangster", ENEMY_SELECTOR, enemy_extra(b"Gangster")),
            definition_chunk(b"Trigger", SCRIPT_SELECTOR, script_extra(b"wait 100")),
        ),
        init_scripts_section(
            init_script_chunk(b"Init", b"setcompass 1"),
        ),
        section(b"\x30\xae", chunk(b"\xaa\xbb", b"\x01\x02\x03\x04")),
    )


def header_length() -> int:
    """Offset of the Objects section in a scene built with the default header."""
    return len(build_header())
