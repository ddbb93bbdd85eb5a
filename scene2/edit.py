"""
Scene2 Edit - Field updates written straight into a chunk's payload.

Every setter writes at the offsets the decoders read from, then re-decodes the
chunk so its property record matches the bytes again. ``raw_data_backup`` is
never touched, so ``chunk.revert()`` always gets the original back.

Writes that would run past the end of the payload are skipped, mirroring the
decoders' handling of short payloads. Not safe to run concurrently on the same
document.
"""

from __future__ import annotations

from typing import Iterable

from scene2.codec import write_f32
from scene2.decoders import decode_enemy_props, decode_header_props, decode_standard_props
from scene2.document import Scene2Chunk, Scene2Header
from scene2.props import EnemyProps, HeaderProps, standard_of
from scene2.spec import (
    ENEMY_BYTE_OFFSETS,
    ENEMY_FLOAT_OFFSETS,
    HEADER_FLOAT_OFFSETS,
    STANDARD_FIELD_OFFSETS,
)


def _check_fields(fields: dict[str, object], allowed: Iterable[str]) -> None:
    unknown = sorted(set(fields) - set(allowed))
    if unknown:
        raise ValueError(
            f"Unknown field(s): {', '.join(unknown)}. "
            f"Allowed: {', '.join(sorted(allowed))}"
        )


def write_float(raw: bytearray, offset: int, value: float) -> bool:
    """Overwrite 4 bytes at offset with a float32. False if they do not fit."""
    if offset < 0 or offset + 4 > len(raw):
        return False
    raw[offset:offset + 4] = write_f32(float(value))
    return True


def _check_byte(name: str, value: float) -> int:
    if not float(value).is_integer():
        raise ValueError(f"Byte field {name} must be a whole number, got {value}")
    value = int(value)
    if not 0 <= value <= 0xFF:
        raise ValueError(f"Byte field out of range: {value} (expected 0..255)")
    return value


def write_byte(raw: bytearray, offset: int, value: int) -> bool:
    if offset < 0 or offset >= len(raw):
        return False
    raw[offset] = value
    return True


def update_standard_props(chunk: Scene2Chunk, **fields: float) -> None:
    """Update placement fields (position_x ... scaling_z) of an object chunk."""
    _check_fields(fields, STANDARD_FIELD_OFFSETS.keys())

    standard = standard_of(chunk.props)
    if standard is None:
        standard = decode_standard_props(bytes(chunk.raw_data), chunk.name)

    for name, value in fields.items():
        write_float(chunk.raw_data, standard.data_begin + STANDARD_FIELD_OFFSETS[name], value)

    chunk.redecode()


def update_enemy_props(chunk: Scene2Chunk, **fields: float) -> None:
    """Update enemy attributes; behavior1 and voice are single bytes."""
    _check_fields(fields, ENEMY_FLOAT_OFFSETS.keys() | ENEMY_BYTE_OFFSETS.keys())
    # Check every byte value before touching the payload
    byte_values = {
        name: _check_byte(name, value)
        for name, value in fields.items()
        if name in ENEMY_BYTE_OFFSETS
    }

    props = chunk.props
    if not isinstance(props, EnemyProps):
        props = decode_enemy_props(bytes(chunk.raw_data), chunk.name)
    data_begin = props.data_begin

    for name, value in fields.items():
        if name in ENEMY_BYTE_OFFSETS:
            write_byte(chunk.raw_data, data_begin + ENEMY_BYTE_OFFSETS[name], byte_values[name])
        else:
            write_float(chunk.raw_data, data_begin + ENEMY_FLOAT_OFFSETS[name], value)

    chunk.redecode()


def update_header_props(header: Scene2Header, **fields: float) -> None:
    """Update view / camera distance and clipping planes of the header."""
    _check_fields(fields, HEADER_FLOAT_OFFSETS.keys())
    content = header.content
    if content is None:
        raise ValueError("Document has no header to update")

    props = content.props
    if not isinstance(props, HeaderProps):
        props = decode_header_props(bytes(content.raw_data))
    tail = props.data_begin + len(props.text)

    for name, value in fields.items():
        write_float(content.raw_data, tail + HEADER_FLOAT_OFFSETS[name], value)

    content.redecode()
