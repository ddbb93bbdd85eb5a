"""
Scene2 Decoders - Per-type property extraction.

All decoders are total. A payload that is too short, or that lacks a tag a
decoder looks for, yields the best partial record with the remaining fields at
their defaults; nothing here raises on malformed input.

Object layouts compute ``data_begin = 23 + len(name)`` and read the placement
(position / rotation / scaling) relative to it. Light, Sound, Occluder and
Camera then locate their sub-records by tag search: the fields of a
sub-record start 6 bytes after its tag (2 tag bytes + 4 length bytes).
"""

from __future__ import annotations

from typing import Callable

from scene2.codec import (
    decode_text,
    find_first,
    read_f32,
    read_string_at,
    read_u16,
    read_u32,
    read_u8,
)
from scene2.props import (
    CameraProps,
    ChunkProps,
    Color,
    EnemyEnergy,
    EnemyProps,
    HeaderProps,
    InitScriptProps,
    LightCone,
    LightProps,
    LightRadius,
    ModelProps,
    OccluderProps,
    ScriptProps,
    SectorProps,
    SoundProps,
    SoundRadius,
    StandardProps,
    Triangle,
    Vector3,
)
from scene2.spec import (
    CAMERA_FOV_TAG,
    ChunkType,
    ENEMY_BYTE_OFFSETS,
    ENEMY_ENERGY_FIELDS,
    ENEMY_FLOAT_OFFSETS,
    ENEMY_MARKER,
    ENEMY_MIN_LENGTH,
    HEADER_FLOAT_OFFSETS,
    HEADER_LENGTH_OFFSET,
    HEADER_MIN_TAIL,
    HEADER_TEXT_OFFSET,
    LIGHT_COLOR_TAG,
    LIGHT_CONE_TAG,
    LIGHT_FLAGS_TAG,
    LIGHT_NODE_TAG,
    LIGHT_POWER_TAG,
    LIGHT_RADIUS_TAG,
    LIGHT_SECTOR_TAG,
    LIGHT_TYPE_TAG,
    LIGHT_TYPES,
    MODEL_NAME_AFTER_SECTOR_OFFSET,
    MODEL_NAME_OFFSET,
    MODEL_SECTOR_MARKER,
    MODEL_SECTOR_NAME_OFFSET,
    MODEL_SECTOR_SEARCH_OFFSET,
    OCCLUDER_TAG,
    SCRIPT_TEXT_OFFSETS,
    SECTOR_TAG,
    SOUND_LOOP_TAG,
    SOUND_NODE_TAG,
    SOUND_PITCH_TAG,
    SOUND_RADIUS_TAG,
    SOUND_SECTOR_TAG,
    SOUND_TYPE_TAG,
    SOUND_TYPES,
    SOUND_VOLUME_TAG,
    STANDARD_DATA_PREFIX,
    STANDARD_FIELD_OFFSETS,
    SUB_RECORD_HEADER_SIZE,
)


# =============================================================================
# Helpers
# =============================================================================

def _sub_record(payload: bytes, tag: bytes, search_from: int, size: int) -> int | None:
    """Offset of the fields of the first ``tag`` sub-record at or after search_from.

    None when the tag is absent or fewer than ``size`` field bytes follow it.
    """
    pos = find_first(payload, tag, search_from)
    if pos == -1:
        return None
    start = pos + SUB_RECORD_HEADER_SIZE
    if start + size > len(payload):
        return None
    return start


def _node_body(payload: bytes, node_tag: bytes) -> int:
    """Where sub-tag searches start: past the node header, or 0 with no node."""
    pos = find_first(payload, node_tag)
    if pos == -1 or pos + SUB_RECORD_HEADER_SIZE > len(payload):
        return 0
    return pos + SUB_RECORD_HEADER_SIZE


def _type_name(names: dict[int, str], value: int) -> str:
    return names.get(value, f"Unknown({value})")


def extract_script(payload: bytes, name: str, chunk_type: ChunkType) -> str:
    """Script text embedded after the name of Script, InitScript and Enemy chunks.

    Runs to the next zero byte or the end of the payload. Bytes are decoded one
    character each, so control and high bytes come through unchanged.
    """
    offset = SCRIPT_TEXT_OFFSETS.get(chunk_type)
    if offset is None or not payload:
        return ""
    start = len(name) + offset
    if start >= len(payload):
        return ""
    end = payload.find(b"\x00", start)
    if end == -1:
        end = len(payload)
    return decode_text(payload[start:end])


# =============================================================================
# Header
# =============================================================================

def decode_header_props(payload: bytes, name: str = "") -> HeaderProps:
    """Title text plus camera / clipping distances stored after it."""
    if len(payload) < HEADER_LENGTH_OFFSET + 1:
        return HeaderProps()

    header_length = payload[HEADER_LENGTH_OFFSET]
    text = read_string_at(payload, HEADER_TEXT_OFFSET)
    tail = len(text)
    if len(payload) < tail + HEADER_MIN_TAIL:
        return HeaderProps(header_length=header_length, text=text)

    distances = {
        field: read_f32(payload, tail + offset)
        for field, offset in HEADER_FLOAT_OFFSETS.items()
    }
    return HeaderProps(header_length=header_length, text=text, **distances)


# =============================================================================
# Object layouts
# =============================================================================

def decode_standard_props(payload: bytes, name: str) -> StandardProps:
    data_begin = STANDARD_DATA_PREFIX + len(name)
    values = {
        field: read_f32(payload, data_begin + offset)
        for field, offset in STANDARD_FIELD_OFFSETS.items()
    }
    return StandardProps(data_begin=data_begin, **values)


def decode_model_props(payload: bytes, name: str) -> ModelProps:
    standard = decode_standard_props(payload, name)
    data_begin = standard.data_begin

    have_sector = find_first(
        payload, MODEL_SECTOR_MARKER, data_begin + MODEL_SECTOR_SEARCH_OFFSET
    ) != -1
    sector = ""
    if have_sector:
        sector = read_string_at(payload, data_begin + MODEL_SECTOR_NAME_OFFSET)
        model = read_string_at(payload, data_begin + len(sector) + MODEL_NAME_AFTER_SECTOR_OFFSET)
    else:
        model = read_string_at(payload, data_begin + MODEL_NAME_OFFSET)

    return ModelProps(standard=standard, model=model, sector=sector, have_sector=have_sector)


def decode_light_props(payload: bytes, name: str) -> LightProps:
    props = LightProps(standard=decode_standard_props(payload, name))
    body = _node_body(payload, LIGHT_NODE_TAG)

    pos = _sub_record(payload, LIGHT_TYPE_TAG, body, 4)
    props.light_type = _type_name(LIGHT_TYPES, read_u32(payload, pos) if pos is not None else 0)

    pos = _sub_record(payload, LIGHT_COLOR_TAG, body, 12)
    if pos is not None:
        props.color = Color(
            r=read_f32(payload, pos),
            g=read_f32(payload, pos + 4),
            b=read_f32(payload, pos + 8),
        )

    pos = _sub_record(payload, LIGHT_POWER_TAG, body, 4)
    if pos is not None:
        props.power = read_f32(payload, pos)

    pos = _sub_record(payload, LIGHT_CONE_TAG, body, 8)
    if pos is not None:
        props.cone = LightCone(read_f32(payload, pos), read_f32(payload, pos + 4))

    pos = _sub_record(payload, LIGHT_RADIUS_TAG, body, 8)
    if pos is not None:
        props.radius = LightRadius(read_f32(payload, pos), read_f32(payload, pos + 4))

    pos = _sub_record(payload, LIGHT_FLAGS_TAG, body, 4)
    flags = read_u32(payload, pos) if pos is not None else 0
    props.flags = f"0x{flags:X}"

    pos = _sub_record(payload, LIGHT_SECTOR_TAG, body, 1)
    if pos is not None:
        props.sector = read_string_at(payload, pos)

    return props


def decode_sound_props(payload: bytes, name: str) -> SoundProps:
    props = SoundProps(standard=decode_standard_props(payload, name))
    body = _node_body(payload, SOUND_NODE_TAG)

    pos = _sub_record(payload, SOUND_TYPE_TAG, body, 4)
    props.sound_type = _type_name(SOUND_TYPES, read_u32(payload, pos) if pos is not None else 0)

    pos = _sub_record(payload, SOUND_VOLUME_TAG, body, 4)
    if pos is not None:
        props.volume = read_f32(payload, pos)

    pos = _sub_record(payload, SOUND_RADIUS_TAG, body, 16)
    if pos is not None:
        props.radius = SoundRadius(
            inner_radius=read_f32(payload, pos),
            outer_radius=read_f32(payload, pos + 4),
            inner_falloff=read_f32(payload, pos + 8),
            outer_falloff=read_f32(payload, pos + 12),
        )

    pos = _sub_record(payload, SOUND_PITCH_TAG, body, 4)
    if pos is not None:
        props.pitch = read_f32(payload, pos)

    pos = _sub_record(payload, SOUND_SECTOR_TAG, body, 1)
    if pos is not None:
        props.sector = read_string_at(payload, pos)

    # Loop is a flag record with no fields
    props.loop = find_first(payload, SOUND_LOOP_TAG, body) != -1
    return props


def decode_occluder_props(payload: bytes, name: str) -> OccluderProps:
    props = OccluderProps(standard=decode_standard_props(payload, name))
    node = find_first(payload, OCCLUDER_TAG)
    if node == -1 or node + SUB_RECORD_HEADER_SIZE + 4 > len(payload):
        return props

    offset = node + SUB_RECORD_HEADER_SIZE
    props.vertices_count = read_u32(payload, offset)
    offset += 4
    for _ in range(props.vertices_count):
        if offset + 12 > len(payload):
            break
        props.vertices.append(Vector3(
            read_f32(payload, offset),
            read_f32(payload, offset + 4),
            read_f32(payload, offset + 8),
        ))
        offset += 12

    if offset + 4 > len(payload):
        return props
    props.triangles_count = read_u32(payload, offset)
    offset += 4
    for _ in range(props.triangles_count):
        if offset + 6 > len(payload):
            break
        props.triangles.append(Triangle(
            read_u16(payload, offset),
            read_u16(payload, offset + 2),
            read_u16(payload, offset + 4),
        ))
        offset += 6

    return props


def decode_camera_props(payload: bytes, name: str) -> CameraProps:
    props = CameraProps(standard=decode_standard_props(payload, name))
    pos = _sub_record(payload, CAMERA_FOV_TAG, 0, 4)
    if pos is not None:
        props.fov = read_f32(payload, pos)
    return props


def decode_sector_props(payload: bytes, name: str) -> SectorProps:
    props = SectorProps(standard=decode_standard_props(payload, name))
    pos = _sub_record(payload, SECTOR_TAG, 0, 4)
    if pos is not None:
        props.unknown0 = read_f32(payload, pos)
    return props


# =============================================================================
# Definitions and scripts
# =============================================================================

def decode_enemy_props(payload: bytes, name: str) -> EnemyProps:
    marker = find_first(payload, ENEMY_MARKER)
    data_begin = marker + len(ENEMY_MARKER) if marker != -1 else 0
    if len(payload) < data_begin + ENEMY_MIN_LENGTH:
        return EnemyProps(data_begin=data_begin)

    values = {
        field: read_f32(payload, data_begin + offset)
        for field, offset in ENEMY_FLOAT_OFFSETS.items()
    }
    energy = EnemyEnergy(**{field: values.pop(field) for field in ENEMY_ENERGY_FIELDS})
    return EnemyProps(
        data_begin=data_begin,
        energy=energy,
        behavior1=read_u8(payload, data_begin + ENEMY_BYTE_OFFSETS["behavior1"]),
        voice=read_u8(payload, data_begin + ENEMY_BYTE_OFFSETS["voice"]),
        script=extract_script(payload, name, ChunkType.ENEMY),
        **values,
    )


def decode_script_props(payload: bytes, name: str) -> ScriptProps:
    return ScriptProps(
        standard=decode_standard_props(payload, name),
        script=extract_script(payload, name, ChunkType.SCRIPT),
    )


def decode_init_script_props(payload: bytes, name: str) -> InitScriptProps:
    return InitScriptProps(script=extract_script(payload, name, ChunkType.INIT_SCRIPT))


# =============================================================================
# Dispatch
# =============================================================================

Decoder = Callable[[bytes, str], ChunkProps]

DECODERS: dict[ChunkType, Decoder] = {
    ChunkType.HEADER: decode_header_props,
    ChunkType.STANDARD: decode_standard_props,
    ChunkType.MODEL: decode_model_props,
    ChunkType.ENEMY: decode_enemy_props,
    ChunkType.LIGHT: decode_light_props,
    ChunkType.SOUND: decode_sound_props,
    ChunkType.OCCLUDER: decode_occluder_props,
    ChunkType.CAMERA: decode_camera_props,
    ChunkType.SECTOR: decode_sector_props,
    ChunkType.SCRIPT: decode_script_props,
    ChunkType.INIT_SCRIPT: decode_init_script_props,
}


def decode_props(chunk_type: ChunkType, payload: bytes, name: str) -> ChunkProps | None:
    """Property record for a chunk type, None for types without a decoder."""
    decoder = DECODERS.get(chunk_type)
    if decoder is None:
        return None
    return decoder(payload, name)
