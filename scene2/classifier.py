"""
Scene2 Classifier - Recovers a chunk's type and display name from its payload.

The format carries no schema, so the type is sniffed from byte signatures:
definition signatures first, object signatures only when no definition
signature matched.
"""

from __future__ import annotations

from scene2.codec import decode_text, find_first, read_cstring, read_u8
from scene2.spec import (
    ChunkType,
    DEFINITION_SIGNATURE_PREFIX,
    DEFINITION_SIGNATURES,
    GROUPED_OBJECT_KIND_BYTE,
    INIT_SCRIPT_KIND_BYTE,
    INIT_SCRIPT_NAME_LENGTH_OFFSET,
    INIT_SCRIPT_NAME_OFFSET,
    KIND_BYTE_OFFSET,
    LMAP_SIGNATURE,
    MAX_OBJECT_NAME_LENGTH,
    NAME_OFFSET_DEFAULT,
    NAME_OFFSET_STANDARD_LAYOUT,
    OBJECT_SIGNATURE_PREFIX,
    OBJECT_SIGNATURES,
    SECTOR_SIGNATURE,
    SIGNATURE_SCAN_LENGTH,
    STANDARD_LAYOUT_TYPES,
    unknown_name,
)


def _match_signature(
    payload: bytes,
    prefix: bytes,
    table: tuple[tuple[int, ChunkType], ...],
) -> ChunkType | None:
    head = payload[:SIGNATURE_SCAN_LENGTH]
    for selector, chunk_type in table:
        if find_first(head, prefix + bytes((selector,))) != -1:
            return chunk_type
    return None


def classify_definition(payload: bytes) -> ChunkType:
    """Definition-family type of a payload, or UNKNOWN."""
    if len(payload) <= KIND_BYTE_OFFSET:
        return ChunkType.UNKNOWN
    if payload[KIND_BYTE_OFFSET] == INIT_SCRIPT_KIND_BYTE:
        return ChunkType.INIT_SCRIPT
    matched = _match_signature(payload, DEFINITION_SIGNATURE_PREFIX, DEFINITION_SIGNATURES)
    return matched or ChunkType.UNKNOWN


def classify_object(payload: bytes) -> ChunkType:
    """Object-family type of a payload.

    Grouped objects (kind byte 0x10) are LMAP or Sector; everything else falls
    back to STANDARD when no object signature matches.
    """
    if len(payload) <= KIND_BYTE_OFFSET:
        return ChunkType.UNKNOWN
    if payload[KIND_BYTE_OFFSET] == GROUPED_OBJECT_KIND_BYTE:
        if find_first(payload, LMAP_SIGNATURE) != -1:
            return ChunkType.LMAP
        if find_first(payload, SECTOR_SIGNATURE) != -1:
            return ChunkType.SECTOR
        return ChunkType.UNKNOWN
    matched = _match_signature(payload, OBJECT_SIGNATURE_PREFIX, OBJECT_SIGNATURES)
    return matched or ChunkType.STANDARD


def classify(payload: bytes) -> ChunkType:
    chunk_type = classify_definition(payload)
    if chunk_type is ChunkType.UNKNOWN:
        chunk_type = classify_object(payload)
    return chunk_type


def chunk_name(chunk_type: ChunkType, payload: bytes, chunk_id: int) -> str:
    """Display name of a chunk; ``Unknown {id}`` when the payload is too short."""
    if not payload:
        return unknown_name(chunk_id)

    if chunk_type is ChunkType.INIT_SCRIPT:
        if len(payload) <= INIT_SCRIPT_NAME_LENGTH_OFFSET:
            return unknown_name(chunk_id)
        length = read_u8(payload, INIT_SCRIPT_NAME_LENGTH_OFFSET)
        if len(payload) < INIT_SCRIPT_NAME_OFFSET + length:
            return unknown_name(chunk_id)
        return decode_text(payload[INIT_SCRIPT_NAME_OFFSET:INIT_SCRIPT_NAME_OFFSET + length])

    if chunk_type is ChunkType.HEADER:
        return "Header"

    offset = NAME_OFFSET_STANDARD_LAYOUT if chunk_type in STANDARD_LAYOUT_TYPES else NAME_OFFSET_DEFAULT
    if len(payload) < offset:
        return unknown_name(chunk_id)
    return read_cstring(payload[offset:offset + MAX_OBJECT_NAME_LENGTH])
