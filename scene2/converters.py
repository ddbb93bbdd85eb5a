"""
Scene2 Converters - JSON, CSV and TXT views of a scene document.

  - to_json / from_json   (lossless: raw payloads travel as hex)
  - to_csv                (one row per chunk)
  - to_txt                (human-readable dump)
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import asdict
from typing import Any

from scene2.document import Scene2Chunk, Scene2Document, Scene2Header, Scene2Section
from scene2.spec import ChunkType, NodeKind

FORMAT_TAG = "scene2"


# =============================================================================
# JSON
# =============================================================================

def _chunk_to_dict(chunk: Scene2Chunk) -> dict[str, Any]:
    return {
        "id": chunk.id,
        "id_bytes": chunk.id_bytes.hex(),
        "type": chunk.type.value,
        "name": chunk.name,
        "props": asdict(chunk.props) if chunk.props is not None else None,
        "raw": bytes(chunk.raw_data).hex(),
    }


def to_dict(doc: Scene2Document) -> dict[str, Any]:
    header = doc.header
    data: dict[str, Any] = {
        "format": FORMAT_TAG,
        "header": None,
        "sections": [],
    }
    if header.content is not None:
        data["header"] = {
            "magic": header.magic.hex(),
            "size": header.size.hex(),
            "props": asdict(header.content.props) if header.content.props is not None else None,
            "raw": bytes(header.content.raw_data).hex(),
        }
    for section in doc.sections:
        data["sections"].append({
            "position": section.position,
            "name": section.name,
            "kind": section.kind.value,
            "id_bytes": section.id_bytes.hex(),
            "start": section.start,
            "length": section.length,
            "chunks": [_chunk_to_dict(c) for c in section.chunks],
        })
    return data


def to_json(doc: Scene2Document, indent: int = 2) -> str:
    """Convert a scene document to a JSON string."""
    return json.dumps(to_dict(doc), indent=indent, ensure_ascii=False)


def _hex_field(obj: dict[str, Any], key: str, where: str) -> bytes:
    value = obj.get(key, "")
    if not isinstance(value, str):
        raise ValueError(f"Invalid scene JSON: {where}.{key} must be a hex string")
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise ValueError(f"Invalid scene JSON: {where}.{key} is not valid hex") from None


def from_json(json_str: str) -> Scene2Document:
    """Rebuild a scene document from to_json output.

    Only the raw bytes are trusted: types, names and props are recomputed from
    them, so hand-edited props in the JSON are ignored.
    """
    from scene2.reader import build_chunk, build_unknown_chunk

    data = json.loads(json_str)
    if not isinstance(data, dict):
        raise ValueError("Invalid scene JSON: expected a JSON object at top level")

    doc = Scene2Document()

    header = data.get("header")
    if header is not None:
        if not isinstance(header, dict):
            raise ValueError("Invalid scene JSON: 'header' must be a JSON object")
        content = Scene2Chunk(
            id_bytes=b"",
            raw_data=bytearray(_hex_field(header, "raw", "header")),
            kind=NodeKind.HEADER,
            type=ChunkType.HEADER,
            name="Header",
        )
        content.redecode()
        doc.header = Scene2Header(
            magic=_hex_field(header, "magic", "header"),
            size=_hex_field(header, "size", "header"),
            content=content,
        )

    sections = data.get("sections", [])
    if not isinstance(sections, list):
        raise ValueError("Invalid scene JSON: 'sections' must be a JSON array")

    for index, entry in enumerate(sections):
        where = f"sections[{index}]"
        if not isinstance(entry, dict):
            raise ValueError(f"Invalid scene JSON: {where} must be a JSON object")
        try:
            kind = NodeKind(entry.get("kind", NodeKind.UNKNOWN.value))
        except ValueError:
            raise ValueError(f"Invalid scene JSON: {where}.kind is not a known kind") from None
        section = Scene2Section(
            position=index,
            name=str(entry.get("name", "")),
            kind=kind,
            start=int(entry.get("start", 0)),
            length=int(entry.get("length", 0)),
            id_bytes=_hex_field(entry, "id_bytes", where),
        )
        chunks = entry.get("chunks", [])
        if not isinstance(chunks, list):
            raise ValueError(f"Invalid scene JSON: {where}.chunks must be a JSON array")
        for chunk_index, chunk_entry in enumerate(chunks):
            chunk_where = f"{where}.chunks[{chunk_index}]"
            if not isinstance(chunk_entry, dict):
                raise ValueError(f"Invalid scene JSON: {chunk_where} must be a JSON object")
            id_bytes = _hex_field(chunk_entry, "id_bytes", chunk_where)
            raw = _hex_field(chunk_entry, "raw", chunk_where)
            if kind is NodeKind.UNKNOWN:
                section.chunks.append(build_unknown_chunk(id_bytes, raw, chunk_index))
            else:
                section.chunks.append(build_chunk(id_bytes, raw, chunk_index, kind))
        doc.sections.append(section)

    return doc


# =============================================================================
# CSV
# =============================================================================

def to_csv(doc: Scene2Document) -> str:
    """One row per chunk: section, id, type, name, size and placement."""
    from scene2.props import standard_of

    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow([
        "section", "kind", "id", "type", "name", "size",
        "position_x", "position_y", "position_z",
    ])
    for section in doc.sections:
        for chunk in section.chunks:
            standard = standard_of(chunk.props)
            placement = (
                [standard.position_x, standard.position_y, standard.position_z]
                if standard is not None else ["", "", ""]
            )
            writer.writerow([
                section.name, section.kind.value, chunk.id, chunk.type.value,
                chunk.name, chunk.size, *placement,
            ])
    return buf.getvalue()


# =============================================================================
# TXT
# =============================================================================

def to_txt(doc: Scene2Document) -> str:
    """Convert to a plain-text listing."""
    lines = []
    content = doc.header.content
    if content is not None and content.props is not None:
        props = content.props
        lines.append("=== HEADER ===")
        lines.append(f"title: {getattr(props, 'text', '')}")
        for key in ("view_distance", "camera_distance", "near_clipping", "far_clipping"):
            lines.append(f"{key}: {getattr(props, key, 0.0)}")
        lines.append("")
    for section in doc.sections:
        lines.append(f"=== {section.name.upper()} ({section.kind.value}, {len(section.chunks)} chunks) ===")
        for chunk in section.chunks:
            lines.append(f"[{chunk.id}] {chunk.type.value}: {chunk.name}")
        lines.append("")
    return "\n".join(lines)


# =============================================================================
# Generic convert
# =============================================================================

def convert_to(doc: Scene2Document, fmt: str) -> str:
    """Convert a scene document to the specified format."""
    converters = {
        "json": to_json,
        "csv": to_csv,
        "txt": to_txt,
    }
    fn = converters.get(fmt)
    if fn is None:
        raise ValueError(f"Unknown format: {fmt!r}. Supported: {', '.join(converters)}")
    return fn(doc)


def convert_from(data: str, fmt: str) -> Scene2Document:
    """Convert from the specified format to a scene document."""
    if fmt != "json":
        raise ValueError(f"Unknown format: {fmt!r}. Supported: json")
    return from_json(data)
