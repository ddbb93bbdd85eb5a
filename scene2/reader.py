"""
Scene2 Reader - Recovers a Scene2Document from a raw scene buffer.

Scanning runs in two stages:
  1. Header scan: skip the fixed prologue, walk past the embedded title, skip
     the fixed block after it, then look for the 00 40 terminator.
  2. Section / chunk scan: chunk markers of the current section are decoded
     one chunk at a time; once the cursor reaches the section end, a section
     marker opens the next known section and anything else is kept as an
     Unknown section walked by declared lengths.

Tolerance:
  - Truncated chunks and sections are skipped, never raised on
  - Unrecognized bytes are stepped over one at a time
  - The only failure is a cursor that stops moving (Scene2CorruptionError)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from scene2.classifier import chunk_name, classify
from scene2.codec import read_u32
from scene2.document import Scene2Chunk, Scene2Document, Scene2Header, Scene2Section
from scene2.spec import (
    CHUNK_HEADER_SIZE,
    CHUNK_MARKERS,
    ChunkType,
    HEADER_CONTENT_START,
    HEADER_MAGIC_SLICE,
    HEADER_POST_TEXT_SKIP,
    HEADER_PROLOGUE_SIZE,
    HEADER_SIZE_SLICE,
    HEADER_TERMINATOR,
    ID_LEN,
    MAX_FILE_SIZE,
    NodeKind,
    OBJECTS_SECTION_LABEL,
    OBJECTS_SECTION_LOG,
    SECTION_HEADER_SIZE,
    SECTION_MARKERS,
    unknown_name,
)

logger = logging.getLogger(__name__)

LogSink = Callable[[str], None]


class Scene2CorruptionError(ValueError):
    """The scanner stopped making progress: the file is corrupted."""

    def __init__(self, offset: int, last_chunk_name: str) -> None:
        self.offset = offset
        self.last_chunk_name = last_chunk_name
        super().__init__(
            f"File corrupted near 0x{offset:X} position. "
            f"Last object loaded: {last_chunk_name}"
        )


# =============================================================================
# Chunk and section building blocks
# =============================================================================

def build_chunk(
    id_bytes: bytes,
    payload: bytes,
    chunk_id: int,
    kind: NodeKind,
    next_position: int = 0,
) -> Scene2Chunk:
    """Classify, name and decode a payload into a chunk."""
    chunk_type = classify(payload)
    chunk = Scene2Chunk(
        id_bytes=bytes(id_bytes),
        raw_data=bytearray(payload),
        raw_data_backup=bytes(payload),
        kind=kind,
        type=chunk_type,
        id=chunk_id,
        name=chunk_name(chunk_type, payload, chunk_id),
        next_position=next_position,
    )
    chunk.redecode()
    return chunk


def build_unknown_chunk(
    id_bytes: bytes,
    payload: bytes,
    chunk_id: int,
    next_position: int = 0,
) -> Scene2Chunk:
    """Opaque chunk of an Unknown section: bytes kept, nothing decoded."""
    return Scene2Chunk(
        id_bytes=bytes(id_bytes),
        raw_data=bytearray(payload),
        raw_data_backup=bytes(payload),
        kind=NodeKind.UNKNOWN,
        type=ChunkType.UNKNOWN,
        id=chunk_id,
        name=unknown_name(chunk_id),
        next_position=next_position,
    )


def load_chunk(data: bytes, cursor: int, chunk_id: int, section: Scene2Section) -> Scene2Chunk | None:
    """Decode the chunk starting at cursor and append it to section.

    The length field counts the whole chunk, so the payload (length field
    included) is ``length - 2`` bytes. Returns None, appending nothing, when the
    declared length is malformed or runs past the buffer.
    """
    if cursor + CHUNK_HEADER_SIZE > len(data):
        return None
    declared = read_u32(data, cursor + ID_LEN)
    if declared < CHUNK_HEADER_SIZE or cursor + declared > len(data):
        return None

    chunk = build_chunk(
        data[cursor:cursor + ID_LEN],
        data[cursor + ID_LEN:cursor + declared],
        chunk_id,
        section.kind,
        next_position=cursor + declared,
    )
    section.chunks.append(chunk)
    return chunk


def open_known_section(
    data: bytes, cursor: int, position: int, name: str, kind: NodeKind,
) -> Scene2Section | None:
    """Section at cursor whose chunks the scanner appends as it finds them."""
    if cursor + SECTION_HEADER_SIZE > len(data):
        return None
    return Scene2Section(
        position=position,
        name=name,
        kind=kind,
        start=cursor,
        length=read_u32(data, cursor + ID_LEN),
        id_bytes=data[cursor:cursor + ID_LEN],
    )


def open_unknown_section(data: bytes, cursor: int, position: int) -> Scene2Section | None:
    """Section with an unrecognized marker, walked eagerly by declared lengths.

    Stops at the first chunk whose header or body does not fit, without error.
    """
    if cursor + SECTION_HEADER_SIZE > len(data):
        return None
    section = Scene2Section(
        position=position,
        name=unknown_name(position),
        kind=NodeKind.UNKNOWN,
        start=cursor,
        length=read_u32(data, cursor + ID_LEN),
        id_bytes=data[cursor:cursor + ID_LEN],
    )

    consumed = SECTION_HEADER_SIZE
    local = cursor + SECTION_HEADER_SIZE
    chunk_id = 0
    while consumed < section.length and local < len(data):
        if local + CHUNK_HEADER_SIZE > len(data):
            break
        declared = read_u32(data, local + ID_LEN)
        if declared < CHUNK_HEADER_SIZE or local + declared > len(data):
            break
        section.chunks.append(build_unknown_chunk(
            data[local:local + ID_LEN],
            data[local + ID_LEN:local + declared],
            chunk_id,
            next_position=local + declared,
        ))
        consumed += declared
        local += declared
        chunk_id += 1

    return section


def scan_header(data: bytes) -> int | None:
    """Offset of the 00 40 header terminator, None if the header never closes."""
    cursor = HEADER_PROLOGUE_SIZE
    text_end = data.find(b"\x00", cursor) if cursor < len(data) else -1
    if text_end == -1:
        return None
    cursor = text_end + HEADER_POST_TEXT_SKIP
    if cursor >= len(data):
        return None
    terminator = data.find(HEADER_TERMINATOR, cursor)
    if terminator == -1:
        return None
    return terminator


# =============================================================================
# Reader
# =============================================================================

class _SceneScan:
    """State of one parse: cursor, current section and chunk counter."""

    def __init__(self, data: bytes, on_log: LogSink | None) -> None:
        self.data = data
        self.on_log = on_log
        self.doc = Scene2Document()
        self.section: Scene2Section | None = None
        self.position = 0

    def log(self, message: str) -> None:
        self.doc.logs.append(message)
        logger.info(message)
        if self.on_log is not None:
            self.on_log(message)

    def add_section(self, section: Scene2Section | None) -> Scene2Section | None:
        if section is not None:
            self.doc.sections.append(section)
            self.section = section
            self.position += 1
        return section

    def last_chunk_name(self) -> str:
        if self.section is not None and self.section.chunks:
            return self.section.chunks[-1].name or "unknown"
        return "unknown"

    def read_header(self) -> int | None:
        """Close the header; returns where section scanning resumes."""
        data = self.data
        self.log("Loading header...")
        terminator = scan_header(data)
        if terminator is None:
            return None

        content = bytes(data[HEADER_CONTENT_START:terminator])
        header_chunk = Scene2Chunk(
            id_bytes=b"",
            raw_data=bytearray(content),
            raw_data_backup=content,
            kind=NodeKind.HEADER,
            type=ChunkType.HEADER,
            name="Header",
        )
        header_chunk.redecode()
        self.doc.header = Scene2Header(
            magic=bytes(data[HEADER_MAGIC_SLICE]),
            size=bytes(data[HEADER_SIZE_SLICE]),
            content=header_chunk,
        )

        self.log(OBJECTS_SECTION_LOG)
        self.add_section(open_known_section(
            data, terminator, self.position, OBJECTS_SECTION_LABEL, NodeKind.OBJECT,
        ))
        return terminator + SECTION_HEADER_SIZE

    def run(self) -> Scene2Document:
        data = self.data
        cursor = self.read_header()
        if cursor is None:
            return self.doc

        chunk_id = 0
        previous: int | None = None
        while cursor < len(data):
            if cursor == previous and cursor != 0:
                raise Scene2CorruptionError(cursor, self.last_chunk_name())
            previous = cursor

            section = self.section
            marker = bytes(data[cursor:cursor + ID_LEN])

            if section is not None and marker in CHUNK_MARKERS[section.kind]:
                chunk = load_chunk(data, cursor, chunk_id, section)
                if chunk is not None:
                    cursor = chunk.next_position
                    chunk_id += 1
                continue

            if section is not None and cursor >= section.end:
                chunk_id = 0
                known = SECTION_MARKERS.get(marker)
                if known is not None:
                    kind, label, message = known
                    self.log(message)
                    opened = self.add_section(open_known_section(data, cursor, self.position, label, kind))
                    if opened is not None:
                        cursor += SECTION_HEADER_SIZE
                        continue
                else:
                    opened = self.add_section(open_unknown_section(data, cursor, self.position))
                    if opened is not None:
                        self.log(f"Loading unknown section {opened.position}...")
                        cursor = opened.chunks[-1].next_position if opened.chunks else cursor + SECTION_HEADER_SIZE
                        continue

            cursor += 1

        return self.doc


class Scene2Reader:
    """
    Scene2 file reader.

    Usage:
        doc = Scene2Reader.parse(data)
        doc = Scene2Reader.read("scene2.bin")

        # Watch progress as it happens
        doc = Scene2Reader.parse(data, on_log=print)
    """

    @classmethod
    def parse(cls, data: bytes, on_log: LogSink | None = None) -> Scene2Document:
        """Parse a scene buffer into a Scene2Document.

        Never fails on short or malformed input except when the scan stops
        making progress, which raises Scene2CorruptionError.
        """
        return _SceneScan(bytes(data), on_log).run()

    @classmethod
    def read(
        cls,
        path: str | Path,
        max_size: int = MAX_FILE_SIZE,
        on_log: LogSink | None = None,
    ) -> Scene2Document:
        """Read and parse a scene file."""
        path = Path(path)
        file_size = path.stat().st_size
        if file_size > max_size:
            raise ValueError(
                f"File size {file_size} exceeds maximum {max_size} bytes. "
                f"Pass max_size= to override."
            )
        return cls.parse(path.read_bytes(), on_log=on_log)
