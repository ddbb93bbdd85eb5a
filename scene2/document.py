"""
Scene2 Document - In-memory representation of a scene file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from scene2.codec import read_u32
from scene2.props import ChunkProps
from scene2.spec import ChunkType, NodeKind


@dataclass
class Scene2Chunk:
    """One object / definition / init-script record.

    ``raw_data`` is the live payload (everything after the 2-byte id, the
    4-byte length field included) and is what gets written back.
    ``raw_data_backup`` is the payload as read, never touched by edits.
    """
    id_bytes: bytes
    raw_data: bytearray
    raw_data_backup: bytes = b""
    kind: NodeKind = NodeKind.UNKNOWN
    type: ChunkType = ChunkType.UNKNOWN
    id: int = 0
    name: str = ""
    props: ChunkProps | None = None
    next_position: int = 0   # buffer offset right after this chunk (populated on read)

    def __post_init__(self) -> None:
        # Live and backup buffers never alias
        self.raw_data = bytearray(self.raw_data)
        self.raw_data_backup = bytes(self.raw_data_backup or self.raw_data)

    @property
    def declared_length(self) -> int:
        """Length field as stored in the payload (id + length field + body)."""
        return read_u32(self.raw_data, 0)

    @property
    def size(self) -> int:
        """Bytes this chunk occupies when written."""
        return len(self.id_bytes) + len(self.raw_data)

    @property
    def is_modified(self) -> bool:
        return bytes(self.raw_data) != self.raw_data_backup

    def redecode(self) -> ChunkProps | None:
        """Re-run the property decoder for this chunk's type over raw_data."""
        from scene2.decoders import decode_props
        self.props = decode_props(self.type, bytes(self.raw_data), self.name)
        return self.props

    def revert(self) -> None:
        """Drop edits: restore raw_data from the backup and re-decode."""
        self.raw_data = bytearray(self.raw_data_backup)
        self.redecode()

    def __repr__(self) -> str:
        return f"Scene2Chunk(id={self.id}, type={self.type.value}, name={self.name!r})"


@dataclass
class Scene2Section:
    """A marker-delimited run of chunks of one kind."""
    position: int
    name: str
    kind: NodeKind
    start: int = 0
    length: int = 0
    id_bytes: bytes = b""
    chunks: list[Scene2Chunk] = field(default_factory=list)

    @property
    def end(self) -> int:
        return self.start + self.length

    def get_chunk(self, name: str) -> Scene2Chunk | None:
        for chunk in self.chunks:
            if chunk.name == name:
                return chunk
        return None

    def __len__(self) -> int:
        return len(self.chunks)


@dataclass
class Scene2Header:
    """Prologue of the file. ``size`` is kept as read and never recomputed."""
    magic: bytes = b""
    size: bytes = b""
    content: Scene2Chunk | None = None

    @property
    def declared_size(self) -> int:
        return read_u32(self.size, 0)


@dataclass
class Scene2Document:
    """
    In-memory representation of a scene file.

    Usage:
        doc = Scene2Reader.parse(data)
        chunk = doc.find_chunk("Tommy")
        update_standard_props(chunk, position_x=12.5)
        data = doc.to_bytes()
    """

    header: Scene2Header = field(default_factory=Scene2Header)

    # Ordered sections, file order
    sections: list[Scene2Section] = field(default_factory=list)

    # Diagnostics produced while parsing, in order
    logs: list[str] = field(default_factory=list)

    def get_section(self, name: str) -> Scene2Section | None:
        """First section with the given label."""
        for s in self.sections:
            if s.name == name:
                return s
        return None

    def get_sections(self, kind: NodeKind) -> list[Scene2Section]:
        return [s for s in self.sections if s.kind == kind]

    def iter_chunks(self) -> Iterator[Scene2Chunk]:
        for section in self.sections:
            yield from section.chunks

    def find_chunk(self, name: str) -> Scene2Chunk | None:
        """First chunk with the given name, in file order."""
        for chunk in self.iter_chunks():
            if chunk.name == name:
                return chunk
        return None

    @property
    def chunk_count(self) -> int:
        return sum(len(s.chunks) for s in self.sections)

    @property
    def is_empty(self) -> bool:
        return self.header.content is None and not self.sections

    def write(self, path: str) -> int:
        """Write this document to a scene file. Returns bytes written."""
        from scene2.writer import Scene2Writer
        return Scene2Writer.write(self, path)

    def to_bytes(self) -> bytes:
        """Serialize this document to bytes."""
        from scene2.writer import Scene2Writer
        return Scene2Writer.serialize(self)

    def __repr__(self) -> str:
        sec_names = [s.name for s in self.sections]
        return f"Scene2Document(sections={sec_names}, chunks={self.chunk_count})"
