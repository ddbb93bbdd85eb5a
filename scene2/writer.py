"""
Scene2 Writer - Serializes Scene2Document back to scene bytes.

Layout rules:
  - Header: magic + size (as read, never recomputed) + header content bytes
  - Each section: id + length placeholder, then its chunks, then the length
    is backpatched with the section's full size (its own 6-byte header included)
  - Each chunk: id + freshly computed length + payload body. The length field
    lives at the front of the payload and is refreshed in place, so declared
    lengths always match what is written, edited or not.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from scene2.codec import write_u32
from scene2.spec import LENGTH_FIELD_SIZE

if TYPE_CHECKING:
    from scene2.document import Scene2Chunk, Scene2Document


class Scene2Writer:

    @staticmethod
    def frame_chunk(chunk: Scene2Chunk) -> bytes:
        """On-disk bytes of one chunk with its length field recomputed."""
        length = len(chunk.raw_data) + len(chunk.id_bytes)
        return chunk.id_bytes + write_u32(length) + bytes(chunk.raw_data[LENGTH_FIELD_SIZE:])

    @staticmethod
    def serialize(doc: Scene2Document) -> bytes:
        """Serialize a Scene2Document to bytes. Pure: does not mutate the input document."""
        out = io.BytesIO()

        header = doc.header
        if header.content is not None:
            out.write(header.magic)
            out.write(header.size)
            out.write(bytes(header.content.raw_data))

        for section in doc.sections:
            section_start = out.tell()
            out.write(section.id_bytes)
            length_pos = out.tell()
            out.write(b"\x00" * LENGTH_FIELD_SIZE)

            for chunk in section.chunks:
                out.write(Scene2Writer.frame_chunk(chunk))

            section_end = out.tell()
            out.seek(length_pos)
            out.write(write_u32(section_end - section_start))
            out.seek(section_end)

        return out.getvalue()

    @staticmethod
    def write(doc: Scene2Document, path: str, mode: int = 0o644) -> int:
        """Write a Scene2Document to a file atomically. Returns bytes written.

        Uses write-to-temp-then-rename so the target is never left half written.
        """
        import os
        import tempfile
        data = Scene2Writer.serialize(doc)
        dir_name = os.path.dirname(os.path.abspath(path)) or "."
        fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=".bin.tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return len(data)
