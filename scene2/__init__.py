"""
Scene2 - Reader, editor and writer for scene2.bin mission files.

Parses the header, object, definition and init-script sections of a scene,
decodes per-type properties and writes the bytes back out unchanged unless
edited.
"""

__version__ = "0.1.0"

from scene2.spec import NodeKind, ChunkType, MAX_OBJECT_NAME_LENGTH
from scene2.document import Scene2Document, Scene2Section, Scene2Chunk, Scene2Header
from scene2.reader import Scene2Reader, Scene2CorruptionError
from scene2.writer import Scene2Writer


def parse(data, on_log=None) -> Scene2Document:
    """Parse scene bytes. Shortcut for Scene2Reader.parse."""
    return Scene2Reader.parse(data, on_log=on_log)


def serialize(doc: Scene2Document) -> bytes:
    """Serialize a document. Shortcut for Scene2Writer.serialize."""
    return Scene2Writer.serialize(doc)
