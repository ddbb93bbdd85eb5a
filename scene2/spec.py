"""
Scene2 Format Specification
===========================

Layout:
    <magic:2> <size:4>                    <- Header prologue (size is never recomputed)
    <header bytes ...> 00 40              <- Free-text title, camera/clip floats; ends at 00 40
    00 40 <len:4> <chunk> <chunk> ...     <- Objects section (chunks start with 10 40)
    20 AE <len:4> <chunk> <chunk> ...     <- Object definitions (chunks start with 21 AE / 51 AE)
    50 AE <len:4> <chunk> <chunk> ...     <- Init scripts (chunks start with 51 AE)
    XX XX <len:4> <chunk> <chunk> ...     <- Anything else is kept as an Unknown section

Chunk:
    <id:2> <len:4> <body ...>
    len counts the whole chunk (id + len field + body). A chunk's raw data is
    everything after the id (len field included), so every payload offset below
    is relative to the byte that follows the id.

Design Decisions:
    - No fixed schema: chunk types are recovered by sniffing byte signatures
    - Unrecognized data is never dropped, only left undecoded
    - All multi-byte integers/floats are little-endian 32-bit
    - Names are single-byte text, at most MAX_OBJECT_NAME_LENGTH bytes

Known fragility:
    Sub-record lookup searches raw payload bytes for 2-byte tags without skipping
    already consumed regions, so a tag pattern embedded in unrelated data (a
    float, a name) can be picked up first. This is how the format is read.
"""

from __future__ import annotations

from enum import Enum

# Identifier length of every section and chunk
ID_LEN = 2
LENGTH_FIELD_SIZE = 4
SECTION_HEADER_SIZE = ID_LEN + LENGTH_FIELD_SIZE
CHUNK_HEADER_SIZE = ID_LEN + LENGTH_FIELD_SIZE

MAX_OBJECT_NAME_LENGTH = 50

# Header scanning
HEADER_PROLOGUE_SIZE = 16
HEADER_POST_TEXT_SKIP = 68
HEADER_TERMINATOR = b"\x00\x40"
HEADER_MAGIC_SLICE = slice(0, 2)
HEADER_SIZE_SLICE = slice(2, 6)
HEADER_CONTENT_START = 6

# Safety limits (file helpers only, parse itself takes any buffer)
MAX_FILE_SIZE = 256 * 1024 * 1024


class NodeKind(str, Enum):
    """What a section (and every chunk inside it) holds."""

    OBJECT = "Object"
    DEFINITION = "Definition"
    INIT_SCRIPT = "InitScript"
    HEADER = "Header"
    UNKNOWN = "Unknown"


class ChunkType(str, Enum):
    """Fine-grained classification of a chunk."""

    UNKNOWN = "Unknown"
    HEADER = "Header"
    MOVABLE_BRIDGE = "MovableBridge"
    CAR = "Car"
    SCRIPT = "Script"
    INIT_SCRIPT = "InitScript"
    PHYSICAL_OBJECT = "PhysicalObject"
    DOOR = "Door"
    TRAM = "Tram"
    GAS_STATION = "GasStation"
    PEDESTRIAN_SETUP = "PedestrianSetup"
    ENEMY = "Enemy"
    PLANE = "Plane"
    PLAYER = "Player"
    TRAFFIC_SETUP = "TrafficSetup"
    LMAP = "LMAP"
    SECTOR = "Sector"
    STANDARD = "Standard"
    OCCLUDER = "Occluder"
    MODEL = "Model"
    SOUND = "Sound"
    CAMERA = "Camera"
    CITY_MUSIC = "CityMusic"
    LIGHT = "Light"
    CLOCK = "Clock"
    WAGON = "Wagon"
    ROUTE = "Route"
    GHOST_OBJECT = "GhostObject"
    ZIDLE = "Zidle"


# Section-start markers seen once the current section has ended.
# marker -> (kind, label, log message)
SECTION_MARKERS: dict[bytes, tuple[NodeKind, str, str]] = {
    b"\x20\xae": (NodeKind.DEFINITION, "Object definitions", "Loading object definitions..."),
    b"\x50\xae": (NodeKind.INIT_SCRIPT, "Init scripts", "Loading init scripts..."),
}

OBJECTS_SECTION_LABEL = "Objects"
OBJECTS_SECTION_LOG = "Loading objects..."

# Chunk-start markers accepted inside a section of the given kind
CHUNK_MARKERS: dict[NodeKind, frozenset[bytes]] = {
    NodeKind.OBJECT: frozenset({b"\x10\x40"}),
    NodeKind.DEFINITION: frozenset({b"\x21\xae", b"\x51\xae"}),
    NodeKind.INIT_SCRIPT: frozenset({b"\x51\xae"}),
    NodeKind.UNKNOWN: frozenset(),
}

# Classification reads this many leading payload bytes for signatures
SIGNATURE_SCAN_LENGTH = 20 + MAX_OBJECT_NAME_LENGTH

# Payload byte that selects the classification branch
KIND_BYTE_OFFSET = 4
INIT_SCRIPT_KIND_BYTE = 0x01
GROUPED_OBJECT_KIND_BYTE = 0x10

DEFINITION_SIGNATURE_PREFIX = b"\x22\xae\x0a\x00\x00\x00"
OBJECT_SIGNATURE_PREFIX = b"\x11\x40\x0a\x00\x00\x00"

# Definition dispatch table, searched in this order
DEFINITION_SIGNATURES: tuple[tuple[int, ChunkType], ...] = (
    (0x04, ChunkType.CAR),
    (0x14, ChunkType.MOVABLE_BRIDGE),
    (0x05, ChunkType.SCRIPT),
    (0x23, ChunkType.PHYSICAL_OBJECT),
    (0x06, ChunkType.DOOR),
    (0x08, ChunkType.TRAM),
    (0x19, ChunkType.GAS_STATION),
    (0x12, ChunkType.PEDESTRIAN_SETUP),
    (0x1B, ChunkType.ENEMY),
    (0x16, ChunkType.PLANE),
    (0x02, ChunkType.PLAYER),
    (0x0C, ChunkType.TRAFFIC_SETUP),
    (0x22, ChunkType.CLOCK),
    (0x1E, ChunkType.WAGON),
    (0x18, ChunkType.ROUTE),
    (0x01, ChunkType.GHOST_OBJECT),
    (0x09, ChunkType.ZIDLE),
)

# Object dispatch table, searched in this order; no match means Standard
OBJECT_SIGNATURES: tuple[tuple[int, ChunkType], ...] = (
    (0x0C, ChunkType.OCCLUDER),
    (0x09, ChunkType.MODEL),
    (0x04, ChunkType.SOUND),
    (0x03, ChunkType.CAMERA),
    (0x0E, ChunkType.CITY_MUSIC),
    (0x02, ChunkType.LIGHT),
)

LMAP_SIGNATURE = b"LMAP"
SECTOR_SIGNATURE = b"\x01\xb4\xf2"

# Name offsets per family
NAME_OFFSET_DEFAULT = 10
NAME_OFFSET_STANDARD_LAYOUT = 20
INIT_SCRIPT_NAME_LENGTH_OFFSET = 5
INIT_SCRIPT_NAME_OFFSET = 9

STANDARD_LAYOUT_TYPES = frozenset({
    ChunkType.STANDARD,
    ChunkType.OCCLUDER,
    ChunkType.MODEL,
    ChunkType.SOUND,
    ChunkType.CAMERA,
    ChunkType.CITY_MUSIC,
    ChunkType.LIGHT,
})

# Standard fields, relative to dataBegin = STANDARD_DATA_PREFIX + len(name)
STANDARD_DATA_PREFIX = 23
STANDARD_FIELD_OFFSETS: dict[str, int] = {
    "position_x": 4,
    "position_y": 8,
    "position_z": 12,
    "rotation_x": 26,
    "rotation_y": 30,
    "rotation_z": 34,
    "scaling_x": 44,
    "scaling_y": 48,
    "scaling_z": 52,
}

# Model
MODEL_SECTOR_SEARCH_OFFSET = 76
MODEL_SECTOR_MARKER = b"\x00\x00\x00\x10\x00"
MODEL_SECTOR_NAME_OFFSET = 86
MODEL_NAME_AFTER_SECTOR_OFFSET = 93
MODEL_NAME_OFFSET = 80

# Enemy, relative to the byte after the 24 AE marker
ENEMY_MARKER = b"\x24\xae"
ENEMY_MIN_LENGTH = 77
ENEMY_FLOAT_OFFSETS: dict[str, int] = {
    "strength": 13,
    "energy": 17,
    "left_hand": 21,
    "right_hand": 25,
    "left_leg": 29,
    "right_leg": 33,
    "behavior2": 37,
    "speed": 41,
    "aggressivity": 45,
    "intelligence": 49,
    "shooting": 53,
    "sight": 57,
    "hearing": 61,
    "driving": 65,
    "mass": 69,
    "reactions": 73,
}
ENEMY_BYTE_OFFSETS: dict[str, int] = {
    "behavior1": 5,
    "voice": 9,
}
ENEMY_ENERGY_FIELDS = ("energy", "left_hand", "right_hand", "left_leg", "right_leg")

# Script text start, relative to the end of the name
SCRIPT_TEXT_OFFSETS: dict[ChunkType, int] = {
    ChunkType.SCRIPT: 41,
    ChunkType.INIT_SCRIPT: 13,
    ChunkType.ENEMY: 110,
}

# Sub-record tags. A sub-record is <tag:2> <len:4> <fields ...>
SUB_RECORD_HEADER_SIZE = 6

LIGHT_NODE_TAG = b"\x40\x40"
LIGHT_TYPE_TAG = b"\x41\x40"
LIGHT_COLOR_TAG = b"\x26\x00"
LIGHT_POWER_TAG = b"\x42\x40"
LIGHT_CONE_TAG = b"\x43\x40"
LIGHT_RADIUS_TAG = b"\x44\x40"
LIGHT_FLAGS_TAG = b"\x45\x40"
LIGHT_SECTOR_TAG = b"\x46\x40"
LIGHT_TYPES = {1: "Point", 2: "Spot", 3: "Directional", 4: "Ambient", 5: "Fog"}

SOUND_NODE_TAG = b"\x60\x40"
SOUND_TYPE_TAG = b"\x61\x40"
SOUND_VOLUME_TAG = b"\x62\x40"
SOUND_RADIUS_TAG = b"\x68\x40"
SOUND_PITCH_TAG = b"\x00\xb8"
SOUND_SECTOR_TAG = b"\x00\xb2"
SOUND_LOOP_TAG = b"\x66\x40"
SOUND_TYPES = {1: "Point", 3: "Ambient"}

OCCLUDER_TAG = b"\x83\x40"
CAMERA_FOV_TAG = b"\x10\x30"
SECTOR_TAG = b"\x01\xb4"

# Header fields, relative to the end of the header title text
HEADER_LENGTH_OFFSET = 2
HEADER_TEXT_OFFSET = 10
HEADER_FLOAT_OFFSETS: dict[str, int] = {
    "camera_distance": 50,
    "view_distance": 60,
    "near_clipping": 70,
    "far_clipping": 74,
}
HEADER_MIN_TAIL = 78


def unknown_name(index: int) -> str:
    """Placeholder name for a chunk or section that has none."""
    return f"Unknown {index}"
