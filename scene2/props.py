"""
Scene2 Props - Decoded property records, one variant per decodable chunk type.

Each record carries only what can be recovered for its type. Fields that
could not be read keep the defaults declared here; optional sub-record groups
are None when their tag is missing from the payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class Triangle:
    i0: int = 0
    i1: int = 0
    i2: int = 0


@dataclass
class Color:
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0


@dataclass
class HeaderProps:
    data_begin: int = 0
    header_length: int = 0
    text: str = ""
    view_distance: float = 0.0
    camera_distance: float = 0.0
    near_clipping: float = 0.0
    far_clipping: float = 0.0


@dataclass
class StandardProps:
    """Placement shared by every object laid out as type / name / transform."""
    data_begin: int = 0
    position_x: float = 0.0
    position_y: float = 0.0
    position_z: float = 0.0
    rotation_x: float = 0.0
    rotation_y: float = 0.0
    rotation_z: float = 0.0
    scaling_x: float = 0.0
    scaling_y: float = 0.0
    scaling_z: float = 0.0


@dataclass
class ModelProps:
    standard: StandardProps = field(default_factory=StandardProps)
    model: str = ""
    sector: str = ""
    have_sector: bool = False


@dataclass
class EnemyEnergy:
    energy: float = 0.0
    left_hand: float = 0.0
    right_hand: float = 0.0
    left_leg: float = 0.0
    right_leg: float = 0.0


@dataclass
class EnemyProps:
    data_begin: int = 0
    strength: float = 0.0
    energy: EnemyEnergy = field(default_factory=EnemyEnergy)
    behavior1: int = 0
    behavior2: float = 0.0
    speed: float = 0.0
    aggressivity: float = 0.0
    intelligence: float = 0.0
    shooting: float = 0.0
    sight: float = 0.0
    hearing: float = 0.0
    driving: float = 0.0
    mass: float = 0.0
    reactions: float = 0.0
    voice: int = 0
    script: str = ""


@dataclass
class LightCone:
    inner_angle: float = 0.0
    outer_angle: float = 0.0


@dataclass
class LightRadius:
    inner_radius: float = 0.0
    outer_radius: float = 0.0


@dataclass
class LightProps:
    standard: StandardProps = field(default_factory=StandardProps)
    light_type: str = "Unknown(0)"
    color: Color | None = None
    power: float = 0.0
    cone: LightCone | None = None
    radius: LightRadius | None = None
    flags: str = "0x0"
    sector: str = ""


@dataclass
class SoundRadius:
    inner_radius: float = 0.0
    outer_radius: float = 0.0
    inner_falloff: float = 0.0
    outer_falloff: float = 0.0


@dataclass
class SoundProps:
    standard: StandardProps = field(default_factory=StandardProps)
    sound_type: str = "Unknown(0)"
    volume: float = 0.0
    radius: SoundRadius | None = None
    pitch: float = 0.0
    sector: str = ""
    loop: bool = False


@dataclass
class OccluderProps:
    standard: StandardProps = field(default_factory=StandardProps)
    vertices_count: int = 0
    vertices: list[Vector3] = field(default_factory=list)
    triangles_count: int = 0
    triangles: list[Triangle] = field(default_factory=list)


@dataclass
class CameraProps:
    standard: StandardProps = field(default_factory=StandardProps)
    fov: float = 0.0


@dataclass
class SectorProps:
    # Only the first field after the sector node is known
    standard: StandardProps = field(default_factory=StandardProps)
    unknown0: float | None = None


@dataclass
class ScriptProps:
    standard: StandardProps = field(default_factory=StandardProps)
    script: str = ""


@dataclass
class InitScriptProps:
    script: str = ""


ChunkProps = Union[
    HeaderProps,
    StandardProps,
    ModelProps,
    EnemyProps,
    LightProps,
    SoundProps,
    OccluderProps,
    CameraProps,
    SectorProps,
    ScriptProps,
    InitScriptProps,
]


def standard_of(props: ChunkProps | None) -> StandardProps | None:
    """The placement group of a record, whichever variant carries it."""
    if isinstance(props, StandardProps):
        return props
    return getattr(props, "standard", None)
