"""
Geometry Forge: builds the physical description of every supported die.

Pipeline per die type:
    base solid -> chamfer -> render mesh (triangles, materials, UVs)
               -> label table + outward value-face normals
               -> collision hull (the unchamfered solid)

Descriptors are pure functions of the die type. They are built once for every
DieType member and kept in an enum-indexed table for the process lifetime.
"""

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from . import quaternion
from .chamfer import ChamferedSolid, chamfer
from .labels import DieLabelTable, corner_labels, single_labels, tens_labels
from .solids import BASE_SOLIDS, LABELS, SHAPE_PARAMS, BaseSolid, ShapeParams

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]
UV = Tuple[float, float]


class UnsupportedDieType(ValueError):
    """Raised when geometry is requested for a die type that does not exist."""
    pass


class DieType(Enum):
    """Every die the forge can build."""
    D4 = 'd4'
    D6 = 'd6'
    D8 = 'd8'
    D10 = 'd10'
    D12 = 'd12'
    D20 = 'd20'
    # Tens dice for compound rolls
    D60 = 'd60'
    D80 = 'd80'
    D100 = 'd100'

    @property
    def base(self) -> str:
        """Name of the base solid this die is built on."""
        return _TENS_BASES.get(self, self.value)

    @property
    def is_tens(self) -> bool:
        return self in _TENS_BASES

    @property
    def face_count(self) -> int:
        return BASE_SOLIDS[self.base].face_count

    @classmethod
    def from_name(cls, name: Union[str, 'DieType']) -> 'DieType':
        """
        Look up a die type by name ('d20', 'D20').

        Raises:
            UnsupportedDieType: If no such die exists
        """
        if isinstance(name, DieType):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise UnsupportedDieType(f"Unsupported die type: {name!r}") from None

    @classmethod
    def for_sides(cls, sides: int) -> 'DieType':
        """The plain (non-tens) die with this many sides."""
        die_type = cls.from_name(f"d{sides}")
        if die_type.is_tens:
            raise UnsupportedDieType(f"d{sides} is only rolled as part of a compound roll")
        return die_type


_TENS_BASES = {
    DieType.D60: 'd6',
    DieType.D80: 'd8',
    DieType.D100: 'd10',
}


@dataclass(frozen=True)
class RenderMesh:
    """
    Triangulated visual mesh.

    Attributes:
        vertices: Scaled vertex positions
        triangles: Vertex index triples
        materials: Per-triangle material; 0 is the blank bevel material,
                   k >= 1 is the label texture of value face k - 1
        uvs: Per-triangle texture coordinates, three per triangle
        material_labels: Printed text per material (index 0 is blank)
    """
    vertices: Tuple[Vec3, ...]
    triangles: Tuple[Tuple[int, int, int], ...]
    materials: Tuple[int, ...]
    uvs: Tuple[Tuple[UV, UV, UV], ...]
    material_labels: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'vertices': [list(v) for v in self.vertices],
            'triangles': [list(t) for t in self.triangles],
            'materials': list(self.materials),
            'uvs': [[list(uv) for uv in tri] for tri in self.uvs],
            'material_labels': list(self.material_labels),
        }


@dataclass(frozen=True)
class ConvexHull:
    """Rigid-body collision shape: scaled vertices and outward-wound faces."""
    vertices: Tuple[Vec3, ...]
    faces: Tuple[Tuple[int, ...], ...]

    def face_normals(self) -> np.ndarray:
        return np.array([_newell_normal(np.array(self.vertices), face) for face in self.faces])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'vertices': [list(v) for v in self.vertices],
            'faces': [list(f) for f in self.faces],
        }


@dataclass(frozen=True)
class DieTypeDescriptor:
    """
    Immutable geometry and labeling of one die type.

    Attributes:
        die_type: Which die this describes
        radius: Scale applied to the unit solid
        chamfer: Chamfer ratio used for the render mesh
        labels: Value face index -> printed numbers
        normals: Outward unit normal of each value face, in the die's local frame
        render_mesh: Triangulated visual mesh
        collision_hull: Unchamfered convex hull for the physics world
        bevel_face_count: Number of unlabeled faces the chamfer added
    """
    die_type: DieType
    radius: float
    chamfer: float
    labels: DieLabelTable
    normals: Tuple[Vec3, ...]
    render_mesh: RenderMesh
    collision_hull: Optional[ConvexHull]
    bevel_face_count: int

    @property
    def name(self) -> str:
        return self.die_type.value

    @property
    def value_face_count(self) -> int:
        return len(self.labels)

    @property
    def reads_from_top_vertex(self) -> bool:
        return self.labels.corner_labels

    def value_face_up(self, local_up: Sequence[float]) -> int:
        """Index of the value face whose normal points most nearly along local_up."""
        return int(np.argmax(np.array(self.normals) @ np.asarray(local_up, dtype=float)))

    def value_face_down(self, local_up: Sequence[float]) -> int:
        """Index of the value face whose normal points most nearly against local_up."""
        return int(np.argmin(np.array(self.normals) @ np.asarray(local_up, dtype=float)))

    def to_dict(self, include_mesh: bool = True) -> Dict[str, Any]:
        data = {
            'type': self.name,
            'radius': self.radius,
            'chamfer': self.chamfer,
            'value_faces': self.value_face_count,
            'bevel_faces': self.bevel_face_count,
            'values': list(self.labels.values()),
            'labels': [list(label.texts) for label in self.labels.labels],
            'normals': [list(n) for n in self.normals],
        }
        if include_mesh:
            data['render_mesh'] = self.render_mesh.to_dict()
            data['collision_hull'] = self.collision_hull.to_dict() if self.collision_hull else None
        return data


def build(die_type: Union[str, DieType]) -> DieTypeDescriptor:
    """
    Build the descriptor for a die type.

    Pure and deterministic; callers normally use get_descriptor() instead,
    which serves prebuilt descriptors.

    Args:
        die_type: DieType or its name ('d20')

    Returns:
        DieTypeDescriptor

    Raises:
        UnsupportedDieType: For anything that is not a DieType
    """
    die_type = DieType.from_name(die_type)
    solid = BASE_SOLIDS[die_type.base]
    params = SHAPE_PARAMS[die_type.base]

    unit_vertices = np.array([quaternion.normalize(v) for v in solid.vertices])
    faces = [_outward(unit_vertices, face) for face in solid.faces]

    chamfered = chamfer(unit_vertices, faces, params.chamfer)
    labels = label_table(die_type, solid)
    render_mesh = _render_mesh(chamfered, labels, params, d10_layout=(solid.name == 'd10'))

    normals = tuple(
        tuple(float(c) for c in _newell_normal(unit_vertices, face))
        for face in faces
    )
    hull = ConvexHull(
        vertices=tuple(tuple(float(c) for c in v * params.radius) for v in unit_vertices),
        faces=tuple(tuple(face) for face in faces),
    )

    return DieTypeDescriptor(
        die_type=die_type,
        radius=params.radius,
        chamfer=params.chamfer,
        labels=labels,
        normals=normals,
        render_mesh=render_mesh,
        collision_hull=hull,
        bevel_face_count=len(chamfered.bevel_faces),
    )


def label_table(die_type: DieType, solid: BaseSolid) -> DieLabelTable:
    """Assign printed numbers to the faces of a die."""
    texts = LABELS[solid.name]
    if die_type.is_tens:
        return tens_labels(solid, texts)
    if die_type is DieType.D4:
        return corner_labels(solid, texts)
    return single_labels(solid, texts)


_TABLE: Optional[Mapping[DieType, DieTypeDescriptor]] = None


def descriptor_table() -> Mapping[DieType, DieTypeDescriptor]:
    """
    Descriptors for every DieType, built on first use and never rebuilt.

    Returns:
        Read-only mapping DieType -> DieTypeDescriptor
    """
    global _TABLE
    if _TABLE is None:
        table = {}
        for die_type in DieType:
            start = time.perf_counter()
            table[die_type] = build(die_type)
            logger.debug(f"Geometry {die_type.value} created in {(time.perf_counter() - start) * 1000:.2f}ms")
        _TABLE = MappingProxyType(table)
    return _TABLE


def get_descriptor(die_type: Union[str, DieType]) -> DieTypeDescriptor:
    """
    Prebuilt descriptor for a die type.

    Raises:
        UnsupportedDieType: For anything that is not a DieType
    """
    return descriptor_table()[DieType.from_name(die_type)]


# --- mesh helpers ---

def _newell_normal(vertices: np.ndarray, face: Sequence[int]) -> np.ndarray:
    """Unit normal of a (possibly slightly non-planar) polygon."""
    normal = np.zeros(3)
    for a, b in zip(face, list(face[1:]) + [face[0]]):
        va, vb = vertices[a], vertices[b]
        normal[0] += (va[1] - vb[1]) * (va[2] + vb[2])
        normal[1] += (va[2] - vb[2]) * (va[0] + vb[0])
        normal[2] += (va[0] - vb[0]) * (va[1] + vb[1])
    return quaternion.normalize(normal)


def _outward(vertices: np.ndarray, face: Sequence[int]) -> Tuple[int, ...]:
    """Face winding, reversed if needed so its normal points away from the origin."""
    center = np.mean([vertices[i] for i in face], axis=0)
    if np.dot(_newell_normal(vertices, face), center) < 0:
        return tuple(reversed(face))
    return tuple(face)


def _polygon_uv(angle: float, tab: float) -> UV:
    return (
        (math.cos(angle) + 1 + tab) / 2 / (1 + tab),
        (math.sin(angle) + 1 + tab) / 2 / (1 + tab),
    )


# Kite label layout of the d10
_KITE_W = 0.65
_KITE_H = 0.85
_KITE_V0 = 1 - 1 * _KITE_H
_KITE_V1 = 1 - (0.895 / 1.105) * _KITE_H
_KITE_V2 = 1.0
_KITE_UVS = (
    ((0.5 - _KITE_W / 2, _KITE_V1), (0.5, _KITE_V0), (0.5 + _KITE_W / 2, _KITE_V1)),
    ((0.5 - _KITE_W / 2, _KITE_V1), (0.5 + _KITE_W / 2, _KITE_V1), (0.5, _KITE_V2)),
)


def _render_mesh(chamfered: ChamferedSolid, labels: DieLabelTable,
                 params: ShapeParams, d10_layout: bool = False) -> RenderMesh:
    """Fan-triangulate the chamfered solid and lay out label UVs."""
    triangles: List[Tuple[int, int, int]] = []
    materials: List[int] = []
    uvs: List[Tuple[UV, UV, UV]] = []
    value_count = len(chamfered.value_faces)

    for index, face in enumerate(chamfered.faces):
        material = index + 1 if index < value_count else 0
        corners = len(face)
        step = math.pi * 2 / corners
        for j in range(corners - 2):
            triangles.append((face[0], face[j + 1], face[j + 2]))
            materials.append(material)
            if d10_layout and material and j < 2:
                uvs.append(_KITE_UVS[j])
            elif material or d10_layout:
                uvs.append((
                    _polygon_uv(params.angle_offset, params.tab),
                    _polygon_uv(step * (j + 1) + params.angle_offset, params.tab),
                    _polygon_uv(step * (j + 2) + params.angle_offset, params.tab),
                ))
            else:
                uvs.append(((0.0, 0.0), (0.0, 0.0), (0.0, 0.0)))

    return RenderMesh(
        vertices=tuple(tuple(float(c) for c in v * params.radius) for v in chamfered.vertices),
        triangles=tuple(triangles),
        materials=tuple(materials),
        uvs=tuple(uvs),
        material_labels=('',) + tuple(label.text for label in labels.labels),
    )
