"""
Canonical base solids for the six physical dice.

Each solid is a list of unit-scale vertices and a list of faces. A face is a
tuple of vertex indices wound counter-clockwise seen from outside, and each
face carries a label slot: the index into the die's label table that the face
is printed with.

The per-type tuning numbers (radius, chamfer ratio, UV tab and angle offset)
and the label tables are hand-tuned for realistic looking dice and fair
numbering. They are lookup data, not derived values.
"""

import math
from dataclasses import dataclass
from typing import Dict, Tuple

Vertex = Tuple[float, float, float]


@dataclass(frozen=True)
class BaseSolid:
    """Unchamfered convex solid with per-face label slots."""
    name: str
    vertices: Tuple[Vertex, ...]
    faces: Tuple[Tuple[int, ...], ...]
    slots: Tuple[int, ...]

    @property
    def face_count(self) -> int:
        return len(self.faces)


@dataclass(frozen=True)
class ShapeParams:
    """Hand-tuned constants for one base solid."""
    radius: float
    chamfer: float
    tab: float          # UV inset of the label square
    angle_offset: float  # UV rotation of the first polygon corner


def _tetrahedron() -> BaseSolid:
    vertices = ((1, 1, 1), (-1, -1, 1), (-1, 1, -1), (1, -1, -1))
    faces = ((1, 0, 2), (0, 1, 3), (0, 3, 2), (1, 2, 3))
    return BaseSolid('d4', _floats(vertices), faces, (0, 1, 2, 3))


def _cube() -> BaseSolid:
    vertices = ((-1, -1, -1), (1, -1, -1), (1, 1, -1), (-1, 1, -1),
                (-1, -1, 1), (1, -1, 1), (1, 1, 1), (-1, 1, 1))
    faces = ((0, 3, 2, 1), (1, 2, 6, 5), (0, 1, 5, 4),
             (3, 7, 6, 2), (0, 4, 7, 3), (4, 5, 6, 7))
    return BaseSolid('d6', _floats(vertices), faces, (0, 1, 2, 3, 4, 5))


def _octahedron() -> BaseSolid:
    vertices = ((1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0), (0, 0, 1), (0, 0, -1))
    faces = ((0, 2, 4), (0, 4, 3), (0, 3, 5), (0, 5, 2),
             (1, 3, 4), (1, 4, 2), (1, 2, 5), (1, 5, 3))
    return BaseSolid('d8', _floats(vertices), faces, tuple(range(8)))


def _trapezohedron() -> BaseSolid:
    # Pentagonal trapezohedron: a zig-zag ring of ten vertices plus two poles
    step = math.pi * 2 / 10
    h = 0.105
    vertices = [
        (math.cos(i * step), math.sin(i * step), h * (1 if i % 2 else -1))
        for i in range(10)
    ]
    vertices.append((0.0, 0.0, -1.0))
    vertices.append((0.0, 0.0, 1.0))
    faces = ((5, 6, 7, 11), (4, 3, 2, 10), (1, 2, 3, 11), (0, 9, 8, 10),
             (7, 8, 9, 11), (8, 7, 6, 10), (9, 0, 1, 11), (2, 1, 0, 10),
             (3, 4, 5, 11), (6, 5, 4, 10))
    return BaseSolid('d10', _floats(vertices), faces, tuple(range(10)))


def _dodecahedron() -> BaseSolid:
    p = (1 + math.sqrt(5)) / 2
    q = 1 / p
    vertices = ((0, q, p), (0, q, -p), (0, -q, p), (0, -q, -p), (p, 0, q),
                (p, 0, -q), (-p, 0, q), (-p, 0, -q), (q, p, 0), (q, -p, 0), (-q, p, 0),
                (-q, -p, 0), (1, 1, 1), (1, 1, -1), (1, -1, 1), (1, -1, -1), (-1, 1, 1),
                (-1, 1, -1), (-1, -1, 1), (-1, -1, -1))
    faces = ((2, 14, 4, 12, 0), (15, 9, 11, 19, 3), (16, 10, 17, 7, 6), (6, 7, 19, 11, 18),
             (6, 18, 2, 0, 16), (18, 11, 9, 14, 2), (1, 17, 10, 8, 13), (1, 13, 5, 15, 3),
             (13, 8, 12, 4, 5), (5, 4, 14, 9, 15), (0, 12, 8, 10, 16), (3, 19, 7, 17, 1))
    return BaseSolid('d12', _floats(vertices), faces, tuple(range(12)))


def _icosahedron() -> BaseSolid:
    t = (1 + math.sqrt(5)) / 2
    vertices = ((-1, t, 0), (1, t, 0), (-1, -t, 0), (1, -t, 0),
                (0, -1, t), (0, 1, t), (0, -1, -t), (0, 1, -t),
                (t, 0, -1), (t, 0, 1), (-t, 0, -1), (-t, 0, 1))
    faces = ((0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
             (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
             (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
             (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1))
    return BaseSolid('d20', _floats(vertices), faces, tuple(range(20)))


def _floats(vertices) -> Tuple[Vertex, ...]:
    return tuple((float(x), float(y), float(z)) for x, y, z in vertices)


BASE_SOLIDS: Dict[str, BaseSolid] = {
    solid.name: solid
    for solid in (_tetrahedron(), _cube(), _octahedron(),
                  _trapezohedron(), _dodecahedron(), _icosahedron())
}

SHAPE_PARAMS: Dict[str, ShapeParams] = {
    'd4': ShapeParams(radius=1.2, chamfer=0.96, tab=-0.1, angle_offset=math.pi * 7 / 6),
    'd6': ShapeParams(radius=0.9, chamfer=0.96, tab=0.1, angle_offset=math.pi / 4),
    'd8': ShapeParams(radius=1.0, chamfer=0.965, tab=0.0, angle_offset=-math.pi / 4 / 2),
    'd10': ShapeParams(radius=0.9, chamfer=0.945, tab=0.3, angle_offset=math.pi),
    'd12': ShapeParams(radius=0.9, chamfer=0.968, tab=0.2, angle_offset=-math.pi / 4 / 2),
    'd20': ShapeParams(radius=1.0, chamfer=0.955, tab=-0.2, angle_offset=-math.pi / 4 / 2),
}

# Label printed on each slot. Opposite faces sum to N+1 (the d10, numbered
# 0-9, to 9) and no two faces sharing an edge carry consecutive numbers. For
# the d4 these are the corner numbers: the vertex not touched by slot k's
# face shows LABELS['d4'][k].
LABELS: Dict[str, Tuple[str, ...]] = {
    'd4': ('4', '2', '3', '1'),
    'd6': ('6', '3', '5', '2', '4', '1'),
    'd8': ('8', '2', '5', '3', '6', '4', '7', '1'),
    'd10': ('0', '1', '3', '2', '8', '6', '5', '9', '7', '4'),
    'd12': ('12', '10', '5', '7', '9', '2', '11', '4', '6', '8', '3', '1'),
    'd20': ('20', '8', '14', '2', '10', '12', '18', '4', '6', '5',
            '19', '7', '13', '1', '11', '15', '16', '9', '3', '17'),
}
