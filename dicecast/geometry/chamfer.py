"""
Chamfering stage of the geometry pipeline.

Takes a convex solid and bevels it: every face is shrunk toward its centroid
by the chamfer ratio, each original edge becomes a thin quad joining the two
shrunk faces that met there, and each original vertex becomes a small polygon
closing the gap between the edge quads around it.

Shrunk faces keep the index of the face they came from, so labels assigned
to the base solid still apply. Bevel faces (edge quads and corner polygons)
are never labeled.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class ChamferedSolid:
    """
    Result of chamfering a solid.

    Attributes:
        vertices: Unit-scale vertex positions (one copy per face corner)
        value_faces: Shrunk original faces, same order as the input faces
        bevel_faces: Edge quads followed by corner polygons
    """
    vertices: np.ndarray
    value_faces: Tuple[Tuple[int, ...], ...]
    bevel_faces: Tuple[Tuple[int, ...], ...]

    @property
    def faces(self) -> Tuple[Tuple[int, ...], ...]:
        return self.value_faces + self.bevel_faces


def chamfer(vertices: np.ndarray, faces: Sequence[Sequence[int]], ratio: float) -> ChamferedSolid:
    """
    Bevel a convex solid.

    Args:
        vertices: (n, 3) array of unit vectors
        faces: Faces as vertex index sequences
        ratio: Fraction of the centroid distance each face corner keeps (0-1)

    Returns:
        ChamferedSolid
    """
    new_vertices: List[np.ndarray] = []
    corner_copies: List[List[int]] = [[] for _ in range(len(vertices))]
    value_faces: List[Tuple[int, ...]] = []

    # Shrink every face toward its centroid, giving it private vertex copies
    for face in faces:
        center = np.mean([vertices[i] for i in face], axis=0)
        shrunk = []
        for i in face:
            new_vertices.append((vertices[i] - center) * ratio + center)
            index = len(new_vertices) - 1
            corner_copies[i].append(index)
            shrunk.append(index)
        value_faces.append(tuple(shrunk))

    edge_quads = _edge_quads(faces, value_faces)
    corner_polygons = [_corner_polygon(copies, edge_quads) for copies in corner_copies]

    return ChamferedSolid(
        vertices=np.array(new_vertices),
        value_faces=tuple(value_faces),
        bevel_faces=tuple(edge_quads) + tuple(corner_polygons),
    )


def _edge_quads(faces: Sequence[Sequence[int]],
                shrunk: Sequence[Tuple[int, ...]]) -> List[Tuple[int, ...]]:
    """One quad per pair of faces sharing an edge."""
    quads = []
    for i in range(len(faces) - 1):
        for j in range(i + 1, len(faces)):
            pairs: List[Tuple[int, int]] = []
            last_m = -1
            for m, vertex in enumerate(faces[i]):
                if vertex not in faces[j]:
                    continue
                n = list(faces[j]).index(vertex)
                # The shared edge wraps past the end of face i's winding
                if last_m >= 0 and m != last_m + 1:
                    pairs[0:0] = [(i, m), (j, n)]
                else:
                    pairs.extend([(i, m), (j, n)])
                last_m = m
            if len(pairs) != 4:
                continue
            (fa, ma), (fb, nb), (fc, mc), (fd, nd) = pairs
            quads.append((shrunk[fa][ma], shrunk[fb][nb], shrunk[fd][nd], shrunk[fc][mc]))
    return quads


def _corner_polygon(copies: Sequence[int], edge_quads: Sequence[Tuple[int, ...]]) -> Tuple[int, ...]:
    """
    Order the copies of one original vertex into a polygon.

    Walks around the vertex through the edge quads: from the last copy placed,
    find the quad whose preceding corner is another copy of the same vertex.
    """
    polygon = [copies[0]]
    for _ in range(len(copies) - 1):
        for quad in edge_quads:
            if polygon[-1] not in quad:
                continue
            previous = quad[quad.index(polygon[-1]) - 1]
            if previous in copies:
                polygon.append(previous)
                break
    return tuple(polygon)
