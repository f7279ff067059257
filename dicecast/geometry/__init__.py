"""
Geometry Forge - procedural polyhedral dice.

Usage:
    from dicecast.geometry import DieType, get_descriptor

    d20 = get_descriptor(DieType.D20)
    d20.labels[0].value        # number printed on value face 0
    d20.collision_hull         # shape handed to the physics world
"""

from .forge import (
    ConvexHull,
    DieType,
    DieTypeDescriptor,
    RenderMesh,
    UnsupportedDieType,
    build,
    descriptor_table,
    get_descriptor,
)
from .labels import DieLabelTable, FaceLabel, missing_corner_value

__all__ = [
    'ConvexHull',
    'DieLabelTable',
    'DieType',
    'DieTypeDescriptor',
    'FaceLabel',
    'RenderMesh',
    'UnsupportedDieType',
    'build',
    'descriptor_table',
    'get_descriptor',
    'missing_corner_value',
]
