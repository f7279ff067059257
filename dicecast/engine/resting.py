"""
Reading the value a resting die shows.

The world up direction is expressed in the die's local frame; the value face
whose outward normal points most nearly that way is on top. The tetrahedral
die has no top face, so it is read from the face on the table instead: the
value is the corner number missing from that face.
"""

from typing import Sequence

import numpy as np

from ..geometry import DieTypeDescriptor, missing_corner_value
from ..geometry.quaternion import UP, to_local


def local_up(orientation: Sequence[float]) -> np.ndarray:
    """World up, expressed in the frame of a body with this orientation."""
    return to_local(orientation, UP)


def resting_face(descriptor: DieTypeDescriptor, orientation: Sequence[float]) -> int:
    """
    Index of the value face that decides the result.

    Returns the face on top, or for the tetrahedral die the face on the table.
    """
    up = local_up(orientation)
    if descriptor.reads_from_top_vertex:
        return descriptor.value_face_down(up)
    return descriptor.value_face_up(up)


def resting_value(descriptor: DieTypeDescriptor, orientation: Sequence[float]) -> int:
    """
    Value shown by a die at rest.

    Args:
        descriptor: Die geometry and labels
        orientation: Body orientation quaternion (x, y, z, w)

    Returns:
        Face value as printed (tens dice return 0, 10, ... 90)
    """
    label = descriptor.labels[resting_face(descriptor, orientation)]
    if descriptor.reads_from_top_vertex:
        return missing_corner_value(label, sides=descriptor.value_face_count)
    return label.value
