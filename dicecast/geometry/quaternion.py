"""
Vector and quaternion helpers.

Quaternions are numpy arrays laid out as (x, y, z, w), the same order the
physics and render collaborators use. World "up" is +Y.
"""

from typing import Sequence

import numpy as np

UP = np.array([0.0, 1.0, 0.0])
DOWN = np.array([0.0, -1.0, 0.0])
IDENTITY = np.array([0.0, 0.0, 0.0, 1.0])


def normalize(v: Sequence[float]) -> np.ndarray:
    """Return v scaled to unit length (zero vectors are returned unchanged)."""
    arr = np.asarray(v, dtype=float)
    length = np.linalg.norm(arr)
    if length == 0.0:
        return arr
    return arr / length


def multiply(a: Sequence[float], b: Sequence[float]) -> np.ndarray:
    """Hamilton product a * b."""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array([
        ax * bw + aw * bx + ay * bz - az * by,
        ay * bw + aw * by + az * bx - ax * bz,
        az * bw + aw * bz + ax * by - ay * bx,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def conjugate(q: Sequence[float]) -> np.ndarray:
    """Inverse of a unit quaternion."""
    x, y, z, w = q
    return np.array([-x, -y, -z, w])


def rotate(q: Sequence[float], v: Sequence[float]) -> np.ndarray:
    """Rotate vector v by unit quaternion q."""
    q = np.asarray(q, dtype=float)
    v = np.asarray(v, dtype=float)
    u = q[:3]
    w = q[3]
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def to_local(q: Sequence[float], v: Sequence[float]) -> np.ndarray:
    """Express world-space direction v in the frame of a body oriented by q."""
    return rotate(conjugate(q), v)


def from_axis_angle(axis: Sequence[float], angle: float) -> np.ndarray:
    axis = normalize(axis)
    half = angle / 2.0
    s = np.sin(half)
    return np.array([axis[0] * s, axis[1] * s, axis[2] * s, np.cos(half)])


def from_euler(x: float, y: float, z: float) -> np.ndarray:
    """Quaternion for intrinsic XYZ Euler angles (radians)."""
    c1, c2, c3 = np.cos(x / 2), np.cos(y / 2), np.cos(z / 2)
    s1, s2, s3 = np.sin(x / 2), np.sin(y / 2), np.sin(z / 2)
    return np.array([
        s1 * c2 * c3 + c1 * s2 * s3,
        c1 * s2 * c3 - s1 * c2 * s3,
        c1 * c2 * s3 + s1 * s2 * c3,
        c1 * c2 * c3 - s1 * s2 * s3,
    ])


def from_unit_vectors(a: Sequence[float], b: Sequence[float]) -> np.ndarray:
    """
    Shortest-arc rotation taking unit vector a onto unit vector b.

    Antiparallel inputs rotate half a turn about an arbitrary perpendicular axis.
    """
    a = normalize(a)
    b = normalize(b)
    r = float(np.dot(a, b)) + 1.0
    if r < 1e-9:
        if abs(a[0]) > abs(a[2]):
            q = np.array([-a[1], a[0], 0.0, 0.0])
        else:
            q = np.array([0.0, -a[2], a[1], 0.0])
    else:
        c = np.cross(a, b)
        q = np.array([c[0], c[1], c[2], r])
    return normalize(q)


def integrate(q: Sequence[float], angular_velocity: Sequence[float], dt: float) -> np.ndarray:
    """Advance orientation q by a world-space angular velocity over dt."""
    wx, wy, wz = angular_velocity
    spin = multiply([wx, wy, wz, 0.0], q)
    return normalize(np.asarray(q, dtype=float) + 0.5 * dt * spin)


def angle_between(a: Sequence[float], b: Sequence[float]) -> float:
    cos = float(np.clip(np.dot(normalize(a), normalize(b)), -1.0, 1.0))
    return float(np.arccos(cos))


def to_matrix(q: Sequence[float]) -> np.ndarray:
    """3x3 rotation matrix of a unit quaternion, for rotating many vectors at once."""
    x, y, z, w = q
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])
