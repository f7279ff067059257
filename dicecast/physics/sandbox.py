"""
Headless physics collaborator.

SandboxWorld is a small rigid-body integrator good enough to throw dice
across a table without a renderer: gravity, a ground plane at y = 0 with
bounce and friction, walls at the table bounds, and damping. Dice do not
collide with each other.

Real rigid-body contact would topple a slow die onto a face. Instead, once a
grounded die spins slowly enough it enters a tipping phase: its angular
velocity is replaced by a rotation that brings the hull face nearest the
ground flat onto it, easing off as the face aligns.
"""

import itertools
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..engine.collaborators import (
    BoxShape,
    CollisionShape,
    DieInstance,
    PhysicsWorld,
    Quat,
    Scene,
    Vec3,
)
from ..geometry import ConvexHull
from ..geometry import quaternion as quat

logger = logging.getLogger(__name__)

GRAVITY = 9.82 * 20


@dataclass(eq=False)
class SandboxBody:
    """Rigid body state. Vectors are numpy arrays in world space."""
    points: np.ndarray
    normals: np.ndarray
    reach: float
    position: np.ndarray
    orientation: np.ndarray
    velocity: np.ndarray
    angular_velocity: np.ndarray
    grounded: bool = False
    tipping: bool = False

    def lowest_point(self) -> float:
        """Height of the body's lowest point above the table."""
        world_points = self.points @ quat.to_matrix(self.orientation).T
        return float(self.position[1] + world_points[:, 1].min())


@dataclass
class SandboxWorld(PhysicsWorld):
    """
    Table-top physics world.

    Attributes:
        width: Table size along x (walls at +/- width / 2)
        depth: Table size along z (walls at +/- depth / 2)
        gravity: Downward acceleration
        restitution: Fraction of normal speed kept when bouncing
        friction: Ground friction coefficient
        linear_damping: Exponential damping of horizontal speed on the ground
        angular_damping: Exponential damping of spin on the ground
        tip_speed: Spin below which a grounded die starts tipping flat
        tip_time: Time constant of the tipping rotation
        max_substep: Longest internal integration step
    """
    width: float = 44.0
    depth: float = 28.0
    gravity: float = GRAVITY
    restitution: float = 0.3
    friction: float = 0.4
    linear_damping: float = 2.0
    angular_damping: float = 3.0
    tip_speed: float = 4.0
    tip_time: float = 0.1
    max_substep: float = 1 / 180
    bounce_cutoff: float = 2.0

    _bodies: Dict[int, SandboxBody] = field(default_factory=dict, init=False, repr=False)
    _ids: Any = field(default_factory=lambda: itertools.count(1), init=False, repr=False)

    def create_body(self, shape: CollisionShape, position: Vec3, orientation: Quat,
                    velocity: Vec3 = (0.0, 0.0, 0.0),
                    angular_velocity: Vec3 = (0.0, 0.0, 0.0)) -> int:
        points, normals = _shape_geometry(shape)
        handle = next(self._ids)
        self._bodies[handle] = SandboxBody(
            points=points,
            normals=normals,
            reach=float(np.linalg.norm(points, axis=1).max()),
            position=np.array(position, dtype=float),
            orientation=quat.normalize(orientation),
            velocity=np.array(velocity, dtype=float),
            angular_velocity=np.array(angular_velocity, dtype=float),
        )
        logger.debug(f"Body {handle} created at {tuple(round(c, 2) for c in position)}")
        return handle

    def remove_body(self, handle: int) -> None:
        self._bodies.pop(handle, None)

    def get_position(self, handle: int) -> Vec3:
        return tuple(float(c) for c in self._bodies[handle].position)

    def get_orientation(self, handle: int) -> Quat:
        return tuple(float(c) for c in self._bodies[handle].orientation)

    def get_linear_speed(self, handle: int) -> float:
        return float(np.linalg.norm(self._bodies[handle].velocity))

    def get_angular_speed(self, handle: int) -> float:
        return float(np.linalg.norm(self._bodies[handle].angular_velocity))

    def body_count(self) -> int:
        return len(self._bodies)

    def step(self, dt: float) -> None:
        if dt <= 0:
            return
        substeps = max(1, min(3, math.ceil(dt / self.max_substep)))
        h = dt / substeps
        for _ in range(substeps):
            for body in self._bodies.values():
                self._integrate(body, h)

    def _integrate(self, body: SandboxBody, h: float) -> None:
        v = body.velocity

        if not (body.grounded and v[1] <= 0):
            v[1] -= self.gravity * h

        if body.grounded:
            self._apply_ground_friction(body, h)
            body.angular_velocity *= math.exp(-self.angular_damping * h)
            if not body.tipping and np.linalg.norm(body.angular_velocity) < self.tip_speed:
                body.tipping = True
        if body.tipping:
            body.angular_velocity = self._tipping_spin(body)

        body.position += v * h
        body.orientation = quat.integrate(body.orientation, body.angular_velocity, h)

        self._resolve_ground(body)
        self._resolve_walls(body)

    def _apply_ground_friction(self, body: SandboxBody, h: float) -> None:
        v = body.velocity
        horizontal = math.hypot(v[0], v[2])
        if horizontal == 0.0:
            return
        slowed = horizontal * math.exp(-self.linear_damping * h) - self.friction * self.gravity * h
        if slowed <= 0.0:
            v[0] = v[2] = 0.0
            return
        scale = slowed / horizontal
        v[0] *= scale
        v[2] *= scale

    def _tipping_spin(self, body: SandboxBody) -> np.ndarray:
        """Angular velocity that turns the face nearest the table flat onto it."""
        world_normals = body.normals @ quat.to_matrix(body.orientation).T
        nearest = world_normals[int(np.argmax(world_normals @ quat.DOWN))]
        angle = quat.angle_between(nearest, quat.DOWN)
        axis = np.cross(nearest, quat.DOWN)
        length = np.linalg.norm(axis)
        if angle < 1e-4 or length < 1e-9:
            return np.zeros(3)
        rate = min(angle / self.tip_time, self.tip_speed)
        return axis / length * rate

    def _resolve_ground(self, body: SandboxBody) -> None:
        v = body.velocity
        lowest = body.lowest_point()
        if lowest < 0.0:
            body.position[1] -= lowest
            if v[1] < 0.0:
                v[1] = -v[1] * self.restitution
            if abs(v[1]) < self.bounce_cutoff:
                v[1] = 0.0
            lowest = 0.0
        body.grounded = lowest <= 1e-3

    def _resolve_walls(self, body: SandboxBody) -> None:
        v = body.velocity
        for axis, half in ((0, self.width / 2), (2, self.depth / 2)):
            limit = max(half - body.reach, 0.0)
            if body.position[axis] > limit:
                body.position[axis] = limit
                v[axis] = -abs(v[axis]) * self.restitution
            elif body.position[axis] < -limit:
                body.position[axis] = -limit
                v[axis] = abs(v[axis]) * self.restitution


def _shape_geometry(shape: CollisionShape) -> Tuple[np.ndarray, np.ndarray]:
    """Support points and outward face normals of a collision shape, in body space."""
    if isinstance(shape, ConvexHull):
        return np.array(shape.vertices, dtype=float), shape.face_normals()
    if isinstance(shape, BoxShape):
        hx, hy, hz = shape.half_extents
        points = np.array([(sx * hx, sy * hy, sz * hz)
                           for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)], dtype=float)
        normals = np.array([(1, 0, 0), (-1, 0, 0), (0, 1, 0),
                            (0, -1, 0), (0, 0, 1), (0, 0, -1)], dtype=float)
        return points, normals
    raise TypeError(f"Unsupported collision shape: {type(shape).__name__}")


class RecordingScene(Scene):
    """
    Render collaborator that draws nothing and remembers what it was given.

    Attributes:
        instances: Instances currently in the scene, keyed by die id
        transforms: Last transform set per die id
        updates: Number of set_transform calls
    """

    def __init__(self):
        self.instances: Dict[str, DieInstance] = {}
        self.transforms: Dict[str, Tuple[Vec3, Quat]] = {}
        self.removed: List[str] = []
        self.updates = 0

    def add_to_scene(self, instance: DieInstance) -> None:
        self.instances[instance.die_id] = instance

    def remove_from_scene(self, instance: DieInstance) -> None:
        self.instances.pop(instance.die_id, None)
        self.transforms.pop(instance.die_id, None)
        self.removed.append(instance.die_id)

    def set_transform(self, instance: DieInstance, position: Vec3, orientation: Quat) -> None:
        self.transforms[instance.die_id] = (position, orientation)
        self.updates += 1

    def get(self, die_id: str) -> Optional[DieInstance]:
        return self.instances.get(die_id)

    def __len__(self) -> int:
        return len(self.instances)
