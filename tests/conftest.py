"""
Shared fixtures: a scriptable physics world, a recording scene and helpers
for orienting dice so a chosen value ends up on top.
"""

import itertools

import numpy as np
import pytest

from dicecast.core.config import Config
from dicecast.engine.collaborators import PhysicsWorld, Scene
from dicecast.geometry import get_descriptor, missing_corner_value
from dicecast.geometry import quaternion as quat


class FakePhysicsWorld(PhysicsWorld):
    """
    Physics world that never moves anything by itself.

    Tests decide when and how each body comes to rest.
    """

    def __init__(self):
        self.bodies = {}
        self.created = []
        self.removed = []
        self.steps = 0
        self._ids = itertools.count(1)

    def create_body(self, shape, position, orientation,
                    velocity=(0.0, 0.0, 0.0), angular_velocity=(0.0, 0.0, 0.0)):
        handle = next(self._ids)
        self.bodies[handle] = {
            'shape': shape,
            'position': tuple(position),
            'orientation': tuple(orientation),
            'velocity': tuple(velocity),
            'linear_speed': float(np.linalg.norm(velocity)),
            'angular_speed': float(np.linalg.norm(angular_velocity)),
        }
        self.created.append(handle)
        return handle

    def remove_body(self, handle):
        del self.bodies[handle]
        self.removed.append(handle)

    def get_position(self, handle):
        return self.bodies[handle]['position']

    def get_orientation(self, handle):
        return self.bodies[handle]['orientation']

    def get_linear_speed(self, handle):
        return self.bodies[handle]['linear_speed']

    def get_angular_speed(self, handle):
        return self.bodies[handle]['angular_speed']

    def step(self, dt):
        self.steps += 1

    def settle(self, handle, orientation=(0.0, 0.0, 0.0, 1.0)):
        """Bring a body to rest with the given orientation."""
        body = self.bodies[handle]
        body['orientation'] = tuple(float(c) for c in orientation)
        body['linear_speed'] = 0.0
        body['angular_speed'] = 0.0

    def handles(self):
        """Live bodies in creation order."""
        return [handle for handle in self.created if handle in self.bodies]


class FakeScene(Scene):
    """Scene that records every call it receives."""

    def __init__(self):
        self.instances = []
        self.calls = []

    def add_to_scene(self, instance):
        self.instances.append(instance)
        self.calls.append(('add', instance.die_id))

    def remove_from_scene(self, instance):
        self.instances.remove(instance)
        self.calls.append(('remove', instance.die_id))

    def set_transform(self, instance, position, orientation):
        self.calls.append(('transform', instance.die_id))


def orientation_showing(die_type, value):
    """
    Orientation quaternion that leaves `value` showing on a die.

    For most dice the face labeled `value` points up. The tetrahedral die is
    read from its top corner, so the face missing `value` goes on the table.
    """
    descriptor = get_descriptor(die_type)
    for index, label in enumerate(descriptor.labels.labels):
        if descriptor.reads_from_top_vertex:
            if missing_corner_value(label, sides=descriptor.value_face_count) == value:
                return quat.from_unit_vectors(descriptor.normals[index], quat.DOWN)
        elif label.value == value:
            return quat.from_unit_vectors(descriptor.normals[index], quat.UP)
    raise ValueError(f"{die_type} cannot show {value}")


@pytest.fixture
def config(monkeypatch):
    """Config built from defaults, ignoring the caller's environment."""
    for name in ('TABLE_WIDTH', 'TABLE_DEPTH', 'SPAWN_EDGE', 'SETTLE_THRESHOLD',
                 'THROW_FORCE', 'SPIN_FORCE', 'FRAME_DT', 'MAX_FRAMES', 'MAX_DICE', 'DICE_SEED'):
        monkeypatch.delenv(name, raising=False)
    return Config()


@pytest.fixture
def world():
    return FakePhysicsWorld()


@pytest.fixture
def scene():
    return FakeScene()


@pytest.fixture
def showing():
    """Fixture form of orientation_showing."""
    return orientation_showing
