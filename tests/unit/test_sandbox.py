"""
Unit tests for the headless physics world and recording scene.
"""

import numpy as np
import pytest

from dicecast.engine import BoxShape, DieInstance
from dicecast.geometry import get_descriptor
from dicecast.geometry import quaternion as quat
from dicecast.physics import RecordingScene, SandboxWorld


def run(world, seconds, dt=1 / 60):
    for _ in range(int(seconds / dt)):
        world.step(dt)


class TestSandboxWorld:
    """Test the sandbox integrator."""

    def test_body_lifecycle(self):
        """Test creating, reading and removing bodies."""
        world = SandboxWorld()
        hull = get_descriptor('d6').collision_hull
        handle = world.create_body(hull, (1.0, 2.0, 3.0), (0.0, 0.0, 0.0, 1.0),
                                   velocity=(3.0, 0.0, 4.0))

        assert world.get_position(handle) == (1.0, 2.0, 3.0)
        assert world.get_orientation(handle) == (0.0, 0.0, 0.0, 1.0)
        assert world.get_linear_speed(handle) == pytest.approx(5.0)
        assert world.get_angular_speed(handle) == 0.0
        assert world.body_count() == 1

        world.remove_body(handle)
        assert world.body_count() == 0
        # Removing twice is harmless
        world.remove_body(handle)

    def test_dropped_die_lands(self):
        """Test that gravity pulls a die down onto the table and it stops."""
        world = SandboxWorld()
        hull = get_descriptor('d6').collision_hull
        handle = world.create_body(hull, (0.0, 3.0, 0.0), (0.0, 0.0, 0.0, 1.0))

        run(world, 2.0)

        points = np.array(hull.vertices)
        lowest = world.get_position(handle)[1] + points[:, 1].min()
        assert lowest == pytest.approx(0.0, abs=1e-2)
        assert world.get_linear_speed(handle) < 0.05

    def test_thrown_die_stays_on_table(self):
        """Test that walls keep a fast die inside the bounds."""
        world = SandboxWorld(width=10.0, depth=10.0)
        hull = get_descriptor('d20').collision_hull
        handle = world.create_body(hull, (4.0, 2.0, 0.0), (0.0, 0.0, 0.0, 1.0),
                                   velocity=(-40.0, 0.0, 5.0))

        for _ in range(240):
            world.step(1 / 60)
            x, _, z = world.get_position(handle)
            assert abs(x) <= 5.0
            assert abs(z) <= 5.0

    def test_spinning_die_tips_flat(self):
        """Test that a spinning die ends up resting on a face."""
        world = SandboxWorld()
        descriptor = get_descriptor('d8')
        tilted = quat.from_euler(0.4, 1.1, -0.3)
        handle = world.create_body(descriptor.collision_hull, (0.0, 2.0, 0.0), tilted,
                                   angular_velocity=(6.0, -3.0, 2.0))

        run(world, 4.0)

        assert world.get_angular_speed(handle) < 0.05
        local_down = quat.to_local(world.get_orientation(handle), quat.DOWN)
        best = max(np.dot(normal, local_down) for normal in descriptor.normals)
        assert best == pytest.approx(1.0, abs=1e-3)

    def test_box_shape(self):
        """Test that the box proxy collides like a cube."""
        world = SandboxWorld()
        handle = world.create_body(BoxShape((0.5, 0.5, 0.5)), (0.0, 1.0, 0.0), (0.0, 0.0, 0.0, 1.0))
        run(world, 1.5)
        assert world.get_position(handle)[1] == pytest.approx(0.5, abs=1e-2)

    def test_unknown_shape(self):
        """Test that unsupported shapes are rejected."""
        world = SandboxWorld()
        with pytest.raises(TypeError):
            world.create_body("sphere", (0.0, 1.0, 0.0), (0.0, 0.0, 0.0, 1.0))

    def test_zero_step(self):
        """Test that a zero timestep changes nothing."""
        world = SandboxWorld()
        handle = world.create_body(BoxShape((0.5, 0.5, 0.5)), (0.0, 1.0, 0.0), (0.0, 0.0, 0.0, 1.0))
        world.step(0.0)
        assert world.get_position(handle) == (0.0, 1.0, 0.0)


class TestRecordingScene:
    """Test the recording render collaborator."""

    def test_records_instances(self):
        """Test add, transform and remove."""
        scene = RecordingScene()
        instance = DieInstance(die_id='die_1', descriptor=get_descriptor('d6'))

        scene.add_to_scene(instance)
        assert len(scene) == 1
        assert scene.get('die_1') is instance

        scene.set_transform(instance, (1.0, 0.5, 0.0), (0.0, 0.0, 0.0, 1.0))
        assert scene.transforms['die_1'] == ((1.0, 0.5, 0.0), (0.0, 0.0, 0.0, 1.0))
        assert scene.updates == 1

        scene.remove_from_scene(instance)
        assert len(scene) == 0
        assert scene.removed == ['die_1']
