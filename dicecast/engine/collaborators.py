"""
Interfaces of the external collaborators the engine drives.

The physics world owns rigid bodies and is stepped by the frame loop; the
scene owns what gets drawn. The engine only registers and unregisters its own
bodies and instances and reads transforms and speeds back each frame.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Tuple, Union

from ..geometry import ConvexHull, DieTypeDescriptor

Vec3 = Tuple[float, float, float]
Quat = Tuple[float, float, float, float]


@dataclass(frozen=True)
class BoxShape:
    """Axis-aligned box collision proxy, used when a die has no hull."""
    half_extents: Vec3


CollisionShape = Union[ConvexHull, BoxShape]


@dataclass(frozen=True)
class Transform:
    position: Vec3 = (0.0, 0.0, 0.0)
    orientation: Quat = (0.0, 0.0, 0.0, 1.0)


@dataclass(eq=False)
class DieInstance:
    """
    Visual instance of one spawned die.

    Face and label data are looked up through the descriptor; nothing is
    stored on the scene's own objects.
    """
    die_id: str
    descriptor: DieTypeDescriptor
    transform: Transform = field(default_factory=Transform)


class PhysicsWorld(ABC):
    """Rigid-body world the dice are simulated in."""

    @abstractmethod
    def create_body(self, shape: CollisionShape, position: Vec3, orientation: Quat,
                    velocity: Vec3 = (0.0, 0.0, 0.0),
                    angular_velocity: Vec3 = (0.0, 0.0, 0.0)) -> Any:
        """
        Add a dynamic body and return an opaque handle to it.

        Args:
            shape: Convex hull or box proxy
            position: Initial world position
            orientation: Initial orientation quaternion (x, y, z, w)
            velocity: Initial linear velocity
            angular_velocity: Initial angular velocity (world frame)
        """
        pass

    @abstractmethod
    def remove_body(self, handle: Any) -> None:
        pass

    @abstractmethod
    def get_position(self, handle: Any) -> Vec3:
        pass

    @abstractmethod
    def get_orientation(self, handle: Any) -> Quat:
        pass

    @abstractmethod
    def get_linear_speed(self, handle: Any) -> float:
        pass

    @abstractmethod
    def get_angular_speed(self, handle: Any) -> float:
        pass

    @abstractmethod
    def step(self, dt: float) -> None:
        """Advance the simulation. Called by the frame loop, never by the engine."""
        pass


class Scene(ABC):
    """Render layer the dice are displayed in."""

    @abstractmethod
    def add_to_scene(self, instance: DieInstance) -> None:
        pass

    @abstractmethod
    def remove_from_scene(self, instance: DieInstance) -> None:
        pass

    @abstractmethod
    def set_transform(self, instance: DieInstance, position: Vec3, orientation: Quat) -> None:
        pass
