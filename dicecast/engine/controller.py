"""
Roll controller: owns the dice of the current roll from spawn to result.

State machine per roll:

    IDLE --roll()--> ROLLING --every die still--> SETTLED
      ^                 |                            |
      +-----clear()-----+-------------clear()--------+

roll() always tears down the previous roll's dice before spawning new ones.
A roll still in flight is cancelled first, and its completion callback fires
with an empty, cancelled result before anything of the new roll happens.

advance() is called once per frame by the frame loop, after the physics
world has been stepped. It copies body transforms to the scene, marks dice
settled once both their linear and angular speed drop below the stillness
threshold, reads each settled die's value, and aggregates once all are still.
There is no timeout: a die that never comes to rest keeps its roll open.
"""

import logging
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.config import SPAWN_EDGES, Config, get_config
from ..core.models import generate_id
from ..geometry import DieType, DieTypeDescriptor, UnsupportedDieType, get_descriptor
from ..geometry.quaternion import from_euler
from ..notation import DiceParser, DieGroup, RollSpec
from .aggregate import RollResult, aggregate
from .collaborators import BoxShape, DieInstance, PhysicsWorld, Scene, Transform
from .resting import resting_value

logger = logging.getLogger(__name__)

RollCallback = Callable[[RollResult], None]
DescriptorLookup = Callable[[DieType], DieTypeDescriptor]


class RollState(Enum):
    IDLE = 'idle'
    ROLLING = 'rolling'
    SETTLED = 'settled'


@dataclass(eq=False)
class ActiveDie:
    """
    One spawned die of the current roll.

    Attributes:
        die_id: Roll-local identifier
        descriptor: Geometry and labels of the die
        group_index: Index of the group (in the rolled groups) it belongs to
        role: 'tens' or 'ones' for compound groups, None otherwise
        body: Physics world handle
        instance: Scene instance
        settled: True once the die came to rest
        value: Face value read when it settled
    """
    die_id: str
    descriptor: DieTypeDescriptor
    group_index: int
    role: Optional[str]
    body: Any
    instance: DieInstance
    settled: bool = False
    value: Optional[int] = None


class RollController:
    """
    Drives one roll at a time through the physics and render collaborators.

    Example:
        controller = RollController(world, scene)
        controller.on_roll_complete = lambda result: print(result.describe())
        controller.roll("2d20+3d6kh2-4")
        while controller.state is RollState.ROLLING:
            world.step(dt)
            controller.advance(dt)
    """

    def __init__(self, physics: PhysicsWorld, scene: Scene,
                 config: Optional[Config] = None, seed: Optional[int] = None,
                 descriptors: DescriptorLookup = get_descriptor):
        """
        Initialize controller.

        Args:
            physics: Physics world the dice bodies live in
            scene: Render layer the dice are shown in
            config: Settings (defaults to the global config)
            seed: Seed for spawn placement and throw randomness
            descriptors: Die type -> descriptor lookup
        """
        config = config or get_config()
        self.physics = physics
        self.scene = scene
        self.descriptors = descriptors
        self.settle_threshold = config.settle_threshold
        self.throw_force = config.throw_force
        self.spin_force = config.spin_force
        self.bounds: Tuple[float, float] = (config.table_width, config.table_depth)
        self.spawn_edge = config.spawn_edge if config.spawn_edge in SPAWN_EDGES else 'right'
        self.rng = random.Random(seed if seed is not None else config.dice_seed)

        self.on_roll_complete: Optional[RollCallback] = None

        self._state = RollState.IDLE
        self._dice: List[ActiveDie] = []
        self._spec: Optional[RollSpec] = None
        self._groups: List[DieGroup] = []
        self._result: Optional[RollResult] = None
        self._elapsed = 0.0

    @property
    def state(self) -> RollState:
        return self._state

    @property
    def active_dice(self) -> Tuple[ActiveDie, ...]:
        return tuple(self._dice)

    @property
    def spec(self) -> Optional[RollSpec]:
        return self._spec

    @property
    def result(self) -> Optional[RollResult]:
        """Result of the last settled roll, None while rolling or idle."""
        return self._result

    def set_bounds(self, width: float, depth: float) -> None:
        """Table size used for spawn placement."""
        if width <= 0 or depth <= 0:
            raise ValueError(f"Bounds must be positive, got {width}x{depth}")
        self.bounds = (width, depth)

    def set_spawn_origin(self, edge: str) -> None:
        """Table edge new dice are thrown from: left, right, top or bottom."""
        edge = edge.lower()
        if edge not in SPAWN_EDGES:
            raise ValueError(f"Unknown spawn edge '{edge}', expected one of {', '.join(SPAWN_EDGES)}")
        self.spawn_edge = edge

    def roll(self, notation: str) -> RollSpec:
        """
        Start a new roll.

        Args:
            notation: Roll notation, e.g. "2d20+3d6kh2-4"

        Returns:
            The parsed RollSpec
        """
        self.cancel()
        self._teardown()

        spec = DiceParser.parse(notation)
        self._spec = spec
        self._groups = []
        self._result = None
        self._elapsed = 0.0
        self._state = RollState.ROLLING

        for group in spec.groups:
            try:
                die_types = self._die_types_for(group)
            except UnsupportedDieType as e:
                logger.warning(f"Skipping '{group}' in '{notation}': {e}")
                continue

            group_index = len(self._groups)
            self._groups.append(group)
            roles = ('tens', 'ones') if group.is_compound else (None,)
            for _ in range(group.dice):
                for die_type, role in zip(die_types, roles):
                    self._spawn(die_type, group_index, role)

        logger.info(f"Rolling '{notation}': {len(self._dice)} dice")

        if not self._dice:
            self._finish()
        return spec

    def cancel(self) -> bool:
        """
        Cancel a roll in flight: tear its dice down and notify with an empty
        cancelled result.

        Returns:
            True if a roll was cancelled
        """
        if self._state is not RollState.ROLLING:
            return False
        notation = self._spec.notation if self._spec else ''
        logger.info(f"Cancelling roll '{notation}'")
        self._teardown()
        self._state = RollState.IDLE
        self._notify(RollResult.empty(notation, cancelled=True))
        return True

    def clear(self) -> None:
        """Remove all dice and return to IDLE. A no-op when already idle."""
        if self._state is RollState.IDLE and not self._dice:
            return
        notation = self._spec.notation if self._spec else ''
        self._teardown()
        self._spec = None
        self._groups = []
        self._result = None
        self._state = RollState.IDLE
        self._notify(RollResult.empty(notation, cancelled=True))

    def advance(self, dt: float = 0.0) -> None:
        """
        Per-frame update, after the physics world has been stepped.

        Args:
            dt: Seconds since the previous frame
        """
        rolling = self._state is RollState.ROLLING
        if rolling:
            self._elapsed += dt

        for die in self._dice:
            position = tuple(self.physics.get_position(die.body))
            orientation = tuple(self.physics.get_orientation(die.body))
            die.instance.transform = Transform(position, orientation)
            self.scene.set_transform(die.instance, position, orientation)

            if not rolling or die.settled:
                continue
            if (self.physics.get_linear_speed(die.body) < self.settle_threshold
                    and self.physics.get_angular_speed(die.body) < self.settle_threshold):
                die.settled = True
                die.value = resting_value(die.descriptor, orientation)
                logger.debug(f"{die.die_id} ({die.descriptor.name}) settled on {die.value}")

        if rolling and all(die.settled for die in self._dice):
            self._finish()

    def _die_types_for(self, group: DieGroup) -> List[DieType]:
        if group.is_compound:
            return [DieType.from_name(name) for name in group.die_types()]
        return [DieType.for_sides(group.sides)]

    def _spawn(self, die_type: DieType, group_index: int, role: Optional[str]) -> None:
        descriptor = self.descriptors(die_type)

        shape = descriptor.collision_hull
        if shape is None:
            logger.warning(f"No collision hull for {descriptor.name}, using box fallback")
            shape = BoxShape((descriptor.radius, descriptor.radius, descriptor.radius))

        position, orientation, velocity, spin = self._throw()
        body = self.physics.create_body(shape, position, orientation,
                                        velocity=velocity, angular_velocity=spin)

        die_id = generate_id('die')
        instance = DieInstance(die_id=die_id, descriptor=descriptor,
                               transform=Transform(position, orientation))
        self.scene.add_to_scene(instance)

        self._dice.append(ActiveDie(
            die_id=die_id,
            descriptor=descriptor,
            group_index=group_index,
            role=role,
            body=body,
            instance=instance,
        ))

    def _throw(self):
        """Start position, orientation, velocity and spin for a die thrown from the spawn edge."""
        rng = self.rng
        width, depth = self.bounds
        half_w, half_d = width / 2, depth / 2

        def along(half: float) -> float:
            safe = half - 3
            spread = safe * 2 if safe > 0 else 2
            return (rng.random() - 0.5) * spread

        jitter = (rng.random() - 0.5) * 1
        height = 2 + rng.random() * 1
        strength = self.throw_force + rng.random() * 5
        drift = (rng.random() - 0.5) * 2

        # Spawn just inside the chosen wall and throw across the table
        if self.spawn_edge in ('left', 'right'):
            sign = 1 if self.spawn_edge == 'right' else -1
            position = (sign * (half_w - 1) + jitter, height, along(half_d))
            velocity = (-sign * strength, 0.0, drift)
        else:
            sign = 1 if self.spawn_edge == 'bottom' else -1
            position = (along(half_w), height, sign * (half_d - 1) + jitter)
            velocity = (drift, 0.0, -sign * strength)

        orientation = tuple(float(c) for c in from_euler(
            rng.random() * math.pi * 2,
            rng.random() * math.pi * 2,
            rng.random() * math.pi * 2,
        ))
        spin = tuple((rng.random() - 0.5) * self.spin_force for _ in range(3))
        return position, orientation, velocity, spin

    def _finish(self) -> None:
        values: Dict[int, List[int]] = {index: [] for index in range(len(self._groups))}
        for die in self._dice:
            values[die.group_index].append(die.value)

        spec = self._spec
        result = aggregate(
            notation=spec.notation,
            groups=self._groups,
            group_values=[values[index] for index in range(len(self._groups))],
            modifier=spec.modifier,
        )
        self._result = result
        self._state = RollState.SETTLED
        logger.info(f"Roll '{spec.notation}' settled after {self._elapsed:.2f}s: {result.describe()}")
        self._notify(result)

    def _teardown(self) -> None:
        for die in self._dice:
            self.scene.remove_from_scene(die.instance)
            self.physics.remove_body(die.body)
        self._dice = []

    def _notify(self, result: RollResult) -> None:
        if self.on_roll_complete is None:
            return
        try:
            self.on_roll_complete(result)
        except Exception as e:
            logger.error(f"Roll completion callback failed: {e}", exc_info=True)
