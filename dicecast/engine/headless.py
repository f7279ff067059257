"""
Headless frame loop.

Stands in for a render loop: steps the physics world with a fixed timestep
and advances the roll controller after each step.
"""

import logging
from typing import Optional

from ..core.config import Config, get_config
from .aggregate import RollResult
from .collaborators import PhysicsWorld
from .controller import RollController, RollState

logger = logging.getLogger(__name__)


class FrameLoop:
    """Fixed-timestep driver for a physics world and a roll controller."""

    def __init__(self, physics: PhysicsWorld, controller: RollController, dt: float = 1 / 60):
        if dt <= 0:
            raise ValueError(f"Frame timestep must be positive, got {dt}")
        self.physics = physics
        self.controller = controller
        self.dt = dt
        self.frames = 0

    def tick(self, dt: Optional[float] = None) -> None:
        """Run one frame: physics first, then the controller."""
        dt = self.dt if dt is None else dt
        self.physics.step(dt)
        self.controller.advance(dt)
        self.frames += 1

    def run_until_settled(self, max_frames: int = 3600) -> bool:
        """
        Tick until the current roll leaves the ROLLING state.

        Args:
            max_frames: Upper bound on frames to run

        Returns:
            True if the roll settled (or was never rolling), False if it was
            still rolling after max_frames
        """
        start = self.frames
        while self.controller.state is RollState.ROLLING:
            if self.frames - start >= max_frames:
                logger.warning(f"Roll still unsettled after {max_frames} frames")
                return False
            self.tick()
        return True


def roll_headless(notation: str, seed: Optional[int] = None,
                  config: Optional[Config] = None) -> Optional[RollResult]:
    """
    Roll notation in a fresh sandbox world and run it to completion.

    Args:
        notation: Roll notation
        seed: Seed for the throw randomness (defaults to DICE_SEED)
        config: Settings (defaults to the global config)

    Returns:
        RollResult, or None if the dice did not settle within MAX_FRAMES
    """
    from ..physics import RecordingScene, SandboxWorld

    config = config or get_config()
    world = SandboxWorld(width=config.table_width, depth=config.table_depth)
    controller = RollController(world, RecordingScene(), config=config, seed=seed)
    loop = FrameLoop(world, controller, dt=config.frame_dt)

    controller.roll(notation)
    if not loop.run_until_settled(config.max_frames):
        controller.clear()
        return None
    return controller.result
