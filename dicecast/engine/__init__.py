"""
Roll resolution engine.

Usage:
    from dicecast.engine import DiceEngine

    engine = DiceEngine(world, scene)
    future = engine.roll("2d20+3d6kh2-4")
    while not future.done():
        world.step(dt)
        engine.advance(dt)
    print(future.result().describe())
"""

from .aggregate import BreakdownEntry, RollResult, aggregate
from .collaborators import BoxShape, DieInstance, PhysicsWorld, Scene, Transform
from .controller import ActiveDie, RollController, RollState
from .dice_engine import DiceEngine
from .headless import FrameLoop, roll_headless
from .resting import resting_face, resting_value

__all__ = [
    'ActiveDie',
    'BoxShape',
    'BreakdownEntry',
    'DiceEngine',
    'DieInstance',
    'FrameLoop',
    'PhysicsWorld',
    'RollController',
    'RollResult',
    'RollState',
    'Scene',
    'Transform',
    'aggregate',
    'resting_face',
    'resting_value',
    'roll_headless',
]
