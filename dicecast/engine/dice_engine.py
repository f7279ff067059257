"""
DiceEngine - application-facing facade over the roll controller.

Wraps a RollController with:
- a Future per roll, resolved when the roll settles (or with an empty,
  cancelled result when a newer roll or clear() abandons it)
- roll lifecycle events published on an EventBus

Futures resolve in the order their rolls were started: the controller always
reports a cancelled roll before anything of the roll that replaced it.
"""

import asyncio
import logging
from collections import deque
from concurrent.futures import Future
from typing import Callable, Deque, Optional

from ..core.config import Config
from ..core.event_bus import EventBus
from ..core.models import Event
from ..geometry import get_descriptor
from .aggregate import RollResult
from .collaborators import PhysicsWorld, Scene
from .controller import DescriptorLookup, RollController, RollState
from .events import register_roll_events

logger = logging.getLogger(__name__)


class DiceEngine:
    """
    Roll dice through a physics world and get the result back as a Future.

    Example:
        engine = DiceEngine(world, scene)
        engine.on('roll.completed', lambda event: print(event.data['total']))
        future = engine.roll("2d20+3d6kh2-4")
        # ... frame loop steps the world and calls engine.advance(dt) ...
        result = future.result()
    """

    def __init__(self, physics: PhysicsWorld, scene: Scene,
                 config: Optional[Config] = None, seed: Optional[int] = None,
                 event_bus: Optional[EventBus] = None,
                 descriptors: DescriptorLookup = get_descriptor):
        self.event_bus = event_bus or EventBus()
        register_roll_events(self.event_bus)

        self.controller = RollController(physics, scene, config=config, seed=seed,
                                         descriptors=descriptors)
        self.controller.on_roll_complete = self._on_roll_complete
        self._pending: Deque[Future] = deque()

    @property
    def state(self) -> RollState:
        return self.controller.state

    @property
    def result(self) -> Optional[RollResult]:
        return self.controller.result

    def roll(self, notation: str) -> 'Future[RollResult]':
        """
        Throw the dice for a notation.

        A roll still in flight is cancelled first; its future resolves with an
        empty, cancelled result before this call returns.

        Args:
            notation: Roll notation, e.g. "2d20+3d6kh2-4"

        Returns:
            Future resolving to the RollResult once every die is still
        """
        self.controller.cancel()

        future: Future = Future()
        future.set_running_or_notify_cancel()
        self._pending.append(future)

        spec = self.controller.roll(notation)
        if self.controller.state is RollState.ROLLING:
            self._publish('roll.started', {
                'notation': spec.notation,
                'groups': [group.to_dict() for group in spec.groups],
                'modifier': spec.modifier,
                'dice': len(self.controller.active_dice),
            })
        return future

    async def roll_async(self, notation: str) -> RollResult:
        """
        Awaitable roll. Something else must keep driving advance() meanwhile.

        Args:
            notation: Roll notation

        Returns:
            RollResult once the roll settles or is cancelled
        """
        return await asyncio.wrap_future(self.roll(notation))

    def advance(self, dt: float = 0.0) -> None:
        self.controller.advance(dt)

    def clear(self) -> None:
        """Remove every die. Safe to call repeatedly."""
        removed = len(self.controller.active_dice)
        was_idle = self.controller.state is RollState.IDLE
        self.controller.clear()
        if not was_idle:
            self._publish('roll.cleared', {'removed': removed})

    def set_bounds(self, width: float, depth: float) -> None:
        self.controller.set_bounds(width, depth)

    def set_spawn_origin(self, edge: str) -> None:
        self.controller.set_spawn_origin(edge)

    def on(self, event_type: str, callback: Callable[[Event], None]) -> None:
        """Subscribe to a roll lifecycle event."""
        self.event_bus.subscribe(event_type, callback)

    def off(self, event_type: str, callback: Callable[[Event], None]) -> None:
        self.event_bus.unsubscribe(event_type, callback)

    def _on_roll_complete(self, result: RollResult) -> None:
        future = self._pending.popleft() if self._pending else None
        if future is None:
            # Clearing a settled table: nobody is waiting
            return

        future.set_result(result)
        if result.cancelled:
            self._publish('roll.cancelled', result.to_dict())
        else:
            self._publish('roll.completed', result.to_dict())

    def _publish(self, event_type: str, data: dict) -> None:
        self.event_bus.publish(Event.create(event_type, data))
