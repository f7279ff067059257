"""
Core data models shared across Dicecast.

- Event: immutable record of something the engine did (roll started, completed...)
- generate_id: roll-local identifiers for spawned dice and events
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any
import itertools
import uuid
import json


def generate_id(prefix: str) -> str:
    """
    Generate a unique ID with the given prefix.

    Args:
        prefix: Prefix for the ID (e.g., 'die', 'evt')

    Returns:
        String like 'die_a1b2c3d4e5f6'

    Examples:
        >>> generate_id('die')
        'die_a1b2c3d4e5f6'
    """
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


_sequence = itertools.count(1)


@dataclass(frozen=True)
class Event:
    """
    Immutable record of an engine occurrence.

    Attributes:
        event_type: Dotted event name (e.g., 'roll.completed')
        data: JSON-serializable payload, validated against the type's schema
        event_id: Unique identifier
        sequence: Monotonic publication order within the process
        timestamp: When the event was created
    """
    event_type: str
    data: Dict[str, Any]
    event_id: str = field(default_factory=lambda: generate_id('evt'))
    sequence: int = field(default_factory=lambda: next(_sequence))
    timestamp: datetime = field(default_factory=now)

    @staticmethod
    def create(event_type: str, data: Dict[str, Any]) -> 'Event':
        """
        Create a new event with generated ID and timestamp.

        Args:
            event_type: Type of event
            data: Event payload

        Returns:
            New Event instance
        """
        return Event(event_type=event_type, data=data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'event_id': self.event_id,
            'event_type': self.event_type,
            'sequence': self.sequence,
            'timestamp': self.timestamp.isoformat(),
            'data': self.data,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
