"""
Event definitions for the roll engine.
"""

from typing import Any, Dict, List

from ..core.event_bus import EventBus, EventTypeDefinition


# Event type definitions for the roll lifecycle
# These are factory functions that return EventTypeDefinition instances

_BREAKDOWN_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "description": "Every die (or compound pair), including dropped ones",
    "items": {
        "type": "object",
        "properties": {
            "type": {"type": "string"},
            "value": {"type": "integer"},
            "dropped": {"type": "boolean"}
        },
        "required": ["type", "value"]
    }
}


def roll_started_event() -> EventTypeDefinition:
    """
    Event published when dice have been spawned for a new roll.
    """
    return EventTypeDefinition(
        type="roll.started",
        description="Dice were thrown for a roll",
        module="engine",
        data_schema={
            "type": "object",
            "properties": {
                "notation": {
                    "type": "string",
                    "description": "Notation as the caller wrote it"
                },
                "groups": {
                    "type": "array",
                    "description": "Parsed dice groups"
                },
                "modifier": {
                    "type": "integer",
                    "description": "Flat modifier"
                },
                "dice": {
                    "type": "integer",
                    "minimum": 0,
                    "description": "Number of physical dice spawned"
                }
            },
            "required": ["notation", "groups", "modifier", "dice"]
        }
    )


def roll_completed_event() -> EventTypeDefinition:
    """
    Event published when every die of a roll has come to rest.

    Contains the full breakdown for display.
    """
    return EventTypeDefinition(
        type="roll.completed",
        description="Result of a settled dice roll",
        module="engine",
        data_schema={
            "type": "object",
            "properties": {
                "notation": {"type": "string"},
                "total": {
                    "type": "integer",
                    "description": "Final result"
                },
                "modifier": {"type": "integer"},
                "breakdown": _BREAKDOWN_SCHEMA,
                "cancelled": {"const": False}
            },
            "required": ["notation", "total", "modifier", "breakdown"]
        }
    )


def roll_cancelled_event() -> EventTypeDefinition:
    """
    Event published when a roll in flight was cancelled by a newer roll or clear().
    """
    return EventTypeDefinition(
        type="roll.cancelled",
        description="A roll was abandoned before settling",
        module="engine",
        data_schema={
            "type": "object",
            "properties": {
                "notation": {"type": "string"},
                "total": {"const": 0},
                "cancelled": {"const": True}
            },
            "required": ["notation", "total", "cancelled"]
        }
    )


def roll_cleared_event() -> EventTypeDefinition:
    """
    Event published when the table was cleared.
    """
    return EventTypeDefinition(
        type="roll.cleared",
        description="All dice were removed from the table",
        module="engine",
        data_schema={
            "type": "object",
            "properties": {
                "removed": {
                    "type": "integer",
                    "minimum": 0,
                    "description": "Number of dice removed"
                }
            },
            "required": ["removed"]
        }
    )


def roll_event_types() -> List[EventTypeDefinition]:
    return [
        roll_started_event(),
        roll_completed_event(),
        roll_cancelled_event(),
        roll_cleared_event(),
    ]


def register_roll_events(bus: EventBus) -> None:
    """Register every roll lifecycle event type on a bus."""
    for definition in roll_event_types():
        bus.register_event_type(definition)
