"""
Event bus for Dicecast.

Provides a synchronous pub/sub channel for roll lifecycle events. Event
payloads are validated against the JSON Schema registered for their type
before any listener sees them.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import jsonschema

from .models import Event

logger = logging.getLogger(__name__)


class EventTypeDefinition:
    """
    Defines an event type.

    Simple container for event type metadata.

    Attributes:
        type: Unique name for this event type
        description: Human-readable description
        module: Which package provides this type
        data_schema: Optional JSON Schema for event.data
    """

    def __init__(self, type: str, description: str, module: str,
                 data_schema: Dict[str, Any] = None):
        self.type = type
        self.description = description
        self.module = module
        self.data_schema = data_schema or {}


class EventBus:
    """
    Event bus for publishing and subscribing to engine events.

    Implements pub/sub pattern where callers can subscribe to specific event
    types and get notified when those events occur. Listeners run inline on
    the publishing thread, in subscription order.

    Attributes:
        listeners: Dict mapping event types to lists of callback functions
        event_types: Registered event type definitions, keyed by type
    """

    def __init__(self):
        self.listeners: Dict[str, List[Callable[[Event], None]]] = {}
        self.event_types: Dict[str, EventTypeDefinition] = {}

    def register_event_type(self, definition: EventTypeDefinition) -> None:
        """
        Register an event type and its payload schema.

        Args:
            definition: Event type definition
        """
        self.event_types[definition.type] = definition

    def subscribe(self, event_type: str, callback: Callable[[Event], None]) -> None:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Type of event to listen for (e.g., 'roll.completed')
            callback: Function to call when event occurs.
                     Must accept Event as parameter.

        Examples:
            >>> def on_roll(event: Event):
            ...     print(f"Rolled {event.data['total']}")
            >>>
            >>> bus.subscribe('roll.completed', on_roll)
        """
        if event_type not in self.listeners:
            self.listeners[event_type] = []

        if callback not in self.listeners[event_type]:
            self.listeners[event_type].append(callback)

    def unsubscribe(self, event_type: str, callback: Callable[[Event], None]) -> None:
        """
        Unsubscribe from events of a specific type.

        Args:
            event_type: Type of event
            callback: Callback function to remove
        """
        if event_type in self.listeners:
            if callback in self.listeners[event_type]:
                self.listeners[event_type].remove(callback)

    def publish(self, event: Event) -> bool:
        """
        Validate an event and broadcast it to all subscribers.

        Args:
            event: Event to publish

        Returns:
            True if the event was delivered, False if its payload failed validation
        """
        definition = self.event_types.get(event.event_type)
        if definition is not None and definition.data_schema:
            try:
                jsonschema.validate(event.data, definition.data_schema)
            except jsonschema.ValidationError as e:
                logger.error(f"Dropping invalid '{event.event_type}' event: {e.message}")
                return False

        for callback in list(self.listeners.get(event.event_type, [])):
            try:
                callback(event)
            except Exception as e:
                # Don't let one listener's error stop others
                logger.error(f"Error in '{event.event_type}' listener {callback!r}: {e}", exc_info=True)
        return True

    def clear_listeners(self, event_type: Optional[str] = None) -> None:
        """
        Clear listeners for a specific event type or all listeners.

        Args:
            event_type: Event type to clear listeners for.
                       If None, clears all listeners.
        """
        if event_type:
            if event_type in self.listeners:
                self.listeners[event_type] = []
        else:
            self.listeners = {}

    def get_listener_count(self, event_type: Optional[str] = None) -> int:
        """
        Get the number of listeners for an event type.

        Args:
            event_type: Event type to count listeners for.
                       If None, returns total listener count across all types.

        Returns:
            Number of registered listeners
        """
        if event_type:
            return len(self.listeners.get(event_type, []))
        else:
            return sum(len(listeners) for listeners in self.listeners.values())
