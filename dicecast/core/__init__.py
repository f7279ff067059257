"""Core infrastructure: configuration, logging, events."""
