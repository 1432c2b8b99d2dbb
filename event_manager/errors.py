"""
Event Manager — Errors
========================
Error types for subscription and dispatch.

Subscriber exceptions are NOT wrapped here: whatever a callback
raises during publish reaches the publisher unchanged.
"""

from typing import Any, Optional


def debug_type(value: Any) -> str:
    """Type name of a value, suitable for error messages."""
    if value is None:
        return "None"
    return type(value).__qualname__


class EventManagerError(Exception):
    """Base error for Event Manager operations."""
    pass


class InvalidTarget(EventManagerError):
    """Subscribe target is neither callable nor a well-formed factory."""

    def __init__(self, target: Any, reason: Optional[str] = None):
        self.target = target
        message = (
            f"Expected callable, (object, 'method') pair or Factory, "
            f"but {debug_type(target)} provided."
        )
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class InvalidPriority(EventManagerError):
    """Priority is not an integer."""

    def __init__(self, priority: Any):
        self.priority = priority
        super().__init__(
            f"Priority must be an int, got {debug_type(priority)}."
        )


class ConfigurationError(EventManagerError):
    """
    Bulk subscription declaration or settings cannot be normalized.

    event_name is set when a single event's declaration is at fault.
    """

    def __init__(
        self,
        message: str,
        source: Any = None,
        event_name: Optional[str] = None,
    ):
        self.source = source
        self.event_name = event_name
        super().__init__(message)
