"""
Event Manager — Public API
============================
In-process publish/subscribe.
Subscribe with a priority, publish by name, stop when told to.
"""

from event_manager.capability import CapabilitySource, Subscription
from event_manager.config import SHUTDOWN_EVENT, ManagerSettings
from event_manager.errors import (
    ConfigurationError,
    EventManagerError,
    InvalidPriority,
    InvalidTarget,
)
from event_manager.event import Event
from event_manager.manager import Manager
from event_manager.registry import DEFAULT_PRIORITY, SubscriptionEntry
from event_manager.targets import Factory
from event_manager.value_store import ValueStore

__all__ = [
    "Manager",
    "Event",
    "ValueStore",
    "Factory",
    "Subscription",
    "SubscriptionEntry",
    "CapabilitySource",
    "ManagerSettings",
    "DEFAULT_PRIORITY",
    "SHUTDOWN_EVENT",
    "EventManagerError",
    "InvalidTarget",
    "InvalidPriority",
    "ConfigurationError",
]
