"""
Event Manager — Dispatcher
============================
Publishes events to registered subscribers.

Dispatch behavior:
1. Take a snapshot of the sorted subscriptions for the event name
2. For each entry, in order:
   a. Stop if the event's propagation was stopped
   b. Call target(event, event_name, manager)
   c. Remove the entry if it was subscribed only_once
   d. Copy a non-None return value into event["return"] (if expected)
3. Return the event

Reentrancy:
- Subscribers may subscribe, unsubscribe or publish while being called
- Those changes hit the live registry; the running pass keeps its snapshot
- A nested publish builds a fresh view and runs to completion on its own

Failure:
- A subscriber exception propagates to the publisher as-is
- Remaining subscribers of that pass are NOT called
- An only_once entry whose callback raised stays subscribed
"""

from __future__ import annotations

import logging
from typing import Any, Hashable, Mapping, Optional

from event_manager.capability import Subscription, normalize_capability
from event_manager.config import ManagerSettings
from event_manager.errors import debug_type
from event_manager.event import Event
from event_manager.registry import SubscriptionEntry, SubscriptionRegistry
from event_manager.targets import describe, invoke


class Manager(SubscriptionRegistry):
    """
    Publish/subscribe event manager.

    Subscribers are called with (event, event_name, manager).
    """

    def __init__(self, settings: Optional[ManagerSettings] = None) -> None:
        super().__init__()
        self._settings = settings or ManagerSettings()
        self._logger = logging.getLogger(self._settings.logger_name)

    @property
    def settings(self) -> ManagerSettings:
        return self._settings

    # ── Publish ───────────────────────────────────────────────

    def publish(
        self,
        event_name: str,
        event_or_subject: Any = None,
        values: Optional[Mapping[Hashable, Any]] = None,
    ) -> Event:
        """
        Publish event_name.

        Args:
            event_name:       Event to publish
            event_or_subject: An Event to pass through, or the subject
                              of a new Event
            values:           Initial values of a new Event

        Returns:
            The Event handed to subscribers (the given one, or a new one).
        """
        if isinstance(event_or_subject, Event):
            event = event_or_subject
        else:
            event = Event(event_or_subject, values)

        snapshot = list(self._sorted_entries(event_name))
        if not snapshot:
            self._logger.debug(f"No subscribers for '{event_name}'")
            return event

        self._do_publish(event_name, snapshot, event)
        return event

    def _do_publish(
        self,
        event_name: str,
        snapshot: list[SubscriptionEntry],
        event: Event,
    ) -> None:
        called = 0
        for entry in snapshot:
            if event.is_propagation_stopped():
                self._logger.debug(
                    f"Propagation of '{event_name}' stopped after "
                    f"{called} subscriber(s)"
                )
                break
            if entry.spent:
                continue

            if entry.only_once:
                # Claimed before the call so a nested publish skips it.
                entry.spent = True
            try:
                result = invoke(entry.target, event, event_name, self)
            except Exception:
                entry.spent = False
                raise
            called += 1
            self._logger.debug(
                f"Dispatched {event_name} → {describe(entry.target)}"
            )

            if entry.only_once:
                self._remove_entry(event_name, entry)
            if self._settings.attach_return:
                self._attach_return(result, event)

        self._logger.debug(
            f"Published '{event_name}': {called} of {len(snapshot)} "
            f"subscriber(s) called"
        )

    @staticmethod
    def _attach_return(result: Any, event: Event) -> None:
        """Store result in event["return"] if that slot exists and is empty."""
        if result is None or not event.has_value("return"):
            return
        current = event.get_value("return")
        if current is None or (isinstance(current, str) and current == ""):
            event.set_value("return", result)

    # ── Capability sources ────────────────────────────────────

    def add_capability(self, source: Any) -> dict[str, list[Subscription]]:
        """
        Subscribe everything source.get_subscriptions() declares.

        Returns:
            The normalized declarations: {event_name: [Subscription, ...]}

        Raises:
            ConfigurationError: declarations cannot be normalized
        """
        normalized = normalize_capability(source)
        for event_name, subscriptions in normalized.items():
            for subscription in subscriptions:
                self.subscribe(
                    event_name,
                    subscription.target,
                    subscription.priority,
                    subscription.only_once,
                )

        self._logger.info(
            f"Capability source added: {debug_type(source)} "
            f"({_count(normalized)} subscription(s), "
            f"{len(normalized)} event(s))"
        )
        return normalized

    def remove_capability(self, source: Any) -> dict[str, list[Subscription]]:
        """
        Unsubscribe everything source.get_subscriptions() declares.

        Exact inverse of add_capability as long as the declarations
        have not changed in between.
        """
        normalized = normalize_capability(source)
        for event_name, subscriptions in normalized.items():
            for subscription in subscriptions:
                self.unsubscribe(event_name, subscription.target)

        self._logger.info(
            f"Capability source removed: {debug_type(source)} "
            f"({_count(normalized)} subscription(s))"
        )
        return normalized


def _count(normalized: dict[str, list[Subscription]]) -> int:
    return sum(len(subscriptions) for subscriptions in normalized.values())

