"""
Event Manager — Subscription Registry
=======================================
Controls which targets receive which events, and in what order.

Storage:
    buckets:  event_name → {priority → [SubscriptionEntry, ...]}
    sorted:   event_name → flattened entries (memoized view)

Rules:
- Higher priority runs earlier; equal priorities run in subscribe order
- Ordering comes from walking buckets by descending priority,
  never from sorting a flat list
- Every add/remove for an event clears its sorted view
- Factories are resolved only while building the sorted view
  (get_subscribers, publish, unsubscribe), never by subscribe
  or has_subscribers
- A resolved factory is written back into its entry and never fires again
- Single-threaded: no locks, callbacks may re-enter
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from event_manager.errors import InvalidPriority
from event_manager.targets import (
    Direct,
    Target,
    describe,
    is_factory,
    is_pair,
    resolve,
    targets_match,
    validate_target,
)

logger = logging.getLogger("event_manager.registry")

DEFAULT_PRIORITY = 0


# ══════════════════════════════════════════════════════════════
# SUBSCRIPTION ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(eq=False)
class SubscriptionEntry:
    """
    One registered subscription: a mutable slot around its target.

    Entries compare by identity. Two subscriptions of the same
    callable are two distinct entries.
    """

    target: Target
    priority: int = DEFAULT_PRIORITY
    only_once: bool = False
    spent: bool = False  # only_once entry already invoked


# ══════════════════════════════════════════════════════════════
# SUBSCRIPTION REGISTRY
# ══════════════════════════════════════════════════════════════

class SubscriptionRegistry:
    """
    In-memory, priority-bucketed registry of subscriptions.

    The instance itself is handed to factory producers, so a lazily
    built subscriber can keep a reference to the manager.
    """

    def __init__(self) -> None:
        self._buckets: dict[str, dict[int, list[SubscriptionEntry]]] = {}
        self._sorted: dict[str, list[SubscriptionEntry]] = {}
        self._versions: dict[str, int] = {}

    # ── Mutation ──────────────────────────────────────────────

    def subscribe(
        self,
        event_name: str,
        target: Any,
        priority: int = DEFAULT_PRIORITY,
        only_once: bool = False,
    ) -> None:
        """
        Register target for event_name.

        Args:
            event_name: Event to listen to
            target:     Callable, (obj, "method") pair, or Factory
            priority:   Higher runs earlier (default 0)
            only_once:  Remove automatically after the first invocation

        Raises:
            InvalidTarget:   target has no recognized shape
            InvalidPriority: priority is not an int
        """
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise InvalidPriority(priority)
        target = validate_target(target)

        entry = SubscriptionEntry(
            target=target,
            priority=priority,
            only_once=bool(only_once),
        )
        self._buckets.setdefault(event_name, {}).setdefault(
            priority, []
        ).append(entry)
        self._invalidate(event_name)

        logger.debug(
            f"Subscribed: {describe(target)} → {event_name} "
            f"(priority: {priority}, only_once: {entry.only_once})"
        )

    def unsubscribe(self, event_name: str, target: Any) -> None:
        """
        Remove every subscription of event_name matching target.

        A Factory target is resolved on the spot for comparison.
        Stored factories of event_name are resolved (and memoized) too,
        so a subscription can be removed by its factory or by its product.
        Never raises for unknown events or targets.
        """
        if not self._buckets.get(event_name):
            return

        if is_factory(target):
            target = resolve(target, self, check_callable=False)
        elif is_pair(target):
            target = tuple(target)

        self._sorted_entries(event_name)

        buckets = self._buckets.get(event_name)
        if not buckets:
            return

        removed = 0
        for priority in list(buckets):
            bucket = buckets[priority]
            kept = []
            for entry in bucket:
                self._resolve_entry(entry)
                if targets_match(entry.target, target):
                    removed += 1
                else:
                    kept.append(entry)
            if kept:
                buckets[priority] = kept
            else:
                del buckets[priority]

        if not buckets:
            del self._buckets[event_name]
        self._invalidate(event_name)

        logger.debug(
            f"Unsubscribed: {describe(target)} ✗ {event_name} "
            f"({removed} removed)"
        )

    def _remove_entry(self, event_name: str, entry: SubscriptionEntry) -> bool:
        """Remove exactly this entry (by identity). True if it was present."""
        buckets = self._buckets.get(event_name)
        if not buckets:
            return False
        bucket = buckets.get(entry.priority)
        if not bucket:
            return False

        for index, candidate in enumerate(bucket):
            if candidate is entry:
                del bucket[index]
                break
        else:
            return False

        if not bucket:
            del buckets[entry.priority]
        if not buckets:
            del self._buckets[event_name]
        self._invalidate(event_name)
        return True

    def _invalidate(self, event_name: str) -> None:
        self._sorted.pop(event_name, None)
        self._versions[event_name] = self._versions.get(event_name, 0) + 1

    # ── Queries ───────────────────────────────────────────────

    def has_subscribers(self, event_name: Optional[str] = None) -> bool:
        """
        Does event_name (or, if omitted, any event) have subscriptions?

        Looks at raw buckets only: never resolves factories and never
        builds the sorted view.
        """
        if event_name is not None:
            return bool(self._buckets.get(event_name))
        return any(self._buckets.values())

    def get_subscribers(
        self, event_name: Optional[str] = None
    ) -> Union[list[Direct], dict[str, list[Direct]]]:
        """
        Resolved targets in dispatch order.

        With event_name: a list (empty if nothing is registered).
        Without: {event_name: list} for every event that has subscribers.
        """
        if event_name is not None:
            return [entry.target for entry in self._sorted_entries(event_name)]

        result: dict[str, list[Direct]] = {}
        for name in list(self._buckets):
            entries = self._sorted_entries(name)
            if entries:
                result[name] = [entry.target for entry in entries]
        return result

    def get_subscriptions(self, event_name: str) -> list[SubscriptionEntry]:
        """Entries for event_name in dispatch order, factories resolved."""
        return list(self._sorted_entries(event_name))

    # ── Sorted view ───────────────────────────────────────────

    def _sorted_entries(self, event_name: str) -> list[SubscriptionEntry]:
        cached = self._sorted.get(event_name)
        if cached is None:
            cached = self._build_sorted(event_name)
        return cached

    def _build_sorted(self, event_name: str) -> list[SubscriptionEntry]:
        buckets = self._buckets.get(event_name)
        if not buckets:
            return []

        version = self._versions.get(event_name, 0)
        ordered: list[SubscriptionEntry] = []
        for priority in sorted(buckets, reverse=True):
            for entry in list(buckets.get(priority, ())):
                self._resolve_entry(entry)
                ordered.append(entry)

        # A factory may have (un)subscribed this event while resolving.
        if self._versions.get(event_name, 0) == version:
            self._sorted[event_name] = ordered
            return ordered
        return self._build_sorted(event_name)

    def _resolve_entry(self, entry: SubscriptionEntry) -> None:
        if not is_factory(entry.target):
            return
        factory = entry.target
        entry.target = resolve(factory, self)
        logger.debug(
            f"Resolved {describe(factory)} → {describe(entry.target)}"
        )
