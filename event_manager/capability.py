"""
Event Manager — Capability Sources
====================================
Bulk subscription: an object declares all of its subscriptions
through one method, get_subscriptions(), returning

    {event_name: spec, ...}

where spec is one of:
    "method_name"                      → (obj, "method_name"), priority 0
    callable                           → callable, priority 0
    ("method_name", 10, True)          → one subscription; members in any
                                         order, told apart by type:
                                           str / callable → target
                                           bool           → only_once
                                           int            → priority
    [spec, spec, ...]                  → several subscriptions

A sequence is first read as one subscription; only if that fails is
it read as a list of subscriptions. So ["on_foo", 10] is one
subscription, [["on_foo"], ["on_bar", 10]] is two.

Normalization is pure and deterministic: calling it twice on an
unchanged source yields equal results, which is what makes
remove_capability the exact inverse of add_capability.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Sequence

from event_manager.errors import ConfigurationError, debug_type
from event_manager.registry import DEFAULT_PRIORITY
from event_manager.targets import Direct


class CapabilitySource(Protocol):
    """Anything exposing get_subscriptions() qualifies."""

    def get_subscriptions(self) -> Mapping[str, Any]:
        ...  # pragma: no cover


@dataclass(frozen=True)
class Subscription:
    """Canonical (target, priority, only_once) triple."""

    target: Direct
    priority: int = DEFAULT_PRIORITY
    only_once: bool = False


# ══════════════════════════════════════════════════════════════
# NORMALIZATION
# ══════════════════════════════════════════════════════════════

def normalize_capability(source: Any) -> dict[str, list[Subscription]]:
    """
    Call source.get_subscriptions() and normalize every declaration.

    Raises:
        ConfigurationError: no get_subscriptions(), a non-mapping result,
                            or a declaration that cannot be normalized
    """
    source_name = debug_type(source)
    getter = getattr(source, "get_subscriptions", None)
    if not callable(getter):
        raise ConfigurationError(
            f"{source_name} does not define get_subscriptions().",
            source=source,
        )

    declared = getter()
    if not isinstance(declared, Mapping):
        raise ConfigurationError(
            f"Expected mapping from {source_name}.get_subscriptions(). "
            f"Got {debug_type(declared)}.",
            source=source,
        )

    normalized: dict[str, list[Subscription]] = {}
    for event_name, spec in declared.items():
        subscriptions = _normalize_spec(source, spec)
        if subscriptions is None:
            raise ConfigurationError(
                f"{source_name}.get_subscriptions(): unexpected "
                f"subscriber(s) defined for '{event_name}'.",
                source=source,
                event_name=event_name,
            )
        normalized[event_name] = subscriptions
    return normalized


def _normalize_spec(source: Any, spec: Any) -> Optional[list[Subscription]]:
    single = _normalize_one(source, spec)
    if single is not None:
        return [single]

    if not isinstance(spec, (list, tuple)):
        return None

    subscriptions = []
    for item in spec:
        one = _normalize_one(source, item)
        if one is None:
            return None
        subscriptions.append(one)
    return subscriptions


def _normalize_one(source: Any, spec: Any) -> Optional[Subscription]:
    if isinstance(spec, str):
        return Subscription(target=(source, spec)) if spec else None
    if isinstance(spec, (list, tuple)):
        return _normalize_sequence(source, spec)
    if callable(spec):
        return Subscription(target=spec)
    return None


def _normalize_sequence(
    source: Any, values: Sequence[Any]
) -> Optional[Subscription]:
    slots: dict[str, Any] = {}
    for value in values:
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            slot = "only_once"
        elif isinstance(value, int):
            slot = "priority"
        elif (isinstance(value, str) and value) or callable(value):
            slot = "target"
        else:
            return None
        if slot in slots:
            return None
        slots[slot] = value

    target = slots.get("target")
    if target is None:
        return None
    if isinstance(target, str):
        target = (source, target)
    return Subscription(
        target=target,
        priority=slots.get("priority", DEFAULT_PRIORITY),
        only_once=slots.get("only_once", False),
    )
