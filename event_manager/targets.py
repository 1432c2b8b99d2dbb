"""
Event Manager — Subscription Targets
======================================
What a subscription points at, and how it becomes callable.

A target is one of:
- Direct callable:     any callable (function, bound method, object with __call__)
- Direct pair:         (obj, "method_name"), invoked as getattr(obj, name)(...)
- Factory:             Factory(producer) or Factory(producer, "method_name")

A Factory is lazy. Its producer receives the manager and runs at most
once per subscription entry. The product replaces the factory in the
entry for good:
    Factory(producer)          → producer(manager)            (must be callable)
    Factory(producer, "name")  → (producer(manager), "name")

Matching (used by unsubscribe and only-once removal):
- pairs match when the object is the same object and the names are equal
- a bound method counts as the pair (method.__self__, method.__name__),
  and also matches a pair on the same object whose attribute is an
  alias of the same function
- anything else matches by identity only
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from event_manager.errors import InvalidTarget, debug_type


# ══════════════════════════════════════════════════════════════
# FACTORY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Factory:
    """Deferred target: producer(manager) builds the real subscriber."""

    producer: Callable[[Any], Any]
    method: Optional[str] = None

    def __post_init__(self) -> None:
        if not callable(self.producer):
            raise InvalidTarget(
                self.producer, "Factory producer must be callable."
            )
        if self.method is not None and (
            not isinstance(self.method, str) or not self.method
        ):
            raise InvalidTarget(
                self.method, "Factory method must be a non-empty string."
            )


Pair = tuple[Any, str]
Direct = Union[Callable[..., Any], Pair]
Target = Union[Direct, Factory]


# ══════════════════════════════════════════════════════════════
# SHAPE CHECKS
# ══════════════════════════════════════════════════════════════

def is_factory(value: Any) -> bool:
    return isinstance(value, Factory)


def is_pair(value: Any) -> bool:
    return (
        isinstance(value, (tuple, list))
        and len(value) == 2
        and isinstance(value[1], str)
    )


def validate_target(target: Any) -> Target:
    """
    Check target shape and return its canonical form.

    Lists are converted to tuples so stored pairs are immutable.

    Raises:
        InvalidTarget: neither callable, pair, nor Factory
    """
    if is_factory(target):
        return target

    if is_pair(target):
        obj, method = target
        if obj is None or not method:
            raise InvalidTarget(
                target, "Pair must be (object, 'method_name')."
            )
        return (obj, method)

    if callable(target):
        return target

    raise InvalidTarget(target)


# ══════════════════════════════════════════════════════════════
# LAZY RESOLUTION
# ══════════════════════════════════════════════════════════════

def resolve(target: Target, manager: Any, check_callable: bool = True) -> Any:
    """
    Materialize a Factory into a direct target.

    Direct targets are returned unchanged. Memoization is the caller's
    job: the registry writes the result back into the owning entry.
    With check_callable=False a non-callable product is returned as-is,
    for callers that only compare it.
    """
    if not is_factory(target):
        return target

    product = target.producer(manager)
    if target.method is None:
        if check_callable and not callable(product):
            raise InvalidTarget(
                product,
                f"Factory producer returned {debug_type(product)}, "
                f"which is not callable.",
            )
        return product
    return (product, target.method)


def invoke(target: Direct, *args: Any) -> Any:
    """Call a resolved target."""
    if isinstance(target, tuple):
        obj, method = target
        return getattr(obj, method)(*args)
    return target(*args)


# ══════════════════════════════════════════════════════════════
# MATCHING
# ══════════════════════════════════════════════════════════════

def _as_pair(target: Any) -> Optional[Pair]:
    if isinstance(target, tuple) and is_pair(target):
        return target
    if inspect.ismethod(target):
        return (target.__self__, target.__name__)
    return None


def _function_of(target: Any) -> Any:
    if inspect.ismethod(target):
        return target.__func__
    obj, name = target
    bound = getattr(obj, name, None)
    return bound.__func__ if inspect.ismethod(bound) else None


def targets_match(left: Direct, right: Direct) -> bool:
    """Do two resolved targets denote the same subscriber?"""
    left_pair = _as_pair(left)
    right_pair = _as_pair(right)
    if left_pair is not None and right_pair is not None:
        if left_pair[0] is not right_pair[0]:
            return False
        if left_pair[1] == right_pair[1]:
            return True
        # Pair against pair needs equal names; a bound method may
        # reach its function through an alias attribute.
        if not (inspect.ismethod(left) or inspect.ismethod(right)):
            return False
        function = _function_of(left)
        return function is not None and function is _function_of(right)
    if left_pair is not None or right_pair is not None:
        return False
    return left is right


def describe(target: Any) -> str:
    """Short human-readable name for logs."""
    if is_factory(target):
        producer = getattr(target.producer, "__qualname__", repr(target.producer))
        suffix = f", {target.method!r}" if target.method else ""
        return f"Factory({producer}{suffix})"
    if isinstance(target, tuple):
        obj, method = target
        return f"{type(obj).__qualname__}.{method}"
    return getattr(target, "__qualname__", type(target).__qualname__)
