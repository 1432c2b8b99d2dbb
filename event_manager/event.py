"""
Event Manager — Event
=======================
The mutable object handed to every subscriber of one publish pass.

An Event carries:
- subject:  opaque reference to whatever published it (may be None)
- values:   ordered value store, readable and writable by subscribers
- propagation flag: one-way; once stopped, never reset
"""

from __future__ import annotations

from typing import Any, Hashable, Mapping, Optional

from event_manager.value_store import ValueStore


class Event(ValueStore):
    """Value store + subject + propagation-stop flag."""

    def __init__(
        self,
        subject: Any = None,
        values: Optional[Mapping[Hashable, Any]] = None,
    ) -> None:
        self._subject = subject
        self._propagation_stopped = False
        super().__init__(values)

    def get_subject(self) -> Any:
        return self._subject

    def stop_propagation(self) -> None:
        """Skip every remaining subscriber of the current publish pass."""
        self._propagation_stopped = True

    def is_propagation_stopped(self) -> bool:
        return self._propagation_stopped
