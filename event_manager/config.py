"""
Event Manager — Settings
==========================
Manager behavior that hosts may tune.
Defaults work without any configuration.
"""

from __future__ import annotations

from dataclasses import dataclass

from event_manager.errors import ConfigurationError

SHUTDOWN_EVENT = "python.shutdown"


@dataclass(frozen=True)
class ManagerSettings:
    """
    Settings for one Manager instance.

    shutdown_event: reserved name published by the shutdown hook
    attach_return:  copy subscriber return values into event["return"]
    logger_name:    logger used for dispatch logs
    """

    shutdown_event: str = SHUTDOWN_EVENT
    attach_return: bool = True
    logger_name: str = "event_manager.manager"

    def __post_init__(self) -> None:
        if not isinstance(self.shutdown_event, str) or not self.shutdown_event:
            raise ConfigurationError(
                f"shutdown_event must be a non-empty string, "
                f"got {self.shutdown_event!r}.",
                source=self,
            )
        if not isinstance(self.attach_return, bool):
            raise ConfigurationError(
                f"attach_return must be a bool, got {self.attach_return!r}.",
                source=self,
            )
        if not isinstance(self.logger_name, str) or not self.logger_name:
            raise ConfigurationError(
                f"logger_name must be a non-empty string, "
                f"got {self.logger_name!r}.",
                source=self,
            )
