"""
Event Manager — App Configuration
===================================
Django host integration: wires the reserved shutdown event of the
default manager when Django finishes loading.

Settings (all optional):
    EVENT_MANAGER_SHUTDOWN_EVENT         reserved event name
    EVENT_MANAGER_INSTALL_SHUTDOWN_HOOK  default True

Rules:
- Runs once via ready()
- Skips under pytest (tests install hooks explicitly)
"""

import logging
import os
import sys

from django.apps import AppConfig
from django.conf import settings

from event_manager.config import SHUTDOWN_EVENT

logger = logging.getLogger("event_manager.apps")


def _is_pytest_context() -> bool:
    return (
        "PYTEST_CURRENT_TEST" in os.environ
        or "pytest" in sys.modules
    )


class EventManagerConfig(AppConfig):
    name = "event_manager"
    label = "event_manager"
    verbose_name = "Event Manager"

    def ready(self):
        if _is_pytest_context():
            logger.info("Shutdown hook wiring skipped for test context.")
            return
        self.install_hooks()

    def install_hooks(self):
        """Install the shutdown hook on the default manager, if enabled."""
        if not getattr(settings, "EVENT_MANAGER_INSTALL_SHUTDOWN_HOOK", True):
            logger.info("Shutdown hook disabled by settings.")
            return None

        from event_manager.lifecycle import (
            get_default_manager,
            install_shutdown_hook,
        )

        event_name = getattr(
            settings, "EVENT_MANAGER_SHUTDOWN_EVENT", SHUTDOWN_EVENT
        )
        return install_shutdown_hook(get_default_manager(), event_name)
