"""
Event Manager — Process Lifecycle
===================================
Host-side wiring of the reserved shutdown event.

A Manager never registers anything at construction time.
The host decides whether interpreter exit should publish
ManagerSettings.shutdown_event, by calling install_shutdown_hook().
"""

from __future__ import annotations

import atexit
import logging
from typing import Callable, Optional

from event_manager.manager import Manager

logger = logging.getLogger("event_manager.lifecycle")

_default_manager: Optional[Manager] = None
_installed_hooks: dict[int, Callable[[], None]] = {}


def get_default_manager() -> Manager:
    """Process-wide Manager, built on first use."""
    global _default_manager
    if _default_manager is None:
        _default_manager = Manager()
    return _default_manager


def reset_default_manager() -> None:
    """Discard the process-wide Manager (and its shutdown hook)."""
    global _default_manager
    if _default_manager is not None:
        uninstall_shutdown_hook(_default_manager)
    _default_manager = None


def install_shutdown_hook(
    manager: Manager, event_name: Optional[str] = None
) -> Callable[[], None]:
    """
    Publish event_name (default: the manager's shutdown_event) once at exit.

    Installing twice for the same manager returns the first hook.
    """
    existing = _installed_hooks.get(id(manager))
    if existing is not None:
        return existing

    name = event_name or manager.settings.shutdown_event

    def _publish_shutdown() -> None:
        _installed_hooks.pop(id(manager), None)
        manager.publish(name)

    atexit.register(_publish_shutdown)
    _installed_hooks[id(manager)] = _publish_shutdown
    logger.info(f"Shutdown hook installed: '{name}'")
    return _publish_shutdown


def uninstall_shutdown_hook(manager: Manager) -> None:
    hook = _installed_hooks.pop(id(manager), None)
    if hook is None:
        return
    atexit.unregister(hook)
    logger.info("Shutdown hook removed")
