"""In-process event bridge for registry notifications.

This module provides the EventBridge class that wraps pyee's EventEmitter
so hosts can observe registry changes (for audit output or to rebuild
caches) without the registry knowing about them.

Example:
    from node_map import EventBridge, EventNames, ProviderRegistry

    bridge = EventBridge()
    bridge.start()
    providers = ProviderRegistry(event_bridge=bridge)

    def on_registered(key, entry):
        print(f"{key} -> {entry.handler_name}")

    bridge.subscribe(EventNames.HANDLER_REGISTERED, on_registered)
    providers.register("file", FileProvider)  # prints "file -> FileProvider"
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pyee.base import EventEmitter

from .logging import log_debug, log_info, log_warn


class EventNames:
    """Constants for event names published by registries.

    Attributes:
        HANDLER_REGISTERED: Emitted after an entry is inserted (key, entry).
        REGISTRY_CLEARED: Emitted after a registry is cleared (registry).
        REGISTRY_FROZEN: Emitted when a registry is frozen (registry).
    """

    HANDLER_REGISTERED = "handler.registered"
    REGISTRY_CLEARED = "registry.cleared"
    REGISTRY_FROZEN = "registry.frozen"


class EventBridge:
    """In-process event bus for registry notifications.

    Events are only delivered while the bridge is active. Listener
    exceptions propagate to the publisher (pyee's default for the
    synchronous emitter is to raise from emit()).

    Events:
        handler.registered: Entry registered (key, entry)
        registry.cleared: Registry cleared (registry)
        registry.frozen: Registry frozen (registry)
    """

    def __init__(self) -> None:
        """Initialize the EventBridge with a fresh pyee EventEmitter."""
        self._emitter = EventEmitter()
        self._active = False

    def start(self) -> None:
        """Activate the event bridge.

        Calling start() multiple times is safe (no-op if already active).
        """
        if self._active:
            return
        self._active = True
        log_info("EventBridge started")

    def stop(self) -> None:
        """Deactivate the event bridge and remove all listeners.

        Calling stop() multiple times is safe (no-op if not active).
        """
        if not self._active:
            return
        self._active = False
        self._emitter.remove_all_listeners()
        log_info("EventBridge stopped")

    def subscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """Subscribe to an event.

        Args:
            event: Event name to subscribe to.
            handler: Callback function to invoke when event is published.
        """
        self._emitter.on(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Subscribed to {event}: {handler_name}")

    def subscribe_once(self, event: str, handler: Callable[..., Any]) -> None:
        """Subscribe to an event for a single invocation."""
        self._emitter.once(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Subscribed once to {event}: {handler_name}")

    def unsubscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """Unsubscribe from an event."""
        self._emitter.remove_listener(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Unsubscribed from {event}: {handler_name}")

    def publish(self, event: str, *args: Any, **kwargs: Any) -> None:
        """Publish an event to all subscribers.

        If the bridge is not active, a warning is logged and the event
        is dropped.

        Args:
            event: Event name to publish.
            *args: Positional arguments passed to handlers.
            **kwargs: Keyword arguments passed to handlers.
        """
        if not self._active:
            log_warn(f"EventBridge not active, dropping event: {event}")
            return

        log_debug(f"Publishing event: {event}")
        self._emitter.emit(event, *args, **kwargs)

    def listener_count(self, event: str) -> int:
        """Get the number of listeners for an event."""
        return len(self._emitter.listeners(event))

    @property
    def is_active(self) -> bool:
        """True if the bridge is active and will deliver events."""
        return self._active


__all__ = [
    "EventBridge",
    "EventNames",
]
