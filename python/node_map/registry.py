"""Specificity-ordered handler registry.

A NodeMap maps a key (a resource name, for example) to a bucket of
entries kept sorted from most to least specific. Resolution walks the
bucket in order and returns the first entry that handles the arguments.

Ordering Contract:
1. A new entry is inserted just ahead of the first existing entry it is
   not strictly less specific than.
2. If it is less specific than every existing entry, it is appended.
3. Among equally specific entries the one registered last comes first.

Usage:
    providers = ProviderRegistry()
    providers.register("file", FileProvider, resource_class="File")
    providers.register("file", LinuxFileProvider, resource_class="File", os="linux")

    # On a linux node the LinuxFileProvider entry wins
    providers.resolve_provider(file_resource, "create")

Thread Safety:
Writers serialize on an RLock and replace buckets with new tuples, so a
concurrent reader sees either the old bucket or the new one, never a
partially inserted one.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterable, Iterator
from typing import TYPE_CHECKING, Any

from .entries import NodeEntry, ProviderEntry, ResourceEntry, compare_specificity
from .event_bridge import EventNames
from .exceptions import FilterSpecError, RegistrationError, RegistryFrozenError
from .logging import log_debug, log_error, log_info, log_trace
from .types import FilterOptions, LogContext

if TYPE_CHECKING:
    from .event_bridge import EventBridge


class NodeMap:
    """Ordered mapping from key to specificity-sorted entries.

    Attributes:
        name: Registry name used in logs and events.
    """

    name = "node_map"
    entry_class: type[NodeEntry] = NodeEntry

    def __init__(
        self,
        name: str | None = None,
        event_bridge: EventBridge | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            name: Registry name for logs and events.
            event_bridge: Optional bridge notified of registry changes.
        """
        if name is not None:
            self.name = name
        self._map: dict[Hashable, tuple[NodeEntry, ...]] = {}
        self._lock = threading.RLock()
        self._frozen = False
        self._event_bridge = event_bridge

    def register_handler(self, key: Hashable, handler: NodeEntry) -> NodeEntry:
        """Insert an entry into the bucket for `key`.

        Args:
            key: Bucket key.
            handler: Entry to insert.

        Returns:
            The registered entry.

        Raises:
            RegistrationError: If the key or entry is invalid.
            RegistryFrozenError: If the registry is frozen.
        """
        self.register_handlers(key, [handler])
        return handler

    def register_handlers(self, key: Hashable, handlers: Iterable[NodeEntry]) -> list[NodeEntry]:
        """Insert several entries, in order, as one atomic update.

        Nothing is inserted if any entry is invalid. A handler.registered
        event is published for every entry even if a listener raises; the
        first listener error is re-raised after the entries are registered.

        Returns:
            The registered entries.
        """
        handlers = list(handlers)
        self._validate_key(key)
        for handler in handlers:
            self._validate_entry(handler)

        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(f"{self.name} is frozen; cannot register '{key}'")

            bucket = self._map.get(key, ())
            for handler in handlers:
                self._check_variant(key, bucket, handler)
                bucket = self._insert(bucket, handler)
            if handlers:
                self._map[key] = bucket

        listener_error: Exception | None = None
        for handler in handlers:
            log_info(
                f"Registered {handler.handler_name} for '{key}'",
                LogContext(registry=self.name, key=str(key), handler=handler.handler_name),
            )
            try:
                self._publish(EventNames.HANDLER_REGISTERED, key, handler)
            except Exception as e:
                log_error(
                    f"Listener failed for {handler.handler_name} on '{key}': {e}",
                    LogContext(registry=self.name, key=str(key), operation="register"),
                )
                if listener_error is None:
                    listener_error = e
        if listener_error is not None:
            raise listener_error
        return handlers

    def build_entry(self, key: Hashable, handler_class: Any, **filters: Any) -> NodeEntry:
        """Build an entry for `handler_class`; typed registries override this."""
        raise RegistrationError(
            f"{self.name} cannot build entries from classes; register NodeEntry objects instead"
        )

    @staticmethod
    def _insert(bucket: tuple[NodeEntry, ...], handler: NodeEntry) -> tuple[NodeEntry, ...]:
        # Insert at the first spot where we are preferred over, or tie with, the other
        for index, other in enumerate(bucket):
            if compare_specificity(handler, other) >= 0:
                return bucket[:index] + (handler,) + bucket[index:]
        return bucket + (handler,)

    def resolve(self, key: Hashable, *args: Any, **kwargs: Any) -> NodeEntry | None:
        """Return the first entry for `key` that handles the arguments.

        Returns:
            The best entry, or None if the key is unknown or nothing matches.
        """
        for handler in self._bucket(key):
            if handler.handles(*args, **kwargs):
                log_trace(
                    f"Resolved '{key}' to {handler.handler_name}",
                    LogContext(registry=self.name, key=str(key), operation="resolve"),
                )
                return handler

        log_debug(
            f"No handler matched '{key}'",
            LogContext(registry=self.name, key=str(key), operation="resolve"),
        )
        return None

    def candidates(self, key: Hashable, *args: Any, **kwargs: Any) -> list[NodeEntry]:
        """Return all entries for `key` that handle the arguments, best first."""
        return [handler for handler in self._bucket(key) if handler.handles(*args, **kwargs)]

    def resolve_for_node(self, node: Any, key: Hashable) -> NodeEntry | None:
        """Return the first entry for `key` whose node criteria match `node`."""
        for handler in self._bucket(key):
            if handler.matches_node(node):
                return handler
        return None

    def candidates_for_node(self, node: Any, key: Hashable) -> list[NodeEntry]:
        """Return all entries for `key` whose node criteria match `node`."""
        return [handler for handler in self._bucket(key) if handler.matches_node(node)]

    def each_handler(self, key: Hashable | None = None) -> Iterator[NodeEntry]:
        """Iterate over entries for one key, or for all keys, unfiltered."""
        if key is not None:
            yield from self._bucket(key)
            return
        for bucket in list(self._map.values()):
            yield from bucket

    def handlers(self, key: Hashable | None = None) -> list[NodeEntry]:
        """List entries for one key, or for all keys, unfiltered."""
        return list(self.each_handler(key))

    def keys(self) -> list[Hashable]:
        """Registered keys in registration order."""
        return list(self._map.keys())

    def clear(self) -> None:
        """Remove all entries and unfreeze the registry.

        Intended for test isolation.
        """
        with self._lock:
            self._map = {}
            self._frozen = False
        log_debug(f"Cleared {self.name}", LogContext(registry=self.name, operation="clear"))
        self._publish(EventNames.REGISTRY_CLEARED, self)

    def freeze(self) -> None:
        """Reject further registration.

        Call once configuration is loaded, before resolution starts.
        """
        with self._lock:
            if self._frozen:
                return
            self._frozen = True
        log_info(f"Froze {self.name}", LogContext(registry=self.name, operation="freeze"))
        self._publish(EventNames.REGISTRY_FROZEN, self)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def __contains__(self, key: object) -> bool:
        return key in self._map

    def __len__(self) -> int:
        """Return the number of registered keys."""
        return len(self._map)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, keys={len(self._map)})"

    def _bucket(self, key: Hashable) -> tuple[NodeEntry, ...]:
        return self._map.get(key, ())

    def _validate_key(self, key: Hashable) -> None:
        if key is None or key == "":
            raise RegistrationError(f"{self.name}: registry keys must be non-empty")

    def _validate_entry(self, handler: Any) -> None:
        if not isinstance(handler, self.entry_class):
            raise RegistrationError(
                f"{self.name}: expected {self.entry_class.__name__}, got {handler!r}"
            )

    def _check_variant(self, key: Hashable, bucket: tuple[NodeEntry, ...], handler: NodeEntry) -> None:
        if bucket and bucket[0].variant != handler.variant:
            raise RegistrationError(
                f"{self.name}: cannot mix {handler.variant} and {bucket[0].variant} entries under '{key}'"
            )

    def _publish(self, event: str, *args: Any) -> None:
        if self._event_bridge is not None:
            self._event_bridge.publish(event, *args)


class ResourceRegistry(NodeMap):
    """Registry of resource classes keyed by resource name.

    Example:
        resources = ResourceRegistry()
        resources.register("package", AptPackage, platform_family="debian")
        resources.resolve("package", debian_node).resource_class  # AptPackage
    """

    name = "resources"
    entry_class = ResourceEntry

    def build_entry(self, name: str, resource_class: Any, **filters: Any) -> ResourceEntry:
        """Validate filter options and build a ResourceEntry.

        Raises:
            FilterSpecError: If a filter option is unknown or malformed.
        """
        options = FilterOptions.from_kwargs(**filters)
        if options.resource_class is not None or options.action is not None:
            raise FilterSpecError("resource_class and action only apply to providers")
        return ResourceEntry(name, resource_class, **options.node_filters())

    def register(self, name: str, resource_class: Any, **filters: Any) -> ResourceEntry:
        """Register `resource_class` as a builder for resource `name`."""
        return self.register_handler(name, self.build_entry(name, resource_class, **filters))


class ProviderRegistry(NodeMap):
    """Registry of provider classes keyed by resource name.

    Example:
        providers = ProviderRegistry()
        providers.register("service", Systemd, os="linux", action=["start", "stop"])
        providers.resolve_provider(service_resource, "start").provider_class  # Systemd
    """

    name = "providers"
    entry_class = ProviderEntry

    def build_entry(self, name: str, provider_class: Any, **filters: Any) -> ProviderEntry:
        """Validate filter options and build a ProviderEntry.

        Raises:
            FilterSpecError: If a filter option is unknown or malformed.
        """
        options = FilterOptions.from_kwargs(**filters)
        return ProviderEntry(provider_class, **options.provider_filters())

    def register(self, name: str, provider_class: Any, **filters: Any) -> ProviderEntry:
        """Register `provider_class` for resources named `name`."""
        return self.register_handler(name, self.build_entry(name, provider_class, **filters))

    def resolve_provider(self, resource: Any, action: Any) -> ProviderEntry | None:
        """Return the best provider entry for `resource` and `action`.

        The key is the resource's resource_name.
        """
        return self.resolve(resource.resource_name, resource, action)

    def candidate_providers(self, resource: Any, action: Any) -> list[ProviderEntry]:
        """Return every provider entry for `resource` and `action`, best first."""
        return self.candidates(resource.resource_name, resource, action)


__all__ = [
    "NodeMap",
    "ResourceRegistry",
    "ProviderRegistry",
]
