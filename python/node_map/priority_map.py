"""Priority arrays: bulk registration in preference order.

A priority array lists implementations most preferred first:

    priority = ProviderPriorityMap(providers)
    priority.set_priority_array("service", [Systemd, Upstart, Init], os="linux")

Registries break specificity ties in favor of the most recent
registration, so the array is registered in reverse: the last element
goes in first and the first element ends up ahead of the others.
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any

from .entries import NodeEntry
from .logging import log_info
from .registry import NodeMap, ProviderRegistry, ResourceRegistry
from .types import LogContext


class PriorityMap:
    """Registers ordered lists of handler classes into a registry.

    Holds a reference to one registry and owns no data of its own.
    """

    def __init__(self, handler_registry: NodeMap) -> None:
        self._handler_registry = handler_registry

    @property
    def handler_registry(self) -> NodeMap:
        return self._handler_registry

    def set_priority_array(
        self,
        key: Hashable,
        priority_array: Any,
        **filters: Any,
    ) -> list[NodeEntry]:
        """Register `priority_array` under `key`, first element most preferred.

        Args:
            key: Registry key (resource name).
            priority_array: A handler class or a list of handler classes.
            **filters: Filter options applied to every entry.

        Returns:
            The registered entries, in registration order.

        Raises:
            FilterSpecError: If the filter options are malformed. Nothing
                is registered in that case.
        """
        if isinstance(priority_array, (list, tuple)):
            handler_classes = list(priority_array)
        else:
            handler_classes = [priority_array]

        entries = [
            self._handler_registry.build_entry(key, handler_class, **filters)
            for handler_class in reversed(handler_classes)
        ]
        registered = self._handler_registry.register_handlers(key, entries)

        log_info(
            f"Set priority array for '{key}': "
            + ", ".join(getattr(c, "__name__", repr(c)) for c in handler_classes),
            LogContext(registry=self._handler_registry.name, key=str(key), operation="set_priority_array"),
        )
        return registered

    def get_priority_array(self, node: Any, key: Hashable) -> list[NodeEntry]:
        """Return the entries for `key` that run on `node`, most preferred first."""
        return self._handler_registry.candidates_for_node(node, key)

    def get_priority_array_classes(self, node: Any, key: Hashable) -> list[Any]:
        """Like get_priority_array(), but return the handler classes."""
        return [_produced_class(entry) for entry in self.get_priority_array(node, key)]


def _produced_class(entry: NodeEntry) -> Any:
    if hasattr(entry, "provider_class"):
        return entry.provider_class
    return getattr(entry, "resource_class", None)


class ResourcePriorityMap(PriorityMap):
    """Priority arrays of resource classes."""

    def __init__(self, handler_registry: ResourceRegistry) -> None:
        super().__init__(handler_registry)


class ProviderPriorityMap(PriorityMap):
    """Priority arrays of provider classes."""

    def __init__(self, handler_registry: ProviderRegistry) -> None:
        super().__init__(handler_registry)


__all__ = [
    "PriorityMap",
    "ResourcePriorityMap",
    "ProviderPriorityMap",
]
