"""Dispatch tables: the resource and provider registries of one process.

DispatchTables is created once at startup, populated while configuration
loads, then frozen before any resolution happens:

    tables = DispatchTables.create()
    tables.set_provider_priority_array("service", [Systemd, Upstart], os="linux")
    tables.freeze()
    tables.provider_for_action(service_resource, "start")  # Systemd on linux

Hosts pass the instance to whatever dispatches resources; there is no
global accessor.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import PriorityConfigPath, apply_priority_config, load_priority_config
from .entries import NodeEntry
from .event_bridge import EventBridge
from .logging import log_info
from .priority_map import ProviderPriorityMap, ResourcePriorityMap
from .registry import ProviderRegistry, ResourceRegistry


@dataclass
class DispatchTables:
    """Resource and provider registries plus their priority maps.

    Attributes:
        resources: Registry of resource classes keyed by resource name.
        providers: Registry of provider classes keyed by resource name.
        resource_priority_map: Priority arrays over `resources`.
        provider_priority_map: Priority arrays over `providers`.
    """

    resources: ResourceRegistry
    providers: ProviderRegistry
    resource_priority_map: ResourcePriorityMap
    provider_priority_map: ProviderPriorityMap

    @classmethod
    def create(cls, event_bridge: EventBridge | None = None) -> DispatchTables:
        """Create empty tables.

        Args:
            event_bridge: Optional bridge both registries publish to.
        """
        resources = ResourceRegistry(event_bridge=event_bridge)
        providers = ProviderRegistry(event_bridge=event_bridge)
        return cls(
            resources=resources,
            providers=providers,
            resource_priority_map=ResourcePriorityMap(resources),
            provider_priority_map=ProviderPriorityMap(providers),
        )

    @classmethod
    def from_config(
        cls,
        path: str | Path | None = None,
        event_bridge: EventBridge | None = None,
    ) -> DispatchTables:
        """Create tables and apply the priority configuration file.

        When `path` is None the file is discovered with
        PriorityConfigPath; if none is found the tables stay empty.
        """
        tables = cls.create(event_bridge=event_bridge)
        config_path = Path(path) if path is not None else PriorityConfigPath.find_config_file()
        if config_path is not None:
            tables.apply_config(config_path)
        return tables

    def apply_config(self, path: str | Path) -> int:
        """Load a priority configuration file into these tables."""
        count = apply_priority_config(load_priority_config(path), self)
        log_info(f"Loaded priority config from {path}")
        return count

    def set_resource_priority_array(
        self, name: Hashable, resources: Any, **filters: Any
    ) -> list[NodeEntry]:
        return self.resource_priority_map.set_priority_array(name, resources, **filters)

    def get_resource_priority_array(self, node: Any, name: Hashable) -> list[Any]:
        return self.resource_priority_map.get_priority_array_classes(node, name)

    def set_provider_priority_array(
        self, name: Hashable, providers: Any, **filters: Any
    ) -> list[NodeEntry]:
        return self.provider_priority_map.set_priority_array(name, providers, **filters)

    def get_provider_priority_array(self, node: Any, name: Hashable) -> list[Any]:
        return self.provider_priority_map.get_priority_array_classes(node, name)

    def provider_for_action(self, resource: Any, action: Any) -> Any:
        """Return the provider class that runs `action` on `resource`, or None."""
        entry = self.providers.resolve_provider(resource, action)
        return entry.provider_class if entry is not None else None

    def resource_for_node(self, node: Any, name: Hashable) -> Any:
        """Return the resource class that builds `name` on `node`, or None."""
        entry = self.resources.resolve(name, node)
        return entry.resource_class if entry is not None else None

    def freeze(self) -> None:
        """Freeze both registries; resolution may start afterwards."""
        self.resources.freeze()
        self.providers.freeze()

    def clear(self) -> None:
        """Clear and unfreeze both registries (test isolation)."""
        self.resources.clear()
        self.providers.clear()


__all__ = [
    "DispatchTables",
]
