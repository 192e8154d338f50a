"""Bound resolvers for one lookup.

A resolver captures the node and the lookup arguments once, so callers
that need both the winner and the runners-up do not repeat them:

    resolver = ProviderResolver(providers, node, file_resource, "create")
    resolver.resolve()  # best entry, or None
    resolver.enabled_handlers()  # every matching entry, best first
"""

from __future__ import annotations

from typing import Any

from .entries import ProviderEntry, ResourceEntry
from .registry import ProviderRegistry, ResourceRegistry


class ProviderResolver:
    """Resolve the provider for one resource and action."""

    def __init__(
        self,
        providers: ProviderRegistry,
        node: Any,
        resource: Any,
        action: Any = None,
    ) -> None:
        self.providers = providers
        self.node = node
        self.resource = resource
        self.action = action

    @property
    def key(self) -> str:
        return self.resource.resource_name

    def resolve(self) -> ProviderEntry | None:
        """The most specific provider that runs the action, or None."""
        return self.providers.resolve(self.key, self.resource, self.action)  # type: ignore[return-value]

    def enabled_handlers(self) -> list[ProviderEntry]:
        """Every provider that runs the action, best first."""
        return self.providers.candidates(self.key, self.resource, self.action)  # type: ignore[return-value]

    def prioritized_handlers(self) -> list[ProviderEntry]:
        """Every provider whose node filters match, ignoring resource and action."""
        return self.providers.candidates_for_node(self.node, self.key)  # type: ignore[return-value]

    def provider_class(self) -> Any:
        """The provider class of the best entry, or None."""
        entry = self.resolve()
        return entry.provider_class if entry is not None else None


class ResourceResolver:
    """Resolve the resource class for one resource name on a node."""

    def __init__(self, resources: ResourceRegistry, node: Any, name: str) -> None:
        self.resources = resources
        self.node = node
        self.name = name

    def resolve(self) -> ResourceEntry | None:
        """The most specific resource entry for the node, or None."""
        return self.resources.resolve(self.name, self.node)  # type: ignore[return-value]

    def enabled_handlers(self) -> list[ResourceEntry]:
        """Every resource entry that builds `name` on the node, best first."""
        return self.resources.candidates(self.name, self.node)  # type: ignore[return-value]

    def prioritized_handlers(self) -> list[ResourceEntry]:
        """Every resource entry whose node filters match, ignoring provides()."""
        return self.resources.candidates_for_node(self.node, self.name)  # type: ignore[return-value]

    def resource_class(self) -> Any:
        """The resource class of the best entry, or None."""
        entry = self.resolve()
        return entry.resource_class if entry is not None else None


__all__ = [
    "ProviderResolver",
    "ResourceResolver",
]
