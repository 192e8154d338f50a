"""
node_map: specificity-ranked handler dispatch

Register competing implementations under one key and pick the one that
best matches a node (os, platform, platform_family, platform_version).

Example:
    from node_map import DispatchTables
    tables = DispatchTables.create()

    # Register providers; the most specific match wins
    tables.providers.register("file", FileProvider, resource_class="File")
    tables.providers.register(
        "file", WindowsFileProvider, resource_class="File", os="windows"
    )

    # Or declare a priority array, most preferred first
    tables.set_provider_priority_array("service", [Systemd, Upstart], os="linux")

    # Freeze, then resolve
    tables.freeze()
    tables.provider_for_action(file_resource, "create")
"""

from __future__ import annotations

from node_map.class_lookup import import_class
from node_map.config import (
    PriorityArrayConfig,
    PriorityConfig,
    PriorityConfigPath,
    apply_priority_config,
    load_priority_config,
    parse_priority_config,
)
from node_map.dispatch import DispatchTables
from node_map.entries import (
    NodeEntry,
    ProviderEntry,
    ProvidesCheck,
    ResourceEntry,
    ResourceTypePattern,
    SupportsCheck,
    compare_specificity,
    default_hook,
)
from node_map.event_bridge import EventBridge, EventNames
from node_map.exceptions import (
    ConfigurationError,
    FilterSpecError,
    NodeMapError,
    RegistrationError,
    RegistryFrozenError,
)
from node_map.filters import ALL, EXCLUSION_MARKER, WhiteBlacklist, Wildcard
from node_map.logging import log_debug, log_error, log_info, log_trace, log_warn
from node_map.priority_map import PriorityMap, ProviderPriorityMap, ResourcePriorityMap
from node_map.registry import NodeMap, ProviderRegistry, ResourceRegistry
from node_map.resolvers import ProviderResolver, ResourceResolver
from node_map.types import FilterOptions, LogContext
from node_map.versions import PlatformVersion, VersionConstraint

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Filters
    "ALL",
    "EXCLUSION_MARKER",
    "Wildcard",
    "WhiteBlacklist",
    "PlatformVersion",
    "VersionConstraint",
    # Entries
    "NodeEntry",
    "ResourceEntry",
    "ProviderEntry",
    "ProvidesCheck",
    "SupportsCheck",
    "ResourceTypePattern",
    "compare_specificity",
    "default_hook",
    # Registries
    "NodeMap",
    "ResourceRegistry",
    "ProviderRegistry",
    "PriorityMap",
    "ResourcePriorityMap",
    "ProviderPriorityMap",
    "ProviderResolver",
    "ResourceResolver",
    "DispatchTables",
    # Configuration
    "FilterOptions",
    "PriorityArrayConfig",
    "PriorityConfig",
    "PriorityConfigPath",
    "apply_priority_config",
    "load_priority_config",
    "parse_priority_config",
    "import_class",
    # Events
    "EventBridge",
    "EventNames",
    # Exceptions
    "NodeMapError",
    "FilterSpecError",
    "RegistrationError",
    "RegistryFrozenError",
    "ConfigurationError",
    # Logging
    "LogContext",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
]
