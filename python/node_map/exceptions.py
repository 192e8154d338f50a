"""Custom exceptions for node_map.

This module provides a hierarchy of exceptions for error handling
in the handler registry. Lookups that find nothing are not errors:
they return None or an empty list.
"""

from __future__ import annotations


class NodeMapError(Exception):
    """Base exception for all node_map errors.

    All exceptions raised by node_map inherit from this class,
    making it easy to catch all registry-related errors.

    Example:
        try:
            providers.register("file", FileProvider, platform="!")
        except NodeMapError as e:
            print(f"Registry error: {e}")
    """

    pass


class FilterSpecError(NodeMapError, ValueError):
    """Raised when a filter specification is malformed.

    Raised at registration time, before anything is inserted into
    the registry.

    Common causes:
    - A bare exclusion marker ("!") with no value
    - Blacklisting the wildcard ("!all")
    - An unparsable platform version constraint
    - An unknown filter option

    Example:
        try:
            WhiteBlacklist.parse(["!"])
        except FilterSpecError as e:
            print(f"Bad filter: {e}")
    """

    pass


class RegistrationError(NodeMapError):
    """Raised when an entry cannot be registered.

    Example:
        try:
            registry.register_handler("", entry)
        except RegistrationError:
            print("Keys must be non-empty")
    """

    pass


class RegistryFrozenError(RegistrationError):
    """Raised when registering into a frozen registry.

    Registries are populated during configuration and frozen before
    resolution starts. Call clear() to reset a frozen registry in tests.
    """

    pass


class ConfigurationError(NodeMapError):
    """Raised when priority configuration cannot be loaded or applied.

    Example:
        try:
            config = load_priority_config("config/node_map.yml")
        except ConfigurationError as e:
            print(f"Invalid configuration: {e}")
    """

    pass


__all__ = [
    "NodeMapError",
    "FilterSpecError",
    "RegistrationError",
    "RegistryFrozenError",
    "ConfigurationError",
]
