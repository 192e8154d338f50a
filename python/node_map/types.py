"""Pydantic models for node_map.

This module provides validated models for the values that cross the
registry boundary: filter options given at registration time and
structured logging context.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .exceptions import FilterSpecError
from .filters import WhiteBlacklist

# Node attributes a NodeEntry can filter on, most specific first.
NODE_ATTRIBUTES = ("platform_version", "platform", "platform_family", "os")


class FilterOptions(BaseModel):
    """Filter options accepted by register() and set_priority_array().

    Each node attribute accepts a single value, a list of values, a
    negated value ("!debian") or a list mixing both. A pre-built
    WhiteBlacklist is used as is.

    Example:
        >>> options = FilterOptions.from_kwargs(platform=["ubuntu", "!debian"])
        >>> options.node_filters()["platform"]
        ['ubuntu', '!debian']
    """

    platform: str | list[str] | WhiteBlacklist | None = Field(
        default=None,
        description="Platform or platforms (e.g. 'ubuntu', 'centos').",
    )
    platform_version: str | int | list[str | int] | WhiteBlacklist | None = Field(
        default=None,
        description="Platform version constraints (e.g. '>= 7', '~> 10.15', 7). Quote non-integer versions.",
    )
    platform_family: str | list[str] | WhiteBlacklist | None = Field(
        default=None,
        description="Platform family or families (e.g. 'debian', 'rhel').",
    )
    os: str | list[str] | WhiteBlacklist | None = Field(
        default=None,
        description="Operating system or systems (e.g. 'linux', 'windows').",
    )
    resource_class: Any = Field(
        default=None,
        description="Resource classes or class names a provider runs against.",
    )
    action: str | list[str] | WhiteBlacklist | None = Field(
        default=None,
        description="Action or actions a provider can run.",
    )
    node_block: Callable[..., Any] | None = Field(
        default=None,
        description="Custom predicate called with the node.",
    )

    model_config = {"extra": "forbid", "frozen": True, "arbitrary_types_allowed": True}

    @classmethod
    def from_kwargs(cls, **kwargs: Any) -> FilterOptions:
        """Validate keyword filter options.

        Raises:
            FilterSpecError: If an option is unknown or has the wrong shape.
        """
        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise FilterSpecError(f"Invalid filter options: {e}") from e

    def node_filters(self) -> dict[str, Any]:
        """Return the node attribute filters and node_block, omitting unset ones."""
        filters = {name: getattr(self, name) for name in NODE_ATTRIBUTES}
        filters["node_block"] = self.node_block
        return {k: v for k, v in filters.items() if v is not None}

    def provider_filters(self) -> dict[str, Any]:
        """Return node filters plus resource_class and action, omitting unset ones."""
        filters = self.node_filters()
        if self.resource_class is not None:
            filters["resource_class"] = self.resource_class
        if self.action is not None:
            filters["action"] = self.action
        return filters


class LogContext(BaseModel):
    """Context fields for structured logging.

    Example:
        context = LogContext(registry="providers", key="file", action="create")
        log_debug("No provider matched", context)
    """

    registry: str | None = Field(
        default=None,
        description="Registry name (e.g. 'resources', 'providers').",
    )
    key: str | None = Field(
        default=None,
        description="Registry key being registered or resolved.",
    )
    handler: str | None = Field(
        default=None,
        description="Name of the handler class.",
    )
    action: str | None = Field(
        default=None,
        description="Provider action being resolved.",
    )
    operation: str | None = Field(
        default=None,
        description="Registry operation (register, resolve, clear).",
    )

    model_config = {"extra": "allow"}


__all__ = [
    "NODE_ATTRIBUTES",
    "FilterOptions",
    "LogContext",
]
