"""Registry entries: match criteria, handler variants and specificity.

A NodeEntry decides whether it runs on a node by checking node attributes
(platform_version, platform, platform_family, os) against black/white
list filters and by calling an optional node_block. Two variants add
their own data:

- ResourceEntry: declares which resource class a resource name builds.
- ProviderEntry: declares which provider class runs an action against a
  resource, filtered by resource class and action.

Entries are ordered by specificity so a NodeMap bucket always lists the
most narrowly targeted entry first. A provider entry restricted to
os="linux" outranks an otherwise identical one without an os filter, so
compare_specificity(linux_entry, generic_entry) returns 1.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from .exceptions import FilterSpecError, RegistrationError
from .filters import WhiteBlacklist
from .types import NODE_ATTRIBUTES
from .versions import VersionConstraint

DEFAULT_HOOK_MARKER = "__node_map_default_hook__"


@runtime_checkable
class ProvidesCheck(Protocol):
    """Capability: the produced class decides whether it applies to a node."""

    def provides(self, node: Any, subject: Any) -> bool: ...


@runtime_checkable
class SupportsCheck(Protocol):
    """Capability: the provider class decides whether it supports an action."""

    def supports(self, resource: Any, action: str) -> bool: ...


_CAPABILITY_METHODS: dict[type, str] = {
    ProvidesCheck: "provides",
    SupportsCheck: "supports",
}


def default_hook(func: Callable[..., Any]) -> Callable[..., Any]:
    """Mark a base-class hook as the default implementation.

    Host base classes (a Provider or Resource base) usually define
    provides()/supports() returning True. Marking them keeps subclasses
    that do not override the hook from being treated as implementing it.

    Example:
        >>> class Provider:
        ...     @classmethod
        ...     @default_hook
        ...     def supports(cls, resource, action):
        ...         return True
    """
    setattr(func, DEFAULT_HOOK_MARKER, True)
    return func


def implements_hook(produced: Any, capability: type) -> bool:
    """Return True if `produced` implements `capability` with a non-default hook.

    Checked once when an entry is created; the result is cached on the entry.
    """
    if not isinstance(produced, capability):
        return False
    attr = getattr(produced, _CAPABILITY_METHODS[capability])
    if not callable(attr):
        return False
    func = getattr(attr, "__func__", attr)
    return not getattr(func, DEFAULT_HOOK_MARKER, False)


def node_attribute(node: Any, attribute: str) -> Any:
    """Read one attribute from a node; missing attributes read as None."""
    if node is None:
        return None
    if isinstance(node, Mapping):
        return node.get(attribute)
    getter = getattr(node, "get", None)
    if callable(getter):
        return getter(attribute)
    return getattr(node, attribute, None)


class ResourceTypePattern:
    """Filter pattern over resource type identity.

    Class targets match subclasses. String targets match the class name,
    its qualified name, its dotted module path, or its resource_name.
    """

    __slots__ = ("target",)

    def __init__(self, target: type | str) -> None:
        if not isinstance(target, (type, str)):
            raise TypeError(f"resource_class must be a class or class name, got {target!r}")
        self.target = target

    def matches(self, value: Any) -> bool:
        if not isinstance(value, type):
            value = type(value)
        if isinstance(self.target, type):
            return issubclass(value, self.target)
        names = {
            value.__name__,
            value.__qualname__,
            f"{value.__module__}.{value.__qualname__}",
        }
        resource_name = getattr(value, "resource_name", None)
        if isinstance(resource_name, str):
            names.add(resource_name)
        return self.target in names

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceTypePattern):
            return NotImplemented
        return self.target == other.target

    def __hash__(self) -> int:
        return hash(self.target)

    def __repr__(self) -> str:
        target = self.target.__name__ if isinstance(self.target, type) else self.target
        return f"ResourceTypePattern({target!r})"


def black_white_list(
    spec: Any,
    normalize: Callable[[Any], Any] | None = None,
) -> WhiteBlacklist | None:
    """Turn a filter option into a WhiteBlacklist, or None when absent."""
    if spec is None or isinstance(spec, WhiteBlacklist):
        return spec
    return WhiteBlacklist.parse(spec, normalize)


class NodeEntry:
    """Match criteria over a node.

    Create a NodeEntry from node filters. Each filter accepts a value, a
    list of values, a negated value ("!debian"), a list mixing both, or a
    WhiteBlacklist. Empty filters are dropped.

    Args:
        platform: Platform(s) this entry runs on.
        platform_version: Platform version constraint(s), e.g. ">= 7".
        platform_family: Platform family(ies) this entry runs on.
        os: Operating system(s) this entry runs on.
        node_block: Custom predicate called with the node.

    Raises:
        FilterSpecError: If a filter is malformed.
    """

    variant = "node"

    def __init__(
        self,
        *,
        platform: Any = None,
        platform_version: Any = None,
        platform_family: Any = None,
        os: Any = None,
        node_block: Callable[[Any], Any] | None = None,
    ) -> None:
        if node_block is not None and not callable(node_block):
            raise FilterSpecError(f"node_block must be callable, got {node_block!r}")

        filters = {
            "platform_version": black_white_list(platform_version, VersionConstraint.parse),
            "platform": black_white_list(platform),
            "platform_family": black_white_list(platform_family),
            "os": black_white_list(os),
        }
        self._node_filters: Mapping[str, WhiteBlacklist] = MappingProxyType(
            {k: v for k, v in filters.items() if v is not None}
        )
        self._node_block = node_block

    @property
    def node_filters(self) -> Mapping[str, WhiteBlacklist]:
        """Filters that will be run against the node, absent filters omitted."""
        return self._node_filters

    @property
    def node_block(self) -> Callable[[Any], Any] | None:
        """Custom predicate called with the node, or None."""
        return self._node_block

    def matches_node(self, node: Any) -> bool:
        """Check every node filter and the node_block against a node.

        Entries without filters match every node. Exceptions raised by
        node_block propagate to the caller.
        """
        for attribute, node_filter in self._node_filters.items():
            if not node_filter.matches(node_attribute(node, attribute)):
                return False
        if self._node_block is not None:
            return bool(self._node_block(node))
        return True

    def handles(self, node: Any, *_args: Any) -> bool:
        """Say whether this entry supports the given node."""
        return self.matches_node(node)

    def base_specificity(self) -> tuple[bool, ...]:
        """Node criteria presence, most significant first."""
        return tuple(attr in self._node_filters for attr in NODE_ATTRIBUTES) + (
            self._node_block is not None,
        )

    def specificity(self) -> tuple[bool, ...]:
        """Ordered specificity criteria for entries of the same variant."""
        return self.base_specificity()

    def prefers(self, other: NodeEntry) -> bool:
        """True if this entry is strictly more specific than `other`."""
        return compare_specificity(self, other) > 0

    @property
    def handler_name(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        filters = ", ".join(f"{k}={v!r}" for k, v in self._node_filters.items())
        return f"{type(self).__name__}({filters})"


class ResourceEntry(NodeEntry):
    """Entry that declares which resource class builds a resource name.

    Args:
        name: Resource name (e.g. "file", "package").
        resource_class: Class resolved when this entry handles the node.
        **node_filters: Filters passed to NodeEntry.
    """

    variant = "resource"

    def __init__(self, name: str, resource_class: Any, **node_filters: Any) -> None:
        if not name:
            raise RegistrationError("ResourceEntry requires a resource name")
        super().__init__(**node_filters)
        self._name = name
        self._resource_class = resource_class
        self._implements_provides = implements_hook(resource_class, ProvidesCheck)

    @property
    def name(self) -> str:
        return self._name

    @property
    def resource_class(self) -> Any:
        return self._resource_class

    @property
    def implements_provides(self) -> bool:
        """Whether resource_class implements provides()."""
        return self._implements_provides

    def handles(self, node: Any, *_args: Any) -> bool:
        """Check node criteria, then resource_class.provides(node, name) if implemented."""
        if not self.matches_node(node):
            return False
        if self._implements_provides:
            return bool(self._resource_class.provides(node, self._name))
        return True

    def specificity(self) -> tuple[bool, ...]:
        """Node criteria, then whether resource_class implements provides()."""
        return self.base_specificity() + (self._implements_provides,)

    @property
    def handler_name(self) -> str:
        return getattr(self._resource_class, "__name__", repr(self._resource_class))

    def __repr__(self) -> str:
        return f"ResourceEntry({self._name!r}, {self.handler_name})"


class ProviderEntry(NodeEntry):
    """Entry that runs an action against a resource.

    Args:
        provider_class: Provider class that runs the action.
        resource_class: Resource class(es) or class name(s) this provider
            runs against.
        action: Action(s) this provider can run.
        **node_filters: Filters passed to NodeEntry.
    """

    variant = "provider"

    def __init__(
        self,
        provider_class: Any,
        resource_class: Any = None,
        action: Any = None,
        **node_filters: Any,
    ) -> None:
        if provider_class is None:
            raise RegistrationError("ProviderEntry requires a provider class")
        super().__init__(**node_filters)
        self._provider_class = provider_class
        self._resource_class = black_white_list(resource_class, ResourceTypePattern)
        self._action = black_white_list(action, str)
        self._implements_provides = implements_hook(provider_class, ProvidesCheck)
        self._implements_supports = implements_hook(provider_class, SupportsCheck)

    @property
    def provider_class(self) -> Any:
        return self._provider_class

    @property
    def resource_class(self) -> WhiteBlacklist | None:
        """Resource class filter, or None if not specified."""
        return self._resource_class

    @property
    def action(self) -> WhiteBlacklist | None:
        """Action filter, or None if not specified."""
        return self._action

    @property
    def implements_provides(self) -> bool:
        """Whether provider_class implements provides()."""
        return self._implements_provides

    @property
    def implements_supports(self) -> bool:
        """Whether provider_class implements supports()."""
        return self._implements_supports

    def runs_action(self, resource: Any, action: Any) -> bool:
        """Whether the provider handles the given resource and action.

        All must hold: the resource type passes the resource_class filter,
        the action passes the action filter, the resource's node matches,
        and the provider's own provides()/supports() hooks agree when the
        provider implements them.
        """
        if self._resource_class is not None and not self._resource_class.matches(type(resource)):
            return False
        if self._action is not None and not self._action.matches(str(action)):
            return False
        node = getattr(resource, "node", None)
        if not self.matches_node(node):
            return False
        if self._implements_provides and not self._provider_class.provides(node, resource):
            return False
        if self._implements_supports and not self._provider_class.supports(resource, action):
            return False
        return True

    def handles(self, resource: Any, action: Any = None, *_args: Any) -> bool:
        return self.runs_action(resource, action)

    def specificity(self) -> tuple[bool, ...]:
        """Orders providers by the specificity of their filters.

        1. action
        2. resource_class
        3. provider_class implements supports()
        4. platform_version
        5. platform
        6. platform_family
        7. os
        8. node_block
        9. provider_class implements provides()
        """
        return (
            (
                self._action is not None,
                self._resource_class is not None,
                self._implements_supports,
            )
            + self.base_specificity()
            + (self._implements_provides,)
        )

    @property
    def handler_name(self) -> str:
        return getattr(self._provider_class, "__name__", repr(self._provider_class))

    def __repr__(self) -> str:
        return f"ProviderEntry({self.handler_name})"


def compare_specificity(entry: NodeEntry, other: NodeEntry) -> int:
    """Compare two entries by specificity.

    Criteria are compared left to right and the first difference decides;
    an entry that filters on a criterion beats one that does not. Entries
    of different variants compare on node criteria only.

    Returns:
        1 if `entry` is more specific, -1 if `other` is, 0 if equal.
    """
    if entry.variant == other.variant:
        mine, theirs = entry.specificity(), other.specificity()
    else:
        mine, theirs = entry.base_specificity(), other.base_specificity()
    return (mine > theirs) - (mine < theirs)


__all__ = [
    "NodeEntry",
    "ResourceEntry",
    "ProviderEntry",
    "ProvidesCheck",
    "SupportsCheck",
    "ResourceTypePattern",
    "compare_specificity",
    "default_hook",
    "implements_hook",
    "node_attribute",
]
