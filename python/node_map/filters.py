"""Black/white list filters over a single node attribute.

A WhiteBlacklist accepts or rejects one attribute value. Filters are
parsed from registration options, where a leading "!" excludes a value:

    >>> platforms = WhiteBlacklist.parse(["ubuntu", "!debian"])
    >>> platforms.matches("ubuntu"), platforms.matches("debian")
    (True, False)
    >>> WhiteBlacklist.parse([]) is None
    True

An empty specification parses to None: the filter is absent and imposes
no constraint.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any

from .exceptions import FilterSpecError

EXCLUSION_MARKER = "!"


class Wildcard(str, Enum):
    """Whitelist wildcard. Compares equal to the string "all"."""

    ALL = "all"


ALL = Wildcard.ALL


def _is_wildcard(pattern: Any) -> bool:
    return isinstance(pattern, str) and pattern == ALL


def _pattern_matches(pattern: Any, value: Any) -> bool:
    # Patterns with their own matches() (version constraints, type patterns)
    # decide for themselves; everything else is plain equality.
    matcher = getattr(pattern, "matches", None)
    if callable(matcher) and not isinstance(pattern, type):
        return bool(matcher(value))
    return pattern == value


class WhiteBlacklist:
    """Accept/reject rule over one attribute's values.

    The blacklist always takes precedence: a value matched by any
    blacklist pattern is rejected even if the whitelist also matches it.
    An empty whitelist accepts everything not blacklisted.

    Attributes:
        whitelist: Accepted patterns.
        blacklist: Rejected patterns.
    """

    __slots__ = ("whitelist", "blacklist")

    def __init__(
        self,
        whitelist: Iterable[Any] | None = None,
        blacklist: Iterable[Any] | None = None,
    ) -> None:
        self.whitelist: tuple[Any, ...] = tuple(whitelist or ())
        self.blacklist: tuple[Any, ...] = tuple(blacklist or ())

    @classmethod
    def parse(
        cls,
        values: Any,
        normalize: Callable[[Any], Any] | None = None,
    ) -> WhiteBlacklist | None:
        """Parse a filter specification.

        Args:
            values: A single value or an iterable of values. Strings starting
                with "!" go to the blacklist with the marker stripped.
            normalize: Optional function applied to every value of both lists.

        Returns:
            The filter, or None if the specification is empty.

        Raises:
            FilterSpecError: If the specification is malformed.
        """
        if values is None:
            return None
        if isinstance(values, WhiteBlacklist):
            return values
        if isinstance(values, Mapping):
            raise FilterSpecError(f"Filter values must be a value or a list of values, got {values!r}")

        if isinstance(values, (str, bytes, type)) or not isinstance(values, Iterable):
            values = [values]
        values = list(values)

        whitelist: list[Any] = []
        blacklist: list[Any] = []
        for value in values:
            if value is None or isinstance(value, (list, tuple, set, frozenset, dict)):
                raise FilterSpecError(f"Filter values must be scalars, got {value!r}")

            if isinstance(value, str) and value.startswith(EXCLUSION_MARKER):
                excluded = value[len(EXCLUSION_MARKER):].strip()
                if not excluded:
                    raise FilterSpecError("Exclusion marker given without a value")
                if _is_wildcard(excluded):
                    raise FilterSpecError("Cannot exclude the 'all' wildcard")
                blacklist.append(excluded)
            else:
                whitelist.append(value)

        if not whitelist and not blacklist:
            return None

        return cls(
            [cls._normalize(v, normalize) for v in whitelist],
            [cls._normalize(v, normalize) for v in blacklist],
        )

    @staticmethod
    def _normalize(value: Any, normalize: Callable[[Any], Any] | None) -> Any:
        if _is_wildcard(value):
            return ALL
        if normalize is None:
            return value
        try:
            return normalize(value)
        except FilterSpecError:
            raise
        except (TypeError, ValueError) as e:
            raise FilterSpecError(f"Invalid filter value {value!r}: {e}") from e

    def matches(self, value: Any) -> bool:
        """Check whether a value is accepted by this filter."""
        if any(_pattern_matches(pattern, value) for pattern in self.blacklist):
            return False

        if not self.whitelist:
            return True
        return any(
            _is_wildcard(pattern) or _pattern_matches(pattern, value)
            for pattern in self.whitelist
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WhiteBlacklist):
            return NotImplemented
        return self.whitelist == other.whitelist and self.blacklist == other.blacklist

    def __hash__(self) -> int:
        return hash((self.whitelist, self.blacklist))

    def __repr__(self) -> str:
        return f"WhiteBlacklist(whitelist={list(self.whitelist)!r}, blacklist={list(self.blacklist)!r})"


__all__ = [
    "ALL",
    "EXCLUSION_MARKER",
    "Wildcard",
    "WhiteBlacklist",
]
