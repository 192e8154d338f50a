"""Platform version parsing and version constraints.

Platform versions are dotted numeric strings ("7", "6.5", "10.15.7").
Missing components compare as zero, so "7" == "7.0.0".

Constraints are used as platform_version filter patterns:

    >>> VersionConstraint.parse(">= 7").matches("7.4")
    True
    >>> VersionConstraint.parse("~> 10.15").matches("11.0")
    False
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable
from functools import total_ordering
from typing import Any

from .exceptions import FilterSpecError

VERSION_PATTERN = re.compile(r"^\d+(\.\d+)*$")
CONSTRAINT_PATTERN = re.compile(r"^\s*(~>|>=|<=|!=|=|>|<)?\s*(\S+)\s*$")


@total_ordering
class PlatformVersion:
    """A dotted numeric platform version."""

    __slots__ = ("parts",)

    def __init__(self, version: str | int | PlatformVersion) -> None:
        if isinstance(version, PlatformVersion):
            self.parts: tuple[int, ...] = version.parts
            return

        text = str(version).strip()
        if not VERSION_PATTERN.match(text):
            raise ValueError(f"Invalid platform version: {version!r}")
        self.parts = tuple(int(p) for p in text.split("."))

    def _padded(self, other: PlatformVersion) -> tuple[tuple[int, ...], tuple[int, ...]]:
        width = max(len(self.parts), len(other.parts))
        return (
            self.parts + (0,) * (width - len(self.parts)),
            other.parts + (0,) * (width - len(other.parts)),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlatformVersion):
            return NotImplemented
        mine, theirs = self._padded(other)
        return mine == theirs

    def __lt__(self, other: PlatformVersion) -> bool:
        mine, theirs = self._padded(other)
        return mine < theirs

    def __hash__(self) -> int:
        parts = list(self.parts)
        while len(parts) > 1 and parts[-1] == 0:
            parts.pop()
        return hash(tuple(parts))

    def bump(self) -> PlatformVersion:
        """Return the exclusive upper bound used by the pessimistic operator."""
        parts = list(self.parts[:-1]) if len(self.parts) > 1 else list(self.parts)
        parts[-1] += 1
        return PlatformVersion(".".join(str(p) for p in parts))

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)

    def __repr__(self) -> str:
        return f"PlatformVersion('{self}')"


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


class VersionConstraint:
    """A single version requirement such as ">= 7" or "~> 10.15".

    A bare version means equality.
    """

    __slots__ = ("op", "version")

    def __init__(self, op: str, version: PlatformVersion) -> None:
        self.op = op
        self.version = version

    @classmethod
    def parse(cls, text: str | int | VersionConstraint) -> VersionConstraint:
        """Parse a constraint string. Integers are accepted as bare versions.

        Raises:
            FilterSpecError: If the constraint cannot be parsed or is a float.
        """
        if isinstance(text, VersionConstraint):
            return text
        if isinstance(text, (float, bool)):
            raise FilterSpecError(
                f"Platform version {text!r} must be a string; quote platform versions"
            )

        match = CONSTRAINT_PATTERN.match(str(text))
        if match is None:
            raise FilterSpecError(f"Invalid platform version constraint: {text!r}")

        op, raw_version = match.group(1) or "=", match.group(2)
        try:
            version = PlatformVersion(raw_version)
        except ValueError as e:
            raise FilterSpecError(f"Invalid platform version constraint: {text!r}") from e
        return cls(op, version)

    def matches(self, value: Any) -> bool:
        """Check whether a node's platform version satisfies this constraint.

        Values that are not valid platform versions never match.
        """
        if value is None:
            return False
        try:
            candidate = PlatformVersion(value)
        except ValueError:
            return False

        if self.op == "~>":
            return self.version <= candidate < self.version.bump()
        return _OPERATORS[self.op](candidate, self.version)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionConstraint):
            return NotImplemented
        return self.op == other.op and self.version == other.version

    def __hash__(self) -> int:
        return hash((self.op, self.version))

    def __repr__(self) -> str:
        return f"VersionConstraint('{self.op} {self.version}')"


__all__ = [
    "PlatformVersion",
    "VersionConstraint",
]
