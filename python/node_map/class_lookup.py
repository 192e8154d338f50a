"""Class lookup from dotted paths.

Configuration names handler classes as "package.module.ClassName".
This module imports the module and returns the class.

Example:
    import_class("myapp.providers.SystemdService")  # the SystemdService class
"""

from __future__ import annotations

import importlib
import re

from .exceptions import ConfigurationError

# Must have at least one dot and end with an identifier
CLASS_PATTERN = re.compile(
    r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)*\.[a-zA-Z_][a-zA-Z0-9_]*$"
)


def is_class_path(path: str) -> bool:
    """Check if a string looks like a dotted class path."""
    return bool(CLASS_PATTERN.match(path))


def import_class(path: str) -> type:
    """Import a class from a dotted module path.

    Args:
        path: Full class path (e.g., "module.ClassName").

    Returns:
        The class.

    Raises:
        ConfigurationError: If the path is malformed, the module cannot be
            imported, or the attribute is missing or not a class.
    """
    if not is_class_path(path):
        raise ConfigurationError(f"Not a class path: '{path}'")

    module_path, class_name = path.rsplit(".", 1)

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_path}' for '{path}': {e}") from e

    handler_class = getattr(module, class_name, None)
    if handler_class is None:
        raise ConfigurationError(f"Module '{module_path}' has no attribute '{class_name}'")
    if not isinstance(handler_class, type):
        raise ConfigurationError(f"'{path}' is not a class")

    return handler_class


__all__ = [
    "CLASS_PATTERN",
    "import_class",
    "is_class_path",
]
