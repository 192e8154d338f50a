"""YAML priority configuration.

Priority arrays can be declared in a YAML file instead of code:

    resources:
      - name: package
        handlers:
          - myapp.resources.AptPackage
        filters:
          platform_family: debian
    providers:
      - name: service
        handlers:
          - myapp.providers.Systemd
          - myapp.providers.Upstart
        filters:
          os: linux

The file is found through the NODE_MAP_PRIORITY_PATH environment
variable, falling back to config/node_map.yml in the current directory.

Example:
    path = PriorityConfigPath.find_config_file()
    if path:
        config = load_priority_config(path)
        apply_priority_config(config, tables)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .class_lookup import import_class
from .exceptions import ConfigurationError
from .logging import log_debug, log_info, log_warn
from .types import FilterOptions

if TYPE_CHECKING:
    from .dispatch import DispatchTables
    from .priority_map import PriorityMap

CONFIG_PATH_ENV = "NODE_MAP_PRIORITY_PATH"
DEFAULT_CONFIG_PATH = Path("config") / "node_map.yml"


class PriorityArrayConfig(BaseModel):
    """One priority array: handler classes for a key, most preferred first."""

    name: str = Field(min_length=1, description="Resource name the array is registered under.")
    handlers: list[str] = Field(
        min_length=1,
        description="Dotted class paths, most preferred first.",
    )
    filters: FilterOptions = Field(
        default_factory=FilterOptions,
        description="Filter options applied to every handler in the array.",
    )

    model_config = {"extra": "forbid"}


class PriorityConfig(BaseModel):
    """Priority arrays for resources and providers."""

    resources: list[PriorityArrayConfig] = Field(default_factory=list)
    providers: list[PriorityArrayConfig] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class PriorityConfigPath:
    """Discovers the priority configuration file.

    The search follows this priority:
    1. NODE_MAP_PRIORITY_PATH env var (explicit override)
    2. config/node_map.yml in the current directory
    """

    @staticmethod
    def find_config_file() -> Path | None:
        """Find the priority configuration file.

        Returns:
            Path to the file, or None if not found.
        """
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            path = Path(env_path)
            if path.is_file():
                log_debug(f"Using {CONFIG_PATH_ENV}: {path}")
                return path
            log_warn(f"{CONFIG_PATH_ENV} does not exist: {env_path}")

        fallback_path = Path.cwd() / DEFAULT_CONFIG_PATH
        if fallback_path.is_file():
            log_debug(f"Using fallback config path: {fallback_path}")
            return fallback_path

        log_debug("No priority configuration file found")
        return None


def load_priority_config(path: str | Path) -> PriorityConfig:
    """Load and validate a priority configuration file.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML,
            or does not match the schema.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read priority config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    return parse_priority_config(data or {}, source=str(path))


def parse_priority_config(data: dict[str, Any], source: str = "<config>") -> PriorityConfig:
    """Validate already-parsed configuration data."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"Priority config {source} must be a mapping")
    try:
        return PriorityConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid priority config {source}: {e}") from e


def apply_priority_config(config: PriorityConfig, tables: DispatchTables) -> int:
    """Register every priority array in `config` into `tables`.

    All class paths are imported before anything is registered, so an
    unknown class leaves the tables untouched.

    Returns:
        Number of entries registered.

    Raises:
        ConfigurationError: If a class path cannot be imported.
    """
    for array in config.resources:
        if array.filters.resource_class is not None or array.filters.action is not None:
            raise ConfigurationError(
                f"Resource priority array '{array.name}' cannot filter on resource_class or action"
            )

    plan: list[tuple[PriorityMap, PriorityArrayConfig, list[type]]] = []
    for priority_map, arrays in (
        (tables.resource_priority_map, config.resources),
        (tables.provider_priority_map, config.providers),
    ):
        for array in arrays:
            plan.append((priority_map, array, [import_class(path) for path in array.handlers]))

    count = 0
    for priority_map, array, classes in plan:
        filters = array.filters.model_dump(exclude_none=True)
        count += len(priority_map.set_priority_array(array.name, classes, **filters))

    log_info(f"Applied priority config: {count} entries")
    return count


__all__ = [
    "CONFIG_PATH_ENV",
    "PriorityArrayConfig",
    "PriorityConfig",
    "PriorityConfigPath",
    "apply_priority_config",
    "load_priority_config",
    "parse_priority_config",
]
