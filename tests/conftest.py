"""pytest configuration and fixtures for node_map tests.

This module provides shared fixtures: fresh registries, dispatch tables,
an event bridge, and sample nodes.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest

from node_map import DispatchTables, EventBridge, ProviderRegistry, ResourceRegistry


@pytest.fixture
def providers() -> ProviderRegistry:
    """Provide an empty provider registry."""
    return ProviderRegistry()


@pytest.fixture
def resources() -> ResourceRegistry:
    """Provide an empty resource registry."""
    return ResourceRegistry()


@pytest.fixture
def event_bridge() -> Generator[EventBridge, None, None]:
    """Provide a started EventBridge, stopped after the test."""
    bridge = EventBridge()
    bridge.start()
    yield bridge
    bridge.stop()


@pytest.fixture
def tables() -> Generator[DispatchTables, None, None]:
    """Provide fresh dispatch tables, cleared after the test."""
    tables = DispatchTables.create()
    yield tables
    tables.clear()


@pytest.fixture
def ubuntu_node() -> dict[str, Any]:
    """An Ubuntu 22.04 node."""
    return {
        "os": "linux",
        "platform": "ubuntu",
        "platform_family": "debian",
        "platform_version": "22.04",
    }


@pytest.fixture
def centos_node() -> dict[str, Any]:
    """A CentOS 7 node."""
    return {
        "os": "linux",
        "platform": "centos",
        "platform_family": "rhel",
        "platform_version": "7.9.2009",
    }


@pytest.fixture
def windows_node() -> dict[str, Any]:
    """A Windows Server 2019 node."""
    return {
        "os": "windows",
        "platform": "windows",
        "platform_family": "windows",
        "platform_version": "10.0.17763",
    }
