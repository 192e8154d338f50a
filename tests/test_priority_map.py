"""PriorityMap tests.

These tests verify:
- Priority arrays produce the declared preference order
- Specificity still outranks array position
- Filters apply to every array element
- Failed arrays register nothing
"""

from __future__ import annotations

import pytest

from node_map import (
    FilterSpecError,
    NodeMap,
    PriorityMap,
    ProviderPriorityMap,
    ProviderRegistry,
    ResourcePriorityMap,
    RegistrationError,
    ResourceRegistry,
)
from tests.sample_handlers import CustomFile, File, FileProvider, Init, Service, Systemd, Upstart


class TestSetPriorityArray:
    """Tests for set_priority_array()."""

    def test_declared_order_is_preserved(self, providers, ubuntu_node):
        priority = ProviderPriorityMap(providers)
        priority.set_priority_array("service", [Systemd, Upstart, Init])
        classes = [e.provider_class for e in providers.handlers("service")]
        assert classes == [Systemd, Upstart, Init]

    def test_registered_in_reverse(self, providers):
        priority = ProviderPriorityMap(providers)
        registered = priority.set_priority_array("service", [Systemd, Upstart, Init])
        assert [e.provider_class for e in registered] == [Init, Upstart, Systemd]

    def test_bulk_resource_scenario(self, resources, ubuntu_node):
        """['CustomFile', 'File'] resolves to CustomFile."""
        priority = ResourcePriorityMap(resources)
        priority.set_priority_array("file", [CustomFile, File])
        assert resources.resolve("file", ubuntu_node).resource_class is CustomFile

    def test_single_class(self, providers):
        ProviderPriorityMap(providers).set_priority_array("service", Systemd)
        assert [e.provider_class for e in providers.handlers("service")] == [Systemd]

    def test_later_array_wins_ties(self, providers):
        priority = ProviderPriorityMap(providers)
        priority.set_priority_array("service", [Upstart, Init])
        priority.set_priority_array("service", [Systemd])
        classes = [e.provider_class for e in providers.handlers("service")]
        assert classes == [Systemd, Upstart, Init]

    def test_specificity_outranks_position(self, providers, ubuntu_node, windows_node):
        priority = ProviderPriorityMap(providers)
        priority.set_priority_array("service", [Systemd, Upstart])
        priority.set_priority_array("service", [Init], os="windows")

        classes = [e.provider_class for e in providers.handlers("service")]
        assert classes == [Init, Systemd, Upstart]

        resource = Service(node=ubuntu_node)
        assert providers.resolve_provider(resource, "start").provider_class is Systemd
        resource = Service(node=windows_node)
        assert providers.resolve_provider(resource, "start").provider_class is Init

    def test_filters_apply_to_every_element(self, providers, windows_node):
        priority = ProviderPriorityMap(providers)
        priority.set_priority_array("service", [Systemd, Upstart], os="linux")
        assert providers.candidates("service", Service(node=windows_node), "start") == []

    def test_malformed_filters_register_nothing(self, providers):
        priority = ProviderPriorityMap(providers)
        with pytest.raises(FilterSpecError):
            priority.set_priority_array("service", [Systemd, Upstart], os=["linux", "!"])
        assert providers.handlers() == []

    def test_empty_array_creates_no_bucket(self, providers):
        ProviderPriorityMap(providers).set_priority_array("service", [])
        assert "service" not in providers


class TestGetPriorityArray:
    """Tests for get_priority_array()."""

    def test_node_matching_entries(self, providers, ubuntu_node, windows_node):
        priority = ProviderPriorityMap(providers)
        priority.set_priority_array("file", [FileProvider])
        priority.set_priority_array("file", [Systemd, Upstart], os="linux")

        assert priority.get_priority_array_classes(ubuntu_node, "file") == [Systemd, Upstart, FileProvider]
        assert priority.get_priority_array_classes(windows_node, "file") == [FileProvider]
        assert [e.provider_class for e in priority.get_priority_array(windows_node, "file")] == [FileProvider]

    def test_resource_classes(self, resources, ubuntu_node):
        priority = ResourcePriorityMap(resources)
        priority.set_priority_array("file", [CustomFile, File])
        assert priority.get_priority_array_classes(ubuntu_node, "file") == [CustomFile, File]

    def test_holds_registry_reference(self):
        registry = ResourceRegistry()
        assert PriorityMap(registry).handler_registry is registry
        assert ProviderPriorityMap(ProviderRegistry()).handler_registry is not registry

    def test_untyped_registry_cannot_build_entries(self):
        with pytest.raises(RegistrationError):
            PriorityMap(NodeMap()).set_priority_array("service", [Systemd])
