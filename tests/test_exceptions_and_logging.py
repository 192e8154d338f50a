"""Exception hierarchy and structured logging tests."""

from __future__ import annotations

import logging

import pytest

from node_map import (
    ConfigurationError,
    FilterSpecError,
    LogContext,
    NodeEntry,
    NodeMap,
    NodeMapError,
    RegistrationError,
    RegistryFrozenError,
    log_debug,
    log_error,
    log_info,
    log_trace,
    log_warn,
)
from node_map.logging import TRACE, _normalize_fields


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_node_map_error_is_base(self):
        for exc in (FilterSpecError, RegistrationError, RegistryFrozenError, ConfigurationError):
            assert issubclass(exc, NodeMapError)

    def test_filter_spec_error_is_value_error(self):
        assert issubclass(FilterSpecError, ValueError)

    def test_frozen_is_registration_error(self):
        assert issubclass(RegistryFrozenError, RegistrationError)

    def test_can_catch_by_base_class(self):
        with pytest.raises(NodeMapError):
            raise RegistryFrozenError("frozen")


class TestLogging:
    """Tests for the structured logging functions."""

    def test_levels(self, caplog):
        with caplog.at_level(TRACE, logger="node_map"):
            log_error("error message")
            log_warn("warn message")
            log_info("info message")
            log_debug("debug message")
            log_trace("trace message")

        levels = [record.levelname for record in caplog.records]
        assert levels == ["ERROR", "WARNING", "INFO", "DEBUG", "TRACE"]

    def test_fields_are_rendered(self, caplog):
        with caplog.at_level(logging.INFO, logger="node_map"):
            log_info("Registered", {"key": "file", "count": 2})

        record = caplog.records[-1]
        assert record.getMessage() == "Registered [key=file count=2]"
        assert record.fields == {"key": "file", "count": "2"}

    def test_log_context(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="node_map"):
            log_debug("Resolving", LogContext(registry="providers", key="file"))

        assert caplog.records[-1].fields == {"registry": "providers", "key": "file"}

    def test_disabled_levels_are_skipped(self, caplog):
        with caplog.at_level(logging.INFO, logger="node_map"):
            log_trace("hidden")
        assert not [r for r in caplog.records if r.getMessage() == "hidden"]

    def test_normalize_fields(self):
        assert _normalize_fields(None) is None
        assert _normalize_fields({"a": 1}) == {"a": "1"}
        assert _normalize_fields(LogContext(operation="clear")) == {"operation": "clear"}

    def test_registration_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="node_map"):
            NodeMap(name="things").register_handler("widget", NodeEntry())

        messages = [record.getMessage() for record in caplog.records]
        assert any("Registered NodeEntry for 'widget'" in m and "registry=things" in m for m in messages)

    def test_miss_is_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="node_map"):
            NodeMap().resolve("missing", {})
        assert any("No handler matched 'missing'" in r.getMessage() for r in caplog.records)
