"""Tests for the operation registry."""

import pytest

from promptapi.operations import (
    HTTP_GET,
    HTTP_POST,
    OperationDescriptor,
    OperationRegistry,
    default_registry,
)


class TestOperationDescriptor:
    """Tests for OperationDescriptor."""

    def test_tool_definition_format(self):
        tool = HTTP_GET.to_tool_definition()
        assert tool["type"] == "function"
        assert tool["function"]["name"] == "http_get"
        assert tool["function"]["description"] == HTTP_GET.description
        params = tool["function"]["parameters"]
        assert params["type"] == "object"
        assert params["required"] == ["path"]
        assert "path" in params["properties"]

    def test_post_schema_has_optional_body(self):
        params = HTTP_POST.to_tool_definition()["function"]["parameters"]
        assert params["required"] == ["path"]
        assert params["properties"]["body"]["type"] == "object"

    def test_hashable(self):
        assert len({HTTP_GET, HTTP_POST, HTTP_GET}) == 2

    def test_schema_is_read_only(self):
        with pytest.raises(TypeError):
            HTTP_GET.parameter_schema["required"] = []

    def test_tool_definition_changes_do_not_leak(self):
        tool = HTTP_GET.to_tool_definition()
        tool["function"]["parameters"]["required"].append("body")
        tool["function"]["parameters"]["properties"].clear()

        params = HTTP_GET.to_tool_definition()["function"]["parameters"]
        assert params["required"] == ["path"]
        assert "path" in params["properties"]


class TestOperationRegistry:
    """Tests for OperationRegistry."""

    def test_default_registry_contents(self):
        registry = default_registry()
        assert registry.names() == ["http_get", "http_post"]
        assert len(registry) == 2
        assert "http_get" in registry
        assert registry.get("http_post").method == "POST"

    def test_default_registry_without_post(self):
        registry = default_registry(include_post=False)
        assert registry.names() == ["http_get"]
        assert "http_post" not in registry

    def test_unknown_name_returns_none(self):
        assert default_registry().get("http_delete") is None

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            OperationRegistry.of([HTTP_GET, HTTP_GET])

    def test_unsupported_method_rejected(self):
        op = OperationDescriptor(
            name="http_delete", description="delete", parameter_schema={}, method="DELETE"
        )
        with pytest.raises(ValueError, match="unsupported method"):
            OperationRegistry.of([op])

    def test_registry_is_immutable(self):
        registry = default_registry()
        with pytest.raises(TypeError):
            registry._operations["other"] = HTTP_GET
        ops = registry.all_operations()
        ops.clear()
        assert len(registry) == 2

    def test_tool_definitions_in_registration_order(self):
        names = [t["function"]["name"] for t in default_registry().tool_definitions()]
        assert names == ["http_get", "http_post"]

    def test_operations_summary(self):
        summary = default_registry().get_operations_summary()
        assert "- http_get (GET):" in summary
        assert "- http_post (POST):" in summary

    def test_empty_registry(self):
        registry = OperationRegistry.of([])
        assert len(registry) == 0
        assert registry.tool_definitions() == []
