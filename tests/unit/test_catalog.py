"""Unit tests for the tool catalog."""

import pytest

from mcp_catalog.catalog import (
    ExecuteOptions,
    FunctionTool,
    Tool,
    ToolCatalog,
    ToolDescriptor,
)
from mcp_catalog.exceptions import ToolNotFoundError


class TestToolDescriptor:
    """Tests for ToolDescriptor."""

    def test_default_parameters(self):
        descriptor = ToolDescriptor("noop", "Does nothing")
        assert descriptor.parameters == {"type": "object", "properties": {}}

    def test_to_dict(self):
        descriptor = ToolDescriptor("noop", "Does nothing")
        assert descriptor.to_dict() == {
            "name": "noop",
            "description": "Does nothing",
            "parameters": {"type": "object", "properties": {}},
        }


class TestFunctionTool:
    """Tests for FunctionTool."""

    @pytest.mark.anyio
    async def test_sync_function(self):
        tool = FunctionTool(ToolDescriptor("add", "Add"), lambda p: p["a"] + p["b"])
        assert await tool.execute({"a": 1, "b": 2}) == 3

    @pytest.mark.anyio
    async def test_async_function(self):
        async def fetch(params):
            return {"id": params["id"]}

        tool = FunctionTool(ToolDescriptor("fetch", "Fetch"), fetch)
        assert await tool.execute({"id": "42"}) == {"id": "42"}

    @pytest.mark.anyio
    async def test_none_params_become_empty_dict(self):
        tool = FunctionTool(ToolDescriptor("echo", "Echo"), lambda p: p)
        assert await tool.execute() == {}

    @pytest.mark.anyio
    async def test_dry_run_skips_call(self):
        calls = []
        tool = FunctionTool(ToolDescriptor("echo", "Echo"), calls.append)
        result = await tool.execute({"x": 1}, ExecuteOptions(dry_run=True))
        assert result == {"dryRun": True, "tool": "echo", "params": {"x": 1}}
        assert calls == []

    def test_from_function_defaults(self):
        def list_things(params):
            """List every thing."""
            return []

        tool = FunctionTool.from_function(list_things)
        assert tool.name == "list_things"
        assert tool.description == "List every thing."
        assert tool.parameters == {"type": "object", "properties": {}}

    def test_from_function_overrides(self):
        schema = {"type": "object", "properties": {"q": {"type": "string"}}}
        tool = FunctionTool.from_function(
            lambda p: p, name="custom", description="Custom", parameters=schema
        )
        assert tool.descriptor == ToolDescriptor("custom", "Custom", schema)

    def test_satisfies_tool_protocol(self):
        tool = FunctionTool(ToolDescriptor("echo", "Echo"), lambda p: p)
        assert isinstance(tool, Tool)


class TestToolCatalog:
    """Tests for ToolCatalog."""

    def test_preserves_order(self, sample_catalog):
        assert sample_catalog.names[:2] == ["hris_create_employee", "hris_list_employees"]
        assert [tool.name for tool in sample_catalog] == sample_catalog.names
        assert len(sample_catalog) == 6

    def test_duplicate_names_rejected(self):
        tool = FunctionTool(ToolDescriptor("dup", "Dup"), lambda p: p)
        with pytest.raises(ValueError, match="Duplicate tool name"):
            ToolCatalog([tool, tool])

    def test_contains_and_get(self, sample_catalog):
        assert "hris_list_employees" in sample_catalog
        assert "missing" not in sample_catalog
        assert sample_catalog.get_tool("missing") is None
        assert sample_catalog.get_tool("hris_list_employees").name == "hris_list_employees"

    def test_descriptors(self, sample_catalog):
        assert [d.name for d in sample_catalog.descriptors] == sample_catalog.names

    def test_require_tool_missing(self, sample_catalog):
        with pytest.raises(ToolNotFoundError, match="nonexistent_tool") as exc_info:
            sample_catalog.require_tool("nonexistent_tool")
        assert exc_info.value.tool_name == "nonexistent_tool"

    def test_require_tool_suggests_close_names(self, sample_catalog):
        with pytest.raises(ToolNotFoundError) as exc_info:
            sample_catalog.require_tool("hris_list_employee")
        assert exc_info.value.suggestions[0] == "hris_list_employees"
        assert "Did you mean" in str(exc_info.value)

    def test_suggest_nothing_close(self, sample_catalog):
        assert sample_catalog.suggest("xyz") == []

    def test_suggest_limit(self, sample_catalog):
        assert len(sample_catalog.suggest("hris_create_employees", limit=1)) == 1

    def test_filter(self, sample_catalog):
        filtered = sample_catalog.filter(["*_create_*", "!crm_*"])
        assert filtered.names == [
            "hris_create_employee",
            "hris_create_time_off",
            "ats_create_candidate",
        ]
        assert len(sample_catalog) == 6
