"""Shared fixtures for mcp-catalog tests."""

import pytest

from mcp_catalog.catalog import FunctionTool, ToolCatalog, ToolDescriptor


@pytest.fixture
def anyio_backend():
    """Run anyio-marked tests on asyncio only."""
    return "asyncio"


def _echo(params):
    """Return the parameters unchanged."""
    return params


def make_tool(name: str, description: str, properties: dict | None = None) -> FunctionTool:
    """Create an echoing tool with a simple object schema."""
    return FunctionTool(
        ToolDescriptor(
            name=name,
            description=description,
            parameters={"type": "object", "properties": properties or {}},
        ),
        _echo,
    )


@pytest.fixture
def sample_catalog() -> ToolCatalog:
    """A small HRIS/ATS/CRM catalog whose tools echo their parameters."""
    return ToolCatalog(
        [
            make_tool(
                "hris_create_employee",
                "Create a new employee record in the HRIS system",
                {"name": {"type": "string"}, "email": {"type": "string"}},
            ),
            make_tool(
                "hris_list_employees",
                "List all employees in the HRIS system",
                {"limit": {"type": "number"}},
            ),
            make_tool(
                "hris_create_time_off",
                "Create a time off request for an employee",
                {
                    "employeeId": {"type": "string"},
                    "startDate": {"type": "string"},
                    "endDate": {"type": "string"},
                },
            ),
            make_tool(
                "ats_create_candidate",
                "Create a new candidate in the ATS",
                {"name": {"type": "string"}, "email": {"type": "string"}},
            ),
            make_tool(
                "ats_list_candidates",
                "List all candidates in the ATS",
                {"status": {"type": "string"}},
            ),
            make_tool(
                "crm_create_contact",
                "Create a new contact in the CRM",
                {"name": {"type": "string"}, "company": {"type": "string"}},
            ),
        ]
    )
