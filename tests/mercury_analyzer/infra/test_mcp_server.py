import asyncio

import pytest
from fastmcp.client import Client

from helpers import FakeLogger, build_toolset
from mercury_analyzer.infra.mcp_server import MCPServer


EXPECTED_TOOLS = {
    "mercury_analyze_repository",
    "mercury_generate_deployment_plan",
    "mercury_get_repository_cache",
    "mercury_validate_deployment",
    "mercury_estimate_deployment_cost",
    "mercury_detect_security_issues",
    "mercury_execute_clone",
    "mercury_execute_build",
    "mercury_execute_test",
    "mercury_execute_package",
}


@pytest.fixture
def server(tmp_path):
    return MCPServer(toolset=build_toolset(tmp_path), logger=FakeLogger())


def test_registers_every_tool(server):
    assert set(server.tool_names()) == EXPECTED_TOOLS


def test_tool_schemas_are_typed(server):
    async def _tools():
        async with Client(server.build()) as client:
            return await client.list_tools()

    tools = {t.name: t for t in asyncio.run(_tools())}

    plan = tools["mercury_generate_deployment_plan"].inputSchema
    assert plan["required"] == ["repository_url"]
    assert {"branch", "budget_limit", "performance_tier"} <= set(plan["properties"])
    assert "deployment_config" in tools["mercury_validate_deployment"].inputSchema["required"]
    assert tools["mercury_analyze_repository"].description.startswith("Analyze repository structure")


def test_serve_rejects_unknown_transport(server):
    with pytest.raises(ValueError, match="Invalid transport mode"):
        server.serve(transport="carrier-pigeon")
