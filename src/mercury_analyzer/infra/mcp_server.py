from __future__ import annotations

import logging
from typing import Any, Optional

from fastmcp import FastMCP

from ..core.ports import LoggerPort
from ..core.toolset import ToolSet
from ..shared.list_tools import list_tools

# Keep standard logger for low-level debug logs (tool listing, etc.)
debug_logger = logging.getLogger(__name__)

TRANSPORTS = ("stdio", "streamable-http")


class MCPServer:
    """Expose the tool catalog over MCP.

    Each tool is registered with an explicit signature so clients see a
    typed input schema; the body only forwards its arguments to ``ToolSet.call``.
    """

    def __init__(self, *, toolset: ToolSet, logger: LoggerPort, name: str = "mercury-analyzer") -> None:
        self._toolset = toolset
        self._logger = logger
        self._name = name

    def build(self) -> FastMCP:
        toolset = self._toolset
        app = FastMCP(
            name=self._name,
            instructions="Repository analysis and deployment planning tools",
        )

        def call(tool: str, **arguments: Any) -> dict[str, Any]:
            return toolset.call(tool, {k: v for k, v in arguments.items() if v is not None})

        def describe(tool: str) -> str:
            return toolset.get(tool).description

        @app.tool(name="mercury_analyze_repository", description=describe("mercury_analyze_repository"))
        def analyze_repository(
            repository_url: str,
            branch: Optional[str] = None,
            force_refresh: bool = False,
        ) -> dict[str, Any]:
            return call(
                "mercury_analyze_repository",
                repository_url=repository_url,
                branch=branch,
                force_refresh=force_refresh,
            )

        @app.tool(name="mercury_generate_deployment_plan", description=describe("mercury_generate_deployment_plan"))
        def generate_deployment_plan(
            repository_url: str,
            branch: Optional[str] = None,
            target_environment: str = "production",
            infrastructure_provider: str = "digitalocean",
            budget_limit: Optional[float] = None,
            performance_tier: str = "standard",
        ) -> dict[str, Any]:
            return call(
                "mercury_generate_deployment_plan",
                repository_url=repository_url,
                branch=branch,
                target_environment=target_environment,
                infrastructure_provider=infrastructure_provider,
                budget_limit=budget_limit,
                performance_tier=performance_tier,
            )

        @app.tool(name="mercury_get_repository_cache", description=describe("mercury_get_repository_cache"))
        def get_repository_cache(repository_url: str, include_analysis: bool = True) -> dict[str, Any]:
            return call(
                "mercury_get_repository_cache",
                repository_url=repository_url,
                include_analysis=include_analysis,
            )

        @app.tool(name="mercury_validate_deployment", description=describe("mercury_validate_deployment"))
        def validate_deployment(
            repository_url: str,
            deployment_config: dict[str, Any],
            branch: Optional[str] = None,
        ) -> dict[str, Any]:
            return call(
                "mercury_validate_deployment",
                repository_url=repository_url,
                deployment_config=deployment_config,
                branch=branch,
            )

        @app.tool(name="mercury_estimate_deployment_cost", description=describe("mercury_estimate_deployment_cost"))
        def estimate_deployment_cost(
            repository_url: str,
            branch: Optional[str] = None,
            infrastructure_provider: str = "digitalocean",
            instance_type: Optional[str] = None,
            duration_months: int = 1,
        ) -> dict[str, Any]:
            return call(
                "mercury_estimate_deployment_cost",
                repository_url=repository_url,
                branch=branch,
                infrastructure_provider=infrastructure_provider,
                instance_type=instance_type,
                duration_months=duration_months,
            )

        @app.tool(name="mercury_detect_security_issues", description=describe("mercury_detect_security_issues"))
        def detect_security_issues(
            repository_url: str,
            branch: Optional[str] = None,
            include_dependencies: bool = True,
            severity_threshold: str = "moderate",
        ) -> dict[str, Any]:
            return call(
                "mercury_detect_security_issues",
                repository_url=repository_url,
                branch=branch,
                include_dependencies=include_dependencies,
                severity_threshold=severity_threshold,
            )

        @app.tool(name="mercury_execute_clone", description=describe("mercury_execute_clone"))
        def execute_clone(
            repository_url: str,
            branch: Optional[str] = None,
            force_refresh: bool = False,
        ) -> dict[str, Any]:
            return call(
                "mercury_execute_clone",
                repository_url=repository_url,
                branch=branch,
                force_refresh=force_refresh,
            )

        @app.tool(name="mercury_execute_build", description=describe("mercury_execute_build"))
        def execute_build(
            repository_url: str,
            branch: Optional[str] = None,
            timeout_seconds: Optional[int] = None,
        ) -> dict[str, Any]:
            return call(
                "mercury_execute_build",
                repository_url=repository_url,
                branch=branch,
                timeout_seconds=timeout_seconds,
            )

        @app.tool(name="mercury_execute_test", description=describe("mercury_execute_test"))
        def execute_test(
            repository_url: str,
            branch: Optional[str] = None,
            timeout_seconds: Optional[int] = None,
        ) -> dict[str, Any]:
            return call(
                "mercury_execute_test",
                repository_url=repository_url,
                branch=branch,
                timeout_seconds=timeout_seconds,
            )

        @app.tool(name="mercury_execute_package", description=describe("mercury_execute_package"))
        def execute_package(
            repository_url: str,
            branch: Optional[str] = None,
            format: str = "zip",
            timeout_seconds: Optional[int] = None,
        ) -> dict[str, Any]:
            return call(
                "mercury_execute_package",
                repository_url=repository_url,
                branch=branch,
                format=format,
                timeout_seconds=timeout_seconds,
            )

        return app

    def tool_names(self) -> list[str]:
        return [tool.name for tool in list_tools(self.build())]

    def serve(self, *, transport: str = "stdio", host: str = "127.0.0.1", port: int = 3007) -> None:
        """Run the server in the foreground until interrupted."""
        if transport not in TRANSPORTS:
            raise ValueError(f"Invalid transport mode: {transport}. Must be 'stdio' or 'streamable-http'.")

        app = self.build()
        debug_logger.debug("Registered tools: %s", [spec.name for spec in self._toolset.list_tools()])
        self._logger.info(
            "mcp_server_starting",
            type="mcp_server_starting",
            transport=transport,
            host=host if transport != "stdio" else None,
            port=port if transport != "stdio" else None,
        )
        if transport == "stdio":
            app.run(transport="stdio")
        else:
            app.run(transport="streamable-http", host=host, port=port)
