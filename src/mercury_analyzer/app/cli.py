from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer
from dotenv import load_dotenv

from .config import AppConfig
from .container import Container
from .cli_formatter import format_analysis, format_tool_list, format_tool_result
from ..core.domain.exceptions import AcquisitionError
from ..core.services.analysis_summary import summarize_analysis
from ..core.usecases.execute import STAGES

load_dotenv()

app = typer.Typer(add_completion=False, no_args_is_help=True)


@contextmanager
def _container(log_level: str = "INFO", console_output: bool = False) -> Iterator[Container]:
    config = AppConfig()
    config = config.model_copy(update={
        "logging": config.logging.model_copy(update={"level": log_level.upper(), "console_output": console_output}),
    })
    container = Container()
    container.config.from_pydantic(config)
    container.init_resources()
    try:
        yield container
    finally:
        # Always shutdown resources to close file handles
        container.shutdown_resources()


def _emit_tool_result(result: dict[str, Any], json_output: bool) -> None:
    if json_output:
        typer.echo(json.dumps(result, ensure_ascii=False, indent=2))
    else:
        typer.echo(format_tool_result(result))
    if not result.get("success"):
        error = str(result.get("error", ""))
        raise typer.Exit(code=2 if error.startswith("Invalid arguments") else 1)


def _call(name: str, arguments: dict[str, Any], json_output: bool, log_level: str) -> None:
    with _container(log_level) as container:
        result = container.toolset().call(name, {k: v for k, v in arguments.items() if v is not None})
    _emit_tool_result(result, json_output)


@app.command()
def inspect(
    path: str = typer.Argument(..., help="Local repository directory"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Analyze a repository that is already checked out locally."""
    with _container(log_level) as container:
        try:
            analysis = container.inspect_uc().execute(
                url=path,
                branch=container.config.snapshot.default_branch(),
            )
        except AcquisitionError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps(summarize_analysis(analysis), ensure_ascii=False, indent=2))
    else:
        typer.echo(format_analysis(analysis))


@app.command()
def analyze(
    repository_url: str = typer.Argument(..., help="Git repository URL"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b", help="Branch to analyze"),
    force_refresh: bool = typer.Option(False, "--force-refresh", help="Refresh the cached snapshot"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Clone a repository and analyze its stack, requirements and deployment strategy."""
    with _container(log_level, console_output=not json_output) as container:
        try:
            analysis = container.analyze_uc().execute(
                url=repository_url,
                branch=branch or container.config.snapshot.default_branch(),
                force_refresh=force_refresh,
            )
        except AcquisitionError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps(summarize_analysis(analysis), ensure_ascii=False, indent=2))
    else:
        typer.echo(format_analysis(analysis))


@app.command()
def plan(
    repository_url: str = typer.Argument(..., help="Git repository URL"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b"),
    environment: str = typer.Option("production", "--environment", "-e", help="development, staging or production"),
    provider: str = typer.Option("digitalocean", "--provider", help="Infrastructure provider"),
    tier: str = typer.Option("standard", "--tier", help="basic, standard, performance or enterprise"),
    budget: Optional[float] = typer.Option(None, "--budget", help="Monthly budget limit in USD"),
    log_level: str = typer.Option("WARNING", "--log-level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Generate a deployment plan."""
    _call("mercury_generate_deployment_plan", {
        "repository_url": repository_url,
        "branch": branch,
        "target_environment": environment,
        "infrastructure_provider": provider,
        "performance_tier": tier,
        "budget_limit": budget,
    }, json_output, log_level)


@app.command()
def validate(
    repository_url: str = typer.Argument(..., help="Git repository URL"),
    instance_type: str = typer.Option(..., "--instance-type", help="Instance type, e.g. s-2vcpu-4gb"),
    provider: str = typer.Option("digitalocean", "--provider"),
    region: str = typer.Option("nyc1", "--region"),
    domain: Optional[str] = typer.Option(None, "--domain"),
    ssl: bool = typer.Option(True, "--ssl/--no-ssl"),
    env: list[str] = typer.Option([], "--env", help="KEY=VALUE, repeatable"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b"),
    log_level: str = typer.Option("WARNING", "--log-level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Validate a deployment configuration against the repository's requirements."""
    variables = {}
    for item in env:
        key, sep, value = item.partition("=")
        if not sep or not key:
            typer.echo(f"Error: --env expects KEY=VALUE, got {item!r}", err=True)
            raise typer.Exit(code=2)
        variables[key] = value

    _call("mercury_validate_deployment", {
        "repository_url": repository_url,
        "branch": branch,
        "deployment_config": {
            "infrastructure": {"provider": provider, "instance_type": instance_type, "region": region},
            "domain": domain,
            "ssl": ssl,
            "environment_variables": variables,
        },
    }, json_output, log_level)


@app.command()
def cost(
    repository_url: str = typer.Argument(..., help="Git repository URL"),
    months: int = typer.Option(1, "--months", "-m", help="Duration in months (1-36)"),
    instance_type: Optional[str] = typer.Option(None, "--instance-type"),
    provider: str = typer.Option("digitalocean", "--provider"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b"),
    log_level: str = typer.Option("WARNING", "--log-level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Estimate deployment cost."""
    _call("mercury_estimate_deployment_cost", {
        "repository_url": repository_url,
        "branch": branch,
        "infrastructure_provider": provider,
        "instance_type": instance_type,
        "duration_months": months,
    }, json_output, log_level)


@app.command()
def security(
    repository_url: str = typer.Argument(..., help="Git repository URL"),
    threshold: str = typer.Option("moderate", "--threshold", help="low, moderate, high or critical"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b"),
    log_level: str = typer.Option("WARNING", "--log-level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Report configuration-level security findings."""
    _call("mercury_detect_security_issues", {
        "repository_url": repository_url,
        "branch": branch,
        "severity_threshold": threshold,
    }, json_output, log_level)


@app.command()
def run(
    stage: str = typer.Argument(..., help=f"One of: {', '.join(STAGES)}"),
    repository_url: str = typer.Argument(..., help="Git repository URL"),
    package_format: str = typer.Option("zip", "--format", help="zip, tar or docker (package stage)"),
    timeout: Optional[int] = typer.Option(None, "--timeout", help="Per-command timeout in seconds"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b"),
    log_level: str = typer.Option("INFO", "--log-level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Clone, build, test or package a repository."""
    if stage not in STAGES:
        typer.echo(f"Error: unknown stage {stage!r}; expected one of {', '.join(STAGES)}", err=True)
        raise typer.Exit(code=2)

    arguments: dict[str, Any] = {"repository_url": repository_url, "branch": branch}
    if stage == "package":
        arguments["format"] = package_format
    if stage != "clone":
        arguments["timeout_seconds"] = timeout
    _call(f"mercury_execute_{stage}", arguments, json_output, log_level)


@app.command()
def tools(
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """List the tools exposed over MCP."""
    with _container("WARNING") as container:
        specs = container.toolset().list_tools()

    if json_output:
        items = [
            {"name": s.name, "description": s.description, "input_schema": s.input_schema()}
            for s in specs
        ]
        typer.echo(json.dumps({"count": len(items), "tools": items}, ensure_ascii=False, indent=2))
    else:
        typer.echo(format_tool_list([(s.name, s.description) for s in specs]))


@app.command()
def serve(
    transport: Optional[str] = typer.Option(None, "--transport", help="stdio or streamable-http"),
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
    log_level: str = typer.Option("INFO", "--log-level", case_sensitive=False),
):
    """Run the MCP server."""
    with _container(log_level) as container:
        server = container.mcp_server()
        try:
            server.serve(
                transport=transport or container.config.server.transport(),
                host=host or container.config.server.host(),
                port=port or container.config.server.port(),
            )
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=2)


@app.command()
def clear():
    """Remove cached repository snapshots and stored analyses."""
    typer.echo("Clearing caches...")
    with _container("WARNING") as container:
        container.clear_cache_uc().execute()
    typer.echo("Done.")
