"""Tool catalog and the result envelope shared by the MCP server and the CLI.

Every call returns ``{"success": True, ..., "tool_name", "execution_time"}``
or ``{"success": False, "error", "tool_name", "execution_time"}``; no
exception escapes ``ToolSet.call``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ValidationError

from .domain.exceptions import MercuryError, UnknownToolError
from .domain.models import RepositoryAnalysis, Severity
from .domain.requests import (
    AnalyzeRepositoryArgs,
    DetectSecurityIssuesArgs,
    EstimateDeploymentCostArgs,
    ExecuteCloneArgs,
    ExecuteCommandArgs,
    ExecutePackageArgs,
    GenerateDeploymentPlanArgs,
    RepositoryArgs,
    RepositoryCacheArgs,
    ValidateDeploymentArgs,
)
from .ports import ClockPort, IdGeneratorPort, LoggerPort
from .services.analysis_summary import summarize_analysis
from .services.cost_estimator import estimate_cost
from .services.deployment_plan import build_deployment_plan, make_plan_id
from .services.deployment_validator import validate_deployment
from .services.security_scanner import scan_security
from .usecases.analyze import AnalyzeUseCase
from .usecases.execute import ExecuteUseCase
from .usecases.repository_cache import RepositoryCacheUseCase


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_model: type[BaseModel]
    handler: Callable[[Any], dict[str, Any]]

    def input_schema(self) -> dict[str, Any]:
        return self.args_model.model_json_schema()


def format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "Invalid arguments: " + "; ".join(parts)


class ToolSet:
    def __init__(
        self,
        *,
        analyze_uc: AnalyzeUseCase,
        cache_uc: RepositoryCacheUseCase,
        execute_uc: ExecuteUseCase,
        clock: ClockPort,
        id_gen: IdGeneratorPort,
        logger: LoggerPort,
        default_branch: str = "main",
    ) -> None:
        self._analyze_uc = analyze_uc
        self._cache_uc = cache_uc
        self._execute_uc = execute_uc
        self._clock = clock
        self._id_gen = id_gen
        self._logger = logger
        self._default_branch = default_branch

        specs = [
            ToolSpec(
                "mercury_analyze_repository",
                "Analyze repository structure, dependencies, and generate deployment recommendations",
                AnalyzeRepositoryArgs,
                self._analyze_repository,
            ),
            ToolSpec(
                "mercury_generate_deployment_plan",
                "Generate comprehensive deployment plan with infrastructure specifications",
                GenerateDeploymentPlanArgs,
                self._generate_deployment_plan,
            ),
            ToolSpec(
                "mercury_get_repository_cache",
                "Retrieve cached repository analysis data",
                RepositoryCacheArgs,
                self._get_repository_cache,
            ),
            ToolSpec(
                "mercury_validate_deployment",
                "Validate deployment configuration against repository requirements",
                ValidateDeploymentArgs,
                self._validate_deployment,
            ),
            ToolSpec(
                "mercury_estimate_deployment_cost",
                "Estimate infrastructure costs for repository deployment",
                EstimateDeploymentCostArgs,
                self._estimate_deployment_cost,
            ),
            ToolSpec(
                "mercury_detect_security_issues",
                "Scan repository for security vulnerabilities and configuration issues",
                DetectSecurityIssuesArgs,
                self._detect_security_issues,
            ),
            ToolSpec(
                "mercury_execute_clone",
                "Clone or refresh the local snapshot of a repository",
                ExecuteCloneArgs,
                self._execute_clone,
            ),
            ToolSpec(
                "mercury_execute_build",
                "Build the repository with the command matching its detected stack",
                ExecuteCommandArgs,
                self._execute_build,
            ),
            ToolSpec(
                "mercury_execute_test",
                "Run the repository's test suite with the command matching its detected stack",
                ExecuteCommandArgs,
                self._execute_test,
            ),
            ToolSpec(
                "mercury_execute_package",
                "Package the repository as a zip/tar archive or a Docker image",
                ExecutePackageArgs,
                self._execute_package,
            ),
        ]
        self._tools = {spec.name: spec for spec in specs}

    def list_tools(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def get(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None:
            raise UnknownToolError(name)
        return spec

    def call(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        started = time.perf_counter()
        try:
            spec = self.get(name)
            args = spec.args_model.model_validate(dict(arguments or {}))
            self._logger.info("tool_call_started", type="tool_call_started", tool_name=name)
            payload = spec.handler(args)
        except ValidationError as e:
            return self._failure(name, started, format_validation_error(e))
        except MercuryError as e:
            return self._failure(name, started, str(e))
        except Exception as e:
            self._logger.exception("tool_call_crashed", type="tool_call_crashed", tool_name=name)
            return self._failure(name, started, str(e) or type(e).__name__)

        elapsed = self._elapsed(started)
        self._logger.info(
            "tool_call_succeeded",
            type="tool_call_succeeded",
            tool_name=name,
            execution_time=elapsed,
        )
        return {"success": True, **payload, "tool_name": name, "execution_time": elapsed}

    def _failure(self, name: str, started: float, error: str) -> dict[str, Any]:
        elapsed = self._elapsed(started)
        self._logger.warning(
            "tool_call_failed",
            type="tool_call_failed",
            tool_name=name,
            error=error,
            execution_time=elapsed,
        )
        return {"success": False, "error": error, "tool_name": name, "execution_time": elapsed}

    @staticmethod
    def _elapsed(started: float) -> str:
        return f"{int((time.perf_counter() - started) * 1000)}ms"

    def _branch(self, args: RepositoryArgs) -> str:
        return args.branch or self._default_branch

    def _analysis(self, args: RepositoryArgs, force_refresh: bool = False) -> RepositoryAnalysis:
        return self._analyze_uc.execute(
            url=args.repository_url,
            branch=self._branch(args),
            force_refresh=force_refresh,
        )

    # Handlers

    def _analyze_repository(self, args: AnalyzeRepositoryArgs) -> dict[str, Any]:
        analysis = self._analysis(args, force_refresh=args.force_refresh)
        return {"analysis": summarize_analysis(analysis)}

    def _generate_deployment_plan(self, args: GenerateDeploymentPlanArgs) -> dict[str, Any]:
        analysis = self._analysis(args)
        plan = build_deployment_plan(
            analysis,
            plan_id=make_plan_id(self._clock.now(), self._id_gen.generate()),
            environment=args.target_environment,
            provider=args.infrastructure_provider,
            performance_tier=args.performance_tier,
            budget_limit=args.budget_limit,
        )
        return {"plan": plan}

    def _get_repository_cache(self, args: RepositoryCacheArgs) -> dict[str, Any]:
        return self._cache_uc.execute(url=args.repository_url, include_analysis=args.include_analysis)

    def _validate_deployment(self, args: ValidateDeploymentArgs) -> dict[str, Any]:
        analysis = self._analysis(args)
        config = args.deployment_config
        return validate_deployment(
            analysis,
            instance_type=config.infrastructure.instance_type,
            domain=config.domain,
            ssl=config.ssl,
            environment_variables=config.environment_variables,
        )

    def _estimate_deployment_cost(self, args: EstimateDeploymentCostArgs) -> dict[str, Any]:
        analysis = self._analysis(args)
        return estimate_cost(
            analysis,
            provider=args.infrastructure_provider,
            instance_type=args.instance_type,
            duration_months=args.duration_months,
        )

    def _detect_security_issues(self, args: DetectSecurityIssuesArgs) -> dict[str, Any]:
        analysis = self._analysis(args)
        return scan_security(
            analysis,
            scan_date=self._clock.now(),
            include_dependencies=args.include_dependencies,
            severity_threshold=Severity(args.severity_threshold),
        )

    def _execute_clone(self, args: ExecuteCloneArgs) -> dict[str, Any]:
        return self._execute_uc.execute(
            stage="clone",
            url=args.repository_url,
            branch=self._branch(args),
            force_refresh=args.force_refresh,
        )

    def _execute_build(self, args: ExecuteCommandArgs) -> dict[str, Any]:
        return self._execute_uc.execute(
            stage="build",
            url=args.repository_url,
            branch=self._branch(args),
            timeout=args.timeout_seconds,
        )

    def _execute_test(self, args: ExecuteCommandArgs) -> dict[str, Any]:
        return self._execute_uc.execute(
            stage="test",
            url=args.repository_url,
            branch=self._branch(args),
            timeout=args.timeout_seconds,
        )

    def _execute_package(self, args: ExecutePackageArgs) -> dict[str, Any]:
        return self._execute_uc.execute(
            stage="package",
            url=args.repository_url,
            branch=self._branch(args),
            package_format=args.format,
            timeout=args.timeout_seconds,
        )
