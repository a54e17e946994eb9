"""Argument records accepted by the tool surface.

Validation happens here, before any repository is touched; a
``pydantic.ValidationError`` is the input-error type.
"""

from __future__ import annotations

import re
from typing import Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


Provider = Literal["digitalocean", "hetzner", "aws", "gcp", "azure"]
Environment = Literal["development", "staging", "production"]
PerformanceTier = Literal["basic", "standard", "performance", "enterprise"]
SeverityLevel = Literal["low", "moderate", "high", "critical"]
PackageFormat = Literal["zip", "tar", "docker"]

_URL_SCHEMES = {"http", "https", "ssh", "git", "file"}
_SCP_LIKE = re.compile(r"^[\w.-]+@[\w.-]+:[\w./~-]+$")


class RepositoryArgs(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    repository_url: str = Field(description="Git repository URL")
    branch: Optional[str] = Field(default=None, description="Branch to use (defaults to the configured branch)")

    @field_validator("repository_url")
    @classmethod
    def _valid_url(cls, value: str) -> str:
        value = value.strip()
        if _SCP_LIKE.match(value):
            return value
        parsed = urlparse(value)
        if parsed.scheme not in _URL_SCHEMES or not (parsed.netloc or parsed.scheme == "file"):
            raise ValueError("Repository URL must be valid")
        return value


class AnalyzeRepositoryArgs(RepositoryArgs):
    force_refresh: bool = False


class GenerateDeploymentPlanArgs(RepositoryArgs):
    target_environment: Environment = "production"
    infrastructure_provider: Provider = "digitalocean"
    budget_limit: Optional[float] = Field(default=None, ge=5, le=10000)
    performance_tier: PerformanceTier = "standard"


class RepositoryCacheArgs(RepositoryArgs):
    include_analysis: bool = True


class InfrastructureConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str
    instance_type: str
    region: str


class DeploymentConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    infrastructure: InfrastructureConfig
    domain: Optional[str] = None
    ssl: bool = True
    environment_variables: Optional[dict[str, str]] = None


class ValidateDeploymentArgs(RepositoryArgs):
    deployment_config: DeploymentConfig


class EstimateDeploymentCostArgs(RepositoryArgs):
    infrastructure_provider: Provider = "digitalocean"
    instance_type: Optional[str] = None
    duration_months: int = Field(default=1, ge=1, le=36)


class DetectSecurityIssuesArgs(RepositoryArgs):
    include_dependencies: bool = True
    severity_threshold: SeverityLevel = "moderate"


class ExecuteCloneArgs(RepositoryArgs):
    force_refresh: bool = False


class ExecuteCommandArgs(RepositoryArgs):
    timeout_seconds: Optional[int] = Field(default=None, gt=0, le=3600)


class ExecutePackageArgs(ExecuteCommandArgs):
    format: PackageFormat = "zip"
