"""Choose the shell commands that build, test or package a repository.

Commands are picked from the detected stack; no command is ever composed
from repository content beyond script presence.
"""

from __future__ import annotations

import re
from pathlib import Path

from ..domain.exceptions import UnsupportedOperationError
from ..domain.models import BuildConfig, RepositoryHandle, StackPrimary, TechStack
from .manifest_reader import ManifestSet


Command = tuple[str, ...]

PACKAGE_FORMATS = ("zip", "tar", "docker")


def docker_image_tag(handle: RepositoryHandle) -> str:
    name = re.sub(r"[^a-z0-9_.-]+", "-", handle.name.lower()).strip("-.") or "app"
    tag = re.sub(r"[^A-Za-z0-9_.-]+", "-", handle.branch).strip("-.") or "latest"
    return f"mercury/{name}:{tag}"


def _python_install(manifests: ManifestSet, stack: TechStack) -> list[Command]:
    if stack.package_manager == "poetry":
        return [("poetry", "install", "--no-interaction")]
    if manifests.has("requirements.txt"):
        return [("python", "-m", "pip", "install", "-r", "requirements.txt")]
    if manifests.has("pyproject.toml"):
        return [("python", "-m", "pip", "install", ".")]
    return []


def plan_build(
    handle: RepositoryHandle,
    stack: TechStack,
    build_config: BuildConfig,
    manifests: ManifestSet,
) -> list[Command]:
    if build_config.has_dockerfile:
        return [("docker", "build", "-t", docker_image_tag(handle), ".")]

    primary = stack.primary
    if primary is StackPrimary.JAVASCRIPT:
        commands: list[Command] = [("npm", "install")]
        if build_config.build_script:
            commands.append(("npm", "run", "build"))
        return commands
    if primary is StackPrimary.PYTHON:
        commands = _python_install(manifests, stack)
        if commands:
            return commands
    elif primary is StackPrimary.GO:
        return [("go", "build", "./...")]
    elif primary is StackPrimary.JAVA:
        if stack.build_tool == "maven":
            return [("mvn", "-B", "package", "-DskipTests")]
        return [("gradle", "build", "-x", "test")]
    elif primary is StackPrimary.RUST:
        return [("cargo", "build", "--release")]
    elif primary is StackPrimary.RUBY:
        return [("bundle", "install")]
    elif primary is StackPrimary.PHP:
        return [("composer", "install", "--no-dev", "--no-interaction")]

    raise UnsupportedOperationError(f"No build command known for stack '{primary.value}'")


def plan_tests(stack: TechStack, build_config: BuildConfig, manifests: ManifestSet) -> list[Command]:
    primary = stack.primary
    if primary is StackPrimary.JAVASCRIPT:
        if not build_config.test_script:
            raise UnsupportedOperationError("package.json defines no test script")
        return [("npm", "install"), ("npm", "test")]
    if primary is StackPrimary.PYTHON:
        return [*_python_install(manifests, stack), ("python", "-m", "pytest")]
    if primary is StackPrimary.GO:
        return [("go", "test", "./...")]
    if primary is StackPrimary.JAVA:
        if stack.build_tool == "maven":
            return [("mvn", "-B", "test")]
        return [("gradle", "test")]
    if primary is StackPrimary.RUST:
        return [("cargo", "test")]
    if primary is StackPrimary.RUBY:
        runner: Command = ("bundle", "exec", "rspec") if "rspec" in stack.testing else ("bundle", "exec", "rake", "test")
        return [("bundle", "install"), runner]
    if primary is StackPrimary.PHP:
        return [("composer", "install", "--no-interaction"), ("vendor/bin/phpunit",)]

    raise UnsupportedOperationError(f"No test command known for stack '{primary.value}'")


def plan_package(
    handle: RepositoryHandle,
    build_config: BuildConfig,
    package_format: str,
    output_dir: Path,
) -> tuple[list[Command], str]:
    """Return the commands producing the artifact and the artifact's location.

    For ``docker`` the artifact is an image tag; otherwise an archive path.
    """
    if package_format == "docker":
        if not build_config.has_dockerfile:
            raise UnsupportedOperationError("Docker packaging requires a Dockerfile")
        tag = docker_image_tag(handle)
        return [("docker", "build", "-t", tag, ".")], tag
    if package_format == "zip":
        archive = output_dir / f"{handle.name}-{handle.id}.zip"
        return [("git", "archive", "--format=zip", "-o", str(archive), "HEAD")], str(archive)
    if package_format == "tar":
        archive = output_dir / f"{handle.name}-{handle.id}.tar.gz"
        return [("git", "archive", "--format=tar.gz", "-o", str(archive), "HEAD")], str(archive)
    raise ValueError(f"Unknown package format: {package_format}")
