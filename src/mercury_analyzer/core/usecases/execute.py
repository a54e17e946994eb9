from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional

from ..domain.models import CommandResult, RepositoryHandle
from ..ports import CommandRunnerPort, LoggerPort, SnapshotStorePort
from ..services.build_config import analyze_build_config
from ..services.command_planner import Command, plan_build, plan_package, plan_tests
from ..services.manifest_reader import read_manifests
from ..services.stack_classifier import classify_stack


STAGES = ("clone", "build", "test", "package")


def _command_record(result: CommandResult) -> dict[str, Any]:
    return {
        "command": list(result.argv),
        "exit_code": result.exit_code,
        "stdout": result.stdout,
        "stderr": result.stderr,
        "duration_ms": result.duration_ms,
    }


class ExecuteUseCase:
    """Clone, build, test or package a repository snapshot.

    Commands run sequentially in the snapshot directory; the first failure
    propagates as a CommandExecutionError.
    """

    def __init__(
        self,
        *,
        snapshots: SnapshotStorePort,
        runner: CommandRunnerPort,
        logger: LoggerPort,
        packages_dir: Path,
        command_timeout: float,
    ) -> None:
        self._snapshots = snapshots
        self._runner = runner
        self._logger = logger
        self._packages_dir = packages_dir
        self._command_timeout = command_timeout

    def execute(
        self,
        *,
        stage: str,
        url: str,
        branch: str,
        force_refresh: bool = False,
        package_format: str = "zip",
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        if stage not in STAGES:
            raise ValueError(f"Unknown stage: {stage}")

        started = time.perf_counter()
        with self._snapshots.checkout(url=url, branch=branch, force_refresh=force_refresh) as handle:
            result = self._run_stage(handle, stage, package_format, timeout)
        result["duration_ms"] = int((time.perf_counter() - started) * 1000)
        return result

    def _run_stage(
        self,
        handle: RepositoryHandle,
        stage: str,
        package_format: str,
        timeout: Optional[float],
    ) -> dict[str, Any]:
        result: dict[str, Any] = {
            "stage": stage,
            "repository": {
                "id": handle.id,
                "url": handle.url,
                "branch": handle.branch,
                "local_path": str(handle.local_path),
            },
        }
        if stage == "clone":
            return result

        manifests = read_manifests(handle.local_path)
        stack = classify_stack(manifests)
        build_config = analyze_build_config(manifests)

        artifact = None
        if stage == "build":
            commands = plan_build(handle, stack, build_config, manifests)
        elif stage == "test":
            commands = plan_tests(stack, build_config, manifests)
        else:
            self._packages_dir.mkdir(parents=True, exist_ok=True)
            commands, artifact = plan_package(handle, build_config, package_format, self._packages_dir)

        records = [
            _command_record(r)
            for r in self._run_all(handle, commands, timeout or self._command_timeout)
        ]
        result["commands"] = records
        if artifact is not None:
            result["artifact"] = artifact
        return result

    def _run_all(
        self,
        handle: RepositoryHandle,
        commands: list[Command],
        timeout: float,
    ) -> list[CommandResult]:
        results: list[CommandResult] = []
        for argv in commands:
            self._logger.info(
                "command_started",
                type="command_started",
                repository_id=handle.id,
                command=list(argv),
            )
            res = self._runner.run(argv, cwd=handle.local_path, timeout=timeout)
            self._logger.info(
                "command_finished",
                type="command_finished",
                repository_id=handle.id,
                command=list(argv),
                exit_code=res.exit_code,
                duration_ms=res.duration_ms,
            )
            results.append(res)
        return results
