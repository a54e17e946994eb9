from __future__ import annotations

import os
import subprocess
import time
from pathlib import Path
from typing import Mapping, Optional, Sequence

from ..core.domain.exceptions import CommandExecutionError, CommandTimeoutError, NonZeroExitError
from ..core.domain.models import CommandResult


class SubprocessCommandRunner:
    def __init__(self, *, default_timeout: Optional[float] = None) -> None:
        self._default_timeout = default_timeout

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Run a command, capturing output. Extra ``env`` entries are merged over os.environ."""
        timeout = timeout if timeout is not None else self._default_timeout
        merged_env = {**os.environ, **env} if env else None
        started = time.perf_counter()
        try:
            proc = subprocess.run(
                list(argv),
                cwd=str(cwd),
                env=merged_env,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandTimeoutError(argv, timeout or 0) from e
        except FileNotFoundError as e:
            raise CommandExecutionError(argv, f"Command not found: {argv[0]}") from e

        result = CommandResult(
            argv=tuple(argv),
            exit_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            duration_ms=int((time.perf_counter() - started) * 1000),
        )
        if not result.ok:
            raise NonZeroExitError(argv, result)
        return result
