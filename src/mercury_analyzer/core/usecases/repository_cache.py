from __future__ import annotations

from typing import Any

from ..ports import AnalysisStorePort, ClockPort, SnapshotStorePort


class RepositoryCacheUseCase:
    """Report what is cached locally for a repository URL."""

    def __init__(
        self,
        *,
        snapshots: SnapshotStorePort,
        analysis_store: AnalysisStorePort,
        clock: ClockPort,
    ) -> None:
        self._snapshots = snapshots
        self._analysis_store = analysis_store
        self._clock = clock

    def execute(self, *, url: str, include_analysis: bool = True) -> dict[str, Any]:
        handle = self._snapshots.lookup(url)
        if handle is None:
            return {"cached": False, "repository_url": url}

        result: dict[str, Any] = {
            "cached": True,
            "repository_url": url,
            "repository_id": handle.id,
            "branch": handle.branch,
            "local_path": str(handle.local_path),
            "snapshot_time": handle.snapshot_time.isoformat(),
            "expiry_time": handle.expiry_time.isoformat(),
            "stale": handle.is_stale(self._clock.now()),
        }
        if include_analysis:
            result["analysis"] = self._analysis_store.load(handle.id)
        return result
