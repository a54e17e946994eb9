from __future__ import annotations

from pathlib import Path

from ..shared.rmtree_force import rmtree_force


class Cache:
    def __init__(self, *, cache_dir: Path, analysis_dir: Path) -> None:
        self._cache_dir = cache_dir
        self._analysis_dir = analysis_dir

    def clear_all(self) -> None:
        rmtree_force(self._cache_dir)
        rmtree_force(self._analysis_dir)
