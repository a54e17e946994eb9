from __future__ import annotations

from ..ports import CachePort


class ClearCacheUseCase:
    def __init__(self, *, cache: CachePort) -> None:
        self._cache = cache

    def execute(self) -> None:
        """Remove cached snapshots and stored analyses."""
        self._cache.clear_all()
