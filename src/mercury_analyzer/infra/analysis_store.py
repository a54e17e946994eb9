from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from ..shared.to_jsonable import to_jsonable

logger = logging.getLogger(__name__)


class AnalysisStore:
    """Keeps the latest analysis summary per repository as ``<id>.json``."""

    def __init__(self, *, analysis_dir: Path) -> None:
        self._analysis_dir = analysis_dir

    def save(self, repository_id: str, payload: dict[str, Any]) -> None:
        self._analysis_dir.mkdir(parents=True, exist_ok=True)
        fp = self._analysis_dir / f"{repository_id}.json"
        fp.write_text(json.dumps(to_jsonable(payload), ensure_ascii=False, indent=2), encoding="utf-8")

    def load(self, repository_id: str) -> Optional[dict[str, Any]]:
        fp = self._analysis_dir / f"{repository_id}.json"
        if not fp.exists():
            return None
        try:
            data = json.loads(fp.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.debug("Corrupt analysis record: %s", fp)
            return None
        return data if isinstance(data, dict) else None
