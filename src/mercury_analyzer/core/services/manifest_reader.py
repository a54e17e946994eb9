"""Locate and parse well-known manifest files in a repository root.

Reading is soft: a file that is missing, unreadable or fails to parse is
reported as absent without affecting the others.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


MANIFEST_FILES = (
    "package.json",
    "requirements.txt",
    "pyproject.toml",
    "manage.py",
    "app.py",
    "main.py",
    "Gemfile",
    "go.mod",
    "pom.xml",
    "build.gradle",
    "build.gradle.kts",
    "Cargo.toml",
    "composer.json",
    "Dockerfile",
    ".env.example",
    ".env.sample",
    ".env.template",
)

JSON_MANIFESTS = frozenset({"package.json", "composer.json"})

IGNORE_DIRS = {
    ".git",
    "node_modules",
    ".venv",
    "venv",
    "__pycache__",
    ".mypy_cache",
    ".next",
    "build",
    "dist",
    "vendor",
    "target",
}

MAX_MANIFEST_BYTES = 2_000_000


@dataclass(frozen=True)
class ManifestSet:
    root: Path
    texts: Mapping[str, str] = field(default_factory=dict)
    documents: Mapping[str, dict[str, Any]] = field(default_factory=dict)
    has_html: bool = False

    @property
    def present(self) -> frozenset[str]:
        return frozenset(self.texts)

    def has(self, *names: str) -> bool:
        return any(name in self.texts for name in names)

    def text(self, name: str) -> Optional[str]:
        return self.texts.get(name)

    def document(self, name: str) -> dict[str, Any]:
        """Parsed JSON object for ``name``; empty when absent."""
        return self.documents.get(name, {})


def _read_text(path: Path) -> Optional[str]:
    try:
        if path.stat().st_size > MAX_MANIFEST_BYTES:
            logger.debug("manifest too large: %s", path)
            return None
        data = path.read_bytes()
    except OSError as e:
        logger.debug("manifest unreadable: %s (%s)", path, e)
        return None
    for enc in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return data.decode(enc)
        except UnicodeDecodeError:
            continue
    return None


def _contains_html(root: Path) -> bool:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in IGNORE_DIRS]
        if any(name.lower().endswith(".html") for name in filenames):
            return True
    return False


def read_manifests(root: Path) -> ManifestSet:
    """Read every known manifest present directly under ``root``."""
    texts: dict[str, str] = {}
    documents: dict[str, dict[str, Any]] = {}

    for name in MANIFEST_FILES:
        path = root / name
        if not path.is_file():
            continue
        content = _read_text(path)
        if content is None:
            continue
        if name in JSON_MANIFESTS:
            try:
                parsed = json.loads(content)
            except json.JSONDecodeError as e:
                logger.debug("manifest unparsable: %s (%s)", path, e)
                continue
            if not isinstance(parsed, dict):
                logger.debug("manifest is not a JSON object: %s", path)
                continue
            documents[name] = parsed
        texts[name] = content

    return ManifestSet(
        root=root,
        texts=texts,
        documents=documents,
        has_html=root.is_dir() and _contains_html(root),
    )
