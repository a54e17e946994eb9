from __future__ import annotations

import re

from ..domain.models import Dependency, DependencyType
from .manifest_reader import ManifestSet


NODE_SECTIONS = (
    ("dependencies", DependencyType.PRODUCTION),
    ("devDependencies", DependencyType.DEVELOPMENT),
    ("peerDependencies", DependencyType.PEER),
    ("optionalDependencies", DependencyType.OPTIONAL),
)

COMPOSER_SECTIONS = (
    ("require", DependencyType.PRODUCTION),
    ("require-dev", DependencyType.DEVELOPMENT),
)

_VERSION_OPERATOR = re.compile(r"===|==|>=|<=|~=|!=|>|<")


def _from_sections(document: dict, sections) -> list[Dependency]:
    deps: list[Dependency] = []
    for key, dep_type in sections:
        block = document.get(key)
        if not isinstance(block, dict):
            continue
        for name, version in block.items():
            if not name:
                continue
            deps.append(Dependency(name=name, version=str(version) if version else "latest", type=dep_type))
    return deps


def parse_requirement_line(line: str) -> tuple[str, str] | None:
    """Split one requirements.txt line into (name, version).

    Returns None for blank lines, comments and pip options (``-r``, ``-e``...).
    """
    line = line.split(" #", 1)[0].strip()
    if not line or line.startswith("#") or line.startswith("-"):
        return None
    line = line.split(";", 1)[0].strip()
    parts = _VERSION_OPERATOR.split(line, maxsplit=1)
    name = parts[0].split("[", 1)[0].strip()
    if not name:
        return None
    version = parts[1].strip() if len(parts) > 1 and parts[1].strip() else "latest"
    return name, version


def _from_requirements(text: str) -> list[Dependency]:
    # last occurrence wins, first position kept
    found: dict[str, str] = {}
    for raw in text.splitlines():
        parsed = parse_requirement_line(raw)
        if parsed is None:
            continue
        name, version = parsed
        found[name] = version
    return [Dependency(name=name, version=version) for name, version in found.items()]


def _from_composer(document: dict) -> list[Dependency]:
    # platform requirements ("php", "ext-json") are not packages
    return [
        dep for dep in _from_sections(document, COMPOSER_SECTIONS)
        if dep.name != "php" and not dep.name.startswith("ext-")
    ]


def extract_dependencies(manifests: ManifestSet) -> tuple[Dependency, ...]:
    """Flat list of declared dependencies across every recognised manifest.

    Entries from different manifests are not merged.
    """
    deps: list[Dependency] = []
    if manifests.has("package.json"):
        deps.extend(_from_sections(manifests.document("package.json"), NODE_SECTIONS))
    requirements = manifests.text("requirements.txt")
    if requirements is not None:
        deps.extend(_from_requirements(requirements))
    if manifests.has("composer.json"):
        deps.extend(_from_composer(manifests.document("composer.json")))
    return tuple(deps)
