from __future__ import annotations

from .manifest_reader import ManifestSet, read_manifests
from .stack_classifier import classify_stack
from .dependency_extractor import extract_dependencies
from .build_config import analyze_build_config
from .requirements_calculator import calculate_requirements
from .strategy_synthesizer import synthesize_strategy
from .repository_analyzer import RepositoryAnalyzer

__all__ = [
    "ManifestSet",
    "read_manifests",
    "classify_stack",
    "extract_dependencies",
    "analyze_build_config",
    "calculate_requirements",
    "synthesize_strategy",
    "RepositoryAnalyzer",
]
