from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from ..domain.models import RepositoryAnalysis, RepositoryHandle
from ..ports import ClockPort, LoggerPort
from .advisories import calculate_confidence, generate_recommendations, generate_warnings
from .build_config import analyze_build_config
from .dependency_extractor import extract_dependencies
from .manifest_reader import read_manifests
from .requirements_calculator import calculate_requirements
from .stack_classifier import classify_stack
from .strategy_synthesizer import synthesize_strategy


class RepositoryAnalyzer:
    """Runs the inference pipeline over one repository snapshot.

    Stack classification, dependency extraction and build-config analysis only
    read the manifest set and run concurrently. Requirements, strategy and
    advisories are derived from their results in that order.
    """

    def __init__(self, *, clock: ClockPort, logger: LoggerPort) -> None:
        self._clock = clock
        self._logger = logger

    def analyze(self, handle: RepositoryHandle) -> RepositoryAnalysis:
        self._logger.info(
            "analysis_started",
            type="analysis_started",
            repository_id=handle.id,
            url=handle.url,
            path=str(handle.local_path),
        )

        manifests = read_manifests(handle.local_path)
        self._logger.debug(
            "manifests_read",
            type="manifests_read",
            repository_id=handle.id,
            present=sorted(manifests.present),
            has_html=manifests.has_html,
        )

        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="mercury-analyze") as pool:
            stack_f = pool.submit(classify_stack, manifests)
            deps_f = pool.submit(extract_dependencies, manifests)
            build_f = pool.submit(analyze_build_config, manifests)
            stack = stack_f.result()
            dependencies = deps_f.result()
            build_config = build_f.result()

        requirements = calculate_requirements(stack, dependencies, build_config)
        strategy = synthesize_strategy(stack, build_config, requirements)

        analysis = RepositoryAnalysis(
            repository=handle,
            tech_stack=stack,
            dependencies=dependencies,
            build_config=build_config,
            requirements=requirements,
            strategy=strategy,
            confidence=calculate_confidence(stack, dependencies, build_config),
            warnings=generate_warnings(stack, dependencies, build_config),
            recommendations=generate_recommendations(stack, dependencies, build_config),
            analyzed_at=self._clock.now(),
        )

        self._logger.info(
            "analysis_completed",
            type="analysis_completed",
            repository_id=handle.id,
            primary=stack.primary.value,
            framework=stack.framework,
            dependencies=len(dependencies),
            strategy=strategy.type.value,
            confidence=analysis.confidence,
        )
        return analysis
