from __future__ import annotations

from ..domain.models import RepositoryAnalysis
from ..ports import AnalysisStorePort, SnapshotStorePort
from ..services import RepositoryAnalyzer
from ..services.analysis_summary import summarize_analysis


class AnalyzeUseCase:
    """Use case for analyzing a repository.

    Acquires a snapshot, runs the analyzer and records the summary so the
    repository-cache query can return it later.
    """

    def __init__(
        self,
        *,
        snapshots: SnapshotStorePort,
        analyzer: RepositoryAnalyzer,
        analysis_store: AnalysisStorePort,
    ) -> None:
        self._snapshots = snapshots
        self._analyzer = analyzer
        self._analysis_store = analysis_store

    def execute(self, *, url: str, branch: str, force_refresh: bool = False) -> RepositoryAnalysis:
        """Execute analysis workflow.

        Args:
            url: Repository URL (or local directory for local snapshot stores)
            branch: Branch to analyze
            force_refresh: Refresh the snapshot even when it has not expired

        Returns:
            Repository analysis

        Raises:
            AcquisitionError: If the repository cannot be cloned or updated
        """
        with self._snapshots.checkout(url=url, branch=branch, force_refresh=force_refresh) as handle:
            analysis = self._analyzer.analyze(handle)
        self._analysis_store.save(handle.id, summarize_analysis(analysis))
        return analysis
