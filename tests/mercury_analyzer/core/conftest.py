"""Shared fixtures for core tests."""
import pytest

from helpers import FakeClock, FakeLogger, make_handle, write_files
from mercury_analyzer.core.services import RepositoryAnalyzer, read_manifests


@pytest.fixture
def manifests_for(tmp_path):
    """Write files into a fresh directory and read its manifests."""
    counter = {"n": 0}

    def _make(files):
        counter["n"] += 1
        root = write_files(tmp_path / f"repo{counter['n']}", files)
        return read_manifests(root)

    return _make


@pytest.fixture
def analyze_files(tmp_path):
    """Write files into a fresh directory and run the full analysis on it."""
    counter = {"n": 0}

    def _analyze(files, **handle_kwargs):
        counter["n"] += 1
        root = tmp_path / f"analyzed{counter['n']}"
        root.mkdir()
        write_files(root, files)
        analyzer = RepositoryAnalyzer(clock=FakeClock(), logger=FakeLogger())
        return analyzer.analyze(make_handle(root, **handle_kwargs))

    return _analyze
