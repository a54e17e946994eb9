import os
import stat

from mercury_analyzer.infra.cache import Cache


def test_cache_clear_all_removes_directories(tmp_path):
    cache_dir = tmp_path / "cache"
    analysis_dir = tmp_path / "results" / "analyses"
    (cache_dir / "repos" / "abc").mkdir(parents=True)
    (cache_dir / "repos" / "abc" / "package.json").write_text("{}", encoding="utf-8")
    analysis_dir.mkdir(parents=True)
    (analysis_dir / "abc.json").write_text("{}", encoding="utf-8")

    Cache(cache_dir=cache_dir, analysis_dir=analysis_dir).clear_all()

    assert not cache_dir.exists()
    assert not analysis_dir.exists()
    # packaged artifacts live next to analyses and are kept
    assert (tmp_path / "results").exists()


def test_cache_clear_all_handles_nonexistent(tmp_path):
    Cache(cache_dir=tmp_path / "missing", analysis_dir=tmp_path / "also-missing").clear_all()
    assert not (tmp_path / "missing").exists()


def test_cache_clear_all_handles_readonly_files(tmp_path):
    """Git object files are read-only; clearing must still succeed."""
    cache_dir = tmp_path / "cache"
    objects = cache_dir / "repos" / "abc" / ".git" / "objects"
    objects.mkdir(parents=True)
    packed = objects / "pack-1.pack"
    packed.write_text("data", encoding="utf-8")
    os.chmod(packed, stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH)

    Cache(cache_dir=cache_dir, analysis_dir=tmp_path / "analyses").clear_all()

    assert not cache_dir.exists()
