import os
import shutil
import stat
from pathlib import Path
from typing import Callable


def _clear_readonly(func: Callable[[str], None], path: str, exc: BaseException) -> None:
    # git object files are read-only; clear the bit and retry once
    try:
        os.chmod(path, stat.S_IWUSR | stat.S_IRUSR | stat.S_IXUSR)
    except OSError:
        pass
    func(path)


def rmtree_force(path: Path) -> None:
    """Remove a directory tree, including read-only files. Missing paths are ignored."""
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except PermissionError:
        shutil.rmtree(path, onexc=_clear_readonly)
