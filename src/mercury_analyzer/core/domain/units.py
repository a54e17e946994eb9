"""Helpers for human-readable size strings such as "512MB" or "1.5GB"."""

from __future__ import annotations

import re

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGT]?B)\s*$", re.IGNORECASE)
_UNIT_MB = {"KB": 1 / 1024, "MB": 1, "GB": 1024, "TB": 1024 * 1024}


def parse_size_mb(size: str) -> float:
    """Parse a size string into megabytes. Raises ValueError when malformed."""
    m = _SIZE_RE.match(size)
    if not m:
        raise ValueError(f"Invalid size: {size!r}")
    return float(m.group(1)) * _UNIT_MB[m.group(2).upper()]


def scale_size(size: str, factor: float) -> str:
    """Multiply the numeric part of a size string, keeping its unit."""
    m = _SIZE_RE.match(size)
    if not m:
        raise ValueError(f"Invalid size: {size!r}")
    value = float(m.group(1)) * factor
    return f"{value:g}{m.group(2).upper()}"


def format_mb(megabytes: float) -> str:
    """Render megabytes using GB when the value is a whole number of gigabytes."""
    if megabytes >= 1024 and megabytes % 1024 == 0:
        return f"{int(megabytes // 1024)}GB"
    return f"{int(megabytes)}MB"
