from .app.main import analyze_directory, analyze_repository, call_tool, clear

__all__ = [
    "analyze_directory",
    "analyze_repository",
    "call_tool",
    "clear",
]

# stdlib logging defaults: attach NullHandler to prevent 'No handler' warnings
import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
