from __future__ import annotations

import logging
from pathlib import Path

from dependency_injector.resources import Resource

from .handlers import build_json_file_handler, build_human_console_handler

LOG_FILE_NAME = "mercury.jsonl"


class StructuredLogger(Resource):
    """Structured logger shared by services, use cases and the tool surface.

    Writes JSON lines to ``<logs_dir>/mercury.jsonl`` and optionally a
    human-readable stream to stderr. Keyword arguments become structured fields.
    """

    def init(
        self,
        *,
        logs_dir: Path,
        logger_name: str = "mercury_analyzer",
        console_output: bool = False,
        level: str = "INFO",
    ) -> "StructuredLogger":
        """Initialize handlers.

        Returns:
            Self for dependency_injector Resource pattern
        """
        numeric_level = logging._nameToLevel.get(level.upper(), logging.INFO)
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(numeric_level)
        self._logger.propagate = False

        self._logger.handlers.clear()
        self._handlers = [build_json_file_handler(logs_dir / LOG_FILE_NAME, level=numeric_level)]
        if console_output:
            self._handlers.append(build_human_console_handler(level=numeric_level))
        for handler in self._handlers:
            self._logger.addHandler(handler)

        return self

    def shutdown(self, resource: "StructuredLogger") -> None:
        """Flush and close handlers so log files can be removed afterwards."""
        for handler in self._handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs or None)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs or None)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(message, extra=kwargs or None)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._logger.error(message, extra=kwargs or None, exc_info=exc_info)

    def exception(self, message: str, **kwargs) -> None:
        self._logger.exception(message, extra=kwargs or None)
