from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

# attributes every LogRecord carries; anything else arrived through ``extra``
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime", "taskName"}


class JSONFormatter(JsonFormatter):
    """One JSON object per line, with structured ``extra`` fields kept at top level."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = self.formatTime(record, "%Y-%m-%dT%H:%M:%S")
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()


class HumanReadableFormatter(logging.Formatter):
    """Console formatter that appends structured fields as ``key=value`` pairs."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        fields = {
            k: v for k, v in vars(record).items()
            if k not in _RESERVED and k != "type"
        }
        if not fields:
            return base
        return base + " " + " ".join(f"{k}={v}" for k, v in fields.items())
