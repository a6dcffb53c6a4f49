"""Logging configuration utilities."""

import json
import logging
import sys
from typing import Any, Mapping, MutableMapping

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

SERVICE_NAME = "haiku"


class JsonFormatter(logging.Formatter):
    """Render log records as JSON lines stamped with service metadata.

    ``static_fields`` (service name, environment, model) are written on every
    line; fields passed through ``extra`` such as ``theme``, ``reason`` or
    ``client`` follow them.
    """

    def __init__(self, static_fields: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        payload: MutableMapping[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **self._static_fields,
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED or key.startswith("_") or key in payload:
                continue
            payload[key] = value

        return json.dumps(payload, default=str)


def configure_logging(
    level: str, environment: str | None = None, model: str | None = None
) -> None:
    """Configure root logger for structured logging."""

    static_fields = {"service": SERVICE_NAME}
    if environment:
        static_fields["environment"] = environment
    if model:
        static_fields["model"] = model

    logging_level = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(static_fields))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging_level)
    root_logger.addHandler(handler)

    # httpx logs one line per request at INFO.
    logging.getLogger("httpx").setLevel(max(logging_level, logging.WARNING))
