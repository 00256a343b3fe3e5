"""
JSON logging setup.

Every record is emitted as one JSON object with timestamp, level and logger
name, to stdout and (optionally) to a log file. Extra fields passed with
logger.info("...", extra={"order_id": ...}) end up as top-level keys.
"""

import logging
import sys
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

_HANDLER_MARKER = "_orderdesk_handler"


class OrderDeskJsonFormatter(JsonFormatter):
    """JSON formatter that adds level/logger/timestamp and masks secrets."""

    SENSITIVE_KEYS = ("password", "smtp_pass", "private_key", "secret")

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        for key in self.SENSITIVE_KEYS:
            if key in log_record:
                log_record[key] = "***REDACTED***"


def _tag(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_MARKER, True)
    return handler


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure root logging for the service.

    Safe to call more than once: handlers installed by a previous call are
    replaced rather than duplicated.
    """
    formatter = OrderDeskJsonFormatter(fmt="%(timestamp)s %(level)s %(logger)s %(message)s")

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            root_logger.removeHandler(existing)
            existing.close()

    console = _tag(logging.StreamHandler(sys.stdout))
    console.setFormatter(formatter)
    root_logger.addHandler(console)

    if log_file:
        file_handler = _tag(logging.FileHandler(log_file, encoding="utf-8"))
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)

    # Silence noisy libraries
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
