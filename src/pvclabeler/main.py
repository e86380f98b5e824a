"""Process wiring for the PVC disk labeler.

Configures logging and builds a reconciler backed by the Compute Engine
API and the default Prometheus registry.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

from .config import Config
from .gcp import ComputeDiskClient
from .metrics import PrometheusMetricsRecorder
from .reconciler import DiskLabelReconciler

# Attributes every LogRecord has; anything else was passed via `extra`
_RESERVED_RECORD_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    )
)

TEXT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure root logging to stdout.

    Calling it again replaces the handler installed by a previous call.

    Args:
        level: Logging level name.
        fmt: "json" for structured output, "text" for human readable lines.
    """
    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_LOG_FORMAT))
    handler.set_name("pvclabeler")

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == "pvclabeler":
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    # Reduce noise from the Google client libraries
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def create_reconciler(config: Config) -> DiskLabelReconciler:
    """Build a reconciler talking to Compute Engine.

    Credentials come from Application Default Credentials.
    """
    return DiskLabelReconciler.from_config(
        config,
        client=ComputeDiskClient(),
        metrics=PrometheusMetricsRecorder(),
    )
