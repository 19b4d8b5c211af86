"""Structured Logging & Record Observers — JSON logs and post-commit change notification.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (entity, record_id, event, error_code, field) surfaced when present
    - Observers are only invoked after a successful commit
    - Passwords never reach an observer payload or a log line (redact() before notify)

Design Decisions:
    - JSONFormatter on stdlib logging: no extra dependency, full control over the shape
    - setup_logging called once by the embedding application
    - LoggingObserver is the default RecordObserver; NullObserver silences events
"""

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

REDACTED = "***"
_SENSITIVE_FIELDS = frozenset({"password"})
_EXTRA_KEYS = ("entity", "record_id", "event", "error_code", "field", "changes")

observer_logger = logging.getLogger("taskboard.records")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure root logging for the application. Returns the installed handler."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


def redact(data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of data with sensitive values masked."""
    return {
        k: (REDACTED if k in _SENSITIVE_FIELDS and v is not None else v)
        for k, v in data.items()
    }


class LoggingObserver:
    """RecordObserver that writes one INFO line per committed change."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or observer_logger

    def record_created(
        self, entity: str, record_id: int, data: Mapping[str, Any],
    ) -> None:
        self._logger.info(
            f"Record created: {entity} {record_id}",
            extra={
                "entity": entity, "record_id": record_id,
                "event": "created", "changes": dict(data),
            },
        )

    def record_updated(
        self, entity: str, record_id: int, changes: Mapping[str, Any],
    ) -> None:
        self._logger.info(
            f"Record updated: {entity} {record_id}",
            extra={
                "entity": entity, "record_id": record_id,
                "event": "updated", "changes": dict(changes),
            },
        )

    def record_deleted(self, entity: str, record_id: int) -> None:
        self._logger.info(
            f"Record deleted: {entity} {record_id}",
            extra={"entity": entity, "record_id": record_id, "event": "deleted"},
        )


class NullObserver:
    """RecordObserver that ignores every event."""

    def record_created(self, entity, record_id, data) -> None:
        pass

    def record_updated(self, entity, record_id, changes) -> None:
        pass

    def record_deleted(self, entity, record_id) -> None:
        pass
