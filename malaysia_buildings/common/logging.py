"""JSON logging with stable schema."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from malaysia_buildings.common.constants import JSON_LOG_FIELDS
from malaysia_buildings.common.fs import ensure_dir
from malaysia_buildings.common.time_utils import utc_timestamp_iso

LOGGER_NAMESPACE = "malaysia_buildings"


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {"timestamp": utc_timestamp_iso(), "message": record.getMessage()}
        for field in JSON_LOG_FIELDS:
            if field in payload:
                continue
            payload[field] = getattr(record, field, None)
        return json.dumps(payload, ensure_ascii=False)


class SessionContextFilter(logging.Filter):
    """Stamps the run's session id on records that do not carry one."""

    def __init__(self, session_id: str) -> None:
        super().__init__()
        self.session_id = session_id

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "session_id", None) is None:
            record.session_id = self.session_id
        return True


def build_logger(session_id: str, data_dir: Path | None = None, level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{session_id}")
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    for existing in [f for f in logger.filters if isinstance(f, SessionContextFilter)]:
        logger.removeFilter(existing)
    logger.addFilter(SessionContextFilter(session_id))
    logger.propagate = False

    stream = logging.StreamHandler()
    stream.setFormatter(JsonLineFormatter())
    logger.addHandler(stream)

    if data_dir is not None:
        log_path = data_dir / "run_meta" / f"{session_id}.log.jsonl"
        ensure_dir(log_path.parent)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(JsonLineFormatter())
        logger.addHandler(file_handler)

    return logger


def default_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAMESPACE)


def log_event(logger: logging.Logger | None, message: str, *, level: int = logging.INFO, **event_fields: Any) -> None:
    (logger or default_logger()).log(level, message, extra=event_fields)
