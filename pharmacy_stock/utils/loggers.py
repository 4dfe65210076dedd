"""
pharmacy_stock/utils/loggers.py

Purpose
-------
Console logging for the library plus an append-only JSON-lines audit log for
stock-affecting operations.

Public API
----------
- get_logger(name) -> logging.Logger
- get_audit_logger(file_path=None) -> logging.Logger
- log_event(logger, op, phase, message, extra: dict = {})
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

__all__ = ["get_logger", "get_audit_logger", "log_event"]

_AUDIT_LOGGER_NAME = "pharmacy_stock.audit"


def get_logger(name="pharmacy_stock"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(logging.INFO)
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(ch)
    return logger


def get_audit_logger(file_path: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Return a logger that writes JSON-lines to the audit file (config.LOG_PATH
    by default). Reuses the same logger (no duplicate handlers) across calls.
    """
    logger = logging.getLogger(_AUDIT_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    if logger.handlers:
        return logger

    if file_path is None:
        from ..config import LOG_PATH
        log_file = LOG_PATH
    else:
        log_file = Path(file_path)

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), mode="a", encoding="utf-8", delay=True)
    except OSError:
        # Read-only install location: audit lines go to stderr instead.
        sh = logging.StreamHandler()
        sh.setLevel(level)
        sh.setFormatter(_JsonLineFormatter())
        logger.addHandler(sh)
        return logger

    fh.setLevel(level)
    fh.setFormatter(_JsonLineFormatter())
    logger.addHandler(fh)
    return logger


class _JsonLineFormatter(logging.Formatter):
    """
    {"ts":"2025-09-16T12:00:01.123Z","level":"INFO","name":"pharmacy_stock.audit","msg":"...","extra":{...}}
    """
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "extra_payload") and isinstance(record.extra_payload, dict):
            payload["extra"] = record.extra_payload
        return json.dumps(payload, ensure_ascii=False, default=str)


def log_event(
    logger: logging.Logger,
    op: str,
    phase: str,
    message: str,
    extra: Dict[str, object] | None = None,
    level: int = logging.INFO,
) -> None:
    """
    Log a structured event line.

    Args:
        logger: Obtained from get_audit_logger().
        op: Operation name, e.g. "create_sales_bill" or "undo".
        phase: Phase within the operation, e.g. "validate", "commit", "rollback".
        message: Human-readable short message.
        extra: Optional additional key/values (bill number, quantities, warnings).
        level: Logging level (default INFO).
    """
    extra_payload = {"op": op, "phase": phase}
    if extra:
        for k, v in extra.items():
            if k not in extra_payload:
                extra_payload[k] = v
    logger.log(level, message, extra={"extra_payload": extra_payload})
