from __future__ import annotations

import logging
import os
import sys
from datetime import datetime

LOG_LEVEL_OPTIONS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVEL_ENV = "PROMPTPAD_LOG_LEVEL"


class _PromptpadLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created)
        time_text = timestamp.strftime("%H:%M:%S.%f")[:-3]
        date_text = f"{timestamp.month}/{timestamp.day}/{timestamp.year}"
        level_text = str(record.levelname or "INFO").capitalize()
        message = record.getMessage()
        name = str(record.name or "").strip()
        if name:
            message = f"[{name}] {message}"
        if record.exc_info:
            exc_text = self.formatException(record.exc_info)
            if exc_text:
                message = f"{message}\n{exc_text}"
        return f"[{level_text}] [{time_text} {date_text}] {message}"


def normalize_log_level_name(value: object, default: str = DEFAULT_LOG_LEVEL) -> str:
    text = str(value or "").strip().upper()
    return text if text in LOG_LEVEL_OPTIONS else str(default).strip().upper()


def get_level_number(value: object, default: str = DEFAULT_LOG_LEVEL) -> int:
    return int(getattr(logging, normalize_log_level_name(value, default), logging.INFO))


def resolve_log_level(explicit: object = None) -> str:
    if str(explicit or "").strip():
        return normalize_log_level_name(explicit)
    return normalize_log_level_name(os.environ.get(LOG_LEVEL_ENV, ""))


def configure_app_logging(level: object = DEFAULT_LOG_LEVEL) -> str:
    level_name = normalize_log_level_name(level)
    root_logger = logging.getLogger()
    handler = None
    for existing in root_logger.handlers:
        if getattr(existing, "_promptpad_console_handler", False):
            handler = existing
            break
    if handler is None:
        handler = logging.StreamHandler(sys.__stderr__)
        handler._promptpad_console_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(_PromptpadLogFormatter())
        root_logger.addHandler(handler)
    root_logger.setLevel(get_level_number(level_name))
    logging.captureWarnings(True)
    return level_name


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
