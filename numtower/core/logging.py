"""
Structured logging for the numeric kernel.

Records are emitted only through loggers under the ``numtower`` namespace.
Kernel routines attach their diagnostics (iteration counts, chosen branch,
cache keys) as an ``extra_data`` mapping, which both formatters render.
``setup_logging`` is for host applications and tests that want those
records routed somewhere; importing the library configures nothing.
"""

import sys
import logging
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import json
from pathlib import Path

from .config import Settings, get_settings

ROOT_LOGGER_NAME = "numtower"


def _extra_data(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "extra_data", None) or {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with kernel diagnostics merged in"""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        payload.update(_extra_data(record))
        # Decimals and policies are not JSON types
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Plain text line with diagnostics appended as [key=value ...]"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        data = _extra_data(record)
        if not data:
            return line
        return "{} [{}]".format(line, " ".join(f"{key}={value}" for key, value in data.items()))


def _build_handlers(config: Settings, level: int) -> List[logging.Handler]:
    formatter = StructuredFormatter() if config.LOG_FORMAT == "json" else TextFormatter()
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.LOG_FILE:
        path = Path(config.LOG_FILE)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
    return handlers


def setup_logging(config: Optional[Settings] = None) -> logging.Logger:
    """
    Route numtower records according to settings.

    Replaces any handlers a previous call installed, so it can be called
    again after the settings change.

    Args:
        config: Settings to apply (None = cached settings)

    Returns:
        The ``numtower`` logger
    """
    config = config or get_settings()
    level = logging.getLevelName(config.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(config, level):
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """Logger that stamps a fixed context onto every record's extra_data"""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        data = dict(self.extra)
        data.update(kwargs.pop("extra_data", {}))
        kwargs.setdefault("extra", {})["extra_data"] = data
        return msg, kwargs


def get_context_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger carrying permanent context.

    Example:
        >>> logger = get_context_logger(__name__, component="kernel")
        >>> logger.debug("ln converged", extra_data={"branch": "series", "terms": 40})
    """
    return LoggerAdapter(get_logger(name), context)
