"""Logger bootstrap.

The server starts with a temporary console logger so config loading can
report problems, then reconfigures the ``horizon`` logger from the loaded
``[logging]`` section. Extra record attributes (``field``, ``environment``
and so on) are rendered by both formatters.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import IO, TYPE_CHECKING, Any

if TYPE_CHECKING:
    import horizon.schema

LOGGER_NAME = "horizon"

_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}
_RESET = "\033[0m"


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    """Attributes passed through ``extra=``."""
    return {
        k: v
        for k, v in vars(record).items()
        if k not in _RESERVED and not k.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line, extras as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(_extras(record))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ConsoleFormatter(logging.Formatter):
    """``time | level | logger | message key=value ...``, optionally coloured."""

    def __init__(self, color: bool = False) -> None:
        super().__init__(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        extras = _extras(record)
        if self.color:
            record = logging.makeLogRecord(vars(record))
            color = _COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname:<8}{_RESET}"
        line = super().format(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.strip().upper(), logging.INFO)


def _install(handler: logging.Handler, level: int) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def create_temp_logger(stream: IO[str] | None = None) -> logging.Logger:
    """Plain INFO console logger used until the config is loaded."""
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(ConsoleFormatter())
    return _install(handler, logging.INFO)


def setup_logger(
    cfg: horizon.schema.LoggingConfig, stream: IO[str] | None = None
) -> logging.Logger:
    """Reconfigure the ``horizon`` logger from the ``[logging]`` section."""
    handler = logging.StreamHandler(stream or sys.stderr)
    if cfg.json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ConsoleFormatter(color=cfg.console_color))
    logger = _install(handler, _level(cfg.level))
    logger.debug("Logger configured", extra={"log_level": cfg.level or "info"})
    return logger
