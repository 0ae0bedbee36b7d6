"""
Structured logging for the LiteRT-LM bindings.

Log records follow the OpenTelemetry Logging Data Model in JSON mode, or a
compact single-line layout in human mode.

Usage::

    from ._logging import scoped_logger

    log = scoped_logger("engine")
    log.debug("Engine created", extra={"model_path": path, "backend": "cpu"})

Environment::

    LITERT_LM_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: warn)
    LITERT_LM_LOG_FORMAT=json|human (default: human if tty, json if piped)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

from ._version import __version__

__all__ = ["logger", "setup_logging", "scoped_logger"]

LOG_LEVEL_ENV = "LITERT_LM_LOG_LEVEL"
LOG_FORMAT_ENV = "LITERT_LM_LOG_FORMAT"

# =============================================================================
# Level Mapping
# =============================================================================

_LEVEL_TO_SEVERITY = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}

_NAME_TO_LEVEL = {
    "trace": logging.DEBUG,  # no TRACE in stdlib logging
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "off": logging.CRITICAL + 10,
    "none": logging.CRITICAL + 10,
}

_CODE_LOCATION_LEVELS = {logging.DEBUG, logging.ERROR, logging.CRITICAL}

_STANDARD_FIELDS = frozenset(
    {
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
        "scope",
        "message",
    }
)


def _infer_scope(logger_name: str) -> str:
    """Infer scope from logger name when not explicitly provided."""
    if not logger_name or logger_name == "litert_lm":
        return "litert_lm"
    return logger_name.split(".")[-1]


def _strip_path_prefix(filepath: str) -> str:
    """Strip everything before the package directory for shorter output."""
    marker = "litert_lm/"
    if marker in filepath:
        return filepath[filepath.index(marker) + len(marker) :]
    return filepath


def _extra_attributes(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_FIELDS and not key.startswith("_")
    }


# =============================================================================
# Formatters
# =============================================================================


class JsonFormatter(logging.Formatter):
    """OpenTelemetry-compliant JSON formatter."""

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        # microsecond clock, padded to RFC3339 nanoseconds
        timestamp = dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{dt.microsecond * 1000:09d}Z"

        attributes: dict[str, Any] = {
            "scope": getattr(record, "scope", None) or _infer_scope(record.name)
        }
        attributes.update(_extra_attributes(record))

        if record.levelno in _CODE_LOCATION_LEVELS:
            attributes["code.filepath"] = _strip_path_prefix(record.pathname)
            attributes["code.lineno"] = record.lineno

        log_record = {
            "timestamp": timestamp,
            "severityText": _LEVEL_TO_SEVERITY.get(record.levelno, "INFO"),
            "body": record.getMessage(),
            "attributes": attributes,
            "resource": {
                "service.name": "litert_lm",
                "service.version": __version__,
            },
        }
        return json.dumps(log_record, separators=(",", ":"), default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable formatter for terminal output."""

    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _RED = "\x1b[31m"
    _YELLOW = "\x1b[33m"
    _CYAN = "\x1b[36m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self._use_colors = use_colors

    def _level_color(self, levelno: int) -> str:
        if not self._use_colors:
            return ""
        if levelno <= logging.DEBUG:
            return self._DIM
        if levelno >= logging.ERROR:
            return self._RED
        if levelno >= logging.WARNING:
            return self._YELLOW
        return ""

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        severity = _LEVEL_TO_SEVERITY.get(record.levelno, "INFO")
        scope = getattr(record, "scope", None) or _infer_scope(record.name)
        level_color = self._level_color(record.levelno)

        parts = [dt.strftime("%H:%M:%S"), " "]
        if level_color:
            parts.append(level_color)
        parts.append(f"{severity:<5} ")
        if level_color:
            parts.append(self._RESET)

        if self._use_colors:
            parts.append(f"{self._CYAN}[{scope}]{self._RESET} ")
        else:
            parts.append(f"[{scope}] ")

        parts.append(record.getMessage())

        # model path shown in parentheses
        model_path = getattr(record, "model_path", None)
        if model_path:
            parts.append(f" ({model_path})")

        if record.levelno in _CODE_LOCATION_LEVELS:
            location = f" [{_strip_path_prefix(record.pathname)}:{record.lineno}]"
            if self._use_colors:
                location = f"{self._DIM}{location}{self._RESET}"
            parts.append(location)

        return "".join(parts)


# =============================================================================
# Logger Setup
# =============================================================================


def _get_log_level() -> int:
    """Get log level from environment."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "warn")
    return _NAME_TO_LEVEL.get(level_name.lower(), logging.WARNING)


def _get_log_format() -> str:
    """Get log format from environment or auto-detect."""
    fmt = os.environ.get(LOG_FORMAT_ENV)
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _create_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if _get_log_format() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_colors=sys.stderr.isatty()))
    return handler


logger = logging.getLogger("litert_lm")


def _setup_default_handler() -> None:
    """Configure default logging based on environment."""
    # leave user-configured logging alone
    if logger.handlers:
        return
    logger.addHandler(_create_handler())
    logger.setLevel(_get_log_level())


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
) -> None:
    """
    Configure litert_lm logging.

    Parameters
    ----------
    level : str or int, default "INFO"
        Log level name ("debug", "info", "warn", "error", "fatal", "off")
        or a logging constant like ``logging.DEBUG``.

    format : str, optional
        Either "json" or "human". If not specified, uses
        ``LITERT_LM_LOG_FORMAT`` or auto-detects based on TTY.

    Examples
    --------
    ::

        >>> import litert_lm
        >>> litert_lm.setup_logging("DEBUG", format="human")
    """
    if isinstance(level, str):
        level = _NAME_TO_LEVEL.get(level.lower(), logging.INFO)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if format:
        os.environ[LOG_FORMAT_ENV] = format

    logger.addHandler(_create_handler())
    logger.setLevel(level)


class _ScopedLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges call-site extra attributes with scope."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra: dict[str, Any] = dict(self.extra) if self.extra else {}
        if "extra" in kwargs:
            extra.update(kwargs["extra"])
        kwargs["extra"] = extra
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """
    Create a logger adapter with a fixed scope.

    Parameters
    ----------
    scope : str
        The scope name (e.g., "engine", "session", "loader").

    Returns
    -------
    logging.LoggerAdapter
        A logger adapter that automatically adds scope to all messages.
    """
    return _ScopedLoggerAdapter(logger, {"scope": scope})


_setup_default_handler()
