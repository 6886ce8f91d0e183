"""Logging configuration for the application.

Two sinks are configured from settings:

- the application log (root logger): request lines, warnings, errors;
- the audit log (logger ``app.audit``): one line per write request, kept in
  its own file when file output is enabled.
"""

import json
import logging
import sys
from pathlib import Path

from app.core.config import Settings, get_settings

AUDIT_LOGGER_NAME = "app.audit"

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# LogRecord attributes that are not user-supplied `extra` fields.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    """Format records as one JSON object per line, including `extra` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, _DATE_FORMAT),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def _build_formatter(settings: Settings) -> logging.Formatter:
    if settings.log_format == "json":
        return JsonLineFormatter()
    return logging.Formatter(_TEXT_FORMAT, datefmt=_DATE_FORMAT)


def _file_handler(path: str) -> logging.Handler | None:
    """Append-mode file handler; None (and a stderr note) if the file cannot be opened."""
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        print(f"Cannot open log file {path!r}, falling back to stdout: {e}", file=sys.stderr)
        return None


def _build_handlers(settings: Settings, file_path: str) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if settings.log_output in ("file", "both"):
        fh = _file_handler(file_path)
        if fh is not None:
            handlers.append(fh)
    if settings.log_output in ("stdout", "both") or not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))
    return handlers


def setup_logging(settings: Settings | None = None) -> None:
    """Configure application-wide logging.

    Level comes from settings.log_level (forced to DEBUG when settings.debug
    is True). Output goes to stdout, a file, or both (settings.log_output).
    The audit logger gets its own file when file output is enabled and then
    does not propagate to the application log.
    """
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper())
    formatter = _build_formatter(settings)

    app_handlers = _build_handlers(settings, settings.app_log_file)
    for handler in app_handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=app_handlers, force=True)

    audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
    for handler in list(audit_logger.handlers):
        audit_logger.removeHandler(handler)
        handler.close()
    audit_logger.setLevel(level)
    if settings.log_output in ("file", "both"):
        audit_handler = _file_handler(settings.audit_log_file)
        if audit_handler is not None:
            audit_handler.setFormatter(formatter)
            audit_logger.addHandler(audit_handler)
            audit_logger.propagate = settings.log_output == "both"
            return
    audit_logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
