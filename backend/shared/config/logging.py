"""
Centralized structured logging for the API and the CLI.

Keyword arguments passed to a logger call travel as structured data:

    logger.info("Menu published", menu_id=12, tenant_id=3)

Secret-looking keys (password, password_hash, ...) are redacted by both
formatters, so a credential passed by mistake never reaches the output.
Each record carries the correlation id of its request or provisioning run.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings

REDACTED = "***"
SECRET_KEYS = frozenset({"password", "password_hash", "secret", "token", "authorization"})


def redact(data: dict[str, Any] | None) -> dict[str, Any] | None:
    """Copy of the structured data with secret values replaced."""
    if not data:
        return None
    return {
        key: REDACTED if key.lower() in SECRET_KEYS else value
        for key, value in data.items()
    }


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None)
        if request_id and request_id != "-":
            log_data["request_id"] = request_id

        data = redact(getattr(record, "extra_data", None))
        if data:
            log_data["data"] = data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if settings.debug:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str, ensure_ascii=False)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for development and the CLI."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def _paint(self, code: str, text: str) -> str:
        return f"{code}{text}{self.RESET}" if self.use_color else text

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S")
        level = self._paint(self.COLORS.get(record.levelname, ""), f"[{timestamp}] {record.levelname:8}")

        request_id = getattr(record, "request_id", None)
        prefix = self._paint(self.DIM, f"[{request_id[-8:]}]") + " " if request_id and request_id != "-" else ""

        message = f"{level} {prefix}{record.name}: {record.getMessage()}"

        data = redact(getattr(record, "extra_data", None))
        if data:
            message += " (" + " | ".join(f"{k}={v}" for k, v in data.items()) + ")"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


class StructuredLogger(logging.Logger):
    """Logger whose keyword arguments become the record's structured data."""

    def _log_with_data(
        self,
        level: int,
        msg: str,
        args: tuple,
        exc_info: Any = None,
        extra: dict | None = None,
        **kwargs: Any,
    ) -> None:
        if not self.isEnabledFor(level):
            return
        extra = dict(extra or {})
        extra["extra_data"] = kwargs or None
        super()._log(level, msg, args, exc_info=exc_info, extra=extra, stacklevel=3)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.DEBUG, msg, args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.INFO, msg, args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.WARNING, msg, args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.ERROR, msg, args, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.CRITICAL, msg, args, **kwargs)


logging.setLoggerClass(StructuredLogger)


def _resolve_level(level: str | None) -> int:
    name = (level or settings.log_level or "").upper()
    if not name:
        return logging.DEBUG if settings.debug else logging.INFO
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str | None = None) -> None:
    """
    Configure the root logger. Call once at API or CLI startup.

    JSON lines in production (or when LOG_FORMAT=json), colored text otherwise.
    """
    from shared.infrastructure.correlation import CorrelationIdFilter

    log_level = _resolve_level(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(CorrelationIdFilter())

    log_format = settings.log_format
    if log_format == "auto":
        log_format = "json" if settings.environment == "production" else "text"

    if log_format == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(DevelopmentFormatter(use_color=sys.stdout.isatty()))

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    # Third-party noise
    for name in ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine", "PIL"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("Admin created", user_id=123, email=mask_email("user@example.com"))
    """
    return logging.getLogger(name)  # type: ignore


def mask_email(email: str | None) -> str:
    """Converts "user@example.com" to "us***@example.com"."""
    if not email or "@" not in email:
        return "<no-email>" if not email else "***@invalid"

    local, domain = email.split("@", 1)
    return f"{local[:2] if len(local) > 2 else local[:1]}***@{domain}"


# Pre-configured loggers
rest_api_logger = get_logger("rest_api")
provisioning_logger = get_logger("rest_api.provisioning")
cli_logger = get_logger("menuqr.cli")
