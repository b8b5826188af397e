"""
Logging for the fleet backend.

Two output shapes, picked by LOG_FORMAT:
- "json": one JSON object per line on stdout (default outside DEBUG)
- "console": "[time] LEVEL logger message" (default under DEBUG)

LOG_LEVEL sets the root and application level (INFO, or DEBUG under
DEBUG).

External ids, session tokens, provider tickets and identity assertions
must never reach a log line. Every handler runs RedactSecretsFilter,
which masks those fields when a caller passes them in `extra=`.
"""
import json
import logging
import os
from datetime import datetime, timezone

# Modules log via logging.getLogger(__name__) and propagate to root.
APP_LOGGERS = ("ranks", "accounts", "identity", "credentials", "vanish", "ops")

SECRET_FIELDS = frozenset({"external_id", "token", "ticket", "assertion", "credential"})
REDACTED = "[redacted]"

# LogRecord attributes that are not caller-supplied extras.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def _handler(formatter: str, stream: bool = True) -> dict:
    handler = {
        "class": "logging.StreamHandler",
        "formatter": formatter,
        "filters": ["redact_secrets"],
    }
    if stream:
        handler["stream"] = "ext://sys.stdout"
    return handler


def get_logging_config(debug: bool = False) -> dict:
    """Django LOGGING dict for the current environment."""
    level = os.environ.get("LOG_LEVEL", "DEBUG" if debug else "INFO")
    fmt = os.environ.get("LOG_FORMAT", "console" if debug else "json")

    formatters = {
        "json": {"()": "ops.logging_config.JsonFormatter"},
        "console": {
            "format": "[{asctime}] {levelname} {name} {message}",
            "style": "{",
        },
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "redact_secrets": {"()": "ops.logging_config.RedactSecretsFilter"},
        },
        "formatters": {fmt: formatters[fmt]},
        "handlers": {
            "console": _handler(fmt, stream=fmt == "json"),
            "null": {"class": "logging.NullHandler"},
        },
        "loggers": {
            "": {"handlers": ["console"], "level": level},
            "django": {"handlers": ["console"], "level": level, "propagate": False},
            "django.request": {
                "handlers": ["console"],
                "level": level if debug else "ERROR",
                "propagate": False,
            },
            "django.db.backends": {
                "handlers": ["console" if debug else "null"],
                "level": "DEBUG" if debug else "INFO",
                "propagate": False,
            },
            **{app: {"level": level} for app in APP_LOGGERS},
        },
    }


class RedactSecretsFilter(logging.Filter):
    """Mask identity secrets passed as log extras. Never drops a record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name in SECRET_FIELDS:
            if getattr(record, name, None) is not None:
                setattr(record, name, REDACTED)
        return True


def record_extras(record: logging.LogRecord) -> dict:
    """Caller-supplied `extra=` fields on a record."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS
    }


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record.

    Keys: timestamp (UTC, ISO 8601 with Z), level, logger, message,
    location, and when present exception and extra.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extras = record_extras(record)
        if extras:
            entry["extra"] = extras

        return json.dumps(entry, default=str)
