"""Package logging for scoresync: one handler on the ``scoresync`` logger, secrets masked in config dumps."""

import logging
import os
from threading import Lock
from typing import Any

PACKAGE_LOGGER = "scoresync"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_CONFIGURE_LOCK = Lock()
_configured = False
_SENSITIVE_KEYS = {
    "password",
    "token",
    "secret",
    "api_key",
    "apikey",
    "authorization",
}


def _level_from(value: str | int | None) -> int:
    if isinstance(value, int):
        return value
    name = (value or os.getenv("SCORESYNC_LOG_LEVEL") or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: str | int | None = None, *, force: bool = False) -> logging.Logger:
    """Set the package log level and attach a stderr handler unless the host app already logs.

    Called lazily by get_logger; the CLI calls it explicitly with --log-level.
    """
    global _configured
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    with _CONFIGURE_LOCK:
        if _configured and not force:
            return package_logger

        package_logger.setLevel(_level_from(level))
        if not logging.getLogger().handlers and not package_logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            package_logger.addHandler(handler)

        _configured = True
    return package_logger


def get_logger(name: str) -> logging.Logger:
    if not _configured:
        configure_logging()
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def _redact_value(value: Any) -> Any:
    if isinstance(value, dict):
        return redact_config(value)
    if isinstance(value, str) and value.lower().startswith("bearer "):
        return "Bearer ***"
    return value


def redact_config(values: dict[str, Any]) -> dict[str, Any]:
    """Mask sensitive keys at any depth, plus any bearer credential stored under another key."""
    redacted: dict[str, Any] = {}
    for key, value in values.items():
        if str(key).lower() in _SENSITIVE_KEYS and value is not None:
            redacted[key] = "***"
        else:
            redacted[key] = _redact_value(value)
    return redacted
