"""
Logging setup for cartkit.

Every module logs through a named stdlib logger:

    from cartkit.logging import get_logger
    logger = get_logger(__name__)

Cart ids come from a client cookie and action names from a client form,
so both go through the sanitizers below before reaching a log line.
"""

import logging
import os
import re
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Storefront calls go through httpx; its per-request INFO lines are noise
QUIET_LOGGERS = ("httpx", "httpcore")

CART_ID_LOG_LENGTH = 12
ACTION_LOG_LENGTH = 40

_CONTROL_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})
_ACTION_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


def configure_logging(level: str | None = None, production: bool | None = None) -> None:
    """
    Attach a stdout handler to the root logger unless one is already set.

    Args:
        level: Level name; defaults to $LOG_LEVEL, then INFO
        production: Compact format without timestamps; defaults to
            CARTKIT_ENV=production
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if production is None:
        production = os.environ.get("CARTKIT_ENV") == "production"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if production else LOG_FORMAT))

    root.setLevel(log_level)
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    """Named logger (cached per name)."""
    return logging.getLogger(name)


def _escape_control_chars(value: str) -> str:
    """Escape characters that could forge extra log entries (CWE-117)."""
    return value.translate(_CONTROL_ESCAPES)


def sanitize_id_for_logging(cart_id: str | None) -> str:
    """
    Loggable form of a cart id.

    Keeps only the opaque token after the last "/" of a gid and truncates
    it, so a full cart id never ends up in logs.

    Returns:
        Truncated token, or "N/A" for a missing id
    """
    if not cart_id:
        return "N/A"
    token = _escape_control_chars(str(cart_id)).rsplit("/", 1)[-1]
    return token[:CART_ID_LOG_LENGTH]


def sanitize_action_for_logging(action: str | None) -> str:
    """Action name reduced to identifier characters."""
    if not action:
        return "N/A"
    return _ACTION_UNSAFE.sub("?", str(action))[:ACTION_LOG_LENGTH]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """Free-form client text, escaped and cut to max_length."""
    if not value:
        return "N/A"
    safe_value = _escape_control_chars(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "configure_logging",
    "get_logger",
    "sanitize_action_for_logging",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
