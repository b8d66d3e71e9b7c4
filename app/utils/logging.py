"""Logging helpers.

Every module grabs a logger through ``get_logger(__name__)``. Structured context
is passed with ``extra={...}`` and rendered as ``key=value`` pairs after the
message so that log lines stay greppable.
"""

import logging
import sys
from typing import Optional

# Attributes present on every LogRecord; anything else came from ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class ContextFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields to the rendered message."""

    def format(self, record: logging.LogRecord) -> str:
        rendered = super().format(record)
        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not context:
            return rendered
        pairs = " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))
        return f"{rendered} | {pairs}"


def _build_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(_DEFAULT_FORMAT))
    return handler


_ROOT_NAME = "app"
_root_configured = False


def _configure_root() -> None:
    global _root_configured
    if _root_configured:
        return
    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        root.addHandler(_build_handler())
    root.setLevel(logging.INFO)
    root.propagate = False
    _root_configured = True


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a configured logger.

    Args:
        name: Logger name, usually ``__name__``
        level: Optional level name (``"DEBUG"``, ``"INFO"``...) applied to the
            application root logger

    Returns:
        logging.Logger: Logger instance
    """
    _configure_root()
    if level:
        logging.getLogger(_ROOT_NAME).setLevel(level.upper())
    if not name.startswith(_ROOT_NAME):
        name = f"{_ROOT_NAME}.{name}"
    return logging.getLogger(name)
