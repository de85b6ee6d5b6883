"""Logging configuration helpers."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from . import constants

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Base64 thumbnails run to tens of kilobytes; short values are left alone
_THUMBNAIL_PATTERN = re.compile(r'("thumbnail":\s*")([A-Za-z0-9+/=]{64,})(")')


class ThumbnailRedactionFilter(logging.Filter):
    """Replace base64 thumbnails in logged payloads with their length."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted, count = _THUMBNAIL_PATTERN.subn(_summarize, message)
        if count:
            record.msg = redacted
            record.args = None
        return True


def _summarize(match: re.Match) -> str:
    return f"{match.group(1)}<base64, {len(match.group(2))} chars>{match.group(3)}"


def notifications_log_path(log_path: Path) -> Path:
    """Where user-visible notifications are kept next to the main log."""
    return log_path.with_name(f"{log_path.stem}-notifications{log_path.suffix}")


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_network: bool = False
) -> None:
    """Configure root logging handlers.

    Parameters
    ----------
    level:
        Log level name, e.g. "INFO". Use "DEBUG" to see per-delivery traces.
    log_path:
        Optional filesystem path for a file handler. Warnings and errors shown
        to the user are also kept in a separate notifications log beside it.
    log_network:
        When true, keep verbose third-party libraries (aiohttp, Pillow) at the
        root level to aid diagnostics.
    """

    logging.captureWarnings(True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    notify_logger = logging.getLogger(constants.NOTIFY_LOGGER)
    for handler in list(notify_logger.handlers):
        notify_logger.removeHandler(handler)
        handler.close()

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

        notify_handler = logging.FileHandler(notifications_log_path(log_path))
        notify_handler.setLevel(logging.WARNING)
        notify_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
        )
        notify_logger.addHandler(notify_handler)

    redaction = ThumbnailRedactionFilter()
    for handler in root.handlers:
        handler.addFilter(redaction)

    if not log_network:
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
        logging.getLogger("aiohttp.client").setLevel(logging.WARNING)
        logging.getLogger("PIL").setLevel(logging.WARNING)
