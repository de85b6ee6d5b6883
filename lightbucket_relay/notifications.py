"""User-visible notification sink contract."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from . import constants


class Notifier(Protocol):
    """What the relay needs from the host's notification facility."""

    def warn(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def trace(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Notifier for headless hosts: routes notifications to a dedicated logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(constants.NOTIFY_LOGGER)

    def warn(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def trace(self, message: str) -> None:
        self._logger.debug(message)
