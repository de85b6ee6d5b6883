"""Host settings store contract and an INI-backed implementation.

The host application owns the Lightbucket account settings. The relay only
reads them and listens for change notifications carrying the changed field
name, e.g. ``"LightbucketAPIKey"``.
"""

from __future__ import annotations

import logging
import threading
from configparser import ConfigParser
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol

from . import constants

LOGGER = logging.getLogger(__name__)

SettingsListener = Callable[[str], None]

SECTION = "lightbucket"


class SettingsProvider(Protocol):
    """Minimal contract the relay needs from the host settings store."""

    def get(self, name: str) -> str:
        """Return the current value of a setting, or an empty string."""
        ...

    def add_listener(self, listener: SettingsListener) -> None:
        """Call ``listener(name)`` whenever a setting changes."""
        ...

    def remove_listener(self, listener: SettingsListener) -> None:
        ...


DEFAULT_SETTINGS: Dict[str, str] = {
    constants.SETTING_BASE_URL: constants.DEFAULT_LIGHTBUCKET_BASE_URL,
    constants.SETTING_USERNAME: "",
    constants.SETTING_API_KEY: "",
}


class IniSettingsStore:
    """Settings store persisted to an INI file.

    Listeners run synchronously on the thread calling :meth:`set`, after the
    new value is visible through :meth:`get`.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or constants.DEFAULT_SETTINGS_PATH
        self._parser = ConfigParser()
        # Keep the host's field names verbatim
        self._parser.optionxform = str  # type: ignore[assignment]
        self._parser.read_dict({SECTION: DEFAULT_SETTINGS})
        if self._path.exists():
            self._parser.read(self._path)
        self._lock = threading.RLock()
        self._listeners: List[SettingsListener] = []

    @property
    def path(self) -> Path:
        return self._path

    def get(self, name: str) -> str:
        with self._lock:
            return self._parser.get(SECTION, name, fallback="")

    def set(self, name: str, value: str) -> None:
        with self._lock:
            previous = self._parser.get(SECTION, name, fallback=None)
            if previous == value:
                return
            self._parser.set(SECTION, name, value)
            listeners = list(self._listeners)

        LOGGER.debug("Setting %s changed", name)
        for listener in listeners:
            listener(name)

    def add_listener(self, listener: SettingsListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: SettingsListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                LOGGER.debug("Settings listener %r was not registered", listener)

    def save(self) -> None:
        """Persist the current settings to disk."""

        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8") as stream:
                self._parser.write(stream)
