"""Lightbucket account credentials kept in sync with the host settings."""

from __future__ import annotations

import base64
import logging
import threading
from dataclasses import dataclass, field

from . import constants
from .security import Decryptor
from .settings import SettingsProvider

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Credentials:
    """Immutable view of the credentials used for one delivery."""

    api_base_url: str
    username: str
    api_key: str = field(repr=False)

    @property
    def endpoint(self) -> str:
        return f"{self.api_base_url}{constants.IMAGE_CAPTURE_COMPLETE_PATH}"

    @property
    def authorization(self) -> str:
        """Value of the ``Authorization`` header (HTTP Basic).

        Characters outside ASCII are sent as ``?``.
        """
        token = f"{self.username}:{self.api_key}".encode("ascii", errors="replace")
        return f"Basic {base64.b64encode(token).decode('ascii')}"


class CredentialStore:
    """Holds the current credentials and refreshes them on settings changes.

    The base URL is read once at construction. Username and API key follow
    change notifications; the API key is decrypted on every load. Decryption
    failures propagate to the caller of the constructor or of the settings
    change that triggered the refresh.
    """

    def __init__(self, settings: SettingsProvider, decryptor: Decryptor) -> None:
        self._settings = settings
        self._decryptor = decryptor
        self._lock = threading.Lock()

        base_url = settings.get(constants.SETTING_BASE_URL).rstrip("/")
        self._api_base_url = f"{base_url}{constants.API_PATH}"
        self._username = settings.get(constants.SETTING_USERNAME)
        self._api_key = decryptor.decrypt(settings.get(constants.SETTING_API_KEY))

        settings.add_listener(self.on_settings_changed)

    def snapshot(self) -> Credentials:
        with self._lock:
            return Credentials(
                api_base_url=self._api_base_url,
                username=self._username,
                api_key=self._api_key,
            )

    def on_settings_changed(self, name: str) -> None:
        if name == constants.SETTING_USERNAME:
            username = self._settings.get(constants.SETTING_USERNAME)
            with self._lock:
                self._username = username
            LOGGER.debug("Lightbucket username updated")
        elif name == constants.SETTING_API_KEY:
            api_key = self._decryptor.decrypt(
                self._settings.get(constants.SETTING_API_KEY)
            )
            with self._lock:
                self._api_key = api_key
            LOGGER.debug("Lightbucket API key updated")

    def close(self) -> None:
        """Stop following settings changes."""
        self._settings.remove_listener(self.on_settings_changed)
