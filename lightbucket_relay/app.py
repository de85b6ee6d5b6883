"""Bootstrap helpers for hosts embedding the relay."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import RelayConfig, load_config
from .events import ImageSavedSource
from .logging import configure_logging
from .notifications import LoggingNotifier, Notifier
from .security import SecretCipher, load_or_create_key
from .settings import IniSettingsStore, SettingsProvider
from .trigger import LightbucketTrigger

LOGGER = logging.getLogger(__name__)


def create_trigger(
    image_source: ImageSavedSource,
    *,
    config: Optional[RelayConfig] = None,
    config_path: Optional[Path] = None,
    settings: Optional[SettingsProvider] = None,
    notifier: Optional[Notifier] = None,
    setup_logging: bool = True,
) -> LightbucketTrigger:
    """Wire a trigger from the relay configuration.

    Hosts that own a settings store pass it as ``settings``; otherwise the
    INI store named by the configuration is used. The Fernet key is created
    on first use.
    """

    config = config or load_config(config_path)

    if setup_logging:
        configure_logging(
            config.logging.level,
            log_path=config.logging.path,
            log_network=config.logging.log_network,
        )

    cipher = SecretCipher(load_or_create_key(config.security.key_path))
    if settings is None:
        settings = IniSettingsStore(config.settings.path)
        LOGGER.info("Using Lightbucket settings from %s", config.settings.path)

    return LightbucketTrigger(
        image_source,
        settings,
        cipher,
        notifier=notifier or LoggingNotifier(),
        delivery_config=config.delivery,
    )
