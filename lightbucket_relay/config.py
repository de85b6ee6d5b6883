"""Configuration loader for lightbucket-relay.

The Lightbucket account settings (base URL, username, API key) belong to the
host application and are read through :mod:`lightbucket_relay.settings`. This
file only covers the relay's own runtime knobs.
"""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class DeliveryConfig:
    request_timeout_seconds: float = 30.0
    drain_timeout_seconds: float = 35.0  # Upper bound on waiting for in-flight deliveries at teardown


@dataclass(slots=True)
class SecurityConfig:
    key_path: Path = constants.DEFAULT_KEY_PATH


@dataclass(slots=True)
class SettingsConfig:
    path: Path = constants.DEFAULT_SETTINGS_PATH


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = constants.DEFAULT_LOG_PATH
    log_network: bool = False


@dataclass(slots=True)
class RelayConfig:
    delivery: DeliveryConfig
    security: SecurityConfig
    settings: SettingsConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def default_config() -> RelayConfig:
    """Return a configuration populated with defaults only."""

    return RelayConfig(
        delivery=DeliveryConfig(),
        security=SecurityConfig(),
        settings=SettingsConfig(),
        logging=LoggingConfig(),
        raw=ConfigParser(),
        path=constants.DEFAULT_CONFIG_PATH,
    )


def load_config(path: Optional[Path] = None) -> RelayConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "delivery": {
                "request_timeout_seconds": "30.0",
                "drain_timeout_seconds": "35.0",
            },
            "security": {
                "key_path": str(constants.DEFAULT_KEY_PATH),
            },
            "settings": {
                "path": str(constants.DEFAULT_SETTINGS_PATH),
            },
            "logging": {
                "level": "INFO",
                "path": str(constants.DEFAULT_LOG_PATH),
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    delivery_defaults = DeliveryConfig()

    try:
        request_timeout = parser.getfloat(
            "delivery",
            "request_timeout_seconds",
            fallback=delivery_defaults.request_timeout_seconds,
        )
    except ValueError:
        request_timeout = delivery_defaults.request_timeout_seconds

    try:
        drain_timeout = parser.getfloat(
            "delivery",
            "drain_timeout_seconds",
            fallback=delivery_defaults.drain_timeout_seconds,
        )
    except ValueError:
        drain_timeout = delivery_defaults.drain_timeout_seconds

    delivery = DeliveryConfig(
        request_timeout_seconds=max(1.0, request_timeout),
        drain_timeout_seconds=max(0.0, drain_timeout),
    )

    security = SecurityConfig(
        key_path=Path(
            parser.get("security", "key_path", fallback=str(constants.DEFAULT_KEY_PATH))
        ).expanduser(),
    )

    settings = SettingsConfig(
        path=Path(
            parser.get(
                "settings", "path", fallback=str(constants.DEFAULT_SETTINGS_PATH)
            )
        ).expanduser(),
    )

    log_path_value = parser.get(
        "logging", "path", fallback=str(constants.DEFAULT_LOG_PATH)
    ).strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    return RelayConfig(
        delivery=delivery,
        security=security,
        settings=settings,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def save_config(config: RelayConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
