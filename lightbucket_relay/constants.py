"""Constants used across the lightbucket-relay package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "lightbucket-relay"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".lightbucket" / DEFAULT_CONFIG_FILENAME
DEFAULT_SETTINGS_PATH = Path.home() / ".lightbucket" / "settings.cfg"
DEFAULT_KEY_PATH = Path.home() / ".lightbucket" / "secret.key"

DEFAULT_LOG_PATH = Path.home() / ".lightbucket" / "logs" / f"{APP_NAME}.log"
NOTIFY_LOGGER = "lightbucket_relay.notify"

DEFAULT_LIGHTBUCKET_BASE_URL = "https://app.lightbucket.co"

# Host settings field names, as carried by change notifications
SETTING_BASE_URL = "LightbucketBaseURL"
SETTING_USERNAME = "LightbucketUsername"
SETTING_API_KEY = "LightbucketAPIKey"

API_PATH = "/api"
IMAGE_CAPTURE_COMPLETE_PATH = "/image_capture_complete"

THUMBNAIL_WIDTH = 300
THUMBNAIL_QUALITY = 70

TRIGGER_CATEGORY = "Lightbucket"
EXPOSURE_STEP_KIND = "TakeExposure"
