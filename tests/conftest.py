import io
from pathlib import Path
from typing import Callable, Tuple

import pytest
from PIL import Image

from lightbucket_relay import constants
from lightbucket_relay.events import BinningMode, CaptureEvent, ImageType
from lightbucket_relay.security import SecretCipher
from lightbucket_relay.settings import IniSettingsStore


def _png_bytes(
    width: int, height: int, color: Tuple[int, int, int] = (255, 0, 0)
) -> bytes:
    img = Image.new("RGB", (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def create_test_image() -> Callable[..., bytes]:
    """Factory for PNG-encoded test images of a given size."""
    return _png_bytes


def _light_event(**overrides) -> CaptureEvent:
    values = {
        "image_type": ImageType.LIGHT,
        "camera_name": "ZWO ASI2600MM Pro",
        "telescope_name": "RedCat 51",
        "target_name": "M 42",
        "ra": 83.8221,
        "dec": -5.3911,
        "rotation": 12.5,
        "filter_name": "Ha",
        "duration": 300.0,
        "gain": 100,
        "offset": 50,
        "binning": BinningMode(1, 1),
        "rms": 0.62,
        "image": _png_bytes(640, 480),
    }
    values.update(overrides)
    return CaptureEvent(**values)


@pytest.fixture
def make_event() -> Callable[..., CaptureEvent]:
    """Factory for a fully populated LIGHT capture event; keyword overrides win."""
    return _light_event


@pytest.fixture
def cipher() -> SecretCipher:
    return SecretCipher.generate()


@pytest.fixture
def settings_store(tmp_path: Path, cipher: SecretCipher) -> IniSettingsStore:
    store = IniSettingsStore(tmp_path / "settings.cfg")
    store.set(constants.SETTING_BASE_URL, "http://lightbucket.test")
    store.set(constants.SETTING_USERNAME, "astro")
    store.set(constants.SETTING_API_KEY, cipher.encrypt("s3cret"))
    return store
