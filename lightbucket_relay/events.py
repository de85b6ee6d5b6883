"""Host-side event and sequence model consumed by the relay.

The acquisition host fires an "image saved" event once per completed capture
and, separately, asks its triggers whether they should run after each
sequence step. This module defines the data both signals carry and a
thread-safe observer registry hosts can fire events through.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol, Union

from . import constants

if TYPE_CHECKING:
    from PIL import Image

LOGGER = logging.getLogger(__name__)


class ImageType(str, Enum):
    """Frame types produced by the acquisition host."""

    LIGHT = "LIGHT"
    DARK = "DARK"
    BIAS = "BIAS"
    FLAT = "FLAT"
    DARKFLAT = "DARKFLAT"
    SNAPSHOT = "SNAPSHOT"


def is_light_frame(image_type: Union[ImageType, str, None]) -> bool:
    if image_type is None:
        return False
    return str(getattr(image_type, "value", image_type)) == ImageType.LIGHT.value


@dataclass(frozen=True, slots=True)
class BinningMode:
    x: int = 1
    y: int = 1

    def __str__(self) -> str:
        return f"{self.x}x{self.y}"


@dataclass(frozen=True, slots=True)
class CaptureEvent:
    """Metadata of one saved image, as reported by the host.

    ``image`` is either a decoded Pillow image or encoded image bytes.
    """

    image_type: Union[ImageType, str] = ""
    camera_name: str = ""
    telescope_name: str = ""
    target_name: str = ""
    ra: float = 0.0
    dec: float = 0.0
    rotation: float = 0.0
    filter_name: str = ""
    duration: float = 0.0
    gain: int = 0
    offset: int = 0
    binning: Union[BinningMode, str, None] = None
    rms: float = 0.0
    image: Union["Image.Image", bytes, None] = None

    @property
    def is_light(self) -> bool:
        return is_light_frame(self.image_type)


ImageSavedHandler = Callable[[CaptureEvent], None]


class ImageSavedSource(Protocol):
    """Contract of the host's image-saved event stream."""

    def subscribe(self, handler: ImageSavedHandler) -> None:
        ...

    def unsubscribe(self, handler: ImageSavedHandler) -> None:
        ...


class ImageSaveMediator:
    """Observer registry for image-saved events.

    Handlers run synchronously on the thread calling :meth:`publish`. As with
    host event delegates, subscribing the same handler twice delivers each
    event twice.
    """

    def __init__(self) -> None:
        self._handlers: List[ImageSavedHandler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: ImageSavedHandler) -> None:
        with self._lock:
            self._handlers.append(handler)

    def unsubscribe(self, handler: ImageSavedHandler) -> None:
        with self._lock:
            try:
                self._handlers.remove(handler)
            except ValueError:
                LOGGER.debug("Image saved handler %r was not subscribed", handler)

    @property
    def handler_count(self) -> int:
        with self._lock:
            return len(self._handlers)

    def publish(self, event: CaptureEvent) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            handler(event)


class SequenceStatus(str, Enum):
    CREATED = "CREATED"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    DISABLED = "DISABLED"


@dataclass
class SequenceItem:
    """A step of the host sequence. ``kind`` names the step type."""

    kind: str = "SequenceItem"
    status: SequenceStatus = SequenceStatus.CREATED


@dataclass
class TakeExposure(SequenceItem):
    kind: str = constants.EXPOSURE_STEP_KIND
    image_type: Union[ImageType, str] = ImageType.LIGHT
    exposure_time: float = 0.0


def previous_step_name(item: Optional[SequenceItem]) -> str:
    return type(item).__name__ if item is not None else "None"
