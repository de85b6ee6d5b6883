"""Wire payload sent to Lightbucket for each captured light frame."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from .adapters.thumbnail import ThumbnailEncoder
from .events import CaptureEvent

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TargetInfo:
    name: str
    ra: float
    dec: float
    rotation: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ra": _finite(self.ra),
            "dec": _finite(self.dec),
            "rotation": _finite(self.rotation),
        }


@dataclass(frozen=True, slots=True)
class EquipmentInfo:
    camera_name: str
    telescope_name: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "camera_name": self.camera_name,
            "telescope_name": self.telescope_name,
        }


@dataclass(frozen=True, slots=True)
class ImageInfo:
    filter_name: str
    duration: float
    gain: int
    offset: int
    binning: Optional[str]
    captured_at: datetime
    rms: float
    thumbnail: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "filter_name": self.filter_name,
            "duration": _finite(self.duration),
            "gain": self.gain,
            "offset": self.offset,
            "binning": self.binning,
            "captured_at": self.captured_at.isoformat(),
            "rms": _finite(self.rms),
            "thumbnail": self.thumbnail,
        }


@dataclass(frozen=True, slots=True)
class DeliveryEnvelope:
    target: TargetInfo
    equipment: EquipmentInfo
    image: ImageInfo

    def as_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target.as_dict(),
            "equipment": self.equipment.as_dict(),
            "image": self.image.as_dict(),
        }


def _finite(value: Optional[float]) -> Optional[float]:
    """JSON has no NaN or Infinity; such readings are sent as null."""
    if value is None or not math.isfinite(value):
        return None
    return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PayloadBuilder:
    """Maps capture events onto delivery envelopes.

    ``captured_at`` is stamped when the envelope is built, which is when the
    report is sent, not when the exposure started.
    """

    def __init__(
        self,
        encoder: Optional[ThumbnailEncoder] = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._encoder = encoder or ThumbnailEncoder()
        self._clock = clock

    def build(self, event: CaptureEvent) -> DeliveryEnvelope:
        target = TargetInfo(
            name=event.target_name,
            ra=event.ra,
            dec=event.dec,
            rotation=event.rotation,
        )

        equipment = EquipmentInfo(
            camera_name=event.camera_name,
            telescope_name=event.telescope_name,
        )

        if event.image is None:
            LOGGER.debug("Capture event carries no image, sending empty thumbnail")
            thumbnail = ""
        else:
            thumbnail = self._encoder.encode(event.image)

        image = ImageInfo(
            filter_name=event.filter_name,
            duration=event.duration,
            gain=event.gain,
            offset=event.offset,
            binning=str(event.binning) if event.binning is not None else None,
            captured_at=self._clock(),
            rms=event.rms,
            thumbnail=thumbnail,
        )

        return DeliveryEnvelope(target=target, equipment=equipment, image=image)
