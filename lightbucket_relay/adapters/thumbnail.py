"""Preview thumbnails for captured frames.

Every forwarded capture carries a small JPEG preview:

1. Scale the frame so its width is exactly THUMBNAIL_WIDTH (aspect ratio
   preserved, small frames are upscaled)
2. Reduce to 8 bits per channel; 16-bit and float monochrome data is
   stretched linearly between its minimum and maximum
3. Encode as JPEG at THUMBNAIL_QUALITY and return base64 text
"""

from __future__ import annotations

import base64
import io
import logging
from typing import Tuple, Union

from PIL import Image, ImageChops, ImageOps, UnidentifiedImageError

from .. import constants
from ..errors import ThumbnailError

LOGGER = logging.getLogger(__name__)

ImageSource = Union[Image.Image, bytes]


class ThumbnailEncoder:
    """Downscales captures and encodes them for transport."""

    def __init__(
        self,
        target_width: int = constants.THUMBNAIL_WIDTH,
        jpeg_quality: int = constants.THUMBNAIL_QUALITY,
    ) -> None:
        self._target_width = target_width
        self._jpeg_quality = jpeg_quality

    @property
    def target_width(self) -> int:
        return self._target_width

    @property
    def jpeg_quality(self) -> int:
        return self._jpeg_quality

    def thumbnail_size(self, size: Tuple[int, int]) -> Tuple[int, int]:
        """Return the output size for a source of ``size`` (width, height)."""
        width, height = size
        if width <= 0 or height <= 0:
            raise ThumbnailError(f"Invalid image size {width}x{height}")
        scale = self._target_width / width
        return self._target_width, max(1, round(height * scale))

    def encode_jpeg(self, source: ImageSource) -> bytes:
        """Return the JPEG bytes of the thumbnail for ``source``."""
        img = self._open(source)
        new_size = self.thumbnail_size(img.size)
        resized = _to_8bit(img).resize(new_size, Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        resized.save(buffer, format="JPEG", quality=self._jpeg_quality)
        data = buffer.getvalue()

        LOGGER.debug(
            "Thumbnail encoded: %dx%d (%s) -> %dx%d, %d bytes",
            img.size[0],
            img.size[1],
            img.mode,
            new_size[0],
            new_size[1],
            len(data),
        )
        return data

    def encode(self, source: ImageSource) -> str:
        """Return the thumbnail for ``source`` as base64 text."""
        return base64.b64encode(self.encode_jpeg(source)).decode("ascii")

    @staticmethod
    def _open(source: ImageSource) -> Image.Image:
        if isinstance(source, Image.Image):
            return source
        try:
            img = Image.open(io.BytesIO(source))
            img.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ThumbnailError(f"Unable to decode captured image: {exc}") from exc
        return img


def _to_8bit(img: Image.Image) -> Image.Image:
    """Convert ``img`` to a mode JPEG can store ("L" or "RGB")."""
    if img.mode in ("L", "RGB"):
        return img

    if img.mode in ("I;16", "I;16B", "I;16L", "I;16N", "I", "F"):
        if img.mode != "F":
            img = img.convert("I")
        low, high = img.getextrema()
        if high > low:
            scale = 255.0 / (high - low)
            offset = -low * scale
        else:
            scale, offset = 0.0, 0.0
        stretched = img.point(lambda value: value * scale + offset)
        return stretched.convert("L")

    if img.mode in ("RGBA", "LA", "P", "PA"):
        # Flatten transparency onto white
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background

    if img.mode in ("La", "RGBa"):
        # Premultiplied alpha: colour + (255 - alpha) is the pixel over white
        *colour, alpha = img.split()
        inverse = ImageOps.invert(alpha)
        flattened = [ImageChops.add(band, inverse) for band in colour]
        if len(flattened) == 1:
            return flattened[0]
        return Image.merge("RGB", flattened)

    return img.convert("RGB")
