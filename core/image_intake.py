"""Image intake: validation and decoding of user-supplied files."""

import base64
import io
import logging
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from core.errors import ReadFailureError, UnsupportedTypeError
from core.utils import ImageAsset, ImageSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 20 * 1024 * 1024


class ImageIntake:
    """Turns an ImageSource into an in-memory ImageAsset."""

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES):
        self._max_bytes = max_bytes

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def decode(self, source: ImageSource) -> ImageAsset:
        """Read and encode the source as a base64 data URI.

        Raises UnsupportedTypeError before reading anything when the declared
        media type is not ``image/*``, and ReadFailureError when the bytes
        cannot be read, are empty, or exceed ``max_bytes``.
        """
        media_type = (source.media_type or "").strip().lower()
        if not is_image_media_type(media_type):
            raise UnsupportedTypeError(source.media_type)

        try:
            data = source.reader()
        except Exception as e:
            raise ReadFailureError(f"Could not read {source.name}: {e}") from e

        if not data:
            raise ReadFailureError(f"{source.name} is empty.")
        if len(data) > self._max_bytes:
            raise ReadFailureError(
                f"{source.name} is too large ({len(data)} bytes, limit {self._max_bytes})."
            )

        width, height = self._probe_dimensions(data)
        payload = base64.b64encode(bytes(data)).decode("ascii")
        asset = ImageAsset(
            name=source.name,
            media_type=media_type,
            data_uri=f"data:{media_type};base64,{payload}",
            size_bytes=len(data),
            width=width,
            height=height,
        )
        logger.debug("Decoded %s (%s, %d bytes)", asset.name, media_type, asset.size_bytes)
        return asset

    @staticmethod
    def _probe_dimensions(data: bytes) -> Tuple[Optional[int], Optional[int]]:
        """Pixel size of the image, or (None, None) for formats Pillow can't read."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                return img.size
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            logger.debug("Could not probe image dimensions: %s", e)
            return None, None


def is_image_media_type(media_type: str) -> bool:
    return bool(media_type) and media_type.lower().startswith("image/")
