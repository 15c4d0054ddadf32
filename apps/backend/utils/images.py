import base64
import binascii
import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Largest image decoded for a slide (8K square)
MAX_IMAGE_PIXELS = 7680 * 7680


def decode_data_uri(src: str) -> Optional[bytes]:
    """
    Decode a data URI (data:image/png;base64,...) or raw base64 string.

    Returns:
        Image bytes, or None if the string is not valid base64
    """
    if src.startswith('data:'):
        if ',' not in src:
            return None
        src = src.split(',', 1)[1]
    try:
        return base64.b64decode(src, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Error decoding base64 image: {e}")
        return None


def _pixel_count(im: Image.Image) -> int:
    return im.size[0] * im.size[1]


def open_image(data: bytes, max_pixels: int = MAX_IMAGE_PIXELS) -> Optional[Image.Image]:
    """Open image bytes as a fully loaded PIL image, or None if undecodable or too large."""
    try:
        with Image.open(io.BytesIO(data)) as im:
            if _pixel_count(im) > max_pixels:
                logger.warning(f"Image of {im.size[0]}x{im.size[1]} exceeds {max_pixels} pixels")
                return None
            im.load()
            return im.copy()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        logger.warning(f"Unreadable image payload ({len(data)} bytes): {e}")
        return None


def sniff_media_type(data: bytes, max_pixels: int = MAX_IMAGE_PIXELS) -> Optional[str]:
    """
    Media type of image bytes as detected by Pillow, e.g. 'image/jpeg'.

    Only the header is read. Images whose declared size exceeds max_pixels
    are treated as undecodable.
    """
    try:
        with Image.open(io.BytesIO(data)) as im:
            if _pixel_count(im) > max_pixels:
                logger.warning(f"Image of {im.size[0]}x{im.size[1]} exceeds {max_pixels} pixels")
                return None
            return Image.MIME.get(im.format or '')
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        return None


def encode_png_base64(png_bytes: bytes) -> str:
    return base64.b64encode(png_bytes).decode('ascii')
