"""
Turns uploaded photo files into embedded data-URL payloads.
"""
import base64
import io
import logging

from PIL import Image, UnidentifiedImageError

from config import PHOTO_MAX_SIZE
from errors import ValidationError

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


def encode_photo(data: bytes, filename: str = "") -> str:
    """
    Validate ``data`` as an image and return it as a ``data:`` URL.

    Images larger than PHOTO_MAX_SIZE are downscaled; smaller ones are
    embedded as uploaded.
    """
    if not data:
        raise ValidationError("Photo file is empty")

    try:
        with Image.open(io.BytesIO(data)) as probe:
            probe.verify()
        # verify() leaves the image unusable, so reopen for real work
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        logger.warning("Rejected photo %s: %s", filename or "<upload>", e)
        raise ValidationError("Photo is not a readable image") from e

    fmt = img.format if img.format in MIME_TYPES else "PNG"

    if img.width > PHOTO_MAX_SIZE[0] or img.height > PHOTO_MAX_SIZE[1]:
        img.thumbnail(PHOTO_MAX_SIZE)
        if fmt == "JPEG" and img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        buffer = io.BytesIO()
        img.save(buffer, fmt)
        data = buffer.getvalue()
        logger.info("Downscaled photo %s to %dx%d", filename or "<upload>", img.width, img.height)
    elif fmt != img.format:
        buffer = io.BytesIO()
        img.save(buffer, fmt)
        data = buffer.getvalue()

    return f"data:{MIME_TYPES[fmt]};base64,{base64.b64encode(data).decode('utf-8')}"
