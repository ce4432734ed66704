"""Transport encoding for images sent to recognition strategies."""

import base64
import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

from notecap.errors import ValidationError

# Fallback media types by file suffix, for bytes Pillow cannot sniff (HEIC).
SUFFIX_MEDIA_TYPES = {
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

# Multi-picture JPEGs from phone cameras are still plain JPEG on the wire.
_FORMAT_MEDIA_TYPES = {"MPO": "image/jpeg"}

# What the Anthropic and OpenAI image inputs accept.
VISION_MEDIA_TYPES = frozenset({"image/png", "image/jpeg", "image/gif", "image/webp"})


def detect_media_type(image: bytes) -> Optional[str]:
    """Sniff the MIME type of *image* with Pillow, or ``None`` if unrecognised."""
    try:
        with Image.open(io.BytesIO(image)) as img:
            fmt = img.format or ""
            return _FORMAT_MEDIA_TYPES.get(fmt) or Image.MIME.get(fmt)
    except (UnidentifiedImageError, OSError):
        return None


def to_data_url(image: bytes, media_type_hint: Optional[str] = None) -> str:
    """Encode *image* as a ``data:image/...;base64,`` URL.

    The sniffed type wins over *media_type_hint*; the hint only covers formats
    Pillow cannot read (HEIC photos from phones).
    """
    if not image:
        raise ValidationError("Image is empty or couldn't be read")
    media_type = detect_media_type(image) or media_type_hint
    if not media_type or not media_type.startswith("image/"):
        raise ValidationError("Unrecognised image format; cannot encode for recognition")
    b64 = base64.standard_b64encode(image).decode("utf-8")
    return f"data:{media_type};base64,{b64}"


def split_data_url(data_url: str) -> tuple[str, str]:
    """Return ``(media_type, base64_payload)`` from a base64 data URL."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValidationError("Not a base64 image data URL")
    return header[len("data:"):-len(";base64")], payload
