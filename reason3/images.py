"""Helpers for turning uploaded screenshots into inline data URLs."""

from __future__ import annotations

import base64
import binascii
import io
import re
from typing import Tuple

from PIL import Image

from reason3.logger import get_logger

logger = get_logger(__name__)

# Keep inline payloads well under typical provider request limits.
_MAX_IMAGE_BYTES = 4.8 * 1024 * 1024
_MAX_DIMENSION = 1568

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>.+)$", re.DOTALL)

_MEDIA_MAP = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}


def image_to_data_url(raw: bytes, filename: str = "") -> str:
    """Encode uploaded image bytes as a data URL, compressing when too large."""
    suffix = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if len(raw) <= _MAX_IMAGE_BYTES:
        return _encode_image_bytes(raw, _MEDIA_MAP.get(suffix, "image/png"))
    return _compress_image(raw)


def parse_data_url(url: str) -> Tuple[str, bytes]:
    """Split a ``data:<mime>;base64,<payload>`` URL into (mime type, bytes)."""
    match = _DATA_URL_RE.match((url or "").strip())
    if not match:
        raise ValueError("not a base64 data URL")
    try:
        data = base64.b64decode(match.group("payload"), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 payload: {exc}") from exc
    return match.group("mime"), data


def _encode_image_bytes(raw: bytes, media_type: str) -> str:
    encoded = base64.b64encode(raw).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def _compress_image(raw: bytes) -> str:
    """Resize and re-encode as JPEG until the payload fits _MAX_IMAGE_BYTES."""
    img = Image.open(io.BytesIO(raw))

    # JPEG has no alpha channel
    if img.mode in ("RGBA", "P", "LA"):
        img = img.convert("RGB")

    w, h = img.size
    if max(w, h) > _MAX_DIMENSION:
        scale = _MAX_DIMENSION / max(w, h)
        new_w = max(1, round(w * scale))
        new_h = max(1, round(h * scale))
        img = img.resize((new_w, new_h), Image.LANCZOS)
        logger.info("Resized image from %dx%d to %dx%d", w, h, new_w, new_h)

    quality = 90
    data = b""
    while quality >= 30:
        buf = io.BytesIO()
        img.save(buf, format="JPEG", quality=quality)
        data = buf.getvalue()
        if len(data) <= _MAX_IMAGE_BYTES:
            logger.info("Compressed image to %d bytes (quality=%d)", len(data), quality)
            return _encode_image_bytes(data, "image/jpeg")
        quality -= 5

    logger.warning("Image still %d bytes after max compression", len(data))
    return _encode_image_bytes(data, "image/jpeg")
