from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from core.exceptions.errors import ImageDecodeError, UnsupportedImageError
from ..models.signature_enums import ImageKind

_DATA_URL = re.compile(r"^data:image/(png|jpeg);base64,(.*)$", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class ImagePayload:
    kind: ImageKind
    data: bytes


def parse_data_url(data_url: str) -> ImagePayload:
    """
    Split a ``data:image/(png|jpeg);base64,...`` URI into kind + raw bytes.

    Raises:
        UnsupportedImageError: prefix is missing or names another encoding.
        ImageDecodeError: base64 body is empty or malformed.
    """
    m = _DATA_URL.match(str(data_url or "").strip())
    if not m:
        raise UnsupportedImageError("imageDataUrl must be a PNG/JPEG base64 data URI")

    kind = ImageKind(m.group(1).lower())
    body = re.sub(r"\s+", "", m.group(2))
    if not body:
        raise ImageDecodeError("imageDataUrl carries no image data")
    try:
        raw = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError(f"imageDataUrl is not valid base64: {exc}") from exc
    if not raw:
        raise ImageDecodeError("imageDataUrl carries no image data")
    return ImagePayload(kind=kind, data=raw)


def to_data_url(kind: ImageKind, data: bytes) -> str:
    return f"data:{kind.mime_type};base64,{base64.b64encode(data).decode('ascii')}"
