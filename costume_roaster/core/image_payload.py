"""Normalize image references (data URI or raw base64) into validated payloads."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from costume_roaster import config
from costume_roaster.config import logger
from costume_roaster.core.errors import (
    EncodingError,
    FormatError,
    SizeLimitError,
    UnsupportedFormatError,
    ValidationError,
)

ALLOWED_IMAGE_FORMATS = ("image/jpeg", "image/png", "image/webp")
DEFAULT_MIME_TYPE = "image/jpeg"

# Leading characters of the base64 form of each format's magic bytes
BASE64_SIGNATURES = {
    "/9j/": "image/jpeg",
    "iVBORw": "image/png",
    "UklGR": "image/webp",
}

DATA_URL_PATTERN = re.compile(r"data:([A-Za-z\-+/]+);base64,(.+)")
BASE64_PATTERN = re.compile(r"[A-Za-z0-9+/]*={0,2}")


@dataclass(frozen=True)
class ImagePayload:
    """Decoded view of an incoming image reference."""

    base64: str
    mime_type: str
    size_bytes: int

    def to_inline_part(self) -> dict:
        return {"inline_data": {"mime_type": self.mime_type, "data": self.base64}}


def to_data_url(image_b64: str, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{image_b64}"


def detect_mime_type(image_b64: str) -> Optional[str]:
    """Infer the image format from the leading base64 characters."""
    for signature, mime_type in BASE64_SIGNATURES.items():
        if image_b64.startswith(signature):
            return mime_type
    return None


def estimate_decoded_size(image_b64: str) -> int:
    return math.ceil(len(image_b64) * 3 / 4)


def _split_data_url(reference: str) -> tuple[str, str]:
    match = DATA_URL_PATTERN.fullmatch(reference)
    if not match:
        raise FormatError("Invalid base64 image format")
    return match.group(1), match.group(2)


def parse_image_data(reference: str) -> ImagePayload:
    """
    Extract base64 data and MIME type from a data URI or raw base64 string.

    Unknown raw payloads fall back to JPEG; use validate_image_data when the
    format must be one of the supported types.
    """
    if reference.startswith("data:"):
        mime_type, image_b64 = _split_data_url(reference)
    else:
        image_b64 = reference
        mime_type = detect_mime_type(image_b64) or DEFAULT_MIME_TYPE

    return ImagePayload(
        base64=image_b64,
        mime_type=mime_type,
        size_bytes=estimate_decoded_size(image_b64),
    )


def validate_image_data(
    reference: Any,
    max_bytes: Optional[int] = None,
    field_name: str = "image",
) -> ImagePayload:
    """
    Validate an image reference and return its normalized payload.

    Raises:
        ValidationError: missing or non-string input
        FormatError: malformed data URI
        SizeLimitError: decoded size above the configured ceiling
        UnsupportedFormatError: MIME type outside the allow-list
        EncodingError: payload is not valid base64
    """
    if not reference or not isinstance(reference, str):
        raise ValidationError(f"{field_name} is required")

    limit = config.MAX_IMAGE_SIZE_BYTES if max_bytes is None else max_bytes

    if reference.startswith("data:"):
        mime_type, image_b64 = _split_data_url(reference)
    else:
        image_b64 = reference
        mime_type = detect_mime_type(image_b64) or ""

    size_bytes = estimate_decoded_size(image_b64)
    if size_bytes > limit:
        logger.info(
            "Rejected oversized image",
            extra={"size_bytes": size_bytes, "limit": limit},
        )
        raise SizeLimitError(
            f"Image too large. Max size: {_format_megabytes(limit)}MB"
        )

    if mime_type not in ALLOWED_IMAGE_FORMATS:
        raise UnsupportedFormatError(
            "Image format not supported. Allowed: "
            f"{', '.join(ALLOWED_IMAGE_FORMATS)}"
        )

    if not BASE64_PATTERN.fullmatch(image_b64):
        raise EncodingError("Invalid base64 encoding")

    return ImagePayload(base64=image_b64, mime_type=mime_type, size_bytes=size_bytes)


def _format_megabytes(limit: int) -> str:
    megabytes = limit / (1024 * 1024)
    return f"{megabytes:g}"


__all__ = [
    "ALLOWED_IMAGE_FORMATS",
    "ImagePayload",
    "detect_mime_type",
    "estimate_decoded_size",
    "parse_image_data",
    "validate_image_data",
    "to_data_url",
]
