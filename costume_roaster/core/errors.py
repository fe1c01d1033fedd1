"""Error taxonomy shared by the normalizer, gateway and endpoint handlers."""

from typing import Optional


class RoastAppError(Exception):
    """Base error carrying the HTTP status and a caller-safe message."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- request / payload errors (400) ---


class ValidationError(RoastAppError):
    status_code = 400
    default_message = "Invalid request"


class FormatError(RoastAppError):
    status_code = 400
    default_message = "Invalid base64 image format"


class UnsupportedFormatError(RoastAppError):
    status_code = 400
    default_message = "Image format not supported"


class EncodingError(RoastAppError):
    status_code = 400
    default_message = "Invalid base64 encoding"


class SizeLimitError(RoastAppError):
    status_code = 400
    default_message = "Image too large"


class ContentPolicyError(RoastAppError):
    status_code = 400
    default_message = "Request blocked due to content policy."


# --- upstream errors ---


class UpstreamAuthError(RoastAppError):
    status_code = 500
    default_message = "API configuration error. Please contact support."


class UpstreamRateLimitError(RoastAppError):
    status_code = 429
    default_message = "Service is busy. Please try again in a moment."


class NoImageProducedError(RoastAppError):
    status_code = 500
    default_message = "No image data in response"


class ParseError(RoastAppError):
    status_code = 500
    default_message = "Failed to parse model response"


# --- server-side configuration ---


class TemplateNotFoundError(RoastAppError):
    status_code = 500


class ConfigurationError(RoastAppError):
    status_code = 500
    default_message = "Server configuration error"


__all__ = [
    "RoastAppError",
    "ValidationError",
    "FormatError",
    "UnsupportedFormatError",
    "EncodingError",
    "SizeLimitError",
    "ContentPolicyError",
    "UpstreamAuthError",
    "UpstreamRateLimitError",
    "NoImageProducedError",
    "ParseError",
    "TemplateNotFoundError",
    "ConfigurationError",
]
