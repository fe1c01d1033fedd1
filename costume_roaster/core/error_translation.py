"""
Translate failures raised while serving a capability into the error taxonomy.

Structured signals from the Gemini client (HTTP status, RPC status, block
reason) are checked first. Matching on the error text is a last resort: the
provider does not guarantee stable messages, so a reworded upstream error
can silently fall through to the generic 500.
"""

from __future__ import annotations

from typing import Optional

from costume_roaster.config import logger
from costume_roaster.core.errors import (
    ConfigurationError,
    ContentPolicyError,
    RoastAppError,
    UpstreamAuthError,
    UpstreamRateLimitError,
)
from costume_roaster.core.gemini import GeminiAPIError

RATE_LIMIT_STATUSES = {"RESOURCE_EXHAUSTED"}
AUTH_STATUSES = {"UNAUTHENTICATED", "PERMISSION_DENIED"}

AUTH_MARKERS = ("API key",)
RATE_LIMIT_MARKERS = ("quota", "rate limit")
CONTENT_POLICY_MARKERS = ("safety", "blocked")


def _classify_structured(
    exc: GeminiAPIError, content_policy_message: Optional[str]
) -> Optional[RoastAppError]:
    if exc.status_code == 429 or exc.status in RATE_LIMIT_STATUSES:
        return UpstreamRateLimitError()
    if exc.status_code in (401, 403) or exc.status in AUTH_STATUSES:
        return UpstreamAuthError()
    if exc.block_reason and content_policy_message:
        return ContentPolicyError(content_policy_message)
    return None


def _classify_message(
    message: str, content_policy_message: Optional[str]
) -> Optional[RoastAppError]:
    if any(marker in message for marker in AUTH_MARKERS):
        return UpstreamAuthError()
    if any(marker in message for marker in RATE_LIMIT_MARKERS):
        return UpstreamRateLimitError()
    if content_policy_message and any(
        marker in message for marker in CONTENT_POLICY_MARKERS
    ):
        return ContentPolicyError(content_policy_message)
    return None


def translate_error(
    exc: Exception,
    failure_message: str,
    content_policy_message: Optional[str] = None,
) -> RoastAppError:
    """
    Map any exception to a taxonomy error with a caller-safe message.

    Args:
        exc: the raised exception
        failure_message: generic message used for unclassified failures
        content_policy_message: capability-specific explanation for safety
            blocks; capabilities without one never report a policy block

    Returns:
        RoastAppError whose status_code and message form the response
    """
    if isinstance(exc, ConfigurationError):
        logger.error(f"Configuration error: {exc.message}")
        return UpstreamAuthError()

    if isinstance(exc, RoastAppError):
        return exc

    if isinstance(exc, GeminiAPIError):
        classified = _classify_structured(exc, content_policy_message)
        if classified is not None:
            return classified

    classified = _classify_message(str(exc), content_policy_message)
    if classified is not None:
        return classified

    return RoastAppError(failure_message)


__all__ = ["translate_error"]
