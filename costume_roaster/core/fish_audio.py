"""Fish Audio text-to-speech client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, get_args

import httpx

from costume_roaster import config
from costume_roaster.config import logger
from costume_roaster.core.errors import (
    RoastAppError,
    UpstreamAuthError,
    UpstreamRateLimitError,
    ValidationError,
)

FISH_AUDIO_TTS_URL = "https://api.fish.audio/v1/tts"

AudioFormat = Literal["mp3", "wav", "pcm", "opus"]
SUPPORTED_AUDIO_FORMATS = get_args(AudioFormat)


@dataclass(frozen=True)
class SpeechRequest:
    text: str
    format: str = "mp3"
    temperature: float = 0.9
    top_p: float = 0.9
    reference_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "text": self.text.strip(),
            "format": self.format,
            "temperature": self.temperature,
            "top_p": self.top_p,
        }
        # Only sent when a specific voice model was selected
        if self.reference_id:
            payload["reference_id"] = self.reference_id
        return payload


@dataclass(frozen=True)
class SynthesizedAudio:
    content: bytes
    format: str

    @property
    def content_type(self) -> str:
        return f"audio/{self.format}"


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return

    logger.error(
        "Fish Audio API error",
        extra={"status_code": response.status_code, "body": response.text[:500]},
    )

    if response.status_code == 401:
        raise UpstreamAuthError("Audio service authentication failed")
    if response.status_code in (402, 429):
        raise UpstreamRateLimitError("Audio service quota exceeded")
    if response.status_code == 422:
        raise ValidationError("Invalid audio generation parameters")
    raise RoastAppError("Failed to generate audio")


async def synthesize_speech(
    request: SpeechRequest,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SynthesizedAudio:
    """
    Convert text to speech with Fish Audio.

    Raises:
        UpstreamAuthError: FISH_AUDIO_API_KEY missing or rejected
        RoastAppError: upstream failure, already mapped to a caller status
    """
    api_key = config.FISH_AUDIO_API_KEY
    if not api_key:
        logger.error("FISH_AUDIO_API_KEY not configured")
        raise UpstreamAuthError("Audio service not configured")

    logger.info(
        "Requesting speech synthesis",
        extra={
            "chars": len(request.text),
            "format": request.format,
            "reference_id": request.reference_id,
        },
    )

    try:
        async with httpx.AsyncClient(
            timeout=config.UPSTREAM_TIMEOUT_SECONDS, transport=transport
        ) as client:
            response = await client.post(
                FISH_AUDIO_TTS_URL,
                json=request.to_payload(),
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                },
            )
    except httpx.RequestError as exc:
        logger.error(f"Network error calling Fish Audio: {exc}")
        raise RoastAppError("Failed to generate audio. Please try again.") from exc

    _raise_for_status(response)
    return SynthesizedAudio(content=response.content, format=request.format)


__all__ = [
    "SUPPORTED_AUDIO_FORMATS",
    "SpeechRequest",
    "SynthesizedAudio",
    "synthesize_speech",
]
