"""Gemini gateway: model accessors, generation presets and response helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx

# Import from centralized config
from costume_roaster import config
from costume_roaster.config import logger
from costume_roaster.core.errors import ConfigurationError

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"

# finishReason / blockReason values that mean the provider refused the request
SAFETY_BLOCK_REASONS = {
    "SAFETY",
    "IMAGE_SAFETY",
    "PROHIBITED_CONTENT",
    "BLOCKLIST",
    "SPII",
    "OTHER_BLOCK",
}


@dataclass(frozen=True)
class GenerationPreset:
    """Fixed bundle of generation parameters selected per capability."""

    name: str
    temperature: float
    top_p: float
    top_k: Optional[int] = None
    max_output_tokens: Optional[int] = None
    response_modalities: Tuple[str, ...] = ()

    def to_generation_config(self) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {
            "temperature": self.temperature,
            "topP": self.top_p,
        }
        if self.top_k is not None:
            generation_config["topK"] = self.top_k
        if self.max_output_tokens is not None:
            generation_config["maxOutputTokens"] = self.max_output_tokens
        if self.response_modalities:
            generation_config["responseModalities"] = list(self.response_modalities)
        return generation_config


# More factual for analysis
ANALYSIS_PRESET = GenerationPreset(
    name="analysis", temperature=0.4, top_p=0.95, top_k=40, max_output_tokens=500
)
# High creativity for funny roasts
ROAST_PRESET = GenerationPreset(
    name="roast", temperature=0.9, top_p=0.95, top_k=40, max_output_tokens=300
)
IMAGE_PRESET = GenerationPreset(
    name="image", temperature=0.7, top_p=0.95, response_modalities=("TEXT", "IMAGE")
)

GENERATION_PRESETS = {
    preset.name: preset for preset in (ANALYSIS_PRESET, ROAST_PRESET, IMAGE_PRESET)
}


class GeminiAPIError(Exception):
    """Failure reported by the Gemini API, keeping whatever structure it returned."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        status: Optional[str] = None,
        block_reason: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.status = status
        self.block_reason = block_reason

    @classmethod
    def from_response(cls, response: httpx.Response) -> "GeminiAPIError":
        status = None
        message = response.text
        try:
            error_body = response.json().get("error", {})
            status = error_body.get("status")
            message = error_body.get("message") or message
        except (ValueError, AttributeError):
            pass
        return cls(
            f"Gemini API HTTP error: {response.status_code} - {message}",
            status_code=response.status_code,
            status=status,
        )


@dataclass
class InlineImage:
    data: str
    mime_type: str


@dataclass
class GenerateContentResult:
    """Thin wrapper around a generateContent JSON response."""

    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def candidates(self) -> List[Dict[str, Any]]:
        return self.raw.get("candidates") or []

    @property
    def block_reason(self) -> Optional[str]:
        prompt_block = (self.raw.get("promptFeedback") or {}).get("blockReason")
        if prompt_block:
            return prompt_block
        for candidate in self.candidates:
            if candidate.get("finishReason") in SAFETY_BLOCK_REASONS:
                return candidate["finishReason"]
        return None

    def _parts(self, candidate: Dict[str, Any]) -> List[Dict[str, Any]]:
        return (candidate.get("content") or {}).get("parts") or []

    def text(self) -> str:
        """Concatenate the text parts of the first candidate."""
        if not self.candidates:
            return ""
        return "".join(
            part["text"] for part in self._parts(self.candidates[0]) if "text" in part
        )

    def first_inline_image(self) -> Optional[InlineImage]:
        """Return the first candidate part carrying inline image data."""
        for candidate in self.candidates:
            for part in self._parts(candidate):
                # Check both camelCase and snake_case formats
                inline = part.get("inlineData") or part.get("inline_data")
                if inline and inline.get("data"):
                    return InlineImage(
                        data=inline["data"],
                        mime_type=inline.get("mimeType")
                        or inline.get("mime_type")
                        or "image/png",
                    )
        return None


class GeminiModel:
    """Accessor for one Gemini model over the REST generateContent endpoint."""

    def __init__(
        self,
        model_name: str,
        api_key: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.model_name = model_name
        self._api_key = api_key
        self._timeout = config.UPSTREAM_TIMEOUT_SECONDS if timeout is None else timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{GEMINI_API_BASE}/{self.model_name}:generateContent"

    async def generate_content(
        self,
        parts: List[Dict[str, Any]],
        preset: GenerationPreset,
    ) -> GenerateContentResult:
        """
        Call generateContent with the given content parts.

        Raises:
            GeminiAPIError: HTTP failure, network failure, or a blocked prompt
        """
        payload = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": preset.to_generation_config(),
        }
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key,
        }

        logger.debug(
            "Calling Gemini",
            extra={"model": self.model_name, "preset": preset.name, "parts": len(parts)},
        )

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self.url, json=payload, headers=headers)
                response.raise_for_status()
                api_result = response.json()
        except httpx.HTTPStatusError as exc:
            raise GeminiAPIError.from_response(exc.response) from exc
        except httpx.RequestError as exc:
            raise GeminiAPIError(f"Network error calling Gemini API: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise GeminiAPIError(f"Gemini API returned invalid JSON: {exc}") from exc

        result = GenerateContentResult(raw=api_result)
        if not result.candidates and result.block_reason:
            raise GeminiAPIError(
                f"Prompt blocked by Gemini safety filters: {result.block_reason}",
                block_reason=result.block_reason,
            )
        return result


def ensure_configured() -> str:
    """Return the Gemini API key or fail when it is not configured."""
    if not config.GEMINI_KEY:
        raise ConfigurationError(
            "GEMINI_KEY is not set in environment variables. "
            "Please create a .env file with your API key."
        )
    return config.GEMINI_KEY


def get_vision_model() -> GeminiModel:
    """Vision/text model used for costume analysis, roasts and narratives."""
    return GeminiModel(config.GEMINI_VISION_MODEL, ensure_configured())


def get_image_generation_model() -> GeminiModel:
    """Image model used for costume, meme and modification images."""
    return GeminiModel(config.GEMINI_IMAGE_MODEL, ensure_configured())


__all__ = [
    "ANALYSIS_PRESET",
    "ROAST_PRESET",
    "IMAGE_PRESET",
    "GENERATION_PRESETS",
    "GenerationPreset",
    "GeminiAPIError",
    "GeminiModel",
    "GenerateContentResult",
    "InlineImage",
    "ensure_configured",
    "get_vision_model",
    "get_image_generation_model",
]
