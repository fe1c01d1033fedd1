"""
Client-side orchestration of the roast flow.

RoastSession chains the API calls a browser session makes: analyze, then
roast, then the user-triggered extras (audio, meme, modification, improved
costume). The session holds exactly one stage at a time; see states.py.
"""

from __future__ import annotations

import base64
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

import httpx

from costume_roaster import config
from costume_roaster.config import logger
from costume_roaster.core.errors import SizeLimitError, UnsupportedFormatError
from costume_roaster.core.voices import DEFAULT_VOICE, VoiceSelection, reference_id_for
from costume_roaster.routers.roast.models import CostumeAnalysis

from .states import (
    AnalysisFailed,
    Analyzed,
    Analyzing,
    AudioIdle,
    AudioLoading,
    AudioPlaying,
    ExtraIdle,
    ExtraLoading,
    ExtraReady,
    ExtraState,
    GeneratedCostume,
    Idle,
    Modification,
    RoastFailed,
    RoastGenerating,
    RoastReady,
    SelectedImage,
    SessionStage,
    Uploaded,
)

ALLOWED_FILE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")


class ApiError(Exception):
    """Failed API call, carrying the server's error message."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def prepare_image(
    data: bytes,
    mime_type: str,
    file_name: str = "costume.jpg",
    max_bytes: Optional[int] = None,
) -> SelectedImage:
    """Client-side type and size pre-check mirroring the server's rules."""
    if mime_type not in ALLOWED_FILE_TYPES:
        raise UnsupportedFormatError(
            "Invalid file type. Please upload a JPG, PNG, or WebP image."
        )

    limit = config.MAX_IMAGE_SIZE_BYTES if max_bytes is None else max_bytes
    if len(data) > limit:
        raise SizeLimitError(
            f"File size exceeds {limit / (1024 * 1024):g}MB limit. "
            "Please choose a smaller image."
        )

    # Browsers report image/jpg for some files; the API only knows image/jpeg
    normalized = "image/jpeg" if mime_type == "image/jpg" else mime_type
    encoded = base64.b64encode(data).decode("ascii")
    return SelectedImage(
        data_url=f"data:{normalized};base64,{encoded}",
        mime_type=normalized,
        file_name=file_name,
        size_bytes=len(data),
    )


class RoastSession:
    """Single-user session driving the roast API."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client
        self.state: SessionStage = Idle()

    # -------------------------
    # helpers
    # -------------------------
    async def _post_json(self, path: str, payload: Dict[str, Any], default_error: str) -> Dict[str, Any]:
        try:
            response = await self._client.post(path, json=payload)
        except httpx.RequestError as exc:
            logger.error(f"Request to {path} failed: {exc}")
            raise ApiError(default_error) from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success or not data.get("success"):
            raise ApiError(data.get("error") or default_error, response.status_code)
        return data

    def _ready_for(self, image: SelectedImage) -> Optional[RoastReady]:
        """Current RoastReady stage if it still belongs to ``image``."""
        if isinstance(self.state, RoastReady) and self.state.image is image:
            return self.state
        return None

    # -------------------------
    # upload / reset
    # -------------------------
    def select_image(
        self, data: bytes, mime_type: str, file_name: str = "costume.jpg"
    ) -> Uploaded:
        """Accept a new local image, discarding everything derived before."""
        image = prepare_image(data, mime_type, file_name)
        self.state = Uploaded(image=image)
        logger.info("Costume image selected", extra={"file_name": file_name})
        return self.state

    def reset(self) -> Idle:
        self.state = Idle()
        return self.state

    # -------------------------
    # automatic flow
    # -------------------------
    async def analyze_and_roast(self) -> SessionStage:
        """Run analyze then roast once for the uploaded image."""
        if not isinstance(self.state, Uploaded):
            return self.state

        image = self.state.image
        self.state = Analyzing(image=image)

        try:
            analyzed = await self._post_json(
                "/api/analyze", {"image": image.data_url}, "Failed to analyze costume"
            )
            analysis = CostumeAnalysis(**analyzed["data"])
        except ApiError as exc:
            logger.warning(f"Costume analysis failed: {exc.message}")
            self.state = AnalysisFailed(image=image, error=exc.message)
            return self.state
        except (KeyError, TypeError, ValueError):
            logger.warning("Costume analysis returned an unexpected shape")
            self.state = AnalysisFailed(image=image, error="Failed to analyze costume")
            return self.state

        self.state = Analyzed(image=image, analysis=analysis)
        self.state = RoastGenerating(image=image, analysis=analysis)

        try:
            roasted = await self._post_json(
                "/api/generate-roast",
                {
                    "costumeType": analysis.costumeType,
                    "failPoints": analysis.failPoints,
                    "analysis": analysis.overallAssessment,
                },
                "Failed to generate roast",
            )
            roast = roasted["data"]["roast"]
        except ApiError as exc:
            logger.warning(f"Roast generation failed: {exc.message}")
            self.state = RoastFailed(image=image, analysis=analysis, error=exc.message)
            return self.state
        except (KeyError, TypeError):
            logger.warning("Roast generation returned an unexpected shape")
            self.state = RoastFailed(
                image=image, analysis=analysis, error="Failed to generate roast"
            )
            return self.state

        self.state = RoastReady(image=image, analysis=analysis, roast=roast)
        return self.state

    # -------------------------
    # audio
    # -------------------------
    async def play_roast(self, voice: VoiceSelection = DEFAULT_VOICE) -> SessionStage:
        """Synthesize the roast and start playback; no-op unless audio is idle."""
        ready = self.state if isinstance(self.state, RoastReady) else None
        if ready is None or not isinstance(ready.audio, AudioIdle):
            return self.state

        voice = VoiceSelection(voice)
        self.state = replace(ready, audio=AudioLoading(voice=voice))
        image = ready.image

        payload: Dict[str, Any] = {"text": ready.roast}
        reference_id = reference_id_for(voice)
        if reference_id:
            payload["reference_id"] = reference_id

        try:
            response = await self._client.post("/api/generate-audio", json=payload)
            if not response.is_success:
                raise ApiError("Failed to generate audio", response.status_code)
        except (ApiError, httpx.RequestError) as exc:
            logger.warning(f"Audio generation failed: {exc}")
            current = self._ready_for(image)
            if current is not None and isinstance(current.audio, AudioLoading):
                self.state = replace(
                    current,
                    audio=AudioIdle(error="Failed to generate audio. Please try again."),
                )
            return self.state

        current = self._ready_for(image)
        # Stopped (or replaced) while loading: drop the audio
        if current is None or not isinstance(current.audio, AudioLoading):
            return self.state

        self.state = replace(
            current,
            audio=AudioPlaying(
                voice=voice,
                audio=response.content,
                content_type=response.headers.get("content-type", "audio/mp3"),
            ),
        )
        return self.state

    def finish_playback(self) -> SessionStage:
        """Playback reached the end."""
        if isinstance(self.state, RoastReady) and isinstance(self.state.audio, AudioPlaying):
            self.state = replace(self.state, audio=AudioIdle())
        return self.state

    def stop_roast(self) -> SessionStage:
        """Stop immediately, discarding any loaded or loading audio."""
        if isinstance(self.state, RoastReady) and not isinstance(self.state.audio, AudioIdle):
            self.state = replace(self.state, audio=AudioIdle())
        return self.state

    # -------------------------
    # user-triggered extras
    # -------------------------
    async def _run_extra(
        self,
        ready: RoastReady,
        field: str,
        path: str,
        payload: Dict[str, Any],
        default_error: str,
        build: Callable[[Dict[str, Any]], Any],
        **changes: Any,
    ) -> SessionStage:
        """Drive one extra through loading into ready or an idle error."""
        image = ready.image
        self.state = replace(ready, **{field: ExtraLoading()}, **changes)

        try:
            data = await self._post_json(path, payload, default_error)
            outcome: ExtraState = ExtraReady(build(data))
        except ApiError as exc:
            outcome = ExtraIdle(error=exc.message)
        except (KeyError, TypeError):
            logger.warning(f"{path} returned an unexpected shape")
            outcome = ExtraIdle(error=default_error)

        current = self._ready_for(image)
        if current is not None:
            self.state = replace(current, **{field: outcome})
        return self.state

    async def request_modification(self, text: str) -> SessionStage:
        """Ask for a modified costume image; clears any displayed meme."""
        ready = self.state if isinstance(self.state, RoastReady) else None
        if ready is None or not text.strip():
            return self.state

        return await self._run_extra(
            ready,
            "modification",
            "/api/modify-image",
            {
                "imageData": ready.image.data_url,
                "prompt": text.strip(),
                "conversationHistory": [],
            },
            "Failed to modify image",
            lambda data: Modification(
                analysis=data.get("analysis", ""),
                image=data.get("modifiedImageData"),
            ),
            meme=ExtraIdle(),
        )

    async def generate_meme(self) -> SessionStage:
        ready = self.state if isinstance(self.state, RoastReady) else None
        if ready is None:
            return self.state

        return await self._run_extra(
            ready,
            "meme",
            "/api/generate-meme",
            {"roastText": ready.roast},
            "Failed to generate meme",
            lambda data: data["data"]["image"],
        )

    async def generate_costume(self, improvement_prompt: Optional[str] = None) -> SessionStage:
        ready = self.state if isinstance(self.state, RoastReady) else None
        if ready is None:
            return self.state

        payload: Dict[str, Any] = {
            "image": ready.image.data_url,
            "costumeType": ready.analysis.costumeType,
        }
        if improvement_prompt:
            payload["improvementPrompt"] = improvement_prompt

        return await self._run_extra(
            ready,
            "costume",
            "/api/generate-costume",
            payload,
            "Failed to generate costume image",
            lambda data: GeneratedCostume(
                image=data["data"]["image"], prompt=data["data"]["prompt"]
            ),
        )


__all__ = ["ALLOWED_FILE_TYPES", "ApiError", "RoastSession", "prepare_image"]
