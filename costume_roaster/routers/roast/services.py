"""Capability helpers used by the roast router: content parts, extraction and shaping."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List

from fastapi import Response

from costume_roaster.config import logger
from costume_roaster.core import fish_audio, prompt_templates
from costume_roaster.core.errors import NoImageProducedError, ParseError
from costume_roaster.core.gemini import GeminiAPIError, GenerateContentResult, InlineImage
from costume_roaster.core.image_payload import to_data_url

from .models import (
    AnalyzeRequest,
    AnalyzeResponse,
    CostumeAnalysis,
    GenerateCostumeRequest,
    GenerateCostumeResponse,
    GenerateMemeRequest,
    GenerateMemeResponse,
    GenerateRoastRequest,
    GenerateRoastResponse,
    GeneratedCostume,
    MemeImage,
    ModifyImageRequest,
    ModifyImageResponse,
    RoastData,
)

DEFAULT_COSTUME_TYPE = "Unknown Costume"
DEFAULT_ASSESSMENT = "Costume needs improvement."
DEFAULT_MODIFICATION_ANALYSIS = "Here is your spooky makeover!"
MODIFICATION_MESSAGE = "Image modification complete."

JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


# -------------------------
# Shared extraction
# -------------------------
def extract_image(result: GenerateContentResult) -> InlineImage:
    """Select the first candidate part that carries inline image data."""
    image = result.first_inline_image()
    if image is not None:
        return image

    if result.block_reason:
        raise GeminiAPIError(
            f"Image generation blocked by safety filters: {result.block_reason}",
            block_reason=result.block_reason,
        )
    if not result.candidates:
        raise NoImageProducedError("No image generated")
    raise NoImageProducedError("No image data in response")


def parse_analysis_text(text: str) -> Dict[str, Any]:
    """Parse the model's analysis, tolerating markdown fences and chatter."""
    match = JSON_OBJECT_PATTERN.search(text)
    candidate = match.group(0) if match else text
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.error(f"Failed to parse Gemini response: {text[:500]}")
        raise ParseError("Failed to parse costume analysis. Please try again.") from exc

    if not isinstance(data, dict):
        logger.error(f"Gemini analysis was not a JSON object: {text[:500]}")
        raise ParseError("Failed to parse costume analysis. Please try again.")
    return data


def coerce_analysis(data: Dict[str, Any]) -> CostumeAnalysis:
    """Backfill missing fields instead of propagating absence."""
    fail_points = data.get("failPoints") or []
    if not isinstance(fail_points, list):
        fail_points = [fail_points]

    return CostumeAnalysis(
        costumeType=str(data.get("costumeType") or DEFAULT_COSTUME_TYPE),
        failPoints=[str(point) for point in fail_points if point],
        overallAssessment=str(data.get("overallAssessment") or DEFAULT_ASSESSMENT),
    )


# -------------------------
# analyze
# -------------------------
def analyze_prompt(payload: AnalyzeRequest) -> str:
    return prompt_templates.build_analysis_prompt()


def analyze_parts(payload: AnalyzeRequest, prompt: str) -> List[Dict[str, Any]]:
    return [payload.image.to_inline_part(), {"text": prompt}]


def shape_analysis(
    payload: AnalyzeRequest, prompt: str, result: GenerateContentResult
) -> AnalyzeResponse:
    text = result.text()
    logger.debug(f"Analysis raw response text: {text[:500]}")
    analysis = coerce_analysis(parse_analysis_text(text))
    logger.info(
        "Costume analyzed",
        extra={"costume_type": analysis.costumeType, "fail_points": len(analysis.failPoints)},
    )
    return AnalyzeResponse(success=True, data=analysis)


# -------------------------
# generate-roast
# -------------------------
def roast_prompt(payload: GenerateRoastRequest) -> str:
    return prompt_templates.build_roast_prompt(
        payload.costume_type, payload.fail_points, payload.analysis
    )


def text_only_parts(payload: Any, prompt: str) -> List[Dict[str, Any]]:
    return [{"text": prompt}]


def shape_roast(
    payload: GenerateRoastRequest, prompt: str, result: GenerateContentResult
) -> GenerateRoastResponse:
    roast = result.text().strip()
    if not roast:
        raise ParseError("Failed to generate roast. Please try again.")
    return GenerateRoastResponse(success=True, data=RoastData(roast=roast))


# -------------------------
# generate-costume
# -------------------------
def costume_prompt(payload: GenerateCostumeRequest) -> str:
    if payload.improvement_prompt:
        return payload.improvement_prompt
    return prompt_templates.build_costume_prompt(payload.costume_type)


def costume_parts(payload: GenerateCostumeRequest, prompt: str) -> List[Dict[str, Any]]:
    return [{"text": prompt}, payload.image.to_inline_part()]


def shape_costume(
    payload: GenerateCostumeRequest, prompt: str, result: GenerateContentResult
) -> GenerateCostumeResponse:
    image = extract_image(result)
    return GenerateCostumeResponse(
        success=True,
        data=GeneratedCostume(image=to_data_url(image.data, image.mime_type), prompt=prompt),
    )


# -------------------------
# generate-meme
# -------------------------
def meme_prompt(payload: GenerateMemeRequest) -> str:
    return prompt_templates.build_meme_prompt(payload.roast_text.strip())


def shape_meme(
    payload: GenerateMemeRequest, prompt: str, result: GenerateContentResult
) -> GenerateMemeResponse:
    image = extract_image(result)
    return GenerateMemeResponse(
        success=True,
        data=MemeImage(image=to_data_url(image.data, image.mime_type)),
    )


# -------------------------
# modify-image
# -------------------------
def modify_prompt(payload: ModifyImageRequest) -> str:
    return prompt_templates.build_modify_prompt(payload.prompt)


def modify_parts(payload: ModifyImageRequest, prompt: str) -> List[Dict[str, Any]]:
    return [{"text": prompt}, payload.image.to_inline_part()]


def shape_modification(
    payload: ModifyImageRequest, prompt: str, result: GenerateContentResult
) -> ModifyImageResponse:
    image = extract_image(result)
    analysis = result.text().strip() or DEFAULT_MODIFICATION_ANALYSIS
    return ModifyImageResponse(
        success=True,
        modifiedImageData=to_data_url(image.data, image.mime_type),
        analysis=analysis,
        message=MODIFICATION_MESSAGE,
    )


# -------------------------
# generate-audio
# -------------------------
async def synthesize_roast_audio(request: fish_audio.SpeechRequest) -> Response:
    audio = await fish_audio.synthesize_speech(request)
    return Response(content=audio.content, media_type=audio.content_type)
