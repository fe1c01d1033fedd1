"""FastAPI router for the costume roast endpoints."""

from fastapi import APIRouter, Request, Response

from costume_roaster.core import gemini
from costume_roaster.core.voices import list_voices

from . import services
from .models import (
    AnalyzeResponse,
    ErrorResponse,
    GenerateCostumeResponse,
    GenerateMemeResponse,
    GenerateRoastResponse,
    ModifyImageResponse,
    VoiceOption,
    VoicesResponse,
)
from .pipeline import CapabilityPipeline, gemini_executor
from .validators import (
    validate_analyze_request,
    validate_generate_audio_request,
    validate_generate_costume_request,
    validate_generate_meme_request,
    validate_generate_roast_request,
    validate_modify_image_request,
)

router = APIRouter(prefix="/api", tags=["Costume Roaster"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


analyze_pipeline = CapabilityPipeline(
    name="analyze",
    validator=validate_analyze_request,
    executor=gemini_executor(
        gemini.get_vision_model,
        gemini.ANALYSIS_PRESET,
        services.analyze_prompt,
        services.analyze_parts,
        services.shape_analysis,
    ),
    failure_message="Failed to analyze costume. Please try again.",
)

roast_pipeline = CapabilityPipeline(
    name="generate-roast",
    validator=validate_generate_roast_request,
    executor=gemini_executor(
        gemini.get_vision_model,
        gemini.ROAST_PRESET,
        services.roast_prompt,
        services.text_only_parts,
        services.shape_roast,
    ),
    failure_message="Failed to generate roast. Please try again.",
)

costume_pipeline = CapabilityPipeline(
    name="generate-costume",
    validator=validate_generate_costume_request,
    executor=gemini_executor(
        gemini.get_image_generation_model,
        gemini.IMAGE_PRESET,
        services.costume_prompt,
        services.costume_parts,
        services.shape_costume,
    ),
    failure_message="Failed to generate costume image. Please try again.",
    content_policy_message=(
        "Image generation blocked due to content policy. Try a different costume type."
    ),
)

meme_pipeline = CapabilityPipeline(
    name="generate-meme",
    validator=validate_generate_meme_request,
    executor=gemini_executor(
        gemini.get_image_generation_model,
        gemini.IMAGE_PRESET,
        services.meme_prompt,
        services.text_only_parts,
        services.shape_meme,
    ),
    failure_message="Failed to generate meme. Please try again.",
    content_policy_message=(
        "Meme generation blocked due to content policy. Try again with different content."
    ),
)

modify_pipeline = CapabilityPipeline(
    name="modify-image",
    validator=validate_modify_image_request,
    executor=gemini_executor(
        gemini.get_image_generation_model,
        gemini.IMAGE_PRESET,
        services.modify_prompt,
        services.modify_parts,
        services.shape_modification,
    ),
    failure_message="Failed to process image modification request",
    content_policy_message=(
        "Image modification blocked due to content policy. Try a different request."
    ),
)

audio_pipeline = CapabilityPipeline(
    name="generate-audio",
    validator=validate_generate_audio_request,
    executor=services.synthesize_roast_audio,
    failure_message="Failed to generate audio. Please try again.",
)


@router.post("/analyze", response_model=AnalyzeResponse, responses=ERROR_RESPONSES)
async def analyze_costume(request: Request) -> Response:
    """Identify the attempted costume and list its failures."""
    return await analyze_pipeline.run(request)


@router.post(
    "/generate-roast", response_model=GenerateRoastResponse, responses=ERROR_RESPONSES
)
async def generate_roast(request: Request) -> Response:
    """Turn a costume analysis into a short roast."""
    return await roast_pipeline.run(request)


@router.post(
    "/generate-costume",
    response_model=GenerateCostumeResponse,
    responses=ERROR_RESPONSES,
)
async def generate_costume(request: Request) -> Response:
    """Render an improved version of the uploaded costume."""
    return await costume_pipeline.run(request)


@router.post(
    "/generate-meme", response_model=GenerateMemeResponse, responses=ERROR_RESPONSES
)
async def generate_meme(request: Request) -> Response:
    """Render a shareable meme captioned with the roast."""
    return await meme_pipeline.run(request)


@router.post(
    "/modify-image", response_model=ModifyImageResponse, responses=ERROR_RESPONSES
)
async def modify_image(request: Request) -> Response:
    """Apply a user-described modification to the costume photo."""
    return await modify_pipeline.run(request)


@router.post(
    "/generate-audio",
    response_class=Response,
    responses={
        200: {"content": {"audio/mpeg": {}}, "description": "Synthesized roast audio"},
        **ERROR_RESPONSES,
    },
)
async def generate_audio(request: Request) -> Response:
    """Speak the roast with the selected voice."""
    return await audio_pipeline.run(request)


@router.get("/voices", response_model=VoicesResponse)
async def get_voices() -> VoicesResponse:
    """List the narration voices the client can offer."""
    return VoicesResponse(
        success=True, voices=[VoiceOption(**voice) for voice in list_voices()]
    )


@router.get("/health")
async def health_check() -> dict:
    """Simple health check endpoint."""

    return {
        "status": "healthy",
        "service": "costume-roaster-api",
        "version": "1.0.0",
    }
