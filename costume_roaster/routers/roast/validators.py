"""
Per-capability request validators.

Each validator checks the raw JSON body against the capability's request
model and raises ValidationError for the first rule that fails (image
payload errors propagate with their own type). On success it returns the
validated model.
"""

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from costume_roaster.core.errors import ValidationError
from costume_roaster.core.fish_audio import SUPPORTED_AUDIO_FORMATS, SpeechRequest

from .models import (
    AnalyzeRequest,
    GenerateAudioRequest,
    GenerateCostumeRequest,
    GenerateMemeRequest,
    GenerateRoastRequest,
    ModifyImageRequest,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

REQUIRED_MESSAGE = "{field} is required"

# Messages for fields whose failures need more than "is required"
FIELD_MESSAGES: Dict[str, str] = {
    "failPoints": "failPoints must be an array",
    "conversationHistory": "conversationHistory must be an array",
    "text": "text is required and must be a non-empty string",
    "format": f"format must be one of: {', '.join(SUPPORTED_AUDIO_FORMATS)}",
    "temperature": "temperature must be a number",
    "top_p": "top_p must be a number",
    "improvementPrompt": "improvementPrompt must be a string",
    "reference_id": "reference_id must be a string",
    "voice": "Unknown voice: {input}",
}

# Failures on an element of a list field
ITEM_MESSAGES: Dict[str, str] = {
    "failPoints": "failPoints must be an array of strings",
}


def _first_error_message(exc: ModelValidationError) -> str:
    error = exc.errors()[0]
    if error["type"] == "value_error":
        return str(error["ctx"]["error"])

    loc = error["loc"]
    field = str(loc[0]) if loc else "body"
    if len(loc) > 1 and isinstance(loc[1], int) and field in ITEM_MESSAGES:
        return ITEM_MESSAGES[field]
    template = FIELD_MESSAGES.get(field, REQUIRED_MESSAGE)
    return template.format(field=field, input=error.get("input"))


def _parse(model: Type[ModelT], body: Any) -> ModelT:
    if not body or not isinstance(body, dict):
        raise ValidationError("Request body is required")
    try:
        return model.model_validate(body)
    except ModelValidationError as exc:
        raise ValidationError(_first_error_message(exc)) from None


def validate_analyze_request(body: Any) -> AnalyzeRequest:
    return _parse(AnalyzeRequest, body)


def validate_generate_roast_request(body: Any) -> GenerateRoastRequest:
    return _parse(GenerateRoastRequest, body)


def validate_generate_costume_request(body: Any) -> GenerateCostumeRequest:
    return _parse(GenerateCostumeRequest, body)


def validate_generate_meme_request(body: Any) -> GenerateMemeRequest:
    # The image is optional and only validated, never sent upstream
    return _parse(GenerateMemeRequest, body)


def validate_modify_image_request(body: Any) -> ModifyImageRequest:
    return _parse(ModifyImageRequest, body)


def validate_generate_audio_request(body: Any) -> SpeechRequest:
    return _parse(GenerateAudioRequest, body).to_speech_request()


__all__ = [
    "validate_analyze_request",
    "validate_generate_roast_request",
    "validate_generate_costume_request",
    "validate_generate_meme_request",
    "validate_modify_image_request",
    "validate_generate_audio_request",
]
