"""Pydantic models used by the roast router."""

from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    Field,
    PrivateAttr,
    field_validator,
    model_validator,
)

from costume_roaster.core.fish_audio import AudioFormat, SpeechRequest
from costume_roaster.core.image_payload import ImagePayload, validate_image_data
from costume_roaster.core.voices import VoiceSelection, reference_id_for

DEFAULT_AUDIO_FORMAT = "mp3"
DEFAULT_SAMPLING = 0.9


# -------------------------
# Request models
# -------------------------
class ImageRequest(BaseModel):
    """
    Base for requests carrying an image reference.

    The reference is checked by validate_image_data only after every field
    passed, so a missing field is reported before a bad image.
    """

    _image: Optional[ImagePayload] = PrivateAttr(default=None)

    @property
    def image(self) -> Optional[ImagePayload]:
        return self._image


class AnalyzeRequest(ImageRequest):
    """Request payload for costume analysis."""

    image_reference: str = Field(..., alias="image", min_length=1)

    @model_validator(mode="after")
    def _check_image(self) -> "AnalyzeRequest":
        self._image = validate_image_data(self.image_reference)
        return self


class GenerateRoastRequest(BaseModel):
    """Request payload for roast generation."""

    costume_type: str = Field(..., alias="costumeType", min_length=1)
    fail_points: List[str] = Field(..., alias="failPoints")
    analysis: str = Field(..., min_length=1)


class GenerateCostumeRequest(ImageRequest):
    """Request payload for improved costume generation."""

    image_reference: str = Field(..., alias="image", min_length=1)
    costume_type: str = Field(..., alias="costumeType", min_length=1)
    improvement_prompt: Optional[str] = Field(None, alias="improvementPrompt")

    @field_validator("improvement_prompt", mode="before")
    @classmethod
    def _blank_as_missing(cls, value: Any) -> Any:
        return value or None

    @model_validator(mode="after")
    def _check_image(self) -> "GenerateCostumeRequest":
        self._image = validate_image_data(self.image_reference)
        return self


class GenerateMemeRequest(ImageRequest):
    """Request payload for meme generation. The image is optional."""

    roast_text: str = Field(..., alias="roastText", min_length=1)
    image_reference: Optional[str] = Field(None, alias="image")

    @field_validator("roast_text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("roastText cannot be empty")
        return value

    @field_validator("image_reference", mode="before")
    @classmethod
    def _blank_as_missing(cls, value: Any) -> Any:
        return value or None

    @model_validator(mode="after")
    def _check_image(self) -> "GenerateMemeRequest":
        if self.image_reference:
            self._image = validate_image_data(self.image_reference)
        return self


class ModifyImageRequest(ImageRequest):
    """Request payload for a user-described image modification."""

    image_reference: str = Field(..., alias="imageData", min_length=1)
    prompt: str = Field(..., min_length=1)
    conversation_history: Optional[List[Any]] = Field(None, alias="conversationHistory")

    @field_validator("prompt")
    @classmethod
    def _strip_prompt(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt cannot be empty")
        return value.strip()

    @model_validator(mode="after")
    def _check_image(self) -> "ModifyImageRequest":
        self._image = validate_image_data(self.image_reference, field_name="imageData")
        return self


class GenerateAudioRequest(BaseModel):
    """Request payload for roast narration."""

    text: str = Field(..., min_length=1)
    audio_format: AudioFormat = Field(DEFAULT_AUDIO_FORMAT, alias="format")
    temperature: Optional[float] = Field(DEFAULT_SAMPLING, strict=True)
    top_p: Optional[float] = Field(DEFAULT_SAMPLING, strict=True)
    reference_id: Optional[str] = None
    voice: Optional[VoiceSelection] = None

    @field_validator("text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text is required and must be a non-empty string")
        return value

    @field_validator("audio_format", mode="before")
    @classmethod
    def _default_format(cls, value: Any) -> Any:
        return value or DEFAULT_AUDIO_FORMAT

    @field_validator("temperature", "top_p")
    @classmethod
    def _default_sampling(cls, value: Optional[float]) -> float:
        return DEFAULT_SAMPLING if value is None else float(value)

    @field_validator("reference_id", "voice", mode="before")
    @classmethod
    def _blank_as_missing(cls, value: Any) -> Any:
        return None if value == "" else value

    def to_speech_request(self) -> SpeechRequest:
        # An explicit reference id wins over the named voice
        reference_id = self.reference_id or reference_id_for(self.voice)
        return SpeechRequest(
            text=self.text,
            format=self.audio_format,
            temperature=self.temperature,
            top_p=self.top_p,
            reference_id=reference_id,
        )


# -------------------------
# Response models
# -------------------------


class CostumeAnalysis(BaseModel):
    """Structured costume critique produced by the vision model."""

    costumeType: str
    failPoints: List[str] = Field(default_factory=list)
    overallAssessment: str


class AnalyzeResponse(BaseModel):
    success: bool
    data: CostumeAnalysis


class RoastData(BaseModel):
    roast: str


class GenerateRoastResponse(BaseModel):
    success: bool
    data: RoastData


class GeneratedCostume(BaseModel):
    image: str = Field(..., description="Generated costume image as a data URL")
    prompt: str = Field(..., description="Prompt the image was generated from")


class GenerateCostumeResponse(BaseModel):
    success: bool
    data: GeneratedCostume


class MemeImage(BaseModel):
    image: str = Field(..., description="Meme image as a data URL")


class GenerateMemeResponse(BaseModel):
    success: bool
    data: MemeImage


class ModifyImageResponse(BaseModel):
    """Modification narrative plus the modified image."""

    success: bool
    modifiedImageData: Optional[str] = Field(
        None, description="Modified image as a data URL"
    )
    analysis: str
    message: str


class ErrorResponse(BaseModel):
    """Generic error payload."""

    success: bool = False
    error: str


class VoiceOption(BaseModel):
    id: str
    name: str
    description: str


class VoicesResponse(BaseModel):
    success: bool
    voices: List[VoiceOption]
