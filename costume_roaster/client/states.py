"""Session stages for the roast client, one dataclass per stage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

from costume_roaster.core.voices import VoiceSelection
from costume_roaster.routers.roast.models import CostumeAnalysis


@dataclass(frozen=True)
class SelectedImage:
    """Local image accepted by the client-side pre-check."""

    data_url: str
    mime_type: str
    file_name: str
    size_bytes: int


@dataclass(frozen=True)
class Modification:
    analysis: str
    image: Optional[str] = None


@dataclass(frozen=True)
class GeneratedCostume:
    image: str
    prompt: str


# --- audio sub-states of RoastReady ---


@dataclass(frozen=True)
class AudioIdle:
    error: Optional[str] = None


@dataclass(frozen=True)
class AudioLoading:
    voice: VoiceSelection


@dataclass(frozen=True)
class AudioPlaying:
    voice: VoiceSelection
    audio: bytes
    content_type: str


AudioState = Union[AudioIdle, AudioLoading, AudioPlaying]


# --- user-triggered extras of RoastReady (meme, modification, costume) ---

ResultT = TypeVar("ResultT")


@dataclass(frozen=True)
class ExtraIdle:
    error: Optional[str] = None


@dataclass(frozen=True)
class ExtraLoading:
    pass


@dataclass(frozen=True)
class ExtraReady(Generic[ResultT]):
    result: ResultT


ExtraState = Union[ExtraIdle, ExtraLoading, ExtraReady]


# --- session stages ---


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Uploaded:
    image: SelectedImage


@dataclass(frozen=True)
class Analyzing:
    image: SelectedImage


@dataclass(frozen=True)
class AnalysisFailed:
    image: SelectedImage
    error: str


@dataclass(frozen=True)
class Analyzed:
    image: SelectedImage
    analysis: CostumeAnalysis


@dataclass(frozen=True)
class RoastGenerating:
    image: SelectedImage
    analysis: CostumeAnalysis


@dataclass(frozen=True)
class RoastFailed:
    image: SelectedImage
    analysis: CostumeAnalysis
    error: str


@dataclass(frozen=True)
class RoastReady:
    """
    Terminal stage of the automatic flow. Audio, meme, modification and
    costume generation are user-triggered from here.
    """

    image: SelectedImage
    analysis: CostumeAnalysis
    roast: str
    audio: AudioState = AudioIdle()
    meme: ExtraState = ExtraIdle()
    modification: ExtraState = ExtraIdle()
    costume: ExtraState = ExtraIdle()


SessionStage = Union[
    Idle,
    Uploaded,
    Analyzing,
    AnalysisFailed,
    Analyzed,
    RoastGenerating,
    RoastFailed,
    RoastReady,
]

__all__ = [
    "SelectedImage",
    "Modification",
    "GeneratedCostume",
    "AudioIdle",
    "AudioLoading",
    "AudioPlaying",
    "AudioState",
    "ExtraIdle",
    "ExtraLoading",
    "ExtraReady",
    "ExtraState",
    "Idle",
    "Uploaded",
    "Analyzing",
    "AnalysisFailed",
    "Analyzed",
    "RoastGenerating",
    "RoastFailed",
    "RoastReady",
    "SessionStage",
]
