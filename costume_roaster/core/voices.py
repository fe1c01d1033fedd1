"""Voice catalogue for roast narration."""

from enum import Enum
from typing import Dict, List, Optional


class VoiceSelection(str, Enum):
    BARACK_OBAMA = "barack-obama"
    SPONGEBOB = "spongebob"
    PATRICK = "patrick"
    JOKER = "joker"
    THE_ROCK = "the-rock"
    ELMO = "elmo"
    SQUIDWARD = "squidward"


DEFAULT_VOICE = VoiceSelection.BARACK_OBAMA

# Fish Audio reference ids for each voice model
VOICE_REFERENCE_MAP: Dict[VoiceSelection, str] = {
    VoiceSelection.BARACK_OBAMA: "4ce7e917cedd4bc2bb2e6ff3a46acaa1",
    VoiceSelection.SPONGEBOB: "54e3a85ac9594ffa83264b8a494b901b",
    VoiceSelection.PATRICK: "d75c270eaee14c8aa1e9e980cc37cf1b",
    VoiceSelection.JOKER: "fad5a5a6770e47019f566b8f8c0ff609",
    VoiceSelection.THE_ROCK: "7cc3a7aca00a489eac430d35fd6203e3",
    VoiceSelection.ELMO: "193f7f8f649b418382885c5fb4fb7109",
    VoiceSelection.SQUIDWARD: "dcc29b2dcbc04278bc5a137debea52ec",
}

VOICE_DETAILS: Dict[VoiceSelection, Dict[str, str]] = {
    VoiceSelection.BARACK_OBAMA: {"name": "Barack Obama", "description": "Presidential roast"},
    VoiceSelection.SPONGEBOB: {"name": "SpongeBob", "description": "I'm ready!"},
    VoiceSelection.PATRICK: {"name": "Patrick", "description": "Is mayonnaise an instrument?"},
    VoiceSelection.JOKER: {"name": "Joker", "description": "Why so serious?"},
    VoiceSelection.THE_ROCK: {"name": "The Rock", "description": "Can you smell what's cooking?"},
    VoiceSelection.ELMO: {"name": "Elmo", "description": "Elmo loves costumes!"},
    VoiceSelection.SQUIDWARD: {"name": "Squidward", "description": "Bold and brash"},
}


def reference_id_for(voice: Optional[VoiceSelection]) -> Optional[str]:
    if voice is None:
        return None
    return VOICE_REFERENCE_MAP.get(VoiceSelection(voice))


def list_voices() -> List[Dict[str, str]]:
    return [
        {"id": voice.value, **VOICE_DETAILS[voice]}
        for voice in VoiceSelection
    ]


__all__ = [
    "VoiceSelection",
    "DEFAULT_VOICE",
    "VOICE_REFERENCE_MAP",
    "reference_id_for",
    "list_voices",
]
