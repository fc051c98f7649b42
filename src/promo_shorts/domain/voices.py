"""
Voice tables — subject keyword to voice identifier, one table per speech engine.

Tables are ordered and evaluated first-match-wins by substring containment;
the ``default`` key is the fallback and is never matched as a keyword.
"""

from __future__ import annotations

DEFAULT_KEY = "default"

ELEVENLABS_VOICES: dict[str, str] = {
    "tech": "EXAVITQu4vr4xnSDxMaL",  # Antoni
    "gadgets": "pNInz6obpgDQGcFmaJgB",  # Adam
    "electronics": "VR6AewLTigWG4xSOukaG",  # Richard
    "automotive": "nPczCjzI2devNBz1zQrb",  # Brian
    "sports": "EXAVITQu4vr4xnSDxMaL",
    "beauty": "21m00Tcm4TlvDq8ikWAM",  # Rachel
    "skincare": "21m00Tcm4TlvDq8ikWAM",
    "fashion": "LcfcDJNUP1GQjkzn1xUU",  # Emily
    "clothing": "LcfcDJNUP1GQjkzn1xUU",
    "jewelry": "21m00Tcm4TlvDq8ikWAM",
    "food": "LcfcDJNUP1GQjkzn1xUU",
    "snacks": "LcfcDJNUP1GQjkzn1xUU",
    "health": "21m00Tcm4TlvDq8ikWAM",
    "fitness": "LcfcDJNUP1GQjkzn1xUU",
    "home": "LcfcDJNUP1GQjkzn1xUU",
    "kitchen": "21m00Tcm4TlvDq8ikWAM",
    DEFAULT_KEY: "21m00Tcm4TlvDq8ikWAM",
}

EDGE_VOICES: dict[str, str] = {
    "tech": "en-US-ChristopherNeural",
    "gadgets": "en-US-GuyNeural",
    "electronics": "en-US-EricNeural",
    "automotive": "en-US-BrianNeural",
    "sports": "en-US-ChristopherNeural",
    "beauty": "en-US-JennyNeural",
    "skincare": "en-US-JennyNeural",
    "fashion": "en-US-AriaNeural",
    "clothing": "en-US-AriaNeural",
    "jewelry": "en-US-JennyNeural",
    "food": "en-US-AriaNeural",
    "snacks": "en-US-AriaNeural",
    "health": "en-US-JennyNeural",
    "fitness": "en-US-AriaNeural",
    "home": "en-US-AriaNeural",
    "kitchen": "en-US-JennyNeural",
    DEFAULT_KEY: "en-US-JennyNeural",
}


def select_voice(subject: str, table: dict[str, str]) -> str:
    """Return the voice of the first table key contained in ``subject``."""
    lowered = subject.lower()
    for key, voice_id in table.items():
        if key != DEFAULT_KEY and key in lowered:
            return voice_id
    return table[DEFAULT_KEY]
