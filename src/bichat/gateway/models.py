"""Request and result models for the speech-synthesis gateway."""

from dataclasses import dataclass
from typing import Any

from .errors import InvalidInput

DEFAULT_VOICE_ID = "pNInz6obpgDQGcFmaJgB"


@dataclass(frozen=True)
class SpeechRequest:
    """Validated speech-synthesis request.

    Args:
        text: Text to synthesize, passed to the provider unchanged
        voice_id: Provider voice identifier
    """

    text: str
    voice_id: str = DEFAULT_VOICE_ID

    @classmethod
    def from_payload(
        cls, payload: Any, default_voice_id: str = DEFAULT_VOICE_ID
    ) -> "SpeechRequest":
        """Build a request from a decoded JSON body.

        Args:
            payload: Decoded request body
            default_voice_id: Voice used when voice_id is absent or empty

        Returns:
            Validated SpeechRequest

        Raises:
            InvalidInput: If the body is not an object or text is missing/blank
        """
        if not isinstance(payload, dict):
            raise InvalidInput("Request body must be a JSON object")

        text = payload.get("text")
        if not isinstance(text, str) or not text.strip():
            raise InvalidInput("Text is required")

        voice_id = payload.get("voice_id") or default_voice_id
        if not isinstance(voice_id, str):
            raise InvalidInput("voice_id must be a string")

        return cls(text=text, voice_id=voice_id)


@dataclass(frozen=True)
class SpeechResult:
    """Audio returned by the speech gateway.

    Args:
        audio: Encoded MP3 audio
        voice_id: Voice the audio was synthesized with
        cached: True if served from the cache without calling the provider
    """

    audio: bytes
    voice_id: str
    cached: bool = False
