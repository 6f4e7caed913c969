"""TTS (Text-to-Speech) package for bichat.

Shared error types and request models used by speech providers.
"""

from .errors import TTSAPIError, TTSAuthError, TTSError
from .models import SynthesisOptions, VoiceSettings

__all__ = [
    "SynthesisOptions",
    "TTSAPIError",
    "TTSAuthError",
    "TTSError",
    "VoiceSettings",
]
