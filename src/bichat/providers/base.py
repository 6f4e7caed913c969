"""Abstract base class for text-to-speech providers.

This module defines the interface the speech gateway calls on a cache miss,
so the upstream provider can be swapped or faked in tests.
"""

from abc import ABC, abstractmethod


class TTSProvider(ABC):
    """Abstract base class for text-to-speech providers.

    All TTS providers must inherit from this class and implement
    synthesize(). Providers signal failures with the exceptions from
    bichat.tts.errors so the gateway can map them to HTTP errors.
    """

    name: str = "base"

    @abstractmethod
    async def synthesize(self, text: str, voice: str) -> bytes:
        """Convert text to audio bytes.

        Args:
            text: The text to convert to speech
            voice: Voice ID to use for synthesis

        Returns:
            Encoded audio data as bytes (MP3)

        Raises:
            TTSAuthError: If the provider rejects the credential
            TTSAPIError: If the provider call does not succeed
        """
        pass
