"""ElevenLabs text-to-speech provider implementation."""

import asyncio
import logging
import os

import httpx
from elevenlabs import VoiceSettings as ElevenLabsVoiceSettings
from elevenlabs.client import ElevenLabs
from elevenlabs.core.api_error import ApiError

from ..tts.errors import TTSAPIError, TTSAuthError
from ..tts.models import SynthesisOptions
from .base import TTSProvider

logger = logging.getLogger(__name__)


class ElevenLabsProvider(TTSProvider):
    """ElevenLabs TTS provider tuned for low latency.

    Every call uses the same SynthesisOptions: the turbo model, reduced
    voice settings, a low-bitrate MP3 format and maximum streaming latency
    optimization.
    """

    name = "elevenlabs"

    def __init__(
        self,
        api_key: str | None = None,
        options: SynthesisOptions | None = None,
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.
            options: Synthesis parameters (speed-optimized defaults)

        Raises:
            TTSAuthError: If API key is not provided or client creation fails.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}") from e

        self.options = options or SynthesisOptions()

    def _voice_settings(self) -> ElevenLabsVoiceSettings:
        settings = self.options.voice_settings
        return ElevenLabsVoiceSettings(
            stability=settings.stability,
            similarity_boost=settings.similarity_boost,
            style=settings.style,
            use_speaker_boost=settings.use_speaker_boost,
        )

    async def synthesize(self, text: str, voice: str) -> bytes:
        """Convert text to speech audio bytes.

        Args:
            text: Text to convert to speech
            voice: Voice ID to use for synthesis

        Returns:
            Audio data as bytes (MP3 format)

        Raises:
            TTSAPIError: If API call fails or returns no audio
            TTSAuthError: If authentication fails
            ValueError: If text or voice is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")
        if not voice:
            raise ValueError("Voice cannot be empty")

        # Run synchronous ElevenLabs client in thread to avoid blocking event loop
        def _sync_convert() -> bytes:
            audio_generator = self._client.text_to_speech.convert(
                voice_id=voice,
                text=text,
                model_id=self.options.model_id,
                voice_settings=self._voice_settings(),
                optimize_streaming_latency=self.options.optimize_streaming_latency,
                output_format=self.options.output_format,
            )
            # Collect all audio chunks
            return b"".join(audio_generator)

        try:
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except ApiError as e:
            logger.debug(f"ElevenLabs returned status {e.status_code}: {e.body}")
            if e.status_code == 401:
                raise TTSAuthError(f"Authentication failed: {e.body}", e) from e
            raise TTSAPIError(
                f"ElevenLabs API error: {e.status_code}", e.status_code, e
            ) from e
        except httpx.RequestError as e:
            raise TTSAPIError(f"Could not reach ElevenLabs: {e}", None, e) from e
        except Exception as e:
            raise TTSAPIError(f"API call failed: {e}", None, e) from e

        if not audio_bytes:
            raise TTSAPIError("No audio data received from API")

        return audio_bytes
