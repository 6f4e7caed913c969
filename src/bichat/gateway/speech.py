"""Speech-synthesis gateway.

Serves synthesized audio from AudioCache when possible and otherwise calls
the configured TTSProvider, caching successful results.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from ..cache import AudioCache, CacheKey
from ..providers.base import TTSProvider
from ..tts.errors import TTSAuthError, TTSError
from .errors import InternalError, Misconfigured, UpstreamError
from .models import DEFAULT_VOICE_ID, SpeechRequest, SpeechResult

logger = logging.getLogger(__name__)

SPEECH_FAILURE_MESSAGE = "Failed to generate speech"
MISSING_KEY_MESSAGE = "ElevenLabs API key not configured"


class SpeechSynthesisGateway:
    """Cache-fronted proxy to a text-to-speech provider.

    Request flow: validate, check cache, resolve provider (credential
    check), call upstream, store, respond. Cache hits are answered before
    the credential check so cached audio stays available without a key.

    The upstream call and cache store run in a task shielded from the
    caller, so a client disconnecting mid-request does not cancel
    synthesis and the result is still cached.

    Example:
        gateway = SpeechSynthesisGateway(AudioCache(), ElevenLabsProvider)
        result = await gateway.synthesize({"text": "Sales are up 12%"})
        # result.audio -> MP3 bytes, result.cached -> False
    """

    def __init__(
        self,
        cache: AudioCache,
        provider_factory: Callable[[], TTSProvider],
        default_voice_id: str = DEFAULT_VOICE_ID,
        coalesce: bool = False,
    ) -> None:
        """Initialize the gateway.

        Args:
            cache: Audio cache owned by the composition root
            provider_factory: Zero-argument callable building the provider.
                Called lazily on the first cache miss; may raise TTSAuthError.
            default_voice_id: Voice used when requests omit voice_id
            coalesce: Share one upstream call between concurrent misses
                for the same key
        """
        self.cache = cache
        self.default_voice_id = default_voice_id
        self.coalesce = coalesce
        self._provider_factory = provider_factory
        self._provider: TTSProvider | None = None
        self._in_flight: dict[CacheKey, asyncio.Task[bytes]] = {}
        self._tasks: set[asyncio.Task[bytes]] = set()

    async def synthesize(self, payload: Any) -> SpeechResult:
        """Return audio for a decoded `{text, voice_id?}` request body.

        Args:
            payload: Decoded JSON request body

        Returns:
            SpeechResult with the audio buffer

        Raises:
            InvalidInput: If text is missing or blank
            Misconfigured: If the provider credential is absent
            UpstreamError: If the provider call fails
            InternalError: On any other failure
        """
        request = SpeechRequest.from_payload(payload, self.default_voice_id)
        key = self.cache.make_key(request.voice_id, request.text)

        cached = self.cache.get(key)
        if cached is not None:
            return SpeechResult(audio=cached, voice_id=request.voice_id, cached=True)

        provider = self._get_provider()

        task = self._in_flight.get(key) if self.coalesce else None
        if task is None:
            task = self._start(key, provider, request)
        else:
            logger.debug(f"Joining in-flight synthesis for voice {key.voice_id}")
        audio = await asyncio.shield(task)

        return SpeechResult(audio=audio, voice_id=request.voice_id, cached=False)

    def is_configured(self) -> bool:
        """Return True if a provider could be built (credential present)."""
        try:
            self._get_provider()
        except (Misconfigured, InternalError):
            return False
        return True

    def _get_provider(self) -> TTSProvider:
        if self._provider is None:
            try:
                self._provider = self._provider_factory()
            except TTSAuthError as e:
                logger.warning(f"Speech provider unavailable: {e}")
                raise Misconfigured(MISSING_KEY_MESSAGE) from e
            except Exception as e:
                logger.error(f"Failed to create speech provider: {e!r}")
                raise InternalError(SPEECH_FAILURE_MESSAGE) from e
        return self._provider

    def _start(
        self, key: CacheKey, provider: TTSProvider, request: SpeechRequest
    ) -> "asyncio.Task[bytes]":
        task = asyncio.create_task(self._synthesize_and_store(key, provider, request))
        # The loop only keeps weak references to tasks.
        self._tasks.add(task)
        if self.coalesce:
            self._in_flight[key] = task
        task.add_done_callback(lambda done: self._finish(key, done))
        return task

    def _finish(self, key: CacheKey, task: "asyncio.Task[bytes]") -> None:
        self._tasks.discard(task)
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Callers may have gone away; mark the failure as retrieved.
        if not task.cancelled():
            task.exception()

    async def _synthesize_and_store(
        self, key: CacheKey, provider: TTSProvider, request: SpeechRequest
    ) -> bytes:
        try:
            audio = await provider.synthesize(request.text, request.voice_id)
        except TTSError as e:
            logger.error(f"TTS Error: {e}")
            raise UpstreamError(SPEECH_FAILURE_MESSAGE) from e
        except Exception as e:
            logger.error(f"Unexpected TTS failure: {e!r}")
            raise InternalError(SPEECH_FAILURE_MESSAGE) from e

        if not self.cache.put(key, audio):
            logger.info("Speech cache full, returning uncached audio")
        return audio
