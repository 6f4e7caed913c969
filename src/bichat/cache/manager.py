"""In-memory audio cache for the speech-synthesis gateway.

Bounded by entry count and expired by age. Expiry is lazy: stale entries
are dropped when read and purged before every store, so no background
timers are needed.
"""

import logging
import time
from collections.abc import Callable

from .models import CacheEntry, CacheKey

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 50
DEFAULT_TTL_SECONDS = 300.0
DEFAULT_KEY_PREFIX_CHARS = 100


class AudioCache:
    """Process-wide cache of synthesized audio keyed by voice and text prefix.

    Once max_entries live entries are held, new audio is not stored until
    older entries expire. There is no LRU eviction.

    Example:
        cache = AudioCache(max_entries=50, ttl_seconds=300)
        key = cache.make_key("pNInz6obpgDQGcFmaJgB", "Revenue grew 4%")

        audio = cache.get(key)
        if audio is None:
            audio = await provider.synthesize("Revenue grew 4%", "pNInz6obpgDQGcFmaJgB")
            cache.put(key, audio)
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        key_prefix_chars: int = DEFAULT_KEY_PREFIX_CHARS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty cache.

        Args:
            max_entries: Maximum number of live entries (0 disables storing)
            ttl_seconds: Lifetime of each entry in seconds
            key_prefix_chars: Characters of text used in the key (0 = whole text)
            clock: Monotonic time source, injectable for tests

        Raises:
            ValueError: If any limit is out of range
        """
        if max_entries < 0:
            raise ValueError(f"max_entries must be >= 0, got {max_entries}")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {ttl_seconds}")
        if key_prefix_chars < 0:
            raise ValueError(f"key_prefix_chars must be >= 0, got {key_prefix_chars}")

        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.key_prefix_chars = key_prefix_chars
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}

    def make_key(self, voice_id: str, text: str) -> CacheKey:
        """Build the cache key for a synthesis request.

        Texts sharing the same leading key_prefix_chars characters map to
        the same key for a given voice.
        """
        if self.key_prefix_chars:
            text = text[: self.key_prefix_chars]
        return CacheKey(voice_id=voice_id, text_prefix=text)

    def get(self, key: CacheKey) -> bytes | None:
        """Return cached audio for key, or None on a miss or stale entry."""
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for voice {key.voice_id}")
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            logger.debug(f"Cache entry expired for voice {key.voice_id}")
            return None

        logger.debug(
            f"Cache hit for voice {key.voice_id}: '{key.text_prefix[:50]}' "
            f"({len(entry.audio)} bytes)"
        )
        return entry.audio

    def put(self, key: CacheKey, audio: bytes) -> bool:
        """Store audio under key if there is room.

        Args:
            key: Key from make_key()
            audio: Audio buffer to cache

        Returns:
            True if stored, False if the cache is full
        """
        self.purge_expired()

        if len(self._entries) >= self.max_entries:
            logger.debug(
                f"Cache full ({len(self._entries)}/{self.max_entries}), "
                f"not storing audio for voice {key.voice_id}"
            )
            return False

        now = self._clock()
        self._entries[key] = CacheEntry(
            audio=audio, created_at=now, expires_at=now + self.ttl_seconds
        )
        logger.debug(
            f"Cached {len(audio)} bytes for voice {key.voice_id} "
            f"({len(self._entries)}/{self.max_entries} entries)"
        )
        return True

    def purge_expired(self) -> int:
        """Remove every stale entry and return how many were removed."""
        now = self._clock()
        stale = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"Purged {len(stale)} expired cache entries")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, CacheKey):
            return False
        entry = self._entries.get(key)
        return entry is not None and not entry.is_expired(self._clock())
