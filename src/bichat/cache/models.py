"""Data models for the synthesized-audio cache."""

from dataclasses import dataclass
from typing import NamedTuple


class CacheKey(NamedTuple):
    """Cache key for synthesized audio.

    Attributes:
        voice_id: Voice identifier used for synthesis
        text_prefix: Leading characters of the requested text
    """

    voice_id: str
    text_prefix: str


@dataclass(frozen=True)
class CacheEntry:
    """Cached audio buffer with its expiry deadline.

    Attributes:
        audio: Encoded audio returned by the provider
        created_at: Clock reading when the entry was stored
        expires_at: Clock reading after which the entry is stale
    """

    audio: bytes
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
