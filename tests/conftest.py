"""Pytest configuration and fixtures for bichat tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from bichat.cache import AudioCache
from bichat.config import reset_config
from bichat.gateway import SpeechSynthesisGateway
from test_helpers import FakeClock, FakeTTSProvider

OVERRIDE_VARS = (
    "BICHAT_PROVIDER",
    "BICHAT_VOICE",
    "BICHAT_BI_ENDPOINT",
    "BICHAT_HTTP_HOST",
    "BICHAT_HTTP_PORT",
)


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch, tmp_path) -> Generator[Path]:
    """Point config loading at a per-test path and clear env overrides."""
    config_path = tmp_path / "config.toml"
    monkeypatch.setenv("BICHAT_CONFIG", str(config_path))
    for name in OVERRIDE_VARS:
        monkeypatch.delenv(name, raising=False)

    reset_config()
    yield config_path
    reset_config()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_provider() -> FakeTTSProvider:
    return FakeTTSProvider()


@pytest.fixture
def audio_cache(clock: FakeClock) -> AudioCache:
    return AudioCache(max_entries=50, ttl_seconds=300, clock=clock)


@pytest.fixture
def speech_gateway(
    audio_cache: AudioCache, fake_provider: FakeTTSProvider
) -> SpeechSynthesisGateway:
    return SpeechSynthesisGateway(audio_cache, lambda: fake_provider)
