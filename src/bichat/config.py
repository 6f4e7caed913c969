"""Configuration management for bichat.

Loads configuration from ~/.config/bichat/config.toml (or $BICHAT_CONFIG).
Priority chain: CLI flags > env vars > config file > built-in defaults.
"""

import os
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_DIR = Path.home() / ".config" / "bichat"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = """\
# bichat configuration

[speech]
# Speech provider (registered providers: "elevenlabs")
provider = "elevenlabs"

# Voice used when a request omits voice_id
voice = "pNInz6obpgDQGcFmaJgB"

# Share one upstream call between concurrent identical requests
coalesce = false

[cache]
# Maximum number of cached audio clips; new clips are not cached once full
max_entries = 50

# Seconds before a cached clip expires
ttl_seconds = 300

# Leading characters of text used in the cache key (0 = whole text)
key_prefix_chars = 100

[bi]
# Remote BI query endpoint
endpoint = "http://52.3.202.231:8080/bi/query"

# Upstream timeout in seconds (uncomment to enable, unset waits indefinitely)
# timeout = 60

[http]
# Bind address: "127.0.0.1" = localhost only, "0.0.0.0" = allow LAN access
host = "127.0.0.1"
port = 8000

# API keys are read from environment variables, not this file:
#   ELEVENLABS_API_KEY  - ElevenLabs speech synthesis
"""


@dataclass(frozen=True)
class SpeechConfig:
    """Speech provider configuration."""

    provider: str
    voice: str
    coalesce: bool


@dataclass(frozen=True)
class CacheConfig:
    """Speech cache configuration."""

    max_entries: int
    ttl_seconds: float
    key_prefix_chars: int


@dataclass(frozen=True)
class BIConfig:
    """BI backend configuration."""

    endpoint: str
    timeout: float | None


@dataclass(frozen=True)
class HTTPConfig:
    """HTTP server configuration."""

    host: str
    port: int


@dataclass(frozen=True)
class BichatConfig:
    """Top-level bichat configuration."""

    speech: SpeechConfig
    cache: CacheConfig
    bi: BIConfig
    http: HTTPConfig


REQUIRED_KEYS = {
    "speech": ("provider", "voice"),
    "cache": ("max_entries", "ttl_seconds"),
    "bi": ("endpoint",),
    "http": ("host", "port"),
}

_cached_config: BichatConfig | None = None


def get_config_path() -> Path:
    """Return the config file path, honoring BICHAT_CONFIG."""
    override = os.getenv("BICHAT_CONFIG")
    return Path(override) if override else CONFIG_PATH


def generate_config(path: Path | None = None) -> Path:
    """Write the default config file and return its path."""
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def _missing_keys(data: dict[str, Any]) -> list[str]:
    missing = []
    for section, keys in REQUIRED_KEYS.items():
        values = data.get(section, {})
        missing.extend(f"{section}.{key}" for key in keys if key not in values)
    return missing


def _as_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{name} must be true or false, got {value!r}")
    return value


def parse_config(data: dict[str, Any]) -> BichatConfig:
    """Build a validated BichatConfig from parsed TOML with env overrides.

    Args:
        data: Parsed TOML document

    Returns:
        Validated BichatConfig

    Raises:
        SystemExit: If required values are missing or malformed
    """
    missing = _missing_keys(data)
    if missing:
        print(
            f"Missing required config values: {', '.join(missing)}",
            file=sys.stderr,
        )
        print(
            f"Edit {get_config_path()} or delete it to use defaults.", file=sys.stderr
        )
        raise SystemExit(1)

    speech = data["speech"]
    cache = data["cache"]
    bi = data["bi"]
    http_cfg = data["http"]

    # Env vars override config file values
    port_str = os.getenv("BICHAT_HTTP_PORT", str(http_cfg["port"]))
    timeout = bi.get("timeout")
    coalesce = speech.get("coalesce", False)

    try:
        return BichatConfig(
            speech=SpeechConfig(
                provider=os.getenv("BICHAT_PROVIDER", speech["provider"]),
                voice=os.getenv("BICHAT_VOICE", speech["voice"]),
                coalesce=_as_bool("speech.coalesce", coalesce),
            ),
            cache=CacheConfig(
                max_entries=int(cache["max_entries"]),
                ttl_seconds=float(cache["ttl_seconds"]),
                key_prefix_chars=int(cache.get("key_prefix_chars", 100)),
            ),
            bi=BIConfig(
                endpoint=os.getenv("BICHAT_BI_ENDPOINT", bi["endpoint"]),
                timeout=float(timeout) if timeout is not None else None,
            ),
            http=HTTPConfig(
                host=os.getenv("BICHAT_HTTP_HOST", http_cfg["host"]),
                port=int(port_str),
            ),
        )
    except (TypeError, ValueError) as e:
        print(f"Invalid config value: {e}", file=sys.stderr)
        raise SystemExit(1) from e


def load_config() -> BichatConfig:
    """Load configuration from the config file, or defaults if none exists.

    Returns:
        Loaded and validated BichatConfig (cached after the first call).

    Raises:
        SystemExit: If the config file is invalid.
    """
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    path = get_config_path()
    if path.exists():
        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                print(f"Invalid config file {path}: {e}", file=sys.stderr)
                raise SystemExit(1) from e
    else:
        data = tomllib.loads(DEFAULT_CONFIG)

    _cached_config = parse_config(data)
    return _cached_config


def reset_config() -> None:
    """Forget the cached configuration so the next load re-reads it."""
    global _cached_config
    _cached_config = None
