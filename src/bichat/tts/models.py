"""TTS data models with validation."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class VoiceSettings:
    """Voice generation settings.

    Defaults trade fidelity for generation speed: lower stability,
    no style exaggeration and no speaker boost.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        style: Voice style exaggeration (0.0-1.0)
        use_speaker_boost: Whether to use speaker boost
    """

    stability: float = 0.5
    similarity_boost: float = 0.8
    style: float = 0.0
    use_speaker_boost: bool = False

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.0 <= self.style <= 1.0:
            raise ValueError("style must be between 0.0 and 1.0")


@dataclass(frozen=True)
class SynthesisOptions:
    """Request parameters sent with every synthesis call.

    Args:
        model_id: Provider model, the turbo model by default
        output_format: Encoded audio format (codec_samplerate_bitrate)
        optimize_streaming_latency: Latency optimization level (0-4)
        voice_settings: Per-request voice settings
    """

    model_id: str = "eleven_turbo_v2"
    output_format: str = "mp3_22050_32"
    optimize_streaming_latency: int = 4
    voice_settings: VoiceSettings = field(default_factory=VoiceSettings)

    def __post_init__(self) -> None:
        """Validate synthesis options."""
        if not self.model_id or not self.model_id.strip():
            raise ValueError("model_id cannot be empty")
        if not 0 <= self.optimize_streaming_latency <= 4:
            raise ValueError("optimize_streaming_latency must be between 0 and 4")
