"""Request gateways between the dashboard and external services."""

from .bi import DEFAULT_BI_ENDPOINT, BIQueryGateway
from .errors import (
    GatewayError,
    InternalError,
    InvalidInput,
    Misconfigured,
    NoUpstreamResponse,
    UpstreamError,
)
from .models import DEFAULT_VOICE_ID, SpeechRequest, SpeechResult
from .speech import SpeechSynthesisGateway

__all__ = [
    "DEFAULT_BI_ENDPOINT",
    "DEFAULT_VOICE_ID",
    "BIQueryGateway",
    "GatewayError",
    "InternalError",
    "InvalidInput",
    "Misconfigured",
    "NoUpstreamResponse",
    "SpeechRequest",
    "SpeechResult",
    "SpeechSynthesisGateway",
    "UpstreamError",
]
