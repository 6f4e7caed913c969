"""HTTP server exposing the speech and BI gateways.

create_app() is the composition root: it builds the AudioCache, the
speech provider factory and both gateways from configuration, unless the
caller injects ready-made gateways (tests do).
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from . import __version__
from .cache import AudioCache
from .config import BichatConfig, load_config
from .gateway import (
    BIQueryGateway,
    GatewayError,
    InternalError,
    InvalidInput,
    SpeechSynthesisGateway,
)
from .providers import ProviderRegistry

logger = logging.getLogger(__name__)


def build_speech_gateway(config: BichatConfig) -> SpeechSynthesisGateway:
    """Build the speech gateway and its cache from configuration."""
    cache = AudioCache(
        max_entries=config.cache.max_entries,
        ttl_seconds=config.cache.ttl_seconds,
        key_prefix_chars=config.cache.key_prefix_chars,
    )
    provider_class = ProviderRegistry.get(config.speech.provider)
    return SpeechSynthesisGateway(
        cache=cache,
        provider_factory=provider_class,
        default_voice_id=config.speech.voice,
        coalesce=config.speech.coalesce,
    )


def build_bi_gateway(config: BichatConfig) -> BIQueryGateway:
    """Build the BI gateway from configuration."""
    return BIQueryGateway(endpoint=config.bi.endpoint, timeout=config.bi.timeout)


async def _read_json(request: Request, error: type[GatewayError]) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        logger.warning(f"Rejected unreadable body on {request.url.path}: {e}")
        raise error("Request body must be valid JSON") from e


async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    """Render a GatewayError as its JSON error body."""
    try:
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)
    except ValueError as e:
        # Upstream details may hold NaN/Infinity, which strict JSON rejects
        logger.error(f"Dropping unrenderable error details: {e}")
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)


def create_app(
    config: BichatConfig | None = None,
    speech_gateway: SpeechSynthesisGateway | None = None,
    bi_gateway: BIQueryGateway | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Configuration (loaded from disk/env if omitted)
        speech_gateway: Pre-built speech gateway
        bi_gateway: Pre-built BI gateway

    Returns:
        Configured FastAPI app
    """
    config = config or load_config()
    speech = speech_gateway or build_speech_gateway(config)
    bi = bi_gateway or build_bi_gateway(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"bichat {__version__} starting")
        logger.info(f"BI endpoint: {bi.endpoint}")
        logger.info(
            f"Speech cache: {speech.cache.max_entries} entries, "
            f"{speech.cache.ttl_seconds:g}s TTL"
        )
        yield
        await bi.aclose()
        logger.info("bichat stopped")

    app = FastAPI(title="bichat", version=__version__, lifespan=lifespan)
    app.state.speech_gateway = speech
    app.state.bi_gateway = bi

    # Dashboards are served from other origins during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GatewayError, handle_gateway_error)

    async def speech_synthesis(request: Request) -> Response:
        payload = await _read_json(request, InvalidInput)
        result = await speech.synthesize(payload)
        return Response(
            content=result.audio,
            media_type="audio/mpeg",
            headers={
                "Cache-Control": f"public, max-age={int(speech.cache.ttl_seconds)}",
                "X-Cache": "HIT" if result.cached else "MISS",
            },
        )

    async def bi_query(request: Request) -> JSONResponse:
        payload = await _read_json(request, InternalError)
        data = await bi.query(payload)
        try:
            return JSONResponse(data)
        except ValueError as e:
            logger.error(f"BI response is not valid JSON output: {e}")
            raise InternalError("Internal server error") from e

    async def status() -> dict[str, Any]:
        speech.cache.purge_expired()
        return {
            "status": "ok",
            "version": __version__,
            "speech_cache": {
                "entries": len(speech.cache),
                "max_entries": speech.cache.max_entries,
                "ttl_seconds": speech.cache.ttl_seconds,
            },
            "speech_configured": speech.is_configured(),
        }

    for path in ("/speech-synthesis", "/api/tts"):
        app.add_api_route(path, speech_synthesis, methods=["POST"])
    for path in ("/bi-query", "/api/bi/query"):
        app.add_api_route(path, bi_query, methods=["POST"])
    app.add_api_route("/status", status, methods=["GET"])

    return app


def run(host: str | None = None, port: int | None = None) -> None:
    """Run the server under uvicorn using configured defaults."""
    import uvicorn

    config = load_config()
    app = create_app(config)
    uvicorn.run(
        app,
        host=host or config.http.host,
        port=port or config.http.port,
        log_config=None,
    )


__all__ = ["build_bi_gateway", "build_speech_gateway", "create_app", "run"]
