"""Dependency providers for the FastAPI application."""

import httpx
from fastapi import Depends
from starlette.requests import HTTPConnection

from app.config import Settings, get_settings
from app.services.fallback import FallbackGenerator
from app.services.gemini_service import GeminiService
from app.session import HaikuSession


async def get_http_client(connection: HTTPConnection) -> httpx.AsyncClient:
    """Retrieve the shared AsyncClient from application state."""

    return connection.app.state.http_client  # type: ignore[return-value]


async def get_haiku_generator(
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> GeminiService | None:
    """Remote generator, or ``None`` when no API key is configured."""

    if not settings.api_configured:
        return None
    return GeminiService(client=client, settings=settings)


async def get_fallback_generator() -> FallbackGenerator:
    return FallbackGenerator()


async def get_haiku_session(
    settings: Settings = Depends(get_settings),
    generator: GeminiService | None = Depends(get_haiku_generator),
    fallback: FallbackGenerator = Depends(get_fallback_generator),
) -> HaikuSession:
    """A fresh session per request or WebSocket connection."""

    return HaikuSession(settings=settings, generator=generator, fallback=fallback)
