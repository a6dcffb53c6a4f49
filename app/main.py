"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Annotated, AsyncIterator

import httpx
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings, get_settings
from app.dependencies import get_haiku_session
from app.exceptions import ThemeValidationError
from app.logging import configure_logging
from app.models import ErrorResponse, GenerateRequest, HaikuResponse, SamplesResponse
from app.session import HaikuSession, validate_theme
from app.websocket_handlers import websocket_endpoint


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create application resources during startup and clean up on shutdown."""

    async with httpx.AsyncClient() as client:
        app.state.http_client = client
        yield
        del app.state.http_client


def create_app() -> FastAPI:
    """Application factory."""

    settings = get_settings()
    configure_logging(settings.log_level, settings.environment, settings.gemini_model)

    app = FastAPI(
        title="Haiku Generator",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    async def version(settings: Settings = Depends(get_settings)) -> dict[str, str]:
        return {"version": __version__, "environment": settings.environment}

    @app.get("/samples")
    async def samples() -> SamplesResponse:
        return SamplesResponse()

    @app.post(
        "/haiku",
        response_model=HaikuResponse,
        responses={422: {"model": ErrorResponse}},
    )
    async def generate_haiku(
        request: GenerateRequest,
        session: Annotated[HaikuSession, Depends(get_haiku_session)],
        settings: Annotated[Settings, Depends(get_settings)],
    ) -> HaikuResponse | JSONResponse:
        try:
            theme = validate_theme(request.theme, settings.max_theme_length)
        except ThemeValidationError as exc:
            return JSONResponse(
                status_code=422,
                content=ErrorResponse(error="validation_error", detail=str(exc)).model_dump(),
            )

        session.set_input(theme)
        state = await session.generate()
        return HaikuResponse(
            theme=theme,
            haiku=state.haiku,
            error=state.error or None,
            source=state.source,
        )

    app.add_api_websocket_route("/ws", websocket_endpoint)

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn on the configured port."""

    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port, log_config=None)


if __name__ == "__main__":  # pragma: no cover
    run()
