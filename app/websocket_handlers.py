"""WebSocket handlers for the application."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Annotated

from fastapi import Depends, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from app.config import Settings, get_settings
from app.dependencies import get_haiku_session
from app.models import SAMPLE_WORDS, ErrorResponse, HaikuState, MessageIn
from app.session import HaikuSession

logger = logging.getLogger(__name__)


async def websocket_endpoint(
    websocket: WebSocket,
    session: Annotated[HaikuSession, Depends(get_haiku_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Widget event loop: one event in, one state frame out.

    A ``generate`` event additionally pushes an ``in_progress`` frame before
    the attempt runs. Events are handled strictly one at a time.
    """

    await websocket.accept()
    should_close = True
    client = _client_repr(websocket)
    logger.info("WebSocket connection accepted", extra={"client": client})

    async def push_state(state: HaikuState) -> None:
        await websocket.send_text(state.model_dump_json())

    session.on_start = push_state

    try:
        while True:
            try:
                message = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=settings.ws_inactivity_timeout,
                )
            except asyncio.TimeoutError:
                logger.info("WebSocket inactive; closing", extra={"client": client})
                await websocket.close(code=status.WS_1000_NORMAL_CLOSURE)
                should_close = False
                break
            except WebSocketDisconnect:
                logger.info("WebSocket client disconnected", extra={"client": client})
                should_close = False
                break

            try:
                event = MessageIn.model_validate_json(message)
            except ValidationError:
                await _send_error(
                    websocket,
                    ErrorResponse(error="invalid_payload", detail="Invalid event payload."),
                )
                continue

            if event.type == "input":
                session.set_input(event.text)
            elif event.type == "sample":
                if event.text not in SAMPLE_WORDS:
                    await _send_error(
                        websocket,
                        ErrorResponse(
                            error="validation_error",
                            detail=f"Unknown sample word: {event.text!r}.",
                        ),
                    )
                    continue
                session.select_sample(event.text)
            elif event.type == "toggle_info":
                session.toggle_info()
            else:
                state = await session.generate()
                logger.info(
                    "Generation attempt finished",
                    extra={
                        "client": client,
                        "status": state.status.value,
                        "source": state.source.value if state.source else None,
                        "has_error": bool(state.error),
                    },
                )

            await push_state(session.state)
    finally:
        if should_close and websocket.application_state == WebSocketState.CONNECTED:
            with suppress(RuntimeError, WebSocketDisconnect):
                await websocket.close()
        logger.info("WebSocket connection closed", extra={"client": client})


async def _send_error(websocket: WebSocket, error: ErrorResponse) -> None:
    """Send a structured error frame."""

    await websocket.send_text(error.model_dump_json())


def _client_repr(websocket: WebSocket) -> str:
    """Render the remote client for logging purposes."""

    client = websocket.client
    if client is None:
        return "unknown"
    return f"{client.host}:{client.port}"
