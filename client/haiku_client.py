"""Command-line client for the haiku WebSocket service."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import time
from typing import Any

import websockets

DEFAULT_URL = "ws://127.0.0.1:8000/ws"


async def receive_final_state(websocket: Any, timeout: float) -> dict[str, Any]:
    """Read frames until one is no longer in progress."""

    while True:
        frame = json.loads(await asyncio.wait_for(websocket.recv(), timeout=timeout))
        if "error" in frame and "status" not in frame:
            raise RuntimeError(frame.get("detail") or frame["error"])
        if frame["status"] != "in_progress":
            return frame


async def run_client(url: str, theme: str, timeout: float) -> int:
    """Send ``theme`` and print the resulting haiku. Returns an exit code."""

    logger = logging.getLogger("haiku_client")
    start = time.perf_counter()

    async with websockets.connect(url, ping_interval=None) as websocket:
        await websocket.send(json.dumps({"type": "input", "text": theme}))
        await receive_final_state(websocket, timeout)

        await websocket.send(json.dumps({"type": "generate"}))
        state = await receive_final_state(websocket, timeout)

    elapsed = time.perf_counter() - start
    logger.info("Received state (source=%s) in %.2fs", state.get("source"), elapsed)

    if state["error"]:
        logger.error("%s", state["error"])
    if not state["haiku"]:
        return 1

    print(state["haiku"])
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask the haiku service for a poem.")
    parser.add_argument("theme", help="Word or theme for the haiku.")
    parser.add_argument("--url", default=DEFAULT_URL, help="WebSocket URL (default: %(default)s)")
    parser.add_argument(
        "--timeout", type=float, default=60.0, help="Seconds to wait for each frame."
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
    try:
        code = asyncio.run(run_client(args.url, args.theme, args.timeout))
    except KeyboardInterrupt:  # pragma: no cover - manual usage only
        code = 130
    raise SystemExit(code)


if __name__ == "__main__":  # pragma: no cover
    main()
