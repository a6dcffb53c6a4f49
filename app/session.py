"""Haiku request orchestration for a single widget session."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Protocol

from app.config import Settings
from app.exceptions import GenerationError, ThemeValidationError
from app.models import GenerationStatus, HaikuSource, HaikuState
from app.services.fallback import FallbackGenerator

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Please enter a word or theme for your haiku."
GENERIC_FAILURE_MESSAGE = "Failed to generate haiku. Please try again."

PROMPT_TEMPLATE = (
    'Write a traditional haiku (5-7-5 syllables) about "{theme}".\n'
    "Return only the haiku, with each line on a separate line.\n"
    "Make it beautiful and evocative."
)

StateListener = Callable[[HaikuState], Awaitable[None]]
Sleep = Callable[[float], Awaitable[None]]


class HaikuGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


def build_prompt(theme: str) -> str:
    return PROMPT_TEMPLATE.format(theme=theme)


def validate_theme(raw: str, max_length: int | None = None) -> str:
    """Return the trimmed theme or raise :class:`ThemeValidationError`."""

    theme = raw.strip()
    if not theme:
        raise ThemeValidationError(VALIDATION_MESSAGE)
    if max_length is not None and len(theme) > max_length:
        raise ThemeValidationError(f"Theme must be at most {max_length} characters.")
    return theme


class HaikuSession:
    """Holds one user's widget state and runs generation attempts.

    ``generator`` is the remote model; pass ``None`` when no API key is
    configured and every attempt is served from the local pool after
    ``settings.fallback_delay`` seconds. ``on_start`` is awaited with a
    snapshot of the state as soon as an attempt goes in progress, so a
    client can disable its controls before the remote call returns.
    """

    def __init__(
        self,
        settings: Settings,
        generator: HaikuGenerator | None = None,
        fallback: FallbackGenerator | None = None,
        sleep: Sleep = asyncio.sleep,
        on_start: StateListener | None = None,
    ) -> None:
        self._settings = settings
        self._generator = generator
        self._fallback = fallback or FallbackGenerator()
        self._sleep = sleep
        self.on_start = on_start
        self._state = HaikuState()

    @property
    def state(self) -> HaikuState:
        return self._state.model_copy()

    def set_input(self, text: str) -> None:
        self._state.theme = text

    def select_sample(self, word: str) -> None:
        self._state.theme = word
        self._state.error = ""

    def toggle_info(self) -> None:
        self._state.show_info = not self._state.show_info

    async def generate(self) -> HaikuState:
        """Run one attempt for the current theme and return the new state."""

        try:
            theme = validate_theme(self._state.theme, self._settings.max_theme_length)
        except ThemeValidationError as exc:
            self._state.error = str(exc)
            return self.state

        async with self._in_progress():
            if self._generator is None:
                await self._sleep(self._settings.fallback_delay)
                self._use_fallback(theme)
            else:
                await self._generate_remote(self._generator, theme)

        return self.state

    @asynccontextmanager
    async def _in_progress(self) -> AsyncIterator[None]:
        self._state.error = ""
        self._state.status = GenerationStatus.IN_PROGRESS
        try:
            if self.on_start is not None:
                await self.on_start(self.state)
            yield
        finally:
            self._state.status = GenerationStatus.DONE

    async def _generate_remote(self, generator: HaikuGenerator, theme: str) -> None:
        try:
            text = await generator.generate(build_prompt(theme))
        except GenerationError as exc:
            if exc.is_rate_limited:
                logger.info("Rate limited; serving fallback haiku", extra={"theme": theme})
            else:
                logger.warning(
                    "Haiku generation failed; serving fallback haiku",
                    extra={"theme": theme, "reason": exc.reason.value},
                )
                self._state.error = exc.message or GENERIC_FAILURE_MESSAGE
            self._use_fallback(theme)
            return
        except Exception:
            logger.exception(
                "Unexpected haiku generation error; serving fallback haiku",
                extra={"theme": theme},
            )
            self._state.error = GENERIC_FAILURE_MESSAGE
            self._use_fallback(theme)
            return

        self._state.haiku = text.strip()
        self._state.source = HaikuSource.MODEL

    def _use_fallback(self, theme: str) -> None:
        self._state.haiku = self._fallback.generate(theme)
        self._state.source = HaikuSource.FALLBACK
