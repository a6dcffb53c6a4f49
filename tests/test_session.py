import httpx
import pytest

from app.config import Settings
from app.exceptions import FailureReason, GenerationError
from app.models import GenerationStatus, HaikuSource, HaikuState
from app.services.fallback import FALLBACK_TEMPLATES, FallbackGenerator
from app.services.gemini_service import GeminiService
from app.session import (
    GENERIC_FAILURE_MESSAGE,
    VALIDATION_MESSAGE,
    HaikuSession,
    build_prompt,
)


class FixedChoice:
    def __init__(self, index: int = 0) -> None:
        self.index = index

    def choice(self, seq):
        return seq[self.index]


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class DummyGenerator:
    def __init__(self, reply: str = "Line1\nLine2\nLine3", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def _fallbacks(theme: str) -> set[str]:
    return {template.format(theme=theme) for template in FALLBACK_TEMPLATES}


def make_session(settings: Settings, generator=None, **kwargs) -> HaikuSession:
    kwargs.setdefault("sleep", RecordingSleep())
    return HaikuSession(settings, generator=generator, **kwargs)


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["", "   ", "\t\n "])
async def test_blank_theme_is_rejected(settings: Settings, raw: str) -> None:
    generator = DummyGenerator()
    sleep = RecordingSleep()
    session = make_session(settings, generator, sleep=sleep)
    session.set_input(raw)

    state = await session.generate()

    assert state.error == VALIDATION_MESSAGE
    assert state.haiku == ""
    assert state.status is GenerationStatus.IDLE
    assert generator.prompts == []
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_overlong_theme_is_rejected(settings: Settings) -> None:
    generator = DummyGenerator()
    session = make_session(settings, generator)
    session.set_input("x" * (settings.max_theme_length + 1))

    state = await session.generate()

    assert state.error == f"Theme must be at most {settings.max_theme_length} characters."
    assert generator.prompts == []


@pytest.mark.asyncio
async def test_without_api_key_serves_fallback_after_delay(settings: Settings) -> None:
    sleep = RecordingSleep()
    session = make_session(settings, sleep=sleep)
    session.set_input("  sunset ")

    state = await session.generate()

    assert sleep.calls == [1.5]
    assert "sunset" in state.haiku
    assert state.haiku in _fallbacks("sunset")
    assert state.error == ""
    assert state.source is HaikuSource.FALLBACK
    assert state.status is GenerationStatus.DONE


@pytest.mark.asyncio
async def test_fallback_path_clears_previous_error(settings: Settings) -> None:
    session = make_session(settings)
    await session.generate()
    assert session.state.error == VALIDATION_MESSAGE

    session.set_input("rain")
    state = await session.generate()

    assert state.error == ""


@pytest.mark.asyncio
async def test_remote_success_replaces_error(api_settings: Settings) -> None:
    generator = DummyGenerator(reply="  Line1\nLine2\nLine3\n")
    session = make_session(api_settings, generator)
    await session.generate()
    assert session.state.error == VALIDATION_MESSAGE

    session.set_input("ocean")
    state = await session.generate()

    assert state.haiku == "Line1\nLine2\nLine3"
    assert state.error == ""
    assert state.source is HaikuSource.MODEL
    assert generator.prompts == [build_prompt("ocean")]


@pytest.mark.asyncio
async def test_remote_call_skips_simulated_delay(api_settings: Settings) -> None:
    sleep = RecordingSleep()
    session = make_session(api_settings, DummyGenerator(), sleep=sleep)
    session.set_input("joy")

    await session.generate()

    assert sleep.calls == []


@pytest.mark.asyncio
async def test_rate_limit_serves_fallback_silently(api_settings: Settings) -> None:
    error = GenerationError("Quota exceeded", status_code=429, reason=FailureReason.RATE_LIMITED)
    session = make_session(api_settings, DummyGenerator(error=error))
    session.set_input("dream")

    state = await session.generate()

    assert state.haiku in _fallbacks("dream")
    assert state.error == ""
    assert state.source is HaikuSource.FALLBACK


@pytest.mark.asyncio
async def test_generic_failure_shows_error_and_fallback(api_settings: Settings) -> None:
    error = GenerationError("Network error", reason=FailureReason.TRANSPORT)
    fallback = FallbackGenerator(rng=FixedChoice(2))
    session = make_session(api_settings, DummyGenerator(error=error), fallback=fallback)
    session.set_input("hope")

    state = await session.generate()

    assert state.error == "Network error"
    assert state.haiku == FALLBACK_TEMPLATES[2].format(theme="hope")
    assert state.source is HaikuSource.FALLBACK


@pytest.mark.asyncio
async def test_generic_failure_without_message_uses_default(api_settings: Settings) -> None:
    error = GenerationError("", reason=FailureReason.INVALID_RESPONSE)
    session = make_session(api_settings, DummyGenerator(error=error))
    session.set_input("love")

    state = await session.generate()

    assert state.error == GENERIC_FAILURE_MESSAGE
    assert "love" in state.haiku


@pytest.mark.asyncio
async def test_select_sample_sets_theme_and_clears_error(settings: Settings) -> None:
    generator = DummyGenerator()
    session = make_session(settings, generator)
    await session.generate()
    assert session.state.error == VALIDATION_MESSAGE

    session.select_sample("spring")

    state = session.state
    assert state.theme == "spring"
    assert state.error == ""
    assert state.haiku == ""
    assert state.status is GenerationStatus.IDLE
    assert generator.prompts == []


def test_toggle_info(settings: Settings) -> None:
    session = make_session(settings)

    session.toggle_info()
    assert session.state.show_info is True
    session.toggle_info()
    assert session.state.show_info is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "generator",
    [
        DummyGenerator(),
        DummyGenerator(error=GenerationError("Network error")),
        None,
    ],
)
async def test_controls_disabled_only_while_in_progress(api_settings: Settings, generator) -> None:
    seen: list[HaikuState] = []

    async def on_start(state: HaikuState) -> None:
        seen.append(state)

    session = make_session(api_settings, generator, on_start=on_start)
    session.set_input("sunset")
    assert not session.state.submit_disabled

    state = await session.generate()

    assert len(seen) == 1
    assert seen[0].status is GenerationStatus.IN_PROGRESS
    assert seen[0].input_disabled
    assert seen[0].submit_disabled
    assert not state.input_disabled
    assert not state.submit_disabled


@pytest.mark.asyncio
async def test_unexpected_error_serves_fallback_with_error(api_settings: Settings) -> None:
    session = make_session(api_settings, DummyGenerator(error=RuntimeError("boom")))
    session.set_input("rain")

    state = await session.generate()

    assert state.error == GENERIC_FAILURE_MESSAGE
    assert state.haiku in _fallbacks("rain")
    assert state.source is HaikuSource.FALLBACK
    assert state.status is GenerationStatus.DONE
    assert not state.is_generating


@pytest.mark.asyncio
async def test_non_ascii_api_key_serves_fallback() -> None:
    settings = Settings(_env_file=None, GEMINI_API_KEY="key’x")

    async def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        session = make_session(settings, GeminiService(client, settings))
        session.set_input("rain")
        state = await session.generate()

    assert state.error == GENERIC_FAILURE_MESSAGE
    assert state.haiku in _fallbacks("rain")
    assert state.status is GenerationStatus.DONE


def test_submit_disabled_for_blank_theme(settings: Settings) -> None:
    session = make_session(settings)

    session.set_input("  ")

    assert session.state.submit_disabled
    assert not session.state.input_disabled


def test_prompt_mentions_theme_and_form() -> None:
    prompt = build_prompt("autumn leaves")

    assert '"autumn leaves"' in prompt
    assert "5-7-5" in prompt
    assert "each line on a separate line" in prompt
