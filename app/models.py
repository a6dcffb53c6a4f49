"""Pydantic models shared across application layers."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, computed_field

SAMPLE_WORDS: tuple[str, ...] = (
    "sunset",
    "ocean",
    "dream",
    "hope",
    "love",
    "rain",
    "spring",
    "joy",
)

INFO_LINES: tuple[str, ...] = (
    "Each poem follows 5-7-5 syllable pattern",
    "Enter any word, emotion, or concept",
    'Try words like "sunset", "love", "dream", etc.',
)


class GenerationStatus(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class HaikuSource(str, Enum):
    MODEL = "model"
    FALLBACK = "fallback"


class HaikuState(BaseModel):
    """Everything the widget needs to render itself."""

    theme: str = ""
    haiku: str = ""
    error: str = ""
    source: HaikuSource | None = None
    status: GenerationStatus = GenerationStatus.IDLE
    show_info: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_generating(self) -> bool:
        return self.status is GenerationStatus.IN_PROGRESS

    @computed_field  # type: ignore[prop-decorator]
    @property
    def input_disabled(self) -> bool:
        return self.is_generating

    @computed_field  # type: ignore[prop-decorator]
    @property
    def submit_disabled(self) -> bool:
        return self.is_generating or not self.theme.strip()


class MessageIn(BaseModel):
    """Incoming WebSocket event."""

    type: Literal["input", "sample", "generate", "toggle_info"]
    text: str = ""


class GenerateRequest(BaseModel):
    theme: str = Field(description="Word or theme for the haiku.")


class HaikuResponse(BaseModel):
    """Result of a one-shot generation request."""

    theme: str
    haiku: str
    error: str | None = None
    source: HaikuSource


class SamplesResponse(BaseModel):
    samples: list[str] = Field(default_factory=lambda: list(SAMPLE_WORDS))
    info: list[str] = Field(default_factory=lambda: list(INFO_LINES))


class ErrorResponse(BaseModel):
    """Error frame returned to clients."""

    error: str
    detail: str | None = None
