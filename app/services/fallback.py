"""Local haiku pool used when the remote model is unavailable."""

from __future__ import annotations

import random
from typing import Protocol, Sequence

FALLBACK_TEMPLATES: tuple[str, ...] = (
    "{theme} whispers soft\nIn morning's gentle embrace\nPeace fills the warm air",
    "Dancing with {theme}\nNature's rhythm guides my heart\nMoments become gold",
    "{theme} speaks to me\nThrough silence of the old trees\nWisdom flows like streams",
)


class RandomSource(Protocol):
    def choice(self, seq: Sequence[str]) -> str: ...


class FallbackGenerator:
    """Fill one of a few fixed templates with the theme."""

    def __init__(
        self,
        rng: RandomSource | None = None,
        templates: Sequence[str] = FALLBACK_TEMPLATES,
    ) -> None:
        self._rng = rng or random.Random()
        self._templates = tuple(templates)

    @property
    def templates(self) -> tuple[str, ...]:
        return self._templates

    def generate(self, theme: str) -> str:
        return self._rng.choice(self._templates).format(theme=theme)
