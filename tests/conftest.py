"""Shared test doubles: a scripted in-process LLM provider."""

from collections.abc import Callable
from pathlib import Path

import pytest

from src.core.config import LLMConfig
from src.llm.base import LLMProvider
from src.pipeline.scoring_client import ScoringClient

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# A handler gets (prompt, system) and returns the reply text or raises.
ReplyHandler = Callable[[str, str | None], str]


class StubProvider(LLMProvider):
    """Answers every prompt through a handler and records the calls."""

    def __init__(self, handler: ReplyHandler) -> None:
        self._handler = handler
        self.calls: list[dict[str, object]] = []

    @property
    def provider_id(self) -> str:
        return "stub"

    @property
    def default_model(self) -> str:
        return "stub-model"

    @property
    def env_var(self) -> None:
        return None

    async def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        model: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.1,
    ) -> str:
        self.calls.append({
            "prompt": prompt,
            "system": system,
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        return self._handler(prompt, system)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def make_client() -> Callable[..., ScoringClient]:
    """Factory: ``make_client(handler, **llm_overrides)`` -> ScoringClient."""

    def _make(handler: ReplyHandler, **overrides: object) -> ScoringClient:
        config = LLMConfig(provider="stub", **overrides)  # type: ignore[arg-type]
        return ScoringClient(StubProvider(handler), config)

    return _make
