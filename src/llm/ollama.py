"""Ollama local LLM provider (OpenAI-compatible API)."""

import logging
from typing import Any

from src.llm.base import LLMProvider
from src.llm.openai import chat_completion, import_openai

logger = logging.getLogger(__name__)

_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaProvider(LLMProvider):
    """LLM provider using a local Ollama instance via OpenAI-compatible API."""

    def __init__(self, base_url: str = _OLLAMA_BASE_URL) -> None:
        self._base_url = base_url
        self._client: Any = None

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def default_model(self) -> str:
        return "llama3"

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
        openai = import_openai()

        if self._client is None:
            self._client = openai.AsyncOpenAI(base_url=self._base_url, api_key="ollama")
        use_model = model or self.default_model

        logger.debug("Sending prompt to Ollama (%s)...", use_model)
        return await chat_completion(
            openai,
            self._client,
            model=use_model,
            prompt=prompt,
            system=system,
            max_tokens=max_tokens,
            temperature=temperature,
        )
