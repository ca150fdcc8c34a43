"""OpenAI LLM provider."""

import logging
from typing import Any

from src.core.errors import NetworkError, RemoteTimeout, classify_status
from src.llm.base import LLMProvider

logger = logging.getLogger(__name__)


def import_openai() -> Any:
    try:
        import openai
    except ImportError:
        msg = (
            "openai is required for LLM analysis. "
            "Install with: pip install 'cv-screener[openai]'"
        )
        raise ImportError(msg) from None
    return openai


async def chat_completion(
    openai_module: Any,
    client: Any,
    *,
    model: str,
    prompt: str,
    system: str | None,
    max_tokens: int,
    temperature: float,
) -> str:
    """Run one chat completion against an OpenAI-compatible endpoint.

    SDK errors are mapped onto the remote error taxonomy.
    """
    messages: list[dict[str, str]] = []
    if system is not None:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    try:
        response = await client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
    except openai_module.APITimeoutError as e:
        raise RemoteTimeout(str(e)) from e
    except openai_module.APIConnectionError as e:
        raise NetworkError(str(e)) from e
    except openai_module.APIStatusError as e:
        raise classify_status(e.status_code, str(e.message), getattr(e, "code", None)) from e

    return response.choices[0].message.content or ""


class OpenAIProvider(LLMProvider):
    """LLM provider using the OpenAI API."""

    def __init__(self) -> None:
        self._client: Any = None

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    @property
    def key_prefixes(self) -> tuple[str, ...]:
        return ("sk-",)

    async def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        model: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.1,
    ) -> str:
        api_key = self.resolve_api_key()
        openai = import_openai()

        if self._client is None:
            self._client = openai.AsyncOpenAI(api_key=api_key)
        use_model = model or self.default_model

        logger.debug("Sending prompt to OpenAI API (%s)...", use_model)
        return await chat_completion(
            openai,
            self._client,
            model=use_model,
            prompt=prompt,
            system=system,
            max_tokens=max_tokens,
            temperature=temperature,
        )
