"""Anthropic Claude LLM provider."""

import logging
from typing import Any

from src.core.errors import NetworkError, RemoteTimeout, classify_status
from src.llm.base import LLMProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """LLM provider using the Anthropic Claude API."""

    def __init__(self) -> None:
        self._client: Any = None

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    @property
    def key_prefixes(self) -> tuple[str, ...]:
        return ("sk-ant-",)

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

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for LLM analysis. "
                "Install with: pip install 'cv-screener[anthropic]'"
            )
            raise ImportError(msg) from None

        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=api_key)
        use_model = model or self.default_model

        kwargs: dict[str, Any] = {
            "model": use_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system is not None:
            kwargs["system"] = system

        logger.debug("Sending prompt to Anthropic API (%s)...", use_model)
        try:
            message = await self._client.messages.create(**kwargs)
        except anthropic.APITimeoutError as e:
            raise RemoteTimeout(str(e)) from e
        except anthropic.APIConnectionError as e:
            raise NetworkError(str(e)) from e
        except anthropic.APIStatusError as e:
            raise classify_status(e.status_code, str(e.message)) from e

        if not message.content:
            return ""
        return message.content[0].text  # type: ignore[no-any-return]
