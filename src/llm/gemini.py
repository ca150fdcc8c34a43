"""Google Gemini LLM provider (google-genai SDK)."""

import logging
from typing import Any

from src.core.errors import NetworkError, RemoteTimeout, classify_status
from src.llm.base import LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """LLM provider using the Google Gemini API (google-genai SDK)."""

    def __init__(self) -> None:
        self._client: Any = None

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

    @property
    def key_prefixes(self) -> tuple[str, ...]:
        return ("AIza",)

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
            import httpx
            from google import genai
            from google.genai import errors as genai_errors
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for LLM analysis. "
                "Install with: pip install 'cv-screener[gemini]'"
            )
            raise ImportError(msg) from None

        if self._client is None:
            self._client = genai.Client(api_key=api_key)
        use_model = model or self.default_model

        logger.debug("Sending prompt to Gemini API (%s)...", use_model)
        try:
            response = await self._client.aio.models.generate_content(
                model=use_model,
                contents=prompt,
                config=genai_types.GenerateContentConfig(
                    system_instruction=system,
                    max_output_tokens=max_tokens,
                    temperature=temperature,
                ),
            )
        except httpx.TimeoutException as e:
            raise RemoteTimeout(str(e)) from e
        except httpx.TransportError as e:
            raise NetworkError(str(e)) from e
        except genai_errors.APIError as e:
            raise classify_status(int(e.code or 0), str(e.message or e.status or "")) from e

        return response.text or ""
