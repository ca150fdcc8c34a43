"""Scoring client: one remote call per prompt, with a per-call timeout."""

import asyncio
import logging

from src.core.config import LLMConfig
from src.core.errors import RemoteTimeout, ScreenerError
from src.llm import get_provider
from src.llm.base import RECRUITER_SYSTEM_PROMPT, LLMProvider

logger = logging.getLogger(__name__)

CONNECTION_TEST_PROMPT = 'Respond with only the word "SUCCESS"'
CONNECTION_TEST_SENTINEL = "SUCCESS"


class ScoringClient:
    """Wraps an LLMProvider with the configured model, limits and timeout.

    Never retries: retry and pacing policy belong to the orchestrator.

    Usage::

        client = ScoringClient.from_config(settings.llm)
        client.validate_credentials()
        raw = await client.score(prompt)
    """

    def __init__(self, provider: LLMProvider, config: LLMConfig | None = None) -> None:
        self._provider = provider
        self._config = config or LLMConfig(provider=provider.provider_id)

    @classmethod
    def from_config(cls, config: LLMConfig) -> "ScoringClient":
        options = {"base_url": config.base_url} if config.base_url else {}
        return cls(get_provider(config.provider, **options), config)

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    def validate_credentials(self) -> None:
        """Raise ConfigurationError if the provider credential is unusable."""
        self._provider.resolve_api_key()

    async def complete(
        self,
        prompt: str,
        *,
        system: str | None = RECRUITER_SYSTEM_PROMPT,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Send one prompt and return the raw completion text.

        Raises:
            ConfigurationError: Credential missing or malformed.
            RemoteError: Categorized remote failure, RemoteTimeout included.
        """
        call = self._provider.complete(
            prompt,
            system=system,
            model=self._config.model,
            max_tokens=max_tokens if max_tokens is not None else self._config.max_tokens,
            temperature=temperature if temperature is not None else self._config.temperature,
        )
        try:
            return await asyncio.wait_for(call, timeout=self._config.timeout_s)
        except TimeoutError as e:
            msg = f"{self._provider.provider_id} call exceeded {self._config.timeout_s}s"
            raise RemoteTimeout(msg) from e

    async def score(self, prompt: str) -> str:
        """Send an evaluation prompt with the recruiter system instruction."""
        return await self.complete(prompt, system=RECRUITER_SYSTEM_PROMPT)

    async def test_connection(self) -> bool:
        """Return True if the remote capability answers the sentinel prompt."""
        try:
            reply = await self.complete(
                CONNECTION_TEST_PROMPT, system=None, max_tokens=10, temperature=0.0
            )
        except ScreenerError as e:
            logger.warning("API connection test failed: %s", e)
            return False
        return CONNECTION_TEST_SENTINEL in reply
