"""Abstract base class for LLM providers and shared credential logic."""

import os
from abc import ABC, abstractmethod

from src.core.errors import ConfigurationError

RECRUITER_SYSTEM_PROMPT = (
    "You are an expert HR recruiter analyzing CVs against job descriptions. "
    "Always respond with valid JSON only."
)


class LLMProvider(ABC):
    """Base class that every LLM provider must implement.

    ``complete`` is the single remote capability the screener needs. Each
    implementation translates its SDK failures into ``RemoteError``
    subclasses and never retries.
    """

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'openai')."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""

    @property
    def key_prefixes(self) -> tuple[str, ...]:
        """Recognized credential prefixes. Empty means any value is accepted."""
        return ()

    def resolve_api_key(self) -> str | None:
        """Read and validate the credential before any request is attempted.

        Raises:
            ConfigurationError: If the key is missing or has an unknown prefix.
        """
        if self.env_var is None:
            return None

        api_key = os.environ.get(self.env_var, "").strip()
        if not api_key:
            msg = f"{self.env_var} environment variable is required"
            raise ConfigurationError(msg)

        if self.key_prefixes and not api_key.startswith(self.key_prefixes):
            expected = " or ".join(f"'{p}'" for p in self.key_prefixes)
            msg = f"Invalid {self.env_var} format: keys should start with {expected}"
            raise ConfigurationError(msg)

        return api_key

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        model: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.1,
    ) -> str:
        """Send a prompt to the LLM and return the raw completion text.

        Args:
            prompt: The user prompt.
            system: System instruction. None sends no system instruction.
            model: Override the provider's default model. None uses default.
            max_tokens: Completion length cap.
            temperature: Sampling temperature.

        Returns:
            Raw text response from the LLM ('' if the model returned nothing).

        Raises:
            ConfigurationError: Credential missing or malformed.
            RemoteError: Categorized remote failure.
        """
