"""Chat-completion client used to turn retrieved context into an answer."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from openai import OpenAI, OpenAIError

from docgrounder.errors import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_LLM_MODEL = "meta-llama/llama-3.1-8b-instruct"


@runtime_checkable
class GenerationProvider(Protocol):
    """Protocol for the answer-generation capability."""

    def generate(self, system_instruction: str, user_message: str) -> str:
        ...


class ChatCompletionClient:
    """Generation client for any OpenAI-compatible endpoint (OpenRouter by default).

    The underlying client is created on the first :meth:`generate` call, so a
    missing API key only fails the request that needs it.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_LLM_MODEL,
        max_tokens: int = 512,
        temperature: float = 0.2,
        timeout: float = 60.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._client: OpenAI | None = None

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> OpenAI:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    "Generation client is not configured: set OPENROUTER_API_KEY."
                )
            self._client = OpenAI(
                base_url=self._base_url,
                api_key=self._api_key,
                timeout=self._timeout,
            )
        return self._client

    def generate(self, system_instruction: str, user_message: str) -> str:
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_message},
                ],
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except OpenAIError as exc:
            logger.error("Generation request to %s failed: %s", self._model, exc)
            raise ProviderError(f"Generation request failed: {exc}") from exc

        if not response.choices:
            raise ProviderError("Generation provider returned no choices")
        return (response.choices[0].message.content or "").strip()
