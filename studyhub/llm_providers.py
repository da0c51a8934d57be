"""
Abstract LLM provider interface for decoupling from specific AI vendors.

The content generator talks to a provider only through ``chat_completion``,
so OpenAI can be swapped for another backend (or a mock in tests).
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import openai
from openai import AsyncOpenAI
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from .exceptions import ConfigurationError, GenerationError, LLMRateLimitError

logger = logging.getLogger(__name__)


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[Dict],
        temperature: float = 0.7,
        max_tokens: int = 2000
    ) -> str:
        """
        Generic chat completion.

        Args:
            messages: List of message dicts with 'role' and 'content'
            temperature: Sampling temperature (0-1)
            max_tokens: Upper bound on completion length

        Returns:
            Response text

        Raises:
            LLMRateLimitError: If the provider throttles the request
            GenerationError: For any other provider failure
        """
        pass


class OpenAIProvider(LLMProvider):
    """OpenAI implementation of LLM provider."""

    def __init__(self, api_key: Optional[str], model: str = "gpt-4o-mini"):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Chat model used for every generation task
        """
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY", "required when STUDYHUB_GENERATOR=openai")

        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((openai.APIConnectionError, openai.APITimeoutError)),
        reraise=True
    )
    async def _call_openai(
        self,
        messages: List[Dict],
        temperature: float,
        max_tokens: int
    ) -> str:
        """Call OpenAI API with retry on transient network errors."""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_completion_tokens=max_tokens,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""

    async def chat_completion(
        self,
        messages: List[Dict],
        temperature: float = 0.7,
        max_tokens: int = 2000
    ) -> str:
        try:
            return await self._call_openai(messages, temperature, max_tokens)
        except openai.RateLimitError as e:
            logger.warning(f"OpenAI rate limit hit: {e}")
            raise LLMRateLimitError() from e
        except openai.OpenAIError as e:
            logger.error(f"OpenAI chat completion failed: {e}")
            raise GenerationError(f"LLM request failed: {e}") from e


class MockLLMProvider(LLMProvider):
    """
    Mock LLM provider for testing.

    Replays canned responses in order and records every call.
    """

    def __init__(self, responses: Optional[List[str]] = None):
        self.responses = list(responses or [])
        self.calls: List[List[Dict]] = []

    async def chat_completion(
        self,
        messages: List[Dict],
        temperature: float = 0.7,
        max_tokens: int = 2000
    ) -> str:
        self.calls.append(messages)
        if not self.responses:
            return "{}"
        return self.responses.pop(0)
