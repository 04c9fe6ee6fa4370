"""
Abstract LLM provider interface for decoupling from specific AI vendors.

Every feature that wants generated text goes through `LLMProvider.generate_content`
with a system prompt and a user prompt. Callers own the fallback: a provider
either returns text or raises.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
from openai import AsyncOpenAI
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from .config import settings
from .exceptions import LLMError, LLMResponseParseError, MissingAPIKeyError

logger = logging.getLogger(__name__)


def extract_json(response: str) -> Any:
    """
    Parse JSON out of a possibly wrapped LLM response.

    Models sometimes add explanatory text or markdown fences around JSON.

    Raises:
        LLMResponseParseError: If no JSON value can be found
    """
    if response is None:
        raise LLMResponseParseError()

    try:
        return json.loads(response)
    except json.JSONDecodeError:
        pass

    # Object patterns before array so nested arrays are not matched first
    json_patterns = [
        r'```json\s*([\s\S]*?)\s*```',
        r'```\s*([\s\S]*?)\s*```',
        r'(\{[\s\S]*\})',
        r'(\[[\s\S]*\])',
    ]

    for pattern in json_patterns:
        match = re.search(pattern, response)
        if match:
            try:
                return json.loads(match.group(1))
            except json.JSONDecodeError:
                continue

    raise LLMResponseParseError()


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[Dict],
        temperature: float = 0.7
    ) -> str:
        """
        Generic chat completion.

        Args:
            messages: List of message dicts with 'role' and 'content'
            temperature: Sampling temperature (0-1)

        Returns:
            Response text
        """
        pass

    async def generate_content(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7
    ) -> str:
        """Generate text from a system prompt and a user prompt."""
        content = await self.chat_completion(
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature
        )
        if not content or not content.strip():
            raise LLMError("LLM returned an empty response")
        return content

    async def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3
    ) -> Any:
        """Generate content and parse it as JSON."""
        content = await self.generate_content(system_prompt, user_prompt, temperature)
        return extract_json(content)


class OpenAIProvider(LLMProvider):
    """OpenAI implementation of LLM provider."""

    def __init__(
        self,
        api_key: str = None,
        model: str = None,
        max_tokens: int = None
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (defaults to settings.openai_api_key)
            model: Chat model (defaults to settings.openai_model)
            max_tokens: Completion token cap (defaults to settings.llm_max_tokens)
        """
        self.api_key = api_key or settings.openai_api_key
        if not self.api_key:
            raise MissingAPIKeyError("OPENAI_API_KEY")

        self.client = AsyncOpenAI(
            api_key=self.api_key,
            max_retries=0  # Retries are handled by tenacity
        )
        self.model = model or settings.openai_model
        self.max_tokens = max_tokens or settings.llm_max_tokens

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((Exception,)),
        reraise=True
    )
    async def _call_openai(
        self,
        messages: List[Dict],
        temperature: float = 0.7
    ) -> str:
        """Call OpenAI API with retry logic."""
        logger.info(f"Calling OpenAI with model: {self.model}")

        params = {
            "model": self.model,
            "messages": messages,
        }

        if self.model.startswith("gpt-5"):
            # GPT-5 models take max_completion_tokens and fixed sampling
            params["max_completion_tokens"] = self.max_tokens
        else:
            params["max_tokens"] = self.max_tokens
            params["temperature"] = temperature

        response = await self.client.chat.completions.create(**params)
        content = response.choices[0].message.content

        if getattr(response, "usage", None):
            logger.info(
                f"OpenAI usage: model={self.model}, "
                f"tokens={response.usage.prompt_tokens}+{response.usage.completion_tokens}"
            )

        return content or ""

    async def chat_completion(
        self,
        messages: List[Dict],
        temperature: float = 0.7
    ) -> str:
        """Chat completion using OpenAI."""
        return await self._call_openai(messages, temperature=temperature)


class OllamaProvider(LLMProvider):
    """
    Ollama implementation of LLM provider for self-hosted models.

    Setup:
        1. Install Ollama: https://ollama.ai/download
        2. Pull a model: ollama pull llama3
        3. Run Ollama server: ollama serve
        4. Set OLLAMA_BASE_URL (default: http://localhost:11434)
    """

    def __init__(
        self,
        base_url: str = None,
        model: str = None,
        timeout: int = 120
    ):
        self.base_url = base_url or settings.ollama_base_url
        self.model = model or settings.ollama_model
        self.timeout = timeout

        logger.info(f"Initialized OllamaProvider with base_url={self.base_url}, model={self.model}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TransportError,)),
        reraise=True
    )
    async def _call_ollama(
        self,
        messages: List[Dict],
        temperature: float = 0.7
    ) -> str:
        """Call Ollama API with chat format."""
        url = f"{self.base_url}/api/chat"

        payload = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": temperature
            }
        }

        logger.info(f"Calling Ollama model: {self.model}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()

                result = response.json()
                content = result.get("message", {}).get("content", "")
                logger.info(f"Ollama response length: {len(content)} chars")
                return content

        except httpx.TimeoutException:
            logger.error(f"Ollama request timed out after {self.timeout}s")
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"Ollama HTTP error: {e.response.status_code}")
            raise

    async def chat_completion(
        self,
        messages: List[Dict],
        temperature: float = 0.7
    ) -> str:
        """Chat completion using Ollama."""
        return await self._call_ollama(messages, temperature=temperature)


# =============================================================================
# Fallback Helpers
# =============================================================================

async def generate_with_fallback(
    llm: Optional[LLMProvider],
    system_prompt: str,
    user_prompt: str,
    fallback: str
) -> Tuple[str, bool]:
    """
    Generate text, substituting `fallback` when the provider is missing or fails.

    Returns:
        (text, fallback_used)
    """
    if llm is None:
        return fallback, True
    try:
        return await llm.generate_content(system_prompt, user_prompt), False
    except Exception as e:
        logger.warning(f"LLM generation failed, using fallback: {e}")
        return fallback, True


async def generate_json_with_fallback(
    llm: Optional[LLMProvider],
    system_prompt: str,
    user_prompt: str,
    fallback: Any,
    validate: Optional[Callable[[Any], bool]] = None
) -> Tuple[Any, bool]:
    """
    Generate a JSON value, substituting `fallback` on failure or when `validate` rejects it.

    Returns:
        (value, fallback_used)
    """
    if llm is None:
        return fallback, True
    try:
        value = await llm.generate_json(system_prompt, user_prompt)
    except Exception as e:
        logger.warning(f"LLM JSON generation failed, using fallback: {e}")
        return fallback, True

    if validate is not None and not validate(value):
        logger.warning("LLM returned JSON of an unexpected shape, using fallback")
        return fallback, True
    return value, False


def is_chart(value: Any) -> bool:
    """True when value looks like a `labels` + `datasets` chart payload."""
    return (
        isinstance(value, dict)
        and isinstance(value.get("labels"), list)
        and isinstance(value.get("datasets"), list)
    )


# =============================================================================
# Provider Factory
# =============================================================================

def get_llm_provider(provider_type: str = None) -> LLMProvider:
    """
    Factory function to get the configured LLM provider.

    Args:
        provider_type: Override provider type ("openai", "ollama", "mock")
                       If not specified, uses settings.llm_provider

    Raises:
        ValueError: If provider type is invalid
        MissingAPIKeyError: If OpenAI is selected without an API key
    """
    provider = provider_type or settings.llm_provider

    if provider == "openai":
        return OpenAIProvider()
    elif provider == "ollama":
        return OllamaProvider()
    elif provider == "mock":
        return MockLLMProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {provider}. Supported: openai, ollama, mock")


class MockLLMProvider(LLMProvider):
    """
    Mock LLM provider for testing.

    Returns a canned response without making API calls and records every
    prompt it receives.
    """

    DEFAULT_RESPONSE = "Mock analysis: skills are evenly distributed across the organisation."

    def __init__(self, response: Optional[str] = None):
        self.response = response if response is not None else self.DEFAULT_RESPONSE
        self.calls: List[List[Dict]] = []

    async def chat_completion(
        self,
        messages: List[Dict],
        temperature: float = 0.7
    ) -> str:
        """Return mock chat completion."""
        self.calls.append(messages)
        return self.response
