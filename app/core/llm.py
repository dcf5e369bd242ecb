"""LLM client utilities shared by the knowledge chains."""

import asyncio
import json
import re
from functools import lru_cache
from typing import TypeVar

from openai import OpenAI
from pydantic import BaseModel

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


@lru_cache(maxsize=1)
def get_openai_client() -> OpenAI | None:
    """
    Get the process-wide OpenAI client.

    Returns:
        OpenAI client, or None when OPENAI_API_KEY is not configured
    """
    settings = get_settings()
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY not configured, model-backed steps will use fallbacks")
        return None
    return OpenAI(api_key=settings.OPENAI_API_KEY)


class GenerationClient:
    """Single-prompt text generation over OpenAI chat completions.

    Every call is one attempt; transport and API errors propagate to the
    caller, which owns the fallback policy for its capability.
    """

    def __init__(self, client: OpenAI, model: str, temperature: float = 0.2):
        self.client = client
        self.model = model
        self.temperature = temperature

    def complete(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Send one prompt and return the text of the first choice."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs = {
            "model": self.model,
            "temperature": self.temperature if temperature is None else temperature,
            "messages": messages,
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        response = self.client.chat.completions.create(**kwargs)
        return response.choices[0].message.content or ""

    async def complete_async(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Async wrapper around complete using thread pool."""
        return await asyncio.to_thread(self.complete, prompt, system, temperature, max_tokens)


def strip_llm_fences(raw_output: str) -> str:
    """Strip markdown code fences from LLM output.

    Handles: ```json ... ```, ``` ... ```, leading/trailing whitespace.
    """
    cleaned = raw_output.strip()

    fence_match = re.search(r"```(?:json)?\s*\n?(.*?)```", cleaned, re.DOTALL)
    if fence_match:
        return fence_match.group(1).strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_llm_json(raw_output: str, model: type[T]) -> T:
    """
    Parse LLM output as JSON and validate against a Pydantic model.

    Args:
        raw_output: Raw string from LLM response
        model: Pydantic model class to validate against

    Returns:
        Validated Pydantic model instance

    Raises:
        json.JSONDecodeError: If JSON parsing fails after cleanup
        pydantic.ValidationError: If parsed JSON doesn't match schema
    """
    cleaned = strip_llm_fences(raw_output)
    parsed = json.loads(cleaned)
    return model.model_validate(parsed)


def parse_llm_json_list(raw_output: str) -> list:
    """
    Parse LLM output expected to be a JSON array.

    Returns:
        The parsed list, or an empty list when the JSON is not an array

    Raises:
        json.JSONDecodeError: If JSON parsing fails after cleanup
    """
    parsed = json.loads(strip_llm_fences(raw_output))
    return parsed if isinstance(parsed, list) else []
