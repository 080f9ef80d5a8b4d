# ABOUTME: Shared LLM client wrapper turning chat completions into a single fallible text call.
# ABOUTME: Bounds every call by a timeout and raises TransportError; retries live one level up.

import asyncio
from typing import Any

from loguru import logger
from openai import AsyncOpenAI

from src.agents.exceptions import TransportError


class LLMClient:
    """
    Shared LLM client wrapper for consistent OpenAI API interactions.

    Every AI stage goes through complete(). Failures surface as TransportError
    so callers can apply their own fallback policy.
    """

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o-mini"):
        """
        Initialize LLM client wrapper.

        Args:
            client: AsyncOpenAI client instance
            model: OpenAI model to use (default: gpt-4o-mini)
        """
        self.client = client
        self.model = model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 1000,
        timeout: float = 25.0,
    ) -> str:
        """
        Run one chat completion expecting a JSON object back.

        Args:
            system_prompt: System message defining the stage's role
            user_prompt: User message with context and task
            max_tokens: Completion token budget
            timeout: Seconds before the call is abandoned

        Returns:
            Raw response text

        Raises:
            TransportError: On timeout, API error, or empty content
        """
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_completion_tokens": max_tokens,
            "response_format": {"type": "json_object"},
        }

        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(**kwargs),
                timeout=timeout,
            )
        except TimeoutError as e:
            raise TransportError(f"OpenAI call timed out after {timeout}s") from e
        except Exception as e:
            raise TransportError(f"OpenAI API call failed: {e}") from e

        choice = response.choices[0] if response.choices else None
        if choice is not None and choice.finish_reason == "content_filter":
            logger.warning("Completion blocked by content filter")

        content = choice.message.content if choice is not None else None
        if not content:
            raise TransportError("OpenAI returned an empty completion")

        logger.debug(f"Completion received ({len(content)} chars)")
        return content
