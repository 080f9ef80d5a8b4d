# ABOUTME: Unit tests for the llm_retry decorator.
# ABOUTME: Validates retry on transport and parse errors and immediate propagation of others.

import pytest

from src.agents.exceptions import ParseError, TransportError
from src.workers.llm_retry import llm_retry


class TestLLMRetry:
    """Test suite for llm_retry decorator"""

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        calls = []

        @llm_retry(max_attempts=2, min_wait=0, max_wait=0)
        async def generate():
            calls.append(1)
            if len(calls) == 1:
                raise TransportError("timeout")
            return "scene"

        assert await generate() == "scene"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_reraises_after_max_attempts(self):
        calls = []

        @llm_retry(max_attempts=3, min_wait=0, max_wait=0)
        async def generate():
            calls.append(1)
            raise ParseError("garbage")

        with pytest.raises(ParseError):
            await generate()
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self):
        calls = []

        @llm_retry(max_attempts=3, min_wait=0, max_wait=0)
        async def generate():
            calls.append(1)
            raise ValueError("bug")

        with pytest.raises(ValueError):
            await generate()
        assert len(calls) == 1

    def test_preserves_function_name(self):
        @llm_retry()
        async def narrate_scene():
            return None

        assert narrate_scene.__name__ == "narrate_scene"
