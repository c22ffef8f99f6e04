"""Tests for the Gemini completion wrapper (no network)."""

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from fundbot.errors import CompletionError
from fundbot.gemini_llm_client import GeminiLLMClient


def client_with(generate):
    llm = GeminiLLMClient(api_key=None, timeout=0.05)
    llm.client = MagicMock()
    llm.client.aio.models.generate_content = generate
    return llm


class TestGeminiLLMClient:
    def test_missing_key_logs_error(self, caplog):
        with caplog.at_level(logging.ERROR, logger="fundbot.llm"):
            llm = GeminiLLMClient(api_key=None)
        assert not llm.is_available
        assert "API key not provided" in caplog.text

    @pytest.mark.asyncio
    async def test_unconfigured_client_raises(self):
        with pytest.raises(CompletionError):
            await GeminiLLMClient(api_key=None).complete("system", "hello")

    @pytest.mark.asyncio
    async def test_returns_stripped_text(self):
        generate = AsyncMock(return_value=SimpleNamespace(text="  USER_QUERY \n"))
        llm = client_with(generate)
        assert await llm.complete("classify", "Find user", max_tokens=10, temperature=0.0) == "USER_QUERY"
        kwargs = generate.await_args.kwargs
        assert kwargs["contents"] == "Find user"
        assert kwargs["config"].max_output_tokens == 10
        assert kwargs["config"].temperature == 0.0

    @pytest.mark.asyncio
    async def test_falls_back_to_candidate_parts(self):
        part = SimpleNamespace(text="from parts")
        response = SimpleNamespace(
            text=None,
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))],
        )
        llm = client_with(AsyncMock(return_value=response))
        assert await llm.complete("s", "u") == "from parts"

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self):
        llm = client_with(AsyncMock(return_value=SimpleNamespace(text="", candidates=[])))
        with pytest.raises(CompletionError):
            await llm.complete("s", "u")

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        llm = client_with(AsyncMock(side_effect=RuntimeError("429 quota exceeded")))
        with pytest.raises(CompletionError, match="quota"):
            await llm.complete("s", "u")

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        async def slow(**_kwargs):
            await asyncio.sleep(1)

        llm = client_with(slow)
        with pytest.raises(CompletionError, match="timed out"):
            await llm.complete("s", "u")
