"""Unit tests for OllamaLLM (generate_json, chat, timeout and failure mapping)."""
from __future__ import annotations

import asyncio

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from pydantic import BaseModel
from unittest.mock import AsyncMock, MagicMock, patch

from api.utils.errors import UpstreamProviderError
from infra.llm.ollama import DEFAULT_TIMEOUT, OllamaLLM


# Minimal test schema for generate_json
class GreetingSchema(BaseModel):
    """Test schema: one greeting and a score."""
    message: str
    score: int


def _mock_chat(reply="ok"):
    mock_chat = MagicMock()
    mock_chat.ainvoke = AsyncMock(return_value=AIMessage(content=reply))
    return mock_chat


@pytest.mark.unit
class TestOllamaLLMGenerateJson:
    """generate_json with a mocked ChatOllama."""

    @pytest.mark.asyncio
    async def test_returns_raw_text(self):
        mock_chat = _mock_chat('{"message": "hi", "score": 1}')
        with patch("infra.llm.ollama.ChatOllama", return_value=mock_chat):
            llm = OllamaLLM(model="test-model")
            result = await llm.generate_json("Say hello.", GreetingSchema, timeout=10.0)

        assert result == '{"message": "hi", "score": 1}'
        mock_chat.ainvoke.assert_called_once_with("Say hello.")

    @pytest.mark.asyncio
    async def test_constrains_output_with_json_schema(self):
        mock_chat = _mock_chat("{}")
        with patch("infra.llm.ollama.ChatOllama", return_value=mock_chat) as chat_cls:
            llm = OllamaLLM(model="test-model", base_url="http://ollama:11434")
            await llm.generate_json("prompt", GreetingSchema)

        kwargs = chat_cls.call_args.kwargs
        assert kwargs["format"] == GreetingSchema.model_json_schema()
        assert kwargs["model"] == "test-model"
        assert kwargs["base_url"] == "http://ollama:11434"

    @pytest.mark.asyncio
    async def test_timeout_maps_to_upstream_error(self):
        async def slow(*args, **kwargs):
            await asyncio.sleep(1)

        mock_chat = MagicMock()
        mock_chat.ainvoke = slow
        with patch("infra.llm.ollama.ChatOllama", return_value=mock_chat):
            llm = OllamaLLM(model="test")
            with pytest.raises(UpstreamProviderError) as exc_info:
                await llm.generate_json("prompt", GreetingSchema, timeout=0.01)

        assert exc_info.value.details["timeout_seconds"] == 0.01

    @pytest.mark.asyncio
    async def test_connection_failure_maps_to_upstream_error(self):
        mock_chat = MagicMock()
        mock_chat.ainvoke = AsyncMock(side_effect=ConnectionError("refused"))
        with patch("infra.llm.ollama.ChatOllama", return_value=mock_chat):
            llm = OllamaLLM(model="test")
            with pytest.raises(UpstreamProviderError):
                await llm.generate_json("prompt", GreetingSchema)

    def test_default_timeout(self):
        with patch("infra.llm.ollama.ChatOllama"):
            assert OllamaLLM(model="test").timeout == DEFAULT_TIMEOUT


@pytest.mark.unit
class TestOllamaLLMChat:
    @pytest.mark.asyncio
    async def test_maps_roles_to_messages(self):
        mock_chat = _mock_chat("Recursion is a function calling itself.")
        with patch("infra.llm.ollama.ChatOllama", return_value=mock_chat):
            llm = OllamaLLM(model="test")
            reply = await llm.chat(
                [("system", "be nice"), ("user", "what is recursion?"), ("assistant", "Good question")]
            )

        assert reply == "Recursion is a function calling itself."
        (payload,), _ = mock_chat.ainvoke.call_args
        assert [type(m) for m in payload] == [SystemMessage, HumanMessage, AIMessage]
        assert payload[1].content == "what is recursion?"

    @pytest.mark.asyncio
    async def test_content_blocks_are_joined(self):
        mock_chat = MagicMock()
        mock_chat.ainvoke = AsyncMock(
            return_value=AIMessage(content=[{"type": "text", "text": "Hello "}, {"type": "text", "text": "there"}])
        )
        with patch("infra.llm.ollama.ChatOllama", return_value=mock_chat):
            reply = await OllamaLLM(model="test").chat([("user", "hi")])
        assert reply == "Hello there"
