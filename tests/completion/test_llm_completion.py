"""Tests for the casual-llm completion adapter."""

from unittest.mock import AsyncMock, Mock

import pytest
from casual_llm import SystemMessage, UserMessage

from casual_coach.completion import CompletionProvider, LLMCompletion
from casual_coach.errors import TransientProviderError


class MockLLMProvider:
    """Mock LLM provider for testing."""

    def __init__(self, response_content):
        self.response_content = response_content
        self.chat = AsyncMock(return_value=Mock(content=response_content))


def test_protocol_compliance():
    """Test that LLMCompletion satisfies CompletionProvider."""
    assert isinstance(LLMCompletion(MockLLMProvider("ok")), CompletionProvider)


@pytest.mark.asyncio
async def test_complete_sends_system_and_user_messages():
    """Test the message list and sampling parameters sent to the provider."""
    provider = MockLLMProvider("  Add a <h1> tag.  ")
    completion = LLMCompletion(provider, model_name="gpt-4o-mini")

    reply = await completion.complete("Be a coach.", "How do I add a heading?")

    assert reply == "Add a <h1> tag."
    messages = provider.chat.call_args.args[0]
    assert isinstance(messages[0], SystemMessage)
    assert isinstance(messages[1], UserMessage)
    assert messages[0].content == "Be a coach."
    assert messages[1].content == "How do I add a heading?"
    assert provider.chat.call_args.kwargs["response_format"] == "text"
    assert provider.chat.call_args.kwargs["temperature"] == 0.3
    assert provider.chat.call_args.kwargs["max_tokens"] == 300
    assert completion.call_count == 1


@pytest.mark.asyncio
async def test_complete_overrides_defaults():
    """Test per-call temperature and token cap."""
    provider = MockLLMProvider("Summary.")
    completion = LLMCompletion(provider)

    await completion.complete("system", "user", temperature=0.0, max_tokens=150)

    assert provider.chat.call_args.kwargs["temperature"] == 0.0
    assert provider.chat.call_args.kwargs["max_tokens"] == 150


@pytest.mark.asyncio
async def test_provider_error_becomes_transient_error():
    """Test that backend failures are reported as TransientProviderError."""
    provider = MockLLMProvider("unused")
    provider.chat.side_effect = ConnectionError("connection refused")
    completion = LLMCompletion(provider, model_name="gpt-4o-mini")

    with pytest.raises(TransientProviderError) as exc_info:
        await completion.complete("system", "user")

    assert exc_info.value.provider == "gpt-4o-mini"
    assert completion.failure_count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", None])
async def test_empty_reply_is_transient_error(content):
    """Test that empty content counts as a failed call."""
    completion = LLMCompletion(MockLLMProvider(content))

    with pytest.raises(TransientProviderError):
        await completion.complete("system", "user")
