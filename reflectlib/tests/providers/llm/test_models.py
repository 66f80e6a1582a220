"""Tests for chat completion models."""

import pytest
from pydantic import ValidationError

from reflectlib.providers.llm.models import CompletionResponse, Message, RoleType, TokenUsage


class TestMessage:
    """Test chat messages."""

    def test_of(self):
        message = Message.of(RoleType.SYSTEM, "You are an evaluator.", "writer-evaluator")

        assert message.role is RoleType.SYSTEM
        assert message.content == "You are an evaluator."
        assert message.name == "writer-evaluator"

    def test_role_must_be_enum(self):
        with pytest.raises(ValidationError):
            Message(role="system", content="hi")


class TestTokenUsage:
    """Test token usage arithmetic."""

    def test_addition(self):
        total = TokenUsage(prompt_tokens=3, completion_tokens=4, total_tokens=7) + TokenUsage(
            prompt_tokens=1, completion_tokens=1, total_tokens=2
        )

        assert total == TokenUsage(prompt_tokens=4, completion_tokens=5, total_tokens=9)

    def test_addition_with_other_type(self):
        with pytest.raises(TypeError):
            TokenUsage() + 5

    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            TokenUsage(total_tokens=-1)


class TestCompletionResponse:
    """Test completion responses."""

    def test_default_usage(self):
        response = CompletionResponse(content="ok")

        assert response.usage == TokenUsage()
        assert response.model is None
