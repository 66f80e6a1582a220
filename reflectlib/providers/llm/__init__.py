"""LLM provider contract, chat models and prompt rendering."""

from .base import LLMProvider, PromptRenderer
from .models import CompletionResponse, Message, ResponseFormat, RoleType, TokenUsage

__all__ = [
    "LLMProvider",
    "PromptRenderer",
    "CompletionResponse",
    "Message",
    "ResponseFormat",
    "RoleType",
    "TokenUsage",
]
