"""Strict Pydantic models for chat completion requests and responses."""

from enum import Enum
from typing import Optional

from pydantic import Field

from reflectlib.core.models import StrictBaseModel


class RoleType(str, Enum):
    """Chat message roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ResponseFormat(str, Enum):
    """Requested response format for a completion."""

    TEXT = "text"
    JSON = "json"


class Message(StrictBaseModel):
    """A single chat message."""

    role: RoleType = Field(..., description="Role of the message author")
    content: str = Field(..., description="Message text")
    name: Optional[str] = Field(default=None, description="Optional author name")

    @classmethod
    def of(cls, role: RoleType, content: str, name: Optional[str] = None) -> "Message":
        return cls(role=role, content=content, name=name)


class TokenUsage(StrictBaseModel):
    """Token counts reported for one or more completions."""

    prompt_tokens: int = Field(default=0, ge=0, description="Tokens in the prompt")
    completion_tokens: int = Field(default=0, ge=0, description="Tokens in the completion")
    total_tokens: int = Field(default=0, ge=0, description="Prompt plus completion tokens")

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        if not isinstance(other, TokenUsage):
            return NotImplemented
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


class CompletionResponse(StrictBaseModel):
    """Result of a non-streaming completion call."""

    content: str = Field(..., description="Text of the first choice")
    usage: TokenUsage = Field(default_factory=TokenUsage, description="Token usage of the call")
    model: Optional[str] = Field(default=None, description="Model that served the request")
