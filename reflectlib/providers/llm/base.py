"""LLM provider contract and prompt rendering.

Reflectlib does not talk to any model backend itself. Concrete providers
implement the ``LLMProvider`` protocol; the reflection loop only needs a
single non-streaming chat completion call.
"""

import logging
import re
from typing import Mapping, Optional, Protocol, Sequence, runtime_checkable

from reflectlib.providers.llm.models import CompletionResponse, Message, ResponseFormat

logger = logging.getLogger(__name__)

_PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^}]+?)\s*\}\}")


@runtime_checkable
class LLMProvider(Protocol):
    """Interface for chat completion providers.

    Implementations own transport concerns: timeouts, retries and
    cancellation. Failures should be raised as ``ProviderError``.
    """

    async def complete(
        self,
        messages: Sequence[Message],
        response_format: ResponseFormat = ResponseFormat.TEXT,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> CompletionResponse:
        """Issue one non-streaming chat completion.

        Args:
            messages: Full message list for the request
            response_format: Requested output format
            model: Model name, provider default when None
            temperature: Sampling temperature, provider default when None

        Returns:
            Completion text and token usage
        """
        ...


class PromptRenderer:
    """Substitutes ``{{variable}}`` placeholders in prompt templates.

    Double curly braces avoid conflicts with JSON examples embedded in
    prompts.
    """

    def __init__(self, strict: bool = False):
        """Initialize the renderer.

        Args:
            strict: Raise when placeholders remain unreplaced after rendering
        """
        self.strict = strict

    def render(self, template: str, variables: Mapping[str, object]) -> str:
        """Render a template with variables.

        Args:
            template: Template string with {{variable}} placeholders
            variables: Values to substitute

        Returns:
            Rendered template

        Raises:
            ValueError: In strict mode, if any placeholder has no value
        """
        def _substitute(match: re.Match) -> str:
            key = match.group(1)
            if key in variables:
                value = variables[key]
                return "" if value is None else str(value)
            return match.group(0)

        result = _PLACEHOLDER_PATTERN.sub(_substitute, template)

        remaining = _PLACEHOLDER_PATTERN.findall(result)
        if remaining:
            if self.strict:
                raise ValueError(
                    f"Template has unreplaced placeholders: {remaining}. "
                    f"All template variables must be provided."
                )
            logger.debug(f"Placeholders left unreplaced: {remaining}")

        return result
