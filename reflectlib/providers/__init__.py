"""Provider contracts consumed by reflectlib."""

from reflectlib.providers.llm import LLMProvider, PromptRenderer

__all__ = ["LLMProvider", "PromptRenderer"]
