"""Reflectlib.

This package provides an iterative self-refinement loop for LLM agents:
an agent's output is judged by an independent evaluator call, and the
agent regenerates its output from the feedback until a termination
condition holds.

Key features:
1. Independent-context evaluation with a strict JSON evaluation contract
2. Deterministic termination rules with an auditable round history
3. Lifecycle listeners for observing each run
4. Structured error handling across all components
"""

from reflectlib.agent.components.reflection import (
    ControllerState,
    EvaluationResult,
    ReflectionController,
    ReflectionHistory,
    ReflectionListener,
    ReflectionPolicy,
    ReflectionRound,
    ReflectionStatus,
    TerminationReason,
)
from reflectlib.agent.core.conversation_agent import ConversationAgent
from reflectlib.agent.core.errors import (
    AgentError,
    EvaluationContractError,
    ReflectionConfigurationError,
    ReflectionError,
    ReflectionStateError,
)
from reflectlib.core.errors.errors import BaseError, ProviderError
from reflectlib.providers.llm import CompletionResponse, LLMProvider, Message, TokenUsage

__version__ = "0.1.0"

__all__ = [
    # Reflection
    "ReflectionController",
    "ReflectionHistory",
    "ReflectionListener",
    "ReflectionPolicy",
    "ReflectionRound",
    "ReflectionStatus",
    "ControllerState",
    "TerminationReason",
    "EvaluationResult",

    # Agents
    "ConversationAgent",

    # Errors
    "BaseError",
    "ProviderError",
    "AgentError",
    "EvaluationContractError",
    "ReflectionConfigurationError",
    "ReflectionError",
    "ReflectionStateError",

    # Providers
    "LLMProvider",
    "CompletionResponse",
    "Message",
    "TokenUsage",
]
