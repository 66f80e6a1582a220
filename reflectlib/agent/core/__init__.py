"""Agent core interfaces and errors."""

# ConversationAgent removed from init to avoid circular imports
# Import directly: from reflectlib.agent.core.conversation_agent import ConversationAgent
from reflectlib.agent.core.errors import (
    AgentError,
    EvaluationContractError,
    ReflectionConfigurationError,
    ReflectionError,
    ReflectionStateError,
)
from reflectlib.agent.core.interfaces import ReflectiveAgent, Termination

__all__ = [
    "ReflectiveAgent",
    "Termination",
    "AgentError",
    "EvaluationContractError",
    "ReflectionConfigurationError",
    "ReflectionError",
    "ReflectionStateError",
]
