"""
Agent collaborator interfaces.

The reflection controller does not own an agent implementation. It drives
any object that satisfies ``ReflectiveAgent``.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from reflectlib.providers.llm.base import LLMProvider
from reflectlib.providers.llm.models import TokenUsage


@runtime_checkable
class Termination(Protocol):
    """An agent-owned condition that can end a run.

    Unrelated to the reflection evaluation itself, e.g. a stop message in
    the output or a round ceiling.
    """

    def terminate(self, agent: "ReflectiveAgent") -> bool:
        """Return True when the agent should stop."""
        ...


@runtime_checkable
class ReflectiveAgent(Protocol):
    """Interface the reflection controller needs from an agent.

    ``output`` is the current candidate solution; it is re-read after
    every ``regenerate`` call. ``round`` is read and advanced by the
    controller.
    """

    id: str
    name: str
    input: str
    output: str
    round: int
    max_round: int
    model: Optional[str]
    temperature: Optional[float]
    terminations: List[Termination]
    llm_provider: LLMProvider

    def not_terminated(self) -> bool:
        """Return True while no termination predicate is satisfied."""
        ...

    def add_token_usage(self, usage: TokenUsage) -> None:
        """Add usage to the agent's running token total."""
        ...

    def current_token_usage(self) -> TokenUsage:
        """Return the agent's running token total."""
        ...

    async def regenerate(self, prompt: str, variables: Optional[Dict[str, Any]] = None) -> None:
        """Regenerate ``output`` in place from an improvement prompt.

        Mutates the agent's output and main conversation.
        """
        ...
