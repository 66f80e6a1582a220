"""
Conversation agent.

A minimal agent that satisfies ``ReflectiveAgent`` on top of any
``LLMProvider``: it keeps a message list, tracks token usage and can run
a reflection loop over its own output.
"""

import logging
import threading
import uuid
from typing import Any, Dict, List, Optional

from reflectlib.agent.core.errors import ReflectionConfigurationError
from reflectlib.agent.core.interfaces import Termination
from reflectlib.agent.components.reflection.controller import ReflectionController
from reflectlib.agent.components.reflection.history import ReflectionHistory
from reflectlib.agent.components.reflection.listener import ReflectionListener
from reflectlib.agent.components.reflection.models import ReflectionPolicy
from reflectlib.agent.components.termination.terminations import MaxRoundTermination, StopMessageTermination
from reflectlib.core.settings.settings import LLMSettings
from reflectlib.providers.llm.base import LLMProvider, PromptRenderer
from reflectlib.providers.llm.models import Message, ResponseFormat, RoleType, TokenUsage

logger = logging.getLogger(__name__)


class ConversationAgent:
    """Chat agent holding one conversation with an LLM provider.

    When a reflection policy is attached, the agent registers the round
    ceiling and stop-message terminations and adopts the policy's
    ``max_round``.
    """

    def __init__(
        self,
        name: str,
        llm_provider: LLMProvider,
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        reflection_policy: Optional[ReflectionPolicy] = None,
        terminations: Optional[List[Termination]] = None,
        renderer: Optional[PromptRenderer] = None,
    ):
        self.id = uuid.uuid4().hex
        self.name = name
        self.llm_provider = llm_provider
        self.system_prompt = system_prompt
        self.model = model
        self.temperature = temperature
        self.input = ""
        self.output = ""
        self.round = 0
        self.max_round = 1
        self.terminations: List[Termination] = list(terminations or [])
        self.messages: List[Message] = []
        self.reflection_policy: Optional[ReflectionPolicy] = None

        self._renderer = renderer or PromptRenderer()
        self._token_usage = TokenUsage()
        self._usage_lock = threading.Lock()

        if system_prompt:
            self.messages.append(Message.of(RoleType.SYSTEM, system_prompt, name))
        if reflection_policy is not None:
            self.set_reflection_policy(reflection_policy)

    @classmethod
    def from_settings(
        cls,
        name: str,
        llm_provider: LLMProvider,
        settings: Optional[LLMSettings] = None,
        **kwargs: Any,
    ) -> "ConversationAgent":
        """Build an agent using model and temperature from ``LLMSettings``."""
        settings = settings or LLMSettings()
        return cls(name, llm_provider, model=settings.model_name, temperature=settings.temperature, **kwargs)

    def set_reflection_policy(self, policy: ReflectionPolicy) -> None:
        self.reflection_policy = policy
        self.max_round = policy.max_round
        for termination_type in (MaxRoundTermination, StopMessageTermination):
            if not any(isinstance(t, termination_type) for t in self.terminations):
                self.terminations.append(termination_type())

    def add_termination(self, termination: Termination) -> None:
        self.terminations.append(termination)

    def not_terminated(self) -> bool:
        return not any(t.terminate(self) for t in self.terminations)

    def add_token_usage(self, usage: TokenUsage) -> None:
        with self._usage_lock:
            self._token_usage = self._token_usage + usage

    def current_token_usage(self) -> TokenUsage:
        with self._usage_lock:
            return self._token_usage

    async def _complete_turn(self, content: str) -> str:
        self.messages.append(Message.of(RoleType.USER, content))
        response = await self.llm_provider.complete(
            list(self.messages),
            response_format=ResponseFormat.TEXT,
            model=self.model,
            temperature=self.temperature,
        )
        self.add_token_usage(response.usage)
        self.messages.append(Message.of(RoleType.ASSISTANT, response.content, self.name))
        self.output = response.content
        return self.output

    async def chat(self, query: str, variables: Optional[Dict[str, Any]] = None) -> str:
        """Answer ``query`` and return the first candidate output."""
        self.input = query
        content = self._renderer.render(query, variables or {})
        logger.info(f"Agent {self.name} answering query ({len(content)} chars)")
        return await self._complete_turn(content)

    async def regenerate(self, prompt: str, variables: Optional[Dict[str, Any]] = None) -> None:
        """Continue the conversation with an improvement prompt, replacing ``output``."""
        content = self._renderer.render(prompt, variables or {})
        logger.debug(f"Agent {self.name} regenerating output in round {self.round}")
        await self._complete_turn(content)

    async def reflect(
        self,
        variables: Optional[Dict[str, Any]] = None,
        listener: Optional[ReflectionListener] = None,
    ) -> ReflectionHistory:
        """Run the reflection loop over the current output.

        Raises:
            ReflectionConfigurationError: If no reflection policy is attached
        """
        if self.reflection_policy is None:
            raise ReflectionConfigurationError(
                f"Agent {self.name} has no reflection policy", config_key="reflection_policy", agent=self.name
            )
        controller = ReflectionController(self, self.reflection_policy, variables=variables, listener=listener)
        return await controller.execute()

    async def run(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        listener: Optional[ReflectionListener] = None,
    ) -> str:
        """Answer ``query``, then refine the answer when reflection is enabled."""
        await self.chat(query, variables)
        if self.reflection_policy is not None and self.reflection_policy.enabled:
            await self.reflect(variables, listener)
        return self.output

    def __str__(self) -> str:
        return f"ConversationAgent(name='{self.name}', round={self.round}, messages={len(self.messages)})"
