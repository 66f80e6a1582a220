"""
Evaluator for the reflection loop.

Judges a candidate solution with one LLM call in an independent context:
the request contains only the evaluator system prompt and the solution,
never the agent's conversation history.
"""

import logging
from typing import Any, Dict, Mapping, NamedTuple, Optional

from reflectlib.agent.core.interfaces import ReflectiveAgent
from reflectlib.agent.components.reflection.models import EvaluationResult, ReflectionPolicy
from reflectlib.agent.components.reflection.prompts import (
    EVALUATION_USER_MESSAGE_TEMPLATE,
    IMPROVEMENT_PROMPT_FOOTER,
    IMPROVEMENT_PROMPT_HEADER,
)
from reflectlib.providers.llm.base import LLMProvider, PromptRenderer
from reflectlib.providers.llm.models import Message, ResponseFormat, RoleType, TokenUsage

logger = logging.getLogger(__name__)


class EvaluationOutcome(NamedTuple):
    """Raw evaluator response and the usage of the call that produced it."""

    raw_text: str
    usage: TokenUsage


class ReflectionEvaluator:
    """Issues independent evaluation calls.

    Stateless apart from its collaborators. Does not parse or validate the
    response and performs no retries; provider errors propagate unchanged.
    """

    def __init__(self, llm_provider: LLMProvider, renderer: Optional[PromptRenderer] = None):
        """Initialize the evaluator.

        Args:
            llm_provider: Provider used for the evaluation call
            renderer: Prompt renderer for the evaluator template
        """
        self._llm_provider = llm_provider
        self._renderer = renderer or PromptRenderer()

    def build_system_prompt(
        self,
        task: str,
        policy: ReflectionPolicy,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Render the evaluator system prompt.

        The task is always substituted. Without evaluation criteria the
        ``evaluationCriteria`` placeholder renders empty unless the caller
        supplies it.
        """
        eval_context: Dict[str, Any] = dict(variables or {})
        eval_context["task"] = task
        if policy.evaluation_criteria:
            eval_context["evaluationCriteria"] = policy.evaluation_criteria
        else:
            eval_context.setdefault("evaluationCriteria", "")
        return self._renderer.render(policy.evaluator_prompt_template, eval_context)

    @staticmethod
    def build_user_message(candidate_solution: str) -> str:
        return EVALUATION_USER_MESSAGE_TEMPLATE.replace("{{solution}}", candidate_solution)

    async def evaluate(
        self,
        task: str,
        candidate_solution: str,
        policy: ReflectionPolicy,
        agent: ReflectiveAgent,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> EvaluationOutcome:
        """Evaluate a candidate solution in an independent LLM context.

        Args:
            task: The original task given to the agent
            candidate_solution: Solution text to judge
            policy: Reflection policy providing prompt and criteria
            agent: Agent supplying model, temperature and name (read-only)
            variables: Extra template variables for the evaluator prompt

        Returns:
            Raw evaluator text and the usage consumed by the call
        """
        messages = [
            Message.of(RoleType.SYSTEM, self.build_system_prompt(task, policy, variables), f"{agent.name}-evaluator"),
            Message.of(RoleType.USER, self.build_user_message(candidate_solution)),
        ]

        logger.debug(f"Requesting evaluation for agent '{agent.name}' with model {agent.model}")
        response = await self._llm_provider.complete(
            messages,
            response_format=ResponseFormat.JSON,
            model=agent.model,
            temperature=agent.temperature,
        )
        return EvaluationOutcome(raw_text=response.content, usage=response.usage)


def build_improvement_prompt(evaluation_text: str, evaluation: EvaluationResult) -> str:
    """Build the prompt asking the agent to regenerate its solution.

    Contains the raw evaluation, itemized weaknesses and suggestions, and a
    closing instruction.
    """
    lines = [IMPROVEMENT_PROMPT_HEADER, "", "**Evaluation Feedback:**", evaluation_text, ""]

    if evaluation.weaknesses:
        lines.append("**Key Issues to Address:**")
        lines.extend(f"- {weakness}" for weakness in evaluation.weaknesses)
        lines.append("")

    if evaluation.suggestions:
        lines.append("**Improvement Suggestions:**")
        lines.extend(f"- {suggestion}" for suggestion in evaluation.suggestions)
        lines.append("")

    lines.append(IMPROVEMENT_PROMPT_FOOTER)
    return "\n".join(lines)
