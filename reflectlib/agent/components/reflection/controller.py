"""
Reflection controller for the agent system.

This module provides the control loop that iteratively improves an
agent's output:

1. Evaluating the current output in an independent LLM context
2. Deciding whether the run should terminate
3. Asking the agent to regenerate its output from the feedback
4. Recording every round in a ``ReflectionHistory``

One controller instance drives exactly one run.
"""

import asyncio
import logging
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Optional, Tuple

from reflectlib.agent.core.errors import (
    EvaluationContractError,
    ReflectionConfigurationError,
    ReflectionError,
    ReflectionStateError,
)
from reflectlib.agent.core.interfaces import ReflectiveAgent
from reflectlib.agent.components.reflection.evaluator import ReflectionEvaluator, build_improvement_prompt
from reflectlib.agent.components.reflection.history import ReflectionHistory
from reflectlib.agent.components.reflection.listener import ReflectionListener, notify
from reflectlib.agent.components.reflection.models import (
    ControllerState,
    EvaluationResult,
    ReflectionPolicy,
    ReflectionRound,
    ReflectionStatus,
    TerminationReason,
)
from reflectlib.agent.components.reflection.parsing import parse_evaluation
from reflectlib.providers.llm.base import LLMProvider, PromptRenderer

logger = logging.getLogger(__name__)

PASS_SCORE_THRESHOLD = 8
ACCEPTABLE_SCORE_THRESHOLD = 7

TerminationRule = Callable[[EvaluationResult, int, ReflectionPolicy], bool]

# Evaluated in order; the first rule that holds names the reason.
TERMINATION_RULES: Tuple[Tuple[TerminationReason, TerminationRule], ...] = (
    (TerminationReason.SCORE_ACHIEVED,
     lambda evaluation, current_round, policy: evaluation.passed and evaluation.score >= PASS_SCORE_THRESHOLD),
    (TerminationReason.EVALUATOR_DECLINED,
     lambda evaluation, current_round, policy: not evaluation.should_continue),
    (TerminationReason.GOOD_ENOUGH,
     lambda evaluation, current_round, policy: current_round >= policy.min_round
     and evaluation.score >= ACCEPTABLE_SCORE_THRESHOLD),
)

_STATE_BY_STATUS: Dict[ReflectionStatus, ControllerState] = {
    ReflectionStatus.COMPLETED_SUCCESS: ControllerState.TERMINATED_SUCCESS,
    ReflectionStatus.COMPLETED_MAX_ROUNDS: ControllerState.TERMINATED_MAX_ROUNDS,
    ReflectionStatus.COMPLETED_NO_IMPROVEMENT: ControllerState.TERMINATED_NO_IMPROVEMENT,
    ReflectionStatus.FAILED: ControllerState.FAILED,
    ReflectionStatus.INTERRUPTED: ControllerState.INTERRUPTED,
}


def check_termination(
    evaluation: EvaluationResult, current_round: int, policy: ReflectionPolicy
) -> Optional[TerminationReason]:
    """Return the first termination reason that holds, or None to keep refining."""
    for reason, rule in TERMINATION_RULES:
        if rule(evaluation, current_round, policy):
            return reason
    return None


class ReflectionController:
    """Drives one reflection run for one agent.

    Responsibilities:
    1. Validating the configuration before any network call
    2. Running rounds until a termination condition holds
    3. Recording rounds and the terminal status in the history
    4. Notifying the listener of lifecycle events

    ``execute`` is not re-entrant and may be called only once.
    """

    def __init__(
        self,
        agent: ReflectiveAgent,
        policy: ReflectionPolicy,
        llm_provider: Optional[LLMProvider] = None,
        variables: Optional[Dict[str, Any]] = None,
        listener: Optional[ReflectionListener] = None,
        evaluator: Optional[ReflectionEvaluator] = None,
        renderer: Optional[PromptRenderer] = None,
    ):
        """Initialize the controller.

        Args:
            agent: Agent whose output is refined
            policy: Reflection policy for this run
            llm_provider: Provider for evaluation calls, defaults to the agent's
            variables: Template variables for the evaluator prompt and regeneration
            listener: Optional lifecycle listener
            evaluator: Evaluator override, mainly for tests
            renderer: Prompt renderer for the default evaluator
        """
        if agent is None:
            raise ReflectionConfigurationError("Agent cannot be None", config_key="agent")
        if policy is None:
            raise ReflectionConfigurationError("ReflectionPolicy cannot be None", config_key="policy")

        self._agent = agent
        self._policy = policy
        self._variables = variables
        self._listener = listener
        self._evaluator = evaluator or ReflectionEvaluator(llm_provider or agent.llm_provider, renderer)

        self._history: Optional[ReflectionHistory] = None
        self._state = ControllerState.NOT_STARTED
        self._termination_reason: Optional[TerminationReason] = None

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def termination_reason(self) -> Optional[TerminationReason]:
        return self._termination_reason

    def get_history(self) -> Optional[ReflectionHistory]:
        """History of the run; None before ``execute`` or after a configuration error."""
        return self._history

    def get_config(self) -> ReflectionPolicy:
        return self._policy

    async def execute(self) -> ReflectionHistory:
        """Run the reflection loop until a termination condition is met.

        Returns:
            The completed history

        Raises:
            ReflectionStateError: If the controller already ran
            ReflectionConfigurationError: If the configuration is invalid
            ReflectionError: If anything fails during the loop; the history
                is closed as FAILED and stays available via ``get_history``
        """
        if self._state is not ControllerState.NOT_STARTED:
            raise ReflectionStateError(
                f"Reflection controller already used (state: {self._state.name})", operation="execute"
            )

        try:
            self._validate_configuration()
        except ReflectionConfigurationError:
            self._state = ControllerState.FAILED
            raise

        agent = self._agent
        history = ReflectionHistory(agent.id, agent.name, agent.input, self._policy.evaluation_criteria)
        self._history = history
        self._state = ControllerState.RUNNING

        if not self._policy.enabled:
            logger.info(f"Reflection disabled by policy for agent {agent.name}, skipping")
            history.complete(ReflectionStatus.COMPLETED_SUCCESS)
            self._state = ControllerState.TERMINATED_SUCCESS
            return history

        agent.round = 1

        try:
            await notify(self._listener, "on_reflection_start", agent, agent.input, self._policy.evaluation_criteria)

            while await self._should_continue_reflection():
                reason = await self._execute_reflection_round()
                if reason is not None:
                    self._termination_reason = reason
                    break
                agent.round += 1

            status = self._determine_completion_status()
            history.complete(status)
            self._state = _STATE_BY_STATUS[status]
            logger.info(
                f"Reflection finished for agent {agent.name}: status={status.name}, "
                f"rounds={len(history.rounds)}, final_score={history.final_score}"
            )
            await notify(self._listener, "on_reflection_complete", agent, history)

        except asyncio.CancelledError:
            logger.warning(f"Reflection interrupted for agent {agent.name} in round {agent.round}")
            if not history.is_complete:
                history.complete(ReflectionStatus.INTERRUPTED)
            self._state = ControllerState.INTERRUPTED
            raise

        except Exception as e:
            logger.error(f"Reflection failed for agent {agent.name}: {str(e)}", exc_info=True)
            history.complete(ReflectionStatus.FAILED)
            self._state = ControllerState.FAILED
            try:
                await notify(self._listener, "on_error", agent, agent.round, e)
            except Exception as hook_error:
                # The original failure is what gets reported.
                logger.error(f"on_error listener failed for agent {agent.name}: {str(hook_error)}", exc_info=True)
            raise ReflectionError(
                message="Reflection execution failed",
                agent=agent.name,
                round_number=agent.round,
                cause=e,
            ) from e

        return history

    async def _should_continue_reflection(self) -> bool:
        agent = self._agent

        if agent.round > self._policy.max_round:
            logger.info(f"Max rounds ({self._policy.max_round}) reached for agent {agent.name}")
            self._termination_reason = TerminationReason.MAX_ROUNDS
            await notify(self._listener, "on_max_rounds_reached", agent, self._history.final_score)
            return False

        if not agent.not_terminated():
            logger.info(f"Agent {agent.name} termination condition satisfied, stopping reflection")
            self._termination_reason = TerminationReason.AGENT_TERMINATED
            return False

        return True

    async def _execute_reflection_round(self) -> Optional[TerminationReason]:
        """Run one round.

        Returns:
            The termination reason when this round ends the run, else None
        """
        agent = self._agent
        current_round = agent.round
        logger.info(f"Reflection round: {current_round}/{self._policy.max_round}, agent: {agent.name}")

        round_start = time.perf_counter()
        tokens_before = agent.current_token_usage().total_tokens

        await notify(self._listener, "on_before_round", agent, current_round, agent.output)

        solution_to_evaluate = agent.output
        outcome = await self._evaluator.evaluate(
            agent.input, solution_to_evaluate, self._policy, agent, self._variables
        )
        agent.add_token_usage(outcome.usage)

        evaluation = parse_evaluation(outcome.raw_text, round_number=current_round)
        logger.info(
            f"Round {current_round} evaluation parsed: score={evaluation.score}, pass={evaluation.passed}, "
            f"shouldContinue={evaluation.should_continue}, weaknesses={len(evaluation.weaknesses)}, "
            f"suggestions={len(evaluation.suggestions)}"
        )

        reason = check_termination(evaluation, current_round, self._policy)
        if reason is not None:
            logger.info(
                f"Reflection terminating ({reason.value}): score={evaluation.score}, "
                f"pass={evaluation.passed}, shouldContinue={evaluation.should_continue}"
            )
            self._record_round(current_round, solution_to_evaluate, outcome.raw_text, evaluation, round_start, tokens_before)

            if reason is TerminationReason.SCORE_ACHIEVED:
                await notify(self._listener, "on_score_achieved", agent, evaluation.score, current_round)
            elif reason is TerminationReason.EVALUATOR_DECLINED:
                await notify(self._listener, "on_no_improvement", agent, evaluation.score, current_round)
            return reason

        if self._policy.require_well_formed and not evaluation.is_well_formed():
            raise EvaluationContractError(
                message="Evaluation has no actionable weaknesses or suggestions to regenerate from",
                raw_text=outcome.raw_text,
                round_number=current_round,
            )

        improvement_prompt = build_improvement_prompt(outcome.raw_text, evaluation)
        await agent.regenerate(improvement_prompt, self._variables)

        self._record_round(current_round, solution_to_evaluate, outcome.raw_text, evaluation, round_start, tokens_before)
        await notify(self._listener, "on_after_round", agent, current_round, agent.output, evaluation)
        return None

    def _record_round(
        self,
        round_number: int,
        evaluation_input: str,
        evaluation_output: str,
        evaluation: EvaluationResult,
        round_start: float,
        tokens_before: int,
    ) -> None:
        cumulative = self._agent.current_token_usage().total_tokens
        self._history.add_round(ReflectionRound(
            round_number=round_number,
            evaluation_input=evaluation_input,
            evaluation_output_raw=evaluation_output,
            evaluation=evaluation,
            round_duration=timedelta(seconds=time.perf_counter() - round_start),
            tokens_used=max(0, cumulative - tokens_before),
            cumulative_tokens=cumulative,
        ))

    def _determine_completion_status(self) -> ReflectionStatus:
        if self._agent.round > self._policy.max_round:
            return ReflectionStatus.COMPLETED_MAX_ROUNDS

        rounds = self._history.rounds
        if rounds:
            last_evaluation = rounds[-1].evaluation
            if last_evaluation.passed and last_evaluation.score >= PASS_SCORE_THRESHOLD:
                return ReflectionStatus.COMPLETED_SUCCESS
            if not last_evaluation.should_continue:
                return ReflectionStatus.COMPLETED_NO_IMPROVEMENT

        return ReflectionStatus.COMPLETED_SUCCESS

    def _validate_configuration(self) -> None:
        agent = self._agent
        policy = self._policy

        if not agent.terminations:
            raise ReflectionConfigurationError(
                f"Reflection agent must have termination: {agent.name}<{agent.id}>",
                config_key="terminations",
                agent=agent.name,
            )

        if policy.max_round < 1:
            raise ReflectionConfigurationError(
                "max_round must be at least 1", config_key="max_round", invalid_value=policy.max_round, agent=agent.name
            )

        if policy.min_round < 0:
            raise ReflectionConfigurationError(
                "min_round cannot be negative", config_key="min_round", invalid_value=policy.min_round, agent=agent.name
            )

        if policy.min_round > policy.max_round:
            raise ReflectionConfigurationError(
                f"min_round ({policy.min_round}) cannot exceed max_round ({policy.max_round})",
                config_key="min_round",
                invalid_value=policy.min_round,
                agent=agent.name,
            )
