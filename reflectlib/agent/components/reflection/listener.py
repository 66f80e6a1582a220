"""
Reflection lifecycle listeners.

A listener is passed to each controller run; hooks are invoked in-line
and an exception raised by a hook aborts the run. Hooks may be plain
methods or coroutines.
"""

import inspect
import logging
from typing import TYPE_CHECKING, Any, Iterable, List, Optional

from reflectlib.agent.core.interfaces import ReflectiveAgent
from reflectlib.agent.components.reflection.models import EvaluationResult

if TYPE_CHECKING:
    from reflectlib.agent.components.reflection.history import ReflectionHistory

logger = logging.getLogger(__name__)


class ReflectionListener:
    """Hooks for the reflection lifecycle. Every hook defaults to a no-op."""

    def on_reflection_start(self, agent: ReflectiveAgent, task: str, evaluation_criteria: Optional[str]) -> Any:
        """Called once before the first round."""

    def on_before_round(self, agent: ReflectiveAgent, round: int, solution: str) -> Any:
        """Called before a round evaluates ``solution``."""

    def on_after_round(self, agent: ReflectiveAgent, round: int, output: str, evaluation: EvaluationResult) -> Any:
        """Called after a round regenerated the output."""

    def on_score_achieved(self, agent: ReflectiveAgent, final_score: int, round: int) -> Any:
        """Called when a passing score ends the run."""

    def on_no_improvement(self, agent: ReflectiveAgent, last_score: int, round: int) -> Any:
        """Called when the evaluator declines further improvement."""

    def on_max_rounds_reached(self, agent: ReflectiveAgent, final_score: int) -> Any:
        """Called when the round ceiling ends the run."""

    def on_reflection_complete(self, agent: ReflectiveAgent, history: "ReflectionHistory") -> Any:
        """Called after a run finished without error."""

    def on_error(self, agent: ReflectiveAgent, round: int, error: Exception) -> Any:
        """Called when the run fails."""


class LoggingReflectionListener(ReflectionListener):
    """Listener that reports each lifecycle event through ``logging``."""

    def __init__(self, level: int = logging.INFO, logger_name: Optional[str] = None):
        self.level = level
        self.logger = logging.getLogger(logger_name or __name__)

    def on_reflection_start(self, agent, task, evaluation_criteria):
        self.logger.log(self.level, f"[{agent.name}] Reflection started (criteria: {'yes' if evaluation_criteria else 'no'})")

    def on_before_round(self, agent, round, solution):
        self.logger.log(self.level, f"[{agent.name}] Round {round} evaluating {len(solution or '')} chars")

    def on_after_round(self, agent, round, output, evaluation):
        self.logger.log(self.level, f"[{agent.name}] Round {round} regenerated output after score {evaluation.score}")

    def on_score_achieved(self, agent, final_score, round):
        self.logger.log(self.level, f"[{agent.name}] Target score reached: {final_score} in round {round}")

    def on_no_improvement(self, agent, last_score, round):
        self.logger.log(self.level, f"[{agent.name}] Evaluator declined further improvement at score {last_score} (round {round})")

    def on_max_rounds_reached(self, agent, final_score):
        self.logger.log(self.level, f"[{agent.name}] Max rounds reached, final score {final_score}")

    def on_reflection_complete(self, agent, history):
        self.logger.log(self.level, f"[{agent.name}] Reflection complete: {history.status.name}, {len(history.rounds)} round(s)")

    def on_error(self, agent, round, error):
        self.logger.error(f"[{agent.name}] Reflection failed in round {round}: {error}")


class CompositeReflectionListener(ReflectionListener):
    """Fans every event out to several listeners, in order."""

    def __init__(self, listeners: Iterable[ReflectionListener]):
        self.listeners: List[ReflectionListener] = list(listeners)

    async def _dispatch(self, hook: str, *args: Any) -> None:
        for listener in self.listeners:
            await notify(listener, hook, *args)

    async def on_reflection_start(self, *args):
        await self._dispatch("on_reflection_start", *args)

    async def on_before_round(self, *args):
        await self._dispatch("on_before_round", *args)

    async def on_after_round(self, *args):
        await self._dispatch("on_after_round", *args)

    async def on_score_achieved(self, *args):
        await self._dispatch("on_score_achieved", *args)

    async def on_no_improvement(self, *args):
        await self._dispatch("on_no_improvement", *args)

    async def on_max_rounds_reached(self, *args):
        await self._dispatch("on_max_rounds_reached", *args)

    async def on_reflection_complete(self, *args):
        await self._dispatch("on_reflection_complete", *args)

    async def on_error(self, *args):
        await self._dispatch("on_error", *args)


async def notify(listener: Optional[ReflectionListener], hook: str, *args: Any) -> None:
    """Invoke a listener hook, awaiting it when it returns an awaitable.

    Listener exceptions propagate to the caller.
    """
    if listener is None:
        return
    result = getattr(listener, hook)(*args)
    if inspect.isawaitable(result):
        await result
