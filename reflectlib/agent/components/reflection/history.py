"""
Reflection history and analytics.

The history is the audit trail of one reflection run. It is created when
the run starts, grows by appending rounds, and is closed exactly once
with a terminal status.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from reflectlib.agent.core.errors import ReflectionStateError
from reflectlib.agent.components.reflection.models import ReflectionRound, ReflectionStatus


class ReflectionHistory:
    """Append-only ledger of reflection rounds with derived analytics."""

    def __init__(
        self,
        agent_id: str,
        agent_name: str,
        initial_input: str,
        evaluation_criteria: Optional[str] = None,
    ):
        self.agent_id = agent_id
        self.agent_name = agent_name
        self.initial_input = initial_input
        self.evaluation_criteria = evaluation_criteria
        self._rounds: List[ReflectionRound] = []
        self.start_time = datetime.now()
        self.end_time: Optional[datetime] = None
        self.status = ReflectionStatus.IN_PROGRESS

    @property
    def rounds(self) -> Tuple[ReflectionRound, ...]:
        return tuple(self._rounds)

    @property
    def is_complete(self) -> bool:
        return self.status.is_terminal

    def add_round(self, round: ReflectionRound) -> ReflectionRound:
        """Append a round, stamping its improvement rate.

        Returns:
            The stored round

        Raises:
            ReflectionStateError: If the history is closed or the round
                number does not follow the previous one
        """
        if self.is_complete:
            raise ReflectionStateError(
                f"Cannot add round {round.round_number}: history already completed with {self.status.name}",
                operation="add_round",
            )

        if self._rounds:
            last = self._rounds[-1]
            if round.round_number <= last.round_number:
                raise ReflectionStateError(
                    f"Round numbers must increase: got {round.round_number} after {last.round_number}",
                    operation="add_round",
                )
            improvement = (round.score - last.score) / last.score * 100 if last.score else 0.0
            round = round.model_copy(update={"improvement_rate": improvement})

        self._rounds.append(round)
        return round

    def complete(self, status: ReflectionStatus) -> None:
        """Close the history with a terminal status.

        Allowed once, except that FAILED supersedes an earlier terminal
        status when the run fails after closing (e.g. a completion hook
        raised).
        """
        if not status.is_terminal:
            raise ReflectionStateError(f"Cannot complete history with non-terminal status {status.name}", operation="complete")
        if self.is_complete and status is not ReflectionStatus.FAILED:
            raise ReflectionStateError(f"History already completed with {self.status.name}", operation="complete")
        self.end_time = datetime.now()
        self.status = status

    # Analytics

    @property
    def total_duration(self) -> timedelta:
        end = self.end_time or datetime.now()
        return end - self.start_time

    @property
    def total_tokens_used(self) -> int:
        """Tokens consumed across all rounds (sum of per-round deltas)."""
        return sum(r.tokens_used for r in self._rounds)

    @property
    def final_score(self) -> int:
        if not self._rounds:
            return 0
        return self._rounds[-1].score

    @property
    def score_trend(self) -> List[int]:
        return [r.score for r in self._rounds]

    @property
    def average_improvement_rate(self) -> float:
        """Fraction of adjacent round pairs where the score strictly increased."""
        if len(self._rounds) < 2:
            return 0.0
        scores = self.score_trend
        improved = sum(1 for prev, cur in zip(scores, scores[1:]) if cur > prev)
        return improved / (len(scores) - 1)

    @property
    def average_percent_improvement(self) -> float:
        """Mean percent score change from round 2 onward."""
        if len(self._rounds) < 2:
            return 0.0
        rates = [r.improvement_rate for r in self._rounds[1:]]
        return sum(rates) / len(rates)

    @property
    def best_round(self) -> Optional[ReflectionRound]:
        """Highest-scoring round; the earliest wins ties."""
        best: Optional[ReflectionRound] = None
        for r in self._rounds:
            if best is None or r.score > best.score:
                best = r
        return best

    def has_continuous_improvement(self) -> bool:
        if len(self._rounds) < 2:
            return False
        scores = self.score_trend
        return all(cur > prev for prev, cur in zip(scores, scores[1:]))

    def generate_summary(self) -> str:
        """Human-readable report of the run."""
        lines = [
            f"Reflection Summary for {self.agent_name}",
            "=" * 50,
            f"Task: {self.initial_input}",
            f"Total Rounds: {len(self._rounds)}",
            f"Total Duration: {self.total_duration}",
            f"Total Tokens: {self.total_tokens_used}",
            f"Final Score: {self.final_score}",
            f"Improving Round Ratio: {self.average_improvement_rate:.2f}",
            f"Average Improvement Rate: {self.average_percent_improvement:.2f}%",
            f"Status: {self.status.name}",
        ]

        if self._rounds:
            lines.append("")
            lines.append("Round Details:")
            for r in self._rounds:
                lines.append(
                    f"  Round {r.round_number}: Score={r.score}, Improvement={r.improvement_rate:.1f}%, "
                    f"Tokens={r.tokens_used}, Time={r.round_duration}"
                )

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe snapshot of the history."""
        return {
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "initial_input": self.initial_input,
            "evaluation_criteria": self.evaluation_criteria,
            "status": self.status.value,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "total_tokens_used": self.total_tokens_used,
            "final_score": self.final_score,
            "rounds": [r.model_dump(mode="json", by_alias=True) for r in self._rounds],
        }

    def __repr__(self) -> str:
        return f"ReflectionHistory(agent='{self.agent_name}', rounds={len(self._rounds)}, status={self.status.name})"
