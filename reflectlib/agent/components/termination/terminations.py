"""
Agent termination predicates.

These are agent-owned stop conditions, checked by the reflection
controller before every round through ``agent.not_terminated()``.
"""

import logging
import re
from typing import List, Optional

from pydantic import ValidationError

from reflectlib.agent.core.interfaces import ReflectiveAgent
from reflectlib.agent.components.reflection.models import MAX_SCORE, MIN_SCORE, EvaluationResult

logger = logging.getLogger(__name__)

STOP_MESSAGE = "TERMINATE"

# Checked in order; the first match wins.
_SCORE_PATTERNS = [
    re.compile(r'"score"\s*:\s*(\d+)'),
    re.compile(r'(?i)score\s*[:=]\s*(\d+)'),
    re.compile(r'(\d+)\s*/\s*10\b'),
]


def extract_score(text: str) -> Optional[int]:
    """Find a score in free text such as ``"score": 8``, ``Score: 8`` or ``8/10``."""
    for pattern in _SCORE_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None


def extract_evaluation(text: str) -> Optional[EvaluationResult]:
    """Decode the outermost JSON object embedded in ``text``, if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    try:
        return EvaluationResult.model_validate_json(text[start:end + 1])
    except ValidationError as e:
        logger.debug(f"Failed to parse embedded evaluation: {e.error_count()} error(s)")
        return None


class MaxRoundTermination:
    """Stops once the agent's round counter passes its ceiling."""

    def terminate(self, agent: ReflectiveAgent) -> bool:
        return agent.round > agent.max_round


class StopMessageTermination:
    """Stops when the output starts or ends with a stop message."""

    def __init__(self, stop_message: str = STOP_MESSAGE):
        self.stop_message = stop_message

    def terminate(self, agent: ReflectiveAgent) -> bool:
        output = (agent.output or "").strip()
        return output.startswith(self.stop_message) or output.endswith(self.stop_message)


class ScoreBasedTermination:
    """Stops when the agent's output reports a score at or above a target.

    The output is first searched for an embedded JSON evaluation, then for
    a textual score.
    """

    def __init__(self, target_score: int, require_pass: bool = False):
        if not MIN_SCORE <= target_score <= MAX_SCORE:
            raise ValueError(f"Target score must be between {MIN_SCORE} and {MAX_SCORE}")
        self.target_score = target_score
        self.require_pass = require_pass

    def terminate(self, agent: ReflectiveAgent) -> bool:
        output = agent.output
        if not output:
            return False

        evaluation = extract_evaluation(output)
        if evaluation is not None:
            if evaluation.score >= self.target_score and (not self.require_pass or evaluation.passed):
                logger.info(
                    f"Score-based termination triggered: score={evaluation.score}/{self.target_score}, "
                    f"pass={evaluation.passed}"
                )
                return True
            return False

        if self.require_pass:
            return False

        score = extract_score(output)
        if score is not None and score >= self.target_score:
            logger.info(f"Score-based termination triggered from text: score={score}/{self.target_score}")
            return True
        return False


class NoImprovementTermination:
    """Stops when scores found in the output stop improving.

    Terminates after ``max_no_improvement_rounds`` consecutive observations
    whose percent improvement is below ``min_improvement_rate``, or as soon
    as the score drops after round 2.
    """

    def __init__(self, max_no_improvement_rounds: int = 2, min_improvement_rate: float = 5.0):
        self.max_no_improvement_rounds = max_no_improvement_rounds
        self.min_improvement_rate = min_improvement_rate
        self._score_history: List[int] = []
        self._no_improvement_count = 0

    @property
    def score_history(self) -> List[int]:
        return list(self._score_history)

    @staticmethod
    def improvement_rate(last_score: int, current_score: int) -> float:
        if last_score == 0:
            return 100.0 if current_score > 0 else 0.0
        return (current_score - last_score) / last_score * 100.0

    def reset(self) -> None:
        self._score_history.clear()
        self._no_improvement_count = 0

    def terminate(self, agent: ReflectiveAgent) -> bool:
        output = agent.output
        if not output:
            return False

        current_score = extract_score(output)
        if current_score is None:
            return False

        if not self._score_history:
            self._score_history.append(current_score)
            return False

        last_score = self._score_history[-1]
        rate = self.improvement_rate(last_score, current_score)
        self._score_history.append(current_score)
        logger.debug(f"Round {agent.round}: score={current_score}, last_score={last_score}, improvement_rate={rate:.1f}%")

        if rate < self.min_improvement_rate:
            self._no_improvement_count += 1
            if self._no_improvement_count >= self.max_no_improvement_rounds:
                logger.info(f"Terminating due to lack of improvement after {self.max_no_improvement_rounds} rounds")
                return True
        else:
            self._no_improvement_count = 0

        if current_score < last_score and agent.round > 2:
            logger.info(f"Terminating due to score decrease: {last_score} -> {current_score}")
            return True

        return False
