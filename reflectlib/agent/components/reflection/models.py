from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Mapping, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from reflectlib.core.models import StrictBaseModel
from reflectlib.agent.components.reflection.prompts import (
    DEFAULT_REFLECTION_TEMPLATE,
    DEFAULT_REFLECTION_WITH_CRITERIA_TEMPLATE,
)

MIN_SCORE = 1
MAX_SCORE = 10


class ReflectionStatus(str, Enum):
    """Status of one reflection run. Only IN_PROGRESS is non-terminal."""

    IN_PROGRESS = "in_progress"
    COMPLETED_SUCCESS = "completed_success"
    COMPLETED_MAX_ROUNDS = "completed_max_rounds"
    COMPLETED_NO_IMPROVEMENT = "completed_no_improvement"
    FAILED = "failed"
    INTERRUPTED = "interrupted"

    @property
    def is_terminal(self) -> bool:
        return self is not ReflectionStatus.IN_PROGRESS


class ControllerState(str, Enum):
    """Lifecycle of a ReflectionController instance."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    TERMINATED_SUCCESS = "terminated_success"
    TERMINATED_MAX_ROUNDS = "terminated_max_rounds"
    TERMINATED_NO_IMPROVEMENT = "terminated_no_improvement"
    FAILED = "failed"
    INTERRUPTED = "interrupted"


class TerminationReason(str, Enum):
    """Why a round ended the loop without regeneration."""

    SCORE_ACHIEVED = "score_achieved"
    EVALUATOR_DECLINED = "evaluator_declined"
    GOOD_ENOUGH = "good_enough"
    AGENT_TERMINATED = "agent_terminated"
    MAX_ROUNDS = "max_rounds"


class ReflectionPolicy(StrictBaseModel):
    """Immutable parameters governing a reflection run."""

    enabled: bool = Field(default=True, description="Whether reflection runs at all")
    max_round: int = Field(..., ge=1, description="Maximum number of rounds")
    min_round: int = Field(default=1, ge=0, description="Rounds before a 'good enough' score may end the run")
    evaluator_prompt_template: str = Field(..., min_length=1, description="Evaluator system prompt with {{task}}/{{evaluationCriteria}} placeholders")
    evaluation_criteria: Optional[str] = Field(default=None, description="Business criteria substituted into the evaluator prompt")
    require_well_formed: bool = Field(default=False, description="Reject evaluations without weaknesses/suggestions before regenerating")

    @model_validator(mode="after")
    def _check_round_bounds(self) -> "ReflectionPolicy":
        if self.min_round > self.max_round:
            raise ValueError(f"min_round ({self.min_round}) cannot exceed max_round ({self.max_round})")
        return self

    @classmethod
    def default(cls) -> "ReflectionPolicy":
        """Policy used when reflection is switched on without explicit configuration."""
        return cls(
            max_round=3,
            min_round=1,
            evaluator_prompt_template=DEFAULT_REFLECTION_TEMPLATE,
        )

    @classmethod
    def with_criteria(cls, criteria: str, max_round: int = 3, min_round: int = 1) -> "ReflectionPolicy":
        """Policy using the default evaluator template with business criteria."""
        return cls(
            max_round=max_round,
            min_round=min_round,
            evaluator_prompt_template=DEFAULT_REFLECTION_WITH_CRITERIA_TEMPLATE,
            evaluation_criteria=criteria,
        )


class EvaluationResult(StrictBaseModel):
    """One evaluator judgment, decoded from the evaluator's JSON response.

    The model does not constrain ``score``; the hard range check belongs
    to parsing so that an out-of-range score is reported as such.
    """

    # LLM output routinely carries keys we do not use
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    score: int = Field(..., description="Overall score, 1-10")
    passed: bool = Field(default=False, alias="pass", description="Whether all critical requirements are met")
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    dimension_scores: Dict[str, int] = Field(default_factory=dict, alias="dimensions")
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    improved_solution_hint: Optional[str] = Field(default=None, alias="improved_solution")
    should_continue: bool = Field(default=True)

    @field_validator("strengths", "weaknesses", "suggestions", mode="before")
    @classmethod
    def _none_as_empty_list(cls, v):
        return [] if v is None else v

    @field_validator("dimension_scores", mode="before")
    @classmethod
    def _none_as_empty_dict(cls, v):
        return {} if v is None else v

    @field_validator("dimension_scores")
    @classmethod
    def _check_dimension_scores(cls, v: Dict[str, int]) -> Dict[str, int]:
        for key, value in v.items():
            if not MIN_SCORE <= value <= MAX_SCORE:
                raise ValueError(f"Dimension score for '{key}' must be between {MIN_SCORE} and {MAX_SCORE}")
        return v

    def is_score_valid(self) -> bool:
        return MIN_SCORE <= self.score <= MAX_SCORE

    def is_well_formed(self) -> bool:
        """Stricter sanity check: valid score plus actionable feedback."""
        return self.is_score_valid() and bool(self.weaknesses) and bool(self.suggestions)

    def has_room_for_improvement(self) -> bool:
        return self.score < MAX_SCORE or bool(self.weaknesses) or self.should_continue

    @property
    def major_issue(self) -> Optional[str]:
        """First listed weakness, assumed to be the most important."""
        return self.weaknesses[0] if self.weaknesses else None

    @property
    def improvement_priority(self) -> Optional[str]:
        """Dimension with the lowest score."""
        if not self.dimension_scores:
            return None
        return min(self.dimension_scores.items(), key=lambda item: item[1])[0]

    def weighted_score(self, weights: Optional[Mapping[str, float]] = None) -> float:
        """Weighted mean of dimension scores, falling back to ``score``.

        Only dimensions with a positive weight contribute.
        """
        if not self.dimension_scores or not weights:
            return float(self.score)

        weighted_sum = 0.0
        total_weight = 0.0
        for dimension, value in self.dimension_scores.items():
            weight = weights.get(dimension)
            if weight is not None and weight > 0:
                weighted_sum += value * weight
                total_weight += weight

        return weighted_sum / total_weight if total_weight > 0 else float(self.score)

    def __str__(self) -> str:
        return (
            f"EvaluationResult(score={self.score}, pass={self.passed}, confidence={self.confidence:.2f}, "
            f"strengths={len(self.strengths)}, weaknesses={len(self.weaknesses)})"
        )


class ReflectionRound(StrictBaseModel):
    """Immutable record of one evaluate-then-possibly-regenerate cycle.

    ``tokens_used`` is the usage consumed during this round only;
    ``cumulative_tokens`` is the agent's running total when the round
    was recorded.
    """

    round_number: int = Field(..., ge=1)
    evaluation_input: str = Field(..., description="Solution text that was judged")
    evaluation_output_raw: str = Field(..., description="Unparsed evaluator response")
    evaluation: EvaluationResult
    round_duration: timedelta
    tokens_used: int = Field(default=0, ge=0)
    cumulative_tokens: int = Field(default=0, ge=0)
    timestamp: datetime = Field(default_factory=datetime.now)
    improvement_rate: float = Field(default=0.0, description="Percent score change versus the previous round")

    @property
    def score(self) -> int:
        return self.evaluation.score
