"""Tests for reflection models."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from reflectlib.agent.components.reflection.models import (
    EvaluationResult,
    ReflectionPolicy,
    ReflectionRound,
    ReflectionStatus,
)
from reflectlib.agent.components.reflection.prompts import (
    DEFAULT_REFLECTION_TEMPLATE,
    DEFAULT_REFLECTION_WITH_CRITERIA_TEMPLATE,
)


class TestReflectionStatus:
    """Test status terminality."""

    def test_only_in_progress_is_non_terminal(self):
        assert ReflectionStatus.IN_PROGRESS.is_terminal is False
        for status in ReflectionStatus:
            if status is not ReflectionStatus.IN_PROGRESS:
                assert status.is_terminal is True


class TestReflectionPolicy:
    """Test policy construction and validation."""

    def test_default_policy(self):
        policy = ReflectionPolicy.default()

        assert policy.enabled is True
        assert policy.max_round == 3
        assert policy.min_round == 1
        assert policy.evaluator_prompt_template == DEFAULT_REFLECTION_TEMPLATE
        assert policy.evaluation_criteria is None
        assert policy.require_well_formed is False

    def test_with_criteria(self):
        policy = ReflectionPolicy.with_criteria("Must cite sources", max_round=5, min_round=2)

        assert policy.evaluation_criteria == "Must cite sources"
        assert policy.evaluator_prompt_template == DEFAULT_REFLECTION_WITH_CRITERIA_TEMPLATE
        assert policy.max_round == 5
        assert policy.min_round == 2

    def test_policy_is_immutable(self):
        policy = ReflectionPolicy.default()
        with pytest.raises(ValidationError):
            policy.max_round = 10

    def test_max_round_must_be_positive(self):
        with pytest.raises(ValidationError):
            ReflectionPolicy(max_round=0, evaluator_prompt_template="judge")

    def test_min_round_cannot_be_negative(self):
        with pytest.raises(ValidationError):
            ReflectionPolicy(max_round=3, min_round=-1, evaluator_prompt_template="judge")

    def test_min_round_cannot_exceed_max_round(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            ReflectionPolicy(max_round=2, min_round=3, evaluator_prompt_template="judge")

    def test_min_round_zero_allowed(self):
        policy = ReflectionPolicy(max_round=1, min_round=0, evaluator_prompt_template="judge")
        assert policy.min_round == 0

    def test_template_required(self):
        with pytest.raises(ValidationError):
            ReflectionPolicy(max_round=3, evaluator_prompt_template="")


class TestEvaluationResult:
    """Test evaluation predicates and derived values."""

    def test_aliases_and_field_names(self):
        by_alias = EvaluationResult.model_validate({"score": 7, "pass": True, "dimensions": {"form": 6}})
        by_name = EvaluationResult(score=7, passed=True, dimension_scores={"form": 6})
        assert by_alias == by_name

    def test_score_validity(self):
        assert EvaluationResult(score=1).is_score_valid()
        assert EvaluationResult(score=10).is_score_valid()
        assert not EvaluationResult(score=0).is_score_valid()
        assert not EvaluationResult(score=11).is_score_valid()

    def test_well_formed_requires_feedback(self):
        assert EvaluationResult(score=5, weaknesses=["a"], suggestions=["b"]).is_well_formed()
        assert not EvaluationResult(score=5, weaknesses=["a"]).is_well_formed()
        assert not EvaluationResult(score=5, suggestions=["b"]).is_well_formed()
        assert not EvaluationResult(score=12, weaknesses=["a"], suggestions=["b"]).is_well_formed()

    def test_room_for_improvement(self):
        assert EvaluationResult(score=9, should_continue=False).has_room_for_improvement()
        assert not EvaluationResult(score=10, should_continue=False).has_room_for_improvement()
        assert EvaluationResult(score=10, weaknesses=["typo"], should_continue=False).has_room_for_improvement()

    def test_major_issue_is_first_weakness(self):
        assert EvaluationResult(score=4, weaknesses=["no tests", "naming"]).major_issue == "no tests"
        assert EvaluationResult(score=4).major_issue is None

    def test_improvement_priority_is_lowest_dimension(self):
        evaluation = EvaluationResult(score=6, dimension_scores={"form": 8, "imagery": 4, "tone": 6})
        assert evaluation.improvement_priority == "imagery"
        assert EvaluationResult(score=6).improvement_priority is None

    def test_weighted_score(self):
        evaluation = EvaluationResult(score=6, dimension_scores={"form": 8, "imagery": 4})

        assert evaluation.weighted_score({"form": 3.0, "imagery": 1.0}) == pytest.approx(7.0)
        assert evaluation.weighted_score({"form": 1.0, "unknown": 5.0}) == pytest.approx(8.0)

    def test_weighted_score_falls_back_to_score(self):
        evaluation = EvaluationResult(score=6, dimension_scores={"form": 8})

        assert evaluation.weighted_score() == 6.0
        assert evaluation.weighted_score({"form": 0.0}) == 6.0
        assert EvaluationResult(score=6).weighted_score({"form": 1.0}) == 6.0

    def test_str(self):
        text = str(EvaluationResult(score=7, passed=True, confidence=0.75, strengths=["x"]))
        assert text == "EvaluationResult(score=7, pass=True, confidence=0.75, strengths=1, weaknesses=0)"


class TestReflectionRound:
    """Test round records."""

    def test_round_exposes_score(self):
        round = ReflectionRound(
            round_number=1,
            evaluation_input="draft",
            evaluation_output_raw='{"score": 6}',
            evaluation=EvaluationResult(score=6),
            round_duration=timedelta(seconds=1),
        )

        assert round.score == 6
        assert round.tokens_used == 0
        assert round.improvement_rate == 0.0

    def test_round_number_must_be_positive(self):
        with pytest.raises(ValidationError):
            ReflectionRound(
                round_number=0,
                evaluation_input="draft",
                evaluation_output_raw="{}",
                evaluation=EvaluationResult(score=6),
                round_duration=timedelta(0),
            )
