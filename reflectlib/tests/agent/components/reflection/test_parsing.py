"""Tests for evaluation parsing."""

import json

import pytest

from reflectlib.agent.components.reflection.parsing import parse_evaluation, strip_code_fence
from reflectlib.agent.core.errors import EvaluationContractError

from reflectlib.tests.test_utils import evaluation_json


class TestParseEvaluation:
    """Test decoding of evaluator responses."""

    def test_full_payload(self):
        raw = json.dumps({
            "score": 8,
            "pass": True,
            "strengths": ["vivid imagery"],
            "weaknesses": ["weak ending"],
            "suggestions": ["end on a seasonal word"],
            "dimensions": {"form": 9, "imagery": 7},
            "confidence": 0.9,
            "improved_solution": "Crisp leaves drift and fall",
            "should_continue": False,
        })

        evaluation = parse_evaluation(raw)

        assert evaluation.score == 8
        assert evaluation.passed is True
        assert evaluation.strengths == ["vivid imagery"]
        assert evaluation.weaknesses == ["weak ending"]
        assert evaluation.suggestions == ["end on a seasonal word"]
        assert evaluation.dimension_scores == {"form": 9, "imagery": 7}
        assert evaluation.confidence == 0.9
        assert evaluation.improved_solution_hint == "Crisp leaves drift and fall"
        assert evaluation.should_continue is False

    def test_minimal_payload_uses_defaults(self):
        evaluation = parse_evaluation('{"score": 5}')

        assert evaluation.passed is False
        assert evaluation.strengths == []
        assert evaluation.weaknesses == []
        assert evaluation.suggestions == []
        assert evaluation.confidence == 0.5
        assert evaluation.should_continue is True

    def test_unknown_keys_ignored(self):
        evaluation = parse_evaluation(evaluation_json(6, reasoning="long explanation", rubric_version=2))
        assert evaluation.score == 6

    def test_null_lists_become_empty(self):
        evaluation = parse_evaluation('{"score": 4, "weaknesses": null, "suggestions": null}')
        assert evaluation.weaknesses == []
        assert evaluation.suggestions == []

    def test_code_fenced_payload(self):
        raw = "```json\n" + evaluation_json(7) + "\n```"
        assert parse_evaluation(raw).score == 7

    @pytest.mark.parametrize("score", [1, 10])
    def test_boundary_scores_accepted(self, score):
        assert parse_evaluation(evaluation_json(score)).score == score

    @pytest.mark.parametrize("score", [0, 11, -3])
    def test_out_of_range_score_rejected(self, score):
        raw = evaluation_json(score)

        with pytest.raises(EvaluationContractError) as exc_info:
            parse_evaluation(raw, round_number=2)

        error = exc_info.value
        assert error.message == f"Invalid evaluation score: {score}. Score must be between 1 and 10."
        assert error.raw_text == raw
        assert error.additional_context["round_number"] == 2

    def test_malformed_json_rejected(self):
        with pytest.raises(EvaluationContractError) as exc_info:
            parse_evaluation("{score: 8,")

        assert "Failed to deserialize evaluation JSON" in exc_info.value.message
        assert exc_info.value.cause is not None

    def test_missing_score_rejected(self):
        with pytest.raises(EvaluationContractError):
            parse_evaluation('{"pass": true}')

    def test_wrong_type_rejected(self):
        with pytest.raises(EvaluationContractError):
            parse_evaluation('{"score": "eight"}')

    def test_confidence_out_of_range_rejected(self):
        with pytest.raises(EvaluationContractError):
            parse_evaluation('{"score": 6, "confidence": 1.5}')

    def test_dimension_score_out_of_range_rejected(self):
        with pytest.raises(EvaluationContractError):
            parse_evaluation('{"score": 6, "dimensions": {"form": 12}}')

    def test_error_chains_validation_error(self):
        with pytest.raises(EvaluationContractError) as exc_info:
            parse_evaluation("not json")
        assert exc_info.value.__cause__ is exc_info.value.cause


class TestStripCodeFence:
    """Test Markdown fence removal."""

    def test_plain_text_unchanged(self):
        assert strip_code_fence('{"score": 1}') == '{"score": 1}'

    def test_fence_without_language(self):
        assert strip_code_fence('```\n{"score": 1}\n```') == '{"score": 1}'

    def test_inner_fence_untouched(self):
        text = 'prefix ```json\n{}\n```'
        assert strip_code_fence(text) == text
