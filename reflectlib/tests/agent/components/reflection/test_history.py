"""Tests for reflection history and analytics."""

from datetime import timedelta

import pytest

from reflectlib.agent.components.reflection.history import ReflectionHistory
from reflectlib.agent.components.reflection.models import EvaluationResult, ReflectionRound, ReflectionStatus
from reflectlib.agent.core.errors import ReflectionStateError


def make_round(number, score, tokens=10):
    return ReflectionRound(
        round_number=number,
        evaluation_input=f"draft {number - 1}",
        evaluation_output_raw=f'{{"score": {score}}}',
        evaluation=EvaluationResult(score=score),
        round_duration=timedelta(milliseconds=250),
        tokens_used=tokens,
        cumulative_tokens=tokens * number,
    )


def history_with(*scores):
    history = ReflectionHistory("agent-1", "writer", "Write a haiku", "5-7-5")
    for number, score in enumerate(scores, start=1):
        history.add_round(make_round(number, score))
    return history


class TestReflectionHistoryLifecycle:
    """Test round appends and completion."""

    def test_new_history_in_progress(self):
        history = ReflectionHistory("agent-1", "writer", "Write a haiku")

        assert history.status is ReflectionStatus.IN_PROGRESS
        assert history.is_complete is False
        assert history.rounds == ()
        assert history.end_time is None

    def test_rounds_view_is_read_only(self):
        history = history_with(5)
        with pytest.raises(AttributeError):
            history.rounds.append(make_round(2, 6))

    def test_round_numbers_must_increase(self):
        history = history_with(5, 6)

        with pytest.raises(ReflectionStateError):
            history.add_round(make_round(2, 7))

    def test_cannot_add_after_complete(self):
        history = history_with(5)
        history.complete(ReflectionStatus.COMPLETED_SUCCESS)

        with pytest.raises(ReflectionStateError):
            history.add_round(make_round(2, 6))

    def test_complete_sets_end_time(self):
        history = history_with(5)
        history.complete(ReflectionStatus.COMPLETED_MAX_ROUNDS)

        assert history.status is ReflectionStatus.COMPLETED_MAX_ROUNDS
        assert history.end_time is not None
        assert history.is_complete

    def test_complete_requires_terminal_status(self):
        with pytest.raises(ReflectionStateError):
            history_with(5).complete(ReflectionStatus.IN_PROGRESS)

    def test_complete_only_once(self):
        history = history_with(5)
        history.complete(ReflectionStatus.COMPLETED_SUCCESS)

        with pytest.raises(ReflectionStateError):
            history.complete(ReflectionStatus.COMPLETED_NO_IMPROVEMENT)

    def test_failed_supersedes_completed(self):
        history = history_with(5)
        history.complete(ReflectionStatus.COMPLETED_SUCCESS)
        history.complete(ReflectionStatus.FAILED)

        assert history.status is ReflectionStatus.FAILED


class TestReflectionHistoryAnalytics:
    """Test derived metrics."""

    def test_empty_history_metrics(self):
        history = ReflectionHistory("agent-1", "writer", "Write a haiku")

        assert history.final_score == 0
        assert history.score_trend == []
        assert history.average_improvement_rate == 0.0
        assert history.average_percent_improvement == 0.0
        assert history.best_round is None
        assert history.has_continuous_improvement() is False
        assert history.total_tokens_used == 0

    def test_improvement_rate_stamped_on_add(self):
        history = history_with(4, 6, 3)

        rates = [r.improvement_rate for r in history.rounds]
        assert rates[0] == 0.0
        assert rates[1] == pytest.approx(50.0)
        assert rates[2] == pytest.approx(-50.0)

    def test_score_trend_and_final_score(self):
        history = history_with(4, 6, 3)

        assert history.score_trend == [4, 6, 3]
        assert history.final_score == 3

    def test_average_improvement_rate_counts_increasing_pairs(self):
        assert history_with(4, 6, 3).average_improvement_rate == pytest.approx(0.5)
        assert history_with(4, 5, 6).average_improvement_rate == pytest.approx(1.0)
        assert history_with(6, 6).average_improvement_rate == 0.0

    def test_average_percent_improvement(self):
        assert history_with(4, 6, 3).average_percent_improvement == pytest.approx(0.0)
        assert history_with(5, 10).average_percent_improvement == pytest.approx(100.0)

    def test_best_round_prefers_earliest_tie(self):
        best = history_with(7, 9, 9, 4).best_round
        assert best.round_number == 2

    def test_continuous_improvement(self):
        assert history_with(3, 5, 8).has_continuous_improvement()
        assert not history_with(3, 5, 5).has_continuous_improvement()
        assert not history_with(8).has_continuous_improvement()

    def test_total_tokens_sums_round_deltas(self):
        assert history_with(4, 6, 3).total_tokens_used == 30

    def test_total_duration_uses_end_time(self):
        history = history_with(5)
        history.complete(ReflectionStatus.COMPLETED_SUCCESS)

        assert history.total_duration == history.end_time - history.start_time


class TestReflectionHistoryReporting:
    """Test summary and serialization."""

    def test_summary_contents(self):
        history = history_with(4, 8)
        history.complete(ReflectionStatus.COMPLETED_SUCCESS)

        summary = history.generate_summary()

        assert "Reflection Summary for writer" in summary
        assert "Task: Write a haiku" in summary
        assert "Total Rounds: 2" in summary
        assert "Final Score: 8" in summary
        assert "Status: COMPLETED_SUCCESS" in summary
        assert "Round 2: Score=8, Improvement=100.0%" in summary

    def test_summary_without_rounds(self):
        summary = ReflectionHistory("agent-1", "writer", "Write a haiku").generate_summary()
        assert "Round Details:" not in summary

    def test_to_dict(self):
        history = history_with(4, 8)
        history.complete(ReflectionStatus.COMPLETED_SUCCESS)

        data = history.to_dict()

        assert data["agent_name"] == "writer"
        assert data["evaluation_criteria"] == "5-7-5"
        assert data["status"] == "completed_success"
        assert data["final_score"] == 8
        assert len(data["rounds"]) == 2
        assert data["rounds"][1]["evaluation"]["pass"] is False
        assert data["rounds"][1]["improvement_rate"] == 100.0

    def test_repr(self):
        assert repr(history_with(5)) == "ReflectionHistory(agent='writer', rounds=1, status=IN_PROGRESS)"
