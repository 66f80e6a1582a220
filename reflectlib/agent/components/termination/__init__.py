"""Agent termination predicates."""

from .terminations import (
    MaxRoundTermination,
    NoImprovementTermination,
    ScoreBasedTermination,
    StopMessageTermination,
    extract_evaluation,
    extract_score,
)

__all__ = [
    "MaxRoundTermination",
    "NoImprovementTermination",
    "ScoreBasedTermination",
    "StopMessageTermination",
    "extract_evaluation",
    "extract_score",
]
