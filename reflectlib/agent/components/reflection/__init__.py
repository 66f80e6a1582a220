"""Reflection module for agent self-evaluation and improvement."""

from .controller import ReflectionController, check_termination
from .evaluator import EvaluationOutcome, ReflectionEvaluator, build_improvement_prompt
from .history import ReflectionHistory
from .listener import CompositeReflectionListener, LoggingReflectionListener, ReflectionListener
from .models import (
    ControllerState,
    EvaluationResult,
    ReflectionPolicy,
    ReflectionRound,
    ReflectionStatus,
    TerminationReason,
)
from .parsing import parse_evaluation

__all__ = [
    "ReflectionController",
    "check_termination",
    "EvaluationOutcome",
    "ReflectionEvaluator",
    "build_improvement_prompt",
    "ReflectionHistory",
    "ReflectionListener",
    "LoggingReflectionListener",
    "CompositeReflectionListener",
    "ControllerState",
    "EvaluationResult",
    "ReflectionPolicy",
    "ReflectionRound",
    "ReflectionStatus",
    "TerminationReason",
    "parse_evaluation",
]
