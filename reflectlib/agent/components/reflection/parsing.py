"""
Evaluation parsing and validation.

The evaluator's response comes from a non-deterministic model and is
treated as untrusted input: it is either decoded into a valid
``EvaluationResult`` or rejected with ``EvaluationContractError``.
"""

import logging
import re
from typing import Optional

from pydantic import ValidationError

from reflectlib.agent.core.errors import EvaluationContractError
from reflectlib.agent.components.reflection.models import MAX_SCORE, MIN_SCORE, EvaluationResult

logger = logging.getLogger(__name__)

_CODE_FENCE_PATTERN = re.compile(r"^\s*```(?:json)?\s*\n(.*?)\n?\s*```\s*$", re.DOTALL | re.IGNORECASE)


def strip_code_fence(text: str) -> str:
    """Remove a single Markdown code fence wrapping the whole payload."""
    match = _CODE_FENCE_PATTERN.match(text)
    if match:
        return match.group(1)
    return text


def parse_evaluation(raw_text: str, round_number: Optional[int] = None) -> EvaluationResult:
    """Decode and hard-validate an evaluator response.

    Args:
        raw_text: Raw evaluator response, expected to be a JSON object
        round_number: Round the response belongs to, for error context

    Returns:
        Validated evaluation

    Raises:
        EvaluationContractError: If the payload cannot be decoded or the
            score is outside [1, 10]
    """
    logger.debug(f"Parsing evaluation payload ({len(raw_text)} chars): {raw_text}")

    try:
        evaluation = EvaluationResult.model_validate_json(strip_code_fence(raw_text))
    except ValidationError as e:
        logger.error(f"Failed to parse evaluation JSON: {raw_text}")
        raise EvaluationContractError(
            message=f"Failed to deserialize evaluation JSON: {e.error_count()} validation error(s)",
            raw_text=raw_text,
            cause=e,
            round_number=round_number,
        ) from e

    if not evaluation.is_score_valid():
        raise EvaluationContractError(
            message=f"Invalid evaluation score: {evaluation.score}. Score must be between {MIN_SCORE} and {MAX_SCORE}.",
            raw_text=raw_text,
            round_number=round_number,
        )

    logger.debug(
        f"Parsed evaluation: score={evaluation.score}, pass={evaluation.passed}, "
        f"should_continue={evaluation.should_continue}, confidence={evaluation.confidence}, "
        f"weaknesses={len(evaluation.weaknesses)}, suggestions={len(evaluation.suggestions)}"
    )
    return evaluation
