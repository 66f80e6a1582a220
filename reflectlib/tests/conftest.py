"""Global pytest configuration and fixtures."""

import pytest

from reflectlib.agent.components.reflection.models import ReflectionPolicy
from reflectlib.agent.components.reflection.prompts import DEFAULT_REFLECTION_WITH_CRITERIA_TEMPLATE

from reflectlib.tests.test_utils import FakeAgent, ScriptedLLMProvider


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch):
    """Keep host environment variables out of settings tests."""
    for var in (
        "REFLECTLIB_ENV", "REFLECTLIB_DEBUG", "REFLECTLIB_LOG_LEVEL", "REFLECTLIB_LOG_FORMAT",
        "REFLECTION_ENABLED", "REFLECTION_MAX_ROUND", "REFLECTION_MIN_ROUND",
        "REFLECTION_EVALUATION_CRITERIA", "REFLECTION_PROMPT_TEMPLATE", "REFLECTION_REQUIRE_WELL_FORMED",
        "LLM_MODEL_NAME", "LLM_TEMPERATURE",
        "ENVIRONMENT", "DEBUG", "LOG_LEVEL", "LOG_FORMAT", "ENABLED", "MAX_ROUND", "MIN_ROUND",
        "EVALUATION_CRITERIA", "PROMPT_TEMPLATE", "REQUIRE_WELL_FORMED", "MODEL_NAME", "TEMPERATURE",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def provider():
    return ScriptedLLMProvider()


@pytest.fixture
def agent(provider):
    return FakeAgent(llm_provider=provider)


@pytest.fixture
def policy():
    """Three-round policy with business criteria."""
    return ReflectionPolicy(
        max_round=3,
        min_round=1,
        evaluator_prompt_template=DEFAULT_REFLECTION_WITH_CRITERIA_TEMPLATE,
        evaluation_criteria="Must be 5-7-5 syllables",
    )
