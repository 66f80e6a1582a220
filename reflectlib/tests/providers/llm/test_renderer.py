"""Tests for prompt rendering."""

import pytest

from reflectlib.providers.llm.base import LLMProvider, PromptRenderer

from reflectlib.tests.test_utils import ScriptedLLMProvider


class TestPromptRenderer:
    """Test placeholder substitution."""

    def test_substitutes_variables(self):
        rendered = PromptRenderer().render("Task: {{task}} ({{ level }})", {"task": "sort", "level": 3})
        assert rendered == "Task: sort (3)"

    def test_none_renders_empty(self):
        assert PromptRenderer().render("[{{hint}}]", {"hint": None}) == "[]"

    def test_missing_variables_left_in_place(self):
        assert PromptRenderer().render("{{task}} {{other}}", {"task": "sort"}) == "sort {{other}}"

    def test_strict_mode_rejects_missing_variables(self):
        with pytest.raises(ValueError, match="unreplaced placeholders"):
            PromptRenderer(strict=True).render("{{task}} {{other}}", {"task": "sort"})

    def test_single_braces_untouched(self):
        template = 'Respond with {"score": <int>} for {{task}}'
        assert PromptRenderer().render(template, {"task": "sort"}) == 'Respond with {"score": <int>} for sort'


class TestLLMProviderProtocol:
    """Test the provider protocol."""

    def test_scripted_provider_satisfies_protocol(self):
        assert isinstance(ScriptedLLMProvider(), LLMProvider)

    def test_object_without_complete_rejected(self):
        assert not isinstance(object(), LLMProvider)
