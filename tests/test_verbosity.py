"""Tests for verbosity profiles and sentence limits."""

import pytest

from agent_runtime.conversation.verbosity import (
    EMPTY_OUTPUT_FALLBACK,
    count_sentences,
    enforce_sentence_limit,
    get_description,
    get_profile,
    split_sentences,
    structured_output_instructions,
    system_prompt_rule,
    truncate_text,
)


class TestGetProfile:
    @pytest.mark.parametrize("verbosity,level", [
        (5, 5),
        (1, 1),
        (0, 1),
        (-3, 1),
        (15, 10),
        (7.0, 7),
    ])
    def test_levels_are_clamped(self, verbosity, level):
        assert get_profile(verbosity).level == level

    @pytest.mark.parametrize("verbosity", [None, 4.5, "loud", True, float("nan")])
    def test_invalid_values_use_balanced_default(self, verbosity):
        assert get_profile(verbosity).level == 4

    def test_profile_budgets(self):
        profile = get_profile(1)
        assert profile.max_sentences == 2
        assert profile.max_tokens == 200
        assert get_profile(10).max_sentences == 20

    def test_description(self):
        assert get_description(1) == "Extremely brief and to the point"


class TestSystemPromptRule:
    def test_low_verbosity_forbids_questions(self):
        rule = system_prompt_rule(3)
        assert "at most 6 sentences" in rule
        assert "Do NOT ask questions" in rule

    def test_level_four_forbids_questions(self):
        assert "Do NOT ask questions" in system_prompt_rule(4)

    def test_higher_verbosity_allows_questions(self):
        rule = system_prompt_rule(5)
        assert "at most 10 sentences" in rule
        assert "Do NOT ask questions" not in rule

    def test_structured_output_instructions(self):
        assert "Maximum 2 sentences" in structured_output_instructions(1)


class TestEnforceSentenceLimit:
    def test_truncates_to_limit(self):
        sentences = ["One.", "Two.", "Three.", "Four.", "Five."]
        assert enforce_sentence_limit(sentences, 1) == ["One.", "Two."]

    def test_within_limit_unchanged(self):
        assert enforce_sentence_limit(["One.", "Two."], 5) == ["One.", "Two."]

    def test_empty_list_uses_fallback(self):
        assert enforce_sentence_limit([], 5) == [EMPTY_OUTPUT_FALLBACK]

    def test_blank_sentences_use_fallback(self):
        assert enforce_sentence_limit(["  ", ""], 5) == [EMPTY_OUTPUT_FALLBACK]

    def test_non_list_is_wrapped(self):
        assert enforce_sentence_limit("Just text.", 5) == ["Just text."]


class TestTextHelpers:
    def test_split_keeps_trailing_text(self):
        assert split_sentences("Hello there. and then") == ["Hello there.", " and then"]

    def test_split_empty(self):
        assert split_sentences("   ") == []

    def test_count_sentences(self):
        assert count_sentences("One! Two? Three.") == 3
        assert count_sentences("no punctuation") == 1

    def test_truncate_text(self):
        assert truncate_text("One. Two. Three.", 2) == "One. Two."

    def test_truncate_text_short_text_unchanged(self):
        assert truncate_text("Hi there", 1) == "Hi there"
