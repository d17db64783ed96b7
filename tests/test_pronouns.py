"""Tests for persona prompt pronoun rewriting."""

from agent_runtime.conversation.pronouns import (
    first_to_second_person,
    is_first_person,
    is_second_person,
    to_instruction_voice,
)


class TestFirstToSecondPerson:
    def test_basic_rewrite(self):
        result = first_to_second_person("I am Coach Max. I love my clients.")
        assert result == "You are Coach Max. You love your clients."

    def test_contractions(self):
        assert first_to_second_person("I'm here for me") == "You're here for you"
        assert first_to_second_person("I've got this, I'll help") == "You've got this, you'll help"

    def test_new_line_capitalized(self):
        result = first_to_second_person("Hello!\nI train athletes myself.")
        assert result == "Hello!\nYou train athletes yourself."


class TestDetection:
    def test_first_person(self):
        assert is_first_person("My name is Riley")
        assert not is_first_person("Imagine a coach")

    def test_second_person(self):
        assert is_second_person("You are a coach")
        assert not is_second_person("Coach Riley helps people")


class TestInstructionVoice:
    def test_first_person_prompt_converted(self):
        assert to_instruction_voice("I am Coach Riley.") == "You are Coach Riley."

    def test_second_person_prompt_unchanged(self):
        prompt = "You are Coach Riley, a motivating trainer."
        assert to_instruction_voice(prompt) == prompt
