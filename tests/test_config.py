"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from agent_runtime.config import (
    AppConfig,
    ConversationConfig,
    GenerationConfig,
    GoalDefaultsConfig,
    ModelConfig,
    _safe_bool,
    _safe_float,
    _safe_int,
    _validate_config,
)


def config_with(**sections) -> AppConfig:
    return replace(AppConfig(), **sections)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_invalid_temperature_too_high(self):
        config = config_with(model=replace(ModelConfig(), llm_temperature=3.0))
        with pytest.raises(ValueError, match="LLM_TEMPERATURE"):
            _validate_config(config)

    def test_invalid_temperature_negative(self):
        config = config_with(model=replace(ModelConfig(), llm_temperature=-0.5))
        with pytest.raises(ValueError, match="LLM_TEMPERATURE"):
            _validate_config(config)

    def test_invalid_generation_temperature(self):
        config = config_with(generation=replace(GenerationConfig(), exit_temperature=2.5))
        with pytest.raises(ValueError, match="EXIT_TEMPERATURE"):
            _validate_config(config)

    def test_invalid_token_budget(self):
        config = config_with(generation=replace(GenerationConfig(), goal_question_max_tokens=0))
        with pytest.raises(ValueError, match="GOAL_QUESTION_MAX_TOKENS"):
            _validate_config(config)

    def test_deep_window_smaller_than_reply_window(self):
        conversation = replace(
            ConversationConfig(),
            reply_history_messages=20,
            deep_context_history_messages=10,
        )
        with pytest.raises(ValueError, match="DEEP_CONTEXT_HISTORY_MESSAGES"):
            _validate_config(config_with(conversation=conversation))

    def test_invalid_verbosity(self):
        conversation = replace(ConversationConfig(), default_verbosity=11)
        with pytest.raises(ValueError, match="DEFAULT_VERBOSITY"):
            _validate_config(config_with(conversation=conversation))

    def test_unknown_business_context(self):
        conversation = replace(ConversationConfig(), business_context="retail")
        with pytest.raises(ValueError, match="BUSINESS_CONTEXT"):
            _validate_config(config_with(conversation=conversation))

    def test_invalid_strict_ordering(self):
        goals = replace(GoalDefaultsConfig(), strict_ordering=11)
        with pytest.raises(ValueError, match="GOAL_STRICT_ORDERING"):
            _validate_config(config_with(goals=goals))

    def test_invalid_max_active_goals(self):
        goals = replace(GoalDefaultsConfig(), max_active_goals=0)
        with pytest.raises(ValueError, match="GOAL_MAX_ACTIVE"):
            _validate_config(config_with(goals=goals))


class TestConfigImmutability:
    def test_config_is_frozen(self):
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.log_level = "DEBUG"

    def test_sub_config_is_frozen(self):
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.conversation.reply_history_messages = 99


class TestEnvParsing:
    def test_safe_int(self, monkeypatch):
        monkeypatch.setenv("TEST_INT", "12")
        assert _safe_int("TEST_INT", "1") == 12

    def test_safe_int_invalid(self, monkeypatch):
        monkeypatch.setenv("TEST_INT", "twelve")
        with pytest.raises(ValueError, match="TEST_INT"):
            _safe_int("TEST_INT", "1")

    def test_safe_float_default(self, monkeypatch):
        monkeypatch.delenv("TEST_FLOAT", raising=False)
        assert _safe_float("TEST_FLOAT", "0.4") == 0.4

    @pytest.mark.parametrize("raw,expected", [("true", True), ("Off", False), ("1", True), ("no", False)])
    def test_safe_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("TEST_BOOL", raw)
        assert _safe_bool("TEST_BOOL", "true") is expected

    def test_safe_bool_invalid(self, monkeypatch):
        monkeypatch.setenv("TEST_BOOL", "maybe")
        with pytest.raises(ValueError, match="TEST_BOOL"):
            _safe_bool("TEST_BOOL", "true")
