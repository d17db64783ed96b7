"""
Centralized configuration with environment variable overrides.

Model settings, history windows, follow-up generation budgets and goal
defaults are configurable here. Nothing is hardcoded in the turn
processor or the goal helpers.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

BUSINESS_CONTEXTS = ("fitness", "medical", "general")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class ModelConfig:
    """LLM settings for the conversational reply."""

    llm_model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    llm_temperature: float = _safe_float("LLM_TEMPERATURE", "0.3")


@dataclass(frozen=True)
class GenerationConfig:
    """Temperature and token budget for each follow-up generation step."""

    verification_temperature: float = _safe_float("VERIFICATION_TEMPERATURE", "0.7")
    verification_max_tokens: int = _safe_int("VERIFICATION_MAX_TOKENS", "50")
    exit_temperature: float = _safe_float("EXIT_TEMPERATURE", "0.7")
    exit_max_tokens: int = _safe_int("EXIT_MAX_TOKENS", "150")
    engagement_temperature: float = _safe_float("ENGAGEMENT_TEMPERATURE", "0.7")
    engagement_max_tokens: int = _safe_int("ENGAGEMENT_MAX_TOKENS", "100")
    goal_question_temperature: float = _safe_float("GOAL_QUESTION_TEMPERATURE", "0.4")
    goal_question_max_tokens: int = _safe_int("GOAL_QUESTION_MAX_TOKENS", "60")
    error_recovery_temperature: float = _safe_float("ERROR_RECOVERY_TEMPERATURE", "0.7")
    error_recovery_max_tokens: int = _safe_int("ERROR_RECOVERY_MAX_TOKENS", "150")


@dataclass(frozen=True)
class ConversationConfig:
    """History windows, verbosity and fallback text for a turn."""

    intent_history_messages: int = _safe_int("INTENT_HISTORY_MESSAGES", "5")
    reply_history_messages: int = _safe_int("REPLY_HISTORY_MESSAGES", "10")
    deep_context_history_messages: int = _safe_int("DEEP_CONTEXT_HISTORY_MESSAGES", "30")
    question_context_messages: int = _safe_int("QUESTION_CONTEXT_MESSAGES", "3")
    engagement_context_messages: int = _safe_int("ENGAGEMENT_CONTEXT_MESSAGES", "2")
    default_verbosity: int = _safe_int("DEFAULT_VERBOSITY", "5")
    default_max_attempts: int = _safe_int("DEFAULT_GOAL_MAX_ATTEMPTS", "5")
    business_context: str = os.getenv("BUSINESS_CONTEXT", "fitness")
    default_company_name: str = os.getenv("DEFAULT_COMPANY_NAME", "our company")
    fallback_reply: str = os.getenv(
        "FALLBACK_REPLY",
        "Thanks for reaching out! Give me just a moment and I'll get right back to you.",
    )


@dataclass(frozen=True)
class GoalDefaultsConfig:
    """Hard defaults applied to every resolved goal configuration."""

    max_active_goals: int = _safe_int("GOAL_MAX_ACTIVE", "3")
    max_goals_per_turn: int = _safe_int("GOAL_MAX_PER_TURN", "2")
    interest_threshold: int = _safe_int("GOAL_INTEREST_THRESHOLD", "5")
    strict_ordering: int = _safe_int("GOAL_STRICT_ORDERING", "7")
    respect_declines: bool = _safe_bool("GOAL_RESPECT_DECLINES", "true")
    adapt_to_urgency: bool = _safe_bool("GOAL_ADAPT_TO_URGENCY", "true")
    all_critical_complete: str = os.getenv("GOAL_ALL_CRITICAL_COMPLETE", "lead_qualified")


@dataclass(frozen=True)
class TelemetryConfig:
    """Event publishing settings."""

    event_source: str = os.getenv("TELEMETRY_EVENT_SOURCE", "agent.runtime")
    presence_events_enabled: bool = _safe_bool("PRESENCE_EVENTS_ENABLED", "true")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    model: ModelConfig = field(default_factory=ModelConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    conversation: ConversationConfig = field(default_factory=ConversationConfig)
    goals: GoalDefaultsConfig = field(default_factory=GoalDefaultsConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 <= config.model.llm_temperature <= 2.0:
        raise ValueError(
            f"LLM_TEMPERATURE must be between 0.0 and 2.0, got {config.model.llm_temperature}"
        )

    gen = config.generation
    for name, value in [
        ("VERIFICATION_TEMPERATURE", gen.verification_temperature),
        ("EXIT_TEMPERATURE", gen.exit_temperature),
        ("ENGAGEMENT_TEMPERATURE", gen.engagement_temperature),
        ("GOAL_QUESTION_TEMPERATURE", gen.goal_question_temperature),
        ("ERROR_RECOVERY_TEMPERATURE", gen.error_recovery_temperature),
    ]:
        if not 0.0 <= value <= 2.0:
            raise ValueError(f"{name} must be between 0.0 and 2.0, got {value}")

    for name, value in [
        ("VERIFICATION_MAX_TOKENS", gen.verification_max_tokens),
        ("EXIT_MAX_TOKENS", gen.exit_max_tokens),
        ("ENGAGEMENT_MAX_TOKENS", gen.engagement_max_tokens),
        ("GOAL_QUESTION_MAX_TOKENS", gen.goal_question_max_tokens),
        ("ERROR_RECOVERY_MAX_TOKENS", gen.error_recovery_max_tokens),
    ]:
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")

    conv = config.conversation
    for name, value in [
        ("INTENT_HISTORY_MESSAGES", conv.intent_history_messages),
        ("REPLY_HISTORY_MESSAGES", conv.reply_history_messages),
        ("DEEP_CONTEXT_HISTORY_MESSAGES", conv.deep_context_history_messages),
        ("DEFAULT_GOAL_MAX_ATTEMPTS", conv.default_max_attempts),
    ]:
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")
    if conv.deep_context_history_messages < conv.reply_history_messages:
        raise ValueError(
            "DEEP_CONTEXT_HISTORY_MESSAGES must be >= REPLY_HISTORY_MESSAGES, "
            f"got {conv.deep_context_history_messages} < {conv.reply_history_messages}"
        )
    if not 1 <= conv.default_verbosity <= 10:
        raise ValueError(
            f"DEFAULT_VERBOSITY must be between 1 and 10, got {conv.default_verbosity}"
        )
    if conv.business_context not in BUSINESS_CONTEXTS:
        raise ValueError(
            f"BUSINESS_CONTEXT must be one of {BUSINESS_CONTEXTS}, got {conv.business_context!r}"
        )

    goals = config.goals
    if goals.max_active_goals < 1:
        raise ValueError(f"GOAL_MAX_ACTIVE must be >= 1, got {goals.max_active_goals}")
    if goals.max_goals_per_turn < 1:
        raise ValueError(f"GOAL_MAX_PER_TURN must be >= 1, got {goals.max_goals_per_turn}")
    if not 0 <= goals.strict_ordering <= 10:
        raise ValueError(
            f"GOAL_STRICT_ORDERING must be between 0 and 10, got {goals.strict_ordering}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for model '%s'", config.model.llm_model)
    return config


# Singleton instance
settings = load_config()
