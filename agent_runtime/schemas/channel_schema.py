"""Per-conversation state, extraction values and goal orchestration snapshots."""

from enum import Enum
from typing import Any, Optional

from pydantic import Field

from agent_runtime.schemas.base import CamelModel
from agent_runtime.utils import has_actual_value, unwrap_value

CORRECTION_FIELDS = {
    "wrong_phone": "phone",
    "wrong_email": "email",
}


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(CamelModel):
    """A single chat message in the conversation history."""

    role: MessageRole
    content: str

    @property
    def is_user(self) -> bool:
        return self.role == MessageRole.USER


class ExtractionSource(str, Enum):
    PRE_LLM_PATTERN_MATCH = "pre_llm_pattern_match"
    LLM_INTENT_DETECTION = "llm_intent_detection"
    GOAL_ORCHESTRATOR = "goal_orchestrator"


class ExtractedValue(CamelModel):
    """A value extracted from the user's message during one turn."""

    value: Any
    confidence: float = 1.0
    source: ExtractionSource = ExtractionSource.LLM_INTENT_DETECTION

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def coerce(
        cls,
        raw: Any,
        source: ExtractionSource = ExtractionSource.GOAL_ORCHESTRATOR,
    ) -> "ExtractedValue":
        """Normalize a raw value or a ``{value, confidence, source}`` mapping."""
        if isinstance(raw, ExtractedValue):
            return raw
        if isinstance(raw, dict) and "value" in raw:
            return cls(
                value=raw["value"],
                confidence=raw.get("confidence", 1.0),
                source=raw.get("source", source),
            )
        return cls(value=raw, source=source)


class GoalRecommendation(CamelModel):
    goal_id: str
    action: str = "pursue"
    attempt_count: int = 0
    reason: Optional[str] = None


class StateUpdates(CamelModel):
    newly_completed: list[str] = Field(default_factory=list)
    newly_activated: list[str] = Field(default_factory=list)
    declined: list[str] = Field(default_factory=list)


class GoalOrchestrationResult(CamelModel):
    """Per-turn snapshot from the goal orchestrator.

    Mutable on purpose: the ``on_data_extracted`` hook may update the active
    goals after merging this turn's data, and the follow-up stage reads the
    updated list.
    """

    active_goals: list[str] = Field(default_factory=list)
    completed_goals: list[str] = Field(default_factory=list)
    extracted_info: dict[str, Any] = Field(default_factory=dict)
    recommendations: list[GoalRecommendation] = Field(default_factory=list)
    triggered_intents: list[str] = Field(default_factory=list)
    state_updates: StateUpdates = Field(default_factory=StateUpdates)

    def attempt_count(self, goal_id: str) -> int:
        for recommendation in self.recommendations:
            if recommendation.goal_id == goal_id:
                return recommendation.attempt_count
        return 0


class ChannelState(CamelModel):
    """Persistent per-conversation record owned by the host's state store."""

    channel_id: Optional[str] = None
    tenant_id: Optional[str] = None
    captured_data: dict[str, Any] = Field(default_factory=dict)
    active_goals: list[str] = Field(default_factory=list)
    completed_goals: list[str] = Field(default_factory=list)
    declined_goals: list[str] = Field(default_factory=list)
    message_count: int = 0

    def captured_value(self, field_name: str) -> Any:
        """Return the raw captured value for a field, or None when absent."""
        value = self.captured_data.get(field_name)
        if not has_actual_value(value):
            return None
        return unwrap_value(value)


def merge_captured_data(
    persisted: dict[str, Any],
    current: dict[str, Any],
) -> dict[str, Any]:
    """Merge this turn's extraction into persisted captured data.

    Current-turn values win when they carry real content; empty values never
    erase a persisted field. ``wrong_phone``/``wrong_email`` corrections
    remove the corrected field instead of being stored themselves.
    """
    merged = dict(persisted)
    for field_name, value in current.items():
        if field_name in CORRECTION_FIELDS:
            merged.pop(CORRECTION_FIELDS[field_name], None)
            continue
        if has_actual_value(value):
            merged[field_name] = unwrap_value(value)
    return merged


def captured_field_names(*sources: dict[str, Any]) -> list[str]:
    """Field names with real values across the given sources, in first-seen order."""
    names: list[str] = []
    for source in sources:
        for field_name, value in source.items():
            if field_name not in names and has_actual_value(value):
                names.append(field_name)
    return names
