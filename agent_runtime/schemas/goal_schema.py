"""Goal definitions and goal configuration models."""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import ConfigDict, Field

from agent_runtime.config import settings
from agent_runtime.schemas.base import CamelModel


class GoalPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class GoalType(str, Enum):
    DATA_COLLECTION = "data_collection"
    SCHEDULING = "scheduling"
    QUALIFICATION = "qualification"
    CUSTOM = "custom"


class FieldSpec(CamelModel):
    """A required field declared as an object rather than a bare name."""

    name: str
    type: Optional[str] = None
    description: Optional[str] = None
    required: bool = True


class ValidationRule(CamelModel):
    required: Optional[bool] = None
    pattern: Optional[str] = None
    format: Optional[str] = None


class DataToCapture(CamelModel):
    """Fields a goal collects. Entries may be plain names or FieldSpec objects."""

    fields: list[Union[str, FieldSpec]] = Field(default_factory=list)
    validation_rules: dict[str, ValidationRule] = Field(default_factory=dict)

    def is_optional(self, field_name: str) -> bool:
        """True when the field is declared with ``required: false``."""
        rule = self.validation_rules.get(field_name)
        if rule is not None and rule.required is False:
            return True
        for entry in self.fields:
            if isinstance(entry, FieldSpec) and entry.name == field_name:
                return not entry.required
        return False

    @property
    def field_names(self) -> list[str]:
        names = []
        for entry in self.fields:
            name = entry if isinstance(entry, str) else entry.name
            if name:
                names.append(name)
        return names


class GoalBehavior(CamelModel):
    max_attempts: Optional[int] = None
    tone: Optional[str] = None


class GoalTriggers(CamelModel):
    prerequisite_goals: list[str] = Field(default_factory=list)
    after_messages: Optional[int] = None


class GoalDefinition(CamelModel):
    """A single configured goal. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    description: str = ""
    message: Optional[str] = None
    purpose: Optional[str] = None
    type: str = GoalType.DATA_COLLECTION.value
    priority: str = GoalPriority.MEDIUM.value
    order: int = 0
    data_to_capture: DataToCapture = Field(default_factory=DataToCapture)
    behavior: GoalBehavior = Field(default_factory=GoalBehavior)
    prerequisites: Optional[list[str]] = None
    triggers: Optional[GoalTriggers] = None
    is_primary: bool = False

    @property
    def field_names(self) -> list[str]:
        return self.data_to_capture.field_names

    @property
    def prompt_text(self) -> str:
        """Message shown to the model when describing this goal."""
        return self.message or self.description or self.purpose or ""

    @property
    def prerequisite_ids(self) -> list[str]:
        if self.prerequisites:
            return list(self.prerequisites)
        if self.triggers and self.triggers.prerequisite_goals:
            return list(self.triggers.prerequisite_goals)
        return []


class GlobalSettings(CamelModel):
    max_active_goals: int = Field(default_factory=lambda: settings.goals.max_active_goals)
    max_goals_per_turn: int = Field(default_factory=lambda: settings.goals.max_goals_per_turn)
    interest_threshold: int = Field(default_factory=lambda: settings.goals.interest_threshold)
    strict_ordering: int = Field(default_factory=lambda: settings.goals.strict_ordering)
    respect_declines: bool = Field(default_factory=lambda: settings.goals.respect_declines)
    adapt_to_urgency: bool = Field(default_factory=lambda: settings.goals.adapt_to_urgency)


class GoalCombination(CamelModel):
    goal_ids: list[str]
    trigger_intent: str
    description: str = ""


class CompletionTriggers(CamelModel):
    all_critical_complete: str = Field(
        default_factory=lambda: settings.goals.all_critical_complete
    )
    all_high_complete: Optional[str] = None
    channel_specific: dict[str, GoalCombination] = Field(default_factory=dict)
    custom_combinations: list[GoalCombination] = Field(default_factory=list)


class GoalConfiguration(CamelModel):
    """Goal configuration as stored on a company or persona record."""

    enabled: bool = False
    goals: list[GoalDefinition] = Field(default_factory=list)
    global_settings: GlobalSettings = Field(default_factory=GlobalSettings)
    completion_triggers: CompletionTriggers = Field(default_factory=CompletionTriggers)


class EffectiveGoalConfig(GoalConfiguration):
    """The configuration selected for a conversation, tagged with where it came from."""

    source: Literal["company", "persona", "none"] = "none"
