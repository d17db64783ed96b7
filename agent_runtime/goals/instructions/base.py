"""Types shared by the goal instruction generators."""

from dataclasses import dataclass, field
from typing import Any, Optional

from agent_runtime.schemas.channel_schema import ChannelState
from agent_runtime.schemas.persona_schema import CompanyInfo
from agent_runtime.utils import has_actual_value, unwrap_value


@dataclass
class GoalInstructionContext:
    """What an instruction generator knows about the goal being pursued."""
    goal_id: str
    goal_type: str = "data_collection"
    goal_name: str = "Goal"
    fields_needed: list[str] = field(default_factory=list)
    fields_captured: dict[str, Any] = field(default_factory=dict)
    company_info: Optional[CompanyInfo] = None
    channel_state: Optional[ChannelState] = None
    user_name: Optional[str] = None
    last_user_message: Optional[str] = None
    detected_intent: Optional[str] = None

    def captured(self, field_name: str) -> Any:
        """Raw captured value for a field, or None when absent."""
        value = self.fields_captured.get(field_name)
        return unwrap_value(value) if has_actual_value(value) else None

    def has(self, field_name: str) -> bool:
        return self.captured(field_name) is not None

    def needs(self, field_name: str) -> bool:
        return field_name in self.fields_needed

    @property
    def still_needed(self) -> list[str]:
        return [f for f in self.fields_needed if not self.has(f)]

    @property
    def name(self) -> str:
        return self.user_name or "friend"


@dataclass
class GoalInstruction:
    """Instruction injected into the goal question prompt."""
    instruction: str
    examples: list[str] = field(default_factory=list)
    target_fields: list[str] = field(default_factory=list)
