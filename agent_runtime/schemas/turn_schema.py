"""Input and output of a single processed turn."""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from pydantic import Field

from agent_runtime.schemas.base import CamelModel
from agent_runtime.schemas.channel_schema import (
    ChannelState,
    ExtractedValue,
    GoalOrchestrationResult,
    Message,
)
from agent_runtime.schemas.goal_schema import EffectiveGoalConfig
from agent_runtime.schemas.intent_schema import IntentDetectionResult

DataExtractedHook = Callable[
    [dict[str, ExtractedValue], Optional[GoalOrchestrationResult], str],
    Awaitable[None],
]


@dataclass
class TurnContext:
    """
    Everything the processor needs for one inbound message.

    ``message_history`` may already end with the current user message; the
    processor drops it from the reply history in that case.
    """
    user_message: str
    message_history: list[Message] = field(default_factory=list)
    goal_result: Optional[GoalOrchestrationResult] = None
    effective_goal_config: EffectiveGoalConfig = field(default_factory=EffectiveGoalConfig)
    channel_state: Optional[ChannelState] = None
    on_data_extracted: Optional[DataExtractedHook] = None
    tenant_id: Optional[str] = None
    channel_id: Optional[str] = None
    message_source: Optional[str] = None


class ProcessingResult(CamelModel):
    """The sole return value of a turn."""

    response: str
    follow_up_question: Optional[str] = None
    intent_detection_result: Optional[IntentDetectionResult] = None
    pre_extracted_data: dict[str, ExtractedValue] = Field(default_factory=dict)
