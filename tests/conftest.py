"""Shared test fixtures and helpers."""

from typing import Any, Optional, Union

import pytest

from agent_runtime.providers.base import ModelInvocationError, ModelResponse, UsageMetadata
from agent_runtime.schemas.channel_schema import ChannelState, GoalOrchestrationResult, Message, MessageRole
from agent_runtime.schemas.goal_schema import EffectiveGoalConfig, GoalDefinition
from agent_runtime.schemas.intent_schema import IntentDetectionResult
from agent_runtime.schemas.persona_schema import AgentPersona, CompanyInfo
from agent_runtime.telemetry.publisher import LLMUsageEvent

ScriptedReply = Union[str, Exception]


class FakeModel:
    """Scripted ChatModel that records every prompt it receives."""

    model_name = "gpt-4o-mini"

    def __init__(
        self,
        intent: Union[IntentDetectionResult, Exception, None] = None,
        replies: Optional[list[ScriptedReply]] = None,
        default_reply: str = "Sounds good.",
        usage: Optional[UsageMetadata] = None,
    ):
        self.intent = intent
        self.replies = list(replies or [])
        self.default_reply = default_reply
        self.usage = usage or UsageMetadata(input_tokens=100, output_tokens=20, total_tokens=120)
        self.structured_prompts: list[str] = []
        self.calls: list[dict[str, Any]] = []

    async def invoke(self, prompt, temperature=None, max_tokens=None):
        self.calls.append({"prompt": prompt, "temperature": temperature, "max_tokens": max_tokens})
        reply = self.replies.pop(0) if self.replies else self.default_reply
        if isinstance(reply, Exception):
            raise reply
        return ModelResponse(text=reply, usage_metadata=self.usage)

    async def invoke_structured(self, prompt, schema):
        self.structured_prompts.append(prompt)
        if isinstance(self.intent, Exception):
            raise self.intent
        if self.intent is None:
            return schema(primary_intent="general_conversation")
        return self.intent

    @property
    def prompts(self) -> list[str]:
        return [call["prompt"] for call in self.calls]


class RecordingTelemetry:
    """Telemetry publisher that keeps every event, optionally failing on publish."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.events: list[tuple[str, dict]] = []
        self.usage: list[LLMUsageEvent] = []

    async def publish(self, event_type, payload):
        if self.fail:
            raise RuntimeError("event bus down")
        self.events.append((event_type, payload))

    async def publish_usage(self, event):
        if self.fail:
            raise RuntimeError("event bus down")
        self.usage.append(event)

    @property
    def event_types(self) -> list[str]:
        return [event_type for event_type, _ in self.events]


def model_error(message: str = "provider unavailable") -> ModelInvocationError:
    return ModelInvocationError(message)


def make_intent(
    primary_intent: str = "general_conversation",
    extracted: Optional[list[tuple[str, str]]] = None,
    **kwargs,
) -> IntentDetectionResult:
    """Helper to build an IntentDetectionResult from (field, value) pairs."""
    extracted_data = None
    if extracted is not None:
        extracted_data = [{"field": f, "value": v} for f, v in extracted]
    return IntentDetectionResult(
        primary_intent=primary_intent,
        extracted_data=extracted_data,
        **kwargs,
    )


def make_goal(
    goal_id: str,
    fields: Optional[list[Any]] = None,
    priority: str = "medium",
    order: int = 1,
    **kwargs,
) -> GoalDefinition:
    return GoalDefinition(
        id=goal_id,
        name=kwargs.pop("name", goal_id.replace("_", " ").title()),
        priority=priority,
        order=order,
        data_to_capture={"fields": fields or []},
        **kwargs,
    )


def make_goal_config(
    goals: list[GoalDefinition],
    strict_ordering: int = 7,
    source: str = "company",
) -> EffectiveGoalConfig:
    return EffectiveGoalConfig(
        enabled=True,
        goals=goals,
        global_settings={"strictOrdering": strict_ordering},
        source=source,
    )


def standard_goals() -> list[GoalDefinition]:
    """Contact capture, then scheduling (primary), then identity."""
    return [
        make_goal("collect_contact_info", ["email", "phone"], priority="critical", order=1),
        make_goal(
            "schedule_consultation",
            ["preferredDate", "preferredTime"],
            priority="high",
            order=2,
            type="scheduling",
            is_primary=True,
            prerequisites=["collect_contact_info"],
        ),
        make_goal("collect_identity", ["firstName", "lastName"], priority="medium", order=3),
    ]


def make_history(*turns: tuple[str, str]) -> list[Message]:
    """Build history from ("user"|"assistant", text) pairs."""
    return [
        Message(role=MessageRole.USER if speaker == "user" else MessageRole.ASSISTANT, content=text)
        for speaker, text in turns
    ]


def make_channel_state(
    captured: Optional[dict[str, Any]] = None,
    active: Optional[list[str]] = None,
    completed: Optional[list[str]] = None,
    message_count: int = 3,
) -> ChannelState:
    return ChannelState(
        channel_id="ch-test",
        tenant_id="tenant-1",
        captured_data=captured or {},
        active_goals=active or [],
        completed_goals=completed or [],
        message_count=message_count,
    )


def make_goal_result(
    active: Optional[list[str]] = None,
    completed: Optional[list[str]] = None,
    extracted: Optional[dict[str, Any]] = None,
    attempts: Optional[dict[str, int]] = None,
) -> GoalOrchestrationResult:
    return GoalOrchestrationResult(
        active_goals=active or [],
        completed_goals=completed or [],
        extracted_info=extracted or {},
        recommendations=[
            {"goalId": goal_id, "attemptCount": count} for goal_id, count in (attempts or {}).items()
        ],
    )


@pytest.fixture
def persona():
    return AgentPersona(
        name="Coach Riley",
        role="fitness coach",
        system_prompt="I am Coach Riley. I love helping people get strong.",
        personality_traits={"verbosity": 5},
    )


@pytest.fixture
def company():
    return CompanyInfo(
        name="Iron Temple Gym",
        services=["Personal training", "Group classes"],
        business_hours={
            "monday": [{"from": "06:00", "to": "21:00"}],
            "tuesday": [{"from": "06:00", "to": "21:00"}],
            "saturday": [{"from": "08:00", "to": "14:00"}],
        },
        pricing={"plans": [{"name": "Basic", "price": "$29/month"}]},
        address={"street": "12 Main St", "city": "Austin", "state": "TX", "zipCode": "78701"},
    )


@pytest.fixture
def goal_config():
    return make_goal_config(standard_goals())


@pytest.fixture
def telemetry():
    return RecordingTelemetry()
