"""
Best-effort telemetry for turns: model usage with cost estimates and
chat presence events.

Publishers are called through ``safe_publish``/``safe_publish_usage`` so
a failing event bus can never change the conversational outcome.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import Field

from agent_runtime.config import settings
from agent_runtime.schemas.base import CamelModel

logger = logging.getLogger(__name__)


class RequestType(str, Enum):
    CONVERSATIONAL_RESPONSE = "conversational_response"
    FOLLOW_UP_QUESTION = "follow_up_question"
    ENGAGEMENT_QUESTION = "engagement_question"
    VERIFICATION_MESSAGE = "verification_message"
    ERROR_RECOVERY = "error_recovery"


class PresenceEvent(str, Enum):
    RECEIVED = "chat.received"
    READ = "chat.read"
    TYPING = "chat.typing"
    STOPPED_TYPING = "chat.stoppedTyping"


# USD per 1K tokens
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "anthropic.claude-3-5-sonnet-20240620-v1:0": (0.003, 0.015),
    "anthropic.claude-3-5-sonnet-20241022-v2:0": (0.003, 0.015),
    "anthropic.claude-3-sonnet-20240229-v1:0": (0.003, 0.015),
    "anthropic.claude-3-haiku-20240307-v1:0": (0.00025, 0.00125),
    "anthropic.claude-3-opus-20240229-v1:0": (0.015, 0.075),
    "gpt-4o": (0.0025, 0.01),
    "gpt-4o-mini": (0.00015, 0.0006),
}
DEFAULT_PRICING = (0.003, 0.015)


def estimate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """Estimated USD cost; unknown models are priced like a mid-tier model."""
    input_price, output_price = MODEL_PRICING.get(model, DEFAULT_PRICING)
    return (input_tokens / 1000) * input_price + (output_tokens / 1000) * output_price


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LLMUsageEvent(CamelModel):
    tenant_id: str = "unknown"
    channel_id: Optional[str] = None
    source: str = "unknown"
    request_type: RequestType
    model: str = "unknown"
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    timestamp: str = Field(default_factory=_now_iso)
    estimated_cost_usd: float = 0.0


@runtime_checkable
class TelemetryPublisher(Protocol):
    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        ...

    async def publish_usage(self, event: LLMUsageEvent) -> None:
        ...


class LoggingTelemetryPublisher:
    """Publisher used when the host supplies none: events go to the log."""

    def __init__(self, source: Optional[str] = None) -> None:
        self.source = source or settings.telemetry.event_source

    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        logger.info("Event [%s/%s]: %s", self.source, event_type, payload)

    async def publish_usage(self, event: LLMUsageEvent) -> None:
        logger.info(
            "LLM usage [%s]: input=%d output=%d total=%d cost=$%.6f",
            event.request_type.value,
            event.input_tokens,
            event.output_tokens,
            event.total_tokens,
            event.estimated_cost_usd,
        )


async def safe_publish(publisher: TelemetryPublisher, event_type: str, payload: dict[str, Any]) -> None:
    try:
        await publisher.publish(event_type, payload)
    except Exception:
        logger.exception("Failed to publish %s event", event_type)


async def safe_publish_usage(publisher: TelemetryPublisher, event: LLMUsageEvent) -> None:
    try:
        await publisher.publish_usage(event)
    except Exception:
        logger.exception("Failed to publish usage for %s", event.request_type.value)
