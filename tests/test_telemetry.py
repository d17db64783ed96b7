"""Tests for usage cost estimation and best-effort publishing."""

import logging

import pytest

from agent_runtime.telemetry.publisher import (
    DEFAULT_PRICING,
    LLMUsageEvent,
    LoggingTelemetryPublisher,
    RequestType,
    estimate_cost,
    safe_publish,
    safe_publish_usage,
)
from tests.conftest import RecordingTelemetry


class TestEstimateCost:
    def test_known_model(self):
        assert estimate_cost("gpt-4o-mini", 1000, 1000) == pytest.approx(0.00075)

    def test_unknown_model_uses_default_pricing(self):
        input_price, output_price = DEFAULT_PRICING
        assert estimate_cost("some-new-model", 2000, 1000) == pytest.approx(2 * input_price + output_price)

    def test_zero_tokens(self):
        assert estimate_cost("gpt-4o", 0, 0) == 0.0


class TestUsageEvent:
    def test_defaults_and_camel_case_dump(self):
        event = LLMUsageEvent(request_type=RequestType.CONVERSATIONAL_RESPONSE)
        dumped = event.model_dump(by_alias=True)
        assert dumped["tenantId"] == "unknown"
        assert dumped["requestType"] == RequestType.CONVERSATIONAL_RESPONSE
        assert "estimatedCostUsd" in dumped
        assert event.timestamp

    def test_request_types_are_the_emitting_stages(self):
        assert {t.value for t in RequestType} == {
            "conversational_response",
            "follow_up_question",
            "engagement_question",
            "verification_message",
            "error_recovery",
        }


class TestSafePublish:
    @pytest.mark.asyncio
    async def test_publish_delivered(self):
        telemetry = RecordingTelemetry()
        await safe_publish(telemetry, "chat.read", {"channelId": "ch-1"})
        assert telemetry.events == [("chat.read", {"channelId": "ch-1"})]

    @pytest.mark.asyncio
    async def test_publish_failure_swallowed(self, caplog):
        with caplog.at_level(logging.ERROR):
            await safe_publish(RecordingTelemetry(fail=True), "chat.read", {})
        assert "Failed to publish chat.read event" in caplog.text

    @pytest.mark.asyncio
    async def test_usage_failure_swallowed(self, caplog):
        event = LLMUsageEvent(request_type=RequestType.ERROR_RECOVERY)
        with caplog.at_level(logging.ERROR):
            await safe_publish_usage(RecordingTelemetry(fail=True), event)
        assert "Failed to publish usage for error_recovery" in caplog.text


class TestLoggingPublisher:
    @pytest.mark.asyncio
    async def test_logs_events(self, caplog):
        publisher = LoggingTelemetryPublisher(source="tests")
        with caplog.at_level(logging.INFO):
            await publisher.publish("chat.typing", {"channelId": "ch-1"})
            await publisher.publish_usage(
                LLMUsageEvent(request_type=RequestType.FOLLOW_UP_QUESTION, input_tokens=10)
            )
        assert "Event [tests/chat.typing]" in caplog.text
        assert "LLM usage [follow_up_question]: input=10" in caplog.text
