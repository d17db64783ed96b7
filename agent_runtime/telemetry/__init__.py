from agent_runtime.telemetry.publisher import (
    LLMUsageEvent,
    LoggingTelemetryPublisher,
    PresenceEvent,
    RequestType,
    TelemetryPublisher,
    estimate_cost,
)

__all__ = [
    "LLMUsageEvent",
    "LoggingTelemetryPublisher",
    "PresenceEvent",
    "RequestType",
    "TelemetryPublisher",
    "estimate_cost",
]
