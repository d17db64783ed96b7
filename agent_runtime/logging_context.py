"""Channel ID logging context for tracing a turn across modules.

Provides a channel-aware logger that attaches the conversation's channel
ID to every log record, so a single turn can be followed through intent
detection, reply generation and follow-up generation.

Usage:
    from agent_runtime.logging_context import get_channel_logger, set_channel_id

    set_channel_id("channel-abc123")
    logger = get_channel_logger(__name__)
    logger.info("Processing turn")  # record.channel_id == "channel-abc123"
"""

import logging
from contextvars import ContextVar

_channel_id: ContextVar[str] = ContextVar("channel_id", default="NO_CHANNEL_ID")


def set_channel_id(channel_id: str) -> None:
    """Set the channel ID for the current async context."""
    _channel_id.set(channel_id)


def get_channel_id() -> str:
    """Retrieve the current channel ID."""
    return _channel_id.get()


class ChannelIdFilter(logging.Filter):
    """Injects channel_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.channel_id = _channel_id.get()  # type: ignore[attr-defined]
        return True


def get_channel_logger(name: str) -> logging.Logger:
    """Return a logger with the ChannelIdFilter attached.

    The filter adds ``channel_id`` to each record so formatters can
    include ``%(channel_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, ChannelIdFilter) for f in logger.filters):
        logger.addFilter(ChannelIdFilter())
    return logger
