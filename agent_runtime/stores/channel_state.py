"""
In-memory channel state store.

Holds one ChannelState per channel and applies the merge proposals a
turn produces. Hosts with a persistent store can reuse the same merge
rules through ``merge_captured_data`` in the schemas layer.
"""

import logging
from typing import Any, Optional

from agent_runtime.goals.config_resolver import required_fields
from agent_runtime.schemas.channel_schema import (
    CORRECTION_FIELDS,
    ChannelState,
    merge_captured_data,
)
from agent_runtime.schemas.goal_schema import GoalConfiguration

logger = logging.getLogger(__name__)


class InMemoryChannelStateStore:
    """Channel state keyed by channel id.

    Methods are coroutines so the store can stand in for a remote one
    inside an ``on_data_extracted`` hook.
    """

    def __init__(self, goal_config: Optional[GoalConfiguration] = None) -> None:
        self.goal_config = goal_config
        self._states: dict[str, ChannelState] = {}

    def _get(self, channel_id: str, tenant_id: Optional[str] = None) -> ChannelState:
        state = self._states.get(channel_id)
        if state is None:
            state = ChannelState(channel_id=channel_id, tenant_id=tenant_id)
            self._states[channel_id] = state
        return state

    async def load(self, channel_id: str, tenant_id: Optional[str] = None) -> ChannelState:
        """Return a copy of the channel's state, creating a default one if needed."""
        return self._get(channel_id, tenant_id).model_copy(deep=True)

    async def save(self, state: ChannelState) -> None:
        if not state.channel_id:
            raise ValueError("Cannot save channel state without a channel_id")
        self._states[state.channel_id] = state.model_copy(deep=True)

    async def merge_captured_data(self, channel_id: str, extracted: dict[str, Any]) -> ChannelState:
        """Merge one turn's extraction into the channel's captured data.

        Corrections clear the corrected field and put back every goal that
        collects it.
        """
        state = self._get(channel_id)
        state.captured_data = merge_captured_data(state.captured_data, extracted)

        for correction, field_name in CORRECTION_FIELDS.items():
            if extracted.get(correction):
                logger.info("Correction %s cleared %s on %s", correction, field_name, channel_id)
                self._reactivate_goals_for(state, field_name)

        logger.debug("Captured fields on %s: %s", channel_id, sorted(state.captured_data))
        return state.model_copy(deep=True)

    def _reactivate_goals_for(self, state: ChannelState, field_name: str) -> None:
        if self.goal_config is None:
            return
        for goal in self.goal_config.goals:
            if field_name in required_fields(goal) and goal.id in state.completed_goals:
                self._mark_incomplete(state, goal.id)

    def _mark_incomplete(self, state: ChannelState, goal_id: str) -> None:
        if goal_id in state.completed_goals:
            state.completed_goals.remove(goal_id)
        if goal_id not in state.active_goals:
            state.active_goals.append(goal_id)
        logger.info("Goal %s marked incomplete on %s", goal_id, state.channel_id)

    async def mark_goal_completed(self, channel_id: str, goal_id: str) -> None:
        state = self._get(channel_id)
        if goal_id not in state.completed_goals:
            state.completed_goals.append(goal_id)
        if goal_id in state.active_goals:
            state.active_goals.remove(goal_id)
        logger.info("Goal %s completed on %s", goal_id, channel_id)

    async def mark_goal_incomplete(self, channel_id: str, goal_id: str) -> None:
        self._mark_incomplete(self._get(channel_id), goal_id)

    async def set_active_goals(self, channel_id: str, goal_ids: list[str]) -> None:
        self._get(channel_id).active_goals = list(dict.fromkeys(goal_ids))

    async def increment_message_count(self, channel_id: str) -> int:
        state = self._get(channel_id)
        state.message_count += 1
        return state.message_count

    async def clear_field_data(self, channel_id: str, field_name: str) -> None:
        state = self._get(channel_id)
        if state.captured_data.pop(field_name, None) is not None:
            logger.info("Cleared %s on %s", field_name, channel_id)

    def reset(self, channel_id: str) -> None:
        self._states.pop(channel_id, None)
