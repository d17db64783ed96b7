"""Tests for the in-memory channel state store."""

import pytest

from agent_runtime.stores import InMemoryChannelStateStore
from tests.conftest import make_goal_config, standard_goals


class TestChannelStateStore:
    def setup_method(self):
        self.store = InMemoryChannelStateStore(make_goal_config(standard_goals()))

    @pytest.mark.asyncio
    async def test_load_creates_default_state(self):
        state = await self.store.load("ch-1", tenant_id="tenant-1")
        assert state.channel_id == "ch-1"
        assert state.tenant_id == "tenant-1"
        assert state.captured_data == {}
        assert state.message_count == 0

    @pytest.mark.asyncio
    async def test_load_returns_copy(self):
        state = await self.store.load("ch-1")
        state.captured_data["email"] = "sam@example.com"
        reloaded = await self.store.load("ch-1")
        assert reloaded.captured_data == {}

    @pytest.mark.asyncio
    async def test_save_round_trip(self):
        state = await self.store.load("ch-1")
        state.active_goals = ["collect_identity"]
        await self.store.save(state)
        assert (await self.store.load("ch-1")).active_goals == ["collect_identity"]

    @pytest.mark.asyncio
    async def test_save_requires_channel_id(self):
        state = await self.store.load("ch-1")
        state.channel_id = None
        with pytest.raises(ValueError, match="channel_id"):
            await self.store.save(state)

    @pytest.mark.asyncio
    async def test_merge_keeps_persisted_values(self):
        await self.store.merge_captured_data("ch-1", {"email": "sam@example.com"})
        state = await self.store.merge_captured_data(
            "ch-1", {"email": "", "firstName": {"value": "Sam", "confidence": 0.9}}
        )
        assert state.captured_data == {"email": "sam@example.com", "firstName": "Sam"}

    @pytest.mark.asyncio
    async def test_correction_clears_field_and_reactivates_goal(self):
        await self.store.merge_captured_data("ch-1", {"email": "sam@example.com", "phone": "5551234567"})
        await self.store.mark_goal_completed("ch-1", "collect_contact_info")

        state = await self.store.merge_captured_data("ch-1", {"wrong_phone": "true"})

        assert "phone" not in state.captured_data
        assert "wrong_phone" not in state.captured_data
        assert state.captured_data["email"] == "sam@example.com"
        assert state.completed_goals == []
        assert state.active_goals == ["collect_contact_info"]

    @pytest.mark.asyncio
    async def test_correction_without_goal_config(self):
        store = InMemoryChannelStateStore()
        await store.merge_captured_data("ch-1", {"email": "sam@example.com"})
        await store.mark_goal_completed("ch-1", "collect_contact_info")
        state = await store.merge_captured_data("ch-1", {"wrong_email": "true"})
        assert state.captured_data == {}
        assert state.completed_goals == ["collect_contact_info"]

    @pytest.mark.asyncio
    async def test_goal_transitions(self):
        await self.store.set_active_goals("ch-1", ["collect_contact_info", "collect_identity", "collect_identity"])
        await self.store.mark_goal_completed("ch-1", "collect_contact_info")
        await self.store.mark_goal_completed("ch-1", "collect_contact_info")

        state = await self.store.load("ch-1")
        assert state.active_goals == ["collect_identity"]
        assert state.completed_goals == ["collect_contact_info"]

        await self.store.mark_goal_incomplete("ch-1", "collect_contact_info")
        state = await self.store.load("ch-1")
        assert state.active_goals == ["collect_identity", "collect_contact_info"]
        assert state.completed_goals == []

    @pytest.mark.asyncio
    async def test_message_count(self):
        assert await self.store.increment_message_count("ch-1") == 1
        assert await self.store.increment_message_count("ch-1") == 2

    @pytest.mark.asyncio
    async def test_clear_field_and_reset(self):
        await self.store.merge_captured_data("ch-1", {"email": "sam@example.com", "phone": "5551234567"})
        await self.store.clear_field_data("ch-1", "email")
        assert (await self.store.load("ch-1")).captured_data == {"phone": "5551234567"}

        self.store.reset("ch-1")
        assert (await self.store.load("ch-1")).captured_data == {}
