"""Tests for goal instruction routing and the per-goal generators."""

import pytest

from agent_runtime.goals.instructions import (
    GoalInstruction,
    GoalInstructionContext,
    get_goal_instruction,
    get_registered_generators,
)
from agent_runtime.goals.instructions.scheduling import (
    TimeSlot,
    clock_hour,
    format_hour,
    format_slot_options,
    get_scheduling_instruction,
    has_time_preference,
    is_specific_time_value,
    is_valid_date_value,
    parse_hour,
    slots_after_hour,
    slots_before_hour,
    slots_for_preference,
    times_for_day,
    times_for_day_filtered,
)
from agent_runtime.schemas.persona_schema import CompanyInfo
from tests.conftest import make_channel_state


def scheduling_context(company=None, captured=None, message=None, intent=None, **kwargs):
    return GoalInstructionContext(
        goal_id="schedule_consultation",
        goal_type="scheduling",
        fields_needed=kwargs.pop("fields_needed", ["preferredDate", "preferredTime"]),
        fields_captured=captured or {},
        company_info=company,
        user_name=kwargs.pop("user_name", "Sam"),
        last_user_message=message,
        detected_intent=intent,
        **kwargs,
    )


class TestRouter:
    def test_registration_order(self):
        assert get_registered_generators()[:5] == [
            "contact_info",
            "scheduling",
            "identity",
            "body_metrics",
            "injuries",
        ]

    def test_contact_goal_routes_to_contact_instructions(self):
        result = get_goal_instruction(
            GoalInstructionContext(goal_id="collect_contact_info", fields_needed=["email", "phone"])
        )
        assert result.target_fields == ["email", "phone"]

    def test_scheduling_matched_by_type(self):
        result = get_goal_instruction(
            GoalInstructionContext(
                goal_id="book_session",
                goal_type="scheduling",
                fields_needed=["preferredDate", "preferredTime"],
            )
        )
        assert result.target_fields == ["preferredTime"]

    def test_name_goal_routes_to_identity(self):
        result = get_goal_instruction(
            GoalInstructionContext(goal_id="Collect_First_Name", fields_needed=["firstName"])
        )
        assert result.instruction == "Ask for their first name only."

    def test_unmatched_goal_uses_default(self):
        result = get_goal_instruction(
            GoalInstructionContext(goal_id="understand_motivation", fields_needed=["motivationReason"])
        )
        assert "driving" in result.instruction
        assert result.target_fields == ["motivationReason"]


class TestContactInfoInstructions:
    def test_asks_for_both(self):
        result = get_goal_instruction(
            GoalInstructionContext(goal_id="collect_contact_info", fields_needed=["email", "phone"])
        )
        assert "BOTH email AND phone" in result.instruction

    def test_references_picked_session(self):
        state = make_channel_state(captured={"preferredDate": "Monday", "preferredTime": "6pm"})
        result = get_goal_instruction(
            GoalInstructionContext(
                goal_id="collect_contact_info",
                fields_needed=["email", "phone"],
                channel_state=state,
            )
        )
        assert "their Monday at 6pm session" in result.instruction

    def test_only_phone_after_email(self):
        result = get_goal_instruction(
            GoalInstructionContext(
                goal_id="collect_contact_info",
                fields_needed=["email", "phone"],
                fields_captured={"email": {"value": "sam@example.com"}},
            )
        )
        assert result.target_fields == ["phone"]

    def test_complete(self):
        result = get_goal_instruction(
            GoalInstructionContext(
                goal_id="collect_contact_info",
                fields_needed=["email", "phone"],
                fields_captured={"email": "sam@example.com", "phone": "5551234567"},
            )
        )
        assert result.target_fields == []
        assert "complete" in result.instruction


class TestIdentityInstructions:
    def test_both_names_needed(self):
        result = get_goal_instruction(
            GoalInstructionContext(goal_id="collect_identity", fields_needed=["firstName", "lastName"])
        )
        assert result.target_fields == ["firstName", "lastName"]

    def test_last_name_uses_first_name(self):
        result = get_goal_instruction(
            GoalInstructionContext(
                goal_id="collect_identity",
                fields_needed=["firstName", "lastName"],
                fields_captured={"firstName": "Sam"},
            )
        )
        assert result.target_fields == ["lastName"]
        assert "(Sam)" in result.instruction


class TestBodyMetricsAndInjuries:
    def test_height_and_weight_together(self):
        result = get_goal_instruction(
            GoalInstructionContext(goal_id="collect_body_metrics", fields_needed=["height", "weight"])
        )
        assert result.target_fields == ["height", "weight"]

    def test_body_fat_after_height_and_weight(self):
        result = get_goal_instruction(
            GoalInstructionContext(
                goal_id="collect_body_metrics",
                fields_needed=["height", "weight", "bodyFatPercentage"],
                fields_captured={"height": "5'10", "weight": "180"},
            )
        )
        assert result.target_fields == ["bodyFatPercentage"]

    def test_injuries(self):
        result = get_goal_instruction(
            GoalInstructionContext(goal_id="check_injuries", fields_needed=["physicalLimitations"])
        )
        assert result.target_fields == ["physicalLimitations"]

    def test_injuries_captured(self):
        result = get_goal_instruction(
            GoalInstructionContext(
                goal_id="check_injuries",
                fields_needed=["physicalLimitations"],
                fields_captured={"physicalLimitations": "none"},
            )
        )
        assert result.target_fields == []


class TestDefaultInstructions:
    def test_multiple_fields_asked_together(self):
        result = get_goal_instruction(
            GoalInstructionContext(
                goal_id="understand_goals",
                fields_needed=["motivationReason", "timeline", "motivationCategories"],
            )
        )
        assert "motivation and timeline" in result.instruction
        assert result.target_fields == ["motivationReason", "timeline"]

    def test_primary_goal_references_motivation_and_timeline(self):
        result = get_goal_instruction(
            GoalInstructionContext(
                goal_id="understand_goals",
                fields_needed=["primaryGoal", "motivationReason", "timeline"],
                fields_captured={"motivationReason": "wedding", "timeline": "June"},
            )
        )
        assert 'motivation: "wedding"' in result.instruction
        assert result.target_fields == ["primaryGoal"]

    def test_unknown_field_is_humanized(self):
        result = get_goal_instruction(
            GoalInstructionContext(goal_id="misc", fields_needed=["favoriteWorkout"])
        )
        assert result.instruction == "Ask for their favorite workout."

    def test_nothing_needed(self):
        result = get_goal_instruction(
            GoalInstructionContext(goal_id="misc", goal_name="Misc", fields_needed=["timeline"],
                                   fields_captured={"timeline": "3 months"})
        )
        assert result.target_fields == []


class TestSchedulingHelpers:
    @pytest.mark.parametrize("value,expected", [
        ("Monday", True),
        ("tomorrow", True),
        ("12/15", True),
        ("the 3rd", True),
        ("whenever", False),
        ("null", False),
        (None, False),
    ])
    def test_is_valid_date_value(self, value, expected):
        assert is_valid_date_value(value) is expected

    @pytest.mark.parametrize("value,expected", [
        ("6pm", True),
        ("7:30", True),
        ("7:30pm", True),
        ("evening", False),
        ("6", False),
        ("", False),
    ])
    def test_is_specific_time_value(self, value, expected):
        assert is_specific_time_value(value) is expected

    def test_has_time_preference(self):
        assert has_time_preference("evening")
        assert has_time_preference("later than 6")
        assert has_time_preference("6")
        assert not has_time_preference("whenever")

    def test_format_hour(self):
        assert format_hour(0) == "12am"
        assert format_hour(9) == "9am"
        assert format_hour(12) == "12pm"
        assert format_hour(18) == "6pm"

    def test_parse_hour(self):
        assert parse_hour("6pm") == 18
        assert parse_hour("10am") == 10
        assert parse_hour("12am") == 0
        assert parse_hour("noonish") == 12

    def test_format_slot_options_caps_times(self):
        slots = [TimeSlot("Monday", ["5pm", "6pm", "7pm"]), TimeSlot("Tuesday", ["5pm"])]
        assert format_slot_options(slots) == "Monday at 5pm or 6pm, Tuesday at 5pm"

    def test_evening_slots(self, company):
        slots = slots_for_preference(company.business_hours, "evening")
        assert [(s.day, s.times) for s in slots] == [
            ("Monday", ["5pm", "6pm", "7pm"]),
            ("Tuesday", ["5pm", "6pm", "7pm"]),
        ]

    def test_slots_after_hour_is_exclusive(self, company):
        slots = slots_after_hour(company.business_hours, 18)
        assert [(s.day, s.times) for s in slots] == [
            ("Monday", ["7pm", "8pm"]),
            ("Tuesday", ["7pm", "8pm"]),
        ]

    def test_slots_after_hour_skips_days(self, company):
        slots = slots_after_hour(company.business_hours, 18, skip_days=["Monday"])
        assert [s.day for s in slots] == ["Tuesday"]

    def test_slots_before_hour(self, company):
        slots = slots_before_hour(company.business_hours, 9)
        assert [(s.day, s.times) for s in slots] == [
            ("Monday", ["6am", "7am", "8am"]),
            ("Tuesday", ["6am", "7am", "8am"]),
            ("Saturday", ["8am"]),
        ]

    def test_times_for_day(self, company):
        assert times_for_day(company.business_hours, "Monday") == ["6am", "8am", "10am", "12pm", "2pm"]
        assert times_for_day(company.business_hours, "next sunday") == []
        assert times_for_day(company.business_hours, "whenever") == []

    def test_times_for_day_filtered(self, company):
        assert times_for_day_filtered(company.business_hours, "Saturday", "morning") == ["8am", "10am"]
        assert times_for_day_filtered(company.business_hours, "Saturday", "afternoon") == ["12pm"]

    @pytest.mark.parametrize("text,expected", [
        ("06:00", 6),
        ("21:30", 21),
        ("9am", 9),
        ("9 PM", 21),
        ("12:30pm", 12),
        ("12am", 0),
        ("by appointment", None),
        ("", None),
    ])
    def test_clock_hour(self, text, expected):
        assert clock_hour(text) == expected

    def test_am_pm_business_hours(self):
        hours = CompanyInfo(business_hours={
            "monday": [{"from": "9am", "to": "9pm"}],
            "tuesday": [{"from": "by appointment", "to": "late"}],
        }).business_hours
        slots = slots_for_preference(hours, "evening")
        assert [(s.day, s.times) for s in slots] == [("Monday", ["5pm", "6pm", "7pm"])]
        assert times_for_day(hours, "Tuesday") == []


class TestSchedulingInstruction:
    def test_no_preference_asks_morning_or_evening(self, company):
        result = get_scheduling_instruction(scheduling_context(company))
        assert result.target_fields == ["preferredTime"]
        assert "Sam" in result.examples[0]

    def test_vague_preference_offers_slots(self, company):
        result = get_scheduling_instruction(
            scheduling_context(company, captured={"preferredTime": "evening"})
        )
        assert "Monday at 5pm or 6pm, Tuesday at 5pm or 6pm" in result.instruction
        assert result.target_fields == ["preferredDate"]

    def test_later_than_preference(self, company):
        result = get_scheduling_instruction(
            scheduling_context(company, captured={"preferredTime": "later than 6"})
        )
        assert "LATER than 6pm" in result.instruction
        assert "Monday at 7pm or 8pm" in result.instruction

    def test_day_without_time_offers_times(self, company):
        result = get_scheduling_instruction(
            scheduling_context(company, captured={"preferredDate": "Monday"})
        )
        assert "6am, 8am, 10am, 12pm, 2pm" in result.instruction
        assert result.target_fields == ["preferredTime"]

    def test_day_with_filtered_preference(self, company):
        result = get_scheduling_instruction(
            scheduling_context(company, captured={"preferredDate": "Saturday", "preferredTime": "morning"})
        )
        assert "(filtered for morning)" in result.instruction
        assert "8am, 10am" in result.instruction

    def test_date_and_specific_time_confirms(self, company):
        result = get_scheduling_instruction(
            scheduling_context(company, captured={"preferredDate": "Monday", "preferredTime": "6pm"})
        )
        assert "Confirm the appointment" in result.instruction
        assert result.target_fields == []

    def test_rejection_offers_later_slots(self, company):
        result = get_scheduling_instruction(
            scheduling_context(company, message="Those are too early, anything later?")
        )
        assert "wants LATER options (after 6pm)" in result.instruction
        assert "Monday at 7pm or 8pm" in result.instruction

    def test_rejection_with_mentioned_hour(self, company):
        result = get_scheduling_instruction(
            scheduling_context(company, message="I can't do anything before 7, later please")
        )
        assert "(after 7pm)" in result.instruction
        assert "Monday at 8pm" in result.instruction

    def test_objection_without_direction_asks_what_works(self, company):
        result = get_scheduling_instruction(
            scheduling_context(company, message="hmm not sure", intent="objection")
        )
        assert result.target_fields == ["preferredTime", "preferredDate"]

    def test_earlier_without_slots_falls_through(self):
        late_gym = CompanyInfo(
            name="Night Owl Fitness",
            business_hours={"friday": [{"from": "19:00", "to": "23:00"}]},
        )
        result = get_scheduling_instruction(
            scheduling_context(late_gym, message="can you do earlier?", intent="objection")
        )
        assert result.target_fields == ["preferredTime"]

    def test_rejection_ignored_without_business_hours(self):
        result = get_scheduling_instruction(
            scheduling_context(CompanyInfo(name="Gym"), message="none of those work")
        )
        assert result.target_fields == ["preferredTime"]

    def test_vague_time_without_hours_asks_for_both(self):
        result = get_scheduling_instruction(
            scheduling_context(CompanyInfo(name="Gym"), captured={"preferredTime": "evening"})
        )
        assert result.target_fields == ["preferredDate", "preferredTime"]

    def test_instruction_type(self, company):
        assert isinstance(get_scheduling_instruction(scheduling_context(company)), GoalInstruction)
