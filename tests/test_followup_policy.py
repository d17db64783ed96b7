"""Tests for follow-up rule selection."""

from agent_runtime.conversation.followup_policy import (
    FOLLOW_UP_RULES,
    FollowUpKind,
    FollowUpRule,
    FollowUpSituation,
    select_follow_up,
)
from agent_runtime.schemas.channel_schema import ExtractedValue


def extracted(**fields):
    return {name: ExtractedValue(value=value) for name, value in fields.items()}


class TestSelectFollowUp:
    def test_farewell_when_ending_without_goals(self):
        situation = FollowUpSituation(primary_intent="end_conversation")
        assert select_follow_up(situation) == FollowUpKind.FAREWELL

    def test_ending_with_active_goals_keeps_asking(self):
        situation = FollowUpSituation(primary_intent="end_conversation", active_goals=["collect_identity"])
        assert select_follow_up(situation) == FollowUpKind.GOAL_QUESTION

    def test_correction_beats_verification(self):
        situation = FollowUpSituation(
            active_goals=["collect_contact_info"],
            extracted=extracted(wrong_phone="true", email="sam@example.com"),
        )
        assert select_follow_up(situation) == FollowUpKind.ERROR_RECOVERY

    def test_valid_email_triggers_verification(self):
        situation = FollowUpSituation(extracted=extracted(email="sam@example.com"))
        assert select_follow_up(situation) == FollowUpKind.VERIFICATION

    def test_valid_phone_triggers_verification(self):
        situation = FollowUpSituation(extracted=extracted(phone="(954) 123-4567"))
        assert select_follow_up(situation) == FollowUpKind.VERIFICATION

    def test_invalid_contact_values_skip_verification(self):
        situation = FollowUpSituation(
            active_goals=["collect_contact_info"],
            extracted=extracted(phone="by phone", email="not-an-email"),
        )
        assert select_follow_up(situation) == FollowUpKind.GOAL_QUESTION

    def test_engagement_on_first_message(self):
        assert select_follow_up(FollowUpSituation(message_count=0)) == FollowUpKind.ENGAGEMENT

    def test_unknown_message_count_is_not_first(self):
        assert select_follow_up(FollowUpSituation(message_count=None)) == FollowUpKind.NONE

    def test_nothing_to_do(self):
        assert select_follow_up(FollowUpSituation(message_count=4)) == FollowUpKind.NONE


class TestCustomRules:
    def test_custom_rules_replace_defaults(self):
        rules = [FollowUpRule(FollowUpKind.ENGAGEMENT, lambda s: True, "always engage")]
        situation = FollowUpSituation(primary_intent="end_conversation")
        assert select_follow_up(situation, rules) == FollowUpKind.ENGAGEMENT

    def test_empty_rules(self):
        assert select_follow_up(FollowUpSituation(message_count=0), []) == FollowUpKind.NONE

    def test_default_rule_order(self):
        assert [rule.kind for rule in FOLLOW_UP_RULES] == [
            FollowUpKind.FAREWELL,
            FollowUpKind.ERROR_RECOVERY,
            FollowUpKind.VERIFICATION,
            FollowUpKind.GOAL_QUESTION,
            FollowUpKind.ENGAGEMENT,
        ]
