"""
Follow-up selection for the third stage of a turn.

An ordered list of guarded rules decides what kind of follow-up to
generate after the conversational reply. The first rule whose guard
passes wins; when none passes the turn has no follow-up.

Usage:
    kind = select_follow_up(situation)
    assert kind == FollowUpKind.GOAL_QUESTION
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from agent_runtime.schemas.channel_schema import ExtractedValue
from agent_runtime.schemas.intent_schema import PrimaryIntent
from agent_runtime.utils import is_valid_email, is_valid_phone

logger = logging.getLogger(__name__)


class FollowUpKind(str, Enum):
    """Every follow-up the third stage can produce."""
    FAREWELL = "farewell"
    ERROR_RECOVERY = "error_recovery"
    VERIFICATION = "verification"
    GOAL_QUESTION = "goal_question"
    ENGAGEMENT = "engagement"
    NONE = "none"


@dataclass
class FollowUpSituation:
    """What the follow-up stage knows after the reply has been generated."""
    primary_intent: Optional[str] = None
    active_goals: list[str] = field(default_factory=list)
    extracted: dict[str, ExtractedValue] = field(default_factory=dict)
    message_count: Optional[int] = None

    @property
    def is_ending(self) -> bool:
        return self.primary_intent == PrimaryIntent.END_CONVERSATION.value

    @property
    def has_correction(self) -> bool:
        return bool(self.extracted.get("wrong_phone") or self.extracted.get("wrong_email"))

    @property
    def captured_email(self) -> bool:
        return "email" in self.extracted and is_valid_email(self.extracted["email"])

    @property
    def captured_phone(self) -> bool:
        return "phone" in self.extracted and is_valid_phone(self.extracted["phone"])

    @property
    def is_first_message(self) -> bool:
        return self.message_count == 0


@dataclass
class FollowUpRule:
    """A guarded follow-up choice."""
    kind: FollowUpKind
    guard: Callable[[FollowUpSituation], bool]
    description: str = ""


FOLLOW_UP_RULES: list[FollowUpRule] = [
    FollowUpRule(
        FollowUpKind.FAREWELL,
        lambda s: s.is_ending and not s.active_goals,
        "user is wrapping up and no goal remains",
    ),
    FollowUpRule(
        FollowUpKind.ERROR_RECOVERY,
        lambda s: s.has_correction,
        "user reported wrong contact details",
    ),
    FollowUpRule(
        FollowUpKind.VERIFICATION,
        lambda s: s.captured_email or s.captured_phone,
        "a valid email or phone was captured this turn",
    ),
    FollowUpRule(
        FollowUpKind.GOAL_QUESTION,
        lambda s: bool(s.active_goals),
        "at least one goal is still active",
    ),
    FollowUpRule(
        FollowUpKind.ENGAGEMENT,
        lambda s: s.is_first_message,
        "first message of the channel",
    ),
]


def select_follow_up(
    situation: FollowUpSituation,
    rules: Optional[list[FollowUpRule]] = None,
) -> FollowUpKind:
    """Return the kind of the first rule whose guard passes."""
    for rule in rules if rules is not None else FOLLOW_UP_RULES:
        if rule.guard(situation):
            logger.debug("Follow-up rule matched: %s (%s)", rule.kind.value, rule.description)
            return rule.kind
    return FollowUpKind.NONE
