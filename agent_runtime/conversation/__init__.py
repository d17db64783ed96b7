from agent_runtime.conversation.action_tags import ActionTagProcessor
from agent_runtime.conversation.followup_policy import FollowUpKind, FollowUpSituation, select_follow_up
from agent_runtime.conversation.turn_processor import TurnProcessor, TurnState
from agent_runtime.conversation.verbosity import VerbosityProfile, get_profile

__all__ = [
    "TurnProcessor",
    "TurnState",
    "ActionTagProcessor",
    "FollowUpKind",
    "FollowUpSituation",
    "select_follow_up",
    "VerbosityProfile",
    "get_profile",
]
