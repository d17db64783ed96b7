"""
Goal instruction generators.

Each generator turns what is known about one goal into an instruction
for the goal question prompt. Generators are matched against the goal
id (and type) in registration order; the first match wins and the
default generator handles everything else.
"""

import logging
from typing import Callable

from agent_runtime.goals.instructions.base import GoalInstruction, GoalInstructionContext
from agent_runtime.goals.instructions.body_metrics import get_body_metrics_instruction
from agent_runtime.goals.instructions.contact_info import get_contact_info_instruction
from agent_runtime.goals.instructions.default import get_default_instruction
from agent_runtime.goals.instructions.identity import get_identity_instruction
from agent_runtime.goals.instructions.injuries import get_injuries_instruction
from agent_runtime.goals.instructions.scheduling import get_scheduling_instruction

logger = logging.getLogger(__name__)

InstructionGenerator = Callable[[GoalInstructionContext], GoalInstruction]
GoalMatcher = Callable[[str, str], bool]

_GENERATORS: list[tuple[str, GoalMatcher, InstructionGenerator]] = []


def register_instruction_generator(
    name: str,
    matcher: GoalMatcher,
    generator: InstructionGenerator,
) -> None:
    """Register a generator. ``matcher`` receives the lowercased goal id and type."""
    _GENERATORS.append((name, matcher, generator))
    logger.debug("Instruction generator registered: %s", name)


def get_registered_generators() -> list[str]:
    return [name for name, _, _ in _GENERATORS]


def get_goal_instruction(context: GoalInstructionContext) -> GoalInstruction:
    goal_id = context.goal_id.lower()
    goal_type = (context.goal_type or "").lower()
    for name, matcher, generator in _GENERATORS:
        if matcher(goal_id, goal_type):
            logger.debug("Goal %s routed to %s instructions", context.goal_id, name)
            return generator(context)
    return get_default_instruction(context)


def _auto_register() -> None:
    register_instruction_generator(
        "contact_info",
        lambda goal_id, _: "contact_info" in goal_id or "contact-info" in goal_id,
        get_contact_info_instruction,
    )
    register_instruction_generator(
        "scheduling",
        lambda goal_id, goal_type: "schedule" in goal_id or goal_type == "scheduling",
        get_scheduling_instruction,
    )
    register_instruction_generator(
        "identity",
        lambda goal_id, _: "identity" in goal_id or "name" in goal_id,
        get_identity_instruction,
    )
    register_instruction_generator(
        "body_metrics",
        lambda goal_id, _: "body_metrics" in goal_id or "body-metrics" in goal_id,
        get_body_metrics_instruction,
    )
    register_instruction_generator(
        "injuries",
        lambda goal_id, _: "injuries" in goal_id or "limitations" in goal_id,
        get_injuries_instruction,
    )


_auto_register()

__all__ = [
    "GoalInstruction",
    "GoalInstructionContext",
    "InstructionGenerator",
    "get_goal_instruction",
    "register_instruction_generator",
    "get_registered_generators",
]
