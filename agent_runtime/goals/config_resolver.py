"""
Goal configuration resolution and goal lookup helpers.

Company-level goal configuration wins over persona-level configuration.
When neither is enabled with at least one goal, the result is a disabled,
empty configuration with ``source="none"``. Missing global settings and
completion triggers are filled from the configured goal defaults.

Goal selection has two modes controlled by ``strictOrdering``:
- 0 (always-active): highest priority first, declaration order breaks ties
- anything else (strict): lowest ``order`` wins and priority is ignored
"""

import logging
from typing import Any, Optional, Union

from agent_runtime.schemas.goal_schema import (
    EffectiveGoalConfig,
    GoalConfiguration,
    GoalDefinition,
    GoalType,
)
from agent_runtime.schemas.persona_schema import AgentPersona, CompanyInfo
from agent_runtime.utils import has_actual_value

logger = logging.getLogger(__name__)

PRIORITY_VALUES = {
    "critical": 4,
    "high": 3,
    "medium": 2,
    "low": 1,
}
DEFAULT_PRIORITY_VALUE = 2
STRICT_ORDERING_THRESHOLD = 7
ALWAYS_ACTIVE_ORDERING = 0

ConfigInput = Union[GoalConfiguration, dict[str, Any], None]


def _coerce(config: ConfigInput) -> Optional[GoalConfiguration]:
    if config is None:
        return None
    if isinstance(config, GoalConfiguration):
        return config
    return GoalConfiguration.model_validate(config)


def _usable(config: Optional[GoalConfiguration]) -> bool:
    return config is not None and config.enabled and len(config.goals) > 0


def resolve(company_config: ConfigInput, persona_config: ConfigInput) -> EffectiveGoalConfig:
    """Pick the effective goal configuration: company, then persona, then none."""
    company = _coerce(company_config)
    if _usable(company):
        return EffectiveGoalConfig(**dict(company), source="company")

    persona = _coerce(persona_config)
    if _usable(persona):
        return EffectiveGoalConfig(**dict(persona), source="persona")

    return EffectiveGoalConfig(enabled=False, goals=[], source="none")


def resolve_for(company: Optional[CompanyInfo], persona: AgentPersona) -> EffectiveGoalConfig:
    """Resolve from the ``goalConfiguration`` carried by company and persona records."""
    effective = resolve(
        company.goal_configuration if company else None,
        persona.goal_configuration,
    )
    logger.info(
        "Goal configuration resolved from %s (%d goals)",
        source_description(effective),
        len(effective.goals),
    )
    return effective


def is_enabled(config: EffectiveGoalConfig) -> bool:
    return config.enabled and len(config.goals) > 0


def source_description(config: EffectiveGoalConfig) -> str:
    return {
        "company": "company-level",
        "persona": "persona-level",
        "none": "none",
    }.get(config.source, "unknown")


def find_goal(config: GoalConfiguration, goal_id: str) -> Optional[GoalDefinition]:
    """Find a goal by full id or by short name (``contact`` matches ``contact_info``)."""
    for goal in config.goals:
        if goal.id == goal_id or goal.id.startswith(goal_id + "_"):
            return goal
    return None


def find_goals(config: GoalConfiguration, goal_ids: list[str]) -> list[GoalDefinition]:
    found = []
    for goal_id in goal_ids:
        goal = find_goal(config, goal_id)
        if goal is not None:
            found.append(goal)
    return found


def priority_value(priority: Optional[str]) -> int:
    if not priority:
        return DEFAULT_PRIORITY_VALUE
    return PRIORITY_VALUES.get(str(priority).lower(), DEFAULT_PRIORITY_VALUE)


def strict_ordering(config: GoalConfiguration) -> int:
    return config.global_settings.strict_ordering


def is_strict_ordering(config: GoalConfiguration) -> bool:
    return strict_ordering(config) >= STRICT_ORDERING_THRESHOLD


def is_always_active(config: GoalConfiguration) -> bool:
    return strict_ordering(config) == ALWAYS_ACTIVE_ORDERING


def max_active_goals(config: GoalConfiguration) -> int:
    return config.global_settings.max_active_goals


def max_goals_per_turn(config: GoalConfiguration) -> int:
    return config.global_settings.max_goals_per_turn


def most_urgent(active_goal_ids: list[str], config: GoalConfiguration) -> Optional[GoalDefinition]:
    """Return the active goal to pursue next, or None when none is defined."""
    candidates = find_goals(config, active_goal_ids)
    if not candidates:
        return None

    if is_always_active(config):
        ranked = sorted(candidates, key=lambda g: (-priority_value(g.priority), g.order))
    else:
        ranked = sorted(candidates, key=lambda g: g.order)
    return ranked[0]


def required_fields(goal: Optional[GoalDefinition]) -> list[str]:
    if goal is None:
        return []
    return goal.field_names


def is_complete(goal: GoalDefinition, captured_data: dict[str, Any]) -> bool:
    """True when every required field of the goal has a value.

    A goal declaring no fields is never complete.
    """
    fields = required_fields(goal)
    if not fields:
        return False

    for field_name in fields:
        value = captured_data.get(field_name)
        if goal.data_to_capture.is_optional(field_name) and not has_actual_value(value):
            continue
        if not has_actual_value(value):
            return False
    return True


def goal_type(goal: Optional[GoalDefinition]) -> str:
    if goal is None or not goal.type:
        return GoalType.DATA_COLLECTION.value
    return goal.type


def format_goal_for_log(goal: GoalDefinition) -> dict[str, Any]:
    return {
        "id": goal.id,
        "name": goal.name,
        "type": goal_type(goal),
        "priority": goal.priority or "medium",
        "order": goal.order,
        "fields": required_fields(goal),
    }


def format_goals_for_log(goals: list[GoalDefinition]) -> list[dict[str, Any]]:
    return [format_goal_for_log(goal) for goal in goals]
