"""Shared utilities used across the agent runtime."""

import re
from typing import Any

MIN_PHONE_DIGITS = 7
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(954) 123-4567")
        '9541234567'
        >>> normalize_phone("+1 954 123 4567")
        '+19541234567'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def unwrap_value(value: Any) -> Any:
    """Return the raw value from either a plain value or a ``{value: ...}`` wrapper."""
    if isinstance(value, dict):
        return value.get("value") if "value" in value else value
    if isinstance(value, (str, bytes, int, float)):
        return value
    if hasattr(value, "value"):
        return value.value
    return value


def has_actual_value(value: Any) -> bool:
    """True when a captured value carries real content.

    ``None``, empty strings and the literal string ``"null"`` (which models
    sometimes emit) count as absent, including when wrapped.
    """
    raw = unwrap_value(value)
    if raw is None:
        return False
    if isinstance(raw, str):
        return raw.strip() != "" and raw.strip().lower() != "null"
    return True


def is_valid_email(value: Any) -> bool:
    raw = unwrap_value(value)
    if not isinstance(raw, str):
        return False
    return bool(EMAIL_PATTERN.match(raw))


def is_valid_phone(value: Any) -> bool:
    """A phone value needs at least 7 digits (so "I think by phone" is rejected)."""
    raw = unwrap_value(value)
    if not isinstance(raw, str):
        return False
    return len(normalize_phone(raw).lstrip("+")) >= MIN_PHONE_DIGITS


def humanize_field_name(field_name: str) -> str:
    """Convert a camelCase field name to a readable label."""
    labels = {
        "firstName": "first name",
        "lastName": "last name",
        "email": "email address",
        "phone": "phone number",
        "preferredDate": "preferred date",
        "preferredTime": "preferred time",
        "primaryGoal": "main goal",
        "fitnessGoals": "fitness goals",
        "motivationReason": "motivation",
        "timeline": "timeline",
        "height": "height",
        "weight": "weight",
        "heightWeight": "height and weight",
        "bodyFatPercentage": "body fat percentage",
        "injuries": "injuries",
        "medicalConditions": "medical conditions",
        "physicalLimitations": "physical limitations or injuries",
        "doctorClearance": "doctor clearance",
    }
    if field_name in labels:
        return labels[field_name]
    return re.sub(r"([A-Z])", r" \1", field_name).lower().strip()


def join_naturally(items: list[str]) -> str:
    """Join items as "a", "a and b" or "a, b, and c"."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} and {items[1]}"
    return f"{', '.join(items[:-1])}, and {items[-1]}"
