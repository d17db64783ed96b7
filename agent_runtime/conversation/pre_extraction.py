"""
Deterministic extraction that runs before and around the intent model.

Three pattern tables correct known model blind spots:
1. Time preferences: single-word answers like "evening" get read as greetings
2. Motivation keywords: "wedding", "marathon" and similar are often missed
3. Confirmation phrases: "got it" must never trigger a contact correction

Extraction precedence for one turn: values from the goal orchestrator are
seeded first, pattern matches are layered on top, then the intent model's
``extractedData`` array overwrites field by field. The deprecated
single-field format is read only when the array is absent.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from agent_runtime.schemas.channel_schema import CORRECTION_FIELDS, ExtractedValue, ExtractionSource
from agent_runtime.schemas.intent_schema import IntentDetectionResult
from agent_runtime.utils import has_actual_value

logger = logging.getLogger(__name__)

TIME_FIELD = "preferredTime"
MOTIVATION_REASON_FIELD = "motivationReason"
MOTIVATION_CATEGORIES_FIELD = "motivationCategories"


@dataclass(frozen=True)
class TimePreferencePattern:
    pattern: re.Pattern
    value: str


@dataclass(frozen=True)
class MotivationPattern:
    pattern: re.Pattern
    reason: str
    categories: str


TIME_PREFERENCE_PATTERNS = [
    TimePreferencePattern(re.compile(r"\b(night|nights|nighttime|evening|evenings)\b", re.I), "evening"),
    TimePreferencePattern(re.compile(r"\b(afternoon|afternoons)\b", re.I), "afternoon"),
    TimePreferencePattern(re.compile(r"\b(morning|mornings|early)\b", re.I), "morning"),
    TimePreferencePattern(re.compile(r"\bpm\b", re.I), "evening"),
    TimePreferencePattern(re.compile(r"\bam\b", re.I), "morning"),
]

MOTIVATION_PATTERNS = [
    MotivationPattern(re.compile(r"\bwedding\b", re.I), "wedding", "aesthetic"),
    MotivationPattern(re.compile(r"\bmarriage\b", re.I), "wedding", "aesthetic"),
    MotivationPattern(
        re.compile(r"\bcompetition\b|\bcontest\b|\bcompete\b", re.I),
        "competition", "performance,aesthetic",
    ),
    MotivationPattern(
        re.compile(r"\bbodybuilding\b", re.I),
        "bodybuilding competition", "performance,aesthetic",
    ),
    MotivationPattern(re.compile(r"\bbeach\b|\bvacation\b|\bsummer body\b", re.I), "vacation", "aesthetic"),
    MotivationPattern(re.compile(r"\bdoctor\b|\bhealth\b|\bdiabetes\b|\bheart\b", re.I), "health", "health"),
    MotivationPattern(
        re.compile(r"\bkids\b|\bchildren\b|\bfamily\b|\bgrandkids\b", re.I),
        "family", "lifestyle,health",
    ),
    MotivationPattern(
        re.compile(r"\bstress\b|\banxiety\b|\bmental health\b|\bdepression\b", re.I),
        "mental health", "mental",
    ),
    MotivationPattern(
        re.compile(r"\bconfidence\b|\bfeel better\b|\bself.?esteem\b", re.I),
        "self-confidence", "aesthetic,mental",
    ),
    MotivationPattern(
        re.compile(r"\bbreak.?up\b|\bex\b|\brevenge\b|\bdivorce\b", re.I),
        "breakup", "aesthetic,mental",
    ),
    MotivationPattern(re.compile(r"\bmarathon\b|\brace\b|\b5k\b|\b10k\b", re.I), "race/event", "performance"),
]

CONFIRMATION_PATTERN = re.compile(
    r"\b(perfect|correct|right|good|great|yes|yep|yeah|confirmed|got it|got them|got 'em"
    r"|received|verified|all good|we're good|looks good|that's it|that's right)\b",
    re.I,
)


def detect_time_preference(message: str) -> Optional[str]:
    """First matching day part in the message, e.g. "I like the night" -> "evening"."""
    for entry in TIME_PREFERENCE_PATTERNS:
        if entry.pattern.search(message):
            return entry.value
    return None


def detect_motivation(message: str) -> Optional[MotivationPattern]:
    for entry in MOTIVATION_PATTERNS:
        if entry.pattern.search(message):
            return entry
    return None


def is_confirmation(message: str) -> bool:
    return bool(CONFIRMATION_PATTERN.search(message))


def seed_from_goal_result(extracted_info: dict[str, Any]) -> dict[str, ExtractedValue]:
    """Normalize the orchestrator's this-turn extraction into ExtractedValue objects."""
    return {
        field_name: ExtractedValue.coerce(value, ExtractionSource.GOAL_ORCHESTRATOR)
        for field_name, value in extracted_info.items()
    }


def apply_patterns(
    user_message: str,
    data: dict[str, ExtractedValue],
    asking_for_time: bool,
    motivation_known: bool,
) -> dict[str, ExtractedValue]:
    """Layer time and motivation pattern matches onto ``data`` in place."""
    if asking_for_time:
        time_value = detect_time_preference(user_message)
        if time_value:
            logger.debug("Pattern match: preferredTime=%r from %r", time_value, user_message)
            data[TIME_FIELD] = ExtractedValue(
                value=time_value,
                confidence=1.0,
                source=ExtractionSource.PRE_LLM_PATTERN_MATCH,
            )

    if not motivation_known and not has_actual_value(data.get(MOTIVATION_REASON_FIELD)):
        motivation = detect_motivation(user_message)
        if motivation:
            logger.debug("Pattern match: motivation=%r", motivation.reason)
            data[MOTIVATION_REASON_FIELD] = ExtractedValue(
                value=motivation.reason,
                confidence=1.0,
                source=ExtractionSource.PRE_LLM_PATTERN_MATCH,
            )
            data[MOTIVATION_CATEGORIES_FIELD] = ExtractedValue(
                value=motivation.categories,
                confidence=1.0,
                source=ExtractionSource.PRE_LLM_PATTERN_MATCH,
            )
    return data


def merge_intent_extractions(
    data: dict[str, ExtractedValue],
    intent: Optional[IntentDetectionResult],
    user_message: str,
) -> dict[str, ExtractedValue]:
    """Overlay the model's extractions onto ``data`` in place.

    Corrections (``wrong_phone``/``wrong_email``) are dropped when the
    message reads as a confirmation.
    """
    if intent is None:
        return data

    confirmed = is_confirmation(user_message)

    if intent.extracted_data is not None:
        for item in intent.extracted_data:
            field_name = item.field.value
            if field_name in CORRECTION_FIELDS and confirmed:
                logger.warning(
                    "Blocked %s extraction: message is a confirmation (%r)",
                    field_name, user_message[:50],
                )
                continue
            data[field_name] = ExtractedValue(
                value=item.value,
                confidence=1.0,
                source=ExtractionSource.LLM_INTENT_DETECTION,
            )
        return data

    if intent.detected_workflow_intent and intent.extracted_value:
        field_name = intent.detected_workflow_intent.value
        if field_name in CORRECTION_FIELDS and confirmed:
            logger.warning("Blocked legacy %s extraction: message is a confirmation", field_name)
            return data
        data[field_name] = ExtractedValue(
            value=intent.extracted_value,
            confidence=1.0,
            source=ExtractionSource.LLM_INTENT_DETECTION,
        )
    return data
