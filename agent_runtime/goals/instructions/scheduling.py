"""
Scheduling instructions.

Uses the company's business hours to offer real slots instead of asking
an open "when works?" question:

- no preference yet: ask morning or evening
- vague preference ("evenings", "after 6"): offer days and times in range
- a day without a specific time: offer times on that day
- day and specific time: confirm
- user pushed back on offered times: offer later, earlier or other times
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from agent_runtime.goals.instructions.base import GoalInstruction, GoalInstructionContext
from agent_runtime.schemas.intent_schema import PrimaryIntent
from agent_runtime.schemas.persona_schema import WEEKDAYS, HoursSlot

logger = logging.getLogger(__name__)

BusinessHours = dict[str, list[HoursSlot]]

REJECTION_PATTERN = re.compile(
    r"\blater\b|\btoo early\b|\btoo late\b|\bcan't do\b|\bdoesn't work\b"
    r"|\bdon't work\b|\bnone of those\b|\bother\b|\balternative",
    re.IGNORECASE,
)
WANTS_LATER_PATTERN = re.compile(r"\blater\b|\btoo early\b|\bafter\b", re.IGNORECASE)
WANTS_EARLIER_PATTERN = re.compile(r"\bearlier\b|\btoo late\b|\bbefore\b", re.IGNORECASE)
HOUR_PATTERN = re.compile(r"\b(\d{1,2})\s*(?:pm|am)?", re.IGNORECASE)
CLOCK_HOUR_PATTERN = re.compile(r"\s*(\d{1,2})(?::\d{2})?\s*(am|pm)?", re.IGNORECASE)
LATER_THAN_PATTERN = re.compile(r"later\s*(?:than)?\s*(\d+)|after\s*(\d+)")
SPECIFIC_TIME_PATTERNS = (
    re.compile(r"^\d{1,2}\s*(am|pm|:\d{2})$", re.IGNORECASE),
    re.compile(r"^\d{1,2}:\d{2}\s*(am|pm)?$", re.IGNORECASE),
)

DAY_ABBREVIATIONS = {day[:3]: day for day in WEEKDAYS}
DATE_HINTS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun", "today", "tomorrow", "next")
DEFAULT_REJECTION_HOUR = 18
MAX_TIMES_PER_DAY = 3
MAX_TIMES_FOR_DAY = 5


@dataclass
class TimeSlot:
    day: str
    times: list[str] = field(default_factory=list)


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == "null"


def is_valid_date_value(value: Any) -> bool:
    """True when the value names a day, a relative day or a numeric date."""
    if _is_blank(value):
        return False
    text = str(value).lower()
    if any(hint in text for hint in DATE_HINTS):
        return True
    if re.search(r"\d{1,2}[/-]\d{1,2}", text):
        return True
    return bool(re.search(r"\d+(st|nd|rd|th)", text))


def is_specific_time_value(value: Any) -> bool:
    """True for a bookable time such as "6pm", "7:30" or "7:30pm"."""
    if _is_blank(value):
        return False
    text = str(value).lower().strip()
    return any(pattern.match(text) for pattern in SPECIFIC_TIME_PATTERNS)


def has_time_preference(value: Any) -> bool:
    """True for vague preferences ("evening", "after 5") and specific times alike."""
    if _is_blank(value):
        return False
    text = str(value).lower()
    if any(hint in text for hint in ("morning", "evening", "afternoon", "night", "am", "pm", ":")):
        return True
    if re.search(r"later|after|before|around|about", text) and re.search(r"\d", text):
        return True
    return bool(re.fullmatch(r"\d{1,2}", text.strip()))


def format_hour(hour: int) -> str:
    if hour == 0:
        return "12am"
    if hour == 12:
        return "12pm"
    if hour < 12:
        return f"{hour}am"
    return f"{hour - 12}pm"


def parse_hour(time_text: str) -> int:
    """Parse "6pm" or "10am" to a 24-hour number; unparseable text reads as noon."""
    match = re.search(r"(\d+)\s*(am|pm)?", time_text.lower())
    if not match:
        return 12
    hour = int(match.group(1))
    is_pm = match.group(2) == "pm"
    if is_pm and hour < 12:
        hour += 12
    if not is_pm and hour == 12:
        hour = 0
    return hour


def format_slot_options(slots: list[TimeSlot]) -> str:
    return ", ".join(f"{slot.day} at {' or '.join(slot.times[:2])}" for slot in slots)


def _to_evening_hour(hour: int) -> int:
    # "after 6" in a scheduling conversation means 6pm
    return hour + 12 if 1 <= hour <= 12 else hour


def clock_hour(time_text: str) -> Optional[int]:
    """Leading hour of "09:00", "9am" or "9 pm" in 24-hour form, None when absent."""
    match = CLOCK_HOUR_PATTERN.match(time_text or "")
    if not match:
        return None
    hour = int(match.group(1))
    suffix = (match.group(2) or "").lower()
    if suffix == "pm" and hour < 12:
        hour += 12
    elif suffix == "am" and hour == 12:
        hour = 0
    return hour


def _open_hours(business_hours: BusinessHours, day: str) -> list[tuple[int, int]]:
    ranges = []
    for slot in business_hours.get(day) or []:
        from_hour, to_hour = clock_hour(slot.from_), clock_hour(slot.to)
        if from_hour is None or to_hour is None:
            logger.warning("Skipping unreadable business hours on %s: %s - %s", day, slot.from_, slot.to)
            continue
        ranges.append((from_hour, to_hour))
    return ranges


def slots_for_preference(business_hours: BusinessHours, preference: str) -> list[TimeSlot]:
    """Up to three times per open day that fit a morning/afternoon/evening preference."""
    is_morning = any(hint in preference for hint in ("morning", "am", "early"))
    is_evening = any(hint in preference for hint in ("evening", "pm", "after work", "night"))
    is_afternoon = "afternoon" in preference or "lunch" in preference

    slots = []
    for day in WEEKDAYS:
        times = []
        for from_hour, to_hour in _open_hours(business_hours, day):
            if is_morning and from_hour < 12:
                times.extend(format_hour(h) for h in range(max(from_hour, 6), min(to_hour, 12)))
            elif is_evening and to_hour >= 17:
                times.extend(format_hour(h) for h in range(max(from_hour, 17), min(to_hour, 22)))
            elif is_afternoon and from_hour <= 14 and to_hour >= 12:
                times.extend(format_hour(h) for h in range(max(from_hour, 12), min(to_hour, 17)))
            elif not (is_morning or is_evening or is_afternoon):
                times.append(format_hour((from_hour + to_hour) // 2))
        if times:
            slots.append(TimeSlot(day.capitalize(), times[:MAX_TIMES_PER_DAY]))
    return slots


def slots_after_hour(
    business_hours: BusinessHours,
    min_hour: int,
    skip_days: Optional[list[str]] = None,
) -> list[TimeSlot]:
    """Slots strictly later than ``min_hour`` ("later than 6" starts at 7)."""
    skip = {d.lower() for d in skip_days or []}
    slots = []
    for day in WEEKDAYS:
        if day in skip:
            continue
        times: list[str] = []
        for from_hour, to_hour in _open_hours(business_hours, day):
            for hour in range(max(from_hour, min_hour + 1), to_hour):
                if len(times) >= MAX_TIMES_PER_DAY:
                    break
                times.append(format_hour(hour))
        if times:
            slots.append(TimeSlot(day.capitalize(), times))
    return slots


def slots_before_hour(business_hours: BusinessHours, max_hour: int) -> list[TimeSlot]:
    slots = []
    for day in WEEKDAYS:
        times: list[str] = []
        for from_hour, to_hour in _open_hours(business_hours, day):
            for hour in range(from_hour, min(to_hour, max_hour)):
                if len(times) >= MAX_TIMES_PER_DAY:
                    break
                times.append(format_hour(hour))
        if times:
            slots.append(TimeSlot(day.capitalize(), times))
    return slots


def _weekday_in(date_text: str) -> Optional[str]:
    lowered = date_text.lower()
    for abbreviation, day in DAY_ABBREVIATIONS.items():
        if abbreviation in lowered:
            return day
    return None


def times_for_day(business_hours: BusinessHours, date_text: str) -> list[str]:
    """Every other hour the business is open on the weekday named in ``date_text``."""
    day = _weekday_in(date_text)
    if day is None:
        return []
    times: list[str] = []
    for from_hour, to_hour in _open_hours(business_hours, day):
        for hour in range(from_hour, to_hour, 2):
            if len(times) >= MAX_TIMES_FOR_DAY:
                break
            times.append(format_hour(hour))
    return times


def times_for_day_filtered(
    business_hours: BusinessHours,
    date_text: str,
    preference: str,
) -> list[str]:
    times = times_for_day(business_hours, date_text)
    pref = preference.lower()
    if "afternoon" in pref:
        return [t for t in times if 12 <= parse_hour(t) < 17]
    if any(hint in pref for hint in ("evening", "night", "after")):
        return [t for t in times if parse_hour(t) >= 17]
    if "morning" in pref or "early" in pref:
        return [t for t in times if parse_hour(t) < 12]
    return times


def _rejection_instruction(
    business_hours: BusinessHours,
    user_message: str,
) -> Optional[GoalInstruction]:
    hour_match = HOUR_PATTERN.search(user_message)
    mentioned_hour = int(hour_match.group(1)) if hour_match else 0
    min_hour = _to_evening_hour(mentioned_hour or DEFAULT_REJECTION_HOUR)

    if WANTS_LATER_PATTERN.search(user_message):
        later = slots_after_hour(business_hours, min_hour)
        if later:
            options = format_slot_options(later)
            return GoalInstruction(
                instruction=(
                    "User rejected earlier times and wants LATER options "
                    f"(after {format_hour(min_hour)}).\n"
                    f"Offer these available slots: {options}\n"
                    "Be helpful and accommodating - they have schedule constraints!"
                ),
                examples=[
                    f'"No problem! How about {later[0].day} at {later[0].times[0]}?"',
                    f'"I got you! Later slots: {options}. Which works?"',
                ],
                target_fields=["preferredDate"],
            )
        return GoalInstruction(
            instruction=(
                f"User wants later times but we don't have slots after {format_hour(min_hour)}.\n"
                "Apologize and ask what day might work better, or suggest our latest available times."
            ),
            examples=[
                '"Our latest evening slots are around 8-9pm. Would a different day work better?"',
                '"I hear you! What day has more flexibility for you?"',
            ],
            target_fields=["preferredDate"],
        )

    if WANTS_EARLIER_PATTERN.search(user_message):
        earlier = slots_before_hour(business_hours, min_hour)
        if not earlier:
            return None
        options = format_slot_options(earlier)
        return GoalInstruction(
            instruction=(
                f"User wants EARLIER times (before {format_hour(min_hour)}).\n"
                f"Offer these available slots: {options}"
            ),
            examples=[
                f'"Earlier works! How about {earlier[0].day} at {earlier[0].times[0]}?"',
                f'"Got it! I can do {options}. Pick your favorite!"',
            ],
            target_fields=["preferredDate"],
        )

    return GoalInstruction(
        instruction=(
            "User rejected the offered times. Ask what times/days would work better for them.\n"
            "Be accommodating and helpful!"
        ),
        examples=[
            '"No worries! What times work better for your schedule?"',
            '"I hear you! When are you usually free?"',
        ],
        target_fields=["preferredTime", "preferredDate"],
    )


def _preference_instruction(
    business_hours: BusinessHours,
    time_value: Any,
) -> GoalInstruction:
    preference = str(time_value).lower()

    later_match = LATER_THAN_PATTERN.search(preference)
    if later_match:
        min_hour = _to_evening_hour(int(later_match.group(1) or later_match.group(2)))
        later = slots_after_hour(business_hours, min_hour)
        if later:
            options = format_slot_options(later)
            return GoalInstruction(
                instruction=(
                    f"User wants times LATER than {format_hour(min_hour)}. "
                    "Offer available slots after that time.\n"
                    f"Available options: {options}\n"
                    "Ask which day/time works for them."
                ),
                examples=[
                    f'"No problem! I\'ve got {options}. Which works?"',
                    f'"Later works! How about {options}?"',
                ],
                target_fields=["preferredDate"],
            )
        return GoalInstruction(
            instruction=f"No slots available after {format_hour(min_hour)}. Ask what day works best.",
            examples=[
                '"Hmm, we close before then most days. What day works best for you?"',
                '"Our latest slots vary by day. Which day works for you?"',
            ],
            target_fields=["preferredDate"],
        )

    slots = slots_for_preference(business_hours, preference)
    if slots:
        options = format_slot_options(slots)
        return GoalInstruction(
            instruction=(
                f'User prefers "{time_value}". Offer specific available slots.\n'
                f"Available options based on business hours: {options}\n"
                "Ask which day/time works for them."
            ),
            examples=[
                f'"We\'ve got {options}. Which works for you?"',
                f'"How about {slots[0].day} at {slots[0].times[0]}? Or I\'ve got other times too!"',
            ],
            target_fields=["preferredDate"],
        )
    return GoalInstruction(
        instruction="Ask what specific day works for them.",
        examples=[
            '"What day works best for you this week?"',
            '"When were you thinking - this week or next?"',
        ],
        target_fields=["preferredDate"],
    )


def get_scheduling_instruction(context: GoalInstructionContext) -> GoalInstruction:
    user_message = (context.last_user_message or "").lower()
    is_rejection = (
        context.detected_intent == PrimaryIntent.OBJECTION.value
        or bool(REJECTION_PATTERN.search(user_message))
    )

    date_value = context.captured("preferredDate")
    time_value = context.captured("preferredTime")
    has_date = is_valid_date_value(date_value)
    has_specific_time = is_specific_time_value(time_value)
    has_vague_time = has_time_preference(time_value)

    logger.debug(
        "Scheduling state: date=%r (valid=%s) time=%r (specific=%s, preference=%s) rejection=%s",
        date_value, has_date, time_value, has_specific_time, has_vague_time, is_rejection,
    )

    company = context.company_info
    business_hours = company.business_hours if company and company.business_hours else None

    if is_rejection and business_hours:
        instruction = _rejection_instruction(business_hours, user_message)
        if instruction is not None:
            return instruction

    if not has_vague_time and not has_date:
        return GoalInstruction(
            instruction=(
                "Ask about their time preference - are they a morning person or evening person?\n"
                "This helps narrow down available slots."
            ),
            examples=[
                f'"Are you more of a morning person or evening person, {context.name}?"',
                '"What works better for you - mornings or evenings?"',
                '"Do you prefer early bird sessions or after-work workouts?"',
            ],
            target_fields=["preferredTime"],
        )

    if has_vague_time and not has_date and business_hours:
        return _preference_instruction(business_hours, time_value)

    if has_date and not has_specific_time and business_hours:
        if has_vague_time:
            day_times = times_for_day_filtered(business_hours, str(date_value), str(time_value))
            note = f" (filtered for {time_value})"
        else:
            day_times = times_for_day(business_hours, str(date_value))
            note = ""
        if day_times:
            options = ", ".join(day_times)
            return GoalInstruction(
                instruction=(
                    f'User picked "{date_value}"{note}. They need a SPECIFIC time - '
                    "offer available slots.\n"
                    f"Available times: {options}\n"
                    'Ask them to pick a specific time like "7pm" or "7:30".'
                ),
                examples=[
                    f'"On {date_value} I\'ve got {options}. What time works?"',
                    f'"{date_value} works! I can do {options} - which one?"',
                ],
                target_fields=["preferredTime"],
            )

    if has_date and has_specific_time:
        return GoalInstruction(
            instruction="Both date and SPECIFIC time are captured. Confirm the appointment.",
            examples=[
                f'"Locked in for {date_value} at {time_value}!"',
                f'"You\'re all set - see you {date_value} at {time_value}!"',
            ],
        )

    if context.needs("preferredDate") and context.needs("preferredTime") and not has_date:
        return GoalInstruction(
            instruction="Ask for both preferred date and time.",
            examples=[
                '"When works for you? Give me a day and time!"',
                '"What day and time should we lock in?"',
            ],
            target_fields=["preferredDate", "preferredTime"],
        )

    still_needed = context.still_needed
    return GoalInstruction(
        instruction=f"Ask for: {' and '.join(still_needed)}.",
        target_fields=still_needed,
    )
