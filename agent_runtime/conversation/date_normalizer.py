"""
Relative date context for appointment scheduling.

Builds the prompt block that teaches the intent model to turn "Monday at 6"
into ``2025-12-09T18:00:00``, with time defaults tuned to the business
vertical, and validates the normalized timestamps it returns.

Every date computation accepts an injectable ``today`` so tests are
deterministic.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from agent_runtime.config import settings

ISO_DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$")
ISO_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

MONDAY = 0
FRIDAY = 4


@dataclass(frozen=True)
class TimeDefaults:
    """How bare times and day parts are interpreted for a business vertical."""
    default_period: str
    reason: str
    morning: str
    afternoon: str
    evening: str


TIME_DEFAULTS = {
    "fitness": TimeDefaults(
        default_period="PM",
        reason="most gym visits are after work",
        morning="06:00",
        afternoon="14:00",
        evening="18:00",
    ),
    "medical": TimeDefaults(
        default_period="AM",
        reason="most medical appointments are morning",
        morning="09:00",
        afternoon="14:00",
        evening="17:00",
    ),
    "general": TimeDefaults(
        default_period="PM",
        reason="default assumption",
        morning="09:00",
        afternoon="14:00",
        evening="18:00",
    ),
}


@dataclass(frozen=True)
class DateContext:
    today: str
    day_of_week: str
    timezone: Optional[str] = None


def get_time_defaults(business_context: str) -> TimeDefaults:
    return TIME_DEFAULTS.get(business_context, TIME_DEFAULTS["general"])


def get_date_context(timezone: Optional[str] = None, today: Optional[date] = None) -> DateContext:
    today = today or date.today()
    return DateContext(
        today=today.isoformat(),
        day_of_week=today.strftime("%A"),
        timezone=timezone,
    )


def tomorrow_date(today: Optional[date] = None) -> str:
    today = today or date.today()
    return (today + timedelta(days=1)).isoformat()


def next_day_of_week(weekday: int, today: Optional[date] = None) -> str:
    """Next occurrence of ``weekday`` (Monday=0), always strictly after today."""
    today = today or date.today()
    days_until = weekday - today.weekday()
    if days_until <= 0:
        days_until += 7
    return (today + timedelta(days=days_until)).isoformat()


def build_examples(context: DateContext, today: Optional[date] = None) -> str:
    next_monday = next_day_of_week(MONDAY, today)
    next_friday = next_day_of_week(FRIDAY, today)
    tomorrow = tomorrow_date(today)

    return f"""
EXAMPLES (based on today being {context.day_of_week}, {context.today}):

User: "Monday at 6"
-> extractedData: [
    {{field: "preferredDate", value: "Monday"}},
    {{field: "preferredTime", value: "6"}},
    {{field: "normalizedDateTime", value: "{next_monday}T18:00:00"}}
  ]

User: "tomorrow at 7:30pm"
-> extractedData: [
    {{field: "preferredDate", value: "tomorrow"}},
    {{field: "preferredTime", value: "7:30pm"}},
    {{field: "normalizedDateTime", value: "{tomorrow}T19:30:00"}}
  ]

User: "next Friday morning"
-> extractedData: [
    {{field: "preferredDate", value: "next Friday"}},
    {{field: "preferredTime", value: "morning"}},
    {{field: "normalizedDateTime", value: "{next_friday}T06:00:00"}}
  ]

User: "How about 5:30?"
-> extractedData: [
    {{field: "preferredTime", value: "5:30"}},
    {{field: "normalizedDateTime", value: null}}
  ]
  (normalizedDateTime is null because we don't have the date yet)"""


def build_date_normalization_prompt(
    business_context: Optional[str] = None,
    include_examples: bool = True,
    today: Optional[date] = None,
) -> str:
    """Prompt block describing how to normalize dates and times for this vertical."""
    business_context = business_context or settings.conversation.business_context
    context = get_date_context(today=today)
    defaults = get_time_defaults(business_context)
    examples = build_examples(context, today) if include_examples else ""

    return f"""
APPOINTMENT DATE/TIME NORMALIZATION:
TODAY IS: {context.day_of_week}, {context.today}

When user provides scheduling info (preferredDate, preferredTime), ALSO extract:
- normalizedDateTime: Full ISO 8601 format (e.g., "2025-12-09T18:00:00")

DATE CALCULATION RULES:
- "Monday" = The NEXT Monday from {context.today} (if today is {context.day_of_week})
- "this Monday" = This week's Monday (use next week if already passed)
- "next Monday" = Monday of NEXT week
- "tomorrow" = {tomorrow_date(today)}
- "today" = {context.today}
- Specific dates like "12/15" or "03/03/26" = Parse directly

TIME INTERPRETATION RULES:
- Single number "6" or "7" = Assume {defaults.default_period} ({defaults.reason})
- "6pm" or "6:00pm" = 18:00
- "6am" or "6:00am" = 06:00
- "morning" = {defaults.morning}
- "afternoon" = {defaults.afternoon}
- "evening" = {defaults.evening}
- "7:30" without AM/PM = Assume {defaults.default_period}

OUTPUT FORMAT:
- Always use 24-hour time in ISO format
- Include seconds as :00
- Example: "2025-12-09T18:00:00"
{examples}"""


def is_valid_iso_datetime(value: Optional[str]) -> bool:
    """True for ``YYYY-MM-DDTHH:MM:SS`` strings naming a real calendar instant."""
    if not value or not isinstance(value, str):
        return False
    if not ISO_DATETIME_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, ISO_DATETIME_FORMAT)
    except ValueError:
        return False
    return True


def parse_normalized_datetime(value: Optional[str]) -> Optional[datetime]:
    if not is_valid_iso_datetime(value):
        return None
    return datetime.strptime(value, ISO_DATETIME_FORMAT)


def to_normalized_string(moment: datetime) -> str:
    return moment.strftime(ISO_DATETIME_FORMAT)


def format_for_display(moment: datetime, include_time: bool = True, include_day: bool = True) -> str:
    """Format as "Tuesday December 9, 2025 at 6:00 PM"."""
    parts = []
    if include_day:
        parts.append(moment.strftime("%A"))
    parts.append(f"{moment.strftime('%B')} {moment.day}, {moment.year}")
    if include_time:
        hour = moment.hour % 12 or 12
        period = "AM" if moment.hour < 12 else "PM"
        parts.append("at")
        parts.append(f"{hour}:{moment.minute:02d} {period}")
    return " ".join(parts)
