from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Tuple

DEFAULT_HOUR = 9
DEFAULT_DURATION_MINUTES = 60

# "5:00pm", "5:00 PM", "5:00-6:00pm" (the range end is ignored).
CLOCK_PATTERN = re.compile(
    r"\b(\d{1,2}):(\d{2})(?:\s*-\s*\d{1,2}:\d{2})?\s*(am|pm)\b",
    flags=re.IGNORECASE,
)
CLOCK_24H_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

# "due on March 5", "expires Jan 12, 2025", "by April 3rd", "March 5 2025"
DATE_PHRASE_PATTERN = re.compile(
    r"\b(january|february|march|april|may|june|july|august|september|october|november|december"
    r"|jan|feb|mar|apr|jun|jul|aug|sept|sep|oct|nov|dec)\.?\s+"
    r"(\d{1,2})(?:st|nd|rd|th)?\b(?:,?\s+(\d{4})\b)?",
    flags=re.IGNORECASE,
)

EXPLICIT_FORMATS = (
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def to_24_hour(hour: int, meridiem: str) -> int:
    meridiem = meridiem.lower()
    if meridiem == "am":
        return 0 if hour == 12 else hour
    return 12 if hour == 12 else hour + 12


def find_clock_time(text: str) -> Optional[Tuple[int, int]]:
    """First 12-hour clock time in text as (hour, minute) on a 24-hour clock."""
    for match in CLOCK_PATTERN.finditer(text or ""):
        hour, minute = int(match.group(1)), int(match.group(2))
        if 1 <= hour <= 12 and minute < 60:
            return to_24_hour(hour, match.group(3)), minute
    return None


def _param_clock_time(params: Mapping[str, Any]) -> Optional[Tuple[int, int]]:
    raw = params.get("time")
    if not isinstance(raw, str) or not raw.strip():
        return None
    found = find_clock_time(raw)
    if found:
        return found
    match = CLOCK_24H_PATTERN.match(raw)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour < 24 and minute < 60:
            return hour, minute
    return None


def _align(value: datetime, now: datetime) -> datetime:
    # Express parsed values in the same zone as `now`.
    if value.tzinfo is None:
        return value.replace(tzinfo=now.tzinfo) if now.tzinfo else value
    if now.tzinfo is not None:
        return value.astimezone(now.tzinfo)
    return value.astimezone().replace(tzinfo=None)


def parse_date_value(value: Any, now: datetime) -> Tuple[Optional[datetime], bool]:
    """
    Parse an explicit date/datetime value.

    Returns (datetime, has_time). Date-only values come back at midnight with
    has_time False. Unparseable values return (None, False).
    """
    if isinstance(value, datetime):
        return _align(value, now), True
    if isinstance(value, date):
        return _align(datetime(value.year, value.month, value.day), now), False
    if not isinstance(value, str):
        return None, False

    raw = value.strip()
    if not raw:
        return None, False

    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        parsed = None
    if parsed is not None:
        has_time = "T" in raw or bool(re.search(r"\d:\d", raw))
        return _align(parsed, now), has_time

    for fmt in EXPLICIT_FORMATS:
        try:
            parsed = datetime.strptime(raw, fmt)
        except ValueError:
            continue
        return _align(parsed, now), False

    found = find_date_in_text(raw, now)
    return found, False


def find_date_in_text(text: str, now: datetime) -> Optional[datetime]:
    """First month-name date phrase in text, at midnight. Missing years use now.year."""
    for match in DATE_PHRASE_PATTERN.finditer(text or ""):
        month = MONTHS[match.group(1).lower()[:3]]
        day = int(match.group(2))
        year = int(match.group(3)) if match.group(3) else now.year
        try:
            found = datetime(year, month, day)
        except ValueError:
            continue
        return _align(found, now)
    return None


def _explicit_date(params: Mapping[str, Any], now: datetime) -> Tuple[Optional[datetime], bool]:
    for key in ("eventDate", "date"):
        if key in params:
            parsed, has_time = parse_date_value(params.get(key), now)
            if parsed is not None:
                return parsed, has_time
    return None, False


def resolve_event_start(
    params: Optional[Mapping[str, Any]],
    description_text: str = "",
    now: Optional[datetime] = None,
) -> datetime:
    """
    Resolve the start of an event from suggestion params and free text.

    Date source: the eventDate/date param, else a date phrase in the text,
    else today when a clock time is present. A clock time in the text (or a
    `time` param) is layered onto that date. Without any of these the event
    lands tomorrow at 09:00.
    """
    now = now or datetime.now().astimezone()
    params = params or {}
    text = " ".join(
        str(part) for part in (params.get("description"), description_text) if part
    )

    base, has_time = _explicit_date(params, now)
    if base is None:
        base = find_date_in_text(text, now)
        has_time = False

    clock = find_clock_time(text) or _param_clock_time(params)
    if clock is not None:
        hour, minute = clock
        day = base if base is not None else now
        return day.replace(hour=hour, minute=minute, second=0, microsecond=0)

    if base is not None:
        if has_time:
            return base.replace(microsecond=0)
        return base.replace(hour=DEFAULT_HOUR, minute=0, second=0, microsecond=0)

    tomorrow = now + timedelta(days=1)
    return tomorrow.replace(hour=DEFAULT_HOUR, minute=0, second=0, microsecond=0)


def resolve_event_time(
    params: Optional[Mapping[str, Any]],
    description_text: str = "",
    now: Optional[datetime] = None,
) -> str:
    """ISO-8601 form of resolve_event_start."""
    return resolve_event_start(params, description_text, now).isoformat()


def to_rfc3339_utc(value: Any, now: Optional[datetime] = None) -> Optional[str]:
    """Normalize a due date for the Tasks API; None when unparseable."""
    now = now or datetime.now().astimezone()
    parsed, has_time = parse_date_value(value, now)
    if parsed is None:
        return None
    if not has_time:
        # Tasks only keeps the date portion of `due`.
        return f"{parsed.date().isoformat()}T00:00:00.000Z"
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")
