from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from inbox_actions.actions.executors.base import (
    RECOVERABLE_ERRORS,
    ActionExecutor,
    ExecutionContext,
    Trace,
)
from inbox_actions.extractors.event_time import DEFAULT_DURATION_MINUTES, resolve_event_start
from inbox_actions.google.api import CALENDAR_API
from inbox_actions.models import ActionResult, ActionSuggestion

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Event from Email"
MAX_DURATION_MINUTES = 7 * 24 * 60

REMINDERS = {
    "useDefault": False,
    "overrides": [
        {"method": "email", "minutes": 24 * 60},
        {"method": "popup", "minutes": 30},
    ],
}


def _duration(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_DURATION_MINUTES
    try:
        minutes = int(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_DURATION_MINUTES
    if not 0 < minutes <= MAX_DURATION_MINUTES:
        return DEFAULT_DURATION_MINUTES
    return minutes


def _attendees(value: Any) -> List[Dict[str, str]]:
    if not isinstance(value, list):
        return []
    return [{"email": a.strip()} for a in value if isinstance(a, str) and a.strip()]


class CalendarExecutor(ActionExecutor):
    service = "Calendar"
    permission = "calendar"
    scope = "https://www.googleapis.com/auth/calendar"

    def __init__(self, time_zone: Optional[str] = None) -> None:
        self._time_zone = time_zone

    def build_event(self, action: ActionSuggestion, ctx: ExecutionContext) -> Dict[str, Any]:
        params = action.params
        title = params.get("eventTitle") or params.get("title") or DEFAULT_TITLE
        start = resolve_event_start(params, action.description or "", ctx.now())
        end = start + timedelta(minutes=_duration(params.get("duration")))

        start_block: Dict[str, str] = {"dateTime": start.isoformat()}
        end_block: Dict[str, str] = {"dateTime": end.isoformat()}
        if self._time_zone:
            start_block["timeZone"] = self._time_zone
            end_block["timeZone"] = self._time_zone

        return {
            "summary": title,
            "description": params.get("description") or f"Created from email: {action.title}",
            "start": start_block,
            "end": end_block,
            "attendees": _attendees(params.get("attendees")),
            "reminders": REMINDERS,
        }

    async def execute(self, action: ActionSuggestion, ctx: ExecutionContext) -> ActionResult:
        trace = Trace(logger)
        try:
            event = self.build_event(action, ctx)
        except OverflowError as exc:
            # Start or end falls outside the representable calendar range.
            return self.failure(exc, trace, "Event time is out of range")
        trace.add(f"Event '{event['summary']}' starts {event['start']['dateTime']}")

        try:
            created = await ctx.api.post(
                "Calendar",
                f"{CALENDAR_API}/calendars/primary/events",
                json=event,
            )
        except RECOVERABLE_ERRORS as exc:
            return self.failure(exc, trace, "Failed to create calendar event")

        trace.add(f"Created event {created.get('id')}")
        return ActionResult(
            success=True,
            message=f"Created calendar event: {event['summary']}",
            details={
                "eventId": created.get("id"),
                "htmlLink": created.get("htmlLink"),
                "start": created.get("start", event["start"]),
                "end": created.get("end", event["end"]),
            },
            debug=trace.lines,
        )
