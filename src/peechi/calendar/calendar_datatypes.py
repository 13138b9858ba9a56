"""
Google Calendar event records and their conversion to guild scheduled events.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, Mapping

from peechi.exceptions import ValidationError

NAME_MAX_LENGTH = 100
# Scheduled-event descriptions cap at 1000; the rest is kept for the [cal:<id>] tag.
DESCRIPTION_MAX_LENGTH = 950
LOCATION_MAX_LENGTH = 100
DEFAULT_DURATION = datetime.timedelta(hours=1)
DEFAULT_LOCATION = "TBD"


@dataclass(frozen=True, slots=True)
class CalendarDateTime:
    """A Google Calendar start/end: either ``dateTime`` or an all-day ``date``."""

    date_time: str | None = None
    date: str | None = None
    time_zone: str | None = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any] | None) -> CalendarDateTime:
        data = data or {}
        return cls(date_time=data.get("dateTime"), date=data.get("date"), time_zone=data.get("timeZone"))

    def to_datetime(self) -> datetime.datetime | None:
        """Timezone-aware datetime, or None when neither field is set.

        Raises:
            ValueError: If the value is not ISO 8601.
        """
        raw = self.date_time or self.date
        if not raw:
            return None
        value = datetime.datetime.fromisoformat(raw)
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        return value


@dataclass(frozen=True, slots=True)
class CalendarEvent:
    id: str
    summary: str
    start: CalendarDateTime
    end: CalendarDateTime
    description: str | None = None
    location: str | None = None
    html_link: str | None = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> CalendarEvent:
        """Build an event from one ``items`` entry of the events-list response.

        Raises:
            ValueError: If the entry has no string ``id``.
        """
        event_id = data.get("id")
        if not isinstance(event_id, str) or not event_id:
            raise ValueError(f"Calendar event without a valid id: {event_id!r}")
        return cls(
            id=event_id,
            summary=data.get("summary") or "No Title",
            start=CalendarDateTime.from_api(data.get("start")),
            end=CalendarDateTime.from_api(data.get("end")),
            description=data.get("description"),
            location=data.get("location"),
            html_link=data.get("htmlLink"),
        )


@dataclass(frozen=True, slots=True)
class ScheduledEventData:
    """Validated fields for creating or editing a guild scheduled event."""

    name: str
    start_time: datetime.datetime
    end_time: datetime.datetime
    description: str | None = None
    location: str | None = None

    def tagged_description(self, calendar_event_id: str) -> str:
        tag = f"[cal:{calendar_event_id}]"
        return f"{self.description}\n\n{tag}" if self.description else tag


def validate_scheduled_event_data(
    event: CalendarEvent,
    now: datetime.datetime | None = None,
) -> ScheduledEventData:
    """
    Convert a calendar event into scheduled-event fields.

    The end defaults to one hour after the start. Text fields are truncated
    to the platform limits.

    Raises:
        ValidationError: Missing or unparsable start, start not in the future,
            or end not after start.
    """
    now = now or datetime.datetime.now(datetime.timezone.utc)

    try:
        start_time = event.start.to_datetime()
        end_time = event.end.to_datetime()
    except ValueError as exc:
        raise ValidationError(f"Invalid event time: {exc}") from exc

    if start_time is None:
        raise ValidationError("Event must have a start time")

    if end_time is None:
        end_time = start_time + DEFAULT_DURATION

    if start_time <= now:
        raise ValidationError("Event start time must be in the future")

    if end_time <= start_time:
        raise ValidationError("Event end time must be after start time")

    name = event.summary[:NAME_MAX_LENGTH]
    if not name:
        raise ValidationError("Event must have a name")

    return ScheduledEventData(
        name=name,
        start_time=start_time,
        end_time=end_time,
        description=event.description[:DESCRIPTION_MAX_LENGTH] if event.description else None,
        location=event.location[:LOCATION_MAX_LENGTH] if event.location else None,
    )
