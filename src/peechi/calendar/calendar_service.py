"""
Read-only client for the Google Calendar v3 REST API.
"""

from __future__ import annotations

import asyncio
import datetime
from typing import Any

import requests

from peechi.calendar.calendar_datatypes import CalendarEvent
from peechi.exceptions import ExternalServiceError
from peechi.util.logger import get_logger

logger = get_logger("calendar_service")

EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/{calendar_id}/events"
REQUEST_TIMEOUT_SECONDS = 10
DEFAULT_MAX_RESULTS = 20


def add_one_month(moment: datetime.datetime) -> datetime.datetime:
    """Same day next month, clamped to the last day of a shorter month."""
    year, month = (moment.year + 1, 1) if moment.month == 12 else (moment.year, moment.month + 1)
    for day in (moment.day, 30, 29, 28):
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            continue
    raise ValueError(f"Cannot add a month to {moment!r}")


class CalendarService:
    """
    Fetches upcoming events from one public Google Calendar.

    Args:
        api_key: Google API key.
        calendar_id: Calendar to read.
    """

    def __init__(self, api_key: str, calendar_id: str) -> None:
        self.api_key = api_key
        self.calendar_id = calendar_id

    def fetch_events_payload(self, time_min: datetime.datetime, time_max: datetime.datetime, max_results: int) -> dict[str, Any]:
        """
        Call the events-list endpoint. Blocks the calling thread.

        Raises:
            ExternalServiceError: The request failed or returned a non-JSON body.
        """
        params = {
            "key": self.api_key,
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
            "maxResults": max_results,
            "singleEvents": "true",
            "orderBy": "startTime",
        }
        try:
            response = requests.get(
                EVENTS_URL.format(calendar_id=requests.utils.quote(self.calendar_id, safe="")),
                params=params,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            logger.error("[CALENDAR] Request failed: %s", exc)
            raise ExternalServiceError(
                f"Failed to fetch calendar events: {exc}",
                user_message="Failed to fetch calendar events. Please try again later.",
            ) from exc
        except ValueError as exc:
            raise ExternalServiceError(f"Calendar API returned invalid JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise ExternalServiceError("Calendar API returned an unexpected payload")
        return payload

    async def get_upcoming_events(
        self,
        max_results: int = DEFAULT_MAX_RESULTS,
        now: datetime.datetime | None = None,
    ) -> list[CalendarEvent]:
        """
        Events starting between now and one month from now, ordered by start time.

        Malformed entries are skipped with a warning.
        """
        now = now or datetime.datetime.now(datetime.timezone.utc)
        payload = await asyncio.to_thread(self.fetch_events_payload, now, add_one_month(now), max_results)

        items = payload.get("items") or []
        logger.info("[CALENDAR] Fetched %d events from Google Calendar", len(items))

        events: list[CalendarEvent] = []
        for item in items:
            try:
                events.append(CalendarEvent.from_api(item))
            except (ValueError, TypeError, AttributeError) as exc:
                logger.warning("[CALENDAR] Skipping invalid calendar event: %s", exc)
        return events
