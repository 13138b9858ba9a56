"""
Reconcile Google Calendar events with guild scheduled events.

Scheduled events created by the sync carry a ``[cal:<id>]`` tag in their
description; that tag is the only link between the two sides.
"""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

import discord

from peechi.calendar.calendar_datatypes import DEFAULT_LOCATION, CalendarEvent, validate_scheduled_event_data
from peechi.exceptions import PeechiError
from peechi.util.logger import get_logger

logger = get_logger("calendar_sync")

CALENDAR_TAG_RE = re.compile(r"\[cal:([^\]]+)\]")


def calendar_id_from_description(description: str | None) -> str | None:
    match = CALENDAR_TAG_RE.search(description or "")
    return match.group(1) if match else None


@dataclass
class SyncPlan:
    to_create: list[CalendarEvent] = field(default_factory=list)
    to_update: list[tuple[CalendarEvent, Any]] = field(default_factory=list)
    to_delete: list[Any] = field(default_factory=list)


@dataclass
class SyncResult:
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def total_changes(self) -> int:
        return len(self.created) + len(self.updated) + len(self.deleted)


def plan_sync(calendar_events: Iterable[CalendarEvent], scheduled_events: Iterable[Any]) -> SyncPlan:
    """
    Split the work into creates, updates and deletes.

    Scheduled events without a tag are left alone.
    """
    tagged: dict[str, Any] = {}
    for scheduled in scheduled_events:
        calendar_id = calendar_id_from_description(getattr(scheduled, "description", None))
        if calendar_id:
            tagged[calendar_id] = scheduled

    plan = SyncPlan()
    seen: set[str] = set()
    for event in calendar_events:
        seen.add(event.id)
        if event.id in tagged:
            plan.to_update.append((event, tagged[event.id]))
        else:
            plan.to_create.append(event)

    plan.to_delete = [scheduled for calendar_id, scheduled in tagged.items() if calendar_id not in seen]
    return plan


async def apply_sync(
    guild: discord.Guild,
    plan: SyncPlan,
    now: datetime.datetime | None = None,
) -> SyncResult:
    """Execute a plan against ``guild``. Per-event failures are collected, not raised."""
    result = SyncResult()

    for event in plan.to_create:
        try:
            data = validate_scheduled_event_data(event, now)
            await guild.create_scheduled_event(
                name=data.name,
                description=data.tagged_description(event.id),
                start_time=data.start_time,
                end_time=data.end_time,
                location=data.location or DEFAULT_LOCATION,
                privacy_level=discord.ScheduledEventPrivacyLevel.guild_only,
            )
            result.created.append(event.summary)
            logger.info("[CALENDAR SYNC] Created scheduled event: %s", event.summary)
        except (PeechiError, discord.HTTPException) as exc:
            logger.error("[CALENDAR SYNC] Failed to create scheduled event for %s: %s", event.summary, exc)
            result.failed.append(f"{event.summary} ({exc})")

    for event, scheduled in plan.to_update:
        try:
            data = validate_scheduled_event_data(event, now)
            await scheduled.edit(
                name=data.name,
                description=data.tagged_description(event.id),
                start_time=data.start_time,
                end_time=data.end_time,
                location=data.location or DEFAULT_LOCATION,
            )
            result.updated.append(event.summary)
            logger.info("[CALENDAR SYNC] Updated scheduled event: %s", event.summary)
        except (PeechiError, discord.HTTPException) as exc:
            logger.error("[CALENDAR SYNC] Failed to update scheduled event for %s: %s", event.summary, exc)
            result.failed.append(f"{event.summary} ({exc})")

    for scheduled in plan.to_delete:
        try:
            await scheduled.delete()
            result.deleted.append(scheduled.name)
            logger.info("[CALENDAR SYNC] Deleted scheduled event: %s", scheduled.name)
        except discord.HTTPException as exc:
            logger.error("[CALENDAR SYNC] Failed to delete scheduled event %s: %s", scheduled.name, exc)
            result.failed.append(f"{scheduled.name} (delete failed)")

    return result
