"""Tests for planning and applying calendar to scheduled-event syncs."""

import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord

from peechi.calendar.calendar_datatypes import CalendarEvent
from peechi.calendar.calendar_sync import SyncResult, apply_sync, calendar_id_from_description, plan_sync

NOW = datetime.datetime(2026, 3, 1, tzinfo=datetime.timezone.utc)


def _event(event_id, summary=None, start="2026-03-10T18:00:00+00:00", **fields):
    return CalendarEvent.from_api(
        {"id": event_id, "summary": summary or event_id, "start": {"dateTime": start}, **fields}
    )


def _scheduled(name, description):
    return SimpleNamespace(name=name, description=description, edit=AsyncMock(), delete=AsyncMock())


class TestCalendarIdFromDescription:
    def test_tag_at_end(self):
        assert calendar_id_from_description("Snacks provided\n\n[cal:abc_123]") == "abc_123"

    def test_no_tag(self):
        assert calendar_id_from_description("Created by hand") is None
        assert calendar_id_from_description(None) is None


class TestPlanSync:
    def test_splits_create_update_delete(self):
        kept = _scheduled("Kickoff", "[cal:a]")
        stale = _scheduled("Cancelled", "old\n\n[cal:gone]")
        manual = _scheduled("Manual event", "no tag here")

        plan = plan_sync([_event("a"), _event("b")], [kept, stale, manual])

        assert [e.id for e in plan.to_create] == ["b"]
        assert [(e.id, s) for e, s in plan.to_update] == [("a", kept)]
        assert plan.to_delete == [stale]

    def test_empty_calendar_deletes_all_tagged(self):
        tagged = _scheduled("Kickoff", "[cal:a]")
        plan = plan_sync([], [tagged, _scheduled("Manual", None)])
        assert plan.to_delete == [tagged]
        assert plan.to_create == []


class TestApplySync:
    async def test_creates_updates_and_deletes(self):
        guild = MagicMock()
        guild.create_scheduled_event = AsyncMock()
        existing = _scheduled("Old title", "[cal:a]")
        stale = _scheduled("Cancelled", "[cal:gone]")
        plan = plan_sync(
            [_event("a", "Kickoff", location="Lab"), _event("b", "Workshop", description="Bring a laptop")],
            [existing, stale],
        )

        result = await apply_sync(guild, plan, now=NOW)

        assert result.created == ["Workshop"]
        assert result.updated == ["Kickoff"]
        assert result.deleted == ["Cancelled"]
        assert result.failed == []
        assert result.total_changes == 3

        create_kwargs = guild.create_scheduled_event.await_args.kwargs
        assert create_kwargs["description"] == "Bring a laptop\n\n[cal:b]"
        assert create_kwargs["location"] == "TBD"
        assert create_kwargs["privacy_level"] == discord.ScheduledEventPrivacyLevel.guild_only
        assert create_kwargs["end_time"] - create_kwargs["start_time"] == datetime.timedelta(hours=1)

        edit_kwargs = existing.edit.await_args.kwargs
        assert edit_kwargs["name"] == "Kickoff"
        assert edit_kwargs["description"] == "[cal:a]"
        assert edit_kwargs["location"] == "Lab"
        stale.delete.assert_awaited_once()

    async def test_failures_are_collected(self):
        guild = MagicMock()
        guild.create_scheduled_event = AsyncMock(
            side_effect=discord.HTTPException(MagicMock(status=400, reason="Bad Request"), "invalid")
        )
        stale = _scheduled("Cancelled", "[cal:gone]")
        stale.delete.side_effect = discord.HTTPException(MagicMock(status=500, reason="error"), "boom")
        plan = plan_sync(
            [_event("past", "Old meetup", start="2026-02-01T18:00:00+00:00"), _event("b", "Workshop")],
            [stale],
        )

        result = await apply_sync(guild, plan, now=NOW)

        assert result.total_changes == 0
        assert len(result.failed) == 3
        assert result.failed[0].startswith("Old meetup (Event start time must be in the future")
        assert result.failed[1].startswith("Workshop (")
        assert result.failed[2] == "Cancelled (delete failed)"
        assert guild.create_scheduled_event.await_count == 1


def test_result_total_changes():
    assert SyncResult(created=["a"], updated=["b", "c"], failed=["d"]).total_changes == 3
