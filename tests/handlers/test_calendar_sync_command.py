"""Tests for the /calendar-sync command."""

import dataclasses
from unittest.mock import AsyncMock, MagicMock

import pytest

from peechi.calendar.calendar_datatypes import CalendarEvent
from peechi.exceptions import NotFoundError, ValidationError
from peechi.handlers.commands import calendar_sync


@pytest.fixture
def calendar():
    service = MagicMock()
    service.get_upcoming_events = AsyncMock(return_value=[])
    return service


@pytest.fixture
def calendar_services(services, calendar):
    return dataclasses.replace(services, calendar=calendar)


@pytest.fixture
def guild():
    guild = MagicMock()
    guild.fetch_scheduled_events = AsyncMock(return_value=[])
    guild.create_scheduled_event = AsyncMock()
    return guild


def _interaction(interaction_factory, guild):
    return interaction_factory(data={"type": 1, "name": "calendar-sync"}, guild=guild)


async def test_not_configured(interaction_factory, services, guild):
    with pytest.raises(NotFoundError) as exc_info:
        await calendar_sync.execute(_interaction(interaction_factory, guild), services)
    assert exc_info.value.user_message == "Calendar sync is not configured."


async def test_outside_guild(interaction_factory, calendar_services):
    with pytest.raises(ValidationError):
        await calendar_sync.execute(_interaction(interaction_factory, None), calendar_services)


async def test_no_upcoming_events(interaction_factory, calendar_services, guild, calendar):
    interaction = _interaction(interaction_factory, guild)

    await calendar_sync.execute(interaction, calendar_services)

    calendar.get_upcoming_events.assert_awaited_once_with(20)
    interaction.response.defer.assert_awaited_once()
    interaction.edit_original_response.assert_awaited_once_with(
        content="No upcoming events found in Google Calendar."
    )
    guild.fetch_scheduled_events.assert_not_awaited()


async def test_sync_reports_summary(interaction_factory, calendar_services, guild, calendar):
    calendar.get_upcoming_events.return_value = [
        CalendarEvent.from_api({"id": "a", "summary": "Kickoff", "start": {"dateTime": "2099-01-01T18:00:00+00:00"}})
    ]
    interaction = _interaction(interaction_factory, guild)

    await calendar_sync.execute(interaction, calendar_services)

    guild.create_scheduled_event.assert_awaited_once()
    embed = interaction.edit_original_response.await_args.kwargs["embed"]
    assert embed.title == "Calendar Sync Complete"
    assert embed.fields[0].name == "Created Events (1)"
    assert "Kickoff" in embed.fields[0].value
