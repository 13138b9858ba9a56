"""/calendar-sync: mirror upcoming Google Calendar events as guild scheduled events."""

from __future__ import annotations

import discord

from peechi.bot.services import BotServices
from peechi.calendar.calendar_service import DEFAULT_MAX_RESULTS
from peechi.calendar.calendar_sync import apply_sync, plan_sync
from peechi.exceptions import NotFoundError, ValidationError
from peechi.ui.embeds import build_calendar_sync_embed
from peechi.util.logger import get_logger

logger = get_logger("calendar_sync_command")

SCHEMA = {
    "name": "calendar-sync",
    "description": "Sync Google Calendar events to Discord guild events",
    "default_member_permissions": str(discord.Permissions(manage_events=True).value),
    "dm_permission": False,
}


async def execute(interaction: discord.Interaction, services: BotServices) -> None:
    if services.calendar is None:
        raise NotFoundError("Calendar credentials missing", user_message="Calendar sync is not configured.")
    guild = interaction.guild
    if guild is None:
        raise ValidationError("calendar-sync used outside a guild", user_message="This command only works inside the server.")

    await interaction.response.defer()

    calendar_events = await services.calendar.get_upcoming_events(DEFAULT_MAX_RESULTS)
    if not calendar_events:
        await interaction.edit_original_response(content="No upcoming events found in Google Calendar.")
        return

    plan = plan_sync(calendar_events, await guild.fetch_scheduled_events())
    result = await apply_sync(guild, plan)
    logger.info(
        "[CALENDAR SYNC] Sync by %s: %d created, %d updated, %d deleted, %d failed",
        interaction.user.id, len(result.created), len(result.updated), len(result.deleted), len(result.failed),
    )
    await interaction.edit_original_response(embed=build_calendar_sync_embed(result))
