"""/verify: reset the verification channel and post the verify prompt."""

from __future__ import annotations

import discord

from peechi.bot.services import BotServices
from peechi.handlers.channels import resolve_channel
from peechi.ui.embeds import build_verification_embed
from peechi.ui.views import build_verify_view
from peechi.util.logger import get_logger

logger = get_logger("verify_command")

HISTORY_CLEAR_LIMIT = 100

SCHEMA = {
    "name": "verify",
    "description": "Post the verification message in the verification channel",
    "default_member_permissions": str(discord.Permissions(administrator=True).value),
    "dm_permission": False,
}


async def execute(interaction: discord.Interaction, services: BotServices) -> None:
    channel = await resolve_channel(
        interaction.client,
        services.settings.operational.verification_channel_id,
        "verification",
    )
    await interaction.response.defer(ephemeral=True)

    cleared = 0
    async for message in channel.history(limit=HISTORY_CLEAR_LIMIT):
        try:
            await message.delete()
            cleared += 1
        except discord.HTTPException as exc:
            logger.warning("[VERIFY] Could not delete message %s: %s", message.id, exc)

    await channel.send(embed=build_verification_embed(), view=build_verify_view())
    logger.info("[VERIFY] Verification prompt posted in %s (%d messages cleared)", channel.id, cleared)

    await interaction.followup.send(
        f"Verification message posted in <#{channel.id}>. Cleared {cleared} old messages.",
        ephemeral=True,
    )
