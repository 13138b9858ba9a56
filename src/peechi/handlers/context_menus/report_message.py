"""
"Report Message" context menu: open a pending report and ask for a category.
"""

from __future__ import annotations

import discord

from peechi.bot.services import BotServices
from peechi.exceptions import ExternalServiceError, NotFoundError
from peechi.routing.handler_registry import MESSAGE_COMMAND
from peechi.ui.embeds import build_report_prompt_embed
from peechi.ui.views import build_report_view
from peechi.util.logger import get_logger

logger = get_logger("report_context_menu")

SCHEMA = {
    "name": "Report Message",
    "type": MESSAGE_COMMAND,
    "dm_permission": False,
}


async def _target_message(interaction: discord.Interaction) -> discord.Message:
    target_id = (interaction.data or {}).get("target_id")
    channel = interaction.channel
    if not target_id or channel is None:
        raise NotFoundError("Report target missing", user_message="That message could not be found.")

    try:
        return await channel.fetch_message(int(target_id))
    except (discord.NotFound, discord.Forbidden):
        raise NotFoundError(
            f"Message {target_id} not found", user_message="That message could not be found."
        ) from None
    except discord.HTTPException as exc:
        raise ExternalServiceError(f"Fetching message {target_id} failed: {exc}") from exc


async def execute(interaction: discord.Interaction, services: BotServices) -> None:
    message = await _target_message(interaction)

    report_id = services.reports.create_report(interaction, message)
    logger.info(
        "[REPORT] %s opened report %s on message %s by %s",
        interaction.user.id, report_id, message.id, message.author.id,
    )

    await interaction.response.send_message(
        embed=build_report_prompt_embed(),
        view=build_report_view(report_id, timeout=services.reports.ttl_seconds),
        ephemeral=True,
    )
