"""
Administrator commands: /recache and /fail.
"""

from __future__ import annotations

import discord

from peechi.bot.services import BotServices
from peechi.exceptions import ValidationError
from peechi.handlers.options import SUB_COMMAND, command_options
from peechi.util.logger import get_logger

logger = get_logger("admin_commands")

_ADMINISTRATOR = str(discord.Permissions(administrator=True).value)

RECACHE_SCHEMA = {
    "name": "recache",
    "description": "Reload the bot configuration",
    "default_member_permissions": _ADMINISTRATOR,
    "dm_permission": False,
}

FAIL_SCHEMA = {
    "name": "fail",
    "description": "Trigger a test error to check error reporting",
    "default_member_permissions": _ADMINISTRATOR,
    "dm_permission": False,
    "options": [
        {"type": SUB_COMMAND, "name": "error", "description": "Log a test error"},
        {"type": SUB_COMMAND, "name": "critical", "description": "Log a test critical error"},
    ],
}


async def recache(interaction: discord.Interaction, services: BotServices) -> None:
    await interaction.response.defer(ephemeral=True)
    await services.settings.reload()
    logger.info("[ADMIN] Configuration recached by %s", interaction.user.id)
    await interaction.followup.send("Configuration recached.", ephemeral=True)


async def fail(interaction: discord.Interaction) -> None:
    subcommand, _ = command_options(interaction)

    if subcommand == "error":
        logger.error("[ADMIN] Test error triggered by %s (%s)", interaction.user.name, interaction.user.id)
    elif subcommand == "critical":
        logger.critical("[ADMIN] Test critical error triggered by %s (%s)", interaction.user.name, interaction.user.id)
    else:
        raise ValidationError(f"Unknown fail subcommand {subcommand!r}", user_message="Unknown subcommand.")

    await interaction.response.send_message("Error triggered", ephemeral=True)
