"""
/points: check your own points, another member's points, or the leaderboard.
"""

from __future__ import annotations

import discord

from peechi.bot.services import BotServices
from peechi.exceptions import NotFoundError, ValidationError
from peechi.handlers.options import INTEGER, SUB_COMMAND, USER, command_options
from peechi.points.ledger import LEADERBOARD_DEFAULT, LEADERBOARD_MAX, LEADERBOARD_MIN, clamp_leaderboard_limit
from peechi.ui.embeds import build_leaderboard_embed, build_points_embed

SCHEMA = {
    "name": "points",
    "description": "Check points and the leaderboard",
    "options": [
        {
            "type": SUB_COMMAND,
            "name": "check",
            "description": "Check your points",
        },
        {
            "type": SUB_COMMAND,
            "name": "leaderboard",
            "description": "Show the members with the most points",
            "options": [
                {
                    "type": INTEGER,
                    "name": "limit",
                    "description": "How many members to show (1-25)",
                    "required": False,
                    "min_value": LEADERBOARD_MIN,
                    "max_value": LEADERBOARD_MAX,
                }
            ],
        },
        {
            "type": SUB_COMMAND,
            "name": "user",
            "description": "Check another member's points",
            "options": [
                {
                    "type": USER,
                    "name": "target",
                    "description": "The member to look up",
                    "required": True,
                }
            ],
        },
    ],
}


async def execute(interaction: discord.Interaction, services: BotServices) -> None:
    subcommand, options = command_options(interaction)

    if subcommand == "check":
        await _check(interaction, services)
    elif subcommand == "leaderboard":
        await _leaderboard(interaction, services, options.get("limit"))
    elif subcommand == "user":
        await _user(interaction, services, options.get("target"))
    else:
        raise ValidationError(f"Unknown points subcommand {subcommand!r}", user_message="Unknown subcommand.")


async def _check(interaction: discord.Interaction, services: BotServices) -> None:
    caller = interaction.user
    record = await services.ledger.get_user(str(caller.id))
    embed = build_points_embed(
        caller.display_name,
        record.points if record else None,
        caller.display_avatar.url,
    )
    await interaction.response.send_message(embed=embed, ephemeral=True)


async def _leaderboard(interaction: discord.Interaction, services: BotServices, requested: int | None) -> None:
    limit = clamp_leaderboard_limit(requested)
    users = await services.ledger.get_leaderboard(limit)
    embed = build_leaderboard_embed(users, limit, requested if requested is not None else LEADERBOARD_DEFAULT)
    await interaction.response.send_message(embed=embed)


async def _user(interaction: discord.Interaction, services: BotServices, target_id: str | None) -> None:
    if not target_id:
        raise ValidationError("Missing target option", user_message="Please choose a member.")

    client = interaction.client
    try:
        target = client.get_user(int(target_id)) or await client.fetch_user(int(target_id))
    except discord.NotFound:
        raise NotFoundError(f"User {target_id} not found", user_message="User not found.") from None

    if target.bot:
        raise ValidationError(f"Points lookup for bot {target_id}", user_message="Bots don't earn points!")

    record = await services.ledger.get_user(str(target.id))
    embed = build_points_embed(
        target.display_name,
        record.points if record else None,
        target.display_avatar.url,
    )
    await interaction.response.send_message(embed=embed)
