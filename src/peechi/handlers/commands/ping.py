"""/ping: round-trip and gateway latency."""

from __future__ import annotations

import discord

SCHEMA = {
    "name": "ping",
    "description": "Replies with Pong and the bot's latency",
}


async def execute(interaction: discord.Interaction) -> None:
    await interaction.response.send_message("Pong!")
    reply = await interaction.original_response()

    sent_at = discord.utils.snowflake_time(interaction.id)
    round_trip_ms = (reply.created_at - sent_at).total_seconds() * 1000
    gateway_ms = interaction.client.latency * 1000

    await interaction.edit_original_response(
        content=f"Pong! Round trip: {round_trip_ms:.0f} ms | Gateway: {gateway_ms:.0f} ms"
    )
