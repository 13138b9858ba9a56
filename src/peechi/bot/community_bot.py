"""
The Discord client.

py-cord's own application-command machinery is switched off: every
interaction goes to the :class:`InteractionRouter`, and the command catalogue
is published from the handler registry.
"""

from __future__ import annotations

import discord

from peechi.routing.handler_registry import HandlerRegistry
from peechi.routing.router import InteractionRouter
from peechi.util.logger import get_logger

logger = get_logger("community_bot")


def build_intents() -> discord.Intents:
    """Intents for guild, member and message-content events."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


class CommunityBot(discord.Bot):
    """
    ``discord.Bot`` that hands interactions to the router.

    Args:
        router: Dispatches every inbound interaction.
    """

    def __init__(self, router: InteractionRouter, **options) -> None:
        options.setdefault("intents", build_intents())
        super().__init__(auto_sync_commands=False, **options)
        self.router = router

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        await self.router.dispatch(interaction)

    async def publish_catalogue(self, client_id: int, guild_id: int, registry: HandlerRegistry) -> int:
        """
        Replace the guild's commands with the registry's catalogue.

        Returns:
            int: Number of commands Discord accepted.
        """
        payload = registry.catalogue()
        logger.info("[COMMUNITY BOT] Started refreshing %d application commands.", len(payload))
        published = await self.http.bulk_upsert_guild_commands(client_id, guild_id, payload)
        logger.info("[COMMUNITY BOT] Successfully reloaded %d application commands.", len(published))
        return len(published)
