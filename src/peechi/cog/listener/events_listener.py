"""Event listener Cog for Peechi.

Handles the ``ready`` lifecycle event. Message events live in the
MessageListenerCog.
"""

import discord
from discord.ext import commands

from peechi.bot.services import BotServices
from peechi.util.logger import get_logger

logger = get_logger("events_listener")


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle handlers."""

    def __init__(self, bot: discord.Bot, services: BotServices):
        self.bot = bot
        self.services = services
        logger.info("[EVENTS LISTENER] Events listener cog loaded")

    @commands.Cog.listener(name="on_ready")
    async def on_ready(self):
        """Set the "watching" presence once the gateway session is up."""
        if not self.bot.user:
            logger.warning("[EVENTS LISTENER] Bot partially connected, but user information not yet available.")
            return

        await self.bot.change_presence(
            status=discord.Status.online,
            activity=discord.Activity(
                type=discord.ActivityType.watching,
                name=self.services.settings.app_config.presence_text,
            ),
        )
        logger.info(f"[EVENTS LISTENER] Ready! Logged in as {self.bot.user} (ID: {self.bot.user.id})")


def setup(bot: discord.Bot, services: BotServices) -> None:
    bot.add_cog(EventsListenerCog(bot, services))
