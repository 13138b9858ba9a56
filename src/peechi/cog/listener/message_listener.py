"""Message listener Cog for Peechi.

Listens to message events and forwards qualifying messages to the user
ledger for scoring. All scoring logic lives in ``peechi.points``.
"""

import discord
from discord.ext import commands

from peechi.bot.services import BotServices
from peechi.util.logger import get_logger

logger = get_logger("message_listener_cog")


def should_score_message(message: discord.Message) -> bool:
    """Skip bots, system messages and messages without text."""
    if message.author.bot:
        return False
    if message.is_system():
        return False
    return bool(message.content and message.content.strip())


class MessageListenerCog(commands.Cog):
    """
    Thin event listener that hands chat messages to the ledger.

    Parameters
    ----------
    bot:
        Discord bot instance.
    services:
        Provides the ledger and the points kill-switch.
    """

    def __init__(self, bot: discord.Bot, services: BotServices) -> None:
        self.bot = bot
        self.services = services
        logger.info("[MESSAGE LISTENER] Message listener cog loaded")

    @commands.Cog.listener(name="on_message")
    async def on_message(self, message: discord.Message) -> None:
        if not self.services.settings.app_config.points_enabled:
            return
        if not should_score_message(message):
            return

        outcome = await self.services.ledger.process_message(
            str(message.author.id),
            message.author.display_name,
            message.content,
            str(message.channel.id),
        )
        logger.debug(
            "[MESSAGE LISTENER] %s in %s: %s",
            message.author.id, message.channel.id, outcome.reason,
        )


def setup(bot: discord.Bot, services: BotServices) -> None:
    bot.add_cog(MessageListenerCog(bot, services))
