"""
Forward ERROR and CRITICAL log records to the configured error channel.

The logging side only pushes records onto a queue (see
``peechi.util.logger.AlertQueueHandler``); this consumer owns the Discord
side, so loggers never hold a reference to the client.
"""

from __future__ import annotations

import asyncio
import logging

import discord

from peechi.configuration.bot_settings import BotSettings, ConfigurationError
from peechi.ui.embeds import build_alert_embed
from peechi.util.logger import AlertQueueHandler, attach_alert_handler, detach_alert_handler, get_logger

logger = get_logger("alert_forwarder")

ALERT_QUEUE_SIZE = 100


class AlertForwarder:
    """
    Drains the alert queue and posts each record to the error channel.

    Delivery failures are logged at WARNING, below the forwarded level, so a
    broken error channel cannot feed itself.

    Args:
        client: Connected Discord client.
        settings: Source of the error channel id.
        queue: Queue shared with the logging handler; created if omitted.
    """

    def __init__(
        self,
        client: discord.Client,
        settings: BotSettings,
        queue: asyncio.Queue | None = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self.queue: asyncio.Queue = queue or asyncio.Queue(maxsize=ALERT_QUEUE_SIZE)
        self.handler = AlertQueueHandler(self.queue)
        self._task: asyncio.Task | None = None

    async def forward(self, record: logging.LogRecord) -> bool:
        """Post one record. Returns True if it was delivered."""
        try:
            channel_id = self.settings.operational.error_channel_id
        except ConfigurationError:
            return False
        if channel_id is None or not self.client.is_ready():
            return False

        try:
            channel = self.client.get_channel(channel_id) or await self.client.fetch_channel(channel_id)
            await channel.send(embed=build_alert_embed(record))
        except (discord.HTTPException, AttributeError) as exc:
            logger.warning("[ALERT FORWARDER] Failed to post alert to channel %s: %s", channel_id, exc)
            return False
        return True

    async def _run(self) -> None:
        while True:
            record = await self.queue.get()
            try:
                await self.forward(record)
            finally:
                self.queue.task_done()

    def start(self) -> None:
        """Attach the queue handler to every logger and start draining."""
        attach_alert_handler(self.handler)
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
        logger.info("[ALERT FORWARDER] Forwarding ERROR and CRITICAL logs to the error channel")

    async def shutdown(self) -> None:
        detach_alert_handler(self.handler)
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
