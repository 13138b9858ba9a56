"""
Interaction router: the single dispatch and error-translation boundary.

Every inbound interaction is classified as a slash command, a context menu or
a button click, matched against the handler registry and invoked. Handler
exceptions never escape: they are logged with the actor and event context
and turned into exactly one ephemeral reply.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import discord

from peechi.exceptions import ExternalServiceError, NotFoundError, PeechiError, PersistenceError, ValidationError
from peechi.routing.handler_registry import (
    CHAT_INPUT_COMMAND,
    MESSAGE_COMMAND,
    USER_COMMAND,
    HandlerDescriptor,
    HandlerRegistry,
)
from peechi.util.logger import get_logger

logger = get_logger("interaction_router")

BUTTON_ID_SEPARATOR = "/"


class InteractionKind(str, Enum):
    SLASH_COMMAND = "Slash Command"
    CONTEXT_MENU = "Context Menu"
    BUTTON = "Button"


GENERIC_ERROR_REPLIES = {
    InteractionKind.SLASH_COMMAND: "There was an error while executing this command!",
    InteractionKind.CONTEXT_MENU: "There was an error while executing this context menu!",
    InteractionKind.BUTTON: "There was an error while executing this button!",
}


def classify_interaction(interaction: discord.Interaction) -> InteractionKind | None:
    """Return the kind of routable interaction, or None for anything else."""
    data = interaction.data or {}

    if interaction.type == discord.InteractionType.application_command:
        command_type = data.get("type", CHAT_INPUT_COMMAND)
        if command_type == CHAT_INPUT_COMMAND:
            return InteractionKind.SLASH_COMMAND
        if command_type in (USER_COMMAND, MESSAGE_COMMAND):
            return InteractionKind.CONTEXT_MENU
        return None

    if interaction.type == discord.InteractionType.component:
        if data.get("component_type") == discord.ComponentType.button.value:
            return InteractionKind.BUTTON

    return None


def routing_key(kind: InteractionKind, interaction: discord.Interaction) -> str:
    """Command/menu name, or the button ``custom_id`` segment before the first ``/``."""
    data = interaction.data or {}
    if kind is InteractionKind.BUTTON:
        return str(data.get("custom_id", "")).split(BUTTON_ID_SEPARATOR, 1)[0]
    return str(data.get("name", ""))


def _actor_context(kind: InteractionKind, key: str, interaction: discord.Interaction) -> dict[str, Any]:
    user = interaction.user
    data = interaction.data or {}
    context: dict[str, Any] = {
        "interactionType": kind.value,
        "key": key,
        "userId": getattr(user, "id", None),
        "username": getattr(user, "name", None),
        "guildId": interaction.guild_id,
        "channelId": interaction.channel_id,
    }
    if kind is InteractionKind.BUTTON:
        context["customId"] = data.get("custom_id")
    else:
        context["options"] = data.get("options")
    return context


class InteractionRouter:
    """
    Dispatches interactions to handlers registered in a :class:`HandlerRegistry`.

    Args:
        registry: Populated handler registry. Read-only after startup.
    """

    def __init__(self, registry: HandlerRegistry) -> None:
        self.registry = registry

    def _lookup(self, kind: InteractionKind, key: str) -> HandlerDescriptor | None:
        table = {
            InteractionKind.SLASH_COMMAND: self.registry.commands,
            InteractionKind.CONTEXT_MENU: self.registry.context_menus,
            InteractionKind.BUTTON: self.registry.buttons,
        }[kind]
        return table.get(key)

    async def dispatch(self, interaction: discord.Interaction) -> bool:
        """
        Route one interaction.

        Returns:
            bool: True if a handler was found and invoked (whether or not it
            succeeded), False if the interaction was dropped.
        """
        kind = classify_interaction(interaction)
        if kind is None:
            return False

        key = routing_key(kind, interaction)
        descriptor = self._lookup(kind, key)
        if descriptor is None:
            logger.error("[ROUTER] No %s matching '%s' was found.", kind.value.lower(), key)
            return False

        try:
            await descriptor.invoke(interaction)
        except Exception as exc:
            await self._handle_error(kind, key, interaction, exc)
        else:
            logger.info("[ROUTER] %s used %s '%s'", getattr(interaction.user, "name", "unknown"), kind.value.lower(), key)
        return True

    async def _handle_error(
        self,
        kind: InteractionKind,
        key: str,
        interaction: discord.Interaction,
        exc: Exception,
    ) -> None:
        context = _actor_context(kind, key, interaction)

        if isinstance(exc, (ValidationError, NotFoundError)):
            logger.info("[ROUTER] %s '%s' rejected: %s | %s", kind.value, key, exc, context)
            content = exc.user_message
        elif isinstance(exc, (PersistenceError, ExternalServiceError)):
            logger.error("[ROUTER] %s '%s' failed: %s | %s", kind.value, key, exc, context)
            content = exc.user_message
        elif isinstance(exc, PeechiError):
            logger.error("[ROUTER] %s '%s' failed: %s | %s", kind.value, key, exc, context)
            content = exc.user_message
        else:
            logger.critical("[ROUTER] Error executing %s '%s' | %s", kind.value.lower(), key, context, exc_info=exc)
            content = GENERIC_ERROR_REPLIES[kind]

        await send_ephemeral(interaction, content)


async def send_ephemeral(interaction: discord.Interaction, content: str | None = None, **kwargs: Any) -> None:
    """
    Send an ephemeral message to the actor exactly once per call.

    Uses the primary response if it is still unused, otherwise a follow-up.
    Failures are logged and swallowed; there is nobody left to tell.
    """
    try:
        if interaction.response.is_done():
            await interaction.followup.send(content, ephemeral=True, **kwargs)
        else:
            await interaction.response.send_message(content, ephemeral=True, **kwargs)
    except Exception as reply_error:
        logger.error("[ROUTER] Failed to send error response: %s", reply_error)
