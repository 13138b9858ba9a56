"""
Handler registry: three independent lookup tables populated once at startup.

* slash commands, keyed by command name
* context menus, keyed by menu name
* buttons, keyed by the ``custom_id`` segment before the first ``/``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import discord

from peechi.util.logger import get_logger

logger = get_logger("handler_registry")

HandlerCallable = Callable[[discord.Interaction], Awaitable[None]]

# Discord application command types
CHAT_INPUT_COMMAND = 1
USER_COMMAND = 2
MESSAGE_COMMAND = 3


@dataclass(frozen=True)
class HandlerDescriptor:
    """
    A registered handler.

    Attributes:
        key: Lookup key (command name, menu name or button prefix).
        invoke: Coroutine function called with the interaction.
        schema: Application-command payload published to Discord; None for buttons.
    """

    key: str
    invoke: HandlerCallable
    schema: dict[str, Any] | None = None


@dataclass
class HandlerRegistry:
    """Lookup tables mapping routing keys to handler descriptors."""

    commands: dict[str, HandlerDescriptor] = field(default_factory=dict)
    context_menus: dict[str, HandlerDescriptor] = field(default_factory=dict)
    buttons: dict[str, HandlerDescriptor] = field(default_factory=dict)

    @staticmethod
    def _store(table: dict[str, HandlerDescriptor], kind: str, descriptor: HandlerDescriptor) -> None:
        if descriptor.key in table:
            # Last registration wins; a duplicate usually means a wiring mistake.
            logger.warning("[HANDLER REGISTRY] Duplicate %s '%s' overrides an earlier registration", kind, descriptor.key)
        table[descriptor.key] = descriptor
        logger.info("[HANDLER REGISTRY] Loaded %s: %s", kind, descriptor.key)

    def register_command(self, schema: dict[str, Any], invoke: HandlerCallable) -> HandlerDescriptor:
        """Register a slash command described by ``schema`` (must contain ``name``)."""
        payload = {"type": CHAT_INPUT_COMMAND, **schema}
        descriptor = HandlerDescriptor(key=payload["name"], invoke=invoke, schema=payload)
        self._store(self.commands, "command", descriptor)
        return descriptor

    def register_context_menu(
        self,
        schema: dict[str, Any],
        invoke: HandlerCallable,
    ) -> HandlerDescriptor:
        """Register a user or message context menu; ``schema['type']`` defaults to message."""
        payload = {"type": MESSAGE_COMMAND, **schema}
        if payload["type"] not in (USER_COMMAND, MESSAGE_COMMAND):
            raise ValueError(f"Context menu '{payload['name']}' has invalid type {payload['type']!r}")
        descriptor = HandlerDescriptor(key=payload["name"], invoke=invoke, schema=payload)
        self._store(self.context_menus, "context menu", descriptor)
        return descriptor

    def register_button(self, prefix: str, invoke: HandlerCallable) -> HandlerDescriptor:
        """Register a button handler for every ``custom_id`` starting with ``prefix/``."""
        if "/" in prefix:
            raise ValueError(f"Button prefix may not contain '/': {prefix!r}")
        descriptor = HandlerDescriptor(key=prefix, invoke=invoke)
        self._store(self.buttons, "button", descriptor)
        return descriptor

    def catalogue(self) -> list[dict[str, Any]]:
        """Application-command payloads for every command and context menu."""
        return [d.schema for d in (*self.commands.values(), *self.context_menus.values()) if d.schema]
