"""Helpers for reading raw application-command interaction payloads."""

from __future__ import annotations

from typing import Any

import discord

# Discord application command option types
SUB_COMMAND = 1
SUB_COMMAND_GROUP = 2
STRING = 3
INTEGER = 4
USER = 6


def command_options(interaction: discord.Interaction) -> tuple[str | None, dict[str, Any]]:
    """
    Return ``(subcommand, options)`` for a slash-command interaction.

    ``subcommand`` is None when the command has no subcommands. ``options``
    maps option names to their raw values (user options carry the id string).
    """
    options = (interaction.data or {}).get("options") or []
    subcommand = None
    if options and options[0].get("type") in (SUB_COMMAND, SUB_COMMAND_GROUP):
        subcommand = options[0]["name"]
        options = options[0].get("options") or []
    return subcommand, {opt["name"]: opt.get("value") for opt in options}
