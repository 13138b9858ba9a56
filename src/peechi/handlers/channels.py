"""Channel lookup shared by handlers that post to configured channels."""

from __future__ import annotations

import discord

from peechi.exceptions import ExternalServiceError, NotFoundError


async def resolve_channel(client: discord.Client, channel_id: int | None, purpose: str) -> discord.abc.Messageable:
    """
    Return the configured channel, from cache or the API.

    Raises:
        NotFoundError: The id is unset, unknown or not a text channel.
        ExternalServiceError: The API call failed for another reason.
    """
    if channel_id is None:
        raise NotFoundError(
            f"No {purpose} channel configured",
            user_message=f"The {purpose} channel is not configured. Please contact a moderator.",
        )

    channel = client.get_channel(channel_id)
    if channel is None:
        try:
            channel = await client.fetch_channel(channel_id)
        except (discord.NotFound, discord.Forbidden):
            channel = None
        except discord.HTTPException as exc:
            raise ExternalServiceError(f"Fetching {purpose} channel {channel_id} failed: {exc}") from exc

    if channel is None or not isinstance(channel, discord.abc.Messageable):
        raise NotFoundError(
            f"{purpose} channel {channel_id} not found",
            user_message=f"The {purpose} channel could not be found. Please contact a moderator.",
        )
    return channel
