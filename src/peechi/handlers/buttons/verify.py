"""
``verify`` button: collect a name and pronouns, then grant the verified role.
"""

from __future__ import annotations

import discord

from peechi.bot.services import BotServices
from peechi.exceptions import ExternalServiceError, NotFoundError, ValidationError
from peechi.ui.embeds import build_nickname
from peechi.ui.views import NAME_MAX_LENGTH, VerifyModal
from peechi.util.logger import get_logger

logger = get_logger("verify_button")

BUTTON_PREFIX = "verify"


async def execute(interaction: discord.Interaction, services: BotServices) -> None:
    guild = interaction.guild
    if guild is None:
        raise ValidationError("Verify button used outside a guild", user_message="Verification only works inside the server.")

    modal = VerifyModal(timeout=services.settings.app_config.verify_modal_timeout_seconds)
    await interaction.response.send_modal(modal)

    timed_out = await modal.wait()
    if timed_out or not modal.submitted:
        await interaction.followup.send("You took too long to verify.", ephemeral=True)
        return

    name, pronouns = modal.name_text, modal.pronouns_text
    if not name:
        raise ValidationError("Empty name", user_message="Please enter a name.")

    nickname = build_nickname(name, pronouns)
    if len(nickname) > NAME_MAX_LENGTH:
        raise ValidationError(
            f"Nickname too long ({len(nickname)} characters)",
            user_message=f"Your name and pronouns must fit in {NAME_MAX_LENGTH} characters.",
        )

    role_id = services.settings.operational.verified_role_id
    role = guild.get_role(role_id) if role_id is not None else None
    if role is None:
        raise NotFoundError(
            f"Verified role {role_id} not found in guild {guild.id}",
            user_message="The verified role could not be found. Please contact a moderator.",
        )

    member = interaction.user
    if not isinstance(member, discord.Member):
        member = await guild.fetch_member(interaction.user.id)

    try:
        await member.edit(nick=nickname, reason="Verification")
        await member.add_roles(role, reason="Verification")
    except discord.Forbidden as exc:
        raise ExternalServiceError(
            f"Missing permissions to verify {member.id}: {exc}",
            user_message="I don't have permission to verify you. Please contact a moderator.",
        ) from exc
    except discord.HTTPException as exc:
        raise ExternalServiceError(f"Verifying {member.id} failed: {exc}") from exc

    await services.ledger.upsert_profile(str(member.id), name, pronouns)
    logger.info("[VERIFY] %s verified as %s", member.id, nickname)

    await interaction.followup.send(f"Verified! Welcome, {discord.utils.escape_markdown(nickname)}.", ephemeral=True)
