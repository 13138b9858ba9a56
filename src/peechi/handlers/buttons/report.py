"""
``report/<id>/<category>`` buttons: file a pending report with staff.
"""

from __future__ import annotations

import discord

from peechi.bot.services import BotServices
from peechi.exceptions import ExternalServiceError, NotFoundError
from peechi.handlers.channels import resolve_channel
from peechi.reports.report_resolution import (
    REPORT_BUTTON_PREFIX,
    ReportCategory,
    ReportResolution,
    parse_report_button_id,
    resolve_report,
)
from peechi.ui.embeds import build_report_confirmation_embed, build_staff_report_embeds
from peechi.ui.views import ReportDetailsModal
from peechi.util.logger import get_logger

logger = get_logger("report_button")

BUTTON_PREFIX = REPORT_BUTTON_PREFIX


async def _clear_category_buttons(resolution: ReportResolution) -> None:
    origin = resolution.report.origin
    try:
        await origin.edit_original_response(view=None)
    except discord.HTTPException as exc:
        # The ephemeral prompt may already be gone; the report still proceeds.
        logger.warning("[REPORT] Could not clear buttons for report %s: %s", resolution.report.id, exc)


async def _ask_for_details(interaction: discord.Interaction, timeout: float) -> str | None:
    modal = ReportDetailsModal(timeout=timeout)
    await interaction.response.send_modal(modal)

    timed_out = await modal.wait()
    if timed_out or not modal.submitted:
        await interaction.followup.send(
            "You took too long to add details. Your report was sent without them.",
            ephemeral=True,
        )
        return None
    return modal.details_text or None


async def _notify_staff(
    interaction: discord.Interaction,
    services: BotServices,
    resolution: ReportResolution,
    details: str | None,
) -> None:
    channel = await resolve_channel(interaction.client, services.settings.operational.admin_channel_id, "admin")
    try:
        await channel.send(
            embeds=build_staff_report_embeds(resolution, interaction.user, details),
            allowed_mentions=discord.AllowedMentions.none(),
        )
    except discord.HTTPException as exc:
        raise ExternalServiceError(f"Posting report {resolution.report.id} failed: {exc}") from exc


async def execute(interaction: discord.Interaction, services: BotServices) -> None:
    report_id, category = parse_report_button_id(interaction.custom_id or "")
    resolution = resolve_report(services.reports, report_id, category)

    await _clear_category_buttons(resolution)

    details = None
    if resolution.category is ReportCategory.OTHER:
        details = await _ask_for_details(interaction, services.settings.app_config.report_modal_timeout_seconds)

    try:
        await _notify_staff(interaction, services, resolution, details)
    except (ExternalServiceError, NotFoundError) as exc:
        logger.error("[REPORT] Staff notification for report %s failed: %s", resolution.report.id, exc)
    else:
        logger.info("[REPORT] Report %s filed as %s by %s", resolution.report.id, resolution.category.value, interaction.user.id)

    embed = build_report_confirmation_embed(resolution)
    if interaction.response.is_done():
        await interaction.followup.send(embed=embed, ephemeral=True)
    else:
        await interaction.response.send_message(embed=embed, ephemeral=True)
