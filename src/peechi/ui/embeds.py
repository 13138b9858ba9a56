"""
Embed builders for points, reports, verification and calendar sync replies.
"""

from __future__ import annotations

import datetime
import logging
from typing import Iterable

import discord

from peechi.calendar.calendar_sync import SyncResult
from peechi.datatypes.user_datatypes import User
from peechi.reports.report_resolution import ReportResolution

BRAND_COLOR = discord.Color(0x5865F2)
SUCCESS_COLOR = discord.Color.green()
ERROR_COLOR = discord.Color.red()

MEDALS = ("🥇", "🥈", "🥉")

# Discord embed field values are capped at 1024 characters
FIELD_VALUE_LIMIT = 1024
DESCRIPTION_LIMIT = 4096


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


# ----------------------------------------------------------------------
# Points
# ----------------------------------------------------------------------

def build_points_embed(display_name: str, points: int | None, avatar_url: str | None = None) -> discord.Embed:
    """Points card for one user. ``points`` is None when the user has no record yet."""
    name = discord.utils.escape_markdown(display_name)
    if points is None:
        description = f"{name} hasn't earned any points yet. Start chatting to earn some!"
    else:
        noun = "point" if points == 1 else "points"
        description = f"{name} has **{points:,}** {noun}."

    embed = discord.Embed(title="Points", description=description, color=BRAND_COLOR, timestamp=_utcnow())
    if avatar_url:
        embed.set_thumbnail(url=avatar_url)
    return embed


def format_leaderboard_line(rank: int, user: User) -> str:
    prefix = MEDALS[rank - 1] if rank <= len(MEDALS) else f"**#{rank}**"
    return f"{prefix} {discord.utils.escape_markdown(user.name)} · {user.points:,} points"


def build_leaderboard_embed(users: Iterable[User], limit: int, requested: int | None = None) -> discord.Embed:
    """
    Ranked leaderboard.

    Args:
        users: Users ordered by points, highest first.
        limit: Number of entries that were fetched.
        requested: Limit the caller asked for, if it differed from ``limit``.
    """
    lines = [format_leaderboard_line(rank, user) for rank, user in enumerate(users, start=1)]
    description = "\n".join(lines) if lines else "No one has earned any points yet."

    embed = discord.Embed(
        title=f"Top {limit} Leaderboard",
        description=_truncate(description, DESCRIPTION_LIMIT),
        color=discord.Color.gold(),
        timestamp=_utcnow(),
    )
    if requested is not None and requested != limit:
        embed.set_footer(text=f"Requested {requested}, showing {limit} (allowed range is 1-25)")
    return embed


# ----------------------------------------------------------------------
# Reports
# ----------------------------------------------------------------------

def build_report_prompt_embed() -> discord.Embed:
    return discord.Embed(
        title="Report Message",
        description="Why are you reporting this message? Pick the category that fits best.",
        color=BRAND_COLOR,
    )


def build_staff_report_embeds(
    resolution: ReportResolution,
    reporter: discord.abc.User,
    details: str | None = None,
) -> list[discord.Embed]:
    """Report summary plus a copy of the flagged message, for the admin channel."""
    message = resolution.report.message
    category = resolution.category

    report_embed = discord.Embed(
        title=f"New report: {category.value}",
        color=category.color,
        timestamp=_utcnow(),
    )
    report_embed.add_field(name="Reported by", value=f"{reporter.mention} ({reporter.id})", inline=True)
    report_embed.add_field(name="Author", value=f"{message.author.mention} ({message.author.id})", inline=True)
    report_embed.add_field(name="Channel", value=f"<#{message.channel.id}>", inline=True)
    report_embed.add_field(name="Jump to message", value=message.jump_url, inline=False)
    if details:
        report_embed.add_field(name="Details", value=_truncate(details, FIELD_VALUE_LIMIT), inline=False)

    message_embed = discord.Embed(
        description=_truncate(message.content or "*No text content*", DESCRIPTION_LIMIT),
        color=category.color,
        timestamp=message.created_at,
    )
    message_embed.set_author(name=str(message.author), icon_url=message.author.display_avatar.url)
    attachments = getattr(message, "attachments", None) or []
    if attachments:
        message_embed.add_field(
            name="Attachments",
            value=_truncate("\n".join(a.url for a in attachments), FIELD_VALUE_LIMIT),
            inline=False,
        )
    return [report_embed, message_embed]


def build_report_confirmation_embed(resolution: ReportResolution) -> discord.Embed:
    return discord.Embed(
        title="Report sent",
        description=(
            f"Thanks! Your report was filed as **{resolution.category.value}**. "
            "The moderators will take a look."
        ),
        color=SUCCESS_COLOR,
    )


# ----------------------------------------------------------------------
# Verification
# ----------------------------------------------------------------------

def build_verification_embed() -> discord.Embed:
    embed = discord.Embed(
        title="Welcome!",
        description=(
            "Before you can chat, tell us what to call you.\n\n"
            "Press **Verify** and enter your name and, optionally, your pronouns. "
            "Together they must fit in 32 characters because they become your nickname."
        ),
        color=BRAND_COLOR,
    )
    return embed


def build_nickname(name: str, pronouns: str) -> str:
    return f"{name} ({pronouns})" if pronouns else name


# ----------------------------------------------------------------------
# Calendar
# ----------------------------------------------------------------------

CALENDAR_LIST_LIMIT = 10
CALENDAR_FAILURE_LIMIT = 5


def _bullet_list(names: list[str], limit: int) -> str:
    return _truncate("\n".join(f"• {name}" for name in names[:limit]), FIELD_VALUE_LIMIT) or "None"


def build_calendar_sync_embed(result: SyncResult) -> discord.Embed:
    embed = discord.Embed(
        title="Calendar Sync Complete",
        color=SUCCESS_COLOR if result.total_changes > 0 else discord.Color.orange(),
        timestamp=_utcnow(),
    )

    for label, names in (("Created", result.created), ("Updated", result.updated), ("Deleted", result.deleted)):
        if names:
            embed.add_field(name=f"{label} Events ({len(names)})", value=_bullet_list(names, CALENDAR_LIST_LIMIT), inline=False)

    if result.failed:
        embed.add_field(
            name=f"Failed Events ({len(result.failed)})",
            value=_bullet_list(result.failed, CALENDAR_FAILURE_LIMIT),
            inline=False,
        )

    if result.total_changes == 0 and not result.failed:
        embed.description = "No changes were needed - all events are up to date."

    shown = sum(min(CALENDAR_LIST_LIMIT, len(names)) for names in (result.created, result.updated, result.deleted))
    if result.total_changes > shown:
        embed.set_footer(text=f"... and {result.total_changes - shown} more events processed")
    return embed


# ----------------------------------------------------------------------
# Alerts
# ----------------------------------------------------------------------

def build_alert_embed(record: logging.LogRecord) -> discord.Embed:
    """Error-channel card for a forwarded log record."""
    embed = discord.Embed(
        title=f"{record.levelname}: {record.name}",
        description=f"```{_truncate(record.getMessage(), DESCRIPTION_LIMIT - 6)}```",
        color=ERROR_COLOR if record.levelno < logging.CRITICAL else discord.Color.dark_red(),
        timestamp=datetime.datetime.fromtimestamp(record.created, datetime.timezone.utc),
    )
    embed.add_field(name="Location", value=f"{record.pathname}:{record.lineno}", inline=False)
    if record.exc_text:
        embed.add_field(name="Traceback", value=f"```{_truncate(record.exc_text, FIELD_VALUE_LIMIT - 6)}```", inline=False)
    return embed
