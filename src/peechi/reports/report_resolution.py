"""
Report categories and the consume-on-resolve step of the report lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import discord

from peechi.exceptions import NotFoundError, ValidationError
from peechi.reports.report_registry import Report, ReportRegistry
from peechi.util.logger import get_logger

logger = get_logger("report_resolution")

REPORT_BUTTON_PREFIX = "report"


class ReportCategory(str, Enum):
    OFFENSIVE = "Offensive"
    SPAM = "Spam & Ads"
    ILLEGAL = "Illegal or NSFW"
    UNCOMFORTABLE = "Uncomfortable"
    OTHER = "Other"

    @property
    def button_style(self) -> discord.ButtonStyle:
        return CATEGORY_BUTTON_STYLES[self]

    @property
    def color(self) -> discord.Color:
        return CATEGORY_COLORS[self]


CATEGORY_BUTTON_STYLES = {
    ReportCategory.OFFENSIVE: discord.ButtonStyle.danger,
    ReportCategory.SPAM: discord.ButtonStyle.secondary,
    ReportCategory.ILLEGAL: discord.ButtonStyle.danger,
    ReportCategory.UNCOMFORTABLE: discord.ButtonStyle.primary,
    ReportCategory.OTHER: discord.ButtonStyle.secondary,
}

CATEGORY_COLORS = {
    ReportCategory.OFFENSIVE: discord.Color(0xE74C3C),
    ReportCategory.SPAM: discord.Color(0x95A5A6),
    ReportCategory.ILLEGAL: discord.Color(0xE74C3C),
    ReportCategory.UNCOMFORTABLE: discord.Color(0x3498DB),
    ReportCategory.OTHER: discord.Color(0x7F8C8D),
}


@dataclass(frozen=True, slots=True)
class ReportResolution:
    report: Report
    category: ReportCategory


def build_report_button_id(report_id: str, category: ReportCategory) -> str:
    return f"{REPORT_BUTTON_PREFIX}/{report_id}/{category.value}"


def parse_report_button_id(custom_id: str) -> tuple[str, str]:
    """Split ``report/<id>/<category>`` into ``(id, category)``.

    Raises:
        ValidationError: If the id does not have that shape.
    """
    parts = custom_id.split("/", 2)
    if len(parts) != 3 or parts[0] != REPORT_BUTTON_PREFIX or not parts[1] or not parts[2]:
        raise ValidationError(f"Malformed report button id: {custom_id!r}", user_message="Invalid report button.")
    return parts[1], parts[2]


def resolve_report(registry: ReportRegistry, report_id: str, category: str) -> ReportResolution:
    """
    Consume a pending report once a valid category is chosen.

    Args:
        registry: Registry holding pending reports.
        report_id: Id carried by the clicked button.
        category: Category label carried by the clicked button.

    Returns:
        ReportResolution: The consumed report and its category.

    Raises:
        NotFoundError: The report does not exist, was consumed or expired.
        ValidationError: The category is unknown. The report stays pending.
    """
    report = registry.get_report(report_id)
    if report is None:
        raise NotFoundError(f"Report {report_id} not found", user_message="Report not found")

    try:
        chosen = ReportCategory(category)
    except ValueError:
        raise ValidationError(f"Invalid report category {category!r}", user_message="Invalid category") from None

    registry.delete_report(report_id)
    logger.info("[REPORT RESOLUTION] Report %s resolved as %s", report_id, chosen.value)
    return ReportResolution(report=report, category=chosen)
