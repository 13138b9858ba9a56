"""
Container for the long-lived components handlers depend on.

Built once by the orchestrator and passed explicitly into every handler and
cog; nothing here is a module-level singleton.
"""

from __future__ import annotations

from dataclasses import dataclass

from peechi.calendar.calendar_service import CalendarService
from peechi.configuration.bot_settings import BotSettings
from peechi.points.ledger import UserLedger
from peechi.reports.report_registry import ReportRegistry


@dataclass
class BotServices:
    settings: BotSettings
    ledger: UserLedger
    reports: ReportRegistry
    calendar: CalendarService | None = None
