"""In-memory registry of pending moderation reports.

A report lives until it is consumed (a category is chosen) or until its TTL
elapses. A background task sweeps expired reports periodically, and the
registry never holds more than ``max_reports`` entries plus the one being
inserted: at capacity it purges expired reports and then evicts the oldest
half.

The registry is mutated only by its own methods, none of which await, so
interleaved event callbacks never observe a half-applied change.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from peechi.util.logger import get_logger

logger = get_logger("report_registry")

REPORT_TTL_SECONDS = 30 * 60
SWEEP_INTERVAL_SECONDS = 10 * 60
MAX_REPORTS = 1000


@dataclass(slots=True)
class Report:
    """
    A pending moderation report.

    Attributes:
        id: Generated UUID string.
        origin: The context-menu interaction that created the report; used to
            clear its buttons once a category is chosen.
        message: The flagged message.
        created_at: Clock reading at creation (seconds).
    """

    id: str
    origin: Any
    message: Any
    created_at: float


class ReportRegistry:
    """
    Keyed store of pending reports with TTL expiry and a size cap.

    Args:
        ttl_seconds: Lifetime of a report.
        sweep_interval_seconds: Period of the background sweep.
        max_reports: Capacity before eviction kicks in.
        clock: Monotonic clock returning seconds; injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = REPORT_TTL_SECONDS,
        sweep_interval_seconds: float = SWEEP_INTERVAL_SECONDS,
        max_reports: int = MAX_REPORTS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self.max_reports = max_reports
        self._clock = clock
        self._reports: dict[str, Report] = {}
        self._sweep_task: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._reports)

    def __contains__(self, report_id: object) -> bool:
        return report_id in self._reports

    def _is_expired(self, report: Report, now: float) -> bool:
        return now - report.created_at > self.ttl_seconds

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_report(self, origin: Any, message: Any) -> str:
        """Register a new report and return its id.

        Never refuses: capacity pressure is resolved by eviction.
        """
        if len(self._reports) >= self.max_reports:
            self.purge_expired()
            if len(self._reports) >= self.max_reports:
                self._evict_oldest_half()

        report_id = str(uuid.uuid4())
        self._reports[report_id] = Report(
            id=report_id,
            origin=origin,
            message=message,
            created_at=self._clock(),
        )
        logger.debug("[REPORT REGISTRY] Created report %s (%d pending)", report_id, len(self._reports))
        return report_id

    def get_report(self, report_id: str) -> Report | None:
        """Return the report, or None if unknown, consumed or expired."""
        report = self._reports.get(report_id)
        if report is None:
            return None

        if self._is_expired(report, self._clock()):
            del self._reports[report_id]
            logger.debug("[REPORT REGISTRY] Report %s expired on lookup", report_id)
            return None

        return report

    def delete_report(self, report_id: str) -> bool:
        """Remove a report. Returns True iff something was removed."""
        return self._reports.pop(report_id, None) is not None

    def purge_expired(self) -> int:
        """Delete every report older than the TTL and return how many were removed."""
        now = self._clock()
        expired = [report_id for report_id, report in self._reports.items() if self._is_expired(report, now)]
        for report_id in expired:
            del self._reports[report_id]

        if expired:
            logger.info("[REPORT REGISTRY] Purged %d expired reports", len(expired))
        return len(expired)

    def _evict_oldest_half(self) -> None:
        by_age = sorted(self._reports.values(), key=lambda report: report.created_at)
        to_evict = by_age[: max(1, len(by_age) // 2)]
        for report in to_evict:
            del self._reports[report.id]
        logger.warning(
            "[REPORT REGISTRY] Capacity of %d reached, evicted %d oldest reports",
            self.max_reports,
            len(to_evict),
        )

    # ------------------------------------------------------------------
    # Background sweep
    # ------------------------------------------------------------------

    async def _run_sweep_loop(self) -> None:
        logger.info("[REPORT REGISTRY] Starting periodic sweep (interval=%.1fs)", self.sweep_interval_seconds)
        try:
            while True:
                await asyncio.sleep(self.sweep_interval_seconds)
                try:
                    self.purge_expired()
                except Exception as exc:
                    logger.error("[REPORT REGISTRY] Unexpected error during sweep: %s", exc)
        except asyncio.CancelledError:
            logger.info("[REPORT REGISTRY] Periodic sweep cancelled")
            raise

    def start(self) -> None:
        """Start the background sweep task if it is not already running."""
        if self._sweep_task and not self._sweep_task.done():
            logger.warning("[REPORT REGISTRY] Sweep task already running")
            return
        self._sweep_task = asyncio.create_task(self._run_sweep_loop())

    async def shutdown(self) -> None:
        """Stop the sweep task."""
        if self._sweep_task and not self._sweep_task.done():
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
        self._sweep_task = None
        logger.info("[REPORT REGISTRY] Shutdown complete")
