from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import STALE_PENDING_DAYS
from ..core.enums import RequestStatus
from ..requests.model import AttendanceRequest


def _round_half_up(value: float) -> int:
    # Matches Math.round of the dashboards: 2.5 -> 3, not banker's rounding.
    return int(math.floor(value + 0.5))


def approval_rate(approved: int, total: int) -> int:
    if total <= 0:
        return 0
    return _round_half_up(approved / total * 100)


def average_response_hours(requests: Iterable[AttendanceRequest]) -> Optional[int]:
    """Mean hours from submission to decision; None when nothing was reviewed."""
    durations = [
        (r.updated_at - r.submitted_at).total_seconds() / 3600
        for r in requests
        if r.status != RequestStatus.PENDING and r.updated_at is not None
    ]
    if not durations:
        return None
    return _round_half_up(sum(durations) / len(durations))


def todays_workload(requests: Iterable[AttendanceRequest], now: datetime) -> int:
    """Requests submitted on the viewer's current local calendar day (`now`'s timezone)."""
    today = now.date()
    return sum(1 for r in requests if r.submitted_at.astimezone(now.tzinfo).date() == today)


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def pending_since(request: AttendanceRequest, now: datetime) -> str:
    elapsed = now - request.submitted_at
    days = elapsed // timedelta(days=1)
    if days >= 1:
        return _plural(days, "day")
    hours = elapsed // timedelta(hours=1)
    if hours >= 1:
        return _plural(hours, "hour")
    return "Just now"


def is_stale(request: AttendanceRequest, now: datetime, *, stale_days: int = STALE_PENDING_DAYS) -> bool:
    return request.is_pending and now - request.submitted_at >= timedelta(days=stale_days)


@dataclass(frozen=True)
class RequestStatistics:
    total: int
    pending: int
    approved: int
    rejected: int
    approval_rate: int
    average_response_hours: Optional[int]
    todays_workload: int
    stale: int

    @property
    def average_response_label(self) -> str:
        if self.average_response_hours is None:
            return "No data"
        return f"{self.average_response_hours}h"

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "pending": self.pending,
            "approved": self.approved,
            "rejected": self.rejected,
            "approvalRate": self.approval_rate,
            "averageResponseHours": self.average_response_hours,
            "averageResponse": self.average_response_label,
            "todaysWorkload": self.todays_workload,
            "stale": self.stale,
        }


class StatisticsService:
    """Derived figures for the dashboard cards; nothing here is stored."""

    def __init__(self, *, clock: Callable[[], datetime] = now_local, stale_days: int = STALE_PENDING_DAYS):
        self._clock = clock
        self._stale_days = int(stale_days)

    def summarize(self, requests: Sequence[AttendanceRequest], *, now: Optional[datetime] = None) -> RequestStatistics:
        now = now or self._clock()
        counts = {s: 0 for s in RequestStatus}
        for r in requests:
            counts[r.status] += 1
        total = len(requests)

        return RequestStatistics(
            total=total,
            pending=counts[RequestStatus.PENDING],
            approved=counts[RequestStatus.APPROVED],
            rejected=counts[RequestStatus.REJECTED],
            approval_rate=approval_rate(counts[RequestStatus.APPROVED], total),
            average_response_hours=average_response_hours(requests),
            todays_workload=todays_workload(requests, now),
            stale=sum(1 for r in requests if is_stale(r, now, stale_days=self._stale_days)),
        )

    def pending_since(self, request: AttendanceRequest, *, now: Optional[datetime] = None) -> str:
        return pending_since(request, now or self._clock())

    def is_stale(self, request: AttendanceRequest, *, now: Optional[datetime] = None) -> bool:
        return is_stale(request, now or self._clock(), stale_days=self._stale_days)
