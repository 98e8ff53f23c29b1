from __future__ import annotations

import calendar
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Optional

from ..common.validators import require_iso_date, require_non_empty
from ..core.constants import DEFAULT_HOLIDAYS, HOLIDAYS_KEY
from ..core.exceptions import NotFoundError, ValidationError
from ..requests.model import AttendanceRequest
from ..storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass(frozen=True)
class DayCell:
    day: int
    date: str
    status: Optional[str] = None
    holiday: Optional[str] = None
    is_today: bool = False

    def to_dict(self) -> dict:
        return {
            "day": self.day,
            "date": self.date,
            "status": self.status,
            "holiday": self.holiday,
            "isToday": self.is_today,
        }


@dataclass(frozen=True)
class MonthView:
    year: int
    month: int
    weeks: list[list[Optional[DayCell]]]

    @property
    def title(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "year": self.year,
            "month": self.month,
            "weekdays": WEEKDAY_LABELS,
            "weeks": [[c.to_dict() if c else None for c in week] for week in self.weeks],
        }


def status_by_date(requests: Iterable[AttendanceRequest]) -> dict[str, str]:
    """date -> status; when several requests share a date the latest submission wins."""
    out: dict[str, str] = {}
    for r in sorted(requests, key=lambda r: r.submitted_at):
        out[r.date] = r.status.value
    return out


class HolidayService:
    """Holiday table (YYYY-MM-DD -> label) stored under one key."""

    def __init__(self, store: KeyValueStore, *, key: str = HOLIDAYS_KEY):
        self._store = store
        self._key = key

    def _load(self) -> dict[str, str]:
        raw = self._store.get(self._key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Holidays blob unreadable, treating as empty: %s", e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Holidays blob is not an object, treating as empty")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, holidays: dict[str, str]) -> None:
        self._store.set(self._key, json.dumps(dict(sorted(holidays.items())), ensure_ascii=False))

    def ensure_defaults(self, year: int) -> dict[str, str]:
        """Seed the fixed national holidays once for a year that has none."""
        holidays = self._load()
        prefix = f"{int(year):04d}-"
        if not any(k.startswith(prefix) for k in holidays):
            for month_day, label in DEFAULT_HOLIDAYS:
                holidays[f"{prefix}{month_day}"] = label
            self._save(holidays)
            logger.info("Seeded default holidays for %s", year)
        return holidays

    def list_for_year(self, year: int) -> dict[str, str]:
        prefix = f"{int(year):04d}-"
        return {k: v for k, v in self.ensure_defaults(year).items() if k.startswith(prefix)}

    def add(self, day: str, label: str) -> None:
        day = require_iso_date(require_non_empty(day, "Date"), "Date")
        label = require_non_empty(label, "Label")
        holidays = self._load()
        holidays[day] = label
        self._save(holidays)

    def remove(self, day: str) -> None:
        holidays = self._load()
        if day not in holidays:
            raise NotFoundError(f"No holiday on {day}")
        del holidays[day]
        self._save(holidays)


class CalendarService:
    def __init__(self, holidays: HolidayService, *, today: Callable[[], date] = date.today):
        self._holidays = holidays
        self._today = today

    def month_view(
        self,
        requests: Iterable[AttendanceRequest],
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> MonthView:
        today = self._today()
        year = int(year or today.year)
        month = int(month or today.month)
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")

        statuses = status_by_date(requests)
        holidays = self._holidays.list_for_year(year)

        weeks: list[list[Optional[DayCell]]] = []
        for week in calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month):
            row: list[Optional[DayCell]] = []
            for d in week:
                if d.month != month:
                    row.append(None)
                    continue
                key = d.isoformat()
                row.append(
                    DayCell(
                        day=d.day,
                        date=key,
                        status=statuses.get(key),
                        holiday=holidays.get(key),
                        is_today=d == today,
                    )
                )
            weeks.append(row)
        return MonthView(year=year, month=month, weeks=weeks)
