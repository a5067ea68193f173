"""Calendar/day aggregation over the full live schedule list."""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

import pytz

from agenda.domain.schemas.schedule import DayCount, DayView, Schedule

BADGE_LIMIT = 9


def count_by_date(schedules: Iterable[Schedule]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for s in schedules:
        counts[s.date] = counts.get(s.date, 0) + 1
    return counts


def badge_label(count: int) -> str:
    if count <= 0:
        return ""
    return f"{BADGE_LIMIT}+" if count > BADGE_LIMIT else str(count)


def items_for_day(schedules: Iterable[Schedule], date: str) -> List[Schedule]:
    """Appointments of one day, earliest first. Start times are zero-padded HH:MM so string order is time order."""
    if not date:
        return []
    return sorted((s for s in schedules if s.date == date), key=lambda s: s.start_time)


def today_ymd(timezone: str = "America/Sao_Paulo") -> str:
    try:
        tz = pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError:
        return datetime.now().strftime("%Y-%m-%d")
    return datetime.now(tz).strftime("%Y-%m-%d")


def format_date_br(ymd: str) -> str:
    """'2024-01-05' -> '05/01/2024'."""
    if not ymd or len(ymd) < 10:
        return ymd
    y, m, d = ymd[:10].split("-")
    return f"{d}/{m}/{y}"


class CalendarView:
    """Memoizes the day counts and the selected day's list on (snapshot identity, selected date)."""

    def __init__(self, timezone: str = "America/Sao_Paulo"):
        self.timezone = timezone
        self._counts_source: Optional[Sequence[Schedule]] = None
        self._counts: Dict[str, int] = {}
        self._day_source: Optional[Sequence[Schedule]] = None
        self._day_date: Optional[str] = None
        self._day_items: List[Schedule] = []

    def counts(self, schedules: Sequence[Schedule]) -> Dict[str, int]:
        if self._counts_source is not schedules:
            self._counts = count_by_date(schedules)
            self._counts_source = schedules
        return self._counts

    def day_counts(self, schedules: Sequence[Schedule]) -> List[DayCount]:
        return [
            DayCount(date=date, count=count, badge=badge_label(count))
            for date, count in sorted(self.counts(schedules).items())
        ]

    def day(self, schedules: Sequence[Schedule], selected: Optional[str] = None) -> DayView:
        date = selected or today_ymd(self.timezone)
        if self._day_source is not schedules or self._day_date != date:
            self._day_items = items_for_day(schedules, date)
            self._day_source = schedules
            self._day_date = date
        return DayView(date=date, display_date=format_date_br(date), items=self._day_items)
