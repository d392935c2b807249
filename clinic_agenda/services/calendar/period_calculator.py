import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List


SUNDAY = 6


class ViewMode(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def first_of_month(d: date) -> date:
    return d.replace(day=1)


def add_months(d: date, months: int) -> date:
    """Shift by calendar months, clamping the day to the target month's length."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


@dataclass(frozen=True)
class PeriodCalculator:
    first_weekday: int = SUNDAY
    month_weeks: int = 5

    def start_of_week(self, d: date) -> date:
        return d - timedelta(days=(d.weekday() - self.first_weekday) % 7)

    def week_dates(self, d: date) -> List[date]:
        start = self.start_of_week(d)
        return [start + timedelta(days=i) for i in range(7)]

    def month_grid(self, d: date) -> List[date]:
        # With the default 5 weeks, months spanning 6 week-rows lose their trailing days; see month_hidden_dates
        start = self.start_of_week(first_of_month(d))
        return [start + timedelta(days=i) for i in range(7 * self.month_weeks)]

    def month_hidden_dates(self, d: date) -> List[date]:
        grid = self.month_grid(d)
        last_shown = grid[-1]
        days_in_month = calendar.monthrange(d.year, d.month)[1]
        month_end = d.replace(day=days_in_month)
        if last_shown >= month_end:
            return []
        return [last_shown + timedelta(days=i) for i in range(1, (month_end - last_shown).days + 1)]

    def advance(self, d: date, mode: ViewMode, direction: int) -> date:
        if direction not in (1, -1):
            raise ValueError("direction must be +1 or -1")
        if mode == ViewMode.DAY:
            return d + timedelta(days=direction)
        if mode == ViewMode.WEEK:
            return d + timedelta(days=7 * direction)
        return add_months(d, direction)

    def visible_dates(self, d: date, mode: ViewMode) -> List[date]:
        if mode == ViewMode.DAY:
            return [d]
        if mode == ViewMode.WEEK:
            return self.week_dates(d)
        return self.month_grid(d)
