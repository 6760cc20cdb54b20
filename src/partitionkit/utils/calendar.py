"""
Calendar arithmetic for year and month partition boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterator

from dateutil.relativedelta import relativedelta


@dataclass(frozen=True)
class CalendarPeriod:
    """
    Half-open ``[start, end)`` date interval covering one year or one month.
    """

    start: date
    end: date

    @property
    def year(self) -> int:
        return self.start.year

    @property
    def month(self) -> int:
        return self.start.month


def current_year() -> int:
    return date.today().year


def year_period(year: int) -> CalendarPeriod:
    start = date(year, 1, 1)
    return CalendarPeriod(start, start + relativedelta(years=1))


def month_period(year: int, month: int) -> CalendarPeriod:
    start = date(year, month, 1)
    return CalendarPeriod(start, start + relativedelta(months=1))


def iter_years(start_year: int, end_year: int) -> Iterator[CalendarPeriod]:
    for year in range(start_year, end_year + 1):
        yield year_period(year)


def iter_months(start_year: int, end_year: int) -> Iterator[CalendarPeriod]:
    for year in range(start_year, end_year + 1):
        for month in range(1, 13):
            yield month_period(year, month)


def format_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
