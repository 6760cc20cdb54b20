"""
Utility helpers shared across partitionkit packages.
"""

from .calendar import CalendarPeriod, current_year, iter_months, iter_years
from .logging import configure_logging, get_logger, time_call
from .naming import child_table_name, month_name

__all__ = [
    "CalendarPeriod",
    "child_table_name",
    "configure_logging",
    "current_year",
    "get_logger",
    "iter_months",
    "iter_years",
    "month_name",
    "time_call",
]
