"""
Temporal coordinates: periods, day counters, calendars and conventions.

These are the conversions consumed by term structures and calibration
helpers; none of them know anything about volatility.
"""

from .period import Period, TimeUnit, add_to_date, days, months, to_date, weeks, years
from .daycounters import (
    Actual360,
    Actual365Fixed,
    ActualActual,
    DayCounter,
    Thirty360,
    day_counter_from_name,
)
from .calendars import (
    TARGET,
    BusinessDayConvention,
    Calendar,
    NullCalendar,
    WeekendsOnly,
    calendar_from_name,
)

__all__ = [
    "Period",
    "TimeUnit",
    "add_to_date",
    "days",
    "weeks",
    "months",
    "years",
    "to_date",
    "DayCounter",
    "Actual365Fixed",
    "Actual360",
    "ActualActual",
    "Thirty360",
    "day_counter_from_name",
    "Calendar",
    "NullCalendar",
    "WeekendsOnly",
    "TARGET",
    "BusinessDayConvention",
    "calendar_from_name",
]
