"""
Business-day calendars and adjustment conventions.

Holiday rules are expressed with ``pandas.tseries.holiday`` so that Easter
based feasts and rules with start dates come for free.
"""

import functools
import logging
from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, Optional, Union

import pandas as pd
from pandas.tseries.holiday import (
    AbstractHolidayCalendar,
    EasterMonday,
    GoodFriday,
    Holiday,
)

from ..errors import ConfigurationError, DomainError
from .period import Period, TimeUnit, add_to_date, to_date

logger = logging.getLogger(__name__)


class BusinessDayConvention(Enum):
    """Rules for rolling a date that falls on a holiday."""
    FOLLOWING = "following"
    MODIFIED_FOLLOWING = "modified_following"
    PRECEDING = "preceding"
    MODIFIED_PRECEDING = "modified_preceding"
    UNADJUSTED = "unadjusted"


class Calendar:
    """
    Base calendar: Saturdays and Sundays are holidays, plus whatever
    ``_holidays_in_year`` returns.
    """

    def name(self) -> str:
        raise NotImplementedError

    def _is_weekend(self, d: date) -> bool:
        return d.weekday() >= 5

    def _holidays_in_year(self, year: int) -> FrozenSet[date]:
        return frozenset()

    def is_business_day(self, d: date) -> bool:
        d = to_date(d)
        return not (self._is_weekend(d) or d in self._holidays_in_year(d.year))

    def is_holiday(self, d: date) -> bool:
        return not self.is_business_day(d)

    def is_end_of_month(self, d: date) -> bool:
        d = to_date(d)
        return d.month != self.adjust(d + timedelta(days=1)).month

    def end_of_month(self, d: date) -> date:
        d = to_date(d)
        last = (pd.Timestamp(d) + pd.offsets.MonthEnd(0)).date()
        return self.adjust(last, BusinessDayConvention.PRECEDING)

    def adjust(
        self,
        d: date,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
    ) -> date:
        """Roll ``d`` onto a business day according to ``convention``."""
        d = to_date(d)
        if convention == BusinessDayConvention.UNADJUSTED:
            return d

        if convention in (BusinessDayConvention.FOLLOWING,
                          BusinessDayConvention.MODIFIED_FOLLOWING):
            adjusted = d
            while self.is_holiday(adjusted):
                adjusted += timedelta(days=1)
            if (convention == BusinessDayConvention.MODIFIED_FOLLOWING
                    and adjusted.month != d.month):
                return self.adjust(d, BusinessDayConvention.PRECEDING)
            return adjusted

        adjusted = d
        while self.is_holiday(adjusted):
            adjusted -= timedelta(days=1)
        if (convention == BusinessDayConvention.MODIFIED_PRECEDING
                and adjusted.month != d.month):
            return self.adjust(d, BusinessDayConvention.FOLLOWING)
        return adjusted

    def advance(
        self,
        d: date,
        n: Union[int, Period],
        unit: Optional[TimeUnit] = None,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        end_of_month: bool = False,
    ) -> date:
        """
        Advance ``d`` by a period and roll the result onto a business day.

        Args:
            d: Start date
            n: Either a ``Period`` or an integer length (then ``unit`` is required)
            unit: Time unit when ``n`` is an integer
            convention: Business-day convention applied to the result
            end_of_month: Keep month-end starts on month ends for M/Y steps

        Returns:
            Adjusted date. Day steps count business days, not calendar days.
        """
        d = to_date(d)
        if isinstance(n, Period):
            length, unit = n.length, n.unit
        else:
            if unit is None:
                raise DomainError("a time unit is required when advancing by an integer")
            length = int(n)

        if length == 0:
            return self.adjust(d, convention)

        if unit == TimeUnit.DAYS:
            step = 1 if length > 0 else -1
            result = d
            remaining = abs(length)
            while remaining > 0:
                result += timedelta(days=step)
                while self.is_holiday(result):
                    result += timedelta(days=step)
                remaining -= 1
            return result

        if unit == TimeUnit.WEEKS:
            return self.adjust(add_to_date(d, length, unit), convention)

        result = add_to_date(d, length, unit)
        if end_of_month and self.is_end_of_month(d):
            return self.end_of_month(result)
        return self.adjust(result, convention)

    def business_days_between(self, start: date, end: date,
                              include_first: bool = True,
                              include_last: bool = False) -> int:
        start, end = to_date(start), to_date(end)
        if start > end:
            return -self.business_days_between(end, start, include_last, include_first)
        count = 0
        current = start
        while current <= end:
            if self.is_business_day(current):
                if (current != start or include_first) and (current != end or include_last):
                    count += 1
            current += timedelta(days=1)
        return count

    def __eq__(self, other) -> bool:
        return isinstance(other, Calendar) and self.name() == other.name()

    def __hash__(self) -> int:
        return hash(self.name())

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NullCalendar(Calendar):
    """Every day is a business day."""

    def name(self) -> str:
        return "Null"

    def _is_weekend(self, d: date) -> bool:
        return False


class WeekendsOnly(Calendar):
    """Only Saturdays and Sundays are holidays."""

    def name(self) -> str:
        return "Weekends only"


class TargetHolidayCalendar(AbstractHolidayCalendar):
    """TARGET2 closing days (Euro area payments system)."""
    rules = [
        Holiday("New Years Day", month=1, day=1),
        GoodFriday,
        EasterMonday,
        Holiday("Labour Day", month=5, day=1, start_date=pd.Timestamp("2000-01-01")),
        Holiday("Christmas Day", month=12, day=25),
        Holiday("Day of Goodwill", month=12, day=26, start_date=pd.Timestamp("2000-01-01")),
        Holiday("Millennium Eve 1998", year=1998, month=12, day=31),
        Holiday("Millennium Eve 1999", year=1999, month=12, day=31),
        Holiday("Millennium Eve 2001", year=2001, month=12, day=31),
    ]


@functools.lru_cache(maxsize=None)
def _target_holidays(year: int) -> FrozenSet[date]:
    """TARGET2 closing days of one year, shared by every ``TARGET`` instance."""
    holidays = TargetHolidayCalendar().holidays(
        start=pd.Timestamp(year, 1, 1),
        end=pd.Timestamp(year, 12, 31),
    )
    return frozenset(h.date() for h in holidays)


class TARGET(Calendar):
    """TARGET calendar: weekends plus the TARGET2 closing days."""

    def name(self) -> str:
        return "TARGET"

    def _holidays_in_year(self, year: int) -> FrozenSet[date]:
        return _target_holidays(year)


_CALENDARS = {
    "null": NullCalendar,
    "weekendsonly": WeekendsOnly,
    "target": TARGET,
}


def calendar_from_name(name: str) -> Calendar:
    """Build a calendar from a config string such as ``"TARGET"``."""
    try:
        return _CALENDARS[name.strip().lower().replace(" ", "").replace("_", "")]()
    except KeyError:
        raise ConfigurationError(f"Unsupported calendar: {name}") from None
