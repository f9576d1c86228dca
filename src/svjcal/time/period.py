"""
Periods (tenors) and plain date arithmetic.

A ``Period`` is a signed length in days, weeks, months or years. Adding a
period to a ``datetime.date`` moves the date without any business-day
adjustment; month and year steps clamp to the end of the target month
(31 Jan + 1M = 28/29 Feb), following ``pandas.DateOffset`` semantics.
"""

import functools
import re
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Tuple, Union

import pandas as pd

from ..errors import DomainError


class TimeUnit(Enum):
    """Units a period can be expressed in."""
    DAYS = "D"
    WEEKS = "W"
    MONTHS = "M"
    YEARS = "Y"


_PERIOD_PATTERN = re.compile(r"^\s*([+-]?\d+)\s*([DdWwMmYy])\s*$")


def to_date(value) -> date:
    """Normalise dates, datetimes, timestamps and ISO strings to ``date``."""
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return pd.Timestamp(value).date()
    raise TypeError(f"cannot interpret {value!r} as a date")


def add_to_date(d: date, length: int, unit: TimeUnit) -> date:
    """Move ``d`` by ``length`` units with calendar-day arithmetic."""
    if unit == TimeUnit.DAYS:
        return d + timedelta(days=length)
    if unit == TimeUnit.WEEKS:
        return d + timedelta(weeks=length)
    if unit == TimeUnit.MONTHS:
        return (pd.Timestamp(d) + pd.DateOffset(months=length)).date()
    if unit == TimeUnit.YEARS:
        return (pd.Timestamp(d) + pd.DateOffset(years=length)).date()
    raise DomainError(f"unknown time unit {unit}")


@functools.total_ordering
class Period:
    """Signed tenor such as ``Period(6, TimeUnit.MONTHS)`` or ``Period.parse("10Y")``."""

    __slots__ = ("length", "unit")

    def __init__(self, length: int, unit: Union[TimeUnit, str]):
        if isinstance(unit, str):
            unit = TimeUnit(unit.upper())
        self.length = int(length)
        self.unit = unit

    @classmethod
    def parse(cls, text: str) -> "Period":
        match = _PERIOD_PATTERN.match(text)
        if match is None:
            raise DomainError(f"cannot parse period {text!r}")
        return cls(int(match.group(1)), match.group(2))

    # comparisons

    def _day_range(self) -> Tuple[int, int]:
        n = self.length
        if self.unit == TimeUnit.DAYS:
            bounds = (n, n)
        elif self.unit == TimeUnit.WEEKS:
            bounds = (7 * n, 7 * n)
        elif self.unit == TimeUnit.MONTHS:
            bounds = (28 * n, 31 * n)
        else:
            bounds = (365 * n, 366 * n)
        return (min(bounds), max(bounds))

    def _exact_key(self, other: "Period"):
        """Common exact unit for both periods, or None if not comparable exactly."""
        short = (TimeUnit.DAYS, TimeUnit.WEEKS)
        if self.unit in short and other.unit in short:
            return self._in_days(), other._in_days()
        if self.unit not in short and other.unit not in short:
            return self._in_months(), other._in_months()
        return None

    def _in_days(self) -> int:
        return self.length * (7 if self.unit == TimeUnit.WEEKS else 1)

    def _in_months(self) -> int:
        return self.length * (12 if self.unit == TimeUnit.YEARS else 1)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        if self.length == 0 and other.length == 0:
            return True
        key = self._exact_key(other)
        if key is None:
            return False
        return key[0] == key[1]

    def __lt__(self, other: "Period") -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        key = self._exact_key(other)
        if key is not None:
            return key[0] < key[1]
        low, high = self._day_range()
        other_low, other_high = other._day_range()
        if high < other_low:
            return True
        if low > other_high:
            return False
        raise DomainError(f"undecidable comparison between {self} and {other}")

    def __hash__(self) -> int:
        if self.length == 0:
            return hash(0)
        if self.unit in (TimeUnit.DAYS, TimeUnit.WEEKS):
            return hash(("D", self._in_days()))
        return hash(("M", self._in_months()))

    # arithmetic

    def __neg__(self) -> "Period":
        return Period(-self.length, self.unit)

    def __mul__(self, n: int) -> "Period":
        return Period(self.length * int(n), self.unit)

    __rmul__ = __mul__

    def __radd__(self, other):
        if isinstance(other, date):
            return add_to_date(other, self.length, self.unit)
        return NotImplemented

    def __rsub__(self, other):
        if isinstance(other, date):
            return add_to_date(other, -self.length, self.unit)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Period({self.length}, {self.unit.name})"

    def __str__(self) -> str:
        return f"{self.length}{self.unit.value}"


def days(n: int) -> Period:
    return Period(n, TimeUnit.DAYS)


def weeks(n: int) -> Period:
    return Period(n, TimeUnit.WEEKS)


def months(n: int) -> Period:
    return Period(n, TimeUnit.MONTHS)


def years(n: int) -> Period:
    return Period(n, TimeUnit.YEARS)
