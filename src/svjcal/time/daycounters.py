"""
Day-count conventions.

Each convention converts a pair of dates into a day count and a year
fraction. Year fractions are signed: swapping the dates flips the sign.
"""

import calendar as _calendar
from datetime import date

from ..errors import ConfigurationError
from .period import to_date


class DayCounter:
    """Base day counter; subclasses override ``day_count`` and ``year_fraction``."""

    def name(self) -> str:
        raise NotImplementedError

    def day_count(self, d1: date, d2: date) -> int:
        return (to_date(d2) - to_date(d1)).days

    def year_fraction(self, d1: date, d2: date) -> float:
        raise NotImplementedError

    def __eq__(self, other) -> bool:
        return isinstance(other, DayCounter) and self.name() == other.name()

    def __hash__(self) -> int:
        return hash(self.name())

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Actual365Fixed(DayCounter):
    """Actual days over a fixed 365-day year."""

    def name(self) -> str:
        return "Actual/365 (Fixed)"

    def year_fraction(self, d1: date, d2: date) -> float:
        return self.day_count(d1, d2) / 365.0


class Actual360(DayCounter):
    """Actual days over a 360-day year."""

    def name(self) -> str:
        return "Actual/360"

    def year_fraction(self, d1: date, d2: date) -> float:
        return self.day_count(d1, d2) / 360.0


class ActualActual(DayCounter):
    """Actual/Actual (ISDA): each calendar year contributes days/days-in-year."""

    def name(self) -> str:
        return "Actual/Actual (ISDA)"

    def year_fraction(self, d1: date, d2: date) -> float:
        d1, d2 = to_date(d1), to_date(d2)
        if d1 == d2:
            return 0.0
        if d1 > d2:
            return -self.year_fraction(d2, d1)

        y1, y2 = d1.year, d2.year
        basis1 = 366.0 if _calendar.isleap(y1) else 365.0
        basis2 = 366.0 if _calendar.isleap(y2) else 365.0

        fraction = float(y2 - y1 - 1)
        fraction += (date(y1 + 1, 1, 1) - d1).days / basis1
        fraction += (d2 - date(y2, 1, 1)).days / basis2
        return fraction


class Thirty360(DayCounter):
    """30/360 bond basis (US)."""

    def name(self) -> str:
        return "30/360 (Bond Basis)"

    def day_count(self, d1: date, d2: date) -> int:
        d1, d2 = to_date(d1), to_date(d2)
        dd1, dd2 = d1.day, d2.day
        if dd1 == 31:
            dd1 = 30
        if dd2 == 31 and dd1 == 30:
            dd2 = 30
        return 360 * (d2.year - d1.year) + 30 * (d2.month - d1.month) + (dd2 - dd1)

    def year_fraction(self, d1: date, d2: date) -> float:
        return self.day_count(d1, d2) / 360.0


_DAY_COUNTERS = {
    "act/365": Actual365Fixed,
    "actual365fixed": Actual365Fixed,
    "act/360": Actual360,
    "actual360": Actual360,
    "act/act": ActualActual,
    "actualactual": ActualActual,
    "30/360": Thirty360,
    "thirty360": Thirty360,
}


def day_counter_from_name(name: str) -> DayCounter:
    """Build a day counter from a config string such as ``"act/365"``."""
    try:
        return _DAY_COUNTERS[name.strip().lower()]()
    except KeyError:
        raise ConfigurationError(f"Unsupported day count basis: {name}") from None
