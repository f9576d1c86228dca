"""
Reference-date bookkeeping shared by every term structure.

A term structure has a reference date (the date at which its time
coordinate is zero), a day counter that turns dates into times, a calendar,
and an extrapolation policy. The reference date is either fixed, floating
with an ``EvaluationContext`` (settlement days ahead of the evaluation date),
or supplied by a subclass.
"""

import logging
from datetime import date
from typing import Optional, Union

from ..errors import ConfigurationError, DomainError
from ..patterns.observable import Observable, Observer
from ..settings import EvaluationContext
from ..time import Actual365Fixed, Calendar, DayCounter, NullCalendar, TimeUnit, to_date

logger = logging.getLogger(__name__)


class TermStructure(Observer, Observable):
    """
    Base class for curves and surfaces indexed by date/time.

    Args:
        reference_date: Fixed reference date
        calendar: Calendar used for date generation (defaults to ``NullCalendar``)
        day_counter: Day counter for time conversion (defaults to ``Actual365Fixed``)
        settlement_days: Business days between evaluation and reference date
            (floating mode, requires ``context``)
        context: Evaluation context the reference date floats with
    """

    def __init__(
        self,
        reference_date: Optional[date] = None,
        calendar: Optional[Calendar] = None,
        day_counter: Optional[DayCounter] = None,
        settlement_days: Optional[int] = None,
        context: Optional[EvaluationContext] = None,
    ):
        self._calendar = calendar if calendar is not None else NullCalendar()
        self._day_counter = day_counter if day_counter is not None else Actual365Fixed()
        self._extrapolate = False

        self._reference_date = to_date(reference_date) if reference_date is not None else None
        self._settlement_days = settlement_days
        self._context = context
        self._moving = False
        self._updated = True

        if reference_date is not None and settlement_days is not None:
            raise ConfigurationError("give either a reference date or settlement days, not both")
        if settlement_days is not None:
            if context is None:
                raise ConfigurationError("settlement days require an evaluation context")
            if settlement_days < 0:
                raise ConfigurationError(f"negative settlement days: {settlement_days}")
            self._moving = True
            self._updated = False
            self.register_with(context)

    # observer interface

    def update(self) -> None:
        if self._moving:
            self._updated = False
        self.notify_observers()

    # dates and times

    def reference_date(self) -> date:
        if self._moving and not self._updated:
            self._reference_date = self._calendar.advance(
                self._context.evaluation_date, self._settlement_days, TimeUnit.DAYS
            )
            self._updated = True
        if self._reference_date is None:
            raise ConfigurationError(
                f"{type(self).__name__} has no reference date; "
                "pass one, use settlement days, or override reference_date()"
            )
        return self._reference_date

    def settlement_days(self) -> int:
        if self._settlement_days is None:
            raise ConfigurationError("settlement days not provided for this instance")
        return self._settlement_days

    def calendar(self) -> Calendar:
        return self._calendar

    def day_counter(self) -> DayCounter:
        return self._day_counter

    def time_from_reference(self, d: date) -> float:
        return self._day_counter.year_fraction(self.reference_date(), to_date(d))

    def max_date(self) -> date:
        raise NotImplementedError

    def max_time(self) -> float:
        return self.time_from_reference(self.max_date())

    # extrapolation policy

    def enable_extrapolation(self, flag: bool = True) -> None:
        self._extrapolate = bool(flag)

    def disable_extrapolation(self) -> None:
        self._extrapolate = False

    def allows_extrapolation(self) -> bool:
        return self._extrapolate

    # validation

    def check_range(self, d_or_t: Union[date, float], extrapolate: bool = False) -> None:
        """
        Validate a date or time against ``[reference, max]``.

        Raises:
            DomainError: For dates before the reference date, negative times,
                or points past the maximum without extrapolation permission
        """
        allowed = extrapolate or self.allows_extrapolation()
        if isinstance(d_or_t, date):
            d = to_date(d_or_t)
            reference = self.reference_date()
            if d < reference:
                raise DomainError(f"date ({d}) before reference date ({reference})")
            if not allowed and d > self.max_date():
                raise DomainError(
                    f"date ({d}) is past max curve date ({self.max_date()})"
                )
            return

        t = float(d_or_t)
        if t < 0.0:
            raise DomainError(f"negative time ({t}) given")
        if not allowed and t > self.max_time():
            raise DomainError(f"time ({t}) is past max curve time ({self.max_time()})")
