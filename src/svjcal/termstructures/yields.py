"""
Yield term structures with continuous compounding.

Only what the pricing engines need: discount factors, zero rates and
forward rates, either from a flat forward rate or from a zero curve
interpolated linearly in time.
"""

import logging
from datetime import date
from typing import Sequence, Union

import numpy as np

from ..errors import ConfigurationError, DomainError
from ..quotes import SimpleQuote, as_quote
from ..time import to_date
from .base import TermStructure

logger = logging.getLogger(__name__)


class YieldTermStructure(TermStructure):
    """Base yield curve: subclasses implement ``_discount_impl(t)``."""

    def _to_time(self, d_or_t) -> float:
        if isinstance(d_or_t, date):
            return self.time_from_reference(d_or_t)
        return float(d_or_t)

    def discount(self, d_or_t: Union[date, float], extrapolate: bool = False) -> float:
        """Discount factor for a date or a time from the reference date."""
        self.check_range(d_or_t, extrapolate)
        return self._discount_impl(self._to_time(d_or_t))

    def zero_rate(self, d_or_t: Union[date, float], extrapolate: bool = False) -> float:
        """Continuously-compounded zero rate."""
        t = self._to_time(d_or_t)
        if t == 0.0:
            # instantaneous rate over a short step
            t = 1e-4
        return -np.log(self.discount(t, extrapolate)) / t

    def forward_rate(self, t1: float, t2: float, extrapolate: bool = False) -> float:
        """Continuously-compounded forward rate between two times."""
        t1, t2 = self._to_time(t1), self._to_time(t2)
        if t2 < t1:
            raise DomainError(f"forward start ({t1}) after end ({t2})")
        if t2 == t1:
            t2 = t1 + 1e-4
        return np.log(self.discount(t1, extrapolate) / self.discount(t2, extrapolate)) / (t2 - t1)

    def _discount_impl(self, t: float) -> float:
        raise NotImplementedError


class FlatForward(YieldTermStructure):
    """
    Constant continuously-compounded forward rate.

    The rate may be a ``SimpleQuote``; the curve then observes it and
    forwards its changes.
    """

    def __init__(self, forward: Union[float, SimpleQuote], day_counter=None,
                 reference_date=None, calendar=None, settlement_days=None, context=None):
        super().__init__(reference_date=reference_date, calendar=calendar,
                         day_counter=day_counter, settlement_days=settlement_days,
                         context=context)
        self._forward = as_quote(forward)
        self.register_with(self._forward)

    def forward(self) -> float:
        return self._forward.value()

    def max_date(self) -> date:
        return date.max

    def _discount_impl(self, t: float) -> float:
        return float(np.exp(-self._forward.value() * t))


class ZeroCurve(YieldTermStructure):
    """
    Zero-rate curve on a set of pillar dates.

    The first date is the reference date. Zero rates are interpolated
    linearly in time; past the last pillar the curve continues with the
    instantaneous forward rate at the last pillar.

    Args:
        dates: Pillar dates, strictly increasing, the first being the reference
        rates: Continuously-compounded zero rates on the pillars
        day_counter: Day counter turning pillar dates into times
        calendar: Optional calendar
    """

    def __init__(self, dates: Sequence[date], rates: Sequence[float], day_counter=None,
                 calendar=None):
        dates = [to_date(d) for d in dates]
        rates = np.asarray(rates, dtype=float)
        if len(dates) < 2:
            raise ConfigurationError("a zero curve needs at least two pillars")
        if len(dates) != len(rates):
            raise ConfigurationError(
                f"dates/rates size mismatch: {len(dates)} vs {len(rates)}"
            )
        super().__init__(reference_date=dates[0], calendar=calendar, day_counter=day_counter)

        self._dates = dates
        self._times = np.array([self.time_from_reference(d) for d in dates])
        if np.any(np.diff(self._times) <= 0.0):
            raise ConfigurationError("zero curve pillar dates must be strictly increasing")
        self._rates = rates

    def dates(self):
        return list(self._dates)

    def times(self) -> np.ndarray:
        return self._times.copy()

    def data(self) -> np.ndarray:
        return self._rates.copy()

    def max_date(self) -> date:
        return self._dates[-1]

    def _zero_yield_impl(self, t: float) -> float:
        t_max = self._times[-1]
        if t <= t_max:
            return float(np.interp(t, self._times, self._rates))
        z_max = self._rates[-1]
        slope = (self._rates[-1] - self._rates[-2]) / (self._times[-1] - self._times[-2])
        inst_fwd_max = z_max + t_max * slope
        return float((z_max * t_max + inst_fwd_max * (t - t_max)) / t)

    def _discount_impl(self, t: float) -> float:
        if t == 0.0:
            return 1.0
        return float(np.exp(-self._zero_yield_impl(t) * t))
