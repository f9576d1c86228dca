import logging
from datetime import date
from typing import Union

from ..quotes import SimpleQuote, as_quote
from .base import TermStructure

logger = logging.getLogger(__name__)


class BlackConstantVol(TermStructure):
    """Flat Black volatility, strike- and time-independent."""

    def __init__(self, volatility: Union[float, SimpleQuote], day_counter=None,
                 reference_date=None, calendar=None, settlement_days=None, context=None):
        super().__init__(reference_date=reference_date, calendar=calendar,
                         day_counter=day_counter, settlement_days=settlement_days,
                         context=context)
        self._volatility = as_quote(volatility)
        self.register_with(self._volatility)

    def max_date(self) -> date:
        return date.max

    def black_vol(self, t: float, strike: float = 0.0, extrapolate: bool = False) -> float:
        if isinstance(t, date):
            t = self.time_from_reference(t)
        self.check_range(t, extrapolate)
        return self._volatility.value()

    def black_variance(self, t: float, strike: float = 0.0, extrapolate: bool = False) -> float:
        if isinstance(t, date):
            t = self.time_from_reference(t)
        vol = self.black_vol(t, strike, extrapolate)
        return vol * vol * t
