import logging
import sys
from datetime import date
from typing import Union

from ..quotes import SimpleQuote, as_quote
from ..time import BusinessDayConvention, Period, TimeUnit
from .smile import FlatSmileSection
from .swaption import SwaptionVolatilityStructure

logger = logging.getLogger(__name__)


class FlatSwaptionVolatility(SwaptionVolatilityStructure):
    """
    Constant volatility for every maturity, tenor and strike.

    The volatility may be a ``SimpleQuote``; the surface observes it and
    notifies its own observers when it moves.
    """

    def __init__(self, volatility: Union[float, SimpleQuote], day_counter=None,
                 reference_date=None, calendar=None,
                 business_day_convention=BusinessDayConvention.FOLLOWING,
                 settlement_days=None, context=None):
        super().__init__(reference_date=reference_date, calendar=calendar,
                         business_day_convention=business_day_convention,
                         day_counter=day_counter, settlement_days=settlement_days,
                         context=context)
        self._volatility = as_quote(volatility)
        self.register_with(self._volatility)

    def max_date(self) -> date:
        return date.max

    def max_instrument_tenor(self) -> Period:
        return Period(100, TimeUnit.YEARS)

    def min_strike(self) -> float:
        return -sys.float_info.max

    def max_strike(self) -> float:
        return sys.float_info.max

    def _smile_section_impl(self, option_time: float, instrument_length: float):
        return FlatSmileSection(option_time, self._volatility.value())

    def _volatility_impl(self, option_time: float, instrument_length: float,
                         strike: float) -> float:
        return self._volatility.value()
