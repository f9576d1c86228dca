"""
Abstract volatility surface indexed by option maturity and underlying
instrument tenor.

Every query comes in three coordinate flavours, all reduced to the
time-based form:

* ``(option_time, instrument_length)`` in years from the reference date;
* ``(option_date, instrument_tenor)``, converted with ``convert_dates``;
* ``(option_tenor, instrument_tenor)``, whose option tenor is first turned
  into a date with ``option_date_from_tenor``.

Range checks run before every volatility or variance computation. The
per-call ``extrapolate`` flag and the per-instance extrapolation toggle
excuse out-of-range option times, tenors and strikes; a negative
instrument tenor is always rejected.
"""

import logging
import math
from datetime import date
from typing import Optional, Tuple, Union

from ..errors import ConfigurationError, DomainError
from ..termstructures.base import TermStructure
from ..time import BusinessDayConvention, Period, to_date
from .smile import SmileSection

logger = logging.getLogger(__name__)

OptionCoordinate = Union[float, date, Period]
InstrumentCoordinate = Union[float, Period]


class SwaptionVolatilityStructure(TermStructure):
    """
    Base class for swaption-style volatility surfaces.

    Concrete surfaces supply ``max_date``, ``max_instrument_tenor``,
    ``min_strike``, ``max_strike``, ``_smile_section_impl`` and
    ``_volatility_impl``.

    Args:
        reference_date: Fixed reference date
        calendar: Calendar used to turn option tenors into dates
        business_day_convention: Convention for option tenors (default FOLLOWING)
        day_counter: Day counter (default ``Actual365Fixed``)
        settlement_days: Settlement lag when floating with ``context``
        context: Evaluation context for floating reference dates
    """

    def __init__(
        self,
        reference_date: Optional[date] = None,
        calendar=None,
        business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        day_counter=None,
        settlement_days: Optional[int] = None,
        context=None,
    ):
        super().__init__(reference_date=reference_date, calendar=calendar,
                         day_counter=day_counter, settlement_days=settlement_days,
                         context=context)
        self._business_day_convention = business_day_convention

    def business_day_convention(self) -> BusinessDayConvention:
        return self._business_day_convention

    # domain limits

    def max_instrument_tenor(self) -> Period:
        raise NotImplementedError

    def max_instrument_length(self) -> float:
        return self.time_from_reference(self.reference_date() + self.max_instrument_tenor())

    def min_strike(self) -> float:
        raise NotImplementedError

    def max_strike(self) -> float:
        raise NotImplementedError

    # coordinate conversion

    def convert_dates(self, option_date: date, instrument_tenor: Period) -> Tuple[float, float]:
        """
        Map ``(option_date, instrument_tenor)`` to ``(option_time, instrument_length)``.

        The instrument ends at ``option_date + instrument_tenor`` with plain
        date arithmetic.

        Raises:
            DomainError: If the end date is not after the option date
        """
        option_date = to_date(option_date)
        end = option_date + instrument_tenor
        if end <= option_date:
            raise DomainError(
                f"tenor {instrument_tenor} is non-positive: "
                f"end date ({end}) not after option date ({option_date})"
            )
        option_time = self.time_from_reference(option_date)
        instrument_length = self.day_counter().year_fraction(option_date, end)
        return option_time, instrument_length

    def option_date_from_tenor(self, option_tenor: Period) -> date:
        return self.calendar().advance(
            self.reference_date(), option_tenor, convention=self._business_day_convention
        )

    # validation

    def _check_strike_bounds(self) -> None:
        low, high = self.min_strike(), self.max_strike()
        if not (math.isfinite(low) and math.isfinite(high)):
            raise ConfigurationError(f"strike bounds must be finite, got [{low}, {high}]")
        if low > high:
            raise ConfigurationError(f"min strike ({low}) above max strike ({high})")

    def check_range(self, option, instrument=None, strike: Optional[float] = None,
                    extrapolate: bool = False) -> None:
        """
        Validate a query point before it reaches ``_volatility_impl``.

        With only ``option`` given this is the plain term-structure date/time
        check. Otherwise the option coordinate, the instrument tenor/length
        and the strike are all validated.
        """
        allowed = extrapolate or self.allows_extrapolation()
        super().check_range(option, extrapolate)
        if instrument is None:
            return

        if isinstance(instrument, Period):
            if instrument.length < 0:
                raise DomainError(f"negative instrument tenor ({instrument}) given")
            max_tenor = self.max_instrument_tenor()
            if not allowed and instrument > max_tenor:
                raise DomainError(
                    f"instrument tenor ({instrument}) is past max tenor ({max_tenor})"
                )
        else:
            length = float(instrument)
            if length < 0.0:
                raise DomainError(f"negative instrument length ({length}) given")
            max_length = self.max_instrument_length()
            if not allowed and length > max_length:
                raise DomainError(
                    f"instrument length ({length}) is past max length ({max_length})"
                )

        if strike is not None:
            self._check_strike_bounds()
            if not allowed and not (self.min_strike() <= strike <= self.max_strike()):
                raise DomainError(
                    f"strike ({strike}) is outside the range "
                    f"[{self.min_strike()}, {self.max_strike()}]"
                )

    def _coordinates(self, option: OptionCoordinate, instrument: InstrumentCoordinate,
                     strike: Optional[float], extrapolate: bool) -> Tuple[float, float]:
        if isinstance(option, Period):
            option = self.option_date_from_tenor(option)

        if isinstance(option, date):
            if not isinstance(instrument, Period):
                raise TypeError("a date-based query needs a Period instrument tenor")
            self.check_range(option, instrument, strike, extrapolate)
            return self.convert_dates(option, instrument)

        if isinstance(instrument, Period):
            raise TypeError("a time-based query needs a float instrument length")
        option_time, instrument_length = float(option), float(instrument)
        self.check_range(option_time, instrument_length, strike, extrapolate)
        return option_time, instrument_length

    # queries

    def volatility(self, option: OptionCoordinate, instrument: InstrumentCoordinate,
                   strike: float, extrapolate: bool = False) -> float:
        """
        Volatility at ``(option, instrument, strike)``.

        ``option`` is a time (float), a date or an option tenor (``Period``);
        ``instrument`` is a length in years for time queries and a ``Period``
        otherwise.
        """
        option_time, instrument_length = self._coordinates(option, instrument, strike, extrapolate)
        return self._volatility_impl(option_time, instrument_length, strike)

    def black_variance(self, option: OptionCoordinate, instrument: InstrumentCoordinate,
                       strike: float, extrapolate: bool = False) -> float:
        """Black variance ``vol**2 * option_time`` using the query's own option time."""
        option_time, instrument_length = self._coordinates(option, instrument, strike, extrapolate)
        vol = self._volatility_impl(option_time, instrument_length, strike)
        return vol * vol * option_time

    def smile_section(self, option: OptionCoordinate,
                      instrument: InstrumentCoordinate) -> SmileSection:
        if isinstance(option, Period):
            option = self.option_date_from_tenor(option)
        if isinstance(option, date):
            option_time, instrument_length = self.convert_dates(option, instrument)
        else:
            option_time, instrument_length = float(option), float(instrument)
            if instrument_length < 0.0:
                raise DomainError(f"negative instrument length ({instrument_length}) given")
        return self._smile_section_impl(option_time, instrument_length)

    # hooks

    def _smile_section_impl(self, option_time: float, instrument_length: float) -> SmileSection:
        raise NotImplementedError

    def _volatility_impl(self, option_time: float, instrument_length: float,
                         strike: float) -> float:
        raise NotImplementedError
