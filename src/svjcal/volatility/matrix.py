"""ATM volatility matrix on an (option tenor x instrument tenor) grid."""

import logging
import sys
from datetime import date
from typing import List, Sequence

import numpy as np
from scipy.interpolate import RegularGridInterpolator

from ..errors import ConfigurationError, DomainError
from ..time import BusinessDayConvention, Period, TimeUnit
from .smile import FlatSmileSection
from .swaption import SwaptionVolatilityStructure

logger = logging.getLogger(__name__)


def nominal_length(tenor: Period) -> float:
    """Tenor in years without reference to any date (12M = 1Y = 52W = 365D)."""
    if tenor.length <= 0:
        raise DomainError(f"non-positive instrument tenor ({tenor}) given")
    if tenor.unit == TimeUnit.YEARS:
        return float(tenor.length)
    if tenor.unit == TimeUnit.MONTHS:
        return tenor.length / 12.0
    if tenor.unit == TimeUnit.WEEKS:
        return tenor.length / 52.0
    return tenor.length / 365.0


class SwaptionVolatilityMatrix(SwaptionVolatilityStructure):
    """
    At-the-money volatilities quoted on a grid of option and instrument tenors.

    Option tenors become dates through the surface calendar and convention;
    lookups are bilinear in ``(option_time, instrument_length)`` and
    extrapolate linearly outside the grid. The volatility does not depend on
    the strike. In floating mode the option dates follow the evaluation date.

    Args:
        option_tenors: Increasing option tenors (rows)
        instrument_tenors: Increasing instrument tenors (columns)
        volatilities: Array of shape ``(len(option_tenors), len(instrument_tenors))``
    """

    def __init__(self, option_tenors: Sequence[Period], instrument_tenors: Sequence[Period],
                 volatilities, day_counter=None, reference_date=None, calendar=None,
                 business_day_convention=BusinessDayConvention.FOLLOWING,
                 settlement_days=None, context=None):
        super().__init__(reference_date=reference_date, calendar=calendar,
                         business_day_convention=business_day_convention,
                         day_counter=day_counter, settlement_days=settlement_days,
                         context=context)
        volatilities = np.asarray(volatilities, dtype=float)
        expected = (len(option_tenors), len(instrument_tenors))
        if volatilities.shape != expected:
            raise ConfigurationError(
                f"volatility matrix has shape {volatilities.shape}, expected {expected}"
            )
        if min(expected) < 2:
            raise ConfigurationError("at least two option and two instrument tenors are required")

        self._option_tenors = list(option_tenors)
        self._instrument_tenors = list(instrument_tenors)
        self._instrument_lengths = np.array([nominal_length(p) for p in self._instrument_tenors])
        if np.any(np.diff(self._instrument_lengths) <= 0.0):
            raise ConfigurationError("instrument tenors must be strictly increasing")
        self._volatilities = volatilities

        self._option_dates: List[date] = []
        self._interpolator = None

    def update(self) -> None:
        self._interpolator = None
        super().update()

    def _build(self) -> None:
        self._option_dates = [self.option_date_from_tenor(p) for p in self._option_tenors]
        option_times = np.array([self.time_from_reference(d) for d in self._option_dates])
        if np.any(np.diff(option_times) <= 0.0):
            raise ConfigurationError("option tenors must map to strictly increasing times")
        self._option_times = option_times
        self._interpolator = RegularGridInterpolator(
            (option_times, self._instrument_lengths),
            self._volatilities,
            method="linear",
            bounds_error=False,
            fill_value=None,
        )
        logger.debug(f"Built volatility matrix {self._volatilities.shape} at {self.reference_date()}")

    def _ensure_built(self) -> None:
        if self._interpolator is None:
            self._build()

    def option_tenors(self) -> List[Period]:
        return list(self._option_tenors)

    def option_dates(self) -> List[date]:
        self._ensure_built()
        return list(self._option_dates)

    def option_times(self) -> np.ndarray:
        self._ensure_built()
        return self._option_times.copy()

    def instrument_tenors(self) -> List[Period]:
        return list(self._instrument_tenors)

    def instrument_lengths(self) -> np.ndarray:
        return self._instrument_lengths.copy()

    def max_date(self) -> date:
        self._ensure_built()
        return self._option_dates[-1]

    def max_instrument_tenor(self) -> Period:
        return self._instrument_tenors[-1]

    def min_strike(self) -> float:
        return -sys.float_info.max

    def max_strike(self) -> float:
        return sys.float_info.max

    def _smile_section_impl(self, option_time: float, instrument_length: float):
        return FlatSmileSection(option_time, self._volatility_impl(option_time, instrument_length, 0.0))

    def _volatility_impl(self, option_time: float, instrument_length: float,
                         strike: float) -> float:
        self._ensure_built()
        return float(self._interpolator([[option_time, instrument_length]])[0])
