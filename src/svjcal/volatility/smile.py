"""Strike-to-volatility mappings at one fixed maturity coordinate."""

import logging
import sys
from typing import Optional, Sequence

import numpy as np

from ..errors import ConfigurationError, DomainError

logger = logging.getLogger(__name__)


class SmileSection:
    """
    Volatility smile at a fixed option time.

    Subclasses implement ``_volatility_impl(strike)`` and may narrow the
    strike domain by overriding ``min_strike``/``max_strike``.
    """

    def __init__(self, option_time: float, atm_level: Optional[float] = None):
        if option_time < 0.0:
            raise DomainError(f"negative option time ({option_time}) for smile section")
        self._option_time = float(option_time)
        self._atm_level = atm_level

    def option_time(self) -> float:
        return self._option_time

    def atm_level(self) -> Optional[float]:
        return self._atm_level

    def min_strike(self) -> float:
        return -sys.float_info.max

    def max_strike(self) -> float:
        return sys.float_info.max

    def volatility(self, strike: float) -> float:
        return self._volatility_impl(strike)

    def variance(self, strike: float) -> float:
        vol = self.volatility(strike)
        return vol * vol * self._option_time

    def _volatility_impl(self, strike: float) -> float:
        raise NotImplementedError


class FlatSmileSection(SmileSection):
    """Same volatility for every strike."""

    def __init__(self, option_time: float, volatility: float, atm_level: Optional[float] = None):
        super().__init__(option_time, atm_level)
        self._volatility = float(volatility)

    def _volatility_impl(self, strike: float) -> float:
        return self._volatility


class InterpolatedSmileSection(SmileSection):
    """
    Smile given on a strike grid.

    Volatilities are interpolated linearly between grid strikes and held flat
    outside the grid.
    """

    def __init__(self, option_time: float, strikes: Sequence[float], volatilities: Sequence[float],
                 atm_level: Optional[float] = None):
        super().__init__(option_time, atm_level)
        strikes = np.asarray(strikes, dtype=float)
        volatilities = np.asarray(volatilities, dtype=float)
        if strikes.ndim != 1 or strikes.shape != volatilities.shape:
            raise ConfigurationError(
                f"strikes {strikes.shape} and volatilities {volatilities.shape} must be matching 1-d arrays"
            )
        if len(strikes) == 0:
            raise ConfigurationError("empty strike grid")
        if np.any(np.diff(strikes) <= 0.0):
            raise ConfigurationError("strikes must be strictly increasing")
        self._strikes = strikes
        self._volatilities = volatilities

    def strikes(self) -> np.ndarray:
        return self._strikes.copy()

    def volatilities(self) -> np.ndarray:
        return self._volatilities.copy()

    def _volatility_impl(self, strike: float) -> float:
        return float(np.interp(strike, self._strikes, self._volatilities))
