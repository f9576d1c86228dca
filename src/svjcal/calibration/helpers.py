"""
Calibration helpers: one market quote each, priced by a swappable engine.

A helper turns its quoted Black volatility into a market price, asks its
bound engine for the model price of the same instrument, and reports the
discrepancy as its calibration error. Nothing is cached across calls:
quotes and model parameters may move between two evaluations.

Two error conventions are supported:

* volatility errors (``calibrate_volatility=True``): the model price is
  inverted to a Black volatility, clamped to [0.001, 10], and the signed
  difference ``model_vol - quoted_vol`` is returned;
* price errors (default): the relative price error
  ``|market - model| / market``, or the absolute difference when the
  market price underflows to zero (far out-of-the-money, short-dated,
  low-volatility quotes).
"""

import logging
from datetime import date

import numpy as np
from scipy.optimize import brentq

from ..errors import CalculationError, ConfigurationError
from ..instruments import EuropeanExercise, OptionType, PlainVanillaPayoff, VanillaOption
from ..patterns.observable import Observable, Observer
from ..pricers.black import black_formula
from ..quotes import as_quote
from ..time import Calendar, Period

logger = logging.getLogger(__name__)

MIN_VOLATILITY = 0.001
MAX_VOLATILITY = 10.0


class CalibrationHelper(Observer, Observable):
    """
    Base helper pairing a volatility quote with a pricing engine.

    Subclasses implement ``model_value`` and ``black_price``.

    Args:
        volatility: Quoted Black volatility (number or ``SimpleQuote``)
        calibrate_volatility: Use volatility errors instead of relative price errors
    """

    def __init__(self, volatility, calibrate_volatility: bool = False):
        self.volatility = as_quote(volatility)
        self.calibrate_volatility = calibrate_volatility
        self.engine = None
        self.register_with(self.volatility)

    def update(self) -> None:
        self.notify_observers()

    def market_value(self) -> float:
        """Black price implied by the current quote."""
        return self.black_price(self.volatility.value())

    def model_value(self) -> float:
        raise NotImplementedError

    def black_price(self, volatility: float) -> float:
        raise NotImplementedError

    def set_pricing_engine(self, engine) -> None:
        raise NotImplementedError

    def implied_volatility(self, target_value: float, accuracy: float = 1e-12,
                           max_evaluations: int = 5000, min_vol: float = MIN_VOLATILITY,
                           max_vol: float = MAX_VOLATILITY) -> float:
        """
        Black volatility reproducing ``target_value``, by Brent's method.

        Raises:
            CalculationError: If the target is not bracketed by the volatility
                bounds or the search does not converge
        """
        def objective(vol):
            return self.black_price(vol) - target_value

        low, high = objective(min_vol), objective(max_vol)
        if low * high > 0.0:
            raise CalculationError(
                f"target value {target_value} not bracketed by volatilities [{min_vol}, {max_vol}]"
            )
        root, info = brentq(objective, min_vol, max_vol, xtol=accuracy,
                            maxiter=max_evaluations, full_output=True, disp=False)
        if not info.converged:
            raise CalculationError(f"implied volatility search did not converge: {info.flag}")
        return root

    def calibration_error(self) -> float:
        if self.calibrate_volatility:
            model_price = self.model_value()
            if model_price <= self.black_price(MIN_VOLATILITY):
                implied = MIN_VOLATILITY
            elif model_price >= self.black_price(MAX_VOLATILITY):
                implied = MAX_VOLATILITY
            else:
                implied = self.implied_volatility(model_price, 1e-12, 5000,
                                                  MIN_VOLATILITY, MAX_VOLATILITY)
            return implied - self.volatility.value()

        market = self.market_value()
        if market <= 0.0:
            # quote worth nothing at machine precision: no relative scale left
            return abs(self.model_value() - market)
        return abs(market - self.model_value()) / market


class HestonModelHelper(CalibrationHelper):
    """
    European call quoted by Black volatility, for Heston-family calibration.

    The exercise date is the risk-free curve's reference date advanced by
    ``maturity`` on ``calendar``; time to expiry uses the risk-free curve's
    day counter.

    Args:
        maturity: Option maturity as a period
        calendar: Calendar used to roll the exercise date
        s0: Spot level (number or ``SimpleQuote``)
        strike: Strike price
        volatility: Quoted Black volatility
        risk_free: Risk-free yield curve
        dividend: Dividend yield curve
        calibrate_volatility: Use volatility errors instead of relative price errors
    """

    def __init__(self, maturity: Period, calendar: Calendar, s0, strike: float,
                 volatility, risk_free, dividend, calibrate_volatility: bool = False):
        super().__init__(volatility, calibrate_volatility)
        self.maturity = maturity
        self.calendar = calendar
        self.s0 = as_quote(s0)
        self.strike = float(strike)
        self.risk_free = risk_free
        self.dividend = dividend
        self.register_with_all([self.s0, self.risk_free, self.dividend])

        self.exercise_date: date = calendar.advance(risk_free.reference_date(), maturity)
        self.tau = risk_free.day_counter().year_fraction(risk_free.reference_date(),
                                                         self.exercise_date)
        self.option = VanillaOption(
            PlainVanillaPayoff(OptionType.CALL, self.strike),
            EuropeanExercise(self.exercise_date),
        )
        self.register_with(self.option)

    def set_pricing_engine(self, engine) -> None:
        if not engine.can_price(self.option):
            raise ConfigurationError(
                f"{type(engine).__name__} cannot price the instrument of {self!r}"
            )
        self.engine = engine
        self.option.set_pricing_engine(engine)

    def model_value(self) -> float:
        if self.engine is None:
            raise CalculationError(f"no pricing engine set for {self!r}")
        return self.option.npv()

    def black_price(self, volatility: float) -> float:
        std_dev = volatility * np.sqrt(self.tau)
        return black_formula(
            OptionType.CALL,
            self.strike * self.risk_free.discount(self.tau),
            self.s0.value() * self.dividend.discount(self.tau),
            std_dev,
        )

    def __repr__(self) -> str:
        return f"HestonModelHelper({self.maturity}, K={self.strike})"
