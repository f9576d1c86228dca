"""
Pricing-engine contract.

An engine prices a ``VanillaOption`` on demand via ``calculate`` and is an
observable: changes to the model or market data it depends on are
forwarded to the instruments bound to it, which drop their cached values.
Model-based engines declare the model family they can price and refuse any
other model at construction.
"""

import logging
from datetime import date
from typing import Tuple

from ..errors import ConfigurationError, DomainError
from ..instruments import (
    EuropeanExercise,
    PlainVanillaPayoff,
    PricingResults,
    VanillaOption,
)
from ..models.calibrated import CalibratedModel
from ..patterns.observable import Observable, Observer

logger = logging.getLogger(__name__)


class PricingEngine(Observer, Observable):
    """Base engine: European plain-vanilla options only."""

    def update(self) -> None:
        self.notify_observers()

    def can_price(self, instrument) -> bool:
        return (
            isinstance(instrument, VanillaOption)
            and isinstance(instrument.payoff, PlainVanillaPayoff)
            and isinstance(instrument.exercise, EuropeanExercise)
        )

    def calculate(self, option: VanillaOption) -> PricingResults:
        raise NotImplementedError


class GenericModelEngine(PricingEngine):
    """Engine bound to one model; ``model_type`` names the family it accepts."""

    model_type = CalibratedModel

    def __init__(self, model):
        if not isinstance(model, self.model_type):
            raise ConfigurationError(
                f"{type(self).__name__} requires a {self.model_type.__name__}, "
                f"got {type(model).__name__}"
            )
        self.model = model
        self.register_with(model)


def option_terms(process, option: VanillaOption) -> Tuple[float, float, float, float, float]:
    """
    Market inputs shared by the engines.

    Returns:
        (spot, strike, time to exercise, risk-free discount, dividend discount)
    """
    payoff = option.payoff
    if payoff.strike <= 0.0:
        raise DomainError(f"non-positive strike ({payoff.strike})")
    spot = process.spot()
    exercise_date: date = option.exercise.last_date()
    t = process.time(exercise_date)
    if t < 0.0:
        raise DomainError(f"exercise date ({exercise_date}) before the reference date")
    risk_free_discount = process.risk_free.discount(exercise_date)
    dividend_discount = process.dividend.discount(exercise_date)
    return spot, payoff.strike, t, risk_free_discount, dividend_discount
