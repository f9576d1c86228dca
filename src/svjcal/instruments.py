"""European vanilla options with lazily computed, cached prices."""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from .errors import CalculationError, ConfigurationError
from .patterns.observable import Observable, Observer
from .time import to_date

logger = logging.getLogger(__name__)


class OptionType(Enum):
    CALL = 1
    PUT = -1


class PlainVanillaPayoff:
    """max(omega * (S - K), 0) with omega = +1 for calls and -1 for puts."""

    def __init__(self, option_type: OptionType, strike: float):
        self.option_type = option_type
        self.strike = float(strike)

    def __call__(self, spot):
        omega = self.option_type.value
        return max(omega * (spot - self.strike), 0.0)

    def __repr__(self) -> str:
        return f"PlainVanillaPayoff({self.option_type.name}, {self.strike})"


class EuropeanExercise:
    def __init__(self, exercise_date: date):
        self.date = to_date(exercise_date)

    def last_date(self) -> date:
        return self.date

    def __repr__(self) -> str:
        return f"EuropeanExercise({self.date.isoformat()})"


@dataclass
class PricingResults:
    """What an engine returns for one instrument."""
    value: float
    error_estimate: Optional[float] = None


class VanillaOption(Observer, Observable):
    """
    European option priced by whatever engine is currently bound.

    The NPV is computed on first request and cached until the engine (or
    anything the engine observes) notifies a change.
    """

    def __init__(self, payoff: PlainVanillaPayoff, exercise: EuropeanExercise):
        self.payoff = payoff
        self.exercise = exercise
        self._engine = None
        self._results: Optional[PricingResults] = None

    def set_pricing_engine(self, engine) -> None:
        """Bind ``engine``, replacing any previous binding."""
        if not engine.can_price(self):
            raise ConfigurationError(f"{type(engine).__name__} cannot price {self!r}")
        if self._engine is not None:
            self.unregister_with(self._engine)
        self._engine = engine
        self.register_with(engine)
        self.update()

    def pricing_engine(self):
        return self._engine

    def update(self) -> None:
        self._results = None
        self.notify_observers()

    def _calculate(self) -> PricingResults:
        if self._results is None:
            if self._engine is None:
                raise CalculationError("null pricing engine")
            self._results = self._engine.calculate(self)
        return self._results

    def npv(self) -> float:
        return self._calculate().value

    def error_estimate(self) -> Optional[float]:
        return self._calculate().error_estimate

    def __repr__(self) -> str:
        return f"VanillaOption({self.payoff!r}, {self.exercise!r})"
