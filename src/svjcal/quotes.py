import logging
import math

from .errors import CalculationError
from .patterns.observable import Observable

logger = logging.getLogger(__name__)


class SimpleQuote(Observable):
    """
    Market quote holding a single value.

    Setting a new value notifies every registered observer (helpers,
    surfaces, processes), which invalidate their cached results.
    """

    def __init__(self, value: float = None):
        self._value = None if value is None else float(value)

    def value(self) -> float:
        if self._value is None:
            raise CalculationError("invalid SimpleQuote: no value set")
        return self._value

    def is_valid(self) -> bool:
        return self._value is not None and math.isfinite(self._value)

    def set_value(self, value: float) -> float:
        """Set the quote and return the change from the previous value."""
        value = None if value is None else float(value)
        previous = self._value
        if value != previous:
            self._value = value
            self.notify_observers()
        if previous is None or value is None:
            return 0.0
        return value - previous

    def reset(self) -> None:
        self.set_value(None)

    def __float__(self) -> float:
        return self.value()

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value!r})"


def as_quote(value) -> SimpleQuote:
    """Wrap plain numbers into a quote; pass quotes through."""
    if isinstance(value, SimpleQuote):
        return value
    return SimpleQuote(value)
