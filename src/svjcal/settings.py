"""
Evaluation context.

The evaluation date ("today") is an explicit, observable object passed to
the structures that float with it, rather than process-wide state. Term
structures built with settlement days register with the context and
re-derive their reference date whenever it moves.
"""

import logging
from datetime import date
from typing import Optional

from .errors import ConfigurationError
from .patterns.observable import Observable
from .time.period import to_date

logger = logging.getLogger(__name__)


class EvaluationContext(Observable):
    """
    Holds the evaluation date for a pricing/calibration session.

    Args:
        evaluation_date: Initial evaluation date (defaults to today's date)
    """

    def __init__(self, evaluation_date: Optional[date] = None):
        self._evaluation_date = (
            to_date(evaluation_date) if evaluation_date is not None else date.today()
        )
        self._frozen = False

    @property
    def evaluation_date(self) -> date:
        return self._evaluation_date

    @evaluation_date.setter
    def evaluation_date(self, value) -> None:
        self.set_evaluation_date(value)

    def set_evaluation_date(self, value) -> None:
        if self._frozen:
            raise ConfigurationError(
                f"evaluation date is frozen at {self._evaluation_date}"
            )
        value = to_date(value)
        if value != self._evaluation_date:
            logger.debug(f"Evaluation date moved {self._evaluation_date} -> {value}")
            self._evaluation_date = value
            self.notify_observers()

    def freeze(self) -> None:
        """Pin the evaluation date; later changes raise until ``unfreeze``."""
        self._frozen = True

    def unfreeze(self) -> None:
        self._frozen = False

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def __repr__(self) -> str:
        return f"EvaluationContext({self._evaluation_date.isoformat()})"
