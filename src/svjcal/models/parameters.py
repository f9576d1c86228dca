"""
Model parameters and the constraints the optimizer must respect.

Constraints test a whole (sub)vector at once; ``CalibratedModel`` chains the
per-parameter constraints into one test over the flat parameter vector.
"""

import logging
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)


class Constraint:
    """Feasibility test for a parameter vector."""

    def test(self, params: np.ndarray) -> bool:
        raise NotImplementedError

    def __call__(self, params) -> bool:
        return self.test(np.atleast_1d(np.asarray(params, dtype=float)))


class NoConstraint(Constraint):
    def test(self, params: np.ndarray) -> bool:
        return True


class PositiveConstraint(Constraint):
    """Every component strictly positive."""

    def test(self, params: np.ndarray) -> bool:
        return bool(np.all(params > 0.0))


class BoundaryConstraint(Constraint):
    """Every component within ``[low, high]``."""

    def __init__(self, low: float, high: float):
        self.low = float(low)
        self.high = float(high)

    def test(self, params: np.ndarray) -> bool:
        return bool(np.all((params >= self.low) & (params <= self.high)))


class CompositeConstraint(Constraint):
    """Both constraints must hold."""

    def __init__(self, first: Constraint, second: Constraint):
        self.first = first
        self.second = second

    def test(self, params: np.ndarray) -> bool:
        return self.first.test(params) and self.second.test(params)


class Parameter:
    """
    A named scalar model parameter with its constraint.

    Args:
        name: Parameter name (e.g. ``"kappa"``)
        value: Initial value
        constraint: Feasibility test applied by the optimizer
    """

    def __init__(self, name: str, value: float, constraint: Constraint = None):
        self.name = name
        self.value = float(value)
        self.constraint = constraint if constraint is not None else NoConstraint()

    def test(self, value: float) -> bool:
        return self.constraint(value)

    def __repr__(self) -> str:
        return f"Parameter({self.name}={self.value})"


class ParameterVectorConstraint(Constraint):
    """Constraint over a flat vector: component ``i`` must pass parameter ``i``'s test."""

    def __init__(self, parameters: Sequence[Parameter]):
        self._constraints = [p.constraint for p in parameters]

    def test(self, params: np.ndarray) -> bool:
        if len(params) != len(self._constraints):
            return False
        return all(c.test(params[i:i + 1]) for i, c in enumerate(self._constraints))
