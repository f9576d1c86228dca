"""
Calibratable parametric models.

A ``CalibratedModel`` owns a flat vector of constrained parameters. Engines
bound to the model observe it; ``set_params`` therefore invalidates every
cached price downstream (engines, instruments, calibration helpers).
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..calibration.optimizer import (
    CalibrationResult,
    EndCriteria,
    EndCriteriaType,
    LevenbergMarquardt,
    Problem,
)
from ..errors import ConfigurationError
from ..patterns.observable import Observable, Observer
from ..utils.timers import Timer
from .parameters import Parameter, ParameterVectorConstraint

logger = logging.getLogger(__name__)


class CalibratedModel(Observer, Observable):
    """
    Base class for models whose parameters are fitted to calibration helpers.

    Args:
        parameters: Ordered list of model parameters
    """

    def __init__(self, parameters: Sequence[Parameter]):
        self._parameters: List[Parameter] = list(parameters)
        self.end_criteria = EndCriteriaType.NONE
        self.problem_values = np.array([])
        self.function_evaluations = 0

    # parameter access

    def parameter_names(self) -> List[str]:
        return [p.name for p in self._parameters]

    def params(self) -> np.ndarray:
        return np.array([p.value for p in self._parameters])

    def params_dict(self) -> Dict[str, float]:
        return {p.name: p.value for p in self._parameters}

    def set_params(self, values) -> None:
        """Overwrite all parameters and notify dependents."""
        values = np.asarray(values, dtype=float).ravel()
        if len(values) != len(self._parameters):
            raise ConfigurationError(
                f"parameter vector has {len(values)} entries, "
                f"{type(self).__name__} needs {len(self._parameters)}"
            )
        for parameter, value in zip(self._parameters, values):
            parameter.value = float(value)
        self.generate_arguments()
        self.notify_observers()

    def _parameter(self, index: int) -> float:
        return self._parameters[index].value

    def constraint(self) -> ParameterVectorConstraint:
        return ParameterVectorConstraint(self._parameters)

    def generate_arguments(self) -> None:
        """Hook for models that derive quantities from their parameters."""
        pass

    def update(self) -> None:
        self.generate_arguments()
        self.notify_observers()

    # calibration

    def value(self, params, helpers, weights: Optional[Sequence[float]] = None) -> float:
        """Weighted sum of squared calibration errors at ``params``."""
        weights = self._check_weights(helpers, weights)
        self.set_params(params)
        errors = np.array([h.calibration_error() for h in helpers])
        return float(np.sum(weights * errors * errors))

    def _check_weights(self, helpers, weights) -> np.ndarray:
        if weights is None:
            return np.ones(len(helpers))
        weights = np.asarray(weights, dtype=float)
        if len(weights) != len(helpers):
            raise ConfigurationError(
                f"got {len(weights)} weights for {len(helpers)} calibration helpers"
            )
        if np.any(weights < 0.0):
            raise ConfigurationError("calibration weights must be non-negative")
        return weights

    def calibrate(self, helpers, optimizer: Optional[LevenbergMarquardt] = None,
                  end_criteria: Optional[EndCriteria] = None,
                  weights: Optional[Sequence[float]] = None,
                  fix_parameters: Optional[Sequence[bool]] = None) -> CalibrationResult:
        """
        Fit the free parameters to the helpers' quotes.

        The residual of helper ``i`` is ``calibration_error_i * sqrt(w_i)``.
        Parameters flagged in ``fix_parameters`` keep their current values.
        Hitting the iteration cap is reported through the result, never raised.

        Args:
            helpers: Calibration helpers, each bound to an engine on this model
            optimizer: Least-squares optimizer (default ``LevenbergMarquardt()``)
            end_criteria: Termination thresholds (default ``EndCriteria()``)
            weights: Optional non-negative weight per helper
            fix_parameters: Optional mask, True where the parameter is held fixed

        Returns:
            CalibrationResult with the final parameters and termination reason
        """
        helpers = list(helpers)
        if not helpers:
            raise ConfigurationError("no calibration helpers given")
        optimizer = optimizer if optimizer is not None else LevenbergMarquardt()
        end_criteria = end_criteria if end_criteria is not None else EndCriteria()
        sqrt_weights = np.sqrt(self._check_weights(helpers, weights))

        n = len(self._parameters)
        if fix_parameters is None:
            fixed = np.zeros(n, dtype=bool)
        else:
            fixed = np.asarray(fix_parameters, dtype=bool)
            if len(fixed) != n:
                raise ConfigurationError(
                    f"fix_parameters has {len(fixed)} entries, expected {n}"
                )
        free = ~fixed
        if not np.any(free):
            raise ConfigurationError("all parameters are fixed, nothing to calibrate")

        start = self.params()
        full_constraint = self.constraint()

        def include(x):
            full = start.copy()
            full[free] = x
            return full

        def residuals(x):
            self.set_params(include(x))
            return np.array([h.calibration_error() for h in helpers]) * sqrt_weights

        problem = Problem(residuals, lambda x: full_constraint.test(include(x)), start[free])

        logger.info(f"Calibrating {type(self).__name__} ({int(free.sum())} free parameters) "
                    f"to {len(helpers)} helpers")
        with Timer(f"{type(self).__name__} calibration", log_level=logging.DEBUG):
            solution, reason = optimizer.minimize(problem, end_criteria)

        self.set_params(include(solution))
        self.end_criteria = reason
        self.problem_values = problem.current_value.copy()
        self.function_evaluations = problem.function_evaluations

        result = CalibrationResult(
            params=self.params(),
            end_criteria=reason,
            state=problem.state,
            iterations=problem.iterations,
            function_evaluations=problem.function_evaluations,
            sum_of_squares=float(problem.function_value),
            history=list(problem.history),
        )
        logger.info(f"Calibration finished ({reason.value}, {problem.state.value}) after "
                    f"{problem.iterations} iterations: sum of squares {result.sum_of_squares:.8g}")
        return result

    def __repr__(self) -> str:
        inner = ", ".join(f"{p.name}={p.value:.6g}" for p in self._parameters)
        return f"{type(self).__name__}({inner})"
