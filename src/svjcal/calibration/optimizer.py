"""
Least-squares optimizer driving model calibration.

``LevenbergMarquardt`` wraps ``scipy.optimize.least_squares(method="lm")``
and layers on top of it the termination bookkeeping that MINPACK does not
know about: an iteration cap, stationary-state detection on both the cost
and the parameter step, and a best-point record that survives early stops.
"""

import logging
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

import numpy as np
from scipy.optimize import least_squares

from ..errors import ConfigurationError, NumericalWarning

logger = logging.getLogger(__name__)


class EndCriteriaType(Enum):
    """Why an optimization stopped."""
    NONE = "none"
    MAX_ITERATIONS = "max_iterations"
    STATIONARY_POINT = "stationary_point"
    STATIONARY_FUNCTION_VALUE = "stationary_function_value"
    STATIONARY_FUNCTION_ACCURACY = "stationary_function_accuracy"
    ZERO_GRADIENT_NORM = "zero_gradient_norm"
    UNKNOWN = "unknown"


class CalibrationState(Enum):
    """Lifecycle of a calibration run."""
    INITIALIZED = "initialized"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_ITERATIONS_EXCEEDED = "max_iterations_exceeded"
    STALLED = "stalled"


@dataclass(frozen=True)
class EndCriteria:
    """
    Termination thresholds for an optimization run.

    Attributes:
        max_iterations: Hard cap on iterations
        max_stationary_state_iterations: Consecutive iterations without
            progress tolerated before the run counts as stalled
        root_epsilon: Step-size tolerance on the parameter vector
        function_epsilon: Tolerance on changes of the cost function
        gradient_norm_epsilon: Tolerance on the norm of the cost gradient
    """
    max_iterations: int = 1000
    max_stationary_state_iterations: int = 100
    root_epsilon: float = 1e-8
    function_epsilon: float = 1e-8
    gradient_norm_epsilon: float = 1e-8

    def __post_init__(self):
        if self.max_iterations <= 0:
            raise ConfigurationError(f"max_iterations ({self.max_iterations}) must be positive")
        if self.max_stationary_state_iterations <= 0:
            raise ConfigurationError(
                f"max_stationary_state_iterations ({self.max_stationary_state_iterations}) "
                "must be positive"
            )
        for name in ("root_epsilon", "function_epsilon", "gradient_norm_epsilon"):
            if getattr(self, name) < 0.0:
                raise ConfigurationError(f"{name} ({getattr(self, name)}) must be non-negative")

    def check_max_iterations(self, iteration: int) -> Optional[EndCriteriaType]:
        if iteration < self.max_iterations:
            return None
        return EndCriteriaType.MAX_ITERATIONS

    def check_stationary_function_value(self, f_old: float, f_new: float,
                                        stationary_count: int) -> Tuple[int, Optional[EndCriteriaType]]:
        """Update the stationary counter with a cost change; returns (count, reason)."""
        if abs(f_new - f_old) >= self.function_epsilon:
            return 0, None
        stationary_count += 1
        if stationary_count <= self.max_stationary_state_iterations:
            return stationary_count, None
        return stationary_count, EndCriteriaType.STATIONARY_FUNCTION_VALUE

    def check_stationary_point(self, x_step: float,
                               stationary_count: int) -> Tuple[int, Optional[EndCriteriaType]]:
        """Update the stationary counter with a step norm; returns (count, reason)."""
        if x_step >= self.root_epsilon:
            return 0, None
        stationary_count += 1
        if stationary_count <= self.max_stationary_state_iterations:
            return stationary_count, None
        return stationary_count, EndCriteriaType.STATIONARY_POINT

    def check_zero_gradient_norm(self, gradient_norm: float) -> Optional[EndCriteriaType]:
        if gradient_norm >= self.gradient_norm_epsilon:
            return None
        return EndCriteriaType.ZERO_GRADIENT_NORM


class Problem:
    """
    A constrained least-squares problem plus the statistics of its last run.

    Args:
        residuals: Callable mapping a parameter vector to the residual vector
        constraint: Callable returning False for infeasible vectors
        initial_value: Starting point
    """

    def __init__(self, residuals: Callable[[np.ndarray], np.ndarray],
                 constraint: Callable[[np.ndarray], bool], initial_value):
        self.residuals = residuals
        self.constraint = constraint
        self.initial_value = np.asarray(initial_value, dtype=float).copy()
        self.reset()

    def reset(self) -> None:
        self.current_value = self.initial_value.copy()
        self.function_value = None
        self.function_evaluations = 0
        self.iterations = 0
        self.history: List[float] = []
        self.state = CalibrationState.INITIALIZED

    def values(self, x: np.ndarray) -> np.ndarray:
        self.function_evaluations += 1
        return np.asarray(self.residuals(x), dtype=float)

    def value(self, x: np.ndarray) -> float:
        r = self.values(x)
        return float(np.dot(r, r))


class _StopOptimization(Exception):
    """Raised from inside the scipy callbacks to end a run early."""

    def __init__(self, reason: EndCriteriaType, state: CalibrationState):
        super().__init__(reason.value)
        self.reason = reason
        self.state = state


_STATUS_REASONS = {
    0: EndCriteriaType.MAX_ITERATIONS,
    1: EndCriteriaType.ZERO_GRADIENT_NORM,
    2: EndCriteriaType.STATIONARY_FUNCTION_VALUE,
    3: EndCriteriaType.STATIONARY_POINT,
    4: EndCriteriaType.STATIONARY_FUNCTION_ACCURACY,
}


class LevenbergMarquardt:
    """
    Levenberg-Marquardt least-squares minimizer.

    The Jacobian is a forward difference with step ``sqrt(epsfcn) * |x_j|``
    (``sqrt(epsfcn)`` at zero). Each Jacobian request at a new point starts
    one iteration; the stationary-state counters are checked there, and the
    run stops at the request following the ``max_iterations``-th step.
    Points violating the problem constraint get the initial residuals, which
    pushes the trust region back towards feasible territory.

    Args:
        epsfcn: Relative error of the function values, sets the difference step
        xtol: MINPACK relative tolerance on the parameter step
        gtol: MINPACK orthogonality tolerance between residuals and Jacobian
    """

    def __init__(self, epsfcn: float = 1e-8, xtol: float = 1e-8, gtol: float = 1e-8):
        if epsfcn <= 0.0:
            raise ConfigurationError(f"epsfcn ({epsfcn}) must be positive")
        self.epsfcn = epsfcn
        self.xtol = xtol
        self.gtol = gtol

    def minimize(self, problem: Problem,
                 end_criteria: EndCriteria) -> Tuple[np.ndarray, EndCriteriaType]:
        """
        Minimize ``problem`` and return the best point found with the reason it stopped.

        The problem's ``state``, ``iterations``, ``function_evaluations``,
        ``function_value`` and ``history`` describe the run afterwards.
        """
        problem.reset()
        x0 = problem.initial_value.copy()
        if not problem.constraint(x0):
            raise ConfigurationError(f"initial guess {x0} violates the model constraints")

        initial_residuals = problem.values(x0)
        best = {"x": x0.copy(), "cost": float(np.dot(initial_residuals, initial_residuals))}
        last = {"x": x0.copy(), "r": initial_residuals}
        tracking = {"cost": best["cost"], "x": x0.copy(), "f_count": 0, "x_count": 0}
        last_jacobian = {"x": None, "J": None}
        problem.state = CalibrationState.ITERATING
        eps = np.finfo(float).eps

        logger.debug(f"Initial sum of squares: {best['cost']:.10g}")

        def residuals(x):
            x = np.array(x, dtype=float)
            if np.array_equal(x, last["x"]):
                return last["r"].copy()
            if not problem.constraint(x):
                r = initial_residuals.copy()
            else:
                r = problem.values(x)
                cost = float(np.dot(r, r))
                if np.isfinite(cost) and cost < best["cost"]:
                    best["x"], best["cost"] = x.copy(), cost
            last["x"], last["r"] = x.copy(), r
            return r.copy()

        def jacobian(x):
            x = np.array(x, dtype=float)
            # scipy asks for J(x0) once itself before the first MINPACK iteration
            if last_jacobian["x"] is not None and np.array_equal(x, last_jacobian["x"]):
                return last_jacobian["J"].copy()
            f0 = residuals(x)
            cost = float(np.dot(f0, f0))

            # every completed iteration requested one Jacobian before its step
            if end_criteria.check_max_iterations(problem.iterations) is not None:
                raise _StopOptimization(EndCriteriaType.MAX_ITERATIONS,
                                        CalibrationState.MAX_ITERATIONS_EXCEEDED)

            problem.iterations += 1
            problem.history.append(cost)
            logger.debug(f"Iteration {problem.iterations}: sum of squares {cost:.10g}")

            if problem.iterations > 1:
                tracking["f_count"], reason = end_criteria.check_stationary_function_value(
                    tracking["cost"], cost, tracking["f_count"])
                if reason is None:
                    step = float(np.linalg.norm(x - tracking["x"]))
                    tracking["x_count"], reason = end_criteria.check_stationary_point(
                        step, tracking["x_count"])
                if reason is not None:
                    raise _StopOptimization(reason, CalibrationState.STALLED)
            tracking["cost"], tracking["x"] = cost, x.copy()

            sqrt_eps = np.sqrt(self.epsfcn)
            jac = np.empty((len(f0), len(x)))
            for j in range(len(x)):
                h = sqrt_eps * abs(x[j])
                if h == 0.0:
                    h = sqrt_eps
                shifted = x.copy()
                shifted[j] += h
                jac[:, j] = (residuals(shifted) - f0) / h

            gradient_norm = float(np.linalg.norm(2.0 * jac.T @ f0))
            if end_criteria.check_zero_gradient_norm(gradient_norm) is not None:
                raise _StopOptimization(EndCriteriaType.ZERO_GRADIENT_NORM,
                                        CalibrationState.CONVERGED)
            last_jacobian["x"], last_jacobian["J"] = x.copy(), jac
            return jac.copy()

        try:
            result = least_squares(
                residuals,
                x0=x0,
                jac=jacobian,
                method="lm",
                ftol=max(end_criteria.function_epsilon, eps),
                xtol=max(self.xtol, eps),
                gtol=max(self.gtol, eps),
                max_nfev=100 * end_criteria.max_iterations * (len(x0) + 1),
            )
            reason = _STATUS_REASONS.get(result.status, EndCriteriaType.UNKNOWN)
            if reason == EndCriteriaType.MAX_ITERATIONS:
                problem.state = CalibrationState.MAX_ITERATIONS_EXCEEDED
            elif result.status > 0:
                problem.state = CalibrationState.CONVERGED
            else:
                problem.state = CalibrationState.STALLED
            final = np.asarray(result.x, dtype=float)
            if problem.constraint(final):
                r = residuals(final)
                cost = float(np.dot(r, r))
                if cost <= best["cost"]:
                    best["x"], best["cost"] = final.copy(), cost
        except _StopOptimization as stop:
            reason = stop.reason
            problem.state = stop.state

        if reason == EndCriteriaType.MAX_ITERATIONS:
            message = (f"optimization stopped at the iteration cap ({end_criteria.max_iterations}) "
                       f"with sum of squares {best['cost']:.10g}")
            logger.warning(message)
            warnings.warn(message, NumericalWarning, stacklevel=2)

        problem.current_value = best["x"]
        problem.function_value = best["cost"]
        logger.debug(f"Optimization finished: {reason.value}, {problem.state.value}, "
                     f"{problem.iterations} iterations, {problem.function_evaluations} evaluations")
        return best["x"].copy(), reason


@dataclass
class CalibrationResult:
    """
    Outcome of a calibration run.

    Unpacks as ``(params, end_criteria)``, the final parameters and the
    termination reason.
    """
    params: np.ndarray
    end_criteria: EndCriteriaType
    state: CalibrationState
    iterations: int = 0
    function_evaluations: int = 0
    sum_of_squares: float = float("nan")
    history: List[float] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.state == CalibrationState.CONVERGED

    def __iter__(self):
        yield self.params
        yield self.end_criteria
