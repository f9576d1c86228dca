"""
Bates-family engines.

Each engine is the Heston engine plus the jump contribution to the
characteristic exponent, supplied through ``add_on_term``. ``g`` below is
the transform argument ``1 + i phi`` for P1 and ``i phi`` for P2.
"""

import logging

import numpy as np

from ..models.bates import (
    BatesDetJumpModel,
    BatesDoubleExpDetJumpModel,
    BatesDoubleExpModel,
    BatesModel,
)
from .heston_analytic import AnalyticHestonEngine

logger = logging.getLogger(__name__)


def _transform_argument(phi: np.ndarray, j: int) -> np.ndarray:
    return (1.0 if j == 1 else 0.0) + 1j * phi


def _deterministic_intensity(lambda_: float, kappa_lambda: float, theta_lambda: float,
                             t: float) -> float:
    """Integral over [0, t] of an intensity reverting from lambda to theta_lambda."""
    return theta_lambda * t + (lambda_ - theta_lambda) * (1.0 - np.exp(-kappa_lambda * t)) / kappa_lambda


class BatesEngine(AnalyticHestonEngine):
    """Heston plus compound-Poisson jumps with lognormal sizes."""

    model_type = BatesModel

    def _jump_term(self, phi: np.ndarray, j: int) -> np.ndarray:
        """Per unit of integrated intensity."""
        nu, delta = self.model.nu, self.model.delta
        delta2 = 0.5 * delta * delta
        g = _transform_argument(phi, j)
        return (np.exp(nu * g + delta2 * g * g) - 1.0
                - g * (np.exp(nu + delta2) - 1.0))

    def add_on_term(self, phi: np.ndarray, t: float, j: int) -> np.ndarray:
        return t * self.model.lambda_ * self._jump_term(phi, j)


class BatesDetJumpEngine(BatesEngine):
    """Lognormal jumps arriving with a deterministic mean-reverting intensity."""

    model_type = BatesDetJumpModel

    def add_on_term(self, phi: np.ndarray, t: float, j: int) -> np.ndarray:
        model = self.model
        intensity = _deterministic_intensity(model.lambda_, model.kappa_lambda,
                                             model.theta_lambda, t)
        return self._jump_term(phi, j) * intensity


class BatesDoubleExpEngine(AnalyticHestonEngine):
    """Heston plus jumps with double-exponential log sizes."""

    model_type = BatesDoubleExpModel

    def _jump_term(self, phi: np.ndarray, j: int) -> np.ndarray:
        model = self.model
        p, nu_up, nu_down = model.p, model.nu_up, model.nu_down
        g = _transform_argument(phi, j)
        return (p / (1.0 - g * nu_up) + (1.0 - p) / (1.0 + g * nu_down) - 1.0
                - g * (p / (1.0 - nu_up) + (1.0 - p) / (1.0 + nu_down) - 1.0))

    def add_on_term(self, phi: np.ndarray, t: float, j: int) -> np.ndarray:
        return t * self.model.lambda_ * self._jump_term(phi, j)


class BatesDoubleExpDetJumpEngine(BatesDoubleExpEngine):
    model_type = BatesDoubleExpDetJumpModel

    def add_on_term(self, phi: np.ndarray, t: float, j: int) -> np.ndarray:
        model = self.model
        intensity = _deterministic_intensity(model.lambda_, model.kappa_lambda,
                                             model.theta_lambda, t)
        return self._jump_term(phi, j) * intensity


_ANALYTIC_ENGINES = [
    (BatesDoubleExpDetJumpModel, BatesDoubleExpDetJumpEngine),
    (BatesDoubleExpModel, BatesDoubleExpEngine),
    (BatesDetJumpModel, BatesDetJumpEngine),
    (BatesModel, BatesEngine),
]


def analytic_engine_for(model, integration_order: int = 144) -> AnalyticHestonEngine:
    """Semi-closed-form engine matching the model's family (most derived first)."""
    for model_type, engine_type in _ANALYTIC_ENGINES:
        if isinstance(model, model_type):
            return engine_type(model, integration_order)
    return AnalyticHestonEngine(model, integration_order)
