"""
Bates-family models: Heston plus jumps in the log-spot.

* ``BatesModel``: Poisson jumps with lognormal sizes.
* ``BatesDetJumpModel``: same jump sizes, intensity reverting
  deterministically from ``lambda`` to ``theta_lambda`` at speed ``kappa_lambda``.
* ``BatesDoubleExpModel``: double-exponential (Kou) log-jump sizes.
* ``BatesDoubleExpDetJumpModel``: double-exponential sizes with the
  deterministic intensity path.
"""

import logging
from typing import Optional

from ..processes import BatesProcess, HestonProcess
from .heston import HestonModel
from .parameters import BoundaryConstraint, NoConstraint, Parameter, PositiveConstraint

logger = logging.getLogger(__name__)


def _seed(value, process, attribute: str, default: float) -> float:
    """Explicit value, else the BatesProcess attribute, else ``default``."""
    if value is not None:
        return value
    if isinstance(process, BatesProcess):
        return getattr(process, attribute)
    return default


class BatesModel(HestonModel):
    """
    Vector layout: ``[theta, kappa, sigma, rho, v0, nu, delta, lambda]``.

    Jump parameters left as None are copied from a ``BatesProcess``, or
    default to ``lambda=0.1, nu=0, delta=0.1`` for a plain Heston process.
    """

    def __init__(self, process: HestonProcess, lambda_: Optional[float] = None,
                 nu: Optional[float] = None, delta: Optional[float] = None,
                 extra_parameters=()):
        lambda_ = _seed(lambda_, process, "lambda_", 0.1)
        nu = _seed(nu, process, "nu", 0.0)
        delta = _seed(delta, process, "delta", 0.1)
        jumps = [
            Parameter("nu", nu, NoConstraint()),
            Parameter("delta", delta, PositiveConstraint()),
            Parameter("lambda", lambda_, PositiveConstraint()),
        ]
        super().__init__(process, jumps + list(extra_parameters))

    @property
    def nu(self) -> float:
        return self._parameter(5)

    @property
    def delta(self) -> float:
        return self._parameter(6)

    @property
    def lambda_(self) -> float:
        return self._parameter(7)


class BatesDetJumpModel(BatesModel):
    """Vector layout: Bates plus ``[kappa_lambda, theta_lambda]``."""

    def __init__(self, process: HestonProcess, lambda_: Optional[float] = None,
                 nu: Optional[float] = None, delta: Optional[float] = None,
                 kappa_lambda: float = 1.0, theta_lambda: float = 0.1):
        intensity = [
            Parameter("kappa_lambda", kappa_lambda, PositiveConstraint()),
            Parameter("theta_lambda", theta_lambda, PositiveConstraint()),
        ]
        super().__init__(process, lambda_, nu, delta, intensity)

    @property
    def kappa_lambda(self) -> float:
        return self._parameter(8)

    @property
    def theta_lambda(self) -> float:
        return self._parameter(9)


class BatesDoubleExpModel(HestonModel):
    """
    Vector layout: ``[theta, kappa, sigma, rho, v0, p, nu_down, nu_up, lambda]``.

    ``p`` is the probability of an up-jump; ``nu_up`` and ``nu_down`` are
    the mean sizes of up- and down-jumps in log-spot. Only the intensity
    can come from a ``BatesProcess``; its jump sizes are lognormal.
    """

    def __init__(self, process: HestonProcess, lambda_: Optional[float] = None,
                 nu_up: float = 0.1, nu_down: float = 0.1, p: float = 0.5,
                 extra_parameters=()):
        lambda_ = _seed(lambda_, process, "lambda_", 0.1)
        jumps = [
            Parameter("p", p, BoundaryConstraint(0.0, 1.0)),
            Parameter("nu_down", nu_down, PositiveConstraint()),
            Parameter("nu_up", nu_up, PositiveConstraint()),
            Parameter("lambda", lambda_, PositiveConstraint()),
        ]
        super().__init__(process, jumps + list(extra_parameters))

    @property
    def p(self) -> float:
        return self._parameter(5)

    @property
    def nu_down(self) -> float:
        return self._parameter(6)

    @property
    def nu_up(self) -> float:
        return self._parameter(7)

    @property
    def lambda_(self) -> float:
        return self._parameter(8)


class BatesDoubleExpDetJumpModel(BatesDoubleExpModel):
    """Vector layout: double-exponential Bates plus ``[kappa_lambda, theta_lambda]``."""

    def __init__(self, process: HestonProcess, lambda_: Optional[float] = None,
                 nu_up: float = 0.1, nu_down: float = 0.1, p: float = 0.5, kappa_lambda: float = 1.0,
                 theta_lambda: float = 0.1):
        intensity = [
            Parameter("kappa_lambda", kappa_lambda, PositiveConstraint()),
            Parameter("theta_lambda", theta_lambda, PositiveConstraint()),
        ]
        super().__init__(process, lambda_, nu_up, nu_down, p, intensity)

    @property
    def kappa_lambda(self) -> float:
        return self._parameter(9)

    @property
    def theta_lambda(self) -> float:
        return self._parameter(10)
