"""
Stochastic process descriptions.

Processes only carry market data (spot, curves) and the dynamics'
parameters; models copy the parameters at construction and engines read
curves and spot from here.
"""

import logging
from datetime import date
from typing import Union

from .errors import DomainError
from .patterns.observable import Observable, Observer
from .quotes import SimpleQuote, as_quote
from .termstructures.blackvol import BlackConstantVol
from .termstructures.yields import YieldTermStructure

logger = logging.getLogger(__name__)


class _EquityProcess(Observer, Observable):
    """Spot quote plus risk-free and dividend curves, with change forwarding."""

    def __init__(self, risk_free: YieldTermStructure, dividend: YieldTermStructure,
                 s0: Union[float, SimpleQuote]):
        self.risk_free = risk_free
        self.dividend = dividend
        self.s0 = as_quote(s0)
        self.register_with_all([self.risk_free, self.dividend, self.s0])

    def update(self) -> None:
        self.notify_observers()

    def spot(self) -> float:
        value = self.s0.value()
        if value <= 0.0:
            raise DomainError(f"non-positive spot ({value})")
        return value

    def time(self, d: date) -> float:
        """Time from the risk-free curve's reference date."""
        return self.risk_free.time_from_reference(d)


class HestonProcess(_EquityProcess):
    """
    Heston stochastic-variance process.

        dS/S = (r - q) dt + sqrt(v) dW1
        dv   = kappa (theta - v) dt + sigma sqrt(v) dW2,   d<W1, W2> = rho dt
    """

    def __init__(self, risk_free: YieldTermStructure, dividend: YieldTermStructure,
                 s0: Union[float, SimpleQuote], v0: float, kappa: float, theta: float,
                 sigma: float, rho: float):
        super().__init__(risk_free, dividend, s0)
        self.v0 = float(v0)
        self.kappa = float(kappa)
        self.theta = float(theta)
        self.sigma = float(sigma)
        self.rho = float(rho)

    def heston_parameters(self) -> dict:
        return {
            "theta": self.theta,
            "kappa": self.kappa,
            "sigma": self.sigma,
            "rho": self.rho,
            "v0": self.v0,
        }

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(v0={self.v0}, kappa={self.kappa}, theta={self.theta}, "
                f"sigma={self.sigma}, rho={self.rho})")


class BatesProcess(HestonProcess):
    """Heston dynamics plus compound-Poisson jumps with lognormal sizes."""

    def __init__(self, risk_free: YieldTermStructure, dividend: YieldTermStructure,
                 s0: Union[float, SimpleQuote], v0: float, kappa: float, theta: float,
                 sigma: float, rho: float, lambda_: float, nu: float, delta: float):
        super().__init__(risk_free, dividend, s0, v0, kappa, theta, sigma, rho)
        self.lambda_ = float(lambda_)
        self.nu = float(nu)
        self.delta = float(delta)


class Merton76Process(_EquityProcess):
    """Black-Scholes diffusion with lognormal jumps (Merton 1976)."""

    def __init__(self, s0: Union[float, SimpleQuote], dividend: YieldTermStructure,
                 risk_free: YieldTermStructure, black_vol: BlackConstantVol,
                 jump_intensity: Union[float, SimpleQuote],
                 log_jump_mean: Union[float, SimpleQuote],
                 log_jump_vol: Union[float, SimpleQuote]):
        super().__init__(risk_free, dividend, s0)
        self.black_vol = black_vol
        self.jump_intensity = as_quote(jump_intensity)
        self.log_jump_mean = as_quote(log_jump_mean)
        self.log_jump_vol = as_quote(log_jump_vol)
        self.register_with_all([self.black_vol, self.jump_intensity,
                                self.log_jump_mean, self.log_jump_vol])
