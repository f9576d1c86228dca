import logging

import numpy as np
from scipy.optimize import brentq
from scipy.special import ndtr
from scipy.stats import norm

from ..errors import CalculationError, DomainError
from ..instruments import OptionType

logger = logging.getLogger(__name__)


def _check_black_inputs(strike: float, forward: float, std_dev: float, discount: float,
                        displacement: float) -> None:
    if strike + displacement < 0.0:
        raise DomainError(f"strike + displacement ({strike} + {displacement}) must be non-negative")
    if forward + displacement <= 0.0:
        raise DomainError(f"forward + displacement ({forward} + {displacement}) must be positive")
    if std_dev < 0.0:
        raise DomainError(f"negative standard deviation ({std_dev})")
    if discount <= 0.0:
        raise DomainError(f"non-positive discount factor ({discount})")


def black_formula(option_type: OptionType, strike: float, forward: float, std_dev: float,
                  discount: float = 1.0, displacement: float = 0.0) -> float:
    """
    Black-76 price of a European option on a forward.

    Args:
        option_type: CALL or PUT
        strike: Strike price
        forward: Forward price of the underlying
        std_dev: Total standard deviation ``vol * sqrt(T)``
        discount: Discount factor applied to the payoff
        displacement: Shift for displaced-diffusion quotes

    Returns:
        Option price
    """
    _check_black_inputs(strike, forward, std_dev, discount, displacement)
    omega = option_type.value
    strike += displacement
    forward += displacement

    if std_dev == 0.0:
        return max((forward - strike) * omega, 0.0) * discount
    if strike == 0.0:
        return forward * discount if option_type == OptionType.CALL else 0.0

    d1 = np.log(forward / strike) / std_dev + 0.5 * std_dev
    d2 = d1 - std_dev
    result = discount * omega * (forward * ndtr(omega * d1) - strike * ndtr(omega * d2))
    return max(float(result), 0.0)


def black_formula_std_dev_derivative(strike: float, forward: float, std_dev: float,
                                     discount: float = 1.0, displacement: float = 0.0) -> float:
    """Derivative of the Black price with respect to the total standard deviation."""
    _check_black_inputs(strike, forward, std_dev, discount, displacement)
    strike += displacement
    forward += displacement
    if std_dev == 0.0 or strike == 0.0:
        return 0.0
    d1 = np.log(forward / strike) / std_dev + 0.5 * std_dev
    return float(discount * forward * norm.pdf(d1))


def black_vega(strike: float, forward: float, volatility: float, maturity: float,
               discount: float = 1.0) -> float:
    """Black vega per unit of volatility."""
    std_dev = volatility * np.sqrt(maturity)
    return black_formula_std_dev_derivative(strike, forward, std_dev, discount) * np.sqrt(maturity)


def black_formula_implied_std_dev(option_type: OptionType, strike: float, forward: float,
                                  price: float, discount: float = 1.0, displacement: float = 0.0,
                                  accuracy: float = 1e-12, max_evaluations: int = 100,
                                  min_std_dev: float = 1e-8, max_std_dev: float = 10.0) -> float:
    """
    Total standard deviation reproducing ``price`` under Black-76.

    Raises:
        DomainError: If the price is below intrinsic value
        CalculationError: If no root is bracketed by ``[min_std_dev, max_std_dev]``
    """
    omega = option_type.value
    intrinsic = max((forward - strike) * omega, 0.0) * discount
    if price < intrinsic:
        raise DomainError(f"option price ({price}) below intrinsic value ({intrinsic})")
    if price == intrinsic:
        return 0.0

    def objective(std_dev):
        return black_formula(option_type, strike, forward, std_dev, discount, displacement) - price

    low, high = objective(min_std_dev), objective(max_std_dev)
    if low * high > 0.0:
        raise CalculationError(
            f"implied standard deviation not bracketed in [{min_std_dev}, {max_std_dev}] "
            f"for price {price}"
        )
    root, info = brentq(objective, min_std_dev, max_std_dev, xtol=accuracy,
                        maxiter=max_evaluations, full_output=True, disp=False)
    if not info.converged:
        raise CalculationError(f"implied standard deviation search failed: {info.flag}")
    return root
