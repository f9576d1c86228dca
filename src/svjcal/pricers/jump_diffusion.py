"""
Merton (1976) jump-diffusion pricing by Poisson-weighted Black prices.

Conditional on ``n`` jumps before expiry the log-spot is Gaussian with
variance ``sigma^2 T + n delta^2`` and forward

    F_n = F exp(-lambda k T + n (nu + delta^2 / 2)),   k = exp(nu + delta^2 / 2) - 1,

so the price is ``sum_n Poisson(n; lambda T) * Dr * Black(F_n, K, sqrt(var_n))``.
"""

import logging
import math

from ..errors import ConfigurationError
from ..instruments import PricingResults, VanillaOption
from ..processes import Merton76Process
from .base import PricingEngine, option_terms
from .black import black_formula

logger = logging.getLogger(__name__)


class JumpDiffusionEngine(PricingEngine):
    """
    Series engine for the Merton-76 process.

    Args:
        process: Merton76Process
        relative_accuracy: Stop once a term adds less than this fraction of the value
        max_iterations: Cap on the number of series terms
    """

    def __init__(self, process: Merton76Process, relative_accuracy: float = 1e-4,
                 max_iterations: int = 100):
        if not isinstance(process, Merton76Process):
            raise ConfigurationError(
                f"{type(self).__name__} requires a Merton76Process, got {type(process).__name__}"
            )
        if relative_accuracy <= 0.0 or max_iterations <= 0:
            raise ConfigurationError("relative accuracy and max iterations must be positive")
        self.process = process
        self.relative_accuracy = relative_accuracy
        self.max_iterations = max_iterations
        self.register_with(process)

    def calculate(self, option: VanillaOption) -> PricingResults:
        process = self.process
        spot, strike, t, dr, dq = option_terms(process, option)
        option_type = option.payoff.option_type

        intensity = process.jump_intensity.value()
        nu = process.log_jump_mean.value()
        delta = process.log_jump_vol.value()
        jump_variance = delta * delta
        mean_log_jump = nu + 0.5 * jump_variance
        k = math.exp(mean_log_jump) - 1.0

        forward = spot * dq / dr
        variance = process.black_vol.black_variance(t, strike)
        mean_jumps = intensity * t

        weight = math.exp(-mean_jumps)
        value = 0.0
        n = 0
        while n < self.max_iterations:
            forward_n = forward * math.exp(-intensity * k * t + n * mean_log_jump)
            std_dev = math.sqrt(variance + n * jump_variance)
            contribution = weight * black_formula(option_type, strike, forward_n, std_dev, dr)
            value += contribution

            n += 1
            converged = value != 0.0 and abs(contribution / value) < self.relative_accuracy
            if converged and n > mean_jumps:
                break
            weight *= mean_jumps / n
        else:
            logger.debug(f"Jump-diffusion series stopped at {self.max_iterations} terms")

        return PricingResults(value=value)
