"""
Monte-Carlo pricing of European options under Heston and Bates dynamics.

Variance is stepped with Andersen's quadratic-exponential (QE) scheme and
log-spot with the martingale-corrected central discretisation, so the
simulated forward is unbiased for any step size. Bates processes add one
compensated compound-Poisson lognormal jump per step.

Samples are produced in fixed-size batches. Batch ``i`` always draws from
the ``i``-th child of ``SeedSequence(seed)``, and batches are aggregated in
index order, so a given seed yields the same estimate whatever the number
of worker threads.

References:
    - Andersen (2008), "Simple and efficient simulation of the Heston
      stochastic volatility model", Journal of Computational Finance
"""

import logging
import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import numpy as np
from scipy.special import ndtr
from scipy.stats import poisson

from ..errors import CalculationError, ConfigurationError, NumericalWarning
from ..instruments import OptionType, PricingResults, VanillaOption
from ..processes import BatesProcess, HestonProcess
from ..utils.timers import Timer
from .base import PricingEngine, option_terms

logger = logging.getLogger(__name__)

PSI_CRITICAL = 1.5
GAMMA1 = 0.5
GAMMA2 = 0.5
MIN_SAMPLES = 1023


class MCEuropeanHestonEngine(PricingEngine):
    """
    Monte-Carlo engine for ``HestonProcess`` and ``BatesProcess``.

    Exactly one of ``time_steps``/``steps_per_year`` and at least one of
    ``required_samples``/``required_tolerance`` must be given.

    Args:
        process: HestonProcess or BatesProcess (jumps are simulated for the latter)
        time_steps: Fixed number of steps to expiry
        steps_per_year: Steps per year of time to expiry (at least one step)
        antithetic: Pair every path with its mirror image
        required_samples: Fixed number of samples
        required_tolerance: Target standard error of the estimate
        max_samples: Cap on samples when targeting a tolerance
        seed: Seed of the root ``SeedSequence``
        batch_size: Samples per batch
        n_workers: Threads simulating batches concurrently
    """

    def __init__(self, process: HestonProcess, time_steps: Optional[int] = None,
                 steps_per_year: Optional[int] = None, antithetic: bool = True,
                 required_samples: Optional[int] = None,
                 required_tolerance: Optional[float] = None,
                 max_samples: int = 1_000_000, seed: int = 0, batch_size: int = 1024,
                 n_workers: int = 1):
        if not isinstance(process, HestonProcess):
            raise ConfigurationError(
                f"{type(self).__name__} requires a HestonProcess, got {type(process).__name__}"
            )
        if (time_steps is None) == (steps_per_year is None):
            raise ConfigurationError("give exactly one of time_steps and steps_per_year")
        if time_steps is not None and time_steps <= 0:
            raise ConfigurationError(f"time_steps ({time_steps}) must be positive")
        if steps_per_year is not None and steps_per_year <= 0:
            raise ConfigurationError(f"steps_per_year ({steps_per_year}) must be positive")
        if required_samples is None and required_tolerance is None:
            raise ConfigurationError("give required_samples or required_tolerance")
        if required_tolerance is not None and required_tolerance <= 0.0:
            raise ConfigurationError(f"required_tolerance ({required_tolerance}) must be positive")
        if batch_size <= 0 or n_workers <= 0 or max_samples <= 0:
            raise ConfigurationError("batch_size, n_workers and max_samples must be positive")

        self.process = process
        self.time_steps = time_steps
        self.steps_per_year = steps_per_year
        self.antithetic = antithetic
        self.required_samples = required_samples
        self.required_tolerance = required_tolerance
        self.max_samples = max_samples
        self.seed = seed
        self.batch_size = batch_size
        self.n_workers = n_workers
        self.register_with(process)

    def _steps(self, t: float) -> int:
        if self.time_steps is not None:
            return self.time_steps
        return max(int(self.steps_per_year * t), 1)

    def _drifts(self, times: np.ndarray) -> np.ndarray:
        """(r - q) dt per step from the curves' forward discount ratios."""
        risk_free = np.array([self.process.risk_free.discount(t) for t in times])
        dividend = np.array([self.process.dividend.discount(t) for t in times])
        return np.log(dividend[1:] / dividend[:-1] * risk_free[:-1] / risk_free[1:])

    def _simulate_batch(self, index: int, setup: dict) -> np.ndarray:
        """Discounted payoff samples for batch ``index``."""
        rng = np.random.default_rng(np.random.SeedSequence(self.seed, spawn_key=(index,)))
        n = self.batch_size
        n_steps = setup["n_steps"]
        jumps = setup["jumps"]
        n_factors = 4 if jumps else 2
        normals = rng.standard_normal((n_steps, n_factors, n))

        value = self._payoff_along(normals, setup)
        if self.antithetic:
            value = 0.5 * (value + self._payoff_along(-normals, setup))
        return value

    def _payoff_along(self, normals: np.ndarray, setup: dict) -> np.ndarray:
        process = self.process
        kappa, theta, sigma, rho = process.kappa, process.theta, process.sigma, process.rho
        dt = setup["dt"]
        n_paths = normals.shape[2]

        x = np.full(n_paths, np.log(setup["spot"]))
        v = np.full(n_paths, process.v0)

        decay = np.exp(-kappa * dt)
        k1 = GAMMA1 * dt * (kappa * rho / sigma - 0.5) - rho / sigma
        k2 = GAMMA2 * dt * (kappa * rho / sigma - 0.5) + rho / sigma
        k3 = GAMMA1 * dt * (1.0 - rho * rho)
        k4 = GAMMA2 * dt * (1.0 - rho * rho)
        big_a = k2 + 0.5 * k4

        if setup["jumps"]:
            lambda_dt = process.lambda_ * dt
            compensator = -process.lambda_ * (np.exp(process.nu + 0.5 * process.delta ** 2) - 1.0) * dt

        for step in range(normals.shape[0]):
            z_v, z_x = normals[step, 0], normals[step, 1]

            m = theta + (v - theta) * decay
            s2 = (v * sigma * sigma * decay * (1.0 - decay) / kappa
                  + theta * sigma * sigma * (1.0 - decay) ** 2 / (2.0 * kappa))
            psi = s2 / (m * m)
            quadratic = psi <= PSI_CRITICAL

            v_next = np.empty_like(v)
            k0 = np.empty_like(v)

            # quadratic branch: v' = a (b + Z)^2
            if np.any(quadratic):
                psi_q, m_q = psi[quadratic], m[quadratic]
                b2 = 2.0 / psi_q - 1.0 + np.sqrt(2.0 / psi_q) * np.sqrt(2.0 / psi_q - 1.0)
                a = m_q / (1.0 + b2)
                v_next[quadratic] = a * (np.sqrt(b2) + z_v[quadratic]) ** 2
                if np.any(1.0 - 2.0 * big_a * a <= 0.0):
                    raise CalculationError("QE martingale correction undefined (1 - 2 A a <= 0)")
                k0[quadratic] = (-big_a * b2 * a / (1.0 - 2.0 * big_a * a)
                                 + 0.5 * np.log(1.0 - 2.0 * big_a * a))

            # exponential branch: mass p at zero, exponential tail
            exponential = ~quadratic
            if np.any(exponential):
                psi_e, m_e = psi[exponential], m[exponential]
                p = (psi_e - 1.0) / (psi_e + 1.0)
                beta = (1.0 - p) / m_e
                u = ndtr(z_v[exponential])
                tail = u > p
                draw = np.zeros_like(u)
                draw[tail] = np.log((1.0 - p[tail]) / (1.0 - u[tail])) / beta[tail]
                v_next[exponential] = draw
                if np.any(beta <= big_a):
                    raise CalculationError("QE martingale correction undefined (beta <= A)")
                k0[exponential] = -np.log(p + beta * (1.0 - p) / (beta - big_a))

            k0 -= (k1 + 0.5 * k3) * v
            x = (x + setup["drifts"][step] + k0 + k1 * v + k2 * v_next
                 + np.sqrt(np.maximum(k3 * v + k4 * v_next, 0.0)) * z_x)

            if setup["jumps"]:
                u = np.clip(ndtr(normals[step, 2]), np.finfo(float).tiny, 1.0 - np.finfo(float).eps)
                n_jumps = poisson.ppf(u, lambda_dt)
                x = x + compensator + n_jumps * process.nu + np.sqrt(n_jumps) * process.delta * normals[step, 3]

            v = v_next

        spot_t = np.exp(x)
        omega = setup["omega"]
        return setup["discount"] * np.maximum(omega * (spot_t - setup["strike"]), 0.0)

    def _run_batches(self, indices: List[int], setup: dict) -> List[np.ndarray]:
        if self.n_workers == 1 or len(indices) == 1:
            return [self._simulate_batch(i, setup) for i in indices]
        with ThreadPoolExecutor(max_workers=self.n_workers) as executor:
            return list(executor.map(lambda i: self._simulate_batch(i, setup), indices))

    def _add_samples(self, samples: List[np.ndarray], count: int, setup: dict) -> None:
        """Append ``count`` samples, continuing the batch sequence."""
        have = sum(len(s) for s in samples)
        first_batch = have // self.batch_size
        n_batches = -(-(have + count) // self.batch_size) - first_batch
        indices = list(range(first_batch, first_batch + n_batches))
        # a truncated tail batch is re-drawn in full and prefix-sliced
        offset = have - first_batch * self.batch_size
        if offset:
            samples.pop()
        fresh = self._run_batches(indices, setup)
        combined = np.concatenate(fresh)[: offset + count]
        for start in range(0, len(combined), self.batch_size):
            samples.append(combined[start:start + self.batch_size])

    @staticmethod
    def _statistics(samples: List[np.ndarray]):
        data = np.concatenate(samples)
        mean = float(np.mean(data))
        error = float(np.std(data, ddof=1) / np.sqrt(len(data))) if len(data) > 1 else float("inf")
        return mean, error, len(data)

    def calculate(self, option: VanillaOption) -> PricingResults:
        spot, strike, t, dr, dq = option_terms(self.process, option)
        n_steps = self._steps(t)
        times = np.linspace(0.0, t, n_steps + 1)
        setup = {
            "spot": spot,
            "strike": strike,
            "discount": dr,
            "omega": 1.0 if option.payoff.option_type == OptionType.CALL else -1.0,
            "n_steps": n_steps,
            "dt": t / n_steps,
            "drifts": self._drifts(times),
            "jumps": isinstance(self.process, BatesProcess),
        }

        samples: List[np.ndarray] = []
        with Timer(f"{type(self).__name__} simulation", log_level=logging.DEBUG):
            if self.required_tolerance is None:
                self._add_samples(samples, self.required_samples, setup)
                mean, error, n = self._statistics(samples)
            else:
                self._add_samples(samples, self.required_samples or MIN_SAMPLES, setup)
                mean, error, n = self._statistics(samples)
                tolerance = self.required_tolerance
                while error > tolerance and n < self.max_samples:
                    order = error * error / (tolerance * tolerance)
                    next_batch = int(max(n * order * 0.8 - n, MIN_SAMPLES))
                    next_batch = min(next_batch, self.max_samples - n)
                    self._add_samples(samples, next_batch, setup)
                    mean, error, n = self._statistics(samples)
                if error > tolerance:
                    message = (f"Monte-Carlo error {error:.6g} above tolerance {tolerance:.6g} "
                               f"at the sample cap ({self.max_samples})")
                    logger.warning(message)
                    warnings.warn(message, NumericalWarning, stacklevel=2)

        logger.debug(f"MC price {mean:.8g} +/- {error:.3g} from {n} samples, {n_steps} steps")
        return PricingResults(value=mean, error_estimate=error)
