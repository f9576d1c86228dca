"""
YAML-driven calibration settings.

Example ``calibration.yaml``::

    end_criteria:
      max_iterations: 400
      max_stationary_state_iterations: 40
    optimizer:
      epsfcn: 1.0e-8
    helpers:
      calibrate_volatility: true
"""

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..errors import ConfigurationError
from ..utils.config import get_nested_value, load_config, merge_configs
from .optimizer import EndCriteria, LevenbergMarquardt

logger = logging.getLogger(__name__)


@dataclass
class MonteCarloSettings:
    """Settings for ``MCEuropeanHestonEngine``."""
    steps_per_year: int = 10
    antithetic: bool = True
    required_tolerance: Optional[float] = 0.25
    required_samples: Optional[int] = None
    max_samples: int = 1_000_000
    seed: int = 1234
    batch_size: int = 1024
    n_workers: int = 1


@dataclass
class CalibrationConfig:
    """Configuration for a model calibration run."""

    # end criteria
    max_iterations: int = 400
    max_stationary_state_iterations: int = 40
    root_epsilon: float = 1e-8
    function_epsilon: float = 1e-8
    gradient_norm_epsilon: float = 1e-8

    # Levenberg-Marquardt
    epsfcn: float = 1e-8
    xtol: float = 1e-8
    gtol: float = 1e-8

    # helpers and engines
    calibrate_volatility: bool = True
    integration_order: int = 144

    monte_carlo: MonteCarloSettings = field(default_factory=MonteCarloSettings)

    def __post_init__(self):
        if self.integration_order < 1:
            raise ConfigurationError(f"integration_order ({self.integration_order}) must be positive")
        # builds (and so validates) eagerly
        self.end_criteria()
        self.optimizer()

    def end_criteria(self) -> EndCriteria:
        return EndCriteria(
            max_iterations=self.max_iterations,
            max_stationary_state_iterations=self.max_stationary_state_iterations,
            root_epsilon=self.root_epsilon,
            function_epsilon=self.function_epsilon,
            gradient_norm_epsilon=self.gradient_norm_epsilon,
        )

    def optimizer(self) -> LevenbergMarquardt:
        return LevenbergMarquardt(epsfcn=self.epsfcn, xtol=self.xtol, gtol=self.gtol)

    def monte_carlo_engine(self, process):
        from ..pricers.monte_carlo import MCEuropeanHestonEngine

        mc = self.monte_carlo
        return MCEuropeanHestonEngine(
            process,
            steps_per_year=mc.steps_per_year,
            antithetic=mc.antithetic,
            required_samples=mc.required_samples,
            required_tolerance=mc.required_tolerance,
            max_samples=mc.max_samples,
            seed=mc.seed,
            batch_size=mc.batch_size,
            n_workers=mc.n_workers,
        )

    def analytic_engine(self, model):
        from ..pricers.bates import analytic_engine_for

        return analytic_engine_for(model, self.integration_order)

    def to_dict(self) -> Dict[str, Any]:
        flat = asdict(self)
        return {
            "end_criteria": {k: flat[k] for k in (
                "max_iterations", "max_stationary_state_iterations", "root_epsilon",
                "function_epsilon", "gradient_norm_epsilon")},
            "optimizer": {k: flat[k] for k in ("epsfcn", "xtol", "gtol")},
            "helpers": {"calibrate_volatility": flat["calibrate_volatility"]},
            "engine": {"integration_order": flat["integration_order"]},
            "monte_carlo": flat["monte_carlo"],
        }

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "CalibrationConfig":
        """Build from a nested dict; missing keys keep their defaults."""
        config = merge_configs(cls().to_dict(), config or {})
        unknown = set(config) - {"end_criteria", "optimizer", "helpers", "engine", "monte_carlo"}
        if unknown:
            raise ConfigurationError(f"Unknown calibration config sections: {sorted(unknown)}")

        mc_values = get_nested_value(config, "monte_carlo", {})
        try:
            monte_carlo = MonteCarloSettings(**mc_values)
        except TypeError as e:
            raise ConfigurationError(f"Invalid monte_carlo section: {e}") from e

        return cls(
            max_iterations=int(get_nested_value(config, "end_criteria.max_iterations")),
            max_stationary_state_iterations=int(
                get_nested_value(config, "end_criteria.max_stationary_state_iterations")),
            root_epsilon=float(get_nested_value(config, "end_criteria.root_epsilon")),
            function_epsilon=float(get_nested_value(config, "end_criteria.function_epsilon")),
            gradient_norm_epsilon=float(get_nested_value(config, "end_criteria.gradient_norm_epsilon")),
            epsfcn=float(get_nested_value(config, "optimizer.epsfcn")),
            xtol=float(get_nested_value(config, "optimizer.xtol")),
            gtol=float(get_nested_value(config, "optimizer.gtol")),
            calibrate_volatility=bool(get_nested_value(config, "helpers.calibrate_volatility")),
            integration_order=int(get_nested_value(config, "engine.integration_order")),
            monte_carlo=monte_carlo,
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "CalibrationConfig":
        return cls.from_dict(load_config(path))
