"""Pricing engines and Black-formula utilities."""

from .black import (
    black_formula,
    black_formula_implied_std_dev,
    black_formula_std_dev_derivative,
    black_vega,
)
from .base import GenericModelEngine, PricingEngine
from .heston_analytic import AnalyticHestonEngine
from .bates import (
    BatesDetJumpEngine,
    BatesDoubleExpDetJumpEngine,
    BatesDoubleExpEngine,
    BatesEngine,
    analytic_engine_for,
)
from .jump_diffusion import JumpDiffusionEngine
from .monte_carlo import MCEuropeanHestonEngine

__all__ = [
    "black_formula",
    "black_formula_implied_std_dev",
    "black_formula_std_dev_derivative",
    "black_vega",
    "PricingEngine",
    "GenericModelEngine",
    "AnalyticHestonEngine",
    "BatesEngine",
    "BatesDetJumpEngine",
    "BatesDoubleExpEngine",
    "BatesDoubleExpDetJumpEngine",
    "analytic_engine_for",
    "JumpDiffusionEngine",
    "MCEuropeanHestonEngine",
]
