"""
Calibration of parametric models to market quotes.

Typical use::

    helpers = [HestonModelHelper(...) for ...]
    for helper in helpers:
        helper.set_pricing_engine(engine)
    params, reason = calibrate(model, helpers, LevenbergMarquardt(), EndCriteria(400, 40))
"""

from .optimizer import (
    CalibrationResult,
    CalibrationState,
    EndCriteria,
    EndCriteriaType,
    LevenbergMarquardt,
    Problem,
)
from .config import CalibrationConfig, MonteCarloSettings
from .helpers import CalibrationHelper, HestonModelHelper


def calibrate(model, helpers, optimizer=None, end_criteria=None, weights=None,
              fix_parameters=None) -> CalibrationResult:
    """Calibrate ``model`` to ``helpers``; the result unpacks as ``(params, reason)``."""
    return model.calibrate(helpers, optimizer, end_criteria, weights=weights,
                           fix_parameters=fix_parameters)


__all__ = [
    "calibrate",
    "CalibrationResult",
    "CalibrationState",
    "EndCriteria",
    "EndCriteriaType",
    "LevenbergMarquardt",
    "Problem",
    "CalibrationConfig",
    "MonteCarloSettings",
    "CalibrationHelper",
    "HestonModelHelper",
]
