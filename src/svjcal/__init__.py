"""
svjcal
======

Volatility surfaces and stochastic-volatility / jump-diffusion calibration.

- Swaption-style volatility surfaces with date, tenor and time coordinates
- Heston and Bates-family models with semi-closed-form, series and
  Monte-Carlo pricing engines
- Levenberg-Marquardt calibration of model parameters to quoted volatilities
"""

__version__ = "0.1.0"

from .errors import (
    CalculationError,
    ConfigurationError,
    DomainError,
    NumericalWarning,
    SvjcalError,
)
from .settings import EvaluationContext
from .quotes import SimpleQuote
from .time import (
    TARGET,
    Actual360,
    Actual365Fixed,
    ActualActual,
    BusinessDayConvention,
    NullCalendar,
    Period,
    Thirty360,
    TimeUnit,
    WeekendsOnly,
)
from .termstructures import BlackConstantVol, FlatForward, ZeroCurve
from .volatility import (
    FlatSmileSection,
    FlatSwaptionVolatility,
    InterpolatedSmileSection,
    SwaptionVolatilityMatrix,
    SwaptionVolatilityStructure,
)
from .processes import BatesProcess, HestonProcess, Merton76Process
from .instruments import EuropeanExercise, OptionType, PlainVanillaPayoff, VanillaOption

# pricers before models/calibration: engines import the model classes, and
# the calibration helpers import the Black formula from the pricers package
from .pricers import (
    AnalyticHestonEngine,
    BatesDetJumpEngine,
    BatesDoubleExpDetJumpEngine,
    BatesDoubleExpEngine,
    BatesEngine,
    JumpDiffusionEngine,
    MCEuropeanHestonEngine,
    black_formula,
)
from .models import (
    BatesDetJumpModel,
    BatesDoubleExpDetJumpModel,
    BatesDoubleExpModel,
    BatesModel,
    HestonModel,
)
from .calibration import (
    CalibrationConfig,
    CalibrationResult,
    CalibrationState,
    EndCriteria,
    EndCriteriaType,
    HestonModelHelper,
    LevenbergMarquardt,
    calibrate,
)

__all__ = [
    "SvjcalError",
    "DomainError",
    "ConfigurationError",
    "CalculationError",
    "NumericalWarning",
    "EvaluationContext",
    "SimpleQuote",
    "Period",
    "TimeUnit",
    "Actual365Fixed",
    "Actual360",
    "ActualActual",
    "Thirty360",
    "NullCalendar",
    "WeekendsOnly",
    "TARGET",
    "BusinessDayConvention",
    "FlatForward",
    "ZeroCurve",
    "BlackConstantVol",
    "SwaptionVolatilityStructure",
    "FlatSwaptionVolatility",
    "SwaptionVolatilityMatrix",
    "FlatSmileSection",
    "InterpolatedSmileSection",
    "HestonProcess",
    "BatesProcess",
    "Merton76Process",
    "OptionType",
    "PlainVanillaPayoff",
    "EuropeanExercise",
    "VanillaOption",
    "black_formula",
    "AnalyticHestonEngine",
    "BatesEngine",
    "BatesDetJumpEngine",
    "BatesDoubleExpEngine",
    "BatesDoubleExpDetJumpEngine",
    "JumpDiffusionEngine",
    "MCEuropeanHestonEngine",
    "HestonModel",
    "BatesModel",
    "BatesDetJumpModel",
    "BatesDoubleExpModel",
    "BatesDoubleExpDetJumpModel",
    "HestonModelHelper",
    "EndCriteria",
    "EndCriteriaType",
    "CalibrationState",
    "CalibrationResult",
    "CalibrationConfig",
    "LevenbergMarquardt",
    "calibrate",
]
