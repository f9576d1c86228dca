from .flat import FlatSwaptionVolatility
from .matrix import SwaptionVolatilityMatrix
from .smile import FlatSmileSection, InterpolatedSmileSection, SmileSection
from .swaption import SwaptionVolatilityStructure

__all__ = [
    "SwaptionVolatilityStructure",
    "SmileSection",
    "FlatSmileSection",
    "InterpolatedSmileSection",
    "FlatSwaptionVolatility",
    "SwaptionVolatilityMatrix",
]
