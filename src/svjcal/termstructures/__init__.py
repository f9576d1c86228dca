from .base import TermStructure
from .blackvol import BlackConstantVol
from .yields import FlatForward, YieldTermStructure, ZeroCurve

__all__ = [
    "TermStructure",
    "YieldTermStructure",
    "FlatForward",
    "ZeroCurve",
    "BlackConstantVol",
]
