from .parameters import (
    BoundaryConstraint,
    CompositeConstraint,
    Constraint,
    NoConstraint,
    Parameter,
    PositiveConstraint,
)
from .calibrated import CalibratedModel
from .heston import HestonModel
from .bates import (
    BatesDetJumpModel,
    BatesDoubleExpDetJumpModel,
    BatesDoubleExpModel,
    BatesModel,
)

__all__ = [
    "Constraint",
    "NoConstraint",
    "PositiveConstraint",
    "BoundaryConstraint",
    "CompositeConstraint",
    "Parameter",
    "CalibratedModel",
    "HestonModel",
    "BatesModel",
    "BatesDetJumpModel",
    "BatesDoubleExpModel",
    "BatesDoubleExpDetJumpModel",
]
