import logging

from ..errors import ConfigurationError
from ..processes import HestonProcess
from .calibrated import CalibratedModel
from .parameters import BoundaryConstraint, Parameter, PositiveConstraint

logger = logging.getLogger(__name__)


class HestonModel(CalibratedModel):
    """
    Heston stochastic-volatility model.

    Parameters are seeded once from the process and then evolve on their
    own; the process keeps supplying spot and curves to the engines.
    Vector layout: ``[theta, kappa, sigma, rho, v0]``.
    """

    def __init__(self, process: HestonProcess, extra_parameters=()):
        if not isinstance(process, HestonProcess):
            raise ConfigurationError(
                f"{type(self).__name__} needs a HestonProcess, got {type(process).__name__}"
            )
        self.process = process
        parameters = [
            Parameter("theta", process.theta, PositiveConstraint()),
            Parameter("kappa", process.kappa, PositiveConstraint()),
            Parameter("sigma", process.sigma, PositiveConstraint()),
            Parameter("rho", process.rho, BoundaryConstraint(-1.0, 1.0)),
            Parameter("v0", process.v0, PositiveConstraint()),
        ]
        super().__init__(parameters + list(extra_parameters))
        self.register_with(process)

    @property
    def theta(self) -> float:
        return self._parameter(0)

    @property
    def kappa(self) -> float:
        return self._parameter(1)

    @property
    def sigma(self) -> float:
        return self._parameter(2)

    @property
    def rho(self) -> float:
        return self._parameter(3)

    @property
    def v0(self) -> float:
        return self._parameter(4)

    def feller_condition(self) -> bool:
        """True when ``2 kappa theta >= sigma**2`` (variance stays off zero)."""
        return 2.0 * self.kappa * self.theta >= self.sigma ** 2
