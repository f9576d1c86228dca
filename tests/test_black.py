"""Tests for the Black-76 formula and its inversions."""

import numpy as np
import pytest

from svjcal.errors import CalculationError, DomainError
from svjcal.instruments import OptionType
from svjcal.pricers.black import (
    black_formula,
    black_formula_implied_std_dev,
    black_formula_std_dev_derivative,
    black_vega,
)


class TestBlackFormula:
    """Prices, parity and degenerate inputs."""

    def test_at_the_money_call(self):
        # 100 * (2 N(0.1) - 1)
        assert black_formula(OptionType.CALL, 100.0, 100.0, 0.2) == pytest.approx(7.965567455405798)

    def test_put_call_parity(self):
        strike, forward, std_dev, discount = 95.0, 103.0, 0.3, 0.97
        call = black_formula(OptionType.CALL, strike, forward, std_dev, discount)
        put = black_formula(OptionType.PUT, strike, forward, std_dev, discount)
        assert call - put == pytest.approx(discount * (forward - strike))

    def test_zero_std_dev_is_discounted_intrinsic(self):
        assert black_formula(OptionType.CALL, 90.0, 100.0, 0.0, 0.9) == pytest.approx(9.0)
        assert black_formula(OptionType.PUT, 90.0, 100.0, 0.0, 0.9) == 0.0

    def test_zero_strike(self):
        assert black_formula(OptionType.CALL, 0.0, 100.0, 0.2, 0.5) == pytest.approx(50.0)
        assert black_formula(OptionType.PUT, 0.0, 100.0, 0.2, 0.5) == 0.0

    def test_displacement(self):
        shifted = black_formula(OptionType.CALL, -0.01, 0.005, 0.01, displacement=0.03)
        assert shifted == pytest.approx(black_formula(OptionType.CALL, 0.02, 0.035, 0.01))

    def test_invalid_inputs(self):
        with pytest.raises(DomainError):
            black_formula(OptionType.CALL, 100.0, 100.0, -0.1)
        with pytest.raises(DomainError):
            black_formula(OptionType.CALL, 100.0, 0.0, 0.2)
        with pytest.raises(DomainError):
            black_formula(OptionType.CALL, -1.0, 100.0, 0.2)
        with pytest.raises(DomainError):
            black_formula(OptionType.CALL, 100.0, 100.0, 0.2, discount=0.0)


class TestBlackSensitivities:
    def test_std_dev_derivative_matches_finite_difference(self):
        strike, forward, std_dev, discount = 95.0, 103.0, 0.3, 0.97
        h = 1e-6
        bumped = (black_formula(OptionType.CALL, strike, forward, std_dev + h, discount)
                  - black_formula(OptionType.CALL, strike, forward, std_dev - h, discount)) / (2 * h)
        analytic = black_formula_std_dev_derivative(strike, forward, std_dev, discount)
        assert analytic == pytest.approx(bumped, rel=1e-6)

    def test_vega(self):
        strike, forward, vol, maturity = 100.0, 100.0, 0.2, 2.0
        h = 1e-6
        bumped = (black_formula(OptionType.CALL, strike, forward, (vol + h) * np.sqrt(maturity))
                  - black_formula(OptionType.CALL, strike, forward, (vol - h) * np.sqrt(maturity))) / (2 * h)
        assert black_vega(strike, forward, vol, maturity) == pytest.approx(bumped, rel=1e-6)


class TestImpliedStdDev:
    def test_recovers_std_dev(self):
        price = black_formula(OptionType.PUT, 110.0, 100.0, 0.35, 0.95)
        implied = black_formula_implied_std_dev(OptionType.PUT, 110.0, 100.0, price, 0.95)
        assert implied == pytest.approx(0.35, abs=1e-10)

    def test_intrinsic_price(self):
        assert black_formula_implied_std_dev(OptionType.CALL, 90.0, 100.0, 10.0) == 0.0

    def test_below_intrinsic(self):
        with pytest.raises(DomainError):
            black_formula_implied_std_dev(OptionType.CALL, 90.0, 100.0, 9.0)

    def test_not_bracketed(self):
        # a call is worth less than the forward whatever the volatility
        with pytest.raises(CalculationError):
            black_formula_implied_std_dev(OptionType.CALL, 90.0, 100.0, 100.5)
