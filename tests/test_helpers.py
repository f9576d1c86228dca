"""Tests for calibration helpers and their error conventions."""

import math

import numpy as np
import pytest

from svjcal import TARGET, SimpleQuote
from svjcal.calibration.helpers import MAX_VOLATILITY, MIN_VOLATILITY, HestonModelHelper
from svjcal.errors import CalculationError, ConfigurationError
from svjcal.instruments import OptionType, PricingResults
from svjcal.models import HestonModel
from svjcal.patterns.observable import Observer
from svjcal.pricers import AnalyticHestonEngine, black_formula
from svjcal.pricers.base import PricingEngine
from svjcal.processes import HestonProcess
from svjcal.time import months, weeks


class ConstantEngine(PricingEngine):
    """Prices every option at a fixed value."""

    def __init__(self, value):
        self.value = value

    def calculate(self, option):
        return PricingResults(value=self.value)


class RefusingEngine(ConstantEngine):
    def can_price(self, instrument):
        return False


class Recorder(Observer):
    def __init__(self):
        self.updates = 0

    def update(self):
        self.updates += 1


@pytest.fixture
def curves(flat_curve):
    return flat_curve(0.05), flat_curve(0.02)


@pytest.fixture
def make_helper(curves):
    risk_free, dividend = curves

    def make(volatility=0.2, strike=100.0, calibrate_volatility=False, maturity=months(6)):
        return HestonModelHelper(maturity, TARGET(), 100.0, strike, volatility,
                                 risk_free, dividend, calibrate_volatility)
    return make


class TestHestonModelHelper:
    """Instrument set-up and market prices."""

    def test_exercise_date_and_tau(self, make_helper, today, day_counter):
        helper = make_helper(maturity=weeks(2))
        # two weeks after 15 Mar 2024 is Good Friday
        assert helper.exercise_date.isoformat() == "2024-04-02"
        assert helper.tau == day_counter.year_fraction(today, helper.exercise_date)
        assert helper.option.payoff.option_type == OptionType.CALL
        assert helper.option.payoff.strike == 100.0

    def test_market_value_is_black_price(self, make_helper, curves):
        risk_free, dividend = curves
        helper = make_helper(volatility=0.25, strike=95.0)
        tau = helper.tau
        expected = black_formula(OptionType.CALL, 95.0 * risk_free.discount(tau),
                                 100.0 * dividend.discount(tau), 0.25 * math.sqrt(tau))
        assert helper.market_value() == pytest.approx(expected, rel=1e-14)

    def test_market_value_follows_the_quote(self, make_helper):
        quote = SimpleQuote(0.2)
        helper = make_helper(volatility=quote)
        recorder = Recorder()
        recorder.register_with(helper)
        before = helper.market_value()

        quote.set_value(0.3)

        assert recorder.updates == 1
        assert helper.market_value() > before

    def test_implied_volatility(self, make_helper):
        helper = make_helper(volatility=0.2)
        target = helper.black_price(0.37)
        assert helper.implied_volatility(target) == pytest.approx(0.37, abs=1e-10)

    def test_implied_volatility_not_bracketed(self, make_helper):
        helper = make_helper()
        with pytest.raises(CalculationError):
            helper.implied_volatility(1000.0)


class TestEngineBinding:
    def test_refuses_incompatible_engine(self, make_helper):
        with pytest.raises(ConfigurationError):
            make_helper().set_pricing_engine(RefusingEngine(1.0))

    def test_model_value_needs_engine(self, make_helper):
        with pytest.raises(CalculationError):
            make_helper().model_value()

    def test_model_value_from_engine(self, make_helper):
        helper = make_helper()
        helper.set_pricing_engine(ConstantEngine(4.2))
        assert helper.model_value() == 4.2


class TestCalibrationError:
    """Volatility and relative-price conventions."""

    def test_relative_price_error(self, make_helper):
        helper = make_helper(volatility=0.2)
        market = helper.market_value()
        helper.set_pricing_engine(ConstantEngine(market * 1.1))
        assert helper.calibration_error() == pytest.approx(0.1)

        helper.set_pricing_engine(ConstantEngine(market * 0.9))
        assert helper.calibration_error() == pytest.approx(0.1)

    def test_price_error_when_market_value_underflows(self, curves):
        risk_free, dividend = curves
        helper = HestonModelHelper(weeks(1), TARGET(), 4468.17, 5600.0, 0.01,
                                   risk_free, dividend)
        assert helper.market_value() == 0.0

        helper.set_pricing_engine(ConstantEngine(0.25))
        assert helper.calibration_error() == pytest.approx(0.25)

        helper.set_pricing_engine(ConstantEngine(0.0))
        assert helper.calibration_error() == 0.0

    def test_volatility_error_is_signed(self, make_helper):
        helper = make_helper(volatility=0.2, calibrate_volatility=True)
        helper.set_pricing_engine(ConstantEngine(helper.black_price(0.25)))
        assert helper.calibration_error() == pytest.approx(0.05, abs=1e-10)

        helper.set_pricing_engine(ConstantEngine(helper.black_price(0.15)))
        assert helper.calibration_error() == pytest.approx(-0.05, abs=1e-10)

    def test_volatility_error_clamps_low(self, make_helper):
        helper = make_helper(volatility=0.2, strike=150.0, calibrate_volatility=True)
        helper.set_pricing_engine(ConstantEngine(0.0))
        assert helper.calibration_error() == pytest.approx(MIN_VOLATILITY - 0.2)

    def test_volatility_error_clamps_high(self, make_helper):
        helper = make_helper(volatility=0.2, calibrate_volatility=True)
        helper.set_pricing_engine(ConstantEngine(150.0))
        assert helper.calibration_error() == pytest.approx(MAX_VOLATILITY - 0.2)

    def test_no_caching_across_parameter_updates(self, curves):
        risk_free, dividend = curves
        process = HestonProcess(risk_free, dividend, SimpleQuote(100.0),
                                v0=0.04, kappa=2.0, theta=0.04, sigma=1e-4, rho=0.0)
        model = HestonModel(process)
        helper = HestonModelHelper(months(6), TARGET(), 100.0, 100.0, 0.2,
                                   risk_free, dividend, calibrate_volatility=True)
        helper.set_pricing_engine(AnalyticHestonEngine(model, 96))

        # v0 = theta = 0.2**2 with no vol-of-vol is Black at 20%
        assert helper.calibration_error() == pytest.approx(0.0, abs=1e-6)

        model.set_params([0.09, 2.0, 1e-4, 0.0, 0.09])
        assert helper.calibration_error() == pytest.approx(0.1, abs=1e-5)

    def test_model_value_function(self, curves):
        risk_free, dividend = curves
        process = HestonProcess(risk_free, dividend, SimpleQuote(100.0),
                                v0=0.04, kappa=2.0, theta=0.04, sigma=0.3, rho=-0.5)
        model = HestonModel(process)
        engine = AnalyticHestonEngine(model, 96)
        helpers = []
        for strike, vol in [(90.0, 0.24), (100.0, 0.21), (110.0, 0.19)]:
            helper = HestonModelHelper(months(6), TARGET(), 100.0, strike, vol,
                                       risk_free, dividend, calibrate_volatility=True)
            helper.set_pricing_engine(engine)
            helpers.append(helper)

        params = np.array([0.05, 1.5, 0.4, -0.6, 0.045])
        value = model.value(params, helpers)

        errors = np.array([h.calibration_error() for h in helpers])
        assert value == pytest.approx(float(np.sum(errors ** 2)))
        np.testing.assert_allclose(model.params(), params)

        weighted = model.value(params, helpers, weights=[1.0, 2.0, 0.0])
        assert weighted == pytest.approx(errors[0] ** 2 + 2.0 * errors[1] ** 2)

        with pytest.raises(ConfigurationError):
            model.value(params, helpers, weights=[1.0, 2.0])
