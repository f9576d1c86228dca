"""Shared fixtures for the svjcal test-suite."""

from datetime import date

import pytest

from svjcal import (
    ActualActual,
    EvaluationContext,
    FlatForward,
    HestonProcess,
    SimpleQuote,
)


@pytest.fixture
def today():
    return date(2024, 3, 15)


@pytest.fixture
def context(today):
    return EvaluationContext(today)


@pytest.fixture
def day_counter():
    return ActualActual()


@pytest.fixture
def flat_curve(today, day_counter):
    """Factory for flat continuously-compounded curves anchored at ``today``."""
    def make(rate):
        return FlatForward(rate, day_counter, reference_date=today)
    return make


@pytest.fixture
def heston_process(flat_curve):
    """Heston process on 10% / 4% flat curves with a spot of 100."""
    return HestonProcess(
        flat_curve(0.1), flat_curve(0.04), SimpleQuote(100.0),
        v0=0.04, kappa=1.5, theta=0.04, sigma=0.5, rho=-0.6,
    )
