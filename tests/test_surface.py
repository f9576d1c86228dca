"""Tests for volatility surfaces: coordinates, range policy and smiles."""

from datetime import date

import numpy as np
import pytest

from svjcal import TARGET, Actual365Fixed, EvaluationContext
from svjcal.errors import ConfigurationError, DomainError
from svjcal.patterns.observable import Observer
from svjcal.quotes import SimpleQuote
from svjcal.time import BusinessDayConvention, Period, TimeUnit, months, weeks, years
from svjcal.volatility import (
    FlatSmileSection,
    FlatSwaptionVolatility,
    InterpolatedSmileSection,
    SwaptionVolatilityMatrix,
    SwaptionVolatilityStructure,
)
from svjcal.volatility.matrix import nominal_length

REFERENCE = date(2024, 3, 15)


class BoundedStrikeSurface(SwaptionVolatilityStructure):
    """Skewed surface on a finite strike range, for range-policy tests."""

    def __init__(self, low=0.01, high=0.10, **kwargs):
        super().__init__(**kwargs)
        self.low, self.high = low, high

    def max_date(self):
        return date(2044, 3, 15)

    def max_instrument_tenor(self):
        return years(30)

    def min_strike(self):
        return self.low

    def max_strike(self):
        return self.high

    def _smile_section_impl(self, option_time, instrument_length):
        return FlatSmileSection(option_time, self._volatility_impl(option_time, instrument_length, 0.05))

    def _volatility_impl(self, option_time, instrument_length, strike):
        return 0.15 + 0.01 * option_time + 0.002 * instrument_length + strike


class Recorder(Observer):
    def __init__(self):
        self.updates = 0

    def update(self):
        self.updates += 1


@pytest.fixture
def flat():
    return FlatSwaptionVolatility(0.2, Actual365Fixed(), reference_date=REFERENCE,
                                  calendar=TARGET())


@pytest.fixture
def skewed():
    return BoundedStrikeSurface(reference_date=REFERENCE, calendar=TARGET(),
                                day_counter=Actual365Fixed())


@pytest.fixture
def matrix():
    vols = [
        [0.30, 0.25, 0.22],
        [0.28, 0.24, 0.21],
        [0.24, 0.21, 0.19],
    ]
    return SwaptionVolatilityMatrix(
        [years(1), years(2), years(5)],
        [years(1), years(5), years(10)],
        vols,
        Actual365Fixed(),
        reference_date=REFERENCE,
        calendar=TARGET(),
    )


class TestCoordinateConversion:
    """Dates and tenors to times."""

    def test_round_trip(self, skewed):
        dc = skewed.day_counter()
        option_date = skewed.option_date_from_tenor(months(6))
        tenor = years(5)

        option_time, length = skewed.convert_dates(option_date, tenor)

        end = option_date + tenor
        assert option_time == dc.year_fraction(REFERENCE, option_date)
        assert length == dc.year_fraction(option_date, end)

    def test_option_date_from_tenor_rolls_on_calendar(self, flat):
        # two weeks after 15 Mar 2024 is Good Friday, then Easter Monday
        assert flat.option_date_from_tenor(weeks(2)) == date(2024, 4, 2)

    def test_business_day_convention(self):
        surface = FlatSwaptionVolatility(
            0.2, reference_date=REFERENCE, calendar=TARGET(),
            business_day_convention=BusinessDayConvention.PRECEDING,
        )
        assert surface.option_date_from_tenor(weeks(2)) == date(2024, 3, 28)
        assert surface.business_day_convention() == BusinessDayConvention.PRECEDING

    @pytest.mark.parametrize("tenor", [Period(-1, TimeUnit.YEARS), Period(-6, TimeUnit.MONTHS),
                                       Period(0, TimeUnit.DAYS)])
    def test_non_positive_tenor_rejected(self, flat, tenor):
        with pytest.raises(DomainError):
            flat.convert_dates(date(2025, 3, 17), tenor)

    def test_negative_tenor_rejected_even_when_extrapolating(self, flat):
        flat.enable_extrapolation()
        with pytest.raises(DomainError):
            flat.volatility(date(2025, 3, 17), years(-1), 0.03, extrapolate=True)
        with pytest.raises(DomainError):
            flat.volatility(1.0, -0.5, 0.03, extrapolate=True)
        with pytest.raises(DomainError):
            flat.black_variance(months(6), years(-2), 0.03, extrapolate=True)


class TestRangePolicy:
    """Extrapolation gating for option time, instrument length and strike."""

    def test_instrument_length_at_the_maximum(self, flat):
        max_length = flat.max_instrument_length()
        assert flat.volatility(1.0, max_length, 0.03) == 0.2

    def test_instrument_length_beyond_the_maximum(self, flat):
        beyond = flat.max_instrument_length() + 1e-6
        with pytest.raises(DomainError):
            flat.volatility(1.0, beyond, 0.03)
        assert flat.volatility(1.0, beyond, 0.03, extrapolate=True) == 0.2

    def test_instrument_tenor_beyond_the_maximum(self, skewed):
        with pytest.raises(DomainError):
            skewed.volatility(years(1), years(40), 0.05)
        assert skewed.volatility(years(1), years(40), 0.05, extrapolate=True) > 0.0

    def test_instance_toggle(self, flat):
        beyond = flat.max_instrument_length() + 1.0
        flat.enable_extrapolation()
        assert flat.volatility(1.0, beyond, 0.03) == 0.2
        flat.disable_extrapolation()
        with pytest.raises(DomainError):
            flat.volatility(1.0, beyond, 0.03)

    def test_option_time_beyond_max_date(self, skewed):
        t = skewed.max_time() + 0.5
        with pytest.raises(DomainError):
            skewed.volatility(t, 5.0, 0.05)
        assert skewed.volatility(t, 5.0, 0.05, extrapolate=True) > 0.0

    def test_option_date_before_reference(self, skewed):
        with pytest.raises(DomainError):
            skewed.volatility(date(2024, 1, 2), years(5), 0.05, extrapolate=True)
        with pytest.raises(DomainError):
            skewed.volatility(-0.1, 5.0, 0.05, extrapolate=True)

    def test_strike_range(self, skewed):
        assert skewed.volatility(1.0, 5.0, 0.10) == pytest.approx(0.15 + 0.01 + 0.01 + 0.10)
        with pytest.raises(DomainError):
            skewed.volatility(1.0, 5.0, 0.11)
        assert skewed.volatility(1.0, 5.0, 0.11, extrapolate=True) == pytest.approx(0.28)

    def test_inverted_strike_bounds(self):
        broken = BoundedStrikeSurface(low=0.2, high=0.1, reference_date=REFERENCE)
        with pytest.raises(ConfigurationError):
            broken.volatility(1.0, 5.0, 0.15)

    def test_infinite_strike_bounds(self):
        broken = BoundedStrikeSurface(low=-np.inf, high=0.1, reference_date=REFERENCE)
        with pytest.raises(ConfigurationError):
            broken.volatility(1.0, 5.0, 0.05)


class TestOverloads:
    """Time, date and tenor queries agree."""

    def test_date_and_time_forms_agree(self, skewed):
        option_date, tenor, strike = date(2026, 6, 15), years(10), 0.04
        option_time, length = skewed.convert_dates(option_date, tenor)
        assert skewed.volatility(option_date, tenor, strike) == skewed.volatility(option_time, length, strike)

    def test_tenor_and_date_forms_agree(self, skewed):
        option_date = skewed.option_date_from_tenor(years(2))
        assert (skewed.volatility(years(2), years(5), 0.03)
                == skewed.volatility(option_date, years(5), 0.03))

    def test_mismatched_coordinates(self, skewed):
        with pytest.raises(TypeError):
            skewed.volatility(date(2026, 6, 15), 5.0, 0.03)
        with pytest.raises(TypeError):
            skewed.volatility(1.0, years(5), 0.03)

    @pytest.mark.parametrize("option, instrument", [
        (1.5, 7.0),
        (date(2027, 3, 15), years(7)),
        (months(18), years(7)),
    ])
    def test_variance_identity(self, skewed, option, instrument):
        strike = 0.05
        variance = skewed.black_variance(option, instrument, strike)
        vol = skewed.volatility(option, instrument, strike)
        if isinstance(option, float):
            option_time = option
        else:
            if not isinstance(option, date):
                option = skewed.option_date_from_tenor(option)
            option_time, _ = skewed.convert_dates(option, instrument)
        assert variance == vol * vol * option_time


class TestFlatSwaptionVolatility:
    def test_observes_its_quote(self):
        quote = SimpleQuote(0.2)
        surface = FlatSwaptionVolatility(quote, reference_date=REFERENCE)
        recorder = Recorder()
        recorder.register_with(surface)

        quote.set_value(0.25)

        assert recorder.updates == 1
        assert surface.volatility(2.0, 10.0, 0.03) == 0.25

    def test_domain(self, flat):
        assert flat.max_instrument_tenor() == years(100)
        assert flat.min_strike() < -1e300
        assert flat.max_strike() > 1e300


class TestSwaptionVolatilityMatrix:
    """Bilinear ATM matrix."""

    def test_grid_nodes(self, matrix):
        times = matrix.option_times()
        assert matrix.volatility(times[1], 5.0, 0.0) == pytest.approx(0.24)
        assert matrix.volatility(years(5), years(10), 0.0) == pytest.approx(0.19, abs=1e-3)

    def test_bilinear_between_nodes(self, matrix):
        t0 = matrix.option_times()[0]
        assert matrix.volatility(t0, 7.5, 0.03) == pytest.approx(0.5 * (0.25 + 0.22))

    def test_strike_independent(self, matrix):
        assert matrix.volatility(1.5, 3.0, -0.01) == matrix.volatility(1.5, 3.0, 0.08)

    def test_option_dates(self, matrix):
        assert matrix.option_dates()[0] == date(2025, 3, 17)
        assert matrix.max_date() == matrix.option_dates()[-1]
        assert matrix.max_instrument_tenor() == years(10)
        np.testing.assert_allclose(matrix.instrument_lengths(), [1.0, 5.0, 10.0])

    def test_option_time_gated_by_last_option_date(self, matrix):
        t = matrix.max_time() + 1.0
        with pytest.raises(DomainError):
            matrix.volatility(t, 5.0, 0.0)
        assert matrix.volatility(t, 5.0, 0.0, extrapolate=True) > 0.0

    def test_floating_option_dates(self):
        context = EvaluationContext(REFERENCE)
        matrix = SwaptionVolatilityMatrix(
            [years(1), years(2)], [years(1), years(5)], [[0.3, 0.25], [0.28, 0.24]],
            Actual365Fixed(), calendar=TARGET(), settlement_days=0, context=context,
        )
        assert matrix.option_dates()[0] == date(2025, 3, 17)

        context.evaluation_date = date(2024, 6, 14)

        assert matrix.reference_date() == date(2024, 6, 14)
        assert matrix.option_dates()[0] == date(2025, 6, 16)

    def test_shape_validation(self):
        with pytest.raises(ConfigurationError):
            SwaptionVolatilityMatrix([years(1), years(2)], [years(1), years(5)], [[0.3, 0.25]],
                                     reference_date=REFERENCE)
        with pytest.raises(ConfigurationError):
            SwaptionVolatilityMatrix([years(1)], [years(1), years(5)], [[0.3, 0.25]],
                                     reference_date=REFERENCE)

    def test_nominal_length(self):
        assert nominal_length(months(18)) == 1.5
        assert nominal_length(weeks(26)) == 0.5
        with pytest.raises(DomainError):
            nominal_length(years(0))


class TestSmileSections:
    def test_flat_surface_smile(self, flat):
        smile = flat.smile_section(2.0, 5.0)
        assert smile.volatility(0.03) == 0.2
        assert smile.variance(0.03) == pytest.approx(0.08)

    def test_smile_from_dates(self, skewed):
        option_date = date(2025, 3, 17)
        smile = skewed.smile_section(option_date, years(5))
        assert smile.option_time() == skewed.time_from_reference(option_date)

    def test_smile_rejects_negative_length(self, flat):
        with pytest.raises(DomainError):
            flat.smile_section(1.0, -1.0)
        with pytest.raises(DomainError):
            flat.smile_section(date(2025, 3, 17), years(-1))

    def test_interpolated_smile(self):
        smile = InterpolatedSmileSection(2.0, [0.01, 0.02, 0.03], [0.3, 0.2, 0.25], atm_level=0.02)
        assert smile.volatility(0.015) == pytest.approx(0.25)
        assert smile.volatility(0.0) == pytest.approx(0.3)
        assert smile.volatility(0.05) == pytest.approx(0.25)
        assert smile.variance(0.02) == pytest.approx(0.08)
        assert smile.atm_level() == 0.02

    def test_interpolated_smile_validation(self):
        with pytest.raises(ConfigurationError):
            InterpolatedSmileSection(1.0, [0.02, 0.01], [0.2, 0.3])
        with pytest.raises(DomainError):
            FlatSmileSection(-1.0, 0.2)
