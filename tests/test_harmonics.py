"""
tests/test_harmonics.py
───────────────────────
Tests for harmonic bin derivation and the windowed-max search.
"""
import math

import numpy as np
import pytest

from spindle_diagnostics_mcp.errors import InvalidArgumentError
from spindle_diagnostics_mcp.harmonics import (
    HarmonicSet,
    harmonic_amplitudes,
    harmonic_orders,
    parse_number,
    to_magnitudes,
    windowed_max,
)

from .conftest import make_spectrum


class TestHarmonicOrders:
    def test_1800_rpm(self):
        assert harmonic_orders(1800) == HarmonicSet(30, 60, 90)

    def test_floor_of_fractional_speed(self):
        # 1499 / 60 = 24.98
        assert harmonic_orders(1499) == HarmonicSet(24, 48, 72)

    def test_zero_rpm_collapses_to_bin_zero(self):
        assert harmonic_orders(0) == HarmonicSet(0, 0, 0)

    def test_below_one_hz(self):
        assert harmonic_orders(59.9) == HarmonicSet(0, 0, 0)

    @pytest.mark.parametrize("rpm", [-1, float("nan"), float("inf")])
    def test_invalid_rpm_raises(self, rpm):
        with pytest.raises(InvalidArgumentError):
            harmonic_orders(rpm)

    @pytest.mark.parametrize("rpm", [None, "abc", "n/a", [1800]])
    def test_non_numeric_rpm_raises(self, rpm):
        with pytest.raises(InvalidArgumentError):
            harmonic_orders(rpm)

    def test_numeric_string_rpm(self):
        assert harmonic_orders("1800") == HarmonicSet(30, 60, 90)

    def test_invalid_rpm_is_value_error(self):
        with pytest.raises(ValueError):
            harmonic_orders(-60)


class TestLenientParsing:
    def test_parse_number(self):
        assert parse_number("1.5") == 1.5
        assert parse_number(None) == 0.0
        assert parse_number("abc") == 0.0
        assert parse_number(float("nan")) == 0.0
        assert parse_number(float("inf")) == 0.0

    def test_mixed_sequence(self):
        mags = to_magnitudes(["1.5", None, "abc", float("nan"), -2])
        assert mags.tolist() == [1.5, 0.0, 0.0, 0.0, 2.0]

    def test_nested_entries_read_as_zero(self):
        mags = to_magnitudes([0.5, [1.0, 2.0], [3.0], (4.0,), -1.5])
        assert mags.tolist() == [0.5, 0.0, 0.0, 0.0, 1.5]

    def test_tuple_input(self):
        assert to_magnitudes((1, "2", None)).tolist() == [1.0, 2.0, 0.0]

    def test_none_is_empty(self):
        assert to_magnitudes(None).size == 0

    def test_numeric_array_passthrough(self):
        mags = to_magnitudes(np.array([0.5, -0.25]))
        assert mags.tolist() == [0.5, 0.25]


class TestWindowedMax:
    def test_peak_inside_window(self):
        spectrum = make_spectrum({33: 2.0}, 100)
        assert windowed_max(spectrum, 30) == 2.0

    def test_window_is_inclusive_at_radius(self):
        spectrum = make_spectrum({35: 1.0, 36: 9.0}, 100)
        assert windowed_max(spectrum, 30) == 1.0

    def test_window_clamped_at_start(self):
        spectrum = make_spectrum({0: 0.7}, 100)
        assert windowed_max(spectrum, 2) == 0.7

    def test_window_clamped_at_end(self):
        spectrum = make_spectrum({99: 0.4}, 100)
        assert windowed_max(spectrum, 97) == 0.4

    def test_window_beyond_spectrum_is_zero(self):
        spectrum = make_spectrum({10: 3.0}, 100)
        assert windowed_max(spectrum, 2000) == 0.0

    def test_empty_spectrum_is_zero(self):
        assert windowed_max([], 30) == 0.0

    def test_non_numeric_entries_count_as_zero(self):
        spectrum = ["x"] * 40
        spectrum[31] = "0.8"
        spectrum[29] = None
        assert windowed_max(spectrum, 30) == 0.8

    def test_custom_radius(self):
        spectrum = make_spectrum({40: 1.0}, 100)
        assert windowed_max(spectrum, 30, radius=5) == 0.0
        assert windowed_max(spectrum, 30, radius=10) == 1.0

    def test_monotonic_in_window_values(self, rng):
        spectrum = rng.random(200)
        before = windowed_max(spectrum, 50)
        for idx in range(45, 56):
            bumped = spectrum.copy()
            bumped[idx] += 0.5
            assert windowed_max(bumped, 50) >= before

    def test_reordering_inside_window_keeps_result(self, rng):
        spectrum = rng.random(200)
        shuffled = spectrum.copy()
        window = shuffled[45:56]
        rng.shuffle(window)
        shuffled[45:56] = window
        assert windowed_max(shuffled, 50) == windowed_max(spectrum, 50)


class TestHarmonicAmplitudes:
    def test_reads_each_harmonic(self, unbalance_spectrum):
        amps = harmonic_amplitudes(unbalance_spectrum, HarmonicSet(30, 60, 90))
        assert amps.as_tuple() == (5.0, 1.0, 0.2)

    def test_zero_rpm_reads_start_of_spectrum(self):
        spectrum = make_spectrum({4: 0.3, 6: 9.0}, 50)
        amps = harmonic_amplitudes(spectrum, harmonic_orders(0))
        assert amps.as_tuple() == (0.3, 0.3, 0.3)

    def test_rounded(self):
        amps = harmonic_amplitudes(make_spectrum({30: 0.123456789}, 100), HarmonicSet(30, 60, 90))
        assert math.isclose(amps.rounded(5).v1_max, 0.12346)
