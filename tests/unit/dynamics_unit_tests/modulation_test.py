# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Unit Tests for ParameterModulator and SineWave
"""

import math

import numpy as np
import pytest

from chaostrail.dynamics import ParameterModulator, SineWave, as_sine_wave

BASELINES = (0.2, 0.2, 5.7)
WAVES = {
    "a": {"amplitude": 0.05, "frequency": 0.002, "phase": 0.0},
    "b": {"amplitude": 0.05, "frequency": 0.005, "phase": 1.5},
    "c": {"amplitude": 3.0, "frequency": 0.007, "phase": 3.0},
}


# ============================================================================
# Test Class 1: SineWave
# ============================================================================


class TestSineWave:
    def test_value(self):
        wave = SineWave(amplitude=2.0, frequency=0.5, phase=0.25)
        assert wave.value(3.0, 1.0) == 1.0 + 2.0 * math.sin(3.0 * 0.5 + 0.25)

    def test_zero_amplitude_is_baseline(self):
        assert SineWave(0.0, 10.0, 1.0).value(123.0, 5.7) == 5.7

    def test_from_mapping(self):
        assert as_sine_wave({"amplitude": 1.0, "frequency": 2.0, "phase": 3.0}) == SineWave(
            1.0, 2.0, 3.0
        )

    def test_from_short_keys(self):
        assert as_sine_wave({"amp": 1.0, "freq": 2.0}) == SineWave(1.0, 2.0, 0.0)

    def test_from_sequence(self):
        assert as_sine_wave((1.0, 2.0, 3.0)) == SineWave(1.0, 2.0, 3.0)

    def test_unknown_key_raises(self):
        with pytest.raises(ValueError, match="Unknown wave keys"):
            as_sine_wave({"amplitude": 1.0, "period": 2.0})

    @pytest.mark.parametrize(
        "spec",
        [
            {"amplitude": 1.0, "amp": 2.0, "frequency": 1.0},
            {"amplitude": 1.0, "frequency": 1.0, "freq": 1.0},
        ],
    )
    def test_long_and_short_key_together_raises(self, spec):
        with pytest.raises(ValueError, match="use only one"):
            as_sine_wave(spec)

    def test_wrong_length_raises(self):
        with pytest.raises(ValueError, match="amplitude, frequency, phase"):
            as_sine_wave((1.0, 2.0))

    def test_non_finite_raises(self):
        with pytest.raises(ValueError, match="finite"):
            as_sine_wave((np.inf, 1.0, 0.0))


# ============================================================================
# Test Class 2: ParameterModulator
# ============================================================================


class TestParameterModulator:
    def test_coefficients_formula(self):
        modulator = ParameterModulator(BASELINES, WAVES)
        t = 17.3

        A, B, C = modulator.coefficients(t)

        assert A == 0.2 + 0.05 * math.sin(t * 0.002 + 0.0)
        assert B == 0.2 + 0.05 * math.sin(t * 0.005 + 1.5)
        assert C == 5.7 + 3.0 * math.sin(t * 0.007 + 3.0)

    def test_baseline_variant_ignores_waves(self):
        modulator = ParameterModulator(BASELINES, WAVES)
        assert modulator.baseline() == BASELINES

    def test_coefficients_at_zero_include_phase(self):
        modulator = ParameterModulator(BASELINES, WAVES)
        _, B, _ = modulator.coefficients(0.0)
        assert B == pytest.approx(0.2 + 0.05 * math.sin(1.5))

    def test_pure(self):
        modulator = ParameterModulator(BASELINES, WAVES)
        assert modulator.coefficients(42.0) == modulator.coefficients(42.0)

    def test_positional_waves(self):
        waves = [SineWave(0.05, 0.002, 0.0), SineWave(0.05, 0.005, 1.5), (3.0, 0.007, 3.0)]
        positional = ParameterModulator(BASELINES, waves)
        keyed = ParameterModulator(BASELINES, WAVES)
        assert positional.coefficients(99.0) == keyed.coefficients(99.0)

    def test_missing_waves_are_constant(self):
        modulator = ParameterModulator(BASELINES, {"c": SineWave(1.0, 1.0, 0.0)})
        A, B, C = modulator.coefficients(math.pi / 2)
        assert (A, B) == (0.2, 0.2)
        assert C == pytest.approx(6.7)

    def test_no_waves(self):
        modulator = ParameterModulator(BASELINES)
        assert modulator.coefficients(1000.0) == BASELINES

    def test_as_dict(self):
        modulator = ParameterModulator(BASELINES)
        assert modulator.as_dict(0.0) == {"a": 0.2, "b": 0.2, "c": 5.7}

    def test_unknown_wave_name_raises(self):
        with pytest.raises(ValueError, match="unknown coefficients"):
            ParameterModulator(BASELINES, {"d": SineWave()})

    def test_wrong_baseline_count_raises(self):
        with pytest.raises(ValueError, match="3 baseline"):
            ParameterModulator((0.2, 0.2))

    def test_non_finite_baseline_raises(self):
        with pytest.raises(ValueError, match="finite"):
            ParameterModulator((0.2, np.nan, 5.7))

    def test_wrong_wave_count_raises(self):
        with pytest.raises(ValueError, match="Expected 3 waves"):
            ParameterModulator(BASELINES, [SineWave()])
