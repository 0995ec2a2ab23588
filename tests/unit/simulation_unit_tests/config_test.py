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
Unit Tests for Trail Simulator Configuration
"""

import time
import warnings

import numpy as np
import pytest

from chaostrail.dynamics import SineWave
from chaostrail.simulation import DEFAULT_CONFIG, ConfigurationError, validate_config


# ============================================================================
# Test Class 1: Defaults and Merging
# ============================================================================


class TestDefaults:
    def test_defaults(self):
        config = validate_config()

        assert config["n_trajectories"] == 7
        assert config["dt"] == 0.01
        assert config["window_size"] == 1234
        assert config["recycle_factor"] == 5
        assert config["capacity"] == 1234 * 5
        assert config["warmup_steps"] == 5000
        assert config["scale_factor"] == 10.0
        assert config["baselines"] == (0.2, 0.2, 5.7)
        assert config["overflow_policy"] == "drain"
        assert config["dtype"] == "float32"
        assert config["time_source"] is time.perf_counter

    def test_waves_normalized(self):
        waves = validate_config()["waves"]
        assert waves["c"] == SineWave(amplitude=3.0, frequency=0.007, phase=3.0)
        assert waves["b"] == SineWave(amplitude=0.05, frequency=0.005, phase=1.5)

    def test_defaults_not_mutated(self):
        validate_config(window_size=10, waves={"a": (1.0, 1.0, 1.0)})
        assert DEFAULT_CONFIG["window_size"] == 1234
        assert DEFAULT_CONFIG["waves"]["a"] == {
            "amplitude": 0.05,
            "frequency": 0.002,
            "phase": 0.0,
        }

    def test_overrides_take_precedence(self):
        config = validate_config({"window_size": 10, "dt": 0.02}, window_size=20)
        assert config["window_size"] == 20
        assert config["dt"] == 0.02
        assert config["capacity"] == 100

    def test_capacity_is_derived(self):
        config = validate_config(window_size=4, recycle_factor=3)
        assert config["capacity"] == 12

    def test_matching_capacity_accepted(self):
        config = validate_config(window_size=4, recycle_factor=3, capacity=12)
        assert config["capacity"] == 12

    def test_partial_waves_keep_defaults(self):
        waves = validate_config(waves={"c": (1.0, 0.5, 0.0)})["waves"]
        assert waves["a"] == SineWave(amplitude=0.05, frequency=0.002, phase=0.0)
        assert waves["b"] == SineWave(amplitude=0.05, frequency=0.005, phase=1.5)
        assert waves["c"] == SineWave(amplitude=1.0, frequency=0.5, phase=0.0)

    @pytest.mark.parametrize("waves", [{}, None])
    def test_empty_waves_disable_modulation(self, waves):
        assert validate_config(waves=waves)["waves"] == {}

    def test_waves_override_on_top_of_mapping(self):
        config = validate_config({"waves": {"a": (0.0, 0.0, 0.0)}}, waves={"b": (1.0, 1.0, 1.0)})
        assert config["waves"]["a"] == SineWave(0.0, 0.0, 0.0)
        assert config["waves"]["b"] == SineWave(1.0, 1.0, 1.0)
        assert config["waves"]["c"] == SineWave(amplitude=3.0, frequency=0.007, phase=3.0)

    def test_revalidation(self):
        config = validate_config(window_size=10)
        again = validate_config(config, recycle_factor=2)
        assert again["capacity"] == 20

    def test_per_trajectory_arrays_converted(self):
        config = validate_config(
            n_trajectories=2,
            initial_states=[[1.0, 0.0, 0.0], [2.0, 0.0, 0.0]],
            color_offsets=[0.0, 0.5],
            scale_modifiers=[1.0, 2.0],
        )
        assert isinstance(config["initial_states"], np.ndarray)
        assert config["initial_states"].shape == (2, 3)
        np.testing.assert_array_equal(config["color_offsets"], [0.0, 0.5])


# ============================================================================
# Test Class 2: Rejections
# ============================================================================


class TestRejections:
    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
            validate_config(windowsize=10)

    def test_unknown_key_in_mapping(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
            validate_config({"trajectories": 3})

    @pytest.mark.parametrize("factor", [1, 0, -2, 2.5, True])
    def test_capacity_must_exceed_window(self, factor):
        with pytest.raises(ConfigurationError, match="recycle_factor"):
            validate_config(recycle_factor=factor)

    @pytest.mark.parametrize("capacity", [2, 3, 3.5, "15"])
    def test_capacity_not_above_window(self, capacity):
        with pytest.raises(ConfigurationError, match="greater than window_size"):
            validate_config(window_size=3, capacity=capacity)

    def test_capacity_disagreeing_with_recycle_factor(self):
        with pytest.raises(ConfigurationError, match="derived as window_size"):
            validate_config(window_size=3, recycle_factor=5, capacity=9)

    @pytest.mark.parametrize("window_size", [0, -5, 3.0])
    def test_window_size(self, window_size):
        with pytest.raises(ConfigurationError, match="window_size"):
            validate_config(window_size=window_size)

    @pytest.mark.parametrize("dt", [0.0, -0.01, float("nan"), float("inf"), "fast"])
    def test_dt(self, dt):
        with pytest.raises(ConfigurationError, match="dt"):
            validate_config(dt=dt)

    @pytest.mark.parametrize("n", [-1, 2.0, None])
    def test_n_trajectories(self, n):
        with pytest.raises(ConfigurationError, match="n_trajectories"):
            validate_config(n_trajectories=n)

    def test_warmup_steps(self):
        with pytest.raises(ConfigurationError, match="warmup_steps"):
            validate_config(warmup_steps=-1)

    def test_non_finite_baseline(self):
        with pytest.raises(ConfigurationError, match="baselines"):
            validate_config(baselines=(0.2, float("inf"), 5.7))

    def test_baseline_count(self):
        with pytest.raises(ConfigurationError, match="3 coefficients"):
            validate_config(baselines=(0.2, 0.2))

    def test_unknown_wave_coefficient(self):
        with pytest.raises(ConfigurationError, match="unknown coefficients"):
            validate_config(waves={"sigma": (1.0, 1.0, 0.0)})

    def test_bad_wave(self):
        with pytest.raises(ConfigurationError, match="Invalid wave"):
            validate_config(waves={"a": (1.0, float("nan"), 0.0)})

    def test_scale_factor(self):
        with pytest.raises(ConfigurationError, match="scale_factor"):
            validate_config(scale_factor=0.0)

    def test_initial_states_shape(self):
        with pytest.raises(ConfigurationError, match="initial_states"):
            validate_config(n_trajectories=2, initial_states=np.zeros((3, 3)))

    def test_initial_states_finite(self):
        with pytest.raises(ConfigurationError, match="initial_states"):
            validate_config(n_trajectories=1, initial_states=[[np.nan, 0.0, 0.0]])

    def test_color_offsets_range(self):
        with pytest.raises(ConfigurationError, match="color_offsets"):
            validate_config(n_trajectories=2, color_offsets=[0.0, 1.0])

    def test_color_offsets_length(self):
        with pytest.raises(ConfigurationError, match="color_offsets"):
            validate_config(n_trajectories=2, color_offsets=[0.0])

    def test_scale_modifiers_positive(self):
        with pytest.raises(ConfigurationError, match="scale_modifiers"):
            validate_config(n_trajectories=2, scale_modifiers=[1.0, 0.0])

    def test_overflow_policy(self):
        with pytest.raises(ConfigurationError, match="overflow_policy"):
            validate_config(overflow_policy="wrap")

    def test_integer_dtype(self):
        with pytest.raises(ConfigurationError, match="floating"):
            validate_config(dtype="int32")

    def test_unknown_dtype(self):
        with pytest.raises(ConfigurationError, match="dtype"):
            validate_config(dtype="not-a-dtype")

    def test_time_source(self):
        with pytest.raises(ConfigurationError, match="time_source"):
            validate_config(time_source=1.0)

    def test_lightness(self):
        with pytest.raises(ConfigurationError, match="lightness"):
            validate_config(lightness=2.0)


# ============================================================================
# Test Class 3: Warnings
# ============================================================================


class TestWarnings:
    def test_zero_trajectories_warns(self):
        with pytest.warns(UserWarning, match="n_trajectories=0"):
            config = validate_config(n_trajectories=0)
        assert config["n_trajectories"] == 0

    def test_large_dt_warns(self):
        with pytest.warns(UserWarning, match="large for fixed-step RK4"):
            config = validate_config(dt=0.5)
        assert config["dt"] == 0.5

    def test_defaults_do_not_warn(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            validate_config()
