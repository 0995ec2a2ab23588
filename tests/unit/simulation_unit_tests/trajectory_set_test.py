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
Unit Tests for TrajectorySet
"""

import numpy as np
import pytest

from chaostrail.simulation import (
    TrajectorySet,
    default_color_offsets,
    default_initial_states,
    default_scale_modifiers,
)


class TestDefaultRule:
    def test_initial_states(self):
        states = default_initial_states(4)
        np.testing.assert_allclose(states[:, 0], [0.1, 0.2, 0.3, 0.4])
        np.testing.assert_array_equal(states[:, 1:], np.zeros((4, 2)))

    def test_initial_states_distinct(self):
        states = default_initial_states(7)
        assert len({tuple(s) for s in states}) == 7

    def test_color_offsets(self):
        np.testing.assert_allclose(default_color_offsets(4), [0.0, 0.25, 0.5, 0.75])

    def test_scale_modifiers(self):
        np.testing.assert_allclose(default_scale_modifiers(4), [0.25, 0.5, 0.75, 1.0])

    def test_empty(self):
        assert default_initial_states(0).shape == (0, 3)
        assert default_color_offsets(0).shape == (0,)


class TestTrajectorySet:
    def test_construction(self):
        trajectories = TrajectorySet(3)
        assert len(trajectories) == 3
        assert trajectories.states.shape == (3, 3)
        assert trajectories.steps_taken == 0

    def test_custom_values(self):
        trajectories = TrajectorySet(
            2,
            initial_states=[[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]],
            color_offsets=[0.1, 0.9],
            scale_modifiers=[2.0, 3.0],
        )
        np.testing.assert_array_equal(trajectories.states[1], [4.0, 5.0, 6.0])
        np.testing.assert_array_equal(trajectories.color_offsets, [0.1, 0.9])

    def test_custom_initial_states_copied(self):
        initial = np.ones((2, 3))
        trajectories = TrajectorySet(2, initial_states=initial)
        initial[0, 0] = 99.0
        assert trajectories.states[0, 0] == 1.0

    def test_update_counts_steps(self):
        trajectories = TrajectorySet(2)
        trajectories.update(np.ones((2, 3)))
        trajectories.update(np.zeros((2, 3)), steps=10)
        assert trajectories.steps_taken == 11
        np.testing.assert_array_equal(trajectories.states, np.zeros((2, 3)))

    def test_update_shape_mismatch(self):
        with pytest.raises(ValueError, match="Expected states of shape"):
            TrajectorySet(2).update(np.zeros((3, 3)))

    def test_visual_positions(self):
        trajectories = TrajectorySet(
            2, initial_states=[[1.0, 2.0, 3.0], [1.0, 1.0, 1.0]], scale_modifiers=[0.5, 2.0]
        )
        positions = trajectories.visual_positions(scale_factor=10.0)
        np.testing.assert_allclose(positions, [[5.0, 10.0, 15.0], [20.0, 20.0, 20.0]])

    def test_visual_positions_do_not_touch_state(self):
        trajectories = TrajectorySet(2)
        before = trajectories.states.copy()
        trajectories.visual_positions(10.0)
        np.testing.assert_array_equal(trajectories.states, before)

    def test_reset(self):
        trajectories = TrajectorySet(2)
        trajectories.update(np.full((2, 3), 7.0))
        trajectories.reset()
        np.testing.assert_array_equal(trajectories.states, default_initial_states(2))
        assert trajectories.steps_taken == 0

    def test_initial_states_read_only(self):
        trajectories = TrajectorySet(2)
        with pytest.raises(ValueError):
            trajectories.initial_states[0, 0] = 1.0

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"initial_states": np.zeros((3, 3))}, "initial_states"),
            ({"color_offsets": [0.0, 1.2]}, "color_offsets"),
            ({"color_offsets": [0.0]}, "color_offsets"),
            ({"scale_modifiers": [1.0, -1.0]}, "scale_modifiers"),
        ],
    )
    def test_invalid(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            TrajectorySet(2, **kwargs)

    def test_negative_count(self):
        with pytest.raises(ValueError, match="non-negative"):
            TrajectorySet(-1)

    def test_repr(self):
        assert repr(TrajectorySet(2)) == "TrajectorySet(n_trajectories=2, steps_taken=0)"
