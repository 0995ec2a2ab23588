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
Trajectory Set

Owns the states of N independent trajectories together with their fixed
visual modifiers. Trajectories are created once from a deterministic rule,
mutated by every integration step and never destroyed during a session.

Default generation rule (evenly spaced):
- initial state:   x = 0.1·(i+1), y = 0, z = 0
- color offset:    i / N
- scale modifier:  (i+1) / N
"""

from typing import Optional

import numpy as np

from ..types.trail import ArrayLike, StateBatch


def default_initial_states(n: int) -> np.ndarray:
    states = np.zeros((n, 3))
    states[:, 0] = 0.1 * (np.arange(n) + 1)
    return states


def default_color_offsets(n: int) -> np.ndarray:
    return np.arange(n) / max(n, 1)


def default_scale_modifiers(n: int) -> np.ndarray:
    return (np.arange(n) + 1) / max(n, 1)


class TrajectorySet:
    """
    N trajectory states plus per-trajectory color offset and scale modifier.

    Parameters
    ----------
    n_trajectories : int
        Number of trajectories N >= 0
    initial_states : Optional[ArrayLike]
        (N, 3) initial conditions, default rule when None
    color_offsets : Optional[ArrayLike]
        (N,) hue offsets in [0, 1), default i/N
    scale_modifiers : Optional[ArrayLike]
        (N,) positive visual scales, default (i+1)/N

    Examples
    --------
    >>> trajectories = TrajectorySet(3)
    >>> trajectories.states[:, 0]
    array([0.1, 0.2, 0.3])
    >>> trajectories.color_offsets
    array([0.        , 0.33333333, 0.66666667])
    >>> trajectories.visual_positions(scale_factor=10.0)[0]
    array([0.33333333, 0.        , 0.        ])
    """

    def __init__(
        self,
        n_trajectories: int,
        initial_states: Optional[ArrayLike] = None,
        color_offsets: Optional[ArrayLike] = None,
        scale_modifiers: Optional[ArrayLike] = None,
    ):
        n = int(n_trajectories)
        if n < 0:
            raise ValueError(f"n_trajectories must be non-negative, got {n}")
        self.n_trajectories = n

        if initial_states is None:
            initial = default_initial_states(n)
        else:
            initial = np.array(initial_states, dtype=float)
            if initial.shape != (n, 3):
                raise ValueError(f"initial_states must have shape ({n}, 3), got {initial.shape}")

        if color_offsets is None:
            offsets = default_color_offsets(n)
        else:
            offsets = np.array(color_offsets, dtype=float)
            if offsets.shape != (n,):
                raise ValueError(f"color_offsets must have shape ({n},), got {offsets.shape}")
            if np.any(offsets < 0) or np.any(offsets >= 1):
                raise ValueError(f"color_offsets must lie in [0, 1), got {offsets}")

        if scale_modifiers is None:
            modifiers = default_scale_modifiers(n)
        else:
            modifiers = np.array(scale_modifiers, dtype=float)
            if modifiers.shape != (n,):
                raise ValueError(f"scale_modifiers must have shape ({n},), got {modifiers.shape}")
            if np.any(modifiers <= 0):
                raise ValueError(f"scale_modifiers must be positive, got {modifiers}")

        self.initial_states = initial
        self.initial_states.flags.writeable = False
        self.color_offsets = offsets
        self.scale_modifiers = modifiers
        self.states: StateBatch = initial.copy()
        self.steps_taken = 0

    def __len__(self) -> int:
        return self.n_trajectories

    def update(self, new_states: np.ndarray, steps: int = 1):
        """Replace all states after ``steps`` integration steps (default one)."""
        new_states = np.asarray(new_states, dtype=float)
        if new_states.shape != self.states.shape:
            raise ValueError(
                f"Expected states of shape {self.states.shape}, got {new_states.shape}"
            )
        self.states = new_states
        self.steps_taken += steps

    def visual_positions(self, scale_factor: float = 1.0) -> np.ndarray:
        """States scaled by scale_factor · scale_modifier_i, shape (N, 3)."""
        return self.states * scale_factor * self.scale_modifiers[:, np.newaxis]

    def reset(self):
        """Return every trajectory to its initial condition."""
        self.states = self.initial_states.copy()
        self.steps_taken = 0

    def __repr__(self) -> str:
        return f"TrajectorySet(n_trajectories={self.n_trajectories}, steps_taken={self.steps_taken})"
