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
Trail and Render-State Types

Defines the types exchanged between the simulation core and an external
renderer:
- Per-trajectory views into the window buffer
- The per-tick render frame (positions, colors, shared visible range)
- Simulator performance statistics

Mathematical Context
-------------------
Each trajectory follows the same autonomous 3-variable system

    ds/dt = f(s; A(t), B(t), C(t))

integrated with a fixed step. The renderer never sees the integration state
directly; it sees the scaled positions that were written into a fixed-capacity
buffer, restricted to the visible range [start, end).

Shape Conventions:
- Single state: (3,)
- Trajectory batch: (n_trajectories, 3)
- Buffer arena: (n_trajectories, capacity, 3)
- Visible slice of one trajectory: (end - start, 3)

Usage
-----
>>> from chaostrail.types.trail import TrailFrame, TrajectoryView
>>>
>>> frame: TrailFrame = simulator.tick()
>>> start, end = frame["visible_range"]
>>> for view in frame["trajectories"]:
...     draw_line(view["positions"], view["colors"])
"""

from typing import List, Tuple, Union

import numpy as np
from typing_extensions import TypedDict

ArrayLike = Union[np.ndarray, List[float], Tuple[float, ...]]

StateVector = np.ndarray
"""
Single trajectory state [x, y, z], shape (3,).
"""

StateBatch = np.ndarray
"""
States of all trajectories, shape (n_trajectories, 3).

Row i is trajectory i. Rows never interact: the only coupling between
trajectories is the shared set of coefficients.
"""

Coefficients = Tuple[float, float, float]
"""
System coefficients (A, B, C) for one instant of simulated time.
"""

VisibleRange = Tuple[int, int]
"""
Half-open buffer range [start, end) currently exposed for rendering.

Equal to (tail, head) of the shared cursor after the tick's transition.
"""


class TrajectoryView(TypedDict):
    """
    Read-only view of one trajectory's visible trail.

    Attributes
    ----------
    index : int
        Trajectory index in [0, n_trajectories)
    positions : np.ndarray
        Scaled positions in the visible range, shape (end - start, 3).
        A non-writeable view into the buffer arena, not a copy.
    colors : np.ndarray
        RGB colors in [0, 1] matching ``positions`` row for row

    Examples
    --------
    >>> view: TrajectoryView = frame["trajectories"][0]
    >>> view["positions"].shape
    (1, 3)
    >>> view["positions"].flags.writeable
    False
    """

    index: int
    positions: np.ndarray
    colors: np.ndarray


class TrailFrame(TypedDict):
    """
    Render state produced by one simulator tick.

    Attributes
    ----------
    t : float
        Simulated clock time used for modulation and color phase [s]
    coefficients : Coefficients
        (A, B, C) used for this tick's integration step
    visible_range : VisibleRange
        Shared (start, end) for every trajectory
    phase : str
        Name of the lifecycle phase whose transition produced this frame
        ('FILLING', 'SLIDING', 'DRAINING', or 'RESET' on the tick that
        cleared the trail)
    trajectories : List[TrajectoryView]
        One view per trajectory, in index order

    Examples
    --------
    >>> frame: TrailFrame = simulator.tick()
    >>> frame["visible_range"]
    (0, 1)
    >>> len(frame["trajectories"]) == simulator.n_trajectories
    True
    """

    t: float
    coefficients: Coefficients
    visible_range: VisibleRange
    phase: str
    trajectories: List[TrajectoryView]


class SimulatorStats(TypedDict):
    """
    Performance and lifecycle counters of a simulator.

    Attributes
    ----------
    ticks : int
        Number of production ticks since the last stats reset
    resets : int
        Number of RESET transitions (trail cleared to empty)
    dropped_writes : int
        Writes discarded because the write slot was at capacity
    total_time : float
        Wall time spent inside tick() [s]
    avg_time : float
        total_time / max(1, ticks) [s]
    """

    ticks: int
    resets: int
    dropped_writes: int
    total_time: float
    avg_time: float


__all__ = [
    "ArrayLike",
    "StateVector",
    "StateBatch",
    "Coefficients",
    "VisibleRange",
    "TrajectoryView",
    "TrailFrame",
    "SimulatorStats",
]
