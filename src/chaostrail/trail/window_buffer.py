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
Bounded Window Buffer

Fixed-capacity, append-oriented storage of trail positions and colors for
every trajectory, plus the lifecycle of the shared (head, tail) cursor.

Lifecycle
---------
With window size W and capacity M (M > W), the cursor moves through four
phases. Each tick writes at ``head`` as it was BEFORE the transition, and the
visible range is [tail, head) AFTER the transition.

    Phase      Condition               Transition
    --------   ---------------------   ------------------
    FILLING    head < W                head += 1
    SLIDING    W <= head < M           head += 1, tail += 1
    DRAINING   head == M, tail < M     tail += 1
    RESET      head == M, tail == M    head = tail = 0

During DRAINING the write slot equals M, outside the arena. Such writes are
dropped: the arena content freezes while tail catches up, the visible trail
shrinks to nothing and RESET restarts it from empty. This is not a modulo
ring buffer; the periodic full-trail disappearance is observable behavior.

With overflow_policy="reset" the DRAINING phase is skipped: as soon as head
reaches M the next transition goes straight to (0, 0).

Example (W=3, M=6):

    (0,0) (1,0) (2,0) (3,0) (4,1) (5,2) (6,3) (6,4) (6,5) (6,6) (0,0)
    |------ FILLING ------| |- SLIDING -| |---- DRAINING ----| RESET
"""

from enum import Enum
from typing import List, NamedTuple, Tuple

import numpy as np

OVERFLOW_POLICIES = ("drain", "reset")


class TrailPhase(Enum):
    """Lifecycle phase of the shared cursor."""

    FILLING = "filling"
    SLIDING = "sliding"
    DRAINING = "draining"
    RESET = "reset"


class CursorState(NamedTuple):
    """
    Shared cursor pair, 0 <= tail <= head <= capacity.

    ``head`` is the next write slot; the visible range is [tail, head).
    """

    head: int = 0
    tail: int = 0

    @property
    def visible_range(self) -> Tuple[int, int]:
        return (self.tail, self.head)

    @property
    def length(self) -> int:
        return self.head - self.tail


def check_window(window_size: int, capacity: int):
    """Raise ValueError unless 0 < window_size < capacity."""
    if int(window_size) != window_size or window_size <= 0:
        raise ValueError(f"window_size must be a positive integer, got {window_size}")
    if int(capacity) != capacity or capacity <= window_size:
        raise ValueError(
            f"capacity must be an integer greater than window_size "
            f"({window_size}), got {capacity}"
        )


def phase_of(cursor: CursorState, window_size: int, capacity: int) -> TrailPhase:
    """Phase that determines the cursor's next transition."""
    head, tail = cursor
    if not 0 <= tail <= head <= capacity:
        raise ValueError(
            f"Cursor out of bounds: need 0 <= tail <= head <= {capacity}, "
            f"got head={head}, tail={tail}"
        )
    if head < window_size:
        return TrailPhase.FILLING
    if head < capacity:
        return TrailPhase.SLIDING
    if tail < capacity:
        return TrailPhase.DRAINING
    return TrailPhase.RESET


def advance_cursor(
    cursor: CursorState,
    window_size: int,
    capacity: int,
    overflow_policy: str = "drain",
) -> CursorState:
    """
    Cursor after one tick.

    Pure function of its arguments.

    Examples
    --------
    >>> c = CursorState(0, 0)
    >>> for _ in range(4):
    ...     c = advance_cursor(c, window_size=3, capacity=6)
    >>> c
    CursorState(head=4, tail=1)
    """
    if overflow_policy not in OVERFLOW_POLICIES:
        raise ValueError(
            f"overflow_policy must be one of {OVERFLOW_POLICIES}, got {overflow_policy!r}"
        )
    head, tail = cursor
    phase = phase_of(cursor, window_size, capacity)

    if phase is TrailPhase.FILLING:
        return CursorState(head + 1, tail)
    if phase is TrailPhase.SLIDING:
        return CursorState(head + 1, tail + 1)
    if phase is TrailPhase.DRAINING and overflow_policy == "drain":
        return CursorState(head, tail + 1)
    return CursorState(0, 0)


class WindowBuffer:
    """
    Pre-allocated position and color arena for all trajectories.

    Each trajectory owns one (capacity, 3) slab of positions and one of
    colors. The arena is allocated once and never grows; the cursor lives
    outside the buffer and is passed in by the owner so that every
    trajectory always shares the same range.

    Parameters
    ----------
    n_trajectories : int
        Number of trajectories (0 allowed, gives an empty arena)
    window_size : int
        Target visible length W
    recycle_factor : int
        Capacity multiplier, capacity = W · recycle_factor (must be >= 2)
    dtype : numpy dtype
        Storage type, float32 by default (vertex attribute layout)

    Examples
    --------
    >>> buf = WindowBuffer(n_trajectories=2, window_size=3, recycle_factor=2)
    >>> buf.capacity
    6
    >>> buf.write(0, np.ones((2, 3)), np.zeros((2, 3)))
    True
    >>> buf.write(6, np.ones((2, 3)), np.zeros((2, 3)))  # at capacity: dropped
    False
    >>> views = buf.view(CursorState(head=1, tail=0))
    >>> views[0][0]
    array([[1., 1., 1.]], dtype=float32)
    """

    def __init__(
        self,
        n_trajectories: int,
        window_size: int,
        recycle_factor: int = 5,
        dtype=np.float32,
    ):
        if n_trajectories < 0:
            raise ValueError(f"n_trajectories must be non-negative, got {n_trajectories}")
        if int(recycle_factor) != recycle_factor:
            raise ValueError(f"recycle_factor must be an integer, got {recycle_factor}")
        capacity = int(window_size) * int(recycle_factor)
        check_window(window_size, capacity)

        self.n_trajectories = int(n_trajectories)
        self.window_size = int(window_size)
        self.recycle_factor = int(recycle_factor)
        self.capacity = capacity

        self.positions = np.zeros((self.n_trajectories, capacity, 3), dtype=dtype)
        self.colors = np.zeros((self.n_trajectories, capacity, 3), dtype=dtype)

    def write(self, slot: int, positions: np.ndarray, colors: np.ndarray) -> bool:
        """
        Store one point per trajectory at ``slot``.

        Args:
            slot: Write index, normally the cursor head before the transition
            positions: (n_trajectories, 3)
            colors: (n_trajectories, 3)

        Returns:
            True if written, False if the slot was at or beyond capacity and
            the write was dropped (nothing is modified)
        """
        if slot < 0:
            raise ValueError(f"slot must be non-negative, got {slot}")
        if slot >= self.capacity:
            return False
        expected = (self.n_trajectories, 3)
        if np.shape(positions) != expected or np.shape(colors) != expected:
            raise ValueError(
                f"Expected positions and colors of shape {expected}, got "
                f"{np.shape(positions)} and {np.shape(colors)}"
            )
        self.positions[:, slot] = positions
        self.colors[:, slot] = colors
        return True

    def view(self, cursor: CursorState) -> List[Tuple[np.ndarray, np.ndarray]]:
        """
        Read-only (positions, colors) views of [tail, head) per trajectory.

        The views share memory with the arena: they reflect later writes but
        cannot be written through.
        """
        tail, head = cursor.tail, min(cursor.head, self.capacity)
        views = []
        for i in range(self.n_trajectories):
            pos = self.positions[i, tail:head]
            col = self.colors[i, tail:head]
            pos.flags.writeable = False
            col.flags.writeable = False
            views.append((pos, col))
        return views

    def clear(self):
        """Zero the arena (capacity is unchanged)."""
        self.positions.fill(0)
        self.colors.fill(0)

    @property
    def nbytes(self) -> int:
        return self.positions.nbytes + self.colors.nbytes

    def __repr__(self) -> str:
        return (
            f"WindowBuffer(n_trajectories={self.n_trajectories}, "
            f"window_size={self.window_size}, capacity={self.capacity}, "
            f"dtype={self.positions.dtype})"
        )
