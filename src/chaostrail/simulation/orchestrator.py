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
Trail Simulator

Per-frame driver of the multi-trajectory chaotic trail.

This simulator handles:
- Warm-up: settling every trajectory onto the attractor before the first
  visible frame, with constant baseline coefficients and no buffer writes
- Ticks: coefficient modulation, one RK4 step for all trajectories, buffer
  write at the cursor head, trail colors, cursor transition
- Render state: per-trajectory read-only views of the visible range

Architecture
-----------
TrailSimulator is a THIN orchestrator that delegates to:
- ParameterModulator.coefficients() for the time-varying (A, B, C)
- RK4Integrator.step() for the state update (all trajectories at once)
- ColorMapper.colors() for the per-trajectory RGB
- WindowBuffer.write() / advance_cursor() for the bounded trail

The cursor pair is one CursorState value owned by the simulator and
replaced on every tick, so trajectories cannot drift out of sync: slot k of
every trajectory was written by the same tick.

The simulator's job is orchestration, not computation.
"""

import logging
import time
from typing import Callable, Mapping, Optional

import numpy as np

from ..dynamics.integrator import RK4Integrator
from ..dynamics.modulation import ParameterModulator
from ..systems.rossler import Rossler
from ..trail.color import ColorMapper
from ..trail.window_buffer import (
    CursorState,
    TrailPhase,
    WindowBuffer,
    advance_cursor,
    phase_of,
)
from ..types.trail import SimulatorStats, TrailFrame, VisibleRange
from .config import TrailConfig, validate_config
from .trajectory_set import TrajectorySet

logger = logging.getLogger(__name__)


class SimulationClock:
    """
    Monotonic elapsed time since the trajectories became visible.

    Parameters
    ----------
    time_source : Callable[[], float]
        Monotonic clock in seconds (time.perf_counter by default)

    Examples
    --------
    >>> now = [100.0]
    >>> clock = SimulationClock(lambda: now[0])
    >>> clock.start()
    >>> now[0] = 102.5
    >>> clock.elapsed()
    2.5
    """

    def __init__(self, time_source: Callable[[], float] = time.perf_counter):
        self.time_source = time_source
        self._origin: Optional[float] = None

    def start(self):
        """(Re)start counting from zero."""
        self._origin = self.time_source()

    @property
    def started(self) -> bool:
        return self._origin is not None

    def elapsed(self) -> float:
        if self._origin is None:
            raise RuntimeError("SimulationClock.elapsed() called before start()")
        return self.time_source() - self._origin


class TrailSimulator:
    """
    Multi-trajectory Rössler simulation feeding a bounded trail buffer.

    Parameters
    ----------
    config : Optional[Mapping]
        Partial TrailConfig; missing keys take DEFAULT_CONFIG values
    **overrides
        Individual configuration keys, applied after ``config``

    Raises
    ------
    ConfigurationError
        If the configuration is invalid (see validate_config)

    Examples
    --------
    Real-time use, clock driven by time.perf_counter:
    >>> sim = TrailSimulator()                 # warms up 5000 steps
    >>> frame = sim.tick()
    >>> frame["visible_range"]
    (0, 1)
    >>> for view in frame["trajectories"]:
    ...     renderer.update_line(view["index"], view["positions"], view["colors"])

    Deterministic playback at 60 frames per second:
    >>> sim = TrailSimulator(n_trajectories=2, window_size=100)
    >>> frame = sim.run(n_ticks=250, frame_dt=1 / 60)
    >>> frame["visible_range"]
    (150, 250)

    Small buffer to watch the whole lifecycle:
    >>> sim = TrailSimulator(window_size=3, recycle_factor=2, warmup_steps=0)
    >>> [sim.tick(t=0.0)["visible_range"] for _ in range(10)]
    [(0, 1), (0, 2), (0, 3), (1, 4), (2, 5), (3, 6), (4, 6), (5, 6), (6, 6), (0, 0)]
    """

    def __init__(self, config: Optional[Mapping] = None, **overrides):
        self.config: TrailConfig = validate_config(config, **overrides)
        cfg = self.config

        self.dt = cfg["dt"]
        self.window_size = cfg["window_size"]
        self.capacity = cfg["capacity"]
        self.scale_factor = cfg["scale_factor"]
        self.warmup_steps = cfg["warmup_steps"]
        self.overflow_policy = cfg["overflow_policy"]

        self.system = Rossler(*cfg["baselines"])
        self.modulator = ParameterModulator(
            cfg["baselines"], cfg["waves"], names=self.system.coefficient_names
        )
        self.integrator = RK4Integrator(self.system, self.dt)
        self.trajectories = TrajectorySet(
            cfg["n_trajectories"],
            initial_states=cfg["initial_states"],
            color_offsets=cfg["color_offsets"],
            scale_modifiers=cfg["scale_modifiers"],
        )
        self.buffer = WindowBuffer(
            cfg["n_trajectories"],
            self.window_size,
            cfg["recycle_factor"],
            dtype=cfg["dtype"],
        )
        self.color_mapper = ColorMapper(
            self.trajectories.color_offsets,
            base_speed=cfg["color_base_speed"],
            index_step=cfg["color_index_step"],
            saturation=cfg["saturation"],
            lightness=cfg["lightness"],
        )
        self.clock = SimulationClock(cfg["time_source"])

        self._cursor = CursorState(0, 0)
        self._last_phase: Optional[TrailPhase] = None
        self._last_t = 0.0
        self._last_coefficients = self.modulator.baseline()
        self._frame_count = 0
        self._warmed_up = False

        self._stats = {
            "ticks": 0,
            "resets": 0,
            "dropped_writes": 0,
            "time": 0.0,
        }

        if cfg["auto_warm_up"]:
            self.warm_up()

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def warm_up(self):
        """
        Pre-seed every trajectory with ``warmup_steps`` discarded RK4 steps.

        Uses the constant baseline coefficients, writes nothing to the buffer,
        then starts the clock from zero with the cursor at (0, 0).

        Raises
        ------
        RuntimeError
            If the simulator has already been warmed up (use restart())
        """
        if self._warmed_up:
            raise RuntimeError("Simulation already warmed up; call restart() to start over")

        start_time = time.perf_counter()
        if self.n_trajectories > 0 and self.warmup_steps > 0:
            states = self.integrator.advance(
                self.trajectories.states, self.modulator.baseline(), self.warmup_steps
            )
            self.trajectories.update(states, steps=self.warmup_steps)

        self._cursor = CursorState(0, 0)
        self._last_phase = None
        self._frame_count = 0
        self._last_t = 0.0
        self._last_coefficients = self.modulator.baseline()
        self.clock.start()
        self._warmed_up = True
        logger.debug(
            "Warm-up finished: %d trajectories x %d steps in %.3fs",
            self.n_trajectories,
            self.warmup_steps,
            time.perf_counter() - start_time,
        )

    def restart(self):
        """
        Start a new session: initial conditions, empty trail, clock at zero.

        Nothing from the previous session is kept.
        """
        self.trajectories.reset()
        self.buffer.clear()
        self._warmed_up = False
        logger.debug("Restarting trail simulation")
        self.warm_up()

    # ========================================================================
    # Per-Frame API
    # ========================================================================

    def tick(self, t: Optional[float] = None) -> TrailFrame:
        """
        Advance one frame and return the render state.

        Parameters
        ----------
        t : Optional[float]
            Simulated time for modulation and color phase. None reads the
            simulation clock (seconds since warm-up finished).

        Returns
        -------
        TrailFrame
            Positions/colors views and the visible range after the transition
        """
        if not self._warmed_up:
            self.warm_up()

        start_time = time.perf_counter()
        if t is None:
            t = self.clock.elapsed()
        t = float(t)

        # One t for all three coefficients
        coefficients = self.modulator.coefficients(t)
        write_slot = self._cursor.head

        if self.n_trajectories > 0:
            self.trajectories.update(self.integrator.step(self.trajectories.states, coefficients))
            positions = self.trajectories.visual_positions(self.scale_factor)
            colors = self.color_mapper.colors(t)
            if not self.buffer.write(write_slot, positions, colors):
                self._stats["dropped_writes"] += 1

        previous = self._cursor
        self._cursor = advance_cursor(
            previous, self.window_size, self.capacity, self.overflow_policy
        )
        if self._cursor.head < previous.head:
            self._last_phase = TrailPhase.RESET
            self._stats["resets"] += 1
            logger.debug("Trail reset after frame %d", self._frame_count)
        else:
            self._last_phase = phase_of(previous, self.window_size, self.capacity)

        self._frame_count += 1
        self._last_t = t
        self._last_coefficients = coefficients

        self._stats["ticks"] += 1
        self._stats["time"] += time.perf_counter() - start_time

        return self.frame()

    def run(self, n_ticks: int, frame_dt: float) -> TrailFrame:
        """
        Tick ``n_ticks`` times at t = k · frame_dt (k = frame index).

        Deterministic playback independent of the wall clock. Returns the
        last frame, or the current frame when n_ticks == 0.
        """
        if n_ticks < 0:
            raise ValueError(f"n_ticks must be non-negative, got {n_ticks}")
        frame = self.frame()
        for _ in range(n_ticks):
            frame = self.tick(t=self._frame_count * frame_dt)
        return frame

    def frame(self) -> TrailFrame:
        """Current render state without advancing."""
        views = self.buffer.view(self._cursor)
        phase = self._last_phase or phase_of(self._cursor, self.window_size, self.capacity)
        return TrailFrame(
            t=self._last_t,
            coefficients=self._last_coefficients,
            visible_range=self._cursor.visible_range,
            phase=phase.name,
            trajectories=[
                {"index": i, "positions": positions, "colors": colors}
                for i, (positions, colors) in enumerate(views)
            ],
        )

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def n_trajectories(self) -> int:
        return self.trajectories.n_trajectories

    @property
    def cursor(self) -> CursorState:
        return self._cursor

    @property
    def phase(self) -> TrailPhase:
        """Phase governing the next transition."""
        return phase_of(self._cursor, self.window_size, self.capacity)

    @property
    def visible_range(self) -> VisibleRange:
        return self._cursor.visible_range

    @property
    def frame_count(self) -> int:
        """Production ticks since the last warm-up."""
        return self._frame_count

    @property
    def is_warmed_up(self) -> bool:
        return self._warmed_up

    @property
    def states(self) -> np.ndarray:
        """Copy of the current (unscaled) integration states, shape (N, 3)."""
        return self.trajectories.states.copy()

    # ========================================================================
    # Performance Tracking
    # ========================================================================

    def get_stats(self) -> SimulatorStats:
        """
        Tick counters and timing.

        Example:
            >>> stats = sim.get_stats()
            >>> print(f"{stats['ticks']} ticks, {stats['resets']} resets")
            >>> print(f"Avg tick: {stats['avg_time'] * 1e3:.3f} ms")
        """
        return SimulatorStats(
            ticks=self._stats["ticks"],
            resets=self._stats["resets"],
            dropped_writes=self._stats["dropped_writes"],
            total_time=self._stats["time"],
            avg_time=self._stats["time"] / max(1, self._stats["ticks"]),
        )

    def reset_stats(self):
        self._stats["ticks"] = 0
        self._stats["resets"] = 0
        self._stats["dropped_writes"] = 0
        self._stats["time"] = 0.0

    def __repr__(self) -> str:
        return (
            f"TrailSimulator(n_trajectories={self.n_trajectories}, dt={self.dt}, "
            f"window_size={self.window_size}, capacity={self.capacity}, "
            f"cursor={tuple(self._cursor)})"
        )
