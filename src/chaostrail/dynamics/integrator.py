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
Fixed-Step Runge-Kutta Integration

Advances trajectory states by one fixed time step with the classical
4th-order Runge-Kutta scheme:

    k1 = f(s)
    k2 = f(s + k1·dt/2)
    k3 = f(s + k2·dt/2)
    k4 = f(s + k3·dt)
    s_next = s + (dt/6)·(k1 + 2·k2 + 2·k3 + k4)

The step size is never adapted. If dt is too large for the dynamics the
solution diverges and NaN/inf propagate through the state; choosing a stable
dt is the caller's responsibility.

Works on a single state (3,) or a batch (n, 3). Rows of a batch are
independent, so stepping a batch is equivalent to stepping each row in index
order.
"""

import math
import time
from typing import Callable, Sequence

import numpy as np

from ..types.trail import ArrayLike

RHSFunction = Callable[[np.ndarray, Sequence[float]], np.ndarray]


def rk4_step(
    f: RHSFunction, state: ArrayLike, dt: float, coefficients: Sequence[float]
) -> np.ndarray:
    """
    One classical RK4 step.

    Pure: the input state is not modified and identical inputs always give
    bit-identical outputs.

    Args:
        f: Right-hand side f(state, coefficients) -> derivative
        state: Current state (3,) or batch (n, 3)
        dt: Step size
        coefficients: (A, B, C) held constant over the step

    Returns:
        Next state, same shape as ``state``

    Example:
        >>> system = Rossler()
        >>> rk4_step(system.evaluate, np.zeros(3), 0.01, (0.0, 0.0, 0.0))
        array([0., 0., 0.])
    """
    s = np.asarray(state, dtype=float)

    k1 = f(s, coefficients)
    k2 = f(s + k1 * dt * 0.5, coefficients)
    k3 = f(s + k2 * dt * 0.5, coefficients)
    k4 = f(s + k3 * dt, coefficients)

    return s + (dt / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)


class RK4Integrator:
    """
    Fixed-step RK4 integrator bound to a system and a step size.

    Parameters
    ----------
    system : SymbolicAttractor
        Anything with ``evaluate(state, coefficients)``
    dt : float
        Fixed step size, must be positive and finite

    Examples
    --------
    >>> integrator = RK4Integrator(Rossler(), dt=0.01)
    >>> s = np.array([0.1, 0.0, 0.0])
    >>> s = integrator.step(s, (0.2, 0.2, 5.7))
    >>>
    >>> # Many steps with constant coefficients
    >>> s = integrator.advance(s, (0.2, 0.2, 5.7), n_steps=5000)
    >>> integrator.get_stats()["steps"]
    5001
    """

    def __init__(self, system, dt: float):
        dt = float(dt)
        if not math.isfinite(dt) or dt <= 0:
            raise ValueError(f"Time step dt must be positive and finite, got {dt}")
        self.system = system
        self.dt = dt

        self._stats = {
            "steps": 0,
            "time": 0.0,
        }

    def step(self, state: ArrayLike, coefficients: Sequence[float]) -> np.ndarray:
        """Advance by one step of size ``self.dt``."""
        start_time = time.perf_counter()
        result = rk4_step(self.system.evaluate, state, self.dt, coefficients)
        self._stats["steps"] += 1
        self._stats["time"] += time.perf_counter() - start_time
        return result

    def advance(
        self, state: ArrayLike, coefficients: Sequence[float], n_steps: int
    ) -> np.ndarray:
        """
        Advance ``n_steps`` times with constant coefficients.

        Equivalent to calling ``step`` n_steps times. n_steps == 0 returns a
        copy of the state.
        """
        if n_steps < 0:
            raise ValueError(f"n_steps must be non-negative, got {n_steps}")
        s = np.array(state, dtype=float)
        for _ in range(n_steps):
            s = self.step(s, coefficients)
        return s

    # ========================================================================
    # Performance Tracking
    # ========================================================================

    def get_stats(self) -> dict:
        return {
            "steps": self._stats["steps"],
            "total_time": self._stats["time"],
            "avg_time": self._stats["time"] / max(1, self._stats["steps"]),
        }

    def reset_stats(self):
        self._stats["steps"] = 0
        self._stats["time"] = 0.0

    def __repr__(self) -> str:
        return f"RK4Integrator(system={self.system!r}, dt={self.dt})"
