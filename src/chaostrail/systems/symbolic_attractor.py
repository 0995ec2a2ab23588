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
Symbolic Attractor Base Class

Defines autonomous three-variable systems symbolically and generates fast
NumPy evaluators from the symbolic form.

Responsibilities:
- Holding the symbolic right-hand side ds/dt = f(s; A, B, C)
- Code generation of NumPy callables via sympy.lambdify
- Forward evaluation for single states and trajectory batches
- Symbolic Jacobian and divergence for analysis

Unlike a controlled system, the coefficients are NOT substituted at
definition time. They change every frame, so they remain arguments of the
generated function alongside the state.
"""

from typing import Dict, List, Optional, Sequence

import numpy as np
import sympy as sp

from ..types.trail import ArrayLike, Coefficients


class SymbolicAttractor:
    """
    Base class for three-variable chaotic systems with time-varying coefficients.

    Subclasses implement ``define_system`` and set:
    - ``self.state_vars``: list of 3 state symbols [x, y, z]
    - ``self.coefficient_vars``: list of 3 coefficient symbols [a, b, c]
    - ``self.parameters``: dict mapping coefficient symbols to baseline values
    - ``self._f_sym``: sp.Matrix (3x1) right-hand side

    Example:
        >>> system = Rossler()
        >>> ds = system.evaluate(np.array([1.0, 0.0, 0.0]), (0.2, 0.2, 5.7))
        >>> ds
        array([-0. ,  1. ,  0.2])
        >>>
        >>> # Batched: one row per trajectory
        >>> ds_batch = system.evaluate(np.zeros((7, 3)), system.baseline)
        >>> ds_batch.shape
        (7, 3)
    """

    nx = 3

    def __init__(self, *args, **kwargs):
        self.state_vars: List[sp.Symbol] = []
        self.coefficient_vars: List[sp.Symbol] = []
        self.parameters: Dict[sp.Symbol, float] = {}
        self._f_sym: Optional[sp.Matrix] = None

        self.define_system(*args, **kwargs)
        self._validate_definition()

        args_sym = list(self.state_vars) + list(self.coefficient_vars)
        # One callable per component so constant entries still broadcast
        self._f_numpy = sp.lambdify(args_sym, list(self._f_sym), modules="numpy")
        self._jac_sym = self._f_sym.jacobian(self.state_vars)
        self._jac_numpy = sp.lambdify(args_sym, self._jac_sym, modules="numpy")

        self._stats = {"calls": 0}

    def define_system(self, *args, **kwargs):
        raise NotImplementedError(
            f"{self.__class__.__name__} must implement define_system()"
        )

    def _validate_definition(self):
        if len(self.state_vars) != self.nx:
            raise ValueError(
                f"Expected {self.nx} state variables, got {len(self.state_vars)}"
            )
        if len(self.coefficient_vars) != 3:
            raise ValueError(
                f"Expected 3 coefficient variables, got {len(self.coefficient_vars)}"
            )
        if self._f_sym is None or self._f_sym.shape != (self.nx, 1):
            shape = None if self._f_sym is None else self._f_sym.shape
            raise ValueError(f"_f_sym must be a ({self.nx}, 1) Matrix, got {shape}")
        missing = [c for c in self.coefficient_vars if c not in self.parameters]
        if missing:
            raise ValueError(f"Missing baseline values for coefficients {missing}")

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def baseline(self) -> Coefficients:
        """Baseline coefficients (A0, B0, C0) in coefficient_vars order."""
        return tuple(float(self.parameters[c]) for c in self.coefficient_vars)

    @property
    def coefficient_names(self) -> List[str]:
        return [str(c) for c in self.coefficient_vars]

    # ========================================================================
    # Evaluation
    # ========================================================================

    def evaluate(self, state: ArrayLike, coefficients: Sequence[float]) -> np.ndarray:
        """
        Evaluate the right-hand side ds/dt = f(s; A, B, C).

        Args:
            state: Single state (3,) or batch (n, 3)
            coefficients: (A, B, C)

        Returns:
            Derivative with the same shape as ``state``
        """
        state = np.asarray(state, dtype=float)
        if state.ndim == 0 or state.shape[-1] != self.nx:
            raise ValueError(
                f"Expected state with last dimension {self.nx}, got shape {state.shape}"
            )
        a, b, c = coefficients
        x, y, z = state[..., 0], state[..., 1], state[..., 2]

        components = self._f_numpy(x, y, z, a, b, c)
        self._stats["calls"] += 1
        return np.stack(np.broadcast_arrays(*components), axis=-1).astype(float)

    def __call__(self, state: ArrayLike, coefficients: Sequence[float]) -> np.ndarray:
        return self.evaluate(state, coefficients)

    def jacobian(self, state: ArrayLike, coefficients: Sequence[float]) -> np.ndarray:
        """
        Jacobian df/ds at a single state, shape (3, 3).

        Example:
            >>> J = system.jacobian(np.zeros(3), (0.2, 0.2, 5.7))
            >>> np.trace(J)  # a + x - c at the origin
            -5.5
        """
        state = np.asarray(state, dtype=float)
        if state.shape != (self.nx,):
            raise ValueError(f"Expected state shape ({self.nx},), got {state.shape}")
        a, b, c = coefficients
        return np.array(self._jac_numpy(*state, a, b, c), dtype=float)

    def divergence(self, state: ArrayLike, coefficients: Sequence[float]) -> float:
        """Trace of the Jacobian: local phase-space volume contraction rate."""
        return float(np.trace(self.jacobian(state, coefficients)))

    # ========================================================================
    # Symbolic Access
    # ========================================================================

    def rhs_symbolic(self, substitute_baseline: bool = False) -> sp.Matrix:
        """Symbolic right-hand side, optionally with baselines substituted."""
        if substitute_baseline:
            return self._f_sym.subs(self.parameters)
        return self._f_sym

    def get_stats(self) -> dict:
        return {"calls": self._stats["calls"]}

    def reset_stats(self):
        self._stats["calls"] = 0

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in zip(self.coefficient_names, self.baseline))
        return f"{self.__class__.__name__}({params})"
