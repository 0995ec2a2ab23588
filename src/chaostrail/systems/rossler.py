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

import sympy as sp

from .symbolic_attractor import SymbolicAttractor


class Rossler(SymbolicAttractor):
    """
    Rössler system - a minimal continuous-time chaotic flow.

    Physical System:
    ---------------
    Introduced by Otto Rössler (1976) as the simplest system of autonomous
    ODEs with a chaotic attractor: only one nonlinear term (z·x). The flow
    spirals outward in the x-y plane and is periodically lifted and folded
    back by the z equation, producing a single-band "Möbius" attractor.

    State Space:
    -----------
    State: s = [x, y, z]
        - x, y: Coordinates of the outward spiral in the horizontal plane
          [dimensionless]
        - z: Height of the folding excursion [dimensionless]
          * Stays near zero for most of each orbit
          * Spikes when x exceeds c, then relaxes back

    Coefficients: (a, b, c)
        Left symbolic so they can be modulated over time. The generated
        evaluator takes them as arguments next to the state.

    Dynamics:
    --------
        ẋ = -y - z
        ẏ = x + a·y
        ż = b + z·(x - c)

    **First two equations (spiral)**:
    - Linear oscillation in (x, y) with growth rate controlled by a
    - a > 0: Unstable spiral, orbits expand outward

    **Third equation (folding)**:
    - b: Constant injection keeping z positive
    - z·(x - c): z grows when x > c and decays otherwise
    - The growing z feeds back into ẋ and pulls the orbit inward

    Parameters:
    ----------
    a : float, default=0.2
        Spiral growth rate [dimensionless]
    b : float, default=0.2
        Folding offset [dimensionless]
    c : float, default=5.7
        Folding threshold [dimensionless]. Classic chaotic regime at c = 5.7.
        Period-doubling route to chaos as c increases from about 2 to 6.

    Equilibria:
    ----------
    For c² > 4ab there are two fixed points:

        x± = (c ± √(c² - 4ab)) / 2,  y± = -x±/a,  z± = x±/a

    Both are unstable in the chaotic regime. When a = b = 0 every point on
    the line x = 0, y = -z is an equilibrium; the origin is one of them.

    Divergence:
    ----------
        ∇·f = a + x - c

    Negative on average along the attractor (dissipative flow).

    Examples
    --------
    >>> system = Rossler()
    >>> system.baseline
    (0.2, 0.2, 5.7)
    >>> system.evaluate(np.array([0.1, 0.0, 0.0]), system.baseline)
    array([-0.  ,  0.1 ,  0.2 ])
    """

    def __init__(self, a: float = 0.2, b: float = 0.2, c: float = 5.7):
        super().__init__(a, b, c)

    def define_system(self, a_val, b_val, c_val):
        x, y, z = sp.symbols("x y z", real=True)
        a, b, c = sp.symbols("a b c", real=True)

        self.parameters = {a: a_val, b: b_val, c: c_val}

        self.state_vars = [x, y, z]
        self.coefficient_vars = [a, b, c]

        dx = -y - z
        dy = x + a * y
        dz = b + z * (x - c)

        self._f_sym = sp.Matrix([dx, dy, dz])
