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
ChaosTrail: Multi-Trajectory Chaotic Trail Simulation

Simulates several Rössler trajectories with time-modulated coefficients and
streams their recent history into a fixed-capacity trail buffer for
real-time 3D rendering. Rendering itself is left to the caller: every tick
yields per-trajectory positions, colors and a shared visible range.
"""

# Library version
__version__ = "1.0.0"

# Submodules
from . import dynamics, simulation, systems, trail, types

# Numerical core
from .dynamics import ParameterModulator, RK4Integrator, SineWave, rk4_step

# Orchestration and configuration
from .simulation import (
    DEFAULT_CONFIG,
    ConfigurationError,
    SimulationClock,
    TrailConfig,
    TrailSimulator,
    TrajectorySet,
    validate_config,
)

# Systems
from .systems import Rossler, SymbolicAttractor

# Trail storage and coloring
from .trail import (
    ColorMapper,
    CursorState,
    TrailPhase,
    WindowBuffer,
    advance_cursor,
    hsl_to_rgb,
    phase_of,
)
from .types import TrailFrame, TrajectoryView

__all__ = [
    "__version__",
    # Submodules
    "dynamics",
    "simulation",
    "systems",
    "trail",
    "types",
    # Systems
    "SymbolicAttractor",
    "Rossler",
    # Numerical core
    "ParameterModulator",
    "SineWave",
    "RK4Integrator",
    "rk4_step",
    # Trail
    "WindowBuffer",
    "CursorState",
    "TrailPhase",
    "advance_cursor",
    "phase_of",
    "ColorMapper",
    "hsl_to_rgb",
    # Simulation
    "TrailSimulator",
    "SimulationClock",
    "TrajectorySet",
    "TrailConfig",
    "DEFAULT_CONFIG",
    "ConfigurationError",
    "validate_config",
    # Render types
    "TrailFrame",
    "TrajectoryView",
]
