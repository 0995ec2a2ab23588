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
Simulation orchestration: configuration, trajectories and the per-frame driver.
"""

from .config import DEFAULT_CONFIG, ConfigurationError, TrailConfig, validate_config
from .orchestrator import SimulationClock, TrailSimulator
from .trajectory_set import (
    TrajectorySet,
    default_color_offsets,
    default_initial_states,
    default_scale_modifiers,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigurationError",
    "TrailConfig",
    "validate_config",
    "SimulationClock",
    "TrailSimulator",
    "TrajectorySet",
    "default_initial_states",
    "default_color_offsets",
    "default_scale_modifiers",
]
