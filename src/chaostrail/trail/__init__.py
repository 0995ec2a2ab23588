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
Bounded trail storage and trail coloring.
"""

from .color import ColorMapper, hsl_to_rgb, hue_from_wave
from .window_buffer import (
    OVERFLOW_POLICIES,
    CursorState,
    TrailPhase,
    WindowBuffer,
    advance_cursor,
    check_window,
    phase_of,
)

__all__ = [
    "ColorMapper",
    "hsl_to_rgb",
    "hue_from_wave",
    "CursorState",
    "TrailPhase",
    "WindowBuffer",
    "advance_cursor",
    "check_window",
    "phase_of",
    "OVERFLOW_POLICIES",
]
