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
Trail Color Mapping

Per trajectory i and simulated time t:

    speed_i   = base_speed + i · index_step
    time_wave = 0.5 + 0.5 · sin(t · speed_i)
    hue       = (time_wave + color_offset_i) mod 1
    rgb       = HSL → RGB(hue, saturation, lightness)

Each trajectory cycles through the hue circle at a slightly different speed,
starting from its own offset, so neighbouring trails stay distinguishable.
"""

from typing import Optional, Sequence, Union

import numpy as np

from ..types.trail import ArrayLike


def _hue_to_channel(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1, t)
    t = np.where(t > 1, t - 1, t)
    return np.where(
        t < 1 / 6,
        p + (q - p) * 6 * t,
        np.where(t < 1 / 2, q, np.where(t < 2 / 3, p + (q - p) * 6 * (2 / 3 - t), p)),
    )


def hsl_to_rgb(
    hue: Union[float, ArrayLike], saturation: float = 1.0, lightness: float = 0.5
) -> np.ndarray:
    """
    Standard HSL to RGB conversion.

    Args:
        hue: Hue in [0, 1), scalar or array of shape (n,)
        saturation: Saturation in [0, 1]
        lightness: Lightness in [0, 1]

    Returns:
        RGB in [0, 1], shape (3,) for scalar hue or (n, 3)

    Example:
        >>> hsl_to_rgb(0.0)
        array([1., 0., 0.])
        >>> hsl_to_rgb(np.array([1 / 3, 2 / 3]))
        array([[0., 1., 0.],
               [0., 0., 1.]])
    """
    h = np.asarray(hue, dtype=float)
    s = float(saturation)
    l = float(lightness)

    if s == 0.0:
        rgb = np.stack([np.full_like(h, l)] * 3, axis=-1)
        return rgb

    q = l * (1 + s) if l <= 0.5 else l + s - l * s
    p = 2 * l - q
    p = np.full_like(h, p)
    q = np.full_like(h, q)

    r = _hue_to_channel(p, q, h + 1 / 3)
    g = _hue_to_channel(p, q, h)
    b = _hue_to_channel(p, q, h - 1 / 3)
    return np.stack([r, g, b], axis=-1)


def hue_from_wave(time_wave: Union[float, ArrayLike], color_offset: Union[float, ArrayLike]):
    """Hue in [0, 1) from a time wave value and a trajectory's color offset."""
    return np.mod(np.asarray(time_wave, dtype=float) + color_offset, 1.0)


class ColorMapper:
    """
    Deterministic per-trajectory colors as a function of simulated time.

    Parameters
    ----------
    color_offsets : Sequence[float]
        One hue offset in [0, 1) per trajectory
    base_speed : float
        Hue oscillation speed of trajectory 0 [rad/s]
    index_step : float
        Speed increment per trajectory index [rad/s]
    saturation, lightness : float
        Fixed HSL saturation and lightness

    Examples
    --------
    >>> mapper = ColorMapper(color_offsets=[0.0, 0.5])
    >>> mapper.colors(t=0.0).shape
    (2, 3)
    >>> mapper.hues(t=0.0)  # time_wave = 0.5 at t = 0
    array([0.5, 0. ])
    """

    def __init__(
        self,
        color_offsets: Sequence[float],
        base_speed: float = 0.1,
        index_step: float = 0.01,
        saturation: float = 1.0,
        lightness: float = 0.5,
    ):
        offsets = np.asarray(color_offsets, dtype=float).reshape(-1)
        if np.any(offsets < 0) or np.any(offsets >= 1) or not np.all(np.isfinite(offsets)):
            raise ValueError(f"color_offsets must lie in [0, 1), got {offsets}")
        if not 0.0 <= saturation <= 1.0:
            raise ValueError(f"saturation must be in [0, 1], got {saturation}")
        if not 0.0 <= lightness <= 1.0:
            raise ValueError(f"lightness must be in [0, 1], got {lightness}")

        self.color_offsets = offsets
        self.base_speed = float(base_speed)
        self.index_step = float(index_step)
        self.saturation = float(saturation)
        self.lightness = float(lightness)
        self.speeds = self.base_speed + np.arange(len(offsets)) * self.index_step

    @property
    def n_trajectories(self) -> int:
        return len(self.color_offsets)

    def time_wave(self, t: float, index: Optional[int] = None):
        speeds = self.speeds if index is None else self.speeds[index]
        return 0.5 + 0.5 * np.sin(t * speeds)

    def hues(self, t: float) -> np.ndarray:
        return hue_from_wave(self.time_wave(t), self.color_offsets)

    def colors(self, t: float) -> np.ndarray:
        """RGB for every trajectory at time t, shape (n_trajectories, 3)."""
        if self.n_trajectories == 0:
            return np.zeros((0, 3))
        return hsl_to_rgb(self.hues(t), self.saturation, self.lightness)

    def color(self, t: float, index: int) -> np.ndarray:
        hue = hue_from_wave(self.time_wave(t, index), self.color_offsets[index])
        return hsl_to_rgb(hue, self.saturation, self.lightness)

    def __repr__(self) -> str:
        return (
            f"ColorMapper(n_trajectories={self.n_trajectories}, "
            f"base_speed={self.base_speed}, index_step={self.index_step})"
        )
