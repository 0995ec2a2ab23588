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
Trail Simulator Configuration

Configuration is a plain dictionary typed as ``TrailConfig``. Defaults
reproduce the original visualization: seven Rössler trajectories at
dt = 0.01, a 1234-point visible trail recycled after five windows, and a
5000-step warm-up.

``validate_config`` merges user values over ``DEFAULT_CONFIG`` and fails
fast with ``ConfigurationError`` on anything the simulation cannot run with.
Accepted-but-questionable values (no trajectories, a large dt) produce a
``UserWarning``.

Usage
-----
>>> from chaostrail.simulation.config import validate_config
>>> config = validate_config(n_trajectories=3, window_size=100)
>>> config["capacity"]
500
>>>
>>> validate_config(recycle_factor=1)
Traceback (most recent call last):
    ...
chaostrail.simulation.config.ConfigurationError: recycle_factor must be an integer >= 2 ...
"""

import math
import time
import warnings
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

import numpy as np
from typing_extensions import TypedDict

from ..dynamics.modulation import as_sine_wave
from ..trail.window_buffer import OVERFLOW_POLICIES

# Fixed-step RK4 on the Rössler system degrades visibly above this step
LARGE_DT_WARNING = 0.1


class ConfigurationError(ValueError):
    """Invalid simulator configuration, raised at construction time."""


class TrailConfig(TypedDict, total=False):
    """
    Trail simulator configuration.

    Attributes
    ----------
    n_trajectories : int
        Number of independent trajectories N (0 allowed, degenerate)
    baselines : Sequence[float]
        Baseline coefficients (A0, B0, C0)
    waves : Mapping[str, WaveSpec]
        Sinusoidal modulation per coefficient name ('a', 'b', 'c').
        Names left out keep their default wave; an empty mapping or None
        disables modulation
    dt : float
        Fixed integration step
    window_size : int
        Visible trail length W
    recycle_factor : int
        Buffer capacity multiplier, capacity = W · recycle_factor (>= 2)
    capacity : int
        Derived as window_size · recycle_factor; a value passed in must
        match it
    warmup_steps : int
        Discarded integration steps before the first frame
    scale_factor : float
        Global visual scale applied to written positions
    initial_states : Optional[np.ndarray]
        (N, 3) initial states; None uses x = 0.1·(i+1), y = z = 0
    color_offsets : Optional[Sequence[float]]
        N hue offsets in [0, 1); None uses i/N
    scale_modifiers : Optional[Sequence[float]]
        N positive per-trajectory visual scales; None uses (i+1)/N
    color_base_speed : float
        Hue oscillation speed of trajectory 0
    color_index_step : float
        Hue speed increment per trajectory index
    saturation, lightness : float
        HSL saturation and lightness of trail colors
    overflow_policy : str
        'drain' (freeze writes and shrink the trail before resetting) or
        'reset' (reset as soon as the buffer is full)
    dtype : str
        Storage dtype of the position/color arena
    time_source : Callable[[], float]
        Monotonic clock in seconds driving the simulation clock
    auto_warm_up : bool
        Run the warm-up from the simulator constructor
    """

    n_trajectories: int
    baselines: Sequence[float]
    waves: Mapping[str, Any]
    dt: float
    window_size: int
    recycle_factor: int
    capacity: int
    warmup_steps: int
    scale_factor: float
    initial_states: Optional[np.ndarray]
    color_offsets: Optional[Sequence[float]]
    scale_modifiers: Optional[Sequence[float]]
    color_base_speed: float
    color_index_step: float
    saturation: float
    lightness: float
    overflow_policy: str
    dtype: str
    time_source: Callable[[], float]
    auto_warm_up: bool


DEFAULT_CONFIG: TrailConfig = {
    "n_trajectories": 7,
    "baselines": (0.2, 0.2, 5.7),
    "waves": {
        "a": {"amplitude": 0.05, "frequency": 0.002, "phase": 0.0},
        "b": {"amplitude": 0.05, "frequency": 0.005, "phase": 1.5},
        "c": {"amplitude": 3.0, "frequency": 0.007, "phase": 3.0},
    },
    "dt": 0.01,
    "window_size": 1234,
    "recycle_factor": 5,
    "warmup_steps": 5000,
    "scale_factor": 10.0,
    "initial_states": None,
    "color_offsets": None,
    "scale_modifiers": None,
    "color_base_speed": 0.1,
    "color_index_step": 0.01,
    "saturation": 1.0,
    "lightness": 0.5,
    "overflow_policy": "drain",
    "dtype": "float32",
    "time_source": time.perf_counter,
    "auto_warm_up": True,
}


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _check_finite(name: str, value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a real number, got {value!r}") from e
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")
    return value


def _check_per_trajectory(name: str, values, n: int) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.shape != (n,):
        raise ConfigurationError(f"{name} must have shape ({n},), got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ConfigurationError(f"{name} must be finite, got {arr}")
    return arr


def validate_config(config: Optional[Mapping[str, Any]] = None, **overrides) -> TrailConfig:
    """
    Merge ``config`` and ``overrides`` over the defaults and validate.

    Parameters
    ----------
    config : Optional[Mapping]
        Partial configuration
    **overrides
        Individual keys, applied after ``config``

    Returns
    -------
    TrailConfig
        Complete configuration with ``capacity`` filled in and per-trajectory
        arrays converted to NumPy

    Raises
    ------
    ConfigurationError
        Unknown keys, capacity <= window size or not matching
        window_size · recycle_factor, non-positive or non-finite dt,
        negative counts, non-finite coefficients, bad per-trajectory arrays,
        unknown overflow policy

    Warns
    -----
    UserWarning
        n_trajectories == 0 (every tick is a no-op) or dt > 0.1
    """
    merged: Dict[str, Any] = dict(DEFAULT_CONFIG)
    for source in (config or {}), overrides:
        unknown = set(source) - set(DEFAULT_CONFIG) - {"capacity"}
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        source = dict(source)
        # A capacity derived from earlier geometry no longer applies
        if {"window_size", "recycle_factor"} & set(source) and "capacity" not in source:
            merged.pop("capacity", None)
        # Waves merge per coefficient; an empty mapping disables modulation
        if source.get("waves") and isinstance(source["waves"], Mapping):
            source["waves"] = {**(merged["waves"] or {}), **source["waves"]}
        merged.update(source)

    # Counts
    n = merged["n_trajectories"]
    if not _is_int(n) or n < 0:
        raise ConfigurationError(f"n_trajectories must be a non-negative integer, got {n!r}")
    if n == 0:
        warnings.warn(
            "n_trajectories=0: there is nothing to integrate and every tick is a no-op.",
            UserWarning,
        )

    steps = merged["warmup_steps"]
    if not _is_int(steps) or steps < 0:
        raise ConfigurationError(f"warmup_steps must be a non-negative integer, got {steps!r}")

    # Window geometry
    w = merged["window_size"]
    if not _is_int(w) or w <= 0:
        raise ConfigurationError(f"window_size must be a positive integer, got {w!r}")
    factor = merged["recycle_factor"]
    if not _is_int(factor) or factor < 2:
        raise ConfigurationError(
            f"recycle_factor must be an integer >= 2 so that capacity exceeds "
            f"window_size, got {factor!r}"
        )
    capacity = int(w) * int(factor)
    if "capacity" in merged:
        given = merged["capacity"]
        if not _is_int(given) or given <= w:
            raise ConfigurationError(
                f"capacity must be an integer greater than window_size={w}, got {given!r}"
            )
        if given != capacity:
            raise ConfigurationError(
                f"capacity is derived as window_size * recycle_factor = {capacity}, "
                f"got {given}; set recycle_factor instead"
            )
    merged["capacity"] = capacity

    # Numerics
    dt = _check_finite("dt", merged["dt"])
    if dt <= 0:
        raise ConfigurationError(f"Time step dt must be positive, got {dt}")
    if dt > LARGE_DT_WARNING:
        warnings.warn(
            f"dt={dt} is large for fixed-step RK4; trajectories may diverge. "
            f"The step is not corrected.",
            UserWarning,
        )
    merged["dt"] = dt

    baselines = list(merged["baselines"])
    if len(baselines) != 3:
        raise ConfigurationError(f"baselines must hold 3 coefficients, got {len(baselines)}")
    merged["baselines"] = tuple(_check_finite("baselines", v) for v in baselines)

    waves = merged["waves"] or {}
    unknown_waves = set(waves) - {"a", "b", "c"}
    if unknown_waves:
        raise ConfigurationError(f"waves given for unknown coefficients {sorted(unknown_waves)}")
    try:
        merged["waves"] = {name: as_sine_wave(spec) for name, spec in waves.items()}
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid wave specification: {e}") from e

    scale = _check_finite("scale_factor", merged["scale_factor"])
    if scale <= 0:
        raise ConfigurationError(f"scale_factor must be positive, got {scale}")
    merged["scale_factor"] = scale

    for key in ("color_base_speed", "color_index_step"):
        merged[key] = _check_finite(key, merged[key])
    for key in ("saturation", "lightness"):
        value = _check_finite(key, merged[key])
        if not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"{key} must be in [0, 1], got {value}")
        merged[key] = value

    # Per-trajectory data
    if merged["initial_states"] is not None:
        states = np.asarray(merged["initial_states"], dtype=float)
        if states.shape != (n, 3):
            raise ConfigurationError(
                f"initial_states must have shape ({n}, 3), got {states.shape}"
            )
        if not np.all(np.isfinite(states)):
            raise ConfigurationError("initial_states must be finite")
        merged["initial_states"] = states

    if merged["color_offsets"] is not None:
        offsets = _check_per_trajectory("color_offsets", merged["color_offsets"], n)
        if np.any(offsets < 0) or np.any(offsets >= 1):
            raise ConfigurationError(f"color_offsets must lie in [0, 1), got {offsets}")
        merged["color_offsets"] = offsets

    if merged["scale_modifiers"] is not None:
        modifiers = _check_per_trajectory("scale_modifiers", merged["scale_modifiers"], n)
        if np.any(modifiers <= 0):
            raise ConfigurationError(f"scale_modifiers must be positive, got {modifiers}")
        merged["scale_modifiers"] = modifiers

    # Policy and plumbing
    if merged["overflow_policy"] not in OVERFLOW_POLICIES:
        raise ConfigurationError(
            f"overflow_policy must be one of {OVERFLOW_POLICIES}, "
            f"got {merged['overflow_policy']!r}"
        )
    try:
        merged["dtype"] = np.dtype(merged["dtype"]).name
    except TypeError as e:
        raise ConfigurationError(f"Unsupported dtype {merged['dtype']!r}") from e
    if not np.issubdtype(np.dtype(merged["dtype"]), np.floating):
        raise ConfigurationError(f"dtype must be a floating type, got {merged['dtype']}")
    if not callable(merged["time_source"]):
        raise ConfigurationError("time_source must be callable")
    merged["auto_warm_up"] = bool(merged["auto_warm_up"])

    return merged
