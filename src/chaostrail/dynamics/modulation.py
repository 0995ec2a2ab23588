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
Coefficient Modulation

Derives the system coefficients for the current simulated time from static
baselines plus independent sinusoidal oscillations:

    value(t) = baseline + amplitude · sin(t · frequency + phase)

All three coefficients are evaluated at the same t, so a frame never mixes
coefficients from different instants.
"""

import math
from typing import Dict, Mapping, NamedTuple, Sequence, Union

from ..types.trail import Coefficients


class SineWave(NamedTuple):
    """
    Sinusoidal perturbation of one coefficient.

    Attributes
    ----------
    amplitude : float
        Peak deviation from the baseline
    frequency : float
        Angular frequency [rad/s]
    phase : float
        Phase offset [rad]
    """

    amplitude: float = 0.0
    frequency: float = 0.0
    phase: float = 0.0

    def value(self, t: float, baseline: float) -> float:
        return baseline + self.amplitude * math.sin(t * self.frequency + self.phase)


WaveSpec = Union[SineWave, Mapping[str, float], Sequence[float]]


def as_sine_wave(spec: WaveSpec) -> SineWave:
    """
    Normalize a wave specification to a SineWave.

    Accepts a SineWave, a mapping with keys ``amplitude``/``frequency``/``phase``
    (short forms ``amp``/``freq`` also accepted) or an (amplitude, frequency,
    phase) sequence.
    """
    if isinstance(spec, SineWave):
        wave = spec
    elif isinstance(spec, Mapping):
        unknown = set(spec) - {"amplitude", "amp", "frequency", "freq", "phase"}
        if unknown:
            raise ValueError(f"Unknown wave keys: {sorted(unknown)}")
        for long_key, short_key in (("amplitude", "amp"), ("frequency", "freq")):
            if long_key in spec and short_key in spec:
                raise ValueError(
                    f"Wave gives both '{long_key}' and '{short_key}'; use only one"
                )
        wave = SineWave(
            amplitude=float(spec.get("amplitude", spec.get("amp", 0.0))),
            frequency=float(spec.get("frequency", spec.get("freq", 0.0))),
            phase=float(spec.get("phase", 0.0)),
        )
    else:
        values = [float(v) for v in spec]
        if len(values) != 3:
            raise ValueError(
                f"Wave sequence must be (amplitude, frequency, phase), got {values}"
            )
        wave = SineWave(*values)

    if not all(math.isfinite(v) for v in wave):
        raise ValueError(f"Wave parameters must be finite, got {wave}")
    return wave


class ParameterModulator:
    """
    Time-dependent coefficients (A, B, C) for the chaotic system.

    Parameters
    ----------
    baselines : Sequence[float]
        (A0, B0, C0) midpoints of the oscillations
    waves : Sequence[WaveSpec] or Mapping[str, WaveSpec]
        One wave per coefficient, either positionally or keyed by
        coefficient name
    names : Sequence[str]
        Coefficient names used to resolve a keyed ``waves`` mapping

    Examples
    --------
    >>> modulator = ParameterModulator(
    ...     baselines=(0.2, 0.2, 5.7),
    ...     waves={"c": SineWave(amplitude=3.0, frequency=0.007, phase=3.0)},
    ... )
    >>> modulator.baseline()
    (0.2, 0.2, 5.7)
    >>> A, B, C = modulator.coefficients(t=12.5)
    >>> A, B  # no wave given for a and b
    (0.2, 0.2)
    """

    def __init__(
        self,
        baselines: Sequence[float],
        waves: Union[Sequence[WaveSpec], Mapping[str, WaveSpec], None] = None,
        names: Sequence[str] = ("a", "b", "c"),
    ):
        baselines = tuple(float(v) for v in baselines)
        if len(baselines) != 3:
            raise ValueError(f"Expected 3 baseline coefficients, got {len(baselines)}")
        if not all(math.isfinite(v) for v in baselines):
            raise ValueError(f"Baseline coefficients must be finite, got {baselines}")
        if len(names) != 3:
            raise ValueError(f"Expected 3 coefficient names, got {list(names)}")

        self.names = tuple(names)
        self._baselines = baselines

        if waves is None:
            self.waves = tuple(SineWave() for _ in range(3))
        elif isinstance(waves, Mapping):
            unknown = set(waves) - set(self.names)
            if unknown:
                raise ValueError(
                    f"Waves given for unknown coefficients {sorted(unknown)}; "
                    f"expected names {list(self.names)}"
                )
            self.waves = tuple(
                as_sine_wave(waves[n]) if n in waves else SineWave() for n in self.names
            )
        else:
            waves = list(waves)
            if len(waves) != 3:
                raise ValueError(f"Expected 3 waves, got {len(waves)}")
            self.waves = tuple(as_sine_wave(w) for w in waves)

    def coefficients(self, t: float) -> Coefficients:
        """Coefficients at simulated time t (one shared t for all three)."""
        return tuple(
            wave.value(t, baseline) for wave, baseline in zip(self.waves, self._baselines)
        )

    def baseline(self) -> Coefficients:
        """Constant variant used before the clock is meaningful (warm-up)."""
        return self._baselines

    def as_dict(self, t: float) -> Dict[str, float]:
        return dict(zip(self.names, self.coefficients(t)))

    def __repr__(self) -> str:
        return f"ParameterModulator(baselines={self._baselines}, waves={self.waves})"
