"""Synthetic test signals: sine tones and gaussian noise."""

from __future__ import annotations

import math
import random
from array import array


class Tone:
    """A sine tone at a fixed frequency and amplitude."""

    WEAK = 0.05
    NORMAL = 0.2
    STRONG = 0.4

    def __init__(self, sample_rate: int, freq: float, ampl: float):
        self._sample_rate = sample_rate
        self._freq = freq
        self._ampl = ampl
        self._sample_count = 0

    def get_sample(self) -> float:
        self._sample_count += 1
        return self._ampl * math.sin(2 * math.pi * self._sample_count * self._freq / self._sample_rate)


class Noise:
    """Gaussian noise centred on zero with standard deviation 0.1, scaled by amplitude."""

    WEAK = 0.05
    NORMAL = 0.2
    STRONG = 0.5

    def __init__(self, ampl: float):
        self._ampl = ampl
        self._rng = random.Random()

    def get_sample(self) -> float:
        return self._ampl * self._rng.gauss(0.0, 0.1)


class GenerateSignal:
    """A mix of tones and noise sources sampled at a fixed rate."""

    def __init__(self, sample_rate: int):
        self._sample_rate = sample_rate
        self._tones: list[Tone] = []
        self._noises: list[Noise] = []

    def add_tone(self, freq: float, ampl: float) -> None:
        self._tones.append(Tone(self._sample_rate, freq, ampl))

    def add_noise(self, ampl: float) -> None:
        self._noises.append(Noise(ampl))

    def get_sample(self) -> float:
        return sum(t.get_sample() for t in self._tones) + sum(n.get_sample() for n in self._noises)

    def write_file(self, filepath: str, seconds: float) -> None:
        """Write ``seconds`` of samples to ``filepath`` as native 32-bit floats."""
        count = max(0, math.ceil(self._sample_rate * seconds))
        samples = array("f", (self.get_sample() for _ in range(count)))
        with open(filepath, "wb") as fp:
            samples.tofile(fp)