"""CTCSS tone detection built on Goertzel single-bin detectors."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

_log = logging.getLogger(__name__)


class ToneDetector:
    """Goertzel detector measuring the power of one tone over a fixed window."""

    def __init__(self, tone_freq: float, sample_rate: float, window_size: int):
        self._tone_freq = tone_freq
        self._magnitude = 0.0
        self._window_size = window_size
        k = int(0.5 + window_size * tone_freq / sample_rate)
        omega = (2.0 * math.pi * k) / window_size
        self._coeff = 2.0 * math.cos(omega)
        self._count = 0
        self._q1 = 0.0
        self._q2 = 0.0

    def process_sample(self, sample: float) -> None:
        q0 = self._coeff * self._q1 - self._q2 + sample
        self._q2 = self._q1
        self._q1 = q0
        self._count += 1
        if self._count == self._window_size:
            q1, q2 = self._q1, self._q2
            self._magnitude = q1 * q1 + q2 * q2 - q1 * q2 * self._coeff
            self._count = 0

    def reset(self) -> None:
        """Clear the running state; the last measured power is kept."""
        self._count = 0
        self._q1 = 0.0
        self._q2 = 0.0

    def relative_power(self) -> float:
        return self._magnitude

    def freq(self) -> float:
        return self._tone_freq

    def coefficient(self) -> float:
        return self._coeff


@dataclass(frozen=True)
class PowerIndex:
    """Measured power of one tone."""

    power: float
    freq: float


class ToneDetectorSet:
    """A group of tone detectors fed with the same samples."""

    def __init__(self):
        self._tones: list[ToneDetector] = []

    def add(self, tone_freq: float, sample_rate: float, window_size: int) -> bool:
        """Add a detector unless one already covers the same frequency bin."""
        new_tone = ToneDetector(tone_freq, sample_rate, window_size)
        if any(tone.coefficient() == new_tone.coefficient() for tone in self._tones):
            _log.debug("Skipping tone %f, too close to other tones", tone_freq)
            return False
        self._tones.append(new_tone)
        return True

    def process_sample(self, sample: float) -> None:
        for tone in self._tones:
            tone.process_sample(sample)

    def reset(self) -> None:
        for tone in self._tones:
            tone.reset()

    def sorted_powers(self) -> tuple[float, list[PowerIndex]]:
        """Return the average power and the tone powers, strongest first."""
        powers = [PowerIndex(t.relative_power(), t.freq()) for t in self._tones]
        if not powers:
            return math.nan, []
        total = sum(p.power for p in powers)
        powers.sort(key=lambda p: p.power, reverse=True)
        return total / len(powers), powers


class CTCSS:
    """Detects whether a given CTCSS tone is the strongest of the standard tones.

    Constructed without arguments the detector is disabled and always reports a tone.
    """

    standard_tones = (
        67.0, 69.3, 71.9, 74.4, 77.0, 79.7, 82.5, 85.4, 88.5, 91.5, 94.8, 97.4, 100.0,
        103.5, 107.2, 110.9, 114.8, 118.8, 123.0, 127.3, 131.8, 136.5, 141.3, 146.2,
        150.0, 151.4, 156.7, 159.8, 162.2, 165.5, 167.9, 171.3, 173.8, 177.3, 179.9,
        183.5, 186.2, 189.9, 192.8, 196.6, 199.5, 203.5, 206.5, 210.7, 218.1, 225.7,
        229.1, 233.6, 241.8, 250.3, 254.1,
    )

    def __init__(
        self,
        ctcss_freq: Optional[float] = None,
        sample_rate: Optional[float] = None,
        window_size: int = 0,
    ):
        self._enabled = ctcss_freq is not None
        self._ctcss_freq = ctcss_freq
        self._window_size = window_size
        self._found_count = 0
        self._not_found_count = 0
        self._powers = ToneDetectorSet()
        self._enough_samples = False
        self._sample_count = 0
        self._has_tone = False
        if not self._enabled:
            return

        _log.debug(
            "Adding CTCSS detector for %f Hz with a sample rate of %f and window %d",
            ctcss_freq, sample_rate, window_size,
        )
        self._powers.add(ctcss_freq, sample_rate, window_size)
        for tone in self.standard_tones:
            if abs(ctcss_freq - tone) < 5:
                _log.debug("Skipping tone %f, too close to other tones", tone)
                continue
            self._powers.add(tone, sample_rate, window_size)
        self.reset()

    def process_audio_sample(self, sample: float) -> None:
        if not self._enabled:
            return
        self._powers.process_sample(sample)
        self._sample_count += 1
        if self._sample_count < self._window_size:
            return

        self._enough_samples = True
        avg_power, tone_powers = self._powers.sorted_powers()
        ctcss_power = next(
            (p.power for p in tone_powers if p.freq == self._ctcss_freq), 0.0
        )
        if ctcss_power == tone_powers[0].power and ctcss_power > avg_power:
            _log.debug("CTCSS tone of %f Hz detected", self._ctcss_freq)
            self._has_tone = True
            self._found_count += 1
        else:
            _log.debug(
                "CTCSS tone of %f Hz not detected - highest power was %f Hz at %f vs %f",
                self._ctcss_freq, tone_powers[0].freq, tone_powers[0].power, ctcss_power,
            )
            self._has_tone = False
            self._not_found_count += 1

        self._powers.reset()
        self._sample_count = 0

    def reset(self) -> None:
        if self._enabled:
            self._powers.reset()
            self._enough_samples = False
            self._sample_count = 0
            self._has_tone = False

    def found_count(self) -> int:
        return self._found_count

    def not_found_count(self) -> int:
        return self._not_found_count

    def is_enabled(self) -> bool:
        return self._enabled

    def enough_samples(self) -> bool:
        return self._enough_samples

    def has_tone(self) -> bool:
        return not self._enabled or self._has_tone