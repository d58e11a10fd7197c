"""Audio and baseband filters: a notch filter and a 2nd order Bessel lowpass."""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

_log = logging.getLogger(__name__)

_BESSEL_POLE = complex(-1.10160133059e00, 6.36009824757e-01)


class NotchFilter:
    """Second order IIR notch filter; constructed without arguments it passes data through."""

    def __init__(self, notch_freq: Optional[float] = None, sample_freq: Optional[float] = None, q: float = 10.0):
        self._x = [0.0, 0.0, 0.0]
        self._y = [0.0, 0.0, 0.0]
        self._d = (0.0, 0.0, 0.0)
        self._enabled = notch_freq is not None
        if notch_freq is None:
            return
        if notch_freq <= 0.0:
            _log.debug("Invalid frequency %f Hz, disabling notch filter", notch_freq)
            self._enabled = False
            return

        _log.debug("Adding notch filter for %f Hz with parameters {%f, %f}", notch_freq, sample_freq, q)
        wo = 2 * math.pi * (notch_freq / sample_freq)
        e = 1 / (1 + math.tan(wo / (q * 2)))
        p = math.cos(wo)
        self._d = (e, 2 * e * p, 2 * e - 1)

    def enabled(self) -> bool:
        return self._enabled

    def apply(self, value: float) -> float:
        """Filter one sample and return the result."""
        if not self._enabled:
            return value
        d0, d1, d2 = self._d
        x = self._x = [self._x[1], self._x[2], value]
        y = self._y
        out = d0 * x[2] - d1 * x[1] + d0 * x[0] + d1 * y[2] - d2 * y[1]
        self._y = [y[1], y[2], out]
        return out


def _blt(pz: complex) -> complex:
    return (2.0 + pz) / (2.0 - pz)


def _multin(w: complex, coeffs: list) -> list:
    """Multiply the factor (z - w) into a polynomial."""
    nw = -w
    return [nw * coeffs[0]] + [nw * c + prev for prev, c in zip(coeffs, coeffs[1:])]


def _expand(pz: Sequence[complex]) -> list:
    """Product of (z - p) over poles or zeros, as polynomial coefficients of z."""
    coeffs = [complex(1.0)] + [0j] * len(pz)
    for w in pz:
        coeffs = _multin(w, coeffs)
    for power, c in enumerate(coeffs):
        if abs(c.imag) > 1e-10:
            raise ValueError(
                f"coeff of z^{power} is not real; poles/zeros are not complex conjugates"
            )
    return coeffs


def _eval(coeffs: Sequence[complex], z: complex) -> complex:
    total = 0j
    for c in reversed(coeffs):
        total = total * z + c
    return total


def _evaluate(top: Sequence[complex], bottom: Sequence[complex], z: complex) -> complex:
    return _eval(top, z) / _eval(bottom, z)


class LowpassFilter:
    """2nd order lowpass Bessel filter for complex (I/Q) samples."""

    def __init__(self, freq: Optional[float] = None, sample_freq: Optional[float] = None):
        self._xv = [0j, 0j, 0j]
        self._yv = [0j, 0j, 0j]
        self._gain = 1.0
        self._ycoeffs = (0.0, 0.0, 0.0)
        self._enabled = freq is not None
        if freq is None:
            return
        if freq <= 0.0:
            _log.debug("Invalid frequency %f Hz, disabling lowpass filter", freq)
            self._enabled = False
            return

        _log.debug("Adding lowpass filter at %f Hz with a sample rate of %f", freq, sample_freq)
        raw_alpha = freq / sample_freq
        warped_alpha = math.tan(math.pi * raw_alpha) / math.pi
        scale = math.pi * 2 * warped_alpha
        zeros = (complex(-1.0), complex(-1.0))
        poles = (_blt(scale * _BESSEL_POLE), _blt(scale * _BESSEL_POLE.conjugate()))

        top = _expand(zeros)
        bottom = _expand(poles)
        self._gain = abs(_evaluate(top, bottom, complex(1.0)))
        self._ycoeffs = tuple(-(c.real / bottom[2].real) for c in bottom)

    def enabled(self) -> bool:
        return self._enabled

    def apply(self, r: float, j: float) -> tuple[float, float]:
        """Filter one I/Q sample and return the filtered ``(r, j)`` pair."""
        if not self._enabled:
            return r, j
        xv = self._xv = [self._xv[1], self._xv[2], complex(r, j) / self._gain]
        yv = self._yv
        out = (xv[0] + xv[2]) + 2.0 * xv[1] + self._ycoeffs[0] * yv[1] + self._ycoeffs[1] * yv[2]
        self._yv = [yv[1], yv[2], out]
        return out.real, out.imag