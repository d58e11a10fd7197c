"""Twiddle factor tables for the batched 8-core GPU FFT layout."""

from __future__ import annotations

import math
from array import array
from enum import IntEnum

QPUS = 8

_K = (0, 8, 4, 4, 2, 2, 2, 2, 1, 1, 1, 1, 1, 1, 1, 1)
_M = (0, 0, 0, 1, 0, 1, 2, 3, 0, 1, 2, 3, 4, 5, 6, 7)


class Direction(IntEnum):
    FWD = 0
    REV = 1


def _alpha(dx: float) -> float:
    return 2 * math.sin(dx / 2) ** 2


def _base_16(two_pi: float, theta: float) -> list[tuple[float, float]]:
    angles = (two_pi / 16 * k * m + theta * k for k, m in zip(_K, _M))
    return [(math.cos(a), math.sin(a)) for a in angles]


def _base_32(two_pi: float, theta: float) -> list[tuple[float, float]]:
    head = [(math.cos(two_pi / 32 * i + theta), math.sin(two_pi / 32 * i + theta)) for i in range(16)]
    return head + _base_16(two_pi, 2 * theta)


def _base_64(two_pi: float) -> list[tuple[float, float]]:
    head = [(math.cos(two_pi / 64 * i), math.sin(two_pi / 64 * i)) for i in range(32)]
    return head + _base_32(two_pi, 0.0)


def _step_16(two_pi: float, theta: float) -> list[tuple[float, float]]:
    return [(_alpha(theta * k), math.sin(theta * k)) for k in _K]


def _step_32(two_pi: float, theta: float) -> list[tuple[float, float]]:
    return [(_alpha(theta), math.sin(theta))] * 16 + _step_16(two_pi, 2 * theta)


_BASES = {16: _base_16, 32: _base_32}
_STEPS = {16: _step_16, 32: _step_32}

# log2_N: (passes, shared, unique, head base, [(step kind, theta multiplier)], per-core base)
_LAYOUTS = {
    8: (2, 2, 1, 16, [(16, QPUS)], 16),
    9: (2, 3, 1, 32, [(16, QPUS)], 16),
    10: (2, 4, 2, 32, [(32, QPUS)], 32),
    11: (2, 6, 2, 64, [(32, QPUS)], 32),
    12: (3, 3, 1, 16, [(16, 16), (16, QPUS)], 16),
    13: (3, 4, 1, 32, [(16, 16), (16, QPUS)], 16),
    14: (3, 5, 1, 32, [(32, 16), (16, QPUS)], 16),
    15: (3, 6, 2, 32, [(32, 32), (32, QPUS)], 32),
    16: (3, 8, 2, 64, [(32, 32), (32, QPUS)], 32),
    17: (4, 5, 1, 32, [(16, 16 * 16), (16, 16), (16, QPUS)], 16),
    18: (4, 6, 2, 32, [(16, 32 * 16), (16, 32), (32, QPUS)], 32),
    19: (4, 7, 2, 32, [(16, 32 * 32), (32, 32), (32, QPUS)], 32),
    20: (4, 8, 2, 32, [(32, 32 * 32), (32, 32), (32, QPUS)], 32),
    21: (4, 10, 2, 64, [(32, 32 * 32), (32, 32), (32, QPUS)], 32),
}


def _layout(log2_n: int):
    try:
        return _LAYOUTS[log2_n]
    except KeyError:
        raise ValueError(f"unsupported FFT size: log2_N={log2_n} (must be 8..21)") from None


def twiddle_size(log2_n: int) -> tuple[int, int, int]:
    """Return ``(shared, unique, passes)`` for an FFT of length ``2**log2_n``."""
    passes, shared, unique, *_ = _layout(log2_n)
    return shared, unique, passes


def twiddle_data(log2_n: int, direction: Direction) -> array:
    """Return the twiddle table as interleaved 32-bit (re, im) floats."""
    _, _, _, head, steps, tail = _layout(log2_n)
    two_pi = (-2 if Direction(direction) is Direction.FWD else 2) * math.pi
    n = float(2 ** log2_n)

    pairs = _base_64(two_pi) if head == 64 else _BASES[head](two_pi, 0.0)
    for kind, mult in steps:
        pairs += _STEPS[kind](two_pi, two_pi / n * mult)
    for q in range(QPUS):
        pairs += _BASES[tail](two_pi, two_pi / n * q)

    return array("f", (v for pair in pairs for v in pair))