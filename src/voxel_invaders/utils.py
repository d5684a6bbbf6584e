"""
Voxel Invaders utils
"""

from __future__ import annotations

import math


def clamp(value: float, low: float, high: float) -> float:
    """
    Clamp a value to the closed range [low, high].

    :param value: Value to clamp
    :type value: float

    :param low: Lower bound
    :type low: float

    :param high: Upper bound
    :type high: float

    :return: float
    """
    return max(low, min(high, value))


def lerp(start: float, end: float, t: float) -> float:
    """Linear interpolation between start and end."""
    return start + (end - start) * t


def ease_out_quad(t: float) -> float:
    """Quadratic ease-out: fast start, gentle arrival."""
    return t * (2.0 - t)


def ease_out_cubic(t: float) -> float:
    """Cubic ease-out."""
    return 1.0 - (1.0 - t) ** 3


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves going up.

    Python's round() rounds halves to even, which would make the barrier
    health curve drop a step early at exact midpoints.

    :param value: Value to round
    :type value: float

    :return: int
    """
    return math.floor(value + 0.5)


def wave_progress(wave: int, first_wave: int, span: int) -> float:
    """
    Normalised progress through a difficulty ramp.

    :param wave: Current wave number (1-based)
    :type wave: int

    :param first_wave: Wave at which the ramp starts (progress 0)
    :type first_wave: int

    :param span: Number of waves until the ramp tops out (progress 1)
    :type span: int

    :return: float in [0, 1]
    """
    if span <= 0:
        return 1.0
    return clamp((wave - first_wave) / span, 0.0, 1.0)
