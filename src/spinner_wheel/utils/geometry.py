"""Geometry helpers used by the wheel renderer."""

import math
from typing import Tuple


def polar_point(
    cx: float, cy: float, radius: float, angle_rad: float
) -> Tuple[float, float]:
    """Point at ``radius`` from ``(cx, cy)``; angle 0 is up, growing clockwise."""
    return cx + math.sin(angle_rad) * radius, cy - math.cos(angle_rad) * radius


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` to the inclusive range ``[lo, hi]``."""
    return max(lo, min(hi, value))


__all__ = ["polar_point", "clamp"]
