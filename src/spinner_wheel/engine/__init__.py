"""Qt-free spinner physics used by the wheel window."""

from ..models import InvalidConfiguration, Landing, SegmentList
from .core import (
    TAU,
    SpinnerEngine,
    normalize_angle,
    segment_boundaries,
    segment_index_for_angle,
)
from .scheduling import ManualScheduler, TickScheduler

__all__ = [
    "TAU",
    "SpinnerEngine",
    "normalize_angle",
    "segment_boundaries",
    "segment_index_for_angle",
    "ManualScheduler",
    "TickScheduler",
    "InvalidConfiguration",
    "Landing",
    "SegmentList",
]
