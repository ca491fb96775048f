"""Small helpers shared by the engine and the Qt layer."""

from .geometry import clamp, polar_point
from .text import join_csv, split_csv

__all__ = ["clamp", "polar_point", "join_csv", "split_csv"]
