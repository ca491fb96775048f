"""Dataclasses describing wheel configuration, physics and landing results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import json

DEFAULT_SEGMENT_NAMES: Tuple[str, ...] = (
    "Mark",
    "Sam",
    "Tom",
    "Carl",
    "Jason",
    "Ed",
    "Bo",
)
DEFAULT_SEGMENT_COLORS: Tuple[str, ...] = ("red", "green")
DEFAULT_IGNORE_NAMES: Tuple[str, ...] = ("Mark",)
FALLBACK_COLOR = "white"


class InvalidConfiguration(ValueError):
    """Raised when wheel or physics configuration cannot be used."""


@dataclass(frozen=True)
class Segment:
    """One named, colored arc of the dial."""

    name: str
    color: str


class SegmentList:
    """Ordered, non-empty list of segment names with cyclically assigned colors.

    Names are trimmed and must not be blank; duplicates are allowed since
    segments are addressed by index. The color of segment ``i`` is
    ``colors[i % len(colors)]``.
    """

    def __init__(self, names: Sequence[str], colors: Sequence[str] = ()) -> None:
        cleaned = tuple(str(n).strip() for n in names)
        if not cleaned:
            raise InvalidConfiguration("At least one segment name is required.")
        for i, name in enumerate(cleaned):
            if not name:
                raise InvalidConfiguration(f"Segment {i} has an empty name.")
        self._names: Tuple[str, ...] = cleaned
        self._colors: Tuple[str, ...] = tuple(str(c).strip() for c in colors)

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def colors(self) -> Tuple[str, ...]:
        return self._colors

    def color_for(self, index: int) -> str:
        if not self._colors:
            return FALLBACK_COLOR
        return self._colors[index % len(self._colors)]

    def __len__(self) -> int:
        return len(self._names)

    def __getitem__(self, index: int) -> Segment:
        if index < 0:
            index += len(self._names)
        if not 0 <= index < len(self._names):
            raise IndexError(f"segment index {index} out of range")
        return Segment(name=self._names[index], color=self.color_for(index))

    def __iter__(self) -> Iterator[Segment]:
        for i in range(len(self._names)):
            yield self[i]

    def __repr__(self) -> str:
        names, colors = list(self._names), list(self._colors)
        return f"SegmentList(names={names!r}, colors={colors!r})"


@dataclass
class PhysicsParams:
    """Per-tick physics constants used by the spinner engine."""

    initial_speed: float = 0.1  # radians per tick
    min_decay: float = 0.0002  # radians per tick, per tick
    max_decay: float = 0.0004
    tick_rate_hz: float = 60.0

    def validate(self) -> None:
        if not self.initial_speed > 0:
            raise InvalidConfiguration("initial_speed must be positive.")
        if not self.tick_rate_hz > 0:
            raise InvalidConfiguration("tick_rate_hz must be positive.")
        if not self.min_decay > 0 or self.max_decay < self.min_decay:
            raise InvalidConfiguration(
                "Decay range must satisfy 0 < min_decay <= max_decay."
            )

    @property
    def tick_interval_s(self) -> float:
        return 1.0 / float(self.tick_rate_hz)


@dataclass
class WheelSettings:
    """Segment configuration as entered by the user."""

    segment_names: List[str] = field(
        default_factory=lambda: list(DEFAULT_SEGMENT_NAMES)
    )
    segment_colors: List[str] = field(
        default_factory=lambda: list(DEFAULT_SEGMENT_COLORS)
    )
    ignore_names: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_NAMES))


@dataclass
class UIState:
    """User-interface level preferences for the wheel window."""

    refresh_rate_hz: float = 60.0
    text_inset: float = 0.8  # fraction of the radius where labels sit
    show_settings: bool = True
    always_on_top: bool = False


@dataclass(frozen=True)
class Landing:
    """Result reported when the wheel comes to rest."""

    index: int
    name: str
    color: str
    angle: float


@dataclass
class AppConfig:
    """Persisted configuration for the application."""

    wheel: WheelSettings = field(default_factory=WheelSettings)
    physics: PhysicsParams = field(default_factory=PhysicsParams)
    ui: UIState = field(default_factory=UIState)

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    @staticmethod
    def from_json(text: str) -> "AppConfig":
        data: Dict = json.loads(text)
        w = data.get("wheel", {})
        p = data.get("physics", {})
        u = data.get("ui", {})
        return AppConfig(
            wheel=WheelSettings(
                segment_names=_str_list(
                    w.get("segment_names"), DEFAULT_SEGMENT_NAMES
                ),
                segment_colors=_str_list(
                    w.get("segment_colors"), DEFAULT_SEGMENT_COLORS
                ),
                ignore_names=_str_list(w.get("ignore_names"), DEFAULT_IGNORE_NAMES),
            ),
            physics=PhysicsParams(
                initial_speed=float(p.get("initial_speed", 0.1)),
                min_decay=float(p.get("min_decay", 0.0002)),
                max_decay=float(p.get("max_decay", 0.0004)),
                tick_rate_hz=float(p.get("tick_rate_hz", 60.0)),
            ),
            ui=UIState(
                refresh_rate_hz=float(u.get("refresh_rate_hz", 60.0)),
                text_inset=float(u.get("text_inset", 0.8)),
                show_settings=bool(u.get("show_settings", True)),
                always_on_top=bool(u.get("always_on_top", False)),
            ),
        )


def _str_list(value: Optional[object], default: Sequence[str]) -> List[str]:
    if not isinstance(value, list):
        return list(default)
    return [str(v) for v in value]


__all__ = [
    "DEFAULT_SEGMENT_NAMES",
    "DEFAULT_SEGMENT_COLORS",
    "DEFAULT_IGNORE_NAMES",
    "FALLBACK_COLOR",
    "InvalidConfiguration",
    "Segment",
    "SegmentList",
    "PhysicsParams",
    "WheelSettings",
    "UIState",
    "Landing",
    "AppConfig",
]
