"""Spinner physics, angle normalization and segment resolution."""

from __future__ import annotations

from typing import Callable, Hashable, Optional, Sequence

import logging
import math

import numpy as np

from ..models import (
    DEFAULT_SEGMENT_COLORS,
    DEFAULT_SEGMENT_NAMES,
    InvalidConfiguration,
    Landing,
    PhysicsParams,
    SegmentList,
)
from .scheduling import ManualScheduler, TickScheduler

logger = logging.getLogger(__name__)

TAU = 2.0 * math.pi

LandedCallback = Callable[[int, str], None]


def normalize_angle(angle: float) -> float:
    """Wrap ``angle`` (radians) into ``[0, 2π)``."""
    wrapped = math.fmod(angle, TAU)
    if wrapped < 0.0:
        wrapped += TAU
    # -1e-17 + 2π rounds to 2π; that point is the top of the dial, i.e. 0.
    if wrapped >= TAU:
        wrapped = 0.0
    return wrapped


def segment_boundaries(count: int) -> np.ndarray:
    """Boundary angles ``0, 2π/count, ..., 2π`` (``count + 1`` values)."""
    if count < 1:
        raise InvalidConfiguration("A wheel needs at least one segment.")
    bounds = np.arange(int(count) + 1, dtype=np.float64) * TAU / int(count)
    bounds[-1] = TAU
    return bounds


def segment_index_for_angle(angle: float, count: int) -> int:
    """Index of the equal-width segment whose arc contains ``angle``.

    Segment ``i`` covers ``[i * 2π / count, (i + 1) * 2π / count)`` measured
    from the top of the dial, i.e. ``floor(angle / 2π * count)``. The lookup
    goes through :func:`segment_boundaries` so that an angle sitting exactly
    on a boundary always resolves to the segment that starts there.
    """
    starts = segment_boundaries(count)[:-1]
    idx = int(np.searchsorted(starts, normalize_angle(angle), side="right")) - 1
    return idx % count


class SpinnerEngine:
    """State and per-tick physics of one spinner wheel.

    The engine never looks at a clock. ``start`` registers :meth:`update` with
    the injected :class:`TickScheduler`; any caller may also drive
    :meth:`update` directly.

    Lifecycle::

        reset() -> spinning --update()...--> stopped --reset()/spin()--> spinning
    """

    def __init__(
        self,
        names: Optional[Sequence[str]] = None,
        colors: Optional[Sequence[str]] = None,
        *,
        physics: Optional[PhysicsParams] = None,
        scheduler: Optional[TickScheduler] = None,
        on_landed: Optional[LandedCallback] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if names is None:
            names = DEFAULT_SEGMENT_NAMES
        if colors is None:
            colors = DEFAULT_SEGMENT_COLORS
        self._segments = SegmentList(names, colors)

        params = physics if physics is not None else PhysicsParams()
        params.validate()
        # Own copy so later edits to the caller's object don't leak in.
        self._physics = PhysicsParams(
            initial_speed=float(params.initial_speed),
            min_decay=float(params.min_decay),
            max_decay=float(params.max_decay),
            tick_rate_hz=float(params.tick_rate_hz),
        )

        self._scheduler: TickScheduler = (
            scheduler if scheduler is not None else ManualScheduler()
        )
        self._on_landed = on_landed
        self._rng = rng if rng is not None else np.random.default_rng()
        self._handle: Optional[Hashable] = None

        self._angle = 0.0
        self._speed = 0.0
        self._decay = 0.0
        self._stopped = False
        self._ticks = 0
        self._landing: Optional[Landing] = None

        self.reset()

    # ----------------------------- Properties ---------------------------------

    @property
    def angle(self) -> float:
        """Pointer position in radians, ``[0, 2π)``, 0 at the top of the dial."""
        return self._angle

    @property
    def angular_speed(self) -> float:
        return self._speed

    @property
    def decay_rate(self) -> float:
        return self._decay

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def running(self) -> bool:
        """True while a scheduler registration is active."""
        return self._handle is not None

    @property
    def scheduler(self) -> TickScheduler:
        """Scheduler that ``start`` registers with.

        Without an injected one this is an internal :class:`ManualScheduler`;
        nothing ticks until its ``advance`` is called.
        """
        return self._scheduler

    @property
    def segments(self) -> SegmentList:
        return self._segments

    @property
    def physics(self) -> PhysicsParams:
        return self._physics

    @property
    def landing(self) -> Optional[Landing]:
        return self._landing

    @property
    def ticks(self) -> int:
        """Ticks advanced since the last reset."""
        return self._ticks

    @property
    def max_ticks(self) -> int:
        """Tick on which the current spin comes to rest.

        Replays the subtraction :meth:`update` performs, so float round-off
        matches exactly (``0.1 / 0.0002`` stops on tick 500, not 501).
        """
        speed = self._physics.initial_speed
        ticks = 0
        while not speed < 0:
            speed -= self._decay
            ticks += 1
        return ticks

    def set_landed_callback(self, callback: Optional[LandedCallback]) -> None:
        self._on_landed = callback

    # ----------------------------- Lifecycle ----------------------------------

    def reset(
        self, *, angle: Optional[float] = None, decay_rate: Optional[float] = None
    ) -> None:
        """Reinitialize the spin with a random start angle and decay rate."""
        p = self._physics
        if angle is None:
            angle = float(self._rng.uniform(0.0, TAU))
        if decay_rate is None:
            decay_rate = float(self._rng.uniform(p.min_decay, p.max_decay))
        elif not decay_rate > 0:
            raise InvalidConfiguration("decay_rate must be positive.")

        self._angle = normalize_angle(float(angle))
        self._decay = float(decay_rate)
        self._speed = p.initial_speed
        self._stopped = False
        self._ticks = 0
        self._landing = None
        logger.debug(
            "Start position: %.4f rad, speed decay: %.6f rad/tick",
            self._angle,
            self._decay,
        )

    def start(self) -> None:
        """Begin ticking at the configured rate. Does not touch the position.

        Ticks arrive only as often as :attr:`scheduler` fires them.
        """
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
        self._handle = self._scheduler.schedule(
            self._physics.tick_interval_s, self.update
        )

    def stop(self) -> None:
        """Cancel ticking. Safe to call when not running."""
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self._scheduler.cancel(handle)

    def spin(self) -> None:
        """Trigger a fresh randomized spin."""
        self.stop()
        self.reset()
        self.start()

    # ------------------------------- Physics ----------------------------------

    def update(self) -> bool:
        """Advance one tick. Returns False when the wheel is already at rest."""
        if self._stopped:
            return False

        self._angle = normalize_angle(self._angle - self._speed)
        self._speed -= self._decay
        self._ticks += 1

        if self._speed < 0:
            self._stopped = True
            self._land()
        return True

    def _land(self) -> None:
        index = segment_index_for_angle(self._angle, len(self._segments))
        segment = self._segments[index]
        self._landing = Landing(
            index=index, name=segment.name, color=segment.color, angle=self._angle
        )
        logger.info(
            "Landed on segment %d (%s) at %.4f rad after %d ticks",
            index,
            segment.name,
            self._angle,
            self._ticks,
        )
        if self._on_landed is not None:
            self._on_landed(index, segment.name)


__all__ = [
    "TAU",
    "LandedCallback",
    "normalize_angle",
    "segment_index_for_angle",
    "segment_boundaries",
    "SpinnerEngine",
]
