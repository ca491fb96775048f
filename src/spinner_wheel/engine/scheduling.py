"""Scheduling port that decides when the spinner engine ticks."""

from __future__ import annotations

from typing import Callable, Dict, Hashable, Protocol

TickCallback = Callable[[], object]


class TickScheduler(Protocol):
    """Registers periodic callbacks with the host environment."""

    def schedule(self, interval_s: float, callback: TickCallback) -> Hashable:
        """Call ``callback`` every ``interval_s`` seconds; return a cancel handle."""
        ...

    def cancel(self, handle: Hashable) -> None:
        """Stop the registration behind ``handle``. Unknown handles are ignored."""
        ...


class ManualScheduler:
    """Scheduler driven explicitly by the caller, one tick per ``advance`` step.

    Used for headless runs and tests, where real time should not matter.
    """

    def __init__(self) -> None:
        self._next_handle = 0
        self._callbacks: Dict[Hashable, TickCallback] = {}
        self._intervals: Dict[Hashable, float] = {}

    def schedule(self, interval_s: float, callback: TickCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._callbacks[handle] = callback
        self._intervals[handle] = float(interval_s)
        return handle

    def cancel(self, handle: Hashable) -> None:
        self._callbacks.pop(handle, None)
        self._intervals.pop(handle, None)

    @property
    def active(self) -> int:
        """Number of live registrations."""
        return len(self._callbacks)

    def interval(self, handle: int) -> float:
        return self._intervals[handle]

    def advance(self, ticks: int = 1) -> None:
        """Fire every live callback ``ticks`` times, in registration order."""
        for _ in range(max(0, int(ticks))):
            # A callback may cancel itself or others; iterate over a snapshot.
            for handle in list(self._callbacks):
                callback = self._callbacks.get(handle)
                if callback is not None:
                    callback()


__all__ = ["TickCallback", "TickScheduler", "ManualScheduler"]
