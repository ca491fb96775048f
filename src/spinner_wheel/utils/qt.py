"""Qt helper utilities."""

from typing import Dict, Hashable, Optional

from PySide6 import QtCore, QtGui

from ..engine.scheduling import TickCallback

FALLBACK_QCOLOR = QtGui.QColor(200, 200, 200)


def qcolor_from_token(
    token: str, fallback: Optional[QtGui.QColor] = None
) -> QtGui.QColor:
    """Convert a CSS-style color token (``"red"``, ``"#0a0"``) into a QColor.

    Tokens Qt does not recognise come back as ``fallback`` (light grey).
    """
    color = QtGui.QColor(str(token).strip())
    if not color.isValid():
        return QtGui.QColor(fallback if fallback is not None else FALLBACK_QCOLOR)
    return color


class QtTimerScheduler(QtCore.QObject):
    """Tick scheduler backed by one :class:`QtCore.QTimer` per registration."""

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._next_handle = 0
        self._timers: Dict[Hashable, QtCore.QTimer] = {}

    def schedule(self, interval_s: float, callback: TickCallback) -> int:
        timer = QtCore.QTimer(self)
        timer.setTimerType(QtCore.Qt.TimerType.PreciseTimer)
        timer.setInterval(max(1, int(round(interval_s * 1000.0))))
        timer.timeout.connect(callback)
        handle = self._next_handle
        self._next_handle += 1
        self._timers[handle] = timer
        timer.start()
        return handle

    def cancel(self, handle: Hashable) -> None:
        timer = self._timers.pop(handle, None)
        if timer is None:
            return
        timer.stop()
        timer.deleteLater()

    @property
    def active(self) -> int:
        return len(self._timers)


__all__ = ["FALLBACK_QCOLOR", "qcolor_from_token", "QtTimerScheduler"]
