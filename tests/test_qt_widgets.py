"""Widget-level tests for the Qt layer, run on the offscreen platform."""

from __future__ import annotations

import json
import os
from pathlib import Path

import numpy as np
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

QtWidgets = pytest.importorskip("PySide6.QtWidgets")
from PySide6 import QtCore, QtGui  # noqa: E402
from PySide6.QtTest import QTest  # noqa: E402

from spinner_wheel.app import (  # noqa: E402
    ControlDialog,
    MainController,
    SpinnerWidget,
    apply_command_line,
    build_parser,
)
from spinner_wheel.engine import ManualScheduler, SpinnerEngine  # noqa: E402
from spinner_wheel.models import (  # noqa: E402
    AppConfig,
    PhysicsParams,
    UIState,
    WheelSettings,
)
from spinner_wheel.utils.qt import (  # noqa: E402
    FALLBACK_QCOLOR,
    QtTimerScheduler,
    qcolor_from_token,
)


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


@pytest.fixture
def engine() -> SpinnerEngine:
    return SpinnerEngine(scheduler=ManualScheduler(), rng=np.random.default_rng(5))


def test_color_tokens(qapp) -> None:
    assert qcolor_from_token("red") == QtGui.QColor(255, 0, 0)
    assert qcolor_from_token(" #00ff00 ") == QtGui.QColor(0, 255, 0)
    assert qcolor_from_token("definitely-not-a-color") == FALLBACK_QCOLOR


def test_qt_timer_scheduler_ticks_and_cancels(qapp) -> None:
    scheduler = QtTimerScheduler()
    calls = []
    handle = scheduler.schedule(0.001, lambda: calls.append(1))
    assert scheduler.active == 1

    QTest.qWait(50)
    assert calls

    scheduler.cancel(handle)
    scheduler.cancel(handle)
    assert scheduler.active == 0
    seen = len(calls)
    QTest.qWait(30)
    assert len(calls) == seen


def test_widget_draws_pointer_at_engine_angle(qapp) -> None:
    engine = SpinnerEngine(["A", "B"], ["blue"], scheduler=ManualScheduler())
    widget = SpinnerWidget(engine, UIState())
    widget.resize(400, 400)
    engine.reset(angle=0.0)

    size = widget.size()
    image = QtGui.QImage(size, QtGui.QImage.Format.Format_ARGB32)
    image.fill(QtGui.QColor(255, 255, 255))
    widget.render(image)

    # Pointer runs straight up from the centre when the angle is 0.
    cx, cy, radius = widget.dial_geometry()
    pixel = image.pixelColor(int(cx), int(cy - radius / 2))
    assert pixel.red() > 180
    assert pixel.green() < 60
    assert pixel.blue() < 60
    widget.close()


def test_widget_relays_landing(qapp, engine: SpinnerEngine) -> None:
    widget = SpinnerWidget(engine, UIState())
    received = []
    widget.landed.connect(lambda i, n: received.append((i, n)))

    engine.reset(decay_rate=0.05)
    while engine.update():
        pass

    assert engine.landing is not None
    assert received == [(engine.landing.index, engine.landing.name)]
    widget.close()


def test_widget_refresh_rate_is_independent(qapp, engine: SpinnerEngine) -> None:
    widget = SpinnerWidget(engine, UIState(refresh_rate_hz=25))
    assert widget.refresh_interval_ms() == 40
    assert engine.physics.tick_rate_hz == 60
    widget.close()


def test_click_on_dial_spins(qapp, engine: SpinnerEngine) -> None:
    widget = SpinnerWidget(engine, UIState())
    widget.resize(300, 300)
    widget.show()
    engine.update()
    assert engine.ticks == 1

    QTest.mouseClick(
        widget,
        QtCore.Qt.MouseButton.LeftButton,
        QtCore.Qt.KeyboardModifier.NoModifier,
        QtCore.QPoint(150, 150),
    )
    assert engine.running
    assert engine.ticks == 0
    engine.stop()
    widget.close()


def test_set_engine_moves_landing_callback(qapp, engine: SpinnerEngine) -> None:
    widget = SpinnerWidget(engine, UIState())
    received = []
    widget.landed.connect(lambda i, n: received.append(n))

    other = SpinnerEngine(["X"], scheduler=ManualScheduler())
    widget.set_engine(other)
    assert widget.engine is other

    engine.reset(decay_rate=0.05)
    while engine.update():
        pass
    other.reset(decay_rate=0.05)
    while other.update():
        pass
    assert received == ["X"]
    widget.close()


def test_control_dialog_echoes_and_applies(qapp) -> None:
    cfg = AppConfig()
    cfg.wheel = WheelSettings(["A", "B"], ["red"], ["A"])
    dialog = ControlDialog(cfg, "1.2.3")
    assert dialog.names_edit.text() == "A,B"
    assert dialog.colors_edit.text() == "red"
    assert dialog.ignore_edit.text() == "A"

    applied = []
    dialog.settingsApplied.connect(lambda *args: applied.append(args))
    dialog.names_edit.setText("X, Y")
    dialog.apply_btn.click()
    assert applied == [("X, Y", "red", "A")]

    spins = []
    dialog.spinRequested.connect(lambda: spins.append(True))
    dialog.spin_btn.click()
    assert spins == [True]
    dialog.close()


def test_settings_toggle_hides_form(qapp) -> None:
    dialog = ControlDialog(AppConfig(), "1.0")
    toggled = []
    dialog.settingsToggled.connect(toggled.append)
    assert dialog.toggle_btn.isChecked()

    dialog.toggle_btn.setChecked(False)
    assert dialog.settings_box.isHidden()
    assert toggled == [False]
    dialog.close()


def test_command_line_overrides(qapp) -> None:
    parser = build_parser()
    assert parser.parse(
        ["spinner-wheel", "--segment-names", "A, B,,C", "--segment-colors", "blue"]
    )
    cfg = AppConfig()
    apply_command_line(cfg, parser)
    assert cfg.wheel.segment_names == ["A", "B", "C"]
    assert cfg.wheel.segment_colors == ["blue"]
    assert cfg.wheel.ignore_names == AppConfig().wheel.ignore_names


def _controller(qapp, path: Path) -> MainController:
    return MainController(qapp, config_path=path)


def _shutdown(ctrl: MainController) -> None:
    ctrl.engine.stop()
    ctrl.wheel.close()
    ctrl.ctrl.close()


def test_controller_applies_valid_settings(qapp, tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    ctrl = _controller(qapp, path)
    assert ctrl.engine.running

    ctrl.apply_settings("A,B,C", "red,blue", "A")
    assert ctrl.engine.segments.names == ("A", "B", "C")
    assert ctrl.engine.running
    assert ctrl.scheduler.active == 1
    assert ctrl.ctrl.names_edit.text() == "A,B,C"

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["wheel"]["segment_names"] == ["A", "B", "C"]
    assert saved["wheel"]["ignore_names"] == ["A"]
    _shutdown(ctrl)


def test_controller_rejects_empty_names(qapp, tmp_path: Path) -> None:
    ctrl = _controller(qapp, tmp_path / "config.json")
    before = ctrl.engine

    ctrl.apply_settings(" , ", "red", "")
    assert ctrl.engine is before
    assert "Invalid configuration" in ctrl.ctrl.status_label.text()
    _shutdown(ctrl)


def test_controller_falls_back_on_bad_saved_config(qapp, tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"wheel": {"segment_names": []}}), encoding="utf-8")

    ctrl = _controller(qapp, path)
    assert len(ctrl.engine.segments) == 7
    assert "using defaults" in ctrl.ctrl.status_label.text()
    _shutdown(ctrl)


def test_controller_falls_back_on_bad_saved_physics(qapp, tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"physics": {"min_decay": 0.0}}), encoding="utf-8")

    ctrl = _controller(qapp, path)
    assert ctrl.engine.running
    assert ctrl.engine.physics.min_decay == PhysicsParams().min_decay
    assert ctrl.cfg.physics.min_decay == PhysicsParams().min_decay
    assert "using defaults" in ctrl.ctrl.status_label.text()
    _shutdown(ctrl)


def test_controller_reports_landing(qapp, tmp_path: Path) -> None:
    ctrl = _controller(qapp, tmp_path / "config.json")
    ctrl.engine.stop()
    ctrl.engine.reset(decay_rate=0.05)
    while ctrl.engine.update():
        pass

    landing = ctrl.engine.landing
    assert landing is not None
    assert f"Landed on {landing.name}" in ctrl.ctrl.status_label.text()
    _shutdown(ctrl)
