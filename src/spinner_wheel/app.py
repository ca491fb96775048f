"""Qt application entry point for the spinner wheel."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import logging
import math
import sys

from PySide6 import QtCore, QtGui, QtWidgets

from . import __version__ as APP_VERSION
from .engine import SpinnerEngine, segment_boundaries
from .models import (
    AppConfig,
    InvalidConfiguration,
    PhysicsParams,
    UIState,
    WheelSettings,
)
from .utils import clamp, join_csv, polar_point, split_csv
from .utils.qt import QtTimerScheduler, qcolor_from_token

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".spinner_wheel_config.json"


# ------------------------------ Spinner Widget --------------------------------


class SpinnerWidget(QtWidgets.QWidget):
    """Draws the dial and pointer of a :class:`SpinnerEngine`.

    Rendering runs on its own timer; physics ticks come from the engine's
    scheduler, so a refresh rate change never alters the spin.
    """

    landed = QtCore.Signal(int, str)

    def __init__(
        self,
        engine: SpinnerEngine,
        ui: UIState,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Spinner")
        self.setMinimumSize(320, 320)
        self.resize(520, 520)
        self.setFocusPolicy(QtCore.Qt.FocusPolicy.StrongFocus)

        self._engine = engine
        self._engine.set_landed_callback(self._on_engine_landed)
        self._text_inset: float = clamp(float(ui.text_inset), 0.0, 1.0)

        self._render_timer = QtCore.QTimer(self)
        self._render_timer.setInterval(
            max(1, int(round(1000.0 / max(1.0, float(ui.refresh_rate_hz)))))
        )
        self._render_timer.timeout.connect(self.update)
        self._render_timer.start()

    # ----------------------------- Properties ---------------------------------

    @property
    def engine(self) -> SpinnerEngine:
        return self._engine

    def set_engine(self, engine: SpinnerEngine) -> None:
        self._engine.set_landed_callback(None)
        self._engine = engine
        self._engine.set_landed_callback(self._on_engine_landed)
        self.update()

    def set_text_inset(self, inset: float) -> None:
        self._text_inset = clamp(float(inset), 0.0, 1.0)
        self.update()

    def refresh_interval_ms(self) -> int:
        return int(self._render_timer.interval())

    def dial_geometry(self) -> tuple[float, float, float]:
        """Centre x, centre y and radius of the dial in widget coordinates."""
        rect = self.rect()
        cx = rect.width() / 2.0
        cy = rect.height() / 2.0
        radius = max(1.0, min(rect.width(), rect.height()) / 2.0 - 20.0)
        return cx, cy, radius

    # ----------------------------- Interaction --------------------------------

    def _on_engine_landed(self, index: int, name: str) -> None:
        self.update()
        self.landed.emit(index, name)

    def mousePressEvent(self, e: QtGui.QMouseEvent) -> None:
        if e.button() != QtCore.Qt.MouseButton.LeftButton:
            e.ignore()
            return
        cx, cy, radius = self.dial_geometry()
        pos = e.position()
        if math.hypot(pos.x() - cx, pos.y() - cy) <= radius:
            self._engine.spin()
        e.accept()

    def keyPressEvent(self, e: QtGui.QKeyEvent) -> None:
        key = e.key()
        if key == QtCore.Qt.Key.Key_Space:
            self._engine.spin()
        elif key == QtCore.Qt.Key.Key_Escape:
            self.close()
        else:
            super().keyPressEvent(e)

    # ----------------------------- Painting -----------------------------------

    def paintEvent(self, e: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        painter.fillRect(self.rect(), self.palette().window())

        segments = self._engine.segments
        n = len(segments)
        cx, cy, radius = self.dial_geometry()
        dial = QtCore.QRectF(cx - radius, cy - radius, 2.0 * radius, 2.0 * radius)
        bounds = segment_boundaries(n)

        # Filled arcs. Qt measures counter-clockwise from 3 o'clock in 1/16°.
        painter.setPen(QtCore.Qt.PenStyle.NoPen)
        for i, segment in enumerate(segments):
            start_deg = math.degrees(float(bounds[i]))
            span_deg = math.degrees(float(bounds[i + 1] - bounds[i]))
            painter.setBrush(QtGui.QBrush(qcolor_from_token(segment.color)))
            painter.drawPie(
                dial, int(round((90.0 - start_deg) * 16)), -int(round(span_deg * 16))
            )

        outline = QtGui.QPen(QtGui.QColor(0, 0, 0))
        outline.setWidth(1)
        painter.setPen(outline)
        painter.setBrush(QtCore.Qt.BrushStyle.NoBrush)
        painter.drawEllipse(dial)

        # Spokes
        if n > 1:
            for b in bounds[:-1]:
                px, py = polar_point(cx, cy, radius, float(b))
                painter.drawLine(QtCore.QPointF(cx, cy), QtCore.QPointF(px, py))

        # Labels, rotated to the middle of their arc
        font = painter.font()
        font.setPixelSize(max(8, int(self.height() / 15)))
        painter.setFont(font)
        metrics = QtGui.QFontMetricsF(font)
        for i, segment in enumerate(segments):
            mid = float(bounds[i] + bounds[i + 1]) / 2.0
            tx, ty = polar_point(cx, cy, radius * self._text_inset, mid)
            painter.save()
            painter.translate(tx, ty)
            painter.rotate(math.degrees(mid))
            width = metrics.horizontalAdvance(segment.name)
            painter.drawText(QtCore.QPointF(-width / 2.0, 0.0), segment.name)
            painter.restore()

        # Pointer
        px, py = polar_point(cx, cy, radius, self._engine.angle)
        pointer = QtGui.QPen(QtGui.QColor(220, 0, 0))
        pointer.setWidth(5)
        pointer.setCapStyle(QtCore.Qt.PenCapStyle.RoundCap)
        painter.setPen(pointer)
        painter.drawLine(QtCore.QPointF(cx, cy), QtCore.QPointF(px, py))
        painter.end()


# ---------------------------- Control Dialog UI -------------------------------


class ControlDialog(QtWidgets.QDialog):
    spinRequested = QtCore.Signal()
    settingsApplied = QtCore.Signal(str, str, str)
    settingsToggled = QtCore.Signal(bool)

    def __init__(self, cfg: AppConfig, app_version: str) -> None:
        super().__init__(None)
        self._app_version = app_version or "unknown"
        self.setWindowTitle(f"spinner_wheel {self._app_version} — Settings")
        self.setWindowFlag(
            QtCore.Qt.WindowType.WindowStaysOnTopHint, cfg.ui.always_on_top
        )
        self.setMinimumWidth(420)

        # Widgets
        self.names_edit = QtWidgets.QLineEdit()
        self.names_edit.setToolTip("Segment names, separated by commas")
        self.colors_edit = QtWidgets.QLineEdit()
        self.colors_edit.setToolTip(
            "Segment colors, separated by commas. Colors repeat when there are "
            "fewer colors than segments."
        )
        self.ignore_edit = QtWidgets.QLineEdit()
        self.ignore_edit.setToolTip("Names to ignore, separated by commas")

        self.apply_btn = QtWidgets.QPushButton("Apply")
        self.apply_btn.clicked.connect(self._on_apply)

        self.spin_btn = QtWidgets.QPushButton("Spin  (Space)")
        self.spin_btn.clicked.connect(self.spinRequested)

        self.toggle_btn = QtWidgets.QToolButton()
        self.toggle_btn.setText("Show settings")
        self.toggle_btn.setCheckable(True)
        self.toggle_btn.toggled.connect(self._on_toggle)

        self.status_label = QtWidgets.QLabel("Click the wheel or press Spin.")
        self.status_label.setWordWrap(True)

        # Settings form
        self.settings_box = QtWidgets.QGroupBox("Wheel", self)
        form = QtWidgets.QFormLayout(self.settings_box)
        form.setFieldGrowthPolicy(
            QtWidgets.QFormLayout.FieldGrowthPolicy.AllNonFixedFieldsGrow
        )
        form.addRow("Segment names:", self.names_edit)
        form.addRow("Segment colors:", self.colors_edit)
        form.addRow("Ignore names:", self.ignore_edit)
        form.addRow(self.apply_btn)

        buttons = QtWidgets.QHBoxLayout()
        buttons.addWidget(self.toggle_btn)
        buttons.addStretch(1)
        buttons.addWidget(self.spin_btn)

        v = QtWidgets.QVBoxLayout(self)
        v.addLayout(buttons)
        v.addWidget(self.settings_box)
        v.addWidget(self.status_label)

        self.populate(cfg.wheel)
        self.toggle_btn.setChecked(cfg.ui.show_settings)
        self.settings_box.setVisible(cfg.ui.show_settings)

    def populate(self, wheel: WheelSettings) -> None:
        """Echo the active configuration back into the form fields."""
        self.names_edit.setText(join_csv(wheel.segment_names))
        self.colors_edit.setText(join_csv(wheel.segment_colors))
        self.ignore_edit.setText(join_csv(wheel.ignore_names))

    def set_status(self, text: str) -> None:
        self.status_label.setText(text)

    def _on_apply(self) -> None:
        self.settingsApplied.emit(
            self.names_edit.text(), self.colors_edit.text(), self.ignore_edit.text()
        )

    def _on_toggle(self, checked: bool) -> None:
        self.settings_box.setVisible(checked)
        self.settingsToggled.emit(checked)


# ------------------------------ Command line ----------------------------------


def build_parser() -> QtCore.QCommandLineParser:
    parser = QtCore.QCommandLineParser()
    parser.setApplicationDescription("Spin a wheel of named segments.")
    parser.addHelpOption()
    parser.addVersionOption()
    for name, description in (
        ("segment-names", "Comma-separated segment names."),
        ("segment-colors", "Comma-separated segment colors."),
        ("ignore-names", "Comma-separated names to ignore."),
    ):
        parser.addOption(QtCore.QCommandLineOption([name], description, "list"))
    return parser


def apply_command_line(cfg: AppConfig, parser: QtCore.QCommandLineParser) -> None:
    """Override ``cfg.wheel`` with the options present on the command line."""
    if parser.isSet("segment-names"):
        cfg.wheel.segment_names = split_csv(parser.value("segment-names"))
    if parser.isSet("segment-colors"):
        cfg.wheel.segment_colors = split_csv(parser.value("segment-colors"))
    if parser.isSet("ignore-names"):
        cfg.wheel.ignore_names = split_csv(parser.value("ignore-names"))


# ---------------------------- Main Controller ---------------------------------


class MainController(QtCore.QObject):
    def __init__(
        self,
        app: QtWidgets.QApplication,
        parser: Optional[QtCore.QCommandLineParser] = None,
        config_path: Optional[Path] = None,
    ) -> None:
        super().__init__(None)
        self.app = app
        self._config_path_override = config_path
        self.cfg = self._load_config()
        if parser is not None:
            apply_command_line(self.cfg, parser)

        self.scheduler = QtTimerScheduler(self)
        self._app_version = app.applicationVersion() or APP_VERSION
        self.ctrl = ControlDialog(self.cfg, self._app_version)

        try:
            engine = self._build_engine(self.cfg.wheel)
        except InvalidConfiguration as exc:
            logger.warning("Falling back to default configuration: %s", exc)
            self.ctrl.set_status(f"Invalid configuration ({exc}); using defaults.")
            self.cfg.wheel = WheelSettings()
            self.cfg.physics = PhysicsParams()
            self.ctrl.populate(self.cfg.wheel)
            engine = self._build_engine(self.cfg.wheel)

        self.wheel = SpinnerWidget(engine, self.cfg.ui)
        self.wheel.setWindowFlag(
            QtCore.Qt.WindowType.WindowStaysOnTopHint, self.cfg.ui.always_on_top
        )

        # Wire signals
        self.ctrl.spinRequested.connect(self.spin)
        self.ctrl.settingsApplied.connect(self.apply_settings)
        self.ctrl.settingsToggled.connect(self._on_settings_toggled)
        self.wheel.landed.connect(self._on_landed)

        self.wheel.show()
        self.ctrl.show()
        self.ctrl.move(self.wheel.frameGeometry().topRight() + QtCore.QPoint(16, 0))

        self.engine.start()

    @property
    def engine(self) -> SpinnerEngine:
        return self.wheel.engine

    # ---------------------------- Config I/O ----------------------------------

    def _config_path(self) -> Path:
        if self._config_path_override is not None:
            return self._config_path_override
        return Path.home() / CONFIG_FILENAME

    def _load_config(self) -> AppConfig:
        p = self._config_path()
        if p.exists():
            try:
                return AppConfig.from_json(p.read_text(encoding="utf-8"))
            except (OSError, ValueError, TypeError, AttributeError) as exc:
                logger.warning("Ignoring unreadable config %s: %s", p, exc)
        return AppConfig()

    def _save_config(self) -> None:
        p = self._config_path()
        try:
            p.write_text(self.cfg.to_json(), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not save config to %s: %s", p, exc)

    def _build_engine(self, wheel: WheelSettings) -> SpinnerEngine:
        return SpinnerEngine(
            wheel.segment_names,
            wheel.segment_colors,
            physics=self.cfg.physics,
            scheduler=self.scheduler,
        )

    # ---------------------------- Event Handlers ------------------------------

    def _on_landed(self, index: int, name: str) -> None:
        total = len(self.engine.segments)
        self.ctrl.set_status(f"Landed on {name} (segment {index + 1} of {total}).")

    def _on_settings_toggled(self, shown: bool) -> None:
        self.cfg.ui.show_settings = bool(shown)
        self._save_config()

    # ----------------------------- Core Actions --------------------------------

    def spin(self) -> None:
        self.engine.spin()
        self.ctrl.set_status("Spinning…")

    def apply_settings(
        self, names_text: str, colors_text: str, ignore_text: str
    ) -> None:
        """Rebuild the wheel from comma-separated form input."""
        wheel = WheelSettings(
            segment_names=split_csv(names_text),
            segment_colors=split_csv(colors_text),
            ignore_names=split_csv(ignore_text),
        )
        try:
            engine = self._build_engine(wheel)
        except InvalidConfiguration as exc:
            self.ctrl.set_status(f"Invalid configuration: {exc}")
            return

        self.engine.stop()
        self.wheel.set_engine(engine)
        self.cfg.wheel = wheel
        self.ctrl.populate(wheel)
        self._save_config()
        engine.start()
        self.ctrl.set_status(f"Wheel updated with {len(engine.segments)} segments.")


# ---------------------------------- Main --------------------------------------


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    app = QtWidgets.QApplication(sys.argv if argv is None else argv)
    app.setApplicationName("spinner_wheel")
    app.setApplicationVersion(APP_VERSION)

    parser = build_parser()
    parser.process(app)

    ctrl = MainController(app, parser=parser)
    ret = app.exec()
    ctrl._save_config()
    sys.exit(ret)


if __name__ == "__main__":
    main()
