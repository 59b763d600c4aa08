# src/gui.py

import sys
import typing
from pathlib import Path

from PyQt5.QtWidgets import (
    QApplication, QMainWindow, QWidget, QFormLayout, QVBoxLayout,
    QLabel, QLineEdit, QPushButton, QFileDialog, QComboBox,
    QTextEdit, QMessageBox
)
from PyQt5.QtGui import QPalette, QColor
from PyQt5.QtCore import Qt, QMetaObject, Q_ARG, QTimer, pyqtSlot
from PyQt5.QtGui import QCloseEvent, QTextCursor

# application modules
from errors import AppError, SessionAlreadyRunningError, SettingsError
from logging_config import setup_logging
from models import WatchStrategy
from paths import APP_LOG_FILE, ensure_runtime_directories
from services import SeedshotService


class MainWindow(QMainWindow):
    def __init__(self, service: typing.Optional[SeedshotService] = None):
        super().__init__()
        self.service = service or SeedshotService()
        settings = self.service.settings()

        self.setWindowTitle(settings.label)
        self.resize(640, 480)
        self.setMinimumSize(520, 360)

        # Central widget & layout
        central = QWidget()
        self.setCentralWidget(central)
        self.form = QFormLayout()
        layout = QVBoxLayout()
        central.setLayout(layout)

        heading = QLabel("LC Seedshotter")
        heading.setStyleSheet("font-size: 18px; font-weight: bold;")
        layout.addWidget(heading)

        # Label
        self.label_le = QLineEdit(settings.label)
        self.form.addRow("Label:", self.label_le)

        # Log file picker
        self.log_le = QLineEdit(str(settings.log_file) if settings.log_file else "")
        self.log_le.setPlaceholderText("Path to log file to read")
        self.log_btn = QPushButton("📂 Browse…")
        self.log_btn.clicked.connect(self._pick_log_file)
        self.form.addRow("Player.log file:", self._hbox(self.log_le, self.log_btn))

        # Screenshot output picker
        self.output_le = QLineEdit(str(settings.output_file))
        self.output_btn = QPushButton("📂 Browse…")
        self.output_btn.clicked.connect(self._pick_output_file)
        self.form.addRow("Screenshot output:", self._hbox(self.output_le, self.output_btn))

        # Watch strategy
        self.strategy_cb = QComboBox()
        self.strategy_cb.addItems([s.value for s in WatchStrategy])
        self.form.addRow("Watch strategy:", self.strategy_cb)

        layout.addLayout(self.form)

        # Buttons
        self.start_btn = QPushButton("Start seedshotter")
        self.start_btn.clicked.connect(self.on_start)
        self.stop_btn = QPushButton("Stop seedshotter")
        self.stop_btn.clicked.connect(self.on_stop)
        self.stop_btn.setEnabled(False)
        layout.addWidget(self.start_btn)
        layout.addWidget(self.stop_btn)

        self.status_lbl = QLabel()
        layout.addWidget(self.status_lbl)

        # Event console
        self.console = QTextEdit()
        self.console.setReadOnly(True)
        layout.addWidget(QLabel("Activity:"))
        layout.addWidget(self.console, 1)

        # Session state lives on the watch thread; refresh the indicator from here.
        self.status_timer = QTimer(self)
        self.status_timer.timeout.connect(self._refresh_status)
        self.status_timer.start(250)
        self._refresh_status()

    def _hbox(self, *widgets):
        """Helper to put widgets in an inline layout."""
        from PyQt5.QtWidgets import QHBoxLayout
        box = QWidget()
        layout = QHBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        for w in widgets:
            layout.addWidget(w)
        box.setLayout(layout)
        return box

    def _pick_log_file(self):
        start_dir = str(Path(self.log_le.text()).parent) if self.log_le.text() else ""
        path, _ = QFileDialog.getOpenFileName(self, "Select Player.log file", start_dir, "Log (*.log)")
        if path:
            self.log_le.setText(path)

    def _pick_output_file(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Select screenshot output file", self.output_le.text(), "PNG (*.png)"
        )
        if path:
            self.output_le.setText(path)

    def append_log(self, line: str):
        """Thread-safe append to the console; safe to call from the watch thread."""
        QMetaObject.invokeMethod(
            self,
            "_append_console",
            Qt.ConnectionType.QueuedConnection,
            Q_ARG(str, line)
        )

    @pyqtSlot(str)
    def _append_console(self, line: str):
        self.console.append(line)
        cursor = self.console.textCursor()
        cursor.movePosition(QTextCursor.End)
        self.console.setTextCursor(cursor)
        self.console.ensureCursorVisible()

    def _refresh_status(self):
        running = self.service.is_running()
        status = self.service.status()
        text = f"Seedshotter running: {running}"
        if status["stats"]:
            text += f"  |  captures: {status['stats']['callbacks_succeeded']}"
            failed = status["stats"]["callbacks_failed"]
            if failed:
                text += f", failed: {failed}"
        self.status_lbl.setText(text)
        self.start_btn.setEnabled(not running)
        self.stop_btn.setEnabled(running and not status["stop_requested"])

    def on_start(self):
        log_file = self.log_le.text().strip()
        output_file = self.output_le.text().strip()
        try:
            self.service.start(
                log_file or None,
                output_file or None,
                strategy=self.strategy_cb.currentText(),
                on_capture=lambda path: self.append_log(f"📸 Saved screenshot to {path}"),
                on_error=lambda error: self.append_log(f"❌ {error}"),
            )
        except SessionAlreadyRunningError as e:
            QMessageBox.warning(self, "Already running", str(e))
        except AppError as e:
            QMessageBox.critical(self, "Could not start", str(e))
        else:
            self.append_log(f"▶ Watching {log_file}")
        self._refresh_status()

    def on_stop(self):
        self.service.stop()
        self.append_log("■ Stopping seedshotter…")
        self._refresh_status()

    def _save_settings(self):
        try:
            self.service.update_settings(
                log_file=self.log_le.text().strip() or None,
                output_file=self.output_le.text().strip() or None,
                label=self.label_le.text(),
            )
        except SettingsError as e:
            QMessageBox.warning(self, "Settings", f"Could not save settings:\n{e}")

    def closeEvent(self, a0: typing.Optional[QCloseEvent]) -> None:
        """
        Stop any running session and persist the settings before closing.
        """
        self.status_timer.stop()
        if not self.service.stop(wait=True, timeout=5.0):
            QMessageBox.warning(self, "Exit", "The watch thread did not stop in time.")
        self._save_settings()
        super().closeEvent(a0)


def main():
    ensure_runtime_directories()
    setup_logging(log_file=APP_LOG_FILE)
    app = QApplication(sys.argv)

    dark = QPalette()
    dark.setColor(QPalette.Window,        QColor(53, 53, 53))
    dark.setColor(QPalette.WindowText,    QColor(255, 255, 255))
    dark.setColor(QPalette.Base,          QColor(42, 42, 42))
    dark.setColor(QPalette.AlternateBase, QColor(66, 66, 66))
    dark.setColor(QPalette.Text,          QColor(255, 255, 255))
    dark.setColor(QPalette.Button,        QColor(53, 53, 53))
    dark.setColor(QPalette.ButtonText,    QColor(255, 255, 255))
    dark.setColor(QPalette.Highlight,     QColor(42, 130, 218))
    dark.setColor(QPalette.HighlightedText, QColor(0, 0, 0))
    app.setPalette(dark)
    app.setStyle("Fusion")

    w = MainWindow()
    w.show()
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()
