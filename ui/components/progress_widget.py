"""Staged progress indicator shown while an analysis runs."""

from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QVBoxLayout,
    QWidget,
)


class ProgressWidget(QWidget):
    """Progress bar with percentage and the provider's current stage."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._setup_ui()
        self.hide()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 8, 0, 8)
        layout.setSpacing(8)

        bar_row = QHBoxLayout()
        bar_row.setSpacing(12)

        self._bar = QProgressBar()
        self._bar.setMinimum(0)
        self._bar.setMaximum(100)
        self._bar.setValue(0)
        self._bar.setTextVisible(False)
        self._bar.setFixedHeight(8)

        self._pct_label = QLabel("0%")
        self._pct_label.setProperty("class", "progressPercent")
        self._pct_label.setFixedWidth(45)

        bar_row.addWidget(self._bar, 1)
        bar_row.addWidget(self._pct_label)

        self._status_label = QLabel("")
        self._status_label.setProperty("class", "progressStatus")

        layout.addLayout(bar_row)
        layout.addWidget(self._status_label)

    def start(self):
        """Show and reset the progress widget."""
        self._bar.setValue(0)
        self._pct_label.setText("0%")
        self._status_label.setText("Analyzing...")
        self.show()

    def update_progress(self, current: int, total: int, message: str):
        """Update progress bar, percentage, and status message."""
        pct = int(current / total * 100) if total > 0 else 0
        pct = min(pct, 100)
        self._bar.setValue(pct)
        self._pct_label.setText(f"{pct}%")
        self._status_label.setText(message)

    def finish(self):
        self._bar.setValue(100)
        self._pct_label.setText("100%")
        self._status_label.setText("Analysis complete!")

    def reset(self):
        """Hide and reset the widget."""
        self._bar.setValue(0)
        self._pct_label.setText("0%")
        self._status_label.setText("")
        self.hide()

    @property
    def status_text(self) -> str:
        return self._status_label.text()
