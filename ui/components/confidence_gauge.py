"""Circular confidence gauge with animated fill."""

from PyQt6.QtCore import QPropertyAnimation, QEasingCurve, QRectF, Qt, pyqtProperty
from PyQt6.QtGui import QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QWidget

from core.utils import ConfidenceLevel, level_from_confidence


class ConfidenceGauge(QWidget):
    """Animated circular gauge for a 0-100 confidence value."""

    LEVEL_COLORS = {
        ConfidenceLevel.HIGH: QColor("#22C55E"),      # green
        ConfidenceLevel.MODERATE: QColor("#EAB308"),  # yellow
        ConfidenceLevel.LOW: QColor("#F97316"),       # orange
    }
    COLOR_BG = QColor("#E5E7EB")

    def __init__(self, label: str = "", size: int = 120, parent=None):
        super().__init__(parent)
        self._label = label
        self._size = size
        self._confidence = 0
        self._animated_value = 0.0
        self.setFixedSize(size, size)

        self._animation = QPropertyAnimation(self, b"animatedValue")
        self._animation.setDuration(1000)
        self._animation.setEasingCurve(QEasingCurve.Type.OutCubic)

    def set_confidence(self, confidence: int):
        """Set the confidence (0-100) and animate to it."""
        self._confidence = max(0, min(100, int(confidence)))
        self._animation.stop()
        self._animation.setStartValue(self._animated_value)
        self._animation.setEndValue(float(self._confidence))
        self._animation.start()

    @property
    def confidence(self) -> int:
        return self._confidence

    def _get_animated_value(self) -> float:
        return self._animated_value

    def _set_animated_value(self, value: float):
        self._animated_value = value
        self.update()

    animatedValue = pyqtProperty(float, _get_animated_value, _set_animated_value)

    def color(self) -> QColor:
        return self.LEVEL_COLORS[level_from_confidence(self._confidence)]

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        pen_width = 10
        margin = pen_width / 2 + 4
        rect = QRectF(margin, margin, self._size - 2 * margin, self._size - 2 * margin)

        bg_pen = QPen(self.COLOR_BG, pen_width, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap)
        painter.setPen(bg_pen)
        painter.drawArc(rect, 225 * 16, -270 * 16)

        color = self.color()
        fg_pen = QPen(color, pen_width, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap)
        painter.setPen(fg_pen)
        span = int(-270 * (self._animated_value / 100) * 16)
        painter.drawArc(rect, 225 * 16, span)

        painter.setPen(QPen(color))
        font = QFont()
        font.setPixelSize(int(self._size * 0.22))
        font.setBold(True)
        painter.setFont(font)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, f"{int(round(self._animated_value))}%")

        if self._label:
            painter.setPen(QPen(QColor("#888888")))
            label_font = QFont()
            label_font.setPixelSize(int(self._size * 0.1))
            painter.setFont(label_font)
            label_rect = QRectF(rect.x(), rect.center().y() + 12, rect.width(), 20)
            painter.drawText(label_rect, Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop, self._label)

        painter.end()

    def reset(self):
        """Reset gauge to zero."""
        self._animation.stop()
        self._animated_value = 0.0
        self._confidence = 0
        self.update()
