"""Medical disclaimer banner shown with every result."""

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QWidget

DISCLAIMER_TEXT = (
    "This is an AI-powered analysis for educational purposes only. "
    "Please consult a dermatologist for professional diagnosis."
)


class DisclaimerBanner(QWidget):
    """Amber warning banner. Cannot be dismissed."""

    def __init__(self, text: str = DISCLAIMER_TEXT, parent=None):
        super().__init__(parent)
        self.setObjectName("disclaimerBanner")
        layout = QHBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(10)

        icon_label = QLabel("⚠")
        icon_label.setFixedWidth(24)
        icon_label.setAlignment(Qt.AlignmentFlag.AlignTop)

        self._text_label = QLabel(text)
        self._text_label.setWordWrap(True)

        layout.addWidget(icon_label)
        layout.addWidget(self._text_label, 1)
