"""Analysis result card: condition, confidence, description, recommendations."""

from typing import List, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.utils import AnalysisResult, ConfidenceLevel
from ui.components.confidence_gauge import ConfidenceGauge
from ui.components.disclaimer_banner import DisclaimerBanner

LEVEL_LABELS = {
    ConfidenceLevel.HIGH: "High confidence",
    ConfidenceLevel.MODERATE: "Moderate confidence",
    ConfidenceLevel.LOW: "Low confidence",
}


class ResultCard(QWidget):
    """Displays an AnalysisResult. Hidden while there is nothing to show."""

    analyze_another = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("resultCard")
        self._result: Optional[AnalysisResult] = None
        self._recommendation_rows: List[QWidget] = []
        self._setup_ui()
        self.hide()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(16)

        heading = QLabel("Analysis Results")
        heading.setProperty("class", "sectionTitle")

        header_row = QHBoxLayout()
        header_row.setSpacing(20)

        info_col = QVBoxLayout()
        info_col.setSpacing(4)
        self._condition_label = QLabel("")
        self._condition_label.setProperty("class", "sectionTitle")
        self._description_label = QLabel("")
        self._description_label.setProperty("class", "sectionSubtitle")
        self._description_label.setWordWrap(True)
        self._level_label = QLabel("")
        self._level_label.setProperty("class", "sectionSubtitle")
        info_col.addWidget(self._condition_label)
        info_col.addWidget(self._description_label)
        info_col.addWidget(self._level_label)
        info_col.addStretch()

        self._gauge = ConfidenceGauge(label="Confidence", size=120)

        header_row.addLayout(info_col, 1)
        header_row.addWidget(self._gauge)

        rec_title = QLabel("Recommendations")
        rec_title.setProperty("class", "sectionTitle")
        rec_title.setStyleSheet("font-size: 18px;")

        self._recommendations_layout = QVBoxLayout()
        self._recommendations_layout.setSpacing(8)

        self._disclaimer = DisclaimerBanner()

        footer_row = QHBoxLayout()
        footer_row.addStretch()
        self._another_btn = QPushButton("Analyze Another Image")
        self._another_btn.setObjectName("primaryButton")
        self._another_btn.clicked.connect(self.analyze_another.emit)
        footer_row.addWidget(self._another_btn)

        layout.addWidget(heading)
        layout.addLayout(header_row)
        layout.addWidget(rec_title)
        layout.addLayout(self._recommendations_layout)
        layout.addWidget(self._disclaimer)
        layout.addLayout(footer_row)

    def show_result(self, result: AnalysisResult):
        self._result = result
        self._condition_label.setText(result.condition)
        self._description_label.setText(result.description)
        self._level_label.setText(
            f"{result.confidence}% confidence ({LEVEL_LABELS[result.confidence_level()]})"
        )
        self._gauge.set_confidence(result.confidence)

        self._clear_recommendations()
        for rank, text in enumerate(result.recommendations, start=1):
            row = self._build_recommendation_row(rank, text)
            self._recommendations_layout.addWidget(row)
            self._recommendation_rows.append(row)

        self.show()

    def reset(self):
        """Clear results and hide."""
        self._result = None
        self._gauge.reset()
        self._clear_recommendations()
        self.hide()

    def recommendation_texts(self) -> List[str]:
        """Displayed recommendations, in rank order."""
        return [row.property("recommendation") for row in self._recommendation_rows]

    @property
    def result(self) -> Optional[AnalysisResult]:
        return self._result

    def _build_recommendation_row(self, rank: int, text: str) -> QWidget:
        row = QWidget()
        row.setProperty("recommendation", text)
        row_layout = QHBoxLayout(row)
        row_layout.setContentsMargins(0, 0, 0, 0)
        row_layout.setSpacing(12)

        rank_label = QLabel(str(rank))
        rank_label.setProperty("class", "recommendationRank")
        rank_label.setFixedSize(28, 28)
        rank_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        text_label = QLabel(text)
        text_label.setWordWrap(True)

        row_layout.addWidget(rank_label)
        row_layout.addWidget(text_label, 1)
        return row

    def _clear_recommendations(self):
        for row in self._recommendation_rows:
            self._recommendations_layout.removeWidget(row)
            row.deleteLater()
        self._recommendation_rows = []
