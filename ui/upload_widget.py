"""Upload & analyze panel: drop zone, analyze button, progress and result."""

import logging

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QLabel,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from core.errors import AnalyzeError, IntakeError
from core.orchestrator import AnalysisOrchestrator
from core.utils import ImageSource, WorkflowState
from ui.components.image_drop_zone import ImageDropZone
from ui.components.progress_widget import ProgressWidget
from ui.components.result_card import ResultCard

logger = logging.getLogger(__name__)


class UploadWidget(QWidget):
    """Renders orchestrator state and forwards user actions to it.

    The widget never changes workflow state itself: it calls the
    orchestrator and redraws when the orchestrator reports a new state or
    result.
    """

    status_message = pyqtSignal(str)

    def __init__(self, orchestrator: AnalysisOrchestrator, parent=None):
        super().__init__(parent)
        self._orchestrator = orchestrator
        self._setup_ui()
        self._connect_signals()
        self._on_state_changed(orchestrator.state)

    def _setup_ui(self):
        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QScrollArea.Shape.NoFrame)

        container = QWidget()
        layout = QVBoxLayout(container)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(16)

        title = QLabel("Upload & Analyze")
        title.setProperty("class", "sectionTitle")

        subtitle = QLabel("Upload a clear image of your skin for instant AI-powered analysis")
        subtitle.setProperty("class", "sectionSubtitle")
        subtitle.setWordWrap(True)

        self._drop_zone = ImageDropZone()

        self._analyze_btn = QPushButton("Analyze Image")
        self._analyze_btn.setObjectName("primaryButton")
        self._analyze_btn.setEnabled(False)

        self._progress = ProgressWidget()
        self._result_card = ResultCard()

        layout.addWidget(title)
        layout.addWidget(subtitle)
        layout.addWidget(self._drop_zone)
        layout.addWidget(self._analyze_btn)
        layout.addWidget(self._progress)
        layout.addWidget(self._result_card)
        layout.addStretch()

        scroll.setWidget(container)
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.addWidget(scroll)

    def _connect_signals(self):
        self._drop_zone.file_selected.connect(self.open_file)
        self._drop_zone.file_removed.connect(self._orchestrator.reset)
        self._analyze_btn.clicked.connect(self.request_analysis)
        self._result_card.analyze_another.connect(self._orchestrator.reset)

        self._orchestrator.state_changed.connect(self._on_state_changed)
        self._orchestrator.image_changed.connect(self._on_image_changed)
        self._orchestrator.progress.connect(self._progress.update_progress)
        self._orchestrator.analysis_failed.connect(self._on_analysis_failed)
        self._unsubscribe = self._orchestrator.subscribe_results(self._on_result_changed)

    # --- User actions ---

    def open_file(self, path: str):
        """Load the file at ``path`` into the workflow."""
        try:
            self._orchestrator.load_image(ImageSource.from_path(path))
        except IntakeError as e:
            logger.info("Rejected %s: %s", path, e)
            QMessageBox.warning(self, "Upload failed", f"{e}\n\nPlease upload an image file.")
            return
        self.status_message.emit("Image uploaded successfully!")

    def browse(self):
        self._drop_zone.browse()

    def request_analysis(self):
        try:
            self._orchestrator.analyze()
        except AnalyzeError as e:
            self.status_message.emit(str(e))

    # --- Orchestrator reports ---

    def _on_state_changed(self, state: WorkflowState):
        self._analyze_btn.setEnabled(
            state in (WorkflowState.IMAGE_READY, WorkflowState.COMPLETE, WorkflowState.FAILED)
        )
        if state == WorkflowState.ANALYZING:
            self._analyze_btn.setText("Analyzing...")
            self._progress.start()
        else:
            self._analyze_btn.setText("Analyze Image")

        if state == WorkflowState.COMPLETE:
            self._progress.finish()
            self.status_message.emit("Analysis complete!")
        elif state != WorkflowState.ANALYZING:
            self._progress.reset()

    def _on_image_changed(self, asset):
        if asset is None:
            self._drop_zone.reset()
        else:
            self._drop_zone.show_asset(asset)

    def _on_result_changed(self, result):
        if result is None:
            self._result_card.reset()
        else:
            self._result_card.show_result(result)

    def _on_analysis_failed(self, error):
        QMessageBox.critical(self, "Analysis failed", str(error))

    def cleanup(self):
        self._unsubscribe()
