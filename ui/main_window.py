"""Main application window: header, upload panel and footer."""

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.orchestrator import AnalysisOrchestrator
from ui.theme import THEME_NAMES, ThemeManager, ThemeState
from ui.upload_widget import UploadWidget

THEME_ICONS = {
    ThemeState.LIGHT: "☀",
    ThemeState.DARK: "☾",
    ThemeState.MEDICAL: "✚",
}


class MainWindow(QMainWindow):
    """Single-page window hosting the upload and result views."""

    def __init__(self, theme_manager: ThemeManager, orchestrator: AnalysisOrchestrator):
        super().__init__()
        self._theme_manager = theme_manager
        self._orchestrator = orchestrator
        self.setWindowTitle("DermaScan")
        self.setMinimumSize(760, 640)
        self.resize(920, 780)
        self._setup_ui()
        self._setup_menu_bar()
        self._theme_manager.theme_changed.connect(self._on_theme_changed)
        self._on_theme_changed(self._theme_manager.current_theme)

    def _setup_ui(self):
        central = QWidget()
        central.setObjectName("centralArea")
        self.setCentralWidget(central)

        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        layout.addWidget(self._create_header())

        self._upload_widget = UploadWidget(self._orchestrator)
        self._upload_widget.status_message.connect(
            lambda message: self.statusBar().showMessage(message, 4000)
        )
        layout.addWidget(self._upload_widget, 1)

        footer = QLabel(
            "For educational purposes only. Always consult a healthcare professional."
        )
        footer.setProperty("class", "sectionSubtitle")
        footer.setAlignment(Qt.AlignmentFlag.AlignCenter)
        footer.setContentsMargins(0, 8, 0, 8)
        layout.addWidget(footer)

    def _create_header(self) -> QWidget:
        header = QWidget()
        header.setObjectName("header")
        row = QHBoxLayout(header)
        row.setContentsMargins(32, 20, 20, 8)

        text_col = QVBoxLayout()
        title = QLabel("AI Dermatology Analysis")
        title.setProperty("class", "heroTitle")
        tagline = QLabel("Upload a photo of your skin and get an instant AI assessment.")
        tagline.setProperty("class", "sectionSubtitle")
        text_col.addWidget(title)
        text_col.addWidget(tagline)

        self._theme_btn = QPushButton()
        self._theme_btn.setObjectName("themeButton")
        self._theme_btn.setToolTip("Switch theme")
        self._theme_btn.clicked.connect(self._cycle_theme)

        row.addLayout(text_col, 1)
        row.addWidget(self._theme_btn, 0, Qt.AlignmentFlag.AlignTop)
        return header

    def _setup_menu_bar(self):
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        open_action = QAction("&Open Image...", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self._upload_widget.browse)
        file_menu.addAction(open_action)

        reset_action = QAction("&Reset", self)
        reset_action.triggered.connect(self._orchestrator.reset)
        file_menu.addAction(reset_action)

        file_menu.addSeparator()
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        view_menu = menu_bar.addMenu("&View")
        theme_action = QAction("Switch &Theme", self)
        theme_action.setShortcut("Ctrl+T")
        theme_action.triggered.connect(self._cycle_theme)
        view_menu.addAction(theme_action)

    def _cycle_theme(self):
        theme = self._theme_manager.cycle_theme()
        self.statusBar().showMessage(f"Switched to {THEME_NAMES[theme]}", 3000)

    def _on_theme_changed(self, theme: ThemeState):
        self._theme_btn.setText(THEME_ICONS[theme])

    def closeEvent(self, event):
        """Wait for running analyses before closing."""
        self._upload_widget.cleanup()
        self._orchestrator.shutdown()
        QApplication.processEvents()
        event.accept()
