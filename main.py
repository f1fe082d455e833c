"""DermaScan: AI skin analysis demo.

Entry point for the desktop application.
"""

import logging
import os
import sys

from PyQt6.QtCore import QSettings
from PyQt6.QtWidgets import QApplication

from core.image_intake import ImageIntake
from core.inference import MockInferenceProvider, seeded_chooser
from core.orchestrator import AnalysisOrchestrator
from core.utils import AnalysisConfig, setup_logging
from ui.main_window import MainWindow
from ui.theme import ThemeManager

logger = logging.getLogger(__name__)


def build_orchestrator(config: AnalysisConfig) -> AnalysisOrchestrator:
    """Wire the workflow with the default mock provider."""
    chooser = seeded_chooser(config.seed) if config.seed is not None else None
    provider = MockInferenceProvider(latency=config.latency, chooser=chooser)
    return AnalysisOrchestrator(
        provider=provider,
        intake=ImageIntake(max_bytes=config.max_image_bytes),
    )


def main():
    """Application entry point."""
    # Handle PyInstaller frozen app
    if getattr(sys, "frozen", False):
        os.chdir(os.path.dirname(sys.executable))

    log_path = setup_logging()

    app = QApplication(sys.argv)
    app.setApplicationName("DermaScan")
    app.setApplicationVersion("1.0.0")
    app.setOrganizationName("DermaScan")

    settings = QSettings("DermaScan", "DermaScan")
    config = AnalysisConfig.from_settings(settings)
    logger.info("Starting DermaScan (latency=%.1fs, log=%s)", config.latency, log_path)

    theme_manager = ThemeManager(app, settings)
    theme_manager.apply_theme()

    orchestrator = build_orchestrator(config)

    window = MainWindow(theme_manager, orchestrator)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
