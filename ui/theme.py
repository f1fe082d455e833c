"""Theme manager for DermaScan: light/dark/medical QSS-based theming."""

import logging
import sys
from enum import Enum

from PyQt6.QtCore import QObject, QSettings, pyqtSignal
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import QApplication

from core.utils import get_asset_path

logger = logging.getLogger(__name__)


class ThemeState(Enum):
    LIGHT = "light"
    DARK = "dark"
    MEDICAL = "medical"


DEFAULT_THEME = ThemeState.LIGHT
THEME_ORDER = (ThemeState.LIGHT, ThemeState.DARK, ThemeState.MEDICAL)
THEME_NAMES = {
    ThemeState.LIGHT: "Light Theme",
    ThemeState.DARK: "Dark Theme",
    ThemeState.MEDICAL: "Medical Theme",
}


class ThemeManager(QObject):
    """Holds the active ThemeState and applies its stylesheet.

    Starts from the persisted choice, or ``DEFAULT_THEME`` when nothing
    valid is stored. Widgets that need more than the stylesheet subscribe
    to ``theme_changed``.
    """

    theme_changed = pyqtSignal(object)  # ThemeState

    def __init__(self, app: QApplication, settings: QSettings = None):
        super().__init__()
        self._app = app
        self._settings = settings or QSettings("DermaScan", "DermaScan")
        self._current_theme = self._read_persisted()
        self._setup_font()

    def _read_persisted(self) -> ThemeState:
        stored = self._settings.value("theme", DEFAULT_THEME.value)
        try:
            return ThemeState(stored)
        except ValueError:
            logger.warning("Ignoring unknown persisted theme %r", stored)
            return DEFAULT_THEME

    def _setup_font(self):
        """Set system-native fonts per platform."""
        if sys.platform == "darwin":
            font = QFont(".AppleSystemUIFont", 13)
        elif sys.platform == "win32":
            font = QFont("Segoe UI", 10)
        else:
            font = QFont("Ubuntu", 10)
        font.setHintingPreference(QFont.HintingPreference.PreferNoHinting)
        self._app.setFont(font)

    def apply_theme(self):
        """Apply the stylesheet for the current theme."""
        self._app.setStyleSheet(self._load_qss(f"{self._current_theme.value}.qss"))

    def set_theme(self, theme: ThemeState):
        """Switch to ``theme``, persist it and notify subscribers."""
        theme = ThemeState(theme)
        changed = theme != self._current_theme
        self._current_theme = theme
        self._settings.setValue("theme", theme.value)
        self.apply_theme()
        if changed:
            logger.info("Theme set to %s", theme.value)
            self.theme_changed.emit(theme)

    def cycle_theme(self) -> ThemeState:
        """Advance light -> dark -> medical -> light."""
        index = THEME_ORDER.index(self._current_theme)
        next_theme = THEME_ORDER[(index + 1) % len(THEME_ORDER)]
        self.set_theme(next_theme)
        return next_theme

    @property
    def current_theme(self) -> ThemeState:
        return self._current_theme

    @staticmethod
    def _load_qss(filename: str) -> str:
        """Load a QSS file from assets/styles/."""
        qss_path = get_asset_path(f"assets/styles/{filename}")
        try:
            with open(qss_path, "r") as f:
                return f.read()
        except FileNotFoundError:
            logger.warning("Stylesheet %s not found", qss_path)
            return ""
