"""Shared dataclasses, enums, configuration, logging and platform paths."""

import base64
import logging
import mimetypes
import os
import sys
from dataclasses import dataclass
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Optional, Tuple


# --- Type aliases ---

ProgressCallback = Callable[[int, int, str], None]  # (step, total, message)
RequestToken = int


# --- Enums ---

class WorkflowState(Enum):
    IDLE = "idle"
    IMAGE_READY = "image_ready"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    FAILED = "failed"


class ConfidenceLevel(Enum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


# --- Dataclasses ---

@dataclass(frozen=True)
class ImageSource:
    """A user-supplied file: declared media type plus a way to read its bytes."""
    name: str
    media_type: str
    reader: Callable[[], bytes]

    @classmethod
    def from_path(cls, path) -> "ImageSource":
        path = Path(path)
        media_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            media_type=media_type or "application/octet-stream",
            reader=path.read_bytes,
        )

    @classmethod
    def from_bytes(cls, name: str, media_type: str, data: bytes) -> "ImageSource":
        return cls(name=name, media_type=media_type, reader=lambda: data)


@dataclass(frozen=True)
class ImageAsset:
    """Decoded, self-contained image held in memory as a data URI."""
    name: str
    media_type: str
    data_uri: str
    size_bytes: int
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def content(self) -> bytes:
        """Raw image bytes recovered from the data URI."""
        _, payload = self.data_uri.split(",", 1)
        return base64.b64decode(payload)

    @property
    def dimensions(self) -> Optional[Tuple[int, int]]:
        if self.width is None or self.height is None:
            return None
        return self.width, self.height


@dataclass(frozen=True)
class AnalysisResult:
    """Verdict produced by an inference provider.

    ``recommendations`` keeps the provider's order and is displayed as a
    ranked list.
    """
    condition: str
    confidence: int
    description: str
    recommendations: Tuple[str, ...]

    def __post_init__(self):
        if isinstance(self.confidence, bool) or not isinstance(self.confidence, int):
            raise ValueError(f"confidence must be an integer, got {self.confidence!r}")
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence must be within [0, 100], got {self.confidence}")
        if isinstance(self.recommendations, (str, bytes)):
            raise ValueError("recommendations must be a sequence of strings, not a single string")
        # Lists from providers are frozen into tuples.
        object.__setattr__(self, "recommendations", tuple(self.recommendations))
        if not self.recommendations:
            raise ValueError("recommendations must not be empty")

    def confidence_level(self) -> ConfidenceLevel:
        return level_from_confidence(self.confidence)


@dataclass
class AnalysisConfig:
    """Runtime settings for the analysis workflow."""
    latency: float = 2.5
    max_image_bytes: int = 20 * 1024 * 1024
    seed: Optional[int] = None

    @classmethod
    def from_settings(cls, settings=None) -> "AnalysisConfig":
        """Build a config from QSettings, with environment overrides on top."""
        config = cls()
        if settings is not None:
            config.latency = float(settings.value("analysis/latency", config.latency))
            config.max_image_bytes = int(
                settings.value("analysis/max_image_bytes", config.max_image_bytes)
            )
            seed = settings.value("analysis/seed", None)
            config.seed = int(seed) if seed not in (None, "") else None

        if "DERMASCAN_LATENCY" in os.environ:
            config.latency = float(os.environ["DERMASCAN_LATENCY"])
        if "DERMASCAN_SEED" in os.environ:
            config.seed = int(os.environ["DERMASCAN_SEED"])

        if config.latency < 0:
            raise ValueError(f"latency must not be negative, got {config.latency}")
        if config.max_image_bytes <= 0:
            raise ValueError("max_image_bytes must be positive")
        return config


# --- Confidence mapping ---

def level_from_confidence(confidence: int) -> ConfidenceLevel:
    """Map a 0-100 confidence to the badge level shown with a result."""
    if confidence >= 85:
        return ConfidenceLevel.HIGH
    elif confidence >= 70:
        return ConfidenceLevel.MODERATE
    return ConfidenceLevel.LOW


# --- Platform-specific paths ---

def get_data_dir() -> Path:
    """Get the platform-specific application data directory."""
    if sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support" / "DermaScan"
    elif sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home())) / "DermaScan"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "dermascan"
    base.mkdir(parents=True, exist_ok=True)
    return base


def get_asset_path(relative_path: str) -> str:
    """Get absolute path to an asset file, handling PyInstaller frozen apps."""
    if getattr(sys, "frozen", False):
        base = Path(sys._MEIPASS)
    else:
        base = Path(__file__).parent.parent
    return str(base / relative_path)


# --- Logging ---

_LOGGING_CONFIGURED = False


def setup_logging(log_path: Optional[Path] = None) -> Path:
    """Configure console and rotating file logging once per process."""
    global _LOGGING_CONFIGURED
    resolved = log_path or get_data_dir() / "logs" / "dermascan.log"
    if _LOGGING_CONFIGURED:
        return resolved

    resolved.parent.mkdir(parents=True, exist_ok=True)
    level_name = os.environ.get("DERMASCAN_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    file_handler = RotatingFileHandler(resolved, maxBytes=1024 * 1024, backupCount=3)
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(file_handler)
    root.addHandler(console_handler)

    _LOGGING_CONFIGURED = True
    return resolved


# --- Formatting ---

def format_file_size(size_bytes: int) -> str:
    """Format byte count as human-readable string."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"
