"""Shared test fixtures for DermaScan."""

import io
import os
import tempfile
import threading
import time
from pathlib import Path

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest
from PIL import Image
from PyQt6.QtCore import QCoreApplication
from PyQt6.QtWidgets import QApplication

from core.orchestrator import AnalysisOrchestrator
from core.utils import AnalysisResult, ImageSource


# --- Test providers ---

class StaticProvider:
    """Always returns the same result, immediately."""

    name = "static"

    def __init__(self, result):
        self.result = result
        self.calls = 0

    def analyze(self, asset, on_progress=None):
        self.calls += 1
        return self.result


class SequencedProvider:
    """Returns ``results[i]`` for the i-th call once that call's gate opens."""

    name = "sequenced"

    def __init__(self, results):
        self.results = list(results)
        self.gates = [threading.Event() for _ in self.results]
        self.entered = [threading.Event() for _ in self.results]
        self._lock = threading.Lock()
        self._next = 0

    def analyze(self, asset, on_progress=None):
        with self._lock:
            index = self._next
            self._next += 1
        self.entered[index].set()
        self.gates[index].wait(timeout=5)
        return self.results[index]

    @property
    def calls(self):
        with self._lock:
            return self._next

    def release(self, index):
        self.gates[index].set()

    def release_all(self):
        for gate in self.gates:
            gate.set()


class FlakyProvider:
    """Raises on the first ``failures`` calls, then returns ``result``."""

    name = "flaky"

    def __init__(self, result, failures=1):
        self.result = result
        self.failures = failures
        self.calls = 0

    def analyze(self, asset, on_progress=None):
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError("model backend unavailable")
        return self.result


# --- Fixtures ---

@pytest.fixture(scope="session")
def qapp():
    """A QApplication shared by the whole session (offscreen platform)."""
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def wait_until(qapp):
    """Pump the Qt event loop until ``predicate()`` holds or time runs out."""

    def _wait(predicate, timeout=5.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            QCoreApplication.processEvents()
            if predicate():
                return
            time.sleep(0.005)
        QCoreApplication.processEvents()
        assert predicate(), "condition not met before timeout"

    return _wait


@pytest.fixture
def make_orchestrator(qapp):
    """Build orchestrators and shut them down (releasing gates) after the test."""
    created = []

    def _make(provider, **kwargs):
        orchestrator = AnalysisOrchestrator(provider=provider, **kwargs)
        created.append((orchestrator, provider))
        return orchestrator

    yield _make

    for orchestrator, provider in created:
        if hasattr(provider, "release_all"):
            provider.release_all()
        orchestrator.shutdown()
    QCoreApplication.processEvents()


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


def _png_bytes(width, height, seed=0):
    rng = np.random.default_rng(seed)
    img = Image.fromarray(rng.integers(0, 255, (height, width, 3), dtype=np.uint8))
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    """Raw bytes of a 224x224 RGB PNG (simulates a skin photo)."""
    return _png_bytes(224, 224)


@pytest.fixture
def png_source(png_bytes):
    return ImageSource.from_bytes("rash.png", "image/png", png_bytes)


@pytest.fixture
def other_png_source():
    return ImageSource.from_bytes("mole.png", "image/png", _png_bytes(64, 48, seed=1))


@pytest.fixture
def sample_png_path(tmp_dir, png_bytes):
    path = tmp_dir / "rash.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def eczema_result():
    return AnalysisResult(
        condition="Eczema",
        confidence=81,
        description="Dry, inflamed patches consistent with atopic dermatitis.",
        recommendations=(
            "Moisturize twice daily",
            "Avoid hot showers",
            "See a dermatologist if itching persists",
        ),
    )


@pytest.fixture
def psoriasis_result():
    return AnalysisResult(
        condition="Psoriasis",
        confidence=66,
        description="Scaly plaques suggestive of plaque psoriasis.",
        recommendations=("Consult a dermatologist", "Use a medicated shampoo"),
    )
