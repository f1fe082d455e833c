"""Background worker that runs one inference provider call."""

import logging

from PyQt6.QtCore import QThread, pyqtSignal

from core.inference import InferenceProvider
from core.utils import AnalysisResult, ImageAsset, RequestToken

logger = logging.getLogger(__name__)


class AnalysisWorker(QThread):
    """Runs ``provider.analyze`` off the UI thread.

    Every signal carries the request token the worker was started with so
    the receiver can drop reports from superseded requests. Exactly one of
    ``result_ready`` or ``failed`` is emitted per run.
    """

    progress = pyqtSignal(int, int, int, str)  # token, step, total, message
    result_ready = pyqtSignal(int, object)      # token, AnalysisResult
    failed = pyqtSignal(int, str)               # token, error message

    def __init__(self, provider: InferenceProvider, asset: ImageAsset, token: RequestToken, parent=None):
        super().__init__(parent)
        self._provider = provider
        self._asset = asset
        self._token = token

    @property
    def token(self) -> RequestToken:
        return self._token

    def run(self):
        try:
            result = self._provider.analyze(self._asset, on_progress=self._on_progress)
        except Exception as e:
            logger.exception("Provider %s failed for request %d", self._provider_name(), self._token)
            self.failed.emit(self._token, f"Analysis failed: {e}")
            return
        if not isinstance(result, AnalysisResult):
            self.failed.emit(
                self._token,
                f"Analysis failed: provider returned {type(result).__name__}, not AnalysisResult",
            )
            return
        self.result_ready.emit(self._token, result)

    def _on_progress(self, step: int, total: int, message: str):
        self.progress.emit(self._token, step, total, message)

    def _provider_name(self) -> str:
        return getattr(self._provider, "name", type(self._provider).__name__)
