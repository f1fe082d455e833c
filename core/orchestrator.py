"""Analysis workflow controller.

Owns the workflow state, the loaded image and the result store. Intake and
analyze requests arrive from the UI on the main thread; provider calls run
in an AnalysisWorker and report back through queued signals, so all state
changes happen on the main thread in event order.

Each analysis is tagged with a request token. Loading a new image or
resetting invalidates the current token, and any report carrying a token
other than the current one is dropped.
"""

import itertools
import logging
from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from core.errors import AlreadyInProgressError, NoImageError, ProviderFailureError
from core.image_intake import ImageIntake
from core.inference import InferenceProvider, MockInferenceProvider
from core.result_store import ResultObserver, ResultStore, Unsubscribe
from core.utils import (
    AnalysisResult,
    ImageAsset,
    ImageSource,
    RequestToken,
    WorkflowState,
)
from workers.analysis_worker import AnalysisWorker

logger = logging.getLogger(__name__)


class AnalysisOrchestrator(QObject):
    """State machine for image intake, analysis and result publication."""

    state_changed = pyqtSignal(object)    # WorkflowState
    image_changed = pyqtSignal(object)    # ImageAsset or None
    progress = pyqtSignal(int, int, str)  # step, total, message
    analysis_failed = pyqtSignal(object)  # ProviderFailureError

    def __init__(
        self,
        provider: Optional[InferenceProvider] = None,
        intake: Optional[ImageIntake] = None,
        store: Optional[ResultStore] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._provider = provider or MockInferenceProvider()
        self._intake = intake or ImageIntake()
        self._store = store or ResultStore(self)
        self._state = WorkflowState.IDLE
        self._image: Optional[ImageAsset] = None
        self._last_error: Optional[ProviderFailureError] = None
        self._tokens = itertools.count(1)
        self._current_token: Optional[RequestToken] = None
        self._workers: List[AnalysisWorker] = []

    # --- Read access ---

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def image(self) -> Optional[ImageAsset]:
        return self._image

    @property
    def last_error(self) -> Optional[ProviderFailureError]:
        return self._last_error

    @property
    def current_token(self) -> Optional[RequestToken]:
        return self._current_token

    @property
    def provider(self) -> InferenceProvider:
        return self._provider

    @property
    def active_workers(self) -> int:
        """Number of provider calls still running, stale ones included."""
        return len(self._workers)

    def current_result(self) -> Optional[AnalysisResult]:
        return self._store.current()

    def subscribe_results(self, observer: ResultObserver) -> Unsubscribe:
        return self._store.subscribe(observer)

    # --- User-initiated transitions ---

    def load_image(self, source: ImageSource) -> ImageAsset:
        """Decode a new image and make it the current one.

        Intake errors propagate with the workflow left untouched. On success
        any held result is cleared and an in-flight analysis becomes stale.
        """
        asset = self._intake.decode(source)

        if self._current_token is not None:
            logger.info("Request %d superseded by new image %s", self._current_token, asset.name)
        self._current_token = None
        self._last_error = None
        self._image = asset
        self._store.clear()
        self.image_changed.emit(asset)
        self._set_state(WorkflowState.IMAGE_READY)
        return asset

    def analyze(self) -> RequestToken:
        """Start analyzing the current image and return the request token."""
        if self._state == WorkflowState.ANALYZING:
            raise AlreadyInProgressError()
        if self._image is None:
            raise NoImageError()

        token = next(self._tokens)
        self._current_token = token
        self._last_error = None

        worker = AnalysisWorker(self._provider, self._image, token)
        worker.progress.connect(self._on_worker_progress)
        worker.result_ready.connect(self._on_worker_result)
        worker.failed.connect(self._on_worker_failed)
        worker.finished.connect(self._on_worker_finished)
        self._workers.append(worker)

        logger.info("Starting request %d for %s", token, self._image.name)
        self._set_state(WorkflowState.ANALYZING)
        worker.start()
        return token

    def reset(self):
        """Forget the image and result and return to Idle."""
        self._current_token = None
        self._last_error = None
        had_image = self._image is not None
        self._image = None
        self._store.clear()
        if had_image:
            self.image_changed.emit(None)
        self._set_state(WorkflowState.IDLE)

    def shutdown(self, timeout_ms: int = 5000):
        """Wait for outstanding workers. Call before the application exits."""
        for worker in list(self._workers):
            if worker.isRunning() and not worker.wait(timeout_ms):
                logger.warning("Request %d did not finish in time; terminating", worker.token)
                worker.terminate()
                worker.wait(2000)
        self._workers.clear()

    # --- Worker reports ---

    def _is_current(self, token: RequestToken) -> bool:
        return self._state == WorkflowState.ANALYZING and token == self._current_token

    @pyqtSlot(int, int, int, str)
    def _on_worker_progress(self, token: int, step: int, total: int, message: str):
        if self._is_current(token):
            self.progress.emit(step, total, message)

    @pyqtSlot(int, object)
    def _on_worker_result(self, token: int, result: AnalysisResult):
        if not self._is_current(token):
            logger.debug("Discarding stale result for request %d", token)
            return
        self._current_token = None
        self._store.publish(result)
        logger.info("Request %d complete: %s (%d%%)", token, result.condition, result.confidence)
        self._set_state(WorkflowState.COMPLETE)

    @pyqtSlot(int, str)
    def _on_worker_failed(self, token: int, message: str):
        if not self._is_current(token):
            logger.debug("Discarding stale failure for request %d: %s", token, message)
            return
        self._current_token = None
        self._last_error = ProviderFailureError(message, token)
        logger.warning("Request %d failed: %s", token, message)
        self._set_state(WorkflowState.FAILED)
        self.analysis_failed.emit(self._last_error)

    @pyqtSlot()
    def _on_worker_finished(self):
        worker = self.sender()
        if worker in self._workers:
            worker.wait()
            self._workers.remove(worker)
            worker.deleteLater()

    def _set_state(self, state: WorkflowState):
        if state == self._state:
            return
        logger.debug("State %s -> %s", self._state.value, state.value)
        self._state = state
        self.state_changed.emit(state)
