"""Holder of the latest analysis result, observable by the UI."""

from typing import Callable, Optional

from PyQt6.QtCore import QObject, Qt, pyqtSignal

from core.utils import AnalysisResult

ResultObserver = Callable[[Optional[AnalysisResult]], None]
Unsubscribe = Callable[[], None]


class ResultStore(QObject):
    """Keeps the most recent AnalysisResult and notifies subscribers.

    Observers are called synchronously, in subscription order, with the new
    result, or with ``None`` when a held result is cleared. Only the
    orchestrator writes to the store.
    """

    result_changed = pyqtSignal(object)  # AnalysisResult or None

    def __init__(self, parent=None):
        super().__init__(parent)
        self._result: Optional[AnalysisResult] = None

    def current(self) -> Optional[AnalysisResult]:
        return self._result

    def publish(self, result: AnalysisResult):
        """Replace the held result and notify subscribers."""
        self._result = result
        self.result_changed.emit(result)

    def clear(self):
        """Drop the held result. Subscribers hear about it only if one was held."""
        if self._result is None:
            return
        self._result = None
        self.result_changed.emit(None)

    def subscribe(self, observer: ResultObserver) -> Unsubscribe:
        """Register an observer and return a handle that removes it."""
        connection = self.result_changed.connect(
            observer, Qt.ConnectionType.DirectConnection
        )
        subscribed = [True]

        def unsubscribe():
            if subscribed[0]:
                subscribed[0] = False
                self.result_changed.disconnect(connection)

        return unsubscribe
