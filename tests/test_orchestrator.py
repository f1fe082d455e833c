"""Tests for core.orchestrator module."""

import pytest
from PyQt6 import sip
from PyQt6.QtCore import QCoreApplication, QEvent

from conftest import FlakyProvider, SequencedProvider, StaticProvider
from core.errors import (
    AlreadyInProgressError,
    NoImageError,
    ProviderFailureError,
    ReadFailureError,
    UnsupportedTypeError,
)
from core.inference import DEFAULT_CATALOG, MockInferenceProvider
from core.utils import ImageSource, WorkflowState


def _record(signal):
    seen = []
    signal.connect(seen.append)
    return seen


class TestIntake:
    def test_initial_state(self, make_orchestrator, eczema_result):
        orch = make_orchestrator(StaticProvider(eczema_result))
        assert orch.state == WorkflowState.IDLE
        assert orch.image is None
        assert orch.current_result() is None

    def test_valid_image(self, make_orchestrator, eczema_result, png_source, png_bytes):
        orch = make_orchestrator(StaticProvider(eczema_result))
        images = _record(orch.image_changed)
        asset = orch.load_image(png_source)
        assert orch.state == WorkflowState.IMAGE_READY
        assert orch.image is asset
        assert orch.image.content == png_bytes
        assert images == [asset]

    @pytest.mark.parametrize("media_type", ["text/plain", "application/pdf", ""])
    def test_unsupported_type_leaves_idle(self, make_orchestrator, eczema_result, media_type):
        orch = make_orchestrator(StaticProvider(eczema_result))
        states = _record(orch.state_changed)
        with pytest.raises(UnsupportedTypeError):
            orch.load_image(ImageSource.from_bytes("notes.txt", media_type, b"hello"))
        assert orch.state == WorkflowState.IDLE
        assert states == []

    def test_unsupported_type_keeps_current_image(self, make_orchestrator, eczema_result, png_source):
        orch = make_orchestrator(StaticProvider(eczema_result))
        asset = orch.load_image(png_source)
        with pytest.raises(UnsupportedTypeError):
            orch.load_image(ImageSource.from_bytes("report.pdf", "application/pdf", b"%PDF"))
        assert orch.state == WorkflowState.IMAGE_READY
        assert orch.image is asset

    def test_read_failure_leaves_state(self, make_orchestrator, eczema_result):
        orch = make_orchestrator(StaticProvider(eczema_result))
        with pytest.raises(ReadFailureError):
            orch.load_image(ImageSource.from_bytes("empty.png", "image/png", b""))
        assert orch.state == WorkflowState.IDLE

    def test_new_image_replaces_old(self, make_orchestrator, eczema_result, png_source, other_png_source):
        orch = make_orchestrator(StaticProvider(eczema_result))
        orch.load_image(png_source)
        second = orch.load_image(other_png_source)
        assert orch.state == WorkflowState.IMAGE_READY
        assert orch.image is second
        assert orch.image.name == "mole.png"


class TestAnalyze:
    def test_no_image(self, make_orchestrator, eczema_result):
        provider = StaticProvider(eczema_result)
        orch = make_orchestrator(provider)
        with pytest.raises(NoImageError):
            orch.analyze()
        assert orch.state == WorkflowState.IDLE
        assert orch.current_token is None
        assert provider.calls == 0

    def test_completes(self, make_orchestrator, wait_until, eczema_result, png_source):
        orch = make_orchestrator(StaticProvider(eczema_result))
        published = []
        orch.subscribe_results(published.append)
        states = _record(orch.state_changed)

        orch.load_image(png_source)
        token = orch.analyze()
        assert orch.state == WorkflowState.ANALYZING
        assert orch.current_token == token

        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        assert orch.current_result() == eczema_result
        assert published == [eczema_result]
        assert states == [
            WorkflowState.IMAGE_READY,
            WorkflowState.ANALYZING,
            WorkflowState.COMPLETE,
        ]

    def test_recommendation_order_preserved(self, make_orchestrator, wait_until, eczema_result, png_source):
        orch = make_orchestrator(StaticProvider(eczema_result))
        orch.load_image(png_source)
        orch.analyze()
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        result = orch.current_result()
        assert 0 <= result.confidence <= 100
        assert list(result.recommendations) == [
            "Moisturize twice daily",
            "Avoid hot showers",
            "See a dermatologist if itching persists",
        ]

    def test_reentrant_analyze_rejected(self, make_orchestrator, wait_until, eczema_result, png_source):
        provider = SequencedProvider([eczema_result])
        orch = make_orchestrator(provider)
        orch.load_image(png_source)
        orch.analyze()
        with pytest.raises(AlreadyInProgressError):
            orch.analyze()
        assert orch.state == WorkflowState.ANALYZING

        provider.release(0)
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        wait_until(lambda: orch.active_workers == 0)
        assert orch.current_result() == eczema_result
        assert provider.calls == 1

    def test_finished_worker_released(self, make_orchestrator, wait_until, eczema_result, png_source):
        orch = make_orchestrator(StaticProvider(eczema_result))
        orch.load_image(png_source)
        orch.analyze()
        worker = orch._workers[0]
        wait_until(lambda: orch.active_workers == 0)

        def deleted():
            QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete.value)
            return sip.isdeleted(worker)

        wait_until(deleted)

    def test_tokens_are_unique(self, make_orchestrator, wait_until, eczema_result, png_source):
        orch = make_orchestrator(StaticProvider(eczema_result))
        orch.load_image(png_source)
        first = orch.analyze()
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        second = orch.analyze()
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        assert first != second

    def test_reanalyze_from_complete(self, make_orchestrator, wait_until, eczema_result, png_source):
        provider = StaticProvider(eczema_result)
        orch = make_orchestrator(provider)
        orch.load_image(png_source)
        orch.analyze()
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        orch.analyze()
        assert orch.state == WorkflowState.ANALYZING
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        assert provider.calls == 2

    def test_progress_forwarded(self, make_orchestrator, wait_until, png_source):
        orch = make_orchestrator(MockInferenceProvider(latency=0))
        reports = []
        orch.progress.connect(lambda step, total, message: reports.append((step, total, message)))
        orch.load_image(png_source)
        orch.analyze()
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        assert [r[0] for r in reports] == [1, 2, 3]
        assert reports[-1][2] == "Compiling results..."


class TestFailure:
    def test_provider_failure(self, make_orchestrator, wait_until, eczema_result, png_source):
        orch = make_orchestrator(FlakyProvider(eczema_result))
        failures = _record(orch.analysis_failed)
        orch.load_image(png_source)
        token = orch.analyze()
        wait_until(lambda: orch.state == WorkflowState.FAILED)

        assert isinstance(orch.last_error, ProviderFailureError)
        assert "model backend unavailable" in str(orch.last_error)
        assert orch.last_error.token == token
        assert failures == [orch.last_error]
        assert orch.current_result() is None

    def test_retry_after_failure(self, make_orchestrator, wait_until, eczema_result, png_source):
        provider = FlakyProvider(eczema_result)
        orch = make_orchestrator(provider)
        orch.load_image(png_source)
        orch.analyze()
        wait_until(lambda: orch.state == WorkflowState.FAILED)

        orch.analyze()
        assert orch.last_error is None
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        assert orch.current_result() == eczema_result
        assert provider.calls == 2

    def test_invalid_result_type(self, make_orchestrator, wait_until, png_source):
        orch = make_orchestrator(StaticProvider({"condition": "Acne", "confidence": 87}))
        orch.load_image(png_source)
        orch.analyze()
        wait_until(lambda: orch.state == WorkflowState.FAILED)
        assert "dict" in str(orch.last_error)


class TestStaleness:
    def test_new_image_clears_result(self, make_orchestrator, wait_until, eczema_result, png_source, other_png_source):
        orch = make_orchestrator(StaticProvider(eczema_result))
        published = []
        orch.subscribe_results(published.append)
        orch.load_image(png_source)
        orch.analyze()
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)

        orch.load_image(other_png_source)
        assert orch.current_result() is None
        assert orch.state == WorkflowState.IMAGE_READY
        assert published == [eczema_result, None]

    def test_new_image_discards_in_flight_result(
        self, make_orchestrator, wait_until, eczema_result, psoriasis_result, png_source, other_png_source
    ):
        provider = SequencedProvider([eczema_result, psoriasis_result])
        orch = make_orchestrator(provider)
        orch.load_image(png_source)
        orch.analyze()
        assert provider.entered[0].wait(timeout=5)

        orch.load_image(other_png_source)
        assert orch.state == WorkflowState.IMAGE_READY
        assert orch.current_token is None

        provider.release(0)
        wait_until(lambda: orch.active_workers == 0)
        assert orch.state == WorkflowState.IMAGE_READY
        assert orch.current_result() is None

        orch.analyze()
        provider.release(1)
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        assert orch.current_result() == psoriasis_result

    def test_stale_result_while_newer_request_runs(
        self, make_orchestrator, wait_until, eczema_result, psoriasis_result, png_source, other_png_source
    ):
        provider = SequencedProvider([eczema_result, psoriasis_result])
        orch = make_orchestrator(provider)
        orch.load_image(png_source)
        orch.analyze()
        assert provider.entered[0].wait(timeout=5)

        orch.load_image(other_png_source)
        newer = orch.analyze()
        assert provider.entered[1].wait(timeout=5)

        provider.release(0)
        wait_until(lambda: orch.active_workers == 1)
        assert orch.state == WorkflowState.ANALYZING
        assert orch.current_token == newer
        assert orch.current_result() is None

        provider.release(1)
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        assert orch.current_result() == psoriasis_result

    def test_stale_failure_ignored(self, make_orchestrator, wait_until, eczema_result, png_source, other_png_source):
        provider = FlakyProvider(eczema_result)
        orch = make_orchestrator(provider)
        orch.load_image(png_source)
        orch.analyze()
        orch.load_image(other_png_source)
        wait_until(lambda: orch.active_workers == 0)
        assert orch.state == WorkflowState.IMAGE_READY
        assert orch.last_error is None

    def test_reset_while_analyzing(self, make_orchestrator, wait_until, eczema_result, png_source):
        provider = SequencedProvider([eczema_result])
        orch = make_orchestrator(provider)
        images = _record(orch.image_changed)
        orch.load_image(png_source)
        orch.analyze()

        orch.reset()
        assert orch.state == WorkflowState.IDLE
        assert orch.image is None
        assert images[-1] is None

        provider.release(0)
        wait_until(lambda: orch.active_workers == 0)
        assert orch.state == WorkflowState.IDLE
        assert orch.current_result() is None


class TestDefaultMockScenario:
    def test_rash_png(self, make_orchestrator, wait_until, png_bytes):
        orch = make_orchestrator(MockInferenceProvider(latency=0.05))
        orch.load_image(ImageSource.from_bytes("rash.png", "image/png", png_bytes))
        assert orch.state == WorkflowState.IMAGE_READY

        orch.analyze()
        wait_until(lambda: orch.state == WorkflowState.COMPLETE)
        result = orch.current_result()
        assert result in DEFAULT_CATALOG
        assert result.confidence in (87, 92, 78)

    def test_default_provider_is_mock(self, qapp):
        from core.orchestrator import AnalysisOrchestrator

        orch = AnalysisOrchestrator()
        assert isinstance(orch.provider, MockInferenceProvider)
