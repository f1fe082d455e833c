"""Inference providers: the plug point between the workflow and a model.

The workflow only knows the ``InferenceProvider`` protocol. A real backend
(local model, remote API) implements ``analyze`` and is passed to the
orchestrator in place of the mock. Providers are called from a worker
thread and must not touch UI or orchestrator state.
"""

import logging
import random
import time
from typing import Callable, Optional, Protocol, Sequence

from core.utils import AnalysisResult, ImageAsset, ProgressCallback

logger = logging.getLogger(__name__)

Chooser = Callable[[Sequence[AnalysisResult]], AnalysisResult]


class InferenceProvider(Protocol):
    """Interface that every inference backend must satisfy."""

    name: str

    def analyze(
        self,
        asset: ImageAsset,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """Produce a verdict for the image. May raise on failure."""


DEFAULT_CATALOG = (
    AnalysisResult(
        condition="Mild Acne",
        confidence=87,
        description=(
            "Minor inflammatory acne with some comedones. "
            "Generally manageable with proper skincare."
        ),
        recommendations=(
            "Use gentle, non-comedogenic cleansers",
            "Apply salicylic acid treatment",
            "Consider consulting a dermatologist",
            "Maintain consistent skincare routine",
        ),
    ),
    AnalysisResult(
        condition="Normal Skin",
        confidence=92,
        description="Healthy skin appearance with no significant concerns detected.",
        recommendations=(
            "Continue your current skincare routine",
            "Use daily SPF protection",
            "Stay hydrated",
            "Regular moisturization",
        ),
    ),
    AnalysisResult(
        condition="Mild Rosacea",
        confidence=78,
        description=(
            "Possible mild rosacea with slight redness. "
            "Requires professional confirmation."
        ),
        recommendations=(
            "Avoid triggers like hot beverages and spicy foods",
            "Use gentle, fragrance-free products",
            "Consult a dermatologist for proper diagnosis",
            "Consider anti-redness treatments",
        ),
    ),
)


def seeded_chooser(seed: int) -> Chooser:
    """Deterministic uniform chooser backed by its own Random instance."""
    rng = random.Random(seed)
    return rng.choice


class MockInferenceProvider:
    """Simulates a skin classifier by picking an entry from a fixed catalog.

    Progress is reported in three stages spread evenly over ``latency``
    seconds. The selection policy is the ``chooser`` callable, uniform
    random by default.
    """

    name = "mock"
    STAGES = (
        "Preparing image...",
        "Running skin analysis...",
        "Compiling results...",
    )

    def __init__(
        self,
        catalog: Sequence[AnalysisResult] = DEFAULT_CATALOG,
        latency: float = 2.5,
        chooser: Optional[Chooser] = None,
    ):
        if not catalog:
            raise ValueError("catalog must contain at least one result")
        if latency < 0:
            raise ValueError(f"latency must not be negative, got {latency}")
        self._catalog = tuple(catalog)
        self._latency = latency
        self._chooser = chooser or random.choice

    @property
    def catalog(self) -> tuple:
        return self._catalog

    @property
    def latency(self) -> float:
        return self._latency

    def analyze(
        self,
        asset: ImageAsset,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        total = len(self.STAGES)
        step_delay = self._latency / total

        for step, message in enumerate(self.STAGES, start=1):
            if on_progress:
                on_progress(step, total, message)
            if step_delay:
                time.sleep(step_delay)

        result = self._chooser(self._catalog)
        if result not in self._catalog:
            raise ValueError(f"chooser returned a result outside the catalog: {result!r}")
        logger.info("Mock analysis of %s -> %s (%d%%)", asset.name, result.condition, result.confidence)
        return result
