"""
Redaction pipeline: wires inference, decoding, policy, redaction,
and overlay for one image at a time.

State machine per image:

    IDLE -> DECODING -> POLICY_SELECTED -> REDACTING -> ANNOTATED -> IDLE

Any exception returns the pipeline to IDLE and propagates; whatever was
already drawn on the surface stays drawn.

Constraints:
    - Inference is the only blocking step; everything after it runs
      synchronously with no locking.
    - One surface per image; load() replaces its previous content.
    - All randomness comes from one injectable numpy Generator.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from face_redactor.config import AppConfig, load_config
from face_redactor.decoder import decode
from face_redactor.detection import PixelRegion, RawDetectionBuffer
from face_redactor.detector import Detector, ModelUnavailableError
from face_redactor.overlay import annotate, format_caption
from face_redactor.policy import PolicyVariant, build_policy, choose_variant
from face_redactor.redactor import Redactor
from face_redactor.surface import Surface

logger = logging.getLogger(__name__)


class PipelineState(enum.Enum):
    IDLE = "idle"
    DECODING = "decoding"
    POLICY_SELECTED = "policy_selected"
    REDACTING = "redacting"
    ANNOTATED = "annotated"


@dataclass(frozen=True)
class PipelineResult:
    """What one run reports back: chosen variant, regions, and caption."""

    variant: PolicyVariant
    regions: Tuple[PixelRegion, ...]
    regions_redacted: int
    caption: str

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "variant": self.variant.value,
            "regions_redacted": self.regions_redacted,
            "caption": self.caption,
            "regions": [r.to_dict() for r in self.regions],
        }


class RedactionPipeline:
    """Runs one image through detection and redaction.

    Usage:
        pipeline = RedactionPipeline(config, detector=Detector(config))
        surface = Surface(1, 1)
        result = pipeline.process_image(surface, frame)

    process_buffer() runs the post-inference stages alone, for callers
    that already hold raw detector output.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        detector: Optional[Detector] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if config is None:
            config = load_config()

        self._config = config
        self._detector = detector
        self._rng = rng if rng is not None else np.random.default_rng(config.seed)
        self._redactor = Redactor(config.redaction, self._rng)
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        return self._state

    def process_image(self, surface: Surface, image: np.ndarray) -> PipelineResult:
        """Load image into surface, detect, and redact.

        Raises:
            ModelUnavailableError: If no loaded detector is attached.
                The surface is left untouched in that case.
        """
        if self._detector is None or not self._detector.is_ready:
            raise ModelUnavailableError(
                "Detector is not ready; the image was not processed."
            )

        surface.load(image)
        raw = self._detector.infer(surface.pixels)
        return self.process_buffer(surface, raw)

    def process_buffer(
        self, surface: Surface, raw: RawDetectionBuffer
    ) -> PipelineResult:
        """Decode raw output, pick a policy, redact, and caption the surface."""
        try:
            self._transition(PipelineState.DECODING)
            detections = decode(raw)

            variant = choose_variant(self._rng)
            policy = build_policy(variant, self._config.policy, self._rng)
            self._transition(PipelineState.POLICY_SELECTED)
            regions = policy.select(detections, surface.width, surface.height)

            self._transition(PipelineState.REDACTING)
            result = self._redactor.apply(surface, regions)

            caption = format_caption(result.regions_redacted)
            annotate(surface, caption, self._config.overlay)
            self._transition(PipelineState.ANNOTATED)

            logger.info(
                "Redacted %d region(s) using %s policy (%d candidates).",
                result.regions_redacted, variant.value, len(detections),
            )
            return PipelineResult(
                variant=variant,
                regions=tuple(regions),
                regions_redacted=result.regions_redacted,
                caption=caption,
            )
        finally:
            self._transition(PipelineState.IDLE)

    def _transition(self, state: PipelineState) -> None:
        logger.debug("Pipeline state: %s -> %s", self._state.value, state.value)
        self._state = state
