"""
Face Redactor: pixelates detected faces using raw detector output.

Public API:
    - RedactionPipeline: Runs one image through detection and redaction.
    - Detector: Model inference adapter producing raw detection buffers.
    - Surface: The raster being redacted.
    - decode, RegionPolicy, Redactor, annotate: The individual stages.

Usage:
    from face_redactor import Detector, RedactionPipeline, Surface

    pipeline = RedactionPipeline(detector=Detector())
    surface = Surface(1, 1)
    result = pipeline.process_image(surface, frame)
"""

from face_redactor.decoder import MalformedDetectionError, decode
from face_redactor.detection import (
    BoundingBox,
    Detection,
    PixelRegion,
    RawDetectionBuffer,
    RedactionResult,
)
from face_redactor.detector import Detector, ModelUnavailableError
from face_redactor.overlay import annotate, format_caption
from face_redactor.pipeline import PipelineResult, PipelineState, RedactionPipeline
from face_redactor.policy import PolicyVariant, RegionPolicy, build_policy, choose_variant
from face_redactor.redactor import Redactor, pixel_grid
from face_redactor.surface import Surface

__all__ = [
    "BoundingBox",
    "Detection",
    "Detector",
    "MalformedDetectionError",
    "ModelUnavailableError",
    "PipelineResult",
    "PipelineState",
    "PixelRegion",
    "PolicyVariant",
    "RawDetectionBuffer",
    "RedactionPipeline",
    "RedactionResult",
    "Redactor",
    "RegionPolicy",
    "Surface",
    "annotate",
    "build_policy",
    "choose_variant",
    "decode",
    "format_caption",
    "pixel_grid",
]
