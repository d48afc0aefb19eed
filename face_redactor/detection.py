"""
Detection data transfer objects.

This module defines the small, frozen records that flow through the
redaction pipeline:

    RawDetectionBuffer -> Detection -> PixelRegion -> RedactionResult

They are intentionally minimal containers with no behavior beyond data
access and coordinate conversion.

Non-goals:
    - No rendering logic.
    - No file I/O.
    - No filtering decisions (that belongs in decoder and policy).
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class RawDetectionBuffer:
    """Flat model output for one image.

    Attributes:
        boxes: Flat float array, 4 values per detection (y1, x1, y2, x2),
               normalized to [0, 1].
        scores: Flat float array, 1 confidence per detection.
        classes: Flat array, 1 class id per detection.
        count: Number of candidate detections, taken from the scores
               buffer's detection axis.
    """

    boxes: np.ndarray
    scores: np.ndarray
    classes: np.ndarray
    count: int

    @classmethod
    def from_tensors(cls, boxes, scores, classes) -> "RawDetectionBuffer":
        """Build a buffer from model output tensors of any batch shape.

        Scores are expected as (1, N) for batched output or (N,) flat;
        the detection count is read from axis 1 or axis 0 respectively.
        """
        scores_arr = np.asarray(scores)
        if scores_arr.ndim >= 2:
            count = int(scores_arr.shape[1])
        else:
            count = int(scores_arr.size)

        return cls(
            boxes=np.asarray(boxes, dtype=np.float64).reshape(-1),
            scores=scores_arr.astype(np.float64).reshape(-1),
            classes=np.asarray(classes).reshape(-1),
            count=count,
        )


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Normalized bounding box as produced by the detector.

    Corner order follows the model output: (y1, x1) top-left,
    (y2, x2) bottom-right, all in [0, 1].
    """

    y1: float
    x1: float
    y2: float
    x2: float

    def denormalize(
        self, width: int, height: int
    ) -> Tuple[float, float, float, float]:
        """Map to surface space. Returns (x, y, width, height) as floats."""
        return (
            self.x1 * width,
            self.y1 * height,
            (self.x2 - self.x1) * width,
            (self.y2 - self.y1) * height,
        )


@dataclass(frozen=True, slots=True)
class Detection:
    """A single decoded detection.

    Attributes:
        score: Detection confidence in [0.0, 1.0].
        box: Normalized bounding box.
        class_id: Class index reported by the model (unused by policies).
    """

    score: float
    box: BoundingBox
    class_id: int

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "score": round(self.score, 4),
            "box": [self.box.y1, self.box.x1, self.box.y2, self.box.x2],
            "class_id": self.class_id,
        }


@dataclass(frozen=True, slots=True)
class PixelRegion:
    """A selected redaction target in surface pixel coordinates.

    Attributes:
        x: Left edge (may be negative for unchecked policies).
        y: Top edge (may be negative for unchecked policies).
        width: Region width in pixels, always > 0.
        height: Region height in pixels, always > 0.
        pixel_size: Edge length of one pixelation cell.
        score: Confidence of the source detection.
        index: Index of the source detection in the decoded sequence.
    """

    x: int
    y: int
    width: int
    height: int
    pixel_size: int
    score: float = 0.0
    index: int = -1

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"PixelRegion dimensions must be positive, "
                f"got width={self.width}, height={self.height}."
            )
        if self.pixel_size <= 0:
            raise ValueError(
                f"PixelRegion pixel_size must be positive, got {self.pixel_size}."
            )

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON/CSV serialization."""
        return {
            "index": self.index,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "pixel_size": self.pixel_size,
            "score": round(self.score, 4),
        }

    @property
    def area(self) -> int:
        """Region area in pixels."""
        return self.width * self.height


@dataclass(frozen=True, slots=True)
class RedactionResult:
    """Outcome of one Redactor pass."""

    regions_redacted: int
