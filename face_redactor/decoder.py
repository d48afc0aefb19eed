"""
Decoding of raw detector output.

Responsibility:
    Turn a RawDetectionBuffer into an ordered list of Detection records
    in a single pass, so no downstream code re-reads raw buffers.

Non-goals:
    - No thresholding or geometry checks (that belongs in policy).
    - No sorting, deduplication, or suppression.

Robustness:
    - A record with a missing box/class entry or a non-finite value is
      logged and skipped. One bad record never loses the rest.
"""

import logging
import math
from typing import List

from face_redactor.detection import BoundingBox, Detection, RawDetectionBuffer

logger = logging.getLogger(__name__)


class MalformedDetectionError(ValueError):
    """A single detection record cannot be decoded."""


def decode(raw: RawDetectionBuffer) -> List[Detection]:
    """Decode every candidate detection, preserving index order.

    Args:
        raw: Flat model output with a detection count.

    Returns:
        List of Detection records. Its length equals raw.count unless
        malformed records were skipped.
    """
    detections: List[Detection] = []

    for i in range(raw.count):
        try:
            detections.append(_decode_one(raw, i))
        except MalformedDetectionError as e:
            logger.warning("Skipping malformed detection %d: %s", i, e)

    if len(detections) != raw.count:
        logger.debug(
            "Decoded %d of %d candidate detections.", len(detections), raw.count
        )

    return detections


def _decode_one(raw: RawDetectionBuffer, i: int) -> Detection:
    """Decode record i. Raises MalformedDetectionError on bad data."""
    if i >= raw.scores.size:
        raise MalformedDetectionError("no score entry")
    if (i + 1) * 4 > raw.boxes.size:
        raise MalformedDetectionError("no box entry")
    if i >= raw.classes.size:
        raise MalformedDetectionError("no class entry")

    score = float(raw.scores[i])
    coords = [float(v) for v in raw.boxes[i * 4:(i + 1) * 4]]

    if not math.isfinite(score):
        raise MalformedDetectionError(f"non-finite score {score}")
    if not all(math.isfinite(c) for c in coords):
        raise MalformedDetectionError(f"non-finite box {coords}")

    try:
        class_id = int(raw.classes[i])
    except (TypeError, ValueError, OverflowError) as e:
        raise MalformedDetectionError(f"invalid class id {raw.classes[i]!r}") from e

    y1, x1, y2, x2 = coords
    return Detection(
        score=score,
        box=BoundingBox(y1=y1, x1=x1, y2=y2, x2=x2),
        class_id=class_id,
    )
