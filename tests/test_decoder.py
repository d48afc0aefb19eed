"""
Tests for the decoder module.
"""

import numpy as np
import pytest

from face_redactor.decoder import decode
from face_redactor.detection import RawDetectionBuffer


def _raw(boxes, scores, classes):
    return RawDetectionBuffer.from_tensors(
        np.array(boxes, dtype=np.float32),
        np.array(scores, dtype=np.float32),
        np.array(classes, dtype=np.float32),
    )


def test_decode_preserves_count_and_order():
    """Every valid record is decoded, in index order."""
    raw = _raw(
        [[[0.0, 0.0, 0.5, 0.5], [0.25, 0.5, 0.75, 1.0], [0.5, 0.5, 1.0, 1.0]]],
        [[0.5, 0.995, 0.999]],
        [[1, 2, 3]],
    )

    detections = decode(raw)

    assert raw.count == 3
    assert len(detections) == 3
    assert [d.class_id for d in detections] == [1, 2, 3]
    assert detections[0].score == pytest.approx(0.5)
    assert detections[1].box.y1 == pytest.approx(0.25)
    assert detections[1].box.x1 == pytest.approx(0.5)
    assert detections[1].box.y2 == pytest.approx(0.75)
    assert detections[1].box.x2 == pytest.approx(1.0)


def test_count_comes_from_scores_detection_axis():
    """A batched (1, N) scores tensor yields N candidates."""
    raw = RawDetectionBuffer.from_tensors(
        np.zeros((1, 4, 4)), np.zeros((1, 4)), np.zeros((1, 4))
    )
    assert raw.count == 4

    flat = RawDetectionBuffer.from_tensors(np.zeros(8), np.zeros(2), np.zeros(2))
    assert flat.count == 2


def test_decode_empty_buffer():
    """No candidates decodes to an empty list."""
    raw = RawDetectionBuffer.from_tensors(np.zeros((1, 0, 4)), np.zeros((1, 0)), np.zeros((1, 0)))
    assert decode(raw) == []


def test_decode_skips_non_finite_records():
    """A NaN coordinate drops only that record."""
    raw = _raw(
        [[[0.0, 0.0, 0.5, 0.5], [np.nan, 0.0, 0.5, 0.5], [0.5, 0.5, 1.0, 1.0]]],
        [[0.9, 0.9, 0.8]],
        [[0, 1, 2]],
    )

    detections = decode(raw)

    assert [d.class_id for d in detections] == [0, 2]


def test_decode_skips_non_finite_score():
    raw = _raw([[[0.0, 0.0, 0.5, 0.5], [0.0, 0.0, 0.5, 0.5]]], [[np.inf, 0.9]], [[0, 1]])

    detections = decode(raw)

    assert len(detections) == 1
    assert detections[0].class_id == 1


def test_decode_mismatched_buffers_keeps_valid_prefix(caplog):
    """Records without a box or class entry are skipped, the rest survive."""
    raw = RawDetectionBuffer.from_tensors(
        np.array([0.0, 0.0, 0.5, 0.5, 0.25, 0.25, 0.75, 0.75]),  # 2 boxes
        np.array([0.9, 0.8, 0.7]),                               # 3 scores
        np.array([1, 2, 3]),
    )

    with caplog.at_level("WARNING"):
        detections = decode(raw)

    assert len(detections) == 2
    assert [d.class_id for d in detections] == [1, 2]
    assert "Skipping malformed detection 2" in caplog.text
