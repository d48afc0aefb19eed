"""
Tests for the region policy module.
"""

import numpy as np
import pytest

from face_redactor.config import CHAOTIC_POLICY, REFINED_POLICY, PolicyConfig
from face_redactor.detection import BoundingBox, Detection, PixelRegion
from face_redactor.policy import PolicyVariant, RegionPolicy, build_policy, choose_variant

SURFACE_W = 200
SURFACE_H = 100


def _det(score, y1, x1, y2, x2, class_id=0):
    return Detection(score=score, box=BoundingBox(y1=y1, x1=x1, y2=y2, x2=x2), class_id=class_id)


def _scenario():
    """Three in-bounds detections, scores [0.995, 0.999, 0.5]."""
    return [
        _det(0.995, 0.0, 0.0, 0.5, 0.25),
        _det(0.999, 0.25, 0.5, 0.75, 0.75),
        _det(0.5, 0.5, 0.5, 1.0, 1.0),
    ]


def _refined(rng=None):
    return RegionPolicy(PolicyVariant.REFINED, REFINED_POLICY, rng)


def _chaotic(rng=None):
    return RegionPolicy(PolicyVariant.CHAOTIC, CHAOTIC_POLICY, rng or np.random.default_rng(0))


def test_refined_selects_high_confidence_detections():
    """Scores [0.995, 0.999, 0.5] on 200x100 select indices 0 and 1."""
    regions = _refined().select(_scenario(), SURFACE_W, SURFACE_H)

    assert [r.index for r in regions] == [0, 1]
    assert regions[0] == PixelRegion(x=0, y=0, width=50, height=50, pixel_size=50,
                                     score=regions[0].score, index=0)
    assert regions[1].x == 100
    assert regions[1].y == 25
    assert regions[1].width == 50
    assert regions[1].height == 50
    assert all(r.pixel_size == 50 for r in regions)


def test_refined_threshold_is_strict():
    """A score equal to the threshold is rejected."""
    dets = [_det(0.99, 0.0, 0.0, 0.5, 0.5)]
    assert _refined().select(dets, SURFACE_W, SURFACE_H) == []


def test_refined_rejects_out_of_bounds():
    """Boxes poking outside the surface are dropped by the refined policy."""
    dets = [
        _det(0.999, -0.125, 0.0, 0.5, 0.5),
        _det(0.999, 0.0, 0.75, 0.5, 1.125),
        _det(0.999, 0.5, 0.5, 0.5, 0.75),  # zero height
        _det(0.999, 0.0, 0.0, 1.0, 1.0),   # exactly the full surface
    ]

    regions = _refined().select(dets, SURFACE_W, SURFACE_H)

    assert [r.index for r in regions] == [3]


def test_refined_regions_are_contained():
    """Every refined region lies inside [0, W] x [0, H] with score > 0.99."""
    rng = np.random.default_rng(123)
    dets = []
    for _ in range(2000):
        y1, x1 = rng.uniform(-0.2, 1.0, size=2)
        h, w = rng.uniform(0.0, 0.6, size=2)
        dets.append(_det(float(rng.uniform(0.9, 1.0)), y1, x1, y1 + h, x1 + w))

    regions = _refined().select(dets, SURFACE_W, SURFACE_H)

    assert regions
    for r in regions:
        assert r.x >= 0 and r.y >= 0
        assert r.x + r.width <= SURFACE_W
        assert r.y + r.height <= SURFACE_H
        assert r.score > 0.99


def test_chaotic_selects_scenario():
    """Chaotic keeps scores above 0.7; box 2 (score 0.5) is excluded."""
    regions = _chaotic().select(_scenario(), SURFACE_W, SURFACE_H)

    assert [r.index for r in regions] == [0, 1]


def test_chaotic_rejects_tiny_boxes_only():
    """No bounds check, but width/height <= 10 px are dropped."""
    dets = [
        _det(0.8, 0.0, 0.0, 0.0625, 0.5),    # height 6.25 px -> rejected
        _det(0.8, 0.0, 0.0, 0.5, 0.03125),   # width 6.25 px -> rejected
        _det(0.8, -0.5, -0.25, 0.5, 0.5),    # off the top-left -> kept
        _det(0.8, 0.5, 0.75, 1.5, 1.25),     # off the bottom-right -> kept
        _det(0.7, 0.0, 0.0, 0.5, 0.5),       # at threshold -> rejected
    ]

    regions = _chaotic().select(dets, SURFACE_W, SURFACE_H)

    assert [r.index for r in regions] == [2, 3]
    assert regions[0].x == -50
    assert regions[0].y == -50
    for r in regions:
        assert r.width > 10 and r.height > 10
        assert r.score > 0.7


def test_chaotic_pixel_sizes_in_range_and_reproducible():
    """Block sizes are drawn from [10, 59] and repeat for a fixed seed."""
    dets = [_det(0.9, 0.0, 0.0, 0.5, 0.5) for _ in range(300)]

    first = _chaotic(np.random.default_rng(7)).select(dets, SURFACE_W, SURFACE_H)
    second = _chaotic(np.random.default_rng(7)).select(dets, SURFACE_W, SURFACE_H)

    sizes = [r.pixel_size for r in first]
    assert sizes == [r.pixel_size for r in second]
    assert min(sizes) >= 10
    assert max(sizes) <= 59
    assert len(set(sizes)) > 1


def test_choose_variant_is_a_fair_coin():
    """Both variants come up with roughly equal frequency."""
    rng = np.random.default_rng(2024)
    picks = [choose_variant(rng) for _ in range(2000)]

    refined = picks.count(PolicyVariant.REFINED)
    assert set(picks) == {PolicyVariant.REFINED, PolicyVariant.CHAOTIC}
    assert 850 < refined < 1150


def test_build_policy_maps_variant_to_config():
    config = PolicyConfig()

    assert build_policy(PolicyVariant.REFINED, config).config == REFINED_POLICY
    assert build_policy(PolicyVariant.CHAOTIC, config).config == CHAOTIC_POLICY
    assert build_policy(PolicyVariant.CHAOTIC, config).variant is PolicyVariant.CHAOTIC


def test_pixel_region_rejects_empty_dimensions():
    with pytest.raises(ValueError, match="positive"):
        PixelRegion(x=0, y=0, width=0, height=5, pixel_size=10)
