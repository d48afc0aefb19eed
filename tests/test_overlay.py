"""
Tests for the overlay module.
"""

import numpy as np

from face_redactor.config import OverlayConfig
from face_redactor.overlay import annotate, format_caption
from face_redactor.surface import Surface


def test_format_caption():
    assert format_caption(0) == "DETECTED 0 FACE(S)"
    assert format_caption(2) == "DETECTED 2 FACE(S)"


def test_annotate_draws_near_bottom_only():
    """Caption pixels appear just above the bottom margin, nowhere else."""
    surface = Surface(400, 200)

    annotate(surface, format_caption(3))

    pixels = surface.pixels
    assert pixels[150:, :].max() > 0
    assert pixels[:150, :].max() == 0
    # Baseline sits 20 px above the bottom edge; only short descenders go below it.
    assert pixels[195:, :].max() == 0


def test_annotate_is_horizontally_centered():
    surface = Surface(400, 200)

    annotate(surface, "DETECTED 1 FACE(S)")

    cols = np.where(surface.pixels.max(axis=(0, 2)) > 0)[0]
    left_gap = cols.min()
    right_gap = surface.width - 1 - cols.max()
    assert abs(left_gap - right_gap) <= 10


def test_annotate_uses_configured_color():
    surface = Surface(400, 200)

    annotate(surface, "DETECTED 1 FACE(S)", OverlayConfig(color=(0, 255, 0)))

    drawn = surface.pixels[surface.pixels.max(axis=2) > 0]
    assert drawn[:, 0].max() == 0
    assert drawn[:, 2].max() == 0
    assert drawn[:, 1].max() == 255


def test_caption_scales_with_surface_width():
    """Glyph height tracks 5% of the surface width."""
    small = Surface(400, 300)
    large = Surface(800, 300)

    annotate(small, "DETECTED 1 FACE(S)")
    annotate(large, "DETECTED 1 FACE(S)")

    def _glyph_height(surface):
        rows = np.where(surface.pixels.max(axis=(1, 2)) > 0)[0]
        return rows.max() - rows.min() + 1

    assert _glyph_height(large) > _glyph_height(small) * 1.5
