"""
Summary caption overlay.

Responsibility:
    Render a single bold caption line, horizontally centered near the
    bottom of the surface, reporting how many regions were redacted.
    Must run after redaction so the caption itself is never pixelated.
"""

from typing import Optional

import cv2

from face_redactor.config import OverlayConfig
from face_redactor.surface import Surface

# Hard-coded rendering constants (cosmetic internals, not user-facing)
_FONT = cv2.FONT_HERSHEY_SIMPLEX
_MIN_THICKNESS = 2


def format_caption(count: int) -> str:
    """Caption reporting the number of redacted regions."""
    return f"DETECTED {count} FACE(S)"


def annotate(
    surface: Surface,
    text: str,
    config: Optional[OverlayConfig] = None,
) -> None:
    """Draw text centered horizontally, baseline `margin` px above the bottom.

    The glyph height is `font_scale_ratio` of the surface width. No
    background box is drawn.
    """
    if config is None:
        config = OverlayConfig()

    font_px = max(1.0, surface.width * config.font_scale_ratio)
    thickness = max(_MIN_THICKNESS, int(font_px / 10))

    # Hershey fonts are sized by scale; measure at 1.0 and rescale to pixels.
    (_, unit_h), _ = cv2.getTextSize(text, _FONT, 1.0, thickness)
    font_scale = font_px / max(unit_h, 1)

    (text_w, _), _ = cv2.getTextSize(text, _FONT, font_scale, thickness)
    text_x = (surface.width - text_w) // 2
    text_y = surface.height - config.margin

    cv2.putText(
        surface.pixels,
        text,
        (int(text_x), int(text_y)),
        _FONT,
        font_scale,
        tuple(int(c) for c in config.color),
        thickness,
        cv2.LINE_AA,
    )
