"""
Block-pixelation redaction.

Responsibility:
    Outline each selected region and overwrite it with a grid of
    randomly colored blocks. This is a destructive overwrite: block
    colors are pure noise, not derived from the underlying pixels.

Non-goals:
    - No selection logic (regions arrive already filtered).
    - No caption rendering.
"""

import logging
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from face_redactor.config import RedactionConfig
from face_redactor.detection import PixelRegion, RedactionResult
from face_redactor.surface import Surface

logger = logging.getLogger(__name__)

Cell = Tuple[int, int, int, int]


def pixel_grid(
    region: PixelRegion,
    surface_width: int,
    surface_height: int,
) -> Iterator[Cell]:
    """Yield the (x, y, width, height) cells covering a region.

    Cells are pixel_size x pixel_size squares anchored at the region's
    top-left corner. The last row and column are clipped to the region
    and to the surface; cells entirely off-surface are not yielded.
    """
    step = region.pixel_size
    right = region.x + region.width
    bottom = region.y + region.height

    for top in range(region.y, bottom, step):
        if top >= surface_height:
            break
        for left in range(region.x, right, step):
            if left >= surface_width:
                break

            x0, y0 = max(left, 0), max(top, 0)
            x1 = min(left + step, right, surface_width)
            y1 = min(top + step, bottom, surface_height)
            if x1 <= x0 or y1 <= y0:
                continue

            yield x0, y0, x1 - x0, y1 - y0


class Redactor:
    """Applies outline + block pixelation to regions on a surface.

    Usage:
        redactor = Redactor(config.redaction, rng)
        result = redactor.apply(surface, regions)
    """

    def __init__(
        self,
        config: Optional[RedactionConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._config = config if config is not None else RedactionConfig()
        self._rng = rng if rng is not None else np.random.default_rng()

    def apply(
        self,
        surface: Surface,
        regions: Sequence[PixelRegion],
    ) -> RedactionResult:
        """Redact every region in order, mutating the surface in place.

        Returns:
            RedactionResult whose count always equals len(regions).
        """
        for region in regions:
            surface.stroke_rect(
                region.x,
                region.y,
                region.width,
                region.height,
                color=self._config.outline_color,
                thickness=self._config.outline_thickness,
            )

            painted = 0
            for x, y, w, h in pixel_grid(region, surface.width, surface.height):
                painted += surface.fill_rect(x, y, w, h, self._random_color())

            logger.debug(
                "Redacted region %d at (%d, %d, %d, %d) with %dpx blocks (%d px painted).",
                region.index, region.x, region.y, region.width, region.height,
                region.pixel_size, painted,
            )

        return RedactionResult(regions_redacted=len(regions))

    def _random_color(self) -> Tuple[int, int, int]:
        b, g, r = self._rng.integers(0, 256, size=3)
        return int(b), int(g), int(r)
