"""
Region selection policies.

Responsibility:
    Decide which decoded detections become redaction targets and with
    what pixelation block size. Two interchangeable variants share the
    single `RegionPolicy.select` entry point:

        refined: high threshold, strict in-bounds check, fixed blocks.
        chaotic: lower threshold, only tiny boxes rejected, random
                 block size per region.

    The variant is drawn once per image by `choose_variant`, an
    unweighted coin flip, before `select` is invoked.

Non-goals:
    - No sorting, deduplication, merging, or overlap suppression.
    - No drawing.
"""

import enum
import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from face_redactor.config import PolicyConfig, RegionPolicyConfig
from face_redactor.detection import Detection, PixelRegion

logger = logging.getLogger(__name__)


class PolicyVariant(str, enum.Enum):
    REFINED = "refined"
    CHAOTIC = "chaotic"


def choose_variant(rng: np.random.Generator) -> PolicyVariant:
    """Pick a policy variant with a fair coin flip."""
    if rng.random() < 0.5:
        return PolicyVariant.REFINED
    return PolicyVariant.CHAOTIC


class RegionPolicy:
    """Filters detections into pixel regions according to one variant.

    Usage:
        policy = build_policy(PolicyVariant.REFINED, config.policy, rng)
        regions = policy.select(detections, surface.width, surface.height)
    """

    def __init__(
        self,
        variant: PolicyVariant,
        config: RegionPolicyConfig,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._variant = variant
        self._config = config
        self._rng = rng if rng is not None else np.random.default_rng()

    @property
    def variant(self) -> PolicyVariant:
        return self._variant

    @property
    def config(self) -> RegionPolicyConfig:
        return self._config

    def select(
        self,
        detections: Sequence[Detection],
        surface_width: int,
        surface_height: int,
    ) -> List[PixelRegion]:
        """Select redaction regions, preserving detection order.

        Args:
            detections: Decoded detections for one image.
            surface_width: Surface width in pixels.
            surface_height: Surface height in pixels.

        Returns:
            One PixelRegion per detection that passes the score threshold
            and the variant's geometric filter.
        """
        regions: List[PixelRegion] = []

        for index, det in enumerate(detections):
            if det.score <= self._config.score_threshold:
                continue

            x, y, width, height = det.box.denormalize(surface_width, surface_height)

            if not self._accepts(x, y, width, height, surface_width, surface_height):
                logger.debug(
                    "%s policy rejected detection %d: x=%.1f y=%.1f w=%.1f h=%.1f",
                    self._variant.value, index, x, y, width, height,
                )
                continue

            # Floor the top-left and ceil the bottom-right so the integer
            # region never shrinks below the accepted float geometry.
            left, top = math.floor(x), math.floor(y)
            right, bottom = math.ceil(x + width), math.ceil(y + height)

            regions.append(PixelRegion(
                x=left,
                y=top,
                width=right - left,
                height=bottom - top,
                pixel_size=self._pixel_size(),
                score=det.score,
                index=index,
            ))

        logger.debug(
            "%s policy selected %d of %d detections.",
            self._variant.value, len(regions), len(detections),
        )
        return regions

    def _accepts(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        surface_width: int,
        surface_height: int,
    ) -> bool:
        if width <= 0 or height <= 0:
            return False

        min_dim = self._config.min_dimension
        if min_dim is not None and (width <= min_dim or height <= min_dim):
            return False

        if self._config.bounds_check:
            return (
                x >= 0
                and y >= 0
                and x + width <= surface_width
                and y + height <= surface_height
            )

        return True

    def _pixel_size(self) -> int:
        if self._config.pixel_size is not None:
            return self._config.pixel_size

        low, high = self._config.pixel_size_range
        return int(self._rng.integers(low, high, endpoint=True))


def build_policy(
    variant: PolicyVariant,
    config: PolicyConfig,
    rng: Optional[np.random.Generator] = None,
) -> RegionPolicy:
    """Return the RegionPolicy configured for the given variant."""
    if variant is PolicyVariant.REFINED:
        return RegionPolicy(variant, config.refined, rng)
    return RegionPolicy(variant, config.chaotic, rng)
