"""
Raster surface owned by one pipeline run.

Responsibility:
    Hold the BGR pixel buffer being redacted, its fixed pixel dimensions,
    and the display scaling used when the surface is shown on screen.
    Drawing primitives clip to the surface so callers may pass regions
    that extend past its edges.

Non-goals:
    - No detection, policy, or file I/O logic.
    - No sharing between concurrent runs (one surface per image).
"""

from typing import Tuple

import cv2
import numpy as np

Color = Tuple[int, int, int]


class Surface:
    """Mutable BGR raster with fixed dimensions per loaded image.

    Usage:
        surface = Surface.from_image(frame)
        surface.fill_rect(10, 10, 50, 50, (0, 0, 255))
        png_bytes = surface.encode(".png")

    load() fully replaces the previous content and dimensions; nothing
    from an earlier image survives.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(
                f"Surface dimensions must be positive, got {width}x{height}."
            )
        self._pixels = np.zeros((height, width, 3), dtype=np.uint8)

    @classmethod
    def from_image(cls, image: np.ndarray) -> "Surface":
        """Create a surface sized to the image's natural dimensions."""
        cls._validate_image(image)
        h, w = image.shape[:2]
        surface = cls(w, h)
        surface.load(image)
        return surface

    def load(self, image: np.ndarray) -> None:
        """Replace the surface content with a copy of image.

        Raises:
            TypeError: If image is not a numpy ndarray.
            ValueError: If image is empty or not a 3-channel raster.
        """
        self._validate_image(image)
        self._pixels = np.ascontiguousarray(image, dtype=np.uint8).copy()

    def clear(self) -> None:
        """Reset every pixel to black."""
        self._pixels[:] = 0

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def pixels(self) -> np.ndarray:
        """The live pixel buffer (H, W, 3). Mutations are visible."""
        return self._pixels

    def snapshot(self) -> np.ndarray:
        """Return an independent copy of the pixel buffer."""
        return self._pixels.copy()

    def fill_rect(self, x: int, y: int, width: int, height: int, color: Color) -> int:
        """Fill a rectangle, clipped to the surface.

        Returns:
            Number of pixels painted (0 if the rectangle is off-surface).
        """
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + width, self.width), min(y + height, self.height)
        if x1 <= x0 or y1 <= y0:
            return 0

        self._pixels[y0:y1, x0:x1] = color
        return (x1 - x0) * (y1 - y0)

    def stroke_rect(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        color: Color,
        thickness: int,
    ) -> None:
        """Draw a rectangle outline. OpenCV clips it to the surface."""
        cv2.rectangle(
            self._pixels,
            (int(x), int(y)),
            (int(x + width - 1), int(y + height - 1)),
            color=tuple(int(c) for c in color),
            thickness=thickness,
        )

    def display_size(
        self,
        viewport_width: int,
        viewport_height: int,
        fraction: float = 0.7,
    ) -> Tuple[int, int]:
        """Best-fit on-screen size preserving aspect ratio.

        The width is fitted to `fraction` of the viewport first; if the
        resulting height does not fit, the height is fitted instead.
        The pixel dimensions of the surface are not affected.
        """
        aspect = self.width / self.height

        new_width = viewport_width * fraction
        new_height = new_width / aspect

        if new_height > viewport_height * fraction:
            new_height = viewport_height * fraction
            new_width = new_height * aspect

        return max(1, int(new_width)), max(1, int(new_height))

    def encode(self, ext: str = ".png") -> bytes:
        """Encode the surface into an image file format.

        Raises:
            RuntimeError: If OpenCV cannot encode to the requested format.
        """
        ok, buffer = cv2.imencode(ext, self._pixels)
        if not ok:
            raise RuntimeError(f"Failed to encode surface as '{ext}'.")
        return buffer.tobytes()

    @staticmethod
    def _validate_image(image: np.ndarray) -> None:
        if not isinstance(image, np.ndarray):
            raise TypeError(
                f"Expected image to be a numpy ndarray, "
                f"got {type(image).__name__}. "
                f"Use cv2.imread() to obtain images."
            )

        if image.size == 0:
            raise ValueError("Image is empty (zero size).")

        if image.ndim != 3 or image.shape[2] != 3:
            raise ValueError(
                f"Expected a 3-channel (H, W, 3) BGR image, got shape {image.shape}."
            )
