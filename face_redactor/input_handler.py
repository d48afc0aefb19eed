"""
Input handling for the face redaction pipeline.

Responsibility:
    Read images from a single file or a directory of images and provide
    a uniform iterator yielding (image_id, image) tuples.

Non-goals:
    - No detection, drawing, or output writing.
    - No video or webcam sources.

Robustness:
    - Validates the source at initialization time.
    - Logs and skips unreadable images (never crashes the pipeline).
"""

import logging
import os
from pathlib import Path
from typing import Iterator, List, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# Image extensions recognized by this handler
_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp"}


class InputHandler:
    """Image iterator for a single file or a directory.

    Usage:
        handler = InputHandler(source="photos/")
        for image_id, image in handler:
            # process image

    image_id is the file name; images are decoded at natural size.
    """

    def __init__(self, source: str) -> None:
        """Initialize the input handler and validate the source.

        Args:
            source: Path to an image file or a directory of images.

        Raises:
            FileNotFoundError: If the source does not exist.
            ValueError: If the file type is unsupported or the directory
                        holds no images.
        """
        source_str = str(source).strip()
        self._image_paths: List[str]

        if os.path.isfile(source_str):
            ext = Path(source_str).suffix.lower()
            if ext not in _IMAGE_EXTENSIONS:
                raise ValueError(
                    f"Unrecognized file extension: '{ext}' for source '{source_str}'. "
                    f"Supported images: {_IMAGE_EXTENSIONS}."
                )
            self._image_paths = [source_str]
        elif os.path.isdir(source_str):
            self._image_paths = sorted(
                str(p)
                for p in Path(source_str).iterdir()
                if p.suffix.lower() in _IMAGE_EXTENSIONS
            )
            if not self._image_paths:
                raise ValueError(
                    f"No image files found in directory: '{source_str}'. "
                    f"Supported extensions: {_IMAGE_EXTENSIONS}."
                )
            logger.info("Found %d images in directory: %s", len(self._image_paths), source_str)
        else:
            raise FileNotFoundError(
                f"Input source not found: '{source_str}'. "
                f"Provide a valid image file or directory."
            )

        logger.info("InputHandler initialized: %d image(s), source=%s",
                    len(self._image_paths), source_str)

    def __len__(self) -> int:
        return len(self._image_paths)

    def __iter__(self) -> Iterator[Tuple[str, np.ndarray]]:
        """Yield (image_id, image) for every readable image."""
        for path in self._image_paths:
            image = cv2.imread(path, cv2.IMREAD_COLOR)
            if image is None:
                logger.warning("Skipping unreadable image: %s", path)
                continue

            yield Path(path).name, image
