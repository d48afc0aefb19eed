"""
Output handling for the face redaction pipeline.

Responsibility:
    Route each redacted surface and its result to the configured sinks:
    display window, exported PNG, JSON or CSV report. Supports multiple
    orthogonal outputs simultaneously.

Non-goals:
    - No detection or redaction logic.
    - No input acquisition.
"""

import logging
from pathlib import Path
from typing import Dict, Set

import cv2

from face_redactor.config import AppConfig, get_project_root
from face_redactor.pipeline import PipelineResult
from face_redactor.serializer import save_csv, save_json
from face_redactor.surface import Surface

logger = logging.getLogger(__name__)

_WINDOW_NAME = "Face Redactor"


class OutputHandler:
    """Routes redaction results to configured output sinks.

    Supports orthogonal outputs - multiple modes can be active simultaneously:
        - 'display': Show the surface scaled to fit the viewport.
        - 'save_image': Export the surface as '<name>-pixelated.png'.
        - 'save_json': Accumulate results, write JSON on finalize.
        - 'save_csv': Accumulate results, write CSV on finalize.

    Usage:
        handler = OutputHandler(config)
        handler.process(image_id, surface, result)
        ...
        handler.finalize()  # Flush any buffered output
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config

        # Parse output modes (comma-separated for multiple outputs)
        self._modes: Set[str] = set(m.strip() for m in config.output.mode.split(','))

        # Buffer for serialization modes
        self._results_buffer: Dict[str, PipelineResult] = {}

        # Resolve output path
        save_path = Path(config.output.save_path)
        if not save_path.is_absolute():
            save_path = get_project_root() / save_path
        self._save_path = save_path

        # Create output directory if saving files
        if self._modes & {'save_image', 'save_json', 'save_csv'}:
            self._save_path.mkdir(parents=True, exist_ok=True)

        logger.info("OutputHandler initialized: modes=%s, save_path=%s",
                    self._modes, self._save_path)

    @property
    def save_path(self) -> Path:
        return self._save_path

    def process(
        self,
        image_id: str,
        surface: Surface,
        result: PipelineResult,
    ) -> bool:
        """Route one redacted surface through the output sinks.

        Returns:
            True to continue processing, False to signal the caller
            should stop (e.g., user pressed 'q' in display mode).
        """
        should_continue = True

        if 'save_image' in self._modes:
            self._handle_save_image(image_id, surface)

        if 'save_json' in self._modes or 'save_csv' in self._modes:
            self._results_buffer[image_id] = result

        if 'display' in self._modes:
            if not self._handle_display(surface):
                should_continue = False

        return should_continue

    def image_path_for(self, image_id: str) -> Path:
        """Export path for an image id: '<stem>-pixelated.png'."""
        return self._save_path / f"{Path(image_id).stem}-pixelated.png"

    def _handle_save_image(self, image_id: str, surface: Surface) -> None:
        output_file = self.image_path_for(image_id)
        output_file.write_bytes(surface.encode(".png"))
        logger.info("Saved redacted image to %s", output_file)

    def _handle_display(self, surface: Surface) -> bool:
        """Show the surface scaled to the viewport. Returns False on quit key."""
        viewport_w, viewport_h = self._config.output.viewport_size
        size = surface.display_size(
            viewport_w, viewport_h, self._config.output.display_fraction
        )
        # Nearest neighbour keeps the pixelation blocks crisp when scaled.
        scaled = cv2.resize(surface.pixels, size, interpolation=cv2.INTER_NEAREST)
        cv2.imshow(_WINDOW_NAME, scaled)
        key = cv2.waitKey(0) & 0xFF

        if key == ord("q") or key == 27:  # 'q' or ESC
            logger.info("Quit signal received (key press).")
            return False

        return True

    def finalize(self) -> None:
        """Flush buffered output and release resources.

        Must be called after all images have been processed.
        """
        if 'save_json' in self._modes and self._results_buffer:
            save_json(self._results_buffer, str(self._save_path / "redactions.json"))

        if 'save_csv' in self._modes and self._results_buffer:
            save_csv(self._results_buffer, str(self._save_path / "redactions.csv"))

        if 'display' in self._modes:
            cv2.destroyAllWindows()

        self._results_buffer.clear()
        logger.info("OutputHandler finalized.")
