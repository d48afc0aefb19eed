"""
Detector — adapter from an image to raw detection buffers.

This module wraps model inference, the single blocking step of a
pipeline run. Everything after it (decoding, policy, redaction,
overlay) consumes the RawDetectionBuffer it returns.

Public contract:
    Detector.infer(frame: np.ndarray) -> RawDetectionBuffer

Constraints:
    - Input must be a BGR numpy array (as returned by OpenCV).
    - Inference before the network is loaded raises ModelUnavailableError.
    - Thread-safety is not guaranteed (single-threaded design).

Non-goals:
    - No decoding, thresholding, or drawing.
    - No file reading or I/O of any kind beyond model loading.
"""

import logging
from typing import Optional

import numpy as np

from face_redactor.config import AppConfig, load_config
from face_redactor.detection import RawDetectionBuffer
from face_redactor.model_loader import load_model
from face_redactor.preprocessor import preprocess

logger = logging.getLogger(__name__)


class ModelUnavailableError(RuntimeError):
    """Inference was requested before the detector network is ready."""


class Detector:
    """Face detector backed by an OpenCV DNN network.

    Usage:
        detector = Detector()                       # Loads model from defaults
        detector = Detector(config, load=False)     # Defer loading
        detector.load()
        raw = detector.infer(frame)                 # BGR numpy array

    A pre-built network object (anything with setInput/forward) may be
    passed as `net`, in which case nothing is read from disk.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        net=None,
        load: bool = True,
    ) -> None:
        """Initialize the detector and optionally load the model.

        Args:
            config: Application configuration. If None, safe defaults
                    are used (no config file required).
            net: Pre-built network to use instead of loading from disk.
            load: Load the model now when no net is given.

        Raises:
            FileNotFoundError: If the model file is missing.
            RuntimeError: If the requested backend is unavailable.
        """
        if config is None:
            config = load_config()

        self._config = config
        self._net = net

        if self._net is None and load:
            self.load()

    def load(self) -> None:
        """Load the network from the configured model path."""
        self._net = load_model(self._config.model)
        logger.info("Detector ready (backend=%s)", self._config.model.backend)

    @property
    def is_ready(self) -> bool:
        return self._net is not None

    @property
    def config(self) -> AppConfig:
        """Return the active configuration (read-only)."""
        return self._config

    def infer(self, frame: np.ndarray) -> RawDetectionBuffer:
        """Run the detector on a single BGR frame.

        Returns:
            Raw (boxes, scores, classes) buffers with the detection count.

        Raises:
            ModelUnavailableError: If the network is not loaded.
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame has incorrect shape or is empty.
        """
        if not self.is_ready:
            raise ModelUnavailableError(
                "Detector model is not loaded yet; call load() before infer()."
            )

        self._validate_frame(frame)

        blob = preprocess(frame, self._config.model)

        self._net.setInput(blob)
        boxes, scores, classes = self._net.forward(list(self._config.model.output_names))

        raw = RawDetectionBuffer.from_tensors(boxes, scores, classes)
        logger.debug("Inference produced %d candidate detections.", raw.count)
        return raw

    @staticmethod
    def _validate_frame(frame: np.ndarray) -> None:
        """Validate that the input frame meets the API contract.

        Raises:
            TypeError: If frame is not a numpy ndarray.
            ValueError: If frame is empty or has wrong dimensions.
        """
        if not isinstance(frame, np.ndarray):
            raise TypeError(
                f"Expected frame to be a numpy ndarray, "
                f"got {type(frame).__name__}. "
                f"Use cv2.imread() to obtain frames."
            )

        if frame.size == 0:
            raise ValueError("Frame is empty (zero size).")

        if frame.ndim != 3:
            raise ValueError(
                f"Expected a 3-dimensional frame (H, W, C), "
                f"got {frame.ndim} dimensions with shape {frame.shape}. "
                f"Grayscale images must be converted to BGR first."
            )

        if frame.shape[2] != 3:
            raise ValueError(
                f"Expected 3 channels (BGR), got {frame.shape[2]} channels. "
                f"Input must be a BGR image as returned by OpenCV."
            )
