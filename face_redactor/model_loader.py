"""
Model loading for the face redaction system.

Responsibility:
    Load the detector network from disk, configure the compute backend,
    and return a ready-to-infer cv2.dnn.Net object.

Non-goals:
    - No preprocessing, inference, or decoding logic.
    - No automatic model downloading.
    - No fallback to alternative models.

Failure behavior:
    - A missing model file raises FileNotFoundError with the exact
      missing path and expected location.
    - Incompatible backend raises RuntimeError.
"""

import logging
from pathlib import Path

import cv2

from face_redactor.config import ModelConfig, get_project_root

logger = logging.getLogger(__name__)


def resolve_model_path(config: ModelConfig) -> Path:
    """Resolve the configured model path against the project root."""
    path = Path(config.model_path)
    if not path.is_absolute():
        path = get_project_root() / path
    return path


def load_model(config: ModelConfig) -> cv2.dnn.Net:
    """Load and configure the face detection network.

    The file format (ONNX, TensorFlow frozen graph, ...) is inferred by
    cv2.dnn.readNet from the file extension.

    Args:
        config: ModelConfig containing the file path and backend preference.

    Returns:
        A configured cv2.dnn.Net ready for inference.

    Raises:
        FileNotFoundError: If the model file does not exist.
        RuntimeError: If the requested backend is unavailable.
    """
    model_path = resolve_model_path(config)

    # Validate file existence — fail fast with an actionable message
    if not model_path.is_file():
        raise FileNotFoundError(
            f"Model file not found.\n"
            f"  Expected: {model_path}\n"
            f"  Export the detector to this path,\n"
            f"  or update 'model.model_path' in your config."
        )

    logger.info("Loading model: %s", model_path)
    net = cv2.dnn.readNet(str(model_path))

    # Configure backend and target
    if config.backend == "cuda":
        logger.info("Setting CUDA backend and target.")
        try:
            net.setPreferableBackend(cv2.dnn.DNN_BACKEND_CUDA)
            net.setPreferableTarget(cv2.dnn.DNN_TARGET_CUDA)
        except cv2.error as e:
            raise RuntimeError(
                f"Failed to set CUDA backend. Ensure OpenCV was built with "
                f"CUDA support (opencv-contrib-python or custom build).\n"
                f"  OpenCV error: {e}"
            ) from e
    else:
        logger.info("Using CPU backend.")
        net.setPreferableBackend(cv2.dnn.DNN_BACKEND_OPENCV)
        net.setPreferableTarget(cv2.dnn.DNN_TARGET_CPU)

    logger.info("Model loaded successfully.")
    return net
