"""
Preprocessing for the face detector.

Responsibility:
    Convert the surface's BGR pixels into a 4D DNN input blob, resized
    bilinearly to the model's square input size.

Non-goals:
    - No image acquisition or I/O.
    - No inference or decoding.

Hard-coded:
    - No mean subtraction; pixel values stay in [0, 255] unless
      scale_factor says otherwise.
"""

import numpy as np
import cv2

from face_redactor.config import ModelConfig


def preprocess(frame: np.ndarray, config: ModelConfig) -> np.ndarray:
    """Convert a BGR frame into a DNN input blob.

    Args:
        frame: Input image as a BGR numpy array (H, W, 3).
        config: ModelConfig providing input_size, scale_factor, and swap_rb.

    Returns:
        A 4D float32 numpy array of shape (1, 3, H, W), ready to be
        passed to net.setInput().

    Raises:
        ValueError: If the frame is empty.
    """
    if frame is None or frame.size == 0:
        raise ValueError(
            "Cannot preprocess an empty frame. "
            "Ensure the image was decoded successfully."
        )

    blob = cv2.dnn.blobFromImage(
        image=frame,
        scalefactor=config.scale_factor,
        size=config.input_size,
        mean=(0.0, 0.0, 0.0),
        swapRB=config.swap_rb,
        crop=False,
    )

    return blob
