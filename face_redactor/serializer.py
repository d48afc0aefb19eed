"""
Serialization of redaction reports.

Responsibility:
    Export per-image redaction results (chosen policy, regions, counts)
    to JSON or CSV for offline inspection.

Non-goals:
    - No rendering, display, or detection logic.
    - No streaming output — writes complete files on finalize.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Dict

from face_redactor.pipeline import PipelineResult

logger = logging.getLogger(__name__)


def save_json(
    results_by_image: Dict[str, PipelineResult],
    output_path: str,
) -> None:
    """Export all redaction results to a JSON file.

    Output schema:
        {
            "images": [
                {
                    "image_id": "a.jpg",
                    "variant": "refined",
                    "regions_redacted": 1,
                    "caption": "DETECTED 1 FACE(S)",
                    "regions": [
                        {"index": ..., "x": ..., "y": ..., "width": ...,
                         "height": ..., "pixel_size": ..., "score": ...}
                    ]
                }
            ],
            "total_images": N,
            "total_regions": M
        }

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    images = []
    total_regions = 0

    for image_id in sorted(results_by_image.keys()):
        result = results_by_image[image_id]
        total_regions += result.regions_redacted
        images.append({"image_id": image_id, **result.to_dict()})

    payload = {
        "images": images,
        "total_images": len(images),
        "total_regions": total_regions,
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info(
        "JSON report saved: %s (%d images, %d regions)",
        output_path, len(images), total_regions,
    )


def save_csv(
    results_by_image: Dict[str, PipelineResult],
    output_path: str,
) -> None:
    """Export one CSV row per redacted region.

    Columns: image_id, variant, index, x, y, width, height, pixel_size, score

    Raises:
        OSError: If the output path is not writable.
    """
    _ensure_parent_dir(output_path)

    fieldnames = [
        "image_id", "variant", "index", "x", "y",
        "width", "height", "pixel_size", "score",
    ]

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()

        total = 0
        for image_id in sorted(results_by_image.keys()):
            result = results_by_image[image_id]
            for region in result.regions:
                writer.writerow({
                    "image_id": image_id,
                    "variant": result.variant.value,
                    **region.to_dict(),
                })
                total += 1

    logger.info("CSV report saved: %s (%d rows)", output_path, total)


def _ensure_parent_dir(path: str) -> None:
    """Create parent directories if they don't exist."""
    parent = Path(path).parent
    parent.mkdir(parents=True, exist_ok=True)
