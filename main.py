"""
Face Redactor CLI Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, wire together
    the detector, pipeline, and I/O handlers, and run the processing loop.

Usage:
    python main.py --source photo.jpg                     # Single image
    python main.py --source photos/ --output-mode save_image,save_json
    python main.py --source photo.jpg --seed 7            # Reproducible run
    python main.py --config my_config.yaml

This module is the executable entry point. It should not be imported
by other modules.
"""

import argparse
import dataclasses
import logging
import sys
import time

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

from face_redactor.config import load_config
from face_redactor.detector import Detector, ModelUnavailableError
from face_redactor.input_handler import InputHandler
from face_redactor.output_handler import OutputHandler
from face_redactor.pipeline import RedactionPipeline
from face_redactor.surface import Surface


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Face Redactor — pixelate detected faces",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--source",
        type=str,
        help="Input source: path to an image file or a directory of images.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for policy choice, block sizes, and block colors. Overrides config.",
    )
    parser.add_argument(
        "--backend",
        type=str,
        choices=["cpu", "cuda"],
        help="Compute backend preference. Overrides config.",
    )
    parser.add_argument(
        "--output-mode",
        type=str,
        help="Output mode(s). Use comma-separated values for multiple outputs: "
             "display, save_image, save_json, save_csv. "
             "Example: 'save_image,save_json'. Overrides config.",
    )
    parser.add_argument(
        "--output-path",
        type=str,
        help="Directory for output artifacts. Overrides config.",
    )

    return parser.parse_args()


def main() -> int:
    """Main execution loop."""
    args = parse_args()

    # 1. Load Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = load_config(args.config)

        # Apply CLI overrides on fresh frozen copies
        if args.source is not None:
            config = dataclasses.replace(
                config, input=dataclasses.replace(config.input, source=args.source)
            )
        if args.seed is not None:
            config = dataclasses.replace(config, seed=args.seed)
        if args.backend is not None:
            config = dataclasses.replace(
                config, model=dataclasses.replace(config.model, backend=args.backend)
            )
        if args.output_mode is not None:
            config = dataclasses.replace(
                config, output=dataclasses.replace(config.output, mode=args.output_mode)
            )
        if args.output_path is not None:
            config = dataclasses.replace(
                config, output=dataclasses.replace(config.output, save_path=args.output_path)
            )

        logger.info("Configuration active for this run.")

    except Exception as e:
        logger.error("Configuration error: %s", e)
        return 1

    # 2. Initialize Components
    try:
        input_handler = InputHandler(source=config.input.source)
        detector = Detector(config)
        pipeline = RedactionPipeline(config, detector=detector)
        output_handler = OutputHandler(config)

    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error("Initialization failed: %s", e)
        return 1
    except Exception as e:
        logger.exception("Unexpected initialization error: %s", e)
        return 1

    # 3. Processing Loop
    image_count = 0
    region_count = 0
    start_time = time.perf_counter()

    try:
        for image_id, image in input_handler:
            # Fresh surface per image; the pipeline loads the pixels into it.
            surface = Surface(image.shape[1], image.shape[0])
            result = pipeline.process_image(surface, image)

            image_count += 1
            region_count += result.regions_redacted
            logger.info("%s: %s (%s policy)", image_id, result.caption, result.variant.value)

            if not output_handler.process(image_id, surface, result):
                logger.info("Stopping loop per user request.")
                break

    except ModelUnavailableError as e:
        logger.error("Model unavailable: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    except Exception as e:
        logger.exception("Runtime error during processing: %s", e)
        return 1
    finally:
        # 4. Cleanup
        elapsed = time.perf_counter() - start_time
        output_handler.finalize()

        logger.info(
            "Processing finished. Images: %d. Regions redacted: %d. Elapsed: %.2fs.",
            image_count, region_count, elapsed,
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
