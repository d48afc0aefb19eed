"""
Configuration management for the face redaction system.

Provides a layered configuration system with the following precedence
(highest to lowest):

    CLI arguments > Environment variables > YAML config file > Defaults

Design constraints:
    - The system MUST run with zero configuration (safe defaults only).
    - Missing or invalid values fail early and loudly.
    - No detection, redaction, or model loading logic belongs here.

Non-goals:
    - No dynamic reloading.
    - No database-backed or remote configuration.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Project root resolution
# ---------------------------------------------------------------------------
# Resolved relative to this file's location: face_redactor/config.py → repo root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_project_root() -> Path:
    """Return the resolved project root directory."""
    return _PROJECT_ROOT


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelConfig:
    """Model-related configuration.

    Attributes:
        model_path: Path to the detector network file (relative to project root).
        backend: Compute backend — 'cpu' or 'cuda'.
        input_size: Spatial dimensions (width, height) for the DNN input blob.
        scale_factor: Pixel value scale factor applied during blob creation.
        swap_rb: Feed the network RGB instead of OpenCV's native BGR.
        output_names: Names of the (boxes, scores, classes) output layers.
    """

    model_path: str = "models/face_detector.onnx"
    backend: str = "cpu"
    input_size: Tuple[int, int] = (1280, 1280)
    scale_factor: float = 1.0
    swap_rb: bool = True
    output_names: Tuple[str, str, str] = (
        "detection_boxes",
        "detection_scores",
        "detection_classes",
    )


@dataclass(frozen=True)
class RegionPolicyConfig:
    """Selection rules for one policy variant.

    Exactly one of pixel_size (fixed block size) or pixel_size_range
    (random block size, inclusive bounds) must be set.

    Attributes:
        score_threshold: Detections must score strictly above this.
        min_dimension: Reject regions whose width or height is <= this.
                       None disables the check.
        bounds_check: Reject regions not fully inside the surface.
        pixel_size: Fixed pixelation block size.
        pixel_size_range: (min, max) for a per-region random block size.
    """

    score_threshold: float
    min_dimension: Optional[float] = None
    bounds_check: bool = False
    pixel_size: Optional[int] = None
    pixel_size_range: Optional[Tuple[int, int]] = None


REFINED_POLICY = RegionPolicyConfig(
    score_threshold=0.99,
    bounds_check=True,
    pixel_size=50,
)

CHAOTIC_POLICY = RegionPolicyConfig(
    score_threshold=0.7,
    min_dimension=10.0,
    pixel_size_range=(10, 59),
)


@dataclass(frozen=True)
class PolicyConfig:
    """The two interchangeable region policies."""

    refined: RegionPolicyConfig = REFINED_POLICY
    chaotic: RegionPolicyConfig = CHAOTIC_POLICY


@dataclass(frozen=True)
class RedactionConfig:
    """Outline style drawn around every redacted region.

    Attributes:
        outline_color: BGR color of the outline.
        outline_thickness: Stroke width in pixels.
    """

    outline_color: Tuple[int, int, int] = (0, 0, 255)
    outline_thickness: int = 2


@dataclass(frozen=True)
class OverlayConfig:
    """Summary caption rendering parameters.

    Attributes:
        font_scale_ratio: Caption height as a fraction of surface width.
        margin: Distance in pixels from the bottom edge to the baseline.
        color: BGR text color.
    """

    font_scale_ratio: float = 0.05
    margin: int = 20
    color: Tuple[int, int, int] = (255, 255, 255)


@dataclass(frozen=True)
class InputConfig:
    """Input source configuration.

    Attributes:
        source: Path to an image file or a directory of images.
    """

    source: str = "input/"


@dataclass(frozen=True)
class OutputConfig:
    """Output behavior configuration.

    Attributes:
        mode: Output mode(s). Supports multiple comma-separated values:
              'display', 'save_image', 'save_json', 'save_csv'.
              Example: "save_image,save_json"
        save_path: Directory where output artifacts are written.
        viewport_size: (width, height) of the screen area used by 'display'.
        display_fraction: Share of the viewport the displayed image may fill.
    """

    mode: str = "save_image"
    save_path: str = "output/"
    viewport_size: Tuple[int, int] = (1280, 720)
    display_fraction: float = 0.7


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration.

    Aggregates all sub-configurations into a single, frozen object.
    A None seed draws fresh entropy for every run.
    """

    model: ModelConfig = field(default_factory=ModelConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    redaction: RedactionConfig = field(default_factory=RedactionConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: Optional[int] = None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

_VALID_BACKENDS = {"cpu", "cuda"}
_VALID_OUTPUT_MODES = {"display", "save_image", "save_json", "save_csv"}


def _validate_color(name: str, color: Tuple[int, int, int]) -> None:
    if len(color) != 3 or any(not (0 <= c <= 255) for c in color):
        raise ValueError(
            f"{name} must be three channel values in [0, 255], got {color}."
        )


def _validate_policy(name: str, policy: RegionPolicyConfig) -> None:
    if not (0.0 <= policy.score_threshold <= 1.0):
        raise ValueError(
            f"policy.{name}.score_threshold must be in [0.0, 1.0], "
            f"got {policy.score_threshold}."
        )

    if policy.min_dimension is not None and policy.min_dimension < 0:
        raise ValueError(
            f"policy.{name}.min_dimension must be non-negative or None, "
            f"got {policy.min_dimension}."
        )

    if (policy.pixel_size is None) == (policy.pixel_size_range is None):
        raise ValueError(
            f"policy.{name} must set exactly one of pixel_size or "
            f"pixel_size_range."
        )

    if policy.pixel_size is not None and policy.pixel_size <= 0:
        raise ValueError(
            f"policy.{name}.pixel_size must be positive, got {policy.pixel_size}."
        )

    if policy.pixel_size_range is not None:
        low, high = policy.pixel_size_range
        if low <= 0 or high < low:
            raise ValueError(
                f"policy.{name}.pixel_size_range must be (min, max) with "
                f"0 < min <= max, got {policy.pixel_size_range}."
            )


def _validate(config: AppConfig) -> None:
    """Validate configuration values. Raises ValueError on invalid state."""

    if config.model.backend not in _VALID_BACKENDS:
        raise ValueError(
            f"Invalid model.backend: '{config.model.backend}'. "
            f"Must be one of {_VALID_BACKENDS}."
        )

    # Validate each mode in comma-separated list
    modes = set(m.strip() for m in config.output.mode.split(','))
    invalid_modes = modes - _VALID_OUTPUT_MODES
    if invalid_modes:
        raise ValueError(
            f"Invalid output.mode(s): {invalid_modes}. "
            f"Valid modes: {_VALID_OUTPUT_MODES}. "
            f"Use comma-separated values for multiple outputs."
        )

    if len(config.model.input_size) != 2 or any(
        d <= 0 for d in config.model.input_size
    ):
        raise ValueError(
            f"model.input_size must be a positive (width, height) tuple, "
            f"got {config.model.input_size}."
        )

    if config.model.scale_factor <= 0:
        raise ValueError(
            f"model.scale_factor must be positive, "
            f"got {config.model.scale_factor}."
        )

    if len(config.model.output_names) != 3:
        raise ValueError(
            f"model.output_names must name (boxes, scores, classes), "
            f"got {config.model.output_names}."
        )

    _validate_policy("refined", config.policy.refined)
    _validate_policy("chaotic", config.policy.chaotic)

    if config.redaction.outline_thickness <= 0:
        raise ValueError(
            f"redaction.outline_thickness must be positive, "
            f"got {config.redaction.outline_thickness}."
        )
    _validate_color("redaction.outline_color", config.redaction.outline_color)

    if not (0.0 < config.overlay.font_scale_ratio <= 1.0):
        raise ValueError(
            f"overlay.font_scale_ratio must be in (0.0, 1.0], "
            f"got {config.overlay.font_scale_ratio}."
        )

    if config.overlay.margin < 0:
        raise ValueError(
            f"overlay.margin must be non-negative, got {config.overlay.margin}."
        )
    _validate_color("overlay.color", config.overlay.color)

    if len(config.output.viewport_size) != 2 or any(
        d <= 0 for d in config.output.viewport_size
    ):
        raise ValueError(
            f"output.viewport_size must be a positive (width, height) tuple, "
            f"got {config.output.viewport_size}."
        )

    if not (0.0 < config.output.display_fraction <= 1.0):
        raise ValueError(
            f"output.display_fraction must be in (0.0, 1.0], "
            f"got {config.output.display_fraction}."
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _parse_tuple(value, expected_len: int, cast_type=float):
    """Convert a list from YAML into a tuple of the expected type and length."""
    if isinstance(value, (list, tuple)):
        if len(value) != expected_len:
            raise ValueError(
                f"Expected {expected_len} values, got {len(value)}: {value}"
            )
        return tuple(cast_type(v) for v in value)
    return value


def _build_model_config(raw: dict) -> ModelConfig:
    """Build ModelConfig from a raw YAML dict."""
    kwargs = {}
    if "model_path" in raw:
        kwargs["model_path"] = str(raw["model_path"])
    if "backend" in raw:
        kwargs["backend"] = str(raw["backend"]).lower()
    if "input_size" in raw:
        kwargs["input_size"] = _parse_tuple(raw["input_size"], 2, int)
    if "scale_factor" in raw:
        kwargs["scale_factor"] = float(raw["scale_factor"])
    if "swap_rb" in raw:
        kwargs["swap_rb"] = bool(raw["swap_rb"])
    if "output_names" in raw:
        kwargs["output_names"] = _parse_tuple(raw["output_names"], 3, str)
    return ModelConfig(**kwargs)


def _build_region_policy_config(
    raw: dict, defaults: RegionPolicyConfig
) -> RegionPolicyConfig:
    """Build one RegionPolicyConfig on top of the variant's defaults.

    Setting one pixel-size strategy in YAML clears the other.
    """
    kwargs = {
        "score_threshold": defaults.score_threshold,
        "min_dimension": defaults.min_dimension,
        "bounds_check": defaults.bounds_check,
        "pixel_size": defaults.pixel_size,
        "pixel_size_range": defaults.pixel_size_range,
    }
    if "score_threshold" in raw:
        kwargs["score_threshold"] = float(raw["score_threshold"])
    if "min_dimension" in raw:
        val = raw["min_dimension"]
        kwargs["min_dimension"] = float(val) if val is not None else None
    if "bounds_check" in raw:
        kwargs["bounds_check"] = bool(raw["bounds_check"])
    if "pixel_size" in raw:
        kwargs["pixel_size"] = int(raw["pixel_size"])
        kwargs["pixel_size_range"] = None
    if "pixel_size_range" in raw:
        kwargs["pixel_size_range"] = _parse_tuple(raw["pixel_size_range"], 2, int)
        kwargs["pixel_size"] = None
    return RegionPolicyConfig(**kwargs)


def _build_policy_config(raw: dict) -> PolicyConfig:
    """Build PolicyConfig from a raw YAML dict."""
    return PolicyConfig(
        refined=_build_region_policy_config(raw.get("refined", {}), REFINED_POLICY),
        chaotic=_build_region_policy_config(raw.get("chaotic", {}), CHAOTIC_POLICY),
    )


def _build_redaction_config(raw: dict) -> RedactionConfig:
    """Build RedactionConfig from a raw YAML dict."""
    kwargs = {}
    if "outline_color" in raw:
        kwargs["outline_color"] = _parse_tuple(raw["outline_color"], 3, int)
    if "outline_thickness" in raw:
        kwargs["outline_thickness"] = int(raw["outline_thickness"])
    return RedactionConfig(**kwargs)


def _build_overlay_config(raw: dict) -> OverlayConfig:
    """Build OverlayConfig from a raw YAML dict."""
    kwargs = {}
    if "font_scale_ratio" in raw:
        kwargs["font_scale_ratio"] = float(raw["font_scale_ratio"])
    if "margin" in raw:
        kwargs["margin"] = int(raw["margin"])
    if "color" in raw:
        kwargs["color"] = _parse_tuple(raw["color"], 3, int)
    return OverlayConfig(**kwargs)


def _build_input_config(raw: dict) -> InputConfig:
    """Build InputConfig from a raw YAML dict."""
    kwargs = {}
    if "source" in raw:
        kwargs["source"] = str(raw["source"])
    return InputConfig(**kwargs)


def _build_output_config(raw: dict) -> OutputConfig:
    """Build OutputConfig from a raw YAML dict."""
    kwargs = {}
    if "mode" in raw:
        kwargs["mode"] = str(raw["mode"]).lower()
    if "save_path" in raw:
        kwargs["save_path"] = str(raw["save_path"])
    if "viewport_size" in raw:
        kwargs["viewport_size"] = _parse_tuple(raw["viewport_size"], 2, int)
    if "display_fraction" in raw:
        kwargs["display_fraction"] = float(raw["display_fraction"])
    return OutputConfig(**kwargs)


def _parse_seed(value) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "FACE_REDACT_"


def _apply_env_overrides(raw: dict) -> dict:
    """Apply environment variable overrides to the raw config dict.

    Environment variables follow the pattern:
        FACE_REDACT_MODEL_BACKEND=cuda
        FACE_REDACT_REFINED_SCORE_THRESHOLD=0.95

    Each variable maps to a fixed (section..., key) path in the raw dict.
    """
    env_map = {
        f"{_ENV_PREFIX}MODEL_PATH": ("model", "model_path"),
        f"{_ENV_PREFIX}MODEL_BACKEND": ("model", "backend"),
        f"{_ENV_PREFIX}REFINED_SCORE_THRESHOLD": ("policy", "refined", "score_threshold"),
        f"{_ENV_PREFIX}CHAOTIC_SCORE_THRESHOLD": ("policy", "chaotic", "score_threshold"),
        f"{_ENV_PREFIX}INPUT_SOURCE": ("input", "source"),
        f"{_ENV_PREFIX}OUTPUT_MODE": ("output", "mode"),
        f"{_ENV_PREFIX}OUTPUT_SAVE_PATH": ("output", "save_path"),
        f"{_ENV_PREFIX}SEED": ("seed",),
    }

    for env_var, path in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            target = raw
            for section in path[:-1]:
                target = target.setdefault(section, {})
            target[path[-1]] = value
            logger.debug("Config override from env: %s=%s", env_var, value)

    return raw


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load and validate application configuration.

    Precedence (highest → lowest):
        Environment variables > YAML file > Hard-coded defaults

    Args:
        config_path: Path to a YAML configuration file. If None,
                     the system runs entirely on defaults (safe for
                     programmatic usage).

    Returns:
        A validated, frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If any configuration value is invalid.
        yaml.YAMLError: If the YAML file is malformed.
    """
    raw: dict = {}

    # --- Layer 1: YAML file ---
    if config_path is not None:
        resolved = Path(config_path)
        if not resolved.is_absolute():
            resolved = _PROJECT_ROOT / resolved

        if not resolved.is_file():
            raise FileNotFoundError(
                f"Configuration file not found: {resolved}. "
                f"Provide a valid path or omit to use defaults."
            )

        logger.info("Loading config from: %s", resolved)
        with open(resolved, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    # --- Layer 2: Environment variable overrides ---
    raw = _apply_env_overrides(raw)

    # --- Build typed configs ---
    config = AppConfig(
        model=_build_model_config(raw.get("model", {})),
        policy=_build_policy_config(raw.get("policy", {})),
        redaction=_build_redaction_config(raw.get("redaction", {})),
        overlay=_build_overlay_config(raw.get("overlay", {})),
        input=_build_input_config(raw.get("input", {})),
        output=_build_output_config(raw.get("output", {})),
        seed=_parse_seed(raw.get("seed")),
    )

    # --- Validate ---
    _validate(config)

    logger.debug("Configuration loaded: %s", config)
    return config
