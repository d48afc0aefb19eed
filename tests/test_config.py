"""
Tests for the configuration module.
"""

import pytest

from face_redactor.config import (
    AppConfig,
    CHAOTIC_POLICY,
    ModelConfig,
    OverlayConfig,
    PolicyConfig,
    RegionPolicyConfig,
    load_config,
    _validate,
)


def test_load_defaults():
    """Test loading configuration without any file."""
    config = load_config(None)
    assert isinstance(config, AppConfig)
    assert config.model.backend == "cpu"
    assert config.model.input_size == (1280, 1280)
    assert config.policy.refined.score_threshold == 0.99
    assert config.policy.refined.pixel_size == 50
    assert config.policy.refined.bounds_check is True
    assert config.policy.chaotic.score_threshold == 0.7
    assert config.policy.chaotic.min_dimension == 10.0
    assert config.policy.chaotic.pixel_size_range == (10, 59)
    assert config.redaction.outline_thickness == 2
    assert config.overlay.margin == 20
    assert config.seed is None


def test_validation_failure():
    """Test fail-fast validation."""
    bad_config = AppConfig(
        policy=PolicyConfig(refined=RegionPolicyConfig(score_threshold=1.5, pixel_size=50))
    )
    with pytest.raises(ValueError, match="score_threshold"):
        _validate(bad_config)

    bad_config = AppConfig(model=ModelConfig(backend="invalid"))
    with pytest.raises(ValueError, match="backend"):
        _validate(bad_config)

    bad_config = AppConfig(overlay=OverlayConfig(color=(0, 0, 300)))
    with pytest.raises(ValueError, match="overlay.color"):
        _validate(bad_config)


def test_pixel_size_strategy_must_be_exclusive():
    """A policy needs exactly one of a fixed or random block size."""
    both = RegionPolicyConfig(score_threshold=0.5, pixel_size=20, pixel_size_range=(10, 20))
    with pytest.raises(ValueError, match="exactly one"):
        _validate(AppConfig(policy=PolicyConfig(chaotic=both)))

    neither = RegionPolicyConfig(score_threshold=0.5)
    with pytest.raises(ValueError, match="exactly one"):
        _validate(AppConfig(policy=PolicyConfig(chaotic=neither)))

    inverted = RegionPolicyConfig(score_threshold=0.5, pixel_size_range=(30, 10))
    with pytest.raises(ValueError, match="pixel_size_range"):
        _validate(AppConfig(policy=PolicyConfig(chaotic=inverted)))


def test_invalid_output_mode():
    """Unknown output modes are rejected."""
    from face_redactor.config import OutputConfig

    with pytest.raises(ValueError, match="output.mode"):
        _validate(AppConfig(output=OutputConfig(mode="save_image,save_video")))


def test_env_override(monkeypatch):
    """Test environment variable overrides."""
    monkeypatch.setenv("FACE_REDACT_REFINED_SCORE_THRESHOLD", "0.95")
    monkeypatch.setenv("FACE_REDACT_MODEL_BACKEND", "cuda")
    monkeypatch.setenv("FACE_REDACT_SEED", "42")

    config = load_config(None)

    assert config.policy.refined.score_threshold == 0.95
    assert config.policy.refined.pixel_size == 50
    assert config.policy.chaotic == CHAOTIC_POLICY
    assert config.model.backend == "cuda"
    assert config.seed == 42


def test_yaml_file(tmp_path):
    """YAML values are layered over defaults; one block-size strategy replaces the other."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "policy:\n"
        "  chaotic:\n"
        "    pixel_size: 25\n"
        "redaction:\n"
        "  outline_color: [0, 255, 0]\n"
        "output:\n"
        "  mode: save_image,save_json\n"
        "seed: 3\n",
        encoding="utf-8",
    )

    config = load_config(str(config_file))

    assert config.policy.chaotic.pixel_size == 25
    assert config.policy.chaotic.pixel_size_range is None
    assert config.policy.chaotic.score_threshold == 0.7
    assert config.redaction.outline_color == (0, 255, 0)
    assert config.output.mode == "save_image,save_json"
    assert config.seed == 3


def test_missing_config_file(tmp_path):
    """A config path that does not exist fails loudly."""
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))
