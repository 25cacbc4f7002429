"""Tests for the configuration schemas and the YAML loader."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from pydantic import ValidationError

from text_image_generator.config import (
    CONFIG_PATH,
    CvConfig,
    GeneratorConfig,
    MergeConfig,
    OutputConfig,
    load_config,
)
from text_image_generator.env import BACKGROUND_DIR
from text_image_generator.random_variable import RandomVariable


def write_config(path, data):
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f)
    return path


def test_default_config_file():
    assert CONFIG_PATH.exists()
    config = load_config()
    assert config.cv.box_prob == 0.1
    assert config.cv.perspective_x == RandomVariable.gaussian(-15.0, 15.0)
    assert config.cv.blur_sigma == RandomVariable.uniform(0.0, 1.5)
    assert config.merge.bg_height == 64
    assert config.merge.bg_width == 1000
    assert config.merge.height_diff == 10
    assert config.merge.font_alpha == RandomVariable.uniform(0.2, 1.0)
    assert config.output.target_size is None


def test_schema_defaults_match_config_file():
    assert GeneratorConfig().cv == load_config().cv


def test_sections_are_case_insensitive(tmp_path):
    path = write_config(
        tmp_path / "config.yaml",
        {
            "FONT": {"font_size": 50},
            "cv": {"box_prob": 0.5, "perspective_z": [-1, 1, "u"]},
            "Merge": {"bg_dir": str(tmp_path), "bg_height": 32},
        },
    )
    config = load_config(path)
    assert config.cv.box_prob == 0.5
    assert config.cv.perspective_z == RandomVariable.uniform(-1.0, 1.0)
    assert config.merge.bg_dir == Path(tmp_path)
    assert config.merge.bg_height == 32
    assert config.merge.bg_width == 1000


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path).cv == CvConfig()


def test_environment_overrides_file(tmp_path):
    path = write_config(tmp_path / "config.yaml", {"CV": {"box_prob": 0.1, "blur_prob": 0.3}})
    with patch.dict(os.environ, {"TEXT_IMAGE_GENERATOR_CV__BOX_PROB": "0.7"}):
        config = load_config(path)
    assert config.cv.box_prob == 0.7
    assert config.cv.blur_prob == 0.3


def test_dotenv_overrides_file(tmp_path, monkeypatch):
    path = write_config(tmp_path / "config.yaml", {"CV": {"box_prob": 0.1, "blur_prob": 0.3}})
    (tmp_path / ".env").write_text("TEXT_IMAGE_GENERATOR_CV__BOX_PROB=0.4\n", encoding="utf-8")
    monkeypatch.delenv("TEXT_IMAGE_GENERATOR_CV__BOX_PROB", raising=False)
    monkeypatch.chdir(tmp_path)

    config = load_config(path)
    assert config.cv.box_prob == 0.4
    assert config.cv.blur_prob == 0.3


def test_environment_overrides_dotenv(tmp_path, monkeypatch):
    path = write_config(tmp_path / "config.yaml", {"CV": {"box_prob": 0.1}})
    (tmp_path / ".env").write_text("TEXT_IMAGE_GENERATOR_CV__BOX_PROB=0.4\n", encoding="utf-8")
    monkeypatch.setenv("TEXT_IMAGE_GENERATOR_CV__BOX_PROB", "0.9")
    monkeypatch.chdir(tmp_path)

    assert load_config(path).cv.box_prob == 0.9


def test_default_background_dir_is_anchored(tmp_path, monkeypatch):
    """The shipped file leaves the background directory to the schema default."""
    monkeypatch.chdir(tmp_path)
    assert load_config().merge.bg_dir == BACKGROUND_DIR


def test_invalid_distribution_code(tmp_path):
    path = write_config(tmp_path / "config.yaml", {"CV": {"blur_sigma": [0, 1, "x"]}})
    with pytest.raises(ValidationError):
        load_config(path)


@pytest.mark.parametrize("field", ["box_prob", "perspective_prob", "blur_prob", "filter_prob"])
def test_probabilities_are_bounded(field):
    with pytest.raises(ValidationError):
        CvConfig(**{field: 1.5})
    with pytest.raises(ValidationError):
        CvConfig(**{field: -0.1})


def test_height_diff_lower_bound():
    with pytest.raises(ValidationError):
        MergeConfig(height_diff=1)


def test_target_size():
    assert OutputConfig(target_size="320,32").target_size == (320, 32)
    assert OutputConfig(target_size=[100, 16]).target_size == (100, 16)
    with pytest.raises(ValidationError):
        OutputConfig(target_size="320")
