"""Handles loading and validation of the generator configuration.

This module provides the `load_config` function, which reads a YAML file,
normalizes its section names and validates it with the Pydantic schemas
defined in `schemas.py`.
"""

from pathlib import Path

import yaml

from text_image_generator.config.schemas import CvConfig, GeneratorConfig, MergeConfig, OutputConfig
from text_image_generator.env import CONFIG_PATH

__all__ = ["CvConfig", "GeneratorConfig", "MergeConfig", "OutputConfig", "load_config", "CONFIG_PATH"]


def load_config(config_path: Path = CONFIG_PATH) -> GeneratorConfig:
    """Loads a YAML configuration file and merges it with environment variables.

    The layering is as follows, with later sources overriding earlier ones:

    1.  Default values defined in the Pydantic schemas.
    2.  Values from the specified YAML configuration file. Section names are
        case-insensitive (`CV` and `cv` are the same section).
    3.  Values from environment variables prefixed with
        `TEXT_IMAGE_GENERATOR_`, or from a `.env` file.

    Args:
        config_path (Path): The path to the YAML configuration file.

    Returns:
        A validated `GeneratorConfig`.
    """
    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    config_dict = {str(key).lower(): value for key, value in config_dict.items()}
    # the renderer's section is not part of the synthesis pipeline
    config_dict.pop("font", None)

    return GeneratorConfig(**config_dict)
