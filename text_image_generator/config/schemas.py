"""Pydantic schemas for type-safe generator configuration.

This module defines the data structures for the generator configuration using
Pydantic models. Each class corresponds to a section of the `config.yaml`
file: `CV` holds the probabilities and distributions of the effect pipeline,
`MERGE` those of the background compositing, and `OUTPUT` the optional final
resize. A `FONT` section, used by the text renderer, is accepted and ignored.
"""

from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from text_image_generator.env import BACKGROUND_DIR
from text_image_generator.random_variable import RandomVariable


class CvConfig(BaseModel):
    """Configuration of the effect pipeline applied to rendered text."""

    box_prob: float = Field(0.1, ge=0.0, le=1.0, description="The probability of drawing an occlusion box.")
    perspective_prob: float = Field(0.2, ge=0.0, le=1.0, description="The probability of a perspective warp.")
    perspective_x: RandomVariable = Field(
        default_factory=lambda: RandomVariable.gaussian(-15.0, 15.0),
        description="The rotation around the x axis, in degrees.",
    )
    perspective_y: RandomVariable = Field(
        default_factory=lambda: RandomVariable.gaussian(-15.0, 15.0),
        description="The rotation around the y axis, in degrees.",
    )
    perspective_z: RandomVariable = Field(
        default_factory=lambda: RandomVariable.gaussian(-3.0, 3.0),
        description="The rotation around the z axis, in degrees.",
    )
    blur_prob: float = Field(0.1, ge=0.0, le=1.0, description="The probability of a Gaussian blur.")
    blur_sigma: RandomVariable = Field(
        default_factory=lambda: RandomVariable.uniform(0.0, 1.5),
        description="The sigma of the Gaussian blur.",
    )
    filter_prob: float = Field(0.01, ge=0.0, le=1.0, description="The probability of an emboss or sharpen filter after a blur.")
    emboss_prob: float = Field(0.4, ge=0.0, le=1.0, description="The probability of choosing emboss over sharpen.")
    sharp_prob: float = Field(0.6, ge=0.0, le=1.0, description="The probability of choosing sharpen over emboss.")


class MergeConfig(BaseModel):
    """Configuration of the background pool and the Poisson compositing."""

    bg_dir: Path = Field(BACKGROUND_DIR, description="The directory containing background images.")
    bg_height: int = Field(64, gt=0, description="The height of the background crops.")
    bg_width: int = Field(1000, gt=0, description="The width of the background crops.")
    height_diff: float = Field(
        10.0,
        ge=2.0,
        description="The upper bound of the uniform [2, height_diff] pixel gap between text and background height.",
    )
    bg_alpha: RandomVariable = Field(
        default_factory=lambda: RandomVariable.gaussian(0.5, 1.5),
        description="The contrast factor of the background tone jitter.",
    )
    bg_beta: RandomVariable = Field(
        default_factory=lambda: RandomVariable.gaussian(-50.0, 50.0),
        description="The brightness offset of the background tone jitter.",
    )
    font_alpha: RandomVariable = Field(
        default_factory=lambda: RandomVariable.uniform(0.2, 1.0),
        description="The strength of the text ink in the blending guidance field.",
    )
    reverse_prob: float = Field(0.5, ge=0.0, le=1.0, description="The probability of inverting the final image.")


class OutputConfig(BaseModel):
    """Configuration of the final output image."""

    target_size: Optional[Tuple[int, int]] = Field(
        None, description="If set, the (width, height) every generated image is resized to."
    )

    @field_validator("target_size", mode="before")
    @classmethod
    def parse_target_size(cls, v):
        """Accepts a `"width,height"` string besides a sequence of two integers."""
        if isinstance(v, str):
            return tuple(int(part) for part in v.split(","))
        return v


class GeneratorConfig(BaseSettings):
    """The root configuration object of the generator.

    This class inherits from `pydantic_settings.BaseSettings`, so every value
    can also be overridden with environment variables, e.g.
    `TEXT_IMAGE_GENERATOR_CV__BOX_PROB=0.5`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="TEXT_IMAGE_GENERATOR_",
        env_nested_delimiter="__",
    )

    cv: CvConfig = Field(default_factory=CvConfig, description="The effect pipeline configuration.")
    merge: MergeConfig = Field(default_factory=MergeConfig, description="The compositing configuration.")
    output: OutputConfig = Field(default_factory=OutputConfig, description="The output configuration.")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Define the priority of configuration sources.

        Environment variables, then `.env` values, override the values read
        from the YAML file, which are passed in as init arguments by
        `load_config`.
        """
        return (
            env_settings,
            dotenv_settings,
            init_settings,
            file_secret_settings,
        )
