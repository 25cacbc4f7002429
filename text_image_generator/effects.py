"""Probability-gated visual degradations of rendered text.

This module defines the `EffectPipeline` class, which runs a fixed sequence of
independent degradations (occlusion box, perspective warp, Gaussian blur and
an optional emboss or sharpen filter) over a rendered text raster. Each stage
is applied with its own configured probability, drawn fresh on every call.
"""

import math

from loguru import logger

from text_image_generator.exceptions import InvalidConfiguration
from text_image_generator.image_augmentations import (
    apply_emboss,
    apply_sharp,
    draw_box,
    gaussian_blur,
    warp_perspective,
)
from text_image_generator.random_variable import RandomVariable
from text_image_generator.utils import as_gray_image, get_rng

BOX_PADDING_ALPHA = 1.3


class EffectPipeline:
    """Applies random degradations according to configured probabilities.

    Attributes:
        box_prob (float): Probability of drawing an occlusion box.
        perspective_prob (float): Probability of a perspective warp.
        perspective_x (RandomVariable): Rotation around the x axis, in degrees.
        perspective_y (RandomVariable): Rotation around the y axis, in degrees.
        perspective_z (RandomVariable): Rotation around the z axis, in degrees.
        blur_prob (float): Probability of a Gaussian blur.
        blur_sigma (RandomVariable): The sigma of the Gaussian blur.
        filter_prob (float): Probability of an emboss or sharpen filter once
            the image has been blurred.
        emboss_prob (float): Probability of choosing emboss over sharpen.
        sharp_prob (float): Probability of choosing sharpen over emboss.
    """

    def __init__(
        self,
        box_prob=0.1,
        perspective_prob=0.2,
        perspective_x=None,
        perspective_y=None,
        perspective_z=None,
        blur_prob=0.1,
        blur_sigma=None,
        filter_prob=0.01,
        emboss_prob=0.4,
        sharp_prob=0.6,
    ):
        self.box_prob = box_prob
        self.perspective_prob = perspective_prob
        self.perspective_x = perspective_x or RandomVariable.gaussian(-15.0, 15.0)
        self.perspective_y = perspective_y or RandomVariable.gaussian(-15.0, 15.0)
        self.perspective_z = perspective_z or RandomVariable.gaussian(-3.0, 3.0)
        self.blur_prob = blur_prob
        self.blur_sigma = blur_sigma or RandomVariable.uniform(0.0, 1.5)
        self.filter_prob = filter_prob
        self.emboss_prob = emboss_prob
        self.sharp_prob = sharp_prob

    @classmethod
    def from_config(cls, cv_config):
        """Creates a pipeline from the `CV` section of the configuration."""
        return cls(**{name: getattr(cv_config, name) for name in type(cv_config).model_fields})

    def check_filter_probs(self):
        """Raises `InvalidConfiguration` unless emboss and sharp probabilities sum to 1."""
        if not math.isclose(self.emboss_prob + self.sharp_prob, 1.0, abs_tol=1e-9):
            raise InvalidConfiguration(
                "emboss probability plus sharp probability should be equal to 1.0, "
                f"got {self.emboss_prob} + {self.sharp_prob}"
            )

    def sample_rotate_angle(self, rng):
        return (
            self.perspective_x.sample(rng),
            self.perspective_y.sample(rng),
            self.perspective_z.sample(rng),
        )

    def apply(self, image, rng=None):
        """Randomly applies the configured effects to an image.

        Args:
            image (np.ndarray): The rendered text as a grayscale (or RGB,
                which is converted) image.
            rng (np.random.Generator, optional): The random source. A fresh
                generator is used when omitted.

        Returns:
            np.ndarray: The resulting grayscale image. The perspective warp is
            the only stage that may change its dimensions.

        Raises:
            InvalidConfiguration: If the emboss and sharp probabilities do not
                sum to 1.
            SingularTransform: If the sampled rotation is degenerate.
        """
        self.check_filter_probs()
        rng = get_rng(rng)
        img = as_gray_image(image)

        if rng.random() < self.box_prob:
            img = draw_box(img, BOX_PADDING_ALPHA, rng)

        if rng.random() < self.perspective_prob:
            rotate_angle = self.sample_rotate_angle(rng)
            logger.debug(f"Warping perspective with angles {rotate_angle}")
            img = warp_perspective(img, rotate_angle)

        if rng.random() < self.blur_prob:
            img = gaussian_blur(img, self.blur_sigma.sample(rng))
            if rng.random() < self.filter_prob:
                if rng.random() < self.emboss_prob:
                    img = apply_emboss(img)
                else:
                    img = apply_sharp(img)

        return img

    __call__ = apply
