"""Handles the composition of text images onto backgrounds.

This module defines the `Composer` class, which is responsible for taking a
(possibly degraded) rendered text image and blending it into a background
image. The composition jitters the background tone to mimic ambient lighting,
places the text at a random position and scale, blends it with Poisson image
editing and optionally inverts the result to produce light-on-dark text.
"""

import numpy as np
from PIL import Image

from text_image_generator.poisson import GradientMode, Processor
from text_image_generator.random_variable import RandomVariable
from text_image_generator.utils import as_gray_image, get_rng, random_int, resize

BACKGROUND_RANGE = (50, 255)
POISSON_ITERATIONS = 500


class Composer:
    """Blends text images into backgrounds.

    Attributes:
        height_diff (RandomVariable): How many pixels shorter than the
            background the text is scaled to.
        bg_alpha (RandomVariable): Contrast factor of the background jitter.
        bg_beta (RandomVariable): Brightness offset of the background jitter.
        font_alpha (RandomVariable): Strength of the text ink in the guidance
            field.
        reverse_prob (float): Probability of inverting the final image.
    """

    def __init__(self, height_diff=None, bg_alpha=None, bg_beta=None, font_alpha=None, reverse_prob=0.5):
        self.height_diff = height_diff or RandomVariable.uniform(2.0, 10.0)
        self.bg_alpha = bg_alpha or RandomVariable.gaussian(0.5, 1.5)
        self.bg_beta = bg_beta or RandomVariable.gaussian(-50.0, 50.0)
        self.font_alpha = font_alpha or RandomVariable.uniform(0.2, 1.0)
        self.reverse_prob = reverse_prob

    @classmethod
    def from_config(cls, merge_config):
        """Creates a composer from the `MERGE` section of the configuration."""
        return cls(
            height_diff=RandomVariable.uniform(2.0, merge_config.height_diff),
            bg_alpha=merge_config.bg_alpha,
            bg_beta=merge_config.bg_beta,
            font_alpha=merge_config.font_alpha,
            reverse_prob=merge_config.reverse_prob,
        )

    def random_change_bgcolor(self, bg_img, rng=None, alpha=None, beta=None):
        """Randomly changes the tone of a background image.

        Every pixel becomes `clip(pixel * alpha + beta, 50, 255)`.

        Args:
            bg_img (np.ndarray): The grayscale background image.
            rng (np.random.Generator, optional): The random source.
            alpha (float, optional): The contrast factor. Sampled from
                `bg_alpha` when omitted.
            beta (float, optional): The brightness offset. Sampled from
                `bg_beta` when omitted.

        Returns:
            np.ndarray: The adjusted background image.
        """
        rng = get_rng(rng)
        bg_img = as_gray_image(bg_img)
        if alpha is None:
            alpha = self.bg_alpha.sample(rng)
        if beta is None:
            beta = self.bg_beta.sample(rng)
        adjusted = bg_img.astype(np.float64) * alpha + beta
        return np.clip(adjusted, *BACKGROUND_RANGE).astype(np.uint8)

    def random_pad(self, font_img, bg_height, bg_width, rng=None):
        """Scales the text image and pads it to the background size.

        The text is scaled to a height a few pixels smaller than the
        background, keeping its aspect ratio, and pasted at a random position
        onto a black canvas of exactly `(bg_height, bg_width)`, leaving at
        least one pixel of margin at the top.

        Args:
            font_img (np.ndarray): The grayscale text image.
            bg_height (int): The height of the background image.
            bg_width (int): The width of the background image.
            rng (np.random.Generator, optional): The random source.

        Returns:
            np.ndarray: The padded text image.
        """
        rng = get_rng(rng)
        font_img = as_gray_image(font_img)
        font_height, font_width = font_img.shape

        resize_height = min(max(int(bg_height - self.height_diff.sample(rng)), 1), bg_height)
        resize_width = min(max(int(font_width * resize_height / font_height), 1), bg_width)
        font_img = resize(font_img, resize_width, resize_height, Image.Resampling.BICUBIC)

        room = bg_height - resize_height
        top = random_int(rng, 1, room) if room >= 1 else 0
        left = random_int(rng, 0, bg_width - resize_width)

        padded_img = np.zeros((bg_height, bg_width), dtype=np.uint8)
        padded_img[top:top + resize_height, left:left + resize_width] = font_img
        return padded_img

    def poisson_edit(self, font_img, bg_img, rng=None, iterations=POISSON_ITERATIONS):
        """Merges a text image into a background with Poisson editing.

        Args:
            font_img (np.ndarray): The grayscale text image, dark ink on a
                light background.
            bg_img (np.ndarray): The grayscale background image.
            rng (np.random.Generator, optional): The random source.
            iterations (int): The number of relaxation sweeps.

        Returns:
            np.ndarray: The merged image, with the same shape as `bg_img`.
        """
        rng = get_rng(rng)
        bg_img = self.random_change_bgcolor(bg_img, rng)
        bg_height, bg_width = bg_img.shape
        padded_font_img = self.random_pad(font_img, bg_height, bg_width, rng)

        alpha = self.font_alpha.sample(rng)
        reversed_adjust_font_img = ((255.0 - padded_font_img) * alpha).astype(np.uint8)

        processor = Processor(
            reversed_adjust_font_img,
            padded_font_img,
            bg_img,
            gradient=GradientMode.MAXIMUM,
        )
        final_img, _ = processor.step(iterations)

        if rng.random() < self.reverse_prob:
            final_img = 255 - final_img

        return final_img

    __call__ = poisson_edit
