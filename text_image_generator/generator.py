"""Core component turning rendered text into synthetic training images.

This module defines the `Generator` class, which wires together the effect
pipeline, the background pool and the composer described by a
`GeneratorConfig`. Given a crisp rendered text raster, it degrades it, picks a
background and blends both into an image that looks like photographed text.
"""

import albumentations as A
import cv2
from loguru import logger

from text_image_generator.backgrounds import BackgroundPool
from text_image_generator.composer import Composer
from text_image_generator.config import load_config
from text_image_generator.effects import EffectPipeline
from text_image_generator.utils import as_gray_image, get_rng


class Generator:
    """Generates synthetic text images from rendered text rasters.

    Attributes:
        config (GeneratorConfig): The configuration the generator was built from.
        cv_util (EffectPipeline): The degradations applied to rendered text.
        merge_util (Composer): The background compositing.
        bg_factory (BackgroundPool): The backgrounds to blend into.
        target_size (tuple[int, int] | None): The (width, height) of the final
            images, or None to keep the background size.
    """

    def __init__(self, config=None, rng=None, background_pool=None):
        """Initializes the Generator.

        Args:
            config (GeneratorConfig, optional): The configuration. The default
                `config.yaml` is loaded when omitted.
            rng (np.random.Generator | int, optional): The random source used
                for background cropping and as a default for `process`.
            background_pool (BackgroundPool, optional): A ready pool to use
                instead of loading `config.merge.bg_dir`.
        """
        self.config = config if config is not None else load_config()
        self.rng = get_rng(rng)

        self.cv_util = EffectPipeline.from_config(self.config.cv)
        self.merge_util = Composer.from_config(self.config.merge)
        self.cv_util.check_filter_probs()

        if background_pool is None:
            merge = self.config.merge
            background_pool = BackgroundPool(merge.bg_dir, merge.bg_height, merge.bg_width, rng=self.rng)
        self.bg_factory = background_pool
        self.target_size = self.config.output.target_size
        logger.info(f"Generator ready with {len(self.bg_factory)} backgrounds")

    def set_bg_size(self, height, width):
        """Reloads the background pool with crops of a new size."""
        bg_dir = self.bg_factory.bg_dir if self.bg_factory.bg_dir is not None else self.config.merge.bg_dir
        self.bg_factory = BackgroundPool(bg_dir, height, width, rng=self.rng)

    def process(self, image, apply_effect=True, rng=None):
        """Generates one synthetic sample from a rendered text image.

        Args:
            image (np.ndarray): The rendered text, dark on light, as a
                grayscale or RGB array.
            apply_effect (bool): Whether to degrade the text and blend it into
                a background. Without it, a copy of the input is returned.
            rng (np.random.Generator, optional): The random source. Defaults to
                the generator's own.

        Returns:
            np.ndarray: The final image. It is grayscale and sized like the
            backgrounds (or `target_size`) when `apply_effect` is set.
        """
        if not apply_effect:
            return image.copy()

        rng = get_rng(rng) if rng is not None else self.rng
        font_img = self.cv_util.apply(as_gray_image(image), rng)
        bg_img = self.bg_factory.random(rng)
        merged = self.merge_util.poisson_edit(font_img, bg_img, rng)

        if self.target_size:
            width, height = self.target_size
            merged = A.Resize(height=height, width=width, interpolation=cv2.INTER_LANCZOS4)(image=merged)["image"]

        return merged
