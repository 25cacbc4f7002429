"""A pool of pre-cropped grayscale background images.

Background images are loaded once from a directory, converted to grayscale,
upscaled when they are smaller than the requested size and cropped at a random
position. The pool then serves copies of these crops by index or at random.
"""

import math
from pathlib import Path

import numpy as np
from loguru import logger
from PIL import Image, UnidentifiedImageError

from text_image_generator.exceptions import DimensionMismatch, EmptyResourcePool
from text_image_generator.utils import as_gray_image, get_rng, list_image_files, resize


def fit_and_crop(image, height, width, rng):
    """Upscales an image to cover `(height, width)` if needed and crops it randomly.

    Args:
        image (np.ndarray): A grayscale image.
        height (int): The crop height.
        width (int): The crop width.
        rng (np.random.Generator): The random source for the crop position.

    Returns:
        np.ndarray: A `(height, width)` crop of the image.
    """
    origin_height, origin_width = image.shape
    if origin_width < width or origin_height < height:
        scale = max(width / origin_width, height / origin_height)
        image = resize(
            image,
            max(math.ceil(origin_width * scale), width),
            max(math.ceil(origin_height * scale), height),
            Image.Resampling.BICUBIC,
        )

    resize_height, resize_width = image.shape
    x = int(rng.integers(0, resize_width - width + 1))
    y = int(rng.integers(0, resize_height - height + 1))
    return image[y:y + height, x:x + width].copy()


class BackgroundPool:
    """Holds a fixed set of background crops of one size.

    Attributes:
        height (int): The height of every background.
        width (int): The width of every background.
        bg_dir (Path | None): The directory the backgrounds were loaded from.
    """

    def __init__(self, bg_dir, height, width, rng=None):
        """Loads and crops every background image of a directory.

        Files that cannot be decoded are skipped with a warning.

        Args:
            bg_dir (str or Path): The directory containing background images.
            height (int): The background height.
            width (int): The background width.
            rng (np.random.Generator, optional): The random source for the
                crop positions.

        Raises:
            FileNotFoundError: If the directory does not exist.
            EmptyResourcePool: If no usable image was found.
        """
        rng = get_rng(rng)
        self.bg_dir = Path(bg_dir)
        logger.info(f"Loading background images from {self.bg_dir}")

        images = []
        for path in list_image_files(self.bg_dir):
            try:
                with Image.open(path) as img:
                    gray = np.array(img.convert("L"))
            except (UnidentifiedImageError, OSError) as e:
                logger.warning(f"Skipping unreadable background image {path}: {e}")
                continue
            images.append(fit_and_crop(gray, height, width, rng))

        self._init_images(images, height, width)
        logger.info(f"Loaded {len(self)} background images of size {width}x{height}")

    @classmethod
    def from_images(cls, images, height, width, rng=None):
        """Builds a pool from in-memory images instead of a directory."""
        rng = get_rng(rng)
        pool = cls.__new__(cls)
        pool.bg_dir = None
        pool._init_images([fit_and_crop(as_gray_image(img), height, width, rng) for img in images], height, width)
        return pool

    def _init_images(self, images, height, width):
        if not images:
            raise EmptyResourcePool("No background image exists")
        for img in images:
            if img.shape != (height, width):
                raise DimensionMismatch(f"background of shape {img.shape} does not match {(height, width)}")
        self._images = images
        self.height = height
        self.width = width

    def __len__(self):
        return len(self._images)

    def get(self, index):
        """Returns a copy of the background at `index`.

        Raises:
            IndexError: If `index` is out of range.
        """
        if not 0 <= index < len(self):
            raise IndexError(f"index out of range: current index: {index}, but total length is {len(self)}")
        return self._images[index].copy()

    __getitem__ = get

    def random(self, rng=None):
        """Returns a copy of a uniformly chosen background."""
        rng = get_rng(rng)
        return self.get(int(rng.integers(0, len(self))))
