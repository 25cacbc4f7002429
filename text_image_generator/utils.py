"""Helper functions shared by the synthesis modules.

This module provides conversions between raw buffers and image arrays,
grayscale normalization, Pillow-based resizing and small helpers around
`numpy.random.Generator`, which is threaded explicitly through every
sampling call of the pipeline.
"""

from pathlib import Path

import cv2
import numpy as np
from PIL import Image

from text_image_generator.exceptions import DimensionMismatch

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg")


def get_rng(rng=None):
    """Returns a `numpy.random.Generator`.

    Args:
        rng (np.random.Generator | int | None): An existing generator, which
            is returned as is, a seed, or None for a freshly seeded generator.

    Returns:
        np.random.Generator: The generator to draw samples from.
    """
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def random_int(rng, a, b):
    """Draws an integer uniformly from the closed range between `a` and `b`.

    The bounds may be given in either order.
    """
    low, high = (a, b) if a <= b else (b, a)
    return int(rng.integers(low, high + 1))


def image_from_buffer(buffer, width, height, channels=1):
    """Wraps a raw byte buffer into an image array.

    Args:
        buffer (bytes | bytearray | np.ndarray): Row-major 8-bit samples.
        width (int): The declared image width.
        height (int): The declared image height.
        channels (int): 1 for grayscale, 3 for RGB.

    Returns:
        np.ndarray: A new `uint8` array of shape `(height, width)` or
        `(height, width, channels)`.

    Raises:
        DimensionMismatch: If the buffer length does not match the declared
            dimensions.
    """
    data = np.frombuffer(bytes(buffer), dtype=np.uint8) if not isinstance(buffer, np.ndarray) else buffer.ravel()
    expected = width * height * channels
    if width <= 0 or height <= 0 or data.size != expected:
        raise DimensionMismatch(
            f"buffer holds {data.size} samples, but {width}x{height}x{channels} = {expected} were declared"
        )
    shape = (height, width) if channels == 1 else (height, width, channels)
    return data.astype(np.uint8).reshape(shape).copy()


def as_gray_image(image):
    """Returns a grayscale `uint8` copy of an image.

    RGB and RGBA inputs are converted with the usual luma weights, values of
    other dtypes are clipped to [0, 255].

    Raises:
        DimensionMismatch: If the array is not a non-empty 2D image or a 3D
            image with 1, 3 or 4 channels.
    """
    image = np.asarray(image)
    if image.ndim == 3 and image.shape[2] == 1:
        image = image[:, :, 0]
    if image.ndim not in (2, 3) or image.size == 0:
        raise DimensionMismatch(f"expected a non-empty 2D or 3D image, got shape {image.shape}")
    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)
    if image.ndim == 3:
        if image.shape[2] == 3:
            return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
        raise DimensionMismatch(f"unsupported number of channels: {image.shape[2]}")
    return image.copy()


def resize(image, width, height, resample=Image.Resampling.BILINEAR):
    """Resizes a grayscale image with Pillow.

    Pillow's bilinear filter is a triangle filter whose support grows with the
    downscaling factor, so it also averages properly when shrinking.

    Args:
        image (np.ndarray): A 2D `uint8` image.
        width (int): The target width.
        height (int): The target height.
        resample (Image.Resampling): The Pillow resampling filter.

    Returns:
        np.ndarray: The resized image.
    """
    width, height = max(1, int(width)), max(1, int(height))
    if image.shape[1] == width and image.shape[0] == height:
        return image.copy()
    return np.array(Image.fromarray(image).resize((width, height), resample))


def list_image_files(directory):
    """Lists the image files of a directory in a stable order.

    Raises:
        FileNotFoundError: If the directory does not exist.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"image directory does not exist: {directory}")
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS)
