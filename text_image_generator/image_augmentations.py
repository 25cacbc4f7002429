"""Image degradation functions for the synthetic data generator.

This module provides the individual visual degradations applied to a rendered
text raster before it is blended onto a background. They simulate real-world
capture conditions such as camera angle, out-of-focus text, small text that
has been enlarged, and ruling lines or frames around the text.

All functions take a grayscale `uint8` array and return a new one.
"""

import math

import cv2
import numpy as np
from scipy.ndimage import gaussian_filter

from text_image_generator.exceptions import InvalidConfiguration, SingularTransform
from text_image_generator.geometry import build_projection
from text_image_generator.utils import as_gray_image, resize

SHARP_KERNEL = np.array([-1, -1, -1, -1, 9, -1, -1, -1, -1], dtype=np.float32).reshape(3, 3)
EMBOSS_KERNEL = np.array([-2, -1, 0, -1, 1, 1, 0, 1, 2], dtype=np.float32).reshape(3, 3)

WARP_SCALE = 1.0
WARP_FOVY = 50.0

BOX_COLOR_RANGE = (50, 255)
BOX_THICKNESS = (1, 2)


def gaussian_blur(image, sigma):
    """Applies a separable Gaussian blur to an image.

    Args:
        image (np.ndarray): The input grayscale image.
        sigma (float): The standard deviation of the Gaussian kernel. Values
            less than or equal to zero leave the image untouched.

    Returns:
        np.ndarray: The blurred image.
    """
    image = as_gray_image(image)
    if sigma <= 0:
        return image
    blurred = gaussian_filter(image.astype(np.float64), sigma=sigma, mode="nearest")
    return np.clip(np.rint(blurred), 0, 255).astype(np.uint8)


def _filter3x3(image, kernel):
    return cv2.filter2D(as_gray_image(image), -1, kernel, borderType=cv2.BORDER_REPLICATE)


def apply_emboss(image):
    """Applies the directional emboss kernel."""
    return _filter3x3(image, EMBOSS_KERNEL)


def apply_sharp(image):
    """Applies the identity-boosted Laplacian sharpen kernel."""
    return _filter3x3(image, SHARP_KERNEL)


def apply_down_up(image, rng):
    """Downsamples the image and upsamples it back to its original size.

    This simulates small text that has been captured at a low resolution and
    enlarged afterwards.

    Args:
        image (np.ndarray): The input grayscale image.
        rng (np.random.Generator): The random source for the scale factor,
            which is drawn from [1, 2].

    Returns:
        np.ndarray: The degraded image, with the same shape as the input.
    """
    image = as_gray_image(image)
    height, width = image.shape
    scale = rng.uniform(1.0, 2.0)
    reduced = resize(image, int(width / scale), int(height / scale))
    return resize(reduced, width, height)


def _rectangle(canvas, left, top, right, bottom, color, thickness):
    # Each edge is a band of `thickness` pixels starting on the edge line,
    # clipped by the canvas bounds.
    canvas[top:top + thickness, left:right + 1] = color
    canvas[bottom:bottom + thickness, left:right + 1] = color
    canvas[top:bottom + 1, left:left + thickness] = color
    canvas[top:bottom + 1, right:right + thickness] = color


def draw_box(image, alpha, rng):
    """Draws the outline of an occluding box around the image content.

    The image is padded with black by a factor of `alpha`, placed at a random
    position, and a rectangle outline enclosing the original content is
    stroked around it with a random gray value and thickness. The result is
    resized back to the original dimensions.

    Args:
        image (np.ndarray): The input grayscale image.
        alpha (float): The padding factor, must be at least 1.
        rng (np.random.Generator): The random source.

    Returns:
        np.ndarray: The image with a box outline, with the same shape as the
        input.

    Raises:
        InvalidConfiguration: If `alpha` is smaller than 1.
    """
    if not alpha >= 1.0:
        raise InvalidConfiguration(f"alpha should be greater than 1.0, got {alpha}")

    image = as_gray_image(image)
    height, width = image.shape
    pad_height = max(math.ceil(height * alpha), height + 1)
    pad_width = max(math.ceil(width * alpha), width + 1)

    top = int(rng.integers(1, pad_height - height + 1))
    left = int(rng.integers(1, pad_width - width + 1))

    padded = np.zeros((pad_height, pad_width), dtype=np.uint8)
    padded[top:top + height, left:left + width] = image

    box_left = int(rng.integers(1, left + 1))
    box_top = int(rng.integers(1, top + 1))
    box_width = int(rng.integers(width + left - box_left, pad_width - box_left + 1))
    box_height = int(rng.integers(height + top - box_top, pad_height - box_top + 1))

    color = int(rng.integers(BOX_COLOR_RANGE[0], BOX_COLOR_RANGE[1] + 1))
    thickness = int(rng.choice(BOX_THICKNESS))

    _rectangle(
        padded,
        box_left,
        box_top,
        box_left + box_width - 1,
        box_top + box_height - 1,
        color,
        thickness,
    )

    return resize(padded, width, height)


def warp_perspective(image, rotate_angle):
    """Applies a perspective transform and crops the transformed text area.

    The image is warped into a square canvas as if the camera was rotated by
    `rotate_angle`, cropped to the bounding box of its projected corners and
    scaled so that neither dimension exceeds the original one.

    Args:
        image (np.ndarray): The input grayscale image.
        rotate_angle (tuple[float, float, float]): Rotations around the x, y
            and z axes, in degrees.

    Returns:
        np.ndarray: The warped image.

    Raises:
        SingularTransform: If the rotation leads to a degenerate projection.
    """
    image = as_gray_image(image)
    raw_height, raw_width = image.shape

    transform_mat, side_length, _, points_out = build_projection(
        raw_width, raw_height, rotate_angle, WARP_SCALE, WARP_FOVY
    )
    side_length = math.ceil(side_length)

    warped = cv2.warpPerspective(
        image,
        transform_mat,
        (side_length, side_length),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=0,
    )

    min_x, min_y = np.floor(points_out.min(axis=0)).astype(int)
    max_x, max_y = np.ceil(points_out.max(axis=0)).astype(int)
    crop = warped[max(min_y, 0):max_y + 1, max(min_x, 0):max_x + 1]
    if crop.size == 0:
        raise SingularTransform(f"rotation {rotate_angle} leaves no visible area")

    new_height, new_width = crop.shape
    resize_width = math.ceil(new_width * raw_height / new_height)
    resize_height = raw_height
    if resize_width > raw_width:
        resize_width = raw_width
        resize_height = math.ceil(new_height * raw_width / new_width)

    return resize(crop, resize_width, resize_height)
