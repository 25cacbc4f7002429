"""Poisson image editing (gradient-domain seamless blending).

The blend reconstructs the masked region of a target image from the region's
boundary values and a guidance gradient field mixed from a source and the
target itself. The discrete Poisson equation is relaxed with Jacobi sweeps:
every masked pixel is replaced by the average of its four neighbours plus a
quarter of its guidance divergence, while unmasked pixels act as a fixed
(Dirichlet) boundary.

This follows the NumPy solver of Fast-Poisson-Image-Editing
(https://github.com/Trinkle23897/Fast-Poisson-Image-Editing).
"""

from enum import Enum

import numpy as np

from text_image_generator.exceptions import DimensionMismatch

MASK_THRESHOLD = 128


class GradientMode(Enum):
    """How source and target gradients are combined into the guidance field."""

    MAXIMUM = "maximum"
    """Keep whichever gradient has the larger magnitude."""

    SOURCE = "source"
    """Always use the source gradient (classic seamless cloning)."""

    AVERAGE = "average"
    """Use the arithmetic mean of both gradients."""


def mix_gradient(source_grad, target_grad, mode):
    """Combines two gradient arrays elementwise according to `mode`."""
    if mode is GradientMode.AVERAGE:
        return (source_grad + target_grad) / 2.0
    if mode is GradientMode.SOURCE:
        return source_grad.copy()
    return np.where(np.abs(source_grad) >= np.abs(target_grad), source_grad, target_grad)


def grid_iter(grad, target):
    """Adds the four zero-padded neighbours of `target` to `grad`.

    Cells on the matrix edge get fewer terms; there is no wraparound.
    """
    result = np.array(grad, dtype=np.float64, copy=True)
    result[1:] += target[:-1]
    result[:-1] += target[1:]
    result[:, 1:] += target[:, :-1]
    result[:, :-1] += target[:, 1:]
    return result


def build_gradient(source, target, mode=GradientMode.AVERAGE):
    """Builds the mixed divergence field of `source` and `target`.

    For each of the four neighbour directions the difference between a pixel
    and its neighbour is computed on both images, mixed according to `mode`,
    and summed.

    Args:
        source (np.ndarray): The source image as a float array.
        target (np.ndarray): The target image as a float array.
        mode (GradientMode): The gradient mixing policy.

    Returns:
        np.ndarray: The unmasked gradient field, shaped like the inputs.
    """
    if source.shape != target.shape:
        raise DimensionMismatch(f"source {source.shape} and target {target.shape} differ in shape")
    source = source.astype(np.float64)
    target = target.astype(np.float64)
    grad = np.zeros(source.shape, dtype=np.float64)
    grad[1:] += mix_gradient(source[1:] - source[:-1], target[1:] - target[:-1], mode)
    grad[:-1] += mix_gradient(source[:-1] - source[1:], target[:-1] - target[1:], mode)
    grad[:, 1:] += mix_gradient(source[:, 1:] - source[:, :-1], target[:, 1:] - target[:, :-1], mode)
    grad[:, :-1] += mix_gradient(source[:, :-1] - source[:, 1:], target[:, :-1] - target[:, 1:], mode)
    return grad


class Solver:
    """Jacobi relaxation of the discrete Poisson equation.

    Creating a solver performs one warm-start sweep; `step` then runs a caller
    chosen number of further sweeps. The iteration count is never driven by
    the residual, which is only reported.

    Attributes:
        mask (np.ndarray): 1.0 where the pixel is solved for, 0.0 elsewhere.
        mask_not (np.ndarray): The complement of `mask`.
        target (np.ndarray): The current estimate, updated in place.
        grad (np.ndarray): The constant guidance divergence field.
    """

    def __init__(self, mask, target, grad):
        mask = np.asarray(mask, dtype=np.float64)
        target = np.asarray(target, dtype=np.float64)
        grad = np.asarray(grad, dtype=np.float64)
        if not (mask.shape == target.shape == grad.shape) or mask.ndim != 2:
            raise DimensionMismatch(
                f"mask {mask.shape}, target {target.shape} and gradient {grad.shape} must share one 2D shape"
            )

        self.mask = mask
        self.mask_not = 1.0 - mask
        self.bool_mask = mask > 0
        self.target = target.copy()
        self.grad = grad.copy()

        self._sweep()

    def _sweep(self):
        tmp = grid_iter(self.grad, self.target)
        self.target[self.bool_mask] = tmp[self.bool_mask] / 4.0

    def residual(self):
        """Returns the L1 norm of the Poisson equation imbalance inside the mask."""
        tmp = 4.0 * self.target - self.grad
        tmp[1:] -= self.target[:-1]
        tmp[:-1] -= self.target[1:]
        tmp[:, 1:] -= self.target[:, :-1]
        tmp[:, :-1] -= self.target[:, 1:]
        return float(np.abs(tmp * self.mask).sum())

    def step(self, iterations):
        """Runs `iterations` relaxation sweeps.

        Returns:
            tuple[np.ndarray, float]: The estimate clamped to [0, 255] as a
            `uint8` array, and the residual error after the last sweep.
        """
        for _ in range(iterations):
            self._sweep()
        return np.clip(self.target, 0, 255).astype(np.uint8), self.residual()


def get_border(mask):
    """Finds the tight bounding box of the nonzero entries of `mask`.

    Returns:
        tuple[int, int, int, int] | None: `(x0, y0, x1, y1)` with inclusive
        bounds, or None for an empty mask.
    """
    columns = np.flatnonzero(mask.any(axis=0))
    rows = np.flatnonzero(mask.any(axis=1))
    if columns.size == 0 or rows.size == 0:
        return None
    return int(columns[0]), int(rows[0]), int(columns[-1]), int(rows[-1])


class Processor:
    """Blends a source image into a target image inside a mask.

    The mask is binarized, its outermost rows and columns are cleared so the
    solved region never touches the image edge, and only the mask's bounding
    box (grown by one pixel) is handed to the `Solver`. The solved crop is
    written back into the full target on every `step`.

    Args:
        source (np.ndarray): The grayscale source image.
        mask (np.ndarray): The grayscale mask image; pixels at or above
            `mask_threshold` are solved for.
        target (np.ndarray): The grayscale target (background) image.
        mask_on_source (tuple[int, int]): The (x, y) position of the mask on
            the source image.
        mask_on_target (tuple[int, int]): The (x, y) position of the mask on
            the target image.
        gradient (GradientMode): The gradient mixing policy.
        mask_threshold (int): The binarization threshold of the mask.
    """

    def __init__(
        self,
        source,
        mask,
        target,
        mask_on_source=(0, 0),
        mask_on_target=(0, 0),
        gradient=GradientMode.AVERAGE,
        mask_threshold=MASK_THRESHOLD,
    ):
        source = np.asarray(source, dtype=np.float64)
        target = np.asarray(target)
        mask = (np.asarray(mask) >= mask_threshold).astype(np.float64)
        if source.ndim != 2 or target.ndim != 2 or mask.ndim != 2:
            raise DimensionMismatch("source, mask and target must all be 2D grayscale images")

        mask[0] = 0
        mask[-1] = 0
        mask[:, 0] = 0
        mask[:, -1] = 0

        self.target = np.clip(target, 0, 255).astype(np.uint8)
        self.solver = None
        self.target_cord = None

        border = get_border(mask)
        if border is None:
            return

        x0, y0, x1, y1 = border
        x0, y0, x1, y1 = x0 - 1, y0 - 1, x1 + 2, y1 + 2
        mask = mask[y0:y1, x0:x1]

        source_x, source_y = mask_on_source
        target_x, target_y = mask_on_target
        source_crop = source[source_y + y0:source_y + y1, source_x + x0:source_x + x1]
        target_crop = target[target_y + y0:target_y + y1, target_x + x0:target_x + x1].astype(np.float64)
        if source_crop.shape != mask.shape or target_crop.shape != mask.shape:
            raise DimensionMismatch(
                f"mask region {mask.shape} does not fit inside source {source.shape} "
                f"at {mask_on_source} or target {target.shape} at {mask_on_target}"
            )

        grad = build_gradient(source_crop, target_crop, gradient) * mask

        self.target_cord = (target_x + x0, target_x + x1, target_y + y0, target_y + y1)
        self.solver = Solver(mask, target_crop, grad)

    def step(self, iterations):
        """Runs the solver and returns the full blended image and residual.

        With an empty mask the target is returned unchanged with a residual
        of zero.
        """
        if self.solver is None:
            return self.target.copy(), 0.0

        result, err = self.solver.step(iterations)
        x0, x1, y0, y1 = self.target_cord
        self.target[y0:y1, x0:x1] = result
        return self.target.copy(), err
