"""Projective geometry for simulated camera angles.

The functions here place the image as a plane in front of a virtual camera,
rotate that plane around the three axes, project its corners back onto the
image plane and solve for the homography that maps the original corners onto
the projected ones.

References:
    - https://stackoverflow.com/questions/17087446/how-to-calculate-perspective-transform-for-opencv-from-rotation-angles
    - https://docs.opencv.org/4.x/da/d54/group__imgproc__transform.html (getPerspectiveTransform)
"""

import math

import numpy as np

from text_image_generator.exceptions import DimensionMismatch, SingularTransform


def get_rotate_matrix(x, y, z):
    """Builds a 4x4 rotation matrix from angles in degrees.

    The result is `Rx @ Ry @ Rz`, i.e. the rotation around the z axis is
    applied to a point first.
    """
    x, y, z = np.radians([x, y, z])
    sin_x, cos_x = math.sin(x), math.cos(x)
    sin_y, cos_y = math.sin(y), math.cos(y)
    sin_z, cos_z = math.sin(z), math.cos(z)

    matrix_x = np.array([
        [1.0, 0.0, 0.0, 0.0],
        [0.0, cos_x, -sin_x, 0.0],
        [0.0, sin_x, cos_x, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])
    matrix_y = np.array([
        [cos_y, 0.0, sin_y, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [-sin_y, 0.0, cos_y, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])
    matrix_z = np.array([
        [cos_z, -sin_z, 0.0, 0.0],
        [sin_z, cos_z, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])
    return matrix_x @ matrix_y @ matrix_z


def perspective_transform(points, transform_mat):
    """Maps 3D points through a 4x4 matrix followed by the perspective divide.

    Args:
        points (np.ndarray): An `(n, 3)` array of points.
        transform_mat (np.ndarray): A `(4, 4)` transformation matrix.

    Returns:
        np.ndarray: The `(n, 3)` transformed points.
    """
    points = np.asarray(points, dtype=np.float64)
    homogeneous = np.hstack([points, np.ones((points.shape[0], 1))])
    mapped = homogeneous @ np.asarray(transform_mat, dtype=np.float64).T
    return mapped[:, :3] / mapped[:, 3:4]


def solve_homography(points_in, points_out):
    """Solves for the homography mapping four points onto four others.

    Each correspondence contributes the two rows of
    `x' = (ax + by + c) / (gx + hy + 1)` and `y' = (dx + ey + f) / (gx + hy + 1)`
    to an 8x8 linear system, which is solved through an LU decomposition.

    Args:
        points_in (np.ndarray): The `(4, 2)` source points.
        points_out (np.ndarray): The `(4, 2)` destination points.

    Returns:
        np.ndarray: The 3x3 homography with its bottom-right entry set to 1.

    Raises:
        DimensionMismatch: If either point set is not of shape `(4, 2)`.
        SingularTransform: If the correspondences are degenerate.
    """
    points_in = np.asarray(points_in, dtype=np.float64)
    points_out = np.asarray(points_out, dtype=np.float64)
    if points_in.shape != (4, 2) or points_out.shape != (4, 2):
        raise DimensionMismatch(
            f"expected two (4, 2) point sets, got {points_in.shape} and {points_out.shape}"
        )

    left = np.zeros((8, 8))
    right = np.zeros(8)
    for i, ((x, y), (u, v)) in enumerate(zip(points_in, points_out)):
        left[i] = [x, y, 1.0, 0.0, 0.0, 0.0, -x * u, -y * u]
        left[i + 4] = [0.0, 0.0, 0.0, x, y, 1.0, -x * v, -y * v]
        right[i] = u
        right[i + 4] = v

    try:
        solution = np.linalg.solve(left, right)
    except np.linalg.LinAlgError as e:
        raise SingularTransform(f"homography system has no solution: {e}") from e
    if not np.all(np.isfinite(solution)):
        raise SingularTransform("homography system produced non-finite coefficients")

    return np.append(solution, 1.0).reshape(3, 3)


def build_projection(width, height, rotate_angle=(0.0, 0.0, 0.0), scale=1.0, fovy=50.0):
    """Builds the homography simulating a rotated camera.

    Args:
        width (int): The image width.
        height (int): The image height.
        rotate_angle (tuple[float, float, float]): Rotations around the x, y
            and z axes, in degrees.
        scale (float): Scales the side length of the output canvas.
        fovy (float): The vertical field of view of the camera, in degrees.

    Returns:
        tuple: `(homography, side_length, points_in, points_out)`, where the
        homography maps source pixel coordinates into a square canvas of
        `side_length` pixels, `points_in` are the four source corners and
        `points_out` their positions on the canvas.
    """
    width, height = float(width), float(height)
    x, y, z = rotate_angle

    fovy_half = math.radians(fovy * 0.5)
    distance = math.hypot(width, height)
    side_length = scale * distance / math.cos(fovy_half)
    hypotenuse = distance / (2.0 * math.sin(fovy_half))
    near = hypotenuse - distance * 0.5
    far = hypotenuse + distance * 0.5

    translation_mat = np.eye(4)
    translation_mat[2, 3] = -hypotenuse

    rotate_mat = get_rotate_matrix(x, y, z)

    # starts from the identity, so the w row keeps its trailing 1
    projection_mat = np.eye(4)
    projection_mat[0, 0] = 1.0 / math.tan(fovy_half)
    projection_mat[1, 1] = projection_mat[0, 0]
    projection_mat[2, 2] = -(far + near) / (far - near)
    projection_mat[2, 3] = -(2.0 * far * near) / (far - near)
    projection_mat[3, 2] = -1.0

    transform_mat = projection_mat @ translation_mat @ rotate_mat

    width_half, height_half = width * 0.5, height * 0.5
    corners = np.array([
        [-width_half, height_half, 0.0],
        [width_half, height_half, 0.0],
        [width_half, -height_half, 0.0],
        [-width_half, -height_half, 0.0],
    ])
    projected = perspective_transform(corners, transform_mat)

    points_in = corners[:, :2] + [width_half, height_half]
    points_out = (projected[:, :2] + 1.0) * (side_length * 0.5)

    return solve_homography(points_in, points_out), side_length, points_in, points_out
