"""Tests for the helper functions in `text_image_generator.utils`."""

import numpy as np
import pytest

from text_image_generator.exceptions import DimensionMismatch
from text_image_generator.utils import (
    as_gray_image,
    get_rng,
    image_from_buffer,
    list_image_files,
    random_int,
    resize,
)


def test_image_from_buffer():
    img = image_from_buffer(bytes(range(6)), width=3, height=2)
    assert img.shape == (2, 3)
    assert img.dtype == np.uint8
    assert img[1, 0] == 3

    rgb = image_from_buffer(bytearray(2 * 2 * 3), width=2, height=2, channels=3)
    assert rgb.shape == (2, 2, 3)


def test_image_from_buffer_length_mismatch():
    with pytest.raises(DimensionMismatch):
        image_from_buffer(bytes(5), width=3, height=2)


def test_as_gray_image_converts_rgb():
    rgb = np.zeros((4, 5, 3), dtype=np.uint8)
    rgb[..., :] = 200
    gray = as_gray_image(rgb)
    assert gray.shape == (4, 5)
    assert np.all(gray == 200)


def test_as_gray_image_copies():
    img = np.full((3, 3), 7, dtype=np.uint8)
    gray = as_gray_image(img)
    gray[0, 0] = 0
    assert img[0, 0] == 7


def test_as_gray_image_rejects_bad_shapes():
    with pytest.raises(DimensionMismatch):
        as_gray_image(np.zeros((2, 2, 2), dtype=np.uint8))
    with pytest.raises(DimensionMismatch):
        as_gray_image(np.zeros((0, 4), dtype=np.uint8))


def test_random_int_accepts_either_order():
    rng = np.random.default_rng(0)
    values = {random_int(rng, 5, 3) for _ in range(200)}
    assert values == {3, 4, 5}
    assert random_int(rng, 2, 2) == 2


def test_get_rng():
    rng = np.random.default_rng(0)
    assert get_rng(rng) is rng
    assert get_rng(3).random() == np.random.default_rng(3).random()


def test_resize():
    img = np.zeros((10, 20), dtype=np.uint8)
    assert resize(img, 40, 5).shape == (5, 40)
    same = resize(img, 20, 10)
    assert same is not img
    assert same.shape == img.shape


def test_list_image_files(tmp_path):
    for name in ["b.png", "a.JPG", "c.txt", "d.jpeg"]:
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "sub.png").mkdir()
    assert [p.name for p in list_image_files(tmp_path)] == ["a.JPG", "b.png", "d.jpeg"]

    with pytest.raises(FileNotFoundError):
        list_image_files(tmp_path / "missing")
