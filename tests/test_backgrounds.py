"""Tests for the `BackgroundPool`."""

import numpy as np
import pytest
from PIL import Image

from text_image_generator.backgrounds import BackgroundPool, fit_and_crop
from text_image_generator.exceptions import DimensionMismatch, EmptyResourcePool


@pytest.fixture
def bg_dir(tmp_path):
    Image.new("RGB", (300, 100), (120, 130, 140)).save(tmp_path / "large.png")
    Image.new("L", (10, 10), 200).save(tmp_path / "small.jpg")
    (tmp_path / "broken.png").write_bytes(b"not an image")
    (tmp_path / "notes.txt").write_text("ignored")
    return tmp_path


def test_loads_and_crops(bg_dir):
    pool = BackgroundPool(bg_dir, 20, 40, rng=np.random.default_rng(0))
    assert len(pool) == 2
    assert pool.height == 20
    assert pool.width == 40
    for i in range(len(pool)):
        img = pool.get(i)
        assert img.shape == (20, 40)
        assert img.dtype == np.uint8


def test_returns_copies(bg_dir):
    pool = BackgroundPool(bg_dir, 20, 40)
    img = pool[0]
    img[:] = 0
    assert pool[0].any()


def test_index_out_of_range(bg_dir):
    pool = BackgroundPool(bg_dir, 20, 40)
    with pytest.raises(IndexError):
        pool.get(2)
    with pytest.raises(IndexError):
        pool.get(-1)


def test_random(bg_dir):
    pool = BackgroundPool(bg_dir, 20, 40)
    rng = np.random.default_rng(0)
    for _ in range(5):
        assert pool.random(rng).shape == (20, 40)


def test_empty_directory(tmp_path):
    with pytest.raises(EmptyResourcePool):
        BackgroundPool(tmp_path, 20, 40)


def test_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        BackgroundPool(tmp_path / "missing", 20, 40)


def test_from_images():
    rgb = np.full((50, 80, 3), 90, dtype=np.uint8)
    pool = BackgroundPool.from_images([rgb, np.zeros((5, 5), dtype=np.uint8)], 16, 32)
    assert len(pool) == 2
    assert pool.bg_dir is None
    np.testing.assert_array_equal(pool.get(0), 90)
    assert pool.get(1).shape == (16, 32)

    with pytest.raises(EmptyResourcePool):
        BackgroundPool.from_images([], 16, 32)


def test_fit_and_crop_upscales():
    image = np.arange(20, dtype=np.uint8).reshape(4, 5)
    crop = fit_and_crop(image, 12, 30, np.random.default_rng(0))
    assert crop.shape == (12, 30)


def test_mismatched_images_are_rejected():
    pool = BackgroundPool.__new__(BackgroundPool)
    with pytest.raises(DimensionMismatch):
        pool._init_images([np.zeros((3, 3), dtype=np.uint8)], 4, 4)
