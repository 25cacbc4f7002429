"""Tests for the probability-gated `EffectPipeline`."""

import unittest
from unittest.mock import patch

import numpy as np

from text_image_generator.config import CvConfig
from text_image_generator.effects import EffectPipeline
from text_image_generator.exceptions import InvalidConfiguration
from text_image_generator.random_variable import RandomVariable


def make_pipeline(**kwargs):
    probs = dict(box_prob=0.0, perspective_prob=0.0, blur_prob=0.0, filter_prob=0.0)
    probs.update(kwargs)
    return EffectPipeline(**probs)


class TestEffectPipeline(unittest.TestCase):
    def setUp(self):
        self.image = np.full((30, 90), 235, dtype=np.uint8)
        self.image[8:22, 10:80] = 15

    def test_no_effect_returns_copy(self):
        out = make_pipeline().apply(self.image, np.random.default_rng(0))
        self.assertIsNot(out, self.image)
        np.testing.assert_array_equal(out, self.image)

    def test_box_keeps_dimensions(self):
        pipeline = make_pipeline(box_prob=1.0)
        rng = np.random.default_rng(0)
        images = [
            np.zeros((30, 90), dtype=np.uint8),
            np.full((30, 90), 255, dtype=np.uint8),
            self.image,
            np.full((3, 3), 255, dtype=np.uint8),
            np.zeros((3, 3), dtype=np.uint8),
        ]
        for image in images:
            for _ in range(200):
                out = pipeline.apply(image, rng)
                self.assertEqual(out.shape, image.shape)
                self.assertTrue(np.any(out != image))

    def test_invalid_filter_probabilities(self):
        pipeline = make_pipeline(emboss_prob=0.5, sharp_prob=0.6)
        with self.assertRaises(InvalidConfiguration):
            pipeline.check_filter_probs()
        with self.assertRaises(InvalidConfiguration):
            pipeline.apply(self.image, np.random.default_rng(0))

    def test_filter_probabilities_tolerate_rounding(self):
        make_pipeline(emboss_prob=0.7, sharp_prob=0.3).check_filter_probs()

    @patch("text_image_generator.effects.warp_perspective")
    def test_perspective_samples_angles(self, mock_warp):
        mock_warp.side_effect = lambda image, angles: image
        pipeline = make_pipeline(
            perspective_prob=1.0,
            perspective_x=RandomVariable.uniform(1.0, 2.0),
            perspective_y=RandomVariable.uniform(3.0, 4.0),
            perspective_z=RandomVariable.gaussian(-1.0, 1.0),
        )
        pipeline.apply(self.image, np.random.default_rng(0))

        mock_warp.assert_called_once()
        x, y, z = mock_warp.call_args[0][1]
        self.assertTrue(1.0 <= x <= 2.0)
        self.assertTrue(3.0 <= y <= 4.0)
        self.assertTrue(-1.0 <= z <= 1.0)

    @patch("text_image_generator.effects.apply_sharp")
    @patch("text_image_generator.effects.apply_emboss")
    def test_filter_runs_after_blur(self, mock_emboss, mock_sharp):
        mock_emboss.side_effect = lambda image: image
        pipeline = make_pipeline(blur_prob=1.0, filter_prob=1.0, emboss_prob=1.0, sharp_prob=0.0)
        pipeline.apply(self.image, np.random.default_rng(0))
        mock_emboss.assert_called_once()
        mock_sharp.assert_not_called()

    @patch("text_image_generator.effects.apply_emboss")
    def test_filter_needs_blur(self, mock_emboss):
        pipeline = make_pipeline(blur_prob=0.0, filter_prob=1.0, emboss_prob=1.0, sharp_prob=0.0)
        pipeline.apply(self.image, np.random.default_rng(0))
        mock_emboss.assert_not_called()

    def test_rgb_input_is_converted(self):
        rgb = np.repeat(self.image[:, :, None], 3, axis=2)
        out = make_pipeline().apply(rgb, np.random.default_rng(0))
        np.testing.assert_array_equal(out, self.image)

    def test_reproducible_with_seed(self):
        pipeline = make_pipeline(box_prob=1.0, perspective_prob=1.0, blur_prob=1.0)
        first = pipeline(self.image, np.random.default_rng(7))
        second = pipeline(self.image, np.random.default_rng(7))
        np.testing.assert_array_equal(first, second)

    def test_input_is_not_modified(self):
        original = self.image.copy()
        make_pipeline(box_prob=1.0, perspective_prob=1.0, blur_prob=1.0).apply(self.image, np.random.default_rng(3))
        np.testing.assert_array_equal(self.image, original)


def test_from_config():
    config = CvConfig(box_prob=0.3, blur_sigma=[0.5, 1.0, "g"])
    pipeline = EffectPipeline.from_config(config)
    assert pipeline.box_prob == 0.3
    assert pipeline.perspective_prob == 0.2
    assert pipeline.blur_sigma == RandomVariable.gaussian(0.5, 1.0)
    assert pipeline.perspective_x == RandomVariable.gaussian(-15.0, 15.0)
    assert pipeline.sharp_prob == 0.6
