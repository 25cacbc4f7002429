"""Tests for the main command-line entry point.

These tests verify that executing the `__main__` module of
`text_image_generator` hands the batch `run` function to `fire`.
"""

import runpy
from unittest.mock import patch

from text_image_generator.__main__ import main
from text_image_generator.run_generate import run


@patch("fire.Fire")
def test_main(mock_fire):
    """Tests that the main function passes `run` to `fire.Fire`."""
    main()
    mock_fire.assert_called_once_with(run)


@patch("fire.Fire")
def test_main_entry_point(mock_fire):
    """Tests that running the package as a script invokes the entry point."""
    runpy.run_module("text_image_generator.__main__", run_name="__main__")
    mock_fire.assert_called_with(run)
