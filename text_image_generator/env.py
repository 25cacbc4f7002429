"""Default locations used by the generator and its command line tool.

All paths are constructed relative to the project's root directory.
"""

from pathlib import Path


ROOT_DIR = Path(__file__).parent.parent
"""The root directory of the project."""

CONFIG_PATH = Path(__file__).parent / "config" / "config.yaml"
"""The default YAML configuration shipped with the package."""

BACKGROUND_DIR = ROOT_DIR / "synth_text" / "background"
"""The directory the default configuration loads background images from."""
