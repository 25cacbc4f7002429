"""The text_image_generator package synthesizes photographed-looking text images.

Given a crisp rendered text raster, the package degrades it (occlusion box,
perspective warp, blur, emboss or sharpen) and blends it into a background
with Poisson image editing, producing training data for text recognition
models.

Example:
    >>> from text_image_generator import Generator
    >>> generator = Generator()
    >>> sample = generator.process(rendered_text)
"""

from ._version import __version__ as __version__
from text_image_generator.backgrounds import BackgroundPool as BackgroundPool
from text_image_generator.composer import Composer as Composer
from text_image_generator.effects import EffectPipeline as EffectPipeline
from text_image_generator.generator import Generator as Generator
from text_image_generator.random_variable import RandomVariable as RandomVariable
