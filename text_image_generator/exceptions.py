"""Exception types raised by the image synthesis pipeline.

None of these are swallowed inside the numeric core. They describe problems
the caller has to handle: a broken configuration, arrays whose shapes do not
agree, a degenerate perspective transform or a background pool with nothing
in it.
"""


class SynthesisError(Exception):
    """Base class for every error raised by `text_image_generator`."""
    pass


class InvalidConfiguration(SynthesisError, ValueError):
    """A probability or weight invariant of the configuration is violated.

    Examples are emboss and sharpen probabilities that do not sum to 1, or an
    occlusion box padding factor smaller than 1.
    """
    pass


class DimensionMismatch(SynthesisError, ValueError):
    """Buffers or matrices do not have the shape they are declared to have."""
    pass


class SingularTransform(SynthesisError):
    """The homography linear system has no unique solution.

    This happens for degenerate (e.g. collinear) point correspondences. The
    caller may retry the warp with different rotation angles.
    """
    pass


class EmptyResourcePool(SynthesisError):
    """A resource pool ended up without any usable entry."""
    pass
