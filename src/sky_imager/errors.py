"""Exceptions raised while projecting sky components onto an image cube."""


class ProjectionError(Exception):
    """Base class for every error raised by :func:`~sky_imager.projection.project`."""


class CoordinateConversionError(ProjectionError, ValueError):
    """A world coordinate could not be converted to a pixel coordinate."""


class UnsupportedGeometry(ProjectionError, ValueError):
    """The image cube does not have exactly two direction axes."""


class MissingFrequencyAxis(UnsupportedGeometry):
    """The image cube has no spectral axis."""


class UnsupportedPolarization(ProjectionError, ValueError):
    """The polarization axis holds something other than Stokes I, Q, U or V."""


class NonSquarePixelsUnsupported(ProjectionError, ValueError):
    """The angular pixel size differs between the two direction axes."""


class UnsupportedSpectralModel(ProjectionError, TypeError):
    """The source spectrum is neither constant nor a spectral index."""


class UnsupportedShapeType(ProjectionError, TypeError):
    """The source shape is neither a point nor a Gaussian."""


class UnsupportedParameter(ProjectionError, ValueError):
    """A parameter is outside its supported range (e.g. the Taylor term)."""
