"""A package for rasterizing sky components onto radio image cubes."""

try:
    from importlib.metadata import PackageNotFoundError, version
except ImportError:
    from importlib_metadata import PackageNotFoundError, version

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # package is not installed
    pass


from . import (
    catalog,
    coordinates,
    cube,
    errors,
    flux,
    gaussian,
    projection,
    sources,
)
from .catalog import sources_from_skymodel
from .config import CONFIG_PATH
from .cube import ImageCube
from .defaults import defaults
from .flux import scale_flux
from .projection import ComponentImager, model_image, project
from .sources import (
    ConstantSpectrum,
    GaussianShape,
    PointShape,
    SkySource,
    SpectralIndex,
    Stokes,
)
