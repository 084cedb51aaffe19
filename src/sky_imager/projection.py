"""Project a list of sky components onto an image cube."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
from astropy.wcs import WCS

from .cube import ImageCube, make_position
from .errors import (
    MissingFrequencyAxis,
    NonSquarePixelsUnsupported,
    UnsupportedGeometry,
    UnsupportedPolarization,
    UnsupportedShapeType,
)
from .flux import check_spectrum, check_taylor_term, scale_flux
from .gaussian import Gaussian2D, evaluate_gaussian, find_cutoff
from .sources import GaussianShape, SkySource, Stokes

logger = logging.getLogger(__name__)

#: Shape kinds that can be projected.
SHAPE_KINDS = ("point", "gaussian")
SUPPORTED_STOKES = tuple(int(stokes) for stokes in Stokes)


@dataclass(frozen=True)
class CubeAxes:
    """Array axes of a cube and the world values along its non-spatial axes.

    An axis of -1 means the cube does not have it.
    """

    x_axis: int
    y_axis: int
    freq_axis: int
    pol_axis: int
    frequencies: np.ndarray
    stokes: tuple[Stokes, ...]


def resolve_axes(image: ImageCube) -> CubeAxes:
    """
    Find the direction, spectral and polarization axes of a cube.

    Raises
    ------
    UnsupportedGeometry
        If the cube does not have exactly two direction axes, or has an axis
        that is neither direction, spectral nor Stokes.
    UnsupportedPolarization
        If the Stokes axis holds anything but I, Q, U or V.
    MissingFrequencyAxis
        If the cube has no spectral axis.
    """
    coords = image.coordinates
    x_axis, y_axis = coords.find_spatial_axes()

    pol_axis, codes = coords.find_polarization_axis()
    if pol_axis >= 0:
        unsupported = [code for code in codes if code not in SUPPORTED_STOKES]
        if unsupported:
            raise UnsupportedPolarization(
                "Stokes axis can only contain I, Q, U or V pols, got codes "
                f"{unsupported}."
            )
        stokes = tuple(Stokes(code) for code in codes)
    else:
        logger.debug("No polarisation axis, assuming Stokes I")
        stokes = (Stokes.I,)

    freq_axis = coords.find_frequency_axis()
    if freq_axis < 0:
        raise MissingFrequencyAxis("Image must have a frequency axis.")

    known = {x_axis, y_axis, freq_axis, pol_axis} - {-1}
    if len(known) != len(image.shape):
        raise UnsupportedGeometry(
            "Image has axes that are neither direction, frequency nor Stokes."
        )

    return CubeAxes(
        x_axis=x_axis,
        y_axis=y_axis,
        freq_axis=freq_axis,
        pol_axis=pol_axis,
        frequencies=coords.channel_frequencies,
        stokes=stokes,
    )


def _round_half_away(value: float) -> float:
    return float(np.copysign(np.floor(abs(value) + 0.5), value))


def project_point_shape(
    image: ImageCube,
    axes: CubeAxes,
    pixel_position: tuple[float, float],
    freq_idx: int,
    pol_idx: int,
    flux: float,
) -> bool:
    """
    Add a point source to the pixel nearest its position.

    Parameters
    ----------
    image
        Cube to accumulate into.
    axes
        Resolved axes of ``image``.
    pixel_position
        Continuous ``(x, y)`` pixel position of the source.
    freq_idx, pol_idx
        Channel and polarization plane to add to.
    flux
        Flux to add, in Jy.

    Returns
    -------
    projected
        False if the source falls outside the image and nothing was added.
    """
    x = _round_half_away(pixel_position[0])
    y = _round_half_away(pixel_position[1])
    if (
        x < 0
        or x > image.shape[axes.x_axis] - 1
        or y < 0
        or y > image.shape[axes.y_axis] - 1
    ):
        return False

    pos = make_position(
        axes.x_axis, axes.y_axis, axes.freq_axis, axes.pol_axis, x, y, freq_idx, pol_idx
    )
    image.accumulate(pos, flux)
    return True


def project_gaussian_shape(
    image: ImageCube,
    axes: CubeAxes,
    pixel_position: tuple[float, float],
    shape: GaussianShape,
    freq_idx: int,
    pol_idx: int,
    flux: float,
) -> bool:
    """
    Add a Gaussian source to every pixel within its cutoff radius.

    Parameters
    ----------
    image
        Cube to accumulate into.
    axes
        Resolved axes of ``image``.
    pixel_position
        Continuous ``(x, y)`` pixel position of the source centre.
    shape
        Angular size and orientation of the source.
    freq_idx, pol_idx
        Channel and polarization plane to add to.
    flux
        Integrated flux of the source, in Jy.

    Returns
    -------
    projected
        False if the source centre falls outside the image and nothing was
        added.

    Notes
    -----
    The bounds check uses the unrounded position, so a source centred in the
    outer half of an edge pixel is culled even though a point source at the
    same position would be kept.
    """
    px, py = pixel_position
    nx = image.shape[axes.x_axis]
    ny = image.shape[axes.y_axis]
    if px < 0 or px > nx - 1 or py < 0 or py > ny - 1:
        return False

    x_size, y_size = image.coordinates.pixel_increments()
    if not np.isclose(x_size, y_size, rtol=1e-10, atol=0):
        raise NonSquarePixelsUnsupported(
            f"Non-equal pixel sizes not supported ({x_size} rad, {y_size} rad)."
        )

    gauss = Gaussian2D(
        x_center=px,
        y_center=py,
        major_axis=shape.major_axis / y_size,
        minor_axis=shape.minor_axis / y_size,
        position_angle=shape.position_angle,
        flux=flux,
        dtype=image.dtype,
    )

    epsilon = np.finfo(image.dtype).eps
    cutoff = find_cutoff(gauss, max(nx, ny), epsilon)
    logger.debug(
        f"Gaussian at ({px:.3f}, {py:.3f}) with axes {gauss.major_axis:.3g} x "
        f"{gauss.minor_axis:.3g} pixels has cutoff {cutoff}"
    )

    start_x = max(0, int(px) - cutoff)
    end_x = min(nx - 1, int(px) + cutoff)
    start_y = max(0, int(py) - cutoff)
    end_y = min(ny - 1, int(py) + cutoff)

    pos = list(
        make_position(
            axes.x_axis, axes.y_axis, axes.freq_axis, axes.pol_axis, 0, 0, freq_idx, pol_idx
        )
    )
    for x in range(start_x, end_x + 1):
        for y in range(start_y, end_y + 1):
            pos[axes.x_axis] = x
            pos[axes.y_axis] = y
            image.accumulate(tuple(pos), evaluate_gaussian(gauss, x, y))
    return True


def _check_source(source: SkySource):
    kind = getattr(source.shape, "kind", None)
    if kind not in SHAPE_KINDS:
        raise UnsupportedShapeType(
            f"Unsupported shape type: {type(source.shape).__name__}."
        )
    check_spectrum(source.spectrum)


class ComponentImager:
    """
    Rasterizes sky components onto an image cube.

    Projection accumulates: pixel values are only ever added to, so projecting
    the same sources twice doubles their contribution. Call
    :meth:`ImageCube.reset` to start again from an empty cube.

    Parameters
    ----------
    image
        The cube that is projected into.

    Attributes
    ----------
    n_projected
        Number of (source, channel, polarization) deposits made so far.
    n_skipped
        Number of deposits skipped because the source fell outside the image.
    """

    def __init__(self, image: ImageCube):
        self.image = image
        self.n_projected = 0
        self.n_skipped = 0

    def project(self, sources: Iterable[SkySource], taylor_term: int = 0):
        """
        Add the flux of every source to the cube.

        Parameters
        ----------
        sources
            Components to project. Only iterated once.
        taylor_term
            Taylor term (0, 1 or 2) of the flux to image.

        Returns
        -------
        self
            The imager, for chaining.
        """
        sources = list(sources)
        if not sources:
            return self

        check_taylor_term(taylor_term)
        for source in sources:
            _check_source(source)
        axes = resolve_axes(self.image)

        logger.info(
            f"Projecting {len(sources)} components onto {len(axes.frequencies)} "
            f"channels and {len(axes.stokes)} polarizations (Taylor term "
            f"{taylor_term})"
        )

        coords = self.image.coordinates
        for source in sources:
            pixel_position = coords.world_to_pixel(source.position)
            n_before = self.n_projected
            logger.debug(
                f"Component {source.name!r} ({source.shape.kind}) at pixel "
                f"({pixel_position[0]:.3f}, {pixel_position[1]:.3f})"
            )

            for freq_idx, frequency in enumerate(axes.frequencies):
                flux = scale_flux(source, frequency, taylor_term)

                for pol_idx, stokes in enumerate(axes.stokes):
                    if source.shape.kind == "point":
                        projected = project_point_shape(
                            self.image,
                            axes,
                            pixel_position,
                            freq_idx,
                            pol_idx,
                            flux[stokes.index],
                        )
                    elif source.shape.kind == "gaussian":
                        projected = project_gaussian_shape(
                            self.image,
                            axes,
                            pixel_position,
                            source.shape,
                            freq_idx,
                            pol_idx,
                            flux[stokes.index],
                        )
                    else:
                        raise UnsupportedShapeType(
                            f"Unsupported shape type: {source.shape.kind}."
                        )

                    if projected:
                        self.n_projected += 1
                    else:
                        self.n_skipped += 1

            if self.n_projected == n_before:
                logger.debug(f"Component {source.name!r} falls outside the image")

        return self


def project(image: ImageCube, sources: Iterable[SkySource], taylor_term: int = 0):
    """
    Project sky components onto an image cube, adding to its pixel values.

    Parameters
    ----------
    image
        Cube to accumulate into. Must have two direction axes and a spectral
        axis, and may have a Stokes axis holding I, Q, U and/or V.
    sources
        Components to project.
    taylor_term
        Taylor term (0, 1 or 2) of the flux to image.

    Raises
    ------
    ProjectionError
        Any of the :mod:`sky_imager.errors` exceptions, if the cube or a
        component is not supported. Nothing is added to the cube when the
        cube, the Taylor term or a component is rejected.
    """
    ComponentImager(image).project(sources, taylor_term)


def model_image(
    wcs: WCS,
    shape: tuple[int, ...],
    sources: Iterable[SkySource],
    taylor_term: int = 0,
    dtype=np.float64,
) -> ImageCube:
    """Create a new cube and project ``sources`` onto it."""
    image = ImageCube.empty(wcs, shape, dtype=dtype)
    project(image, sources, taylor_term)
    return image
