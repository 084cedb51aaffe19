"""Resolve the axes of an image cube and convert between world and pixel positions."""

from __future__ import annotations

import copy

import numpy as np
from astropy import units
from astropy.coordinates import SkyCoord
from astropy.wcs import WCS, WCSSUB_SPECTRAL, WCSSUB_STOKES, NoConvergence
from astropy.wcs.utils import proj_plane_pixel_scales
from cached_property import cached_property

from .errors import CoordinateConversionError, MissingFrequencyAxis, UnsupportedGeometry

# Thousands digit of ``wcsprm.axis_types``.
_STOKES_TYPE = 1
_CELESTIAL_TYPE = 2
_SPECTRAL_TYPE = 3


def _axis_unit(wcs, default):
    unit = units.Unit(wcs.wcs.cunit[0])
    if unit == units.dimensionless_unscaled:
        return default
    return unit


class CubeCoordinates:
    """
    Coordinate system of an image cube.

    Wraps an :class:`astropy.wcs.WCS` and translates its (FITS-ordered) axes
    into axes of the numpy array holding the cube, whose order is reversed.

    Parameters
    ----------
    wcs
        World coordinate system of the cube. Must have one world axis per
        array dimension.
    shape
        Shape of the numpy array, in numpy axis order.
    """

    def __init__(self, wcs: WCS, shape: tuple[int, ...]):
        self.shape = tuple(int(n) for n in shape)
        if wcs.naxis != len(self.shape):
            raise ValueError(
                f"WCS has {wcs.naxis} axes but the cube has {len(self.shape)} "
                "dimensions."
            )
        self.wcs = copy.deepcopy(wcs)
        self.wcs.wcs.set()

    def _to_array_axis(self, wcs_axis: int) -> int:
        return self.wcs.naxis - 1 - wcs_axis

    def _wcs_axes_of_type(self, axis_type: int) -> list[int]:
        return [
            i
            for i, code in enumerate(self.wcs.wcs.axis_types)
            if (code // 1000) % 10 == axis_type
        ]

    def find_spatial_axes(self) -> tuple[int, int]:
        """
        Get the array axes of the two direction coordinates.

        Returns
        -------
        x_axis, y_axis
            Array axes of the first and second celestial WCS axis (for a
            standard image, right ascension then declination).
        """
        axes = self._wcs_axes_of_type(_CELESTIAL_TYPE)
        if len(axes) != 2:
            raise UnsupportedGeometry(
                "Coordinate system has unsupported number of direction axes "
                f"({len(axes)}); exactly two are required."
            )
        return self._to_array_axis(axes[0]), self._to_array_axis(axes[1])

    def find_frequency_axis(self) -> int:
        """Get the array axis of the spectral coordinate, or -1 if there is none."""
        axes = self._wcs_axes_of_type(_SPECTRAL_TYPE)
        if not axes:
            return -1
        return self._to_array_axis(axes[0])

    def find_polarization_axis(self) -> tuple[int, list[int]]:
        """
        Get the array axis of the Stokes coordinate and the code of each plane.

        Returns
        -------
        pol_axis
            Array axis of the Stokes coordinate, or -1 if there is none.
        stokes
            FITS Stokes code of every plane along that axis (empty if absent).
        """
        axes = self._wcs_axes_of_type(_STOKES_TYPE)
        if not axes:
            return -1, []
        pol_axis = self._to_array_axis(axes[0])
        stokes_wcs = self.wcs.sub([WCSSUB_STOKES])
        codes = stokes_wcs.pixel_to_world_values(np.arange(self.shape[pol_axis]))
        return pol_axis, [int(round(code)) for code in np.atleast_1d(codes)]

    @cached_property
    def _celestial(self):
        return self.wcs.celestial

    @cached_property
    def channel_frequencies(self) -> np.ndarray:
        """Frequency of every channel along the spectral axis, in Hz."""
        freq_axis = self.find_frequency_axis()
        if freq_axis < 0:
            raise MissingFrequencyAxis("Image must have a frequency axis.")

        spectral = self.wcs.sub([WCSSUB_SPECTRAL])
        values = np.atleast_1d(
            spectral.pixel_to_world_values(np.arange(self.shape[freq_axis]))
        )
        unit = _axis_unit(spectral, units.Hz)
        try:
            freqs = (values * unit).to_value(
                units.Hz, equivalencies=units.spectral()
            )
        except units.UnitConversionError as err:
            raise MissingFrequencyAxis(
                f"Spectral axis in units of {unit} cannot be converted to frequency."
            ) from err
        if not np.all(np.isfinite(freqs)):
            raise CoordinateConversionError("Cannot convert a frequency value.")
        return freqs

    def channel_to_frequency(self, channel: int) -> float:
        """Get the frequency of a single channel, in Hz."""
        return float(self.channel_frequencies[channel])

    def world_to_pixel(self, position: SkyCoord) -> tuple[float, float]:
        """
        Convert a sky direction to a continuous pixel position.

        Parameters
        ----------
        position
            Sky direction. Transformed to the frame of the cube if needed.

        Returns
        -------
        x, y
            Zero-based pixel position along the first and second direction axis.
        """
        try:
            x, y = self._celestial.world_to_pixel(position)
        except (ValueError, NoConvergence) as err:
            raise CoordinateConversionError(
                f"Could not convert {position} to a pixel position."
            ) from err
        x, y = float(x), float(y)
        if not (np.isfinite(x) and np.isfinite(y)):
            raise CoordinateConversionError(
                f"Could not convert {position} to a pixel position."
            )
        return x, y

    def pixel_increments(self) -> np.ndarray:
        """Absolute angular size of a pixel along each direction axis, in radians."""
        celestial = self._celestial
        scales = proj_plane_pixel_scales(celestial)
        unit = _axis_unit(celestial, units.deg)
        return np.abs((scales * unit).to_value(units.rad))
