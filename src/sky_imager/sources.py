"""Sky components: position, shape, flux and spectral model of discrete emitters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np
from astropy import units
from astropy.coordinates import SkyCoord


class Stokes(IntEnum):
    """Stokes parameters, numbered as on a FITS ``STOKES`` axis."""

    I = 1  # noqa: E741
    Q = 2
    U = 3
    V = 4

    @property
    def index(self) -> int:
        """Position of this parameter in an IQUV flux vector."""
        return self.value - 1


@dataclass(frozen=True)
class PointShape:
    """An unresolved source, deposited into a single pixel."""

    kind = "point"


@dataclass(frozen=True)
class GaussianShape:
    """
    An elliptical Gaussian.

    Parameters
    ----------
    major_axis
        Full width at half maximum along the major axis, in radians.
    minor_axis
        Full width at half maximum along the minor axis, in radians.
    position_angle
        Angle of the major axis, in radians, measured from north through east.
    """

    kind = "gaussian"

    major_axis: float
    minor_axis: float
    position_angle: float = 0.0

    def __post_init__(self):
        if self.minor_axis < 0:
            raise ValueError("minor_axis must be non-negative.")
        if self.major_axis < self.minor_axis:
            raise ValueError(
                "major_axis must be at least as large as minor_axis. Got "
                f"major_axis={self.major_axis}, minor_axis={self.minor_axis}."
            )

    @classmethod
    def from_quantities(cls, major_axis, minor_axis, position_angle=0 * units.deg):
        """Create a Gaussian shape from astropy angle quantities."""
        return cls(
            major_axis=units.Quantity(major_axis).to_value(units.rad),
            minor_axis=units.Quantity(minor_axis).to_value(units.rad),
            position_angle=units.Quantity(position_angle).to_value(units.rad),
        )


@dataclass(frozen=True)
class ConstantSpectrum:
    """A flux density that does not change with frequency."""

    kind = "constant"

    def sample(self, frequency: float) -> float:
        return 1.0


@dataclass(frozen=True)
class SpectralIndex:
    """
    A power-law spectrum, ``S(f) = S(f0) * (f / f0) ** index``.

    Parameters
    ----------
    index
        The spectral index.
    reference_frequency
        The frequency ``f0``, in Hz, at which the source flux is defined.
    """

    kind = "spectral_index"

    index: float
    reference_frequency: float

    def __post_init__(self):
        if self.reference_frequency <= 0:
            raise ValueError("reference_frequency must be positive.")

    def sample(self, frequency: float) -> float:
        return (frequency / self.reference_frequency) ** self.index


@dataclass(frozen=True)
class SkySource:
    """
    A discrete sky component.

    Parameters
    ----------
    position
        Sky direction of the component centre.
    flux
        Length-4 flux density at the reference frequency, ordered as Stokes
        (I, Q, U, V), in Jy.
    shape
        Either a :class:`PointShape` or a :class:`GaussianShape`.
    spectrum
        Either a :class:`ConstantSpectrum` or a :class:`SpectralIndex`.
    name
        Optional label, only used in log messages.
    """

    position: SkyCoord
    flux: np.ndarray
    shape: PointShape | GaussianShape = field(default_factory=PointShape)
    spectrum: ConstantSpectrum | SpectralIndex = field(
        default_factory=ConstantSpectrum
    )
    name: str = ""

    def __post_init__(self):
        flux = units.Quantity(self.flux, units.Jy).to_value(units.Jy)
        flux = np.array(flux, dtype=float).ravel()
        if flux.size != 4:
            raise ValueError(
                f"flux must have exactly 4 Stokes components, got {flux.size}."
            )
        flux.setflags(write=False)
        object.__setattr__(self, "flux", flux)

    def flux_for(self, stokes: Stokes | int) -> float:
        """Return the reference flux of a single Stokes parameter."""
        return float(self.flux[Stokes(stokes).index])
