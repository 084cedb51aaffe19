"""Build sky components from a :class:`pyradiosky.SkyModel`."""

from __future__ import annotations

import numpy as np
from astropy import units
from pyradiosky import SkyModel

from .errors import UnsupportedShapeType, UnsupportedSpectralModel
from .sources import ConstantSpectrum, PointShape, SkySource, SpectralIndex


def sources_from_skymodel(sky: SkyModel) -> list[SkySource]:
    """
    Convert the components of a point-source sky model to :class:`SkySource`.

    Parameters
    ----------
    sky
        A sky model with ``component_type == "point"`` and a ``"flat"`` or
        ``"spectral_index"`` spectrum. Fluxes are taken from the first
        frequency plane of ``sky.stokes``.

    Returns
    -------
    sources
        One point source per component, in the order of the sky model.
    """
    if sky.component_type != "point":
        raise UnsupportedShapeType(
            f"Only point-source sky models are supported, got {sky.component_type}."
        )
    if sky.spectral_type not in ("flat", "spectral_index"):
        raise UnsupportedSpectralModel(
            f"Unsupported spectral type for a sky model: {sky.spectral_type}."
        )

    stokes = units.Quantity(sky.stokes).to_value(units.Jy)
    names = sky.name if sky.name is not None else [""] * sky.Ncomponents
    if sky.spectral_type == "spectral_index":
        ref_freqs = units.Quantity(sky.reference_frequency).to_value(units.Hz)

    sources = []
    for i in range(sky.Ncomponents):
        if sky.spectral_type == "spectral_index":
            spectrum = SpectralIndex(
                index=float(sky.spectral_index[i]),
                reference_frequency=float(ref_freqs[i]),
            )
        else:
            spectrum = ConstantSpectrum()

        sources.append(
            SkySource(
                position=sky.skycoord[i],
                flux=np.asarray(stokes[:, 0, i], dtype=float),
                shape=PointShape(),
                spectrum=spectrum,
                name=str(names[i]),
            )
        )
    return sources
