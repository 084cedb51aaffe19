"""Scale component fluxes to a channel frequency and Taylor term."""

import numpy as np

from .errors import UnsupportedParameter, UnsupportedSpectralModel
from .sources import ConstantSpectrum, SkySource, SpectralIndex

#: Taylor terms a flux can be expanded to.
TAYLOR_TERMS = (0, 1, 2)


def check_taylor_term(taylor_term):
    """Raise :class:`UnsupportedParameter` unless ``taylor_term`` is 0, 1 or 2."""
    if taylor_term not in TAYLOR_TERMS:
        raise UnsupportedParameter(
            f"Only Taylor terms 0, 1 & 2 are supported, got {taylor_term!r}."
        )


def check_spectrum(spectrum):
    """Raise :class:`UnsupportedSpectralModel` for anything but the known spectra."""
    if not isinstance(spectrum, (ConstantSpectrum, SpectralIndex)):
        raise UnsupportedSpectralModel(
            f"Unsupported spectral model: {type(spectrum).__name__}."
        )


def scale_flux(source: SkySource, frequency: float, taylor_term: int) -> np.ndarray:
    """
    Compute the flux of a source at a frequency, for a given Taylor term.

    Parameters
    ----------
    source
        The component whose reference flux is scaled.
    frequency
        Channel frequency, in Hz.
    taylor_term
        Which term of the multi-frequency Taylor expansion to return.
        Term 0 is the flux itself, term 1 is the flux times the spectral
        index ``alpha``, and term 2 is the flux times
        ``0.5 * alpha * (alpha - 1) + beta``.

    Returns
    -------
    flux
        Length-4 array of Stokes (I, Q, U, V) flux densities, in Jy.

    Notes
    -----
    No spectral curvature is modelled, so ``beta`` is always zero. A constant
    spectrum has ``alpha = 0`` and therefore zero flux in terms 1 and 2.
    """
    check_taylor_term(taylor_term)
    check_spectrum(source.spectrum)

    flux = source.flux * source.spectrum.sample(frequency)

    alpha = 0.0
    if isinstance(source.spectrum, SpectralIndex):
        alpha = source.spectrum.index

    if taylor_term == 1:
        flux = flux * alpha
    elif taylor_term == 2:
        beta = 0.0
        flux = flux * (0.5 * alpha * (alpha - 1.0) + beta)

    return flux
