import numpy as np
import pytest
from astropy import units
from astropy.coordinates import SkyCoord

from sky_imager.errors import UnsupportedParameter, UnsupportedSpectralModel
from sky_imager.flux import scale_flux
from sky_imager.sources import ConstantSpectrum, SkySource, SpectralIndex

REF_FREQ = 1.4e9
FLUX = [2.0, 0.4, -0.2, 0.1]


@pytest.fixture(scope="function")
def position():
    return SkyCoord(ra=0 * units.deg, dec=0 * units.deg)


@pytest.fixture(scope="function")
def flat_source(position):
    return SkySource(position=position, flux=FLUX, spectrum=ConstantSpectrum())


@pytest.fixture(scope="function")
def power_law_source(position):
    return SkySource(
        position=position,
        flux=FLUX,
        spectrum=SpectralIndex(index=-0.7, reference_frequency=REF_FREQ),
    )


def test_constant_term0_unchanged(flat_source):
    assert np.array_equal(scale_flux(flat_source, 3 * REF_FREQ, 0), FLUX)


@pytest.mark.parametrize("term", [1, 2])
def test_constant_higher_terms_vanish(flat_source, term):
    assert np.array_equal(scale_flux(flat_source, REF_FREQ, term), np.zeros(4))


def test_spectral_index_term0(power_law_source):
    flux = scale_flux(power_law_source, 2 * REF_FREQ, 0)
    assert np.allclose(flux, np.array(FLUX) * 2**-0.7)


def test_spectral_index_term0_at_reference(power_law_source):
    assert np.allclose(scale_flux(power_law_source, REF_FREQ, 0), FLUX)


def test_spectral_index_term1(power_law_source):
    flux = scale_flux(power_law_source, 2 * REF_FREQ, 1)
    assert np.allclose(flux, np.array(FLUX) * 2**-0.7 * -0.7)


def test_spectral_index_term2(power_law_source):
    # no curvature is modelled, so this is 0.5 * alpha * (alpha - 1)
    flux = scale_flux(power_law_source, 2 * REF_FREQ, 2)
    assert np.allclose(flux, np.array(FLUX) * 2**-0.7 * 0.5 * -0.7 * -1.7)


def test_scaling_is_pure(power_law_source):
    scale_flux(power_law_source, 2 * REF_FREQ, 1)
    assert np.array_equal(power_law_source.flux, FLUX)


@pytest.mark.parametrize("term", [-1, 3, 1.5, None])
def test_bad_taylor_term(flat_source, term):
    with pytest.raises(UnsupportedParameter, match="Taylor terms"):
        scale_flux(flat_source, REF_FREQ, term)


def test_bad_taylor_term_is_value_error(flat_source):
    with pytest.raises(ValueError):
        scale_flux(flat_source, REF_FREQ, 3)


def test_unsupported_spectrum(position):
    class CurvedSpectrum:
        def sample(self, frequency):
            return 1.0

    source = SkySource(position=position, flux=FLUX, spectrum=CurvedSpectrum())
    with pytest.raises(UnsupportedSpectralModel, match="CurvedSpectrum"):
        scale_flux(source, REF_FREQ, 0)
