import numpy as np
import pytest
from astropy.wcs import WCS

from sky_imager import ImageCube

RA0 = 180.0
DEC0 = -30.0
CDELT = 1.0 / 3600
REF_FREQ = 1.4e9


def make_wcs(
    nx=10,
    ny=10,
    nchan=1,
    stokes=(1,),
    ref_freq=REF_FREQ,
    chan_width=1e6,
    cdelt=(-CDELT, CDELT),
):
    """Build a RA/Dec/Freq(/Stokes) WCS with the reference direction at pixel (nx//2, ny//2)."""
    ctype = ["RA---SIN", "DEC--SIN", "FREQ"]
    crval = [RA0, DEC0, ref_freq]
    crpix = [nx // 2 + 1, ny // 2 + 1, 1]
    deltas = [cdelt[0], cdelt[1], chan_width]
    cunit = ["deg", "deg", "Hz"]
    if stokes is not None:
        ctype.append("STOKES")
        crval.append(stokes[0])
        crpix.append(1)
        deltas.append(stokes[1] - stokes[0] if len(stokes) > 1 else 1)
        cunit.append("")

    wcs = WCS(naxis=len(ctype))
    wcs.wcs.ctype = ctype
    wcs.wcs.crval = crval
    wcs.wcs.crpix = crpix
    wcs.wcs.cdelt = deltas
    wcs.wcs.cunit = cunit
    return wcs


def cube_shape(nx=10, ny=10, nchan=1, stokes=(1,)):
    shape = (nchan, ny, nx)
    if stokes is not None:
        shape = (len(stokes),) + shape
    return shape


@pytest.fixture(scope="function")
def make_cube():
    def _make_cube(nx=10, ny=10, nchan=1, stokes=(1,), dtype=np.float64, **kwargs):
        wcs = make_wcs(nx=nx, ny=ny, nchan=nchan, stokes=stokes, **kwargs)
        return ImageCube.empty(
            wcs, cube_shape(nx=nx, ny=ny, nchan=nchan, stokes=stokes), dtype=dtype
        )

    return _make_cube


@pytest.fixture(scope="function")
def pixel_to_sky():
    """Get the sky direction of a (continuous) pixel position of a cube."""

    def _pixel_to_sky(cube, x, y):
        return cube.coordinates.wcs.celestial.pixel_to_world(x, y)

    return _pixel_to_sky
