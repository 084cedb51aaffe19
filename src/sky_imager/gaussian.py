"""Integrate elliptical Gaussian components over image pixels.

Two strategies are used, depending on how narrow the Gaussian is:

* For Gaussians whose minor axis spans a reasonable fraction of a pixel, the
  surface is integrated over the pixel with a composite Simpson rule in both
  directions. The sampling step shrinks with the minor-axis width.
* For (nearly) degenerate Gaussians the minor axis is ignored and the source
  is treated as a line through its centre. The flux in a pixel is then the
  integral of a one-dimensional Gaussian between the two points where the line
  crosses the pixel boundary, which has a closed form in terms of ``erf``.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

import numpy as np
from scipy.special import erf

from .defaults import _defaults

FWHM_TO_SIGMA = 1.0 / (2.0 * np.sqrt(2.0 * np.log(2.0)))
_FOUR_LN2 = 4.0 * np.log(2.0)

# Number of sample rows evaluated at once by the Simpson integration.
_SIMPSON_CHUNK = 256


@dataclass(frozen=True)
class Gaussian2D:
    """
    An elliptical Gaussian in pixel coordinates.

    Parameters
    ----------
    x_center, y_center
        Centre of the Gaussian, in (continuous) pixels.
    major_axis, minor_axis
        Full widths at half maximum, in pixels. They are swapped if given in
        the wrong order, and zero axes are replaced by the smallest positive
        normal number of ``dtype``.
    position_angle
        Angle of the major axis in radians. At zero the major axis lies along
        +y; positive angles rotate it towards -x.
    flux
        Integrated flux of the Gaussian.
    dtype
        Floating point type the Gaussian is evaluated in.
    """

    x_center: float
    y_center: float
    major_axis: float
    minor_axis: float
    position_angle: float = 0.0
    flux: float = 1.0
    dtype: type = np.float64

    def __post_init__(self):
        object.__setattr__(self, "dtype", np.dtype(self.dtype).type)
        tiny = float(np.finfo(self.dtype).tiny)
        major = max(self.major_axis, self.minor_axis, tiny)
        minor = max(min(self.major_axis, self.minor_axis), tiny)
        object.__setattr__(self, "major_axis", float(major))
        object.__setattr__(self, "minor_axis", float(minor))

    @property
    def height(self) -> float:
        """Peak value of the Gaussian."""
        return self.flux * _FOUR_LN2 / (np.pi * self.major_axis * self.minor_axis)

    def with_position_angle(self, position_angle: float) -> Gaussian2D:
        return dataclasses.replace(self, position_angle=position_angle)

    def _exponent(self, x, y):
        dx = np.asarray(x, dtype=self.dtype) - self.dtype(self.x_center)
        dy = np.asarray(y, dtype=self.dtype) - self.dtype(self.y_center)
        cpa = self.dtype(np.cos(self.position_angle))
        spa = self.dtype(np.sin(self.position_angle))
        along_major = dy * cpa - dx * spa
        along_minor = dx * cpa + dy * spa
        # overflows to -inf far from the centre of a degenerate Gaussian
        with np.errstate(over="ignore"):
            return -self.dtype(_FOUR_LN2) * (
                (along_major / self.dtype(self.major_axis)) ** 2
                + (along_minor / self.dtype(self.minor_axis)) ** 2
            )

    def __call__(self, x, y):
        """Evaluate the Gaussian at pixel position(s) ``(x, y)``."""
        return self.dtype(self.height) * np.exp(self._exponent(x, y))

    def log_value(self, x, y):
        """Natural log of the Gaussian at ``(x, y)``, or -inf where it is not positive.

        Stays finite for degenerate Gaussians, whose peak can overflow.
        """
        if self.flux <= 0:
            return -np.inf
        log_height = (
            np.log(self.flux)
            + np.log(_FOUR_LN2 / np.pi)
            - np.log(self.major_axis)
            - np.log(self.minor_axis)
        )
        return log_height + self._exponent(x, y).astype(float)


def find_cutoff(gauss: Gaussian2D, spatial_limit: int, flux_limit: float) -> int:
    """
    Find how far from its centre a Gaussian still contributes flux.

    The Gaussian is rotated so that its major axis is along y, and walked out
    from the centre one pixel at a time until its value drops below
    ``flux_limit``. A Gaussian with zero or negative flux never reaches a
    positive limit, so its cutoff is 0 and only the pixel holding its centre
    is evaluated.

    Parameters
    ----------
    gauss
        The Gaussian to measure.
    spatial_limit
        Largest cutoff that will be returned, usually the larger image
        dimension.
    flux_limit
        Smallest value still considered significant. Passing the machine
        epsilon of the image precision makes lower precision images use
        smaller footprints.

    Returns
    -------
    cutoff
        Radius (in pixels) of the square box around the centre to evaluate.
    """
    g = gauss.with_position_angle(0.0)
    log_limit = np.log(flux_limit)

    cutoff = 0
    while cutoff < spatial_limit and g.log_value(
        g.x_center, g.y_center + cutoff
    ) >= log_limit:
        cutoff += 1
    return cutoff


@_defaults
def evaluate_gaussian(
    gauss: Gaussian2D,
    xpix: int,
    ypix: int,
    degenerate_minor_axis: float = 1e-3,
    max_step: float = 1 / 32,
    samples_per_sigma: float = 5,
    pa_tolerance: float = 1e-6,
) -> float:
    """
    Compute the flux a Gaussian deposits into the pixel centred on ``(xpix, ypix)``.

    Gaussians with a minor axis below ``degenerate_minor_axis`` pixels are
    integrated as a line with :func:`evaluate_gaussian_1d`, all others with
    :func:`evaluate_gaussian_2d`.
    """
    if gauss.minor_axis < degenerate_minor_axis:
        return evaluate_gaussian_1d(gauss, xpix, ypix, pa_tolerance=pa_tolerance)
    return evaluate_gaussian_2d(
        gauss, xpix, ypix, max_step=max_step, samples_per_sigma=samples_per_sigma
    )


def simpson_step(gauss: Gaussian2D, max_step=1 / 32, samples_per_sigma=5) -> float:
    """Sampling step for :func:`evaluate_gaussian_2d`.

    The largest power of two no bigger than ``min_sigma / samples_per_sigma``,
    capped at ``max_step``.
    """
    min_sigma = min(gauss.major_axis, gauss.minor_axis) * FWHM_TO_SIGMA
    return min(max_step, 2.0 ** np.floor(np.log2(min_sigma / samples_per_sigma)))


def simpson_weights(nstep: int) -> np.ndarray:
    """Composite Simpson weights (1, 4, 2, 4, ..., 2, 4, 1) for ``nstep`` steps."""
    weights = np.ones(nstep + 1)
    weights[1:-1:2] = 4.0
    weights[2:-1:2] = 2.0
    return weights


@_defaults
def evaluate_gaussian_2d(
    gauss: Gaussian2D,
    xpix: int,
    ypix: int,
    max_step: float = 1 / 32,
    samples_per_sigma: float = 5,
) -> float:
    """
    Integrate a Gaussian over a pixel with Simpson's rule.

    Parameters
    ----------
    gauss
        The Gaussian to integrate.
    xpix, ypix
        Pixel to integrate over; the pixel covers ``[xpix - 0.5, xpix + 0.5]``
        and ``[ypix - 0.5, ypix + 0.5]``.
    max_step
        Largest sampling step, in pixels.
    samples_per_sigma
        Number of samples per standard deviation of the minor axis.

    Returns
    -------
    flux
        The flux contained in the pixel.
    """
    delta = simpson_step(gauss, max_step, samples_per_sigma)
    nstep = int(round(1.0 / delta))

    offsets = np.arange(nstep + 1) * delta - 0.5
    weights = simpson_weights(nstep)
    ypos = ypix + offsets

    pixel_val = 0.0
    for start in range(0, nstep + 1, _SIMPSON_CHUNK):
        stop = min(start + _SIMPSON_CHUNK, nstep + 1)
        xx, yy = np.meshgrid(xpix + offsets[start:stop], ypos, indexing="ij")
        values = gauss(xx, yy)
        pixel_val += float(np.sum(values * np.outer(weights[start:stop], weights)))

    return pixel_val * delta * delta / 9.0


def line_intercepts(
    gauss: Gaussian2D, xpix: int, ypix: int, pa_tolerance: float = 1e-6
) -> list[tuple[float, float]]:
    """
    Find where a degenerate Gaussian's line crosses the border of a pixel.

    Each edge is treated as half-open (it includes its lower end but not its
    upper end), so a line through a corner can yield 1, 3 or 4 intercepts.

    Returns
    -------
    intercepts
        List of ``(x, y)`` crossing points, in the order bottom, top, left,
        right edge for an angled line.
    """
    xmin, xmax = xpix - 0.5, xpix + 0.5
    ymin, ymax = ypix - 0.5, ypix + 0.5
    x0, y0 = gauss.x_center, gauss.y_center
    pa = gauss.position_angle

    intercepts = []
    if abs(pa) < pa_tolerance:
        # vertical line
        if xmin <= x0 < xmax:
            intercepts = [(x0, ymin), (x0, ymax)]
    elif abs(pa - np.pi / 2) < pa_tolerance:
        # horizontal line
        if ymin <= y0 < ymax:
            intercepts = [(xmin, y0), (xmax, y0)]
    else:
        slope = np.tan(pa - np.pi / 2)
        x_at_ymin = x0 + (ymin - y0) / slope
        x_at_ymax = x0 + (ymax - y0) / slope
        y_at_xmin = y0 + (xmin - x0) * slope
        y_at_xmax = y0 + (xmax - x0) * slope

        if xmin <= x_at_ymin < xmax:
            intercepts.append((x_at_ymin, ymin))
        if xmin <= x_at_ymax < xmax:
            intercepts.append((x_at_ymax, ymax))
        if ymin <= y_at_xmin < ymax:
            intercepts.append((xmin, y_at_xmin))
        if ymin <= y_at_xmax < ymax:
            intercepts.append((xmax, y_at_xmax))

    return intercepts


@_defaults
def evaluate_gaussian_1d(
    gauss: Gaussian2D, xpix: int, ypix: int, pa_tolerance: float = 1e-6
) -> float:
    """
    Compute the flux of a line-like Gaussian within a pixel.

    The Gaussian is represented as a one-dimensional Gaussian along its major
    axis. The flux in the pixel is the difference of error functions at the
    two points where that line crosses the pixel border.

    Notes
    -----
    Pixels the line misses get no flux. So do pixels where the line yields
    anything other than exactly two intercepts (see :func:`line_intercepts`),
    which only happens when it passes exactly through a pixel corner.
    """
    intercepts = line_intercepts(gauss, xpix, ypix, pa_tolerance=pa_tolerance)
    if len(intercepts) != 2:
        return 0.0

    x0, y0 = gauss.x_center, gauss.y_center
    sigma = gauss.major_axis * FWHM_TO_SIGMA
    scale = np.sqrt(2.0) * sigma

    # signed distance along the line, in units of sigma; negative below centre.
    # A zero-length line overflows to +-inf and puts all its flux in one pixel.
    z = []
    with np.errstate(over="ignore"):
        for x, y in intercepts:
            dist = np.hypot(x0 - x, y0 - y) / sigma
            z.append(-dist if y0 > y else dist)
        value = erf(z[0] / scale) - erf(z[1] / scale)

    return float(gauss.flux * abs(0.5 * value))
