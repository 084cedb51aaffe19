"""Dense image cube storage that components are accumulated into."""

from __future__ import annotations

import numpy as np
from astropy.wcs import WCS

from .coordinates import CubeCoordinates

SUPPORTED_DTYPES = (np.dtype(np.float32), np.dtype(np.float64))


def make_position(
    x_axis, y_axis, freq_axis, pol_axis, x_idx, y_idx, freq_idx, pol_idx
) -> tuple[int, ...]:
    """
    Build an array index over the axes present in a cube.

    An axis number below zero means the cube has no such axis, and the
    matching index is ignored.

    Examples
    --------
    >>> make_position(1, 0, 2, -1, 4, 7, 3, 0)
    (7, 4, 3)
    """
    axes = (x_axis, y_axis, freq_axis, pol_axis)
    indices = (x_idx, y_idx, freq_idx, pol_idx)
    naxis = sum(axis >= 0 for axis in axes)

    pos = [0] * naxis
    for axis, idx in zip(axes, indices):
        if axis >= 0:
            pos[axis] = int(idx)
    return tuple(pos)


class ImageCube:
    """
    A numpy array of pixel values together with its coordinate system.

    Parameters
    ----------
    data
        Pixel values, in numpy axis order. Must be float32 or float64; the
        precision decides how far Gaussian footprints are sampled.
    wcs
        World coordinate system describing ``data``.
    """

    def __init__(self, data: np.ndarray, wcs: WCS):
        data = np.asarray(data)
        if data.dtype not in SUPPORTED_DTYPES:
            raise ValueError(
                f"Image cube must be float32 or float64, got {data.dtype}."
            )
        self.data = data
        self.coordinates = CubeCoordinates(wcs, data.shape)

    @classmethod
    def empty(cls, wcs: WCS, shape, dtype=np.float64) -> ImageCube:
        """Create a zero-filled cube."""
        return cls(np.zeros(shape, dtype=dtype), wcs)

    @property
    def shape(self) -> tuple[int, ...]:
        return self.data.shape

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    def get(self, pos: tuple[int, ...]):
        return self.data[pos]

    def accumulate(self, pos: tuple[int, ...], value: float):
        """Add ``value`` to the pixel at ``pos``."""
        self.data[pos] += value

    def reset(self):
        """Zero every pixel, so the cube can be projected into again."""
        self.data[...] = 0
