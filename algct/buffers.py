"""Dense image and sinogram buffers.

An :class:`Image` holds one value per voxel of a volume and a
:class:`Sinogram` one value per ray of a geometry. Both store their values
in a flat array addressed by the linear index used by the volume and the
geometry, and expose a shaped view of the same memory for visualization.
"""

import numpy as np

from .constants import _DTYPE
from .utils import _as_buffer


class _Buffer:
    """Flat buffer of real values with a shaped view."""

    def __init__(self, size, shape, data, name):
        if data is None:
            self._data = np.zeros(size, dtype=_DTYPE)
        else:
            self._data = _as_buffer(data, size, name)
        self._shape = tuple(shape)

    @property
    def data(self):
        """Flat, mutable array of values addressed by linear index."""
        return self._data

    @property
    def array(self):
        """View of the values with shape :attr:`shape`."""
        return self._data.reshape(self._shape)

    @property
    def shape(self):
        return self._shape

    def __len__(self):
        return self._data.shape[0]

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self.array
        return self.array.astype(dtype)


class Image(_Buffer):
    """Image on a reconstruction volume.

    Parameters
    ----------
    volume : Volume
        The volume the image is defined on.
    data : array-like, optional
        Initial values; any shape with ``volume.cells()`` elements, read in
        C order. Zero-filled if omitted.

    Raises
    ------
    ValueError
        If `data` does not have ``volume.cells()`` elements.

    Notes
    -----
    Voxel ``(x, y, z)`` is stored at ``volume.index(x, y, z)``, so the shaped
    view :attr:`array` is indexed ``[z, y, x]``.
    """

    def __init__(self, volume, data=None):
        self.volume = volume
        super().__init__(volume.cells(), volume.dimensions[::-1], data, "image")

    @property
    def dimensions(self):
        """Number of voxels along each axis of the volume."""
        return self.volume.dimensions

    def copy(self):
        return Image(self.volume, self._data)

    def __repr__(self):
        return f"Image({self.volume!r})"


class Sinogram(_Buffer):
    """Projection data of a geometry, one value per ray.

    Parameters
    ----------
    geometry : Geometry
        The geometry whose rays the values belong to.
    data : array-like, optional
        Initial values; any shape with ``geometry.lines()`` elements, read
        in C order. Zero-filled if omitted.

    Raises
    ------
    ValueError
        If `data` does not have ``geometry.lines()`` elements.
    """

    def __init__(self, geometry, data=None):
        self.geometry = geometry
        super().__init__(geometry.lines(), geometry.shape, data, "sinogram")

    @property
    def dimensions(self):
        """Shape of the sinogram, views first."""
        return self.geometry.shape

    def copy(self):
        return Sinogram(self.geometry, self._data)

    def __repr__(self):
        return f"Sinogram({type(self.geometry).__name__}, lines={len(self)})"
