"""Reconstruction volume.

This module provides the :class:`Volume` class describing the discretized
region that is being imaged: the number of voxels along each axis, the
physical extent of the grid and the mapping between voxel coordinates and
linear voxel indices shared by images, geometries and projectors.
"""

import math
from collections.abc import Sequence

import numpy as np

from .constants import _DTYPE
from .utils import _check_count, _check_dimension


class Volume:
    """The region which is being imaged.

    The volume is an axis-aligned box subdivided into a regular grid of
    voxels. Voxel ``(i_0, ..., i_{D-1})`` occupies the unit cell
    ``[i_0, i_0 + 1) x ... x [i_{D-1}, i_{D-1} + 1)``, so the physical extent
    of the volume equals its voxel counts. Linear indices are computed with
    the first axis varying fastest.

    Parameters
    ----------
    *dimensions : int or sequence of int
        Number of voxels along each axis, either as separate arguments or as
        a single sequence.

    Raises
    ------
    TypeError
        If an extent is not an integer.
    ValueError
        If an extent is not positive or the dimension is unsupported.

    Examples
    --------
    >>> v = Volume(16, 16, 16)
    >>> v.cells()
    4096
    >>> v.unroll(v.index(1, 2, 3))
    (1, 2, 3)
    """

    def __init__(self, *dimensions):
        if len(dimensions) == 1 and isinstance(dimensions[0], (Sequence, np.ndarray)):
            dimensions = tuple(dimensions[0])
        _check_dimension(len(dimensions))
        self._dimensions = tuple(
            _check_count(extent, f"extent of axis {axis}")
            for axis, extent in enumerate(dimensions)
        )
        strides = [1]
        for extent in self._dimensions[:-1]:
            strides.append(strides[-1] * extent)
        self._strides = tuple(strides)

    @classmethod
    def cube(cls, size, dimension):
        """Construct a cubic volume spanning `size` voxels on each axis."""
        _check_dimension(dimension)
        return cls(*([size] * dimension))

    # ------------------------------------------------------------------
    # Shape accessors
    # ------------------------------------------------------------------

    @property
    def dimension(self):
        """Number of axes of the volume."""
        return len(self._dimensions)

    @property
    def dimensions(self):
        """Tuple whose i-th element is the number of voxels on the i-th axis."""
        return self._dimensions

    @property
    def strides(self):
        """Linear index increment of a unit step along each axis."""
        return self._strides

    @property
    def x(self):
        """Number of voxels in the first dimension."""
        return self._dimensions[0]

    @property
    def y(self):
        """Number of voxels in the second dimension."""
        return self._dimensions[1]

    @property
    def z(self):
        """Number of voxels in the third dimension.

        Raises
        ------
        ValueError
            If the volume is two-dimensional.
        """
        if self.dimension < 3:
            raise ValueError("requesting 'z' in volume of dimension < 3")
        return self._dimensions[2]

    def __getitem__(self, axis):
        return self._dimensions[axis]

    def lengths(self):
        """Physical side lengths of the volume as a float vector."""
        return np.array(self._dimensions, dtype=_DTYPE)

    def center(self):
        """Physical center of the volume."""
        return 0.5 * self.lengths()

    def cells(self):
        """Total number of cells (voxels) in the volume."""
        return math.prod(self._dimensions)

    def __len__(self):
        return self.cells()

    # ------------------------------------------------------------------
    # Index arithmetic
    # ------------------------------------------------------------------

    def index(self, *coordinates):
        """Obtain the linear index of a voxel.

        Parameters
        ----------
        *coordinates : int or sequence of int
            Integer voxel coordinates, either as separate arguments or as a
            single sequence.

        Returns
        -------
        int
            Linear index of the voxel.

        Raises
        ------
        IndexError
            If the number of coordinates does not match the dimension or a
            coordinate lies outside ``[0, extent)``.
        """
        if len(coordinates) == 1 and isinstance(coordinates[0], (Sequence, np.ndarray)):
            coordinates = tuple(coordinates[0])
        if len(coordinates) != self.dimension:
            raise IndexError(
                f"expected {self.dimension} coordinates, got {len(coordinates)}"
            )
        result = 0
        for axis, (coordinate, extent, stride) in enumerate(
            zip(coordinates, self._dimensions, self._strides)
        ):
            if coordinate != int(coordinate) or not 0 <= coordinate < extent:
                raise IndexError(
                    f"coordinate {coordinate} out of range [0, {extent}) on axis {axis}"
                )
            result += int(coordinate) * stride
        return result

    def unroll(self, index):
        """Obtain the voxel coordinates of a linear index.

        This is the inverse of :meth:`index`.

        Raises
        ------
        IndexError
            If `index` lies outside ``[0, cells())``.
        """
        if index != int(index) or not 0 <= index < self.cells():
            raise IndexError(f"index {index} out of range [0, {self.cells()})")
        index = int(index)
        coordinates = []
        for extent in self._dimensions:
            index, coordinate = divmod(index, extent)
            coordinates.append(coordinate)
        return tuple(coordinates)

    # ------------------------------------------------------------------
    # Value semantics
    # ------------------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, Volume):
            return NotImplemented
        return self._dimensions == other._dimensions

    def __hash__(self):
        return hash(self._dimensions)

    def __repr__(self):
        return f"Volume{self._dimensions}"
