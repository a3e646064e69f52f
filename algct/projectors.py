"""Projectors discretizing line integrals through the volume.

A projector turns a :class:`~algct.rays.Ray` into one row of the implicit
system matrix: the voxels the ray passes through and the weight of each.
Rows are produced on demand, either lazily pair by pair
(:class:`ProjectedLine`) or as compact index/weight arrays
(:meth:`Projector.row`); the full matrix is never materialized.

Three interchangeable weighting strategies are provided:

- :class:`ClosestProjector` samples the ray at a fixed step and gives each
  sample point to the voxel containing it.
- :class:`LinearProjector` samples the ray at a fixed step and spreads each
  sample point over the surrounding voxels by multilinear interpolation.
- :class:`JosephProjector` visits every slice along the dominant axis of
  the ray once and interpolates in the remaining axes.
"""

import enum
from typing import NamedTuple

import numpy as np

from .constants import _DTYPE, _EPSILON, _INDEX_DTYPE, DEFAULT_SAMPLE_STEP
from .kernels import _closest_kernel, _interpolation_kernel
from .rays import intersect_box
from .utils import _as_point


class MatrixElement(NamedTuple):
    """One entry of a system matrix row."""

    index: int
    weight: float


# ============================================================================
# Lazy Rows
# ============================================================================

class ProjectedLine:
    """Restartable lazy sequence of the weighted voxels of one ray.

    Iterating computes the pairs of one sample point at a time; every new
    iteration starts over from the first sample point.

    Parameters
    ----------
    projector : Projector
        Projector defining the weighting strategy.
    ray : Ray
        The projected ray.
    """

    def __init__(self, projector, ray):
        self.projector = projector
        self.ray = ray

    def __iter__(self):
        points = self.projector.sample_points(self.ray)
        indices, weights = self.projector._buffers(1)
        for k in range(points.shape[0]):
            count = self.projector._weigh(self.ray, points[k:k + 1], indices, weights)
            for j in range(count):
                yield MatrixElement(int(indices[j]), float(weights[j]))

    def __repr__(self):
        return f"ProjectedLine({type(self.projector).__name__}, {self.ray!r})"


# ============================================================================
# Projector Base Class
# ============================================================================

class Projector:
    """Base class for projectors.

    Subclasses implement :meth:`sample_points` and :meth:`_weigh`, and set
    `pairs_per_point` to the maximum number of voxels a sample point
    contributes to.

    Parameters
    ----------
    volume : Volume
        The volume rays are projected through.
    """

    kind = None
    pairs_per_point = 1

    def __init__(self, volume):
        self._volume = volume
        self._dims = np.array(volume.dimensions, dtype=_INDEX_DTYPE)
        self._strides = np.array(volume.strides, dtype=_INDEX_DTYPE)
        self._lengths = volume.lengths()

    @property
    def volume(self):
        """The volume rays are projected through."""
        return self._volume

    def __call__(self, ray):
        """Obtain the lazy weighted voxel sequence of `ray`."""
        self._check_ray(ray)
        return ProjectedLine(self, ray)

    def row(self, ray):
        """Compute the system matrix row of `ray`.

        Parameters
        ----------
        ray : Ray
            The projected ray.

        Returns
        -------
        indices : numpy.ndarray
            Sorted, unique voxel indices.
        weights : numpy.ndarray
            Weight of each voxel; contributions of several sample points to
            the same voxel are summed.
        """
        self._check_ray(ray)
        points = self.sample_points(ray)
        indices, weights = self._buffers(points.shape[0])
        count = self._weigh(ray, points, indices, weights)
        return _merge(indices[:count], weights[:count])

    def sample_points(self, ray):
        """Sample points of `ray` inside the volume, shape (n, D)."""
        raise NotImplementedError

    def _weigh(self, ray, points, indices, weights):
        raise NotImplementedError

    def _buffers(self, points):
        size = max(points, 1) * self.pairs_per_point
        return np.empty(size, dtype=_INDEX_DTYPE), np.empty(size, dtype=_DTYPE)

    def _inside(self, points):
        return np.all((points > 0.0) & (points < self._lengths), axis=1)

    def _check_ray(self, ray):
        if ray.dimension != self._volume.dimension:
            raise ValueError(
                f"ray of dimension {ray.dimension} does not match "
                f"volume of dimension {self._volume.dimension}"
            )

    def __repr__(self):
        return f"{type(self).__name__}({self._volume!r})"


def _merge(indices, weights):
    """Sum the weights of repeated indices."""
    if indices.shape[0] == 0:
        return indices.copy(), weights.copy()
    unique, inverse = np.unique(indices, return_inverse=True)
    merged = np.bincount(inverse.reshape(-1), weights=weights, minlength=unique.shape[0])
    return unique.astype(_INDEX_DTYPE), merged.astype(_DTYPE)


class _MarchingProjector(Projector):
    """Projector sampling the ray at a fixed step inside the volume."""

    def __init__(self, volume, step=DEFAULT_SAMPLE_STEP):
        super().__init__(volume)
        if not step > 0:
            raise ValueError(f"sample step must be positive, got {step}")
        self.step = float(step)

    def sample_points(self, ray):
        """Sample the part of `ray` inside the volume at (about) `step` spacing.

        The chord is split into ``max(1, round(length / step))`` equal
        segments and sampled at their midpoints, so every ray crossing the
        interior of the volume yields at least one sample point.
        """
        chord = intersect_box(ray, self._volume)
        if chord is None:
            return np.empty((0, self._volume.dimension), dtype=_DTYPE)
        t_enter, t_exit = chord
        length = (t_exit - t_enter) * ray.length
        n = max(1, int(round(length / self.step)))
        ts = t_enter + (np.arange(n, dtype=_DTYPE) + 0.5) * ((t_exit - t_enter) / n)
        points = ray.source + ts[:, None] * ray.direction
        return points[self._inside(points)]


# ============================================================================
# Projector Strategies
# ============================================================================

class ClosestProjector(_MarchingProjector):
    """Projector giving full weight to the voxel containing each sample point.

    Parameters
    ----------
    volume : Volume
        The volume rays are projected through.
    step : float, optional
        Distance between sample points in voxels (default: 1.0).
    """

    def _weigh(self, ray, points, indices, weights):
        return _closest_kernel(points, self._dims, self._strides, indices, weights)


class LinearProjector(_MarchingProjector):
    """Projector interpolating each sample point multilinearly.

    Each sample point spreads a total weight of one over the 4 (2D) or 8
    (3D) voxels whose centers surround it.

    Parameters
    ----------
    volume : Volume
        The volume rays are projected through.
    step : float, optional
        Distance between sample points in voxels (default: 1.0).
    """

    def __init__(self, volume, step=DEFAULT_SAMPLE_STEP):
        super().__init__(volume, step)
        self.pairs_per_point = 1 << volume.dimension

    def _weigh(self, ray, points, indices, weights):
        return _interpolation_kernel(
            points, self._dims, self._strides, -1, 1.0, indices, weights
        )


class JosephProjector(Projector):
    """Projector implementing Joseph's method.

    The ray is sampled exactly once per slice of its dominant axis (the
    axis along which its direction has the largest component), at the
    slice centers. The remaining coordinates are interpolated linearly and
    each weight is scaled by the length of the ray within one slice, so a
    ray crossing ``n`` slices carries a total weight equal to its length.

    Parameters
    ----------
    volume : Volume
        The volume rays are projected through.
    """

    def __init__(self, volume):
        super().__init__(volume)
        self.pairs_per_point = 1 << (volume.dimension - 1)

    @staticmethod
    def dominant_axis(ray):
        """Axis along which the direction of `ray` has the largest component."""
        return int(np.argmax(np.abs(ray.direction)))

    def sample_points(self, ray):
        direction = ray.direction
        axis = self.dominant_axis(ray)
        if abs(direction[axis]) <= _EPSILON:
            return np.empty((0, self._volume.dimension), dtype=_DTYPE)
        centers = np.arange(self._dims[axis], dtype=_DTYPE) + 0.5
        ts = (centers - ray.source[axis]) / direction[axis]
        points = ray.source + ts[:, None] * direction
        return points[self._inside(points)]

    def _weigh(self, ray, points, indices, weights):
        if points.shape[0] == 0:
            return 0
        axis = self.dominant_axis(ray)
        direction = ray.direction
        scale = float(np.linalg.norm(direction) / abs(direction[axis]))
        return _interpolation_kernel(
            points, self._dims, self._strides, axis, scale, indices, weights
        )


def interpolate(point, volume):
    """Compute the multilinear interpolation weights of a single point.

    Parameters
    ----------
    point : array-like
        Point in continuous volume coordinates, shape (D,).
    volume : Volume
        The volume whose voxels are interpolated.

    Returns
    -------
    list of MatrixElement
        Surrounding voxels inside the volume, lowest voxel first.

    Examples
    --------
    >>> q = interpolate([2.3, 2.3, 2.3], Volume(8, 8, 8))
    >>> len(q), q[0].index
    (8, 73)
    """
    point = _as_point(point, volume.dimension)
    projector = LinearProjector(volume)
    indices, weights = projector._buffers(1)
    count = _interpolation_kernel(
        point[None, :], projector._dims, projector._strides, -1, 1.0, indices, weights
    )
    return [MatrixElement(int(indices[j]), float(weights[j])) for j in range(count)]


# ============================================================================
# Projector Variants
# ============================================================================

class ProjectorKind(enum.Enum):
    """The closed set of projector strategies."""

    CLOSEST = "closest"
    LINEAR = "linear"
    JOSEPH = "joseph"


_PROJECTORS = {
    ProjectorKind.CLOSEST: ClosestProjector,
    ProjectorKind.LINEAR: LinearProjector,
    ProjectorKind.JOSEPH: JosephProjector,
}

for _kind, _cls in _PROJECTORS.items():
    _cls.kind = _kind


def make_projector(kind, volume):
    """Construct a projector of the given kind.

    Parameters
    ----------
    kind : ProjectorKind, str or Projector or None
        Projector kind or its name. A projector instance is returned as is
        after checking its volume; ``None`` selects the linear projector.
    volume : Volume
        The volume rays are projected through.

    Returns
    -------
    Projector

    Raises
    ------
    ValueError
        If `kind` is unknown, or a projector instance was built for
        another volume.
    """
    if kind is None:
        kind = ProjectorKind.LINEAR
    if isinstance(kind, Projector):
        if kind.volume != volume:
            raise ValueError(
                f"projector was built for {kind.volume!r}, expected {volume!r}"
            )
        return kind
    try:
        kind = ProjectorKind(kind)
    except ValueError:
        names = ", ".join(k.value for k in ProjectorKind)
        raise ValueError(f"unknown projector {kind!r}, expected one of: {names}") from None
    return _PROJECTORS[kind](volume)
