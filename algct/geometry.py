"""Scanning geometries.

This module provides the geometries that enumerate the rays of a scan:
the regular parallel-beam geometry with uniformly sampled angles and a
centered detector array, and list geometries holding an explicit (for
instance randomly generated) set of rays.

Every geometry maps a ray index in ``[0, lines())`` to a :class:`~algct.rays.Ray`
deterministically and groups consecutive rays into views (one view per angle
for the parallel geometry), which SART uses as its update unit.
"""

import math

import numpy as np

from .constants import _DTYPE
from .rays import Ray
from .utils import _check_count, _check_dimension, _trig_tables


# ============================================================================
# Base Geometry
# ============================================================================

class Geometry:
    """Base class for scanning geometries.

    Subclasses set the total number of rays at construction and implement
    :meth:`_compute_line`.

    Parameters
    ----------
    volume : Volume
        The volume being scanned.
    lines : int
        Total number of rays.
    group_size : int
        Number of consecutive rays forming one view. Must divide `lines`.
    """

    def __init__(self, volume, lines, group_size):
        _check_dimension(volume.dimension)
        self._volume = volume
        self._lines = _check_count(lines, "number of lines")
        self._group_size = _check_count(group_size, "group size")
        if self._lines % self._group_size != 0:
            raise ValueError(
                f"group size {self._group_size} does not divide the number "
                f"of lines {self._lines}"
            )

    @property
    def volume(self):
        """The scanned volume."""
        return self._volume

    def lines(self):
        """Total number of rays in the geometry."""
        return self._lines

    def __len__(self):
        return self._lines

    @property
    def shape(self):
        """Shape of a sinogram for this geometry, slowest varying axis first."""
        return (self.groups()[1], self._group_size)

    def groups(self):
        """Obtain ``(group_size, group_count)`` of the views of this geometry."""
        return self._group_size, self._lines // self._group_size

    def group(self, k):
        """Ray indices of the `k`-th view.

        Raises
        ------
        IndexError
            If `k` is not a valid view index.
        """
        group_size, group_count = self.groups()
        if not 0 <= k < group_count:
            raise IndexError(f"group {k} out of range [0, {group_count})")
        return range(k * group_size, (k + 1) * group_size)

    def get_line(self, i):
        """Obtain the `i`-th ray of the geometry.

        Raises
        ------
        IndexError
            If `i` is not an integer in ``[0, lines())``.
        """
        if i != int(i) or not 0 <= i < self._lines:
            raise IndexError(f"line {i} out of range [0, {self._lines})")
        return self._compute_line(int(i))

    def __iter__(self):
        for i in range(self._lines):
            yield self._compute_line(i)

    def _compute_line(self, i):
        raise NotImplementedError


# ============================================================================
# Parallel Beam Geometry
# ============================================================================

def detector_location(detector, detector_count, detector_step, dimension):
    """Obtain the offset of a detector from the rotation axis.

    Parameters
    ----------
    detector : int or numpy.ndarray
        Index (or array of indices) of the detector within one view.
    detector_count : int
        Number of detectors along one detector axis.
    detector_step : float
        Distance between adjacent detectors.
    dimension : int
        Dimension of the volume. For 3D volumes the detector array is
        two-dimensional and `detector` enumerates it row by row.

    Returns
    -------
    numpy.ndarray
        Offsets, shape ``detector.shape + (dimension - 1,)``.
    """
    detector = np.asarray(detector)
    half = (detector_count - 1) * 0.5
    if dimension == 2:
        offsets = [(detector - half) * detector_step]
    else:
        detector_x = detector % detector_count
        detector_y = detector // detector_count
        offsets = [(detector_x - half) * detector_step, (detector_y - half) * detector_step]
    return np.stack(offsets, axis=-1).astype(_DTYPE)


def compute_line(offset, cos_a, sin_a, volume):
    """Obtain the ray for a detector offset and a view angle.

    The source and detector are placed at ``(-x, u)`` and ``(x, u)``
    relative to the center of the volume, rotated by the negated view angle
    (clockwise convention) and translated to the volume center. In 3D, the
    in-plane line is computed on the ``(x, y)`` slice and both end points
    are extruded to the same out-of-plane coordinate ``v + z / 2``.

    Parameters
    ----------
    offset : numpy.ndarray
        Detector offset ``(u,)`` in 2D or ``(u, v)`` in 3D.
    cos_a, sin_a : float
        Cosine and sine of the negated view angle.
    volume : Volume
        The scanned volume.

    Returns
    -------
    Ray
        The ray of the detector for that view.
    """
    half_width = volume.x
    u = offset[0]
    source_x = cos_a * -half_width - sin_a * u
    source_y = sin_a * -half_width + cos_a * u
    detector_x = cos_a * half_width - sin_a * u
    detector_y = sin_a * half_width + cos_a * u

    center_x, center_y = 0.5 * volume.x, 0.5 * volume.y
    if volume.dimension == 2:
        return Ray(
            np.array([source_x + center_x, source_y + center_y], dtype=_DTYPE),
            np.array([detector_x + center_x, detector_y + center_y], dtype=_DTYPE),
        )

    z = offset[1] + 0.5 * volume.z
    return Ray(
        np.array([source_x + center_x, source_y + center_y, z], dtype=_DTYPE),
        np.array([detector_x + center_x, detector_y + center_y, z], dtype=_DTYPE),
    )


class ParallelGeometry(Geometry):
    """Geometry defined by parallel lines with a number of views.

    Angles are sampled uniformly over ``[0, pi)``. The detector array is
    centered on the rotation axis; in 3D it is a square array of
    ``detector_count`` x ``detector_count`` detectors whose rays are
    parallel to the ``(x, y)`` plane.

    Parameters
    ----------
    angle_count : int
        Number of views.
    detector_count : int
        Number of detectors along each detector axis.
    volume : Volume
        The volume being scanned.

    Notes
    -----
    The detector spacing is ``volume.y / detector_count`` in every
    dimension. This matches the detector array to the volume only when the
    volume is equilateral.

    Examples
    --------
    >>> g = ParallelGeometry(180, 250, Volume(16, 16))
    >>> g.lines()
    45000
    """

    def __init__(self, angle_count, detector_count, volume):
        angle_count = _check_count(angle_count, "angle count")
        detector_count = _check_count(detector_count, "detector count")
        _check_dimension(volume.dimension)
        total_detector_count = detector_count ** (volume.dimension - 1)
        super().__init__(volume, angle_count * total_detector_count, total_detector_count)

        angle_step = math.pi / angle_count
        self._angles = np.arange(angle_count, dtype=_DTYPE) * angle_step
        self._cos, self._sin = _trig_tables(-self._angles)

        # FIXME this is only for equilateral volume
        self._detector_step = volume.y / detector_count
        self._detector_side = detector_count
        self._detectors = detector_location(
            np.arange(total_detector_count), detector_count,
            self._detector_step, volume.dimension,
        )

    @property
    def angle_count(self):
        """Number of views."""
        return self._angles.shape[0]

    @property
    def detector_count(self):
        """Number of detectors per view."""
        return self._detectors.shape[0]

    @property
    def detector_step(self):
        """Distance between adjacent detectors."""
        return self._detector_step

    @property
    def angles(self):
        """View angles in radians."""
        return self._angles

    @property
    def detectors(self):
        """Detector offsets from the rotation axis, shape (detectors, D - 1)."""
        return self._detectors

    @property
    def shape(self):
        if self._volume.dimension == 2:
            return (self.angle_count, self._detector_side)
        return (self.angle_count, self._detector_side, self._detector_side)

    def _compute_line(self, i):
        detector, angle = i % self.detector_count, i // self.detector_count
        return compute_line(
            self._detectors[detector], self._cos[angle], self._sin[angle], self._volume
        )


# ============================================================================
# List Geometries
# ============================================================================

class ListGeometry(Geometry):
    """Geometry defined by an explicit list of rays.

    Parameters
    ----------
    lines : array-like or sequence of Ray
        Rays as an array of shape (n, 2, D) holding source and detector
        positions, or as a sequence of :class:`~algct.rays.Ray` or
        ``(source, detector)`` pairs.
    volume : Volume
        The volume being scanned.
    group_size : int, optional
        Number of consecutive rays forming one view (default: 1).

    Raises
    ------
    ValueError
        If `lines` is empty or does not have shape (n, 2, D).
    """

    def __init__(self, lines, volume, group_size=1):
        _check_dimension(volume.dimension)
        lines = [np.asarray(line, dtype=_DTYPE) for line in lines]
        if not lines:
            raise ValueError("a list geometry needs at least one line")
        lines = np.array(lines, dtype=_DTYPE)
        if lines.ndim != 3 or lines.shape[1:] != (2, volume.dimension):
            raise ValueError(
                f"lines must have shape (n, 2, {volume.dimension}), got {lines.shape}"
            )
        super().__init__(volume, lines.shape[0], group_size)
        self._rays = lines

    @property
    def rays(self):
        """Source and detector positions, shape (n, 2, D)."""
        return self._rays

    def _compute_line(self, i):
        return Ray(self._rays[i, 0].copy(), self._rays[i, 1].copy())


def random_list_geometry(count, volume, seed=None, group_size=1):
    """Generate a list geometry of random rays crossing the volume.

    Each ray passes through two points drawn uniformly from the interior of
    the volume, so every ray intersects it.

    Parameters
    ----------
    count : int
        Number of rays.
    volume : Volume
        The volume being scanned.
    seed : int or numpy.random.Generator, optional
        Seed for reproducibility (default: None).
    group_size : int, optional
        Number of consecutive rays forming one view (default: 1).

    Returns
    -------
    ListGeometry
        Geometry holding `count` rays.

    Examples
    --------
    >>> g = random_list_geometry(1000, Volume(16, 16, 16), seed=42)
    >>> len(g)
    1000
    """
    count = _check_count(count, "line count")
    rng = np.random.default_rng(seed)
    lengths = volume.lengths()
    lines = np.empty((count, 2, volume.dimension), dtype=_DTYPE)
    for i in range(count):
        source = rng.uniform(0.0, 1.0, volume.dimension) * lengths
        detector = rng.uniform(0.0, 1.0, volume.dimension) * lengths
        # redraw coinciding or boundary points, which do not define a crossing line
        while (
            np.allclose(source, detector)
            or np.any(source <= 0.0)
            or np.any(detector <= 0.0)
        ):
            source = rng.uniform(0.0, 1.0, volume.dimension) * lengths
            detector = rng.uniform(0.0, 1.0, volume.dimension) * lengths
        lines[i, 0], lines[i, 1] = source, detector
    return ListGeometry(lines, volume, group_size=group_size)
