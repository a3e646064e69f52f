"""Rays through the reconstruction volume.

A ray is the line through a source and a detector point. Projectors treat
it as an infinite line and clip it against the volume box; the helpers in
this module implement that clipping and the point containment test shared
by all projectors.
"""

from typing import NamedTuple

import numpy as np

from .constants import _DTYPE, _EPSILON, _INF


class Ray(NamedTuple):
    """Source-detector pair defining a line in continuous space.

    Attributes
    ----------
    source : numpy.ndarray
        Source position, shape (D,).
    detector : numpy.ndarray
        Detector position, shape (D,).
    """

    source: np.ndarray
    detector: np.ndarray

    @classmethod
    def between(cls, source, detector):
        """Construct a ray from two array-like points of equal dimension."""
        source = np.asarray(source, dtype=_DTYPE)
        detector = np.asarray(detector, dtype=_DTYPE)
        if source.ndim != 1 or source.shape != detector.shape:
            raise ValueError(
                f"source and detector must be vectors of equal length, "
                f"got shapes {source.shape} and {detector.shape}"
            )
        return cls(source, detector)

    @property
    def dimension(self):
        return self.source.shape[0]

    @property
    def direction(self):
        """Unnormalized direction ``detector - source``."""
        return self.detector - self.source

    @property
    def length(self):
        """Distance between source and detector."""
        return float(np.linalg.norm(self.direction))

    def point_at(self, t):
        """Point ``source + t * (detector - source)``."""
        return self.source + t * self.direction


def inside(point, volume):
    """Check whether `point` lies strictly inside `volume`.

    A point on any face of the volume box, the near faces included, is
    considered outside.

    Parameters
    ----------
    point : array-like
        Point in continuous volume coordinates, shape (D,).
    volume : Volume
        The volume to test against.

    Returns
    -------
    bool
        ``True`` if ``0 < point[i] < volume[i]`` on every axis.

    Examples
    --------
    >>> v = Volume(4, 4)
    >>> inside((0, 0), v), inside((1, 1), v), inside((4, 4), v)
    (False, True, False)
    """
    point = np.asarray(point, dtype=_DTYPE)
    return bool(np.all(point > 0) and np.all(point < volume.lengths()))


def intersect_box(ray, volume):
    """Clip the line through `ray` against the box of `volume`.

    Uses the slab method on the parametrization
    ``p(t) = source + t * (detector - source)``.

    Parameters
    ----------
    ray : Ray
        Ray to clip.
    volume : Volume
        Volume whose box ``[0, extent]^D`` the line is clipped to.

    Returns
    -------
    tuple of float or None
        ``(t_enter, t_exit)`` with ``t_enter < t_exit``, or ``None`` if the
        ray is degenerate or its line misses the box. A line running inside
        a face of the box has no interior and is reported as a miss.
    """
    direction = ray.direction
    if not np.any(np.abs(direction) > _EPSILON):
        return None

    t_min, t_max = -_INF, _INF
    for origin, step, extent in zip(ray.source, direction, volume.lengths()):
        if abs(step) > _EPSILON:
            t1, t2 = (0.0 - origin) / step, (extent - origin) / step
            t_min, t_max = max(t_min, min(t1, t2)), min(t_max, max(t1, t2))
        elif origin <= 0.0 or origin >= extent:
            # parallel to this slab and not strictly between its faces
            return None

    if t_min >= t_max:
        return None
    return float(t_min), float(t_max)
