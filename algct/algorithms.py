"""Iterative reconstruction algorithms.

ART, SART and SIRT approximately solve ``W x = p`` for the image ``x``,
where ``W`` is the (never materialized) system matrix defined by a
projector over a geometry and ``p`` the measured sinogram. They differ in
when corrections are applied:

- ART updates the image after every single ray. Each ray sees the updates
  of all rays before it, so the sweep is strictly sequential.
- SART accumulates the corrections of all rays of one view while only
  reading the image, then applies them in one step per view.
- SIRT accumulates the corrections of every ray of the geometry before a
  single update per iteration.

The accumulation phases of SART and SIRT read the image and write only
their own correction buffers, so an embedding application may partition
them across workers; the apply phases are single-writer steps. All three
run a fixed number of iterations and update the image in place.
"""

import enum
import logging

import numpy as np

from .buffers import Image
from .constants import _DTYPE, DEFAULT_BETA, DEFAULT_ITERATIONS
from .kernels import _apply_correction, _ray_sum, _scatter_add
from .operations import _as_image, _as_sinogram
from .projectors import make_projector

logger = logging.getLogger(__name__)


# ============================================================================
# Setup
# ============================================================================

def _prepare(volume, geometry, sinogram, projector, beta, iterations, image):
    """Validate arguments and resolve buffers and projector of a run."""
    if geometry.volume != volume:
        raise ValueError(f"geometry scans {geometry.volume!r}, expected {volume!r}")
    if not beta > 0:
        raise ValueError(f"beta must be positive, got {beta}")
    if isinstance(iterations, bool) or int(iterations) != iterations or iterations < 0:
        raise ValueError(f"iterations must be a non-negative integer, got {iterations}")
    sinogram = _as_sinogram(sinogram, geometry)
    image = Image(volume) if image is None else _as_image(image, volume)
    return sinogram, make_projector(projector, volume), image


def _iterate(name, sweep, image, iterations, callback):
    """Run `sweep` a fixed number of times, stopping early if `callback` asks to."""
    logger.info("Starting %s with %d iterations", name, iterations)
    for iteration in range(int(iterations)):
        skipped = sweep()
        if skipped:
            logger.debug("%s iteration %d: skipped %d lines without weight",
                         name, iteration, skipped)
        else:
            logger.debug("%s iteration %d done", name, iteration)
        if callback is not None and callback(iteration, image):
            logger.info("%s stopped by callback after iteration %d", name, iteration)
            break
    logger.info("Finished %s", name)
    return image


# ============================================================================
# ART
# ============================================================================

def _art_update(values, indices, weights, measured, beta):
    """Project `values` onto the hyperplane of one ray, relaxed by `beta`.

    Returns ``False`` (and leaves `values` unchanged) for a ray without
    weight.
    """
    norm = float(np.dot(weights, weights))
    if norm <= 0.0:
        return False
    residual = measured - _ray_sum(values, indices, weights)
    _scatter_add(values, indices, weights, beta * residual / norm)
    return True


def art(volume, geometry, sinogram, projector=None, beta=DEFAULT_BETA,
        iterations=DEFAULT_ITERATIONS, image=None, callback=None):
    """Algebraic reconstruction technique (Kaczmarz method).

    For every ray ``i`` in index order, the image is updated as
    ``x += beta * (p_i - <w_i, x>) / <w_i, w_i> * w_i``.

    Parameters
    ----------
    volume : Volume
        The reconstruction volume.
    geometry : Geometry
        Geometry of the measurement; must scan `volume`.
    sinogram : Sinogram or array-like
        Measured projection data, one value per ray. Not modified.
    projector : Projector, ProjectorKind or str, optional
        Weighting strategy (default: linear interpolation).
    beta : float, optional
        Relaxation factor (default: 0.5).
    iterations : int, optional
        Number of sweeps over all rays (default: 10).
    image : Image or array-like, optional
        Starting image, updated in place when an :class:`Image` is given.
        Zero-filled if omitted.
    callback : callable, optional
        Called as ``callback(iteration, image)`` after every iteration; a
        truthy return value stops the run.

    Returns
    -------
    Image
        The reconstructed image.

    Raises
    ------
    ValueError
        If the arguments are inconsistent (buffer sizes, volumes) or `beta`
        or `iterations` are out of range.

    Examples
    --------
    >>> from algct import Image, ParallelGeometry, Volume, forward_projection
    >>> v = Volume(32, 32)
    >>> g = ParallelGeometry(32, 32, v)
    >>> phantom = Image(v, np.ones(v.cells()))
    >>> x = art(v, g, forward_projection(phantom, g), iterations=5)
    >>> x.array.shape
    (32, 32)
    """
    sinogram, projector, image = _prepare(
        volume, geometry, sinogram, projector, beta, iterations, image
    )
    values, measured = image.data, sinogram.data

    def sweep():
        skipped = 0
        for i, ray in enumerate(geometry):
            indices, weights = projector.row(ray)
            if not _art_update(values, indices, weights, measured[i], beta):
                skipped += 1
        return skipped

    return _iterate("ART", sweep, image, iterations, callback)


# ============================================================================
# SART
# ============================================================================

def _accumulate_view(values, projector, geometry, lines, measured):
    """Accumulation phase of SART: read-only on `values`.

    Parameters
    ----------
    values : numpy.ndarray
        Current image values.
    projector : Projector
        Weighting strategy.
    geometry : Geometry
        The scanning geometry.
    lines : iterable of int
        Ray indices of the view.
    measured : numpy.ndarray
        Measured projection data.

    Returns
    -------
    correction : numpy.ndarray
        Per voxel sum of ``w_ij * (p_i - <w_i, x>) / sum_j w_ij``.
    coverage : numpy.ndarray
        Per voxel sum of ``w_ij`` over the rays of the view.
    skipped : int
        Number of rays without weight.
    """
    correction = np.zeros(values.shape[0], dtype=_DTYPE)
    coverage = np.zeros(values.shape[0], dtype=_DTYPE)
    skipped = 0
    for i in lines:
        indices, weights = projector.row(geometry.get_line(i))
        total = float(weights.sum())
        if total <= 0.0:
            skipped += 1
            continue
        residual = measured[i] - _ray_sum(values, indices, weights)
        _scatter_add(correction, indices, weights, residual / total)
        _scatter_add(coverage, indices, weights, 1.0)
    return correction, coverage, skipped


def sart(volume, geometry, sinogram, projector=None, beta=DEFAULT_BETA,
         iterations=DEFAULT_ITERATIONS, image=None, callback=None):
    """Simultaneous algebraic reconstruction technique.

    For every view of the geometry (see :meth:`Geometry.groups`), the
    corrections of all rays of the view are accumulated against the same
    image and then applied as
    ``x_j += beta * sum_i w_ij r_i / W_i / sum_i w_ij``, where ``r_i`` is the
    residual and ``W_i`` the total weight of ray ``i``.

    Parameters and return value are those of :func:`art`.
    """
    sinogram, projector, image = _prepare(
        volume, geometry, sinogram, projector, beta, iterations, image
    )
    values, measured = image.data, sinogram.data
    _, group_count = geometry.groups()

    def sweep():
        skipped = 0
        for k in range(group_count):
            correction, coverage, missed = _accumulate_view(
                values, projector, geometry, geometry.group(k), measured
            )
            _apply_correction(values, correction, coverage, beta)
            skipped += missed
        return skipped

    return _iterate("SART", sweep, image, iterations, callback)


# ============================================================================
# SIRT
# ============================================================================

def _normalization(projector, geometry, cells):
    """Per-ray and per-voxel weight sums of the full system matrix."""
    ray_totals = np.zeros(geometry.lines(), dtype=_DTYPE)
    coverage = np.zeros(cells, dtype=_DTYPE)
    for i, ray in enumerate(geometry):
        indices, weights = projector.row(ray)
        ray_totals[i] = weights.sum()
        _scatter_add(coverage, indices, weights, 1.0)
    return ray_totals, coverage


def _accumulate_all(values, projector, geometry, measured, ray_totals):
    """Accumulation phase of SIRT: read-only on `values`.

    Returns
    -------
    correction : numpy.ndarray
        Per voxel sum of ``w_ij * (p_i - <w_i, x>) / W_i``.
    skipped : int
        Number of rays without weight.
    """
    correction = np.zeros(values.shape[0], dtype=_DTYPE)
    skipped = 0
    for i, ray in enumerate(geometry):
        if ray_totals[i] <= 0.0:
            skipped += 1
            continue
        indices, weights = projector.row(ray)
        residual = measured[i] - _ray_sum(values, indices, weights)
        _scatter_add(correction, indices, weights, residual / ray_totals[i])
    return correction, skipped


def sirt(volume, geometry, sinogram, projector=None, beta=DEFAULT_BETA,
         iterations=DEFAULT_ITERATIONS, image=None, callback=None):
    """Simultaneous iterative reconstruction technique.

    Every iteration accumulates the corrections of all rays against the
    same image and applies them once, normalized by the per-ray and
    per-voxel weight sums computed before the first iteration. Voxels
    touched by no ray are never updated.

    Parameters and return value are those of :func:`art`.
    """
    sinogram, projector, image = _prepare(
        volume, geometry, sinogram, projector, beta, iterations, image
    )
    values, measured = image.data, sinogram.data
    ray_totals, coverage = _normalization(projector, geometry, volume.cells())

    def sweep():
        correction, skipped = _accumulate_all(
            values, projector, geometry, measured, ray_totals
        )
        _apply_correction(values, correction, coverage, beta)
        return skipped

    return _iterate("SIRT", sweep, image, iterations, callback)


# ============================================================================
# Algorithm Variants
# ============================================================================

class Algorithm(enum.Enum):
    """The closed set of reconstruction algorithms."""

    ART = "art"
    SART = "sart"
    SIRT = "sirt"


_ALGORITHMS = {
    Algorithm.ART: art,
    Algorithm.SART: sart,
    Algorithm.SIRT: sirt,
}


def reconstruct(algorithm, volume, geometry, sinogram, **kwargs):
    """Run a reconstruction algorithm selected by kind or name.

    Parameters
    ----------
    algorithm : Algorithm or str
        ``"art"``, ``"sart"`` or ``"sirt"``.
    volume, geometry, sinogram
        See :func:`art`.
    **kwargs
        Keyword arguments of the algorithm (`projector`, `beta`,
        `iterations`, `image`, `callback`).

    Raises
    ------
    ValueError
        If `algorithm` is unknown.
    """
    try:
        algorithm = Algorithm(algorithm)
    except ValueError:
        names = ", ".join(a.value for a in Algorithm)
        raise ValueError(
            f"unknown algorithm {algorithm!r}, expected one of: {names}"
        ) from None
    return _ALGORITHMS[algorithm](volume, geometry, sinogram, **kwargs)
