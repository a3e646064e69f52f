"""Kernels reading and writing weighted rays in image buffers.

All buffers are flat arrays addressed by linear voxel index.
"""

from ..constants import _NJIT_DECORATOR


@_NJIT_DECORATOR
def _ray_sum(data, indices, weights):
    """Weighted sum ``sum(weights * data[indices])`` along one ray."""
    total = 0.0
    for k in range(indices.shape[0]):
        total += weights[k] * data[indices[k]]
    return total


@_NJIT_DECORATOR
def _scatter_add(data, indices, weights, scale):
    """Add ``scale * weights`` to `data` at `indices`.

    Repeated indices accumulate, unlike numpy fancy-index assignment.
    """
    for k in range(indices.shape[0]):
        data[indices[k]] += scale * weights[k]


@_NJIT_DECORATOR
def _apply_correction(image, correction, coverage, beta):
    """Apply a normalized correction to an image in place.

    Performs ``image[j] += beta * correction[j] / coverage[j]`` for every
    voxel with positive coverage; voxels touched by no ray are left
    unchanged.

    Returns
    -------
    int
        Number of updated voxels.
    """
    updated = 0
    for j in range(image.shape[0]):
        if coverage[j] > 0.0:
            image[j] += beta * correction[j] / coverage[j]
            updated += 1
    return updated
