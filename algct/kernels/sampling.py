"""Kernels computing voxel weights of sample points.

Sample points are given in continuous volume coordinates, in which voxel
``i`` spans ``[i, i + 1)`` along each axis and has its center at ``i + 0.5``.
Every kernel writes the (linear index, weight) pairs of a batch of points
into preallocated output arrays and returns the number of pairs written.
"""

import math

from ..constants import _NJIT_DECORATOR


# ============================================================================
# Closest Voxel Kernel
# ============================================================================

@_NJIT_DECORATOR
def _closest_kernel(points, dims, strides, indices, weights):
    """Attribute each sample point to the voxel containing it.

    Parameters
    ----------
    points : numpy.ndarray
        Sample points inside the volume, shape (n, D).
    dims : numpy.ndarray
        Number of voxels along each axis, shape (D,).
    strides : numpy.ndarray
        Linear index increment along each axis, shape (D,).
    indices : numpy.ndarray
        Output voxel indices, at least n entries.
    weights : numpy.ndarray
        Output weights, at least n entries.

    Returns
    -------
    int
        Number of pairs written. Points outside the volume are skipped.
    """
    n, d = points.shape
    count = 0
    for k in range(n):
        index = 0
        valid = True
        for axis in range(d):
            coord = int(math.floor(points[k, axis]))
            if coord < 0 or coord >= dims[axis]:
                valid = False
                break
            index += coord * strides[axis]
        if valid:
            indices[count] = index
            weights[count] = 1.0
            count += 1
    return count


# ============================================================================
# Multilinear Interpolation Kernel
# ============================================================================

@_NJIT_DECORATOR
def _interpolation_kernel(points, dims, strides, fixed_axis, scale, indices, weights):
    """Compute multilinear interpolation weights of sample points.

    Each point contributes to the voxels whose centers surround it, with the
    standard multilinear coefficients. Corners outside the volume are
    omitted without renormalizing the remaining weights. Corners are
    enumerated in binary order, so the first pair of an interior point
    belongs to its lowest surrounding voxel.

    Parameters
    ----------
    points : numpy.ndarray
        Sample points, shape (n, D).
    dims : numpy.ndarray
        Number of voxels along each axis, shape (D,).
    strides : numpy.ndarray
        Linear index increment along each axis, shape (D,).
    fixed_axis : int
        Axis along which no interpolation takes place: the point is assigned
        to the slice containing it. Pass -1 to interpolate along every axis.
    scale : float
        Factor applied to every weight.
    indices : numpy.ndarray
        Output voxel indices, at least ``n * 2**D`` entries.
    weights : numpy.ndarray
        Output weights, at least ``n * 2**D`` entries.

    Returns
    -------
    int
        Number of pairs written.

    Notes
    -----
    With ``fixed_axis == -1`` a point yields 2**D pairs, otherwise
    2**(D - 1), when all surrounding voxels lie inside the volume.
    """
    n, d = points.shape
    count = 0
    for k in range(n):
        for corner in range(1 << d):
            if fixed_axis >= 0 and (corner >> fixed_axis) & 1:
                continue
            index = 0
            weight = scale
            valid = True
            for axis in range(d):
                if axis == fixed_axis:
                    coord = int(math.floor(points[k, axis]))
                else:
                    shifted = points[k, axis] - 0.5
                    base = int(math.floor(shifted))
                    frac = shifted - base
                    if (corner >> axis) & 1:
                        coord = base + 1
                        weight *= frac
                    else:
                        coord = base
                        weight *= 1.0 - frac
                if coord < 0 or coord >= dims[axis]:
                    valid = False
                    break
                index += coord * strides[axis]
            if valid:
                indices[count] = index
                weights[count] = weight
                count += 1
    return count
