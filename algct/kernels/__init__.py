"""Numba kernels for ray weighting and accumulation.

This subpackage contains the compiled CPU kernels computing the
(voxel index, weight) pairs of sample points along a ray and the kernels
accumulating weighted rays into and out of image buffers.
"""

from .sampling import (
    _closest_kernel,
    _interpolation_kernel,
)

from .accumulation import (
    _ray_sum,
    _scatter_add,
    _apply_correction,
)

__all__ = [
    '_closest_kernel',
    '_interpolation_kernel',
    '_ray_sum',
    '_scatter_add',
    '_apply_correction',
]
