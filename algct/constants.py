"""Global constants and configuration for the AlgCT package.

This module defines core constants used throughout AlgCT, including the
numeric data type, numerical precision parameters, default algorithm
parameters and the JIT decorator shared by all CPU kernels.
"""

import numpy as np
import numba

# ---------------------------------------------------------------------------
# Data Types and Numerical Constants
# ---------------------------------------------------------------------------

_DTYPE = np.float64
"""Default data type for image and sinogram buffers (numpy.float64)."""

_INDEX_DTYPE = np.int64
"""Data type for voxel index arrays."""

_INF = _DTYPE(np.inf)
"""Floating-point infinity in default data type."""

_EPSILON = _DTYPE(1e-9)
"""Small epsilon value for numerical comparisons to avoid division by zero."""

# ---------------------------------------------------------------------------
# Volume and Geometry Configuration
# ---------------------------------------------------------------------------

SUPPORTED_DIMENSIONS = (2, 3)
"""Dimensions accepted by :class:`~algct.volume.Volume` and the geometries."""

DEFAULT_SAMPLE_STEP = 1.0
"""Distance between sample points of the marching projectors, in voxels."""

# ---------------------------------------------------------------------------
# Reconstruction Defaults
# ---------------------------------------------------------------------------

DEFAULT_BETA = 0.5
"""Default relaxation factor of ART, SART and SIRT."""

DEFAULT_ITERATIONS = 10
"""Default (fixed) number of iterations of ART, SART and SIRT."""

# ---------------------------------------------------------------------------
# JIT Decorators
# ---------------------------------------------------------------------------

_NJIT_DECORATOR = numba.njit(cache=True, nogil=True)
"""Numba nopython JIT decorator for CPU kernels."""
