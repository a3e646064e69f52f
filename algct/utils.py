"""Utility helpers for AlgCT package.

This module provides argument validation shared by the volume, geometry and
buffer classes, conversion of user input to the package data types, and
trigonometric table generation for the scanning geometries.
"""

import numbers

import numpy as np

from .constants import _DTYPE, SUPPORTED_DIMENSIONS


# ============================================================================
# Argument Validation
# ============================================================================

def _check_count(value, name):
    """Validate a strictly positive integer count.

    Parameters
    ----------
    value : int
        Value to validate.
    name : str
        Name of the argument, used in error messages.

    Returns
    -------
    int
        `value` converted to a Python ``int``.

    Raises
    ------
    TypeError
        If `value` is not an integer (booleans are rejected as well).
    ValueError
        If `value` is not strictly positive.

    Examples
    --------
    >>> _check_count(np.int32(4), "size")
    4
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return int(value)


def _check_dimension(dimension):
    """Validate the dimension of a reconstruction problem.

    Raises
    ------
    ValueError
        If `dimension` is not one of :data:`SUPPORTED_DIMENSIONS`.
    """
    if dimension not in SUPPORTED_DIMENSIONS:
        raise ValueError(
            f"Unsupported dimension {dimension}, expected one of {SUPPORTED_DIMENSIONS}"
        )
    return dimension


# ============================================================================
# Array Conversion
# ============================================================================

def _as_point(point, dimension):
    """Convert `point` to a float vector with `dimension` components.

    Raises
    ------
    ValueError
        If `point` does not have exactly `dimension` components.
    """
    point = np.asarray(point, dtype=_DTYPE)
    if point.shape != (dimension,):
        raise ValueError(
            f"Expected a point with {dimension} components, got shape {point.shape}"
        )
    return point


def _as_buffer(data, size, name):
    """Return a flat, contiguous copy of `data` holding exactly `size` values.

    Parameters
    ----------
    data : array-like
        Input values, of any shape. Values are read in C order.
    size : int
        Required number of elements.
    name : str
        Name of the buffer, used in error messages.

    Returns
    -------
    numpy.ndarray
        One-dimensional array of dtype `_DTYPE`.

    Raises
    ------
    ValueError
        If the number of elements of `data` differs from `size`.
    """
    buffer = np.array(data, dtype=_DTYPE).reshape(-1)
    if buffer.size != size:
        raise ValueError(f"{name} has {buffer.size} values, expected {size}")
    return np.ascontiguousarray(buffer)


# ============================================================================
# Trigonometric Table Generation
# ============================================================================

def _trig_tables(angles, dtype=_DTYPE):
    """Compute cosine and sine tables for input angles.

    Parameters
    ----------
    angles : array-like
        Projection angles in radians.
    dtype : numpy.dtype, optional
        Desired data type for output tables. Default is `_DTYPE`.

    Returns
    -------
    cos : numpy.ndarray
        Cosine values of `angles`.
    sin : numpy.ndarray
        Sine values of `angles`.

    Examples
    --------
    >>> cos, sin = _trig_tables([0.0, np.pi / 2])
    >>> cos.round(6)
    array([1., 0.])
    """
    angles = np.asarray(angles, dtype=dtype)
    return np.cos(angles), np.sin(angles)
