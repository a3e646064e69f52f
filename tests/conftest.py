"""
Shared fixtures for the AlgCT test suite.
"""

import numpy as np

import pytest

from algct import Image, ParallelGeometry, Volume


def disc_phantom(volume, radius=None, value=1.0):
    """Image with a centered disc (2D) or ball (3D) of constant value and a
    smaller off-center square insert."""
    radius = 0.3 * min(volume.dimensions) if radius is None else radius
    centers = [np.arange(n) + 0.5 for n in volume.dimensions[::-1]]
    grids = np.meshgrid(*centers, indexing="ij")
    middle = volume.center()[::-1]
    distance = np.sqrt(sum((g - c) ** 2 for g, c in zip(grids, middle)))
    values = np.where(distance <= radius, value, 0.0)
    k = [n // 4 for n in volume.dimensions[::-1]]
    insert = tuple(slice(ki, 2 * ki) for ki in k)
    values[insert] += 0.5 * value
    return Image(volume, values)


@pytest.fixture
def volume2d():
    return Volume(16, 16)


@pytest.fixture
def volume3d():
    return Volume(8, 8, 8)


@pytest.fixture
def phantom2d(volume2d):
    return disc_phantom(volume2d)


@pytest.fixture
def geometry2d(volume2d):
    return ParallelGeometry(16, 16, volume2d)
