"""Forward and back projection.

Forward projection integrates an image along every ray of a geometry;
back projection is its adjoint, smearing every sinogram value back along
its ray. Both accept any projector, or a projector kind, satisfying the
:class:`~algct.projectors.Projector` contract.
"""

import logging

import numpy as np

from .buffers import Image, Sinogram
from .kernels import _ray_sum, _scatter_add
from .projectors import make_projector

logger = logging.getLogger(__name__)


def _as_image(image, volume):
    """Wrap array input as an :class:`Image` on `volume`, checking its size."""
    if isinstance(image, Image):
        if image.volume != volume:
            raise ValueError(f"image is defined on {image.volume!r}, expected {volume!r}")
        return image
    return Image(volume, image)


def _as_sinogram(sinogram, geometry):
    """Wrap array input as a :class:`Sinogram` of `geometry`, checking its size."""
    if isinstance(sinogram, Sinogram):
        other = sinogram.geometry
        if other is not geometry and (
            type(other) is not type(geometry)
            or other.volume != geometry.volume
            or other.shape != geometry.shape
        ):
            raise ValueError(
                f"sinogram belongs to another {type(other).__name__}, "
                f"expected {type(geometry).__name__} with shape {geometry.shape}"
            )
        if len(sinogram) != geometry.lines():
            raise ValueError(
                f"sinogram has {len(sinogram)} values, expected {geometry.lines()}"
            )
        return sinogram
    return Sinogram(geometry, sinogram)


def forward_projection(image, geometry, projector=None):
    """Compute the forward projection of an image.

    For every ray ``i`` of `geometry`, ``sinogram[i]`` is the weighted sum
    of the image values over the row of ``geometry.get_line(i)``.

    Parameters
    ----------
    image : Image or array-like
        Image on ``geometry.volume``. It is not modified.
    geometry : Geometry
        Geometry whose rays are integrated.
    projector : Projector, ProjectorKind or str, optional
        Weighting strategy (default: linear interpolation).

    Returns
    -------
    Sinogram
        The simulated projection data.

    Examples
    --------
    >>> v = Volume(32, 32)
    >>> g = ParallelGeometry(16, 32, v)
    >>> sino = forward_projection(Image(v), g)
    >>> sino.array.shape
    (16, 32)
    """
    volume = geometry.volume
    image = _as_image(image, volume)
    projector = make_projector(projector, volume)

    sinogram = Sinogram(geometry)
    values = image.data
    out = sinogram.data
    for i, ray in enumerate(geometry):
        indices, weights = projector.row(ray)
        out[i] = _ray_sum(values, indices, weights)
    logger.debug("Forward projected %d lines with %r", len(out), projector)
    return sinogram


def back_projection(sinogram, geometry, projector=None):
    """Compute the back projection of a sinogram.

    This is the adjoint of :func:`forward_projection`: every voxel
    accumulates ``weight * sinogram[i]`` over all rays ``i`` touching it.

    Parameters
    ----------
    sinogram : Sinogram or array-like
        Projection data with ``geometry.lines()`` values. It is not modified.
    geometry : Geometry
        Geometry the projection data belongs to.
    projector : Projector, ProjectorKind or str, optional
        Weighting strategy (default: linear interpolation).

    Returns
    -------
    Image
        The back projected image.
    """
    volume = geometry.volume
    sinogram = _as_sinogram(sinogram, geometry)
    projector = make_projector(projector, volume)

    image = Image(volume)
    values = sinogram.data
    out = image.data
    for i, ray in enumerate(geometry):
        if values[i] == 0.0:
            continue
        indices, weights = projector.row(ray)
        _scatter_add(out, indices, weights, values[i])
    return image


def residual_norm(image, geometry, sinogram, projector=None):
    """Euclidean norm of ``sinogram - forward_projection(image)``."""
    sinogram = _as_sinogram(sinogram, geometry)
    simulated = forward_projection(image, geometry, projector)
    return float(np.linalg.norm(sinogram.data - simulated.data))
