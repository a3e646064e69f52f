# algct/__init__.py
"""AlgCT - Algebraic CT Reconstruction Package.

A computed tomography (CT) library computing tomographic reconstructions
with row-action and simultaneous algebraic methods (ART, SART, SIRT) on top
of on-demand ray projectors, with kernels compiled by Numba and
differentiable operators for PyTorch.
"""

import logging

from .volume import Volume

from .rays import (
    Ray,
    inside,
    intersect_box,
)

from .geometry import (
    Geometry,
    ParallelGeometry,
    ListGeometry,
    random_list_geometry,
)

from .projectors import (
    MatrixElement,
    ProjectedLine,
    Projector,
    ClosestProjector,
    LinearProjector,
    JosephProjector,
    ProjectorKind,
    make_projector,
    interpolate,
)

from .buffers import (
    Image,
    Sinogram,
)

from .operations import (
    forward_projection,
    back_projection,
    residual_norm,
)

from .algorithms import (
    Algorithm,
    art,
    sart,
    sirt,
    reconstruct,
)

from .differentiable import (
    ForwardProjectorFunction,
    BackprojectorFunction,
    forward_project,
    back_project,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = '0.1.0'

__all__ = [
    'Volume',
    'Ray',
    'inside',
    'intersect_box',
    'Geometry',
    'ParallelGeometry',
    'ListGeometry',
    'random_list_geometry',
    'MatrixElement',
    'ProjectedLine',
    'Projector',
    'ClosestProjector',
    'LinearProjector',
    'JosephProjector',
    'ProjectorKind',
    'make_projector',
    'interpolate',
    'Image',
    'Sinogram',
    'forward_projection',
    'back_projection',
    'residual_norm',
    'Algorithm',
    'art',
    'sart',
    'sirt',
    'reconstruct',
    'ForwardProjectorFunction',
    'BackprojectorFunction',
    'forward_project',
    'back_project',
]
