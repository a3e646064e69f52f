"""PyTorch autograd functions for forward and back projection.

This module wraps :func:`~algct.operations.forward_projection` and
:func:`~algct.operations.back_projection` in PyTorch autograd Function
classes, so that the projectors can be used inside gradient-based
reconstruction pipelines. The two operations are adjoint to each other,
which makes each one the backward pass of the other.

Computation happens on the host; tensors on other devices are moved to
the CPU for the projection and the result is returned on the input device.
"""

import torch

from .operations import back_projection, forward_projection
from .projectors import make_projector


def _to_host(tensor):
    return tensor.detach().to(device="cpu", dtype=torch.float64).contiguous().numpy()


class ForwardProjectorFunction(torch.autograd.Function):
    """
    Summary
    -------
    PyTorch autograd function for differentiable forward projection.

    Notes
    -----
    The forward pass integrates the image along every ray of the geometry,
    the backward pass back projects the incoming gradient with the same
    projector.

    Examples
    --------
    >>> v = Volume(64, 64)
    >>> g = ParallelGeometry(90, 64, v)
    >>> image = torch.zeros(64, 64, dtype=torch.float64, requires_grad=True)
    >>> sinogram = ForwardProjectorFunction.apply(image, g, LinearProjector(v))
    >>> sinogram.sum().backward()
    >>> image.grad.shape
    torch.Size([64, 64])
    """

    @staticmethod
    def forward(ctx, image, geometry, projector):
        """Compute the forward projection of `image`.

        Parameters
        ----------
        image : torch.Tensor
            Image with ``geometry.volume.cells()`` elements, typically of
            shape ``volume.dimensions[::-1]``.
        geometry : Geometry
            The scanning geometry.
        projector : Projector
            Weighting strategy.

        Returns
        -------
        torch.Tensor
            Sinogram of shape ``geometry.shape`` on the device and with the
            dtype of `image`.
        """
        sinogram = forward_projection(_to_host(image), geometry, projector)
        ctx.geometry = geometry
        ctx.projector = projector
        ctx.image_shape = image.shape
        return torch.from_numpy(sinogram.array.copy()).to(device=image.device, dtype=image.dtype)

    @staticmethod
    def backward(ctx, grad_sinogram):
        grad_image = back_projection(_to_host(grad_sinogram), ctx.geometry, ctx.projector)
        grad_image = torch.from_numpy(grad_image.data.copy()).reshape(ctx.image_shape)
        return grad_image.to(device=grad_sinogram.device, dtype=grad_sinogram.dtype), None, None


class BackprojectorFunction(torch.autograd.Function):
    """
    Summary
    -------
    PyTorch autograd function for differentiable back projection.

    Notes
    -----
    The forward pass back projects a sinogram into the volume, the backward
    pass forward projects the incoming gradient with the same projector.
    """

    @staticmethod
    def forward(ctx, sinogram, geometry, projector):
        """Compute the back projection of `sinogram`.

        Parameters
        ----------
        sinogram : torch.Tensor
            Projection data with ``geometry.lines()`` elements.
        geometry : Geometry
            The scanning geometry.
        projector : Projector
            Weighting strategy.

        Returns
        -------
        torch.Tensor
            Image of shape ``geometry.volume.dimensions[::-1]``.
        """
        image = back_projection(_to_host(sinogram), geometry, projector)
        ctx.geometry = geometry
        ctx.projector = projector
        ctx.sinogram_shape = sinogram.shape
        return torch.from_numpy(image.array.copy()).to(device=sinogram.device, dtype=sinogram.dtype)

    @staticmethod
    def backward(ctx, grad_image):
        grad_sinogram = forward_projection(_to_host(grad_image), ctx.geometry, ctx.projector)
        grad_sinogram = torch.from_numpy(grad_sinogram.data.copy()).reshape(ctx.sinogram_shape)
        return grad_sinogram.to(device=grad_image.device, dtype=grad_image.dtype), None, None


def forward_project(image, geometry, projector=None):
    """Differentiable forward projection of an image tensor.

    `projector` accepts a projector instance, kind or name, as
    :func:`~algct.operations.forward_projection` does.
    """
    projector = make_projector(projector, geometry.volume)
    return ForwardProjectorFunction.apply(image, geometry, projector)


def back_project(sinogram, geometry, projector=None):
    """Differentiable back projection of a sinogram tensor."""
    projector = make_projector(projector, geometry.volume)
    return BackprojectorFunction.apply(sinogram, geometry, projector)
