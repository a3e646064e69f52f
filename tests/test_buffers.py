import numpy as np

import pytest

from algct import Image, ListGeometry, ParallelGeometry, Sinogram, Volume


def test_image_layout():
    v = Volume(4, 3, 2)
    image = Image(v)
    assert len(image) == 24
    assert image.shape == (2, 3, 4)
    assert image.dimensions == (4, 3, 2)
    image.data[v.index(1, 2, 1)] = 5.0
    assert image.array[1, 2, 1] == 5.0
    assert np.asarray(image).shape == (2, 3, 4)


def test_image_from_data():
    v = Volume(4, 4)
    data = np.arange(16.0).reshape(4, 4)
    image = Image(v, data)
    np.testing.assert_array_equal(image.array, data)
    data[0, 0] = 100.0
    assert image.data[0] == 0.0


def test_image_copy_is_independent():
    image = Image(Volume(4, 4), np.ones(16))
    other = image.copy()
    other.data[:] = 2.0
    assert np.all(image.data == 1.0)
    assert other.volume == image.volume


def test_image_wrong_size():
    with pytest.raises(ValueError):
        Image(Volume(4, 4), np.zeros(15))


def test_sinogram_shape():
    v = Volume(8, 8)
    sino = Sinogram(ParallelGeometry(6, 8, v))
    assert sino.shape == (6, 8)
    assert len(sino) == 48
    assert sino.dimensions == (6, 8)
    assert np.all(sino.data == 0.0)


def test_sinogram_list_geometry():
    v = Volume(8, 8)
    g = ListGeometry([[[0.0, 1.0], [8.0, 1.0]]] * 4, v, group_size=2)
    sino = Sinogram(g, [1.0, 2.0, 3.0, 4.0])
    np.testing.assert_array_equal(sino.array, [[1.0, 2.0], [3.0, 4.0]])
    with pytest.raises(ValueError):
        Sinogram(g, np.zeros(3))
