import numpy as np

import pytest

from algct import Ray, Volume, inside, intersect_box


def test_inside_2d():
    k = 4
    v = Volume(k, k)
    points = [(0, 0), (k, k), (k / 2, k / 2), (k / 3, k / 2), (0, k), (k, 0), (1, 1)]
    expected = [False, False, True, True, False, False, True]
    assert [inside(p, v) for p in points] == expected


def test_inside_2d_integer_division():
    k = 4
    v = Volume(k, k)
    assert inside((k // 3, k // 2), v)


def test_inside_3d():
    k = 4
    v = Volume(k, k, k)
    points = [
        (0, 0, 0), (k, k, 0), (k / 2, k / 2, k / 2), (k / 3, k / 2, k / 4),
        (0, k, 0), (k, 0, 0), (1, 1, 1),
    ]
    expected = [False, False, True, True, False, False, True]
    assert [inside(p, v) for p in points] == expected


def test_ray_properties():
    ray = Ray.between([0.0, 0.0], [3.0, 4.0])
    assert ray.dimension == 2
    assert ray.length == pytest.approx(5.0)
    np.testing.assert_allclose(ray.point_at(0.5), [1.5, 2.0])
    with pytest.raises(ValueError):
        Ray.between([0.0, 0.0], [1.0, 1.0, 1.0])


def test_intersect_box_crossing():
    v = Volume(16, 16)
    ray = Ray.between([-8.0, 0.5], [24.0, 0.5])
    assert intersect_box(ray, v) == pytest.approx((0.25, 0.75))


def test_intersect_box_is_infinite_line():
    # both points inside: the chord extends beyond them
    v = Volume(4, 4)
    ray = Ray.between([1.0, 1.0], [2.0, 1.0])
    assert intersect_box(ray, v) == pytest.approx((-1.0, 3.0))


def test_intersect_box_diagonal_3d():
    v = Volume(4, 4, 4)
    ray = Ray.between([-1.0, -1.0, -1.0], [5.0, 5.0, 5.0])
    t_enter, t_exit = intersect_box(ray, v)
    np.testing.assert_allclose(ray.point_at(t_enter), [0.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(ray.point_at(t_exit), [4.0, 4.0, 4.0], atol=1e-12)


@pytest.mark.parametrize(
    "source, detector",
    [
        ([-1.0, 5.0], [5.0, 5.0]),  # parallel, above the box
        ([-1.0, 0.0], [5.0, 0.0]),  # along the near face
        ([-1.0, 4.0], [5.0, 4.0]),  # along the far face
        ([-2.0, 3.0], [3.0, 8.0]),  # diagonal, passing the corner
        ([1.0, 1.0], [1.0, 1.0]),   # degenerate
    ],
)
def test_intersect_box_miss(source, detector):
    v = Volume(4, 4)
    assert intersect_box(Ray.between(source, detector), v) is None
