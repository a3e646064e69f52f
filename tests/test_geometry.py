import math

import numpy as np

import pytest

from algct import ListGeometry, ParallelGeometry, Ray, Volume, random_list_geometry


def test_parallel_line_count_2d():
    v = Volume(16, 16)
    g = ParallelGeometry(180, 250, v)
    assert g.lines() == 180 * 250
    assert len(g) == 180 * 250
    assert sum(1 for _ in g) == g.lines()


def test_parallel_line_count_3d():
    v = Volume(16, 16, 16)
    g = ParallelGeometry(180, 250, v)
    assert g.lines() == 180 * 250 * 250
    assert g.detector_count == 250 * 250
    assert g.shape == (180, 250, 250)


def test_parallel_iteration_3d():
    v = Volume(16, 16, 16)
    g = ParallelGeometry(10, 12, v)
    assert sum(1 for _ in g) == g.lines() == 10 * 12 * 12


def test_parallel_angles():
    g = ParallelGeometry(7, 4, Volume(8, 8))
    assert g.angle_count == 7
    assert g.angles.shape == (7,)
    np.testing.assert_allclose(np.diff(g.angles), math.pi / 7)
    assert g.angles[0] == 0.0
    assert g.angles[-1] < math.pi


def test_parallel_detectors_centered():
    g = ParallelGeometry(4, 5, Volume(10, 10))
    assert g.detector_step == 2.0
    np.testing.assert_allclose(g.detectors[:, 0], [-4.0, -2.0, 0.0, 2.0, 4.0])

    g3 = ParallelGeometry(4, 3, Volume(6, 6, 6))
    assert g3.detectors.shape == (9, 2)
    np.testing.assert_allclose(g3.detectors[1], [0.0, -2.0])
    np.testing.assert_allclose(g3.detectors[3], [-2.0, 0.0])


def test_parallel_first_line_2d():
    g = ParallelGeometry(4, 16, Volume(16, 16))
    ray = g.get_line(0)
    np.testing.assert_allclose(ray.source, [-8.0, 0.5])
    np.testing.assert_allclose(ray.detector, [24.0, 0.5])


def test_parallel_quarter_turn_2d():
    # at pi / 2 the rays run from top to bottom, offset along x
    g = ParallelGeometry(2, 16, Volume(16, 16))
    ray = g.get_line(16)
    np.testing.assert_allclose(ray.source, [0.5, 24.0], atol=1e-12)
    np.testing.assert_allclose(ray.detector, [0.5, -8.0], atol=1e-12)


def test_parallel_lines_pass_through_center_band():
    v = Volume(16, 16)
    g = ParallelGeometry(8, 16, v)
    center = v.center()
    for ray in g:
        direction = ray.direction / np.linalg.norm(ray.direction)
        offset = ray.source - center
        distance = abs(offset[0] * direction[1] - offset[1] * direction[0])
        assert distance < 8.0


def test_parallel_3d_lines_are_in_plane():
    v = Volume(8, 8, 8)
    g = ParallelGeometry(3, 4, v)
    for i, ray in enumerate(g):
        assert ray.source[2] == ray.detector[2]
        detector = i % g.detector_count
        assert ray.source[2] == pytest.approx(g.detectors[detector][1] + 4.0)


def test_parallel_3d_matches_2d_slice():
    g2 = ParallelGeometry(5, 4, Volume(8, 8))
    g3 = ParallelGeometry(5, 4, Volume(8, 8, 8))
    for angle in range(5):
        for dx in range(4):
            line2 = g2.get_line(angle * 4 + dx)
            line3 = g3.get_line(angle * 16 + dx)
            np.testing.assert_allclose(line3.source[:2], line2.source)
            np.testing.assert_allclose(line3.detector[:2], line2.detector)


def test_groups():
    g = ParallelGeometry(6, 5, Volume(8, 8))
    assert g.groups() == (5, 6)
    assert list(g.group(2)) == [10, 11, 12, 13, 14]
    with pytest.raises(IndexError):
        g.group(6)


def test_get_line_out_of_range():
    g = ParallelGeometry(3, 3, Volume(8, 8))
    with pytest.raises(IndexError):
        g.get_line(9)
    with pytest.raises(IndexError):
        g.get_line(-1)


def test_get_line_rejects_fractional_index():
    g = ParallelGeometry(3, 3, Volume(8, 8))
    with pytest.raises(IndexError):
        g.get_line(1.5)
    assert np.array_equal(g.get_line(2.0).source, g.get_line(2).source)
    assert np.array_equal(g.get_line(np.int64(4)).detector, g.get_line(4).detector)


@pytest.mark.parametrize("args", [(0, 4), (4, 0), (-1, 4)])
def test_parallel_invalid_counts(args):
    with pytest.raises(ValueError):
        ParallelGeometry(*args, Volume(8, 8))


def test_list_geometry():
    v = Volume(4, 4)
    rays = [Ray.between([0, 1], [4, 1]), ([1, 0], [1, 4])]
    g = ListGeometry(rays, v)
    assert g.lines() == 2
    assert g.shape == (2, 1)
    np.testing.assert_array_equal(g.get_line(1).source, [1.0, 0.0])
    assert sum(1 for _ in g) == 2


def test_list_geometry_group_size():
    v = Volume(4, 4)
    lines = np.zeros((6, 2, 2))
    lines[:, 1, 0] = 1.0
    g = ListGeometry(lines, v, group_size=3)
    assert g.groups() == (3, 2)
    with pytest.raises(ValueError):
        ListGeometry(lines, v, group_size=4)


def test_list_geometry_invalid_shapes():
    v = Volume(4, 4)
    with pytest.raises(ValueError):
        ListGeometry([], v)
    with pytest.raises(ValueError):
        ListGeometry(np.zeros((3, 2, 3)), v)


def test_random_list_geometry():
    v = Volume(16, 16, 16)
    g = random_list_geometry(1000, v, seed=3)
    assert g.lines() == 1000
    assert sum(1 for _ in g) == 1000
    assert np.all(g.rays > 0.0) and np.all(g.rays < 16.0)

    again = random_list_geometry(1000, v, seed=3)
    np.testing.assert_array_equal(g.rays, again.rays)
