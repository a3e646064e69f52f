import math
from collections import defaultdict

import numpy as np

import pytest

from algct import (
    ClosestProjector,
    JosephProjector,
    LinearProjector,
    ParallelGeometry,
    ProjectorKind,
    Ray,
    Volume,
    interpolate,
    make_projector,
    random_list_geometry,
)

PROJECTORS = [ClosestProjector, LinearProjector, JosephProjector]


def test_interpolation_2d():
    q = interpolate([2.3, 2.3], Volume(8, 8))
    assert len(q) == 4
    assert sum(e.weight for e in q) == pytest.approx(1.0)


def test_interpolation_3d():
    q = interpolate([2.3, 2.3, 2.3], Volume(8, 8, 8))
    assert len(q) == 8
    assert q[0].index == 73
    assert sum(e.weight for e in q) == pytest.approx(1.0)


def test_interpolation_weights():
    q = interpolate([2.3, 4.5], Volume(8, 8))
    weights = {e.index: e.weight for e in q}
    v = Volume(8, 8)
    assert weights[v.index(1, 4)] == pytest.approx(0.2)
    assert weights[v.index(2, 4)] == pytest.approx(0.8)
    assert weights[v.index(1, 5)] == pytest.approx(0.0)


def test_interpolation_at_border_omits_outside_voxels():
    v = Volume(8, 8)
    q = interpolate([0.2, 4.0], v)
    assert len(q) == 2
    assert {e.index for e in q} == {v.index(0, 3), v.index(0, 4)}
    assert sum(e.weight for e in q) == pytest.approx(0.7)


@pytest.mark.parametrize("projector", [ClosestProjector, LinearProjector])
def test_parallel_lines_are_not_empty_3d(projector):
    k = 16
    v = Volume(k, k, k)
    g = ParallelGeometry(k, k, v)
    proj = projector(v)
    for line in g:
        assert next(iter(proj(line)), None) is not None


@pytest.mark.parametrize("projector", PROJECTORS)
def test_parallel_lines_are_not_empty_2d(projector):
    v = Volume(16, 16)
    g = ParallelGeometry(32, 16, v)
    proj = projector(v)
    for line in g:
        assert proj.row(line)[0].shape[0] > 0


@pytest.mark.parametrize("projector", [ClosestProjector, LinearProjector])
def test_random_lines_are_not_empty(projector):
    v = Volume(16, 16, 16)
    g = random_list_geometry(1000, v, seed=0)
    proj = projector(v)
    for line in g:
        assert any(True for _ in proj(line))


@pytest.mark.parametrize("projector", PROJECTORS)
def test_line_missing_volume_is_empty(projector):
    v = Volume(8, 8)
    proj = projector(v)
    for ray in [
        Ray.between([-4.0, 9.0], [12.0, 9.0]),
        Ray.between([-4.0, 0.0], [12.0, 0.0]),
        Ray.between([3.0, 3.0], [3.0, 3.0]),
    ]:
        assert list(proj(ray)) == []
        indices, weights = proj.row(ray)
        assert indices.shape == weights.shape == (0,)


@pytest.mark.parametrize("projector", PROJECTORS)
def test_lazy_sequence_matches_row(projector):
    v = Volume(12, 10)
    proj = projector(v)
    ray = Ray.between([-3.0, 1.7], [15.0, 8.2])
    merged = defaultdict(float)
    for index, weight in proj(ray):
        merged[index] += weight
    indices, weights = proj.row(ray)
    assert sorted(merged) == list(indices)
    np.testing.assert_allclose([merged[i] for i in indices], weights)


@pytest.mark.parametrize("projector", PROJECTORS)
def test_lazy_sequence_is_restartable(projector):
    v = Volume(8, 8, 8)
    proj = projector(v)
    line = proj(Ray.between([-1.0, 2.2, 3.3], [9.0, 5.1, 4.4]))
    first = list(line)
    assert len(first) > 0
    assert list(line) == first


@pytest.mark.parametrize("projector", PROJECTORS)
def test_weights_inside_volume(projector):
    v = Volume(6, 7, 5)
    proj = projector(v)
    g = random_list_geometry(50, v, seed=1)
    for line in g:
        indices, weights = proj.row(line)
        assert np.all(indices >= 0) and np.all(indices < v.cells())
        assert np.all(weights >= 0.0)


def test_closest_horizontal_line():
    v = Volume(16, 16)
    indices, weights = ClosestProjector(v).row(Ray.between([-8.0, 0.5], [24.0, 0.5]))
    np.testing.assert_array_equal(indices, np.arange(16))
    np.testing.assert_array_equal(weights, np.ones(16))


def test_linear_horizontal_line_through_voxel_centers():
    v = Volume(16, 16)
    indices, weights = LinearProjector(v).row(Ray.between([-8.0, 3.5], [24.0, 3.5]))
    assert weights.sum() == pytest.approx(16.0)
    nonzero = indices[weights > 1e-12]
    np.testing.assert_array_equal(nonzero, [v.index(x, 3) for x in range(16)])


def test_joseph_one_sample_per_slice():
    v = Volume(16, 16)
    ray = Ray.between([-1.0, -0.5], [17.0, 8.5])
    points = JosephProjector(v).sample_points(ray)
    np.testing.assert_allclose(points[:, 0], np.arange(16) + 0.5)


def test_joseph_total_weight_is_chord_length():
    v = Volume(16, 16)
    ray = Ray.between([-1.0, -1.0], [17.0, 17.0])
    _, weights = JosephProjector(v).row(ray)
    assert weights.sum() == pytest.approx(16 * math.sqrt(2))


def test_joseph_dominant_axis():
    v = Volume(8, 8, 8)
    ray = Ray.between([4.0, -1.0, 3.0], [5.0, 9.0, 4.5])
    assert JosephProjector.dominant_axis(ray) == 1
    indices, _ = JosephProjector(v).row(ray)
    assert {v.unroll(i)[1] for i in indices} == set(range(8))


def test_joseph_pairs_per_slice():
    v = Volume(8, 8, 8)
    proj = JosephProjector(v)
    ray = Ray.between([-1.0, 2.3, 5.6], [9.0, 2.3, 5.6])
    assert len(list(proj(ray))) == 8 * 4


def test_make_projector():
    v = Volume(8, 8)
    assert isinstance(make_projector("closest", v), ClosestProjector)
    assert isinstance(make_projector(ProjectorKind.JOSEPH, v), JosephProjector)
    assert isinstance(make_projector(None, v), LinearProjector)
    proj = LinearProjector(v)
    assert make_projector(proj, v) is proj
    assert proj.kind is ProjectorKind.LINEAR


def test_make_projector_errors():
    with pytest.raises(ValueError):
        make_projector("nearest", Volume(8, 8))
    with pytest.raises(ValueError):
        make_projector(LinearProjector(Volume(8, 8)), Volume(4, 4))


def test_ray_dimension_mismatch():
    proj = LinearProjector(Volume(8, 8))
    with pytest.raises(ValueError):
        proj(Ray.between([0.0, 0.0, 0.0], [1.0, 1.0, 1.0]))


def test_invalid_step():
    with pytest.raises(ValueError):
        LinearProjector(Volume(8, 8), step=0.0)
