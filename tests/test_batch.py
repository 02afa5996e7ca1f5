import numpy as np
import pytest

from sciimg.api.batch import look_vectors, pixel_grid, project_points
from sciimg.camera.base import ImageCoordinate
from sciimg.camera.cahv import Cahv
from sciimg.camera.cahvor import Cahvor
from sciimg.camera.model import CameraModel
from sciimg.core.vector import Vector
from sciimg.exceptions import NumericalDegeneracyError, ValidationError


def _cahv() -> Cahv:
    return Cahv(
        c=Vector.zero(),
        a=Vector(0.0, 0.0, 1.0),
        h=Vector(1000.0, 0.0, 500.0),
        v=Vector(0.0, 1000.0, 400.0),
    )


def _bad_cahvor() -> Cahvor:
    # r0 = -2 fails for every pixel except the on-axis one.
    cahv = _cahv()
    return Cahvor(c=cahv.c, a=cahv.a, h=cahv.h, v=cahv.v, o=Vector(0.0, 0.0, 1.0), r=Vector(-2.0, 0.0, 0.0))


def test_project_points_returns_sample_line():
    xyz = np.array([[0.0, 0.0, 10.0], [1.0, 0.0, 10.0], [0.0, 2.0, 10.0]])
    uv = project_points(CameraModel(_cahv()), xyz)
    np.testing.assert_allclose(uv, [[500.0, 400.0], [600.0, 400.0], [500.0, 600.0]], atol=1e-9)


def test_project_points_failures_become_nan():
    xyz = np.array([[1.0, 0.0, 10.0], [1.0, 1.0, 0.0], [np.nan, 0.0, 1.0]])
    uv = project_points(_cahv(), xyz)
    assert np.allclose(uv[0], [600.0, 400.0])
    assert np.all(np.isnan(uv[1]))
    assert np.all(np.isnan(uv[2]))

    with pytest.raises(NumericalDegeneracyError):
        project_points(_cahv(), xyz, on_error="raise")


def test_look_vectors_failures_become_nan():
    uv = np.array([[500.0, 400.0], [0.0, 0.0]])
    origins, directions = look_vectors(_bad_cahvor(), uv)
    assert origins.shape == (2, 3)
    assert directions.shape == (2, 3)
    np.testing.assert_allclose(directions[0], [0.0, 0.0, 1.0])
    np.testing.assert_allclose(origins[0], [0.0, 0.0, 0.0])
    assert np.all(np.isnan(directions[1]))
    assert np.all(np.isnan(origins[1]))

    with pytest.raises(NumericalDegeneracyError):
        look_vectors(_bad_cahvor(), uv, on_error="raise")


def test_look_vectors_round_trip_with_projection():
    cam = _cahv()
    uv = pixel_grid(8, 6) * 100.0
    origins, directions = look_vectors(cam, uv)
    back = project_points(cam, origins + 5.0 * directions)
    np.testing.assert_allclose(back, uv, atol=1e-9)


def _mirrored_cahv() -> Cahv:
    # Sample axis runs the other way from _cahv().
    return Cahv(
        c=Vector(0.5, -1.0, 2.0),
        a=Vector(0.0, 0.0, 1.0),
        h=Vector(-800.0, 0.0, 500.0),
        v=Vector(0.0, 800.0, 400.0),
    )


@pytest.mark.parametrize("factory", [_cahv, _mirrored_cahv])
@pytest.mark.parametrize("infinity", [False, True])
def test_cahv_batch_projection_matches_single_points(factory, infinity):
    cam = factory()
    rng = np.random.default_rng(3)
    xyz = np.column_stack([rng.uniform(-4.0, 4.0, 20), rng.uniform(-3.0, 3.0, 20), rng.uniform(5.0, 30.0, 20)])
    uv = project_points(CameraModel(cam), xyz, infinity=infinity)
    for row, got in zip(xyz, uv):
        ls = cam.xyz_to_ls(Vector.from_array(row), infinity=infinity)
        np.testing.assert_allclose(got, [ls.sample, ls.line], rtol=1e-12, atol=1e-9)


@pytest.mark.parametrize("factory", [_cahv, _mirrored_cahv])
def test_cahv_batch_look_vectors_match_single_pixels(factory):
    cam = factory()
    rng = np.random.default_rng(4)
    uv = np.column_stack([rng.uniform(0.0, 999.0, 20), rng.uniform(0.0, 799.0, 20)])
    origins, directions = look_vectors(cam, uv)
    for (sample, line), o, d in zip(uv, origins, directions):
        lv = cam.ls_to_look_vector(ImageCoordinate(line=float(line), sample=float(sample)))
        np.testing.assert_allclose(o, lv.origin.to_array())
        np.testing.assert_allclose(d, lv.direction.to_array(), atol=1e-12)
        assert d[2] > 0.0


def test_cahv_batch_skips_non_finite_pixels():
    origins, directions = look_vectors(_cahv(), np.array([[500.0, 400.0], [np.inf, 10.0]]), on_error="raise")
    np.testing.assert_allclose(directions[0], [0.0, 0.0, 1.0])
    assert np.all(np.isnan(origins[1]))
    assert np.all(np.isnan(directions[1]))


def test_pixel_grid_is_row_major():
    grid = pixel_grid(3, 2)
    assert grid.shape == (6, 2)
    np.testing.assert_array_equal(grid[:4], [[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [0.0, 1.0]])


def test_rejects_unknown_error_mode():
    with pytest.raises(ValidationError):
        project_points(_cahv(), np.zeros((1, 3)), on_error="ignore")
    with pytest.raises(ValidationError):
        look_vectors(_cahv(), np.zeros((1, 2)), on_error="skip")
