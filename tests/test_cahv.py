import math

import numpy as np
import pytest

from sciimg.camera.base import ImageCoordinate
from sciimg.camera.cahv import Cahv
from sciimg.core.vector import Vector
from sciimg.exceptions import NumericalDegeneracyError


def _pinhole(c: Vector = Vector.zero()) -> Cahv:
    # f = 1000 px, principal point (line 400, sample 500), looking down +Z.
    return Cahv(
        c=c,
        a=Vector(0.0, 0.0, 1.0),
        h=Vector(1000.0, 0.0, 500.0),
        v=Vector(0.0, 1000.0, 400.0),
    )


def test_derived_parameters():
    cam = _pinhole()
    assert cam.hc() == 500.0
    assert cam.vc() == 400.0
    assert cam.hs() == 1000.0
    assert cam.vs() == 1000.0
    assert cam.f() == 1000.0
    assert cam.pixel_angle_horiz() == pytest.approx(math.atan(1.0 / 1000.0))
    assert cam.pixel_angle_vert() == pytest.approx(math.atan(1.0 / 1000.0))


@pytest.mark.parametrize(
    "xyz,line,sample",
    [
        (Vector(0.0, 0.0, 10.0), 400.0, 500.0),
        (Vector(1.0, 0.0, 10.0), 400.0, 600.0),
        (Vector(0.0, 2.0, 10.0), 600.0, 500.0),
    ],
)
def test_forward_projection(xyz, line, sample):
    ls = _pinhole().xyz_to_ls(xyz)
    assert ls.line == pytest.approx(line)
    assert ls.sample == pytest.approx(sample)


def test_center_pixel_looks_down_the_axis():
    cam = _pinhole(Vector(1.0, 2.0, 3.0))
    lv = cam.ls_to_look_vector(ImageCoordinate(line=400.0, sample=500.0))
    assert lv.origin == Vector(1.0, 2.0, 3.0)
    assert lv.direction.distance_to(Vector.z_axis()) < 1e-12


def test_look_vector_passes_through_projected_point():
    cam = _pinhole(Vector(0.5, -0.2, 1.0))
    rng = np.random.default_rng(0)
    for _ in range(20):
        p = Vector(rng.uniform(-3, 3), rng.uniform(-3, 3), rng.uniform(5, 20))
        lv = cam.ls_to_look_vector(cam.xyz_to_ls(p))
        assert lv.direction.length() == pytest.approx(1.0)
        to_p = p.subtract(lv.origin)
        assert lv.direction.cosine_angle(to_p) == pytest.approx(1.0, abs=1e-12)


def test_direction_points_forward_for_either_handedness():
    right = _pinhole()
    mirrored = Cahv(
        c=Vector.zero(),
        a=Vector(0.0, 0.0, 1.0),
        h=Vector(-1000.0, 0.0, 500.0),
        v=Vector(0.0, 1000.0, 400.0),
    )
    for cam in (right, mirrored):
        lv = cam.ls_to_look_vector(ImageCoordinate(line=100.0, sample=50.0))
        assert lv.direction.dot_product(cam.a) > 0.0


def test_infinity_ignores_camera_center():
    cam = _pinhole(Vector(5.0, 5.0, 5.0))
    d = Vector(1.0, 0.0, 10.0)
    ls = cam.xyz_to_ls(d, infinity=True)
    assert ls == _pinhole().xyz_to_ls(d)
    assert ls.sample == pytest.approx(600.0)


def test_point_in_focal_plane_is_degenerate():
    with pytest.raises(NumericalDegeneracyError) as info:
        _pinhole().xyz_to_ls(Vector(1.0, 1.0, 0.0))
    assert info.value.quantity == "alpha"
    assert isinstance(info.value, ArithmeticError)


def test_serialize():
    assert _pinhole().serialize() == "(0.0,0.0,0.0);(0.0,0.0,1.0);(1000.0,0.0,500.0);(0.0,1000.0,400.0)"
