from __future__ import annotations

import math
from dataclasses import dataclass

from sciimg.camera.base import ImageCoordinate, LookVector, ModelType
from sciimg.config import SolverConfig, resolve_config
from sciimg.core.vector import Vector
from sciimg.exceptions import NumericalDegeneracyError


def _pixel_ray(c: Vector, a: Vector, h: Vector, v: Vector, coordinate: ImageCoordinate, eps: float) -> Vector:
    """
    Unit direction of the undistorted ray through a pixel.

    Shared by all three models: for CAHVOR/CAHVORE this is the ray before the
    lens distortion is removed.
    """
    f = v.subtract(a.scale(coordinate.line))
    g = h.subtract(a.scale(coordinate.sample))
    rr = f.cross_product(g)
    n = rr.length()
    if n < eps:
        raise NumericalDegeneracyError("pixel ray is undefined", quantity="|f x g|", value=n)
    rr = rr.scale(1.0 / n)

    # Sign of the cross product depends on the handedness of (H, V, A).
    if v.cross_product(h).dot_product(a) < 0.0:
        rr = rr.inversed()
    return rr


def _project_direction(pp_c: Vector, a: Vector, h: Vector, v: Vector, eps: float) -> ImageCoordinate:
    """Project a camera-relative vector through the linear A/H/V terms."""
    alpha = pp_c.dot_product(a)
    if abs(alpha) < eps:
        raise NumericalDegeneracyError("point lies in the camera's focal plane", quantity="alpha", value=alpha)
    return ImageCoordinate(line=pp_c.dot_product(v) / alpha, sample=pp_c.dot_product(h) / alpha)


def _pixel_angle(axis: Vector, info: Vector) -> float:
    # Component of the information vector orthogonal to the axis: its length
    # is the focal length in pixels.
    ortho = info.subtract(axis.scale(info.dot_product(axis)))
    return math.atan(1.0 / ortho.length())


@dataclass(frozen=True)
class Cahv:
    """
    Linear (distortion-free) CAHV camera model.

    - `c`: camera center
    - `a`: unit camera axis
    - `h`, `v`: horizontal / vertical information vectors
    """

    c: Vector
    a: Vector
    h: Vector
    v: Vector

    @property
    def model_type(self) -> ModelType:
        return ModelType.CAHV

    def hc(self) -> float:
        """Horizontal image center (principal point sample)."""
        return self.a.dot_product(self.h)

    def vc(self) -> float:
        """Vertical image center (principal point line)."""
        return self.a.dot_product(self.v)

    def hs(self) -> float:
        """Horizontal scale: focal length in pixels."""
        return self.a.cross_product(self.h).length()

    def vs(self) -> float:
        return self.a.cross_product(self.v).length()

    def f(self) -> float:
        return self.hs()

    def pixel_angle_horiz(self) -> float:
        return _pixel_angle(self.a, self.v)

    def pixel_angle_vert(self) -> float:
        return _pixel_angle(self.a, self.h)

    def ls_to_look_vector(self, coordinate: ImageCoordinate, config: SolverConfig | None = None) -> LookVector:
        cfg = resolve_config(config)
        direction = _pixel_ray(self.c, self.a, self.h, self.v, coordinate, cfg.epsilon)
        return LookVector(origin=self.c, direction=direction)

    def xyz_to_ls(self, xyz: Vector, infinity: bool = False, config: SolverConfig | None = None) -> ImageCoordinate:
        """
        Project a world point to (line, sample).

        With `infinity=True`, `xyz` is a direction rather than a position.
        """
        cfg = resolve_config(config)
        d = xyz if infinity else xyz.subtract(self.c)
        return _project_direction(d, self.a, self.h, self.v, cfg.epsilon)

    def serialize(self) -> str:
        return ";".join(p.format_triple() for p in (self.c, self.a, self.h, self.v))
