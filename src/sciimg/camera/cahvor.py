from __future__ import annotations

import logging
from dataclasses import dataclass

from sciimg.camera.base import ImageCoordinate, LookVector, ModelType
from sciimg.camera.cahv import Cahv, _pixel_ray, _project_direction
from sciimg.config import SolverConfig, resolve_config
from sciimg.core.vector import Vector
from sciimg.exceptions import ConvergenceError, NumericalDegeneracyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cahvor:
    """
    CAHV plus radial lens distortion about the optical axis `o`.

    The distortion magnitude is mu = r0 + r1*tau + r2*tau^2 where tau is the
    squared tangent of the angle between a ray and `o`.
    """

    c: Vector
    a: Vector
    h: Vector
    v: Vector
    o: Vector
    r: Vector

    @property
    def model_type(self) -> ModelType:
        return ModelType.CAHVOR

    @property
    def cahv(self) -> Cahv:
        return Cahv(c=self.c, a=self.a, h=self.h, v=self.v)

    def hc(self) -> float:
        return self.cahv.hc()

    def vc(self) -> float:
        return self.cahv.vc()

    def hs(self) -> float:
        return self.cahv.hs()

    def vs(self) -> float:
        return self.cahv.vs()

    def f(self) -> float:
        return self.cahv.f()

    def pixel_angle_horiz(self) -> float:
        return self.cahv.pixel_angle_horiz()

    def pixel_angle_vert(self) -> float:
        return self.cahv.pixel_angle_vert()

    def zeta(self, p: Vector) -> float:
        return p.subtract(self.c).dot_product(self.o)

    def lambda_(self, p: Vector) -> Vector:
        return p.subtract(self.c).subtract(self.o.scale(self.zeta(p)))

    def tau(self, p: Vector) -> float:
        z = self.zeta(p)
        lam = self.lambda_(p)
        return lam.dot_product(lam) / (z * z)

    def mu(self, p: Vector) -> float:
        t = self.tau(p)
        return self.r.x + self.r.y * t + self.r.z * t * t

    def corrected_point(self, p: Vector) -> Vector:
        """Object point moved so that the linear CAHV projection of it lands on the distorted pixel."""
        return p.add(self.lambda_(p).scale(self.mu(p)))

    def xyz_to_ls(self, xyz: Vector, infinity: bool = False, config: SolverConfig | None = None) -> ImageCoordinate:
        cfg = resolve_config(config)
        p_c = xyz if infinity else xyz.subtract(self.c)

        omega = p_c.dot_product(self.o)
        if abs(omega) < cfg.epsilon:
            raise NumericalDegeneracyError("point is orthogonal to the distortion axis", quantity="omega", value=omega)
        lam = p_c.subtract(self.o.scale(omega))
        tau = lam.dot_product(lam) / (omega * omega)
        mu = self.r.x + self.r.y * tau + self.r.z * tau * tau

        pp_c = p_c.add(lam.scale(mu))
        return _project_direction(pp_c, self.a, self.h, self.v, cfg.epsilon)

    def ls_to_look_vector(self, coordinate: ImageCoordinate, config: SolverConfig | None = None) -> LookVector:
        cfg = resolve_config(config)
        rr = _pixel_ray(self.c, self.a, self.h, self.v, coordinate, cfg.epsilon)

        omega = rr.dot_product(self.o)
        if omega < cfg.epsilon:
            raise NumericalDegeneracyError("pixel ray is not in front of the distortion axis", quantity="omega", value=omega)
        lam = rr.subtract(self.o.scale(omega))

        chi0 = lam.length() / omega
        if chi0 < cfg.chip_limit:
            return LookVector(origin=self.c, direction=self.o)

        # Solve k5*u^5 + k3*u^3 + k1*u = 1 for u, starting from the distorted ray.
        tau = lam.dot_product(lam) / (omega * omega)
        k1 = 1.0 + self.r.x
        k3 = self.r.y * tau
        k5 = self.r.z * tau * tau
        u = 1.0 - (self.r.x + k3 + k5)

        du = float("inf")
        for _ in range(cfg.max_iter):
            u2 = u * u
            poly = ((k5 * u2 + k3) * u2 + k1) * u - 1.0
            deriv = (5.0 * k5 * u2 + 3.0 * k3) * u2 + k1
            if deriv <= cfg.epsilon:
                logger.debug("CAHVOR inverse: non-positive derivative at %s", coordinate)
                raise NumericalDegeneracyError("distortion is too negative", quantity="deriv", value=deriv)
            du = poly / deriv
            u -= du
            if abs(du) < cfg.conv:
                break
        else:
            logger.debug("CAHVOR inverse: no convergence at %s", coordinate)
            raise ConvergenceError("CAHVOR inverse projection did not converge", iterations=cfg.max_iter, last_step=du)

        mu = 1.0 - u
        direction = rr.subtract(lam.scale(mu)).normalized()
        return LookVector(origin=self.c, direction=direction)

    def serialize(self) -> str:
        return ";".join(p.format_triple() for p in (self.c, self.a, self.h, self.v, self.o, self.r))
