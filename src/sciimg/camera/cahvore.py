from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sciimg.camera.base import ImageCoordinate, LookVector, ModelType, PupilType
from sciimg.camera.cahv import Cahv, _pixel_ray, _project_direction
from sciimg.config import SolverConfig, resolve_config
from sciimg.core.vector import Vector
from sciimg.exceptions import ConvergenceError, DomainError, NumericalDegeneracyError

logger = logging.getLogger(__name__)

LINEARITY_PERSPECTIVE = 1.0
LINEARITY_FISHEYE = 0.0


def chi_to_theta(chi: float, linearity: float, eps: float) -> float:
    """Map the linearized distortion variable chi to the true off-axis angle theta."""
    if linearity < -eps:
        if abs(linearity * chi) > 1.0:
            raise DomainError("chi is outside the elliptical lens range", theta=float("nan"), linearity=linearity)
        return math.asin(linearity * chi) / linearity
    if linearity > eps:
        return math.atan(linearity * chi) / linearity
    return chi


def theta_to_chi(theta: float, linearity: float, eps: float) -> float:
    """Inverse of `chi_to_theta`."""
    if linearity < -eps:
        return math.sin(linearity * theta) / linearity
    if linearity > eps:
        return math.tan(linearity * theta) / linearity
    return theta


@dataclass(frozen=True)
class Cahvore:
    """
    CAHVOR generalized to wide-angle optics.

    Rays are bent by the CAHVOR-style radial polynomial in the linearized
    variable chi, chi is related to the true angle theta through `linearity`
    (1 = perspective, 0 = fisheye), and the entrance pupil slides along `o`
    with theta according to the `e` coefficients.
    """

    c: Vector
    a: Vector
    h: Vector
    v: Vector
    o: Vector
    r: Vector
    e: Vector
    linearity: float = LINEARITY_FISHEYE
    pupil_type: PupilType = PupilType.GENERAL

    @property
    def model_type(self) -> ModelType:
        return ModelType.CAHVORE

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

    def pupil_shift(self, theta: float, eps: float) -> float:
        """Distance the entrance pupil moves along `o` for a ray at angle `theta`."""
        s = math.sin(theta)
        if abs(s) < eps:
            raise NumericalDegeneracyError("pupil shift undefined", quantity="sin(theta)", value=s)
        theta2 = theta * theta
        return (theta / s - 1.0) * (self.e.x + self.e.y * theta2 + self.e.z * theta2 * theta2)

    def ls_to_look_vector(self, coordinate: ImageCoordinate, config: SolverConfig | None = None) -> LookVector:
        cfg = resolve_config(config)
        rp = _pixel_ray(self.c, self.a, self.h, self.v, coordinate, cfg.epsilon)

        zetap = rp.dot_product(self.o)
        if zetap < cfg.epsilon:
            raise NumericalDegeneracyError("pixel ray is not in front of the distortion axis", quantity="zetap", value=zetap)
        lambdap = rp.subtract(self.o.scale(zetap))
        chip = lambdap.length() / zetap

        if chip < cfg.chip_limit:
            return LookVector(origin=self.c, direction=self.o)

        # Newton on (1+r0)*chi + r1*chi^3 + r2*chi^5 = chip
        r0, r1, r2 = self.r.x, self.r.y, self.r.z
        chi = chip
        dchi = 1.0
        n = 0
        while abs(dchi) >= cfg.chip_limit:
            n += 1
            if n > cfg.newton_iteration_max:
                logger.debug("CAHVORE inverse: no convergence at %s", coordinate)
                raise ConvergenceError(
                    "CAHVORE inverse projection did not converge", iterations=n - 1, last_step=dchi
                )
            chi2 = chi * chi
            chi4 = chi2 * chi2
            deriv = (1.0 + r0) + 3.0 * r1 * chi2 + 5.0 * r2 * chi4
            if abs(deriv) < cfg.epsilon:
                logger.debug("CAHVORE inverse: zero derivative at %s", coordinate)
                raise NumericalDegeneracyError("distortion derivative vanished", quantity="deriv", value=deriv)
            dchi = ((1.0 + r0) * chi + r1 * chi2 * chi + r2 * chi4 * chi - chip) / deriv
            chi -= dchi

        theta = chi_to_theta(chi, self.linearity, cfg.epsilon)
        s = self.pupil_shift(theta, cfg.epsilon)

        origin = self.c.add(self.o.scale(s))
        direction = lambdap.normalized().scale(math.sin(theta)).add(self.o.scale(math.cos(theta)))
        return LookVector(origin=origin, direction=direction.normalized())

    def _solve_theta(self, zeta: float, lam: float, cfg: SolverConfig) -> float:
        """
        Newton on theta for the entrance-pupil relation

            zeta*sin(theta) - lambda*cos(theta) = (theta - sin(theta)) * E(theta)

        with E(theta) = e0 + e1*theta^2 + e2*theta^4.
        """
        e0, e1, e2 = self.e.x, self.e.y, self.e.z
        theta = math.atan2(lam, zeta)
        dtheta = 1.0
        n = 0
        while abs(dtheta) >= cfg.chip_limit:
            n += 1
            if n > cfg.newton_iteration_max:
                raise ConvergenceError(
                    "CAHVORE forward projection did not converge", iterations=n - 1, last_step=dtheta
                )
            costh = math.cos(theta)
            sinth = math.sin(theta)
            theta2 = theta * theta
            theta3 = theta2 * theta
            theta4 = theta3 * theta
            upsilon = (
                zeta * costh
                + lam * sinth
                - (1.0 - costh) * (e0 + e1 * theta2 + e2 * theta4)
                - (theta - sinth) * (2.0 * e1 * theta + 4.0 * e2 * theta3)
            )
            if abs(upsilon) < cfg.epsilon:
                raise NumericalDegeneracyError("theta derivative vanished", quantity="upsilon", value=upsilon)
            dtheta = (zeta * sinth - lam * costh - (theta - sinth) * (e0 + e1 * theta2 + e2 * theta4)) / upsilon
            theta -= dtheta
        return theta

    def xyz_to_ls(self, xyz: Vector, infinity: bool = False, config: SolverConfig | None = None) -> ImageCoordinate:
        """
        Project a world point to (line, sample).

        For `infinity=True` the pupil shift is negligible and theta is the
        plain angle between `xyz` and `o`, so no iteration is needed.
        """
        cfg = resolve_config(config)
        p_c = xyz if infinity else xyz.subtract(self.c)

        zeta = p_c.dot_product(self.o)
        lambda3 = p_c.subtract(self.o.scale(zeta))
        lam = lambda3.length()

        if infinity:
            theta = math.atan2(lam, zeta)
        else:
            try:
                theta = self._solve_theta(zeta, lam, cfg)
            except (ConvergenceError, NumericalDegeneracyError):
                logger.debug("CAHVORE forward: theta solve failed for %s", xyz)
                raise

        if theta * abs(self.linearity) >= math.pi / 2.0:
            raise DomainError("point is outside the lens model's field", theta=theta, linearity=self.linearity)

        if theta < cfg.chip_limit:
            pp_c = p_c
        else:
            chi = theta_to_chi(theta, self.linearity, cfg.epsilon)
            if abs(chi) < cfg.epsilon:
                raise NumericalDegeneracyError("chi vanished", quantity="chi", value=chi)
            chi2 = chi * chi
            zetap = lam / chi
            mu = self.r.x + self.r.y * chi2 + self.r.z * chi2 * chi2
            pp_c = self.o.scale(zetap).add(lambda3.scale(1.0 + mu))

        return _project_direction(pp_c, self.a, self.h, self.v, cfg.epsilon)

    def serialize(self) -> str:
        triples = ";".join(p.format_triple() for p in (self.c, self.a, self.h, self.v, self.o, self.r, self.e))
        return f"{triples};{self.linearity!r}"
