"""
Approximate a distorted camera model by a linear CAHV model.

The CAHV model keeps the source camera center. Its axis is the mean look
direction of the center pixel and its four neighbours, and its
horizontal/vertical scales are chosen so that the landmark field of view
maps onto the half-width/half-height of the target image.
"""

from __future__ import annotations

import logging
import math
from typing import Literal

from sciimg.camera.base import CameraModelProtocol, ImageCoordinate
from sciimg.camera.cahv import Cahv
from sciimg.config import SolverConfig, resolve_config
from sciimg.core.vector import Vector
from sciimg.exceptions import NumericalDegeneracyError, ValidationError

logger = logging.getLogger(__name__)

FovPolicy = Literal["tightest", "widest"]


def landmark_coordinates(width: int, height: int) -> tuple[list[ImageCoordinate], list[ImageCoordinate], ImageCoordinate]:
    """
    Landmark pixels of a width x height frame.

    Returns (horizontal, vertical, center): the horizontal landmarks are the
    corners and midpoints of the left and right edges, the vertical ones the
    corners and midpoints of the top and bottom edges.
    """
    last_s = float(width - 1)
    last_l = float(height - 1)
    mid_s = last_s / 2.0
    mid_l = last_l / 2.0
    horizontal = [
        ImageCoordinate(line=0.0, sample=0.0),
        ImageCoordinate(line=mid_l, sample=0.0),
        ImageCoordinate(line=last_l, sample=0.0),
        ImageCoordinate(line=0.0, sample=last_s),
        ImageCoordinate(line=mid_l, sample=last_s),
        ImageCoordinate(line=last_l, sample=last_s),
    ]
    vertical = [
        ImageCoordinate(line=0.0, sample=0.0),
        ImageCoordinate(line=0.0, sample=mid_s),
        ImageCoordinate(line=0.0, sample=last_s),
        ImageCoordinate(line=last_l, sample=0.0),
        ImageCoordinate(line=last_l, sample=mid_s),
        ImageCoordinate(line=last_l, sample=last_s),
    ]
    return horizontal, vertical, ImageCoordinate(line=mid_l, sample=mid_s)


def boresight_coordinates(center: ImageCoordinate) -> list[ImageCoordinate]:
    """The center pixel and its four neighbours one line or sample away."""
    return [
        center,
        ImageCoordinate(line=center.line - 1.0, sample=center.sample),
        ImageCoordinate(line=center.line + 1.0, sample=center.sample),
        ImageCoordinate(line=center.line, sample=center.sample - 1.0),
        ImageCoordinate(line=center.line, sample=center.sample + 1.0),
    ]


def _unit(vec: Vector, what: str, eps: float) -> Vector:
    n = vec.length()
    if n < eps:
        raise NumericalDegeneracyError(f"cannot normalize {what}", quantity=f"|{what}|", value=n)
    return vec.scale(1.0 / n)


def _cosine_range(directions: list[Vector], axis: Vector, normal: Vector, eps: float) -> tuple[float, float]:
    """Min/max cosine between `axis` and each direction projected onto the plane orthogonal to `normal`."""
    cosines = []
    for d in directions:
        in_plane = d.subtract(normal.scale(d.dot_product(normal)))
        cosines.append(_unit(in_plane, "projected look direction", eps).dot_product(axis))
    return min(cosines), max(cosines)


def _scale_for(cosine: float, half_extent: float, eps: float) -> float:
    if cosine <= 0.0:
        raise NumericalDegeneracyError(
            "landmark field of view reaches 90 degrees; no CAHV model can cover it", quantity="cos(fov)", value=cosine
        )
    t = math.tan(math.acos(min(1.0, cosine)))
    if abs(t) < eps:
        raise NumericalDegeneracyError("landmark field of view is empty", quantity="tan(fov)", value=t)
    return half_extent / t


def linearize(
    model: CameraModelProtocol,
    source_width: int,
    source_height: int,
    target_width: int,
    target_height: int,
    *,
    fov_policy: FovPolicy = "tightest",
    config: SolverConfig | None = None,
) -> Cahv:
    """
    Fit a CAHV model that approximates `model` over a source frame.

    `fov_policy="tightest"` keeps the smallest landmark field of view, so the
    linear image stays inside the source image; `"widest"` keeps the largest.
    Projection failures at a landmark propagate to the caller, as does a
    landmark field of view of 90 degrees or more.
    """
    for name, value in (
        ("source_width", source_width),
        ("source_height", source_height),
        ("target_width", target_width),
        ("target_height", target_height),
    ):
        if int(value) < 2:
            raise ValidationError(f"{name} must be >= 2")
    if fov_policy not in ("tightest", "widest"):
        raise ValidationError(f"unknown fov_policy: {fov_policy!r}")
    cfg = resolve_config(config)

    hpts, vpts, center = landmark_coordinates(int(source_width), int(source_height))
    hdirs = [model.ls_to_look_vector(p, config=cfg).direction for p in hpts]
    vdirs = [model.ls_to_look_vector(p, config=cfg).direction for p in vpts]
    total = Vector.zero()
    for p in boresight_coordinates(center):
        total = total.add(model.ls_to_look_vector(p, config=cfg).direction)
    a2 = _unit(total, "mean look direction", cfg.epsilon)

    dn = _unit(a2.cross_product(model.h), "down axis", cfg.epsilon)
    rt = _unit(dn.cross_product(a2), "right axis", cfg.epsilon)

    hmin, hmax = _cosine_range(hdirs, a2, dn, cfg.epsilon)
    vmin, vmax = _cosine_range(vdirs, a2, rt, cfg.epsilon)

    tightest = fov_policy == "tightest"
    hs = _scale_for(hmax if tightest else hmin, target_width / 2.0, cfg.epsilon)
    vs = _scale_for(vmax if tightest else vmin, target_height / 2.0, cfg.epsilon)
    hc = (target_width - 1) / 2.0
    vc = (target_height - 1) / 2.0

    out = Cahv(
        c=model.c,
        a=a2,
        h=rt.scale(hs).add(a2.scale(hc)),
        v=dn.scale(vs).add(a2.scale(vc)),
    )
    logger.debug(
        "linearized %s %dx%d -> CAHV %dx%d (hs=%.3f vs=%.3f, policy=%s)",
        model.model_type.value,
        source_width,
        source_height,
        target_width,
        target_height,
        hs,
        vs,
        fov_policy,
    )
    return out
