"""
Array-in / array-out wrappers around the per-point projections.

Failures of individual points (no convergence, degeneracy, out-of-domain)
become NaN rows with `on_error="nan"`, or propagate with `on_error="raise"`.
"""

from __future__ import annotations

import logging
from typing import Literal

import numpy as np

from sciimg.camera.base import ImageCoordinate
from sciimg.camera.cahv import Cahv
from sciimg.camera.model import AnyCameraModel, CameraModel, unwrap_model
from sciimg.config import SolverConfig, resolve_config
from sciimg.core.vector import Vector
from sciimg.exceptions import CameraModelError, NumericalDegeneracyError, ValidationError

logger = logging.getLogger(__name__)

OnError = Literal["nan", "raise"]


def _check_on_error(on_error: str) -> None:
    if on_error not in ("nan", "raise"):
        raise ValidationError(f"on_error must be 'nan' or 'raise', got {on_error!r}")


def _project_cahv(m: Cahv, xyz: np.ndarray, infinity: bool, on_error: str, eps: float) -> np.ndarray:
    """Closed-form CAHV projection of all rows at once."""
    finite = np.all(np.isfinite(xyz), axis=1)
    d = xyz if infinity else xyz - m.c.to_array()
    with np.errstate(invalid="ignore"):
        alpha = d @ m.a.to_array()
        ok = finite & (np.abs(alpha) >= eps)
        if on_error == "raise":
            bad = np.flatnonzero(finite & ~ok)
            if bad.size:
                raise NumericalDegeneracyError(
                    "point lies in the camera's focal plane", quantity="alpha", value=float(alpha[bad[0]])
                )
        denom = np.where(ok, alpha, np.nan)
        out = np.stack([(d @ m.h.to_array()) / denom, (d @ m.v.to_array()) / denom], axis=-1)
    failed = int(np.count_nonzero(~ok))
    if failed:
        logger.debug("project_points: %d/%d points failed", failed, xyz.shape[0])
    return out


def _look_vectors_cahv(m: Cahv, uv_px: np.ndarray, on_error: str, eps: float) -> tuple[np.ndarray, np.ndarray]:
    """Closed-form CAHV back-projection of all pixels at once."""
    a = m.a.to_array()
    h = m.h.to_array()
    v = m.v.to_array()
    finite = np.all(np.isfinite(uv_px), axis=1)
    with np.errstate(invalid="ignore"):
        f = v[None, :] - uv_px[:, 1:2] * a[None, :]
        g = h[None, :] - uv_px[:, 0:1] * a[None, :]
        rr = np.cross(f, g)
        n = np.linalg.norm(rr, axis=-1)
        ok = finite & (n >= eps)
        if on_error == "raise":
            bad = np.flatnonzero(finite & ~ok)
            if bad.size:
                raise NumericalDegeneracyError("pixel ray is undefined", quantity="|f x g|", value=float(n[bad[0]]))
        directions = rr / np.where(ok, n, np.nan)[:, None]
    # Sign of the cross product depends on the handedness of (H, V, A).
    if float(np.dot(np.cross(v, h), a)) < 0.0:
        directions = -directions
    origins = np.where(ok[:, None], m.c.to_array()[None, :], np.nan)
    failed = int(np.count_nonzero(~ok))
    if failed:
        logger.debug("look_vectors: %d/%d pixels failed", failed, uv_px.shape[0])
    return origins, directions


def project_points(
    model: CameraModel | AnyCameraModel,
    xyz: np.ndarray,
    *,
    infinity: bool = False,
    on_error: OnError = "nan",
    config: SolverConfig | None = None,
) -> np.ndarray:
    """
    Project (N,3) object points. Returns (N,2) pixel coordinates as (sample, line).
    """
    _check_on_error(on_error)
    m = unwrap_model(model)
    xyz = np.asarray(xyz, dtype=np.float64).reshape(-1, 3)
    if isinstance(m, Cahv):
        return _project_cahv(m, xyz, infinity, on_error, resolve_config(config).epsilon)
    out = np.full((xyz.shape[0], 2), np.nan, dtype=np.float64)
    failed = 0
    for i, row in enumerate(xyz):
        if not np.all(np.isfinite(row)):
            failed += 1
            continue
        try:
            ls = m.xyz_to_ls(Vector.from_array(row), infinity=infinity, config=config)
        except CameraModelError:
            if on_error == "raise":
                raise
            failed += 1
            continue
        out[i, 0] = ls.sample
        out[i, 1] = ls.line
    if failed:
        logger.debug("project_points: %d/%d points failed", failed, xyz.shape[0])
    return out


def look_vectors(
    model: CameraModel | AnyCameraModel,
    uv_px: np.ndarray,
    *,
    on_error: OnError = "nan",
    config: SolverConfig | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Back-project (N,2) pixels given as (sample, line).

    Returns (origins, directions), each (N,3).
    """
    _check_on_error(on_error)
    m = unwrap_model(model)
    uv_px = np.asarray(uv_px, dtype=np.float64).reshape(-1, 2)
    if isinstance(m, Cahv):
        return _look_vectors_cahv(m, uv_px, on_error, resolve_config(config).epsilon)
    origins = np.full((uv_px.shape[0], 3), np.nan, dtype=np.float64)
    directions = np.full((uv_px.shape[0], 3), np.nan, dtype=np.float64)
    failed = 0
    for i, (sample, line) in enumerate(uv_px):
        if not (np.isfinite(sample) and np.isfinite(line)):
            failed += 1
            continue
        try:
            lv = m.ls_to_look_vector(ImageCoordinate(line=float(line), sample=float(sample)), config=config)
        except CameraModelError:
            if on_error == "raise":
                raise
            failed += 1
            continue
        origins[i] = lv.origin.to_array()
        directions[i] = lv.direction.to_array()
    if failed:
        logger.debug("look_vectors: %d/%d pixels failed", failed, uv_px.shape[0])
    return origins, directions


def pixel_grid(width: int, height: int) -> np.ndarray:
    """All pixel centers of a width x height image as (H*W, 2) (sample, line), row-major."""
    yy, xx = np.meshgrid(np.arange(height, dtype=np.float64), np.arange(width, dtype=np.float64), indexing="ij")
    return np.stack([xx.reshape(-1), yy.reshape(-1)], axis=-1)
