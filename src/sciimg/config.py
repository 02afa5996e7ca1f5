from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from sciimg.exceptions import ValidationError


@dataclass(frozen=True)
class SolverConfig:
    """
    Numerical tunables for the iterative camera model solvers.

    - `epsilon`: smallest magnitude accepted for a derivative or denominator
    - `conv`: CAHVOR Newton step tolerance
    - `max_iter`: CAHVOR Newton iteration cap
    - `chip_limit`: CAHVOR/CAHVORE near-axis cutoff, also the CAHVORE step tolerance
    - `newton_iteration_max`: CAHVORE Newton iteration cap
    """

    epsilon: float = 1.0e-15
    conv: float = 1.0e-6
    max_iter: int = 20
    chip_limit: float = 1.0e-8
    newton_iteration_max: int = 100

    def replace(self, **changes: Any) -> "SolverConfig":
        return parse_solver_config({**dataclasses.asdict(self), **changes})

    def to_dict(self) -> dict[str, float | int]:
        return dataclasses.asdict(self)


DEFAULT_SOLVER_CONFIG = SolverConfig()


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ValidationError(msg)


def resolve_config(config: SolverConfig | None) -> SolverConfig:
    return DEFAULT_SOLVER_CONFIG if config is None else config


def parse_solver_config(data: dict[str, Any]) -> SolverConfig:
    known = {f.name for f in dataclasses.fields(SolverConfig)}
    unknown = sorted(set(data) - known)
    _require(not unknown, f"unknown solver config keys: {unknown}")

    defaults = DEFAULT_SOLVER_CONFIG
    try:
        epsilon = float(data.get("epsilon", defaults.epsilon))
        conv = float(data.get("conv", defaults.conv))
        chip_limit = float(data.get("chip_limit", defaults.chip_limit))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"solver tolerances must be numbers: {exc}") from exc
    _require(epsilon > 0.0, "epsilon must be > 0")
    _require(conv > 0.0, "conv must be > 0")
    _require(chip_limit > 0.0, "chip_limit must be > 0")

    max_iter = data.get("max_iter", defaults.max_iter)
    newton_max = data.get("newton_iteration_max", defaults.newton_iteration_max)
    for name, value in (("max_iter", max_iter), ("newton_iteration_max", newton_max)):
        _require(
            isinstance(value, int) and not isinstance(value, bool) and value >= 1,
            f"{name} must be an integer >= 1",
        )

    return SolverConfig(
        epsilon=epsilon,
        conv=conv,
        max_iter=int(max_iter),
        chip_limit=chip_limit,
        newton_iteration_max=int(newton_max),
    )
