from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from sciimg.config import SolverConfig
from sciimg.core.vector import Vector


class ModelType(str, Enum):
    CAHV = "CAHV"
    CAHVOR = "CAHVOR"
    CAHVORE = "CAHVORE"


class PupilType(str, Enum):
    """
    Qualitative lens class of a CAHVORE model.

    Projection is driven by `linearity` alone; the pupil type only records
    which family the calibration came from.
    """

    PERSPECTIVE = "Perspective"
    FISHEYE = "Fisheye"
    GENERAL = "General"

    @classmethod
    def from_linearity(cls, linearity: float) -> "PupilType":
        if linearity == 1.0:
            return cls.PERSPECTIVE
        if linearity == 0.0:
            return cls.FISHEYE
        return cls.GENERAL


@dataclass(frozen=True)
class ImageCoordinate:
    """Pixel position; origin at the upper-left corner, line = row, sample = column."""

    line: float
    sample: float


@dataclass(frozen=True)
class LookVector:
    """Ray of all object-space points that image onto one pixel."""

    origin: Vector
    direction: Vector

    def point_at(self, t: float) -> Vector:
        return self.origin.add(self.direction.scale(t))


@runtime_checkable
class CameraModelProtocol(Protocol):
    """Operations shared by the Cahv, Cahvor and Cahvore models."""

    c: Vector
    a: Vector
    h: Vector
    v: Vector

    @property
    def model_type(self) -> ModelType: ...

    def f(self) -> float: ...

    def pixel_angle_horiz(self) -> float: ...

    def pixel_angle_vert(self) -> float: ...

    def ls_to_look_vector(
        self, coordinate: ImageCoordinate, config: SolverConfig | None = None
    ) -> LookVector: ...

    def xyz_to_ls(
        self, xyz: Vector, infinity: bool = False, config: SolverConfig | None = None
    ) -> ImageCoordinate: ...

    def serialize(self) -> str: ...
