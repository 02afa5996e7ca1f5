from __future__ import annotations

from typing import Union

from sciimg.camera.base import ImageCoordinate, LookVector, ModelType, PupilType
from sciimg.camera.cahv import Cahv
from sciimg.camera.cahvor import Cahvor
from sciimg.camera.cahvore import Cahvore
from sciimg.camera.linearize import FovPolicy, linearize
from sciimg.config import SolverConfig
from sciimg.core.vector import Vector
from sciimg.exceptions import ConfigurationError

AnyCameraModel = Union[Cahv, Cahvor, Cahvore]


class CameraModel:
    """
    Holder for exactly one of Cahv, Cahvor or Cahvore, or nothing.

    Exposes the union of the three models' accessors. Fields that a variant
    does not have (`o`, `r` for CAHV; `e` for CAHV and CAHVOR) read as the
    zero vector; that zero is a placeholder, not a calibration value.
    Every accessor raises `ConfigurationError` while no model is set.
    """

    __slots__ = ("_model",)

    def __init__(self, model: AnyCameraModel | None = None) -> None:
        if model is not None and not isinstance(model, (Cahv, Cahvor, Cahvore)):
            raise TypeError(f"unsupported camera model type: {type(model).__name__}")
        self._model = model

    def __repr__(self) -> str:
        return f"CameraModel({self._model!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CameraModel):
            return NotImplemented
        return self._model == other._model

    def __hash__(self) -> int:
        return hash(self._model)

    def is_valid(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> AnyCameraModel:
        if self._model is None:
            raise ConfigurationError("camera model is not configured")
        return self._model

    @property
    def model_type(self) -> ModelType:
        return self.model.model_type

    @property
    def c(self) -> Vector:
        return self.model.c

    @property
    def a(self) -> Vector:
        return self.model.a

    @property
    def h(self) -> Vector:
        return self.model.h

    @property
    def v(self) -> Vector:
        return self.model.v

    @property
    def o(self) -> Vector:
        m = self.model
        return m.o if isinstance(m, (Cahvor, Cahvore)) else Vector.zero()

    @property
    def r(self) -> Vector:
        m = self.model
        return m.r if isinstance(m, (Cahvor, Cahvore)) else Vector.zero()

    @property
    def e(self) -> Vector:
        m = self.model
        return m.e if isinstance(m, Cahvore) else Vector.zero()

    @property
    def linearity(self) -> float | None:
        m = self.model
        return m.linearity if isinstance(m, Cahvore) else None

    @property
    def pupil_type(self) -> PupilType | None:
        m = self.model
        return m.pupil_type if isinstance(m, Cahvore) else None

    def f(self) -> float:
        return self.model.f()

    def pixel_angle_horiz(self) -> float:
        return self.model.pixel_angle_horiz()

    def pixel_angle_vert(self) -> float:
        return self.model.pixel_angle_vert()

    def ls_to_look_vector(self, coordinate: ImageCoordinate, config: SolverConfig | None = None) -> LookVector:
        return self.model.ls_to_look_vector(coordinate, config=config)

    def xyz_to_ls(self, xyz: Vector, infinity: bool = False, config: SolverConfig | None = None) -> ImageCoordinate:
        return self.model.xyz_to_ls(xyz, infinity=infinity, config=config)

    def serialize(self) -> str:
        return self.model.serialize()

    def linearize(
        self,
        source_width: int,
        source_height: int,
        target_width: int,
        target_height: int,
        *,
        fov_policy: FovPolicy = "tightest",
        config: SolverConfig | None = None,
    ) -> Cahv:
        return linearize(
            self.model,
            source_width,
            source_height,
            target_width,
            target_height,
            fov_policy=fov_policy,
            config=config,
        )


def unwrap_model(model: CameraModel | AnyCameraModel) -> AnyCameraModel:
    """Concrete model behind a `CameraModel`, or `model` itself if it already is one."""
    return model.model if isinstance(model, CameraModel) else model
