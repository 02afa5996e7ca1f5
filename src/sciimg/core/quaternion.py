"""
Rotation quaternions, scalar-first (w, x, y, z).

Composition, inversion and vector rotation go through
`scipy.spatial.transform.Rotation`, so every operation works on the
normalized quaternion.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from sciimg.core.matrix import Matrix
from sciimg.core.vector import Vector
from sciimg.exceptions import NumericalDegeneracyError


def _from_rotation(rot: Any) -> "Quaternion":
    x, y, z, w = rot.as_quat()
    return Quaternion(float(w), float(x), float(y), float(z))


@dataclass(frozen=True)
class Quaternion:
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @staticmethod
    def identity() -> "Quaternion":
        return Quaternion(1.0, 0.0, 0.0, 0.0)

    @staticmethod
    def from_axis_and_angle(axis: Vector, angle: float) -> "Quaternion":
        """Rotation of `angle` radians about `axis`; a zero axis gives the identity."""
        from scipy.spatial.transform import Rotation as Rot  # type: ignore

        return _from_rotation(Rot.from_rotvec(axis.normalized().scale(angle).to_array()))

    @staticmethod
    def from_pitch_roll_yaw(roll: float, pitch: float, yaw: float) -> "Quaternion":
        """yaw * pitch * roll, matching `Matrix.from_euler`."""
        from scipy.spatial.transform import Rotation as Rot  # type: ignore

        return _from_rotation(Rot.from_euler("xyz", [roll, pitch, yaw]))

    @staticmethod
    def from_matrix(mat: Matrix) -> "Quaternion":
        from scipy.spatial.transform import Rotation as Rot  # type: ignore

        return _from_rotation(Rot.from_matrix(np.asarray(mat.m[:3, :3])))

    def _rotation(self) -> Any:
        from scipy.spatial.transform import Rotation as Rot  # type: ignore

        n = self.length()
        if n == 0.0:
            raise NumericalDegeneracyError("zero quaternion is not a rotation", quantity="|q|", value=n)
        return Rot.from_quat([self.x, self.y, self.z, self.w])

    def length(self) -> float:
        return math.sqrt(self.w * self.w + self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "Quaternion":
        return _from_rotation(self._rotation())

    def to_matrix(self) -> Matrix:
        return Matrix.from_quaternion(self.w, self.x, self.y, self.z)

    def get(self) -> tuple[Vector, float]:
        """(unit axis, angle in radians); the identity reports the +Z axis."""
        rotvec = self._rotation().as_rotvec()
        angle = float(np.linalg.norm(rotvec))
        if angle == 0.0:
            return Vector.z_axis(), 0.0
        return Vector.from_array(rotvec / angle), angle

    def times(self, other: "Quaternion") -> "Quaternion":
        """Hamilton product: rotating by the result applies `other` first, then `self`."""
        return _from_rotation(self._rotation() * other._rotation())

    __mul__ = times

    def invert(self) -> "Quaternion":
        return _from_rotation(self._rotation().inv())

    def rotate_vector(self, src: Vector) -> Vector:
        return Vector.from_array(self._rotation().apply(src.to_array()))

    def within_epsilon(self, other: "Quaternion", epsilon: float) -> bool:
        return (
            abs(self.w - other.w) < epsilon
            and abs(self.x - other.x) < epsilon
            and abs(self.y - other.y) < epsilon
            and abs(self.z - other.z) < epsilon
        )
