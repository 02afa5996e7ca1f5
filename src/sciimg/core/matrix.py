from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from sciimg.core.vector import Axis, Vector
from sciimg.exceptions import ValidationError


@dataclass(frozen=True, eq=False)
class Matrix:
    """
    Row-major 4x4 homogeneous matrix.

    Only the upper-left 3x3 block is used when transforming vectors; the
    translation column and the projective row are carried but not applied.
    """

    m: np.ndarray  # (4,4)

    def __post_init__(self) -> None:
        arr = np.array(self.m, dtype=np.float64)
        if arr.size != 16:
            raise ValidationError(f"matrix needs 16 values, got {arr.size}")
        arr = arr.reshape(4, 4)
        arr.setflags(write=False)
        object.__setattr__(self, "m", arr)

    @classmethod
    def identity(cls) -> "Matrix":
        return cls(np.eye(4, dtype=np.float64))

    @classmethod
    def zeros(cls) -> "Matrix":
        return cls(np.zeros((4, 4), dtype=np.float64))

    @classmethod
    def from_values(cls, *values: float) -> "Matrix":
        """
        Build from 16 row-major values, or 9 values for the rotation block only.
        """
        if len(values) == 9:
            m = np.eye(4, dtype=np.float64)
            m[:3, :3] = np.asarray(values, dtype=np.float64).reshape(3, 3)
            return cls(m)
        return cls(np.asarray(values, dtype=np.float64))

    @classmethod
    def rotate(cls, angle: float, axis: Axis) -> "Matrix":
        """Right-handed rotation by `angle` radians about a coordinate axis."""
        c = math.cos(angle)
        s = math.sin(angle)
        m = np.eye(4, dtype=np.float64)
        if axis is Axis.X:
            m[1, 1], m[1, 2], m[2, 1], m[2, 2] = c, -s, s, c
        elif axis is Axis.Y:
            m[0, 0], m[0, 2], m[2, 0], m[2, 2] = c, s, -s, c
        else:
            m[0, 0], m[0, 1], m[1, 0], m[1, 1] = c, -s, s, c
        return cls(m)

    @classmethod
    def from_euler(cls, roll: float, pitch: float, yaw: float) -> "Matrix":
        """Rz(yaw) @ Ry(pitch) @ Rx(roll), angles in radians."""
        return (
            cls.rotate(yaw, Axis.Z)
            .multiply(cls.rotate(pitch, Axis.Y))
            .multiply(cls.rotate(roll, Axis.X))
        )

    @classmethod
    def from_omega_phi_kappa(cls, omega_deg: float, phi_deg: float, kappa_deg: float) -> "Matrix":
        """Photogrammetric omega/phi/kappa rotation (degrees)."""
        w = math.radians(omega_deg)
        o = math.radians(phi_deg)
        k = math.radians(kappa_deg)
        sw, cw = math.sin(w), math.cos(w)
        so, co = math.sin(o), math.cos(o)
        sk, ck = math.sin(k), math.cos(k)
        return cls.from_values(
            co * ck, sw * so * ck + cw * sk, -cw * so * ck + sw * sk,
            -co * sk, -sw * so * sk + cw * ck, cw * so * sk + sw * ck,
            so, -sw * co, cw * co,
        )

    @classmethod
    def from_quaternion(cls, w: float, x: float, y: float, z: float) -> "Matrix":
        """Rotation matrix of a (scalar-first) quaternion; the quaternion is normalized."""
        from scipy.spatial.transform import Rotation as Rot  # type: ignore

        m = np.eye(4, dtype=np.float64)
        m[:3, :3] = Rot.from_quat([x, y, z, w]).as_matrix()
        return cls(m)

    def to_quaternion(self) -> tuple[float, float, float, float]:
        """Scalar-first (w, x, y, z) quaternion of the rotation block."""
        from scipy.spatial.transform import Rotation as Rot  # type: ignore

        x, y, z, w = Rot.from_matrix(self.m[:3, :3]).as_quat()
        return float(w), float(x), float(y), float(z)

    def __getitem__(self, index: tuple[int, int]) -> float:
        return float(self.m[index])

    def __matmul__(self, other: "Matrix") -> "Matrix":
        return self.multiply(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return bool(np.array_equal(self.m, other.m))

    def with_value(self, row: int, col: int, value: float) -> "Matrix":
        m = self.m.copy()
        m[row, col] = value
        return Matrix(m)

    def multiply(self, other: "Matrix") -> "Matrix":
        return Matrix(self.m @ other.m)

    def multiply_vector(self, v: Vector) -> Vector:
        return Vector.from_array(self.m[:3, :3] @ v.to_array())

    def scale(self, x: float, y: float, z: float) -> "Matrix":
        """Scale the rows of the rotation block (S @ R with S = diag(x, y, z))."""
        m = self.m.copy()
        m[0, :3] *= x
        m[1, :3] *= y
        m[2, :3] *= z
        return Matrix(m)

    def transpose_rotation(self) -> "Matrix":
        m = self.m.copy()
        m[:3, :3] = self.m[:3, :3].T
        return Matrix(m)

    def is_close(self, other: "Matrix", atol: float = 1e-12) -> bool:
        return bool(np.allclose(self.m, other.m, atol=atol, rtol=0.0))
