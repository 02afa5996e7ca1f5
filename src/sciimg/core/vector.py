from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

import numpy as np

from sciimg.exceptions import ValidationError

_TRIPLE_RE = re.compile(r"^\s*\(\s*([^,()]+),([^,()]+),([^,()]+)\)\s*$")


class Axis(Enum):
    X = "x"
    Y = "y"
    Z = "z"


@dataclass(frozen=True)
class Vector:
    """
    Immutable 3-component vector.

    `dot_product` is the plain (raw) dot product; use `cosine_angle` for the
    dot product of the normalized operands.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @staticmethod
    def zero() -> "Vector":
        return Vector(0.0, 0.0, 0.0)

    @staticmethod
    def x_axis() -> "Vector":
        return Vector(1.0, 0.0, 0.0)

    @staticmethod
    def y_axis() -> "Vector":
        return Vector(0.0, 1.0, 0.0)

    @staticmethod
    def z_axis() -> "Vector":
        return Vector(0.0, 0.0, 1.0)

    @classmethod
    def from_array(cls, values: np.ndarray | list[float] | tuple[float, ...]) -> "Vector":
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape[0] != 3:
            raise ValidationError(f"expected 3 components, got {arr.shape[0]}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __getitem__(self, index: int) -> float:
        return self.to_tuple()[index]

    def __add__(self, other: "Vector") -> "Vector":
        return self.add(other)

    def __sub__(self, other: "Vector") -> "Vector":
        return self.subtract(other)

    def __neg__(self) -> "Vector":
        return self.inversed()

    def __mul__(self, scalar: float) -> "Vector":
        return self.scale(scalar)

    __rmul__ = __mul__

    def add(self, other: "Vector") -> "Vector":
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def subtract(self, other: "Vector") -> "Vector":
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    def scale(self, scalar: float) -> "Vector":
        return Vector(self.x * scalar, self.y * scalar, self.z * scalar)

    def multiply(self, other: "Vector") -> "Vector":
        """Elementwise product."""
        return Vector(self.x * other.x, self.y * other.y, self.z * other.z)

    def divide(self, other: "Vector") -> "Vector":
        """Elementwise quotient."""
        return Vector(self.x / other.x, self.y / other.y, self.z / other.z)

    def dot_product(self, other: "Vector") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cosine_angle(self, other: "Vector") -> float:
        return self.normalized().dot_product(other.normalized())

    def cross_product(self, other: "Vector") -> "Vector":
        return Vector(
            self.y * other.z - other.y * self.z,
            self.z * other.x - other.z * self.x,
            self.x * other.y - other.x * self.y,
        )

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def is_zero(self) -> bool:
        return self.x == 0.0 and self.y == 0.0 and self.z == 0.0

    def normalized(self) -> "Vector":
        """Unit vector in the same direction; a zero vector is returned unchanged."""
        n = self.length()
        if n == 0.0:
            n = 1.0
        return Vector(self.x / n, self.y / n, self.z / n)

    def unit_vector(self) -> "Vector":
        n = self.length()
        if n == 0.0:
            return Vector.zero()
        return Vector(self.x / n, self.y / n, self.z / n)

    def inversed(self) -> "Vector":
        return Vector(-self.x, -self.y, -self.z)

    def distance_to(self, other: "Vector") -> float:
        return self.subtract(other).length()

    def direction_to(self, other: "Vector") -> "Vector":
        return other.subtract(self).normalized()

    def angle(self, other: "Vector") -> float:
        """Angle between the two vectors, radians."""
        return math.acos(max(-1.0, min(1.0, self.cosine_angle(other))))

    def sqrt(self) -> "Vector":
        return Vector(math.sqrt(self.x), math.sqrt(self.y), math.sqrt(self.z))

    def translate(self, x: float, y: float, z: float) -> "Vector":
        return Vector(self.x + x, self.y + y, self.z + z)

    def rotate(self, angle: float, axis: Axis) -> "Vector":
        """Right-handed rotation by `angle` radians about a coordinate axis."""
        if axis is Axis.X:
            return self.rotate_x(angle)
        if axis is Axis.Y:
            return self.rotate_y(angle)
        return self.rotate_z(angle)

    def rotate_x(self, angle: float) -> "Vector":
        c, s = math.cos(angle), math.sin(angle)
        return Vector(self.x, c * self.y - s * self.z, s * self.y + c * self.z)

    def rotate_y(self, angle: float) -> "Vector":
        c, s = math.cos(angle), math.sin(angle)
        return Vector(c * self.x + s * self.z, self.y, -s * self.x + c * self.z)

    def rotate_z(self, angle: float) -> "Vector":
        c, s = math.cos(angle), math.sin(angle)
        return Vector(c * self.x - s * self.y, s * self.x + c * self.y, self.z)

    @staticmethod
    def normal_2pt(pt0: "Vector", pt1: "Vector") -> "Vector":
        """Normal of the plane through the origin and two points (not normalized)."""
        return pt0.cross_product(pt1)

    @staticmethod
    def normal_3pt(pt0: "Vector", pt1: "Vector", pt2: "Vector") -> "Vector":
        """Unit normal of the plane through three points."""
        return pt0.subtract(pt1).cross_product(pt1.subtract(pt2)).normalized()

    # Spherical form: azimuth in the XY plane from +X, elevation above the XY plane.

    @classmethod
    def from_spherical(cls, az: float, el: float, rng: float) -> "Vector":
        rc = rng * math.cos(el)
        return cls(rc * math.cos(az), rc * math.sin(az), rng * math.sin(el))

    def get_az(self) -> float:
        return math.atan2(self.y, self.x)

    def get_el(self) -> float:
        return math.atan2(self.z, math.hypot(self.x, self.y))

    def get_range(self) -> float:
        return self.length()

    def set_az(self, az: float) -> "Vector":
        return Vector.from_spherical(az, self.get_el(), self.get_range())

    def set_el(self, el: float) -> "Vector":
        return Vector.from_spherical(self.get_az(), el, self.get_range())

    def set_range(self, rng: float) -> "Vector":
        return Vector.from_spherical(self.get_az(), self.get_el(), rng)

    def format_triple(self) -> str:
        return f"({self.x!r},{self.y!r},{self.z!r})"

    @classmethod
    def parse_triple(cls, text: str) -> "Vector":
        """
        Parse the "(x,y,z)" calibration text form.

        "UNK" (unknown) parses as the zero vector.
        """
        if text.strip() == "UNK":
            return cls.zero()
        m = _TRIPLE_RE.match(text)
        if m is None:
            raise ValidationError(f"not a vector triple: {text!r}")
        try:
            return cls(*(float(g.strip()) for g in m.groups()))
        except ValueError as exc:
            raise ValidationError(f"invalid float in vector triple {text!r}") from exc
