"""Three-component vectors used for IMU readings."""

from __future__ import annotations

from dataclasses import dataclass

INT16_MIN = -32768
INT16_MAX = 32767


@dataclass
class Xyz:
    """A floating point 3-vector with the usual arithmetic."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def magnitude_squared(self) -> float:
        """Return the square of the vector's magnitude."""
        return self.x * self.x + self.y * self.y + self.z * self.z

    def dot_product(self, other: Xyz) -> float:
        """Return the dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross_product(self, other: Xyz) -> Xyz:
        """Return the cross product with another vector."""
        return Xyz(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def __pos__(self) -> Xyz:
        return Xyz(self.x, self.y, self.z)

    def __neg__(self) -> Xyz:
        return Xyz(-self.x, -self.y, -self.z)

    def __add__(self, other: Xyz) -> Xyz:
        if not isinstance(other, Xyz):
            return NotImplemented
        return Xyz(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Xyz) -> Xyz:
        if not isinstance(other, Xyz):
            return NotImplemented
        return Xyz(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, k: float) -> Xyz:
        if not isinstance(k, (int, float)):
            return NotImplemented
        return Xyz(self.x * k, self.y * k, self.z * k)

    __rmul__ = __mul__


@dataclass
class XyzInt16:
    """A 3-vector of signed 16-bit integers, as read raw from a sensor."""

    x: int = 0
    y: int = 0
    z: int = 0

    def __post_init__(self) -> None:
        for name in ("x", "y", "z"):
            value = getattr(self, name)
            if not INT16_MIN <= value <= INT16_MAX:
                raise ValueError(f"{name}={value} is outside the int16 range")