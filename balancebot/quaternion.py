"""Quaternion arithmetic and Euler angle conversion."""

from __future__ import annotations

import math
from dataclasses import dataclass

RADIANS_TO_DEGREES = 180.0 / math.pi
DEGREES_TO_RADIANS = math.pi / 180.0


def asin_clipped(value: float) -> float:
    """Arcsine with the argument clipped to [-1, 1]."""
    if value <= -1.0:
        return -math.pi / 2.0
    if value >= 1.0:
        return math.pi / 2.0
    return math.asin(value)


@dataclass
class Quaternion:
    """A quaternion w + xi + yj + zk; defaults to the identity rotation."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @staticmethod
    def from_euler_angles_radians(
        roll_radians: float, pitch_radians: float, yaw_radians: float | None = None
    ) -> Quaternion:
        """Build a quaternion from roll, pitch and optionally yaw, in radians."""
        sin_roll = math.sin(0.5 * roll_radians)
        cos_roll = math.cos(0.5 * roll_radians)
        sin_pitch = math.sin(0.5 * pitch_radians)
        cos_pitch = math.cos(0.5 * pitch_radians)

        if yaw_radians is None:
            return Quaternion(
                cos_roll * cos_pitch,
                sin_roll * cos_pitch,
                cos_roll * sin_pitch,
                sin_roll * sin_pitch,
            )

        sin_yaw = math.sin(0.5 * yaw_radians)
        cos_yaw = math.cos(0.5 * yaw_radians)
        return Quaternion(
            cos_roll * cos_pitch * cos_yaw + sin_roll * sin_pitch * sin_yaw,
            sin_roll * cos_pitch * cos_yaw - cos_roll * sin_pitch * sin_yaw,
            cos_roll * sin_pitch * cos_yaw + sin_roll * cos_pitch * sin_yaw,
            cos_roll * cos_pitch * sin_yaw - sin_roll * sin_pitch * cos_yaw,
        )

    def magnitude_squared(self) -> float:
        """Return the square of the norm."""
        return self.w * self.w + self.x * self.x + self.y * self.y + self.z * self.z

    def conjugate(self) -> Quaternion:
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def to_wxyz(self) -> tuple[float, float, float, float]:
        return (self.w, self.x, self.y, self.z)

    def __pos__(self) -> Quaternion:
        return Quaternion(self.w, self.x, self.y, self.z)

    def __neg__(self) -> Quaternion:
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def __add__(self, q: Quaternion) -> Quaternion:
        if not isinstance(q, Quaternion):
            return NotImplemented
        return Quaternion(self.w + q.w, self.x + q.x, self.y + q.y, self.z + q.z)

    def __sub__(self, q: Quaternion) -> Quaternion:
        if not isinstance(q, Quaternion):
            return NotImplemented
        return Quaternion(self.w - q.w, self.x - q.x, self.y - q.y, self.z - q.z)

    def __mul__(self, other: Quaternion | float) -> Quaternion:
        if isinstance(other, Quaternion):
            w, x, y, z = self.w, self.x, self.y, self.z
            return Quaternion(
                w * other.w - x * other.x - y * other.y - z * other.z,
                w * other.x + x * other.w + y * other.z - z * other.y,
                w * other.y - x * other.z + y * other.w + z * other.x,
                w * other.z + x * other.y - y * other.x + z * other.w,
            )
        if isinstance(other, (int, float)):
            return Quaternion(self.w * other, self.x * other, self.y * other, self.z * other)
        return NotImplemented

    def __rmul__(self, k: float) -> Quaternion:
        if not isinstance(k, (int, float)):
            return NotImplemented
        return Quaternion(self.w * k, self.x * k, self.y * k, self.z * k)

    def calculate_roll_radians(self) -> float:
        w, x, y, z = self.w, self.x, self.y, self.z
        return math.atan2(w * x + y * z, 0.5 - x * x - y * y)

    def calculate_pitch_radians(self) -> float:
        return asin_clipped(2.0 * (self.w * self.y - self.x * self.z))

    def calculate_yaw_radians(self) -> float:
        w, x, y, z = self.w, self.x, self.y, self.z
        return math.atan2(w * z + x * y, 0.5 - y * y - z * z)

    def calculate_roll_degrees(self) -> float:
        return RADIANS_TO_DEGREES * self.calculate_roll_radians()

    def calculate_pitch_degrees(self) -> float:
        return RADIANS_TO_DEGREES * self.calculate_pitch_radians()

    def calculate_yaw_degrees(self) -> float:
        return RADIANS_TO_DEGREES * self.calculate_yaw_radians()