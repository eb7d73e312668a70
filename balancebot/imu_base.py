"""Common interface for inertial measurement units."""

from __future__ import annotations

import contextlib
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import ContextManager

from balancebot.vectors import Xyz, XyzInt16

DEGREES_TO_RADIANS = math.pi / 180.0
RADIANS_TO_DEGREES = 180.0 / math.pi


@dataclass
class GyroAcc:
    """A gyroscope reading in radians per second together with an accelerometer reading in g."""

    gyro_rps: Xyz = field(default_factory=Xyz)
    acc: Xyz = field(default_factory=Xyz)


class AxisOrientation(Enum):
    """How the sensor's axes are mounted relative to the vehicle."""

    X_AXIS_FRONT_Y_AXIS_LEFT = "x_front_y_left"
    X_AXIS_BACK_Y_AXIS_RIGHT = "x_back_y_right"
    X_AXIS_RIGHT_Y_AXIS_DOWN = "x_right_y_down"
    X_AXIS_RIGHT_Y_AXIS_FRONT = "x_right_y_front"


def map_axes(x: float, y: float, z: float, orientation: AxisOrientation) -> tuple[float, float, float]:
    """Map sensor-frame components into the vehicle frame."""
    if orientation is AxisOrientation.X_AXIS_FRONT_Y_AXIS_LEFT:
        return (-y, x, z)
    if orientation is AxisOrientation.X_AXIS_BACK_Y_AXIS_RIGHT:
        return (y, -x, z)
    if orientation is AxisOrientation.X_AXIS_RIGHT_Y_AXIS_DOWN:
        return (x, z, -y)
    if orientation is AxisOrientation.X_AXIS_RIGHT_Y_AXIS_FRONT:
        return (x, y, z)
    raise ValueError(f"unsupported orientation: {orientation!r}")


class ImuBase(ABC):
    """An IMU; bus access is serialised by an optional lock shared with other devices."""

    def __init__(self, lock: ContextManager | None = None) -> None:
        self._lock: ContextManager = lock if lock is not None else contextlib.nullcontext()

    @abstractmethod
    def set_gyro_offset(self, offset: XyzInt16) -> None:
        """Set the raw gyro offset subtracted from readings."""

    @abstractmethod
    def set_acc_offset(self, offset: XyzInt16) -> None:
        """Set the raw accelerometer offset subtracted from readings."""

    @abstractmethod
    def read_gyro_raw(self) -> XyzInt16:
        """Read the gyroscope's raw counts."""

    @abstractmethod
    def read_acc_raw(self) -> XyzInt16:
        """Read the accelerometer's raw counts."""

    @abstractmethod
    def read_gyro_rps(self) -> Xyz:
        """Read the angular rate in radians per second."""

    @abstractmethod
    def read_gyro_dps(self) -> Xyz:
        """Read the angular rate in degrees per second."""

    @abstractmethod
    def read_acc(self) -> Xyz:
        """Read the acceleration in g."""

    @abstractmethod
    def read_gyro_rps_acc(self) -> GyroAcc:
        """Read angular rate and acceleration together."""

    @abstractmethod
    def read_fifo_to_buffer(self) -> int:
        """Drain the sensor FIFO into a buffer and return the number of items read."""

    @abstractmethod
    def read_fifo_item(self, index: int) -> GyroAcc:
        """Return one item from the buffer filled by read_fifo_to_buffer."""