"""Bosch BMI270 six-axis IMU."""

from __future__ import annotations

import struct
import time
from typing import ContextManager

from balancebot.i2c import I2C
from balancebot.imu_base import (
    DEGREES_TO_RADIANS,
    RADIANS_TO_DEGREES,
    AxisOrientation,
    GyroAcc,
    ImuBase,
    map_axes,
)
from balancebot.vectors import Xyz, XyzInt16

I2C_ADDRESS = 0x68
CHIP_ID = 0x24

ACC_16G_RES = 16.0 / 32768.0
GYRO_2000DPS_RES = 2000.0 / 32768.0
GYRO_2000DPS_RES_RADIANS = DEGREES_TO_RADIANS * GYRO_2000DPS_RES

REG_CHIP_ID = 0x00
REG_OUTX_L_ACC = 0x0C
REG_OUTX_L_G = 0x12
REG_ACC_CONF = 0x40
REG_ACC_RANGE = 0x41
REG_GYR_CONF = 0x42
REG_GYR_RANGE = 0x43
REG_FIFO_CONFIG_1 = 0x49
REG_PWR_CONF_ADDR = 0x7C
REG_PWR_CTRL_ADDR = 0x7D

PERFORMANCE_OPTIMIZED = 0b10000000
ODR_1600_HZ = 0x0C
ACC_OSR4_AVG1 = 0b00000000
ACC_RANGE_16G = 0x03
GYRO_OSR4_AVG = 0x00
GYRO_RANGE_2000 = 0x00
FIFO_HEADER_DISABLE = 0b00000000
FIFO_ACC_ENABLE = 0b01000000
FIFO_GYRO_ENABLE = 0b10000000

_SETTINGS = (
    (REG_PWR_CTRL_ADDR, 0x00),
    (REG_ACC_CONF, PERFORMANCE_OPTIMIZED | ACC_OSR4_AVG1 | ODR_1600_HZ),
    (REG_ACC_RANGE, ACC_RANGE_16G),
    (REG_GYR_CONF, PERFORMANCE_OPTIMIZED | GYRO_OSR4_AVG | ODR_1600_HZ),
    (REG_GYR_RANGE, GYRO_RANGE_2000),
    (REG_FIFO_CONFIG_1, FIFO_GYRO_ENABLE | FIFO_ACC_ENABLE | FIFO_HEADER_DISABLE),
)

_XYZ_SIZE = 6
_ACC_GYRO_SIZE = 12


def _xyz_int16(data: bytes) -> XyzInt16:
    return XyzInt16(*struct.unpack("<3h", data))


def gyro_rps_acc_from_raw(
    data: bytes, gyro_offset: XyzInt16, acc_offset: XyzInt16, orientation: AxisOrientation
) -> GyroAcc:
    """Convert a 12-byte accelerometer-then-gyro register block into scaled readings."""
    if len(data) != _ACC_GYRO_SIZE:
        raise ValueError(f"expected {_ACC_GYRO_SIZE} bytes, got {len(data)}")
    ax, ay, az, gx, gy, gz = struct.unpack("<6h", data)
    gyro = map_axes(
        (gx - gyro_offset.x) * GYRO_2000DPS_RES_RADIANS,
        (gy - gyro_offset.y) * GYRO_2000DPS_RES_RADIANS,
        (gz - gyro_offset.z) * GYRO_2000DPS_RES_RADIANS,
        orientation,
    )
    acc = map_axes(
        (ax - acc_offset.x) * ACC_16G_RES,
        (ay - acc_offset.y) * ACC_16G_RES,
        (az - acc_offset.z) * ACC_16G_RES,
        orientation,
    )
    return GyroAcc(gyro_rps=Xyz(*gyro), acc=Xyz(*acc))


class ImuBMI270(ImuBase):
    """BMI270 read over I2C, configured for 16 g and 2000 deg/s at 1.6 kHz."""

    def __init__(
        self,
        bus: I2C,
        orientation: AxisOrientation = AxisOrientation.X_AXIS_RIGHT_Y_AXIS_FRONT,
        lock: ContextManager | None = None,
    ) -> None:
        super().__init__(lock)
        self._bus = bus
        self.orientation = orientation
        self._acc_offset = XyzInt16()
        self._gyro_offset = XyzInt16()
        self.init()

    def init(self) -> None:
        """Power up the sensor, check its identity and write its configuration."""
        self._bus.write_byte(REG_PWR_CONF_ADDR, 0x00)  # power save disabled
        time.sleep(0.001)

        chip_id = self._bus.read_byte(REG_CHIP_ID)
        if chip_id != CHIP_ID:
            raise RuntimeError(f"unexpected BMI270 chip id 0x{chip_id:02X}")
        time.sleep(0.001)

        for reg, value in _SETTINGS:
            self._bus.write_byte(reg, value)
            time.sleep(0.001)

    def set_gyro_offset(self, offset: XyzInt16) -> None:
        self._gyro_offset = offset

    def set_acc_offset(self, offset: XyzInt16) -> None:
        self._acc_offset = offset

    def read_gyro_raw(self) -> XyzInt16:
        with self._lock:
            data = self._bus.read_bytes(REG_OUTX_L_G, _XYZ_SIZE)
        return _xyz_int16(data)

    def read_acc_raw(self) -> XyzInt16:
        with self._lock:
            data = self._bus.read_bytes(REG_OUTX_L_ACC, _XYZ_SIZE)
        return _xyz_int16(data)

    def read_gyro_rps(self) -> Xyz:
        return self.read_gyro_rps_acc().gyro_rps

    def read_gyro_dps(self) -> Xyz:
        return self.read_gyro_rps_acc().gyro_rps * RADIANS_TO_DEGREES

    def read_acc(self) -> Xyz:
        return self.read_gyro_rps_acc().acc

    def read_gyro_rps_acc(self) -> GyroAcc:
        with self._lock:
            data = self._bus.read_bytes(REG_OUTX_L_ACC, _ACC_GYRO_SIZE)
        return gyro_rps_acc_from_raw(data, self._gyro_offset, self._acc_offset, self.orientation)

    def read_fifo_to_buffer(self) -> int:
        """FIFO reading is not supported for this sensor; nothing is read."""
        return 0

    def read_fifo_item(self, index: int) -> GyroAcc:
        return GyroAcc()