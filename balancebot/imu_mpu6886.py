"""InvenSense MPU6886 six-axis IMU."""

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

ACC_8G_RES = 8.0 / 32768.0
GYRO_2000DPS_RES = 2000.0 / 32768.0
GYRO_2000DPS_RES_RADIANS = DEGREES_TO_RADIANS * GYRO_2000DPS_RES

# full-scale selections
AFS_2G, AFS_4G, AFS_8G, AFS_16G = range(4)
GFS_250DPS, GFS_500DPS, GFS_1000DPS, GFS_2000DPS = range(4)

REG_XG_OFFS_USRH = 0x13
REG_SAMPLE_RATE_DIVIDER = 0x19
DIVIDE_BY_1 = 0x00
DIVIDE_BY_2 = 0x01
REG_CONFIG = 0x1A
DLPF_CFG_1 = 0x01
DLPF_CFG_7 = 0x07
REG_GYRO_CONFIG = 0x1B
REG_ACCEL_CONFIG = 0x1C
REG_ACCEL_CONFIG2 = 0x1D
REG_FIFO_ENABLE = 0x23
REG_INT_PIN_CFG = 0x37
REG_INT_ENABLE = 0x38
REG_ACCEL_XOUT_H = 0x3B
REG_TEMP_OUT_H = 0x41
REG_GYRO_XOUT_H = 0x43
REG_USER_CTRL = 0x6A
REG_PWR_MGMT_1 = 0x6B
REG_FIFO_COUNT_H = 0x72
REG_FIFO_R_W = 0x74
REG_WHOAMI = 0x75

DEVICE_RESET = 0x80
CLKSEL_1 = 0x01
GYRO_FCHOICE_B = 0x00
ACC_FCHOICE_B = 0x00
FIFO_MODE_OVERWRITE = 0b01000000
DATA_RDY_INT_EN = 0x01

XYZ_DATA_SIZE = 6
ACC_TEMPERATURE_GYRO_DATA_SIZE = 14
FIFO_BUFFER_ITEMS = 74
FIFO_BUFFER_SIZE = 1036
_FIFO_CHUNK_SIZE = 8 * ACC_TEMPERATURE_GYRO_DATA_SIZE


def _check_length(data: bytes, expected: int) -> None:
    if len(data) != expected:
        raise ValueError(f"expected {expected} bytes, got {len(data)}")


def gyro_offset_from_xyz(offset: XyzInt16) -> bytes:
    """Encode an offset as the big-endian bytes of the gyro offset registers.

    The registers are added to the sensor value, so the offset is negated.
    """
    return b"".join(((-v) & 0xFFFF).to_bytes(2, "big") for v in (offset.x, offset.y, offset.z))


def gyro_rps_from_raw(data: bytes, gyro_offset: XyzInt16, orientation: AxisOrientation) -> Xyz:
    """Convert 6 big-endian gyro register bytes to radians per second."""
    _check_length(data, XYZ_DATA_SIZE)
    x, y, z = struct.unpack(">3h", data)
    return Xyz(
        *map_axes(
            (x - gyro_offset.x) * GYRO_2000DPS_RES_RADIANS,
            (y - gyro_offset.y) * GYRO_2000DPS_RES_RADIANS,
            (z - gyro_offset.z) * GYRO_2000DPS_RES_RADIANS,
            orientation,
        )
    )


def acc_from_raw(data: bytes, acc_offset: XyzInt16, orientation: AxisOrientation) -> Xyz:
    """Convert 6 big-endian accelerometer register bytes to g."""
    _check_length(data, XYZ_DATA_SIZE)
    x, y, z = struct.unpack(">3h", data)
    return Xyz(
        *map_axes(
            (x - acc_offset.x) * ACC_8G_RES,
            (y - acc_offset.y) * ACC_8G_RES,
            (z - acc_offset.z) * ACC_8G_RES,
            orientation,
        )
    )


def gyro_rps_acc_from_raw(
    data: bytes, gyro_offset: XyzInt16, acc_offset: XyzInt16, orientation: AxisOrientation
) -> GyroAcc:
    """Convert a 14-byte accelerometer, temperature, gyro block into scaled readings."""
    _check_length(data, ACC_TEMPERATURE_GYRO_DATA_SIZE)
    return GyroAcc(
        gyro_rps=gyro_rps_from_raw(data[8:14], gyro_offset, orientation),
        acc=acc_from_raw(data[0:6], acc_offset, orientation),
    )


class ImuMPU6886(ImuBase):
    """MPU6886 read over I2C, configured for 8 g and 2000 deg/s at 500 Hz."""

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
        self._fifo_buffer = bytearray(FIFO_BUFFER_SIZE)
        self.imu_id = 0
        self.init()

    def init(self) -> None:
        """Reset the sensor and write its configuration."""
        bus = self._bus
        with self._lock:
            self.imu_id = bus.read_byte(REG_WHOAMI)
            time.sleep(0.001)

            bus.write_byte(REG_PWR_MGMT_1, 0)
            time.sleep(0.01)
            bus.write_byte(REG_PWR_MGMT_1, DEVICE_RESET)
            time.sleep(0.01)
            # CLKSEL must be 001 for full gyroscope performance
            bus.write_byte(REG_PWR_MGMT_1, CLKSEL_1)
            time.sleep(0.01)

            bus.write_byte(REG_GYRO_CONFIG, (GFS_2000DPS << 3) | GYRO_FCHOICE_B)
            time.sleep(0.001)
            bus.write_byte(REG_ACCEL_CONFIG, AFS_8G << 3)
            time.sleep(0.001)
            bus.write_byte(REG_ACCEL_CONFIG2, ACC_FCHOICE_B)
            time.sleep(0.001)
            bus.write_byte(REG_CONFIG, DLPF_CFG_1 | FIFO_MODE_OVERWRITE)
            time.sleep(0.001)
            bus.write_byte(REG_SAMPLE_RATE_DIVIDER, DIVIDE_BY_2)
            time.sleep(0.001)
            bus.write_byte(REG_FIFO_ENABLE, 0x00)
            time.sleep(0.001)
            bus.write_byte(REG_INT_PIN_CFG, 0x22)
            time.sleep(0.001)
            bus.write_byte(REG_INT_ENABLE, DATA_RDY_INT_EN)
            time.sleep(0.01)
            bus.write_byte(REG_USER_CTRL, 0x00)
        time.sleep(0.001)

    def set_gyro_offset(self, offset: XyzInt16) -> None:
        self._gyro_offset = offset

    def set_acc_offset(self, offset: XyzInt16) -> None:
        self._acc_offset = offset

    def _read(self, reg: int, length: int) -> bytes:
        with self._lock:
            return self._bus.read_bytes(reg, length)

    def read_gyro_raw(self) -> XyzInt16:
        return XyzInt16(*struct.unpack(">3h", self._read(REG_GYRO_XOUT_H, XYZ_DATA_SIZE)))

    def read_acc_raw(self) -> XyzInt16:
        return XyzInt16(*struct.unpack(">3h", self._read(REG_ACCEL_XOUT_H, XYZ_DATA_SIZE)))

    def read_gyro_rps(self) -> Xyz:
        data = self._read(REG_GYRO_XOUT_H, XYZ_DATA_SIZE)
        return gyro_rps_from_raw(data, self._gyro_offset, self.orientation)

    def read_gyro_dps(self) -> Xyz:
        return self.read_gyro_rps() * RADIANS_TO_DEGREES

    def read_acc(self) -> Xyz:
        data = self._read(REG_ACCEL_XOUT_H, XYZ_DATA_SIZE)
        return acc_from_raw(data, self._acc_offset, self.orientation)

    def read_gyro_rps_acc(self) -> GyroAcc:
        data = self._read(REG_ACCEL_XOUT_H, ACC_TEMPERATURE_GYRO_DATA_SIZE)
        return gyro_rps_acc_from_raw(data, self._gyro_offset, self._acc_offset, self.orientation)

    def read_temperature_raw(self) -> int:
        (value,) = struct.unpack(">h", self._read(REG_TEMP_OUT_H, 2))
        return value

    def read_temperature(self) -> float:
        """Return the die temperature in degrees Celsius."""
        return self.read_temperature_raw() / 326.8 + 25.0

    def set_fifo_enable(self, enable: bool) -> None:
        with self._lock:
            self._bus.write_byte(REG_FIFO_ENABLE, 0x18 if enable else 0x00)
            time.sleep(0.001)
            self._bus.write_byte(REG_USER_CTRL, 0x40 if enable else 0x00)
        time.sleep(0.001)

    def reset_fifo(self) -> None:
        with self._lock:
            value = self._bus.read_byte(REG_USER_CTRL)
            self._bus.write_byte(REG_USER_CTRL, value | 0x04)

    def read_fifo_to_buffer(self) -> int:
        """Drain the FIFO into the internal buffer; return the number of complete items."""
        with self._lock:
            (fifo_length,) = struct.unpack(">H", self._bus.read_bytes(REG_FIFO_COUNT_H, 2))
            if fifo_length > FIFO_BUFFER_SIZE:
                raise OSError(f"FIFO reports {fifo_length} bytes, more than the buffer holds")
            count, remainder = divmod(fifo_length, _FIFO_CHUNK_SIZE)
            position = 0
            for _ in range(count):
                self._fifo_buffer[position:position + _FIFO_CHUNK_SIZE] = self._bus.read_bytes(
                    REG_FIFO_R_W, _FIFO_CHUNK_SIZE
                )
                position += _FIFO_CHUNK_SIZE
            if remainder:
                self._fifo_buffer[position:position + remainder] = self._bus.read_bytes(
                    REG_FIFO_R_W, remainder
                )
        return fifo_length // ACC_TEMPERATURE_GYRO_DATA_SIZE

    def read_fifo_item(self, index: int) -> GyroAcc:
        if not 0 <= index < FIFO_BUFFER_ITEMS:
            raise IndexError(f"FIFO item {index} is out of range")
        start = index * ACC_TEMPERATURE_GYRO_DATA_SIZE
        data = bytes(self._fifo_buffer[start:start + ACC_TEMPERATURE_GYRO_DATA_SIZE])
        return gyro_rps_acc_from_raw(data, self._gyro_offset, self._acc_offset, self.orientation)