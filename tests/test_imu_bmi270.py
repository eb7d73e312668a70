import math
import struct

import pytest

from balancebot.i2c import I2C, I2CTransport
from balancebot.imu_base import AxisOrientation, GyroAcc
from balancebot.imu_bmi270 import I2C_ADDRESS, ImuBMI270, gyro_rps_acc_from_raw
from balancebot.vectors import Xyz, XyzInt16


class RegisterTransport(I2CTransport):
    def __init__(self, chip_id=0x24):
        self.registers = bytearray(256)
        self.registers[0x00] = chip_id
        self.pointer = 0
        self.writes = []

    def write(self, address, data):
        data = bytes(data)
        self.writes.append(data)
        self.pointer = data[0]
        for offset, value in enumerate(data[1:]):
            self.registers[self.pointer + offset] = value

    def read(self, address, length):
        return bytes(self.registers[self.pointer:self.pointer + length])


class CountingLock:
    def __init__(self):
        self.entered = 0

    def __enter__(self):
        self.entered += 1

    def __exit__(self, *exc):
        return False


def make_imu(orientation=AxisOrientation.X_AXIS_RIGHT_Y_AXIS_FRONT, lock=None):
    transport = RegisterTransport()
    imu = ImuBMI270(I2C(I2C_ADDRESS, transport), orientation, lock)
    return imu, transport


def test_init_writes_configuration_in_order():
    _, transport = make_imu()
    written = [w[0] for w in transport.writes if len(w) > 1]
    assert written == [0x7C, 0x7D, 0x40, 0x41, 0x42, 0x43, 0x49]
    assert transport.registers[0x41] == 0x03
    assert transport.registers[0x43] == 0x00
    assert transport.registers[0x40] == transport.registers[0x42] == 0x8C


def test_wrong_chip_id_raises():
    transport = RegisterTransport(chip_id=0x00)
    with pytest.raises(RuntimeError):
        ImuBMI270(I2C(I2C_ADDRESS, transport))


def test_read_gyro_raw_is_little_endian():
    imu, transport = make_imu()
    transport.registers[0x12:0x18] = struct.pack("<3h", 100, -200, 300)
    assert imu.read_gyro_raw() == XyzInt16(100, -200, 300)


def test_read_acc_raw_is_little_endian():
    imu, transport = make_imu()
    transport.registers[0x0C:0x12] = struct.pack("<3h", -32768, 0, 32767)
    assert imu.read_acc_raw() == XyzInt16(-32768, 0, 32767)


def test_scaling_of_acc_and_gyro():
    imu, transport = make_imu()
    transport.registers[0x0C:0x18] = struct.pack("<6h", 2048, 0, 0, 16384, 0, 0)
    assert imu.read_acc().x == pytest.approx(1.0)
    assert imu.read_gyro_dps().x == pytest.approx(1000.0)
    assert imu.read_gyro_rps().x == pytest.approx(math.radians(imu.read_gyro_dps().x))


def test_offsets_cancel_raw_values():
    data = struct.pack("<6h", 10, -20, 30, 40, -50, 60)
    result = gyro_rps_acc_from_raw(
        data,
        XyzInt16(40, -50, 60),
        XyzInt16(10, -20, 30),
        AxisOrientation.X_AXIS_FRONT_Y_AXIS_LEFT,
    )
    assert result.gyro_rps.magnitude_squared() == 0.0
    assert result.acc.magnitude_squared() == 0.0


def test_offsets_are_applied_by_reads():
    imu, transport = make_imu()
    transport.registers[0x0C:0x18] = struct.pack("<6h", 5, 6, 7, 8, 9, 10)
    imu.set_acc_offset(XyzInt16(5, 6, 7))
    imu.set_gyro_offset(XyzInt16(8, 9, 10))
    assert imu.read_gyro_rps_acc() == GyroAcc(Xyz(0.0, 0.0, 0.0), Xyz(0.0, 0.0, 0.0))


def test_front_left_orientation_rotates_axes():
    data = struct.pack("<6h", 100, 200, 300, 400, 500, 600)
    zero = XyzInt16()
    front = gyro_rps_acc_from_raw(data, zero, zero, AxisOrientation.X_AXIS_RIGHT_Y_AXIS_FRONT)
    left = gyro_rps_acc_from_raw(data, zero, zero, AxisOrientation.X_AXIS_FRONT_Y_AXIS_LEFT)
    assert left.acc.x == pytest.approx(-front.acc.y)
    assert left.acc.y == pytest.approx(front.acc.x)
    assert left.gyro_rps.z == pytest.approx(front.gyro_rps.z)
    assert left.gyro_rps.magnitude_squared() == pytest.approx(front.gyro_rps.magnitude_squared())


def test_gyro_rps_acc_from_raw_rejects_wrong_length():
    with pytest.raises(ValueError):
        gyro_rps_acc_from_raw(b"\x00" * 6, XyzInt16(), XyzInt16(), AxisOrientation.X_AXIS_RIGHT_Y_AXIS_FRONT)


def test_combined_read_matches_single_reads():
    imu, transport = make_imu(AxisOrientation.X_AXIS_RIGHT_Y_AXIS_DOWN)
    transport.registers[0x0C:0x18] = struct.pack("<6h", -1000, 2000, 3000, 123, -456, 789)
    combined = imu.read_gyro_rps_acc()
    assert imu.read_gyro_rps() == combined.gyro_rps
    assert imu.read_acc() == combined.acc


def test_fifo_is_unsupported():
    imu, _ = make_imu()
    assert imu.read_fifo_to_buffer() == 0
    assert imu.read_fifo_item(3) == GyroAcc()


def test_reads_take_the_lock():
    lock = CountingLock()
    imu, _ = make_imu(lock=lock)
    imu.read_gyro_raw()
    imu.read_acc_raw()
    imu.read_gyro_rps_acc()
    assert lock.entered == 3