import pytest

from balancebot.i2c import I2C, I2CTransport


class RecordingTransport(I2CTransport):
    def __init__(self, responses=None):
        self.writes = []
        self.reads = []
        self._responses = list(responses or [])

    def write(self, address, data):
        self.writes.append((address, bytes(data)))

    def read(self, address, length):
        self.reads.append((address, length))
        return self._responses.pop(0) if self._responses else b""


def test_transport_is_abstract():
    with pytest.raises(TypeError):
        I2CTransport()


def test_address_must_be_seven_bit():
    with pytest.raises(ValueError):
        I2C(0x80, RecordingTransport())


def test_read_byte_selects_register_then_reads_one_byte():
    transport = RecordingTransport([b"\x24"])
    bus = I2C(0x68, transport)
    assert bus.read_byte(0x00) == 0x24
    assert transport.writes == [(0x68, b"\x00")]
    assert transport.reads == [(0x68, 1)]


def test_read_byte_returns_zero_when_device_sends_nothing():
    bus = I2C(0x68, RecordingTransport())
    assert bus.read_byte(0x75) == 0


def test_read_bytes_returns_requested_data():
    transport = RecordingTransport([b"\x01\x02\x03\x04"])
    bus = I2C(0x24, transport)
    assert bus.read_bytes(0x30, 4) == b"\x01\x02\x03\x04"
    assert transport.writes == [(0x24, b"\x30")]
    assert transport.reads == [(0x24, 4)]


def test_read_bytes_short_read_raises():
    bus = I2C(0x24, RecordingTransport([b"\x01"]))
    with pytest.raises(OSError):
        bus.read_bytes(0x30, 4)


def test_write_byte_sends_register_and_value():
    transport = RecordingTransport()
    bus = I2C(0x38, transport)
    bus.write_byte(0x20, 0x7F)
    assert transport.writes == [(0x38, b"\x20\x7f")]


def test_write_byte_truncates_signed_value_to_eight_bits():
    transport = RecordingTransport()
    bus = I2C(0x38, transport)
    bus.write_byte(0x21, -1)
    assert transport.writes == [(0x38, b"\x21\xff")]


def test_write_bytes_prefixes_register():
    transport = RecordingTransport()
    bus = I2C(0x3A, transport)
    bus.write_bytes(0x00, b"\x01\x02\x03\x04")
    assert transport.writes == [(0x3A, b"\x00\x01\x02\x03\x04")]