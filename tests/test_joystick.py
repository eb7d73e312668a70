import struct

import pytest

from balancebot.espnow import BROADCAST_MAC_ADDRESS, EspNowError, EspNowRadio
from balancebot.joystick import (
    DEFAULT_DEAD_ZONE,
    PEER_COMMAND,
    AltMode,
    AtomJoyStickReceiver,
    Mode,
    ubyte4float_to_q4dot12,
)

MY_MAC = bytes.fromhex("020000000001")
TX_MAC = bytes.fromhex("020000000002")


class FakeRadio(EspNowRadio):
    def __init__(self):
        self.peers = {}
        self.sent = []
        self.channel = None

    def init(self):
        pass

    def set_channel(self, channel):
        self.channel = channel

    def add_peer(self, mac_address, channel):
        self.peers[bytes(mac_address)] = channel

    def has_peer(self, mac_address):
        return bytes(mac_address) in self.peers

    def send(self, mac_address, data):
        self.sent.append((bytes(mac_address), bytes(data)))


def q(value):
    return ubyte4float_to_q4dot12(struct.pack("<f", value))


def make_packet(*, yaw=0.0, throttle=0.0, roll=0.0, pitch=0.0, arm=0, flip=0,
                mode=0, alt_mode=4, proactive=0, target=MY_MAC, corrupt=False):
    body = (
        bytes(target[3:6])
        + struct.pack("<4f", yaw, throttle, roll, pitch)
        + bytes([arm, flip, mode, alt_mode, proactive])
    )
    checksum = sum(body) & 0xFF
    if corrupt:
        checksum ^= 0xFF
    return body + bytes([checksum])


@pytest.fixture
def radio():
    return FakeRadio()


@pytest.fixture
def receiver(radio):
    r = AtomJoyStickReceiver(MY_MAC, radio)
    r.init(1, TX_MAC)
    return r


def feed(receiver, packet):
    receiver.transceiver.on_data_received(TX_MAC, packet)


def test_conversion_of_one():
    assert q(1.0) == 2048


def test_conversion_zero_sign_and_scale():
    assert q(0.0) == 0
    assert q(-0.75) == -q(0.75)
    assert q(0.5) * 2 == q(1.0)


def test_conversion_rejects_wrong_length():
    with pytest.raises(ValueError):
        ubyte4float_to_q4dot12(b"\x00\x00\x00")


def test_unpack_valid_packet(receiver):
    feed(receiver, make_packet(yaw=0.25, throttle=0.5, roll=-0.5, pitch=0.75,
                               arm=1, flip=0, mode=1, alt_mode=5, proactive=1))
    assert receiver.unpack_packet() is True
    assert receiver.yaw_q4dot12_raw == q(0.25)
    assert receiver.throttle_q4dot12_raw == q(0.5)
    assert receiver.roll_q4dot12_raw == q(-0.5)
    assert receiver.pitch_q4dot12_raw == -q(0.75)
    assert receiver.arm_button == 1
    assert receiver.mode == Mode.SPORT
    assert receiver.alt_mode == AltMode.MANUAL
    assert receiver.proactive_flag == 1
    assert receiver.is_packet_empty


def test_without_bias_getters_return_raw(receiver):
    feed(receiver, make_packet(throttle=0.5, roll=0.25))
    receiver.unpack_packet()
    assert receiver.throttle_q4dot12 == receiver.throttle_q4dot12_raw
    assert receiver.roll_q4dot12 == receiver.roll_q4dot12_raw


def test_empty_packet_returns_false(receiver):
    assert receiver.unpack_packet() is False


def test_bad_checksum_rejected(receiver):
    feed(receiver, make_packet(throttle=0.5, corrupt=True))
    assert receiver.unpack_packet() is False
    assert receiver.is_packet_empty
    assert receiver.throttle_q4dot12_raw == 0


def test_wrong_target_rejected(receiver):
    feed(receiver, make_packet(throttle=0.5, target=TX_MAC))
    assert receiver.unpack_packet() is False
    assert receiver.throttle_q4dot12_raw == 0


def test_unchecked_packet_accepted(receiver):
    feed(receiver, make_packet(throttle=0.5, corrupt=True))
    assert receiver.unpack_packet(False) is True
    assert receiver.throttle_q4dot12_raw == q(0.5)


def test_bias_and_dead_zone(receiver):
    feed(receiver, make_packet(throttle=0.5))
    receiver.unpack_packet()
    receiver.set_current_readings_to_bias()
    assert receiver.is_bias_set
    assert receiver.throttle_q4dot12 == 0

    feed(receiver, make_packet(throttle=1.0))
    receiver.unpack_packet()
    assert receiver.throttle_q4dot12 == q(1.0) - q(0.5) - DEFAULT_DEAD_ZONE

    feed(receiver, make_packet(throttle=0.0))
    receiver.unpack_packet()
    assert receiver.throttle_q4dot12 == q(0.0) - q(0.5) + DEFAULT_DEAD_ZONE

    feed(receiver, make_packet(throttle=0.503))
    receiver.unpack_packet()
    assert receiver.throttle_q4dot12 == 0


def test_set_dead_zones(receiver):
    feed(receiver, make_packet(roll=0.5))
    receiver.unpack_packet()
    receiver.set_current_readings_to_bias()
    receiver.set_dead_zones(0)
    feed(receiver, make_packet(roll=0.503))
    receiver.unpack_packet()
    assert receiver.roll_q4dot12 == q(0.503) - q(0.5)


def test_reset_controls(receiver):
    feed(receiver, make_packet(yaw=0.5))
    receiver.unpack_packet()
    receiver.set_current_readings_to_bias()
    receiver.reset_controls()
    assert not receiver.is_bias_set
    assert receiver.yaw_q4dot12 == q(0.5)


def test_broadcast_for_binding(radio, receiver):
    receiver.broadcast_my_mac_address_for_binding(3, 0)
    assert len(radio.sent) == 3
    mac, data = radio.sent[0]
    assert mac == BROADCAST_MAC_ADDRESS
    assert len(data) == 16
    assert data[0] == receiver.transceiver.broadcast_channel == 1
    assert data[1:7] == MY_MAC
    assert data[7:11] == PEER_COMMAND
    assert all(sent == radio.sent[0] for sent in radio.sent)


def test_send_data_requires_binding(radio):
    r = AtomJoyStickReceiver(MY_MAC, radio)
    r.init(1)
    with pytest.raises(EspNowError):
        r.send_data(b"abc")
    feed(r, make_packet())
    assert r.is_primary_peer_mac_address_set
    r.send_data(b"abc")
    assert radio.sent == [(TX_MAC, b"abc")]