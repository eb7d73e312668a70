"""Receiver for the packets sent by an Atom JoyStick controller."""

from __future__ import annotations

import logging
import struct
import time
from dataclasses import dataclass
from enum import IntEnum

from balancebot.espnow import MAC_ADDRESS_LENGTH, EspNowRadio, EspNowTransceiver, ReceivedData

logger = logging.getLogger(__name__)

PACKET_SIZE = 25
BINDING_PACKET_SIZE = 16
DEFAULT_BROADCAST_COUNT = 20
DEFAULT_BROADCAST_DELAY_MS = 50
DEFAULT_DEAD_ZONE = 16
PEER_COMMAND = bytes([0xAA, 0x55, 0x16, 0x88])


class Mode(IntEnum):
    STABLE = 0
    SPORT = 1


class AltMode(IntEnum):
    AUTO = 4
    MANUAL = 5


def ubyte4float_to_q4dot12(data: bytes) -> int:
    """Convert the four little-endian bytes of a float to a Q4.12 fixed point integer."""
    raw = bytes(data)
    if len(raw) != 4:
        raise ValueError(f"expected 4 bytes, got {len(raw)}")
    (bits,) = struct.unpack("<I", raw)
    sign = (bits >> 31) & 0x1
    exponent = (bits >> 23) & 0xFF
    if exponent == 0:
        return 0
    mantissa = (bits & 0x7FFFFF) | 0x800000
    shift = (22 - 11) - (exponent - 0x80)
    value = mantissa >> shift if shift >= 0 else (mantissa << -shift) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return -value if sign else value


@dataclass
class _Control:
    raw: int = 0
    bias: int = 0
    dead_zone: int = DEFAULT_DEAD_ZONE

    def normalized(self, raw: bool) -> int:
        if raw:
            return self.raw
        value = self.raw - self.bias
        if value < -self.dead_zone:
            return value + self.dead_zone
        if value > self.dead_zone:
            return value - self.dead_zone
        return 0


class AtomJoyStickReceiver:
    """Decodes throttle, roll, pitch, yaw and button states sent by the joystick."""

    def __init__(self, my_mac_address: bytes, radio: EspNowRadio) -> None:
        self.transceiver = EspNowTransceiver(my_mac_address, radio)
        self._received = ReceivedData(PACKET_SIZE)
        self._controls = {name: _Control() for name in ("throttle", "roll", "pitch", "yaw")}
        self._bias_is_set = False
        self.mode = 0
        self.alt_mode = 0
        self.arm_button = 0
        self.flip_button = 0
        self.proactive_flag = 0

    def init(self, channel: int, transmit_mac_address: bytes | None = None) -> None:
        self.transceiver.init(self._received, channel, transmit_mac_address)

    def send_data(self, data: bytes) -> None:
        self.transceiver.send_data(data)

    @property
    def is_primary_peer_mac_address_set(self) -> bool:
        return self.transceiver.is_primary_peer_mac_address_set

    @property
    def primary_peer_mac_address(self) -> bytes:
        return self.transceiver.primary_peer_mac_address

    @property
    def my_mac_address(self) -> bytes:
        return self.transceiver.my_mac_address

    @property
    def is_packet_empty(self) -> bool:
        return self._received.length == 0

    def set_packet_empty(self) -> None:
        self._received.clear()

    def broadcast_my_mac_address_for_binding(
        self,
        broadcast_count: int = DEFAULT_BROADCAST_COUNT,
        broadcast_delay_ms: int = DEFAULT_BROADCAST_DELAY_MS,
    ) -> None:
        """Broadcast the binding packet: channel, own MAC address, then the peer command."""
        packet = bytearray(BINDING_PACKET_SIZE)
        packet[0] = self.transceiver.broadcast_channel & 0xFF
        packet[1:1 + MAC_ADDRESS_LENGTH] = self.my_mac_address
        start = 1 + MAC_ADDRESS_LENGTH
        packet[start:start + len(PEER_COMMAND)] = PEER_COMMAND
        for _ in range(broadcast_count):
            self.transceiver.broadcast_data(bytes(packet))
            time.sleep(broadcast_delay_ms / 1000.0)

    def unpack_packet(self, check_packet: bool = True) -> bool:
        """Decode the pending packet; return whether a valid packet was decoded.

        With ``check_packet`` the checksum and the target address are verified.
        The packet is marked empty afterwards in every case except when there was none.
        """
        if self.is_packet_empty:
            return False
        packet = bytes(self._received.buffer)

        checksum = sum(packet[: PACKET_SIZE - 1]) & 0xFF
        if check_packet and checksum != packet[PACKET_SIZE - 1]:
            self.set_packet_empty()
            return False

        mac = self.my_mac_address
        if not check_packet:
            logger.debug("packet: %02X:%02X:%02X", packet[0], packet[1], packet[2])
        if check_packet and packet[0:3] != mac[3:6]:
            self.set_packet_empty()
            return False

        controls = self._controls
        controls["yaw"].raw = ubyte4float_to_q4dot12(packet[3:7])
        controls["throttle"].raw = ubyte4float_to_q4dot12(packet[7:11])
        controls["roll"].raw = ubyte4float_to_q4dot12(packet[11:15])
        controls["pitch"].raw = -ubyte4float_to_q4dot12(packet[15:19])

        self.arm_button = packet[19]
        self.flip_button = packet[20]
        self.mode = packet[21]
        self.alt_mode = packet[22]
        self.proactive_flag = packet[23]

        self.set_packet_empty()
        return True

    def reset_controls(self) -> None:
        """Clear the biases and dead zones."""
        self._bias_is_set = False
        for control in self._controls.values():
            control.bias = 0
            control.dead_zone = 0

    def set_dead_zones(self, dead_zone: int) -> None:
        for control in self._controls.values():
            control.dead_zone = dead_zone

    def set_current_readings_to_bias(self) -> None:
        """Use the current stick positions as the centre positions."""
        self._bias_is_set = True
        for control in self._controls.values():
            control.bias = control.raw

    @property
    def is_bias_set(self) -> bool:
        return self._bias_is_set

    @property
    def throttle_q4dot12_raw(self) -> int:
        return self._controls["throttle"].raw

    @property
    def roll_q4dot12_raw(self) -> int:
        return self._controls["roll"].raw

    @property
    def pitch_q4dot12_raw(self) -> int:
        return self._controls["pitch"].raw

    @property
    def yaw_q4dot12_raw(self) -> int:
        return self._controls["yaw"].raw

    @property
    def throttle_q4dot12(self) -> int:
        return self._controls["throttle"].normalized(not self._bias_is_set)

    @property
    def roll_q4dot12(self) -> int:
        return self._controls["roll"].normalized(not self._bias_is_set)

    @property
    def pitch_q4dot12(self) -> int:
        return self._controls["pitch"].normalized(not self._bias_is_set)

    @property
    def yaw_q4dot12(self) -> int:
        return self._controls["yaw"].normalized(not self._bias_is_set)