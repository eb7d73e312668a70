"""Peer-to-peer ESP-NOW messaging with a broadcast, a primary and a secondary peer."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

MAC_ADDRESS_LENGTH = 6
MAX_DATA_LENGTH = 250
BROADCAST_MAC_ADDRESS = b"\xff" * MAC_ADDRESS_LENGTH

_BROADCAST_PEER = 0
_PRIMARY_PEER = 1
_SECONDARY_PEER = 2


class EspNowError(Exception):
    """An ESP-NOW operation failed."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class EspNowRadio(ABC):
    """The radio underneath a transceiver.

    Implementations raise EspNowError when an operation fails. Whoever owns the
    radio forwards its receive and send-complete events to
    EspNowTransceiver.on_data_received and EspNowTransceiver.on_data_sent.
    """

    @abstractmethod
    def init(self) -> None:
        """Start the ESP-NOW stack."""

    @abstractmethod
    def set_channel(self, channel: int) -> None:
        """Tune the radio to a WiFi channel."""

    @abstractmethod
    def add_peer(self, mac_address: bytes, channel: int) -> None:
        """Register an unencrypted peer."""

    @abstractmethod
    def has_peer(self, mac_address: bytes) -> bool:
        """Return whether the address is a registered peer."""

    @abstractmethod
    def send(self, mac_address: bytes, data: bytes) -> None:
        """Queue data for transmission to a peer."""


class ReceivedData:
    """A fixed-size buffer that received packets are copied into."""

    def __init__(self, buffer_size: int) -> None:
        if buffer_size < 1:
            raise ValueError("buffer size must be at least 1")
        self.buffer = bytearray(buffer_size)
        self.length = 0

    @property
    def buffer_size(self) -> int:
        return len(self.buffer)

    @property
    def data(self) -> bytes:
        """The bytes of the most recently received packet."""
        return bytes(self.buffer[: self.length])

    def clear(self) -> None:
        self.length = 0


@dataclass
class _Peer:
    mac_address: bytes = bytes(MAC_ADDRESS_LENGTH)
    channel: int = 0
    received: ReceivedData | None = field(default=None)


def _mac(mac_address: bytes) -> bytes:
    mac = bytes(mac_address)
    if len(mac) != MAC_ADDRESS_LENGTH:
        raise ValueError(f"a MAC address has {MAC_ADDRESS_LENGTH} bytes, got {len(mac)}")
    return mac


def _ticks_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class EspNowTransceiver:
    """Sends to and receives from a primary peer, an optional secondary peer and broadcast.

    If no primary peer address is given to init, the first non-broadcast sender that is
    not the secondary peer becomes the primary peer (binding).
    """

    def __init__(self, my_mac_address: bytes, radio: EspNowRadio) -> None:
        self._my_mac_address = _mac(my_mac_address)
        self._radio = radio
        self._peers = [_Peer() for _ in range(3)]
        self._peer_count = 0
        self._primary_set = False
        self.send_succeeded = True
        self.received_packet_count = 0
        self.tick_count_delta = 0
        self._tick_previous = 0

    @property
    def my_mac_address(self) -> bytes:
        return self._my_mac_address

    @property
    def is_primary_peer_mac_address_set(self) -> bool:
        return self._primary_set

    @property
    def primary_peer_mac_address(self) -> bytes:
        return self._peers[_PRIMARY_PEER].mac_address

    @property
    def broadcast_channel(self) -> int:
        return self._peers[_BROADCAST_PEER].channel

    def init(
        self, received_data: ReceivedData, channel: int, primary_mac_address: bytes | None = None
    ) -> None:
        """Start the radio, add the broadcast peer and set up the primary peer."""
        self._radio.init()
        self._radio.set_channel(channel)
        self._add_broadcast_peer(channel)

        received_data.clear()
        primary = self._peers[_PRIMARY_PEER]
        primary.received = received_data
        primary.channel = channel
        self._peer_count = 2

        if primary_mac_address is not None:
            self._set_primary_peer_mac_address(primary_mac_address)

    def _add_broadcast_peer(self, channel: int) -> None:
        broadcast = self._peers[_BROADCAST_PEER]
        broadcast.received = None  # broadcast data is never copied
        broadcast.mac_address = BROADCAST_MAC_ADDRESS
        broadcast.channel = channel
        self._radio.add_peer(BROADCAST_MAC_ADDRESS, channel)
        self._peer_count = max(self._peer_count, 1)

    def add_secondary_peer(self, received_data: ReceivedData, mac_address: bytes | None = None) -> None:
        """Add a second peer whose packets are copied into ``received_data``."""
        received_data.clear()
        secondary = self._peers[_SECONDARY_PEER]
        secondary.received = received_data
        secondary.channel = self._peers[_PRIMARY_PEER].channel
        if mac_address is not None:
            secondary.mac_address = _mac(mac_address)
        self._radio.add_peer(secondary.mac_address, secondary.channel)
        self._peer_count = 3

    def _set_primary_peer_mac_address(self, mac_address: bytes) -> None:
        primary = self._peers[_PRIMARY_PEER]
        primary.mac_address = _mac(mac_address)
        if self._primary_set:
            return
        self._primary_set = True
        self._radio.add_peer(primary.mac_address, primary.channel)

    def _is_broadcast(self, mac_address: bytes) -> bool:
        return self._peer_count > 0 and mac_address == BROADCAST_MAC_ADDRESS

    def _is_secondary(self, mac_address: bytes) -> bool:
        return self._peer_count > 2 and mac_address == self._peers[_SECONDARY_PEER].mac_address

    def on_data_received(self, mac_address: bytes, data: bytes) -> bool:
        """Handle a received packet; return whether it was copied into a peer's buffer."""
        mac = bytes(mac_address)
        if not self._primary_set and not self._is_broadcast(mac) and not self._is_secondary(mac):
            self._set_primary_peer_mac_address(mac)
        return self._copy_received_data(mac, bytes(data))

    def _copy_received_data(self, mac_address: bytes, data: bytes) -> bool:
        if not self._radio.has_peer(mac_address):
            return False  # ignore anyone who is not a peer
        for index, peer in enumerate(self._peers[_PRIMARY_PEER:self._peer_count], start=_PRIMARY_PEER):
            if mac_address != peer.mac_address or peer.received is None:
                continue
            if index == _PRIMARY_PEER:
                self.received_packet_count += 1
                tick = _ticks_ms()
                self.tick_count_delta = tick - self._tick_previous
                self._tick_previous = tick
            received = peer.received
            length = min(len(data), received.buffer_size)
            received.buffer[:length] = data[:length]
            received.length = length
            return True
        return False

    def on_data_sent(self, mac_address: bytes, status: bool) -> None:
        """Record whether the last transmission succeeded."""
        self.send_succeeded = bool(status)

    @staticmethod
    def _check_length(data: bytes) -> None:
        if len(data) >= MAX_DATA_LENGTH:
            raise ValueError(f"ESP-NOW packets must be shorter than {MAX_DATA_LENGTH} bytes")

    def send_data(self, data: bytes) -> None:
        """Send data to the primary peer."""
        payload = bytes(data)
        self._check_length(payload)
        if not self._primary_set:
            raise EspNowError("the primary peer is not set")
        if not payload:
            raise EspNowError("no data to send")
        self._radio.send(self._peers[_PRIMARY_PEER].mac_address, payload)

    def send_data_secondary(self, data: bytes) -> None:
        """Send data to the secondary peer."""
        payload = bytes(data)
        self._check_length(payload)
        if self._peer_count < _SECONDARY_PEER + 1:
            raise EspNowError("the secondary peer is not set")
        if not payload:
            raise EspNowError("no data to send")
        self._radio.send(self._peers[_SECONDARY_PEER].mac_address, payload)

    def broadcast_data(self, data: bytes) -> None:
        self._radio.send(BROADCAST_MAC_ADDRESS, bytes(data))

    def tick_count_delta_and_reset(self) -> int:
        """Return the milliseconds between the last two primary packets and zero the value."""
        delta = self.tick_count_delta
        self.tick_count_delta = 0
        return delta