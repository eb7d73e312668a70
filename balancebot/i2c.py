"""Register-oriented access to a device on an I2C bus."""

from __future__ import annotations

from abc import ABC, abstractmethod


class I2CTransport(ABC):
    """The raw bus: sends bytes to, and reads bytes from, a 7-bit device address."""

    @abstractmethod
    def write(self, address: int, data: bytes) -> None:
        """Send ``data`` to the device at ``address``; raise OSError on failure."""

    @abstractmethod
    def read(self, address: int, length: int) -> bytes:
        """Request ``length`` bytes from the device; may return fewer."""


class I2C:
    """A device on an I2C bus whose state is held in 8-bit registers."""

    def __init__(self, address: int, transport: I2CTransport) -> None:
        if not 0 <= address <= 0x7F:
            raise ValueError(f"I2C address 0x{address:X} is not a 7-bit address")
        self.address = address
        self._transport = transport

    def _select(self, reg: int) -> None:
        self._transport.write(self.address, bytes([reg]))

    def read_byte(self, reg: int) -> int:
        """Read one register; a device that returns nothing reads as 0."""
        self._select(reg)
        data = self._transport.read(self.address, 1)
        return data[0] if data else 0

    def read_bytes(self, reg: int, length: int) -> bytes:
        """Read ``length`` consecutive registers starting at ``reg``."""
        self._select(reg)
        data = bytes(self._transport.read(self.address, length))
        if len(data) < length:
            raise OSError(
                f"short read from I2C device 0x{self.address:02X}: "
                f"wanted {length} bytes, got {len(data)}"
            )
        return data[:length]

    def write_byte(self, reg: int, data: int) -> None:
        """Write one register; the value is truncated to 8 bits."""
        self._transport.write(self.address, bytes([reg, data & 0xFF]))

    def write_bytes(self, reg: int, data: bytes) -> None:
        """Write consecutive registers starting at ``reg``."""
        self._transport.write(self.address, bytes([reg]) + bytes(data))