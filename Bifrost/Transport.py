# Transport.py
"""
Byte-stream channel to the evaluator device.

EvaluationBridge only talks to the Transport interface. SerialTransport is the
real implementation on top of pyserial; the tests swap in a fake.

Timeouts follow the classic COM port model: a read of n bytes may take at most
total_constant + total_multiplier * n milliseconds, and gives up early when the
line stays quiet for longer than the interval timeout.
"""
import logging
from typing import NamedTuple

import serial
from serial.tools import list_ports as serial_list_ports

from . import error as E

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 9600


def parse_baudrate(value):
    """Return value as a baud rate, or DEFAULT_BAUDRATE if unset or unparseable."""
    try:
        baudrate = int(str(value).strip())
    except (TypeError, ValueError):
        return DEFAULT_BAUDRATE
    if baudrate <= 0:
        return DEFAULT_BAUDRATE
    return baudrate


class SerialTimeouts(NamedTuple):
    # milliseconds
    read_interval: int = 50
    read_total_constant: int = 50
    read_total_multiplier: int = 10
    write_total_constant: int = 50
    write_total_multiplier: int = 10

    def read_timeout(self, size):
        """Total read budget in seconds for `size` bytes."""
        return (self.read_total_constant + self.read_total_multiplier * size) / 1000

    def write_timeout(self, size):
        return (self.write_total_constant + self.write_total_multiplier * size) / 1000

    def inter_byte_timeout(self):
        return self.read_interval / 1000


def list_ports():
    """Device names of the serial ports currently present."""
    return [port.device for port in serial_list_ports.comports()]


class Transport:
    """Interface of a channel. Only valid between open() and close()."""

    @property
    def is_open(self):
        return False

    def open(self, port, baudrate=DEFAULT_BAUDRATE):
        raise NotImplementedError

    def write(self, data):
        raise NotImplementedError

    def read(self, size):
        raise NotImplementedError

    def close(self):
        raise NotImplementedError


class SerialTransport(Transport):

    def __init__(self, timeouts=None):
        self.timeouts = timeouts or SerialTimeouts()
        self._serial = None

    @property
    def is_open(self):
        return self._serial is not None and self._serial.is_open

    def open(self, port, baudrate=DEFAULT_BAUDRATE):
        if self.is_open:
            return

        # Configure first, open last: Serial() without a port does not touch the device
        device = serial.Serial()
        try:
            device.port = port
            device.baudrate = baudrate
            device.bytesize = serial.EIGHTBITS
            device.parity = serial.PARITY_NONE
            device.stopbits = serial.STOPBITS_ONE
            device.inter_byte_timeout = self.timeouts.inter_byte_timeout()
            device.timeout = self.timeouts.read_timeout(0)
            device.write_timeout = self.timeouts.write_timeout(0)
            device.open()
        except (serial.SerialException, ValueError, OSError) as e:
            device.close()
            logger.warning("Opening %s at %s baud failed: %s", port, baudrate, e)
            raise E.ChannelUnavailableError(f"{E.ERROR_MESSAGES['6000']}{port}", port=port) from e

        self._serial = device
        logger.debug("Opened %s at %s baud", port, baudrate)

    def write(self, data):
        if not self.is_open:
            raise E.WriteFailedError(E.ERROR_MESSAGES["6001"])

        self._serial.write_timeout = self.timeouts.write_timeout(len(data))
        try:
            written = self._serial.write(data)
        except serial.SerialException as e:
            raise E.WriteFailedError(E.ERROR_MESSAGES["6001"]) from e

        if written is not None and written < len(data):
            raise E.WriteFailedError(f"{E.ERROR_MESSAGES['6001']} ({written}/{len(data)} bytes)")
        return written

    def read(self, size):
        """Read up to `size` bytes. A short read is the normal end of a reply."""
        if not self.is_open:
            return b""

        self._serial.timeout = self.timeouts.read_timeout(size)
        try:
            return self._serial.read(size)
        except serial.SerialException as e:
            logger.warning("%s (%s)", E.ERROR_MESSAGES["6002"], e)
            return b""

    def close(self):
        if self._serial is not None:
            self._serial.close()
            self._serial = None
            logger.debug("Serial port closed")
