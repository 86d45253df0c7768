"""Reading GPRMC/GNRMC sentences from a serial GPS receiver for time sync."""

from __future__ import annotations

import functools
import operator
import re
import threading
from enum import Enum
from typing import Callable, Optional, Union

import serial

READ_BUF = 256
RMC_BUFFER_SIZE = 128
READ_TIMEOUT = 0.1

_HEADERS = (b"$GPRMC", b"$GNRMC")
_HEADER_LEN = len(_HEADERS[0])
_HEX_PREFIX = re.compile(rb"\s*([0-9a-fA-F]+)")

RmcCallback = Callable[[bytes], None]


class BaudRate(Enum):
    """Supported line speeds, in bits per second."""

    BR2400 = 2400
    BR4800 = 4800
    BR9600 = 9600
    BR19200 = 19200
    BR38400 = 38400
    BR57600 = 57600
    BR115200 = 115200
    BR230400 = 230400
    BR460800 = 460800
    BR500000 = 500000
    BR576000 = 576000
    BR921600 = 921600
    BR1152000 = 1152000
    BR1500000 = 1500000
    BR2000000 = 2000000
    BR2500000 = 2500000
    BR3000000 = 3000000
    BR3500000 = 3500000
    BR4000000 = 4000000

    @property
    def bps(self) -> int:
        return self.value


class Parity(Enum):
    """Character framing of the serial line."""

    P_8N1 = "8N1"
    P_7E1 = "7E1"
    P_7O1 = "7O1"
    P_7S1 = "7S1"


# Space parity is set up the same way as no parity.
_FRAMING = {
    Parity.P_8N1: (serial.EIGHTBITS, serial.PARITY_NONE),
    Parity.P_7E1: (serial.SEVENBITS, serial.PARITY_EVEN),
    Parity.P_7O1: (serial.SEVENBITS, serial.PARITY_ODD),
    Parity.P_7S1: (serial.EIGHTBITS, serial.PARITY_NONE),
}


def serial_settings(
    baud_rate: Union[BaudRate, int], parity: Union[Parity, str]
) -> dict:
    """Return the serial port keyword settings for a speed and framing.

    Raises ValueError for an unknown speed or framing.
    """
    baud = BaudRate(baud_rate)
    bytesize, parity_flag = _FRAMING[Parity(parity)]
    return {
        "baudrate": baud.bps,
        "bytesize": bytesize,
        "parity": parity_flag,
        "stopbits": serial.STOPBITS_ONE,
    }


def _parse_hex(raw: bytes) -> int:
    text = bytes(raw).split(b"\0", 1)[0]
    match = _HEX_PREFIX.match(text)
    return int(match.group(1), 16) if match else 0


class RmcParser:
    """Byte-at-a-time recogniser of checksummed RMC sentences."""

    def __init__(self) -> None:
        self._buffer = bytearray(RMC_BUFFER_SIZE)
        self._length = 0

    def clear(self) -> None:
        """Discard any partly received sentence."""
        self._length = 0
        self._buffer[:] = bytes(RMC_BUFFER_SIZE)

    @property
    def sentence(self) -> bytes:
        """The sentence held so far, up to the last byte fed."""
        return bytes(self._buffer[: self._length + 1])

    def feed(self, byte: int) -> bool:
        """Take one byte; return True when it completes a valid sentence."""
        buf = self._buffer
        if self._length < _HEADER_LEN:
            buf[0 : _HEADER_LEN - 1] = buf[1:_HEADER_LEN]
            buf[_HEADER_LEN - 1] = byte
            self._length += 1
            if (
                self._length == _HEADER_LEN
                and bytes(buf[:_HEADER_LEN]) not in _HEADERS
            ):
                self._length -= 1
            return False

        if self._length >= RMC_BUFFER_SIZE:
            self.clear()
            return False

        n = self._length
        buf[n] = byte
        if buf[n - 2] == ord("*"):
            checksum = functools.reduce(operator.xor, buf[1 : n - 2], 0)
            expected = _parse_hex(buf[n - 1 : n + 1]) & 0xFF
            if checksum ^ expected == 0:
                return True
        self._length += 1
        return False

    def decode(self, data: bytes) -> list[bytes]:
        """Feed a chunk of bytes and return every sentence it completed."""
        found = []
        for byte in data:
            if self.feed(byte):
                found.append(self.sentence)
                self.clear()
        return found


class Synchro:
    """Listens on a serial port and reports each RMC sentence to a callback."""

    def __init__(
        self,
        port_name: str,
        baud_rate: Union[BaudRate, int] = BaudRate.BR9600,
        parity: Union[Parity, str] = Parity.P_8N1,
        callback: Optional[RmcCallback] = None,
    ) -> None:
        self.port_name = port_name
        self.baud_rate = BaudRate(baud_rate)
        self.parity = Parity(parity)
        self.callback = callback
        self._parser = RmcParser()
        self._port: Optional[serial.SerialBase] = None
        self._thread: Optional[threading.Thread] = None
        self._quit = threading.Event()

    @property
    def port(self) -> Optional[serial.SerialBase]:
        """The open serial port, or None when stopped."""
        return self._port

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        """Open the port and start the listening thread.

        Raises serial.SerialException if the port cannot be opened.
        """
        if self._thread is not None:
            raise RuntimeError("synchro is already running")
        self._port = serial.serial_for_url(
            self.port_name,
            timeout=READ_TIMEOUT,
            **serial_settings(self.baud_rate, self.parity),
        )
        self._parser.clear()
        self._quit.clear()
        self._thread = threading.Thread(
            target=self._io_loop, name="synchro", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop the listening thread and close the port."""
        self._quit.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._port is not None:
            if self._port.is_open:
                self._port.close()
            self._port = None

    def _io_loop(self) -> None:
        assert self._port is not None
        while not self._quit.is_set():
            data = self._port.read(READ_BUF)
            if data:
                self._dispatch(data)

    def _dispatch(self, data: bytes) -> None:
        for sentence in self._parser.decode(data):
            if self.callback is not None:
                self.callback(sentence)

    def __enter__(self) -> "Synchro":
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()