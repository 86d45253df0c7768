"""Writing LVX point-cloud recordings and reading extrinsic parameters."""

from __future__ import annotations

import re
import struct
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Union

MAGIC_CODE = 0xAC0EA767
SIGNATURE = b"livox_tech"
FILE_VERSION = bytes((1, 1, 0, 0))
DEFAULT_FRAME_DURATION = 50
MAX_POINT_SIZE = 1500
BROADCAST_CODE_SIZE = 16

_PUBLIC_HEADER = struct.Struct("<16s4sI")
_PRIVATE_HEADER = struct.Struct("<IB")
_DEVICE_INFO = struct.Struct("<16s16sBBB6f")
_PACKET_HEADER = struct.Struct("<BBBBBIBB8s")
_FRAME_HEADER = struct.Struct("<QQQ")

PUBLIC_HEADER_SIZE = _PUBLIC_HEADER.size
PRIVATE_HEADER_SIZE = _PRIVATE_HEADER.size
DEVICE_INFO_SIZE = _DEVICE_INFO.size
PACKET_HEADER_SIZE = _PACKET_HEADER.size
FRAME_HEADER_SIZE = _FRAME_HEADER.size

_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _code_bytes(code: str) -> bytes:
    return code.encode("ascii", errors="replace")[:BROADCAST_CODE_SIZE]


@dataclass
class LvxDeviceInfo:
    """Description of one device stored in the file header."""

    lidar_broadcast_code: str = ""
    hub_broadcast_code: str = ""
    device_index: int = 0
    device_type: int = 0
    extrinsic_enable: bool = False
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def pack(self) -> bytes:
        """Return the packed on-disk representation."""
        return _DEVICE_INFO.pack(
            _code_bytes(self.lidar_broadcast_code),
            _code_bytes(self.hub_broadcast_code),
            self.device_index & 0xFF,
            self.device_type & 0xFF,
            1 if self.extrinsic_enable else 0,
            self.roll,
            self.pitch,
            self.yaw,
            self.x,
            self.y,
            self.z,
        )


@dataclass
class LvxPacket:
    """One point-cloud packet of a frame, with its raw point bytes."""

    device_index: int = 0
    version: int = 0
    port_id: int = 0
    lidar_index: int = 0
    rsvd: int = 0
    error_code: int = 0
    timestamp_type: int = 0
    data_type: int = 0
    timestamp: bytes = bytes(8)
    points: bytes = b""

    def __post_init__(self) -> None:
        if len(self.timestamp) != 8:
            raise ValueError("timestamp must be exactly 8 bytes")
        if len(self.points) > MAX_POINT_SIZE:
            raise ValueError(
                f"point data of {len(self.points)} bytes exceeds {MAX_POINT_SIZE}"
            )

    def pack_size(self) -> int:
        """Number of bytes this packet occupies in the file."""
        return PACKET_HEADER_SIZE + len(self.points)

    def pack(self) -> bytes:
        """Return the packed on-disk representation."""
        header = _PACKET_HEADER.pack(
            self.device_index & 0xFF,
            self.version & 0xFF,
            self.port_id & 0xFF,
            self.lidar_index & 0xFF,
            self.rsvd & 0xFF,
            self.error_code & 0xFFFFFFFF,
            self.timestamp_type & 0xFF,
            self.data_type & 0xFF,
            bytes(self.timestamp),
        )
        return header + bytes(self.points)


def default_filename(now: Optional[datetime] = None) -> str:
    """Name a recording after the local time it was started."""
    if now is None:
        now = datetime.now()
    return now.strftime("%Y-%m-%d_%H-%M-%S.lvx")


class LvxWriter:
    """Writes an LVX file: a header followed by numbered frames."""

    def __init__(
        self,
        path: Union[str, Path, None] = None,
        frame_duration: int = DEFAULT_FRAME_DURATION,
    ) -> None:
        self.path = Path(path) if path is not None else Path(default_filename())
        self.frame_duration = frame_duration
        self.offset = 0
        self.frame_index = 0
        self._devices: list[LvxDeviceInfo] = []
        self._file: Optional[BinaryIO] = None

    @property
    def is_open(self) -> bool:
        return self._file is not None and not self._file.closed

    def open(self) -> None:
        """Create the output file; raises OSError if it cannot be created."""
        self._file = open(self.path, "wb")

    def add_device_info(self, info: LvxDeviceInfo) -> None:
        self._devices.append(info)

    def device_count(self) -> int:
        return len(self._devices)

    def _stream(self) -> BinaryIO:
        if not self.is_open:
            raise ValueError("LVX file is not open")
        assert self._file is not None
        return self._file

    def write_header(self) -> None:
        """Write the public and private headers and the device table."""
        stream = self._stream()
        count = len(self._devices) & 0xFF
        parts = [
            _PUBLIC_HEADER.pack(SIGNATURE, FILE_VERSION, MAGIC_CODE),
            _PRIVATE_HEADER.pack(self.frame_duration & 0xFFFFFFFF, count),
        ]
        parts.extend(info.pack() for info in self._devices[:count])
        data = b"".join(parts)
        stream.write(data)
        self.offset += len(data)

    def save_frame(self, packets: Iterable[LvxPacket]) -> None:
        """Write one frame holding the given packets."""
        stream = self._stream()
        packed = [packet.pack() for packet in packets]
        next_offset = self.offset + FRAME_HEADER_SIZE + sum(map(len, packed))
        stream.write(_FRAME_HEADER.pack(self.offset, next_offset, self.frame_index))
        stream.write(b"".join(packed))
        self.offset = next_offset
        self.frame_index += 1

    def close(self) -> None:
        if self.is_open:
            assert self._file is not None
            self._file.close()

    def __enter__(self) -> "LvxWriter":
        if not self.is_open:
            self.open()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _atof(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def parse_extrinsic_xml(
    path: Union[str, Path],
    broadcast_code: str,
    device_type: int,
    device_index: int,
) -> Optional[LvxDeviceInfo]:
    """Read the extrinsic parameters of one device from an XML file.

    Returns None when the root is not ``Livox`` or no ``Device`` element
    carries the given broadcast code.
    """
    root = ElementTree.parse(path).getroot()
    if root.tag != "Livox":
        return None
    wanted = broadcast_code[:BROADCAST_CODE_SIZE]
    result: Optional[LvxDeviceInfo] = None
    for device in root:
        if device.tag != "Device":
            continue
        code = (device.text or "").strip()
        if code[:BROADCAST_CODE_SIZE] != wanted:
            continue
        info = LvxDeviceInfo(
            lidar_broadcast_code=code[:BROADCAST_CODE_SIZE],
            hub_broadcast_code="",
            device_index=device_index,
            device_type=device_type,
            extrinsic_enable=True,
        )
        for name in ("roll", "pitch", "yaw", "x", "y", "z"):
            if name in device.attrib:
                setattr(info, name, _atof(device.attrib[name]))
        result = info
    return result