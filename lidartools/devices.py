"""Connection states and pending configuration of LiDAR and hub devices."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, IntFlag


class ConnectState(IntEnum):
    """Where a device is in the connect, configure and sample sequence."""

    OFF = 0
    ON = 1
    CONFIG = 2
    SAMPLING = 3


class ConfigBit(IntFlag):
    """One configuration request that may still await its acknowledgement."""

    FAN = 1
    RETURN_MODE = 2
    COORDINATE = 4
    IMU_RATE = 8


class CoordinateType(IntEnum):
    """Coordinate system in which a device reports its points."""

    CARTESIAN = 0
    SPHERICAL = 1


@dataclass
class UserConfig:
    """Settings wanted for a device and the requests still outstanding.

    ``set_bits`` holds every setting that has been sent but not yet
    acknowledged; sampling may start once it is empty.
    """

    enable_fan: bool = False
    return_mode: int = 0
    coordinate: CoordinateType = CoordinateType.CARTESIAN
    imu_rate: int = 0
    set_bits: ConfigBit = field(default_factory=lambda: ConfigBit(0))
    get_bits: ConfigBit = field(default_factory=lambda: ConfigBit(0))

    def mark_pending(self, bit: ConfigBit) -> None:
        """Record that a setting has been sent and awaits acknowledgement."""
        self.set_bits |= ConfigBit(bit)

    def complete(self, bit: ConfigBit) -> bool:
        """Record an acknowledged setting; return True if none remain pending."""
        self.set_bits &= ~ConfigBit(bit)
        return self.ready()

    def ready(self) -> bool:
        """True when no setting is waiting for acknowledgement."""
        return not self.set_bits