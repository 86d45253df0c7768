"""LiDAR units attached to a hub and the configuration sent to them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from lidartools.devices import ConnectState, UserConfig

MAX_LIDAR_COUNT = 32
LIDARS_PER_SLOT = 3
BROADCAST_CODE_SIZE = 16

DEVICE_TYPE_MID40 = 1
STRONGEST_RETURN = 1
IMU_FREQ_200HZ = 1


def hub_lidar_index(slot: int, lidar_id: int) -> Optional[int]:
    """Return the table index of the LiDAR at a hub slot and id.

    Slots and ids count from 1 and each slot carries three units.
    Returns None when the position falls outside the device table.
    """
    if slot < 1 or lidar_id < 1:
        return None
    index = (slot - 1) * LIDARS_PER_SLOT + lidar_id - 1
    if index >= MAX_LIDAR_COUNT:
        return None
    return index


def _default_config() -> UserConfig:
    return UserConfig(
        enable_fan=True,
        return_mode=STRONGEST_RETURN,
        imu_rate=IMU_FREQ_200HZ,
    )


@dataclass
class HubLidar:
    """One LiDAR unit reported by a hub, with the settings wanted for it.

    A unit reported by the hub is taken to be sampling, and is configured
    with the fan on, the strongest return and a 200 Hz IMU rate.
    """

    index: int
    broadcast_code: str
    slot: int
    lidar_id: int
    device_type: int
    version: tuple[int, int, int, int] = (0, 0, 0, 0)
    connect_state: ConnectState = ConnectState.SAMPLING
    config: UserConfig = field(default_factory=_default_config)

    def __post_init__(self) -> None:
        self.broadcast_code = self.broadcast_code[:BROADCAST_CODE_SIZE]
        self.version = tuple(self.version)  # type: ignore[assignment]
        if len(self.version) != 4:
            raise ValueError("version must have four parts")


def collect_config_targets(
    lidars: Iterable[Optional[HubLidar]],
    excluded_type: int = DEVICE_TYPE_MID40,
) -> list[HubLidar]:
    """Return the sampling units whose return mode and IMU rate are to be set.

    Units of ``excluded_type`` and units that are not sampling are left out;
    the order of ``lidars`` is kept.
    """
    return [
        lidar
        for lidar in lidars
        if lidar is not None
        and lidar.device_type != excluded_type
        and lidar.connect_state == ConnectState.SAMPLING
    ]