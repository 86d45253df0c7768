import pytest

from lidartools.devices import ConnectState
from lidartools.hub import (
    DEVICE_TYPE_MID40,
    MAX_LIDAR_COUNT,
    HubLidar,
    collect_config_targets,
    hub_lidar_index,
)


def _lidar(code, device_type=3, state=ConnectState.SAMPLING, slot=1, lidar_id=1):
    return HubLidar(
        index=hub_lidar_index(slot, lidar_id),
        broadcast_code=code,
        slot=slot,
        lidar_id=lidar_id,
        device_type=device_type,
        connect_state=state,
    )


def test_first_position_is_index_zero():
    assert hub_lidar_index(1, 1) == 0


def test_next_slot_follows_three_units():
    assert hub_lidar_index(2, 1) == hub_lidar_index(1, 3) + 1


def test_indices_are_unique_and_consecutive():
    indices = [
        hub_lidar_index(slot, lidar_id)
        for slot in range(1, 11)
        for lidar_id in range(1, 4)
    ]
    assert indices == list(range(len(indices)))


@pytest.mark.parametrize("slot,lidar_id", [(0, 1), (1, 0), (-1, 2), (20, 1)])
def test_out_of_range_positions(slot, lidar_id):
    assert hub_lidar_index(slot, lidar_id) is None


def test_all_valid_indices_below_limit():
    valid = [
        index
        for slot in range(1, 15)
        for lidar_id in range(1, 4)
        if (index := hub_lidar_index(slot, lidar_id)) is not None
    ]
    assert max(valid) == MAX_LIDAR_COUNT - 1


def test_hub_lidar_defaults():
    lidar = _lidar("TESTCODE0000001")
    assert lidar.connect_state == ConnectState.SAMPLING
    assert lidar.config.enable_fan is True
    assert lidar.config.ready()


def test_broadcast_code_truncated():
    lidar = _lidar("A" * 20)
    assert lidar.broadcast_code == "A" * 16


def test_bad_version_rejected():
    with pytest.raises(ValueError):
        HubLidar(0, "code", 1, 1, 3, version=(1, 2, 3))


def test_collect_excludes_type_and_non_sampling():
    keep = _lidar("keep1", lidar_id=1)
    mid40 = _lidar("mid40", device_type=DEVICE_TYPE_MID40, lidar_id=2)
    idle = _lidar("idle", state=ConnectState.ON, lidar_id=3)
    keep2 = _lidar("keep2", slot=2)
    result = collect_config_targets([keep, mid40, None, idle, keep2])
    assert [lidar.broadcast_code for lidar in result] == ["keep1", "keep2"]


def test_collect_custom_excluded_type():
    a = _lidar("a", device_type=DEVICE_TYPE_MID40)
    b = _lidar("b", device_type=6, lidar_id=2)
    result = collect_config_targets([a, b], excluded_type=6)
    assert result == [a]


def test_collect_empty():
    assert collect_config_targets([]) == []