# lidartools

Building blocks for programs that record and manage LiDAR units and hubs.

- **`lidartools.lvx`** writes LVX point-cloud files. It writes the public and
  private headers and a table with one record per device. After that it writes
  frames of packets. Each frame header holds the frame's own offset, the offset
  of the next frame and a running frame index. The module can also read one
  device's extrinsic parameters (roll, pitch, yaw, x, y, z) from an XML file.
- **`lidartools.gps_sync`** finds `$GPRMC` / `$GNRMC` sentences in a byte
  stream and checks their checksum. `Synchro` reads a serial port in a
  background thread and passes each valid sentence to a callback.
- **`lidartools.conflict`** spots devices that announce different broadcast
  codes from the same IP address.
- **`lidartools.whitelist`** keeps the whitelist of broadcast codes that decides
  which devices should be connected. When the list is empty, every device
  should be connected.
- **`lidartools.devices`** holds connection states and tracks configuration
  requests that are still pending.
- **`lidartools.hub`** maps the LiDAR units attached to a hub to table indexes
  and picks the units that need configuring.

## Writing an LVX file

```python
from datetime import datetime

from lidartools.lvx import LvxDeviceInfo, LvxPacket, LvxWriter, default_filename

path = default_filename(datetime.now())      # e.g. 2024-01-31_12-00-00.lvx
with LvxWriter(path, 50) as writer:          # 50 ms per frame; opens the file
    writer.add_device_info(LvxDeviceInfo(lidar_broadcast_code="EXAMPLECODE0001"))
    writer.write_header()
    writer.save_frame([
        LvxPacket(device_index=0, data_type=2, timestamp=bytes(8), points=b"..."),
    ])
```

- `LvxWriter(path=None, frame_duration=50)` names the file with
  `default_filename()` when no path is given. `open()` raises `OSError` if the
  file cannot be created. `write_header()` and `save_frame()` raise
  `ValueError` when the file is not open.
- Call `add_device_info()` before `write_header()`. `device_count()` returns the
  number of devices added.
- `LvxPacket` holds raw point bytes, at most 1500 of them, and a timestamp of
  exactly 8 bytes. Otherwise the constructor raises `ValueError`.
  `pack_size()` is the packet header size plus the length of the point bytes.
- `LvxDeviceInfo.pack()` and `LvxPacket.pack()` return the little-endian bytes
  that go into the file.

### Extrinsic parameters from XML

```python
from lidartools.lvx import parse_extrinsic_xml

info = parse_extrinsic_xml("extrinsic.xml", "EXAMPLECODE0001", device_type=1, device_index=0)
```

The root element must be `Livox`. Each `Device` child holds a broadcast code as
its text and carries `roll`, `pitch`, `yaw`, `x`, `y` and `z` attributes. The
function returns an `LvxDeviceInfo` with `extrinsic_enable` set. It returns
`None` when the root is not `Livox` or when no device matches the code.

## Parsing RMC sentences

```python
from lidartools.gps_sync import BaudRate, Parity, RmcParser, Synchro, serial_settings

parser = RmcParser()
sentences = parser.decode(received_bytes)    # list of complete, checksummed sentences

def on_rmc(sentence: bytes) -> None:
    print("sync time:", sentence)

with Synchro("/dev/ttyUSB0", BaudRate.BR9600, Parity.P_8N1, on_rmc):
    ...                                       # sentences arrive on a background thread
```

- `RmcParser.feed(byte)` returns `True` when that byte completes a sentence
  whose checksum is correct. `clear()` throws away a sentence that is only
  partly received.
- `Synchro.start()` opens the port with `serial.serial_for_url`. It raises
  `serial.SerialException` if the port cannot be opened, and `RuntimeError` if
  the listener is already running. `stop()` joins the thread and closes the
  port.
- `serial_settings(baud_rate, parity)` returns the keyword settings
  (`baudrate`, `bytesize`, `parity`, `stopbits`) for a speed and a framing.
  Space parity (`P_7S1`) is set up the same way as no parity.

## Detecting IP conflicts

```python
from lidartools.conflict import IpConflictDetector

detector = IpConflictDetector()
detector.observe("192.168.1.10", "EXAMPLECODE0001")   # None
detector.observe("192.168.1.10", "EXAMPLECODE0002")   # "EXAMPLECODE0001": a conflict
```

## Choosing which devices to connect

```python
from lidartools.whitelist import BroadcastWhitelist, split_broadcast_codes

whitelist = BroadcastWhitelist()
for code in split_broadcast_codes("EXAMPLECODE0001&EXAMPLECODE0002"):
    whitelist.add(code)

"EXAMPLECODE0001" in whitelist   # True
whitelist.auto_connect()         # False once any code has been added
```

Codes are compared on their first 16 characters. `add()` raises
`WhitelistError` for a code longer than 16 characters and `WhitelistFullError`
when the list already holds 32 codes. It raises `DuplicateCodeError` for a code
that is already present. `add_local_codes()` adds the built-in codes that pass
`is_valid_local_code()` and returns the ones it added. The single built-in
code is a placeholder and is rejected.

## Configuration state and hubs

```python
from lidartools.devices import ConfigBit, UserConfig
from lidartools.hub import HubLidar, collect_config_targets, hub_lidar_index

config = UserConfig()
config.mark_pending(ConfigBit.COORDINATE)
config.complete(ConfigBit.COORDINATE)        # True: nothing left pending

index = hub_lidar_index(slot=1, lidar_id=2)  # 1; None outside the 32-entry table
unit = HubLidar(index, "EXAMPLECODE0001", slot=1, lidar_id=2, device_type=3)
targets = collect_config_targets([unit])     # sampling units that are not Mid-40
```

A `HubLidar` starts in `ConnectState.SAMPLING`. It is configured with the fan
on, the strongest return and a 200 Hz IMU rate.

## What the package does not do

The package does not discover devices on the network, connect to them, send
them commands or receive point data from them. It installs no command-line
programs. To record a file, a program has to get the device records and the
packets itself and then hand them to `LvxWriter`.

## Running the tests

Install the package with its `test` extra, then run `pytest` from the project
directory.