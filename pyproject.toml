[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lidartools"
version = "0.1.0"
description = "LVX point-cloud file writing, GPRMC/GNRMC sentence parsing and device bookkeeping for networked LiDAR units and hubs"
requires-python = ">=3.10"
keywords = ["lidar", "lvx", "point cloud", "gprmc", "nmea", "time synchronization", "broadcast code"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "pyserial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["lidartools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
