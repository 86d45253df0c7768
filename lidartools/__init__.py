"""LVX file writing, RMC sentence parsing and bookkeeping for LiDAR units and hubs."""

__version__ = "0.1.0"