"""dirprobe - concurrent content-discovery scanner."""

__version__ = "0.2.0"
