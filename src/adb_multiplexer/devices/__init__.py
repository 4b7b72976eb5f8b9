"""
Device detection module.

Tracks the Android devices attached to the host, diffs consecutive
samples and notifies subscribers about added or changed devices.
"""

from .models import ChangeSet, Device, DeviceState
from .diff import diff_snapshots, partition_devices
from .adb import AdbClient
from .detector import DetectorState, DeviceDetector, DeviceEvent

__all__ = [
    "Device",
    "DeviceState",
    "ChangeSet",
    "diff_snapshots",
    "partition_devices",
    "AdbClient",
    "DeviceDetector",
    "DetectorState",
    "DeviceEvent",
]
