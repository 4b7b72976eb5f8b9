"""
Multiplexer service: runs a command on all online devices.

One-shot mode executes the command on every device that is online right
now. Continuous mode additionally subscribes to the detector and repeats
the execution for each batch of added or changed devices.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from adb_multiplexer.core.errors import DetectionError, ExecutionError
from adb_multiplexer.devices.detector import DeviceDetector, DeviceEvent
from adb_multiplexer.devices.diff import partition_devices
from adb_multiplexer.devices.models import Device
from adb_multiplexer.output import Colors, Console

logger = logging.getLogger(__name__)

NO_DEVICES_MESSAGE = "no devices detected"


class BatchStatus(str, Enum):
    """Outcome of executing the command on one batch of devices."""

    EXECUTED = "executed"
    FAILED = "failed"
    OFFLINE_ONLY = "offline_only"
    NO_DEVICES = "no_devices"


@dataclass
class BatchReport:
    """
    Summary of one batch.

    Attributes:
        status: Outcome of the batch
        online: Online devices of the batch, in display order
        offline: Offline or unauthorized devices of the batch
        executed: Ids of the devices the command completed on
        error: The ExecutionError that stopped the batch (if any)
    """

    status: BatchStatus
    online: List[Device] = field(default_factory=list)
    offline: List[Device] = field(default_factory=list)
    executed: List[str] = field(default_factory=list)
    error: Optional[ExecutionError] = None


class Multiplexer:
    """
    Orchestrates command execution over the detected devices.

    Usage:
        multiplexer = Multiplexer(detector, "adb install app.apk", console)
        multiplexer.run_once()       # raises DetectionError if adb fails
        multiplexer.watch()          # continuous mode
    """

    def __init__(
        self,
        detector: DeviceDetector,
        command: str,
        console: Optional[Console] = None,
    ):
        """
        Initialize multiplexer.

        Args:
            detector: Device detector to query and subscribe to
            command: Command to run, with or without the leading "adb"
            console: Output writer (default: colored stdout/stderr)
        """
        self.detector = detector
        self.command = command
        self.console = console or Console()
        self._snapshot: List[Device] = []
        self._subscribed = False

    def run_once(self) -> BatchReport:
        """
        Execute the command on every device that is online right now.

        Raises:
            DetectionError: If the devices cannot be enumerated
        """
        devices = self.detector.get_devices()
        self._snapshot = list(devices)
        return self.execute_for_online_devices(devices)

    def execute_for_online_devices(self, devices: Sequence[Device]) -> BatchReport:
        """
        Execute the command on the online devices of a batch.

        Devices run sequentially in the given order. The first
        ExecutionError is reported and ends the batch.
        """
        online, offline = partition_devices(devices)

        if not online:
            if offline:
                self.console.device_list("offline devices detected", offline, Colors.RED)
                return BatchReport(status=BatchStatus.OFFLINE_ONLY, offline=offline)
            self.console.error(NO_DEVICES_MESSAGE)
            return BatchReport(status=BatchStatus.NO_DEVICES)

        self.console.device_list("devices detected", online, Colors.GREEN)
        report = BatchReport(status=BatchStatus.EXECUTED, online=online, offline=offline)

        for device in online:
            try:
                output = device.execute_command(self.command)
            except ExecutionError as e:
                logger.warning(f"Command failed on {device.id}: {e}")
                self.console.error(str(e))
                report.status = BatchStatus.FAILED
                report.error = e
                break
            self.console.result_block(device, output)
            report.executed.append(device.id)

        return report

    # ------------------------------------------------------------------
    # Continuous mode
    # ------------------------------------------------------------------

    def watch(self) -> None:
        """
        Keep executing the command on devices added or changed from now on.

        The snapshot of the last run_once is used as the baseline so the
        devices it already handled are not executed again.
        """
        if not self._subscribed:
            self.detector.subscribe(DeviceEvent.DEVICES_ADDED, self._on_devices)
            self.detector.subscribe(DeviceEvent.DEVICES_CHANGED, self._on_devices)
            self.detector.subscribe(DeviceEvent.ERROR, self._on_error)
            self._subscribed = True
        self.detector.watch(baseline=self._snapshot)

    def stop(self) -> None:
        """Unsubscribe from the detector and stop watching."""
        if self._subscribed:
            self.detector.unsubscribe(DeviceEvent.DEVICES_ADDED, self._on_devices)
            self.detector.unsubscribe(DeviceEvent.DEVICES_CHANGED, self._on_devices)
            self.detector.unsubscribe(DeviceEvent.ERROR, self._on_error)
            self._subscribed = False
        self.detector.unwatch()

    def _on_devices(self, devices: List[Device]) -> None:
        self.execute_for_online_devices(devices)

    def _on_error(self, error: DetectionError) -> None:
        self.console.error(str(error))
        self.detector.unwatch()
