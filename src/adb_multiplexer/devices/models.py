"""
Device data models.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

from adb_multiplexer.core.errors import ExecutionError

if TYPE_CHECKING:
    from adb_multiplexer.execution.executor import CommandExecutor


class DeviceState(str, Enum):
    """Connectivity state of an attached device."""

    ONLINE = "online"
    OFFLINE = "offline"
    UNAUTHORIZED = "unauthorized"

    @classmethod
    def from_adb(cls, adb_state: str) -> "DeviceState":
        """
        Map a state string printed by `adb devices` to a DeviceState.

        Only "device" is online. States such as recovery, sideload or
        bootloader cannot run regular adb commands and count as offline.
        """
        if adb_state == "device":
            return cls.ONLINE
        if adb_state == "unauthorized":
            return cls.UNAUTHORIZED
        return cls.OFFLINE


@dataclass(frozen=True)
class Device:
    """
    One attached device as seen in a single sample.

    Records are never mutated: a device that changed between two samples
    is a new record with the same id. Equality is by value and ignores the
    bound executor.

    Attributes:
        id: Serial assigned by adb, unique within a sample
        model: Display name of the device
        state: Connectivity state
        raw_state: State string exactly as adb printed it
        executor: Executor used by execute_command (optional)
    """

    id: str
    model: str = "unknown"
    state: DeviceState = DeviceState.ONLINE
    raw_state: str = ""
    executor: Optional["CommandExecutor"] = field(
        default=None, compare=False, repr=False
    )

    def is_online(self) -> bool:
        """True iff the device accepts commands."""
        return self.state is DeviceState.ONLINE

    def execute_command(self, command: str) -> str:
        """
        Run a command against this device and return its output.

        Raises:
            ExecutionError: If no executor is bound, or the command fails
        """
        if self.executor is None:
            raise ExecutionError(
                f"No executor bound to device {self.id}", device_id=self.id
            )
        return self.executor.execute(self, command)

    def bind(self, executor: Optional["CommandExecutor"]) -> "Device":
        """Return a copy of this record bound to the given executor."""
        return replace(self, executor=executor)

    def to_status_string(self) -> str:
        state = self.raw_state or self.state.value
        return f"{self.id} ({self.model}) [{state}]"


@dataclass(frozen=True)
class ChangeSet:
    """
    Result of diffing two snapshots.

    added and changed keep the order of the current snapshot, removed
    keeps the order of the previous one.
    """

    added: Tuple[Device, ...] = ()
    removed: Tuple[Device, ...] = ()
    changed: Tuple[Device, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.changed)

    @property
    def has_actionable(self) -> bool:
        """True if the change set would trigger a notification."""
        return bool(self.added or self.changed)
