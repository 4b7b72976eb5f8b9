"""
Shared fixtures and fakes for adb-multiplexer tests.

The fakes stand in for adb so no device or adb binary is needed.
"""

import io
import os
import stat
import sys
from typing import Dict, List, Optional, Sequence, Union

import pytest

from adb_multiplexer.output import Console
from adb_multiplexer.core.errors import DetectionError, ExecutionError
from adb_multiplexer.devices.models import Device, DeviceState


class FakeClient:
    """Returns one queued snapshot per list_devices call."""

    def __init__(self, snapshots: Optional[List[Union[Sequence[Device], Exception]]] = None):
        self.snapshots = list(snapshots or [])
        self.calls = 0

    def push(self, snapshot) -> None:
        self.snapshots.append(snapshot)

    def list_devices(self) -> List[Device]:
        self.calls += 1
        if not self.snapshots:
            raise DetectionError("no more snapshots")
        # the last snapshot keeps being returned once the queue is drained
        snapshot = self.snapshots.pop(0) if len(self.snapshots) > 1 else self.snapshots[0]
        if isinstance(snapshot, Exception):
            raise snapshot
        return list(snapshot)


class FakeExecutor:
    """Records executions and fails for the configured device ids."""

    def __init__(self, fail_for: Optional[Dict[str, str]] = None):
        self.fail_for = fail_for or {}
        self.calls: List[tuple] = []

    def execute(self, device: Device, command: str) -> str:
        self.calls.append((device.id, command))
        if device.id in self.fail_for:
            raise ExecutionError(
                f"Command failed on {device.id}",
                device_id=device.id,
                output=self.fail_for[device.id],
            )
        return f"ok {device.id}"

    @property
    def executed_ids(self) -> List[str]:
        return [device_id for device_id, _ in self.calls]


def make_device(
    device_id: str,
    state: DeviceState = DeviceState.ONLINE,
    model: str = "Pixel",
) -> Device:
    raw = {
        DeviceState.ONLINE: "device",
        DeviceState.OFFLINE: "offline",
        DeviceState.UNAUTHORIZED: "unauthorized",
    }[state]
    return Device(id=device_id, model=model, state=state, raw_state=raw)


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def err():
    return io.StringIO()


@pytest.fixture
def console(out, err):
    return Console(color=False, out=out, err=err)


posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="fake adb is a POSIX shell script"
)


@pytest.fixture
def adb_script(tmp_path):
    """Write a shell script standing in for the adb executable."""

    def write(body: str, executable: bool = True) -> str:
        path = tmp_path / "adb"
        path.write_text("#!/bin/sh\n" + body)
        mode = stat.S_IRUSR | stat.S_IWUSR
        if executable:
            mode |= stat.S_IXUSR
        os.chmod(path, mode)
        return str(path)

    return write
