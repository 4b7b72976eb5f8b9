"""
Client for the adb executable.

Wraps the two calls the multiplexer needs from the host: listing the
attached devices and running a command scoped to one device serial.
"""

import logging
import subprocess
from typing import Dict, List, Optional

from adb_multiplexer.core.errors import DetectionError, ExecutionError

from .models import Device, DeviceState

logger = logging.getLogger(__name__)

LIST_HEADER = "List of devices attached"

# adb prints "no permissions (...)" as a multi-word state
NO_PERMISSIONS = "no permissions"


class AdbClient:
    """
    Thin wrapper around the adb command-line tool.

    Usage:
        client = AdbClient(adb_path="adb")
        devices = client.list_devices()
        output = client.run(devices[0].id, ["shell", "getprop"])
    """

    def __init__(
        self,
        adb_path: str = "adb",
        list_timeout: float = 10.0,
        command_timeout: float = 300.0,
    ):
        """
        Initialize adb client.

        Args:
            adb_path: Path to the adb executable
            list_timeout: Timeout for `adb devices -l` in seconds
            command_timeout: Timeout for a device command in seconds
        """
        self.adb_path = adb_path
        self.list_timeout = list_timeout
        self.command_timeout = command_timeout

    def list_devices(self) -> List[Device]:
        """
        List all attached devices with id, model and state.

        Returns:
            Devices in the order adb prints them

        Raises:
            DetectionError: If adb is missing, fails, times out or prints
                output that cannot be parsed
        """
        argv = [self.adb_path, "devices", "-l"]
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.list_timeout,
            )
        except FileNotFoundError as e:
            raise DetectionError(f"adb executable not found: {self.adb_path}") from e
        except subprocess.TimeoutExpired as e:
            raise DetectionError(
                f"Listing devices timed out after {self.list_timeout}s"
            ) from e
        except OSError as e:
            raise DetectionError(f"Could not run adb: {e}") from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise DetectionError(
                f"adb devices exited with code {result.returncode}: {detail}"
            )

        return parse_device_list(result.stdout)

    def run(
        self, serial: str, args: List[str], timeout: Optional[float] = None
    ) -> str:
        """
        Run `adb -s <serial> <args...>` and return its combined output.

        Args:
            serial: Device serial to scope the command to
            args: Arguments following the serial
            timeout: Timeout in seconds (default: command_timeout)

        Raises:
            ExecutionError: On a malformed serial, adb that cannot be spawned,
                timeout or non-zero exit
        """
        if not serial or not serial.strip() or any(c.isspace() for c in serial):
            raise ExecutionError(f"Malformed device id: {serial!r}", device_id=serial)

        timeout = self.command_timeout if timeout is None else timeout
        argv = [self.adb_path, "-s", serial, *args]
        logger.debug(f"Running {argv}")

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise ExecutionError(
                f"adb executable not found: {self.adb_path}", device_id=serial
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(
                f"Command timed out after {timeout}s on {serial}",
                device_id=serial,
                output=_combine(e.stdout, e.stderr),
            ) from e
        except OSError as e:
            raise ExecutionError(f"Could not run adb: {e}", device_id=serial) from e

        output = _combine(result.stdout, result.stderr)
        if result.returncode != 0:
            raise ExecutionError(
                f"Command failed on {serial} with exit code {result.returncode}",
                device_id=serial,
                output=output,
            )
        return output


def parse_device_list(output: str) -> List[Device]:
    """
    Parse the output of `adb devices -l`.

    Example input:
        List of devices attached
        emulator-5554          device product:sdk_gphone model:Pixel_6 device:emu64 transport_id:1
        0123456789ABCDEF       unauthorized usb:1-1 transport_id:2

    Raises:
        DetectionError: If the header is missing or a line is malformed
    """
    lines = output.splitlines()
    devices: List[Device] = []
    seen_ids = set()
    header_found = False

    for line in lines:
        stripped = line.strip()
        # adb daemon start-up chatter ("* daemon not running; starting now")
        if not stripped or stripped.startswith("*"):
            continue
        if not header_found:
            if stripped == LIST_HEADER:
                header_found = True
                continue
            raise DetectionError(f"Unexpected adb output: {stripped}")

        device = _parse_device_line(stripped)
        if device.id in seen_ids:
            raise DetectionError(f"Duplicate device id in adb output: {device.id}")
        seen_ids.add(device.id)
        devices.append(device)

    if not header_found:
        raise DetectionError("adb output is missing the device list header")

    return devices


def _parse_device_line(line: str) -> Device:
    tokens = line.split()
    if len(tokens) < 2:
        raise DetectionError(f"Malformed device line: {line}")

    serial = tokens[0]
    rest = line[len(serial):].strip()

    if rest.startswith(NO_PERMISSIONS):
        raw_state = NO_PERMISSIONS
    else:
        raw_state = tokens[1]

    properties = _parse_properties(tokens[2:])

    return Device(
        id=serial,
        model=properties.get("model", "unknown"),
        state=DeviceState.from_adb(raw_state),
        raw_state=raw_state,
    )


def _parse_properties(tokens: List[str]) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition(":")
        if sep and key and value:
            properties[key] = value
    return properties


def _combine(stdout, stderr) -> str:
    parts = []
    for part in (stdout, stderr):
        if isinstance(part, bytes):
            part = part.decode("utf-8", errors="replace")
        if part:
            parts.append(part)
    return "".join(parts).rstrip()
