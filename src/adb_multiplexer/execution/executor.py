"""
Per-device command execution.

The user may type the command with or without the leading "adb" keyword
("adb install app.apk" and "install app.apk" are equivalent). The rest is
forwarded verbatim to adb, scoped to one device serial.
"""

import logging
import os
import shlex
from typing import List, Optional

from adb_multiplexer.core.errors import ExecutionError
from adb_multiplexer.devices.adb import AdbClient
from adb_multiplexer.devices.models import Device

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "adb"


def normalize_command(
    command: str,
    prefix: str = COMMAND_PREFIX,
    posix: Optional[bool] = None,
) -> List[str]:
    """
    Strip the optional leading keyword and split the command into argv.

    Args:
        command: Command as typed by the user, e.g. 'adb install "my app.apk"'
        prefix: Keyword that may lead the command
        posix: Shell quoting rules to split with (default: POSIX except on
            Windows, where backslashes are path separators, not escapes)

    Returns:
        Argument list to pass after `adb -s <serial>`

    Raises:
        ExecutionError: If the command is empty or cannot be split
    """
    if posix is None:
        posix = os.name != "nt"

    try:
        args = shlex.split(command, posix=posix)
    except ValueError as e:
        raise ExecutionError(f"Cannot parse command {command!r}: {e}") from e

    if not posix:
        args = [_unquote(arg) for arg in args]

    if args and args[0] == prefix:
        args = args[1:]

    if not args:
        raise ExecutionError(f"Empty command: {command!r}")

    return args


def _unquote(arg: str) -> str:
    if len(arg) >= 2 and arg[0] == arg[-1] and arg[0] in "\"'":
        return arg[1:-1]
    return arg


class CommandExecutor:
    """
    Executes a command on a single device through adb.

    Every call is blocking and runs exactly once; failures are not retried.
    """

    def __init__(self, client: AdbClient, timeout: Optional[float] = None):
        """
        Initialize command executor.

        Args:
            client: adb client used to spawn the processes
            timeout: Per-command timeout in seconds (default: the client's)
        """
        self.client = client
        self.timeout = timeout

    def execute(self, device: Device, command: str) -> str:
        """
        Run the command on the given device.

        Args:
            device: Target device
            command: Command, with or without the leading "adb"

        Returns:
            Captured stdout and stderr of the command

        Raises:
            ExecutionError: On malformed device id, timeout or non-zero exit
        """
        try:
            args = normalize_command(command)
        except ExecutionError as e:
            e.device_id = device.id
            raise

        logger.info(f"Executing {args} on {device.id}")
        return self.client.run(device.id, args, timeout=self.timeout)
