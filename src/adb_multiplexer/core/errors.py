"""
Error types raised by device detection and command execution.
"""

from typing import Optional


class MultiplexerError(Exception):
    """Base class for all adb-multiplexer errors."""
    pass


class DetectionError(MultiplexerError):
    """Raised when the attached devices cannot be enumerated."""
    pass


class ExecutionError(MultiplexerError):
    """
    Raised when a command fails or times out on a specific device.

    Attributes:
        device_id: Serial of the device the command targeted (if known)
        output: Captured stdout/stderr of the failed process
    """

    def __init__(
        self,
        message: str,
        device_id: Optional[str] = None,
        output: str = "",
    ):
        super().__init__(message)
        self.device_id = device_id
        self.output = output

    def __str__(self) -> str:
        message = super().__str__()
        if self.output:
            return f"{message}\n{self.output}"
        return message
