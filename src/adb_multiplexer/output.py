"""
Terminal output for the multiplexer.

Normal output goes to stdout, failures to stderr with a visual marker.
Colors are only emitted when enabled and the target stream is a TTY.
"""

import sys
from typing import Optional, Sequence, TextIO

from adb_multiplexer.devices.models import Device

ERROR_MARKER = "✗"
RULER = "=" * 40


class Colors:
    """ANSI color codes for terminal output."""

    GREEN = "\033[92m"
    RED = "\033[91m"
    CYAN = "\033[96m"
    RESET = "\033[0m"


class Console:
    """Writes device lists, result blocks and errors."""

    def __init__(
        self,
        color: bool = True,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ):
        self.color = color
        self._out = out
        self._err = err

    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    def colorize(self, text: str, color: str, stream: TextIO) -> str:
        """Colorize text if enabled and the stream is a TTY."""
        isatty = getattr(stream, "isatty", None)
        if self.color and isatty is not None and isatty():
            return f"{color}{text}{Colors.RESET}"
        return text

    def info(self, text: str = "", color: Optional[str] = None) -> None:
        if color:
            text = self.colorize(text, color, self.out)
        print(text, file=self.out, flush=True)

    def error(self, text: str) -> None:
        message = self.colorize(f"{ERROR_MARKER} {text}", Colors.RED, self.err)
        print(message, file=self.err, flush=True)

    def device_list(self, title: str, devices: Sequence[Device], color: str) -> None:
        self.info(f"{title}:")
        self.info(format_device_list(devices), color)

    def result_block(self, device: Device, output: str) -> None:
        self.info()
        self.info(RULER)
        self.info(format_result_header(device))
        self.info(RULER)
        self.info(output, Colors.CYAN)


def format_device_list(devices: Sequence[Device]) -> str:
    """One "- <status>" line per device."""
    return "\n".join(f"- {device.to_status_string()}" for device in devices)


def format_result_header(device: Device) -> str:
    return f"Result for {device.id} ({device.model})"
