"""
adb-multiplexer - run one ADB command on every attached Android device

This package detects the devices attached to the host, executes a command
on each online device and, in continuous mode, keeps watching for devices
that connect or change state so the command runs on them as well.

Main modules:
- devices: device records, adb backend, snapshot diffing and the detector
- execution: command normalization and per-device execution
- multiplexer: orchestration of one-shot and continuous runs
- cli: command-line entry point
- output: terminal rendering of device lists, results and errors
- core: configuration and error types
"""

__version__ = "1.0.0"

from adb_multiplexer.core.errors import (
    DetectionError,
    ExecutionError,
    MultiplexerError,
)

__all__ = [
    "__version__",
    "MultiplexerError",
    "DetectionError",
    "ExecutionError",
]
