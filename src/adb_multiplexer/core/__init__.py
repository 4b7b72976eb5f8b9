"""
Core module for adb-multiplexer.

Contains configuration and error types shared across all modules.
"""

from adb_multiplexer.core.config import MultiplexerConfig, get_config, reload_config
from adb_multiplexer.core.errors import (
    DetectionError,
    ExecutionError,
    MultiplexerError,
)

__all__ = [
    "MultiplexerConfig",
    "get_config",
    "reload_config",
    "MultiplexerError",
    "DetectionError",
    "ExecutionError",
]
