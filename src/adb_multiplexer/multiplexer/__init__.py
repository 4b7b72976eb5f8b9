"""
Multiplexer module: runs one command on every online device.
"""

from .service import NO_DEVICES_MESSAGE, BatchReport, BatchStatus, Multiplexer

__all__ = ["Multiplexer", "BatchReport", "BatchStatus", "NO_DEVICES_MESSAGE"]
