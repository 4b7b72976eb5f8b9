"""
Command-line interface for adb-multiplexer.
"""

__all__ = ["main"]
