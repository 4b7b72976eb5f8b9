"""
Command execution module.

Normalizes the user's command and runs it against a single device.
"""

from .executor import CommandExecutor, normalize_command

__all__ = ["CommandExecutor", "normalize_command"]
