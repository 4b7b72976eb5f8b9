#!/usr/bin/env python3
"""
adb-multiplexer - execute an ADB command on all connected devices

Examples:
  adb-multiplexer "adb install myApp.apk"      # install on every device
  adb-multiplexer -c "install myApp.apk"       # ...and on every device
                                               #    connected later
"""

import argparse
import logging
import sys
from typing import Optional

from adb_multiplexer import __version__
from adb_multiplexer.core.config import MultiplexerConfig, get_config
from adb_multiplexer.core.errors import DetectionError
from adb_multiplexer.devices.adb import AdbClient
from adb_multiplexer.devices.detector import DeviceDetector
from adb_multiplexer.execution.executor import CommandExecutor
from adb_multiplexer.multiplexer.service import Multiplexer
from adb_multiplexer.output import Console

logger = logging.getLogger(__name__)

# how often the main thread checks whether the watch has ended
WAIT_SLICE = 0.5


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for adb-multiplexer."""
    parser = argparse.ArgumentParser(
        prog="adb-multiplexer",
        description="Executes ADB commands on all connected devices.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example usage:
  adb-multiplexer "adb install myApp.apk"

Environment variables:
  ADB_MULTIPLEXER_ADB_PATH           # adb executable (default: adb)
  ADB_MULTIPLEXER_POLL_INTERVAL      # seconds between samples (default: 1.0)
  ADB_MULTIPLEXER_COMMAND_TIMEOUT    # per-device timeout (default: 300)
  ADB_MULTIPLEXER_LOG_LEVEL          # logging level (default: WARNING)
        """
    )

    parser.add_argument(
        "command",
        help='ADB command to execute, for example "adb install <path to apk>". '
             'Use quotation marks for multiword commands. '
             'The "adb" prefix is optional.'
    )
    parser.add_argument(
        "-c", "--continue",
        dest="continue_",
        action="store_true",
        help="Continues to execute the given command on every device that will "
             "be connected for as long as this tool is running."
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disables coloring of adb command output."
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between two device samples in continuous mode"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout for the command on a single device in seconds"
    )
    parser.add_argument(
        "--adb",
        dest="adb_path",
        default=None,
        help="Path to the adb executable"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def resolve_config(args: argparse.Namespace, base: MultiplexerConfig) -> MultiplexerConfig:
    """Apply command-line overrides on top of the loaded configuration."""
    overrides = {}
    if args.no_color:
        overrides["color"] = False
    if args.interval is not None:
        overrides["poll_interval"] = args.interval
    if args.timeout is not None:
        overrides["command_timeout"] = args.timeout
    if args.adb_path:
        overrides["adb_path"] = args.adb_path
    if args.log_level:
        overrides["log_level"] = args.log_level

    # model_validate re-runs the field validators on the overrides
    return MultiplexerConfig.model_validate({**base.model_dump(), **overrides})


def build_multiplexer(
    config: MultiplexerConfig, command: str, console: Console
) -> Multiplexer:
    client = AdbClient(
        adb_path=config.adb_path,
        list_timeout=config.list_timeout,
        command_timeout=config.command_timeout,
    )
    executor = CommandExecutor(client)
    detector = DeviceDetector(
        client, executor=executor, poll_interval=config.poll_interval
    )
    return Multiplexer(detector, command, console)


def main(argv=None, console: Optional[Console] = None) -> int:
    """Main entry point for adb-multiplexer."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args, get_config())
    except ValueError as e:
        parser.error(str(e))

    configure_logging(config.log_level)
    console = console or Console(color=config.color)
    multiplexer = build_multiplexer(config, args.command, console)

    # always execute for all currently connected devices
    try:
        multiplexer.run_once()
    except DetectionError as e:
        console.error(str(e))
        return 1

    if not args.continue_:
        return 0

    # additionally execute for devices connected in the future
    multiplexer.watch()
    try:
        while not multiplexer.detector.wait_idle(WAIT_SLICE):
            pass
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
    finally:
        multiplexer.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
